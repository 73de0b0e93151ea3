# services/style_fragments.py
"""
The aspect table: one entry per SettingsRecord field, in composition order.

Each AspectSpec declares how its value is validated (kind + bounds/choices),
what its neutral value is, and a pure render() that turns a valid value into
the CSS fragment for that aspect. The style registry never generates CSS on
its own; it looks the aspect up here.

Adding an aspect means adding a SettingsRecord field and one ASPECTS entry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from core.models import ContrastMode, CursorSize


@dataclass(frozen=True)
class AspectSpec:
    name: str
    kind: str                                   # "number" | "enum" | "flag"
    default: Any
    render: Callable[[Any], str]
    bounds: Optional[Tuple[float, float]] = None
    choices: Tuple[str, ...] = ()
    step: Optional[float] = None


def _num(value: float) -> str:
    """Compact CSS number: 150.0 -> '150', 1.95 -> '1.95'."""
    return f"{round(value, 4):g}"


# ---------------- fragment generators ----------------

def font_scale_css(scale: float) -> str:
    return "\n".join([
        f"html {{ font-size: {_num(scale * 100)}% !important; }}",
        "body, body * { font-size: inherit; }",
    ])


CONTRAST_CSS: Dict[str, str] = {
    ContrastMode.NONE.value: "",
    ContrastMode.DARK.value: "\n".join([
        "html { filter: invert(1) hue-rotate(180deg); }",
        'img, video, picture, canvas, svg, [style*="background-image"] {',
        "  filter: invert(1) hue-rotate(180deg);",
        "}",
    ]),
    ContrastMode.LIGHT.value: "\n".join([
        "body {",
        "  background: #fff !important;",
        "  color: #000 !important;",
        "}",
        "body * {",
        "  background-color: inherit;",
        "  color: inherit;",
        "  border-color: #000 !important;",
        "}",
        "a, a * { color: #0000EE !important; }",
        "a:visited, a:visited * { color: #551A8B !important; }",
    ]),
    ContrastMode.INVERT.value: "html { filter: invert(1); }",
    ContrastMode.YELLOW_BLACK.value: "\n".join([
        "body {",
        "  background: #000 !important;",
        "  color: #ff0 !important;",
        "}",
        "body * {",
        "  background-color: #000 !important;",
        "  color: #ff0 !important;",
        "  border-color: #ff0 !important;",
        "}",
        "a, a * { color: #ff0 !important; text-decoration: underline !important; }",
        "img, video { filter: grayscale(1); }",
    ]),
    ContrastMode.BLACK_YELLOW.value: "\n".join([
        "body {",
        "  background: #ff0 !important;",
        "  color: #000 !important;",
        "}",
        "body * {",
        "  background-color: #ff0 !important;",
        "  color: #000 !important;",
        "  border-color: #000 !important;",
        "}",
        "a, a * { color: #000 !important; text-decoration: underline !important; }",
    ]),
}


def contrast_css(mode: str) -> str:
    return CONTRAST_CSS.get(mode, "")


def motion_css(stop: bool) -> str:
    if not stop:
        return ""
    return "\n".join([
        "*, *::before, *::after {",
        "  animation: none !important;",
        "  animation-duration: 0.001s !important;",
        "  transition: none !important;",
        "  transition-duration: 0.001s !important;",
        "}",
    ])


def reading_guide_css(enabled: bool) -> str:
    if not enabled:
        return ""
    return "\n".join([
        "#a11y-reading-guide {",
        "  display: block !important;",
        "  position: fixed;",
        "  left: 0;",
        "  width: 100%;",
        "  height: 30px;",
        "  background: rgba(255, 255, 0, 0.3);",
        "  pointer-events: none;",
        "  z-index: 999998;",
        "  border-top: 2px solid #ff0;",
        "  border-bottom: 2px solid #ff0;",
        "}",
    ])


def focus_highlight_css(enabled: bool) -> str:
    if not enabled:
        return ""
    return "\n".join([
        '[data-a11y-focus="true"] {',
        "  outline: 3px solid #ff6600 !important;",
        "  outline-offset: 2px !important;",
        "  box-shadow: 0 0 10px 3px rgba(255, 102, 0, 0.5) !important;",
        "}",
        "*:focus {",
        "  outline: 3px solid #0066ff !important;",
        "  outline-offset: 2px !important;",
        "}",
    ])


def line_height_css(scale: float) -> str:
    return f"body, body * {{ line-height: {_num(scale * 1.5)} !important; }}"


def letter_spacing_css(pixels: float) -> str:
    return f"body, body * {{ letter-spacing: {_num(pixels)}px !important; }}"


def word_spacing_css(pixels: float) -> str:
    return f"body, body * {{ word-spacing: {_num(pixels)}px !important; }}"


CURSOR_CSS: Dict[str, str] = {
    CursorSize.DEFAULT.value: "",
    CursorSize.LARGE.value: "\n".join([
        "body, body * {",
        "  cursor: url(\"data:image/svg+xml,%3Csvg xmlns='http://www.w3.org/2000/svg' width='32' height='32'%3E"
        "%3Cpath d='M0 0 L0 24 L6 18 L12 28 L16 26 L10 16 L18 16 Z' fill='black' stroke='white'/%3E%3C/svg%3E\") 0 0, auto !important;",
        "}",
    ]),
    CursorSize.XLARGE.value: "\n".join([
        "body, body * {",
        "  cursor: url(\"data:image/svg+xml,%3Csvg xmlns='http://www.w3.org/2000/svg' width='48' height='48'%3E"
        "%3Cpath d='M0 0 L0 36 L9 27 L18 42 L24 39 L15 24 L27 24 Z' fill='black' stroke='white' stroke-width='2'/%3E%3C/svg%3E\") 0 0, auto !important;",
        "}",
    ]),
}


def cursor_css(size: str) -> str:
    return CURSOR_CSS.get(size, "")


def link_highlight_css(enabled: bool) -> str:
    if not enabled:
        return ""
    return "\n".join([
        "a, a * {",
        "  background-color: #ffff00 !important;",
        "  color: #0000ff !important;",
        "  text-decoration: underline !important;",
        "  padding: 2px !important;",
        "}",
    ])


# ---------------- the table ----------------

CONTRAST_CYCLE: Tuple[str, ...] = tuple(m.value for m in ContrastMode)

_SPECS = (
    AspectSpec("font_scale", "number", 1.0, font_scale_css, bounds=(0.5, 3.0), step=0.1),
    AspectSpec("contrast_mode", "enum", ContrastMode.NONE.value, contrast_css, choices=CONTRAST_CYCLE),
    AspectSpec("stop_animations", "flag", False, motion_css),
    AspectSpec("reading_guide", "flag", False, reading_guide_css),
    AspectSpec("focus_highlight", "flag", False, focus_highlight_css),
    AspectSpec("line_height", "number", 1.0, line_height_css, bounds=(1.0, 2.0), step=0.1),
    AspectSpec("letter_spacing", "number", 0.0, letter_spacing_css, bounds=(0.0, 5.0), step=0.5),
    AspectSpec("word_spacing", "number", 0.0, word_spacing_css, bounds=(0.0, 10.0), step=1.0),
    AspectSpec("cursor_size", "enum", CursorSize.DEFAULT.value, cursor_css,
               choices=tuple(c.value for c in CursorSize)),
    AspectSpec("link_highlight", "flag", False, link_highlight_css),
)

ASPECTS: Dict[str, AspectSpec] = {spec.name: spec for spec in _SPECS}
ASPECT_ORDER: Tuple[str, ...] = tuple(spec.name for spec in _SPECS)


def coerce(spec: AspectSpec, value: Any) -> Tuple[Any, bool]:
    """
    Validate `value` against `spec`.

    Returns (valid_value, corrected). `corrected` is True when the input had to
    be clamped or replaced by the neutral default.
    """
    if spec.kind == "number":
        return _coerce_number(spec, value)
    if spec.kind == "enum":
        if isinstance(value, str) and value.strip().lower() in spec.choices:
            normalized = value.strip().lower()
            return normalized, normalized != value
        if isinstance(value, (ContrastMode, CursorSize)) and value.value in spec.choices:
            return value.value, False
        return spec.default, True
    if isinstance(value, bool):
        return value, False
    return spec.default, True


def _coerce_number(spec: AspectSpec, value: Any) -> Tuple[float, bool]:
    if isinstance(value, bool):
        return spec.default, True
    low, high = spec.bounds
    try:
        number = float(value)
    except OverflowError:
        # Integers past float range still have a sign to clamp by.
        return _clamp_by_sign(value, low, high, spec.default), True
    except (TypeError, ValueError):
        return spec.default, True
    if math.isnan(number):
        return spec.default, True
    clamped = max(low, min(high, number))
    return clamped, clamped != number or not isinstance(value, (int, float))


def _clamp_by_sign(value: Any, low: float, high: float, default: Any) -> Any:
    try:
        return high if value > 0 else low
    except TypeError:
        return default
