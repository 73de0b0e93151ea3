# infra/config_loader.py
"""
Central configuration loader for the overlay core.

Responsibilities:
- Provide a single place to define default configuration values.
- Allow simple environment variable overrides for quick tweaks (no code changes).

Adding a new flag only touches _DEFAULT (and, if it should be overridable, one
helper call below). Components receive the resulting dict at construction time
from services.bootstrap; none of them reads the environment on its own.

Environment variables:
- A11Y_LOG_LEVEL                  (DEBUG/INFO/WARNING/ERROR)
- A11Y_LOG_DIR                    (directory for the rotating log file)
- A11Y_LOG_MAX_BYTES              (int; rotation size of a11y.log)
- A11Y_STORAGE_DIR                (directory backing the primary preference tier)
- A11Y_STORAGE_QUOTA_BYTES        (int; per-value cap of the primary tier)
- A11Y_FONT_SIZE_STEP             (float; default 0.1)
- A11Y_SNIPPET_MAX_CHARS          (int; markup snippet length, default 200)
- A11Y_SELECTOR_MAX_DEPTH         (int; generated selector path depth, default 5)
- A11Y_DEVELOPER_MODE             ("1"/"true"/"yes" -> True)
- A11Y_EXTERNAL_ENGINE            ("1"/"true"/"yes" -> True)
- A11Y_AXE_TAGS                   (comma-separated, e.g. "wcag2a,wcag2aa")
"""

from __future__ import annotations

import os
from typing import Any, Dict, List


_DEFAULT: Dict[str, Any] = {
    # Core
    "log_level": "INFO",  # DEBUG/INFO/WARNING/ERROR
    "log_dir": None,      # None -> ./logs
    "log_max_bytes": 5_000_000,
    "log_backup_count": 3,

    # Preference persistence
    "storage_dir": ".a11y_storage",
    "storage_quota_bytes": 5_000_000,     # roughly what browsers give localStorage
    "preferences_key": "a11y_prefs",
    "profile_key": "a11y_profile",

    # Style registry
    "font_size_step": 0.1,

    # Scanner
    "snippet_max_chars": 200,
    "selector_max_depth": 5,
    "developer_mode": False,
    "external_engine_enabled": True,
    "axe_run_only_tags": ["wcag2a", "wcag2aa", "wcag21aa", "best-practice"],
    "axe_result_types": ["violations", "incomplete", "passes"],
}


def load_config() -> Dict[str, Any]:
    """
    Return a config dict. Environment variables can override some keys.

    Lists:
      - A11Y_AXE_TAGS (comma-separated)

    Booleans:
      - A11Y_DEVELOPER_MODE, A11Y_EXTERNAL_ENGINE

    Strings:
      - A11Y_LOG_LEVEL, A11Y_LOG_DIR, A11Y_STORAGE_DIR

    Integers:
      - A11Y_STORAGE_QUOTA_BYTES, A11Y_LOG_MAX_BYTES, A11Y_SNIPPET_MAX_CHARS, A11Y_SELECTOR_MAX_DEPTH

    Floats:
      - A11Y_FONT_SIZE_STEP
    """
    cfg = dict(_DEFAULT)
    # Lists must not be shared with the module default.
    cfg["axe_run_only_tags"] = list(_DEFAULT["axe_run_only_tags"])
    cfg["axe_result_types"] = list(_DEFAULT["axe_result_types"])

    # Numeric overrides
    _int_env(cfg, "storage_quota_bytes", "A11Y_STORAGE_QUOTA_BYTES")
    _int_env(cfg, "log_max_bytes", "A11Y_LOG_MAX_BYTES")
    _int_env(cfg, "snippet_max_chars", "A11Y_SNIPPET_MAX_CHARS")
    _int_env(cfg, "selector_max_depth", "A11Y_SELECTOR_MAX_DEPTH")
    _float_env(cfg, "font_size_step", "A11Y_FONT_SIZE_STEP")

    # Boolean overrides
    _bool_env(cfg, "developer_mode", "A11Y_DEVELOPER_MODE")
    _bool_env(cfg, "external_engine_enabled", "A11Y_EXTERNAL_ENGINE")

    # String overrides
    _str_upper_env(cfg, "log_level", "A11Y_LOG_LEVEL")
    _str_env(cfg, "log_dir", "A11Y_LOG_DIR")
    _str_env(cfg, "storage_dir", "A11Y_STORAGE_DIR")

    # List overrides
    tags = os.getenv("A11Y_AXE_TAGS")
    if tags:
        cfg["axe_run_only_tags"] = [t.lower() for t in _split_list(tags)]

    return cfg


# ----------------- helpers -----------------

def _split_list(s: str) -> List[str]:
    return [part.strip() for part in s.split(",") if part.strip()]


def _bool_env(cfg: Dict[str, Any], key: str, env_key: str) -> None:
    val = os.getenv(env_key)
    if val is None:
        return
    s = val.strip().lower()
    cfg[key] = s in {"1", "true", "yes", "on"}


def _int_env(cfg: Dict[str, Any], key: str, env_key: str) -> None:
    val = os.getenv(env_key)
    if val and val.strip().isdigit():
        cfg[key] = int(val)


def _float_env(cfg: Dict[str, Any], key: str, env_key: str) -> None:
    val = os.getenv(env_key)
    if not val:
        return
    try:
        number = float(val)
    except ValueError:
        return
    if number > 0:
        cfg[key] = number


def _str_env(cfg: Dict[str, Any], key: str, env_key: str) -> None:
    val = os.getenv(env_key)
    if val is not None and val.strip():
        cfg[key] = val.strip()


def _str_upper_env(cfg: Dict[str, Any], key: str, env_key: str) -> None:
    val = os.getenv(env_key)
    if val is not None:
        cfg[key] = val.strip().upper()
