# infra/logging_config.py
"""
Logging setup for the overlay: a console handler plus a rotating a11y.log.

The overlay's handlers are named ("a11y-console", "a11y-file") and live on the
root logger next to whatever the host application installed. Re-running the
setup swaps only our own handlers, so the host's handlers are never touched
and ours are never duplicated.

Config keys read by configure_from_config():
- log_level         DEBUG/INFO/WARNING/ERROR
- log_dir           directory for a11y.log (None -> ./logs)
- log_max_bytes     rotation size (default 5 MB)
- log_backup_count  rotated files kept (default 3)
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

LOG_FILE_NAME = "a11y.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [a11y] %(name)s: %(message)s"
CONSOLE_HANDLER_NAME = "a11y-console"
FILE_HANDLER_NAME = "a11y-file"

_DEFAULT_MAX_BYTES = 5_000_000
_DEFAULT_BACKUP_COUNT = 3


def configure_logging(
    level_name: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = _DEFAULT_MAX_BYTES,
    backup_count: int = _DEFAULT_BACKUP_COUNT,
) -> List[logging.Handler]:
    """
    Install (or replace) the overlay's console and rotating file handlers.
    Returns the handlers now installed.
    """
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    log_dir = Path(log_dir) if log_dir else (Path.cwd() / "logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.set_name(CONSOLE_HANDLER_NAME)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.set_name(FILE_HANDLER_NAME)

    root = logging.getLogger()
    remove_overlay_handlers(root)
    for handler in (console, file_handler):
        handler.setLevel(level)
        handler.setFormatter(fmt)
        root.addHandler(handler)
    root.setLevel(level)
    return [console, file_handler]


def configure_from_config(cfg: Mapping[str, Any]) -> List[logging.Handler]:
    return configure_logging(
        cfg.get("log_level") or "INFO",
        cfg.get("log_dir"),
        cfg.get("log_max_bytes") or _DEFAULT_MAX_BYTES,
        cfg.get("log_backup_count", _DEFAULT_BACKUP_COUNT),
    )


def remove_overlay_handlers(logger: Optional[logging.Logger] = None) -> int:
    """Detach and close the overlay's named handlers. Returns how many were removed."""
    logger = logger or logging.getLogger()
    ours = [h for h in logger.handlers if h.get_name() in (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME)]
    for handler in ours:
        logger.removeHandler(handler)
        handler.close()
    return len(ours)
