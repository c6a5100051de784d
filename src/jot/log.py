"""
Logging for jot, on top of loguru.

Library modules just ``from loguru import logger``; the CLI calls
configure_logging() once with the loaded JotConfig. Diagnostics go to
stderr so they never mix with command output on stdout, and an optional
log file (``[logging] file`` in config.toml) keeps a private, rotated
history of jot's own records.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

from .locking import ensure_private_dir

if TYPE_CHECKING:
    from .config import JotConfig

DEFAULT_LEVEL = "WARNING"

STDERR_FORMAT = "<level>jot [{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {name}:{line} | {message}"

# Rotated files are small; keep the last few
FILE_ROTATION = "1 MB"
FILE_RETENTION = 5


def resolve_level(level: str) -> str:
    """Normalize a level name and check loguru knows it.

    Raises:
        ValueError: If the level name is unknown
    """
    name = level.strip().upper()
    try:
        logger.level(name)
    except ValueError:
        raise ValueError(f"unknown log level {level!r}") from None
    return name


def configure_logging(config: "JotConfig", level: Optional[str] = None) -> None:
    """Install jot's sinks, replacing whatever was configured before.

    Args:
        config: Loaded configuration; supplies the level and optional log file
        level: Override for ``config.log_level`` (the --log-level flag)

    Raises:
        ValueError: If the effective level name is unknown
    """
    name = resolve_level(level or config.log_level)

    logger.remove()
    logger.add(sys.stderr, level=name, format=STDERR_FORMAT)

    if config.log_file:
        path = Path(config.log_file)
        ensure_private_dir(path.parent)
        logger.add(
            str(path),
            level=name,
            format=FILE_FORMAT,
            filter="jot",
            rotation=FILE_ROTATION,
            retention=FILE_RETENTION,
            encoding="utf-8",
        )

    logger.debug("logging at {} (file: {})", name, config.log_file or "none")
