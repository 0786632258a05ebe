"""Logging utilities shared across the pagethumbs package."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
from rich.logging import RichHandler


_CONFIGURED: bool = False

DEFAULT_CONSOLE_LEVEL = "INFO"
DEFAULT_FILE_LEVEL = "DEBUG"
DEFAULT_FILE_ROTATION = "5 MB"
DEFAULT_FILE_RETENTION = 2

# File names routinely contain square brackets, so rich markup stays off.
_RICH_HANDLER_KWARGS: dict[str, Any] = {
    "markup": False,
    "show_time": False,
    "show_path": False,
}


def configure_logging(
    *,
    console_level: str = DEFAULT_CONSOLE_LEVEL,
    file_path: str | Path | None = None,
    force: bool = False,
) -> None:
    """Configure the shared logger once per process.

    Args:
        console_level: Minimum level shown on the console.
        file_path: Optional debug log file. Nothing is written to disk when omitted.
        force: Replace an existing configuration.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    logger.remove()

    logger.add(
        RichHandler(**_RICH_HANDLER_KWARGS),  # type: ignore[arg-type]
        level=console_level.upper(),
        format="{message}",
    )

    if file_path:
        resolved_file_path = Path(file_path).expanduser().resolve()
        resolved_file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(resolved_file_path),
            level=DEFAULT_FILE_LEVEL,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
            rotation=DEFAULT_FILE_ROTATION,
            retention=DEFAULT_FILE_RETENTION,
            enqueue=True,
        )

    _CONFIGURED = True


__all__ = ["configure_logging", "logger"]

# Configure logging on import so callers only need to import `logger`.
configure_logging()
