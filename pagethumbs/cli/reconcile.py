from __future__ import annotations

from pathlib import Path

from pagethumbs.utils.log_utils import logger
from pagethumbs.utils.pdf import reconcile_thumbnail_names


def run(directory: Path, extensions: list[str] | None = None) -> int:
    if not directory.is_dir():
        logger.error(f"Error: {directory} is not a directory.")
        return 1
    report = reconcile_thumbnail_names(directory, extensions=extensions or None)
    return 1 if report.errored else 0
