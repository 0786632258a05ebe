"""Rename rasterizer output from ``page_{n}_{base}-{digits}.ext`` to ``page_{n}_{base}.ext``.

Reconciliation is idempotent and conservative: an existing target is never
overwritten, since it may be a different page's thumbnail. Problems with one
file are recorded and the scan moves on to the next.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from pathlib import Path
import re
from typing import Literal

from ..log_utils import logger


# Group 1: page_N_basename, group 2: suffix digits, group 3: extension.
SUFFIXED_NAME_PATTERN = re.compile(r"^(page_\d+_.*?)-(\d+)(\.[^.]+)$")
# Tail after a known prefix: suffix digits, extension.
_SUFFIX_TAIL_PATTERN = re.compile(r"-(\d+)(\.[^.]+)$")

RenameStatus = Literal["renamed", "conflict", "error"]


@dataclass(slots=True, frozen=True)
class RenameCandidate:
    source: Path
    target: Path
    suffix: str


@dataclass(slots=True, frozen=True)
class RenameEntry:
    candidate: RenameCandidate
    status: RenameStatus
    message: str = ""


@dataclass(slots=True)
class ReconcileReport:
    total_files: int = 0
    renamed: int = 0
    conflicts: int = 0
    errored: int = 0
    entries: list[RenameEntry] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        """Files left in place: non-matching names plus existing-target conflicts."""
        return self.total_files - self.renamed - self.errored

    def record(self, entry: RenameEntry) -> None:
        self.entries.append(entry)
        if entry.status == "renamed":
            self.renamed += 1
        elif entry.status == "conflict":
            self.conflicts += 1
        else:
            self.errored += 1


def match_candidate(
    path: Path, prefixes: Collection[str] | None = None
) -> RenameCandidate | None:
    """Return the rename for ``path`` when its name carries a ``-digits`` suffix.

    With ``prefixes``, only ``{prefix}-{digits}{ext}`` names for one of the given
    prefixes match, so digits that belong to the base name are never stripped.
    """
    name = path.name
    if prefixes is None:
        match = SUFFIXED_NAME_PATTERN.match(name)
        if match is None:
            return None
        base, suffix, extension = match.groups()
        return RenameCandidate(
            source=path, target=path.with_name(f"{base}{extension}"), suffix=suffix
        )

    for prefix in prefixes:
        if not name.startswith(prefix):
            continue
        tail = _SUFFIX_TAIL_PATTERN.fullmatch(name[len(prefix):])
        if tail is not None:
            suffix, extension = tail.groups()
            return RenameCandidate(
                source=path, target=path.with_name(f"{prefix}{extension}"), suffix=suffix
            )
    return None


def _list_files(directory: Path) -> list[Path]:
    # Regular files only; symlinks are left alone even when they point at files.
    return sorted(
        entry for entry in directory.iterdir() if entry.is_file() and not entry.is_symlink()
    )


def _apply(candidate: RenameCandidate) -> RenameEntry:
    old_name = candidate.source.name
    new_name = candidate.target.name
    try:
        candidate.target.lstat()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.error(f"ERROR: Checking target path '{candidate.target}' failed: {exc}")
        return RenameEntry(candidate, "error", str(exc))
    else:
        logger.info(
            f"SKIPPED: Cannot rename '{old_name}' to '{new_name}' - target file already exists."
        )
        return RenameEntry(candidate, "conflict", "target exists")

    try:
        candidate.source.rename(candidate.target)
    except OSError as exc:
        logger.error(f"ERROR: Failed to rename '{old_name}': {exc}")
        return RenameEntry(candidate, "error", str(exc))
    logger.info(f"Renamed: '{old_name}' -> '{new_name}'")
    return RenameEntry(candidate, "renamed")


def reconcile_thumbnail_names(
    directory: str | Path = ".",
    *,
    extensions: Iterable[str] | None = None,
    prefixes: Iterable[str] | None = None,
) -> ReconcileReport:
    """Strip rasterizer disambiguation suffixes from file names in ``directory``.

    Args:
        directory: Directory to scan (not recursive; subdirectories are ignored).
        extensions: Optional extensions (dotted, any case) a candidate must carry.
            Files with other extensions are treated as non-matching.
        prefixes: Optional ``page_{n}_{base}`` names the rasterizer was asked to
            write. When given, only ``{prefix}-{digits}{ext}`` files are renamed,
            and only back to ``{prefix}{ext}``.

    Returns:
        ReconcileReport: Counters plus one entry per attempted rename.
    """
    logger.info("Starting thumbnail rename process...")
    root = Path(directory)
    allowed = {ext.lower() for ext in extensions} if extensions is not None else None
    known_prefixes = (
        sorted(set(prefixes), key=len, reverse=True) if prefixes is not None else None
    )
    report = ReconcileReport()

    try:
        files = _list_files(root)
    except OSError as exc:
        logger.error(f"ERROR: Failed during rename process (reading {root}): {exc}")
        return report

    report.total_files = len(files)
    logger.info(f"Processing {len(files)} files found in directory.")

    for path in files:
        candidate = match_candidate(path, known_prefixes)
        if candidate is None:
            continue
        if allowed is not None and candidate.target.suffix.lower() not in allowed:
            continue
        if candidate.source == candidate.target:
            continue
        report.record(_apply(candidate))

    logger.info("Rename operation complete.")
    logger.info(f"Files renamed: {report.renamed}")
    logger.info(f"Files skipped (no match / target existed): {report.skipped}")
    logger.info(f"Errors during rename: {report.errored}")
    return report
