"""Split a multi-page PDF into one single-page PDF per page.

Pages are copied with PyMuPDF's ``insert_pdf`` so content streams and
resources (fonts, images, annotations) are carried over as-is; nothing is
re-rendered. Any failure here is fatal for the run because the thumbnail
stage relies on the complete page set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import fitz  # PyMuPDF

from ..concurrency import ProgressReporter
from ..log_utils import logger
from .errors import DocumentLoadError, PageWriteError
from .naming import base_name_for, page_pdf_name


# Keeps output byte-stable across runs: no fresh /ID, unused objects dropped.
_SAVE_OPTIONS = {"garbage": 3, "no_new_id": True}


@dataclass(slots=True, frozen=True)
class SourceDocument:
    path: Path
    page_count: int
    base_name: str


@dataclass(slots=True, frozen=True)
class PageArtifact:
    page_number: int
    path: Path


@dataclass(slots=True)
class SplitResult:
    source: SourceDocument
    artifacts: list[PageArtifact] = field(default_factory=list)


def open_source(pdf_path: str | Path) -> fitz.Document:
    """Open ``pdf_path`` read-only, raising `DocumentLoadError` on any failure."""
    path = Path(pdf_path)
    try:
        doc = fitz.open(path.as_posix(), filetype="pdf")
    except Exception as exc:
        raise DocumentLoadError(f"Failed to load {path}: {exc}") from exc
    if doc.needs_pass:
        doc.close()
        raise DocumentLoadError(f"Failed to load {path}: document is encrypted")
    if doc.page_count == 0:
        doc.close()
        raise DocumentLoadError(f"Failed to load {path}: document has no pages")
    return doc


def extract_page(doc: fitz.Document, page_index: int) -> bytes:
    """Copy page ``page_index`` (0-based) into a new document and serialize it."""
    with fitz.open() as single:
        single.insert_pdf(doc, from_page=page_index, to_page=page_index)
        return single.tobytes(**_SAVE_OPTIONS)


class PageSplitter:
    """Writes ``page_{n}_{base}.pdf`` for every page of a source document."""

    def __init__(self, output_dir: str | Path, *, progress: ProgressReporter | None = None) -> None:
        self._output_dir = Path(output_dir)
        self._progress = progress

    def split(self, pdf_path: str | Path) -> SplitResult:
        path = Path(pdf_path).resolve()
        base_name = base_name_for(path)

        with open_source(path) as doc:
            source = SourceDocument(path=path, page_count=doc.page_count, base_name=base_name)
            logger.info(f"Found {source.page_count} pages in {path.name}. Starting splitting...")
            result = SplitResult(source=source)
            if self._progress and source.page_count:
                self._progress.start(source.page_count)
            try:
                for page_index in range(source.page_count):
                    result.artifacts.append(self._write_page(doc, page_index, base_name))
                    if self._progress:
                        self._progress.increment()
            finally:
                if self._progress:
                    self._progress.close()

        logger.info(f"PDF splitting complete: {len(result.artifacts)} file(s) written.")
        return result

    def _write_page(self, doc: fitz.Document, page_index: int, base_name: str) -> PageArtifact:
        page_number = page_index + 1
        target = self._output_dir / page_pdf_name(page_number, base_name)
        logger.info(f" -> Creating {target.name}...")
        try:
            data = extract_page(doc, page_index)
        except Exception as exc:
            raise PageWriteError(f"Failed to extract page {page_number}: {exc}") from exc
        try:
            target.write_bytes(data)
        except OSError as exc:
            raise PageWriteError(f"Failed to write {target}: {exc}") from exc
        return PageArtifact(page_number=page_number, path=target)


def split_pdf(
    pdf_path: str | Path,
    output_dir: str | Path,
    *,
    progress: ProgressReporter | None = None,
) -> SplitResult:
    return PageSplitter(output_dir, progress=progress).split(pdf_path)
