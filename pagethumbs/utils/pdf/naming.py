"""File naming rules shared by the splitter, rasterizer and reconciler."""

from __future__ import annotations

from pathlib import Path


PDF_EXTENSION = ".pdf"
PAGE_PREFIX_TEMPLATE = "page_{page_number}_{base_name}"


def base_name_for(source: str | Path) -> str:
    """Return the source file name without its extension."""
    return Path(source).stem


def page_prefix(page_number: int, base_name: str) -> str:
    """Return ``page_{n}_{base}``, the extension-less name for a 1-based page."""
    if page_number < 1:
        raise ValueError(f"Page numbers are 1-based, got {page_number}")
    return PAGE_PREFIX_TEMPLATE.format(page_number=page_number, base_name=base_name)


def page_pdf_name(page_number: int, base_name: str) -> str:
    return f"{page_prefix(page_number, base_name)}{PDF_EXTENSION}"


def is_pdf_path(path: str | Path) -> bool:
    return Path(path).suffix.lower() == PDF_EXTENSION
