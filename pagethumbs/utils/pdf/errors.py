"""Custom exception types for the split and thumbnail pipeline."""

from __future__ import annotations


class PagethumbsError(RuntimeError):
    """Base class for conditions that abort a whole run.

    Per-page rasterization failures and per-file rename failures are not
    raised; they are reported through result objects instead.
    """

    pass


class InvalidInputError(PagethumbsError):
    """Raised when the input path has the wrong extension or does not exist."""

    pass


class RasterizerNotFoundError(PagethumbsError):
    """Raised when no usable rasterizer executable can be located."""

    pass


class DocumentLoadError(PagethumbsError):
    """Raised when the source document cannot be opened or parsed."""

    pass


class PageWriteError(PagethumbsError):
    """Raised when an extracted page cannot be serialized or written."""

    pass


class OutputDirectoryError(PagethumbsError):
    """Raised when the output directory cannot be created."""

    pass


__all__ = [
    "DocumentLoadError",
    "InvalidInputError",
    "OutputDirectoryError",
    "PageWriteError",
    "PagethumbsError",
    "RasterizerNotFoundError",
]
