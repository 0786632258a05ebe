"""PDF page splitting, thumbnail rasterization and file name reconciliation."""

from __future__ import annotations

from .errors import (
    DocumentLoadError,
    InvalidInputError,
    OutputDirectoryError,
    PagethumbsError,
    PageWriteError,
    RasterizerNotFoundError,
)
from .rasterizer import (
    ThumbnailBatchReport,
    ThumbnailGenerator,
    ThumbnailRequest,
    ThumbnailResult,
    resolve_rasterizer,
)
from .reconcile import ReconcileReport, reconcile_thumbnail_names
from .runner import PipelineConfig, PipelineReport, SplitThumbnailPipeline, run_split_pipeline
from .splitter import PageArtifact, PageSplitter, SourceDocument, SplitResult, split_pdf


__all__ = [
    "DocumentLoadError",
    "InvalidInputError",
    "OutputDirectoryError",
    "PageArtifact",
    "PageSplitter",
    "PageWriteError",
    "PagethumbsError",
    "PipelineConfig",
    "PipelineReport",
    "RasterizerNotFoundError",
    "ReconcileReport",
    "SourceDocument",
    "SplitResult",
    "SplitThumbnailPipeline",
    "ThumbnailBatchReport",
    "ThumbnailGenerator",
    "ThumbnailRequest",
    "ThumbnailResult",
    "reconcile_thumbnail_names",
    "resolve_rasterizer",
    "run_split_pipeline",
    "split_pdf",
]
