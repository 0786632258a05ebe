"""Three-stage split, rasterize, reconcile pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..concurrency import ProgressReporter
from ..log_utils import logger
from .rasterizer import (
    THUMBNAIL_EXTENSIONS,
    ThumbnailBatchReport,
    ThumbnailGenerator,
    build_requests,
)
from .reconcile import ReconcileReport, reconcile_thumbnail_names
from .splitter import PageSplitter, SplitResult


@dataclass(slots=True)
class PipelineConfig:
    output_dir: Path
    rasterizer: Path
    jobs: int = 1
    timeout: float | None = None
    scale_to: int | None = None
    thumbnail_extensions: tuple[str, ...] = THUMBNAIL_EXTENSIONS


@dataclass(slots=True)
class PipelineReport:
    split: SplitResult
    thumbnails: ThumbnailBatchReport
    reconcile: ReconcileReport


class SplitThumbnailPipeline:
    """Runs each stage to completion before the next one starts.

    Splitting failures propagate (`DocumentLoadError`, `PageWriteError`);
    rasterization and rename failures are collected into the report.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        split_progress: ProgressReporter | None = None,
        thumbnail_progress: ProgressReporter | None = None,
    ) -> None:
        self._config = config
        self._split_progress = split_progress
        self._thumbnail_progress = thumbnail_progress

    async def run(self, pdf_path: str | Path) -> PipelineReport:
        config = self._config
        logger.info(f"Processing file: {pdf_path}")

        splitter = PageSplitter(config.output_dir, progress=self._split_progress)
        split = splitter.split(pdf_path)

        requests = build_requests(
            split.source.path,
            split.source.page_count,
            split.source.base_name,
            config.output_dir,
        )
        generator = ThumbnailGenerator(
            config.rasterizer,
            concurrency=config.jobs,
            timeout=config.timeout,
            scale_to=config.scale_to,
            progress=self._thumbnail_progress,
        )
        thumbnails = await generator.run(requests)

        reconcile = reconcile_thumbnail_names(
            config.output_dir,
            extensions=config.thumbnail_extensions,
            prefixes=[request.output_prefix.name for request in requests],
        )
        return PipelineReport(split=split, thumbnails=thumbnails, reconcile=reconcile)


async def run_split_pipeline(
    pdf_path: str | Path,
    output_dir: str | Path,
    rasterizer: str | Path,
    jobs: int = 1,
    timeout: float | None = None,
    scale_to: int | None = None,
    split_progress: ProgressReporter | None = None,
    thumbnail_progress: ProgressReporter | None = None,
) -> PipelineReport:
    config = PipelineConfig(
        output_dir=Path(output_dir).resolve(),
        rasterizer=Path(rasterizer),
        jobs=jobs,
        timeout=timeout,
        scale_to=scale_to,
    )
    pipeline = SplitThumbnailPipeline(
        config,
        split_progress=split_progress,
        thumbnail_progress=thumbnail_progress,
    )
    return await pipeline.run(pdf_path)
