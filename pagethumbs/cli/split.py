from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pagethumbs.config import PagethumbsSettings, get_settings
from pagethumbs.utils.concurrency import (
    NullProgressReporter,
    ProgressReporter,
    TqdmProgressReporter,
)
from pagethumbs.utils.log_utils import configure_logging, logger
from pagethumbs.utils.pdf import (
    InvalidInputError,
    OutputDirectoryError,
    PagethumbsError,
    PipelineReport,
    resolve_rasterizer,
    run_split_pipeline,
)
from pagethumbs.utils.pdf.naming import PDF_EXTENSION, is_pdf_path


@dataclass(slots=True)
class SplitOptions:
    input_file: Path
    output_dir: Path | None = None
    rasterizer: Path | None = None
    jobs: int | None = None
    timeout: float | None = None
    scale_to: int | None = None
    env_file: Path | None = None
    progress: bool = True


def validate_input(input_file: Path) -> Path:
    """Check the extension first, then existence; never opens the file."""
    if not is_pdf_path(input_file):
        raise InvalidInputError(f"Input file must be a {PDF_EXTENSION} file: {input_file}")
    absolute = input_file.expanduser().resolve()
    if not absolute.is_file():
        raise InvalidInputError(f"Input file not found at {absolute}")
    return absolute


def prepare_output_dir(output_dir: Path) -> Path:
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(f"Cannot create output directory {output_dir}: {exc}") from exc
    return output_dir


def _progress(label: str, enabled: bool) -> ProgressReporter:
    return TqdmProgressReporter(label) if enabled else NullProgressReporter()


def _log_summary(report: PipelineReport) -> None:
    failed = report.thumbnails.failed
    logger.info(f"Pages split: {len(report.split.artifacts)}")
    logger.info(
        f"Thumbnails generated: {len(report.thumbnails.succeeded)} | failed: {len(failed)}"
    )
    if failed:
        pages = ", ".join(str(result.request.page_number) for result in failed)
        logger.warning(f"Thumbnail generation failed for page(s): {pages}")
    reconcile = report.reconcile
    logger.info(
        f"Thumbnails renamed: {reconcile.renamed} | skipped: {reconcile.skipped} "
        f"(target existed: {reconcile.conflicts}) | errors: {reconcile.errored}"
    )


async def run(options: SplitOptions, settings: PagethumbsSettings | None = None) -> int:
    settings = settings or get_settings(options.env_file)
    configure_logging(
        console_level=settings.logging.console_level,
        file_path=settings.logging.file_path,
        force=True,
    )

    try:
        pdf_path = validate_input(options.input_file)
        rasterizer = resolve_rasterizer(options.rasterizer or settings.rasterizer.path)
        output_dir = prepare_output_dir(options.output_dir or settings.output_dir or Path.cwd())
    except PagethumbsError as exc:
        logger.error(f"Error: {exc}")
        return 1

    split_progress = _progress("split", options.progress)
    thumbnail_progress = _progress("thumbnails", options.progress)
    try:
        report = await run_split_pipeline(
            pdf_path,
            output_dir=output_dir,
            rasterizer=rasterizer,
            jobs=options.jobs or settings.rasterizer.jobs,
            timeout=options.timeout if options.timeout is not None else settings.rasterizer.timeout,
            scale_to=options.scale_to or settings.rasterizer.scale_to,
            split_progress=split_progress,
            thumbnail_progress=thumbnail_progress,
        )
    except PagethumbsError as exc:
        logger.error(f"Error: {exc}")
        return 1
    finally:
        split_progress.close()
        thumbnail_progress.close()

    _log_summary(report)
    logger.info("Finished successfully.")
    return 0
