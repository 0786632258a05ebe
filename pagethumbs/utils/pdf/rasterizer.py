"""Thumbnail generation through an external ``pdftocairo`` process.

The rasterizer decides the final image name itself: asked for a single page
it may still append ``-<digits>`` before the extension. This module does not
try to predict that name; `reconcile.reconcile_thumbnail_names` normalizes the
output directory once every page has been processed.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Sequence
from dataclasses import dataclass, field
import os
from pathlib import Path
import shutil

from ..concurrency import ProgressReporter
from ..log_utils import logger
from .errors import RasterizerNotFoundError
from .naming import page_prefix


RASTERIZER_NAME = "pdftocairo"
FALLBACK_RASTERIZER_PATHS: tuple[Path, ...] = (
    Path("/usr/local/bin/pdftocairo"),
    Path("/opt/homebrew/bin/pdftocairo"),
    Path("/usr/bin/pdftocairo"),
)
THUMBNAIL_FORMAT_FLAG = "-jpeg"
THUMBNAIL_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg")


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def resolve_rasterizer(explicit: str | Path | None = None) -> Path:
    """Locate the rasterizer executable.

    An explicit path wins and must be usable; otherwise ``PATH`` is searched,
    then a few conventional install locations.

    Raises:
        RasterizerNotFoundError: When no executable can be found.
    """
    if explicit is not None:
        candidate = Path(explicit).expanduser()
        if _is_executable(candidate):
            return candidate.resolve()
        raise RasterizerNotFoundError(
            f"{RASTERIZER_NAME} not found or not executable at {candidate}."
        )

    found = shutil.which(RASTERIZER_NAME)
    if found:
        return Path(found).resolve()

    for candidate in FALLBACK_RASTERIZER_PATHS:
        if _is_executable(candidate):
            return candidate

    raise RasterizerNotFoundError(
        f"{RASTERIZER_NAME} not found on PATH or in "
        f"{', '.join(str(p.parent) for p in FALLBACK_RASTERIZER_PATHS)}. "
        "Install Poppler or set PDFTOCAIRO_PATH."
    )


@dataclass(slots=True, frozen=True)
class ThumbnailRequest:
    page_number: int
    pdf_path: Path
    output_prefix: Path


@dataclass(slots=True)
class ThumbnailResult:
    request: ThumbnailRequest
    returncode: int | None
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0


@dataclass(slots=True)
class ThumbnailBatchReport:
    results: list[ThumbnailResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ThumbnailResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> list[ThumbnailResult]:
        return [result for result in self.results if not result.ok]


def build_requests(
    pdf_path: str | Path,
    page_count: int,
    base_name: str,
    output_dir: str | Path,
) -> list[ThumbnailRequest]:
    """One request per 1-based page, all sharing ``base_name``."""
    absolute = Path(pdf_path).resolve()
    directory = Path(output_dir)
    return [
        ThumbnailRequest(
            page_number=page_number,
            pdf_path=absolute,
            output_prefix=directory / page_prefix(page_number, base_name),
        )
        for page_number in range(1, page_count + 1)
    ]


class ThumbnailGenerator:
    """Runs the rasterizer once per page, never letting one page abort the batch."""

    def __init__(
        self,
        rasterizer: str | Path,
        *,
        concurrency: int = 1,
        timeout: float | None = None,
        scale_to: int | None = None,
        progress: ProgressReporter | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._rasterizer = Path(rasterizer)
        self._concurrency = concurrency
        self._timeout = timeout
        self._scale_to = scale_to
        self._progress = progress

    def build_command(self, request: ThumbnailRequest) -> list[str]:
        page = str(request.page_number)
        command = [str(self._rasterizer), THUMBNAIL_FORMAT_FLAG, "-f", page, "-l", page]
        if self._scale_to:
            command += ["-scale-to", str(self._scale_to)]
        command += [str(request.pdf_path), str(request.output_prefix)]
        return command

    async def render(self, request: ThumbnailRequest) -> ThumbnailResult:
        page_number = request.page_number
        command = self.build_command(request)
        logger.info(f" -> Processing thumbnail for page {page_number}...")
        logger.debug(f"    Executing: {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.error(f"    ERROR generating thumbnail for page {page_number}: {exc}")
            return ThumbnailResult(request=request, returncode=None, error=str(exc))

        try:
            if self._timeout is not None:
                _, stderr_bytes = await asyncio.wait_for(
                    process.communicate(), timeout=self._timeout
                )
            else:
                _, stderr_bytes = await process.communicate()
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            message = f"timed out after {self._timeout:g}s"
            logger.error(f"    ERROR generating thumbnail for page {page_number}: {message}")
            return ThumbnailResult(request=request, returncode=None, error=message)

        stderr = stderr_bytes.decode("utf-8", errors="replace").strip()
        returncode = process.returncode
        if returncode != 0:
            logger.error(f"    ERROR generating thumbnail for page {page_number}:")
            logger.error(f"      Exit code: {returncode}")
            logger.error(f"      Stderr: {stderr}")
            return ThumbnailResult(
                request=request,
                returncode=returncode,
                stderr=stderr,
                error=f"exit code {returncode}",
            )

        if stderr:
            logger.warning(
                f"    Warning/Stderr from {self._rasterizer.name} for page {page_number}: {stderr}"
            )
        logger.info(f"    {self._rasterizer.name} finished for page {page_number}.")
        return ThumbnailResult(request=request, returncode=returncode, stderr=stderr)

    async def run(self, requests: Sequence[ThumbnailRequest]) -> ThumbnailBatchReport:
        """Render every request; results come back in request order."""
        logger.info(f"Starting thumbnail generation using {self._rasterizer}...")
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(request: ThumbnailRequest) -> ThumbnailResult:
            async with semaphore:
                result = await self.render(request)
            if self._progress:
                self._progress.increment()
            return result

        if self._progress and requests:
            self._progress.start(len(requests))
        try:
            results = await asyncio.gather(*(_bounded(request) for request in requests))
        finally:
            if self._progress:
                self._progress.close()

        report = ThumbnailBatchReport(results=list(results))
        logger.info(
            f"Thumbnail generation finished: {len(report.succeeded)} succeeded, "
            f"{len(report.failed)} failed."
        )
        return report
