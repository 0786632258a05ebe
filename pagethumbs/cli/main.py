from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Sequence
from functools import wraps
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click
import typer  # type: ignore[import]

from pagethumbs.utils.log_utils import logger

from . import reconcile, split


app = typer.Typer(
    help="Split a PDF into single pages and generate a JPEG thumbnail per page.",
)


_P = ParamSpec("_P")
_T = TypeVar("_T")


def _normalize_suffixes(suffixes: list[str] | None) -> list[str]:
    """Convert bare suffix tokens (e.g. 'jpg') into dotted extensions."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for suffix in suffixes or []:
        token = suffix.strip().lower().lstrip(".")
        if not token:
            continue
        ext = f".{token}"
        if ext in seen:
            continue
        seen.add(ext)
        cleaned.append(ext)
    return cleaned


def _synchronous(handler: Callable[_P, Coroutine[Any, Any, _T]]) -> Callable[_P, _T]:
    @wraps(handler)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _T:
        try:
            return asyncio.run(handler(*args, **kwargs))
        except KeyboardInterrupt as err:
            logger.info("Interrupted by user")
            raise typer.Exit(code=130) from err

    return wrapper


@app.command("split")
@_synchronous
async def split_command(
    input_file: Path = typer.Argument(
        ...,
        help="PDF document to split.",
        show_default=False,
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Destination for page PDFs and thumbnails (defaults to the current directory).",
        file_okay=False,
        dir_okay=True,
        writable=True,
    ),
    rasterizer: Path | None = typer.Option(
        None,
        "--rasterizer",
        help="Path to the pdftocairo executable (defaults to PDFTOCAIRO_PATH, then PATH).",
        dir_okay=False,
    ),
    jobs: int | None = typer.Option(
        None,
        "--jobs",
        "-j",
        min=1,
        help="Maximum number of concurrent rasterizer processes.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        min=0.0,
        help="Kill a rasterizer process after this many seconds. No limit by default.",
    ),
    scale_to: int | None = typer.Option(
        None,
        "--scale-to",
        min=1,
        help="Scale each thumbnail so its longest side is this many pixels.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Load configuration from this .env file.",
        exists=True,
        dir_okay=False,
    ),
    no_progress: bool = typer.Option(
        False,
        "--no-progress",
        help="Disable progress bars.",
    ),
) -> int:
    options = split.SplitOptions(
        input_file=input_file,
        output_dir=output_dir,
        rasterizer=rasterizer,
        jobs=jobs,
        timeout=timeout or None,
        scale_to=scale_to,
        env_file=env_file,
        progress=not no_progress,
    )
    result = await split.run(options)
    if result != 0:
        raise typer.Exit(code=result)
    return result


@app.command("reconcile")
def reconcile_command(
    directory: Path = typer.Argument(
        Path("."),
        help="Directory whose page_<n>_<name>-<digits>.<ext> files should be renamed.",
        file_okay=False,
        dir_okay=True,
    ),
    suffix: list[str] | None = typer.Option(
        None,
        "--suffix",
        "-s",
        help="Only rename files with this suffix (e.g. jpg). Repeat to add more.",
    ),
) -> int:
    result = reconcile.run(directory, _normalize_suffixes(suffix))
    if result != 0:
        raise typer.Exit(code=result)
    return result


def main(argv: Sequence[str] | None = None) -> int:
    try:
        result = app(args=list(argv) if argv is not None else None, standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:
        return int(exc.code or 0)
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
