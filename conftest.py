# Test configuration utilities.
# Ensures the repository root is on sys.path so that 'pagethumbs' can be imported
# when running pytest without installing the package, and provides builders for
# source PDFs and a stand-in rasterizer executable.
from __future__ import annotations

from collections.abc import Callable, Generator, Iterable
from pathlib import Path
import stat
import sys

import fitz
import pytest


ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pagethumbs.config.settings import _load_settings  # noqa: E402


_FAKE_RASTERIZER = """#!{python}
import sys
import time
from pathlib import Path

args = sys.argv[1:]
with open({calls!r}, "a", encoding="utf-8") as log:
    log.write(" ".join(args) + "\\n")

page = int(args[args.index("-f") + 1])
prefix = args[-1]
time.sleep({sleep!r})
if page in {fail_pages!r}:
    sys.stderr.write(f"simulated failure for page {{page}}\\n")
    sys.exit(3)
if {warn!r}:
    sys.stderr.write("Syntax Warning: simulated\\n")
name = f"{{prefix}}-{{page}}{extension}" if {suffix!r} else f"{{prefix}}{extension}"
Path(name).write_bytes(b"\\xff\\xd8\\xff\\xe0 fake jpeg")
"""


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep ambient configuration out of tests and drop cached snapshots."""
    for key in (
        "PDFTOCAIRO_PATH",
        "PAGETHUMBS_OUTPUT_DIR",
        "PAGETHUMBS_JOBS",
        "PAGETHUMBS_RASTER_TIMEOUT",
        "PAGETHUMBS_SCALE_TO",
        "PAGETHUMBS_LOG_LEVEL",
        "PAGETHUMBS_LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    _load_settings.cache_clear()
    yield
    _load_settings.cache_clear()


def build_pdf(path: Path, page_count: int) -> Path:
    """Write a PDF whose page ``n`` carries the text ``Page n of N``."""
    with fitz.open() as doc:
        for page_number in range(1, page_count + 1):
            page = doc.new_page()
            page.insert_text((72, 72), f"Page {page_number} of {page_count}")
        doc.save(path.as_posix())
    return path


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    source_dir = tmp_path / "src"
    source_dir.mkdir(exist_ok=True)

    def _make(name: str = "input.pdf", page_count: int = 3) -> Path:
        return build_pdf(source_dir / name, page_count)

    return _make


@pytest.fixture
def make_rasterizer(tmp_path: Path) -> Callable[..., Path]:
    """Create an executable that mimics pdftocairo's single-page JPEG output.

    The script appends ``-<page>`` to the output prefix when ``suffix`` is
    true, exits 3 for pages listed in ``fail_pages``, and records each argv in
    ``bin/calls.txt``.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(
        *,
        suffix: bool = True,
        fail_pages: Iterable[int] = (),
        sleep: float = 0.0,
        warn: bool = False,
        extension: str = ".jpeg",
        name: str = "pdftocairo",
    ) -> Path:
        script = bin_dir / name
        script.write_text(
            _FAKE_RASTERIZER.format(
                python=sys.executable,
                calls=str(bin_dir / "calls.txt"),
                sleep=sleep,
                fail_pages=set(fail_pages),
                warn=warn,
                suffix=suffix,
                extension=extension,
            ),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def rasterizer_calls(tmp_path: Path) -> Callable[[], list[list[str]]]:
    def _read() -> list[list[str]]:
        calls = tmp_path / "bin" / "calls.txt"
        if not calls.exists():
            return []
        return [line.split(" ") for line in calls.read_text(encoding="utf-8").splitlines()]

    return _read
