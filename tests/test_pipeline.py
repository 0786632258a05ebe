"""End-to-end tests for `run_split_pipeline` with a stand-in rasterizer."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from pagethumbs.utils.pdf import DocumentLoadError, run_split_pipeline


@pytest.mark.asyncio
@pytest.mark.parametrize("suffix", [True, False])
async def test_pipeline_produces_pages_and_normalized_thumbnails(
    suffix: bool,
    make_pdf: Callable[..., Path],
    make_rasterizer: Callable[..., Path],
    tmp_path: Path,
) -> None:
    source = make_pdf("input.pdf", page_count=3)
    output_dir = tmp_path / "out"
    output_dir.mkdir()

    report = await run_split_pipeline(
        source, output_dir, make_rasterizer(suffix=suffix)
    )

    assert sorted(p.name for p in output_dir.iterdir()) == [
        "page_1_input.jpeg",
        "page_1_input.pdf",
        "page_2_input.jpeg",
        "page_2_input.pdf",
        "page_3_input.jpeg",
        "page_3_input.pdf",
    ]
    assert len(report.split.artifacts) == 3
    assert len(report.thumbnails.succeeded) == 3
    assert report.reconcile.renamed == (3 if suffix else 0)
    assert report.reconcile.errored == 0


@pytest.mark.asyncio
async def test_pipeline_rasterizes_the_source_document(
    make_pdf: Callable[..., Path],
    make_rasterizer: Callable[..., Path],
    rasterizer_calls: Callable[[], list[list[str]]],
    tmp_path: Path,
) -> None:
    source = make_pdf("input.pdf", page_count=2)
    output_dir = tmp_path / "out"
    output_dir.mkdir()

    await run_split_pipeline(source, output_dir, make_rasterizer(), jobs=2)

    calls = rasterizer_calls()
    assert len(calls) == 2
    assert {call[-2] for call in calls} == {str(source.resolve())}
    assert sorted(call[2] for call in calls) == ["1", "2"]


@pytest.mark.asyncio
async def test_pipeline_continues_past_failed_pages(
    make_pdf: Callable[..., Path],
    make_rasterizer: Callable[..., Path],
    tmp_path: Path,
) -> None:
    source = make_pdf("input.pdf", page_count=3)
    output_dir = tmp_path / "out"
    output_dir.mkdir()

    report = await run_split_pipeline(
        source, output_dir, make_rasterizer(fail_pages={1, 3})
    )

    assert [r.request.page_number for r in report.thumbnails.failed] == [1, 3]
    assert (output_dir / "page_2_input.jpeg").exists()
    assert not (output_dir / "page_1_input.jpeg").exists()
    assert report.reconcile.renamed == 1
    assert len(report.split.artifacts) == 3


@pytest.mark.asyncio
async def test_pipeline_keeps_split_pdfs_with_digit_suffixed_names(
    make_pdf: Callable[..., Path],
    make_rasterizer: Callable[..., Path],
    tmp_path: Path,
) -> None:
    source = make_pdf("report-2023.pdf", page_count=2)
    output_dir = tmp_path / "out"
    output_dir.mkdir()

    await run_split_pipeline(source, output_dir, make_rasterizer(extension=".jpg"))

    assert sorted(p.name for p in output_dir.iterdir()) == [
        "page_1_report-2023.jpg",
        "page_1_report-2023.pdf",
        "page_2_report-2023.jpg",
        "page_2_report-2023.pdf",
    ]


@pytest.mark.asyncio
async def test_pipeline_aborts_before_rasterizing_when_source_is_corrupt(
    make_rasterizer: Callable[..., Path],
    rasterizer_calls: Callable[[], list[list[str]]],
    tmp_path: Path,
) -> None:
    source = tmp_path / "broken.pdf"
    source.write_bytes(b"%PDF-1.4 garbage")
    output_dir = tmp_path / "out"
    output_dir.mkdir()

    with pytest.raises(DocumentLoadError):
        await run_split_pipeline(source, output_dir, make_rasterizer())

    assert rasterizer_calls() == []
    assert list(output_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_pipeline_keeps_unsuffixed_thumbnails_of_digit_suffixed_sources(
    make_pdf: Callable[..., Path],
    make_rasterizer: Callable[..., Path],
    tmp_path: Path,
) -> None:
    source = make_pdf("report-2023.pdf", page_count=2)
    output_dir = tmp_path / "out"
    output_dir.mkdir()

    report = await run_split_pipeline(
        source, output_dir, make_rasterizer(suffix=False, extension=".jpg")
    )

    assert sorted(p.name for p in output_dir.iterdir()) == [
        "page_1_report-2023.jpg",
        "page_1_report-2023.pdf",
        "page_2_report-2023.jpg",
        "page_2_report-2023.pdf",
    ]
    assert report.reconcile.renamed == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("suffix", [True, False])
async def test_rerunning_pipeline_keeps_thumbnail_names(
    suffix: bool,
    make_pdf: Callable[..., Path],
    make_rasterizer: Callable[..., Path],
    tmp_path: Path,
) -> None:
    source = make_pdf("report-2023.pdf", page_count=1)
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    rasterizer = make_rasterizer(suffix=suffix, extension=".jpg")

    await run_split_pipeline(source, output_dir, rasterizer)
    second = await run_split_pipeline(source, output_dir, rasterizer)

    names = sorted(p.name for p in output_dir.iterdir())
    assert "page_1_report.jpg" not in names
    assert "page_1_report-2023.jpg" in names
    assert "page_1_report-2023.pdf" in names
    assert second.reconcile.renamed == 0
    assert second.reconcile.conflicts == (1 if suffix else 0)
