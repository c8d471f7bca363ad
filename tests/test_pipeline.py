from __future__ import annotations

import json

import pytest

from pixie_stitch.core.errors import OutputWriteError, TooManyColorsError, UnsupportedFormatError
from pixie_stitch.core.extractor import extract_colors
from pixie_stitch.core.legend import build_legend
from pixie_stitch.core.pipeline import convert_image, render_pattern_files
from tests.utils import (
    BLUE,
    CLEAR,
    RED,
    checker_image,
    distinct_colors,
    make_image,
    save_png,
    strip_image,
    to_bytes,
)


def _render(img, resources, stem="sprite"):
    extraction = extract_colors(img, max_colors=len(resources.inventory))
    legend = build_legend(extraction, resources.inventory)
    return render_pattern_files(stem, extraction, legend, resources)


def test_convert_writes_pattern_directory(resources, tmp_path):
    image_path = save_png(make_image([[RED, RED], [BLUE, CLEAR]]), tmp_path, "heart.png")
    out = tmp_path / "out"
    stages = []

    target = convert_image(image_path, resources, output_dir=out, on_stage=stages.append)

    assert target == out / "heart"
    assert stages == ["loaded", "extracted", "allocated", "rendered", "written"]
    names = {p.relative_to(target).as_posix() for p in target.rglob("*") if p.is_file()}
    assert {
        "heart_pattern.png",
        "heart_legend.png",
        "heart_legend.txt",
        "heart_legend.csv",
        "heart_pattern.json",
        "heart_cross_stitch_complete.png",
        "heart_cross_stitch_colorized_complete.png",
        "heart_cross_stitch_colorized_no_symbols_complete.png",
        "heart_paint_by_numbers_complete.png",
        "centered/heart_cross_stitch_complete.png",
        "centered/heart_legend.png",
    }.issubset(names)
    assert not any("segment" in name for name in names)
    assert [p.name for p in out.iterdir()] == ["heart"]


def test_output_defaults_to_image_folder(resources, tmp_path):
    image_path = save_png(make_image([[RED]]), tmp_path, "dot.png")
    target = convert_image(image_path, resources)
    assert target == tmp_path / "dot"


def test_summary_counts_and_symbols(resources, tmp_path):
    image_path = save_png(make_image([[RED, RED], [BLUE, CLEAR]]), tmp_path, "heart.png")
    target = convert_image(image_path, resources, output_dir=tmp_path / "out")

    summary = json.loads((target / "heart_pattern.json").read_text(encoding="utf-8"))
    assert summary["canvasGrid"] == {"width": 2, "height": 2}
    assert summary["total_stitches"] == 3
    assert summary["transparent_cells"] == 1
    assert [(row["hex"], row["symbol"], row["count"]) for row in summary["legend"]] == [
        ("#FF0000", "01.pbm", 2),
        ("#0000FF", "02.pbm", 1),
    ]
    assert [row["label"] for row in summary["legend"]] == ["1", "2"]
    assert summary["title"] == "heart"
    # both coordinate variants are listed, so no single origin is claimed
    assert "origin" not in summary
    assert "heart_cross_stitch_complete.png" in summary["sheets"]
    assert "centered/heart_cross_stitch_complete.png" in summary["sheets"]

    text = (target / "heart_legend.txt").read_text(encoding="utf-8")
    assert "Stitches: 3" in text
    csv_lines = (target / "heart_legend.csv").read_text(encoding="utf-8").splitlines()
    assert csv_lines[0].startswith("index,symbol")
    assert len(csv_lines) == 3


def test_render_is_byte_identical_between_runs(resources):
    img = checker_image(14, 9, colors=distinct_colors(5))
    first = _render(img, resources)
    second = _render(img.copy(), resources)
    assert first.files.keys() == second.files.keys()
    for name in first.files:
        assert first.files[name] == second.files[name], name


def test_convert_is_deterministic_on_disk(resources, tmp_path):
    image_path = save_png(checker_image(11, 7, colors=distinct_colors(4)), tmp_path, "tile.png")
    a = convert_image(image_path, resources, output_dir=tmp_path / "a")
    b = convert_image(image_path, resources, output_dir=tmp_path / "b")
    for path in a.rglob("*.png"):
        assert path.read_bytes() == (b / path.relative_to(a)).read_bytes()


def test_large_image_gets_parts(resources):
    rendered = _render(checker_image(61, 3), resources, stem="wide")
    assert "wide_cross_stitch_segment_1.png" in rendered.files
    assert "wide_cross_stitch_segment_2.png" in rendered.files
    assert "centered/wide_cross_stitch_colorized_segment_2.png" in rendered.files
    assert "wide_paint_by_numbers_segment_1.png" not in rendered.files
    assert [s.part for s in rendered.summary.segments] == [1, 2]


def test_too_many_colors_writes_nothing(resources, tmp_path):
    image_path = save_png(strip_image(18), tmp_path, "rainbow.png")
    out = tmp_path / "out"
    with pytest.raises(TooManyColorsError) as info:
        convert_image(image_path, resources, output_dir=out)
    assert (info.value.count, info.value.limit) == (18, 17)
    assert not out.exists()


def test_eighteenth_color_is_the_only_difference(resources, tmp_path):
    ok_path = save_png(strip_image(17), tmp_path, "seventeen.png")
    assert convert_image(ok_path, resources, output_dir=tmp_path / "out").is_dir()

    bad_path = save_png(strip_image(18), tmp_path, "eighteen.png")
    with pytest.raises(TooManyColorsError):
        convert_image(bad_path, resources, output_dir=tmp_path / "out")
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["seventeen"]


def test_unsupported_format(resources, tmp_path):
    path = tmp_path / "photo.bmp"
    path.write_bytes(to_bytes(make_image([[RED]]).convert("RGB"), fmt="BMP"))
    with pytest.raises(UnsupportedFormatError):
        convert_image(path, resources, output_dir=tmp_path / "out")
    assert not (tmp_path / "out").exists()


def test_existing_output_is_not_clobbered(resources, tmp_path):
    image_path = save_png(make_image([[RED]]), tmp_path, "dot.png")
    out = tmp_path / "out"
    (out / "dot").mkdir(parents=True)
    (out / "dot" / "keep.txt").write_text("mine")

    with pytest.raises(OutputWriteError):
        convert_image(image_path, resources, output_dir=out)
    assert (out / "dot" / "keep.txt").read_text() == "mine"

    target = convert_image(image_path, resources, output_dir=out, overwrite=True)
    assert not (target / "keep.txt").exists()
    assert (target / "dot_pattern.png").exists()
    assert [p.name for p in out.iterdir()] == ["dot"]


def test_output_path_blocked_by_file(resources, tmp_path):
    image_path = save_png(make_image([[RED]]), tmp_path, "dot.png")
    out = tmp_path / "out"
    out.mkdir()
    (out / "dot").write_text("a file, not a folder")
    with pytest.raises(OutputWriteError):
        convert_image(image_path, resources, output_dir=out, overwrite=True)


def test_fully_transparent_image_renders_empty_pattern(resources):
    rendered = _render(make_image([[CLEAR, CLEAR]]), resources, stem="ghost")
    assert rendered.summary.palette_size == 0
    assert rendered.summary.total_stitches == 0
    assert "ghost_pattern.png" in rendered.files
