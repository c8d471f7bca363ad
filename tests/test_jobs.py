from __future__ import annotations

from pathlib import Path

import pytest

from pixie_stitch.core import jobs
from pixie_stitch.core.jobs import JobStore, run_batch
from tests.utils import BLUE, RED, header_only_png, make_image, save_png, strip_image


def test_batch_continues_after_failures(resources, tmp_path):
    good = save_png(make_image([[RED, BLUE]]), tmp_path, "good.png")
    crowded = save_png(strip_image(18), tmp_path, "crowded.png")
    broken = tmp_path / "broken.gif"
    broken.write_bytes(b"not a gif at all")
    out = tmp_path / "out"

    records = run_batch([crowded, good, broken], resources, output_dir=out, max_workers=3)

    by_name = {Path(r.job_id).name: r for r in records}
    assert [r.job_id for r in records] == [str(crowded), str(good), str(broken)]
    assert by_name["good.png"].status == "done"
    assert by_name["good.png"].stage == "written"
    assert by_name["good.png"].output_dir == str(out / "good")
    assert by_name["crowded.png"].status == "failed"
    assert by_name["crowded.png"].error_type == "TooManyColorsError"
    assert by_name["crowded.png"].stage == "loaded"
    assert by_name["broken.gif"].error_type == "UnsupportedFormatError"
    assert sorted(p.name for p in out.iterdir()) == ["good"]


def test_batch_deduplicates_paths(resources, tmp_path):
    good = save_png(make_image([[RED]]), tmp_path, "dot.png")
    records = run_batch([good, str(good)], resources, output_dir=tmp_path / "out")
    assert len(records) == 1
    assert records[0].status == "done"


def test_stages_only_move_forward():
    store = JobStore()
    store.create("a.png")
    store.advance("a.png", "loaded")
    with pytest.raises(ValueError):
        store.advance("a.png", "allocated")
    with pytest.raises(ValueError):
        store.advance("a.png", "pending")
    record = store.advance("a.png", "extracted")
    assert record.status == "processing"


def test_failed_job_cannot_resume():
    store = JobStore()
    store.create("a.png")
    store.fail("a.png", RuntimeError("boom"))
    with pytest.raises(ValueError):
        store.advance("a.png", "loaded")
    assert store.list(status="failed")[0].error == "boom"


def test_same_stem_in_one_output_root_is_rejected(resources, tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    first = save_png(make_image([[RED]]), tmp_path / "a", "cat.png")
    second = save_png(make_image([[BLUE, BLUE]]), tmp_path / "b", "cat.png")
    out = tmp_path / "out"

    records = run_batch([first, second], resources, output_dir=out, max_workers=2)

    assert records[0].status == "done"
    assert records[1].status == "failed"
    assert records[1].error_type == "OutputWriteError"
    assert records[1].stage == "pending"
    summary = (out / "cat" / "cat_pattern.json").read_text()
    assert '"width": 1' in summary
    assert [p.name for p in out.iterdir()] == ["cat"]


def test_png_and_gif_with_same_stem_do_not_clobber(resources, tmp_path):
    png = save_png(make_image([[RED]]), tmp_path, "cat.png")
    gif = tmp_path / "cat.gif"
    make_image([[BLUE]]).save(gif, format="GIF")

    records = run_batch([png, gif], resources, overwrite=True, max_workers=2)

    assert [r.status for r in records] == ["done", "failed"]
    assert "cat.png" in records[1].error


def test_oversized_image_does_not_abort_batch(resources, tmp_path):
    huge = header_only_png(tmp_path, 20000, 20000)
    good = save_png(make_image([[RED]]), tmp_path, "good.png")

    records = run_batch([huge, good], resources, output_dir=tmp_path / "out", max_workers=2)

    assert records[0].status == "failed"
    assert records[0].error_type == "UnsupportedFormatError"
    assert records[1].status == "done"


def test_unexpected_errors_are_recorded(resources, tmp_path, monkeypatch):
    good = save_png(make_image([[RED]]), tmp_path, "good.png")

    def explode(*args, **kwargs):
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(jobs, "convert_image", explode)
    records = run_batch([good], resources, output_dir=tmp_path / "out")

    assert records[0].status == "failed"
    assert records[0].error_type == "RuntimeError"
    assert records[0].error == "renderer exploded"
