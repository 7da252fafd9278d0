import numpy as np

from chroma_matting.config import MattingOptions
from chroma_matting.io_utils import load_image_rgba, save_rgba_png
from chroma_matting.runners.batch import collect_inputs, run_batch


def _sticker(tmp_path, name):
    img = np.zeros((32, 32, 4), dtype=np.uint8)
    img[..., 1] = 255
    img[..., 3] = 255
    img[10:22, 10:22, :3] = (255, 0, 0)
    return save_rgba_png(tmp_path / name, img)


def test_collect_inputs_filters_by_extension(tmp_path):
    _sticker(tmp_path, "a.png")
    _sticker(tmp_path, "b.png")
    (tmp_path / "notes.txt").write_text("skip me", encoding="utf-8")
    found = collect_inputs([tmp_path], [".png"])
    assert [p.name for p in found] == ["a.png", "b.png"]


def test_run_batch_records_per_item_status(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    good = _sticker(src, "cat.png")
    bad = src / "broken.png"
    bad.write_bytes(b"not a png")
    out_dir = tmp_path / "out"

    outcome = run_batch([good, bad], out_dir, MattingOptions(fit_to_canvas=(64, 64)))
    items = outcome["items"]

    assert [item.status for item in items] == ["success", "error"]
    assert items[0].output == out_dir / "removed_bg_cat.png"
    assert items[1].output is None
    assert items[1].error
    assert outcome["stats"]["succeeded"] == 1
    assert outcome["stats"]["failed"] == 1

    result = load_image_rgba(items[0].output)
    assert result.shape == (64, 64, 4)
    assert result[0, 0, 3] == 0
    assert result[32, 32, 3] == 255


def test_run_batch_custom_prefix(tmp_path):
    good = _sticker(tmp_path, "dog.png")
    outcome = run_batch([good], tmp_path / "out", prefix="clean_")
    assert outcome["items"][0].output.name == "clean_dog.png"


def test_run_batch_with_worker_processes(tmp_path):
    sources = [_sticker(tmp_path, f"s{i}.png") for i in range(3)]
    outcome = run_batch(sources, tmp_path / "out", workers=2)

    assert [item.status for item in outcome["items"]] == ["success"] * 3
    assert [item.source for item in outcome["items"]] == sources
    for item in outcome["items"]:
        result = load_image_rgba(item.output)
        assert result[0, 0, 3] == 0
        assert result[16, 16, 3] == 255
