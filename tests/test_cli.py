import numpy as np

from chroma_matting.cli import main
from chroma_matting.io_utils import load_image_rgba, save_rgba_png


def _write_sticker(path, key=(0, 255, 0)):
    img = np.zeros((40, 60, 4), dtype=np.uint8)
    img[..., :3] = key
    img[..., 3] = 255
    img[12:28, 20:40, :3] = (255, 0, 0)
    return save_rgba_png(path, img)


def test_run_command(tmp_path, capsys):
    src = _write_sticker(tmp_path / "in.png", key=(0, 0, 255))
    out = tmp_path / "out" / "result.png"
    code = main([
        "run", "--image", str(src), "--out", str(out),
        "--key-color", "#0000FF", "--similarity", "50", "--fit", "96x74",
    ])
    assert code == 0
    result = load_image_rgba(out)
    assert result.shape == (74, 96, 4)
    assert result[0, 0, 3] == 0
    assert result[37, 48, 3] == 255
    printed = capsys.readouterr().out
    assert "Key: #0000FF" in printed
    assert "Saved:" in printed


def test_run_command_with_yaml(tmp_path):
    src = _write_sticker(tmp_path / "in.png")
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("refine:\n  feather: false\n", encoding="utf-8")
    out = tmp_path / "result.png"
    assert main(["run", "--image", str(src), "--out", str(out), "--config", str(cfg)]) == 0
    alpha = load_image_rgba(out)[..., 3]
    assert set(np.unique(alpha).tolist()) == {0, 255}


def test_batch_command_reports_failures(tmp_path, capsys):
    src_dir = tmp_path / "in"
    src_dir.mkdir()
    _write_sticker(src_dir / "a.png")
    (src_dir / "b.png").write_bytes(b"broken")
    out_dir = tmp_path / "out"

    code = main(["batch", "--input", str(src_dir), "--out-dir", str(out_dir)])
    assert code == 1
    assert (out_dir / "removed_bg_a.png").exists()
    printed = capsys.readouterr().out
    assert "[success] a.png" in printed
    assert "[error] b.png" in printed
    assert "ok: 1 | failed: 1" in printed


def test_batch_command_without_inputs(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert main(["batch", "--input", str(empty), "--out-dir", str(tmp_path / "out")]) == 1


def test_view_command(tmp_path):
    src = _write_sticker(tmp_path / "in.png")
    res = tmp_path / "res.png"
    main(["run", "--image", str(src), "--out", str(res)])
    strip = tmp_path / "strip.png"
    assert main(["view", "--image", str(src), "--result", str(res), "--out", str(strip)]) == 0
    assert load_image_rgba(strip).shape == (40, 60 * 2 + 4, 4)
