import numpy as np
import pytest

from chroma_matting.canvas import STICKER_MAIN_SIZE, fit_to_canvas, fitted_rect, resize_rgba


def _solid(h, w, color, alpha=255):
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[..., :3] = color
    img[..., 3] = alpha
    return img


def test_fitted_rect_wide_source_fits_width():
    assert fitted_rect((300, 100), (370, 320)) == (0, 98, 370, 123)


def test_fitted_rect_tall_source_fits_height():
    assert fitted_rect((100, 300), (370, 320)) == (131, 0, 107, 320)


def test_fitted_rect_same_ratio_fills_canvas():
    assert fitted_rect((740, 640), STICKER_MAIN_SIZE) == (0, 0, 370, 320)


def test_fit_to_canvas_letterboxes_with_key_colour():
    src = _solid(100, 300, (255, 0, 0))
    out = fit_to_canvas(src, (370, 320), (0, 0, 255))

    assert out.shape == (320, 370, 4)
    assert (out[..., 3] == 255).all()
    assert tuple(out[10, 185, :3]) == (0, 0, 255)
    assert tuple(out[310, 185, :3]) == (0, 0, 255)
    assert tuple(out[160, 185, :3]) == (255, 0, 0)
    assert tuple(out[98, 0, :3]) == (255, 0, 0)
    assert tuple(out[97, 0, :3]) == (0, 0, 255)


def test_fit_to_canvas_composites_transparent_source_over_key():
    src = _solid(40, 40, (255, 0, 0), alpha=0)
    out = fit_to_canvas(src, (50, 50), (0, 255, 0))
    assert (out[..., :3] == (0, 255, 0)).all()
    assert (out[..., 3] == 255).all()


def test_fit_to_canvas_rejects_bad_input():
    with pytest.raises(ValueError):
        fit_to_canvas(np.zeros((4, 4, 3), dtype=np.uint8), (10, 10), (0, 255, 0))
    with pytest.raises(ValueError):
        fit_to_canvas(_solid(4, 4, (0, 0, 0)), (0, 10), (0, 255, 0))


def test_resize_rgba():
    out = resize_rgba(_solid(320, 370, (10, 20, 30)), (96, 74))
    assert out.shape == (74, 96, 4)
    assert tuple(out[37, 48]) == (10, 20, 30, 255)


def test_fit_to_canvas_hidden_rgb_does_not_bleed():
    src = _solid(4, 4, (255, 0, 0))
    src[:, 2:, :3] = (0, 0, 255)
    src[:, 2:, 3] = 0
    out = fit_to_canvas(src, (16, 16), (0, 255, 0))
    assert (out[..., 2] == 0).all()
    assert tuple(out[8, 0, :3]) == (255, 0, 0)
    assert tuple(out[8, 15, :3]) == (0, 255, 0)
