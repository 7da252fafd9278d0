import cv2
import numpy as np
import pytest

from chroma_matting.io_utils import (
    ImageDecodeError,
    as_rgba,
    decode_image_rgba,
    encode_png,
    load_image_rgba,
    parse_data_uri,
    save_rgba_png,
    to_data_uri,
)


def _sample_rgba():
    img = np.zeros((6, 8, 4), dtype=np.uint8)
    img[..., 0] = 200
    img[..., 1] = np.arange(8, dtype=np.uint8) * 30
    img[..., 3] = 255
    img[2, 3, 3] = 0
    img[4, 5, 3] = 128
    return img


def test_png_encode_decode_preserves_alpha():
    img = _sample_rgba()
    decoded = decode_image_rgba(encode_png(img))
    assert decoded.shape == img.shape
    assert np.array_equal(decoded, img)


def test_decode_grayscale_becomes_opaque_rgba():
    ok, buf = cv2.imencode(".png", np.full((5, 7), 90, dtype=np.uint8))
    assert ok
    decoded = decode_image_rgba(buf.tobytes())
    assert decoded.shape == (5, 7, 4)
    assert (decoded[..., :3] == 90).all()
    assert (decoded[..., 3] == 255).all()


def test_decode_rejects_garbage():
    with pytest.raises(ImageDecodeError):
        decode_image_rgba(b"definitely not an image")
    with pytest.raises(ImageDecodeError):
        decode_image_rgba(b"")


def test_data_uri_round_trip():
    png = encode_png(_sample_rgba())
    uri = to_data_uri(png)
    assert uri.startswith("data:image/png;base64,")
    assert parse_data_uri(uri) == png
    assert np.array_equal(load_image_rgba(uri), _sample_rgba())


def test_parse_data_uri_rejects_non_base64():
    with pytest.raises(ImageDecodeError):
        parse_data_uri("data:text/plain,hello")
    with pytest.raises(ImageDecodeError):
        parse_data_uri("http://example.com/a.png")


def test_load_image_from_path_and_missing(tmp_path):
    path = save_rgba_png(tmp_path / "nested" / "img.png", _sample_rgba())
    assert np.array_equal(load_image_rgba(path), _sample_rgba())
    assert np.array_equal(load_image_rgba(str(path)), _sample_rgba())
    with pytest.raises(FileNotFoundError):
        load_image_rgba(tmp_path / "missing.png")


def test_load_image_from_corrupt_file(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"\x89PNG not really")
    with pytest.raises(ImageDecodeError):
        load_image_rgba(path)


def test_as_rgba_copies_and_adds_alpha():
    rgb = np.full((3, 3, 3), 7, dtype=np.uint8)
    rgba = as_rgba(rgb)
    assert rgba.shape == (3, 3, 4)
    assert (rgba[..., 3] == 255).all()
    src = _sample_rgba()
    copy = as_rgba(src)
    copy[0, 0, 0] = 1
    assert src[0, 0, 0] == 200
    with pytest.raises(ValueError):
        as_rgba(np.zeros((3, 3), dtype=np.uint8))
