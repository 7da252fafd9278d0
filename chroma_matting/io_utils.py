"""I/O helpers: decode sources into RGBA grids and encode results as PNG."""

from __future__ import annotations

import base64
import binascii
import re
from pathlib import Path
from typing import Union

import cv2
import numpy as np

Source = Union[bytes, bytearray, str, Path, np.ndarray]

_DATA_URI = re.compile(r"^data:(?P<mime>[\w/+.-]*)(?P<params>(;[^,;]*)*?)(?P<b64>;base64)?,", re.IGNORECASE)


class ImageDecodeError(ValueError):
    """Raised when source bytes cannot be turned into a pixel grid."""


def decode_image_rgba(data: bytes) -> np.ndarray:
    """Decode encoded image bytes into an ``(H, W, 4)`` uint8 RGBA grid."""

    if not data:
        raise ImageDecodeError("Empty image data")
    buf = np.frombuffer(bytes(data), dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageDecodeError("Unsupported or corrupt image data")
    return _to_rgba(img)


def _to_rgba(img: np.ndarray) -> np.ndarray:
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise ImageDecodeError(f"Unsupported pixel type: {img.dtype}")
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise ImageDecodeError(f"Unsupported channel count: {channels}")


def as_rgba(array: np.ndarray) -> np.ndarray:
    """Copy an RGB or RGBA uint8 array into a fresh RGBA grid."""

    if array.dtype != np.uint8 or array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ValueError("Expected an HxWx3 or HxWx4 uint8 array")
    if array.shape[2] == 4:
        return array.copy()
    alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate((array, alpha), axis=2)


def parse_data_uri(uri: str) -> bytes:
    """Return the payload of a ``data:`` URI."""

    match = _DATA_URI.match(uri)
    if match is None:
        raise ImageDecodeError("Not a data URI")
    payload = uri[match.end():]
    if not match.group("b64"):
        raise ImageDecodeError("Only base64 data URIs are supported")
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError(f"Invalid base64 payload: {exc}") from exc


def to_data_uri(png: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(png).decode('ascii')}"


def load_image_rgba(source: Source) -> np.ndarray:
    """Load bytes, a path, a data URI or an array into a new RGBA grid."""

    if isinstance(source, np.ndarray):
        return as_rgba(source)
    if isinstance(source, (bytes, bytearray)):
        return decode_image_rgba(bytes(source))
    if isinstance(source, str) and source.lstrip()[:5].lower() == "data:":
        return decode_image_rgba(parse_data_uri(source.strip()))

    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Unable to read image: {path}")
    try:
        return decode_image_rgba(path.read_bytes())
    except ImageDecodeError as exc:
        raise ImageDecodeError(f"{exc}: {path}") from exc


def encode_png(rgba: np.ndarray) -> bytes:
    """Encode an RGBA grid as PNG bytes."""

    if rgba.dtype != np.uint8 or rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ValueError("RGBA grid must be HxWx4 uint8")
    ok, buf = cv2.imencode(".png", cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
    if not ok:
        raise RuntimeError("PNG encoding failed")
    return buf.tobytes()


def save_rgba_png(path: str | Path, rgba: np.ndarray) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_png(rgba))
    return path


def ensure_dir(path: str | Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
