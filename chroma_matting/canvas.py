"""Canvas fitting and sticker-size export."""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from .color import RGB

Size = Tuple[int, int]

STICKER_MAIN_SIZE: Size = (370, 320)
STICKER_TAB_SIZE: Size = (96, 74)


def fitted_rect(src_size: Size, target_size: Size) -> Tuple[int, int, int, int]:
    """Return ``(x, y, w, h)`` of the largest centred aspect-fit rectangle."""

    src_w, src_h = src_size
    dst_w, dst_h = target_size
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"Invalid source size: {src_size}")
    src_ratio = src_w / src_h
    dst_ratio = dst_w / dst_h
    if src_ratio > dst_ratio:
        draw_w = dst_w
        draw_h = max(1, int(round(dst_w / src_ratio)))
    else:
        draw_h = dst_h
        draw_w = max(1, int(round(dst_h * src_ratio)))
    x = (dst_w - draw_w) // 2
    y = (dst_h - draw_h) // 2
    return x, y, draw_w, draw_h


def resize_rgba(rgba: np.ndarray, size: Size) -> np.ndarray:
    """Resize an RGBA grid (uint8 or float32) to ``size`` (width, height) without preserving aspect."""

    w, h = int(size[0]), int(size[1])
    if w <= 0 or h <= 0:
        raise ValueError(f"Invalid target size: {size}")
    if (rgba.shape[1], rgba.shape[0]) == (w, h):
        return rgba.copy()
    shrinking = w * h < rgba.shape[0] * rgba.shape[1]
    interp = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
    return cv2.resize(rgba, (w, h), interpolation=interp)


def fit_to_canvas(rgba: np.ndarray, size: Size, key_rgb: RGB) -> np.ndarray:
    """Letterbox ``rgba`` into a key-coloured canvas of ``size`` (width, height).

    The whole canvas is filled with the key colour first so the margins are
    removed together with the rendered background. The source is scaled to fit
    without cropping and composited centred; the result is fully opaque.
    """

    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ValueError("rgba must be HxWx4")
    dst_w, dst_h = int(size[0]), int(size[1])
    if dst_w <= 0 or dst_h <= 0:
        raise ValueError(f"Invalid canvas size: {size}")

    canvas = np.empty((dst_h, dst_w, 4), dtype=np.uint8)
    canvas[..., :3] = np.asarray(key_rgb, dtype=np.uint8)
    canvas[..., 3] = 255

    x, y, w, h = fitted_rect((rgba.shape[1], rgba.shape[0]), (dst_w, dst_h))
    # Resample premultiplied so hidden RGB under alpha 0 cannot bleed into edges.
    premul = rgba.astype(np.float32)
    premul[..., :3] *= premul[..., 3:4] / 255.0
    art = resize_rgba(premul, (w, h))
    alpha = np.clip(art[..., 3:4] / 255.0, 0.0, 1.0)
    region = canvas[y : y + h, x : x + w, :3].astype(np.float32)
    blended = art[..., :3] + region * (1.0 - alpha)
    canvas[y : y + h, x : x + w, :3] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
    return canvas
