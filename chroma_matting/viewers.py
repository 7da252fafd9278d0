"""Utility helpers for producing quick visualizations."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import cv2
import numpy as np


def checkerboard(height: int, width: int, cell: int = 8) -> np.ndarray:
    """Light/dark gray RGB checkerboard, the usual backdrop for transparency."""

    ys, xs = np.indices((height, width))
    dark = ((ys // cell + xs // cell) % 2).astype(bool)
    board = np.full((height, width, 3), 230, dtype=np.uint8)
    board[dark] = 170
    return board


def over_checkerboard(img: np.ndarray, cell: int = 8) -> np.ndarray:
    """Composite an RGBA grid over a checkerboard; RGB passes through."""

    if img.ndim == 2:
        return np.repeat(img[:, :, None], 3, axis=2)
    if img.shape[2] == 3:
        return img
    board = checkerboard(img.shape[0], img.shape[1], cell).astype(np.float32)
    alpha = img[..., 3:4].astype(np.float32) / 255.0
    out = img[..., :3].astype(np.float32) * alpha + board * (1.0 - alpha)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def save_strip(images: Iterable[np.ndarray], path: str | Path, gap: int = 4) -> Path:
    """Save a horizontal strip of uint8 RGB/RGBA images for quick inspection."""

    path = Path(path)
    imgs = [over_checkerboard(img) for img in images]
    if not imgs:
        raise ValueError("No images provided")
    max_height = max(img.shape[0] for img in imgs)
    padded = []
    for i, img in enumerate(imgs):
        padded.append(_pad_to_height(img, max_height))
        if gap > 0 and i < len(imgs) - 1:
            padded.append(np.full((max_height, gap, 3), 255, dtype=np.uint8))
    strip = np.concatenate(padded, axis=1)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), cv2.cvtColor(strip, cv2.COLOR_RGB2BGR)):
        raise RuntimeError(f"Unable to write preview: {path}")
    return path


def _pad_to_height(img: np.ndarray, height: int) -> np.ndarray:
    if img.shape[0] == height:
        return img
    pad = height - img.shape[0]
    top = pad // 2
    bottom = pad - top
    return cv2.copyMakeBorder(img, top, bottom, 0, 0, cv2.BORDER_CONSTANT, value=(255, 255, 255))
