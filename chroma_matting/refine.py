"""Edge refinement passes: spill suppression and alpha feathering."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .color import KeyThresholds, hue_distance_array, rgb_to_hsl_array
from .mask_utils import BACKGROUND

SPILL_BAND = 30.0
SPILL_STRENGTH = 0.5
SPILL_MODES = ("desaturate", "clamp")


def transparent_neighbour(alpha: np.ndarray) -> np.ndarray:
    """Boolean mask of pixels with at least one 4-neighbour at alpha 0."""

    clear = np.pad(alpha == 0, 1, mode="constant", constant_values=False)
    return clear[:-2, 1:-1] | clear[2:, 1:-1] | clear[1:-1, :-2] | clear[1:-1, 2:]


def suppress_spill(
    grid: np.ndarray,
    mask: np.ndarray,
    thresholds: KeyThresholds,
    band: float = SPILL_BAND,
    strength: float = SPILL_STRENGTH,
    mode: str = "desaturate",
) -> int:
    """Pull key-tinted edge pixels back towards neutral.

    Only opaque pixels bordering a cleared pixel, and whose hue sits within
    ``band`` degrees of the key hue, are touched. ``desaturate`` blends each
    channel towards the pixel's gray mean by ``strength``; ``clamp`` caps the
    key's dominant channel at the max of the other two. Returns the number of
    adjusted pixels.
    """

    if mode not in SPILL_MODES:
        raise ValueError(f"Unknown spill mode: {mode!r}")

    alpha = grid[..., 3]
    edge = (mask != BACKGROUND) & (alpha > 0) & transparent_neighbour(alpha)
    if not edge.any():
        return 0

    rgb = grid[..., :3][edge].astype(np.float64)
    h, _, _ = rgb_to_hsl_array(rgb)
    tinted = hue_distance_array(h, thresholds.key_hue) <= band
    if not tinted.any():
        return 0

    px = rgb[tinted]
    if mode == "desaturate":
        gray = px.mean(axis=1, keepdims=True)
        px = px + strength * (gray - px)
        changed = np.ones(len(px), dtype=bool)
    else:
        k = int(np.argmax(thresholds.key_rgb))
        others = np.delete(px, k, axis=1).max(axis=1)
        changed = px[:, k] > others
        px[changed, k] = others[changed]

    rgb[tinted] = px
    grid[..., :3][edge] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return int(changed.sum())


def feather_alpha(grid: np.ndarray, mask: Optional[np.ndarray] = None) -> int:
    """Soften hard 0/255 alpha steps with a 3x3 mean.

    Reads from a snapshot of the alpha channel so every output depends on the
    same prior state. The outer one-pixel border is never changed. When
    ``mask`` is given, BACKGROUND pixels keep alpha 0 so no key-coloured ring
    reappears around the subject. Returns the number of feathered pixels.
    """

    h, w = grid.shape[:2]
    if h < 3 or w < 3:
        return 0

    snap = grid[..., 3].astype(np.int32)
    cross = (snap[:-2, 1:-1], snap[2:, 1:-1], snap[1:-1, :-2], snap[1:-1, 2:])
    has_clear = np.zeros((h - 2, w - 2), dtype=bool)
    has_solid = np.zeros((h - 2, w - 2), dtype=bool)
    for n in cross:
        has_clear |= n == 0
        has_solid |= n == 255
    edge = has_clear & has_solid
    if mask is not None:
        edge &= mask[1:-1, 1:-1] != BACKGROUND
    if not edge.any():
        return 0

    total = np.zeros((h - 2, w - 2), dtype=np.int32)
    for dy in range(3):
        for dx in range(3):
            total += snap[dy : dy + h - 2, dx : dx + w - 2]
    mean = np.rint(total / 9.0).astype(np.uint8)

    grid[1:-1, 1:-1, 3][edge] = mean[edge]
    return int(edge.sum())
