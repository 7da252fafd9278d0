"""Classification mask and the reachability passes (border fill, enclosed holes)."""

from __future__ import annotations

import cv2
import numpy as np

from .color import KeyThresholds, key_distance_array, match_mask

UNKNOWN = 0
BACKGROUND = 1
FOREGROUND = 2

HOLE_SEED_DISTANCE = 35.0

_CROSS = cv2.getStructuringElement(cv2.MORPH_CROSS, (3, 3))


def new_mask(height: int, width: int) -> np.ndarray:
    return np.full((height, width), UNKNOWN, dtype=np.uint8)


def components_4(mask_bin: np.ndarray) -> np.ndarray:
    """Label 4-connected components of a boolean mask (0 = not in mask)."""

    if mask_bin.ndim != 2:
        raise ValueError("Mask must be 2D")
    _, labels = cv2.connectedComponents(mask_bin.astype(np.uint8), connectivity=4)
    return labels


def border_labels(labels: np.ndarray) -> np.ndarray:
    edge = np.concatenate((labels[0, :], labels[-1, :], labels[:, 0], labels[:, -1]))
    found = np.unique(edge)
    return found[found != 0]


def flood_fill_from_border(
    grid: np.ndarray,
    mask: np.ndarray,
    thresholds: KeyThresholds,
    matches: np.ndarray | None = None,
) -> int:
    """Clear every key-coloured pixel reachable from the image border.

    Equivalent to a multi-source 4-connected BFS seeded with all border pixels:
    a matching pixel becomes BACKGROUND (alpha 0) and spreads, a non-matching
    one becomes FOREGROUND and stops. Returns the number of cleared pixels.
    """

    if matches is None:
        matches = match_mask(grid[..., :3], thresholds)
    labels = components_4(matches)
    reached = np.isin(labels, border_labels(labels)) & matches

    visited = cv2.dilate(reached.astype(np.uint8), _CROSS) > 0
    visited[0, :] = True
    visited[-1, :] = True
    visited[:, 0] = True
    visited[:, -1] = True

    mask[visited & ~matches] = FOREGROUND
    mask[reached] = BACKGROUND
    grid[..., 3][reached] = 0
    return int(reached.sum())


def remove_enclosed_holes(
    grid: np.ndarray,
    mask: np.ndarray,
    thresholds: KeyThresholds,
    seed_distance: float = HOLE_SEED_DISTANCE,
    matches: np.ndarray | None = None,
) -> int:
    """Clear key-coloured regions the border fill could not reach.

    A region is only grown from a seed that sits within ``seed_distance`` of the
    key in RGB and passes the strict predicate, so greenish clothing is left
    alone unless it contains near-pure key pixels. Must run after
    :func:`flood_fill_from_border`. Returns the number of cleared pixels.
    """

    rgb = grid[..., :3]
    if matches is None:
        matches = match_mask(rgb, thresholds)
    candidates = matches & (mask != BACKGROUND)
    if not candidates.any():
        return 0

    seeds = (
        candidates
        & (key_distance_array(rgb, thresholds.key_rgb) < seed_distance)
        & match_mask(rgb, thresholds, strict=True)
    )
    if not seeds.any():
        return 0

    labels = components_4(candidates)
    seeded = np.unique(labels[seeds])
    holes = np.isin(labels, seeded[seeded != 0])

    mask[holes] = BACKGROUND
    grid[..., 3][holes] = 0
    return int(holes.sum())
