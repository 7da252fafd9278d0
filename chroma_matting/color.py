"""Colour helpers: HSL conversion, key thresholds and the background predicate."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]
HSL = Tuple[float, float, float]

DEFAULT_KEY_COLOR: RGB = (0, 255, 0)

LIGHTNESS_BOUNDS: Tuple[float, float] = (0.10, 0.98)
FAST_PATH_DISTANCE = 30.0

LEGACY_LIGHTNESS_BOUNDS: Tuple[float, float] = (0.12, 0.95)
LEGACY_FAST_PATH_DISTANCE = 18.0

STRICT_HUE_FACTOR = 0.7


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    """Convert 0-255 RGB to hue in degrees, saturation and lightness in [0, 1]."""

    r, g, b = r / 255.0, g / 255.0, b / 255.0
    hi = max(r, g, b)
    lo = min(r, g, b)
    l = (hi + lo) / 2.0
    if hi == lo:
        return 0.0, 0.0, l

    d = hi - lo
    s = d / (2.0 - hi - lo) if l > 0.5 else d / (hi + lo)
    if hi == r:
        h = (g - b) / d + (6.0 if g < b else 0.0)
    elif hi == g:
        h = (b - r) / d + 2.0
    else:
        h = (r - g) / d + 4.0
    return h * 60.0, s, l


def rgb_to_hsl_array(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Vectorised :func:`rgb_to_hsl` over an ``(..., 3)`` array."""

    if rgb.shape[-1] != 3:
        raise ValueError("Expected an array with 3 channels in the last axis")
    arr = rgb.astype(np.float64) / 255.0
    r, g, b = arr[..., 0], arr[..., 1], arr[..., 2]
    hi = arr.max(axis=-1)
    lo = arr.min(axis=-1)
    l = (hi + lo) / 2.0
    d = hi - lo
    chroma = d > 0
    safe_d = np.where(chroma, d, 1.0)

    denom = np.where(l > 0.5, 2.0 - hi - lo, hi + lo)
    s = np.where(chroma, d / np.where(denom > 0, denom, 1.0), 0.0)

    # Sector selection mirrors the scalar branch order: r, then g, then b.
    is_r = hi == r
    is_g = ~is_r & (hi == g)
    h = np.where(
        is_r,
        (g - b) / safe_d + np.where(g < b, 6.0, 0.0),
        np.where(is_g, (b - r) / safe_d + 2.0, (r - g) / safe_d + 4.0),
    )
    h = np.where(chroma, h * 60.0, 0.0)
    return h, s, l


def parse_hex_color(value: object, default: RGB = DEFAULT_KEY_COLOR) -> RGB:
    """Parse ``#RGB`` / ``#RRGGBB`` (``#`` optional); fall back to ``default``."""

    if isinstance(value, (tuple, list)) and len(value) == 3:
        try:
            return tuple(max(0, min(255, int(v))) for v in value)  # type: ignore[return-value]
        except (TypeError, ValueError):
            logger.debug("Unusable key colour %r, using default", value)
            return default
    if not isinstance(value, str):
        logger.debug("Unusable key colour %r, using default", value)
        return default
    raw = value.strip().lstrip("#")
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) != 6:
        logger.debug("Unusable key colour %r, using default", value)
        return default
    try:
        return int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16)
    except ValueError:
        logger.debug("Unusable key colour %r, using default", value)
        return default


def hue_distance(h: float, key_h: float) -> float:
    d = abs(h - key_h)
    if d > 180.0:
        d = 360.0 - d
    return d


def hue_distance_array(h: np.ndarray, key_h: float) -> np.ndarray:
    d = np.abs(h - key_h)
    return np.where(d > 180.0, 360.0 - d, d)


@dataclass(frozen=True)
class KeyThresholds:
    """Per-call matching parameters derived from the key colour."""

    key_rgb: RGB
    key_hsl: HSL
    hue_tolerance: float
    saturation_threshold: float
    lightness_bounds: Tuple[float, float] = LIGHTNESS_BOUNDS
    fast_path_distance: float = FAST_PATH_DISTANCE

    @property
    def key_hue(self) -> float:
        return self.key_hsl[0]


def derive_thresholds(
    key_rgb: RGB,
    similarity: float,
    lightness_bounds: Tuple[float, float] = LIGHTNESS_BOUNDS,
    fast_path_distance: float = FAST_PATH_DISTANCE,
) -> KeyThresholds:
    """Compute the tolerance cone for ``key_rgb`` at ``similarity`` (0-100).

    Higher similarity widens the hue cone from 20 up to 80 degrees. The
    saturation floor never drops below 0.1 so near-gray keys stay usable.
    """

    s = max(0.0, min(100.0, float(similarity)))
    key_hsl = rgb_to_hsl(*key_rgb)
    return KeyThresholds(
        key_rgb=tuple(int(c) for c in key_rgb),  # type: ignore[arg-type]
        key_hsl=key_hsl,
        hue_tolerance=20.0 + 0.6 * s,
        saturation_threshold=max(0.1, key_hsl[1] * 0.5),
        lightness_bounds=(float(lightness_bounds[0]), float(lightness_bounds[1])),
        fast_path_distance=float(fast_path_distance),
    )


def key_distance(rgb: RGB, key_rgb: RGB) -> float:
    return math.sqrt(sum((int(c) - int(k)) ** 2 for c, k in zip(rgb, key_rgb)))


def key_distance_array(rgb: np.ndarray, key_rgb: RGB) -> np.ndarray:
    diff = rgb.astype(np.float64) - np.asarray(key_rgb, dtype=np.float64)
    return np.sqrt((diff * diff).sum(axis=-1))


def is_match(rgb: RGB, thresholds: KeyThresholds, strict: bool = False) -> bool:
    """Return ``True`` when ``rgb`` reads as the key colour."""

    if key_distance(rgb, thresholds.key_rgb) < thresholds.fast_path_distance:
        return True

    h, s, l = rgb_to_hsl(*rgb)
    lo, hi = thresholds.lightness_bounds
    if l < lo or l > hi or s < thresholds.saturation_threshold:
        return False

    tolerance = thresholds.hue_tolerance * (STRICT_HUE_FACTOR if strict else 1.0)
    return hue_distance(h, thresholds.key_hue) <= tolerance


def match_mask(rgb: np.ndarray, thresholds: KeyThresholds, strict: bool = False) -> np.ndarray:
    """Evaluate :func:`is_match` over an ``(H, W, 3)`` array, returning a bool mask."""

    fast = key_distance_array(rgb, thresholds.key_rgb) < thresholds.fast_path_distance
    h, s, l = rgb_to_hsl_array(rgb)
    lo, hi = thresholds.lightness_bounds
    tolerance = thresholds.hue_tolerance * (STRICT_HUE_FACTOR if strict else 1.0)
    cone = (
        (l >= lo)
        & (l <= hi)
        & (s >= thresholds.saturation_threshold)
        & (hue_distance_array(h, thresholds.key_hue) <= tolerance)
    )
    return fast | cone
