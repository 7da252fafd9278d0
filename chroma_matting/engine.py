"""Chroma-key matting: remove a uniform key-coloured background from one image."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from .canvas import fit_to_canvas
from .color import derive_thresholds, match_mask
from .config import MattingOptions
from .io_utils import Source, encode_png, load_image_rgba, to_data_uri
from .mask_utils import flood_fill_from_border, new_mask, remove_enclosed_holes
from .refine import feather_alpha, suppress_spill
from .timing import PassTimer

logger = logging.getLogger(__name__)


@dataclass
class MattingResult:
    rgba: np.ndarray
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def size(self):
        return self.rgba.shape[1], self.rgba.shape[0]

    def to_png_bytes(self) -> bytes:
        return encode_png(self.rgba)

    def to_data_uri(self) -> str:
        return to_data_uri(self.to_png_bytes())


def remove_background(source: Source, options: Optional[MattingOptions] = None) -> MattingResult:
    """Make the key-coloured background of ``source`` transparent.

    ``source`` may be encoded bytes, a file path, a ``data:`` URI or an RGB/RGBA
    uint8 array; the caller's array is never modified. Decode failures raise
    before any pass runs. Passes, in order: optional canvas fit, border flood
    fill, enclosed-hole removal, spill suppression, feathering.
    """

    opts = options or MattingOptions()
    start_wall = time.perf_counter()
    timer = PassTimer()

    with timer.time("decode"):
        grid = load_image_rgba(source)

    key_rgb = opts.key_rgb
    thresholds = derive_thresholds(
        key_rgb,
        opts.similarity,
        lightness_bounds=opts.lightness_bounds,
        fast_path_distance=opts.fast_path_distance,
    )

    if opts.fit_to_canvas is not None:
        with timer.time("fit"):
            grid = fit_to_canvas(grid, opts.fit_to_canvas, key_rgb)

    h, w = grid.shape[:2]
    mask = new_mask(h, w)

    # RGB is fixed until spill suppression, so both fills share one match mask.
    with timer.time("match"):
        matches = match_mask(grid[..., :3], thresholds)
    with timer.time("flood_fill"):
        background = flood_fill_from_border(grid, mask, thresholds, matches=matches)
    with timer.time("holes"):
        holes = remove_enclosed_holes(
            grid, mask, thresholds, seed_distance=opts.hole_seed_distance, matches=matches
        )
    with timer.time("spill"):
        spill = suppress_spill(
            grid,
            mask,
            thresholds,
            band=opts.spill_band,
            strength=opts.spill_strength,
            mode=opts.spill_mode,
        )
    feathered = 0
    if opts.feather:
        with timer.time("feather"):
            feathered = feather_alpha(grid, mask)

    stats = {
        "width": w,
        "height": h,
        "key_rgb": key_rgb,
        "hue_tolerance": thresholds.hue_tolerance,
        "background_pixels": background,
        "hole_pixels": holes,
        "spill_pixels": spill,
        "feathered_pixels": feathered,
        "pass_times": dict(timer.records),
        "pass_total": timer.total,
        "wall_time": time.perf_counter() - start_wall,
    }
    logger.debug(
        "Matted %dx%d: %d border + %d hole pixels cleared (%s)",
        w,
        h,
        background,
        holes,
        timer.summary(),
    )
    return MattingResult(rgba=grid, stats=stats)


def remove_background_to_data_uri(source: Source, options: Optional[MattingOptions] = None) -> str:
    """Run :func:`remove_background` and return a ``data:image/png`` URI."""

    return remove_background(source, options).to_data_uri()
