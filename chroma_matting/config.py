"""Configuration helpers for chroma-matting."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .canvas import STICKER_MAIN_SIZE
from .color import (
    FAST_PATH_DISTANCE,
    LEGACY_FAST_PATH_DISTANCE,
    LEGACY_LIGHTNESS_BOUNDS,
    LIGHTNESS_BOUNDS,
    RGB,
    parse_hex_color,
)
from .mask_utils import HOLE_SEED_DISTANCE
from .refine import SPILL_BAND, SPILL_MODES, SPILL_STRENGTH


@dataclass
class KeyConfig:
    """Key colour and matching tolerance."""

    color: str = "#00FF00"
    similarity: float = 40.0
    legacy_thresholds: bool = False
    hole_seed_distance: float = HOLE_SEED_DISTANCE

    def __post_init__(self) -> None:
        # Unquoted all-digit colours such as 000000 load from YAML as ints.
        if isinstance(self.color, int) and not isinstance(self.color, bool) and 0 <= self.color <= 999999:
            self.color = f"{self.color:06d}"
        elif not isinstance(self.color, str):
            self.color = str(self.color)


@dataclass
class RefineConfig:
    """Spill suppression and feathering toggles."""

    spill_mode: str = "desaturate"
    spill_band: float = SPILL_BAND
    spill_strength: float = SPILL_STRENGTH
    feather: bool = True


@dataclass
class CanvasConfig:
    """Optional fixed output canvas."""

    fit: bool = False
    width: int = STICKER_MAIN_SIZE[0]
    height: int = STICKER_MAIN_SIZE[1]


@dataclass
class BatchConfig:
    """Batch runner settings."""

    workers: int = 1
    prefix: str = "removed_bg_"
    extensions: List[str] = field(default_factory=lambda: [".png", ".jpg", ".jpeg", ".webp", ".bmp"])


@dataclass
class MattingOptions:
    """Resolved per-call parameters for :func:`chroma_matting.engine.remove_background`."""

    key_color: Any = "#00FF00"
    similarity: float = 40.0
    fit_to_canvas: Optional[Tuple[int, int]] = None
    lightness_bounds: Tuple[float, float] = LIGHTNESS_BOUNDS
    fast_path_distance: float = FAST_PATH_DISTANCE
    hole_seed_distance: float = HOLE_SEED_DISTANCE
    spill_mode: str = "desaturate"
    spill_band: float = SPILL_BAND
    spill_strength: float = SPILL_STRENGTH
    feather: bool = True

    def __post_init__(self) -> None:
        try:
            self.similarity = max(0.0, min(100.0, float(self.similarity)))
        except (TypeError, ValueError):
            self.similarity = 40.0
        self.spill_strength = max(0.0, min(1.0, float(self.spill_strength)))
        if self.spill_mode not in SPILL_MODES:
            raise ValueError(f"spill_mode must be one of {SPILL_MODES}, got {self.spill_mode!r}")
        if self.fit_to_canvas is not None:
            self.fit_to_canvas = _as_size(self.fit_to_canvas)
        lo, hi = (float(v) for v in self.lightness_bounds)
        if lo > hi:
            raise ValueError(f"Invalid lightness bounds: {self.lightness_bounds}")
        self.lightness_bounds = (lo, hi)

    @property
    def key_rgb(self) -> RGB:
        return parse_hex_color(self.key_color)


@dataclass
class Config:
    """Top level configuration."""

    key: KeyConfig = field(default_factory=KeyConfig)
    refine: RefineConfig = field(default_factory=RefineConfig)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError("YAML configuration must be a mapping at the top level")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        return cls(
            key=_coerce(KeyConfig, data.get("key", {})),
            refine=_coerce(RefineConfig, data.get("refine", {})),
            canvas=_coerce(CanvasConfig, data.get("canvas", {})),
            batch=_coerce(BatchConfig, data.get("batch", {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": vars(self.key),
            "refine": vars(self.refine),
            "canvas": vars(self.canvas),
            "batch": {
                "workers": self.batch.workers,
                "prefix": self.batch.prefix,
                "extensions": list(self.batch.extensions),
            },
        }

    def update_from_namespace(self, ns: Any) -> None:
        for name, cls_type in (
            ("key", KeyConfig),
            ("refine", RefineConfig),
            ("canvas", CanvasConfig),
            ("batch", BatchConfig),
        ):
            section = getattr(self, name)
            for key, _ in cls_type.__annotations__.items():
                attr = f"{name}_{key}"
                if hasattr(ns, attr):
                    val = getattr(ns, attr)
                    if val is not None:
                        setattr(section, key, val)

    def to_options(self) -> MattingOptions:
        if self.key.legacy_thresholds:
            bounds, fast = LEGACY_LIGHTNESS_BOUNDS, LEGACY_FAST_PATH_DISTANCE
        else:
            bounds, fast = LIGHTNESS_BOUNDS, FAST_PATH_DISTANCE
        return MattingOptions(
            key_color=self.key.color,
            similarity=self.key.similarity,
            fit_to_canvas=(self.canvas.width, self.canvas.height) if self.canvas.fit else None,
            lightness_bounds=bounds,
            fast_path_distance=fast,
            hole_seed_distance=self.key.hole_seed_distance,
            spill_mode=self.refine.spill_mode,
            spill_band=self.refine.spill_band,
            spill_strength=self.refine.spill_strength,
            feather=self.refine.feather,
        )


def parse_size(value: str) -> Tuple[int, int]:
    """Parse ``"370x320"`` into ``(370, 320)``."""

    parts = value.lower().replace(",", "x").split("x")
    if len(parts) != 2:
        raise ValueError(f"Expected WIDTHxHEIGHT, got {value!r}")
    return _as_size((parts[0], parts[1]))


def _as_size(value: Any) -> Tuple[int, int]:
    try:
        w, h = (int(v) for v in value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid canvas size: {value!r}") from exc
    if w <= 0 or h <= 0:
        raise ValueError(f"Canvas size must be positive: {value!r}")
    return w, h


def _coerce(cls: Any, value: Any) -> Any:
    if isinstance(value, cls):
        return value
    if isinstance(value, dict):
        return cls(**value)
    raise TypeError(f"Cannot coerce {value!r} to {cls}")
