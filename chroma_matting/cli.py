"""Command line interface for chroma-matting."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from .config import Config, parse_size
from .engine import remove_background
from .io_utils import load_image_rgba, save_rgba_png
from .runners.batch import collect_inputs, run_batch
from .viewers import save_strip


def _add_matting_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", help="YAML configuration file", default=None)
    p.add_argument("--key-color", dest="key_color", default=None,
                   help="Background colour to remove, e.g. '#00FF00'")
    p.add_argument("--similarity", dest="key_similarity", type=float, default=None,
                   help="0-100; higher widens the matched hue range")
    p.add_argument("--legacy-thresholds", dest="key_legacy_thresholds", action="store_true")
    p.set_defaults(key_legacy_thresholds=None)
    p.add_argument("--hole-seed", dest="key_hole_seed_distance", type=float, default=None)
    p.add_argument("--fit", dest="fit", default=None,
                   help="Letterbox onto a fixed canvas, e.g. 370x320")
    p.add_argument("--spill-mode", dest="refine_spill_mode", choices=("desaturate", "clamp"), default=None)
    p.add_argument("--spill-band", dest="refine_spill_band", type=float, default=None)
    p.add_argument("--spill-strength", dest="refine_spill_strength", type=float, default=None)
    p.add_argument("--feather", dest="refine_feather", action="store_true")
    p.add_argument("--no-feather", dest="refine_feather", action="store_false")
    p.set_defaults(refine_feather=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chroma-matting")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="Remove the key-colour background from one image")
    run_p.add_argument("--image", required=True)
    run_p.add_argument("--out", required=True)
    _add_matting_args(run_p)

    batch_p = sub.add_parser("batch", help="Process a folder or list of images")
    batch_p.add_argument("--input", dest="inputs", nargs="+", required=True)
    batch_p.add_argument("--out-dir", dest="output_dir", required=True)
    batch_p.add_argument("--workers", dest="batch_workers", type=int, default=None)
    batch_p.add_argument("--prefix", dest="batch_prefix", default=None)
    _add_matting_args(batch_p)

    view_p = sub.add_parser("view", help="Create quick viewer strips")
    view_p.add_argument("--image", required=True)
    view_p.add_argument("--result")
    view_p.add_argument("--out", required=True)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run":
        cfg = _load_config(args)
        result = remove_background(args.image, cfg.to_options())
        output_path = save_rgba_png(args.out, result.rgba)
        stats = result.stats
        key_hex = "".join(f"{c:02X}" for c in stats["key_rgb"])
        print(
            f"Key: #{key_hex} | size: {stats['width']}x{stats['height']}\n"
            f"Cleared: {stats['background_pixels']} border + {stats['hole_pixels']} holes | "
            f"spill: {stats['spill_pixels']} | feathered: {stats['feathered_pixels']} | "
            f"wall: {stats['wall_time']:.3f}s"
        )
        ms = ", ".join(f"{name} {t * 1000:.1f}" for name, t in stats["pass_times"].items())
        print(f"Per-pass ms: [{ms}]")
        print(f"Saved: {output_path}")
        return 0

    if args.command == "batch":
        cfg = _load_config(args)
        sources = collect_inputs(args.inputs, cfg.batch.extensions)
        if not sources:
            print("No input images found")
            return 1
        outcome = run_batch(
            sources,
            args.output_dir,
            cfg.to_options(),
            workers=max(1, int(cfg.batch.workers)),
            prefix=cfg.batch.prefix,
        )
        for item in outcome["items"]:
            detail = item.output if item.status == "success" else item.error
            print(f"[{item.status}] {item.source.name}: {detail}")
        stats = outcome["stats"]
        print(
            f"Processed: {stats['total']} | ok: {stats['succeeded']} | failed: {stats['failed']} | "
            f"wall: {stats['wall_time']:.2f}s"
        )
        return 0 if stats["failed"] == 0 else 1

    if args.command == "view":
        images = [load_image_rgba(args.image)]
        if args.result:
            images.append(load_image_rgba(args.result))
        path = save_strip(images, args.out)
        print(f"Saved: {path}")
        return 0

    return 2


def _load_config(args) -> Config:
    cfg = Config.from_yaml(args.config) if args.config else Config()
    cfg.update_from_namespace(args)
    if args.fit:
        cfg.canvas.fit = True
        cfg.canvas.width, cfg.canvas.height = parse_size(args.fit)
    return cfg


if __name__ == "__main__":
    raise SystemExit(main())
