"""Helper script for turning a folder of generated stickers into upload-ready PNGs.

Update ``SRC_DIR`` and ``OUT_DIR`` (and ``KEY_COLOR`` if the generator was asked
for a background other than pure green) before running.  Every image is
letterboxed onto the 370x320 main canvas, matted, and additionally exported at
the 96x74 tab size.  Failed images are listed at the end and skipped.
"""

from __future__ import annotations

import sys
from pathlib import Path

from chroma_matting.canvas import STICKER_MAIN_SIZE, STICKER_TAB_SIZE, resize_rgba
from chroma_matting.config import MattingOptions
from chroma_matting.io_utils import ensure_dir, load_image_rgba, save_rgba_png
from chroma_matting.runners.batch import collect_inputs, run_batch

# --- customise these for your run ---
SRC_DIR = Path("generated")
OUT_DIR = Path("build/stickers")
KEY_COLOR = "#00FF00"
SIMILARITY = 40
WORKERS = 2


def main() -> int:
    sources = collect_inputs([SRC_DIR], [".png", ".jpg", ".jpeg", ".webp"])
    if not sources:
        print(f"No images found in {SRC_DIR}")
        return 1

    options = MattingOptions(key_color=KEY_COLOR, similarity=SIMILARITY, fit_to_canvas=STICKER_MAIN_SIZE)
    outcome = run_batch(sources, OUT_DIR / "main", options, workers=WORKERS, prefix="")

    tab_dir = ensure_dir(OUT_DIR / "tab")
    failed = []
    for item in outcome["items"]:
        if item.status != "success":
            failed.append(item)
            continue
        tab = resize_rgba(load_image_rgba(item.output), STICKER_TAB_SIZE)
        save_rgba_png(tab_dir / item.output.name, tab)

    stats = outcome["stats"]
    print(f"Exported {stats['succeeded']}/{stats['total']} stickers to {OUT_DIR} in {stats['wall_time']:.2f}s")
    for item in failed:
        print(f"  failed: {item.source} ({item.error})")
    return 0 if not failed else 1


if __name__ == "__main__":
    sys.exit(main())
