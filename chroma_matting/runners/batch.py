"""Batch matting over many images, sequentially or across worker processes."""

from __future__ import annotations

import logging
import multiprocessing as mp
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..config import MattingOptions
from ..engine import remove_background
from ..io_utils import ensure_dir, save_rgba_png

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    """Outcome for one input image."""

    source: Path
    status: str = "idle"
    output: Optional[Path] = None
    error: Optional[str] = None
    stats: Dict[str, Any] = field(default_factory=dict)


def collect_inputs(paths: Iterable[str | Path], extensions: Sequence[str]) -> List[Path]:
    """Expand directories into their image files, keeping explicit files as given."""

    exts = {e.lower() for e in extensions}
    found: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found.extend(sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in exts))
        else:
            found.append(path)
    return found


def output_path_for(source: Path, out_dir: Path, prefix: str) -> Path:
    return out_dir / f"{prefix}{source.stem}.png"


def process_one(source: Path, out_dir: Path, options: MattingOptions, prefix: str) -> BatchItem:
    """Matte a single file; failures are recorded on the item, not raised."""

    item = BatchItem(source=source, status="processing")
    try:
        result = remove_background(source, options)
        item.output = save_rgba_png(output_path_for(source, out_dir, prefix), result.rgba)
        item.stats = result.stats
        item.status = "success"
    except (ValueError, OSError, RuntimeError) as exc:
        logger.warning("Failed to process %s: %s", source, exc)
        item.status = "error"
        item.error = str(exc)
    return item


def run_batch(
    sources: Sequence[str | Path],
    out_dir: str | Path,
    options: Optional[MattingOptions] = None,
    workers: int = 1,
    prefix: str = "removed_bg_",
) -> Dict[str, Any]:
    """Process ``sources`` into ``out_dir``.

    Each image gets its own buffers, so images can run in separate processes
    when ``workers > 1``. Results keep the input order.
    """

    opts = options or MattingOptions()
    out = ensure_dir(out_dir)
    paths = [Path(s) for s in sources]
    start_wall = time.perf_counter()

    if workers > 1 and len(paths) > 1:
        ctx = mp.get_context("spawn")
        with ctx.Pool(processes=min(workers, len(paths))) as pool:
            items = pool.starmap(process_one, [(p, out, opts, prefix) for p in paths])
    else:
        items = [process_one(p, out, opts, prefix) for p in paths]

    succeeded = sum(1 for item in items if item.status == "success")
    return {
        "items": items,
        "stats": {
            "total": len(items),
            "succeeded": succeeded,
            "failed": len(items) - succeeded,
            "wall_time": time.perf_counter() - start_wall,
        },
    }
