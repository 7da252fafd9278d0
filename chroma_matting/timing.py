"""Per-pass timing."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator


@dataclass
class PassTimer:
    """Collects named pass durations in the order the passes ran."""

    records: Dict[str, float] = field(default_factory=dict)

    @contextmanager
    def time(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.records[name] = self.records.get(name, 0.0) + (time.perf_counter() - start)

    @property
    def total(self) -> float:
        return float(sum(self.records.values()))

    def summary(self) -> str:
        return ", ".join(f"{name} {secs * 1000:.1f}ms" for name, secs in self.records.items())
