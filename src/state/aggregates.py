"""Immutable aggregation state carried by pools and banks.

Update rules live in `src/core/aggregation.py`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


def _require_nonneg_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


@dataclass(frozen=True)
class TradeTotals:
    """Lifetime and rolling-24h traded volume per side."""

    total_x: int = 0
    total_y: int = 0
    window_start: int = 0
    window_x: int = 0
    window_y: int = 0

    def __post_init__(self) -> None:
        for name in ("total_x", "total_y", "window_start", "window_x", "window_y"):
            _require_nonneg_int(name, getattr(self, name))


@dataclass(frozen=True)
class ReserveSnapshot:
    """Last captured reserve pair."""

    last_capture_time: int = 0
    reserve_x: int = 0
    reserve_y: int = 0

    def __post_init__(self) -> None:
        for name in ("last_capture_time", "reserve_x", "reserve_y"):
            _require_nonneg_int(name, getattr(self, name))


@dataclass(frozen=True)
class SmaBucket:
    bucket_start: int
    total: int
    count: int

    def __post_init__(self) -> None:
        _require_nonneg_int("bucket_start", self.bucket_start)
        _require_nonneg_int("total", self.total)
        _require_nonneg_int("count", self.count)
        if self.count == 0:
            raise ValueError("bucket must hold at least one sample")

    @property
    def value(self) -> int:
        return self.total // self.count


@dataclass(frozen=True)
class WeeklySma:
    """Per-day sample buckets, oldest first."""

    buckets: Tuple[SmaBucket, ...] = ()

    def __post_init__(self) -> None:
        starts = [b.bucket_start for b in self.buckets]
        if starts != sorted(set(starts)):
            raise ValueError("buckets must be strictly ordered by bucket_start")
