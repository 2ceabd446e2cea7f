"""
Time-windowed aggregation driven by an injected clock.

Every function here is pure and takes the current time ``now`` in seconds.
``now == 0`` means "do not touch time-dependent state"; internal calls and
unit tests use it to keep results independent of time.

- 24h trade totals restart once ``now > window_start + 86400``.
- Reserve snapshots are taken once ``now > last_capture + 900``.
- Bank snapshots are taken once ``now > last_capture + 21600``.
- The weekly SMA keeps one bucket per day for the last 7 days and averages
  the per-bucket means (simple, not weighted by sample count).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..kernels.python.u256 import U256
from ..state.aggregates import ReserveSnapshot, SmaBucket, TradeTotals, WeeklySma
from ..state.balances import Timestamp
from .errors import InvalidParameterError


TRADE_WINDOW_SECONDS = 86_400
SNAPSHOT_INTERVAL_SECONDS = 900
BANK_SNAPSHOT_INTERVAL_SECONDS = 21_600
SMA_WINDOW_SECONDS = 604_800
SMA_BUCKET_SECONDS = 86_400
KSP_SCALE = 10**8


def _require_time(now: Timestamp) -> None:
    if not isinstance(now, int) or isinstance(now, bool):
        raise TypeError("now must be an int")
    if now < 0:
        raise InvalidParameterError(f"now must be non-negative: {now}")


def record_trade(totals: TradeTotals, x_amount: int, y_amount: int, now: Timestamp) -> TradeTotals:
    """Add traded volume; lifetime totals always, the 24h window only when ``now != 0``."""
    _require_time(now)
    if x_amount < 0 or y_amount < 0:
        raise InvalidParameterError(f"trade amounts must be non-negative: ({x_amount}, {y_amount})")

    out = replace(totals, total_x=totals.total_x + x_amount, total_y=totals.total_y + y_amount)
    if now == 0:
        return out
    if now > out.window_start + TRADE_WINDOW_SECONDS:
        out = replace(out, window_start=now, window_x=0, window_y=0)
    return replace(out, window_x=out.window_x + x_amount, window_y=out.window_y + y_amount)


def should_capture(last_capture_time: Timestamp, now: Timestamp, interval: int) -> bool:
    return now != 0 and now > last_capture_time + interval


def capture_reserves(snapshot: ReserveSnapshot, reserve_x: int, reserve_y: int, now: Timestamp) -> ReserveSnapshot:
    _require_time(now)
    if not should_capture(snapshot.last_capture_time, now, SNAPSHOT_INTERVAL_SECONDS):
        return snapshot
    return ReserveSnapshot(last_capture_time=now, reserve_x=reserve_x, reserve_y=reserve_y)


def ksp_sample(invariant: U256, supply: int) -> Optional[int]:
    """invariant * 1e8 / supply, or None for an empty pool."""
    if supply == 0:
        return None
    return invariant.mul(U256(KSP_SCALE)).div(U256(supply)).value


def _bucket_start(now: Timestamp) -> int:
    return now - now % SMA_BUCKET_SECONDS


def _in_window(bucket: SmaBucket, current_bucket: int) -> bool:
    return bucket.bucket_start + SMA_WINDOW_SECONDS > current_bucket


def sma_add_sample(sma: WeeklySma, value: int, now: Timestamp) -> WeeklySma:
    _require_time(now)
    if now == 0:
        return sma
    if value < 0:
        raise InvalidParameterError(f"sample must be non-negative: {value}")

    current = _bucket_start(now)
    buckets = [b for b in sma.buckets if _in_window(b, current)]
    if buckets and buckets[-1].bucket_start > current:
        raise InvalidParameterError(
            f"sample time {now} is older than the latest bucket {buckets[-1].bucket_start}"
        )
    if buckets and buckets[-1].bucket_start == current:
        last = buckets[-1]
        buckets[-1] = SmaBucket(bucket_start=current, total=last.total + value, count=last.count + 1)
    else:
        buckets.append(SmaBucket(bucket_start=current, total=value, count=1))
    return WeeklySma(buckets=tuple(buckets))


def sma_value(sma: WeeklySma, now: Optional[Timestamp] = None) -> int:
    """
    Simple average of the per-bucket means.

    With ``now`` given, buckets that have aged out of the 7-day window are
    ignored. Returns 0 when there is nothing to average.
    """
    buckets = sma.buckets
    if now:
        current = _bucket_start(now)
        buckets = tuple(b for b in buckets if _in_window(b, current))
    if not buckets:
        return 0
    return sum(b.value for b in buckets) // len(buckets)
