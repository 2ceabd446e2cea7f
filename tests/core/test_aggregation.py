from __future__ import annotations

import pytest

from src.core.aggregation import (
    KSP_SCALE,
    SMA_BUCKET_SECONDS,
    TRADE_WINDOW_SECONDS,
    capture_reserves,
    ksp_sample,
    record_trade,
    sma_add_sample,
    sma_value,
)
from src.core.errors import InvalidParameterError
from src.kernels.python.u256 import U256
from src.state.aggregates import ReserveSnapshot, SmaBucket, TradeTotals, WeeklySma

DAY = SMA_BUCKET_SECONDS


def test_trade_window_resets_only_strictly_after_24h() -> None:
    totals = TradeTotals(total_x=5, total_y=5, window_start=1000, window_x=5, window_y=5)

    same = record_trade(totals, 1, 2, 1000 + TRADE_WINDOW_SECONDS)
    assert (same.window_start, same.window_x, same.window_y) == (1000, 6, 7)

    reset = record_trade(totals, 1, 2, 1000 + TRADE_WINDOW_SECONDS + 1)
    assert (reset.window_start, reset.window_x, reset.window_y) == (1000 + TRADE_WINDOW_SECONDS + 1, 1, 2)
    assert (reset.total_x, reset.total_y) == (6, 7)


def test_trade_without_clock_keeps_window_untouched() -> None:
    totals = TradeTotals(window_start=1000, window_x=5, window_y=5)
    out = record_trade(totals, 10, 20, 0)
    assert (out.total_x, out.total_y) == (10, 20)
    assert (out.window_start, out.window_x, out.window_y) == (1000, 5, 5)


def test_record_trade_rejects_negative_inputs() -> None:
    with pytest.raises(InvalidParameterError):
        record_trade(TradeTotals(), -1, 0, 10)
    with pytest.raises(InvalidParameterError):
        record_trade(TradeTotals(), 1, 0, -10)


def test_reserve_snapshot_cadence() -> None:
    snap = ReserveSnapshot(last_capture_time=1000, reserve_x=1, reserve_y=1)
    assert capture_reserves(snap, 7, 8, 1900) is snap
    assert capture_reserves(snap, 7, 8, 1901) == ReserveSnapshot(1901, 7, 8)
    assert capture_reserves(snap, 7, 8, 0) is snap


def test_ksp_sample() -> None:
    assert ksp_sample(U256(1000), 0) is None
    assert ksp_sample(U256(1000), 10) == 1000 * KSP_SCALE // 10


def test_sma_averages_bucket_means() -> None:
    sma = WeeklySma()
    sma = sma_add_sample(sma, 100, 10 * DAY + 5)
    sma = sma_add_sample(sma, 200, 10 * DAY + 500)
    sma = sma_add_sample(sma, 300, 11 * DAY + 5)
    assert [b.value for b in sma.buckets] == [150, 300]
    assert sma_value(sma) == 225


def test_sma_evicts_buckets_older_than_a_week() -> None:
    sma = WeeklySma()
    sma = sma_add_sample(sma, 100, 10 * DAY)
    sma = sma_add_sample(sma, 300, 11 * DAY)

    # day 10 ages out exactly seven days later
    sma = sma_add_sample(sma, 500, 17 * DAY + 1)
    assert [b.bucket_start for b in sma.buckets] == [11 * DAY, 17 * DAY]
    assert sma_value(sma) == 400

    # reading far in the future ignores stale buckets
    assert sma_value(sma, now=30 * DAY) == 0


def test_sma_without_clock_is_noop_and_rejects_time_travel() -> None:
    sma = WeeklySma(buckets=(SmaBucket(bucket_start=5 * DAY, total=10, count=1),))
    assert sma_add_sample(sma, 99, 0) is sma
    with pytest.raises(InvalidParameterError):
        sma_add_sample(sma, 99, 4 * DAY)


def test_weekly_sma_requires_ordered_buckets() -> None:
    with pytest.raises(ValueError):
        WeeklySma(
            buckets=(
                SmaBucket(bucket_start=2 * DAY, total=1, count=1),
                SmaBucket(bucket_start=DAY, total=1, count=1),
            )
        )
