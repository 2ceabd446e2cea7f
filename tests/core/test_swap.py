from __future__ import annotations

from dataclasses import replace

import pytest

from src.core.errors import (
    EmptyReservesError,
    FrozenError,
    InvalidParameterError,
    SlippageExceededError,
)
from src.core.fees import FeeConfig, FeeDirection
from src.core.liquidity import add_liquidity, create_pool
from src.core.swap import swap_x_to_y, swap_y_to_x
from src.state.pools import PoolKind, PoolState

NO_FEES = FeeConfig(admin_bps=0, lp_bps=0, incentive_bps=0, connect_bps=0, withdraw_bps=0)


def _pool(x: int, y: int, fees: FeeConfig = NO_FEES, direction: FeeDirection = FeeDirection.Y) -> PoolState:
    pool = create_pool("X", "Y", PoolKind.CPMM, fees, direction)
    return add_liquidity(pool, x, y).pool


def test_reference_swap_without_fees() -> None:
    pool = _pool(1000, 1000)
    res = swap_x_to_y(pool, 100)
    assert res.amount_out == 90
    assert res.pool.reserves == (1100, 910, pool.lsp_supply)
    assert res.token_in == "X"
    assert res.token_out == "Y"
    # input state untouched
    # isqrt(1000) ** 2 shares bootstrap the pool
    assert pool.reserves == (1000, 1000, 961)


def test_protocol_fee_taken_from_input_when_direction_matches() -> None:
    fees = FeeConfig(admin_bps=100, lp_bps=30, incentive_bps=0, connect_bps=0, withdraw_bps=0)
    pool = _pool(1_000_000, 1_000_000, fees, FeeDirection.X)
    res = swap_x_to_y(pool, 10_000)

    assert res.lp_fee == 30
    assert res.protocol_fees.admin == 100
    assert res.protocol_fee_token == "X"
    # priced on 10_000 - 30 - 100 = 9870
    assert res.amount_out == 9773
    # LP fee stays in the pool, admin fee leaves it
    assert res.pool.reserve_x == 1_000_000 + 9870 + 30
    assert res.pool.reserve_y == 1_000_000 - 9773


def test_protocol_fee_taken_from_output_when_direction_is_other_side() -> None:
    fees = FeeConfig(admin_bps=100, lp_bps=30, incentive_bps=0, connect_bps=0, withdraw_bps=0)
    pool = _pool(1_000_000, 1_000_000, fees, FeeDirection.Y)
    res = swap_x_to_y(pool, 10_000)

    # gross = floor(1e6 * 9970 / 1_009_970) = 9871, admin = floor(9871 * 1%) = 98
    assert res.protocol_fees.admin == 98
    assert res.protocol_fee_token == "Y"
    assert res.amount_out == 9871 - 98
    assert res.pool.reserve_x == 1_010_000
    assert res.pool.reserve_y == 1_000_000 - 9871


def test_reverse_direction_swap() -> None:
    pool = _pool(1000, 1000)
    res = swap_y_to_x(pool, 100)
    assert res.amount_out == 90
    assert res.pool.reserves[:2] == (910, 1100)
    assert res.token_in == "Y"


def test_constant_product_never_decreases() -> None:
    pool = _pool(123_457, 987_653, replace(NO_FEES, lp_bps=30))
    k0 = pool.reserve_x * pool.reserve_y
    for _ in range(20):
        pool = swap_x_to_y(pool, 1_111).pool
        pool = swap_y_to_x(pool, 7_777).pool
        k1 = pool.reserve_x * pool.reserve_y
        assert k1 >= k0
        k0 = k1


def test_swap_rejections() -> None:
    pool = _pool(1000, 1000)
    with pytest.raises(InvalidParameterError):
        swap_x_to_y(pool, 0)
    with pytest.raises(InvalidParameterError, match="too small"):
        swap_x_to_y(pool, 1)
    with pytest.raises(SlippageExceededError):
        swap_x_to_y(pool, 100, min_amount_out=91)
    with pytest.raises(FrozenError):
        swap_x_to_y(replace(pool, frozen=True), 100)

    empty = create_pool("X", "Y", PoolKind.CPMM, NO_FEES, FeeDirection.Y)
    with pytest.raises(EmptyReservesError):
        swap_x_to_y(empty, 100)


def test_swap_with_clock_updates_aggregates() -> None:
    pool = _pool(1000, 1000)
    res = swap_x_to_y(pool, 100, now=100_000)
    nxt = res.pool
    assert nxt.last_trade_time == 100_000
    assert nxt.trade.window_start == 100_000
    assert (nxt.trade.window_x, nxt.trade.window_y) == (100, 90)
    assert (nxt.trade.total_x, nxt.trade.total_y) == (100, 90)
    assert nxt.snapshot.last_capture_time == 100_000
    assert (nxt.snapshot.reserve_x, nxt.snapshot.reserve_y) == (1100, 910)
    assert len(nxt.ksp_sma.buckets) == 1


def test_swap_without_clock_only_accumulates_lifetime_totals() -> None:
    pool = _pool(1000, 1000)
    nxt = swap_x_to_y(pool, 100).pool
    assert nxt.last_trade_time == 0
    assert (nxt.trade.total_x, nxt.trade.total_y) == (100, 90)
    assert (nxt.trade.window_x, nxt.trade.window_y) == (0, 0)
    assert nxt.snapshot == pool.snapshot
    assert nxt.ksp_sma.buckets == ()


def test_stable_pool_swap_near_par() -> None:
    pool = create_pool(
        "USDC", "USDT", PoolKind.STABLE, NO_FEES, FeeDirection.X, x_decimals=6, y_decimals=8, amp=100
    )
    pool = add_liquidity(pool, 10**12, 10**14).pool
    assert pool.lsp_supply == 10**13

    res = swap_x_to_y(pool, 1000 * 10**6)
    assert 999 * 10**8 < res.amount_out < 1000 * 10**8


def test_stable_swap_from_y_on_skewed_pool() -> None:
    pool = create_pool(
        "X", "Y", PoolKind.STABLE, NO_FEES, FeeDirection.Y, x_decimals=18, y_decimals=18, amp=2
    )
    pool = replace(pool, reserve_x=617_027_554_952_421, reserve_y=6_926_918_809, lsp_supply=2_067_386_516_208)
    res = swap_y_to_x(pool, 207_861_188_797)
    assert res.amount_out > 0
    assert res.pool.reserve_y == 6_926_918_809 + 207_861_188_797
