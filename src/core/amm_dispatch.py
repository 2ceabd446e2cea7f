"""
Pool-kind dispatch for pricing, liquidity math and invariant checks.

Pools carry a `PoolKind`; every operation resolves it once here and calls
the matching kernel (constant product vs stable).
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional, Tuple

from ..kernels.python import cpmm_math, stableswap_math
from ..kernels.python.lp_math import validate_lsp_value_increase
from ..kernels.python.u256 import U256
from ..state.balances import Amount, Timestamp
from ..state.pools import PoolKind, PoolState
from .aggregation import capture_reserves, ksp_sample, record_trade, sma_add_sample
from .errors import FeatureNotImplementedError


def _unsupported(pool: PoolState) -> FeatureNotImplementedError:
    return FeatureNotImplementedError(f"unsupported pool kind: {pool.kind!r}")


def swap_output(pool: PoolState, amount_in: Amount, *, x_to_y: bool) -> Amount:
    """Gross output for ``amount_in`` (already net of input-side fees)."""
    x, y = pool.reserve_x, pool.reserve_y
    reserve_in, reserve_out = (x, y) if x_to_y else (y, x)
    if pool.kind == PoolKind.CPMM:
        return cpmm_math.compute_amount(amount_in, reserve_in, reserve_out)
    if pool.kind == PoolKind.STABLE:
        p = pool.stable
        scale_in, scale_out = (p.x_scale, p.y_scale) if x_to_y else (p.y_scale, p.x_scale)
        return stableswap_math.compute_amount_stable(
            amount_in, reserve_in, reserve_out, p.amp, scale_in, scale_out
        )
    raise _unsupported(pool)


def deposit_shares(pool: PoolState, x_added: Amount, y_added: Amount) -> Amount:
    x, y, supply = pool.reserves
    if pool.kind == PoolKind.CPMM:
        return cpmm_math.compute_deposit(x_added, y_added, x, y, supply)
    if pool.kind == PoolKind.STABLE:
        p = pool.stable
        return stableswap_math.compute_deposit_stable(
            x_added, y_added, x, y, supply, p.amp, p.x_scale, p.y_scale
        )
    raise _unsupported(pool)


def withdraw_amounts(pool: PoolState, shares: Amount) -> Tuple[Amount, Amount]:
    x, y, supply = pool.reserves
    if pool.kind == PoolKind.CPMM:
        return cpmm_math.compute_withdraw(x, y, supply, shares)
    if pool.kind == PoolKind.STABLE:
        p = pool.stable
        return stableswap_math.compute_withdraw_stable(x, y, supply, shares, p.amp, p.x_scale, p.y_scale)
    raise _unsupported(pool)


def invariant(pool: PoolState, x: Amount, y: Amount) -> U256:
    """Degree-1 invariant: isqrt(x * y) for CPMM, D (scaled units) for stable."""
    if pool.kind == PoolKind.CPMM:
        return U256(math.isqrt(cpmm_math.constant_product(x, y).value))
    if pool.kind == PoolKind.STABLE:
        p = pool.stable
        return stableswap_math.stable_invariant(x, y, p.amp, p.x_scale, p.y_scale)
    raise _unsupported(pool)


def validate_value_per_share(
    pool: PoolState,
    before: Tuple[Amount, Amount, Amount],
    after: Tuple[Amount, Amount, Amount],
) -> None:
    """
    Value per share must not drop between ``before`` and ``after``
    (each a (reserve_x, reserve_y, supply) triple).

    CPMM compares x*y against supply^2 so both sides are degree 2; stable
    pools compare D against supply, allowing D_TOLERANCE of solver noise.
    """
    x0, y0, s0 = before
    x1, y1, s1 = after
    if pool.kind == PoolKind.CPMM:
        validate_lsp_value_increase(
            cpmm_math.constant_product(x0, y0),
            cpmm_math.constant_product(x1, y1),
            U256.from_u64(s0).mul(U256.from_u64(s0)),
            U256.from_u64(s1).mul(U256.from_u64(s1)),
        )
        return
    if pool.kind == PoolKind.STABLE:
        validate_lsp_value_increase(
            invariant(pool, x0, y0),
            invariant(pool, x1, y1),
            U256.from_u64(s0),
            U256.from_u64(s1),
            tolerance=U256(stableswap_math.D_TOLERANCE),
        )
        return
    raise _unsupported(pool)


def advance_pool(
    pool: PoolState,
    *,
    reserve_x: Amount,
    reserve_y: Amount,
    lsp_supply: Amount,
    now: Timestamp,
    traded: Optional[Tuple[Amount, Amount]] = None,
) -> PoolState:
    """
    Build the next pool state: new reserves and supply plus aggregation.

    ``traded`` is the (x, y) volume of a swap; liquidity operations pass None.
    The input pool is not modified.
    """
    nxt = replace(pool, reserve_x=reserve_x, reserve_y=reserve_y, lsp_supply=lsp_supply)
    if traded is not None:
        nxt = replace(
            nxt,
            trade=record_trade(pool.trade, traded[0], traded[1], now),
            last_trade_time=now if now else pool.last_trade_time,
        )
    if now == 0:
        return nxt

    nxt = replace(nxt, snapshot=capture_reserves(pool.snapshot, reserve_x, reserve_y, now))
    sample = ksp_sample(invariant(pool, reserve_x, reserve_y), lsp_supply)
    if sample is not None:
        nxt = replace(nxt, ksp_sma=sma_add_sample(pool.ksp_sma, sample, now))
    return nxt
