"""
Liquidity management operations: create pool, add/remove liquidity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..kernels.python.stableswap_math import scale_factor
from ..kernels.python.u256 import require_u64
from ..state.balances import Amount, Timestamp, TokenId
from ..state.pools import PoolKind, PoolState, StableParams, compute_pool_id
from . import amm_dispatch
from .errors import (
    EmptyShareSupplyError,
    FrozenError,
    InsufficientBalanceError,
    InvalidParameterError,
    SlippageExceededError,
)
from .fees import FeeConfig, FeeDirection, collect_fee


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepositResult:
    pool: PoolState
    x_added: Amount
    y_added: Amount
    shares_minted: Amount


@dataclass(frozen=True)
class WithdrawResult:
    """
    Attributes:
        pool: Next pool state
        shares_burned: Shares removed from supply
        x_removed: X leaving the reserve (payout + fee)
        y_removed: Y leaving the reserve (payout + fee)
        x_fee: Withdrawal fee in X, owed to the X fee bank
        y_fee: Withdrawal fee in Y, owed to the Y fee bank
    """

    pool: PoolState
    shares_burned: Amount
    x_removed: Amount
    y_removed: Amount
    x_fee: Amount
    y_fee: Amount

    @property
    def x_out(self) -> Amount:
        return self.x_removed - self.x_fee

    @property
    def y_out(self) -> Amount:
        return self.y_removed - self.y_fee


def create_pool(
    token_x: TokenId,
    token_y: TokenId,
    kind: PoolKind,
    fees: FeeConfig,
    fee_direction: FeeDirection,
    *,
    x_decimals: Optional[int] = None,
    y_decimals: Optional[int] = None,
    amp: Optional[int] = None,
    created_at: Timestamp = 0,
) -> PoolState:
    """
    Create an empty pool. The first deposit bootstraps the share supply.

    Stable pools need ``amp`` and both token decimal counts (at most 18);
    CPMM pools must not pass ``amp``.
    """
    kind = PoolKind.parse(kind)
    stable = None
    if kind == PoolKind.STABLE:
        if amp is None or x_decimals is None or y_decimals is None:
            raise InvalidParameterError("stable pools need amp and both token decimals")
        stable = StableParams(amp=amp, x_scale=scale_factor(x_decimals), y_scale=scale_factor(y_decimals))
    elif amp is not None:
        raise InvalidParameterError("amp is only valid for stable pools")

    return PoolState(
        pool_id=compute_pool_id(token_x, token_y),
        token_x=token_x,
        token_y=token_y,
        kind=kind,
        fees=fees,
        fee_direction=FeeDirection.parse(fee_direction),
        stable=stable,
        created_at=created_at,
    )


def add_liquidity(
    pool: PoolState,
    x_added: Amount,
    y_added: Amount,
    min_shares: Amount = 0,
    now: Timestamp = 0,
) -> DepositResult:
    """
    Deposit both coins and mint shares.

    Both coins are merged into the reserves in full; shares are minted
    against the scarcer side, so any excess accrues to existing holders.
    """
    require_u64("x_added", x_added)
    require_u64("y_added", y_added)
    require_u64("min_shares", min_shares)
    if pool.frozen:
        raise FrozenError(f"pool {pool.pool_id} is frozen")
    if x_added == 0 or y_added == 0:
        raise InvalidParameterError(f"deposit amounts must be positive: ({x_added}, {y_added})")

    x, y, supply = pool.reserves
    shares = amm_dispatch.deposit_shares(pool, x_added, y_added)
    if shares == 0:
        raise InvalidParameterError(f"deposit ({x_added}, {y_added}) mints no shares")
    if shares < min_shares:
        raise SlippageExceededError(f"shares minted {shares} < min_shares {min_shares}")

    new_x = require_u64("reserve_x", x + x_added)
    new_y = require_u64("reserve_y", y + y_added)
    new_supply = require_u64("lsp_supply", supply + shares)
    amm_dispatch.validate_value_per_share(pool, (x, y, supply), (new_x, new_y, new_supply))

    nxt = amm_dispatch.advance_pool(pool, reserve_x=new_x, reserve_y=new_y, lsp_supply=new_supply, now=now)
    logger.debug(f"deposit ({x_added}, {y_added}) into {pool.pool_id[:10]} minted {shares} shares")
    return DepositResult(pool=nxt, x_added=x_added, y_added=y_added, shares_minted=shares)


def remove_liquidity(
    pool: PoolState,
    shares: Amount,
    min_x_out: Amount = 0,
    min_y_out: Amount = 0,
    now: Timestamp = 0,
) -> WithdrawResult:
    """
    Burn shares for a proportional slice of both reserves.

    The withdrawal fee is taken per side from the removed coins. Frozen pools
    still accept withdrawals.
    """
    require_u64("shares", shares)
    require_u64("min_x_out", min_x_out)
    require_u64("min_y_out", min_y_out)
    if shares == 0:
        raise InvalidParameterError("shares must be positive")

    x, y, supply = pool.reserves
    if supply == 0:
        raise EmptyShareSupplyError(f"pool {pool.pool_id} has no shares outstanding")
    if shares > supply:
        raise InsufficientBalanceError(f"cannot burn more than supply: {shares} > {supply}")

    x_removed, y_removed = amm_dispatch.withdraw_amounts(pool, shares)
    x_fee = collect_fee(x_removed, pool.fees.withdraw_bps)
    y_fee = collect_fee(y_removed, pool.fees.withdraw_bps)
    if x_removed - x_fee < min_x_out or y_removed - y_fee < min_y_out:
        raise SlippageExceededError(
            f"payout ({x_removed - x_fee}, {y_removed - y_fee}) below minimum ({min_x_out}, {min_y_out})"
        )

    new_x, new_y, new_supply = x - x_removed, y - y_removed, supply - shares
    amm_dispatch.validate_value_per_share(pool, (x, y, supply), (new_x, new_y, new_supply))

    nxt = amm_dispatch.advance_pool(pool, reserve_x=new_x, reserve_y=new_y, lsp_supply=new_supply, now=now)
    logger.debug(f"burn {shares} shares from {pool.pool_id[:10]} released ({x_removed}, {y_removed})")
    return WithdrawResult(
        pool=nxt,
        shares_burned=shares,
        x_removed=x_removed,
        y_removed=y_removed,
        x_fee=x_fee,
        y_fee=y_fee,
    )
