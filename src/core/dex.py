"""
Exchange orchestration (functional core over an owned state object).

`DexState` owns token registrations, pools keyed by ordered token pair, fee
banks and the liquidity-share ledger. Each operation below:
- computes the complete next pool / bank / ledger values first,
- validates them (fail-closed),
- commits by assignment only after every check passed.

A raised exception therefore leaves the state exactly as it was.
Coin transfers stay with the caller: operations return the amounts to move.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from ..state.balances import Amount, Owner, Timestamp, TokenId
from ..state.bank import Bank
from ..state.lp import LSPTable
from ..state.pools import PoolKind, PoolState
from . import bank as bank_ops
from . import liquidity, swap as swap_ops
from .errors import (
    ComputationError,
    DuplicateError,
    InvalidParameterError,
    NotFoundError,
    NotRegisteredError,
)
from .fees import FeeConfig, FeeDirection


logger = logging.getLogger(__name__)

PairKey = Tuple[TokenId, TokenId]


@dataclass
class DexState:
    tokens: Dict[TokenId, int] = field(default_factory=dict)
    pools: Dict[PairKey, PoolState] = field(default_factory=dict)
    banks: Dict[TokenId, Bank] = field(default_factory=dict)
    lsp: LSPTable = field(default_factory=LSPTable)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def register_token(state: DexState, token: TokenId, decimals: int) -> None:
    """Register a token. The 18-decimal cap applies only when it joins a stable pool."""
    if not isinstance(token, str) or not token.strip():
        raise InvalidParameterError("token must be a non-empty string")
    if not isinstance(decimals, int) or isinstance(decimals, bool):
        raise TypeError("decimals must be an int")
    if decimals < 0:
        raise InvalidParameterError(f"decimals must be non-negative: {decimals}")
    if token in state.tokens:
        raise DuplicateError(f"token already registered: {token}")
    state.tokens[token] = decimals


def _require_registered(state: DexState, token: TokenId) -> int:
    if token not in state.tokens:
        raise NotRegisteredError(f"token not registered: {token}")
    return state.tokens[token]


def get_pool(state: DexState, token_x: TokenId, token_y: TokenId) -> PoolState:
    pool = state.pools.get((token_x, token_y))
    if pool is None:
        raise NotFoundError(f"no pool for ({token_x}, {token_y})")
    return pool


def has_pool(state: DexState, token_x: TokenId, token_y: TokenId) -> bool:
    return (token_x, token_y) in state.pools


def get_bank(state: DexState, token: TokenId) -> Bank:
    bank = state.banks.get(token)
    if bank is None:
        raise NotFoundError(f"no fee bank for {token}")
    return bank


def create_pool(
    state: DexState,
    token_x: TokenId,
    token_y: TokenId,
    kind: PoolKind,
    fees: FeeConfig,
    fee_direction: FeeDirection,
    *,
    amp: Optional[int] = None,
    now: Timestamp = 0,
) -> PoolState:
    """Create an empty pool for the ordered pair and open fee banks for both tokens."""
    x_decimals = _require_registered(state, token_x)
    y_decimals = _require_registered(state, token_y)
    if has_pool(state, token_x, token_y):
        raise DuplicateError(f"pool already exists for ({token_x}, {token_y})")

    pool = liquidity.create_pool(
        token_x,
        token_y,
        kind,
        fees,
        fee_direction,
        x_decimals=x_decimals,
        y_decimals=y_decimals,
        amp=amp,
        created_at=now,
    )

    state.pools[(token_x, token_y)] = pool
    for token in (token_x, token_y):
        state.banks.setdefault(token, Bank(token=token))
    logger.info(f"created {pool.kind.value} pool {token_x}/{token_y} ({pool.pool_id})")
    return pool


# ---------------------------------------------------------------------------
# Trading and liquidity
# ---------------------------------------------------------------------------


def _credit_banks(state: DexState, credits: Dict[TokenId, int], now: Timestamp) -> Dict[TokenId, Bank]:
    """Next bank states for the given per-token credits (zero credits are skipped)."""
    out: Dict[TokenId, Bank] = {}
    for token, amount in credits.items():
        if amount == 0:
            continue
        current = out.get(token) or state.banks.get(token) or Bank(token=token)
        out[token] = bank_ops.deposit(current, amount, now)
    return out


def swap(
    state: DexState,
    token_x: TokenId,
    token_y: TokenId,
    amount_in: Amount,
    *,
    x_to_y: bool,
    min_amount_out: Amount = 0,
    now: Timestamp = 0,
) -> swap_ops.SwapResult:
    pool = get_pool(state, token_x, token_y)
    result = swap_ops.swap(pool, amount_in, x_to_y=x_to_y, min_amount_out=min_amount_out, now=now)
    banks = _credit_banks(state, {result.protocol_fee_token: result.protocol_fees.total}, now)

    state.pools[(token_x, token_y)] = result.pool
    state.banks.update(banks)
    return result


def add_liquidity(
    state: DexState,
    owner: Owner,
    token_x: TokenId,
    token_y: TokenId,
    x_added: Amount,
    y_added: Amount,
    *,
    min_shares: Amount = 0,
    now: Timestamp = 0,
) -> liquidity.DepositResult:
    pool = get_pool(state, token_x, token_y)
    result = liquidity.add_liquidity(pool, x_added, y_added, min_shares=min_shares, now=now)

    lsp = state.lsp.copy()
    lsp.mint(owner, pool.pool_id, result.shares_minted)
    _check_supply(lsp, result.pool)

    state.pools[(token_x, token_y)] = result.pool
    state.lsp = lsp
    return result


def remove_liquidity(
    state: DexState,
    owner: Owner,
    token_x: TokenId,
    token_y: TokenId,
    shares: Amount,
    *,
    min_x_out: Amount = 0,
    min_y_out: Amount = 0,
    now: Timestamp = 0,
) -> liquidity.WithdrawResult:
    pool = get_pool(state, token_x, token_y)

    lsp = state.lsp.copy()
    lsp.burn(owner, pool.pool_id, shares)
    result = liquidity.remove_liquidity(pool, shares, min_x_out=min_x_out, min_y_out=min_y_out, now=now)
    _check_supply(lsp, result.pool)

    credits: Dict[TokenId, int] = {token_x: result.x_fee}
    credits[token_y] = credits.get(token_y, 0) + result.y_fee
    banks = _credit_banks(state, credits, now)

    state.pools[(token_x, token_y)] = result.pool
    state.banks.update(banks)
    state.lsp = lsp
    return result


def _check_supply(lsp: LSPTable, pool: PoolState) -> None:
    tracked = lsp.total_supply(pool.pool_id)
    if tracked != pool.lsp_supply:
        raise ComputationError(f"share ledger supply {tracked} != pool supply {pool.lsp_supply}")


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


def freeze_pool(state: DexState, token_x: TokenId, token_y: TokenId) -> PoolState:
    pool = replace(get_pool(state, token_x, token_y), frozen=True)
    state.pools[(token_x, token_y)] = pool
    logger.info(f"froze pool {token_x}/{token_y}")
    return pool


def unfreeze_pool(state: DexState, token_x: TokenId, token_y: TokenId) -> PoolState:
    pool = replace(get_pool(state, token_x, token_y), frozen=False)
    state.pools[(token_x, token_y)] = pool
    logger.info(f"unfroze pool {token_x}/{token_y}")
    return pool


def set_fees(
    state: DexState,
    token_x: TokenId,
    token_y: TokenId,
    fees: FeeConfig,
    fee_direction: Optional[FeeDirection] = None,
) -> PoolState:
    current = get_pool(state, token_x, token_y)
    direction = current.fee_direction if fee_direction is None else FeeDirection.parse(fee_direction)
    pool = replace(current, fees=fees, fee_direction=direction)
    state.pools[(token_x, token_y)] = pool
    logger.info(f"updated fees for {token_x}/{token_y}: {fees} direction={direction.name}")
    return pool


def withdraw_fees(state: DexState, token: TokenId, amount: Amount) -> Bank:
    """Take collected fees out of a bank; the caller pays them out."""
    bank = bank_ops.withdraw(get_bank(state, token), amount)
    state.banks[token] = bank
    logger.info(f"withdrew {amount} from {token} fee bank")
    return bank
