"""
Swap execution against a single pool (pure).

Flow for a swap of ``amount_in``:
1. LP fee is taken from the input; it stays in the pool but is not priced.
2. Admin/connect/incentive fees are taken from the input when the pool's fee
   direction is the input side, otherwise from the output.
3. The remaining input is priced by the pool's curve.
4. Value per share is re-checked on the post-trade reserves.

Nothing is mutated: the result carries the next `PoolState` and the amounts
the caller has to move (user payout, bank deposits).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..kernels.python.u256 import require_u64
from ..state.balances import Amount, Timestamp, TokenId
from ..state.pools import PoolState
from . import amm_dispatch
from .errors import (
    EmptyReservesError,
    FrozenError,
    InvalidParameterError,
    SlippageExceededError,
)
from .fees import FeeDirection, ProtocolFees, collect_fee, collect_protocol_fees


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapResult:
    pool: PoolState
    x_to_y: bool
    amount_in: Amount
    amount_out: Amount
    lp_fee: Amount
    protocol_fees: ProtocolFees
    protocol_fee_token: TokenId

    @property
    def token_in(self) -> TokenId:
        return self.pool.token_for(self.x_to_y)

    @property
    def token_out(self) -> TokenId:
        return self.pool.token_for(not self.x_to_y)


def swap(
    pool: PoolState,
    amount_in: Amount,
    *,
    x_to_y: bool,
    min_amount_out: Amount = 0,
    now: Timestamp = 0,
) -> SwapResult:
    """
    Quote and apply a swap.

    Raises:
        FrozenError: pool is frozen
        InvalidParameterError: zero input, or the trade is too small to pay out
        EmptyReservesError: either reserve is empty
        SlippageExceededError: payout below ``min_amount_out``
        ComputationError: an invariant check failed (engine bug)
    """
    require_u64("amount_in", amount_in)
    require_u64("min_amount_out", min_amount_out)
    if pool.frozen:
        raise FrozenError(f"pool {pool.pool_id} is frozen")
    if amount_in == 0:
        raise InvalidParameterError("amount_in must be positive")

    x, y, supply = pool.reserves
    if x == 0 or y == 0:
        raise EmptyReservesError(f"pool {pool.pool_id} has empty reserves: ({x}, {y})")
    reserve_in, reserve_out = (x, y) if x_to_y else (y, x)

    fees = pool.fees
    fee_on_input = (pool.fee_direction == FeeDirection.X) == x_to_y

    lp_fee = collect_fee(amount_in, fees.lp_bps)
    in_fees = collect_protocol_fees(amount_in, fees) if fee_on_input else ProtocolFees()
    net_in = amount_in - lp_fee - in_fees.total

    gross_out = amm_dispatch.swap_output(pool, net_in, x_to_y=x_to_y)
    out_fees = ProtocolFees() if fee_on_input else collect_protocol_fees(gross_out, fees)
    amount_out = gross_out - out_fees.total

    if amount_out == 0:
        raise InvalidParameterError(f"trade too small: amount_in={amount_in} pays out nothing")
    if amount_out < min_amount_out:
        raise SlippageExceededError(f"amount_out {amount_out} < min_amount_out {min_amount_out}")

    new_in = require_u64("reserve_in", reserve_in + net_in + lp_fee)
    new_out = reserve_out - gross_out
    new_x, new_y = (new_in, new_out) if x_to_y else (new_out, new_in)

    amm_dispatch.validate_value_per_share(pool, (x, y, supply), (new_x, new_y, supply))

    traded = (amount_in, gross_out) if x_to_y else (gross_out, amount_in)
    nxt = amm_dispatch.advance_pool(
        pool, reserve_x=new_x, reserve_y=new_y, lsp_supply=supply, now=now, traded=traded
    )

    protocol_fees = in_fees if fee_on_input else out_fees
    fee_token = pool.token_for(pool.fee_direction == FeeDirection.X)
    logger.debug(
        f"swap {pool.token_for(x_to_y)} -> {pool.token_for(not x_to_y)}: "
        f"in={amount_in} out={amount_out} lp_fee={lp_fee} protocol_fee={protocol_fees.total}"
    )
    return SwapResult(
        pool=nxt,
        x_to_y=x_to_y,
        amount_in=amount_in,
        amount_out=amount_out,
        lp_fee=lp_fee,
        protocol_fees=protocol_fees,
        protocol_fee_token=fee_token,
    )


def swap_x_to_y(pool: PoolState, amount_in: Amount, min_amount_out: Amount = 0, now: Timestamp = 0) -> SwapResult:
    return swap(pool, amount_in, x_to_y=True, min_amount_out=min_amount_out, now=now)


def swap_y_to_x(pool: PoolState, amount_in: Amount, min_amount_out: Amount = 0, now: Timestamp = 0) -> SwapResult:
    return swap(pool, amount_in, x_to_y=False, min_amount_out=min_amount_out, now=now)
