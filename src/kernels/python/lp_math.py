"""
Liquidity-share math kernel.

Small pure helpers shared by both pool kinds:
- exact integer square root for bootstrapping the share supply,
- the value-per-share monotonicity check applied after every liquidity
  mutation and every swap.
"""

from __future__ import annotations

import math

from ...core.errors import ComputationError
from .u256 import U256, require_u64


def sqrt_u64(value: int) -> int:
    """Exact ``floor(sqrt(value))`` for a u64 input (no floating point)."""
    require_u64("value", value)
    return math.isqrt(value)


def mint_initial_shares(x_added: int, y_added: int) -> int:
    """
    Shares minted into an empty pool.

    shares = isqrt(x_added) * isqrt(y_added)

    Both factors are below 2^32, so the product always fits in u64.
    """
    return sqrt_u64(x_added) * sqrt_u64(y_added)


def validate_lsp_value_increase(
    k0: U256,
    k1: U256,
    supply0: U256,
    supply1: U256,
    tolerance: U256 = U256(0),
) -> None:
    """
    Require ``(k1 + tolerance) / supply1 >= k0 / supply0`` (cross-multiplied).

    ``tolerance`` is in units of ``k1``; it is zero for closed-form invariants
    and covers solver noise for iterated ones. An empty starting supply
    (bootstrap) or an empty final supply (everyone exited) is trivially
    accepted.
    """
    if supply0.is_zero() or supply1.is_zero():
        return
    lhs = k1.add(tolerance).mul(supply0)
    rhs = k0.mul(supply1)
    if lhs < rhs:
        raise ComputationError(
            f"value per share decreased: {k1.value}/{supply1.value} < {k0.value}/{supply0.value}"
        )
