"""
Constant-product (x * y = k) kernel.

Closed-form swap, deposit and withdraw amounts with floor rounding throughout,
so every result is biased in the pool's favour:
- swap output is floored, hence (x + dx) * (y - dy) >= x * y,
- minted shares are floored against the scarcer side,
- withdrawn amounts are floored per side.

Fees are handled by the caller; amounts passed here are already net of fees.
"""

from __future__ import annotations

from ...core.errors import ArithmeticOverflowError, ComputationError, EmptyReservesError
from .lp_math import mint_initial_shares
from .u256 import U256, U64_MAX, require_u64


def compute_amount(dx: int, x: int, y: int) -> int:
    """
    Output of a swap of ``dx`` into a pool with reserves (x, y).

    dy = floor(y * dx / (x + dx))
    """
    require_u64("dx", dx)
    require_u64("x", x)
    require_u64("y", y)

    ux, uy, udx = U256.from_u64(x), U256.from_u64(y), U256.from_u64(dx)
    x_new = ux.add(udx)
    if x_new.is_zero():
        raise EmptyReservesError("cannot price against an empty reserve")

    dy_full = uy.mul(udx).div(x_new)
    if dy_full.value > U64_MAX:
        raise ArithmeticOverflowError(f"swap output exceeds u64: {dy_full.value}")
    dy = dy_full.as_u64()

    k_before = ux.mul(uy)
    k_after = x_new.mul(uy.sub(dy_full))
    if k_after < k_before:
        raise ComputationError(f"constant product decreased: {k_after.value} < {k_before.value}")
    return dy


def compute_deposit(x_added: int, y_added: int, x: int, y: int, supply: int) -> int:
    """
    Shares minted for depositing (x_added, y_added).

    Empty pool: isqrt(x_added) * isqrt(y_added).
    Otherwise:  min(floor(x_added * supply / x), floor(y_added * supply / y)).
    """
    for name, v in (("x_added", x_added), ("y_added", y_added), ("x", x), ("y", y), ("supply", supply)):
        require_u64(name, v)

    if supply == 0:
        return mint_initial_shares(x_added, y_added)
    if x == 0 or y == 0:
        raise EmptyReservesError("pool has share supply but an empty reserve")

    s = U256.from_u64(supply)
    share_x = U256.from_u64(x_added).mul(s).div(U256.from_u64(x))
    share_y = U256.from_u64(y_added).mul(s).div(U256.from_u64(y))
    return min(share_x, share_y).as_u64()


def compute_withdraw(x: int, y: int, supply: int, amount: int) -> tuple[int, int]:
    """
    Reserves released by burning ``amount`` shares.

    (floor(x * amount / supply), floor(y * amount / supply))
    """
    for name, v in (("x", x), ("y", y), ("supply", supply), ("amount", amount)):
        require_u64(name, v)
    if amount > supply:
        raise ArithmeticOverflowError(f"cannot burn more than supply: {amount} > {supply}")

    s = U256.from_u64(supply)
    a = U256.from_u64(amount)
    x_removed = U256.from_u64(x).mul(a).div(s).as_u64()
    y_removed = U256.from_u64(y).mul(a).div(s).as_u64()
    return x_removed, y_removed


def constant_product(x: int, y: int) -> U256:
    """k = x * y."""
    return U256.from_u64(x).mul(U256.from_u64(y))
