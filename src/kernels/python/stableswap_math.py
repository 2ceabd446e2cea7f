"""
StableSwap invariant kernel (two coins).

Curve's invariant with Ann = A * n^n:

    Ann * S + D = Ann * D + D^(n+1) / (n^n * x * y)

Both solvers are Newton-Raphson fixed points capped at MAX_ITERATIONS and
stop once successive iterates differ by at most 1. On hitting the cap they
return the last iterate rather than failing.

All reserves handed to the solvers are already scaled to a common 18-decimal
base (see `scale_factor`). Arithmetic runs in `U256`, so a pool whose
intermediate products leave the 256-bit envelope is rejected with
`ArithmeticOverflowError` instead of being priced approximately.
"""

from __future__ import annotations

from ...core.errors import (
    ArithmeticOverflowError,
    ComputationError,
    EmptyReservesError,
    InvalidParameterError,
)
from .lp_math import mint_initial_shares, validate_lsp_value_increase
from .u256 import U256, require_u64


N_COINS = 2
MAX_ITERATIONS = 256
MIN_AMP = 1
MAX_AMP = 1_000_000
MAX_DECIMALS = 18
# Two independent solves of D may disagree by this many units.
D_TOLERANCE = 4

_N = U256(N_COINS)
_NN = U256(N_COINS**N_COINS)
_ONE = U256(1)
_D_TOL = U256(D_TOLERANCE)


def validate_amp(amp: int) -> int:
    if not isinstance(amp, int) or isinstance(amp, bool):
        raise TypeError("amp must be an int")
    if not (MIN_AMP <= amp <= MAX_AMP):
        raise InvalidParameterError(f"amp must be in [{MIN_AMP}, {MAX_AMP}]: {amp}")
    return amp


def scale_factor(decimals: int) -> int:
    """Multiplier that lifts a ``decimals``-precision amount to 18 decimals."""
    if not isinstance(decimals, int) or isinstance(decimals, bool):
        raise TypeError("decimals must be an int")
    if not (0 <= decimals <= MAX_DECIMALS):
        raise InvalidParameterError(f"decimals must be in [0, {MAX_DECIMALS}]: {decimals}")
    return 10 ** (MAX_DECIMALS - decimals)


def _ann(amp: int) -> U256:
    return U256(validate_amp(amp)).mul(_NN)


def compute_D(x: U256, y: U256, amp: int) -> U256:
    """
    Invariant D of scaled reserves (x, y). Symmetric: compute_D(x, y) ==
    compute_D(y, x).
    """
    s = x.add(y)
    if s.is_zero():
        return U256.zero()
    if x.is_zero() or y.is_zero():
        raise EmptyReservesError("invariant undefined with one empty reserve")

    # Smaller reserve first: the second step scales the first floor by <= 1.
    lo, hi = min(x, y), max(x, y)
    ann = _ann(amp)
    d = s
    for _ in range(MAX_ITERATIONS):
        # D_P = D^3 / (n^n * x * y), evaluated stepwise to stay in range.
        d_p = d.mul(d).div(lo.mul(_N)).mul(d).div(hi.mul(_N))
        d_prev = d
        numerator = ann.mul(s).add(d_p.mul(_N)).mul(d)
        denominator = ann.sub(_ONE).mul(d).add(_N.add(_ONE).mul(d_p))
        d = numerator.div(denominator)
        if d.abs_sub(d_prev) <= _ONE:
            return d
    return d


def compute_y(x: U256, d: U256, amp: int) -> U256:
    """Solve the other reserve given one reserve ``x`` and invariant ``d``."""
    if x.is_zero():
        raise EmptyReservesError("cannot solve y for an empty x reserve")
    if d.is_zero():
        return U256.zero()

    ann = _ann(amp)
    c = d.mul(d).div(x.mul(_N)).mul(d).div(ann.mul(_N))
    b = x.add(d.div(ann))

    y = d
    for _ in range(MAX_ITERATIONS):
        y_prev = y
        # y = (y^2 + c) / (2y + b - D)
        denominator = y.mul(_N).add(b).sub(d)
        y = y.mul(y).add(c).div(denominator)
        if y.abs_sub(y_prev) <= _ONE:
            return y
    return y


def swap_to(dx: U256, x: U256, y: U256, amp: int) -> U256:
    """
    Output for swapping ``dx`` (scaled) into scaled reserves (x, y).

    dy = y - y' - 1, where y' solves the invariant at x + dx. The extra 1 is
    a rounding margin in the pool's favour. D after the trade must not fall
    more than D_TOLERANCE below D before it.
    """
    d_before = compute_D(x, y, amp)
    x_new = x.add(dx)
    y_new = compute_y(x_new, d_before, amp)

    if y_new.add(_ONE) >= y:
        return U256.zero()
    dy = y.sub(y_new).sub(_ONE)

    d_after = compute_D(x_new, y.sub(dy), amp)
    if d_after.add(_D_TOL) < d_before:
        raise ComputationError(f"stable invariant decreased: {d_after.value} < {d_before.value}")
    return dy


def compute_amount_stable(dx: int, x: int, y: int, amp: int, x_scale: int, y_scale: int) -> int:
    """Swap output in native decimals of the output coin."""
    for name, v in (("dx", dx), ("x", x), ("y", y)):
        require_u64(name, v)
    if x_scale <= 0 or y_scale <= 0:
        raise InvalidParameterError("scale factors must be positive")

    xs, ys = U256(x_scale), U256(y_scale)
    dy_scaled = swap_to(
        U256.from_u64(dx).mul(xs),
        U256.from_u64(x).mul(xs),
        U256.from_u64(y).mul(ys),
        amp,
    )
    return dy_scaled.div(ys).as_u64()


def stable_invariant(x: int, y: int, amp: int, x_scale: int, y_scale: int) -> U256:
    """D over scaled reserves."""
    return compute_D(
        U256.from_u64(x).mul(U256(x_scale)),
        U256.from_u64(y).mul(U256(y_scale)),
        amp,
    )


def compute_deposit_stable(
    x_added: int,
    y_added: int,
    x: int,
    y: int,
    supply: int,
    amp: int,
    x_scale: int,
    y_scale: int,
) -> int:
    """
    Shares minted for a stable deposit.

    shares = floor(supply * (D1 - D0) / D0) when D1 > D0, else 0.
    An empty pool bootstraps with isqrt(x_added) * isqrt(y_added).
    """
    for name, v in (("x_added", x_added), ("y_added", y_added), ("x", x), ("y", y), ("supply", supply)):
        require_u64(name, v)

    if supply == 0:
        return mint_initial_shares(x_added, y_added)

    d0 = stable_invariant(x, y, amp, x_scale, y_scale)
    if d0.is_zero():
        raise EmptyReservesError("pool has share supply but zero invariant")
    new_x = require_u64("x + x_added", x + x_added)
    new_y = require_u64("y + y_added", y + y_added)
    d1 = stable_invariant(new_x, new_y, amp, x_scale, y_scale)
    if d1 <= d0:
        return 0
    return U256.from_u64(supply).mul(d1.sub(d0)).div(d0).as_u64()


def compute_withdraw_stable(
    x: int,
    y: int,
    supply: int,
    amount: int,
    amp: int,
    x_scale: int,
    y_scale: int,
) -> tuple[int, int]:
    """
    Proportional withdrawal, validated against the invariant.

    Removes floor(reserve * amount / supply) from each side, then requires
    D_after / (supply - amount) >= D_before / supply up to D_TOLERANCE.
    """
    for name, v in (("x", x), ("y", y), ("supply", supply), ("amount", amount)):
        require_u64(name, v)
    if supply == 0:
        raise ArithmeticOverflowError("division by zero share supply")
    if amount > supply:
        raise ArithmeticOverflowError(f"cannot burn more than supply: {amount} > {supply}")

    s, a = U256.from_u64(supply), U256.from_u64(amount)
    xs, ys = U256(x_scale), U256(y_scale)
    x_scaled = U256.from_u64(x).mul(xs)
    y_scaled = U256.from_u64(y).mul(ys)

    x_removed = x_scaled.mul(a).div(s).div(xs).as_u64()
    y_removed = y_scaled.mul(a).div(s).div(ys).as_u64()

    d0 = compute_D(x_scaled, y_scaled, amp)
    d1 = stable_invariant(x - x_removed, y - y_removed, amp, x_scale, y_scale)
    validate_lsp_value_increase(d0, d1, s, s.sub(a), tolerance=_D_TOL)
    return x_removed, y_removed
