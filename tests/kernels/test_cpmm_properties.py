"""Property tests for the constant-product kernel (floor rounding favours the pool)."""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import assume, given, settings

from src.kernels.python.cpmm_math import compute_amount, compute_deposit, compute_withdraw
from src.kernels.python.u256 import U64_MAX

reserve = st.integers(min_value=1, max_value=U64_MAX)
amount = st.integers(min_value=0, max_value=U64_MAX)


@settings(max_examples=300, deadline=None)
@given(dx=amount, x=reserve, y=reserve)
def test_swap_never_decreases_k(dx: int, x: int, y: int) -> None:
    dy = compute_amount(dx, x, y)
    assert dy < y
    assert (x + dx) * (y - dy) >= x * y


@settings(max_examples=300, deadline=None)
@given(dx=st.integers(min_value=0, max_value=U64_MAX - 1), x=reserve, y=reserve)
def test_swap_output_is_monotone_in_input(dx: int, x: int, y: int) -> None:
    assert compute_amount(dx + 1, x, y) >= compute_amount(dx, x, y)


small = st.integers(min_value=1, max_value=10**12)


@settings(max_examples=300, deadline=None)
@given(x0=small, y0=small, a=small, b=small)
def test_deposit_then_withdraw_returns_at_most_the_deposit(x0: int, y0: int, a: int, b: int) -> None:
    supply = compute_deposit(x0, y0, 0, 0, 0)
    shares = compute_deposit(a, b, x0, y0, supply)
    assume(shares > 0)

    x_out, y_out = compute_withdraw(x0 + a, y0 + b, supply + shares, shares)
    assert x_out <= a
    assert y_out <= b
