"""Pool-level property tests: liquidity round trips and value per share."""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import assume, given, settings

from src.core.errors import InvalidParameterError
from src.core.fees import FeeConfig, FeeDirection
from src.core.liquidity import add_liquidity, create_pool, remove_liquidity
from src.core.swap import swap
from src.state.pools import PoolKind

NO_FEES = FeeConfig(admin_bps=0, lp_bps=0, incentive_bps=0, connect_bps=0, withdraw_bps=0)
amount = st.integers(min_value=1, max_value=10**12)


@settings(max_examples=200, deadline=None)
@given(x0=amount, y0=amount, a=amount, b=amount)
def test_deposit_then_withdraw_never_profits(x0: int, y0: int, a: int, b: int) -> None:
    pool = add_liquidity(create_pool("X", "Y", PoolKind.CPMM, NO_FEES, FeeDirection.Y), x0, y0).pool
    dep = None
    try:
        dep = add_liquidity(pool, a, b)
    except InvalidParameterError:
        assume(False)
    assert dep is not None

    wd = remove_liquidity(dep.pool, dep.shares_minted)
    assert wd.x_out <= a
    assert wd.y_out <= b


@settings(max_examples=200, deadline=None)
@given(
    x0=amount,
    y0=amount,
    amount_in=amount,
    lp_bps=st.integers(min_value=0, max_value=100),
    x_to_y=st.booleans(),
)
def test_swaps_never_dilute_shares(x0: int, y0: int, amount_in: int, lp_bps: int, x_to_y: bool) -> None:
    fees = FeeConfig(admin_bps=0, lp_bps=lp_bps, incentive_bps=0, connect_bps=0, withdraw_bps=0)
    pool = add_liquidity(create_pool("X", "Y", PoolKind.CPMM, fees, FeeDirection.Y), x0, y0).pool
    try:
        nxt = swap(pool, amount_in, x_to_y=x_to_y).pool
    except InvalidParameterError:
        assume(False)
    else:
        assert nxt.lsp_supply == pool.lsp_supply
        assert nxt.reserve_x * nxt.reserve_y >= pool.reserve_x * pool.reserve_y
