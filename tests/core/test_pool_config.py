from __future__ import annotations

import pytest

from src.core import dex
from src.core.errors import InvalidParameterError, NotRegisteredError, WrongFeeConfigurationError
from src.core.fees import DEFAULT_FEE_CONFIG, FeeDirection
from src.core.pool_config import apply_pool_presets, load_pool_presets, parse_pool_presets
from src.state.pools import PoolKind

PRESETS_YAML = """
fee_presets:
  general: {admin: 0, lp: 27, incentive: 3, connect: 0, withdraw: 10}
  stable: {admin: 0, lp: 4, incentive: 1, connect: 0, withdraw: 0}
pools:
  - token_x: APT
    token_y: USDC
    kind: CPMM
    direction: Y
    fee: general
  - token_x: USDC
    token_y: USDT
    kind: STABLE
    amp: 100
    direction: X
    fee: stable
"""


def _registry() -> dex.DexState:
    state = dex.DexState()
    dex.register_token(state, "APT", 8)
    dex.register_token(state, "USDC", 6)
    dex.register_token(state, "USDT", 6)
    return state


def test_load_pool_presets() -> None:
    presets = load_pool_presets(PRESETS_YAML)
    assert len(presets) == 2

    cpmm, stable = presets
    assert (cpmm.token_x, cpmm.token_y, cpmm.kind) == ("APT", "USDC", PoolKind.CPMM)
    assert cpmm.fees == DEFAULT_FEE_CONFIG
    assert cpmm.fee_direction == FeeDirection.Y
    assert cpmm.amp is None

    assert stable.kind == PoolKind.STABLE
    assert stable.amp == 100
    assert stable.fees.trade_fee_bps == 5
    assert stable.fee_direction == FeeDirection.X


def test_empty_document_has_no_presets() -> None:
    assert load_pool_presets("") == []


def test_apply_presets_creates_missing_pools_once() -> None:
    state = _registry()
    created = apply_pool_presets(state, load_pool_presets(PRESETS_YAML), now=1_700_000_000)
    assert len(created) == 2
    assert dex.get_pool(state, "USDC", "USDT").stable.amp == 100
    assert dex.get_pool(state, "APT", "USDC").created_at == 1_700_000_000
    assert set(state.banks) == {"APT", "USDC", "USDT"}

    again = apply_pool_presets(state, load_pool_presets(PRESETS_YAML))
    assert again == []


def test_apply_presets_is_all_or_nothing() -> None:
    state = _registry()
    doc = PRESETS_YAML.replace("token_y: USDT", "token_y: DOGE")
    with pytest.raises(NotRegisteredError):
        apply_pool_presets(state, load_pool_presets(doc))
    assert state.pools == {}
    assert state.banks == {}


@pytest.mark.parametrize(
    "doc, exc",
    [
        ("pools: {}", InvalidParameterError),
        ("[1, 2]", InvalidParameterError),
        ("pools: [{token_x: A, token_y: B, fee: missing}]", WrongFeeConfigurationError),
        ("fee_presets: {f: {lp: 1}}", WrongFeeConfigurationError),
        ("fee_presets: {f: {admin: 0, lp: 1, incentive: 0, connect: 0, withdraw: 0, extra: 1}}", WrongFeeConfigurationError),
        ("fee_presets: {f: {admin: 0, lp: 10000, incentive: 0, connect: 0, withdraw: 0}}", WrongFeeConfigurationError),
        (
            "fee_presets: {f: {admin: 0, lp: 1, incentive: 0, connect: 0, withdraw: 0}}\n"
            "pools: [{token_x: A, token_y: B, fee: f, kind: STABLE}]",
            InvalidParameterError,
        ),
        (
            "fee_presets: {f: {admin: 0, lp: 1, incentive: 0, connect: 0, withdraw: 0}}\n"
            "pools: [{token_x: A, token_y: B, fee: f, colour: red}]",
            InvalidParameterError,
        ),
        ("pools: [: bad", InvalidParameterError),
    ],
)
def test_invalid_documents_are_rejected(doc: str, exc: type) -> None:
    with pytest.raises(exc):
        load_pool_presets(doc)


def test_parse_accepts_python_objects() -> None:
    presets = parse_pool_presets(
        {
            "fee_presets": {"f": {"admin": 0, "lp": 1, "incentive": 0, "connect": 0, "withdraw": 0}},
            "pools": [{"token_x": "A", "token_y": "B", "fee": "f", "direction": 200}],
        }
    )
    assert presets[0].fee_direction == FeeDirection.X
    assert presets[0].kind == PoolKind.CPMM
