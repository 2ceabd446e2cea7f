"""
Pool presets loaded from YAML.

A preset document names reusable fee sets and lists the pools to create:

    fee_presets:
      general: {admin: 0, lp: 27, incentive: 3, connect: 0, withdraw: 10}
    pools:
      - token_x: "0x1::aptos_coin::AptosCoin"
        token_y: "0xa::coin::USDC"
        kind: CPMM
        direction: Y
        fee: general
      - token_x: "0xa::coin::USDC"
        token_y: "0xb::coin::USDT"
        kind: STABLE
        amp: 100
        direction: X
        fee: general

Validation is fail-closed: unknown keys, unknown presets or bad values raise
before any pool is created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from ..state.balances import Timestamp, TokenId
from ..state.pools import PoolKind
from . import dex
from .errors import InvalidParameterError, WrongFeeConfigurationError
from .fees import FeeConfig, FeeDirection


logger = logging.getLogger(__name__)

_FEE_KEYS = {
    "admin": "admin_bps",
    "lp": "lp_bps",
    "incentive": "incentive_bps",
    "connect": "connect_bps",
    "withdraw": "withdraw_bps",
}
_POOL_KEYS = {"token_x", "token_y", "kind", "direction", "fee", "amp"}


@dataclass(frozen=True)
class PoolPreset:
    token_x: TokenId
    token_y: TokenId
    kind: PoolKind
    fees: FeeConfig
    fee_direction: FeeDirection
    amp: Optional[int] = None


def _require_mapping(obj: Any, *, name: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise InvalidParameterError(f"{name} must be a mapping")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise InvalidParameterError(f"{name} must be a non-empty string")
    return obj.strip()


def _parse_fee_preset(name: str, raw: Any) -> FeeConfig:
    entry = _require_mapping(raw, name=f"fee_presets.{name}")
    unknown = set(entry) - set(_FEE_KEYS)
    if unknown:
        raise WrongFeeConfigurationError(f"fee_presets.{name}: unknown keys {sorted(unknown)}")
    missing = set(_FEE_KEYS) - set(entry)
    if missing:
        raise WrongFeeConfigurationError(f"fee_presets.{name}: missing keys {sorted(missing)}")
    return FeeConfig(**{_FEE_KEYS[k]: v for k, v in entry.items()})


def parse_pool_presets(doc: Any) -> List[PoolPreset]:
    root = _require_mapping(doc, name="document")
    presets_raw = _require_mapping(root.get("fee_presets", {}), name="fee_presets")
    presets = {name: _parse_fee_preset(name, raw) for name, raw in presets_raw.items()}

    pools_raw = root.get("pools", [])
    if not isinstance(pools_raw, list):
        raise InvalidParameterError("pools must be a list")

    out: List[PoolPreset] = []
    for i, raw in enumerate(pools_raw):
        entry = _require_mapping(raw, name=f"pools[{i}]")
        unknown = set(entry) - _POOL_KEYS
        if unknown:
            raise InvalidParameterError(f"pools[{i}]: unknown keys {sorted(unknown)}")

        fee_name = _require_str(entry.get("fee"), name=f"pools[{i}].fee")
        if fee_name not in presets:
            raise WrongFeeConfigurationError(f"pools[{i}]: unknown fee preset {fee_name!r}")

        kind = PoolKind.parse(entry.get("kind", "CPMM"))
        amp = entry.get("amp")
        if kind == PoolKind.STABLE and amp is None:
            raise InvalidParameterError(f"pools[{i}]: stable pools need amp")

        out.append(
            PoolPreset(
                token_x=_require_str(entry.get("token_x"), name=f"pools[{i}].token_x"),
                token_y=_require_str(entry.get("token_y"), name=f"pools[{i}].token_y"),
                kind=kind,
                fees=presets[fee_name],
                fee_direction=FeeDirection.parse(entry.get("direction", "Y")),
                amp=amp,
            )
        )
    return out


def load_pool_presets(text: str) -> List[PoolPreset]:
    """Parse a YAML preset document."""
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidParameterError(f"invalid pool preset YAML: {exc}") from exc
    return parse_pool_presets(doc or {})


def apply_pool_presets(state: dex.DexState, presets: List[PoolPreset], now: Timestamp = 0) -> List[PoolPreset]:
    """
    Create every preset pool that does not exist yet.

    Returns the presets that were created; existing pairs are skipped. Pools
    are staged on a copy of the registry, so one bad preset creates nothing.
    """
    staged = dex.DexState(tokens=state.tokens, pools=dict(state.pools), banks=dict(state.banks), lsp=state.lsp)
    created: List[PoolPreset] = []
    for preset in presets:
        if dex.has_pool(staged, preset.token_x, preset.token_y):
            logger.info(f"skip creating pool: {preset.token_x}/{preset.token_y}")
            continue
        dex.create_pool(
            staged,
            preset.token_x,
            preset.token_y,
            preset.kind,
            preset.fees,
            preset.fee_direction,
            amp=preset.amp,
            now=now,
        )
        created.append(preset)

    state.pools = staged.pools
    state.banks = staged.banks
    return created
