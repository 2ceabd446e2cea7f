"""
Pool state for constant-product and stable pools.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import hashlib

from ..core.errors import InvalidParameterError
from ..core.fees import FeeConfig, FeeDirection
from ..kernels.python.stableswap_math import validate_amp
from ..kernels.python.u256 import U64_MAX
from .aggregates import ReserveSnapshot, TradeTotals, WeeklySma
from .balances import Amount, Timestamp, TokenId


class PoolKind(Enum):
    CPMM = "CPMM"
    STABLE = "STABLE"

    @classmethod
    def parse(cls, raw: object) -> "PoolKind":
        if isinstance(raw, PoolKind):
            return raw
        if isinstance(raw, str):
            tag = raw.strip().upper()
            if tag in cls.__members__:
                return cls[tag]
        raise InvalidParameterError(f"unsupported pool kind: {raw!r}")


@dataclass(frozen=True)
class StableParams:
    """
    Immutable stable-pool parameters.

    Attributes:
        amp: Amplification coefficient A, in [1, 1_000_000]
        x_scale: 10^(18 - decimals of token X)
        y_scale: 10^(18 - decimals of token Y)
    """

    amp: int
    x_scale: int
    y_scale: int

    def __post_init__(self) -> None:
        validate_amp(self.amp)
        for name, v in (("x_scale", self.x_scale), ("y_scale", self.y_scale)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v <= 0:
                raise InvalidParameterError(f"{name} must be positive: {v}")


def compute_pool_id(token_x: TokenId, token_y: TokenId) -> str:
    """
    Deterministic pool id for the ordered pair (token_x, token_y).

    (X, Y) and (Y, X) are different pools.
    """
    if not token_x or not token_y:
        raise InvalidParameterError("token ids must be non-empty")
    if token_x == token_y:
        raise InvalidParameterError(f"pool tokens must differ: {token_x}")
    data = b"AmmPool" + token_x.encode("utf-8") + b"/" + token_y.encode("utf-8")
    return "0x" + hashlib.sha256(data).hexdigest()


@dataclass
class PoolState:
    """
    State of one liquidity pool.

    Attributes:
        pool_id: Hex identifier derived from the ordered token pair
        token_x: Token of reserve X
        token_y: Token of reserve Y
        kind: Pricing curve
        fees: Fee rates
        fee_direction: Side that absorbs admin/connect/incentive fees
        reserve_x: Reserve of token X
        reserve_y: Reserve of token Y
        lsp_supply: Outstanding liquidity shares
        stable: Stable parameters (stable pools only)
        frozen: Whether swaps and deposits are blocked
        created_at: Creation timestamp
        last_trade_time: Timestamp of the last swap (0 = none recorded)
        trade: Traded volume
        snapshot: Last reserve snapshot
        ksp_sma: Weekly SMA of invariant-per-share * 1e8
    """

    pool_id: str
    token_x: TokenId
    token_y: TokenId
    kind: PoolKind
    fees: FeeConfig
    fee_direction: FeeDirection
    reserve_x: Amount = 0
    reserve_y: Amount = 0
    lsp_supply: Amount = 0
    stable: Optional[StableParams] = None
    frozen: bool = False
    created_at: Timestamp = 0
    last_trade_time: Timestamp = 0
    trade: TradeTotals = field(default_factory=TradeTotals)
    snapshot: ReserveSnapshot = field(default_factory=ReserveSnapshot)
    ksp_sma: WeeklySma = field(default_factory=WeeklySma)

    def __post_init__(self) -> None:
        """Validate pool state invariants."""
        if self.pool_id != compute_pool_id(self.token_x, self.token_y):
            raise InvalidParameterError(f"pool_id does not match ({self.token_x}, {self.token_y})")

        if (self.kind == PoolKind.STABLE) != (self.stable is not None):
            raise InvalidParameterError("stable params must be set exactly for stable pools")

        for name in ("reserve_x", "reserve_y", "lsp_supply"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if not (0 <= v <= U64_MAX):
                raise InvalidParameterError(f"{name} must be in [0, 2^64): {v}")

    @property
    def reserves(self) -> tuple[Amount, Amount, Amount]:
        """(reserve_x, reserve_y, lsp_supply)."""
        return self.reserve_x, self.reserve_y, self.lsp_supply

    def token_for(self, is_x: bool) -> TokenId:
        return self.token_x if is_x else self.token_y

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:16]}..., "
            f"pair=({self.token_x}, {self.token_y}), kind={self.kind.value}, "
            f"reserves=({self.reserve_x}, {self.reserve_y}), "
            f"lsp_supply={self.lsp_supply}, frozen={self.frozen})"
        )
