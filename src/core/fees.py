"""
Fee configuration and extraction (deterministic, integer-only).

Fees are taken from a coin *before* it reaches the invariant math (or from
the output after it), always with floor rounding:

    fee = floor(amount * fee_bps / 10_000)

The LP fee stays in the pool reserves. Admin, connect and incentive fees
leave the pool and are credited to the per-token fee bank of whichever side
the pool's fee direction selects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..kernels.python.u256 import require_u64
from .errors import WrongFeeConfigurationError


BPS_DENOM = 10_000


class FeeDirection(Enum):
    """Which coin of the pair absorbs protocol-side fees."""

    X = 200
    Y = 201

    @classmethod
    def parse(cls, raw: object) -> "FeeDirection":
        if isinstance(raw, FeeDirection):
            return raw
        if isinstance(raw, str) and raw.strip().upper() in ("X", "Y"):
            return cls[raw.strip().upper()]
        if isinstance(raw, int) and not isinstance(raw, bool):
            try:
                return cls(raw)
            except ValueError:
                pass
        raise WrongFeeConfigurationError(f"unknown fee direction: {raw!r}")


@dataclass(frozen=True)
class FeeConfig:
    admin_bps: int
    lp_bps: int
    incentive_bps: int
    connect_bps: int
    withdraw_bps: int

    def __post_init__(self) -> None:
        for name, v in (
            ("admin_bps", self.admin_bps),
            ("lp_bps", self.lp_bps),
            ("incentive_bps", self.incentive_bps),
            ("connect_bps", self.connect_bps),
            ("withdraw_bps", self.withdraw_bps),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise WrongFeeConfigurationError(f"{name} must be non-negative: {v}")
        if self.trade_fee_bps >= BPS_DENOM:
            raise WrongFeeConfigurationError(
                f"admin + lp + incentive + connect must be < {BPS_DENOM}, got {self.trade_fee_bps}"
            )
        if self.withdraw_bps >= BPS_DENOM:
            raise WrongFeeConfigurationError(f"withdraw_bps must be < {BPS_DENOM}: {self.withdraw_bps}")

    @property
    def trade_fee_bps(self) -> int:
        return self.admin_bps + self.lp_bps + self.incentive_bps + self.connect_bps


# Fee set used for general pools by the deployment tooling.
DEFAULT_FEE_CONFIG = FeeConfig(admin_bps=0, lp_bps=27, incentive_bps=3, connect_bps=0, withdraw_bps=10)


def collect_fee(amount: int, fee_bps: int) -> int:
    """floor(amount * fee_bps / 10_000)"""
    require_u64("amount", amount)
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be an int")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise WrongFeeConfigurationError(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")
    return (amount * fee_bps) // BPS_DENOM


@dataclass(frozen=True)
class ProtocolFees:
    """Protocol-side fees taken from one coin."""

    admin: int = 0
    connect: int = 0
    incentive: int = 0

    @property
    def total(self) -> int:
        return self.admin + self.connect + self.incentive


def collect_protocol_fees(amount: int, config: FeeConfig) -> ProtocolFees:
    """Admin, connect and incentive fees on ``amount``, each floored separately."""
    return ProtocolFees(
        admin=collect_fee(amount, config.admin_bps),
        connect=collect_fee(amount, config.connect_bps),
        incentive=collect_fee(amount, config.incentive_bps),
    )
