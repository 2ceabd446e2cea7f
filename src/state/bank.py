"""Per-token fee bank state."""

from __future__ import annotations

from dataclasses import dataclass

from .balances import Timestamp, TokenId


@dataclass(frozen=True)
class Bank:
    """
    Accumulator of protocol fees collected in one token.

    Attributes:
        token: Token the fees are denominated in
        balance: Fees held, not yet withdrawn
        total_collected: Lifetime fees deposited
        last_capture_time: Time of the last balance snapshot (0 = never)
        captured_balance: Balance recorded by the last snapshot
    """

    token: TokenId
    balance: int = 0
    total_collected: int = 0
    last_capture_time: Timestamp = 0
    captured_balance: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.token, str) or not self.token:
            raise ValueError("token must be a non-empty string")
        for name in ("balance", "total_collected", "last_capture_time", "captured_balance"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
