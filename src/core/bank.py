"""
Fee bank transitions.

Deposits take a balance snapshot at most once per 6 hours of injected time.
"""

from __future__ import annotations

from dataclasses import replace

from ..kernels.python.u256 import require_u64
from ..state.balances import Timestamp
from ..state.bank import Bank
from .aggregation import BANK_SNAPSHOT_INTERVAL_SECONDS, should_capture
from .errors import InsufficientBalanceError, InvalidParameterError


def deposit(bank: Bank, amount: int, now: Timestamp = 0) -> Bank:
    require_u64("amount", amount)
    balance = require_u64("bank balance", bank.balance + amount)
    out = replace(bank, balance=balance, total_collected=bank.total_collected + amount)
    if should_capture(bank.last_capture_time, now, BANK_SNAPSHOT_INTERVAL_SECONDS):
        out = replace(out, last_capture_time=now, captured_balance=balance)
    return out


def withdraw(bank: Bank, amount: int) -> Bank:
    require_u64("amount", amount)
    if amount == 0:
        raise InvalidParameterError("withdraw amount must be positive")
    if amount > bank.balance:
        raise InsufficientBalanceError(f"bank {bank.token} holds {bank.balance}, requested {amount}")
    return replace(bank, balance=bank.balance - amount)
