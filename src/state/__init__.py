"""
State for the AMM core: pools, fee banks, share balances and aggregates.
"""

from .aggregates import ReserveSnapshot, SmaBucket, TradeTotals, WeeklySma
from .bank import Bank
from .lp import LSPTable
from .pools import PoolKind, PoolState, StableParams

__all__ = [
    "Bank",
    "LSPTable",
    "PoolKind",
    "PoolState",
    "ReserveSnapshot",
    "SmaBucket",
    "StableParams",
    "TradeTotals",
    "WeeklySma",
]
