"""
Liquidity-share balance tracking.

Shares are scoped per pool_id. The per-pool total must always equal the
pool's ``lsp_supply``.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..core.errors import InsufficientBalanceError
from .balances import Amount, Owner

# Type alias
PoolId = str


class LSPTable:
    """
    Share balance table mapping (owner, pool_id) -> shares.

    Notes:
    - Balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Owner, PoolId], Amount] = {}
        self._supply: Dict[PoolId, Amount] = {}

    def copy(self) -> "LSPTable":
        out = LSPTable()
        out._balances = dict(self._balances)
        out._supply = dict(self._supply)
        return out

    def get(self, owner: Owner, pool_id: PoolId) -> Amount:
        """Get share balance for (owner, pool_id). Returns 0 if not found."""
        return self._balances.get((owner, pool_id), 0)

    def total_supply(self, pool_id: PoolId) -> Amount:
        return self._supply.get(pool_id, 0)

    def mint(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        if amount == 0:
            return
        self._balances[(owner, pool_id)] = self.get(owner, pool_id) + amount
        self._supply[pool_id] = self.total_supply(pool_id) + amount

    def burn(self, owner: Owner, pool_id: PoolId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"burn amount must be non-negative: {amount}")
        current = self.get(owner, pool_id)
        if amount > current:
            raise InsufficientBalanceError(f"insufficient shares: {current} < {amount}")
        if current == amount:
            self._balances.pop((owner, pool_id), None)
        else:
            self._balances[(owner, pool_id)] = current - amount
        self._supply[pool_id] = self.total_supply(pool_id) - amount

    def get_all_balances(self) -> Dict[Tuple[Owner, PoolId], Amount]:
        """Return all share balances."""
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"LSPTable({len(self._balances)} entries)"
