"""Liquidity share ledger.

Fungible accounting of claims on one pool's reserves. Minting and burning
are reserved for the controller the ledger was constructed with (its
owning pool); holders can only move shares among themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pairswap.errors import InsufficientShares, Unauthorized
from pairswap.safe_int import S
from pairswap.types import require_positive


@dataclass(frozen=True)
class LedgerSnapshot:
    """Opaque copy of ledger state, used for transaction rollback."""

    total_supply: int
    balances: tuple[tuple[str, int], ...]


class LiquidityShareLedger:
    """Share balances for one pool.

    Invariant: the sum of all balances equals total_supply. Zero balances
    are dropped so ``holders()`` lists only accounts with shares.
    """

    def __init__(self, controller: Any) -> None:
        """Bind the ledger to its controller.

        Args:
            controller: The only object allowed to mint, burn, snapshot and
                restore. Compared by identity.
        """
        self._controller = controller
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def holders(self) -> MappingProxyType[str, int]:
        """Read-only copy of all non-zero balances."""
        return MappingProxyType(dict(self._balances))

    def mint(self, holder: str, amount: int, *, caller: Any) -> None:
        """Create ``amount`` new shares for ``holder``.

        Raises:
            Unauthorized: If caller is not the controller
            ZeroAmount: If amount is not positive
        """
        self._check_caller(caller)
        require_positive(amount, "share amount")
        total = (S(self._total_supply) + amount).to_uint256()
        self._balances[holder] = (S(self.balance_of(holder)) + amount).to_uint256()
        self._total_supply = total

    def burn(self, holder: str, amount: int, *, caller: Any) -> None:
        """Destroy ``amount`` of ``holder``'s shares.

        Raises:
            Unauthorized: If caller is not the controller
            ZeroAmount: If amount is not positive
            InsufficientShares: If holder owns fewer than ``amount`` shares
        """
        self._check_caller(caller)
        require_positive(amount, "share amount")
        balance = self.balance_of(holder)
        if balance < amount:
            raise InsufficientShares(f"{holder} holds {balance} shares, {amount} requested")
        self._set_balance(holder, balance - amount)
        self._total_supply -= amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move shares between holders. Total supply is unchanged.

        Raises:
            ZeroAmount: If amount is not positive
            InsufficientShares: If sender owns fewer than ``amount`` shares
        """
        require_positive(amount, "share amount")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientShares(f"{sender} holds {balance} shares, {amount} requested")
        if sender == recipient:
            return
        self._set_balance(sender, balance - amount)
        self._balances[recipient] = self.balance_of(recipient) + amount

    def snapshot(self, *, caller: Any) -> LedgerSnapshot:
        self._check_caller(caller)
        return LedgerSnapshot(self._total_supply, tuple(self._balances.items()))

    def restore(self, snapshot: LedgerSnapshot, *, caller: Any) -> None:
        self._check_caller(caller)
        self._total_supply = snapshot.total_supply
        self._balances = dict(snapshot.balances)

    def _check_caller(self, caller: Any) -> None:
        if caller is not self._controller:
            raise Unauthorized("Only the owning pool may change share supply")

    def _set_balance(self, holder: str, amount: int) -> None:
        if amount:
            self._balances[holder] = amount
        else:
            self._balances.pop(holder, None)
