"""Asset transfer gateway: the only way assets enter or leave a pool.

Pools depend on the AssetGateway protocol. AssetBank is an in-memory
implementation that keeps every account's balances in one place and hands
out a BankGateway bound to each pool's custody account.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol, runtime_checkable

import structlog

from pairswap.errors import TransferError, ZeroAmount
from pairswap.safe_int import S, require_uint256
from pairswap.types import normalize_asset

logger = structlog.get_logger()


@runtime_checkable
class AssetGateway(Protocol):
    """Moves assets between holders and one pool's custody account.

    transfer_in and transfer_out return False (or raise TransferError) when
    the movement cannot happen; the pool aborts the operation either way.
    """

    def transfer_in(self, asset: str, sender: str, amount: int) -> bool:
        """Move ``amount`` of ``asset`` from ``sender`` into the pool."""
        ...

    def transfer_out(self, asset: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` of ``asset`` from the pool to ``recipient``."""
        ...

    def balance_of(self, asset: str, holder: str) -> int:
        """Current balance of ``holder`` in ``asset``."""
        ...


class AssetBank:
    """In-memory balance book for every account and asset.

    Transfers are all-or-nothing: a move either debits and credits in full
    or leaves both accounts untouched.
    """

    def __init__(self) -> None:
        self._balances: dict[str, dict[str, int]] = defaultdict(dict)
        self._lock = threading.RLock()

    def balance_of(self, asset: str, holder: str) -> int:
        asset = normalize_asset(asset)
        with self._lock:
            return self._balances[asset].get(holder, 0)

    def credit(self, asset: str, holder: str, amount: int) -> int:
        """Mint ``amount`` of ``asset`` into ``holder``'s account.

        Returns:
            The holder's new balance
        """
        asset = normalize_asset(asset)
        require_uint256(amount, "amount")
        with self._lock:
            balance = (S(self._balances[asset].get(holder, 0)) + amount).to_uint256()
            self._balances[asset][holder] = balance
        logger.debug("bank_credit", asset=asset, holder=holder, amount=amount)
        return balance

    def debit(self, asset: str, holder: str, amount: int) -> int:
        """Remove ``amount`` of ``asset`` from ``holder``'s account.

        Raises:
            TransferError: If the holder's balance is too small
        """
        asset = normalize_asset(asset)
        require_uint256(amount, "amount")
        with self._lock:
            current = self._balances[asset].get(holder, 0)
            if current < amount:
                raise TransferError(asset, holder, amount, reason="insufficient balance")
            self._set(asset, holder, current - amount)
            return current - amount

    def move(self, asset: str, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` between two accounts.

        Returns:
            False if ``sender`` cannot cover the amount, True otherwise
        """
        asset = normalize_asset(asset)
        require_uint256(amount, "amount")
        if amount == 0:
            raise ZeroAmount("Transfer amount must be positive")
        with self._lock:
            sender_balance = self._balances[asset].get(sender, 0)
            if sender_balance < amount:
                logger.debug(
                    "bank_move_rejected",
                    asset=asset,
                    sender=sender,
                    amount=amount,
                    balance=sender_balance,
                )
                return False
            if sender == recipient:
                return True
            recipient_balance = S(self._balances[asset].get(recipient, 0)) + amount
            self._set(asset, sender, sender_balance - amount)
            self._set(asset, recipient, recipient_balance.to_uint256())
        return True

    def gateway_for(self, account: str) -> BankGateway:
        """Gateway whose pool side is ``account`` (normally a pool id)."""
        return BankGateway(self, account)

    def _set(self, asset: str, holder: str, amount: int) -> None:
        if amount:
            self._balances[asset][holder] = amount
        else:
            self._balances[asset].pop(holder, None)


class BankGateway:
    """AssetGateway backed by an AssetBank, bound to one custody account."""

    def __init__(self, bank: AssetBank, account: str) -> None:
        self.bank = bank
        self.account = account

    def transfer_in(self, asset: str, sender: str, amount: int) -> bool:
        return self.bank.move(asset, sender, self.account, amount)

    def transfer_out(self, asset: str, recipient: str, amount: int) -> bool:
        return self.bank.move(asset, self.account, recipient, amount)

    def balance_of(self, asset: str, holder: str) -> int:
        return self.bank.balance_of(asset, holder)

    def __repr__(self) -> str:
        return f"BankGateway(account={self.account!r})"


__all__ = ["AssetGateway", "AssetBank", "BankGateway"]
