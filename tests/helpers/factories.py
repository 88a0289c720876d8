"""Factories for banks, registries and gateways used across tests."""

from __future__ import annotations

from collections.abc import Iterable

from pairswap.engine import Engine
from pairswap.errors import TransferError
from pairswap.gateway import AssetBank, BankGateway
from tests.helpers.constants import ALICE, BOB, CAROL, STARTING_BALANCE, USDC, WETH


def make_funded_engine(
    assets: Iterable[str] = (WETH, USDC),
    accounts: Iterable[str] = (ALICE, BOB, CAROL),
    amount: int = STARTING_BALANCE,
) -> Engine:
    """Engine whose bank credits every account with ``amount`` of every asset."""
    engine = Engine()
    assets = list(assets)
    for account in accounts:
        for asset in assets:
            engine.bank.credit(asset, account, amount)
    return engine


def bank_snapshot(bank: AssetBank, assets: Iterable[str], accounts: Iterable[str]) -> dict:
    """Balances keyed by (asset, account) for before/after comparisons."""
    assets = list(assets)
    return {(asset, account): bank.balance_of(asset, account) for account in accounts for asset in assets}


class FlakyGateway(BankGateway):
    """BankGateway that fails chosen transfers.

    Usage:
        # Reject the second inbound transfer
        gateway = FlakyGateway(bank, pool_id, fail_in_on={2})

        # Raise instead of returning False
        gateway = FlakyGateway(bank, pool_id, fail_out_on={1}, raise_error=True)
    """

    def __init__(
        self,
        bank: AssetBank,
        account: str,
        fail_in_on: set[int] | None = None,
        fail_out_on: set[int] | None = None,
        raise_error: bool = False,
    ) -> None:
        super().__init__(bank, account)
        self.fail_in_on = fail_in_on or set()
        self.fail_out_on = fail_out_on or set()
        self.raise_error = raise_error
        self.in_calls = 0
        self.out_calls = 0

    def transfer_in(self, asset: str, sender: str, amount: int) -> bool:
        self.in_calls += 1
        if self.in_calls in self.fail_in_on:
            return self._fail(asset, sender, amount)
        return super().transfer_in(asset, sender, amount)

    def transfer_out(self, asset: str, recipient: str, amount: int) -> bool:
        self.out_calls += 1
        if self.out_calls in self.fail_out_on:
            return self._fail(asset, recipient, amount)
        return super().transfer_out(asset, recipient, amount)

    def _fail(self, asset: str, account: str, amount: int) -> bool:
        if self.raise_error:
            raise TransferError(asset, account, amount, reason="injected failure")
        return False
