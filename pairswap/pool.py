"""Two-asset constant product liquidity pool.

A pool holds reserves of exactly one asset pair and owns the share ledger
for that pair. Every mutating operation is one transaction:

1. Pre-state (reserves + ledger) is snapshotted under the pool lock
2. Steps run in their documented order, recording each completed
   gateway transfer
3. On any exception the snapshot is restored, the recorded transfers
   are reversed newest first and the exception propagates
4. On success the queued events are appended to the event log before
   the lock is released, so log order matches commit order

So a failed call leaves reserves, share balances, custody balances and
the event log exactly as they were.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from pairswap.amm import ConstantProduct, constant_product
from pairswap.errors import (
    InsufficientInitialLiquidity,
    InsufficientLiquidityBurned,
    InsufficientOutputAmount,
    InvalidAccount,
    InvalidAsset,
    InvariantViolation,
    NoLiquidity,
    ReentrantCall,
    SlippageExceeded,
    TransferError,
    ZeroSharesMinted,
)
from pairswap.events import Event, EventLog, LiquidityAdded, LiquidityRemoved, Swap
from pairswap.gateway import AssetGateway
from pairswap.ledger import LedgerSnapshot, LiquidityShareLedger
from pairswap.safe_int import S, require_uint256
from pairswap.types import normalize_asset, require_positive

logger = structlog.get_logger()

_IN = "in"
_OUT = "out"


@dataclass
class _Transaction:
    """Undo journal for one pool operation."""

    operation: str
    reserves: tuple[int, int]
    ledger: LedgerSnapshot
    # (direction, asset, counterparty, amount) per completed transfer
    transfers: list[tuple[str, str, str, int]] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)

    def emit(self, event: Event) -> None:
        self.events.append(event)


class LiquidityPool:
    """Constant product pool for one unordered asset pair.

    Attributes:
        pool_id: Identifier, also the custody account at the gateway
        asset_a: First asset as given at creation
        asset_b: Second asset as given at creation
    """

    def __init__(
        self,
        pool_id: str,
        asset_a: str,
        asset_b: str,
        gateway: AssetGateway,
        events: EventLog | None = None,
        math: ConstantProduct = constant_product,
    ) -> None:
        self.pool_id = pool_id
        self.asset_a = normalize_asset(asset_a)
        self.asset_b = normalize_asset(asset_b)
        self._gateway = gateway
        self._events = events if events is not None else EventLog()
        self._math = math
        self._ledger = LiquidityShareLedger(controller=self)
        self._reserve_a = 0
        self._reserve_b = 0
        self._lock = threading.RLock()
        self._tx: _Transaction | None = None

    def __repr__(self) -> str:
        return (
            f"LiquidityPool(pool_id={self.pool_id!r}, asset_a={self.asset_a!r}, "
            f"asset_b={self.asset_b!r}, reserves=({self._reserve_a}, {self._reserve_b}))"
        )

    # --- Read access ---

    @property
    def ledger(self) -> LiquidityShareLedger:
        return self._ledger

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def total_supply(self) -> int:
        with self._read():
            return self._ledger.total_supply

    def share_balance(self, holder: str) -> int:
        with self._read():
            return self._ledger.balance_of(holder)

    def get_reserves(self) -> tuple[int, int]:
        """Snapshot of (reserve_a, reserve_b)."""
        with self._read():
            return self._reserve_a, self._reserve_b

    def get_state(self) -> tuple[int, int, int]:
        """Consistent snapshot of (reserve_a, reserve_b, total_supply)."""
        with self._read():
            return self._reserve_a, self._reserve_b, self._ledger.total_supply

    def has_asset(self, asset: str) -> bool:
        try:
            return normalize_asset(asset) in (self.asset_a, self.asset_b)
        except InvalidAsset:
            return False

    def other_asset(self, asset: str) -> str:
        """The pool's asset that is not ``asset``.

        Raises:
            InvalidAsset: If asset is not in this pool
        """
        asset = self._check_asset(asset)
        return self.asset_b if asset == self.asset_a else self.asset_a

    def reserves_for(self, from_asset: str) -> tuple[int, int]:
        """Reserves ordered as (reserve_in, reserve_out) for ``from_asset``."""
        from_asset = self._check_asset(from_asset)
        with self._read():
            return self._ordered_reserves(from_asset)

    def quote(self, from_asset: str, amount_in: int) -> int:
        """Output a swap of ``amount_in`` of ``from_asset`` would pay now.

        Raises:
            InvalidAsset: If from_asset is not in this pool
            ZeroAmount: If amount_in is not positive
            NoLiquidity: If either reserve is empty
        """
        from_asset = self._check_asset(from_asset)
        require_positive(amount_in, "amount_in")
        with self._read():
            amount_out = self._quote(from_asset, amount_in)
        logger.debug(
            "quote",
            pool=self.pool_id[-8:],
            from_asset=from_asset,
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return amount_out

    # --- Mutations ---

    def add_liquidity(self, provider: str, amount_a: int, amount_b: int) -> int:
        """Deposit both assets and mint shares to ``provider``.

        The whole of both amounts is taken into the reserves. When the
        amounts are off the current ratio the shares are priced by the
        scarcer side and the surplus stays in the pool.

        Returns:
            Number of shares minted

        Raises:
            InvalidAccount: If provider is the pool's custody account
            ZeroAmount: If either amount is not positive
            InsufficientInitialLiquidity: If a first deposit mints nothing
            ZeroSharesMinted: If a later deposit mints nothing
            TransferError: If either asset cannot be pulled from provider
        """
        self._check_account(provider)
        require_positive(amount_a, "amount_a")
        require_positive(amount_b, "amount_b")

        with self._transaction("add_liquidity") as tx:
            supply = self._ledger.total_supply
            if supply == 0:
                minted = self._math.initial_shares(amount_a, amount_b)
                if minted == 0:
                    raise InsufficientInitialLiquidity(
                        f"Deposit of {amount_a}/{amount_b} mints no shares"
                    )
            else:
                minted = self._math.proportional_shares(
                    amount_a, amount_b, self._reserve_a, self._reserve_b, supply
                )
                if minted == 0:
                    raise ZeroSharesMinted(f"Deposit of {amount_a}/{amount_b} mints no shares")

            new_reserve_a = (S(self._reserve_a) + amount_a).to_uint256()
            new_reserve_b = (S(self._reserve_b) + amount_b).to_uint256()

            self._pull(tx, self.asset_a, provider, amount_a)
            self._pull(tx, self.asset_b, provider, amount_b)
            self._ledger.mint(provider, minted, caller=self)
            self._reserve_a, self._reserve_b = new_reserve_a, new_reserve_b
            tx.emit(LiquidityAdded(self.pool_id, provider, amount_a, amount_b, minted))

        logger.info(
            "liquidity_added",
            pool=self.pool_id[-8:],
            provider=provider,
            amount_a=amount_a,
            amount_b=amount_b,
            minted_shares=minted,
            first_deposit=supply == 0,
        )
        return minted

    def remove_liquidity(self, provider: str, share_amount: int) -> tuple[int, int]:
        """Burn ``provider``'s shares and pay out the proportional reserves.

        Returns:
            (amount_a, amount_b) paid to provider

        Raises:
            InvalidAccount: If provider is the pool's custody account
            ZeroAmount: If share_amount is not positive
            NoLiquidity: If no shares are outstanding
            InsufficientShares: If provider holds fewer shares
            InsufficientLiquidityBurned: If either payout rounds to zero
            TransferError: If either payout cannot be delivered
        """
        self._check_account(provider)
        require_positive(share_amount, "share_amount")

        with self._transaction("remove_liquidity") as tx:
            supply = self._ledger.total_supply
            if supply == 0:
                raise NoLiquidity(f"Pool {self.pool_id} has no shares outstanding")

            self._ledger.burn(provider, share_amount, caller=self)
            amount_a, amount_b = self._math.withdrawal_amounts(
                share_amount, self._reserve_a, self._reserve_b, supply
            )
            if amount_a == 0 or amount_b == 0:
                raise InsufficientLiquidityBurned(
                    f"Burning {share_amount} shares pays {amount_a}/{amount_b}"
                )

            self._reserve_a = (S(self._reserve_a) - amount_a).value
            self._reserve_b = (S(self._reserve_b) - amount_b).value
            self._pay(tx, self.asset_a, provider, amount_a)
            self._pay(tx, self.asset_b, provider, amount_b)
            tx.emit(LiquidityRemoved(self.pool_id, provider, amount_a, amount_b, share_amount))

        logger.info(
            "liquidity_removed",
            pool=self.pool_id[-8:],
            provider=provider,
            amount_a=amount_a,
            amount_b=amount_b,
            share_amount=share_amount,
        )
        return amount_a, amount_b

    def swap(
        self,
        trader: str,
        from_asset: str,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> int:
        """Sell ``amount_in`` of ``from_asset`` for the other asset.

        Works in both directions.

        Returns:
            Amount of the other asset paid to trader

        Raises:
            InvalidAccount: If trader is the pool's custody account
            ZeroAmount: If amount_in is not positive
            InvalidAsset: If from_asset is not in this pool
            NoLiquidity: If either reserve is empty
            InsufficientOutputAmount: If the trade would pay nothing
            SlippageExceeded: If the output is below min_amount_out
            TransferError: If either leg of the trade fails
            InvariantViolation: If k would decrease
        """
        self._check_account(trader)
        require_positive(amount_in, "amount_in")
        from_asset = self._check_asset(from_asset)
        to_asset = self.other_asset(from_asset)
        require_uint256(min_amount_out, "min_amount_out")

        with self._transaction("swap") as tx:
            reserve_in, reserve_out = self._ordered_reserves(from_asset)
            amount_out = self._quote(from_asset, amount_in)
            if amount_out == 0:
                raise InsufficientOutputAmount(f"Input {amount_in} {from_asset} buys nothing")
            if amount_out < min_amount_out:
                logger.warning(
                    "swap_slippage_exceeded",
                    pool=self.pool_id[-8:],
                    trader=trader,
                    amount_out=amount_out,
                    min_amount_out=min_amount_out,
                )
                raise SlippageExceeded(amount_out, min_amount_out)

            k_before = self._math.invariant(reserve_in, reserve_out)
            new_reserve_in = (S(reserve_in) + amount_in).to_uint256()
            new_reserve_out = (S(reserve_out) - amount_out).value

            self._pull(tx, from_asset, trader, amount_in)
            self._pay(tx, to_asset, trader, amount_out)
            self._set_ordered_reserves(from_asset, new_reserve_in, new_reserve_out)

            k_after = self._math.invariant(new_reserve_in, new_reserve_out)
            if k_after < k_before:
                logger.error(
                    "invariant_violation",
                    pool=self.pool_id,
                    k_before=k_before,
                    k_after=k_after,
                )
                raise InvariantViolation(f"k decreased from {k_before} to {k_after}")
            tx.emit(Swap(self.pool_id, trader, from_asset, amount_in, amount_out))

        logger.info(
            "swap_executed",
            pool=self.pool_id[-8:],
            trader=trader,
            from_asset=from_asset,
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return amount_out

    def transfer_shares(self, sender: str, recipient: str, amount: int) -> None:
        """Move pool shares between holders."""
        with self._read():
            self._ledger.transfer(sender, recipient, amount)
        logger.info(
            "shares_transferred",
            pool=self.pool_id[-8:],
            sender=sender,
            recipient=recipient,
            amount=amount,
        )

    # --- Internals ---

    def _check_account(self, account: str) -> None:
        # The custody account is never a counterparty of its own pool
        if not isinstance(account, str) or not account:
            raise InvalidAccount(f"Invalid account: {account!r}")
        if account.lower() == self.pool_id.lower():
            raise InvalidAccount(f"Pool {self.pool_id} cannot trade with itself")

    def _check_asset(self, asset: str) -> str:
        asset = normalize_asset(asset)
        if asset not in (self.asset_a, self.asset_b):
            raise InvalidAsset(f"Asset {asset} is not in pool {self.pool_id}")
        return asset

    def _ordered_reserves(self, from_asset: str) -> tuple[int, int]:
        if from_asset == self.asset_a:
            return self._reserve_a, self._reserve_b
        return self._reserve_b, self._reserve_a

    def _set_ordered_reserves(self, from_asset: str, reserve_in: int, reserve_out: int) -> None:
        if from_asset == self.asset_a:
            self._reserve_a, self._reserve_b = reserve_in, reserve_out
        else:
            self._reserve_a, self._reserve_b = reserve_out, reserve_in

    def _quote(self, from_asset: str, amount_in: int) -> int:
        reserve_in, reserve_out = self._ordered_reserves(from_asset)
        if reserve_in == 0 or reserve_out == 0:
            raise NoLiquidity(f"Pool {self.pool_id} has empty reserves")
        return self._math.get_amount_out(amount_in, reserve_in, reserve_out)

    def _pull(self, tx: _Transaction, asset: str, sender: str, amount: int) -> None:
        if not self._gateway.transfer_in(asset, sender, amount):
            raise TransferError(asset, sender, amount, reason="inbound transfer rejected")
        tx.transfers.append((_IN, asset, sender, amount))

    def _pay(self, tx: _Transaction, asset: str, recipient: str, amount: int) -> None:
        if not self._gateway.transfer_out(asset, recipient, amount):
            raise TransferError(asset, recipient, amount, reason="outbound transfer rejected")
        tx.transfers.append((_OUT, asset, recipient, amount))

    @contextmanager
    def _read(self) -> Iterator[None]:
        with self._lock:
            if self._tx is not None:
                raise ReentrantCall(f"Pool {self.pool_id} is inside {self._tx.operation}")
            yield

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[_Transaction]:
        with self._read():
            tx = _Transaction(
                operation=operation,
                reserves=(self._reserve_a, self._reserve_b),
                ledger=self._ledger.snapshot(caller=self),
            )
            self._tx = tx
            try:
                yield tx
            except BaseException as exc:
                self._rollback(tx, exc)
                raise
            finally:
                self._tx = None

            for event in tx.events:
                self._events.append(event)

    def _rollback(self, tx: _Transaction, exc: BaseException) -> None:
        self._reserve_a, self._reserve_b = tx.reserves
        self._ledger.restore(tx.ledger, caller=self)

        for direction, asset, account, amount in reversed(tx.transfers):
            try:
                if direction == _IN:
                    reversed_ok = self._gateway.transfer_out(asset, account, amount)
                else:
                    reversed_ok = self._gateway.transfer_in(asset, account, amount)
            except Exception:
                logger.exception(
                    "transfer_reversal_failed",
                    pool=self.pool_id,
                    operation=tx.operation,
                    asset=asset,
                    account=account,
                    amount=amount,
                )
                continue
            if not reversed_ok:
                logger.error(
                    "transfer_reversal_rejected",
                    pool=self.pool_id,
                    operation=tx.operation,
                    asset=asset,
                    account=account,
                    amount=amount,
                )

        logger.warning(
            "pool_operation_aborted",
            pool=self.pool_id[-8:],
            operation=tx.operation,
            error=type(exc).__name__,
            reversed_transfers=len(tx.transfers),
        )


__all__ = ["LiquidityPool"]
