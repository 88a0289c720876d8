"""Pool engine error classes.

Every failure aborts the current operation and leaves registry, pool and
ledger state unchanged. Checked-arithmetic failures are raised from
pairswap.safe_int and are ArithmeticError subclasses, not PoolError.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base error for pool engine operations."""

    pass


# --- Validation: checked before any mutation ---


class ValidationError(PoolError):
    """Request is malformed regardless of pool state."""

    pass


class IdenticalAsset(ValidationError):
    """Both sides of a pair are the same asset."""

    pass


class DuplicatePair(ValidationError):
    """A pool already exists for this unordered pair."""

    pass


class InvalidAsset(ValidationError):
    """Asset is empty or not one of the pool's two assets."""

    pass


class ZeroAmount(ValidationError):
    """Amount must be positive."""

    pass


class InvalidAccount(ValidationError):
    """Account is empty or is the pool's own custody account."""

    pass


# --- State: depend on current reserves and balances ---


class StateError(PoolError):
    """Operation is not possible in the pool's current state."""

    pass


class NoLiquidity(StateError):
    """Pool has no shares outstanding or an empty reserve."""

    pass


class InsufficientShares(StateError):
    """Holder owns fewer shares than requested."""

    pass


class InsufficientInitialLiquidity(StateError):
    """First deposit would mint zero shares."""

    pass


class ZeroSharesMinted(StateError):
    """Deposit is too small to mint any shares at the current ratio."""

    pass


class InsufficientLiquidityBurned(StateError):
    """Burning these shares would pay out nothing on one side."""

    pass


class InsufficientOutputAmount(StateError):
    """Swap input is too small to produce any output."""

    pass


# --- Everything else ---


class SlippageExceeded(PoolError):
    """Quoted output is below the caller's minimum."""

    def __init__(self, amount_out: int, min_amount_out: int) -> None:
        super().__init__(f"Output {amount_out} below minimum {min_amount_out}")
        self.amount_out = amount_out
        self.min_amount_out = min_amount_out


class TransferError(PoolError):
    """Asset transfer through the gateway was rejected."""

    def __init__(self, asset: str, account: str, amount: int, reason: str = "rejected") -> None:
        super().__init__(f"Transfer of {amount} {asset} for {account} failed: {reason}")
        self.asset = asset
        self.account = account
        self.amount = amount
        self.reason = reason


class InvariantViolation(PoolError):
    """Constant product decreased across a swap. Indicates a bug."""

    pass


class Unauthorized(PoolError):
    """Caller is not the ledger's controlling pool."""

    pass


class ReentrantCall(PoolError):
    """Pool was called back into while one of its operations was running."""

    pass


class PairNotFound(PoolError):
    """No pool exists for the requested pair or id."""

    pass


__all__ = [
    "PoolError",
    "ValidationError",
    "IdenticalAsset",
    "DuplicatePair",
    "InvalidAsset",
    "ZeroAmount",
    "InvalidAccount",
    "StateError",
    "NoLiquidity",
    "InsufficientShares",
    "InsufficientInitialLiquidity",
    "ZeroSharesMinted",
    "InsufficientLiquidityBurned",
    "InsufficientOutputAmount",
    "SlippageExceeded",
    "TransferError",
    "InvariantViolation",
    "Unauthorized",
    "ReentrantCall",
    "PairNotFound",
]
