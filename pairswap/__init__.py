"""Two-asset constant product liquidity pool engine."""

from pairswap.gateway import AssetBank, AssetGateway, BankGateway
from pairswap.ledger import LiquidityShareLedger
from pairswap.pool import LiquidityPool
from pairswap.registry import PoolRegistry

__version__ = "0.1.0"
__all__ = [
    "AssetBank",
    "AssetGateway",
    "BankGateway",
    "LiquidityPool",
    "LiquidityShareLedger",
    "PoolRegistry",
    "__version__",
]
