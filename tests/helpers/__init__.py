"""Test helpers module for shared test utilities.

- constants: Asset identifiers, accounts and balances
- factories: Funded engines, bank snapshots and failure-injecting gateways
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    GOLD,
    SILVER,
    STARTING_BALANCE,
    USDC,
    WETH,
    WETH_CHECKSUM,
)
from tests.helpers.factories import FlakyGateway, bank_snapshot, make_funded_engine

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "WETH_CHECKSUM",
    "GOLD",
    "SILVER",
    "ALICE",
    "BOB",
    "CAROL",
    "STARTING_BALANCE",
    # Factories
    "make_funded_engine",
    "bank_snapshot",
    "FlakyGateway",
]
