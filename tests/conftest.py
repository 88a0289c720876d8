"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from pairswap.api.endpoints import get_engine, get_faucet_enabled
from pairswap.api.main import app
from pairswap.engine import Engine
from pairswap.events import EventLog
from pairswap.gateway import AssetBank
from pairswap.pool import LiquidityPool
from pairswap.registry import PoolRegistry
from tests.helpers import ALICE, USDC, WETH, make_funded_engine


@pytest.fixture
def engine() -> Engine:
    """Engine with ALICE, BOB and CAROL funded in WETH and USDC."""
    return make_funded_engine()


@pytest.fixture
def bank(engine: Engine) -> AssetBank:
    return engine.bank


@pytest.fixture
def registry(engine: Engine) -> PoolRegistry:
    return engine.registry


@pytest.fixture
def event_log(engine: Engine) -> EventLog:
    return engine.events


@pytest.fixture
def pool(registry: PoolRegistry) -> LiquidityPool:
    """Empty WETH/USDC pool (asset_a=WETH, asset_b=USDC)."""
    return registry.create_pair(WETH, USDC)


@pytest.fixture
def seeded_pool(pool: LiquidityPool) -> LiquidityPool:
    """WETH/USDC pool after ALICE's first deposit of (100, 400): 200 shares."""
    pool.add_liquidity(ALICE, 100, 400)
    return pool


@pytest.fixture
def client(engine: Engine) -> Iterator[TestClient]:
    """API client bound to the ``engine`` fixture with the faucet enabled."""
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_faucet_enabled] = lambda: True
    yield TestClient(app)
    app.dependency_overrides.clear()
