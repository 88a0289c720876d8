"""Pool registry: at most one pool per unordered asset pair.

Pools are created on demand, indexed by a frozenset of their two assets
and kept for the registry's lifetime. Enumeration is in creation order.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from pairswap.errors import DuplicatePair, IdenticalAsset
from pairswap.events import EventLog, PairCreated
from pairswap.gateway import AssetGateway
from pairswap.pool import LiquidityPool
from pairswap.types import PairKey, derive_pool_id, normalize_asset, pair_key

logger = structlog.get_logger()

GatewayFactory = Callable[[str], AssetGateway]


class PoolRegistry:
    """Factory and index of liquidity pools.

    All pools share the registry's event log, so one poller sees pair
    creation and every pool's activity in a single ordered stream.
    """

    def __init__(self, gateway_factory: GatewayFactory, events: EventLog | None = None) -> None:
        """Initialize an empty registry.

        Args:
            gateway_factory: Called with a new pool's id, returns the
                gateway that pool moves assets through
            events: Shared event log. A fresh one is created if None.
        """
        self._gateway_factory = gateway_factory
        self.events = events if events is not None else EventLog()
        self._pools: dict[PairKey, LiquidityPool] = {}
        self._pools_by_id: dict[str, LiquidityPool] = {}
        # Creation order for enumeration
        self._ordered: list[LiquidityPool] = []
        self._lock = threading.Lock()

    def create_pair(self, asset_a: str, asset_b: str) -> LiquidityPool:
        """Create the pool for an asset pair.

        Args:
            asset_a: First asset, becomes the pool's asset_a
            asset_b: Second asset, becomes the pool's asset_b

        Returns:
            The new pool

        Raises:
            InvalidAsset: If either identifier is empty
            IdenticalAsset: If both assets are the same
            DuplicatePair: If a pool already exists for the pair, in either order,
                or the derived pool id is already registered
        """
        asset_a = normalize_asset(asset_a)
        asset_b = normalize_asset(asset_b)
        if asset_a == asset_b:
            raise IdenticalAsset(f"Cannot pair {asset_a} with itself")

        key = pair_key(asset_a, asset_b)
        with self._lock:
            if key in self._pools:
                raise DuplicatePair(
                    f"Pool {self._pools[key].pool_id} already exists for {asset_a}/{asset_b}"
                )

            pool_id = derive_pool_id(asset_a, asset_b)
            existing = self._pools_by_id.get(pool_id)
            if existing is not None:
                raise DuplicatePair(
                    f"Pool id {pool_id} for {asset_a}/{asset_b} is already registered to "
                    f"{existing.asset_a}/{existing.asset_b}"
                )
            pool = LiquidityPool(
                pool_id=pool_id,
                asset_a=asset_a,
                asset_b=asset_b,
                gateway=self._gateway_factory(pool_id),
                events=self.events,
            )
            self._pools[key] = pool
            self._pools_by_id[pool_id] = pool
            self._ordered.append(pool)
            self.events.append(PairCreated(asset_a, asset_b, pool_id))

        logger.info(
            "pair_created",
            pool=pool_id,
            asset_a=asset_a,
            asset_b=asset_b,
            pool_count=len(self._ordered),
        )
        return pool

    def get_pair(self, asset_a: str, asset_b: str) -> LiquidityPool | None:
        """Pool for an asset pair (order independent), or None."""
        key = pair_key(normalize_asset(asset_a), normalize_asset(asset_b))
        with self._lock:
            return self._pools.get(key)

    def get_pool(self, pool_id: str) -> LiquidityPool | None:
        """Pool by id, or None."""
        with self._lock:
            return self._pools_by_id.get(pool_id.lower())

    def list_pairs(self) -> list[LiquidityPool]:
        """All pools in creation order. The list is a copy."""
        with self._lock:
            return list(self._ordered)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ordered)


__all__ = ["PoolRegistry", "GatewayFactory"]
