"""Wiring of an in-memory bank and a pool registry."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

import structlog

from pairswap.events import EventLog
from pairswap.gateway import AssetBank
from pairswap.registry import PoolRegistry

logger = structlog.get_logger()


@dataclass
class Engine:
    """A registry whose pools custody assets in ``bank``."""

    bank: AssetBank = field(default_factory=AssetBank)
    events: EventLog = field(default_factory=EventLog)
    registry: PoolRegistry = field(init=False)

    def __post_init__(self) -> None:
        self.registry = PoolRegistry(gateway_factory=self.bank.gateway_for, events=self.events)


_default_engine: Engine | None = None
_default_lock = threading.Lock()


def get_default_engine() -> Engine:
    """Process-wide engine used by the HTTP service."""
    global _default_engine
    with _default_lock:
        if _default_engine is None:
            _default_engine = Engine()
            logger.info("engine_created")
        return _default_engine
