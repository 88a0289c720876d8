"""Append-only audit log of registry and pool events.

Events are frozen dataclasses. The log assigns each appended event a
sequence number starting at 1; pollers pass the last seen number back as
``since`` to receive only newer events.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import asdict, dataclass, field, replace
from typing import Any

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class Event:
    """Base class for logged events."""

    seq: int = field(default=0, kw_only=True)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Flatten to a dict with the event name under ``event``."""
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class PairCreated(Event):
    asset_a: str
    asset_b: str
    pool_id: str


@dataclass(frozen=True)
class LiquidityAdded(Event):
    pool_id: str
    provider: str
    amount_a: int
    amount_b: int
    minted_shares: int


@dataclass(frozen=True)
class LiquidityRemoved(Event):
    pool_id: str
    provider: str
    amount_a: int
    amount_b: int
    share_amount: int


@dataclass(frozen=True)
class Swap(Event):
    pool_id: str
    trader: str
    from_asset: str
    amount_in: int
    amount_out: int


Subscriber = Callable[[Event], None]


class EventLog:
    """Ordered, append-only event log with poll and subscribe access.

    Subscribers are called synchronously after the event is appended. A
    subscriber that raises is logged and skipped; the event stays in the
    log and later subscribers still run.
    """

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def append(self, event: Event) -> Event:
        """Stamp the event with the next sequence number and store it."""
        with self._lock:
            stamped = replace(event, seq=len(self._events) + 1)
            self._events.append(stamped)
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(stamped)
            except Exception:
                logger.exception("event_subscriber_failed", event=stamped.name, seq=stamped.seq)
        return stamped

    def events(self, since: int = 0) -> list[Event]:
        """Return events with ``seq > since`` in append order."""
        with self._lock:
            return list(self._events[max(since, 0) :])

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for future events.

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


__all__ = [
    "Event",
    "PairCreated",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swap",
    "EventLog",
]
