from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Callable, Generic, Type, TypeVar

from ..core.constants import MASTER_DATA_CHANGED_TOPIC

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MasterDataChanged:
    """Which master collections changed, so listeners can decide to refetch."""

    workers: bool = False
    teams: bool = False
    sites: bool = False
    companies: bool = False

    topic = MASTER_DATA_CHANGED_TOPIC

    def as_dict(self) -> dict:
        return asdict(self)


E = TypeVar("E")


class Subscription(Generic[E]):
    def __init__(self, bus: "EventBus", event_type: Type[E], handler: Callable[[E], None]):
        self._bus = bus
        self.event_type = event_type
        self.handler = handler

    def cancel(self) -> None:
        self._bus.unsubscribe(self)


class EventBus:
    """In-process publish/subscribe keyed by event class.

    Handlers run synchronously in subscription order. A failing handler is
    logged and does not stop the others.
    """

    def __init__(self):
        self._handlers: dict[type, list[Subscription]] = defaultdict(list)

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> Subscription[E]:
        sub = Subscription(self, event_type, handler)
        self._handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        handlers = self._handlers.get(sub.event_type, [])
        if sub in handlers:
            handlers.remove(sub)

    def publish(self, event) -> int:
        delivered = 0
        for sub in list(self._handlers.get(type(event), [])):
            try:
                sub.handler(event)
                delivered += 1
            except Exception:
                logger.exception("Event handler failed for %s", type(event).__name__)
        return delivered
