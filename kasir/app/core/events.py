"""Minimal in-process domain event dispatcher.

Handlers run synchronously in subscription order. A failing handler is logged
and skipped; publishing never raises, so a side effect such as receipt
rendering can not undo the operation that emitted the event.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiptRequested:
    """Emitted after a sale is persisted; consumed by the receipt renderer."""

    sale_id: UUID
    sale_number: str
    receipt_config: dict[str, Any] = field(default_factory=dict)


class EventDispatcher:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def publish(self, event: object) -> None:
        for handler in list(self._handlers[type(event)]):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %r failed for %s", handler, type(event).__name__
                )


dispatcher = EventDispatcher()
