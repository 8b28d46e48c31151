"""In-process event bus carrying entity mutations from the store."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("planwise.events")

EventHandler = Callable[[dict[str, Any]], None]

# Payload: {"record": <mapping or model>, "type": <record type>}
ENTITY_MUTATED = "entity.mutated"


class EventBus:
    """Dispatches events to subscribers by event name."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Register a callback for an event."""
        self._handlers[event_name].append(handler)

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        """Emit an event to all subscribers, in subscription order."""
        handlers = self._handlers.get(event_name, [])
        logger.debug("Emitting %s to %d handler(s)", event_name, len(handlers))
        for handler in handlers:
            handler(payload)

    def publish_mutation(self, record: Any, record_type: str) -> None:
        """Announce that the store created or updated an entity."""
        self.emit(ENTITY_MUTATED, {"record": record, "type": record_type})
