"""Subscription hub for entity change notifications."""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field

from cost_tracker.domain.events import EntityKind, StoreEvent

Listener = Callable[[StoreEvent], None]

_logger = logging.getLogger(__name__)


@dataclass
class EventHub:
    """Delivers committed entity changes to subscribed readers."""

    _listeners: dict[EntityKind, list[Listener]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def subscribe(self, kind: EntityKind, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``kind`` and return an unsubscribe callable."""
        listeners = self._listeners[kind]
        if listener not in listeners:
            listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def publish(self, event: StoreEvent) -> None:
        """Deliver an event to every listener for its kind, in subscription order."""
        for listener in list(self._listeners.get(event.kind, [])):
            try:
                listener(event)
            except Exception:
                _logger.exception(
                    "Listener failed for %s %s",
                    event.kind.value,
                    event.action.value,
                    extra={"entity_id": str(event.entity_id)},
                )
