"""In-memory storage for handler registrations."""

from __future__ import annotations

from typing import Any

from eventmanager.domain.events import Event
from eventmanager.domain.models import EventCaller


class _Registration:
    """A listener and its callers for one event type, highest priority first."""

    __slots__ = ("listener", "callers")

    def __init__(self, listener: Any) -> None:
        self.listener = listener
        self.callers: list[EventCaller] = []


class HandlerRepository:
    """Dict-backed store: event type -> listener -> ordered callers.

    Listeners are keyed by identity, so any object can listen, hashable or not.
    """

    def __init__(self) -> None:
        self._store: dict[type[Event], dict[int, _Registration]] = {}

    def ensure_event_type(self, event_type: type[Event]) -> None:
        self._store.setdefault(event_type, {})

    def event_types(self) -> list[type[Event]]:
        return list(self._store)

    def add(self, event_type: type[Event], listener: Any, caller: EventCaller) -> None:
        """Append ``caller`` and re-sort the listener's callers by priority.

        ``list.sort`` is stable, so equal priorities keep insertion order.
        """
        listeners = self._store.setdefault(event_type, {})
        registration = listeners.get(id(listener))
        if registration is None:
            registration = listeners[id(listener)] = _Registration(listener)
        registration.callers.append(caller)
        registration.callers.sort(key=lambda c: c.priority, reverse=True)

    def remove_listener(self, listener: Any) -> int:
        """Drop ``listener`` from every event type; return how many it was under."""
        removed = 0
        for listeners in self._store.values():
            if listeners.pop(id(listener), None) is not None:
                removed += 1
        return removed

    def listeners_for(self, event_type: type[Event]) -> list[Any]:
        return [r.listener for r in self._store.get(event_type, {}).values()]

    def callers_for(self, event_type: type[Event], listener: Any) -> list[EventCaller]:
        registration = self._store.get(event_type, {}).get(id(listener))
        return list(registration.callers) if registration else []

    def snapshot(self, event_type: type[Event]) -> list[tuple[Any, tuple[EventCaller, ...]]]:
        """Copy of the registrations for ``event_type``, safe to iterate while mutating."""
        return [
            (r.listener, tuple(r.callers))
            for r in self._store.get(event_type, {}).values()
        ]
