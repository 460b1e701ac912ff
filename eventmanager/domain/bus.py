"""Synchronous in-process event manager."""

from __future__ import annotations

import inspect
import logging
import threading
from typing import Any

from eventmanager.config import EventManagerConfig
from eventmanager.domain.events import Event
from eventmanager.domain.models import EventCaller, MethodCaller
from eventmanager.repos.memory import HandlerRepository
from eventmanager.services.discovery import discover_handlers

logger = logging.getLogger(__name__)


class EventManager:
    """Registers listeners and fires events at them.

    Events are matched on their exact runtime type: a listener for ``A``
    never sees a subclass ``B`` of ``A``, and the reverse. A listener's own
    callers run highest priority first; across listeners, delivery follows
    registration order and carries no priority guarantee.

    Delivery is synchronous, in the calling thread. One lock guards the
    registry; ``call_event`` works on a snapshot taken under that lock, so
    handlers may register, unregister or fire further events, and those
    changes apply from the next dispatch on.
    """

    def __init__(
        self,
        config: EventManagerConfig | None = None,
        repository: HandlerRepository | None = None,
    ) -> None:
        self.config = config or EventManagerConfig()
        self._repo = repository or HandlerRepository()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def instantiate_event(self, event_type: type[Event]) -> None:
        """Make sure ``event_type`` has an entry, even an empty one."""
        _check_event_type(event_type)
        with self._lock:
            self._repo.ensure_event_type(event_type)

    def register_event(
        self, event_type: type[Event], listener: Any, caller: EventCaller
    ) -> None:
        """Register ``caller`` for ``listener`` on ``event_type``.

        Duplicates are not detected: registering the same caller twice makes
        it run twice per dispatch.
        """
        _check_event_type(event_type)
        if not isinstance(caller, EventCaller):
            raise TypeError(f"caller must be an EventCaller, got {caller!r}")
        with self._lock:
            self._repo.add(event_type, listener, caller)
        logger.debug(
            "Registered %r for %s on %r", caller, event_type.__name__, listener
        )

    def register(self, listener: Any) -> None:
        """Register every ``@listening`` method of ``listener``."""
        specs = discover_handlers(type(listener), self.config.strict_signatures)
        with self._lock:
            for spec in specs:
                self.register_event(spec.event_type, listener, MethodCaller(spec))
        if not specs:
            logger.debug("No handler methods found on %r", listener)

    def unregister(self, listener: Any) -> None:
        """Remove ``listener`` from every event type. Absent listeners are ignored."""
        with self._lock:
            removed = self._repo.remove_listener(listener)
        if removed:
            logger.debug("Unregistered %r from %d event type(s)", listener, removed)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def call_event(self, event: Event) -> Event:
        """Fire ``event`` at every listener of its exact type and return it.

        Every caller gets the same ``event`` object. A failing caller is
        logged and skipped; this never raises for handler errors.
        """
        event_type = type(event)
        with self._lock:
            self._repo.ensure_event_type(event_type)
            registrations = self._repo.snapshot(event_type)

        for listener, callers in registrations:
            for caller in callers:
                caller.invoke(listener, event)
        return event

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def event_types(self) -> list[type[Event]]:
        with self._lock:
            return self._repo.event_types()

    def listeners(self, event_type: type[Event]) -> list[Any]:
        with self._lock:
            return self._repo.listeners_for(event_type)

    def callers(self, event_type: type[Event], listener: Any) -> list[EventCaller]:
        with self._lock:
            return self._repo.callers_for(event_type, listener)


def _check_event_type(event_type: Any) -> None:
    if not (inspect.isclass(event_type) and issubclass(event_type, Event)):
        raise TypeError(f"event_type must be an Event subclass, got {event_type!r}")


# ── Process-wide instance ─────────────────────────────────────────────

_event_manager: EventManager | None = None
_event_manager_lock = threading.Lock()


def get_event_manager() -> EventManager:
    """Return the process-wide ``EventManager``, creating it on first use."""
    global _event_manager
    if _event_manager is None:
        with _event_manager_lock:
            if _event_manager is None:
                _event_manager = EventManager(EventManagerConfig.from_env())
    return _event_manager
