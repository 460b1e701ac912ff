"""Handler descriptors: the units the event manager invokes."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from eventmanager.domain.events import Event

logger = logging.getLogger(__name__)


class HandlerSpec(BaseModel):
    """An eligible handler method found on a listener class."""

    model_config = ConfigDict(frozen=True)

    method_name: str
    event_type: type[Event]
    priority: int = 0


# ---------------------------------------------------------------------------
# Callers
# ---------------------------------------------------------------------------


class EventCaller(ABC):
    """Describes what runs when an event reaches a listener, and how early.

    Subclasses implement ``call``. The manager always goes through ``invoke``,
    which keeps a failing handler from stopping delivery to the rest.
    """

    event_type: type[Event] | None = None

    @property
    def priority(self) -> int:
        return 0

    @abstractmethod
    def call(self, listener: Any, event: Event) -> None:
        """Deliver ``event`` to ``listener``."""

    def invoke(self, listener: Any, event: Event) -> None:
        try:
            self.call(listener, event)
        except Exception:
            logger.exception(
                "Handler %r failed on %r for %s",
                self,
                listener,
                type(event).__name__,
            )


class MethodCaller(EventCaller):
    """Calls a handler method, looked up by name on the listener instance."""

    def __init__(self, spec: HandlerSpec) -> None:
        self._spec = spec

    @property
    def method_name(self) -> str:
        return self._spec.method_name

    @property
    def event_type(self) -> type[Event]:
        return self._spec.event_type

    @property
    def priority(self) -> int:
        return self._spec.priority

    def call(self, listener: Any, event: Event) -> None:
        getattr(listener, self._spec.method_name)(event)

    def __repr__(self) -> str:
        return (
            f"MethodCaller({self._spec.method_name!r}, "
            f"{self._spec.event_type.__name__}, priority={self._spec.priority})"
        )


class FunctionCaller(EventCaller):
    """Wraps ``fn(listener, event)`` for manual registration."""

    def __init__(
        self,
        fn: Callable[[Any, Event], None],
        priority: int = 0,
        event_type: type[Event] | None = None,
    ) -> None:
        if not callable(fn):
            raise TypeError(f"FunctionCaller needs a callable, got {fn!r}")
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise TypeError(f"priority must be an int, got {priority!r}")
        self._fn = fn
        self._priority = priority
        self._event_type = event_type

    @property
    def event_type(self) -> type[Event] | None:
        return self._event_type

    @property
    def priority(self) -> int:
        return self._priority

    def call(self, listener: Any, event: Event) -> None:
        self._fn(listener, event)

    def __repr__(self) -> str:
        name = getattr(self._fn, "__qualname__", repr(self._fn))
        return f"FunctionCaller({name}, priority={self._priority})"
