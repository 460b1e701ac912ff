"""Handler declaration: the ``listening``/``priority`` tags and the listener mixin."""

from __future__ import annotations

import sys
from typing import Any, Callable, TypeVar

from eventmanager.domain.bus import EventManager, get_event_manager
from eventmanager.services.discovery import LISTENING_ATTR, NAMESPACE_ATTR, PRIORITY_ATTR

F = TypeVar("F", bound=Callable)


def _check_priority(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"priority must be an int, got {value!r}")
    return value


def _declaring_namespace(depth: int) -> dict[str, Any] | None:
    """Locals of the class body at ``depth`` and of the function enclosing it.

    Module-level scopes are left out; their names are reachable through the
    handler's ``__globals__`` and may still be defined later.
    """
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return None

    namespace: dict[str, Any] = {}
    for scope in (frame.f_back, frame):
        if scope is not None and scope.f_locals is not scope.f_globals:
            namespace.update(scope.f_locals)
    return namespace or None


def listening(
    fn: F | None = None, *, priority: int | None = None
) -> F | Callable[[F], F]:
    """Tag a method as an event handler.

    Usable bare (``@listening``) or with a priority
    (``@listening(priority=10)``). The handled event type is taken from the
    annotation of the method's single parameter.
    """
    if priority is not None:
        _check_priority(priority)
    namespace = _declaring_namespace(1)

    def decorator(func: F) -> F:
        setattr(func, LISTENING_ATTR, True)
        if namespace is not None:
            setattr(func, NAMESPACE_ATTR, namespace)
        if priority is not None:
            setattr(func, PRIORITY_ATTR, priority)
        return func

    if fn is not None:
        return decorator(fn)
    return decorator


def priority(value: int) -> Callable[[F], F]:
    """Declare the priority of a handler method; higher runs earlier."""
    value = _check_priority(value)

    def decorator(func: F) -> F:
        setattr(func, PRIORITY_ATTR, value)
        return func

    return decorator


class EventListener:
    """Mixin for objects whose ``@listening`` methods should receive events."""

    def register_events(self, manager: EventManager | None = None) -> None:
        (manager or get_event_manager()).register(self)

    def unregister_events(self, manager: EventManager | None = None) -> None:
        (manager or get_event_manager()).unregister(self)
