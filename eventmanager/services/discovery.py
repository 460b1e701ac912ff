"""Discovery of ``@listening`` handler methods on listener classes."""

from __future__ import annotations

import inspect
import logging
import threading
import weakref

from eventmanager.domain.events import Event
from eventmanager.domain.models import HandlerSpec

logger = logging.getLogger(__name__)

LISTENING_ATTR = "__event_listening__"
PRIORITY_ATTR = "__event_priority__"
# Names visible where the handler was declared, for classes defined inside functions.
NAMESPACE_ATTR = "__event_namespace__"

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

_cache: weakref.WeakKeyDictionary[type, dict[bool, tuple[HandlerSpec, ...]]] = (
    weakref.WeakKeyDictionary()
)
_cache_lock = threading.Lock()


class UnresolvedAnnotation(Exception):
    """The event parameter's annotation names something that can't be found."""


def _resolve(annotation, func):
    if not isinstance(annotation, str):
        return annotation
    localns = getattr(func, NAMESPACE_ATTR, None) or {}
    try:
        return eval(annotation, func.__globals__, localns)
    except Exception as exc:
        raise UnresolvedAnnotation(f"cannot resolve annotation {annotation!r} ({exc})") from exc


def _event_param_type(func, bound: bool) -> type[Event] | str:
    """Return the event type ``func`` accepts, or the reason it doesn't qualify.

    Only the event parameter's annotation is resolved; the return type and
    anything else annotated on ``func`` is never evaluated.
    """
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError, NameError):
        return "signature cannot be inspected"

    if bound:
        params = params[1:]
    if len(params) != 1 or params[0].kind not in _POSITIONAL:
        return f"expects exactly one positional parameter, has {len(params)}"

    annotation = _resolve(params[0].annotation, func)
    if not (inspect.isclass(annotation) and issubclass(annotation, Event)):
        return f"parameter {params[0].name!r} is not annotated with an Event type"
    return annotation


def discover_handlers(cls: type, strict: bool = False) -> tuple[HandlerSpec, ...]:
    """Scan ``cls`` (and its bases) for eligible handler methods.

    A method qualifies when it is tagged with ``@listening``, takes exactly one
    positional parameter besides ``self``/``cls``, and that parameter is
    annotated with ``Event`` or a subclass. Tagged methods that don't qualify
    are skipped, or raise ``TypeError`` when ``strict`` is set. An event
    annotation that names something undefined is logged at WARNING.

    Methods come back in definition order, base classes first. Results are
    cached per class without keeping the class alive, so registering many
    instances of one class inspects it only once.
    """
    with _cache_lock:
        cached = _cache.get(cls, {}).get(strict)
    if cached is not None:
        return cached

    specs = _scan(cls, strict)
    with _cache_lock:
        return _cache.setdefault(cls, {}).setdefault(strict, specs)


def _scan(cls: type, strict: bool) -> tuple[HandlerSpec, ...]:
    names: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        names.update(dict.fromkeys(vars(klass)))

    specs: list[HandlerSpec] = []
    for name in names:
        try:
            raw = inspect.getattr_static(cls, name)
        except AttributeError:
            continue

        if isinstance(raw, (staticmethod, classmethod)):
            func, bound = raw.__func__, isinstance(raw, classmethod)
        elif inspect.isfunction(raw):
            func, bound = raw, True
        else:
            continue

        if not (getattr(raw, LISTENING_ATTR, False) or getattr(func, LISTENING_ATTR, False)):
            continue

        try:
            result = _event_param_type(func, bound)
        except UnresolvedAnnotation as exc:
            if strict:
                raise TypeError(f"{cls.__qualname__}.{name}: {exc}") from exc
            logger.warning("Not registering %s.%s: %s", cls.__qualname__, name, exc)
            continue

        if isinstance(result, str):
            if strict:
                raise TypeError(f"{cls.__qualname__}.{name}: {result}")
            logger.debug("Skipping %s.%s: %s", cls.__qualname__, name, result)
            continue

        specs.append(
            HandlerSpec(
                method_name=name,
                event_type=result,
                priority=getattr(func, PRIORITY_ATTR, getattr(raw, PRIORITY_ATTR, 0)),
            )
        )
    return tuple(specs)
