"""Change notification for selections.

A selection does not keep its own listener list. It publishes a
:class:`SelectionChanged` on an :class:`EventBus` after every committed
mutation; the bus is either private to the selection or shared with other
components that want to hear about several selections at once.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar
from weakref import WeakMethod

from .utils.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for events carried by :class:`EventBus`."""


@dataclass(slots=True)
class SelectionChanged(Event):
    """Published after a selection's ranges, direction or fake state changed.

    Attributes:
        selection: The selection that changed; handlers on a shared bus use
                   it to tell selections apart.
        name: The change kind, ``"change"``.
    """

    selection: Any
    name: str = "change"


# Event types published too often to log each delivery.
_QUIET_EVENT_TYPES: set[type] = {SelectionChanged}


def set_event_quiet(event_type: type[Event], quiet: bool = True) -> None:
    """Turn the per-publish debug line for ``event_type`` off or back on."""

    if quiet:
        _QUIET_EVENT_TYPES.add(event_type)
    else:
        _QUIET_EVENT_TYPES.discard(event_type)


def is_event_quiet(event_type: type[Event]) -> bool:
    return event_type in _QUIET_EVENT_TYPES


class EventBus(Generic[E]):
    """Synchronous publish/subscribe bus keyed by event type.

    Handlers run in subscription order before :meth:`publish` returns.
    Bound methods are held weakly, so a listener object going away also
    drops its subscription; plain functions and lambdas are held strongly.

    The bus is not thread-safe; use it from the thread owning the
    selections that publish on it.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: defaultdict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register ``handler`` for ``event_type``; registering twice delivers twice."""

        self._handlers[event_type].append(_HandlerRef.create(handler))
        logger.debug("%s subscribed to %s", _handler_name(handler), event_type.__name__)

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Drop the first registration of ``handler``; unknown handlers are ignored."""

        refs = self._handlers.get(event_type, ())
        for position, handler_ref in enumerate(refs):
            if handler_ref.matches(handler):
                del refs[position]
                logger.debug(
                    "%s unsubscribed from %s", _handler_name(handler), event_type.__name__
                )
                return

    def publish(self, event: E, *, raise_errors: bool = False) -> None:
        """Deliver ``event`` to the handlers registered for its exact type.

        Handlers subscribed while the event is being delivered only see
        later events. By default a failing handler is logged and delivery
        goes on; with ``raise_errors`` the exception propagates to the
        publisher and the remaining handlers are skipped.
        """

        event_type = type(event)
        refs = self._handlers.get(event_type)
        if not refs:
            return
        if event_type not in _QUIET_EVENT_TYPES:
            logger.debug("Publishing %s to %d handler(s)", event_type.__name__, len(refs))

        dead: list[_HandlerRef] = []
        try:
            for handler_ref in tuple(refs):
                handler = handler_ref.resolve()
                if handler is None:
                    dead.append(handler_ref)
                    continue
                try:
                    handler(event)
                except Exception:
                    if raise_errors:
                        raise
                    logger.exception(
                        "Handler %s failed on %s", _handler_name(handler), event_type.__name__
                    )
        finally:
            for handler_ref in dead:
                if handler_ref in refs:
                    refs.remove(handler_ref)


class _HandlerRef:
    """Weak reference for bound methods, strong reference for everything else."""

    __slots__ = ("_target", "_is_weak")

    def __init__(self, target: Any, is_weak: bool) -> None:
        self._target = target
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if not (hasattr(handler, "__self__") and hasattr(handler, "__func__")):
            return cls(handler, is_weak=False)
        try:
            target = WeakMethod(handler)
        except TypeError:
            # Owner does not support weak references.
            return cls(handler, is_weak=False)
        return cls(target, is_weak=True)

    def resolve(self) -> Handler | None:
        """Return the handler, or ``None`` once its owner was collected."""

        return self._target() if self._is_weak else self._target

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        return resolved is not None and resolved == handler


def _handler_name(handler: Handler) -> str:
    owner = getattr(handler, "__self__", None)
    func = getattr(handler, "__func__", None)
    if owner is not None and func is not None:
        return f"{type(owner).__name__}.{func.__name__}"
    return getattr(handler, "__name__", repr(handler))


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "SelectionChanged",
    "is_event_quiet",
    "set_event_quiet",
]
