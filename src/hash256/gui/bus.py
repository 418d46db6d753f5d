"""Event bus for the GUI with per-client isolation.

This module provides an EventBus implementation that creates separate bus instances
per NiceGUI client (browser tab/window), ensuring event subscriptions don't leak
across client sessions.

Events that carry a `phase` attribute ("intent" or "state") can be subscribed
to per phase: views emit intents, controllers handle them and emit state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, Dict, List, Optional, Tuple, Type, TypeVar

from nicegui import ui

from hash256.core.utils.logging import get_logger

logger = get_logger(__name__)

TEvent = TypeVar("TEvent")

_Handler = Callable[[Any], None]
# (handler, phase filter); phase None receives every phase
_Subscription = Tuple[_Handler, Optional[str]]

# Key: client ID (str), Value: EventBus instance
_CLIENT_BUSES: Dict[str, "EventBus"] = {}


@dataclass(frozen=True, slots=True)
class BusConfig:
    """Configuration for EventBus behavior.

    Attributes:
        trace: If True, log all event emissions and handler executions.
    """

    trace: bool = False


class EventBus:
    """A typed event bus for explicit GUI signal flow with per-client isolation.

    Events are routed synchronously, in subscription order, to all subscribers
    of the event's concrete type (and matching phase, if they asked for one).
    """

    def __init__(self, client_id: str, config: BusConfig | None = None) -> None:
        self._config: BusConfig = config or BusConfig()
        self._subs: DefaultDict[Type[Any], List[_Subscription]] = DefaultDict(list)
        self._client_id: str = client_id
        logger.debug(f"[bus] Created EventBus for client {client_id}")

    def _add(self, event_type: Type[Any], handler: _Handler, phase: Optional[str]) -> None:
        subs = self._subs[event_type]
        if (handler, phase) in subs:
            logger.debug(
                f"[bus] Handler {handler.__qualname__} already subscribed to {event_type.__name__}, skipping"
            )
            return
        subs.append((handler, phase))
        logger.debug(
            f"[bus] Subscribed {handler.__qualname__} to {event_type.__name__} phase={phase} "
            f"(client={self._client_id}, total_handlers={len(subs)})"
        )

    def subscribe(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Subscribe a handler to every event of a concrete type.

        Subscribing the same handler twice has no effect, so pages can be
        rebuilt without doubling handlers.
        """
        self._add(event_type, handler, None)

    def subscribe_intent(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Subscribe to events of this type with phase == "intent"."""
        self._add(event_type, handler, "intent")

    def subscribe_state(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Subscribe to events of this type with phase == "state"."""
        self._add(event_type, handler, "state")

    def unsubscribe(self, event_type: Type[TEvent], handler: Callable[[TEvent], None]) -> None:
        """Remove a handler from an event type (all phases). Safe if never subscribed."""
        subs = self._subs.get(event_type)
        if not subs:
            return
        remaining = [s for s in subs if s[0] != handler]
        if len(remaining) != len(subs):
            self._subs[event_type] = remaining
            logger.debug(
                f"[bus] Unsubscribed {handler.__qualname__} from {event_type.__name__} "
                f"(client={self._client_id}, remaining_handlers={len(remaining)})"
            )

    def emit(self, event: Any) -> None:
        """Emit an event to all matching handlers.

        If a handler raises an exception, it is logged but doesn't prevent
        other handlers from receiving the event.
        """
        etype = type(event)
        phase = getattr(event, "phase", None)
        handlers = [h for h, p in self._subs.get(etype, []) if p is None or p == phase]

        if self._config.trace:
            logger.info(f"[bus] emit {etype.__name__}: {event} (client={self._client_id}, handlers={len(handlers)})")

        for h in handlers:
            if self._config.trace:
                name = getattr(h, "__qualname__", repr(h))
                logger.info(f"[bus] -> {etype.__name__} handled by {name} (client={self._client_id})")
            try:
                h(event)
            except Exception:
                logger.exception(
                    f"[bus] Exception in handler {getattr(h, '__qualname__', h)} for {etype.__name__} "
                    f"(client={self._client_id})"
                )

    def clear(self) -> None:
        """Clear all subscriptions from this bus."""
        count = sum(len(subs) for subs in self._subs.values())
        self._subs.clear()
        logger.debug(f"[bus] Cleared {count} subscriptions (client={self._client_id})")


def get_client_id() -> str:
    """Current NiceGUI client id; "default" if no client context is available.

    Outside a page, newer NiceGUI versions may still resolve the auto-index
    client, so callers must not assume the literal "default".
    """
    try:
        if hasattr(ui.context, "client") and hasattr(ui.context.client, "id"):
            return str(ui.context.client.id)
    except (AttributeError, RuntimeError):
        pass
    return "default"


def get_event_bus(config: BusConfig | None = None) -> EventBus:
    """Get or create the EventBus for the current NiceGUI client.

    Must be called within a NiceGUI page function. Tests create EventBus
    instances directly.
    """
    client_id = get_client_id()
    if client_id not in _CLIENT_BUSES:
        _CLIENT_BUSES[client_id] = EventBus(client_id, config)
        logger.info(f"[bus] Created new EventBus for client {client_id}")
    return _CLIENT_BUSES[client_id]


def clear_client_bus(client_id: str | None = None) -> None:
    """Clear and forget a client's bus (current client if None)."""
    if client_id is None:
        client_id = get_client_id()
    bus = _CLIENT_BUSES.pop(client_id, None)
    if bus is not None:
        bus.clear()
        logger.debug(f"[bus] Cleared bus for client {client_id}")
