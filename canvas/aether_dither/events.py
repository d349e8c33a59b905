"""Host event bus: pointer and resize input for renderers.

The host pushes events as they arrive; they are delivered to subscribers
in order when the host calls ``dispatch()`` once per frame, before ticking
the renderers. Listeners therefore see at most one frame of staleness.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

WINDOW = "window"


# ── Event types ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class PointerMoveEvent:
    """Pointer position in window coordinates."""

    x: float
    y: float


@dataclass(frozen=True)
class ResizeEvent:
    """New layout bounds of a host element, in window coordinates."""

    element: str
    x: int
    y: int
    width: int
    height: int


HostEvent = PointerMoveEvent | ResizeEvent
Listener = Callable[[HostEvent], None]


# ── Bus ──────────────────────────────────────────────────────────────


@dataclass
class HostEvents:
    """Queues host events and fans them out per frame."""

    _queue: list[HostEvent] = field(default_factory=list)
    _listeners: dict[type, list[Listener]] = field(default_factory=dict)

    def push(self, event: HostEvent) -> None:
        self._queue.append(event)

    def subscribe(self, event_type: type, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns an idempotent unsubscribe callable."""
        self._listeners.setdefault(event_type, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(event_type, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def dispatch(self) -> int:
        """Deliver queued events in arrival order. Returns the event count."""
        pending, self._queue = self._queue, []
        for event in pending:
            for listener in list(self._listeners.get(type(event), ())):
                listener(event)
        return len(pending)

    def listener_count(self, event_type: type) -> int:
        return len(self._listeners.get(event_type, ()))

    @property
    def pending(self) -> int:
        return len(self._queue)
