"""Broadcast channel for auth lifecycle events.

Usage:
    bus = EventBus()

    subscription = bus.subscribe()
    async for event in subscription:
        match event.kind:
            case AuthEventKind.SIGN_IN_FAILED:
                ...

    bus.close()  # ends every subscriber stream
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator

import structlog

from authhub.events import AuthEvent

log = structlog.get_logger()

# Marks the end of a subscriber stream
_CLOSED = object()


class EventSubscription:
    """A single subscriber's view of the bus.

    Receives every event published after it was created, in bus order, until
    the bus closes or the subscription is cancelled.
    """

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._done = False

    def _push(self, item: object) -> None:
        self._queue.put_nowait(item)

    def __aiter__(self) -> AsyncIterator[AuthEvent]:
        return self

    async def __anext__(self) -> AuthEvent:
        if self._done:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._done = True
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    def drain(self) -> list[AuthEvent]:
        """Return the events already queued without waiting."""
        events: list[AuthEvent] = []
        while not self._done:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            if item is _CLOSED:
                self._done = True
                break
            events.append(item)  # type: ignore[arg-type]
        return events

    def cancel(self) -> None:
        """Detach from the bus and end this stream."""
        self._bus._unsubscribe(self)
        self._push(_CLOSED)

    @property
    def pending(self) -> int:
        return self._queue.qsize()


class EventBus:
    """Multi-producer, multi-consumer broadcast of AuthEvent values.

    Publishing never blocks and never raises: with zero subscribers the event
    is dropped, after close() publishing is a silent no-op.
    """

    def __init__(self) -> None:
        self._subscribers: list[EventSubscription] = []
        self._lock = threading.Lock()
        self._closed = False

    def publish(self, event: AuthEvent) -> None:
        """Deliver an event to every live subscriber."""
        with self._lock:
            if self._closed:
                return
            for subscription in self._subscribers:
                subscription._push(event)

    def subscribe(self) -> EventSubscription:
        """Open a new subscriber stream.

        Subscribing after close() returns a stream that is already finished.
        """
        subscription = EventSubscription(self)
        with self._lock:
            if self._closed:
                subscription._push(_CLOSED)
            else:
                self._subscribers.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: EventSubscription) -> None:
        with self._lock:
            try:
                self._subscribers.remove(subscription)
            except ValueError:
                pass  # Already removed

    def close(self) -> None:
        """Stop accepting events and end all subscriber streams. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscribers, self._subscribers = self._subscribers, []
        for subscription in subscribers:
            subscription._push(_CLOSED)
        log.debug("event_bus_closed", subscribers=len(subscribers))

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
