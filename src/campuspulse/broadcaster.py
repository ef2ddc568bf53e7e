"""Per-session fan-out of live feedback updates.

Each dashboard viewer subscribes to one session and gets its own unbounded
queue. Submitting feedback publishes a ``PulseUpdate`` that is offered to
every queue registered under that session.

Thread safety notes:
    - A small registry lock guards subscribe/unsubscribe and the copy of a
      session's subscribers taken by ``publish``.
    - Offers to individual queues happen after that lock is released.
    - Each subscription has its own lock so a close and an offer never
      interleave; nothing is queued behind the close marker.
"""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from typing import Dict, Iterator, Optional

from .logging_utils import get_logger
from .models import PulseUpdate

_CLOSED = object()


def _key(session_code: str) -> str:
    return (session_code or "").strip().upper()


class SubscriptionReader:
    """Read-only side of a subscription queue. One consumer only."""

    def __init__(self, channel: "_Channel") -> None:
        self._channel = channel

    @property
    def closed(self) -> bool:
        return self._channel.closed

    def get(self, timeout: Optional[float] = None) -> Optional[PulseUpdate]:
        """Wait for the next update.

        Returns ``None`` when the subscription has been closed. Raises
        ``queue.Empty`` if ``timeout`` elapses first.
        """
        if self._channel.drained:
            return None
        item = self._channel.items.get(timeout=timeout)
        if item is _CLOSED:
            self._channel.drained = True
            return None
        return item

    def __iter__(self) -> Iterator[PulseUpdate]:
        while True:
            update = self.get()
            if update is None:
                return
            yield update


class _Channel:
    def __init__(self) -> None:
        self.items: "queue.Queue[object]" = queue.Queue()
        self.closed = False
        self.drained = False
        self._lock = threading.Lock()

    def offer(self, update: PulseUpdate) -> bool:
        with self._lock:
            if self.closed:
                return False
            try:
                self.items.put_nowait(update)
            except queue.Full:
                return False
            return True

    def close(self) -> bool:
        with self._lock:
            if self.closed:
                return False
            self.closed = True
            self.items.put_nowait(_CLOSED)
            return True


class PulseSubscription:
    """Handle returned by ``PulseUpdateStream.subscribe``.

    Use it as a context manager so the subscription is released when the
    consumer stops, including on cancellation.
    """

    def __init__(self, stream: "PulseUpdateStream", session_code: str) -> None:
        self.session_code = session_code
        self.id = uuid.uuid4()
        self._stream = stream
        self._channel = _Channel()
        self.reader = SubscriptionReader(self._channel)

    def close(self) -> None:
        self._stream.unsubscribe(self)

    def __enter__(self) -> "PulseSubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[PulseUpdate]:
        return iter(self.reader)

    def __repr__(self) -> str:
        return f"PulseSubscription(session_code={self.session_code!r}, id={self.id})"


class PulseUpdateStream:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        # session key -> subscription id -> subscription
        self._groups: Dict[str, Dict[uuid.UUID, PulseSubscription]] = {}
        self._lock = threading.Lock()
        self._logger = logger or get_logger("broadcaster")

    def subscribe(self, session_code: str) -> PulseSubscription:
        subscription = PulseSubscription(self, session_code)
        key = _key(session_code)
        with self._lock:
            group = self._groups.setdefault(key, {})
            group[subscription.id] = subscription
            total = len(group)
        self._logger.debug("Subscriber added for %s (total: %d)", key, total)
        return subscription

    def unsubscribe(self, subscription: PulseSubscription) -> None:
        key = _key(subscription.session_code)
        with self._lock:
            group = self._groups.get(key)
            removed = None
            if group is not None:
                removed = group.pop(subscription.id, None)
                if not group:
                    del self._groups[key]
        if subscription._channel.close() and removed is not None:
            self._logger.debug("Subscriber removed for %s", key)

    def publish(self, update: PulseUpdate) -> int:
        """Offer ``update`` to every subscriber of its session.

        Returns the number of queues that accepted it. Never blocks on a
        consumer and never raises for a closed one.
        """
        key = _key(update.feedback.session_code)
        with self._lock:
            group = self._groups.get(key)
            if not group:
                return 0
            targets = list(group.values())

        delivered = 0
        for subscription in targets:
            if subscription._channel.offer(update):
                delivered += 1
        return delivered

    def subscriber_count(self, session_code: Optional[str] = None) -> int:
        with self._lock:
            if session_code is None:
                return sum(len(group) for group in self._groups.values())
            return len(self._groups.get(_key(session_code), {}))
