"""
Change notification bus for the synchronization cache.

Both kinds of change signal flow through one `ChangeBus`, tagged with their
source: `SAME_INSTANCE` when this process completed a durable write, and
`OTHER_INSTANCE` when another process sharing the store wrote the key. The
cache decides what to ignore by looking at the tag, the `from_remote` flag
and the timestamp.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List

from nuvcoin.utils.logging import get_logger

log = get_logger(__name__)


class ChangeSource(str, Enum):
    SAME_INSTANCE = "same_instance"
    OTHER_INSTANCE = "other_instance"


@dataclass(frozen=True)
class ChangeEvent:
    source: ChangeSource
    key: str
    at: float
    # Set only for the cache's own reconciliation writes, the one kind of echo.
    from_remote: bool = False


ChangeHandler = Callable[[ChangeEvent], None]


class ChangeBus:
    """Synchronous fan-out of `ChangeEvent`s to registered handlers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: List[ChangeHandler] = []

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        with self._lock:
            self._handlers.append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return _unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        """
        Deliver `event` to every handler on the calling thread.

        A failing handler is logged and does not prevent delivery to the rest.
        """
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(event)
            except Exception:  # noqa: BLE001 - one bad subscriber must not starve the others
                log.exception(
                    "Change handler failed",
                    extra={"source": event.source.value, "key": event.key},
                )

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)


__all__ = ["ChangeBus", "ChangeEvent", "ChangeHandler", "ChangeSource"]
