"""
Abstract interfaces for the two collaborators of the synchronization cache.

`DurableStore` is the key-value blob storage shared by every process instance
on the machine; `RemoteProvider` is the HTTP-like authority that owns the
canonical record set. Concrete adapters live in `store.py` and `remote.py`;
tests provide their own fakes that satisfy the same protocols.
"""

from __future__ import annotations

import abc
from typing import Callable, List, Optional, Protocol, Sequence, runtime_checkable

from nuvcoin.domain.models import TransactionRecord

# Called with the key whose blob changed.
WatchCallback = Callable[[str], None]
Unwatch = Callable[[], None]


class RemoteError(RuntimeError):
    """A remote call that returned a non-success status or could not be completed."""

    def __init__(self, operation: str, status: Optional[int] = None, detail: str = "") -> None:
        self.operation = operation
        self.status = status
        self.detail = detail
        message = f"remote {operation} failed"
        if status is not None:
            message += f" (status {status})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnsupportedOperation(RemoteError):
    """The remote authority does not implement this operation."""

    def __init__(self, operation: str) -> None:
        super().__init__(operation, detail="not supported by this provider")


@runtime_checkable
class DurableStore(Protocol):
    """
    Key-value blob storage shared across process instances.

    Each `set` is atomic. `watch` callbacks fire only for writes made by
    *other* instances sharing the same storage, never for this instance's
    own writes.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, blob: str) -> None:
        ...

    def watch(self, key: str, callback: WatchCallback) -> Unwatch:
        ...


@runtime_checkable
class RemoteProvider(Protocol):
    """
    Remote authority for transaction records.

    Every method raises `RemoteError` (or a transport exception) on failure.
    """

    def list(self) -> List[TransactionRecord]:
        """Fetch the full record set."""
        ...

    def create(self, record: TransactionRecord) -> TransactionRecord:
        """Persist `record` and return the authority-assigned copy."""
        ...

    def remove(self, record_id: str) -> None:
        """Delete by id; deleting an unknown id is not an error."""
        ...

    def bulk_save(self, records: Sequence[TransactionRecord]) -> None:
        """Replace the remote record set; may raise `UnsupportedOperation`."""
        ...


class AbstractRemoteProvider(abc.ABC):
    """
    Optional ABC helper for class-based providers.

    Subclasses implement `list`, `create` and `remove`; `bulk_save` is
    unsupported unless overridden.
    """

    @abc.abstractmethod
    def list(self) -> List[TransactionRecord]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def create(self, record: TransactionRecord) -> TransactionRecord:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def remove(self, record_id: str) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def bulk_save(self, records: Sequence[TransactionRecord]) -> None:
        raise UnsupportedOperation("bulk_save")


__all__ = [
    "AbstractRemoteProvider",
    "DurableStore",
    "RemoteError",
    "RemoteProvider",
    "Unwatch",
    "UnsupportedOperation",
    "WatchCallback",
]
