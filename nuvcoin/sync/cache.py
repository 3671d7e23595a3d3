"""
Local-first synchronization cache for transaction records.

`SyncCache` is the only component that reads or writes the record collection.
Reads are served from memory, writes are applied to the durable store before
the call returns, and the remote authority is contacted on a single
background worker so no public call ever waits on the network.

Policy
------
- Reconciliation (fetch the remote set, replace local state if it differs)
  runs at most once per process lifetime once it succeeds. Failed attempts
  may be retried by a later `list()` call after `min_sync_interval` seconds.
  Records added or removed while the fetch is in flight, and optimistic
  records not yet confirmed, keep their local value; a `save_all` during
  the fetch wins over the fetched set.
- Each optimistic `add` moves through ``PendingLocal -> ConfirmedRemote``
  (the placeholder is swapped for the authority record, unless a newer
  local write with the same id superseded it) or
  ``PendingLocal -> PermanentLocal`` (remote failure, never retried here).
- Remote failures are logged and swallowed; local state is always trusted.
- Change notifications caused by this instance's own reconciliation writes
  are suppressed for `echo_window` seconds.

Usage:
    from nuvcoin.infrastructure import HttpRemoteProvider, JsonFileStore
    from nuvcoin.sync import SyncCache

    with SyncCache(JsonFileStore(".nuvcoin"), HttpRemoteProvider()) as cache:
        unsubscribe = cache.subscribe(lambda: print(len(cache.list())))
        cache.add({"kind": "EXPENSE", "amountMinorUnits": 5000, "occurredOn": "2026-02-01"})
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from nuvcoin.config import get_settings
from nuvcoin.domain.models import TransactionRecord
from nuvcoin.domain.normalization import RecordLike, normalize_record
from nuvcoin.infrastructure.abstract import DurableStore, RemoteProvider, UnsupportedOperation
from nuvcoin.infrastructure.store import load_records, save_records
from nuvcoin.sync.events import ChangeBus, ChangeEvent, ChangeSource
from nuvcoin.utils.logging import get_logger

log = get_logger(__name__)

Snapshot = List[TransactionRecord]


@dataclass(frozen=True)
class PendingLocal:
    """Written locally; the remote create has not answered yet."""

    temp_id: str


@dataclass(frozen=True)
class ConfirmedRemote:
    """The authority accepted the record and assigned `authority_id`."""

    temp_id: str
    authority_id: str


@dataclass(frozen=True)
class PermanentLocal:
    """The remote create failed; the record only exists locally."""

    temp_id: str
    error: str


WriteState = Union[PendingLocal, ConfirmedRemote, PermanentLocal]


def _upsert(
    records: Sequence[TransactionRecord],
    record: TransactionRecord,
    position: int = 0,
) -> Tuple[TransactionRecord, ...]:
    """Replace the entry with the same id in place, or insert `record` at `position`."""
    items = list(records)
    for index, existing in enumerate(items):
        if existing.id == record.id:
            items[index] = record
            return tuple(items)
    items.insert(position, record)
    return tuple(items)


class SyncCache:
    """
    In-memory record cache backed by a durable store and a remote authority.

    Parameters
    ----------
    store : DurableStore
        Key-value storage shared with other process instances.
    remote : RemoteProvider | None
        Remote authority; when None the cache is purely local.
    storage_key : str | None
        Key holding the JSON array of records. Defaults to ``settings.storage_key``.
    min_sync_interval : float | None
        Minimum seconds between reconciliation attempts.
    echo_window : float | None
        Seconds after a reconciliation write during which the change signal
        published for that write is treated as an echo and ignored.
    clock : Callable[[], float]
        Monotonic time source (injected by tests).

    Notes
    -----
    All state below is guarded by one re-entrant lock. Subscriber callbacks
    run outside the lock, either on the thread that made the write or on the
    background worker.
    """

    def __init__(
        self,
        store: DurableStore,
        remote: Optional[RemoteProvider] = None,
        *,
        storage_key: Optional[str] = None,
        min_sync_interval: Optional[float] = None,
        echo_window: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = get_settings()
        self.store = store
        self.remote = remote
        self.storage_key = storage_key or settings.storage_key
        self.min_sync_interval = (
            settings.sync_min_interval if min_sync_interval is None else min_sync_interval
        )
        self.echo_window = settings.echo_window if echo_window is None else echo_window
        self._clock = clock

        self._lock = threading.RLock()
        self._cache: Optional[Tuple[TransactionRecord, ...]] = None
        self._hydrated = False
        self._sync_in_flight = False
        self._last_sync_at: Optional[float] = None
        self._last_remote_write_at: Optional[float] = None
        self._writes: Dict[str, WriteState] = {}
        # Local writes made while a reconciliation fetch is in flight.
        self._touched_ids: Set[str] = set()
        self._replaced_all = False

        self._bus = ChangeBus()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="nuvcoin-sync")
        self._pending: Set[Future[Any]] = set()
        self._closed = False
        self._unwatch = store.watch(self.storage_key, self._on_store_changed)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def hydrated(self) -> bool:
        with self._lock:
            return self._hydrated

    @property
    def sync_in_flight(self) -> bool:
        with self._lock:
            return self._sync_in_flight

    @property
    def last_sync_at(self) -> Optional[float]:
        with self._lock:
            return self._last_sync_at

    @property
    def last_remote_write_at(self) -> Optional[float]:
        with self._lock:
            return self._last_remote_write_at

    def write_state(self, record_id: str) -> Optional[WriteState]:
        """Lifecycle state of an optimistic write, keyed by its temporary id."""
        with self._lock:
            return self._writes.get(record_id)

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    def list(self) -> Snapshot:
        """
        Return the current snapshot without blocking.

        May schedule one background reconciliation as a side effect.
        """
        with self._lock:
            snapshot = self._current()
            should_sync = self._should_reconcile()
            if should_sync:
                self._sync_in_flight = True
                self._touched_ids = set()
                self._replaced_all = False
        if should_sync and not self._submit(self._reconcile):
            with self._lock:
                self._sync_in_flight = False
        return list(snapshot)

    def add(self, record: RecordLike) -> Snapshot:
        """
        Optimistically add `record` and return the updated snapshot.

        Mappings are normalized first; a missing id is replaced by a locally
        generated one that serves as the temporary id. An existing entry with
        the same id is replaced rather than duplicated.
        """
        local = normalize_record(record)
        with self._lock:
            records = _upsert(self._current(), local)
            self._persist(records)
            self._touch(local.id)
            if self.remote is not None:
                self._writes[local.id] = PendingLocal(temp_id=local.id)
            snapshot = list(records)
        self._publish(ChangeSource.SAME_INSTANCE)
        log.debug("Optimistic add applied", extra={"record_id": local.id})

        if self.remote is not None:
            self._submit(self._push_create, local)
        return snapshot

    def remove(self, record_id: str) -> Snapshot:
        """Delete `record_id` locally and return the updated snapshot.

        The remote delete is best-effort and never re-inserts on failure.
        """
        with self._lock:
            records = tuple(r for r in self._current() if r.id != record_id)
            self._persist(records)
            self._touch(record_id)
            snapshot = list(records)
        self._publish(ChangeSource.SAME_INSTANCE)
        log.debug("Local remove applied", extra={"record_id": record_id})

        if self.remote is not None:
            self._submit(self._push_remove, record_id)
        return snapshot

    def save_all(self, records: Iterable[RecordLike]) -> Snapshot:
        """
        Replace the whole local collection.

        The remote side is asked for a bulk save in the background; providers
        without a batch endpoint raise `UnsupportedOperation`, which is logged
        and otherwise ignored.
        """
        normalized = tuple(normalize_record(r) for r in records)
        with self._lock:
            self._persist(normalized)
            if self._sync_in_flight:
                self._replaced_all = True
            snapshot = list(normalized)
        self._publish(ChangeSource.SAME_INSTANCE)

        if self.remote is not None:
            self._submit(self._push_bulk_save, normalized)
        return snapshot

    def subscribe(self, on_change: Callable[[], None]) -> Callable[[], None]:
        """
        Call `on_change` after the cache is refreshed by a change signal.

        Returns a function that removes the subscription.
        """

        def _handler(event: ChangeEvent) -> None:
            if not self._refresh_from_store(event):
                return
            on_change()

        return self._bus.subscribe(_handler)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until queued background work has finished.

        Returns False if `timeout` elapsed first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = set(self._pending)
            if not pending:
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _, not_done = wait_futures(pending, timeout=remaining)
            if not_done and deadline is not None and time.monotonic() >= deadline:
                return False

    def close(self) -> None:
        """Stop watching the store and drain the background worker."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._unwatch()
        self.wait_idle()
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "SyncCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _current(self) -> Tuple[TransactionRecord, ...]:
        if self._cache is None:
            self._cache = tuple(load_records(self.store, self.storage_key))
        return self._cache

    def _should_reconcile(self) -> bool:
        if self.remote is None or self._closed:
            return False
        if self._hydrated or self._sync_in_flight:
            return False
        if self._last_sync_at is None:
            return True
        return self._clock() - self._last_sync_at >= self.min_sync_interval

    def _persist(self, records: Tuple[TransactionRecord, ...], from_remote: bool = False) -> None:
        """Write `records` to the store and the cache. Caller holds the lock."""
        self._cache = records
        try:
            save_records(self.store, self.storage_key, records)
        except OSError as exc:
            log.error(
                "Durable store write failed; keeping in-memory state",
                extra={"key": self.storage_key, "error": str(exc)},
            )
            return
        if from_remote:
            self._last_remote_write_at = self._clock()

    def _publish(self, source: ChangeSource, from_remote: bool = False) -> None:
        event = ChangeEvent(
            source=source, key=self.storage_key, at=self._clock(), from_remote=from_remote
        )
        self._bus.publish(event)

    def _is_echo(self, event: ChangeEvent) -> bool:
        """Only reconciliation writes of this instance can echo; user writes never do."""
        if event.source is not ChangeSource.SAME_INSTANCE or not event.from_remote:
            return False
        if self._last_remote_write_at is None:
            return False
        return 0 <= event.at - self._last_remote_write_at < self.echo_window

    def _touch(self, record_id: str) -> None:
        """Remember a local write that an in-flight reconciliation must not undo."""
        if self._sync_in_flight:
            self._touched_ids.add(record_id)

    def _merge_local_writes(
        self, fetched: Tuple[TransactionRecord, ...]
    ) -> Tuple[TransactionRecord, ...]:
        """
        Overlay local writes onto `fetched`. Caller holds the lock.

        Ids written during the fetch and optimistic records the authority has
        not confirmed take their local value: still present means kept (in
        local order, ahead of the remote records), absent means deleted.
        """
        if self._replaced_all:
            return self._current()
        keep = set(self._touched_ids)
        keep.update(
            temp_id
            for temp_id, state in self._writes.items()
            if isinstance(state, (PendingLocal, PermanentLocal))
        )
        if not keep:
            return fetched
        local = tuple(r for r in self._current() if r.id in keep)
        return local + tuple(r for r in fetched if r.id not in keep)

    def _refresh_from_store(self, event: ChangeEvent) -> bool:
        with self._lock:
            if self._is_echo(event):
                log.debug("Ignoring echo of reconciliation write", extra={"key": event.key})
                return False
            self._cache = tuple(load_records(self.store, self.storage_key))
        return True

    def _on_store_changed(self, key: str) -> None:
        # Delivered later on the worker, never on the writer's thread.
        event = ChangeEvent(source=ChangeSource.OTHER_INSTANCE, key=key, at=self._clock())
        self._submit(self._bus.publish, event)

    def _submit(self, fn: Callable[..., Any], *args: Any) -> bool:
        with self._lock:
            if self._closed:
                log.debug("Cache closed; dropping background task", extra={"task": fn.__name__})
                return False
            try:
                future = self._executor.submit(fn, *args)
            except RuntimeError:
                # executor already shut down
                return False
            self._pending.add(future)
        future.add_done_callback(self._task_done)
        return True

    def _task_done(self, future: Future[Any]) -> None:
        with self._lock:
            self._pending.discard(future)

    def _reconcile(self) -> None:
        changed = False
        try:
            remote_records = self.remote.list()  # type: ignore[union-attr]
            fetched = tuple(normalize_record(r) for r in remote_records)
            with self._lock:
                local_writes = len(self._touched_ids)
                merged = self._merge_local_writes(fetched)
                changed = merged != self._current()
                if changed:
                    self._persist(merged, from_remote=True)
                self._hydrated = True
            log.info(
                "Reconciled with remote",
                extra={"records": len(fetched), "changed": changed, "local_writes": local_writes},
            )
        except Exception as exc:  # noqa: BLE001 - remote failures degrade to local state
            log.warning("Reconciliation failed; keeping local state", extra={"error": str(exc)})
        finally:
            with self._lock:
                self._sync_in_flight = False
                self._touched_ids = set()
                self._replaced_all = False
                self._last_sync_at = self._clock()
        if changed:
            self._publish(ChangeSource.SAME_INSTANCE, from_remote=True)

    def _push_create(self, local: TransactionRecord) -> None:
        try:
            confirmed = normalize_record(self.remote.create(local))  # type: ignore[union-attr]
        except Exception as exc:  # noqa: BLE001 - the optimistic record stays
            with self._lock:
                self._writes[local.id] = PermanentLocal(temp_id=local.id, error=str(exc))
            log.warning(
                "Remote create failed; record kept locally",
                extra={"record_id": local.id, "error": str(exc)},
            )
            return

        with self._lock:
            current = self._current()
            ids = [r.id for r in current]
            position = ids.index(local.id) if local.id in ids else -1
            superseded = position >= 0 and current[position] != local
            if position >= 0 and not superseded:
                remaining = tuple(r for r in current if r.id != local.id)
                self._persist(_upsert(remaining, confirmed, position), from_remote=True)
            if not superseded:
                # A newer add with the same id keeps its own PendingLocal state.
                self._writes[local.id] = ConfirmedRemote(
                    temp_id=local.id, authority_id=confirmed.id
                )
            self._hydrated = True

        if position < 0 or superseded:
            # Removed or rewritten locally while the create was in flight; the local write wins.
            log.info(
                "Placeholder changed before confirmation; deleting remote copy",
                extra={
                    "record_id": local.id,
                    "authority_id": confirmed.id,
                    "superseded": superseded,
                },
            )
            self._push_remove(confirmed.id)
            return

        log.debug(
            "Optimistic record confirmed",
            extra={"record_id": local.id, "authority_id": confirmed.id},
        )
        self._publish(ChangeSource.SAME_INSTANCE)

    def _push_remove(self, record_id: str) -> None:
        try:
            self.remote.remove(record_id)  # type: ignore[union-attr]
        except Exception as exc:  # noqa: BLE001 - local deletion is final
            log.warning(
                "Remote remove failed; local deletion kept",
                extra={"record_id": record_id, "error": str(exc)},
            )

    def _push_bulk_save(self, records: Tuple[TransactionRecord, ...]) -> None:
        try:
            self.remote.bulk_save(records)  # type: ignore[union-attr]
        except UnsupportedOperation:
            log.debug("Remote bulk save not supported; kept local copy only")
        except Exception as exc:  # noqa: BLE001
            log.warning("Remote bulk save failed", extra={"error": str(exc)})


__all__ = [
    "ConfirmedRemote",
    "PendingLocal",
    "PermanentLocal",
    "Snapshot",
    "SyncCache",
    "WriteState",
]
