"""
Pytest configuration for nuvcoin.

Provides fixtures for:
- Building transaction records with sensible defaults
- An in-memory remote authority with failure injection
- Shared in-memory stores that behave like two tabs on one storage area
- A manually advanced clock for timing-dependent cache behavior
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence

import pytest

from nuvcoin.config import get_settings
from nuvcoin.domain.models import (
    Category,
    PaymentMethod,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from nuvcoin.infrastructure.abstract import RemoteError, UnsupportedOperation
from nuvcoin.infrastructure.store import MemoryStore, SharedMemoryBackend
from nuvcoin.sync.cache import SyncCache

STORAGE_KEY = "test_finance_items"
WAIT_TIMEOUT = 5.0

RecordFactory = Callable[..., TransactionRecord]


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRemote:
    """
    In-memory remote authority.

    Assigns ``srv-N`` ids on create, records every call, and can be told to
    fail or to block `list` and `create` until released.
    """

    def __init__(self, records: Optional[Sequence[TransactionRecord]] = None) -> None:
        self.records: List[TransactionRecord] = list(records or [])
        self.fail = False
        self.calls: List[str] = []
        self.created: List[TransactionRecord] = []
        self.removed: List[str] = []
        self.release_create = threading.Event()
        self.release_create.set()
        self.release_list = threading.Event()
        self.release_list.set()
        self._next_id = 1
        self._lock = threading.Lock()

    def _maybe_fail(self, operation: str) -> None:
        if self.fail:
            raise RemoteError(operation, status=503, detail="Service Unavailable")

    def list(self) -> List[TransactionRecord]:
        self.calls.append("list")
        self.release_list.wait(timeout=WAIT_TIMEOUT)
        self._maybe_fail("list")
        with self._lock:
            return list(self.records)

    def create(self, record: TransactionRecord) -> TransactionRecord:
        self.calls.append("create")
        self.release_create.wait(timeout=WAIT_TIMEOUT)
        self._maybe_fail("create")
        with self._lock:
            confirmed = record.model_copy(update={"id": f"srv-{self._next_id}"})
            self._next_id += 1
            self.records.insert(0, confirmed)
            self.created.append(record)
        return confirmed

    def remove(self, record_id: str) -> None:
        self.calls.append("remove")
        self._maybe_fail("remove")
        with self._lock:
            self.records = [r for r in self.records if r.id != record_id]
            self.removed.append(record_id)

    def bulk_save(self, records: Sequence[TransactionRecord]) -> None:
        self.calls.append("bulk_save")
        raise UnsupportedOperation("bulk_save")


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached Settings so env overrides made by a test apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_record() -> RecordFactory:
    counter = {"n": 0}

    def _make(**overrides: Any) -> TransactionRecord:
        counter["n"] += 1
        fields: Dict[str, Any] = {
            "id": f"rec-{counter['n']}",
            "kind": TransactionKind.EXPENSE,
            "title": "Mercado",
            "category": Category.ALIMENTACAO,
            "amount_minor_units": 1_000,
            "occurred_on": "2026-02-10",
            "created_at": "2026-02-10T12:00:00+00:00",
            "payment_method": PaymentMethod.PIX,
            "status": TransactionStatus.PAID,
        }
        fields.update(overrides)
        return TransactionRecord(**fields)

    return _make


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def backend() -> SharedMemoryBackend:
    return SharedMemoryBackend()


@pytest.fixture
def store(backend: SharedMemoryBackend) -> MemoryStore:
    return MemoryStore(backend)


@pytest.fixture
def cache_factory(
    clock: ManualClock,
) -> Generator[Callable[..., SyncCache], None, None]:
    """Build SyncCache instances with test timings; all are closed at teardown."""
    created: List[SyncCache] = []

    def _build(store: MemoryStore, remote: Optional[FakeRemote] = None, **kwargs: Any) -> SyncCache:
        kwargs.setdefault("storage_key", STORAGE_KEY)
        kwargs.setdefault("min_sync_interval", 3.0)
        kwargs.setdefault("echo_window", 0.5)
        kwargs.setdefault("clock", clock)
        cache = SyncCache(store, remote, **kwargs)
        created.append(cache)
        return cache

    yield _build

    for cache in created:
        cache.close()
