"""
Durable store adapters for nuvcoin.

Two implementations of the `DurableStore` protocol:

- `MemoryStore`: instances attached to one `SharedMemoryBackend` behave like
  browser tabs sharing a single storage area. Writes from one instance are
  delivered synchronously to watchers registered through the others.
- `JsonFileStore`: one ``<key>.json`` file per key in a directory, replaced
  atomically on every write. Changes made by other processes are detected by
  a background polling thread.

`load_records` / `save_records` implement the blob codec on top of either
store: a JSON array of camelCase record objects, with no version field.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from nuvcoin.domain.models import TransactionRecord
from nuvcoin.domain.normalization import normalize_records
from nuvcoin.infrastructure.abstract import DurableStore, Unwatch, WatchCallback
from nuvcoin.utils.logging import get_logger

log = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")


class SharedMemoryBackend:
    """Process-local storage area shared by several `MemoryStore` instances."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, str] = {}
        self._watchers: List[Tuple["MemoryStore", str, WatchCallback]] = []

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, writer: "MemoryStore", key: str, blob: str) -> None:
        with self._lock:
            self._data[key] = blob
            targets = [
                callback
                for owner, watched_key, callback in self._watchers
                if owner is not writer and watched_key == key
            ]
        for callback in targets:
            callback(key)

    def add_watcher(self, owner: "MemoryStore", key: str, callback: WatchCallback) -> Unwatch:
        entry = (owner, key, callback)
        with self._lock:
            self._watchers.append(entry)

        def _unwatch() -> None:
            with self._lock:
                if entry in self._watchers:
                    self._watchers.remove(entry)

        return _unwatch


class MemoryStore:
    """An in-memory `DurableStore` view onto a shared backend."""

    def __init__(self, backend: Optional[SharedMemoryBackend] = None) -> None:
        self.backend = backend or SharedMemoryBackend()

    def get(self, key: str) -> Optional[str]:
        return self.backend.get(key)

    def set(self, key: str, blob: str) -> None:
        self.backend.set(self, key, blob)

    def watch(self, key: str, callback: WatchCallback) -> Unwatch:
        return self.backend.add_watcher(self, key, callback)


class JsonFileStore:
    """
    File-backed `DurableStore`.

    Parameters
    ----------
    directory : Path | str
        Directory holding one ``<key>.json`` file per key; created on demand.
    poll_interval : float
        Seconds between checks for changes made by other processes.
    """

    def __init__(self, directory: Path | str, poll_interval: float = 0.5) -> None:
        self.directory = Path(directory)
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        # Stat signature of the last write made through this instance, per key.
        self._own_writes: Dict[str, Tuple[int, int]] = {}

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key {key!r}")
        return self.directory / f"{key}.json"

    def _signature(self, path: Path) -> Optional[Tuple[int, int]]:
        try:
            st = path.stat()
        except FileNotFoundError:
            return None
        return st.st_mtime_ns, st.st_size

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, blob: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            with self._lock:
                os.replace(tmp_name, path)
                signature = self._signature(path)
                if signature is not None:
                    self._own_writes[key] = signature
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def watch(self, key: str, callback: WatchCallback) -> Unwatch:
        """
        Poll the key's file and call `callback` when another process replaces it.

        The watcher runs on a daemon thread until the returned function is called.
        """
        path = self._path(key)
        stop = threading.Event()
        last_seen = self._signature(path)

        def _poll() -> None:
            nonlocal last_seen
            while not stop.wait(timeout=self.poll_interval):
                with self._lock:
                    current = self._signature(path)
                    own = self._own_writes.get(key)
                if current == last_seen:
                    continue
                last_seen = current
                if current is None or current == own:
                    continue
                try:
                    callback(key)
                except Exception:  # noqa: BLE001 - keep the watcher alive
                    log.exception("Store watch callback failed", extra={"key": key})

        watcher = threading.Thread(target=_poll, name=f"store-watch-{key}", daemon=True)
        watcher.start()

        def _unwatch() -> None:
            stop.set()
            watcher.join(timeout=max(1.0, self.poll_interval * 2))

        return _unwatch


def load_records(store: DurableStore, key: str) -> List[TransactionRecord]:
    """
    Read and normalize the record collection stored under `key`.

    A missing, unreadable or non-array blob is treated as an empty collection.
    """
    try:
        blob = store.get(key)
    except OSError as exc:
        log.warning("Durable store read failed", extra={"key": key, "error": str(exc)})
        return []
    if not blob:
        return []
    try:
        return normalize_records(json.loads(blob))
    except ValueError as exc:
        log.warning("Discarding corrupt durable blob", extra={"key": key, "error": str(exc)})
        return []


def save_records(store: DurableStore, key: str, records: Iterable[TransactionRecord]) -> None:
    """Encode `records` as a JSON array and write it under `key`."""
    payload = [record.to_wire() for record in records]
    store.set(key, json.dumps(payload, ensure_ascii=False))


__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "SharedMemoryBackend",
    "load_records",
    "save_records",
]
