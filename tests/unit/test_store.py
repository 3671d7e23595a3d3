from __future__ import annotations

import json
from typing import List

import pytest

from nuvcoin.infrastructure.abstract import DurableStore
from nuvcoin.infrastructure.store import (
    JsonFileStore,
    MemoryStore,
    SharedMemoryBackend,
    load_records,
    save_records,
)

KEY = "items"


def test_memory_store_satisfies_protocol():
    assert isinstance(MemoryStore(), DurableStore)
    assert isinstance(JsonFileStore("unused"), DurableStore)


def test_memory_stores_share_one_backend(backend):
    first, second = MemoryStore(backend), MemoryStore(backend)

    first.set(KEY, "[]")

    assert second.get(KEY) == "[]"
    assert MemoryStore().get(KEY) is None


def test_watchers_fire_only_for_other_instances(backend: SharedMemoryBackend):
    writer, reader = MemoryStore(backend), MemoryStore(backend)
    seen: List[str] = []
    writer.watch(KEY, lambda key: seen.append(f"writer:{key}"))
    reader.watch(KEY, lambda key: seen.append(f"reader:{key}"))
    reader.watch("other", lambda key: seen.append("wrong key"))

    writer.set(KEY, "[]")

    assert seen == ["reader:items"]


def test_unwatch_stops_notifications(backend):
    writer, reader = MemoryStore(backend), MemoryStore(backend)
    seen: List[str] = []
    unwatch = reader.watch(KEY, seen.append)

    writer.set(KEY, "[]")
    unwatch()
    unwatch()
    writer.set(KEY, "[]")

    assert seen == [KEY]


def test_save_then_load_preserves_order_and_fields(store, make_record):
    records = [make_record(id="b"), make_record(id="a", title="Café ☕")]

    save_records(store, KEY, records)

    assert load_records(store, KEY) == records
    assert "Café ☕" in store.get(KEY)


def test_blob_is_a_plain_camel_case_array(store, make_record):
    save_records(store, KEY, [make_record(id="a")])

    payload = json.loads(store.get(KEY))

    assert isinstance(payload, list)
    assert set(payload[0]) >= {"id", "kind", "amountMinorUnits", "occurredOn", "createdAt"}


@pytest.mark.parametrize("blob", [None, "", "not json", "{\"id\": \"x\"}", "42"])
def test_unusable_blobs_load_as_empty(store, blob):
    if blob is not None:
        store.set(KEY, blob)
    assert load_records(store, KEY) == []


def test_legacy_items_in_blob_are_normalized(store):
    store.set(KEY, json.dumps([{"id": "old", "type": "RECEITA", "amountCents": 300}, "junk"]))

    [record] = load_records(store, KEY)

    assert record.id == "old"
    assert record.amount_minor_units == 300


def test_read_failure_degrades_to_empty(make_record):
    class BrokenStore(MemoryStore):
        def get(self, key):
            raise OSError("disk gone")

    assert load_records(BrokenStore(), KEY) == []


def test_json_file_store_writes_atomically(tmp_path):
    store = JsonFileStore(tmp_path / "data")

    assert store.get(KEY) is None
    store.set(KEY, "[1]")
    store.set(KEY, "[2]")

    assert store.get(KEY) == "[2]"
    assert sorted(p.name for p in (tmp_path / "data").iterdir()) == ["items.json"]


def test_json_file_store_rejects_path_like_keys(tmp_path):
    with pytest.raises(ValueError):
        JsonFileStore(tmp_path).set("../escape", "[]")
