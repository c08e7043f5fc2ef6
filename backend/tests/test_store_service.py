"""Entity store tests: seeding, atomic save, transaction isolation, id counters."""

import json
import os

import pytest

from giftledger.exceptions import StorageError
from giftledger.services import gift_service, request_service

from conftest import COFFEE, EMP1, WATCH, balance


def test_first_load_materializes_seed(data_store):
    assert os.path.exists(data_store.path)
    data = data_store.snapshot()

    assert [h.username for h in data.holders] == ["emp001", "emp002", "mgr001"]
    assert [g.code for g in data.gifts] == ["G001", "G002", "G003", "G004", "G005"]
    assert len(data.inventory) == 6
    assert len(data.requests) == 2
    assert data.next_ids == {
        "holders": 4, "stores": 2, "gifts": 6, "inventory": 7, "requests": 3, "ledger": 7,
    }


def test_seed_balances_are_backed_by_ledger(data_store):
    data = data_store.snapshot()
    for record in data.inventory:
        entries = data.ledger_for(record.holder_id, record.gift_id)
        assert sum(e.quantity for e in entries) == record.quantity
        assert [e.kind for e in entries] == ["adjust"]


def test_persisted_document_has_all_collections(data_store):
    with open(data_store.path, encoding="utf-8") as fh:
        raw = json.load(fh)
    assert set(raw) == {"holders", "stores", "gifts", "inventory", "requests", "ledger", "next_ids"}
    assert raw["holders"][0]["password_hash"].startswith("$2")


def test_reload_round_trips_dataset(data_store):
    before = data_store.snapshot()
    after = data_store.reload()

    assert after is not before
    assert [r.to_dict() for r in after.inventory] == [r.to_dict() for r in before.inventory]
    assert [e.to_dict() for e in after.ledger] == [e.to_dict() for e in before.ledger]
    assert after.next_ids == before.next_ids


def test_transaction_publishes_on_success(data_store):
    with data_store.transaction() as data:
        data.inventory_record(EMP1, WATCH).quantity = 42

    assert balance(EMP1, WATCH) == 42
    assert data_store.reload().inventory_record(EMP1, WATCH).quantity == 42


def test_transaction_discards_copy_on_error(data_store):
    published = data_store.snapshot()

    with pytest.raises(RuntimeError):
        with data_store.transaction() as data:
            data.inventory_record(EMP1, WATCH).quantity = 99
            raise RuntimeError("boom")

    assert data_store.snapshot() is published
    assert balance(EMP1, WATCH) == 5


def test_published_snapshot_is_not_mutated_by_transaction(data_store):
    published = data_store.snapshot()
    with data_store.transaction() as data:
        data.inventory_record(EMP1, COFFEE).quantity = 1

    assert published.inventory_record(EMP1, COFFEE).quantity == 10


def test_failed_save_raises_storage_error_and_keeps_state(data_store, monkeypatch):
    with open(data_store.path, encoding="utf-8") as fh:
        on_disk = fh.read()
    published = data_store.snapshot()

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("giftledger.services.store_service.os.replace", broken_replace)

    with pytest.raises(StorageError):
        with data_store.transaction() as data:
            data.inventory_record(EMP1, WATCH).quantity = 0

    assert data_store.snapshot() is published
    with open(data_store.path, encoding="utf-8") as fh:
        assert fh.read() == on_disk
    leftovers = [n for n in os.listdir(os.path.dirname(data_store.path)) if n.endswith(".tmp")]
    assert leftovers == []


def test_storage_error_is_an_os_error():
    assert issubclass(StorageError, OSError)


@pytest.mark.parametrize("content", ["{not json", "[]", "null", "{\"holders\": [[1]]}"])
def test_corrupt_file_is_not_replaced_by_seed(data_store, content):
    published = data_store.snapshot()
    with open(data_store.path, "w", encoding="utf-8") as fh:
        fh.write(content)

    with pytest.raises(StorageError):
        data_store.reload()

    assert data_store.snapshot() is published
    with open(data_store.path, encoding="utf-8") as fh:
        assert fh.read() == content


def test_health_reports_unreadable_dataset(client, data_store):
    with open(data_store.path, "w", encoding="utf-8") as fh:
        fh.write("[]")
    data_store.configure(data_store.path)

    response = client.get("/api/health")

    assert response.status_code == 503
    assert response.json["status"] == "unhealthy"


def test_nested_transaction_is_refused(data_store):
    with pytest.raises(RuntimeError, match="nested"):
        with data_store.transaction():
            with data_store.transaction():
                pass


def test_ids_are_never_reused(data_store):
    first = gift_service.create_gift(code="G100", name="Umbrella")
    gift_service.delete_gift(first.id)
    second = gift_service.create_gift(code="G101", name="Notebook")

    assert second.id == first.id + 1
    assert data_store.reload().next_ids["gifts"] == second.id + 1


def test_next_id_rejects_unknown_counter(data_store):
    with pytest.raises(KeyError):
        data_store.snapshot().next_id("widgets")



def test_unknown_ledger_kind_is_malformed(data_store):
    with open(data_store.path, encoding="utf-8") as fh:
        raw = json.load(fh)
    raw["ledger"][0]["kind"] = "gift-wrap"
    with open(data_store.path, "w", encoding="utf-8") as fh:
        json.dump(raw, fh)

    with pytest.raises(StorageError, match="malformed"):
        data_store.reload()


@pytest.mark.parametrize("next_ids", [None, {"requests": 1, "ledger": 2}])
def test_missing_or_stale_counters_never_reuse_ids(data_store, next_ids):
    with open(data_store.path, encoding="utf-8") as fh:
        raw = json.load(fh)
    if next_ids is None:
        del raw["next_ids"]
    else:
        raw["next_ids"] = next_ids
    with open(data_store.path, "w", encoding="utf-8") as fh:
        json.dump(raw, fh)

    data = data_store.reload()
    assert data.next_ids == {
        "holders": 4, "stores": 2, "gifts": 6, "inventory": 7, "requests": 3, "ledger": 7,
    }

    gift_request = request_service.submit(EMP1, COFFEE, "increase", 1)
    ids = [r.id for r in data_store.snapshot().requests]
    assert gift_request.id == 3
    assert len(ids) == len(set(ids))


def test_counters_ahead_of_ids_are_kept(data_store):
    with open(data_store.path, encoding="utf-8") as fh:
        raw = json.load(fh)
    raw["next_ids"]["gifts"] = 40
    with open(data_store.path, "w", encoding="utf-8") as fh:
        json.dump(raw, fh)

    assert data_store.reload().next_ids["gifts"] == 40
