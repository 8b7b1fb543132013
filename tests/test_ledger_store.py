"""Tests for the Ledger Store and the local key-value backends."""

import json

import pytest

from milkyway.models.record import LedgerSettings, MilkRecord
from milkyway.services.storage import (
    DEFAULT_RECORDS_KEY,
    DEFAULT_SETTINGS_KEY,
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    LedgerStore,
    StorageError,
    StorageUnavailableError,
    migrate_legacy_record,
)


class UnreadableStore(KeyValueStore):
    """Backend whose reads always fail."""
    
    def get(self, key):
        raise StorageUnavailableError("disk on fire")
    
    def put(self, key, value):
        raise AssertionError("should not write")
    
    def delete(self, key):
        return False


class ReadOnlyStore(InMemoryKeyValueStore):
    """Backend whose writes always fail."""
    
    def put(self, key, value):
        raise StorageError("read-only")


def _blob(items) -> bytes:
    return json.dumps(items).encode("utf-8")


class TestLoad:
    """Tests for LedgerStore.load and migration."""
    
    def test_empty_storage(self, store):
        """Test nothing stored reads as an empty ledger."""
        assert store.load() == []
    
    @pytest.mark.parametrize("blob", [b"not json", b'{"date": "2024-03-01"}', b"\xff\xfe"])
    def test_corrupt_blob_fails_soft(self, blob):
        """Test a corrupt records blob reads as empty instead of raising."""
        store = LedgerStore(InMemoryKeyValueStore({DEFAULT_RECORDS_KEY: blob}))
        assert store.load() == []
    
    def test_unreadable_storage_fails_soft(self):
        """Test an unreadable backend reads as empty."""
        assert LedgerStore(UnreadableStore()).load() == []
    
    def test_legacy_paid_record_gets_full_payment(self):
        """Test records without paymentAmount are back-filled from isPaid."""
        kv = InMemoryKeyValueStore({DEFAULT_RECORDS_KEY: _blob([
            {"id": "2024-03-01", "date": "2024-03-01", "quantity": 2,
             "pricePerUnit": 60, "isPaid": True},
            {"id": "2024-03-02", "date": "2024-03-02", "quantity": 1,
             "pricePerUnit": 60, "isPaid": False},
        ])})
        first, second = LedgerStore(kv).load()
        assert first.payment_amount == 120
        assert first.is_paid is True
        assert second.payment_amount == 0
    
    def test_migration_is_idempotent(self):
        """Test migrating an already migrated dict changes nothing."""
        raw = {"id": "2024-03-01", "quantity": 2, "pricePerUnit": 60, "isPaid": True}
        once = migrate_legacy_record(raw)
        assert migrate_legacy_record(once) == once
        assert once["date"] == "2024-03-01"
        assert raw == {"id": "2024-03-01", "quantity": 2, "pricePerUnit": 60, "isPaid": True}
    
    def test_existing_payment_is_kept(self):
        """Test an explicit paymentAmount is never overwritten by migration."""
        raw = {"date": "2024-03-01", "quantity": 2, "pricePerUnit": 60,
               "isPaid": True, "paymentAmount": 30}
        assert migrate_legacy_record(raw)["paymentAmount"] == 30
    
    def test_malformed_records_are_skipped(self):
        """Test bad items are dropped and good ones survive."""
        kv = InMemoryKeyValueStore({DEFAULT_RECORDS_KEY: _blob([
            {"date": "not-a-date", "quantity": 1},
            "just a string",
            {"date": "2024-03-05", "quantity": "lots"},
            {"date": "2024-03-01", "quantity": 1, "pricePerUnit": 50},
        ])})
        records = LedgerStore(kv).load()
        assert [r.date_key for r in records] == ["2024-03-01"]
    
    def test_missing_optional_fields(self):
        """Test records with only a date and quantity load with defaults."""
        kv = InMemoryKeyValueStore({DEFAULT_RECORDS_KEY: _blob([
            {"date": "2024-03-01", "quantity": 1},
        ])})
        record = LedgerStore(kv).load()[0]
        assert record.price_per_unit == 0
        assert record.payment_amount == 0
        assert record.notes is None
    
    def test_long_notes_survive_other_writes(self):
        """Test a record with long, space-padded notes is kept through a write to another date."""
        note = "  " + "x" * 1500 + "  "
        kv = InMemoryKeyValueStore({DEFAULT_RECORDS_KEY: _blob([
            {"date": "2024-03-01", "quantity": 2, "pricePerUnit": 60,
             "paymentAmount": 0, "isPaid": False, "notes": note},
        ])})
        store = LedgerStore(kv)
        assert store.load()[0].notes == note
        
        store.upsert_one(MilkRecord(date="2024-03-02", quantity=1, price_per_unit=60))
        stored = {item["date"]: item for item in json.loads(kv.get(DEFAULT_RECORDS_KEY))}
        assert sorted(stored) == ["2024-03-01", "2024-03-02"]
        assert stored["2024-03-01"]["notes"] == note
    
    def test_load_sorts_by_date(self):
        """Test records are returned in ascending date order."""
        kv = InMemoryKeyValueStore({DEFAULT_RECORDS_KEY: _blob([
            {"date": "2024-03-02", "quantity": 1},
            {"date": "2024-02-29", "quantity": 1},
        ])})
        assert [r.date_key for r in LedgerStore(kv).load()] == ["2024-02-29", "2024-03-02"]


class TestMutations:
    """Tests for upsert, delete and mark_paid through the store."""
    
    def test_upsert_one_persists_camel_case(self, store, kv, make_record):
        """Test the stored blob uses the original field names."""
        store.upsert_one(make_record(quantity=2, price=60))
        stored = json.loads(kv.get(DEFAULT_RECORDS_KEY))
        assert stored == [{
            "date": "2024-03-01", "id": "2024-03-01", "quantity": 2.0,
            "pricePerUnit": 60.0, "paymentAmount": 0.0, "isPaid": False, "notes": None,
        }]
    
    def test_upsert_one_is_idempotent(self, store, kv, make_record):
        """Test applying the same upsert twice gives the same collection."""
        record = make_record(quantity=2, price=60, paid=50)
        first = store.upsert_one(record)
        blob = kv.get(DEFAULT_RECORDS_KEY)
        second = store.upsert_one(record)
        assert first == second
        assert kv.get(DEFAULT_RECORDS_KEY) == blob
    
    def test_upsert_one_empty_record_deletes(self, store, make_record):
        """Test reducing a day to zero/zero removes it."""
        store.upsert_one(make_record())
        assert store.upsert_one(MilkRecord(date="2024-03-01")) == []
    
    def test_upsert_many_merges(self, store, make_record):
        """Test bulk upsert keeps records outside the batch."""
        store.upsert_one(make_record("2024-03-01"))
        records = store.upsert_many([make_record("2024-03-02"), make_record("2024-03-03")])
        assert [r.date_key for r in records] == ["2024-03-01", "2024-03-02", "2024-03-03"]
    
    def test_delete_one(self, store, make_record):
        """Test delete removes only the given day."""
        store.upsert_many([make_record("2024-03-01"), make_record("2024-03-02")])
        records = store.delete_one("2024-03-01")
        assert [r.date_key for r in records] == ["2024-03-02"]
        assert store.load() == records
    
    def test_delete_absent_is_noop(self, store, make_record):
        """Test deleting a day with no record keeps the collection."""
        before = store.upsert_one(make_record())
        assert store.delete_one("2030-01-01") == before
    
    def test_mark_paid(self, store, make_record):
        """Test settling selected days through the store."""
        store.upsert_many([
            make_record("2024-03-01", 2, 60, 10),
            make_record("2024-03-02", 1, 60, 0),
        ])
        records = store.mark_paid({"2024-03-01", "2024-12-25"})
        assert records[0].payment_amount == 120
        assert records[0].is_paid is True
        assert records[1].payment_amount == 0
        assert len(records) == 2
    
    def test_failed_write_propagates_and_keeps_old_blob(self, make_record):
        """Test write failures raise and leave storage untouched."""
        kv = ReadOnlyStore({DEFAULT_RECORDS_KEY: _blob([
            {"date": "2024-03-01", "quantity": 1, "pricePerUnit": 50},
        ])})
        store = LedgerStore(kv)
        with pytest.raises(StorageError):
            store.upsert_one(make_record("2024-03-02"))
        assert [r.date_key for r in store.load()] == ["2024-03-01"]


class TestSettings:
    """Tests for the settings slot."""
    
    def test_defaults_when_nothing_stored(self, store):
        """Test defaults are returned before the user saves anything."""
        assert store.load_settings() == LedgerSettings()
    
    def test_configured_defaults(self, kv):
        """Test defaults injected from configuration are used."""
        store = LedgerStore(kv, default_settings=LedgerSettings(default_price=45))
        assert store.load_settings().default_price == 45
    
    def test_round_trip(self, store, kv):
        """Test saved settings are read back and stored camelCase."""
        saved = LedgerSettings(default_price=72, currency_symbol="$", unit_label="gal")
        store.save_settings(saved)
        assert store.load_settings() == saved
        assert json.loads(kv.get(DEFAULT_SETTINGS_KEY))["currencySymbol"] == "$"
    
    def test_partial_blob_merges_over_defaults(self):
        """Test missing settings fields fall back to defaults."""
        kv = InMemoryKeyValueStore({DEFAULT_SETTINGS_KEY: b'{"unitLabel": "pkt"}'})
        settings = LedgerStore(kv).load_settings()
        assert settings.unit_label == "pkt"
        assert settings.default_price == 60
    
    @pytest.mark.parametrize("blob", [b"{broken", b"[1, 2]", b'{"defaultPrice": -5}'])
    def test_invalid_blob_reads_as_defaults(self, blob):
        """Test an invalid settings blob fails soft."""
        kv = InMemoryKeyValueStore({DEFAULT_SETTINGS_KEY: blob})
        assert LedgerStore(kv).load_settings() == LedgerSettings()
    
    def test_settings_independent_of_records(self, store, make_record):
        """Test record writes never touch settings and vice versa."""
        store.save_settings(LedgerSettings(default_price=70))
        store.upsert_one(make_record())
        store.delete_one("2024-03-01")
        assert store.load_settings().default_price == 70


class TestFileKeyValueStore:
    """Tests for the file backend."""
    
    def test_round_trip(self, tmp_path):
        """Test bytes written are read back."""
        kv = FileKeyValueStore(tmp_path / "data")
        assert kv.get("records") is None
        kv.put("records", b"[1]")
        assert kv.get("records") == b"[1]"
        assert (tmp_path / "data" / "records.json").exists()
    
    def test_put_replaces_and_leaves_no_temp_files(self, tmp_path):
        """Test a second put replaces the blob atomically."""
        kv = FileKeyValueStore(tmp_path)
        kv.put("records", b"[1]")
        kv.put("records", b"[2]")
        assert kv.get("records") == b"[2]"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["records.json"]
    
    def test_delete(self, tmp_path):
        """Test delete reports whether something was removed."""
        kv = FileKeyValueStore(tmp_path)
        kv.put("records", b"[]")
        assert kv.delete("records") is True
        assert kv.delete("records") is False
    
    @pytest.mark.parametrize("key", ["../escape", "a/b", "", ".."])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        """Test keys cannot point outside the data directory."""
        with pytest.raises(ValueError):
            FileKeyValueStore(tmp_path).put(key, b"x")
    
    def test_ledger_store_on_files(self, tmp_path, make_record):
        """Test the ledger survives a new store instance on the same directory."""
        LedgerStore(FileKeyValueStore(tmp_path)).upsert_one(make_record(quantity=2))
        records = LedgerStore(FileKeyValueStore(tmp_path)).load()
        assert records[0].quantity == 2
