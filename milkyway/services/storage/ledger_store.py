"""
Ledger Store

Durable mapping from date key to MilkRecord, plus the sibling settings slot.

The records live in ONE JSON array blob under a fixed key; settings live in
a second blob under another key. Every mutating operation:
1. Loads the full collection
2. Computes the full new collection in memory (milkyway.ledger.collection)
3. Persists it with a single atomic put

TRADEOFFS:
- Whole-blob rewrites are fine for a household ledger (a few thousand days)
- Reads fail soft: corrupt or unreadable storage reads as an empty ledger
- Writes fail loudly: a failed put raises StorageError
"""

import json
from typing import Iterable, Optional

from pydantic import ValidationError

from milkyway.ledger import collection
from milkyway.ledger.collection import Ledger
from milkyway.logs import LedgerEventLogger
from milkyway.models.record import LedgerSettings, MilkRecord
from milkyway.services.storage.interface import (
    KeyValueStore,
    MalformedRecordError,
    StorageError,
    StorageUnavailableError,
)


DEFAULT_RECORDS_KEY = "milkyway_data_v1"
DEFAULT_SETTINGS_KEY = "milkyway_settings_v1"

_LEGACY_TRUE = (True, 1, "true", "True")


def _as_number(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def migrate_legacy_record(raw: dict) -> dict:
    """
    Bring a stored record dict up to the current shape.

    Older blobs have no paymentAmount; back-fill it from isPaid
    (paid -> full cost, unpaid -> 0). Blobs keyed only by id get a date.
    Idempotent: a migrated dict passes through unchanged.
    """
    data = dict(raw)
    if data.get("date") is None and data.get("id") is not None:
        data["date"] = data["id"]
    if data.get("paymentAmount") is None:
        if data.get("isPaid") in _LEGACY_TRUE:
            data["paymentAmount"] = (
                _as_number(data.get("quantity")) * _as_number(data.get("pricePerUnit"))
            )
        else:
            data["paymentAmount"] = 0.0
    return data


class LedgerStore:
    """
    Ledger persistence on top of a KeyValueStore.

    All record operations return the new collection as a list
    sorted ascending by date.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        records_key: str = DEFAULT_RECORDS_KEY,
        settings_key: str = DEFAULT_SETTINGS_KEY,
        default_settings: Optional[LedgerSettings] = None,
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._kv = kv_store
        self._records_key = records_key
        self._settings_key = settings_key
        self._default_settings = default_settings or LedgerSettings()
        self._events = event_logger or LedgerEventLogger()

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def _record_from_raw(self, raw: object) -> MilkRecord:
        """Convert one stored item to a MilkRecord."""
        if not isinstance(raw, dict):
            raise MalformedRecordError("Stored record is not an object", raw)
        try:
            return MilkRecord.model_validate(migrate_legacy_record(raw))
        except ValidationError as e:
            raise MalformedRecordError(f"Invalid stored record: {e.error_count()} error(s)", raw)

    def _decode_records(self, blob: bytes) -> Ledger:
        try:
            items = json.loads(blob.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageUnavailableError(f"Records blob is not valid JSON: {e}")
        if not isinstance(items, list):
            raise StorageUnavailableError("Records blob is not a JSON array")

        records = []
        for raw in items:
            try:
                records.append(self._record_from_raw(raw))
            except MalformedRecordError as e:
                self._events.log_malformed_record(str(e), e.raw)
                continue  # Skip malformed rows
        return collection.build_ledger(records)

    def _encode_records(self, ledger: Ledger) -> bytes:
        payload = [record.to_storage_dict() for record in collection.sorted_records(ledger)]
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    def _persist(self, ledger: Ledger) -> list[MilkRecord]:
        self._kv.put(self._records_key, self._encode_records(ledger))
        return collection.sorted_records(ledger)

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def load_ledger(self) -> Ledger:
        """Load the collection keyed by date. Never raises for bad storage."""
        try:
            blob = self._kv.get(self._records_key)
            if not blob:
                return {}
            return self._decode_records(blob)
        except StorageUnavailableError as e:
            self._events.log_storage_unavailable(self._records_key, str(e))
            return {}

    def load(self) -> list[MilkRecord]:
        """Persisted records, migrated, sorted by date; empty on failure."""
        return collection.sorted_records(self.load_ledger())

    def upsert_one(self, record: MilkRecord) -> list[MilkRecord]:
        """Insert or fully replace the record at its date; empty records delete."""
        updated = collection.upsert_one(self.load_ledger(), record)
        records = self._persist(updated)
        if record.is_empty:
            self._events.log_record_deleted(record.date_key, True, len(records))
        else:
            self._events.log_record_saved(
                record.date_key, record.status.value, len(records)
            )
        return records

    def upsert_many(self, records: Iterable[MilkRecord]) -> list[MilkRecord]:
        """Merge records by date (last write wins) in one write."""
        return self._persist(collection.upsert_many(self.load_ledger(), records))

    def delete_one(self, date_key: str) -> list[MilkRecord]:
        """Remove the record at date_key; no-op if absent."""
        ledger = self.load_ledger()
        existed = date_key in ledger
        records = self._persist(collection.delete_one(ledger, date_key))
        self._events.log_record_deleted(date_key, existed, len(records))
        return records

    def mark_paid(self, date_keys: Iterable[str]) -> list[MilkRecord]:
        """Set payment = cost and is_paid = True for every listed record."""
        return self._persist(collection.mark_paid(self.load_ledger(), date_keys))

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def load_settings(self) -> LedgerSettings:
        """
        Stored settings merged over the defaults.

        Missing fields take their default; an unreadable or invalid blob
        reads as the defaults.
        """
        try:
            blob = self._kv.get(self._settings_key)
            if not blob:
                return self._default_settings
            stored = json.loads(blob.decode("utf-8"))
            if not isinstance(stored, dict):
                raise StorageUnavailableError("Settings blob is not a JSON object")
            merged = {**self._default_settings.model_dump(by_alias=True), **stored}
            return LedgerSettings.model_validate(merged)
        except (StorageError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            self._events.log_storage_unavailable(self._settings_key, str(e))
            return self._default_settings

    def save_settings(self, settings: LedgerSettings) -> LedgerSettings:
        """Replace the settings blob."""
        data = settings.model_dump(by_alias=True)
        self._kv.put(
            self._settings_key,
            json.dumps(data, ensure_ascii=False).encode("utf-8"),
        )
        self._events.log_settings_saved(data)
        return settings
