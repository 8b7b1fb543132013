"""
Pure operations over the record collection.

A Ledger is a mapping from YYYY-MM-DD key to MilkRecord. Every function
here takes the current ledger and returns a NEW dict; the input is never
mutated. The Ledger Store loads, calls one of these, and persists the
result in a single write.
"""

from typing import Iterable, Mapping

from milkyway.models.record import MilkRecord


Ledger = dict[str, MilkRecord]


def build_ledger(records: Iterable[MilkRecord]) -> Ledger:
    """Key records by date. Later records win on duplicate dates."""
    return {record.date_key: record for record in records}


def sorted_records(ledger: Mapping[str, MilkRecord]) -> list[MilkRecord]:
    """Records in ascending date order (keys sort lexically = chronologically)."""
    return [ledger[key] for key in sorted(ledger)]


def upsert_one(ledger: Mapping[str, MilkRecord], record: MilkRecord) -> Ledger:
    """
    Insert or fully replace the record at its date.
    
    The stored copy has is_paid re-derived from its amounts. An empty
    record (no quantity, no payment) deletes the date instead.
    """
    updated = dict(ledger)
    if record.is_empty:
        updated.pop(record.date_key, None)
    else:
        updated[record.date_key] = record.reconciled()
    return updated


def upsert_many(ledger: Mapping[str, MilkRecord], records: Iterable[MilkRecord]) -> Ledger:
    """Merge records by date, last write wins, empty records delete."""
    updated = dict(ledger)
    for record in records:
        if record.is_empty:
            updated.pop(record.date_key, None)
        else:
            updated[record.date_key] = record.reconciled()
    return updated


def delete_one(ledger: Mapping[str, MilkRecord], date_key: str) -> Ledger:
    """Remove the record at date_key; absent keys are a no-op."""
    updated = dict(ledger)
    updated.pop(date_key, None)
    return updated


def mark_paid(ledger: Mapping[str, MilkRecord], date_keys: Iterable[str]) -> Ledger:
    """
    Settle every record whose key is in date_keys: payment = cost, is_paid = True.
    
    Keys with no record are skipped. A payment-only record has cost 0,
    so settling it zeroes its payment. That record is kept, not deleted.
    """
    keys = set(date_keys)
    updated = dict(ledger)
    for key in keys & updated.keys():
        record = updated[key]
        updated[key] = record.model_copy(
            update={"payment_amount": record.cost, "is_paid": True}
        )
    return updated
