"""
Range Operations

Bulk edits over an inclusive date range:

- bulk_fill writes quantity and price for EVERY date in the range.
  This is a destructive edit: existing quantities and prices in the range
  are overwritten. Existing payments (and notes) are carried forward, so
  re-filling a month at a new price never loses a recorded payment.
- bulk_settle marks every EXISTING record in the range as paid in full.
  Dates with no record are not created.

A range whose start is after its end is empty. That is not an error;
nothing is written.
"""

from datetime import date, timedelta
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Union

from milkyway.models.record import MilkRecord, to_date_key
from milkyway.logs import LedgerEventLogger

if TYPE_CHECKING:
    from milkyway.services.storage.ledger_store import LedgerStore


DateLike = Union[date, str]


def iter_date_keys(start: DateLike, end: DateLike) -> list[str]:
    """Every YYYY-MM-DD key from start to end inclusive; [] if start > end."""
    first = date.fromisoformat(to_date_key(start))
    last = date.fromisoformat(to_date_key(end))
    days = (last - first).days
    return [(first + timedelta(days=offset)).isoformat() for offset in range(days + 1)]


def keys_in_range(
    records: Union[Mapping[str, MilkRecord], Iterable[MilkRecord]],
    start: DateLike,
    end: DateLike,
) -> set[str]:
    """Keys of existing records whose date falls in [start, end]."""
    first, last = to_date_key(start), to_date_key(end)
    if isinstance(records, Mapping):
        keys = records.keys()
    else:
        keys = (record.date_key for record in records)
    return {key for key in keys if first <= key <= last}


def plan_fill(
    ledger: Mapping[str, MilkRecord],
    start: DateLike,
    end: DateLike,
    quantity: float,
    price_per_unit: float,
) -> list[MilkRecord]:
    """
    Records a bulk-fill would write, one per date in the range.
    
    Each keeps the existing payment for its date and has is_paid
    judged against the NEW cost.
    """
    planned = []
    for key in iter_date_keys(start, end):
        existing = ledger.get(key)
        record = MilkRecord(
            date=key,
            quantity=quantity,
            price_per_unit=price_per_unit,
            payment_amount=existing.payment_amount if existing else 0.0,
            notes=existing.notes if existing else None,
        )
        planned.append(record.reconciled())
    return planned


class RangeOperations:
    """Bulk-fill and bulk-settle committed through a LedgerStore."""
    
    def __init__(
        self,
        store: "LedgerStore",
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._store = store
        self._events = event_logger or LedgerEventLogger()
    
    def bulk_fill(
        self,
        start: DateLike,
        end: DateLike,
        quantity: float,
        price_per_unit: float,
    ) -> list[MilkRecord]:
        """
        Overwrite quantity and price for every date in [start, end].
        
        Returns the new collection.
        """
        ledger = self._store.load_ledger()
        planned = plan_fill(ledger, start, end, quantity, price_per_unit)
        if not planned:
            return self._store.load()
        
        records = self._store.upsert_many(planned)
        self._events.log_range_filled(
            start=planned[0].date_key,
            end=planned[-1].date_key,
            days=len(planned),
            payments_carried=sum(1 for record in planned if record.payment_amount > 0),
        )
        return records
    
    def bulk_settle(self, start: DateLike, end: DateLike) -> list[MilkRecord]:
        """
        Mark every existing record in [start, end] as paid in full.
        
        NOTE: a payment-only record has cost 0, so settling it sets its
        payment to 0. This matches the stored data older versions wrote
        and is kept for compatibility; the event log flags it.
        """
        ledger = self._store.load_ledger()
        keys = keys_in_range(ledger, start, end)
        if not keys:
            return self._store.load()
        
        records = self._store.mark_paid(keys)
        self._events.log_range_settled(
            start=to_date_key(start),
            end=to_date_key(end),
            settled=len(keys),
            payment_only_zeroed=sum(1 for key in keys if ledger[key].is_payment_only),
        )
        return records
