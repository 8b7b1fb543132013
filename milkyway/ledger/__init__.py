"""
Ledger core: reconciliation, collection operations, range operations,
aggregation and export. Everything here except RangeOperations is pure.
"""

from milkyway.ledger.aggregator import ALL_TIME, MonthScope, aggregate, in_scope
from milkyway.ledger.collection import (
    Ledger,
    build_ledger,
    delete_one,
    mark_paid,
    sorted_records,
    upsert_many,
    upsert_one,
)
from milkyway.ledger.exporter import CSV_HEADERS, export_csv, export_filename
from milkyway.ledger.ranges import (
    RangeOperations,
    iter_date_keys,
    keys_in_range,
    plan_fill,
)
from milkyway.ledger.reconciler import (
    PAID_TOLERANCE,
    covers_cost,
    reconcile,
    record_cost,
    remaining_due,
)

__all__ = [
    "ALL_TIME",
    "CSV_HEADERS",
    "Ledger",
    "MonthScope",
    "PAID_TOLERANCE",
    "RangeOperations",
    "aggregate",
    "build_ledger",
    "covers_cost",
    "delete_one",
    "export_csv",
    "export_filename",
    "in_scope",
    "iter_date_keys",
    "keys_in_range",
    "mark_paid",
    "plan_fill",
    "reconcile",
    "record_cost",
    "remaining_due",
    "sorted_records",
    "upsert_many",
    "upsert_one",
]
