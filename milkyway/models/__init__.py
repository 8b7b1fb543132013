"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data flowing through the system must conform to these schemas.
"""

from milkyway.models.record import (
    BalanceState,
    EntryDraft,
    EntryMode,
    LedgerSettings,
    MilkRecord,
    PeriodStats,
    Reconciliation,
    RecordStatus,
    format_number,
    to_date_key,
)

__all__ = [
    "BalanceState",
    "EntryDraft",
    "EntryMode",
    "LedgerSettings",
    "MilkRecord",
    "PeriodStats",
    "Reconciliation",
    "RecordStatus",
    "format_number",
    "to_date_key",
]
