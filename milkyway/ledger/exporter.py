"""
CSV export for the ledger.

Output is deterministic for a given record set:
- header: Date,Quantity,Price/Unit,Total Cost,Amount Paid,Notes
- one row per record, ascending by date
- cost and paid amount with exactly two decimals
- notes double-quoted (inner quotes doubled) when present, empty otherwise
- rows joined with "\n", no trailing newline
"""

from datetime import date
from typing import Iterable, Optional

from milkyway.models.record import MilkRecord, format_number


CSV_HEADERS = ["Date", "Quantity", "Price/Unit", "Total Cost", "Amount Paid", "Notes"]


def _quote_notes(notes: Optional[str]) -> str:
    if not notes:
        return ""
    return '"' + notes.replace('"', '""') + '"'


def record_to_row(record: MilkRecord) -> list[str]:
    return [
        record.date_key,
        format_number(record.quantity),
        format_number(record.price_per_unit),
        f"{record.quantity * record.price_per_unit:.2f}",
        f"{record.payment_amount:.2f}",
        _quote_notes(record.notes),
    ]


def export_csv(records: Iterable[MilkRecord]) -> str:
    """Serialize the full record set to CSV text."""
    ordered = sorted(records, key=lambda record: record.date_key)
    lines = [",".join(CSV_HEADERS)]
    lines.extend(",".join(record_to_row(record)) for record in ordered)
    return "\n".join(lines)


def export_filename(app_name: str = "milkyway", on: Optional[date] = None) -> str:
    """<app>_export_<YYYYMMDD>.csv for the given day (today by default)."""
    on = on or date.today()
    return f"{app_name}_export_{on.strftime('%Y%m%d')}.csv"
