"""
Aggregator

Folds a set of records into PeriodStats for a scope. Two scopes exist:
a calendar month (MonthScope) and all time (ALL_TIME). The global balance
is always computed from the full collection, independent of whichever
month is on screen.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from milkyway.models.record import MilkRecord, PeriodStats, to_date_key


@dataclass(frozen=True)
class MonthScope:
    """Records whose date falls in one calendar month."""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be 1-12, got {self.month}")

    @classmethod
    def of(cls, day) -> "MonthScope":
        value = date.fromisoformat(to_date_key(day))
        return cls(value.year, value.month)

    @property
    def prefix(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-"

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def contains(self, date_key: str) -> bool:
        return date_key.startswith(self.prefix)

    def previous(self) -> "MonthScope":
        if self.month == 1:
            return MonthScope(self.year - 1, 12)
        return MonthScope(self.year, self.month - 1)

    def next(self) -> "MonthScope":
        if self.month == 12:
            return MonthScope(self.year + 1, 1)
        return MonthScope(self.year, self.month + 1)


# All records, unscoped
ALL_TIME = None


def in_scope(records: Iterable[MilkRecord], scope: Optional[MonthScope]) -> list[MilkRecord]:
    if scope is ALL_TIME:
        return list(records)
    return [record for record in records if scope.contains(record.date_key)]


def aggregate(
    records: Iterable[MilkRecord],
    scope: Optional[MonthScope] = ALL_TIME,
) -> PeriodStats:
    """
    Sum quantity, cost and payments over the scoped records.

    balance = total_cost - total_paid (positive: owed, negative: credit).
    Payment-only records count towards total_paid and are also tallied
    separately.
    """
    total_quantity = 0.0
    total_cost = 0.0
    total_paid = 0.0
    record_count = 0
    payment_only_count = 0
    payment_only_total = 0.0

    for record in in_scope(records, scope):
        record_count += 1
        total_quantity += record.quantity
        total_cost += record.quantity * record.price_per_unit
        total_paid += record.payment_amount
        if record.is_payment_only:
            payment_only_count += 1
            payment_only_total += record.payment_amount

    return PeriodStats(
        total_quantity=total_quantity,
        total_cost=total_cost,
        total_paid=total_paid,
        balance=total_cost - total_paid,
        record_count=record_count,
        payment_only_count=payment_only_count,
        payment_only_total=payment_only_total,
    )
