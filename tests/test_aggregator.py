"""Tests for statistics folding and month scopes."""

from datetime import date

import pytest

from milkyway.ledger import ALL_TIME, MonthScope, aggregate, in_scope
from milkyway.models.record import BalanceState, MilkRecord


class TestAggregate:
    """Tests for aggregate()."""
    
    def test_month_after_two_deliveries(self, store, make_record):
        """Test two unpaid deliveries then a settling payment on one day."""
        store.upsert_one(make_record("2024-03-01", 1, 60))
        records = store.upsert_one(make_record("2024-03-02", 1, 60))
        stats = aggregate(records, MonthScope(2024, 3))
        assert stats.total_quantity == 2
        assert stats.total_cost == 120
        assert stats.total_paid == 0
        assert stats.balance == 120
        assert stats.balance_state == BalanceState.OWED
        
        records = store.upsert_one(make_record("2024-03-02", 1, 60, 120))
        stats = aggregate(records, MonthScope(2024, 3))
        assert stats.balance == 0
        assert stats.balance_state == BalanceState.SETTLED
        assert [r.is_paid for r in records] == [False, True]
    
    def test_single_day_upsert_then_payment(self, store):
        """Test one delivery day, then the same day paid in full."""
        records = store.upsert_one(MilkRecord(date="2024-03-01", quantity=2, price_per_unit=60))
        stats = aggregate(records, MonthScope(2024, 3))
        assert (stats.total_quantity, stats.total_cost, stats.total_paid, stats.balance) == (
            2, 120, 0, 120,
        )
        
        records = store.upsert_one(MilkRecord(
            date="2024-03-01", quantity=2, price_per_unit=60, payment_amount=120,
        ))
        stats = aggregate(records, MonthScope(2024, 3))
        assert stats.balance == 0
        assert len(records) == 1
        assert records[0].is_paid is True
    
    def test_scope_filters_other_months(self, make_record):
        """Test only records of the scoped month are folded."""
        records = [
            make_record("2024-02-29", 3, 50),
            make_record("2024-03-01", 1, 50),
            make_record("2025-03-01", 7, 50),
        ]
        stats = aggregate(records, MonthScope(2024, 3))
        assert stats.total_quantity == 1
        assert stats.record_count == 1
    
    def test_global_balance_ignores_displayed_month(self, make_record):
        """Test the all-time fold covers every record."""
        records = [
            make_record("2024-02-10", 1, 100, 0),
            make_record("2024-03-10", 1, 100, 150),
        ]
        stats = aggregate(records, ALL_TIME)
        assert stats.total_cost == 200
        assert stats.total_paid == 150
        assert stats.balance == 50
    
    def test_payment_only_records(self, make_record):
        """Test payment-only days count as paid and are tallied separately."""
        records = [
            make_record("2024-03-01", 2, 50, 0),
            MilkRecord(date="2024-03-15", payment_amount=300),
        ]
        stats = aggregate(records)
        assert stats.total_paid == 300
        assert stats.balance == -200
        assert stats.balance_state == BalanceState.CREDIT
        assert stats.payment_only_count == 1
        assert stats.payment_only_total == 300
    
    def test_empty(self):
        """Test no records fold to zeros."""
        stats = aggregate([], MonthScope(2024, 3))
        assert stats.record_count == 0
        assert stats.balance == 0
        assert stats.balance_message == "All settled"
    
    def test_float_noise_reads_as_settled(self, make_record):
        """Test a sub-cent balance is shown as settled."""
        records = [make_record("2024-03-01", 3, 0.1, 0.3)]
        assert aggregate(records).balance_state == BalanceState.SETTLED


class TestMonthScope:
    """Tests for MonthScope helpers."""
    
    def test_of_and_bounds(self):
        """Test a scope from a day knows its first and last days."""
        scope = MonthScope.of(date(2024, 2, 14))
        assert scope == MonthScope(2024, 2)
        assert scope.first_day == date(2024, 2, 1)
        assert scope.last_day == date(2024, 2, 29)
        assert scope.prefix == "2024-02-"
    
    def test_contains(self):
        """Test membership by date key."""
        scope = MonthScope(2024, 3)
        assert scope.contains("2024-03-31")
        assert not scope.contains("2024-04-01")
        assert not scope.contains("2023-03-01")
    
    def test_previous_and_next_wrap_years(self):
        """Test navigation across year boundaries."""
        assert MonthScope(2024, 1).previous() == MonthScope(2023, 12)
        assert MonthScope(2024, 12).next() == MonthScope(2025, 1)
        assert MonthScope(2024, 6).next().previous() == MonthScope(2024, 6)
    
    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month(self, month):
        """Test months outside 1-12 are rejected."""
        with pytest.raises(ValueError):
            MonthScope(2024, month)
    
    def test_in_scope_all_time(self, make_record):
        """Test ALL_TIME keeps everything."""
        records = [make_record("2023-01-01"), make_record("2024-01-01")]
        assert in_scope(records, ALL_TIME) == records
