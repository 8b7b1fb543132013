"""
Main Orchestrator for MilkyWay Ledger

This module ties together all the components and defines what the host
surface can do:
1. Day edit (day-click -> prefilled draft -> save or delete one record)
2. Range forms (bulk-fill, bulk-settle)
3. Settings form
4. View statistics (displayed month + global balance)
5. CSV export and AI insights

DESIGN DECISION: The host (Streamlit, CLI, tests) never touches the store
directly. Every ledger rule lives below this facade, so the host stays a
thin view.
"""

from datetime import date
from typing import Optional

from milkyway.agents import InsightAgent
from milkyway.config import get_settings
from milkyway.ledger import (
    ALL_TIME,
    MonthScope,
    RangeOperations,
    aggregate,
    export_csv,
    export_filename,
)
from milkyway.logs import LedgerEventLogger, configure_logging
from milkyway.models.record import (
    EntryDraft,
    EntryMode,
    LedgerSettings,
    MilkRecord,
    PeriodStats,
    to_date_key,
)
from milkyway.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    LedgerStore,
)


class LedgerService:
    """
    Facade over the ledger for one interactive user.

    Operations run synchronously and to completion, one at a time.
    Only generate_insights is async, and it works on a snapshot.
    """

    def __init__(
        self,
        store: LedgerStore,
        insight_agent: Optional[InsightAgent] = None,
        event_logger: Optional[LedgerEventLogger] = None,
        export_app_name: str = "milkyway",
    ):
        self._store = store
        self._events = event_logger or LedgerEventLogger()
        self._ranges = RangeOperations(store, self._events)
        self._insight_agent = insight_agent
        self._export_app_name = export_app_name
        # Quantity and price of the last delivery entered, used to prefill new days
        self._last_entry: Optional[tuple[float, float]] = None

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def records(self) -> list[MilkRecord]:
        return self._store.load()

    def get_record(self, day) -> Optional[MilkRecord]:
        return self._store.load_ledger().get(to_date_key(day))

    def month_stats(self, year: int, month: int) -> PeriodStats:
        return aggregate(self._store.load(), MonthScope(year, month))

    def global_stats(self) -> PeriodStats:
        """All-time statistics, independent of the displayed month."""
        return aggregate(self._store.load(), ALL_TIME)

    # -------------------------------------------------------------------------
    # Day edit
    # -------------------------------------------------------------------------

    def _last_entry_config(self, records: list[MilkRecord]) -> Optional[tuple[float, float]]:
        if self._last_entry is not None:
            return self._last_entry
        for record in reversed(records):
            if record.quantity > 0:
                return record.quantity, record.price_per_unit
        return None

    def suggest_entry(self, day) -> EntryDraft:
        """
        Prefilled values for the day editor.

        Existing records are shown as stored (payment mode when they carry
        no quantity). New days reuse the last delivery's quantity and price,
        or 1 unit at the default price.
        """
        date_key = to_date_key(day)
        records = self._store.load()
        existing = next((r for r in records if r.date_key == date_key), None)

        if existing is not None:
            return EntryDraft(
                date_key=date_key,
                mode=EntryMode.MILK if existing.quantity > 0 else EntryMode.PAYMENT,
                quantity=existing.quantity,
                price_per_unit=existing.price_per_unit,
                payment_amount=existing.payment_amount,
                notes=existing.notes,
                is_existing=True,
            )

        last = self._last_entry_config(records)
        if last is not None:
            quantity, price = last
        else:
            quantity, price = 1.0, self._store.load_settings().default_price

        return EntryDraft(
            date_key=date_key,
            mode=EntryMode.MILK,
            quantity=quantity,
            price_per_unit=price,
        )

    def save_entry(
        self,
        day,
        quantity: float,
        price_per_unit: float,
        payment_amount: float = 0.0,
        notes: Optional[str] = None,
    ) -> list[MilkRecord]:
        """
        Save the day editor's values as one record.

        Zero quantity with zero payment deletes the day instead.
        """
        record = MilkRecord(
            date=day,
            quantity=quantity,
            price_per_unit=price_per_unit,
            payment_amount=payment_amount,
            notes=notes,
        )
        if record.quantity > 0:
            self._last_entry = (record.quantity, record.price_per_unit)

        if record.is_empty:
            return self._store.delete_one(record.date_key)
        return self._store.upsert_one(record)

    def delete_entry(self, day) -> list[MilkRecord]:
        return self._store.delete_one(to_date_key(day))

    # -------------------------------------------------------------------------
    # Range forms
    # -------------------------------------------------------------------------

    def bulk_fill(
        self,
        start,
        end,
        quantity: float,
        price_per_unit: float,
    ) -> list[MilkRecord]:
        """
        Overwrite quantity and price for every day in [start, end].

        DESTRUCTIVE: existing quantities and prices in the range are
        replaced. Existing payments are kept.
        """
        records = self._ranges.bulk_fill(start, end, quantity, price_per_unit)
        if quantity > 0:
            self._last_entry = (float(quantity), float(price_per_unit))
        return records

    def bulk_settle(self, start, end) -> list[MilkRecord]:
        """Mark every existing record in [start, end] as paid in full."""
        return self._ranges.bulk_settle(start, end)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def get_settings(self) -> LedgerSettings:
        return self._store.load_settings()

    def update_settings(
        self,
        default_price: Optional[float] = None,
        currency_symbol: Optional[str] = None,
        unit_label: Optional[str] = None,
    ) -> LedgerSettings:
        """Change any subset of the settings; the rest keep their values."""
        current = self._store.load_settings()
        changes = {
            "default_price": default_price,
            "currency_symbol": currency_symbol,
            "unit_label": unit_label,
        }
        merged = {
            **current.model_dump(),
            **{key: value for key, value in changes.items() if value is not None},
        }
        return self._store.save_settings(LedgerSettings.model_validate(merged))

    # -------------------------------------------------------------------------
    # Export and insights
    # -------------------------------------------------------------------------

    def export(self, on: Optional[date] = None) -> tuple[str, str]:
        """
        Build the CSV download.

        Returns:
            (filename, csv_text)
        """
        records = self._store.load()
        content = export_csv(records)
        self._events.log_export_generated(len(records))
        return export_filename(self._export_app_name, on), content

    async def generate_insights(self) -> str:
        """AI summary of the ledger; never raises."""
        records = self._store.load()
        settings = self._store.load_settings()
        agent = self._insight_agent or InsightAgent(event_logger=self._events)
        self._insight_agent = agent
        return await agent.analyze(records, settings)


def create_app_components(
    use_file_storage: bool = True,
    kv_store: Optional[KeyValueStore] = None,
) -> LedgerService:
    """
    Factory function to create the application service.

    Args:
        use_file_storage: Persist under the configured data directory.
                          Set to False for an in-memory ledger.
        kv_store: Explicit backend; overrides use_file_storage.

    Returns:
        A ready LedgerService
    """
    settings = get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    configure_logging(app_settings.log_level)
    event_logger = LedgerEventLogger()

    if kv_store is None:
        if use_file_storage:
            kv_store = FileKeyValueStore(storage_settings.data_dir)
        else:
            kv_store = InMemoryKeyValueStore()

    store = LedgerStore(
        kv_store,
        records_key=storage_settings.records_key,
        settings_key=storage_settings.settings_key,
        default_settings=LedgerSettings(
            default_price=app_settings.default_price,
            currency_symbol=app_settings.currency_symbol,
            unit_label=app_settings.unit_label,
        ),
        event_logger=event_logger,
    )

    return LedgerService(
        store,
        insight_agent=InsightAgent(settings=settings.gemini, event_logger=event_logger),
        event_logger=event_logger,
        export_app_name=app_settings.export_app_name,
    )
