"""
Core Data Models for MilkyWay Ledger

These models define the strict schemas for all data flowing through the ledger.
They are designed to:
1. Enforce type safety at runtime
2. Keep one record per calendar date (the date IS the key)
3. Be serializable to the JSON blob the local store keeps
4. Stay readable by blobs written before payment amounts existed

DESIGN DECISION: Python attributes are snake_case, the stored JSON keeps
the camelCase names (pricePerUnit, paymentAmount, isPaid). Aliases plus
populate_by_name let callers use either form.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


DATE_KEY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def format_number(value: float) -> str:
    """Render a number the compact way: 2 -> "2", 1.5 -> "1.5"."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def to_date_key(value) -> str:
    """
    Normalize a date-like value to a YYYY-MM-DD key.

    Accepts date, datetime or an ISO string. Raises ValueError for
    anything that is not a real calendar date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10 and text[4] == "-" and text[7] == "-":
            return date.fromisoformat(text).isoformat()
    raise ValueError(f"Not a YYYY-MM-DD date: {value!r}")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class RecordStatus(str, Enum):
    """Reconciled state of a single day."""
    PAID_IN_FULL = "paid_in_full"
    PARTIALLY_PAID = "partially_paid"
    UNPAID = "unpaid"
    PAYMENT_ONLY = "payment_only"  # Standalone settlement, no delivery
    EMPTY = "empty"                # Never persisted


class BalanceState(str, Enum):
    """Sign of a balance: positive is owed, negative is credit."""
    OWED = "owed"
    CREDIT = "credit"
    SETTLED = "settled"


class EntryMode(str, Enum):
    """Which form the day editor opens in."""
    MILK = "milk"
    PAYMENT = "payment"


# =============================================================================
# CORE RECORD MODEL
# =============================================================================

class Reconciliation(BaseModel):
    """Derived state of one record. Never stored on its own."""
    model_config = ConfigDict(frozen=True)

    cost: float
    is_paid: bool
    status: RecordStatus


class MilkRecord(BaseModel):
    """
    One day of deliveries and payments.

    CRITICAL: a record with quantity == 0 and payment_amount == 0 carries
    no information and must not be persisted. The collection operations
    turn that state into a deletion.

    is_paid is a stored snapshot kept for compatibility with older blobs.
    It can always be re-derived with reconciled().
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    date_key: str = Field(
        ...,
        alias="date",
        pattern=DATE_KEY_PATTERN,
        description="Calendar date in YYYY-MM-DD form"
    )
    quantity: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Units delivered on this date"
    )
    price_per_unit: float = Field(
        default=0.0,
        alias="pricePerUnit",
        ge=0,
        allow_inf_nan=False,
        description="Currency per unit"
    )
    payment_amount: float = Field(
        default=0.0,
        alias="paymentAmount",
        ge=0,
        allow_inf_nan=False,
        description="Money received attributable to this date"
    )
    is_paid: bool = Field(
        default=False,
        alias="isPaid",
        description="Paid-status snapshot"
    )
    notes: Optional[str] = Field(
        default=None,
        description="Free-form notes, kept verbatim"
    )

    @field_validator('date_key', mode='before')
    @classmethod
    def normalize_date_key(cls, v):
        """Accept date objects and reject impossible dates like 2024-02-30."""
        return to_date_key(v)

    @field_validator('quantity', 'price_per_unit', 'payment_amount', mode='before')
    @classmethod
    def clamp_negative(cls, v):
        """Missing amounts are zero, negative amounts are clamped to zero."""
        if v is None:
            return 0.0
        try:
            number = float(v)
        except (TypeError, ValueError):
            return v  # Let field validation report it
        return max(number, 0.0)

    @field_validator('notes')
    @classmethod
    def blank_notes_are_none(cls, v: Optional[str]) -> Optional[str]:
        """Whitespace-only notes carry nothing; other notes keep their spacing."""
        if v is None or not v.strip():
            return None
        return v

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date_key)

    @property
    def cost(self) -> float:
        return self.quantity * self.price_per_unit

    @property
    def reconciliation(self) -> Reconciliation:
        from milkyway.ledger.reconciler import reconcile
        return reconcile(self.quantity, self.price_per_unit, self.payment_amount)

    @property
    def status(self) -> RecordStatus:
        return self.reconciliation.status

    @property
    def is_empty(self) -> bool:
        return self.quantity == 0 and self.payment_amount == 0

    @property
    def is_payment_only(self) -> bool:
        return self.quantity == 0 and self.payment_amount > 0

    def reconciled(self) -> "MilkRecord":
        """Return a copy whose is_paid snapshot matches its amounts."""
        is_paid = self.reconciliation.is_paid
        if is_paid == self.is_paid:
            return self
        return self.model_copy(update={"is_paid": is_paid})

    def to_storage_dict(self) -> dict:
        """Serialize for the records blob (camelCase, legacy id included)."""
        data = self.model_dump(by_alias=True)
        data["id"] = self.date_key
        return data


# =============================================================================
# SETTINGS MODEL (user data, stored next to the records)
# =============================================================================

class LedgerSettings(BaseModel):
    """
    Settings the user edits in the settings form.

    Consumed by formatting and by defaults for new entries.
    Lives in its own storage slot with a lifecycle independent of records.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    default_price: float = Field(
        default=60.0,
        alias="defaultPrice",
        ge=0,
        allow_inf_nan=False,
    )
    currency_symbol: str = Field(
        default="₹",
        alias="currencySymbol",
        min_length=1,
        max_length=8,
    )
    unit_label: str = Field(
        default="L",
        alias="unitLabel",
        min_length=1,
        max_length=16,
    )

    def format_amount(self, amount: float) -> str:
        """₹1,234.50 style; credit is shown with a leading minus."""
        sign = "-" if amount < 0 else ""
        return f"{sign}{self.currency_symbol}{abs(amount):,.2f}"

    def format_quantity(self, quantity: float) -> str:
        return f"{format_number(quantity)} {self.unit_label}"


# =============================================================================
# VIEW MODELS
# =============================================================================

class PeriodStats(BaseModel):
    """
    Folded statistics for a scope (one month or all time).

    balance = total_cost - total_paid; positive means money is owed.
    """

    total_quantity: float = 0.0
    total_cost: float = 0.0
    total_paid: float = 0.0
    balance: float = 0.0
    record_count: int = Field(default=0, ge=0)
    payment_only_count: int = Field(default=0, ge=0)
    payment_only_total: float = 0.0

    @property
    def balance_state(self) -> BalanceState:
        """Judged at cent precision so float noise reads as settled."""
        cents = round(self.balance * 100)
        if cents > 0:
            return BalanceState.OWED
        if cents < 0:
            return BalanceState.CREDIT
        return BalanceState.SETTLED

    @property
    def balance_message(self) -> str:
        return {
            BalanceState.OWED: "You owe this amount",
            BalanceState.CREDIT: "You have credit",
            BalanceState.SETTLED: "All settled",
        }[self.balance_state]


class EntryDraft(BaseModel):
    """Prefilled values for the day editor."""

    date_key: str = Field(..., pattern=DATE_KEY_PATTERN)
    mode: EntryMode
    quantity: float = Field(ge=0)
    price_per_unit: float = Field(ge=0)
    payment_amount: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None
    is_existing: bool = False

    @property
    def remaining_due(self) -> float:
        from milkyway.ledger.reconciler import remaining_due
        return remaining_due(self.quantity, self.price_per_unit, self.payment_amount)
