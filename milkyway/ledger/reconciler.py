"""
Record Reconciler

Pure functions turning a record's amounts into derived state:
cost, paid-status and a RecordStatus. No I/O, no exceptions.

Money is kept as float. Repeated quantity * price multiplications leave
rounding noise, so "paid in full" is judged with a fixed tolerance.
The cost itself is never rounded.
"""

from milkyway.models.record import Reconciliation, RecordStatus


# One tenth of a currency unit absorbs float noise from quantity * price
PAID_TOLERANCE = 0.1


def _non_negative(value: float) -> float:
    return value if value > 0 else 0.0


def record_cost(quantity: float, price_per_unit: float) -> float:
    """Cost of a day: quantity * price, negatives clamped to zero."""
    return _non_negative(quantity) * _non_negative(price_per_unit)


def covers_cost(payment_amount: float, cost: float) -> bool:
    """True when the payment reaches the cost within PAID_TOLERANCE."""
    return payment_amount >= cost - PAID_TOLERANCE


def reconcile(
    quantity: float,
    price_per_unit: float,
    payment_amount: float,
) -> Reconciliation:
    """
    Reconcile one record.
    
    Status rules (after clamping negatives to zero):
    - EMPTY: no quantity and no payment
    - PAYMENT_ONLY: no quantity, some payment
    - PAID_IN_FULL: quantity and payment >= cost - tolerance
    - PARTIALLY_PAID: quantity and 0 < payment < cost - tolerance
    - UNPAID: quantity and no payment
    """
    quantity = _non_negative(quantity)
    price_per_unit = _non_negative(price_per_unit)
    payment_amount = _non_negative(payment_amount)
    
    cost = quantity * price_per_unit
    
    if quantity == 0:
        status = RecordStatus.PAYMENT_ONLY if payment_amount > 0 else RecordStatus.EMPTY
        return Reconciliation(cost=cost, is_paid=False, status=status)
    
    if covers_cost(payment_amount, cost):
        status = RecordStatus.PAID_IN_FULL
    elif payment_amount > 0:
        status = RecordStatus.PARTIALLY_PAID
    else:
        status = RecordStatus.UNPAID
    
    return Reconciliation(
        cost=cost,
        is_paid=status == RecordStatus.PAID_IN_FULL,
        status=status,
    )


def remaining_due(
    quantity: float,
    price_per_unit: float,
    payment_amount: float,
) -> float:
    """What is still owed for a single day, never negative."""
    return max(0.0, record_cost(quantity, price_per_unit) - _non_negative(payment_amount))
