"""
Remittance calculations for bus trips.

Pure functions, no database access. A trip crew owes the company
an expected remittance that depends on the assignment scheme:

    BOUNDARY:   expected = fuel_expense + assignment_value
    PERCENTAGE: expected = trip_revenue * assignment_value + fuel_expense

For PERCENTAGE, assignment_value is a fraction (0.30 means 30%).
Any other assignment type is treated as BOUNDARY. Missing inputs
count as zero.
"""

import logging
from decimal import Decimal

from trip_ledger.models.enums import (
    AssignmentType,
    PaymentMethod,
    RemittanceStatus,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Upstream systems spell payment methods several ways
PAYMENT_METHOD_ALIASES: dict[str, PaymentMethod] = {
    "CASH": PaymentMethod.CASH,
    "COMPANY_CASH": PaymentMethod.CASH,
    "BANK_TRANSFER": PaymentMethod.BANK_TRANSFER,
    "BANK": PaymentMethod.BANK_TRANSFER,
    "E_WALLET": PaymentMethod.E_WALLET,
    "EWALLET": PaymentMethod.E_WALLET,
    "GCASH": PaymentMethod.E_WALLET,
    "PAYMAYA": PaymentMethod.E_WALLET,
    "REIMBURSEMENT": PaymentMethod.REIMBURSEMENT,
}


def to_decimal(value) -> Decimal:
    """Coerce a nullable number to Decimal without going through float."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def is_percentage(assignment_type) -> bool:
    if assignment_type is None:
        return False
    value = getattr(assignment_type, "value", assignment_type)
    return str(value).upper() == AssignmentType.PERCENTAGE.value


def expected_remittance(
    assignment_type,
    trip_revenue,
    assignment_value,
    fuel_expense,
) -> Decimal:
    """Amount the crew must hand over for the trip."""
    revenue = to_decimal(trip_revenue)
    value = to_decimal(assignment_value)
    fuel = to_decimal(fuel_expense)

    if is_percentage(assignment_type):
        return revenue * value + fuel
    return fuel + value


def shortage(expected, trip_revenue) -> Decimal:
    """How much collected revenue falls short of expected. Never negative."""
    gap = to_decimal(expected) - to_decimal(trip_revenue)
    return gap if gap > ZERO else ZERO


def company_share_amount(assignment_type, trip_revenue, assignment_value) -> Decimal:
    """The company's cut of the trip, excluding fuel reimbursement."""
    if is_percentage(assignment_type):
        return to_decimal(trip_revenue) * to_decimal(assignment_value)
    return to_decimal(assignment_value)


def remittance_status(trip_revenue, expected) -> RemittanceStatus:
    if to_decimal(trip_revenue) >= to_decimal(expected):
        return RemittanceStatus.PAID
    return RemittanceStatus.PARTIALLY_PAID


def normalize_payment_method(raw) -> PaymentMethod:
    """
    Map an upstream payment method string onto PaymentMethod.

    Unknown or empty values fall back to CASH with a warning so a
    trip is never blocked on a spelling difference.
    """
    if isinstance(raw, PaymentMethod):
        return raw
    key = str(raw or "").strip().upper().replace("-", "_").replace(" ", "_")
    method = PAYMENT_METHOD_ALIASES.get(key)
    if method is None:
        logger.warning("Unknown payment method %r, defaulting to CASH", raw)
        return PaymentMethod.CASH
    return method
