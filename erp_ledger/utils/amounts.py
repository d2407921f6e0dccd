from decimal import Decimal, ROUND_HALF_UP

from erp_ledger.models.payment import PaymentStatus

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
QTY_STEP = Decimal("0.0001")


def to_decimal(value) -> Decimal:
    """Convert float/int/str to Decimal without binary float noise."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def quantity(value) -> Decimal:
    return to_decimal(value).quantize(QTY_STEP, rounding=ROUND_HALF_UP)


def derive_payment_status(amount_paid, total) -> PaymentStatus:
    """
    Paid when everything is covered (overpayment included),
    PartiallyPaid when something was paid, Unpaid otherwise.
    """
    amount_paid = to_decimal(amount_paid)
    if amount_paid >= to_decimal(total):
        return PaymentStatus.PAID
    if amount_paid > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.UNPAID
