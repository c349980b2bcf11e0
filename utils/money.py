"""Integer-cents money arithmetic.

All amounts are integer minor units (cents). Intermediate math runs in
Decimal and is rounded half-up exactly once, by the caller, at the end.
"""

from decimal import Decimal, ROUND_HALF_UP

BPS_DENOMINATOR = Decimal(10000)


def round_half_up(value: Decimal | int) -> int:
    """Round a Decimal amount of cents to a whole cent, halves away from zero."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def apply_bps(amount_cents: int, rate_bps: int) -> int:
    """Amount times a basis-point rate (800 = 8%), rounded half-up."""
    return round_half_up(Decimal(amount_cents) * Decimal(rate_bps) / BPS_DENOMINATOR)


def apply_percentage(amount_cents: int, percentage: Decimal | int | float) -> int:
    """Amount times a percentage (10 = 10%), rounded half-up."""
    return round_half_up(Decimal(amount_cents) * Decimal(str(percentage)) / Decimal(100))


def format_cents(amount_cents: int) -> str:
    """Display helper: 12250 -> '$122.50'."""
    sign = "-" if amount_cents < 0 else ""
    dollars, cents = divmod(abs(amount_cents), 100)
    return f"{sign}${dollars:,}.{cents:02d}"
