"""
Money helpers - lenient parsing and display rounding for currency amounts.

All calculation happens on Decimal at full precision. Rounding is applied
once, at the presentation boundary, through round_money/format_amount.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any


ZERO = Decimal("0")

# Inputs above 10**16 are not money; rejecting them keeps fee/tax arithmetic
# far from the Decimal exponent limits.
MAX_ADJUSTED_EXPONENT = 15


def _coerce(raw: Any) -> Decimal | None:
    """Exact Decimal for a raw value, or None when it is not a finite number."""
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        # str() first so 0.1 stays 0.1 instead of its binary expansion
        value = Decimal(str(raw))
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except (InvalidOperation, ValueError):
            return None

    if not value.is_finite():
        return None
    return value


def to_decimal(raw: Any, default: Decimal = ZERO) -> Decimal:
    """
    Convert a raw numeric value (str, int, float, Decimal) to Decimal.

    Returns `default` for None, blanks, booleans, non-numeric text,
    non-finite values and magnitudes of 10**16 or more.
    Negative values are kept as-is.
    """
    value = _coerce(raw)
    if value is None or (value and value.adjusted() > MAX_ADJUSTED_EXPONENT):
        return default
    return value


def parse_money_or_zero(raw: Any) -> Decimal:
    """
    Parse a price as typed into a form field.

    Absent, empty, non-numeric, non-finite, out-of-range and negative input
    all become 0. Never raises: a live preview recomputes on every keystroke,
    including transient states like "" or "1e".
    """
    value = to_decimal(raw)
    if value < ZERO:
        return ZERO
    return value


def round_money(amount: Any, places: int = 2) -> Decimal:
    """Round half-up to `places` decimal places. Non-numeric amounts round to 0."""
    value = _coerce(amount)
    if value is None:
        value = ZERO

    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the kept places
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def format_amount(amount: Any, currency_symbol: str = "$", places: int = 2) -> str:
    """Format an amount for display, e.g. Decimal('667.275') → '$667.28'."""
    rounded = round_money(amount, places)
    sign = "-" if rounded < ZERO else ""
    return f"{sign}{currency_symbol}{rounded.copy_abs():,.{places}f}"
