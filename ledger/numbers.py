from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and None into a Decimal.

    Floats go through ``str`` so 0.1 stays 0.1. Missing or unparsable
    values count as zero, the same way absent quantities do on a report.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def safe_divide(numerator, denominator) -> Decimal:
    denominator = to_decimal(denominator)
    if denominator == 0:
        return ZERO
    return to_decimal(numerator) / denominator


def round_to_integer(value) -> Decimal:
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def percent_of(amount, percent) -> Decimal:
    return to_decimal(amount) * to_decimal(percent) / HUNDRED
