"""Money and quantity primitives.

Amounts are handled as ``Decimal`` and reported in cents. Floats are converted
through their string form so ``10.1`` stays ``Decimal("10.1")``.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert an int, float, str or Decimal into a finite Decimal.

    Raises:
        ValueError: if the value is not a finite number.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float | str):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    else:
        raise ValueError(f"Not a number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def to_money(value) -> Decimal:
    """Round a numeric value to cents."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values) -> Decimal:
    return sum((to_money(v) for v in values), ZERO)


def is_quantity(value) -> bool:
    """True for plain ints (booleans excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)
