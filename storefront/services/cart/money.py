"""Money helpers. All amounts are floats rounded to cents, half-up."""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """
    Round to two decimals, half-up on the shortest decimal representation.

    >>> round_money(10.005)
    10.01
    >>> round_money(16.5 * 2)
    33.0
    """
    return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))
