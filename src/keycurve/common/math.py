from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Union

Number = Union[Decimal, int, float, str]

BPS_DENOMINATOR = Decimal("10000")
LAMPORTS_PER_SOL = Decimal("1000000000")


def decimal_approx_equal(a: Decimal, b: Decimal, tol: Decimal = Decimal("1e-14")) -> bool:
    return abs(a - b) < tol


def to_decimal(value: Number) -> Decimal:
    """
    Coerce int / str / float / Decimal into a Decimal.
    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its binary expansion.

    :raises InvalidOperation: if the value cannot be parsed as a number.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Boolean is not a numeric amount: {value!r}")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(value, high))


def bps_fraction(amount: Decimal, bps: Decimal) -> Decimal:
    """Return `amount * bps / 10000`."""
    return amount * bps / BPS_DENOMINATOR


def to_lamports(sol_amount: Number) -> int:
    """Convert a SOL-denominated amount into whole lamports, rounding down."""
    lamports = to_decimal(sol_amount) * LAMPORTS_PER_SOL
    return int(lamports.to_integral_value(rounding=ROUND_FLOOR))
