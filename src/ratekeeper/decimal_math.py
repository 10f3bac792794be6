"""
Decimal string arithmetic for rates.

Every function takes and returns decimal strings. Binary floats are rejected outright:
upstream JSON is decoded with parse_float=Decimal, so a float reaching this module is a bug.

div, sub and compare truncate to the requested scale; round_half_up rounds half away
from zero.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from ratekeeper.errors import InvalidOperand

# Working precision for intermediate results, far above any rate we store
_PRECISION = 100


def _to_decimal(value: str | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (str, int)) and not isinstance(value, bool):
        text = str(value).strip().replace(",", ".")
        if not text or "_" in text:
            raise InvalidOperand(f"Expected numeric string, got: {value!r}")
        try:
            number = Decimal(text)
        except InvalidOperation as e:
            raise InvalidOperand(f"Expected numeric string, got: {value!r}") from e
    else:
        raise InvalidOperand(f"Expected numeric string, got: {value!r}")

    if not number.is_finite():
        raise InvalidOperand(f"Expected numeric string, got: {value!r}")
    return number


def _to_scale(number: Decimal, scale: int, rounding: str) -> str:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        result = number.quantize(Decimal(1).scaleb(-scale), rounding=rounding)
    if result.is_zero():
        result = abs(result)
    return format(result, "f")


def normalize(value: str | int | Decimal) -> str:
    """
    Convert a numeric value to a plain decimal string.

    Comma separators become dots and scientific notation is expanded:
    "2.3E-5" -> "0.000023", "1,5" -> "1.5".
    """
    return format(_to_decimal(value), "f")


def div(a: str | int | Decimal, b: str | int | Decimal, scale: int) -> str:
    """
    Divide a by b, truncated to `scale` fractional digits.

    Raises:
        InvalidOperand: on non-numeric operands or a zero divisor
    """
    dividend = _to_decimal(a)
    divisor = _to_decimal(b)
    if divisor.is_zero():
        raise InvalidOperand(f"Division by zero: {a!r} / {b!r}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        quotient = dividend / divisor
    return _to_scale(quotient, scale, ROUND_DOWN)


def sub(a: str | int | Decimal, b: str | int | Decimal, scale: int) -> str:
    """Subtract b from a, truncated to `scale` fractional digits."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        difference = _to_decimal(a) - _to_decimal(b)
    return _to_scale(difference, scale, ROUND_DOWN)


def compare(a: str | int | Decimal, b: str | int | Decimal, scale: int) -> int:
    """Compare a and b up to `scale` fractional digits. Returns -1, 0 or 1."""
    left = Decimal(_to_scale(_to_decimal(a), scale, ROUND_DOWN))
    right = Decimal(_to_scale(_to_decimal(b), scale, ROUND_DOWN))
    if left > right:
        return 1
    if left < right:
        return -1
    return 0


def round_half_up(value: str | int | Decimal, scale: int) -> str:
    """Round half away from zero: round_half_up("-1.235", 2) == "-1.24"."""
    return _to_scale(_to_decimal(value), scale, ROUND_HALF_UP)


def is_numeric(value: object) -> bool:
    """True when value would be accepted by the functions above."""
    try:
        _to_decimal(value)
    except InvalidOperand:
        return False
    return True
