from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

TENTH = Decimal("0.1")
ZERO = Decimal("0")


class MoneyError(ValueError):
    """Raised when currency/money conversion or formatting fails."""


def to_decimal(value: int | float | str | Decimal) -> Decimal:
    """
    Convert a JSON-ish number into a Decimal.

    Floats go through their shortest repr so 0.1 stays 0.1 instead of
    0.1000000000000000055511151231257827...

    Examples:
      12 -> Decimal("12")
      12.5 -> Decimal("12.5")
      "3.30" -> Decimal("3.30")
    """
    if isinstance(value, bool):
        raise MoneyError("booleans are not money")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float, str)):
        try:
            d = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise MoneyError(f"invalid decimal value: {value}") from e
    else:
        raise MoneyError(f"unsupported money type: {type(value).__name__}")

    if not d.is_finite():
        raise MoneyError(f"amount must be finite: {value}")
    return d


def round_tenth(value: Decimal) -> Decimal:
    """
    Round to the nearest 0.1, half away from zero.

      12.34 -> 12.3
      12.35 -> 12.4
      -0.05 -> -0.1
    """
    if not isinstance(value, Decimal):
        raise MoneyError("round_tenth expects a Decimal")
    return value.quantize(TENTH, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """
    Sum Decimals exactly (no floats).
    """
    total = ZERO
    for v in values:
        if not isinstance(v, Decimal):
            raise MoneyError("all values must be Decimal amounts")
        total += v
    return total


def format_amount(value: Decimal) -> str:
    """
    Render an amount for humans without exponent or trailing zeros.

      Decimal("16.50") -> "16.5"
      Decimal("33.0")  -> "33"
      Decimal("0.00")  -> "0"
    """
    if not isinstance(value, Decimal):
        raise MoneyError("format_amount expects a Decimal")
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def to_json_number(value: Decimal) -> int | float:
    """
    Convert an amount to the number type json.dumps can emit.
    Integral amounts become ints so 33.0 is written as 33.
    """
    if not isinstance(value, Decimal):
        raise MoneyError("to_json_number expects a Decimal")
    if value == value.to_integral_value():
        return int(value)
    return float(value)
