from __future__ import annotations

import math
import re
from datetime import date as date_cls
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from billsplit.config import Config
from billsplit.domain.models import BillInput, BillItem, PersonalItem, SharedItem
from billsplit.domain.money import to_decimal

REQUIRED_FIELDS = ("date", "location", "tipPercentage", "items")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INVALID_CHARS_RE = re.compile(r"[<>{}\[\]\\]")


class FailureKind(str, Enum):
    MISSING_FIELD = "missing_field"
    TYPE_MISMATCH = "type_mismatch"
    OUT_OF_RANGE = "out_of_range"
    INVALID_DATE = "invalid_date"
    INVALID_FORMAT = "invalid_format"
    UNREADABLE_SOURCE = "unreadable_source"
    UNWRITABLE_DESTINATION = "unwritable_destination"
    MALFORMED_DATA = "malformed_data"


class BillValidationError(ValueError):
    """Raised when a bill payload fails validation."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def _is_number(value: object) -> bool:
    """Finite int/float/Decimal; bools do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return True


def validate_date(value: object, *, today: Optional[date_cls] = None) -> str:
    if not isinstance(value, str):
        raise BillValidationError(FailureKind.TYPE_MISMATCH, "Invalid input: date must be a string")
    if not _DATE_RE.match(value):
        raise BillValidationError(
            FailureKind.INVALID_FORMAT,
            f"Invalid date format: {value}. Expected format: YYYY-MM-DD",
        )

    year, month, day = (int(part) for part in value.split("-"))
    try:
        parsed = date_cls(year, month, day)
    except ValueError:
        raise BillValidationError(
            FailureKind.INVALID_DATE,
            f"Invalid date: {value}. Please provide a valid date.",
        ) from None

    min_date = date_cls.fromisoformat(Config.MIN_DATE)
    max_date = today or date_cls.today()
    if parsed < min_date or parsed > max_date:
        raise BillValidationError(
            FailureKind.OUT_OF_RANGE,
            f"Date {value} is out of valid range ({Config.MIN_DATE} to present)",
        )
    return value


def _validate_label(value: object, *, what: str, context: str = "") -> str:
    """
    Shared checks for location and person names: trimmed, non-empty,
    bounded length, none of <>{}[]\\ .
    """
    if not isinstance(value, str):
        raise BillValidationError(FailureKind.TYPE_MISMATCH, f"{what} must be a string{context}")

    trimmed = value.strip()
    if not trimmed:
        raise BillValidationError(FailureKind.OUT_OF_RANGE, f"{what} cannot be empty{context}")
    if len(trimmed) > Config.MAX_TEXT_LENGTH:
        raise BillValidationError(
            FailureKind.OUT_OF_RANGE,
            f"{what} is too long{context} ({len(trimmed)} chars, max {Config.MAX_TEXT_LENGTH})",
        )
    if _INVALID_CHARS_RE.search(trimmed):
        raise BillValidationError(FailureKind.INVALID_FORMAT, f"{what} contains invalid characters{context}")
    return trimmed


def validate_location(value: object) -> str:
    return _validate_label(value, what="Location")


def validate_tip_percentage(value: object) -> Decimal:
    if not _is_number(value):
        raise BillValidationError(
            FailureKind.TYPE_MISMATCH,
            "Invalid input: tipPercentage must be a number",
        )
    tip = to_decimal(value)
    if tip > 100:
        raise BillValidationError(
            FailureKind.OUT_OF_RANGE,
            f"Tip percentage {value}% is too high (max 100%)",
        )
    if tip < 0:
        raise BillValidationError(FailureKind.OUT_OF_RANGE, "Tip percentage cannot be negative")
    return tip


def validate_bill_item(raw_item: object, idx: int) -> BillItem:
    if not isinstance(raw_item, dict):
        raise BillValidationError(FailureKind.TYPE_MISMATCH, f"Item at index {idx} is not an object")

    label = raw_item.get("name") if isinstance(raw_item.get("name"), str) else "unknown"

    if "price" not in raw_item:
        raise BillValidationError(
            FailureKind.MISSING_FIELD,
            f'Missing price for item "{label}" at index {idx}',
        )
    price = raw_item["price"]
    if not _is_number(price):
        raise BillValidationError(
            FailureKind.TYPE_MISMATCH,
            f'Invalid price type for item "{label}" at index {idx}',
        )
    price_d = to_decimal(price)
    if price_d < 0:
        raise BillValidationError(
            FailureKind.OUT_OF_RANGE,
            f'Price cannot be negative for item "{label}" at index {idx}',
        )
    if price_d > Config.MAX_PRICE:
        raise BillValidationError(
            FailureKind.OUT_OF_RANGE,
            f'Price is unreasonably high for item "{label}" at index {idx} (max: {Config.MAX_PRICE})',
        )

    name = raw_item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise BillValidationError(
            FailureKind.MISSING_FIELD if name is None else FailureKind.TYPE_MISMATCH,
            f"Invalid or empty name for item at index {idx}",
        )
    if len(name) > Config.MAX_TEXT_LENGTH:
        raise BillValidationError(
            FailureKind.OUT_OF_RANGE,
            f"Item name is too long at index {idx} ({len(name)} chars, max {Config.MAX_TEXT_LENGTH})",
        )
    name = name.strip()

    is_shared = raw_item.get("isShared")
    if not isinstance(is_shared, bool):
        raise BillValidationError(
            FailureKind.MISSING_FIELD if is_shared is None else FailureKind.TYPE_MISMATCH,
            f'Missing or invalid isShared field for item "{name}" at index {idx}',
        )
    if is_shared:
        return SharedItem(name=name, price=price_d)

    person = raw_item.get("person")
    if person is None or person == "":
        raise BillValidationError(
            FailureKind.MISSING_FIELD,
            f'Missing person field for personal item "{name}" at index {idx}',
        )
    person = _validate_label(
        person,
        what="Person name",
        context=f' for item "{name}" at index {idx}',
    )
    return PersonalItem(name=name, price=price_d, person=person)


def validate_items(raw_items: object) -> List[BillItem]:
    if not isinstance(raw_items, list):
        raise BillValidationError(FailureKind.TYPE_MISMATCH, "Invalid input: items must be an array")
    if not raw_items:
        raise BillValidationError(FailureKind.OUT_OF_RANGE, "Invalid input: items array cannot be empty")
    if len(raw_items) > Config.MAX_ITEMS:
        raise BillValidationError(
            FailureKind.OUT_OF_RANGE,
            f"Invalid input: too many items ({len(raw_items)}, max {Config.MAX_ITEMS})",
        )
    return [validate_bill_item(raw_item, idx) for idx, raw_item in enumerate(raw_items)]


def parse_bill_input(data: Any, *, today: Optional[date_cls] = None) -> BillInput:
    """
    Validate an untrusted JSON document and build a BillInput.

    Expected shape:
      {
        "date": "2024-03-21",
        "location": "Taipei",
        "tipPercentage": 10,
        "items": [
          {"name": "Pizza", "price": 30, "isShared": true},
          {"name": "Beer", "price": 6.5, "isShared": false, "person": "Alice"}
        ]
      }

    Raises BillValidationError carrying a FailureKind.
    """
    if not isinstance(data, dict):
        raise BillValidationError(FailureKind.TYPE_MISMATCH, "Invalid input: Data must be an object")

    missing = [name for name in REQUIRED_FIELDS if name not in data]
    if missing:
        raise BillValidationError(
            FailureKind.MISSING_FIELD,
            f"Missing required fields: {', '.join(missing)}",
        )

    bill_date = validate_date(data["date"], today=today)
    location = validate_location(data["location"])
    tip_percentage = validate_tip_percentage(data["tipPercentage"])
    items = validate_items(data["items"])

    return BillInput(
        date=bill_date,
        location=location,
        tip_percentage=tip_percentage,
        items=tuple(items),
    )
