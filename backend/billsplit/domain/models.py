from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple, Union


class ModelValidationError(ValueError):
    """Raised when bill models fail basic validation."""


def _check_name(value: object, label: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ModelValidationError(f"{label} must be a non-empty string")


def _check_price(value: object, label: str) -> None:
    if not isinstance(value, Decimal) or not value.is_finite() or value < 0:
        raise ModelValidationError(f"{label} must be a Decimal >= 0")


@dataclass(frozen=True)
class SharedItem:
    """
    A bill line split equally among every participant.
    price is a currency amount, not necessarily whole cents.
    """
    name: str
    price: Decimal

    def __post_init__(self) -> None:
        _check_name(self.name, "SharedItem.name")
        _check_price(self.price, "SharedItem.price")


@dataclass(frozen=True)
class PersonalItem:
    """
    A bill line paid in full by one named person.
    """
    name: str
    price: Decimal
    person: str

    def __post_init__(self) -> None:
        _check_name(self.name, "PersonalItem.name")
        _check_price(self.price, "PersonalItem.price")
        _check_name(self.person, "PersonalItem.person")


BillItem = Union[SharedItem, PersonalItem]


@dataclass(frozen=True)
class BillInput:
    """
    A validated bill.

    date is the raw "YYYY-MM-DD" string; tip_percentage is 0..100.
    Emptiness of items is checked at the boundary (api.validators), not here.
    """
    date: str
    location: str
    tip_percentage: Decimal
    items: Tuple[BillItem, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.date, str):
            raise ModelValidationError("BillInput.date must be a string")
        if not isinstance(self.location, str):
            raise ModelValidationError("BillInput.location must be a string")
        if not isinstance(self.tip_percentage, Decimal) or self.tip_percentage < 0:
            raise ModelValidationError("BillInput.tip_percentage must be a Decimal >= 0")
        if not isinstance(self.items, tuple):
            raise ModelValidationError("BillInput.items must be a tuple")
        for item in self.items:
            if not isinstance(item, (SharedItem, PersonalItem)):
                raise ModelValidationError("BillInput.items must hold SharedItem/PersonalItem")


@dataclass(frozen=True)
class PersonAmount:
    name: str
    amount: Decimal


@dataclass(frozen=True)
class BillOutput:
    """
    Result of splitting one bill.

    date is already localised (see domain.formatting.format_date).
    items holds one PersonAmount per participant, sorted by name, and
    sum(p.amount for p in items) == round_tenth(total_amount).
    """
    date: str
    location: str
    sub_total: Decimal
    tip: Decimal
    total_amount: Decimal
    items: Tuple[PersonAmount, ...]
