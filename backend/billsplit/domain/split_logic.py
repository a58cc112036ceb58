from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple, Union

from loguru import logger

from billsplit.domain.formatting import format_date
from billsplit.domain.models import (
    BillInput,
    BillItem,
    BillOutput,
    PersonAmount,
    PersonalItem,
    SharedItem,
)
from billsplit.domain.money import ZERO, round_tenth, sum_money

HUNDRED = Decimal(100)

# Shared-only bills have no named people; split between two placeholders.
FALLBACK_NAMES: Tuple[str, ...] = ("Person 1", "Person 2")


class SplitLogicError(ValueError):
    """Raised when split inputs cannot be allocated."""


@dataclass(frozen=True)
class NamedParticipants:
    """Participants taken from the personal items, sorted by name."""
    names: Tuple[str, ...]


@dataclass(frozen=True)
class FallbackParticipants:
    """Placeholder participants used when only shared items exist."""
    names: Tuple[str, ...] = FALLBACK_NAMES


Participants = Union[NamedParticipants, FallbackParticipants]


def calculate_subtotal(items: Sequence[BillItem]) -> Decimal:
    """
    Sum of every item price, exact (no rounding).
    """
    return sum_money(item.price for item in items)


def calculate_tip(subtotal: Decimal, tip_percentage: Decimal) -> Decimal:
    """
    subtotal * tip_percentage / 100, rounded to the nearest 0.1.

      calculate_tip(Decimal("123.4"), Decimal("10")) -> Decimal("12.3")
    """
    return round_tenth(subtotal * tip_percentage / HUNDRED)


def resolve_participants(items: Sequence[BillItem]) -> Participants:
    """
    Work out who pays.

    - Distinct persons from personal items, sorted ascending.
    - If there are shared items but nobody is named, fall back to
      "Person 1" and "Person 2".
    - No items at all gives an empty NamedParticipants.
    """
    persons = {item.person for item in items if isinstance(item, PersonalItem)}
    has_shared = any(isinstance(item, SharedItem) for item in items)

    if has_shared and not persons:
        return FallbackParticipants()
    return NamedParticipants(names=tuple(sorted(persons)))


def personal_totals(items: Sequence[BillItem], names: Sequence[str]) -> Dict[str, Decimal]:
    """
    Map each name to the sum of its personal items (0 for people with none).
    """
    totals: Dict[str, Decimal] = {name: ZERO for name in names}
    for item in items:
        if isinstance(item, PersonalItem) and item.person in totals:
            totals[item.person] += item.price
    return totals


def shared_total(items: Sequence[BillItem]) -> Decimal:
    return sum_money(item.price for item in items if isinstance(item, SharedItem))


def shared_per_person(total: Decimal, participant_count: int) -> Decimal:
    if participant_count <= 0:
        if total == ZERO:
            return ZERO
        raise SplitLogicError("shared items need at least 1 participant")
    return total / Decimal(participant_count)


def calculate_person_amounts(
    items: Sequence[BillItem],
    names: Sequence[str],
    tip_percentage: Decimal,
) -> List[PersonAmount]:
    """
    Each person's share plus tip on that share, rounded to 0.1.

    The tip is applied to every share independently; it is not a split of
    the bill-level tip, so the rounded amounts may drift from the total.
    reconcile_rounding() fixes the drift afterwards.
    """
    personal = personal_totals(items, names)
    per_person_shared = shared_per_person(shared_total(items), len(names))
    multiplier = 1 + tip_percentage / HUNDRED

    amounts: List[PersonAmount] = []
    for name in names:
        raw_share = personal[name] + per_person_shared
        amounts.append(PersonAmount(name=name, amount=round_tenth(raw_share * multiplier)))
    return amounts


def pick_largest_index(amounts: Sequence[Decimal]) -> int:
    """
    Index of the strictly largest amount; the first one wins on ties.
    """
    if not amounts:
        raise SplitLogicError("amounts must contain at least 1 entry")

    best = 0
    for idx in range(1, len(amounts)):
        if amounts[idx] > amounts[best]:
            best = idx
    return best


def reconcile_rounding(total_amount: Decimal, items: Sequence[PersonAmount]) -> List[PersonAmount]:
    """
    Make the per-person amounts add up to round_tenth(total_amount).

    The whole residual goes to the person with the largest amount (first
    in order on ties). Exactly one person is adjusted, once.
    An empty list is returned unchanged.
    """
    adjusted = list(items)
    if not adjusted:
        return adjusted

    current = sum_money(p.amount for p in adjusted)
    difference = round_tenth(total_amount) - current
    if difference == ZERO:
        return adjusted

    idx = pick_largest_index([p.amount for p in adjusted])
    target = adjusted[idx]
    adjusted[idx] = PersonAmount(
        name=target.name,
        amount=round_tenth(target.amount + difference),
    )
    logger.debug(f"Rounding residual {difference} assigned to {target.name}")
    return adjusted


def split_bill(bill: BillInput) -> BillOutput:
    """
    Split a validated bill into per-person amounts.

    Pure: no I/O, no shared state, same input gives the same output.
    """
    sub_total = calculate_subtotal(bill.items)
    tip = calculate_tip(sub_total, bill.tip_percentage)
    total_amount = sub_total + tip

    participants = resolve_participants(bill.items)
    if isinstance(participants, FallbackParticipants):
        logger.debug("No personal items; splitting shared items between fallback participants")

    amounts = calculate_person_amounts(bill.items, participants.names, bill.tip_percentage)
    amounts = reconcile_rounding(total_amount, amounts)

    # Safety: reconciled amounts must add up to the rounded total
    if amounts and sum_money(p.amount for p in amounts) != round_tenth(total_amount):
        raise SplitLogicError("internal error: allocation does not sum to total")

    return BillOutput(
        date=format_date(bill.date),
        location=bill.location,
        sub_total=sub_total,
        tip=tip,
        total_amount=total_amount,
        items=tuple(amounts),
    )
