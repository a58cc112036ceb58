import json
from decimal import Decimal

import pytest

from billsplit.domain.formatting import (
    FormatError,
    bill_output_to_dict,
    format_date,
    render,
    render_json,
    render_text,
)
from billsplit.domain.models import BillOutput, PersonAmount
from billsplit.domain.money import MoneyError, format_amount, round_tenth, to_decimal, to_json_number


def _output():
    return BillOutput(
        date="2024年3月21日",
        location="台北",
        sub_total=Decimal("30"),
        tip=Decimal("3.0"),
        total_amount=Decimal("33.0"),
        items=(
            PersonAmount("Person 1", Decimal("16.5")),
            PersonAmount("Person 2", Decimal("16.5")),
        ),
    )


def test_to_decimal_accepts_json_numbers():
    assert to_decimal(12) == Decimal("12")
    assert to_decimal(0.1) == Decimal("0.1")  # shortest repr, not binary expansion
    assert to_decimal("3.30") == Decimal("3.30")
    assert to_decimal(Decimal("7.25")) == Decimal("7.25")


def test_to_decimal_rejects_bad_values():
    for bad in [True, "abc", "", None, float("nan"), float("inf")]:
        with pytest.raises(MoneyError):
            to_decimal(bad)  # type: ignore[arg-type]


def test_round_tenth_is_half_away_from_zero():
    assert round_tenth(Decimal("12.34")) == Decimal("12.3")
    assert round_tenth(Decimal("12.35")) == Decimal("12.4")
    assert round_tenth(Decimal("-0.05")) == Decimal("-0.1")
    assert round_tenth(Decimal("0.04")) == Decimal("0.0")


def test_round_tenth_requires_decimal():
    with pytest.raises(MoneyError):
        round_tenth(1.25)  # type: ignore[arg-type]


def test_format_amount_drops_trailing_zeros():
    assert format_amount(Decimal("16.50")) == "16.5"
    assert format_amount(Decimal("33.0")) == "33"
    assert format_amount(Decimal("0.00")) == "0"
    assert format_amount(Decimal("120")) == "120"


def test_to_json_number():
    assert to_json_number(Decimal("33.0")) == 33
    assert isinstance(to_json_number(Decimal("33.0")), int)
    assert to_json_number(Decimal("16.5")) == 16.5


def test_format_date_drops_zero_padding():
    assert format_date("2024-03-21") == "2024年3月21日"
    assert format_date("2024-01-05") == "2024年1月5日"
    assert format_date("2023-12-31") == "2023年12月31日"


def test_bill_output_to_dict_uses_camel_case_keys():
    assert bill_output_to_dict(_output()) == {
        "date": "2024年3月21日",
        "location": "台北",
        "subTotal": 30,
        "tip": 3,
        "totalAmount": 33,
        "items": [
            {"name": "Person 1", "amount": 16.5},
            {"name": "Person 2", "amount": 16.5},
        ],
    }


def test_render_json_keeps_non_ascii_and_round_trips():
    text = render_json(_output())
    assert "台北" in text
    assert json.loads(text)["totalAmount"] == 33


def test_render_text_layout():
    assert render_text(_output()) == (
        "日期：2024年3月21日\n"
        "地點：台北\n"
        "小計：30\n"
        "小費：3\n"
        "總計：33\n"
        "\n"
        "個人應付金額：\n"
        "Person 1: 16.5\n"
        "Person 2: 16.5"
    )


def test_render_dispatch_and_unknown_format():
    out = _output()
    assert render(out, "json") == render_json(out)
    assert render(out, "text") == render_text(out)
    with pytest.raises(FormatError):
        render(out, "xml")
