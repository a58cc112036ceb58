from __future__ import annotations

import json
from typing import Any, Dict

from billsplit.domain.models import BillOutput
from billsplit.domain.money import format_amount, to_json_number

OUTPUT_FORMATS = ("json", "text")


class FormatError(ValueError):
    """Raised when an unknown output format is requested."""


def format_date(date: str) -> str:
    """
    "2024-03-21" -> "2024年3月21日" (no zero padding).

    The input shape is trusted; calendar checks happen in api.validators.
    """
    year, month, day = (int(part) for part in date.split("-"))
    return f"{year}年{month}月{day}日"


def bill_output_to_dict(output: BillOutput) -> Dict[str, Any]:
    return {
        "date": output.date,
        "location": output.location,
        "subTotal": to_json_number(output.sub_total),
        "tip": to_json_number(output.tip),
        "totalAmount": to_json_number(output.total_amount),
        "items": [
            {"name": p.name, "amount": to_json_number(p.amount)}
            for p in output.items
        ],
    }


def render_json(output: BillOutput) -> str:
    return json.dumps(bill_output_to_dict(output), indent=2, ensure_ascii=False)


def render_text(output: BillOutput) -> str:
    """
    Fixed-layout report, one "name: amount" line per person.
    """
    lines = [
        f"日期：{output.date}",
        f"地點：{output.location}",
        f"小計：{format_amount(output.sub_total)}",
        f"小費：{format_amount(output.tip)}",
        f"總計：{format_amount(output.total_amount)}",
        "",
        "個人應付金額：",
    ]
    lines.extend(f"{p.name}: {format_amount(p.amount)}" for p in output.items)
    return "\n".join(lines)


def render(output: BillOutput, fmt: str) -> str:
    if fmt == "json":
        return render_json(output)
    if fmt == "text":
        return render_text(output)
    raise FormatError(f"Invalid format: {fmt}. Must be one of: {', '.join(OUTPUT_FORMATS)}")
