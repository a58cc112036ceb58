from __future__ import annotations

import json
from decimal import Decimal

from flask import Blueprint, Response, jsonify, request
from loguru import logger

from billsplit.api.validators import BillValidationError, FailureKind, parse_bill_input
from billsplit.domain.formatting import OUTPUT_FORMATS, bill_output_to_dict, render_text
from billsplit.domain.split_logic import SplitLogicError, split_bill

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _json_error(message: str, *, status: int = 400, code: str = "bad_request"):
    return jsonify({"error": {"code": code, "message": message}}), status


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"}), 200


@api_bp.post("/split")
def split_endpoint():
    """
    JSON body: a bill ({date, location, tipPercentage, items}).
    Query:
      - format: "json" (default) or "text"
    Response:
      - {date, location, subTotal, tip, totalAmount, items: [{name, amount}]}
        or the plain-text report
    """
    fmt = request.args.get("format", "json").strip().lower()
    if fmt not in OUTPUT_FORMATS:
        return _json_error(
            f"Invalid format: {fmt}. Must be either \"json\" or \"text\"",
            code=FailureKind.INVALID_FORMAT.value,
        )

    raw = request.get_data(cache=False, as_text=True)
    try:
        data = json.loads(raw, parse_float=Decimal) if raw else None
    except ValueError:
        data = None
    if data is None:
        return _json_error("Request body must be JSON.", code=FailureKind.MALFORMED_DATA.value)

    try:
        bill = parse_bill_input(data)
    except BillValidationError as e:
        logger.info(f"Rejected bill: {e.kind.value}: {e.message}")
        return _json_error(e.message, code=e.kind.value)

    try:
        result = split_bill(bill)
    except SplitLogicError as e:
        return _json_error(str(e), status=422, code="split_failed")

    if fmt == "text":
        return Response(render_text(result), status=200, mimetype="text/plain")
    return jsonify(bill_output_to_dict(result)), 200
