from __future__ import annotations

import os


class Config:
    LOG_LEVEL = os.getenv("BILLSPLIT_LOG_LEVEL", "INFO").strip().upper()
    LOG_FILE = os.getenv("BILLSPLIT_LOG_FILE", "").strip()
    DEFAULT_OUTPUT_FORMAT = os.getenv("BILLSPLIT_OUTPUT_FORMAT", "json").strip().lower()
    MAX_WORKERS = int(os.getenv("BILLSPLIT_MAX_WORKERS", "4"))

    # Input limits enforced by api.validators
    MAX_ITEMS = int(os.getenv("BILLSPLIT_MAX_ITEMS", "100"))
    MAX_TEXT_LENGTH = int(os.getenv("BILLSPLIT_MAX_TEXT_LENGTH", "100"))
    MAX_PRICE = int(os.getenv("BILLSPLIT_MAX_PRICE", "1000000"))
    MIN_DATE = os.getenv("BILLSPLIT_MIN_DATE", "2000-01-01")
