from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from billsplit.config import Config
from billsplit.domain.formatting import OUTPUT_FORMATS
from billsplit.logging_setup import configure_logging
from billsplit.services.bill_processor import BillProcessor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="billsplit",
        description="Split itemized bills into per-person amounts.",
    )
    parser.add_argument("--input", type=Path, required=True, help="Bill JSON file or directory of bill files")
    parser.add_argument("--output", type=Path, required=True, help="Output file, or output directory in batch mode")
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=Config.DEFAULT_OUTPUT_FORMAT if Config.DEFAULT_OUTPUT_FORMAT in OUTPUT_FORMATS else "json",
        help="Output format (default: %(default)s)",
    )
    parser.add_argument("--log-level", default=None, help="Override BILLSPLIT_LOG_LEVEL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    processor = BillProcessor(args.input, args.output, args.format)

    if args.input.is_dir():
        results = processor.process_directory()
        print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        if not all(r.success for r in results):
            logger.error("Some files failed to process")
            return 1
        return 0

    result = processor.process_file()
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    if not result.success:
        logger.error(f"Failed to process file: {result.error}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
