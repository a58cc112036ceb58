from __future__ import annotations

import errno
import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from billsplit.api.validators import BillValidationError, FailureKind, parse_bill_input
from billsplit.config import Config
from billsplit.domain.formatting import OUTPUT_FORMATS, bill_output_to_dict, render
from billsplit.domain.models import BillInput, BillOutput
from billsplit.domain.split_logic import SplitLogicError, split_bill


class ProcessorError(ValueError):
    """Raised when reading, validating or writing a bill file fails."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of processing one bill file.

    Exactly one of data / (error, kind) is set.
    """
    success: bool
    data: Optional[BillOutput] = None
    error: Optional[str] = None
    kind: Optional[FailureKind] = None
    source: Optional[str] = None

    @classmethod
    def ok(cls, data: BillOutput, *, source: Optional[str] = None) -> "ProcessResult":
        return cls(success=True, data=data, source=source)

    @classmethod
    def failed(cls, err: ProcessorError, *, source: Optional[str] = None, prefix: str = "") -> "ProcessResult":
        return cls(success=False, error=f"{prefix}{err}", kind=err.kind, source=source)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success}
        if self.source is not None:
            out["source"] = self.source
        if self.data is not None:
            out["data"] = bill_output_to_dict(self.data)
        if self.error is not None:
            out["error"] = self.error
            out["kind"] = self.kind.value if self.kind else None
        return out


def read_bill_file(path: Path, *, today: Optional[date] = None) -> BillInput:
    """
    Read a UTF-8 JSON bill and validate it.
    Numbers with a fraction are parsed straight into Decimal.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ProcessorError(FailureKind.UNREADABLE_SOURCE, f"File not found: {path}") from None
    except PermissionError:
        raise ProcessorError(
            FailureKind.UNREADABLE_SOURCE, f"Permission denied: Cannot read file {path}"
        ) from None
    except UnicodeDecodeError as e:
        raise ProcessorError(FailureKind.MALFORMED_DATA, f"File {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ProcessorError(FailureKind.UNREADABLE_SOURCE, f"Error reading file {path}: {e}") from e

    try:
        data = json.loads(content, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ProcessorError(FailureKind.MALFORMED_DATA, f"Invalid JSON format in file {path}: {e}") from e

    try:
        return parse_bill_input(data, today=today)
    except BillValidationError as e:
        raise ProcessorError(e.kind, f"Invalid bill format in file {path}: {e.message}") from e


def write_output_file(path: Path, content: str) -> None:
    """
    Write content, creating the parent directory when needed.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except PermissionError:
        raise ProcessorError(
            FailureKind.UNWRITABLE_DESTINATION, f"Cannot write to file {path}"
        ) from None
    except OSError as e:
        if e.errno == errno.ENOSPC:
            raise ProcessorError(FailureKind.UNWRITABLE_DESTINATION, "No space left on device") from e
        raise ProcessorError(
            FailureKind.UNWRITABLE_DESTINATION, f"Failed to write file {path}: {e}"
        ) from e


class BillProcessor:
    def __init__(
        self,
        input_path: str | Path,
        output_path: str | Path,
        output_format: str = "json",
        *,
        max_workers: Optional[int] = None,
        today: Optional[date] = None,
    ):
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of {OUTPUT_FORMATS}")
        self.input_path = Path(input_path)
        self.output_path = Path(output_path)
        self.output_format = output_format
        self.max_workers = max_workers or Config.MAX_WORKERS
        self.today = today

    @property
    def output_suffix(self) -> str:
        return ".json" if self.output_format == "json" else ".txt"

    def _process_one(self, input_file: Path, output_file: Path) -> BillOutput:
        bill = read_bill_file(input_file, today=self.today)
        try:
            result = split_bill(bill)
        except SplitLogicError as e:
            raise ProcessorError(FailureKind.INVALID_FORMAT, f"Cannot split bill in {input_file}: {e}") from e
        write_output_file(output_file, render(result, self.output_format))
        return result

    def process_file(self) -> ProcessResult:
        source = str(self.input_path)
        try:
            result = self._process_one(self.input_path, self.output_path)
        except ProcessorError as e:
            logger.warning(f"Failed to process {source}: {e}")
            return ProcessResult.failed(e, source=source)

        logger.info(f"Processed {source} -> {self.output_path} ({len(result.items)} people)")
        return ProcessResult.ok(result, source=source)

    def _process_entry(self, input_file: Path) -> ProcessResult:
        output_file = self.output_path / f"{input_file.stem}{self.output_suffix}"
        try:
            result = self._process_one(input_file, output_file)
        except ProcessorError as e:
            logger.warning(f"Failed to process {input_file.name}: {e}")
            return ProcessResult.failed(e, source=input_file.name, prefix=f"Error processing {input_file.name}: ")
        return ProcessResult.ok(result, source=input_file.name)

    def process_directory(self) -> List[ProcessResult]:
        """
        Split every *.json bill in input_path into output_path.

        Files are independent and processed on a thread pool; results come
        back in file name order. Directory-level problems produce a single
        failed result.
        """
        try:
            json_files = self._list_json_files()
            self._prepare_output_dir()
        except ProcessorError as e:
            logger.error(f"Directory processing failed: {e}")
            return [ProcessResult.failed(e, source=str(self.input_path), prefix="Directory processing failed: ")]

        logger.info(f"Processing {len(json_files)} bill files from {self.input_path}")
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            results = list(pool.map(self._process_entry, json_files))

        failed = sum(1 for r in results if not r.success)
        logger.info(f"Finished {len(results)} files ({failed} failed)")
        return results

    def _list_json_files(self) -> List[Path]:
        if not self.input_path.is_dir():
            raise ProcessorError(
                FailureKind.UNREADABLE_SOURCE,
                f"Input directory {self.input_path} does not exist or is not accessible",
            )
        try:
            json_files = sorted(p for p in self.input_path.iterdir() if p.is_file() and p.suffix == ".json")
        except OSError as e:
            raise ProcessorError(
                FailureKind.UNREADABLE_SOURCE, f"Cannot list directory {self.input_path}: {e}"
            ) from e
        if not json_files:
            raise ProcessorError(
                FailureKind.UNREADABLE_SOURCE,
                f"No JSON files found in directory {self.input_path}",
            )
        return json_files

    def _prepare_output_dir(self) -> None:
        try:
            self.output_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProcessorError(
                FailureKind.UNWRITABLE_DESTINATION,
                f"Cannot create or write to output directory {self.output_path}",
            ) from e

