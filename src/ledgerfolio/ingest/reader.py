"""Reading uploaded spreadsheets and CSV files into header-keyed rows."""

import csv
import io
from pathlib import PurePath
from typing import Any

from openpyxl import load_workbook

from ledgerfolio.core.exceptions import ImportRejectedError

SPREADSHEET_EXTENSIONS = {".xlsx", ".xlsm"}


def read_table(content: bytes, filename: str) -> list[dict[str, Any]]:
    """
    Return data rows keyed by header, skipping fully blank rows.

    Raises:
        ImportRejectedError: if the file cannot be read at all
    """
    if not content:
        raise ImportRejectedError("Uploaded file is empty")

    suffix = PurePath(filename or "").suffix.lower()
    if suffix in SPREADSHEET_EXTENSIONS:
        return _read_workbook(content)
    return _read_csv(content)


def _read_workbook(content: bytes) -> list[dict[str, Any]]:
    try:
        workbook = load_workbook(io.BytesIO(content), data_only=True, read_only=True)
    except Exception as exc:
        raise ImportRejectedError(f"Unable to read spreadsheet: {exc}") from exc

    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        columns = [str(h).strip() if h is not None else "" for h in header]
        result = []
        for values in rows:
            if values is None or all(_is_blank(v) for v in values):
                continue
            result.append({col: val for col, val in zip(columns, values) if col})
        return result
    finally:
        workbook.close()


def _read_csv(content: bytes) -> list[dict[str, Any]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportRejectedError("File is neither a spreadsheet nor UTF-8 CSV") from exc

    reader = csv.DictReader(io.StringIO(text, newline=""))
    if not reader.fieldnames:
        return []
    result = []
    for row in reader:
        cleaned = {
            (k or "").strip(): v for k, v in row.items() if k is not None
        }
        if all(_is_blank(v) for v in cleaned.values()):
            continue
        result.append(cleaned)
    return result


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
