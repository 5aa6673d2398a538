"""Read spreadsheet files into SourceTables."""

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Union

from openpyxl import load_workbook

from .models import SourceTable

logger = logging.getLogger(__name__)


class TableReadError(Exception):
    """Raised when a spreadsheet cannot be turned into a table."""
    pass


def cell_to_str(value: Any) -> str:
    """Render a cell value the way it should appear in a document."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def read_worksheet(worksheet, label: str) -> SourceTable:
    """
    Convert one worksheet to a SourceTable.

    Row 1 holds the headers (trimmed; blank headers are dropped along with
    their column). Every later row that has at least one non-empty value
    becomes a row keyed by header.
    """
    rows = worksheet.iter_rows(values_only=True)
    header_row = next(rows, None)
    if header_row is None:
        return SourceTable(label=label)

    columns: list[tuple[int, str]] = []
    seen: set[str] = set()
    for index, value in enumerate(header_row):
        header = cell_to_str(value).strip()
        if not header or header in seen:
            continue
        seen.add(header)
        columns.append((index, header))

    table = SourceTable(label=label, headers=[header for _, header in columns])
    for values in rows:
        row = {
            header: cell_to_str(values[index]) if index < len(values) else ""
            for index, header in columns
        }
        if any(row.values()):
            table.rows.append(row)
    return table


def read_all_sheets(path: Union[str, Path]) -> list[SourceTable]:
    """
    Read every non-empty worksheet of a workbook.

    Raises:
        TableReadError: If the file is missing or cannot be opened
    """
    path = Path(path)
    workbook = _open(path)
    try:
        tables = []
        for worksheet in workbook.worksheets:
            table = read_worksheet(worksheet, f"{path.name} - {worksheet.title}")
            if table.headers:
                tables.append(table)
            else:
                logger.debug(f"Skipping empty worksheet {worksheet.title!r} in {path.name}")
        logger.info(f"Read {len(tables)} table(s) from {path.name}")
        return tables
    finally:
        workbook.close()


def read_first_sheet(path: Union[str, Path]) -> SourceTable:
    """
    Read the first worksheet of a workbook.

    Raises:
        TableReadError: If the file is missing, unreadable or has no headers
    """
    path = Path(path)
    workbook = _open(path)
    try:
        worksheet = workbook.worksheets[0]
        table = read_worksheet(worksheet, f"{path.name} - {worksheet.title}")
    finally:
        workbook.close()

    if not table.headers:
        raise TableReadError(f"Spreadsheet contains no data: {path}")
    return table


def _open(path: Path):
    if not path.exists():
        raise TableReadError(f"Spreadsheet not found: {path}")
    try:
        return load_workbook(filename=str(path), read_only=True, data_only=True)
    except Exception as e:
        raise TableReadError(f"Cannot open spreadsheet {path}: {e}") from e
