"""Output file names built from a per-row template."""

import re
from datetime import datetime
from typing import Mapping, Optional

from ..placeholders.syntax import DATE_FIELD, ROW_NUMBER_FIELD, TIME_FIELD, make_token

# Characters rejected in file names on Windows, plus control characters
INVALID_FILE_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

TIME_FORMAT = "%Y%m%d-%H%M%S"
DATE_FORMAT = "%Y-%m-%d"


def builtin_fields(row_number: int, now: Optional[datetime] = None) -> dict[str, str]:
    """Fields every generated row gets: 1-based row number, time and date."""
    now = now or datetime.now()
    return {
        ROW_NUMBER_FIELD: str(row_number),
        TIME_FIELD: now.strftime(TIME_FORMAT),
        DATE_FIELD: now.strftime(DATE_FORMAT),
    }


def render_file_name(
    template: str,
    data: Mapping[str, Optional[str]],
    row_number: int,
    now: Optional[datetime] = None,
) -> str:
    """
    Build a file name (without extension) for one data row.

    ``{column}`` tokens are replaced case-insensitively, invalid file-name
    characters become ``_``. A name that ends up blank or made only of
    underscores falls back to ``Document_<row>_<time>``.
    """
    name = template or ""
    for key, value in data.items():
        if not key:
            continue
        pattern = re.compile(re.escape(make_token(key)), re.IGNORECASE)
        name = pattern.sub(lambda _: "" if value is None else str(value), name)

    name = INVALID_FILE_NAME_CHARS.sub("_", name)

    if not name.strip() or set(name) == {"_"}:
        now = now or datetime.now()
        name = f"Document_{row_number}_{now.strftime(TIME_FORMAT)}"
    return name
