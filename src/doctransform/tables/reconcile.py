"""Table reconciliation: join several tables on a key column."""

import logging

from .models import MergedRowSet, SourceTable

logger = logging.getLogger(__name__)


def merge_tables(tables: list[SourceTable], key_column: str) -> MergedRowSet:
    """
    Merge rows of several tables into one row per distinct key value.

    Tables are visited in order, rows in order. Rows that lack the key
    column or have an empty key are skipped entirely. Within a key, a
    later non-empty value overwrites the accumulated one, but a later
    empty value never overwrites a non-empty one (last-non-empty-wins).

    The caller is expected to pass a key present in every table; an empty
    key or an empty table list yields an empty result instead of an error.

    Args:
        tables: Source tables in priority order
        key_column: Header used to group rows

    Returns:
        MergedRowSet with one row per key value, first-seen order
    """
    if not key_column or not tables:
        return MergedRowSet(key_column=key_column or "")

    merged: dict[str, dict[str, str]] = {}
    skipped = 0

    for table in tables:
        for row in table.rows:
            key_value = row.get(key_column)
            if not key_value:
                skipped += 1
                continue

            accumulated = merged.setdefault(key_value, {})
            for column, value in row.items():
                if not value and accumulated.get(column):
                    continue
                accumulated[column] = value

    if skipped:
        logger.debug(f"Skipped {skipped} row(s) without a value for {key_column!r}")

    return MergedRowSet(key_column=key_column, rows=list(merged.values()))
