"""Data models for tabular sources."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class SourceTable(BaseModel):
    """One table read from a spreadsheet (a single worksheet)."""

    label: str  # e.g. "people.xlsx - Sheet1"
    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, str]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


class MergedRowSet(BaseModel):
    """Rows of several tables joined on a key column."""

    key_column: str = ""
    rows: list[dict[str, str]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


class TableSet:
    """
    The source tables of one session plus their merged view.

    Adding, removing or clearing tables invalidates the merged rows. If a
    key column is selected the merge is recomputed right away.
    """

    def __init__(self, tables: Optional[list[SourceTable]] = None):
        self.tables: list[SourceTable] = list(tables or [])
        self.key_column: str = ""
        self._merged: Optional[MergedRowSet] = None

    @property
    def all_headers(self) -> list[str]:
        """Union of every table's headers, first-seen order."""
        headers: list[str] = []
        seen: set[str] = set()
        for table in self.tables:
            for header in table.headers:
                if header not in seen:
                    seen.add(header)
                    headers.append(header)
        return headers

    @property
    def common_headers(self) -> list[str]:
        """Headers present in every table, in the first table's order."""
        if not self.tables:
            return []
        common = set(self.tables[0].headers)
        for table in self.tables[1:]:
            common &= set(table.headers)
        return [header for header in self.tables[0].headers if header in common]

    @property
    def total_row_count(self) -> int:
        """Raw row count over all tables (not the merged count)."""
        return sum(table.row_count for table in self.tables)

    @property
    def merged(self) -> Optional[MergedRowSet]:
        """The last merge result, or ``None`` when it was invalidated."""
        return self._merged

    @property
    def merged_rows(self) -> list[dict[str, str]]:
        return self._merged.rows if self._merged is not None else []

    def merge(self, key_column: str) -> MergedRowSet:
        """Select ``key_column`` and recompute the merged rows from scratch."""
        from .reconcile import merge_tables

        self.key_column = key_column or ""
        self._merged = merge_tables(self.tables, self.key_column)
        logger.info(
            f"Merged {len(self.tables)} table(s) on {self.key_column!r}: "
            f"{self._merged.row_count} row(s) from {self.total_row_count}"
        )
        return self._merged

    def add_table(self, table: SourceTable) -> None:
        self.tables.append(table)
        self._invalidate()

    def remove_table(self, label: str) -> bool:
        """Remove the table with ``label``; returns False when not found."""
        for index, table in enumerate(self.tables):
            if table.label == label:
                del self.tables[index]
                self._invalidate()
                return True
        return False

    def clear(self) -> None:
        """Drop every table and the key column selection."""
        self.tables.clear()
        self.key_column = ""
        self._merged = None

    def _invalidate(self) -> None:
        self._merged = None
        if self.key_column and self.tables:
            self.merge(self.key_column)
