"""Tabular data sources and multi-table reconciliation."""

from .models import MergedRowSet, SourceTable, TableSet
from .reader import TableReadError, read_all_sheets, read_first_sheet
from .reconcile import merge_tables

__all__ = [
    "MergedRowSet",
    "SourceTable",
    "TableSet",
    "TableReadError",
    "read_all_sheets",
    "read_first_sheet",
    "merge_tables",
]
