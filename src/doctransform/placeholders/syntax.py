"""Placeholder syntax definitions and patterns."""

import re
from typing import Mapping, Optional, Pattern

# {name} - any run of characters without braces
PLACEHOLDER_PATTERN: Pattern = re.compile(r"\{([^{}]+)\}")

# Built-in fields added to every generated row
ROW_NUMBER_FIELD = "row"
TIME_FIELD = "time"
DATE_FIELD = "date"

BUILTIN_FIELDS = (ROW_NUMBER_FIELD, TIME_FIELD, DATE_FIELD)


def make_token(name: str) -> str:
    """Wrap a column name in braces: ``name`` -> ``{name}``."""
    return f"{{{name}}}"


def build_token_table(data: Mapping[str, Optional[str]]) -> dict[str, str]:
    """
    Turn a row mapping into a token -> replacement table.

    Keys gain their surrounding braces and ``None`` values become empty
    strings, so a missing value always removes the placeholder.

    Args:
        data: Column name to cell value mapping (keys without braces)

    Returns:
        Ordered dict of ``{key}`` -> replacement text
    """
    table = {}
    for key, value in data.items():
        if not key:
            continue
        table[make_token(key)] = "" if value is None else str(value)
    return table


def find_tokens(text: str) -> list[str]:
    """Return every ``{name}`` token in ``text`` in order of appearance."""
    if not text:
        return []
    return [match.group(0) for match in PLACEHOLDER_PATTERN.finditer(text)]


def contains_any(text: str, tokens) -> bool:
    """Check whether any of ``tokens`` occurs in ``text``."""
    return any(token in text for token in tokens)
