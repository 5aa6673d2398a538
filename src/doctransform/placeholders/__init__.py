"""Placeholder syntax and discovery.

Placeholders are ``{name}`` tokens where ``name`` is any text without
braces. They are matched literally, case-sensitively and brace-exact.
"""

from .index import PlaceholderIndex
from .syntax import (
    PLACEHOLDER_PATTERN,
    BUILTIN_FIELDS,
    build_token_table,
    find_tokens,
    make_token,
)

__all__ = [
    "PlaceholderIndex",
    "PLACEHOLDER_PATTERN",
    "BUILTIN_FIELDS",
    "build_token_table",
    "find_tokens",
    "make_token",
]
