"""Run-aware placeholder substitution for WordprocessingML documents."""

from .formatting import FormattingAttributes
from .runs import RunInfo, TextModel, build_text_model
from .substitution import (
    Occurrence,
    SubstitutionEngine,
    SubstitutionPlan,
    find_occurrences,
    plan_substitution,
    substitute_text,
)
from .traversal import DocumentProcessor
from .tree import DocumentTree

__all__ = [
    "FormattingAttributes",
    "RunInfo",
    "TextModel",
    "build_text_model",
    "Occurrence",
    "SubstitutionEngine",
    "SubstitutionPlan",
    "find_occurrences",
    "plan_substitution",
    "substitute_text",
    "DocumentProcessor",
    "DocumentTree",
]
