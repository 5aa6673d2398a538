"""Batch document generation.

``BatchGenerator`` is imported from :mod:`doctransform.generation.batch`.
"""

from .models import BatchSummary, GenerationRequest, ProcessingResult
from .naming import builtin_fields, render_file_name

__all__ = [
    "BatchSummary",
    "GenerationRequest",
    "ProcessingResult",
    "builtin_fields",
    "render_file_name",
]
