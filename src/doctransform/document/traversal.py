"""Document traversal driver."""

import logging
from typing import Callable, Mapping, Optional

from ..placeholders.syntax import build_token_table
from .substitution import SubstitutionEngine
from .tree import DocumentTree

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class DocumentProcessor:
    """
    Walks body, header and footer parts and rewrites every paragraph.

    Progress is reported as ``processed * 100 // total`` whenever it changes,
    ending with exactly one 100 when the walk is finished.
    """

    def __init__(self, engine: Optional[SubstitutionEngine] = None):
        self.engine = engine or SubstitutionEngine()

    def process(
        self,
        tree: DocumentTree,
        data: Mapping[str, Optional[str]],
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Substitute placeholders throughout a document tree.

        Args:
            tree: Part roots of an open document
            data: Column name -> value (keys without braces)
            progress: Optional callback receiving 0..100

        Returns:
            Total number of placeholder occurrences replaced
        """
        table = build_token_table(data)
        # materialised up front: rewriting a paragraph may move runs that
        # contain nested (text box) paragraphs
        paragraphs = list(tree.paragraphs())
        total = max(1, len(paragraphs))

        replaced = 0
        last_reported = -1
        for processed, paragraph in enumerate(paragraphs, start=1):
            if table:
                replaced += self.engine.substitute_paragraph(paragraph, table)
            percent = processed * 100 // total
            if progress is not None and percent != last_reported:
                progress(percent)
                last_reported = percent

        if progress is not None and last_reported != 100:
            progress(100)

        logger.info(
            f"Processed {len(paragraphs)} paragraph(s), replaced {replaced} placeholder(s)"
        )
        return replaced
