"""Placeholder discovery for template preview."""

import logging

from docx.oxml.ns import qn

from .syntax import find_tokens

logger = logging.getLogger(__name__)

W_T = qn("w:t")
W_FLD_SIMPLE = qn("w:fldSimple")


class PlaceholderIndex:
    """
    Collect the distinct ``{name}`` tokens of a template.

    Every text node is scanned on its own. A token whose characters are
    split over several nodes is not reported here, although the
    substitution engine still replaces it.
    """

    def extract(self, tree) -> list[str]:
        """
        Extract placeholders from a document tree.

        Args:
            tree: DocumentTree of an open document

        Returns:
            Sorted, de-duplicated tokens including braces
        """
        found: set[str] = set()
        for kind, root in tree.roots():
            before = len(found)
            for text_node in root.iter(W_T):
                found.update(find_tokens(text_node.text or ""))
            for field_node in root.iter(W_FLD_SIMPLE):
                inner = "".join(t.text or "" for t in field_node.iter(W_T))
                found.update(find_tokens(inner))
            logger.debug(f"{kind}: {len(found) - before} new placeholder(s)")
        return sorted(found)

    def extract_from_workbook(self, workbook) -> list[str]:
        """Extract placeholders from every string cell of an openpyxl workbook."""
        found: set[str] = set()
        for worksheet in workbook.worksheets:
            for row in worksheet.iter_rows():
                for cell in row:
                    value = cell.value
                    if value is None or cell.data_type == "f":
                        continue
                    found.update(find_tokens(str(value)))
        return sorted(found)
