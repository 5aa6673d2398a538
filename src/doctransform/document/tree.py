"""Access to the text-bearing parts of a WordprocessingML document."""

from dataclasses import dataclass, field
from typing import Any, Iterator

from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml.ns import qn

W_P = qn("w:p")


@dataclass
class DocumentTree:
    """
    Root elements of the body, header and footer parts of one document.

    The tree is the live XML of an open document: every mutation made
    through it shows up when the owning ``Document`` is saved.
    """

    body: Any = None
    headers: list = field(default_factory=list)
    footers: list = field(default_factory=list)

    @classmethod
    def from_document(cls, document) -> "DocumentTree":
        """Collect the part roots of a python-docx ``Document``."""
        headers = []
        footers = []
        seen = set()
        for rel in document.part.rels.values():
            if rel.is_external or rel.reltype not in (RT.HEADER, RT.FOOTER):
                continue
            part = rel.target_part
            if id(part) in seen:
                continue
            seen.add(id(part))
            if rel.reltype == RT.HEADER:
                headers.append(part.element)
            else:
                footers.append(part.element)
        return cls(body=document.element.body, headers=headers, footers=footers)

    def roots(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(kind, root)`` in processing order: body, headers, footers."""
        if self.body is not None:
            yield "body", self.body
        for header in self.headers:
            yield "header", header
        for footer in self.footers:
            yield "footer", footer

    def paragraphs(self) -> Iterator[Any]:
        """Yield every ``w:p`` element in document order, part by part."""
        for _, root in self.roots():
            yield from root.iter(W_P)

    def count_paragraphs(self) -> int:
        return sum(1 for _ in self.paragraphs())
