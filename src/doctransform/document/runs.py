"""Run-aware text model of a paragraph.

Maps between a paragraph's full text and the ordered runs that produced
it. Each run carries its ``[start, end)`` range in the full text plus a
formatting snapshot, so a rewritten text can be re-split into runs that
keep the formatting of the characters they came from.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from docx.oxml.ns import qn

from .formatting import FormattingAttributes

W_R = qn("w:r")
W_RPR = qn("w:rPr")
W_T = qn("w:t")
W_TAB = qn("w:tab")
W_BR = qn("w:br")
W_CR = qn("w:cr")
W_NO_BREAK_HYPHEN = qn("w:noBreakHyphen")
W_LAST_RENDERED_PAGE_BREAK = qn("w:lastRenderedPageBreak")
W_TYPE = qn("w:type")

# Children a run may hold and still be rebuilt from its text alone
_TEXT_LEAVES = {W_RPR, W_T, W_TAB, W_BR, W_CR, W_NO_BREAK_HYPHEN, W_LAST_RENDERED_PAGE_BREAK}


@dataclass
class RunInfo:
    """One run of a paragraph and the range of full text it covers."""

    start: int
    end: int
    formatting: Optional[FormattingAttributes]
    element: Any = None  # source node (w:r element, rich-text block, ...)
    style: Any = None  # formatting object cloned into rebuilt runs
    anchor: bool = False  # carries non-text content; moved instead of rebuilt

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass
class TextModel:
    """Full text of a run sequence plus the runs that produced it."""

    text: str
    runs: list[RunInfo] = field(default_factory=list)

    @property
    def text_runs(self) -> list[RunInfo]:
        return [run for run in self.runs if not run.anchor]

    @property
    def anchors(self) -> list[RunInfo]:
        return [run for run in self.runs if run.anchor]

    def char_map(self) -> list[RunInfo]:
        """Return the owning run for every character index of ``text``."""
        owners: list[RunInfo] = []
        for run in self.runs:
            # zero-length runs own no characters
            owners.extend([run] * run.length)
        return owners


def is_text_run(r) -> bool:
    """Check whether a ``w:r`` element holds nothing but text leaves."""
    for child in r:
        if child.tag not in _TEXT_LEAVES:
            return False
        if child.tag == W_BR and child.get(W_TYPE) not in (None, "textWrapping"):
            # page and column breaks are layout, not text
            return False
    return True


def run_text(r) -> str:
    """Concatenate the text leaves of a ``w:r`` element in document order."""
    parts = []
    for child in r:
        tag = child.tag
        if tag == W_T:
            parts.append(child.text or "")
        elif tag == W_TAB:
            parts.append("\t")
        elif tag in (W_BR, W_CR):
            if child.get(W_TYPE) in (None, "textWrapping"):
                parts.append("\n")
        elif tag == W_NO_BREAK_HYPHEN:
            parts.append("-")
    return "".join(parts)


def build_text_model(container) -> TextModel:
    """
    Build the run-aware text model of a paragraph (or inline container).

    Every child from the first ``w:r`` to the last one is covered. Runs
    holding only text contribute characters; anything else in that range
    (drawings, bookmarks, hyperlinks, fields...) becomes a zero-length
    anchor at the text offset where it sits.

    Args:
        container: A ``w:p`` element or any element whose direct ``w:r``
            children form one run sequence (hyperlink, smart tag...)

    Returns:
        TextModel with the concatenated text and one RunInfo per covered child
    """
    children = list(container)
    positions = [index for index, child in enumerate(children) if child.tag == W_R]
    if not positions:
        return TextModel(text="")

    runs = []
    offset = 0
    for child in children[positions[0] : positions[-1] + 1]:
        if child.tag != W_R:
            runs.append(RunInfo(offset, offset, None, element=child, anchor=True))
            continue
        rpr = child.find(W_RPR)
        formatting = FormattingAttributes.from_rpr(rpr)
        if not is_text_run(child):
            runs.append(
                RunInfo(offset, offset, formatting, element=child, style=rpr, anchor=True)
            )
            continue
        text = run_text(child)
        runs.append(
            RunInfo(offset, offset + len(text), formatting, element=child, style=rpr)
        )
        offset += len(text)

    text = "".join(run_text(run.element) for run in runs if not run.anchor)
    return TextModel(text=text, runs=runs)
