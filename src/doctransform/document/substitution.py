"""Placeholder substitution engine.

Replaces ``{placeholder}`` tokens in the full text of a paragraph and
re-splits the result into runs that keep the formatting each character
had at its source position. Tokens split across several runs are found
because the search runs over the reconstructed paragraph text, never
over individual runs.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Mapping, Optional

from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from ..placeholders.syntax import contains_any
from .formatting import formatting_equal
from .runs import RunInfo, TextModel, W_R, build_text_model, run_text

logger = logging.getLogger(__name__)

W_FLD_SIMPLE = qn("w:fldSimple")

# Inline wrappers whose w:r children form their own run sequence
INLINE_CONTAINERS = {
    qn("w:hyperlink"),
    qn("w:smartTag"),
    qn("w:ins"),
    qn("w:moveTo"),
    qn("w:customXml"),
    qn("w:sdt"),
    qn("w:sdtContent"),
}


@dataclass(frozen=True)
class Occurrence:
    """One located token in the original text."""

    start: int
    end: int
    token: str
    replacement: str

    @property
    def delta(self) -> int:
        """Length change caused by replacing this occurrence."""
        return len(self.replacement) - (self.end - self.start)


@dataclass
class Segment:
    """A piece of the result text owned by one source run."""

    text: str
    source: RunInfo


@dataclass
class SubstitutionPlan:
    """Everything needed to rewrite one run sequence."""

    original_text: str
    result_text: str
    occurrences: list[Occurrence]
    segments: list[Segment] = field(default_factory=list)


def find_occurrences(text: str, table: Mapping[str, str]) -> list[Occurrence]:
    """
    Locate every occurrence of every token by literal substring search.

    Each token is scanned left to right without overlapping itself. When
    two different tokens overlap (only possible if a key contains braces)
    the one starting first wins and the other is dropped.

    Args:
        text: Full text to search
        table: Token (with braces) -> replacement text

    Returns:
        Non-overlapping occurrences sorted by start offset
    """
    found = []
    for token, replacement in table.items():
        if not token:
            continue
        start = text.find(token)
        while start != -1:
            found.append(Occurrence(start, start + len(token), token, replacement))
            start = text.find(token, start + len(token))

    found.sort(key=lambda occ: (occ.start, occ.start - occ.end))

    kept: list[Occurrence] = []
    for occurrence in found:
        if kept and occurrence.start < kept[-1].end:
            logger.warning(
                f"Dropping overlapping placeholder {occurrence.token!r} at "
                f"{occurrence.start} (overlaps {kept[-1].token!r})"
            )
            continue
        kept.append(occurrence)
    return kept


def apply_replacements(text: str, occurrences: list[Occurrence]) -> str:
    """Apply occurrences from the highest start offset down (remove, then insert)."""
    for occurrence in sorted(occurrences, key=lambda occ: occ.start, reverse=True):
        text = (
            text[: occurrence.start] + occurrence.replacement + text[occurrence.end :]
        )
    return text


def substitute_text(text: str, table: Mapping[str, str]) -> str:
    """Replace tokens in a plain string; replacement text is never re-scanned."""
    if not text or not contains_any(text, table):
        return text
    return apply_replacements(text, find_occurrences(text, table))


def map_formatting(char_map: list[RunInfo], occurrences: list[Occurrence]) -> list[RunInfo]:
    """
    Carry the per-character owner map over to the result text.

    Characters outside a replaced range keep their owner at the shifted
    index. Every inserted character is owned by the run that held the
    first character of the token it replaced.
    """
    result: list[RunInfo] = []
    cursor = 0
    for occurrence in occurrences:
        result.extend(char_map[cursor : occurrence.start])
        result.extend([char_map[occurrence.start]] * len(occurrence.replacement))
        cursor = occurrence.end
    result.extend(char_map[cursor:])
    return result


def shift_offset(offset: int, occurrences: list[Occurrence]) -> int:
    """Translate a between-characters offset of the original text to the result text."""
    delta = 0
    for occurrence in occurrences:
        if occurrence.end <= offset:
            delta += occurrence.delta
        elif occurrence.start < offset:
            # inside a replaced token: pin to the start of the replacement
            return occurrence.start + delta
        else:
            break
    return offset + delta


def group_segments(
    text: str,
    owners: list[RunInfo],
    anchors: Optional[list[tuple[int, RunInfo]]] = None,
) -> list[Segment]:
    """
    Split ``text`` into maximal formatting-homogeneous segments.

    Anchors (runs with non-text content) are emitted as empty segments at
    their offset and always end the segment in progress.
    """
    anchors = anchors or []
    segments: list[Segment] = []
    next_anchor = 0
    index = 0
    length = len(text)

    while True:
        while next_anchor < len(anchors) and anchors[next_anchor][0] <= index:
            segments.append(Segment("", anchors[next_anchor][1]))
            next_anchor += 1
        if index >= length:
            break

        limit = anchors[next_anchor][0] if next_anchor < len(anchors) else length
        owner = owners[index]
        end = index + 1
        while end < limit and formatting_equal(owners[end].formatting, owner.formatting):
            end += 1
        segments.append(Segment(text[index:end], owner))
        index = end

    return segments


def plan_substitution(model: TextModel, table: Mapping[str, str]) -> Optional[SubstitutionPlan]:
    """
    Compute the rewrite of one run sequence.

    Returns ``None`` when nothing changes: no known token in the text, or
    every replacement reproduced the original text.
    """
    if not model.text or not contains_any(model.text, table):
        return None

    occurrences = find_occurrences(model.text, table)
    result_text = apply_replacements(model.text, occurrences)
    if result_text == model.text:
        return None

    owners = map_formatting(model.char_map(), occurrences)
    anchors = [(shift_offset(run.start, occurrences), run) for run in model.anchors]
    return SubstitutionPlan(
        original_text=model.text,
        result_text=result_text,
        occurrences=occurrences,
        segments=group_segments(result_text, owners, anchors),
    )


def iter_run_containers(container):
    """
    Yield ``(kind, element)`` for every run sequence in a paragraph.

    ``kind`` is ``"runs"`` for the paragraph itself and nested inline
    wrappers, ``"field"`` for simple fields.
    """
    yield "runs", container
    for child in container:
        if child.tag == W_FLD_SIMPLE:
            yield "field", child
        elif child.tag in INLINE_CONTAINERS:
            yield from iter_run_containers(child)


class SubstitutionEngine:
    """Rewrites paragraphs of a WordprocessingML tree in place."""

    def substitute_paragraph(self, paragraph, table: Mapping[str, str]) -> int:
        """
        Replace tokens in a ``w:p`` element and its inline containers.

        Args:
            paragraph: The ``w:p`` element to rewrite
            table: Token (with braces) -> replacement text

        Returns:
            Number of token occurrences replaced
        """
        count = 0
        for kind, element in list(iter_run_containers(paragraph)):
            if kind == "field":
                count += self.substitute_field(element, table)
            else:
                count += self.substitute_runs(element, table)
        return count

    def substitute_runs(self, container, table: Mapping[str, str]) -> int:
        """Rewrite the direct ``w:r`` children of ``container``."""
        model = build_text_model(container)
        plan = plan_substitution(model, table)
        if plan is None:
            return 0

        self._splice(container, model, plan)
        logger.debug(
            f"Replaced {len(plan.occurrences)} placeholder(s); "
            f"{len(model.runs)} run(s) -> {len(plan.segments)}"
        )
        return len(plan.occurrences)

    def substitute_field(self, field_element, table: Mapping[str, str]) -> int:
        """
        Reduced substitution for a ``w:fldSimple`` node.

        The field's flattened result text is rewritten into one plain run;
        formatting inside the field is not preserved.
        """
        runs = list(field_element.iter(W_R))
        text = "".join(run_text(r) for r in runs)
        if not contains_any(text, table):
            return 0

        occurrences = find_occurrences(text, table)
        new_text = apply_replacements(text, occurrences)
        if new_text == text:
            return 0

        for r in runs:
            r.getparent().remove(r)
        new_run = OxmlElement("w:r")
        new_run.text = new_text
        field_element.append(new_run)
        return len(occurrences)

    def _splice(self, container, model: TextModel, plan: SubstitutionPlan) -> None:
        # the covered range is re-emitted in full; anchors keep their relative order
        old_elements = [run.element for run in model.runs]
        position = container.index(old_elements[0])
        for element in old_elements:
            container.remove(element)

        for offset, segment in enumerate(plan.segments):
            if segment.source.anchor:
                new_run = segment.source.element
            else:
                new_run = self._build_run(segment)
            container.insert(position + offset, new_run)

    @staticmethod
    def _build_run(segment: Segment):
        new_run = OxmlElement("w:r")
        if segment.source.style is not None:
            new_run.append(deepcopy(segment.source.style))
        new_run.text = segment.text
        return new_run
