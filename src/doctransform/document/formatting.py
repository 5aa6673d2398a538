"""Formatting snapshots used to decide run boundaries."""

from dataclasses import dataclass
from typing import Optional

from docx.oxml.ns import qn

_FALSE_VALUES = {"0", "false", "off"}


@dataclass(frozen=True)
class FormattingAttributes:
    """
    Immutable snapshot of the visual properties compared between runs.

    Only used for equality when grouping characters into runs. The run's
    real formatting object is always cloned when output is written, so
    properties not listed here (language, character style, highlight...)
    survive the rewrite.
    """

    bold: bool = False
    italic: bool = False
    underline: str = ""
    strike: bool = False
    font_name: str = ""
    font_size: str = ""
    color: str = ""

    @classmethod
    def from_rpr(cls, rpr) -> Optional["FormattingAttributes"]:
        """
        Build a snapshot from a ``w:rPr`` element.

        Returns ``None`` when the run has no properties element, meaning
        "inherit paragraph/document defaults".
        """
        if rpr is None:
            return None
        return cls(
            bold=_toggle(rpr, "w:b"),
            italic=_toggle(rpr, "w:i"),
            underline=_underline(rpr),
            strike=_toggle(rpr, "w:strike"),
            font_name=_font_name(rpr),
            font_size=_val(rpr, "w:sz"),
            color=_val(rpr, "w:color"),
        )

    @classmethod
    def from_inline_font(cls, font) -> Optional["FormattingAttributes"]:
        """Build a snapshot from an openpyxl ``InlineFont`` (rich-text block)."""
        if font is None:
            return None
        return cls(
            bold=bool(font.b),
            italic=bool(font.i),
            underline=font.u or "",
            strike=bool(font.strike),
            font_name=font.rFont or "",
            font_size="" if font.sz is None else str(font.sz),
            color=_color_key(font.color),
        )


def formatting_equal(
    left: Optional[FormattingAttributes], right: Optional[FormattingAttributes]
) -> bool:
    """Compare two snapshots; ``None`` only equals ``None``."""
    return left == right


def _val(rpr, tag: str) -> str:
    element = rpr.find(qn(tag))
    if element is None:
        return ""
    return element.get(qn("w:val")) or ""


def _toggle(rpr, tag: str) -> bool:
    element = rpr.find(qn(tag))
    if element is None:
        return False
    value = element.get(qn("w:val"))
    return value is None or value.lower() not in _FALSE_VALUES


def _underline(rpr) -> str:
    element = rpr.find(qn("w:u"))
    if element is None:
        return ""
    value = element.get(qn("w:val"))
    if value is None:
        return "single"
    return "" if value == "none" else value


def _font_name(rpr) -> str:
    fonts = rpr.find(qn("w:rFonts"))
    if fonts is None:
        return ""
    for attr in ("w:ascii", "w:hAnsi", "w:eastAsia", "w:cs"):
        value = fonts.get(qn(attr))
        if value:
            return value
    return ""


def _color_key(color) -> str:
    if color is None:
        return ""
    rgb = getattr(color, "rgb", None)
    if isinstance(rgb, str):
        return rgb
    theme = getattr(color, "theme", None)
    if theme is not None:
        return f"theme:{theme}"
    return ""
