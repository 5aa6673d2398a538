"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Callable

import pytest
from docx import Document
from docx.shared import RGBColor
from openpyxl import Workbook
from openpyxl.styles import Font

from doctransform.tables import SourceTable


def _style_run(run, style: dict):
    """Apply a small formatting dict to a python-docx run."""
    if style.get("bold"):
        run.bold = True
    if style.get("italic"):
        run.italic = True
    if style.get("underline"):
        run.underline = True
    if style.get("color"):
        run.font.color.rgb = RGBColor.from_string(style["color"])
    if style.get("font"):
        run.font.name = style["font"]
    return run


@pytest.fixture
def make_paragraph() -> Callable:
    """
    Build a paragraph from ``(text, style)`` parts.

    ``style`` is ``None`` for a run without properties, or a dict with any
    of bold / italic / underline / color / font.
    """

    def _make(parts, document=None):
        document = document or Document()
        paragraph = document.add_paragraph()
        for text, style in parts:
            run = paragraph.add_run(text)
            if style:
                _style_run(run, style)
        return paragraph

    return _make


@pytest.fixture
def word_template(tmp_path: Path) -> Path:
    """A .docx template with placeholders in body, table, header and footer."""
    document = Document()
    section = document.sections[0]
    section.header.paragraphs[0].text = "Header for {name}"
    section.footer.paragraphs[0].text = "Page footer {city}"

    paragraph = document.add_paragraph()
    paragraph.add_run("Dear ")
    paragraph.add_run("{na").bold = True
    paragraph.add_run("me}").italic = True
    paragraph.add_run(", welcome.")

    table = document.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "City"
    table.cell(0, 1).text = "{city}"

    path = tmp_path / "template.docx"
    document.save(str(path))
    return path


@pytest.fixture
def excel_template(tmp_path: Path) -> Path:
    """A .xlsx template with placeholder cells on two sheets."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Letter"
    sheet["A1"] = "Name: {name}"
    sheet["A1"].font = Font(bold=True)
    sheet["A2"] = "=1+1"
    sheet["B2"] = 42
    other = workbook.create_sheet("Details")
    other["A1"] = "{city}"

    path = tmp_path / "template.xlsx"
    workbook.save(str(path))
    return path


@pytest.fixture
def make_workbook(tmp_path: Path) -> Callable:
    """Write ``{sheet_name: [header_row, *rows]}`` to an .xlsx file."""

    def _make(name: str, sheets: dict) -> Path:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for title, rows in sheets.items():
            sheet = workbook.create_sheet(title)
            for row in rows:
                sheet.append(row)
        path = tmp_path / name
        workbook.save(str(path))
        return path

    return _make


@pytest.fixture
def people_tables() -> list[SourceTable]:
    """Two source tables sharing the ``id`` column."""
    return [
        SourceTable(
            label="a.xlsx - Sheet1",
            headers=["id", "name", "city"],
            rows=[
                {"id": "1", "name": "Alice", "city": ""},
                {"id": "2", "name": "Bob", "city": "Shanghai"},
            ],
        ),
        SourceTable(
            label="b.xlsx - Sheet1",
            headers=["id", "name", "city"],
            rows=[
                {"id": "1", "name": "", "city": "Beijing"},
                {"id": "", "name": "Ghost", "city": "Nowhere"},
            ],
        ),
    ]
