"""Excel (.xlsx) template service."""

import asyncio
import logging
from copy import deepcopy
from typing import Callable, Mapping, Optional

from openpyxl import load_workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock

from ..document.formatting import FormattingAttributes
from ..document.runs import RunInfo, TextModel
from ..document.substitution import plan_substitution, substitute_text
from ..generation.models import ProcessingResult
from ..placeholders import PlaceholderIndex, build_token_table
from .common import PathLike, TemplateError, copy_template, validate_paths

logger = logging.getLogger(__name__)


def rich_text_model(value: CellRichText) -> TextModel:
    """Build the run-aware text model of a rich-text cell."""
    runs = []
    offset = 0
    for block in value:
        if isinstance(block, TextBlock):
            text, font = block.text or "", block.font
        else:
            text, font = str(block), None
        runs.append(
            RunInfo(
                offset,
                offset + len(text),
                FormattingAttributes.from_inline_font(font),
                element=block,
                style=font,
            )
        )
        offset += len(text)
    return TextModel(text=str(value), runs=runs)


def substitute_rich_text(value: CellRichText, table: Mapping[str, str]) -> Optional[CellRichText]:
    """
    Replace tokens in a rich-text cell, keeping each block's font.

    Returns ``None`` when the cell does not change.
    """
    plan = plan_substitution(rich_text_model(value), table)
    if plan is None:
        return None

    blocks = []
    for segment in plan.segments:
        if segment.source.style is None:
            blocks.append(segment.text)
        else:
            blocks.append(TextBlock(deepcopy(segment.source.style), segment.text))
    return CellRichText(blocks)


class ExcelTemplateService:
    """
    Fills ``.xlsx`` templates with one data row each.

    Only cell values change; fonts, fills, borders, alignment and number
    formats stay on the cell. Formula cells are left alone.
    """

    def __init__(self, index: Optional[PlaceholderIndex] = None):
        self.index = index or PlaceholderIndex()

    def is_valid_template(self, template_path: PathLike) -> bool:
        """Check that the file opens as a workbook with at least one sheet."""
        try:
            workbook = self._open(template_path)
        except TemplateError:
            return False
        return len(workbook.worksheets) > 0

    def extract_placeholders(self, template_path: PathLike) -> list[str]:
        """List the placeholders of a template; empty when it cannot be read."""
        try:
            workbook = self._open(template_path)
        except TemplateError as e:
            logger.warning(f"Placeholder extraction failed: {e}")
            return []
        return self.index.extract_from_workbook(workbook)

    def process_template(
        self,
        template_path: PathLike,
        output_path: PathLike,
        data: Mapping[str, Optional[str]],
        progress: Optional[Callable[[int], None]] = None,
    ) -> ProcessingResult:
        """
        Generate one workbook from a template.

        Args:
            template_path: The ``.xlsx`` template
            output_path: Where the generated workbook is written
            data: Column name -> value for this workbook
            progress: Optional callback receiving 0..100 (per worksheet)

        Returns:
            ProcessingResult describing success or the failure reason
        """
        error = validate_paths(template_path, output_path)
        if error:
            return ProcessingResult.fail(error)

        table = build_token_table(data)
        try:
            copy_template(template_path, output_path)
            workbook = self._open(output_path)
            total = max(1, len(workbook.worksheets))
            replaced = 0
            for processed, worksheet in enumerate(workbook.worksheets, start=1):
                replaced += self._process_worksheet(worksheet, table)
                if progress is not None and processed < total:
                    progress(processed * 100 // total)
            workbook.save(str(output_path))
        except Exception as e:
            logger.error(f"Excel template processing failed for {output_path}: {e}")
            return ProcessingResult.fail(
                f"Error processing Excel template: {e}", file_path=str(output_path)
            )

        if progress is not None:
            progress(100)
        logger.info(f"Generated {output_path} ({replaced} cell(s) changed)")
        return ProcessingResult.succeed(
            "Excel template processed", file_path=str(output_path), replacements=replaced
        )

    async def is_valid_template_async(self, template_path: PathLike) -> bool:
        return await asyncio.to_thread(self.is_valid_template, template_path)

    async def extract_placeholders_async(self, template_path: PathLike) -> list[str]:
        return await asyncio.to_thread(self.extract_placeholders, template_path)

    async def process_template_async(
        self,
        template_path: PathLike,
        output_path: PathLike,
        data: Mapping[str, Optional[str]],
        progress: Optional[Callable[[int], None]] = None,
    ) -> ProcessingResult:
        """Run :meth:`process_template` on a worker thread."""
        return await asyncio.to_thread(
            self.process_template, template_path, output_path, dict(data), progress
        )

    def _process_worksheet(self, worksheet, table: Mapping[str, str]) -> int:
        """Rewrite the cells of one worksheet; returns the number of cells changed."""
        if not table:
            return 0
        changed = 0
        for row in worksheet.iter_rows():
            for cell in row:
                value = cell.value
                if isinstance(value, CellRichText):
                    new_value = substitute_rich_text(value, table)
                elif isinstance(value, str) and cell.data_type != "f":
                    new_value = substitute_text(value, table)
                else:
                    continue
                if new_value is not None and new_value != value:
                    cell.value = new_value
                    if isinstance(new_value, str):
                        # data such as "=1+1" is written as text, never as a formula
                        cell.data_type = "s"
                    changed += 1
        return changed

    @staticmethod
    def _open(path: PathLike):
        try:
            return load_workbook(filename=str(path), rich_text=True)
        except Exception as e:
            raise TemplateError(f"Cannot open workbook {path}: {e}") from e
