"""Word (.docx) template service."""

import asyncio
import logging
from typing import Callable, Mapping, Optional

from docx import Document

from ..document import DocumentProcessor, DocumentTree
from ..generation.models import ProcessingResult
from ..placeholders import PlaceholderIndex
from .common import PathLike, TemplateError, copy_template, validate_paths

logger = logging.getLogger(__name__)


class WordTemplateService:
    """
    Fills ``.docx`` templates with one data row each.

    The template is copied to the output path first and the copy is
    rewritten in place, so a failure leaves the copy untouched (still
    template content) rather than a half-written document.
    """

    def __init__(
        self,
        processor: Optional[DocumentProcessor] = None,
        index: Optional[PlaceholderIndex] = None,
    ):
        self.processor = processor or DocumentProcessor()
        self.index = index or PlaceholderIndex()

    def is_valid_template(self, template_path: PathLike) -> bool:
        """Check that the file opens as a document with a body."""
        try:
            document = self._open(template_path)
        except TemplateError:
            return False
        return document.element.body is not None

    def extract_placeholders(self, template_path: PathLike) -> list[str]:
        """
        List the placeholders of a template for preview.

        Returns an empty list when the template cannot be read.
        """
        try:
            document = self._open(template_path)
        except TemplateError as e:
            logger.warning(f"Placeholder extraction failed: {e}")
            return []
        return self.index.extract(DocumentTree.from_document(document))

    def process_template(
        self,
        template_path: PathLike,
        output_path: PathLike,
        data: Mapping[str, Optional[str]],
        progress: Optional[Callable[[int], None]] = None,
    ) -> ProcessingResult:
        """
        Generate one document from a template.

        Args:
            template_path: The ``.docx`` template
            output_path: Where the generated document is written
            data: Column name -> value for this document
            progress: Optional callback receiving 0..100

        Returns:
            ProcessingResult describing success or the failure reason
        """
        error = validate_paths(template_path, output_path)
        if error:
            return ProcessingResult.fail(error)

        try:
            copy_template(template_path, output_path)
            document = self._open(output_path)
            replaced = self.processor.process(
                DocumentTree.from_document(document), data, progress
            )
            document.save(str(output_path))
        except Exception as e:
            logger.error(f"Word template processing failed for {output_path}: {e}")
            return ProcessingResult.fail(
                f"Error processing Word template: {e}", file_path=str(output_path)
            )

        logger.info(f"Generated {output_path} ({replaced} replacement(s))")
        return ProcessingResult.succeed(
            "Word template processed", file_path=str(output_path), replacements=replaced
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

    @staticmethod
    def _open(path: PathLike):
        try:
            return Document(str(path))
        except Exception as e:
            raise TemplateError(f"Cannot open Word document {path}: {e}") from e
