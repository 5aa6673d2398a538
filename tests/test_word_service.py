"""Tests for the Word template service."""

import pytest
from docx import Document

from doctransform.services import WordTemplateService


@pytest.fixture
def service():
    return WordTemplateService()


class TestWordTemplateService:
    """Tests for WordTemplateService."""

    def test_process_template(self, service, word_template, tmp_path):
        """The output is a filled copy; the template is untouched."""
        output = tmp_path / "out" / "Alice.docx"
        reported = []

        result = service.process_template(
            word_template, output, {"name": "Alice", "city": "Paris"}, reported.append
        )

        assert result.success is True
        assert result.message == "Word template processed"
        assert result.file_path == str(output)
        assert result.replacements == 4
        assert reported[-1] == 100
        assert reported.count(100) == 1

        document = Document(str(output))
        assert "Dear Alice, welcome." in [p.text for p in document.paragraphs]
        assert document.tables[0].cell(0, 1).text == "Paris"

        template = Document(str(word_template))
        assert template.tables[0].cell(0, 1).text == "{city}"

    def test_missing_template(self, service, tmp_path):
        result = service.process_template(tmp_path / "nope.docx", tmp_path / "o.docx", {})

        assert result.success is False
        assert "Template not found" in result.message

    def test_invalid_output_path(self, service, word_template):
        result = service.process_template(word_template, "  ", {"name": "x"})

        assert result.success is False
        assert result.message == "Invalid output path"

    def test_corrupt_template(self, service, tmp_path):
        template = tmp_path / "broken.docx"
        template.write_bytes(b"not a zip")

        result = service.process_template(template, tmp_path / "o.docx", {"a": "b"})

        assert result.success is False
        assert result.message.startswith("Error processing Word template:")

    def test_is_valid_template(self, service, word_template, tmp_path):
        broken = tmp_path / "broken.docx"
        broken.write_bytes(b"nope")

        assert service.is_valid_template(word_template) is True
        assert service.is_valid_template(broken) is False

    def test_extract_placeholders(self, service, word_template, tmp_path):
        assert service.extract_placeholders(word_template) == ["{city}", "{name}"]
        assert service.extract_placeholders(tmp_path / "missing.docx") == []

    @pytest.mark.asyncio
    async def test_process_template_async(self, service, word_template, tmp_path):
        output = tmp_path / "async.docx"

        result = await service.process_template_async(word_template, output, {"name": "Bo"})

        assert result.success is True
        assert output.exists()
