"""Tests for batch document generation."""

import asyncio

import pytest
from docx import Document

from doctransform.generation import GenerationRequest, ProcessingResult
from doctransform.generation.batch import BatchGenerator, select_rows
from doctransform.tables import SourceTable, TableSet

ROWS = [
    {"name": "Alice", "city": "Paris"},
    {"name": "Bob", "city": "Rome"},
]


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "generated"
    path.mkdir()
    return path


class TestSelectRows:
    """Tests for select_rows."""

    def test_no_tables(self):
        rows, error = select_rows(TableSet())

        assert rows == []
        assert error == "No data tables loaded"

    def test_single_table_without_key(self, people_tables):
        rows, error = select_rows(TableSet(people_tables[:1]))

        assert error is None
        assert rows == people_tables[0].rows

    def test_many_tables_need_key(self, people_tables):
        rows, error = select_rows(TableSet(people_tables))

        assert rows == []
        assert "key column" in error

    def test_key_must_be_common(self):
        table_set = TableSet(
            [
                SourceTable(label="a", headers=["id"], rows=[{"id": "1"}]),
                SourceTable(label="b", headers=["code"], rows=[{"code": "1"}]),
            ]
        )

        rows, error = select_rows(table_set, "id")

        assert rows == []
        assert "not present in every table" in error

    def test_merged_rows(self, people_tables):
        rows, error = select_rows(TableSet(people_tables), "id")

        assert error is None
        assert [row["id"] for row in rows] == ["1", "2"]

    def test_nothing_left_after_merge(self):
        table_set = TableSet([SourceTable(label="a", headers=["id"], rows=[{"id": ""}])])

        rows, error = select_rows(table_set, "id")

        assert error == "No rows left after merging"


class TestBatchGenerator:
    """Tests for BatchGenerator."""

    @pytest.mark.asyncio
    async def test_generates_every_document(self, word_template, excel_template, output_dir):
        """Two rows times two templates give four files."""
        reported = []
        request = GenerationRequest(
            output_directory=str(output_dir),
            word_template=str(word_template),
            excel_template=str(excel_template),
            file_name_template="{row}_{name}",
        )

        summary = await BatchGenerator().generate(ROWS, request, progress=reported.append)

        assert summary.success is True
        assert summary.succeeded == 4
        assert summary.failed == 0
        assert summary.message == "Finished: 4 succeeded, 0 failed"
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "1_Alice.docx",
            "1_Alice.xlsx",
            "2_Bob.docx",
            "2_Bob.xlsx",
        ]
        assert reported == sorted(reported)
        assert reported[-1] == 100

        document = Document(str(output_dir / "2_Bob.docx"))
        assert document.tables[0].cell(0, 1).text == "Rome"

    @pytest.mark.asyncio
    async def test_concurrent_generation(self, word_template, output_dir):
        request = GenerationRequest(
            output_directory=str(output_dir),
            word_template=str(word_template),
            file_name_template="{name}",
        )
        rows = [{"name": f"person{i}"} for i in range(6)]

        summary = await BatchGenerator(max_concurrent=3).generate(rows, request)

        assert summary.succeeded == 6
        assert len(list(output_dir.iterdir())) == 6

    @pytest.mark.asyncio
    async def test_builtin_row_field_in_document(self, tmp_path, output_dir):
        template = tmp_path / "row.docx"
        document = Document()
        document.add_paragraph("No. {row} on {date}")
        document.save(str(template))
        request = GenerationRequest(
            output_directory=str(output_dir),
            word_template=str(template),
            file_name_template="doc{row}",
        )

        await BatchGenerator().generate(ROWS, request)

        text = Document(str(output_dir / "doc2.docx")).paragraphs[0].text
        assert text.startswith("No. 2 on ")
        assert "{date}" not in text

    @pytest.mark.asyncio
    async def test_failures_are_counted(self, word_template, output_dir):
        class FailingService:
            async def process_template_async(self, template, output, data, progress=None):
                if data["name"] == "Bob":
                    return ProcessingResult.fail("disk full")
                return ProcessingResult.succeed("ok", file_path=str(output))

        request = GenerationRequest(
            output_directory=str(output_dir), word_template=str(word_template)
        )

        summary = await BatchGenerator(word_service=FailingService()).generate(ROWS, request)

        assert summary.succeeded == 1
        assert summary.failed == 1
        assert summary.success is False
        assert summary.last_error == "Row 2 Word document failed: disk full"
        assert summary.results[1].row_index == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_concurrent", [1, 2])
    async def test_unexpected_error_aborts(self, word_template, output_dir, max_concurrent):
        """Queued jobs are skipped after a crash; finished jobs are still counted."""
        started = []

        class CrashingService:
            async def process_template_async(self, template, output, data, progress=None):
                started.append(data["name"])
                if data["name"] == "r2":
                    raise RuntimeError("boom")
                await asyncio.sleep(0.05)
                return ProcessingResult.succeed("ok", file_path=str(output))

        request = GenerationRequest(
            output_directory=str(output_dir), word_template=str(word_template)
        )
        rows = [{"name": f"r{i}"} for i in range(1, 6)]
        generator = BatchGenerator(word_service=CrashingService(), max_concurrent=max_concurrent)

        summary = await generator.generate(rows, request)
        await asyncio.sleep(0.1)

        assert started == ["r1", "r2"]
        assert summary.message == "Processing failed: boom"
        assert summary.last_error == "boom"
        assert summary.succeeded == 1
        assert summary.failed == 0
        assert summary.success is False

    @pytest.mark.asyncio
    async def test_validation(self, word_template, output_dir, tmp_path):
        generator = BatchGenerator()

        bad_dir = await generator.generate(
            ROWS,
            GenerationRequest(
                output_directory=str(tmp_path / "missing"), word_template=str(word_template)
            ),
        )
        no_template = await generator.generate(
            ROWS, GenerationRequest(output_directory=str(output_dir))
        )
        no_rows = await generator.generate(
            [],
            GenerationRequest(output_directory=str(output_dir), word_template=str(word_template)),
        )

        assert bad_dir.message == "Select a valid output directory"
        assert no_template.message == "Select at least one Word or Excel template"
        assert no_rows.message == "No data rows to process"
        assert list(output_dir.iterdir()) == []

    def test_prepare_row_with_enrichers(self):
        def shout(row):
            return {"loud": row["name"].upper()}

        def broken(row):
            raise KeyError("missing")

        generator = BatchGenerator(enrichers=[shout, broken])

        data = generator.prepare_row({"name": "ann"}, 5)

        assert data["loud"] == "ANN"
        assert data["row"] == "5"
        assert "time" in data and "date" in data
