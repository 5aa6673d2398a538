"""Generate one document per data row."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Mapping, Optional

from ..services import ExcelTemplateService, WordTemplateService
from ..tables.models import TableSet
from .models import BatchSummary, GenerationRequest, ProcessingResult
from .naming import builtin_fields, render_file_name

logger = logging.getLogger(__name__)

# Adds derived fields to a row (e.g. values parsed from an ID number column)
RowEnricher = Callable[[dict[str, str]], Mapping[str, str]]


def select_rows(
    table_set: TableSet, key_column: Optional[str] = None
) -> tuple[list[dict[str, str]], Optional[str]]:
    """
    Pick the rows a batch should run over.

    A single table without a key column is used as is. Otherwise the key
    column must be present in every table and the merged rows are used.

    Returns:
        ``(rows, error)``; ``error`` is a message when nothing can be used
    """
    if not table_set.tables:
        return [], "No data tables loaded"

    if not key_column:
        if len(table_set.tables) == 1:
            return list(table_set.tables[0].rows), None
        return [], "Select a key column to match records across tables"

    if key_column not in table_set.common_headers:
        return [], f"Key column {key_column!r} is not present in every table"

    merged = table_set.merge(key_column)
    if not merged.rows:
        return [], "No rows left after merging"
    return merged.rows, None


class BatchGenerator:
    """
    Runs the template services over a list of data rows.

    Each document is processed on its own worker thread. With
    ``max_concurrent`` above 1, several documents are in flight at once;
    they share nothing but the progress aggregation, which runs on the
    event loop.
    """

    def __init__(
        self,
        word_service: Optional[WordTemplateService] = None,
        excel_service: Optional[ExcelTemplateService] = None,
        enrichers: Optional[list[RowEnricher]] = None,
        max_concurrent: int = 1,
    ):
        self.word_service = word_service or WordTemplateService()
        self.excel_service = excel_service or ExcelTemplateService()
        self.enrichers = list(enrichers or [])
        self.max_concurrent = max(1, max_concurrent)

    def validate(self, request: GenerationRequest, rows: list) -> Optional[str]:
        """Return a validation error message, or ``None`` if the batch can run."""
        if not request.output_directory or not Path(request.output_directory).is_dir():
            return "Select a valid output directory"
        if not self._has_word(request) and not self._has_excel(request):
            return "Select at least one Word or Excel template"
        if not rows:
            return "No data rows to process"
        return None

    def prepare_row(
        self, row: Mapping[str, str], row_number: int, now: Optional[datetime] = None
    ) -> dict[str, str]:
        """Copy a data row and add built-in and enriched fields."""
        data = dict(row)
        data.update(builtin_fields(row_number, now))
        for enricher in self.enrichers:
            try:
                data.update(enricher(data))
            except Exception as e:
                logger.warning(f"Row enricher failed on row {row_number}: {e}")
        return data

    async def generate(
        self,
        rows: list[Mapping[str, str]],
        request: GenerationRequest,
        progress: Optional[Callable[[int], None]] = None,
    ) -> BatchSummary:
        """
        Generate every document of the batch.

        Args:
            rows: Data rows (one output document per template per row)
            request: Templates, output directory and file name template
            progress: Optional overall progress callback (0..100)

        Returns:
            BatchSummary with per-document results
        """
        error = self.validate(request, rows)
        if error:
            logger.warning(f"Batch rejected: {error}")
            return BatchSummary.rejected(error)

        jobs = self._plan_jobs(rows, request)
        summary = BatchSummary()
        reporter = _ProgressAggregator(len(jobs), progress)
        semaphore = asyncio.Semaphore(self.max_concurrent)
        aborted = asyncio.Event()
        loop = asyncio.get_running_loop()

        async def run(job_id: int, job: "_Job") -> Optional[ProcessingResult]:
            async with semaphore:
                # queued jobs never start once another job has crashed
                if aborted.is_set():
                    return None

                def on_progress(value: int) -> None:
                    loop.call_soon_threadsafe(reporter.update, job_id, value)

                try:
                    result = await job.service.process_template_async(
                        job.template, job.output_path, job.data, on_progress
                    )
                except Exception:
                    aborted.set()
                    raise
                result.row_index = job.row_index
                if not result.success:
                    result.message = (
                        f"Row {job.row_index + 1} {job.kind} document failed: {result.message}"
                    )
                reporter.update(job_id, 100)
                return result

        # every job has finished or been skipped once gather returns
        outcomes = await asyncio.gather(
            *(run(job_id, job) for job_id, job in enumerate(jobs)),
            return_exceptions=True,
        )

        errors = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        for outcome in outcomes:
            if isinstance(outcome, ProcessingResult):
                summary.record(outcome)

        if errors:
            logger.error(f"Batch aborted: {errors[0]}")
            summary.message = f"Processing failed: {errors[0]}"
            summary.last_error = str(errors[0])
            return summary

        summary.message = (
            f"Finished: {summary.succeeded} succeeded, {summary.failed} failed"
        )
        reporter.finish()
        logger.info(summary.message)
        return summary

    def _plan_jobs(self, rows: list, request: GenerationRequest) -> list["_Job"]:
        output_directory = Path(request.output_directory)
        jobs = []
        for index, row in enumerate(rows):
            now = datetime.now()
            data = self.prepare_row(row, index + 1, now)
            name = render_file_name(request.file_name_template, data, index + 1, now)
            if self._has_word(request):
                jobs.append(
                    _Job(index, "Word", self.word_service, request.word_template,
                         output_directory / f"{name}.docx", data)
                )
            if self._has_excel(request):
                jobs.append(
                    _Job(index, "Excel", self.excel_service, request.excel_template,
                         output_directory / f"{name}.xlsx", data)
                )
        return jobs

    @staticmethod
    def _has_word(request: GenerationRequest) -> bool:
        return bool(request.word_template) and Path(request.word_template).is_file()

    @staticmethod
    def _has_excel(request: GenerationRequest) -> bool:
        return bool(request.excel_template) and Path(request.excel_template).is_file()


class _Job:
    """One document to generate."""

    def __init__(self, row_index, kind, service, template, output_path, data):
        self.row_index = row_index
        self.kind = kind
        self.service = service
        self.template = template
        self.output_path = output_path
        self.data = data


class _ProgressAggregator:
    """Combines per-document progress into one non-decreasing percentage."""

    def __init__(self, total_jobs: int, callback: Optional[Callable[[int], None]]):
        self.total_jobs = max(1, total_jobs)
        self.callback = callback
        self.job_progress: dict[int, int] = {}
        self.last_reported = 0

    def update(self, job_id: int, value: int) -> None:
        value = max(self.job_progress.get(job_id, 0), min(100, value))
        self.job_progress[job_id] = value
        overall = sum(self.job_progress.values()) // self.total_jobs
        self._report(overall)

    def finish(self) -> None:
        self._report(100)

    def _report(self, value: int) -> None:
        if self.callback is None or value <= self.last_reported:
            return
        self.last_reported = value
        self.callback(value)
