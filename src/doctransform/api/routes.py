"""API routes for DocTransform."""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config import settings
from ..generation import BatchSummary, GenerationRequest
from ..generation.batch import BatchGenerator, select_rows
from ..services import ExcelTemplateService, WordTemplateService
from ..tables import TableReadError, TableSet, read_all_sheets, read_first_sheet

logger = logging.getLogger(__name__)

router = APIRouter()

_word_service = WordTemplateService()
_excel_service = ExcelTemplateService()


class PlaceholdersRequest(BaseModel):
    """Request to list the placeholders of a template."""

    template_path: str


class PlaceholdersResponse(BaseModel):
    """Placeholders found in a template."""

    template_path: str
    kind: str  # "word" or "excel"
    placeholders: list[str]


class MergeRequest(BaseModel):
    """Request to merge several spreadsheets on a key column."""

    data_paths: list[str]
    key_column: Optional[str] = None


class MergeResponse(BaseModel):
    """Merged view of the loaded tables."""

    tables: list[str]
    all_headers: list[str]
    common_headers: list[str]
    total_row_count: int
    key_column: Optional[str] = None
    rows: list[dict[str, str]] = Field(default_factory=list)


class GenerateRequest(BaseModel):
    """Request to generate documents for every data row."""

    data_paths: list[str]
    output_directory: str
    key_column: Optional[str] = None
    word_template: Optional[str] = None
    excel_template: Optional[str] = None
    file_name_template: str = settings.file_name_template


def _load_tables(data_paths: list[str]) -> TableSet:
    """Read data files: one table for a single file, every sheet for several."""
    if not data_paths:
        raise HTTPException(status_code=400, detail="No data files given")
    table_set = TableSet()
    try:
        if len(data_paths) == 1:
            table_set.add_table(read_first_sheet(data_paths[0]))
        else:
            for path in data_paths:
                for table in read_all_sheets(path):
                    table_set.add_table(table)
    except TableReadError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return table_set


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "doctransform",
        "config": {
            "output_directory": str(settings.output_directory),
            "file_name_template": settings.file_name_template,
            "max_concurrent_documents": settings.max_concurrent_documents,
        },
    }


@router.post("/placeholders", response_model=PlaceholdersResponse)
async def list_placeholders(request: PlaceholdersRequest):
    """List the placeholders of a Word or Excel template."""
    path = Path(request.template_path)
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"Template not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".docx":
        kind, service = "word", _word_service
    elif suffix in (".xlsx", ".xlsm"):
        kind, service = "excel", _excel_service
    else:
        raise HTTPException(status_code=400, detail=f"Unsupported template type: {suffix}")

    if not await service.is_valid_template_async(path):
        raise HTTPException(status_code=400, detail=f"Not a valid {kind} template: {path}")

    placeholders = await service.extract_placeholders_async(path)
    return PlaceholdersResponse(
        template_path=str(path), kind=kind, placeholders=placeholders
    )


@router.post("/tables/merge", response_model=MergeResponse)
async def merge_tables(request: MergeRequest):
    """Load data files and merge their rows on a key column."""
    table_set = _load_tables(request.data_paths)

    rows: list[dict[str, str]] = []
    if request.key_column:
        if request.key_column not in table_set.common_headers:
            raise HTTPException(
                status_code=400,
                detail=f"Key column {request.key_column!r} is not present in every table",
            )
        rows = table_set.merge(request.key_column).rows

    return MergeResponse(
        tables=[table.label for table in table_set.tables],
        all_headers=table_set.all_headers,
        common_headers=table_set.common_headers,
        total_row_count=table_set.total_row_count,
        key_column=request.key_column,
        rows=rows,
    )


@router.post("/generate", response_model=BatchSummary)
async def generate_documents(request: GenerateRequest):
    """Generate one document per data row (and per template)."""
    table_set = _load_tables(request.data_paths)
    rows, error = select_rows(table_set, request.key_column)
    if error:
        raise HTTPException(status_code=400, detail=error)

    generator = BatchGenerator(
        word_service=_word_service,
        excel_service=_excel_service,
        max_concurrent=settings.max_concurrent_documents,
    )
    summary = await generator.generate(
        rows,
        GenerationRequest(
            output_directory=request.output_directory,
            word_template=request.word_template,
            excel_template=request.excel_template,
            file_name_template=request.file_name_template,
        ),
    )
    if summary.succeeded == 0 and summary.failed == 0:
        raise HTTPException(status_code=400, detail=summary.message)
    return summary
