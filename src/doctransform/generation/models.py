"""Result models for document generation."""

from typing import Optional

from pydantic import BaseModel, Field


class ProcessingResult(BaseModel):
    """Outcome of generating one document."""

    success: bool
    message: str = ""
    file_path: Optional[str] = None
    row_index: Optional[int] = None  # 0-based index of the data row
    replacements: int = 0

    @classmethod
    def succeed(
        cls, message: str, file_path: Optional[str] = None, replacements: int = 0
    ) -> "ProcessingResult":
        return cls(success=True, message=message, file_path=file_path, replacements=replacements)

    @classmethod
    def fail(cls, message: str, file_path: Optional[str] = None) -> "ProcessingResult":
        return cls(success=False, message=message, file_path=file_path)


class GenerationRequest(BaseModel):
    """Inputs of one batch run."""

    output_directory: str
    word_template: Optional[str] = None
    excel_template: Optional[str] = None
    file_name_template: str = "{row}_{time}"


class BatchSummary(BaseModel):
    """Outcome of a batch run over many data rows."""

    succeeded: int = 0
    failed: int = 0
    message: str = ""
    last_error: Optional[str] = None
    results: list[ProcessingResult] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.succeeded > 0

    @classmethod
    def rejected(cls, message: str) -> "BatchSummary":
        """A batch refused during validation; nothing was generated."""
        return cls(message=message, last_error=message)

    def record(self, result: ProcessingResult) -> None:
        self.results.append(result)
        if result.success:
            self.succeeded += 1
        else:
            self.failed += 1
            self.last_error = result.message
