"""Template services: open a template copy, fill it, save it."""

from .common import TemplateError
from .excel import ExcelTemplateService
from .word import WordTemplateService

__all__ = [
    "TemplateError",
    "ExcelTemplateService",
    "WordTemplateService",
]
