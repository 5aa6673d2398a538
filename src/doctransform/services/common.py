"""Helpers shared by the template services."""

import shutil
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class TemplateError(Exception):
    """Raised when a template cannot be opened or processed."""
    pass


def validate_paths(template_path: Optional[PathLike], output_path: Optional[PathLike]) -> Optional[str]:
    """Return an error message for bad inputs, or ``None`` when both paths are usable."""
    if not template_path or not Path(template_path).is_file():
        return f"Template not found: {template_path}"
    if not output_path or not str(output_path).strip():
        return "Invalid output path"
    return None


def copy_template(template_path: PathLike, output_path: PathLike) -> Path:
    """Copy the template over ``output_path``, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(template_path, output_path)
    return output_path
