"""Configuration management for DocTransform."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

logger = logging.getLogger(__name__)


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


def _default_preferences_path() -> Path:
    return Path(
        os.getenv("PREFERENCES_PATH", str(Path.home() / ".doctransform" / "settings.json"))
    )


class Settings(BaseModel):
    """Application settings."""

    # Output defaults
    output_directory: Path = Path(os.getenv("OUTPUT_DIRECTORY", "output"))
    file_name_template: str = os.getenv("FILE_NAME_TEMPLATE", "{row}_{time}")

    # Where user preferences (last output directory...) are persisted
    preferences_path: Path = _default_preferences_path()

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Documents generated at the same time (each in its own worker thread)
    max_concurrent_documents: int = int(os.getenv("MAX_CONCURRENT_DOCUMENTS", "1"))


class UserPreferences(BaseModel):
    """
    User choices remembered between runs.

    Loaded once at process start and saved at exit; callers pass the
    instance around instead of reading a global.
    """

    last_output_directory: str = str(Path.home())
    file_name_template: Optional[str] = None

    @classmethod
    def load(cls, path: Union[str, Path]) -> "UserPreferences":
        """
        Load preferences from ``path``.

        Falls back to defaults when the file is missing or unreadable, or
        when the remembered output directory no longer exists.
        """
        path = Path(path)
        try:
            if path.exists():
                prefs = cls.model_validate_json(path.read_text(encoding="utf-8"))
                if prefs.last_output_directory and Path(prefs.last_output_directory).is_dir():
                    return prefs
                logger.info("Remembered output directory is gone, using defaults")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load preferences from {path}: {e}")
        return cls()

    def save(self, path: Union[str, Path]) -> bool:
        """Write preferences to ``path``; returns False on failure."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
            return True
        except OSError as e:
            logger.warning(f"Could not save preferences to {path}: {e}")
            return False


settings = Settings()
