"""
Settings management for the converter.

Conversion settings are a validated pydantic model. They can be persisted
as JSON, but only to a path the caller names explicitly; there is no
implicit configuration location.

Settings:
    volume: Volume number written to NIB address fields (0-255)
    workers: Tracks converted in parallel (1-35)
    strict: Treat data checksum errors and missing sectors as fatal
    log_file: Optional log file path
    verbose: Enable DEBUG console logging
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


DEFAULT_VOLUME = 254
MAX_WORKERS = 35


class ConverterSettings(BaseModel):
    """Options for a single conversion run."""

    model_config = ConfigDict(extra='forbid', validate_assignment=True)

    volume: int = Field(DEFAULT_VOLUME, ge=0, le=255)
    workers: int = Field(1, ge=1, le=MAX_WORKERS)
    strict: bool = False
    log_file: Optional[str] = None
    verbose: bool = False


def load_settings(path: Union[str, Path]) -> ConverterSettings:
    """
    Load settings from a JSON file.

    Args:
        path: Settings file path

    Returns:
        Validated ConverterSettings

    Raises:
        OSError: If the file cannot be read
        pydantic.ValidationError: If the file holds invalid values
    """
    path = Path(path)
    text = path.read_text(encoding='utf-8')
    try:
        settings = ConverterSettings.model_validate_json(text)
    except ValidationError:
        logger.error("Invalid settings in %s", path)
        raise
    logger.info("Settings loaded from %s", path)
    return settings


def save_settings(settings: ConverterSettings, path: Union[str, Path]) -> None:
    """
    Save settings as JSON, creating parent directories as needed.

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(settings.model_dump(), indent=2) + "\n", encoding='utf-8'
    )
    logger.info("Settings saved to %s", path)


__all__ = [
    'ConverterSettings',
    'load_settings',
    'save_settings',
    'DEFAULT_VOLUME',
    'MAX_WORKERS',
]
