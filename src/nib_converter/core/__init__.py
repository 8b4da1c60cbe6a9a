"""
Core configuration for the Apple II NIB converter.
"""

from nib_converter.core.settings import (
    ConverterSettings,
    load_settings,
    save_settings,
    DEFAULT_VOLUME,
    MAX_WORKERS,
)

__all__ = [
    "ConverterSettings",
    "load_settings",
    "save_settings",
    "DEFAULT_VOLUME",
    "MAX_WORKERS",
]
