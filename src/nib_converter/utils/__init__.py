"""
Utility functions for the Apple II NIB converter.

This module provides logging setup and error classification helpers.
"""

from nib_converter.utils.logging import (
    setup_logging,
    log_operation,
    log_error,
    log_performance,
)

from nib_converter.utils.error_handler import (
    handle_conversion_error,
    is_fatal_error,
    get_error_severity,
)

__all__ = [
    # Logging
    "setup_logging",
    "log_operation",
    "log_error",
    "log_performance",

    # Error handling
    "handle_conversion_error",
    "is_fatal_error",
    "get_error_severity",
]
