"""
Logging configuration for the Apple II NIB converter.

Provides console logging through rich plus optional file logging for
troubleshooting conversions of damaged images.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(log_file: Optional[str] = None, level: int = logging.INFO,
                  verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Console output goes to stderr through a RichHandler. When log_file is
    given, everything at DEBUG and above is also written to that file.

    Args:
        log_file: Optional path to a log file
        level: Console logging level (default: logging.INFO)
        verbose: Lower the console level to DEBUG

    Example:
        >>> setup_logging(verbose=True)
        >>> logging.debug("V:fe T:00 S:00 C:fe")
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for handler in list(root.handlers):
        if getattr(handler, '_nib_converter', False):
            root.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    console_handler.setLevel(logging.DEBUG if verbose else level)
    console_handler._nib_converter = True
    root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        file_handler._nib_converter = True
        root.addHandler(file_handler)


def log_operation(operation: str, details: str, level: int = logging.INFO) -> None:
    """
    Log a conversion operation with details.

    Example:
        >>> log_operation("dsk2nib", "disk.dsk => disk.nib [Volume:254]")
    """
    logging.log(level, f"{operation}: {details}")


def log_error(operation: str, error: BaseException) -> None:
    """
    Log an error with operation context.

    Example:
        >>> log_error("nib2dsk", TruncatedError("READ_SECTOR", 56, 0))
    """
    logging.error(f"{operation} failed - {type(error).__name__}: {error}")


def log_performance(operation: str, duration: float, **metrics) -> None:
    """
    Log performance metrics for an operation.

    Example:
        >>> log_performance("decode", 0.84, tracks=35, sectors=560)
    """
    metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
    logging.info(f"Performance - {operation}: {duration:.2f}s, {metrics_str}")
