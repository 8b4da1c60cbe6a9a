"""
Error classification for conversion failures.

Maps codec and image exceptions to severities and user-facing messages.
"""

from pydantic import ValidationError

from nib_converter.codec import (
    ChecksumMismatchError,
    InvalidByteError,
    MarkMismatchError,
    NibError,
    TruncatedError,
)
from nib_converter.imaging.image_formats import (
    ImageCorruptError,
    ImageError,
    ImageFormatError,
    ImageReadError,
    ImageWriteError,
)


def handle_conversion_error(error: BaseException, operation: str = "conversion") -> str:
    """
    Build a context-aware message for a failed conversion.

    Args:
        error: Exception raised by the conversion
        operation: Description of the operation that failed

    Returns:
        Formatted error message with a hint where one helps

    Example:
        >>> handle_conversion_error(ImageCorruptError("NIB image has wrong size"))
        'conversion failed: NIB image has wrong size. Check the file is a 35-track image.'
    """
    hints = {
        TruncatedError: "The nibble stream ends inside a sector.",
        InvalidByteError: "The data field holds a byte that is not a disk byte.",
        MarkMismatchError: "Track framing was lost after a data field.",
        ChecksumMismatchError: "Sector data did not verify.",
        ImageFormatError: "Check the input is the right kind of image.",
        ImageCorruptError: "Check the file is a 35-track image.",
        ImageReadError: "Check the input path and permissions.",
        ImageWriteError: "Check the output directory is writable.",
    }

    hint = ""
    for error_type, text in hints.items():
        if isinstance(error, error_type):
            hint = f" {text}"
            break

    return f"{operation} failed: {error}.{hint}"


def is_fatal_error(error: BaseException) -> bool:
    """
    Determine if an error aborts the whole conversion.

    Recoverable codec errors (checksum mismatches) only degrade a sector;
    everything else stops the run.
    """
    if isinstance(error, NibError):
        return not error.recoverable
    return True


def get_error_severity(error: BaseException) -> str:
    """
    Get the severity level of an error.

    Returns:
        Severity level: "critical", "error" or "warning"
    """
    if isinstance(error, NibError):
        return "critical" if is_fatal_error(error) else "warning"
    if isinstance(error, (ImageError, ValidationError, OSError)):
        return "error"
    return "critical"
