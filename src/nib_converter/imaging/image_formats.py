"""
Image format detection and file I/O for Apple II disk images.

Both supported formats are flat, headerless byte files:

    DSK / DO:  35 tracks x 16 sectors x 256 bytes = 143,360 bytes,
               sectors in logical (DOS 3.3) order
    NIB:       35 tracks x 6656 bytes = 232,960 bytes of raw disk bytes

Since neither format has magic bytes, detection uses the file size first
and the extension second.
"""

import logging
from enum import Enum, auto
from pathlib import Path
from typing import Dict, Optional, Union

from .disk_image import DSK_IMAGE_SIZE, NIB_IMAGE_SIZE, DiskImage, NibImage

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class ImageError(Exception):
    """Base exception for image-related errors."""

    def __init__(self, message: str, filepath: Optional[str] = None):
        self.message = message
        self.filepath = filepath
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.filepath:
            return f"{self.message} [File: {self.filepath}]"
        return self.message


class ImageFormatError(ImageError):
    """Raised when image format is invalid or unsupported."""

    def __init__(self, message: str, filepath: Optional[str] = None,
                 detected_format: Optional[str] = None):
        self.detected_format = detected_format
        super().__init__(message, filepath)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.detected_format:
            return f"{base} [Detected: {self.detected_format}]"
        return base


class ImageCorruptError(ImageError):
    """Raised when image file is corrupt or incomplete."""

    def __init__(self, message: str, filepath: Optional[str] = None,
                 expected_size: Optional[int] = None,
                 actual_size: Optional[int] = None):
        self.expected_size = expected_size
        self.actual_size = actual_size
        super().__init__(message, filepath)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.expected_size is not None and self.actual_size is not None:
            return f"{base} [Expected: {self.expected_size}, Actual: {self.actual_size}]"
        return base


class ImageReadError(ImageError):
    """Raised when reading image file fails."""
    pass


class ImageWriteError(ImageError):
    """Raised when writing image file fails."""
    pass


# =============================================================================
# Enums and Constants
# =============================================================================

class ImageFormat(Enum):
    """Supported disk image formats."""
    DSK = auto()      # Logical sector image, DOS order
    DO = auto()       # Same layout as DSK
    NIB = auto()      # Nibble image
    UNKNOWN = auto()  # Unrecognized format


EXTENSION_MAP: Dict[str, ImageFormat] = {
    '.dsk': ImageFormat.DSK,
    '.do': ImageFormat.DO,
    '.nib': ImageFormat.NIB,
}

EXPECTED_SIZES: Dict[ImageFormat, int] = {
    ImageFormat.DSK: DSK_IMAGE_SIZE,
    ImageFormat.DO: DSK_IMAGE_SIZE,
    ImageFormat.NIB: NIB_IMAGE_SIZE,
}


def get_expected_size(format_type: ImageFormat) -> int:
    """
    Get the exact file size of a format.

    Raises:
        ImageFormatError: If format_type is UNKNOWN
    """
    try:
        return EXPECTED_SIZES[format_type]
    except KeyError:
        raise ImageFormatError("Format has no fixed size",
                               detected_format=format_type.name) from None


def is_nibble_format(format_type: ImageFormat) -> bool:
    """Check if format holds raw disk bytes."""
    return format_type == ImageFormat.NIB


# =============================================================================
# Format Detection
# =============================================================================

def detect_format(filepath: Union[str, Path]) -> ImageFormat:
    """
    Detect image format by file size, then by extension.

    Args:
        filepath: Path to the image file

    Returns:
        Detected ImageFormat enum value

    Raises:
        ImageReadError: If file does not exist or is not a file
    """
    path = Path(filepath)

    if not path.exists():
        raise ImageReadError("File does not exist", str(filepath))

    if not path.is_file():
        raise ImageReadError("Path is not a file", str(filepath))

    size = path.stat().st_size
    by_extension = _detect_by_extension(path)

    if size == NIB_IMAGE_SIZE:
        logger.debug("Detected NIB format by size: %s", filepath)
        return ImageFormat.NIB
    if size == DSK_IMAGE_SIZE:
        logger.debug("Detected DSK format by size: %s", filepath)
        return by_extension if by_extension in (ImageFormat.DSK, ImageFormat.DO) \
            else ImageFormat.DSK

    return by_extension


def _detect_by_extension(path: Path) -> ImageFormat:
    """Detect format by file extension."""
    ext = path.suffix.lower()

    if ext in EXTENSION_MAP:
        logger.debug("Detected format by extension: %s -> %s", ext, EXTENSION_MAP[ext])
        return EXTENSION_MAP[ext]

    logger.debug("Unknown extension: %s", ext)
    return ImageFormat.UNKNOWN


# =============================================================================
# Reading and Writing
# =============================================================================

def _read_exact(filepath: Union[str, Path], expected_size: int, kind: str) -> bytes:
    path = Path(filepath)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageReadError(f"Cannot open {kind} image for reading: {e}",
                             str(filepath)) from e

    if len(data) != expected_size:
        raise ImageCorruptError(f"{kind} image has wrong size", str(filepath),
                                expected_size=expected_size, actual_size=len(data))
    return data


def read_disk_image(filepath: Union[str, Path]) -> DiskImage:
    """
    Read a DSK/DO logical image.

    Raises:
        ImageReadError: If the file cannot be read
        ImageCorruptError: If the file is not exactly 143,360 bytes
    """
    data = _read_exact(filepath, get_expected_size(ImageFormat.DSK), "DSK")
    logger.info("Read DSK image %s (%d bytes)", filepath, len(data))
    return DiskImage.from_bytes(data)


def read_nib_image(filepath: Union[str, Path]) -> NibImage:
    """
    Read a NIB nibble image.

    Raises:
        ImageReadError: If the file cannot be read
        ImageCorruptError: If the file is not exactly 232,960 bytes
    """
    data = _read_exact(filepath, get_expected_size(ImageFormat.NIB), "NIB")
    logger.info("Read NIB image %s (%d bytes)", filepath, len(data))
    return NibImage.from_bytes(data)


def write_image(image: Union[DiskImage, NibImage], filepath: Union[str, Path]) -> None:
    """
    Write a DSK or NIB image to disk, replacing any existing file.

    Raises:
        ImageWriteError: If the file cannot be written
    """
    data = image.to_bytes()
    try:
        Path(filepath).write_bytes(data)
    except OSError as e:
        raise ImageWriteError(f"Cannot open image for writing: {e}",
                              str(filepath)) from e
    logger.info("Wrote %s (%d bytes)", filepath, len(data))
