"""
Apple II disk image containers, file I/O and conversion.

Supported Formats:
    - DSK/DO: 143,360-byte logical sector images in DOS 3.3 order
    - NIB: 232,960-byte nibble images (35 x 6656 raw disk bytes)

Example Usage:
    from nib_converter.imaging import read_disk_image, encode, write_image
    nib = encode(read_disk_image("disk.dsk"), volume=254)
    write_image(nib, "disk.nib")

    from nib_converter.imaging import read_nib_image, decode_image
    result = decode_image(read_nib_image("disk.nib"))
    print(result.report.volume, result.report.missing_sectors)
"""

from .disk_image import (
    DiskImage,
    NibImage,
    TRACKS_PER_DISK,
    BYTES_PER_TRACK,
    DSK_IMAGE_SIZE,
    NIB_IMAGE_SIZE,
)

from .image_formats import (
    # Exceptions
    ImageError,
    ImageFormatError,
    ImageCorruptError,
    ImageReadError,
    ImageWriteError,
    # Enums
    ImageFormat,
    # Functions
    detect_format,
    get_expected_size,
    is_nibble_format,
    read_disk_image,
    read_nib_image,
    write_image,
    # Constants
    EXTENSION_MAP,
)

from .converter import (
    DecodeReport,
    DecodeResult,
    encode,
    decode,
    decode_image,
)

__all__ = [
    # Containers
    "DiskImage",
    "NibImage",
    "TRACKS_PER_DISK",
    "BYTES_PER_TRACK",
    "DSK_IMAGE_SIZE",
    "NIB_IMAGE_SIZE",

    # Exceptions
    "ImageError",
    "ImageFormatError",
    "ImageCorruptError",
    "ImageReadError",
    "ImageWriteError",

    # Formats and file I/O
    "ImageFormat",
    "EXTENSION_MAP",
    "detect_format",
    "get_expected_size",
    "is_nibble_format",
    "read_disk_image",
    "read_nib_image",
    "write_image",

    # Conversion
    "DecodeReport",
    "DecodeResult",
    "encode",
    "decode",
    "decode_image",
]
