"""
Apple II NIB Converter - DSK <-> NIB disk image conversion.

Converts 140K DOS 3.3 order logical images (DSK) into 6-and-2 GCR nibble
images (NIB) and back, recovering sector data from the nibble stream with
a track synchronizer that tolerates damaged sectors.
"""

__version__ = "1.1.0"
__author__ = "Joshua Yewman"
__license__ = "MIT"

from nib_converter.codec import (
    NibError,
    InvalidByteError,
    MarkMismatchError,
    ChecksumMismatchError,
    TruncatedError,
    SectorStatus,
    DecodedSector,
)
from nib_converter.core.settings import (
    ConverterSettings,
    load_settings,
    save_settings,
)
from nib_converter.imaging import (
    DiskImage,
    NibImage,
    DecodeReport,
    DecodeResult,
    encode,
    decode,
    decode_image,
    read_disk_image,
    read_nib_image,
    write_image,
)

__all__ = [
    "__version__",

    # Errors
    "NibError",
    "InvalidByteError",
    "MarkMismatchError",
    "ChecksumMismatchError",
    "TruncatedError",

    # Sector results
    "SectorStatus",
    "DecodedSector",

    # Settings
    "ConverterSettings",
    "load_settings",
    "save_settings",

    # Images and conversion
    "DiskImage",
    "NibImage",
    "DecodeReport",
    "DecodeResult",
    "encode",
    "decode",
    "decode_image",
    "read_disk_image",
    "read_nib_image",
    "write_image",
]
