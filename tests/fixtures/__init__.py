"""
Test fixtures for the Apple II NIB converter.

Provides logical images with known contents and hand-built nibble streams
for testing without real disk images.
"""

from tests.fixtures.disk_images import (
    ADDR_FIELD_OFFSET,
    SECTOR_PAIR_OFFSET,
    CHECKSUM_PAIR_OFFSET,
    ADDR_EPILOG_OFFSET,
    DATA_FIELD_OFFSET,
    DATA_EPILOG_OFFSET,
    pattern_payload,
    create_pattern_image,
    create_random_image,
    create_nib_image,
    build_sector_record,
    insert_before_data_epilog,
)

__all__ = [
    "ADDR_FIELD_OFFSET",
    "SECTOR_PAIR_OFFSET",
    "CHECKSUM_PAIR_OFFSET",
    "ADDR_EPILOG_OFFSET",
    "DATA_FIELD_OFFSET",
    "DATA_EPILOG_OFFSET",
    "pattern_payload",
    "create_pattern_image",
    "create_random_image",
    "create_nib_image",
    "build_sector_record",
    "insert_before_data_epilog",
]
