"""
6-and-2 disk byte translation table.

A "disk byte" (nibble) is a byte that can be written to an Apple II floppy
track: its high bit is set and it never contains two consecutive zero bits.
Exactly 64 such values (excluding the reserved 0xAA and 0xD5 mark bytes) are
used by the DOS 3.3 6-and-2 scheme, one per 6-bit value.

Key Classes:
    NibbleTable: Forward and inverse lookup

Key Functions:
    translate: 6-bit value -> disk byte
    untranslate: disk byte -> 6-bit value
"""

import logging
from typing import Dict, Optional, Tuple

from . import InvalidByteError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Write translate table (DOS 3.3 RWTS), indexed by 6-bit value
DISK_BYTES: Tuple[int, ...] = (
    0x96, 0x97, 0x9A, 0x9B, 0x9D, 0x9E, 0x9F, 0xA6,
    0xA7, 0xAB, 0xAC, 0xAD, 0xAE, 0xAF, 0xB2, 0xB3,
    0xB4, 0xB5, 0xB6, 0xB7, 0xB9, 0xBA, 0xBB, 0xBC,
    0xBD, 0xBE, 0xBF, 0xCB, 0xCD, 0xCE, 0xCF, 0xD3,
    0xD6, 0xD7, 0xD9, 0xDA, 0xDB, 0xDC, 0xDD, 0xDE,
    0xDF, 0xE5, 0xE6, 0xE7, 0xE9, 0xEA, 0xEB, 0xEC,
    0xED, 0xEE, 0xEF, 0xF2, 0xF3, 0xF4, 0xF5, 0xF6,
    0xF7, 0xF9, 0xFA, 0xFB, 0xFC, 0xFD, 0xFE, 0xFF,
)

TABLE_SIZE = 0x40


# =============================================================================
# Translation Table
# =============================================================================

class NibbleTable:
    """6-bit value <-> disk byte translator."""

    def __init__(self):
        """Initialize with the inverse lookup for fast untranslation."""
        self._forward = DISK_BYTES
        self._inverse = self._generate_inverse()

    def _generate_inverse(self) -> Dict[int, int]:
        """Generate disk byte -> 6-bit value lookup."""
        return {disk_byte: value for value, disk_byte in enumerate(self._forward)}

    def to_disk_byte(self, value: int) -> int:
        """
        Translate a 6-bit value to its disk byte.

        Only the low 6 bits of value are used.

        Args:
            value: Value to translate

        Returns:
            Disk byte in the range 0x96-0xFF
        """
        return self._forward[value & 0x3F]

    def from_disk_byte(self, disk_byte: int, position: Optional[int] = None) -> int:
        """
        Translate a disk byte back to its 6-bit value.

        Args:
            disk_byte: Byte read from the track
            position: Optional stream offset reported on failure

        Returns:
            6-bit value (0-63)

        Raises:
            InvalidByteError: If disk_byte is not in the table
        """
        try:
            return self._inverse[disk_byte]
        except KeyError:
            raise InvalidByteError(disk_byte, position) from None

    def is_disk_byte(self, value: int) -> bool:
        """Check whether value is one of the 64 legal disk bytes."""
        return value in self._inverse

    def __len__(self) -> int:
        return TABLE_SIZE


# Global table instance
_table = NibbleTable()


def translate(value: int) -> int:
    """Translate a 6-bit value to a disk byte."""
    return _table.to_disk_byte(value)


def untranslate(disk_byte: int, position: Optional[int] = None) -> int:
    """Translate a disk byte to a 6-bit value, raising InvalidByteError."""
    return _table.from_disk_byte(disk_byte, position)
