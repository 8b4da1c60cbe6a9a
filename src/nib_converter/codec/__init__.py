"""
Apple II 5.25" GCR codec layer.

This package implements the byte-level encodings used on a DOS 3.3 formatted
Apple II floppy track and the framing logic that wraps encoded sectors in
address and data fields.

Classes:
    NibbleTable: 6-bit value <-> disk byte translation
    SixAndTwoCodec: 256-byte sector payload <-> 343 disk bytes
    TrackFramer: Assemble a 6656-byte nibble track from sector payloads
    TrackSynchronizer: Recover sectors from a raw nibble track stream

Exceptions:
    NibError: Base exception for all codec errors
    InvalidByteError: Byte outside the 64-entry disk byte alphabet
    MarkMismatchError: Expected sync mark byte not found
    ChecksumMismatchError: Address or data field checksum failure
    TruncatedError: Stream ended in the middle of a field
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class NibError(Exception):
    """Base exception for all nibble codec errors."""

    # Whether the synchronizer may continue scanning after this error
    recoverable = False

    def __init__(self, message: str, track: Optional[int] = None,
                 sector: Optional[int] = None):
        self.message = message
        self.track = track
        self.sector = sector
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []
        if self.track is not None:
            parts.append(f"T:{self.track:02d}")
        if self.sector is not None:
            parts.append(f"S:{self.sector:02d}")
        if parts:
            return f"{self.message} [{' '.join(parts)}]"
        return self.message


class InvalidByteError(NibError):
    """Raised when a byte is not one of the 64 legal 6-and-2 disk bytes."""

    def __init__(self, value: int, position: Optional[int] = None,
                 track: Optional[int] = None, sector: Optional[int] = None):
        self.value = value
        self.position = position
        super().__init__(f"Non-translatable byte {value:02x}", track, sector)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.position is not None:
            return f"{base} [Offset: {self.position}]"
        return base


class MarkMismatchError(NibError):
    """Raised when a sync mark byte does not match where strict matching applies."""

    def __init__(self, mark: str, expected: int, actual: int,
                 position: Optional[int] = None,
                 track: Optional[int] = None, sector: Optional[int] = None):
        self.mark = mark
        self.expected = expected
        self.actual = actual
        self.position = position
        super().__init__(f"{mark} mismatch ({actual:02x})", track, sector)

    def _format_message(self) -> str:
        base = super()._format_message()
        detail = f"expected 0x{self.expected:02X}"
        if self.position is not None:
            detail += f", offset {self.position}"
        return f"{base} [{detail}]"


class ChecksumMismatchError(NibError):
    """Raised when an address or data field checksum does not verify."""

    recoverable = True

    def __init__(self, field: str, expected: int, actual: int,
                 track: Optional[int] = None, sector: Optional[int] = None):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"{field} checksum mismatch", track, sector)

    def _format_message(self) -> str:
        base = super()._format_message()
        return f"{base} [Checksum: expected 0x{self.expected:02X}, got 0x{self.actual:02X}]"


class TruncatedError(NibError):
    """Raised when the track stream ends in the middle of a field."""

    def __init__(self, state: str, position: int,
                 track: Optional[int] = None, sector: Optional[int] = None):
        self.state = state
        self.position = position
        super().__init__("Unexpected end of track data", track, sector)

    def _format_message(self) -> str:
        base = super()._format_message()
        return f"{base} [State: {self.state}, offset {self.position}]"


# =============================================================================
# Enums and Data Classes
# =============================================================================

class SectorStatus(IntEnum):
    """Status of a decoded sector."""
    GOOD = 0             # Address and data field both verified
    CHECKSUM_ERROR = 1   # Data decoded but XOR chain checksum non-zero
    MISSING = 2          # No address field found for this sector
    ADDRESS_ERROR = 3    # Data verified but address checksum mismatched


@dataclass
class DecodedSector:
    """A sector recovered from a nibble track."""
    track: int
    sector: int              # Sector number transmitted in the address field
    logical_sector: int      # Slot in the logical (DOS order) image
    volume: int
    data: bytes
    status: SectorStatus
    address_checksum_valid: bool = True
    data_checksum_valid: bool = True
    data_checksum: int = 0   # Residual of the data field XOR chain
    skipped_bytes: int = 0   # Extra bytes skipped before the data epilog

    @property
    def is_good(self) -> bool:
        """Check if sector decoded with both checksums valid."""
        return self.status == SectorStatus.GOOD


__all__ = [
    # Exceptions
    'NibError',
    'InvalidByteError',
    'MarkMismatchError',
    'ChecksumMismatchError',
    'TruncatedError',

    # Enums and data classes
    'SectorStatus',
    'DecodedSector',

    # Components
    'NibbleTable',
    'translate',
    'untranslate',
    'odd_even_encode',
    'odd_even_decode',
    'SixAndTwoCodec',
    'SixAndTwoResult',
    'encode_sector',
    'decode_sector',
    'SOFT_INTERLEAVE',
    'PHYS_INTERLEAVE',
    'logical_sector_for',
    'physical_slot_for',
    'TrackFramer',
    'encode_track',
    'TrackSynchronizer',
    'TrackDecodeResult',
    'SyncState',
    'decode_track',
]


# =============================================================================
# Submodule Imports (after base classes are defined to avoid circular imports)
# =============================================================================

from .nibble_table import NibbleTable, translate, untranslate
from .odd_even import odd_even_encode, odd_even_decode
from .six_and_two import SixAndTwoCodec, SixAndTwoResult, encode_sector, decode_sector
from .interleave import SOFT_INTERLEAVE, PHYS_INTERLEAVE, logical_sector_for, physical_slot_for
from .track_framer import TrackFramer, encode_track
from .track_sync import TrackSynchronizer, TrackDecodeResult, SyncState, decode_track
