"""
Nibble track assembly.

Builds the 6656-byte image of one track from its 16 logical sector payloads.
Every sector record has the same fixed layout (416 bytes):

    gap 1           48 x 0xFF
    address prolog  D5 AA 96
    address field   volume, track, sector, checksum (4-and-4, 8 bytes)
    address epilog  DE AA EB
    gap 2            5 x 0xFF
    data prolog     D5 AA AD
    data field      343 bytes, 6-and-2
    data epilog     DE AA EB

Key Classes:
    TrackFramer: Track encoder

Key Functions:
    encode_track: High-level track encoding
"""

import logging
from typing import Optional, Sequence

from .interleave import SECTORS_PER_TRACK, SOFT_INTERLEAVE, physical_slot_for
from .odd_even import odd_even_encode
from .six_and_two import BYTES_PER_SECTOR, ENCODED_SECTOR_LEN, SixAndTwoCodec

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

ADDR_PROLOG = bytes([0xD5, 0xAA, 0x96])
ADDR_EPILOG = bytes([0xDE, 0xAA, 0xEB])
DATA_PROLOG = bytes([0xD5, 0xAA, 0xAD])
DATA_EPILOG = bytes([0xDE, 0xAA, 0xEB])

GAP_BYTE = 0xFF
GAP1_LEN = 48
GAP2_LEN = 5
ADDR_FIELD_LEN = 8

BYTES_PER_NIB_SECTOR = (
    GAP1_LEN + len(ADDR_PROLOG) + ADDR_FIELD_LEN + len(ADDR_EPILOG)
    + GAP2_LEN + len(DATA_PROLOG) + ENCODED_SECTOR_LEN + len(DATA_EPILOG)
)                                                          # 416
BYTES_PER_NIB_TRACK = BYTES_PER_NIB_SECTOR * SECTORS_PER_TRACK  # 6656

DEFAULT_VOLUME = 254


# =============================================================================
# Track Framer
# =============================================================================

class TrackFramer:
    """
    Encoder for DOS 3.3 nibble tracks.

    Generates the raw disk byte stream for a track from sector payloads.
    """

    def __init__(self, volume: int = DEFAULT_VOLUME,
                 codec: Optional[SixAndTwoCodec] = None):
        """
        Initialize framer.

        Args:
            volume: Volume number written to every address field (0-255)
            codec: Optional 6-and-2 codec instance to share

        Raises:
            ValueError: If volume is outside 0-255
        """
        if not 0 <= volume <= 255:
            raise ValueError(f"Volume {volume} out of range 0-255")
        self.volume = volume
        self.codec = codec or SixAndTwoCodec()

    def address_field(self, track: int, sector: int) -> bytes:
        """
        Build the 8-byte 4-and-4 address field.

        The checksum is volume XOR track XOR sector.
        """
        checksum = self.volume ^ track ^ sector
        field = bytearray()
        for value in (self.volume, track, sector, checksum):
            field.extend(odd_even_encode(value & 0xFF))
        return bytes(field)

    def sector_record(self, track: int, sector: int, payload: bytes) -> bytes:
        """
        Build one complete 416-byte sector record.

        Args:
            track: Track number for the address field
            sector: Write-order sector number for the address field
            payload: 256 bytes of sector data

        Returns:
            Sector record bytes, gaps included
        """
        record = bytearray()
        record.extend(bytes([GAP_BYTE]) * GAP1_LEN)
        record.extend(ADDR_PROLOG)
        record.extend(self.address_field(track, sector))
        record.extend(ADDR_EPILOG)
        record.extend(bytes([GAP_BYTE]) * GAP2_LEN)
        record.extend(DATA_PROLOG)
        record.extend(self.codec.encode(payload))
        record.extend(DATA_EPILOG)
        return bytes(record)

    def encode_track(self, track: int, sectors: Sequence[bytes]) -> bytes:
        """
        Encode a complete track.

        Args:
            track: Track number (0-34)
            sectors: 16 payloads indexed by logical (DOS order) sector

        Returns:
            6656 bytes of nibble track data in physical order

        Raises:
            ValueError: If there are not 16 payloads of 256 bytes
        """
        if len(sectors) != SECTORS_PER_TRACK:
            raise ValueError(
                f"Track needs {SECTORS_PER_TRACK} sectors, got {len(sectors)}"
            )

        out = bytearray(BYTES_PER_NIB_TRACK)
        for sector in range(SECTORS_PER_TRACK):
            payload = sectors[SOFT_INTERLEAVE[sector]]
            if len(payload) != BYTES_PER_SECTOR:
                raise ValueError(
                    f"Sector {SOFT_INTERLEAVE[sector]} of track {track} has "
                    f"{len(payload)} bytes"
                )
            start = physical_slot_for(sector) * BYTES_PER_NIB_SECTOR
            out[start:start + BYTES_PER_NIB_SECTOR] = self.sector_record(
                track, sector, payload
            )

        logger.debug("Encoded track %d (volume %d)", track, self.volume)
        return bytes(out)


def encode_track(track: int, sectors: Sequence[bytes],
                 volume: int = DEFAULT_VOLUME) -> bytes:
    """
    Encode 16 logical sector payloads into a 6656-byte nibble track.

    Example:
        sectors = [bytes(256)] * 16
        raw = encode_track(0, sectors, volume=254)
    """
    return TrackFramer(volume).encode_track(track, sectors)
