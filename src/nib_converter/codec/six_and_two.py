"""
6-and-2 sector data codec.

Converts a 256-byte sector payload into the 342 disk bytes of a DOS 3.3 data
field plus a trailing checksum byte, and back again.

Each payload byte is split into a 6-bit primary value (bits 7-2) and a 2-bit
secondary value (bits 1-0, stored swapped). Three secondary values are packed
into each of 86 secondary bytes. The 342 raw values are then written as a
running XOR chain so the chain itself carries the checksum: XOR-ing every
untranslated byte of a good field, checksum byte included, yields zero.

Stream layout (343 bytes):
    [0, 86)     secondary buffer, XOR chained
    [86, 342)   primary buffer, XOR chained onto the secondary chain
    342         checksum (last primary value)

Key Classes:
    SixAndTwoCodec: Sector encoder/decoder
    SixAndTwoResult: Decoded payload plus residual checksum
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .nibble_table import NibbleTable

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

BYTES_PER_SECTOR = 256
PRIMARY_BUF_LEN = 256
SECONDARY_BUF_LEN = 86
DATA_LEN = PRIMARY_BUF_LEN + SECONDARY_BUF_LEN   # 342
ENCODED_SECTOR_LEN = DATA_LEN + 1                # 343 with checksum byte


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class SixAndTwoResult:
    """Result of decoding one 343-byte data field."""
    data: bytes
    checksum: int   # Residual of the XOR chain, zero for a good field

    @property
    def checksum_valid(self) -> bool:
        """Check if the XOR chain verified."""
        return self.checksum == 0


# =============================================================================
# Codec
# =============================================================================

def _swap_low_bits(value: int) -> int:
    """Swap bit 0 and bit 1 of value."""
    return ((value & 2) >> 1) | ((value & 1) << 1)


class SixAndTwoCodec:
    """
    Encoder/decoder for 6-and-2 data fields.

    Buffers are allocated per call; an instance holds only the translation
    table and can be shared between threads.
    """

    def __init__(self, table: Optional[NibbleTable] = None):
        self.table = table or NibbleTable()

    def encode(self, payload: bytes) -> bytes:
        """
        Nibblize one sector.

        Args:
            payload: Exactly 256 bytes of sector data

        Returns:
            343 disk bytes (342 data bytes and the checksum byte)

        Raises:
            ValueError: If payload is not 256 bytes long
        """
        if len(payload) != BYTES_PER_SECTOR:
            raise ValueError(
                f"Sector payload must be {BYTES_PER_SECTOR} bytes, got {len(payload)}"
            )

        primary = [0] * PRIMARY_BUF_LEN
        secondary = [0] * SECONDARY_BUF_LEN

        for i, byte in enumerate(payload):
            primary[i] = byte >> 2
            section, index = divmod(i, SECONDARY_BUF_LEN)
            secondary[index] |= _swap_low_bits(byte) << (section * 2)

        to_disk = self.table.to_disk_byte
        out = bytearray(ENCODED_SECTOR_LEN)

        out[0] = to_disk(secondary[0])
        for i in range(1, SECONDARY_BUF_LEN):
            out[i] = to_disk(secondary[i] ^ secondary[i - 1])

        out[SECONDARY_BUF_LEN] = to_disk(primary[0] ^ secondary[SECONDARY_BUF_LEN - 1])
        for i in range(1, PRIMARY_BUF_LEN):
            out[SECONDARY_BUF_LEN + i] = to_disk(primary[i] ^ primary[i - 1])

        out[DATA_LEN] = to_disk(primary[PRIMARY_BUF_LEN - 1])
        return bytes(out)

    def decode(self, encoded: Sequence[int], offset: int = 0) -> SixAndTwoResult:
        """
        Denibblize one sector.

        A non-zero residual checksum is reported in the result, not raised;
        the caller decides whether the mismatch is fatal.

        Args:
            encoded: Buffer holding at least 343 disk bytes from offset
            offset: Start of the data field within encoded, also used as
                the base for error positions

        Returns:
            SixAndTwoResult with the 256-byte payload and residual checksum

        Raises:
            ValueError: If fewer than 343 bytes are available
            InvalidByteError: If a byte is not a legal disk byte
        """
        if len(encoded) - offset < ENCODED_SECTOR_LEN:
            raise ValueError(
                f"Data field needs {ENCODED_SECTOR_LEN} bytes, "
                f"got {len(encoded) - offset}"
            )

        from_disk = self.table.from_disk_byte
        primary: List[int] = [0] * PRIMARY_BUF_LEN
        secondary: List[int] = [0] * SECONDARY_BUF_LEN

        pos = offset
        checksum = 0
        for i in range(SECONDARY_BUF_LEN):
            checksum ^= from_disk(encoded[pos], pos)
            secondary[i] = checksum
            pos += 1

        for i in range(PRIMARY_BUF_LEN):
            checksum ^= from_disk(encoded[pos], pos)
            primary[i] = checksum
            pos += 1

        checksum ^= from_disk(encoded[pos], pos)
        if checksum != 0:
            logger.debug("Data checksum residual 0x%02X", checksum)

        data = bytearray(BYTES_PER_SECTOR)
        for i in range(BYTES_PER_SECTOR):
            section, index = divmod(i, SECONDARY_BUF_LEN)
            pair = (secondary[index] >> (section * 2)) & 0x03
            data[i] = ((primary[i] << 2) | _swap_low_bits(pair)) & 0xFF

        return SixAndTwoResult(data=bytes(data), checksum=checksum)


# Global codec instance
_codec = SixAndTwoCodec()


def encode_sector(payload: bytes) -> bytes:
    """Encode a 256-byte payload into 343 disk bytes."""
    return _codec.encode(payload)


def decode_sector(encoded: Sequence[int], offset: int = 0) -> SixAndTwoResult:
    """Decode 343 disk bytes into a payload and residual checksum."""
    return _codec.decode(encoded, offset)
