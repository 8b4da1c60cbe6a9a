"""
Unit tests for 6-and-2 data field encoding.

Tests the XOR chain encoder, the incremental-checksum decoder and the
error cases the synchronizer relies on.
"""

import numpy as np
import pytest

from nib_converter.codec import InvalidByteError, SixAndTwoCodec, decode_sector, encode_sector
from nib_converter.codec.nibble_table import DISK_BYTES
from nib_converter.codec.six_and_two import ENCODED_SECTOR_LEN


@pytest.fixture
def codec():
    """Shared codec instance."""
    return SixAndTwoCodec()


class TestEncode:
    """Test sector nibblizing."""

    def test_output_length(self, codec):
        """Test a 256-byte payload encodes to 343 disk bytes."""
        assert len(codec.encode(bytes(256))) == ENCODED_SECTOR_LEN == 343

    def test_all_zero_sector(self, codec):
        """Test the all-zero sector encodes to the first table entry throughout."""
        assert codec.encode(bytes(256)) == bytes([0x96]) * 343

    def test_output_uses_disk_bytes_only(self, codec):
        """Test every output byte is a legal disk byte."""
        encoded = codec.encode(bytes(range(256)))
        assert set(encoded) <= set(DISK_BYTES)

    @pytest.mark.parametrize("size", [0, 255, 257])
    def test_wrong_payload_size(self, codec, size):
        """Test payloads that are not 256 bytes are rejected."""
        with pytest.raises(ValueError):
            codec.encode(bytes(size))


class TestDecode:
    """Test sector denibblizing."""

    def test_all_zero_round_trip(self, codec):
        """Test the all-zero sector decodes with a zero checksum."""
        result = codec.decode(codec.encode(bytes(256)))
        assert result.data == bytes(256)
        assert result.checksum == 0
        assert result.checksum_valid

    def test_counting_pattern_round_trip(self):
        """Test a 0..255 payload survives encode and decode."""
        payload = bytes(range(256))
        result = decode_sector(encode_sector(payload))
        assert result.data == payload
        assert result.checksum_valid

    def test_random_payloads_round_trip(self, codec):
        """Test a few random payloads survive encode and decode."""
        rng = np.random.default_rng(6502)
        for _ in range(8):
            payload = rng.integers(0, 256, size=256, dtype=np.uint8).tobytes()
            assert codec.decode(codec.encode(payload)).data == payload

    def test_decode_at_offset(self, codec):
        """Test decoding a field embedded in a larger buffer."""
        payload = bytes(range(255, -1, -1))
        buffer = bytes([0xFF] * 10) + codec.encode(payload) + bytes([0xDE, 0xAA, 0xEB])
        assert codec.decode(buffer, 10).data == payload

    def test_bit_flip_reports_checksum_mismatch(self, codec):
        """Test flipping one bit of a data byte is caught by the checksum."""
        encoded = bytearray(codec.encode(bytes(256)))
        encoded[5] ^= 0x01           # 0x96 -> 0x97, still a disk byte
        result = codec.decode(encoded)
        assert not result.checksum_valid
        assert result.checksum == 1

    def test_substituted_byte_reports_checksum_mismatch(self, codec):
        """Test replacing one byte with another disk byte fails the checksum."""
        encoded = bytearray(codec.encode(bytes(range(256))))
        encoded[200] = DISK_BYTES[(DISK_BYTES.index(encoded[200]) + 1) % 64]
        assert not codec.decode(encoded).checksum_valid

    def test_invalid_byte_position_is_absolute(self, codec):
        """Test InvalidByteError carries the offset within the whole buffer."""
        buffer = bytearray([0xFF] * 10) + bytearray(codec.encode(bytes(256)))
        buffer[13] = 0x00
        with pytest.raises(InvalidByteError) as exc_info:
            codec.decode(buffer, 10)
        assert exc_info.value.position == 13
        assert exc_info.value.value == 0x00

    def test_short_input(self, codec):
        """Test fewer than 343 available bytes is rejected."""
        with pytest.raises(ValueError):
            codec.decode(bytes([0x96]) * 342)
