"""
Odd-even ("4-and-4") encoding for address field values.

Each 8-bit value is stored as two disk bytes. The first carries the odd bits
(shifted down) and the second the even bits, each interleaved with ones so
that the result is always a legal disk byte:

    value:    D7 D6 D5 D4 D3 D2 D1 D0
    byte 0:   1  D7 1  D5 1  D3 1  D1
    byte 1:   1  D6 1  D4 1  D2 1  D0
"""

from typing import Tuple


def odd_even_encode(value: int) -> Tuple[int, int]:
    """
    Encode one byte as two 4-and-4 disk bytes.

    Args:
        value: Byte to encode (0-255)

    Returns:
        Tuple of (odd_bits_byte, even_bits_byte)
    """
    return ((value >> 1) & 0x55) | 0xAA, (value & 0x55) | 0xAA


def odd_even_decode(byte1: int, byte2: int) -> int:
    """
    Decode two 4-and-4 disk bytes into one byte.

    Any pair of bytes is accepted; the filler bits are ignored.
    """
    return ((byte1 << 1) & 0xAA) | (byte2 & 0x55)
