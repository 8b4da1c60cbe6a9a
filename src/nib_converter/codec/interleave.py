"""
DOS 3.3 sector interleave tables.

A nibble track is written in "write order" k = 0..15. The address field of
the k-th sector carries k as its sector number; its payload is logical (DOS
order) sector SOFT_INTERLEAVE[k], and the sector record is stored at
physical slot PHYS_INTERLEAVE[k] of the track.

When reading a track back, placement is driven by the sector number found in
the address field, never by position on the track.
"""

from typing import Tuple


SECTORS_PER_TRACK = 16

# Write order -> logical (DOS order) sector
SOFT_INTERLEAVE: Tuple[int, ...] = (
    0x0, 0x7, 0xE, 0x6, 0xD, 0x5, 0xC, 0x4,
    0xB, 0x3, 0xA, 0x2, 0x9, 0x1, 0x8, 0xF,
)

# Write order -> physical slot on the track
PHYS_INTERLEAVE: Tuple[int, ...] = (
    0x0, 0xD, 0xB, 0x9, 0x7, 0x5, 0x3, 0x1,
    0xE, 0xC, 0xA, 0x8, 0x6, 0x4, 0x2, 0xF,
)


def logical_sector_for(sector: int) -> int:
    """
    Map an address-field sector number to its logical image slot.

    Raises:
        ValueError: If sector is outside 0-15
    """
    if not 0 <= sector < SECTORS_PER_TRACK:
        raise ValueError(f"Sector number {sector} out of range 0-{SECTORS_PER_TRACK - 1}")
    return SOFT_INTERLEAVE[sector]


def physical_slot_for(sector: int) -> int:
    """Map a write-order sector number to its physical slot on the track."""
    if not 0 <= sector < SECTORS_PER_TRACK:
        raise ValueError(f"Sector number {sector} out of range 0-{SECTORS_PER_TRACK - 1}")
    return PHYS_INTERLEAVE[sector]
