"""
In-memory containers for logical (DSK) and nibble (NIB) disk images.

Both images are held as fixed-shape numpy arrays so that track and sector
access is a view into a single owned buffer:

    DiskImage.data   uint8[35, 16, 256]
    NibImage.data    uint8[35, 6656]
"""

import logging
from typing import List, Optional

import numpy as np

from nib_converter.codec.interleave import SECTORS_PER_TRACK
from nib_converter.codec.six_and_two import BYTES_PER_SECTOR
from nib_converter.codec.track_framer import BYTES_PER_NIB_TRACK

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

TRACKS_PER_DISK = 35
BYTES_PER_TRACK = SECTORS_PER_TRACK * BYTES_PER_SECTOR        # 4096
DSK_IMAGE_SIZE = TRACKS_PER_DISK * BYTES_PER_TRACK            # 143,360
NIB_IMAGE_SIZE = TRACKS_PER_DISK * BYTES_PER_NIB_TRACK        # 232,960


def _check_track(track: int) -> None:
    if not 0 <= track < TRACKS_PER_DISK:
        raise IndexError(f"Track {track} out of range 0-{TRACKS_PER_DISK - 1}")


def _check_sector(sector: int) -> None:
    if not 0 <= sector < SECTORS_PER_TRACK:
        raise IndexError(f"Sector {sector} out of range 0-{SECTORS_PER_TRACK - 1}")


# =============================================================================
# Logical Image
# =============================================================================

class DiskImage:
    """
    Logical 140K disk image: 35 tracks of 16 256-byte sectors in DOS order.
    """

    SHAPE = (TRACKS_PER_DISK, SECTORS_PER_TRACK, BYTES_PER_SECTOR)

    def __init__(self, data: Optional[np.ndarray] = None):
        if data is None:
            data = np.zeros(self.SHAPE, dtype=np.uint8)
        if data.shape != self.SHAPE or data.dtype != np.uint8:
            raise ValueError(
                f"DiskImage needs uint8 array of shape {self.SHAPE}, "
                f"got {data.dtype} {data.shape}"
            )
        self.data = data

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'DiskImage':
        """
        Build an image from a flat 143,360-byte buffer.

        Raises:
            ValueError: If raw has the wrong length
        """
        if len(raw) != DSK_IMAGE_SIZE:
            raise ValueError(f"DSK image must be {DSK_IMAGE_SIZE} bytes, got {len(raw)}")
        array = np.frombuffer(bytes(raw), dtype=np.uint8).reshape(cls.SHAPE).copy()
        return cls(array)

    @classmethod
    def from_tracks(cls, tracks: List[List[bytes]]) -> 'DiskImage':
        """Build an image from 35 lists of 16 sector payloads."""
        image = cls()
        if len(tracks) != TRACKS_PER_DISK:
            raise ValueError(f"DiskImage needs {TRACKS_PER_DISK} tracks, got {len(tracks)}")
        for track, sectors in enumerate(tracks):
            image.set_track(track, sectors)
        return image

    def to_bytes(self) -> bytes:
        """Flatten to the on-disk DSK layout."""
        return self.data.tobytes()

    def get_sector(self, track: int, sector: int) -> bytes:
        """Return one 256-byte logical sector."""
        _check_track(track)
        _check_sector(sector)
        return self.data[track, sector].tobytes()

    def set_sector(self, track: int, sector: int, payload: bytes) -> None:
        """Store one 256-byte logical sector."""
        _check_track(track)
        _check_sector(sector)
        if len(payload) != BYTES_PER_SECTOR:
            raise ValueError(f"Sector payload must be {BYTES_PER_SECTOR} bytes")
        self.data[track, sector] = np.frombuffer(bytes(payload), dtype=np.uint8)

    def track_sectors(self, track: int) -> List[bytes]:
        """Return the 16 payloads of a track in logical order."""
        _check_track(track)
        return [self.data[track, s].tobytes() for s in range(SECTORS_PER_TRACK)]

    def set_track(self, track: int, sectors: List[bytes]) -> None:
        """Store the 16 payloads of a track in logical order."""
        if len(sectors) != SECTORS_PER_TRACK:
            raise ValueError(f"Track needs {SECTORS_PER_TRACK} sectors, got {len(sectors)}")
        for sector, payload in enumerate(sectors):
            self.set_sector(track, sector, payload)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiskImage):
            return NotImplemented
        return bool(np.array_equal(self.data, other.data))

    def __len__(self) -> int:
        return DSK_IMAGE_SIZE


# =============================================================================
# Nibble Image
# =============================================================================

class NibImage:
    """
    Nibble disk image: 35 tracks of 6656 raw disk bytes.
    """

    SHAPE = (TRACKS_PER_DISK, BYTES_PER_NIB_TRACK)

    def __init__(self, data: Optional[np.ndarray] = None):
        if data is None:
            data = np.zeros(self.SHAPE, dtype=np.uint8)
        if data.shape != self.SHAPE or data.dtype != np.uint8:
            raise ValueError(
                f"NibImage needs uint8 array of shape {self.SHAPE}, "
                f"got {data.dtype} {data.shape}"
            )
        self.data = data

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'NibImage':
        """
        Build an image from a flat 232,960-byte buffer.

        Raises:
            ValueError: If raw has the wrong length
        """
        if len(raw) != NIB_IMAGE_SIZE:
            raise ValueError(f"NIB image must be {NIB_IMAGE_SIZE} bytes, got {len(raw)}")
        array = np.frombuffer(bytes(raw), dtype=np.uint8).reshape(cls.SHAPE).copy()
        return cls(array)

    def to_bytes(self) -> bytes:
        """Flatten to the on-disk NIB layout."""
        return self.data.tobytes()

    def get_track(self, track: int) -> bytes:
        """Return the 6656 raw bytes of a track."""
        _check_track(track)
        return self.data[track].tobytes()

    def set_track(self, track: int, raw: bytes) -> None:
        """Store the 6656 raw bytes of a track."""
        _check_track(track)
        if len(raw) != BYTES_PER_NIB_TRACK:
            raise ValueError(
                f"Nibble track must be {BYTES_PER_NIB_TRACK} bytes, got {len(raw)}"
            )
        self.data[track] = np.frombuffer(bytes(raw), dtype=np.uint8)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NibImage):
            return NotImplemented
        return bool(np.array_equal(self.data, other.data))

    def __len__(self) -> int:
        return NIB_IMAGE_SIZE
