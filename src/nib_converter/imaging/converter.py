"""
Whole-image conversion between DSK and NIB.

Key Functions:
    encode: DiskImage -> NibImage
    decode: NibImage -> DiskImage
    decode_image: NibImage -> DiskImage plus a per-sector DecodeReport

Tracks carry no state from one to the next, so they can be converted by
several workers at once. Results are always assembled by track index.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, TypeVar

from nib_converter.codec import ChecksumMismatchError, NibError
from nib_converter.codec.six_and_two import SixAndTwoCodec
from nib_converter.codec.track_framer import TrackFramer
from nib_converter.codec.track_sync import TrackDecodeResult, TrackSynchronizer
from nib_converter.core.settings import ConverterSettings
from nib_converter.utils.logging import log_performance

from .disk_image import TRACKS_PER_DISK, DiskImage, NibImage

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class DecodeReport:
    """
    Summary of a NIB -> DSK conversion.

    Attributes:
        volume: Volume number recovered from the first address field
        tracks: Per-track decode results, in track order
    """
    volume: Optional[int] = None
    tracks: List[TrackDecodeResult] = field(default_factory=list)

    @property
    def good_sectors(self) -> int:
        """Number of sectors with both checksums valid."""
        return sum(1 for t in self.tracks for s in t.sectors.values() if s.is_good)

    @property
    def checksum_errors(self) -> List[Tuple[int, int]]:
        """(track, logical sector) pairs whose data checksum failed."""
        return [(t.track, s) for t in self.tracks for s in t.checksum_errors]

    @property
    def missing_sectors(self) -> List[Tuple[int, int]]:
        """(track, logical sector) pairs never found."""
        return [(t.track, s) for t in self.tracks for s in t.missing_sectors]

    @property
    def warnings(self) -> List[str]:
        """All track warnings, prefixed with their track number."""
        return [f"T:{t.track:02d} {w}" for t in self.tracks for w in t.warnings]

    @property
    def is_clean(self) -> bool:
        """Check that every sector of every track decoded cleanly."""
        return all(t.is_complete for t in self.tracks)


@dataclass
class DecodeResult:
    """Decoded logical image plus its report."""
    image: DiskImage
    report: DecodeReport


# =============================================================================
# Helpers
# =============================================================================

def _run_tracks(func: Callable[[int], T], workers: int) -> List[T]:
    """Run func for every track, returning results in track order."""
    if workers <= 1:
        return [func(track) for track in range(TRACKS_PER_DISK)]
    with ThreadPoolExecutor(max_workers=workers,
                            thread_name_prefix="nib-track") as pool:
        return list(pool.map(func, range(TRACKS_PER_DISK)))


# =============================================================================
# Conversion Entry Points
# =============================================================================

def encode(disk_image: DiskImage, volume: Optional[int] = None,
           settings: Optional[ConverterSettings] = None) -> NibImage:
    """
    Convert a logical image into a nibble image.

    Args:
        disk_image: Source 35-track logical image
        volume: Volume number for the address fields; defaults to
            settings.volume (254)
        settings: Optional conversion settings

    Returns:
        NibImage with all 35 tracks encoded

    Raises:
        ValueError: If volume is outside 0-255

    Example:
        image = read_disk_image("disk.dsk")
        nib = encode(image, volume=254)
        write_image(nib, "disk.nib")
    """
    settings = settings or ConverterSettings()
    if volume is None:
        volume = settings.volume

    framer = TrackFramer(volume, SixAndTwoCodec())
    start = time.perf_counter()

    tracks = _run_tracks(
        lambda track: framer.encode_track(track, disk_image.track_sectors(track)),
        settings.workers,
    )

    nib_image = NibImage()
    for track, raw in enumerate(tracks):
        nib_image.set_track(track, raw)

    log_performance("encode", time.perf_counter() - start,
                    tracks=TRACKS_PER_DISK, volume=volume)
    return nib_image


def decode_image(nib_image: NibImage,
                 settings: Optional[ConverterSettings] = None) -> DecodeResult:
    """
    Convert a nibble image into a logical image with a decode report.

    Damaged sectors are reported, not raised, unless settings.strict is set.

    Args:
        nib_image: Source 35-track nibble image
        settings: Optional conversion settings

    Returns:
        DecodeResult holding the DiskImage and DecodeReport

    Raises:
        TruncatedError: If a track ends inside a field
        InvalidByteError: If a data field holds an illegal disk byte
        MarkMismatchError: If a data epilog is corrupt
        ChecksumMismatchError: In strict mode, if a data checksum failed
        NibError: In strict mode, if a sector is missing
    """
    settings = settings or ConverterSettings()
    codec = SixAndTwoCodec()
    start = time.perf_counter()

    results = _run_tracks(
        lambda track: TrackSynchronizer(track, codec).decode(nib_image.get_track(track)),
        settings.workers,
    )

    image = DiskImage()
    report = DecodeReport(tracks=results)
    for result in results:
        image.set_track(result.track, result.payloads())
        if result.volume is None:
            continue
        if report.volume is None:
            report.volume = result.volume
        elif result.volume != report.volume:
            result.warn(f"volume {result.volume} differs from {report.volume}")

    for track, sector in report.missing_sectors:
        logger.warning("T:%02d S:%02d not found, zero-filled", track, sector)

    if settings.strict:
        _check_strict(report)

    log_performance("decode", time.perf_counter() - start,
                    tracks=TRACKS_PER_DISK, good=report.good_sectors,
                    checksum_errors=len(report.checksum_errors),
                    missing=len(report.missing_sectors))
    return DecodeResult(image=image, report=report)


def decode(nib_image: NibImage,
           settings: Optional[ConverterSettings] = None) -> DiskImage:
    """
    Convert a nibble image into a logical image.

    The volume number is recovered from the stream. See decode_image for
    the report and the exceptions raised.
    """
    return decode_image(nib_image, settings).image


def _check_strict(report: DecodeReport) -> None:
    for result in report.tracks:
        for logical in result.checksum_errors:
            sector = result.sectors[logical]
            raise ChecksumMismatchError("data", 0, sector.data_checksum,
                                        result.track, sector.sector)
    if report.missing_sectors:
        track, sector = report.missing_sectors[0]
        raise NibError("Sector not found", track, sector)
