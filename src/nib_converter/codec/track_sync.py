"""
Nibble track synchronizer.

Recovers sector payloads from the raw byte stream of one nibble track. The
stream is scanned with a finite state machine that locates the address
prolog, decodes the 4-and-4 address field, locates the data prolog, decodes
the 6-and-2 data field and checks the data epilog:

    SCAN_ADDR_PROLOG -> MATCH_ADDR_PROLOG_2 -> MATCH_ADDR_PROLOG_3
    -> READ_VOLUME -> READ_TRACK -> READ_SECTOR -> READ_CHECKSUM
    -> MATCH_ADDR_EPILOG_1 -> MATCH_ADDR_EPILOG_2
    -> SCAN_DATA_PROLOG -> MATCH_DATA_PROLOG_2 -> MATCH_DATA_PROLOG_3
    -> PROCESS_DATA -> SCAN_DATA_EPILOG_1
    -> MATCH_DATA_EPILOG_2 -> MATCH_DATA_EPILOG_3 -> SCAN_ADDR_PROLOG

Each state handler looks at the current byte only and returns a Transition
tagged CONTINUE, RESYNC or FATAL. A mismatch while matching the address
prolog or epilog drops back to SCAN_ADDR_PROLOG, a mismatch in the data
prolog drops back to SCAN_DATA_PROLOG, and in both cases the offending byte
is examined again by the scan state. A mismatch in the data epilog is fatal.

Running out of bytes in SCAN_ADDR_PROLOG ends the track; running out
anywhere else raises TruncatedError.

Key Classes:
    TrackSynchronizer: Track decoder
    TrackDecodeResult: Sectors recovered from one track
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Sequence

from . import (
    DecodedSector,
    InvalidByteError,
    MarkMismatchError,
    NibError,
    SectorStatus,
    TruncatedError,
)
from .interleave import SECTORS_PER_TRACK, logical_sector_for
from .odd_even import odd_even_decode
from .six_and_two import BYTES_PER_SECTOR, ENCODED_SECTOR_LEN, SixAndTwoCodec
from .track_framer import (
    ADDR_EPILOG,
    ADDR_PROLOG,
    BYTES_PER_NIB_TRACK,
    DATA_EPILOG,
    DATA_PROLOG,
)

logger = logging.getLogger(__name__)


# Streams longer than this are rejected before scanning starts
MAX_TRACK_STREAM_LEN = BYTES_PER_NIB_TRACK * 2


# =============================================================================
# State Machine Types
# =============================================================================

class SyncState(Enum):
    """Field recognition states."""
    SCAN_ADDR_PROLOG = auto()
    MATCH_ADDR_PROLOG_2 = auto()
    MATCH_ADDR_PROLOG_3 = auto()
    READ_VOLUME = auto()
    READ_TRACK = auto()
    READ_SECTOR = auto()
    READ_CHECKSUM = auto()
    MATCH_ADDR_EPILOG_1 = auto()
    MATCH_ADDR_EPILOG_2 = auto()
    SCAN_DATA_PROLOG = auto()
    MATCH_DATA_PROLOG_2 = auto()
    MATCH_DATA_PROLOG_3 = auto()
    PROCESS_DATA = auto()
    SCAN_DATA_EPILOG_1 = auto()
    MATCH_DATA_EPILOG_2 = auto()
    MATCH_DATA_EPILOG_3 = auto()
    DONE = auto()


class Outcome(Enum):
    """Result tag of a single state transition."""
    CONTINUE = auto()   # Field recognition proceeds
    RESYNC = auto()     # Mismatch, fall back to a scan state
    FATAL = auto()      # Framing lost, abort the track


@dataclass
class Transition:
    """Next state plus the outcome that led to it."""
    outcome: Outcome
    state: SyncState
    error: Optional[NibError] = None


class _Cursor:
    """Forward-only byte cursor over a track stream."""

    def __init__(self, data: Sequence[int]):
        self.data = data
        self.position = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.data)

    @property
    def remaining(self) -> int:
        return max(0, len(self.data) - self.position)

    def peek(self) -> Optional[int]:
        if self.exhausted:
            return None
        return self.data[self.position]

    def advance(self, count: int = 1) -> None:
        self.position += count


@dataclass
class _FieldContext:
    """Values recovered for the sector currently being read."""
    volume: int = 0
    track: int = 0
    sector: Optional[int] = None
    checksum: int = 0
    address_checksum_valid: bool = True
    committed: Optional[DecodedSector] = None
    skipped: int = 0


# =============================================================================
# Decode Result
# =============================================================================

@dataclass
class TrackDecodeResult:
    """
    Sectors recovered from one nibble track.

    Attributes:
        track: Track index the stream was read from
        sectors: Decoded sectors keyed by logical (DOS order) sector
        volume: Volume number from the first address field seen
        resyncs: Number of mark mismatches that restarted a scan
        warnings: Human-readable warnings raised while decoding
    """
    track: int
    sectors: Dict[int, DecodedSector] = field(default_factory=dict)
    volume: Optional[int] = None
    resyncs: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def missing_sectors(self) -> List[int]:
        """Logical sectors with no decoded data."""
        return [s for s in range(SECTORS_PER_TRACK) if s not in self.sectors]

    @property
    def checksum_errors(self) -> List[int]:
        """Logical sectors whose data checksum failed."""
        return sorted(s for s, sector in self.sectors.items()
                      if not sector.data_checksum_valid)

    @property
    def is_complete(self) -> bool:
        """Check that all 16 sectors decoded cleanly."""
        return (not self.missing_sectors
                and all(s.is_good for s in self.sectors.values()))

    def payloads(self) -> List[bytes]:
        """Return the 16 logical payloads, zero-filling missing sectors."""
        return [
            self.sectors[s].data if s in self.sectors else bytes(BYTES_PER_SECTOR)
            for s in range(SECTORS_PER_TRACK)
        ]

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning("T:%02d %s", self.track, message)


# =============================================================================
# Track Synchronizer
# =============================================================================

class TrackSynchronizer:
    """
    Decoder for DOS 3.3 nibble tracks.

    An instance decodes a single track; field recognition context is never
    carried from one track to the next.
    """

    def __init__(self, track: int, codec: Optional[SixAndTwoCodec] = None,
                 max_length: int = MAX_TRACK_STREAM_LEN):
        """
        Initialize synchronizer.

        Args:
            track: Index of the track being decoded, used for placement
                and error context
            codec: Optional 6-and-2 codec instance to share
            max_length: Longest stream accepted
        """
        self.track = track
        self.codec = codec or SixAndTwoCodec()
        self.max_length = max_length

        self._handlers: Dict[SyncState, Callable[[_Cursor], Transition]] = {
            SyncState.SCAN_ADDR_PROLOG: self._scan_addr_prolog,
            SyncState.MATCH_ADDR_PROLOG_2: self._match_addr_prolog_2,
            SyncState.MATCH_ADDR_PROLOG_3: self._match_addr_prolog_3,
            SyncState.READ_VOLUME: self._read_volume,
            SyncState.READ_TRACK: self._read_track,
            SyncState.READ_SECTOR: self._read_sector,
            SyncState.READ_CHECKSUM: self._read_checksum,
            SyncState.MATCH_ADDR_EPILOG_1: self._match_addr_epilog_1,
            SyncState.MATCH_ADDR_EPILOG_2: self._match_addr_epilog_2,
            SyncState.SCAN_DATA_PROLOG: self._scan_data_prolog,
            SyncState.MATCH_DATA_PROLOG_2: self._match_data_prolog_2,
            SyncState.MATCH_DATA_PROLOG_3: self._match_data_prolog_3,
            SyncState.PROCESS_DATA: self._process_data,
            SyncState.SCAN_DATA_EPILOG_1: self._scan_data_epilog_1,
            SyncState.MATCH_DATA_EPILOG_2: self._match_data_epilog_2,
            SyncState.MATCH_DATA_EPILOG_3: self._match_data_epilog_3,
        }

        self._ctx = _FieldContext()
        self._result = TrackDecodeResult(track=track)

    # =========================================================================
    # Driver
    # =========================================================================

    def decode(self, data: Sequence[int]) -> TrackDecodeResult:
        """
        Decode all sectors in a track stream.

        Args:
            data: Raw nibble bytes of one track

        Returns:
            TrackDecodeResult with the sectors found

        Raises:
            ValueError: If data is longer than max_length
            TruncatedError: If the stream ends inside a field
            InvalidByteError: If a data field holds an illegal disk byte
            MarkMismatchError: If the data epilog is corrupt
        """
        if len(data) > self.max_length:
            raise ValueError(
                f"Track {self.track} stream is {len(data)} bytes, "
                f"limit is {self.max_length}"
            )

        self._ctx = _FieldContext()
        self._result = TrackDecodeResult(track=self.track)
        cursor = _Cursor(data)
        state = SyncState.SCAN_ADDR_PROLOG

        while state is not SyncState.DONE:
            if cursor.exhausted and state is SyncState.SCAN_ADDR_PROLOG:
                state = SyncState.DONE
                break

            transition = self._handlers[state](cursor)

            if transition.outcome is Outcome.FATAL:
                raise transition.error
            if transition.outcome is Outcome.RESYNC:
                self._result.resyncs += 1
                logger.debug(
                    "T:%02d resync %s -> %s at offset %d",
                    self.track, state.name, transition.state.name, cursor.position
                )
            state = transition.state

        logger.debug(
            "T:%02d decoded %d sectors (%d resyncs)",
            self.track, len(self._result.sectors), self._result.resyncs
        )
        return self._result

    # =========================================================================
    # Helpers
    # =========================================================================

    def _truncated(self, state: SyncState, cursor: _Cursor) -> Transition:
        return Transition(
            Outcome.FATAL, state,
            TruncatedError(state.name, cursor.position, self.track, self._ctx.sector),
        )

    def _match(self, cursor: _Cursor, state: SyncState, expected: int,
               on_match: SyncState, on_mismatch: SyncState) -> Transition:
        """Accept one mark byte, or fall back to a scan state without consuming it."""
        byte = cursor.peek()
        if byte is None:
            return self._truncated(state, cursor)
        if byte == expected:
            cursor.advance()
            return Transition(Outcome.CONTINUE, on_match)
        return Transition(Outcome.RESYNC, on_mismatch)

    def _read_pair(self, cursor: _Cursor) -> Optional[int]:
        """Read and decode one 4-and-4 value, or None if the stream ends."""
        if cursor.remaining < 2:
            cursor.advance(cursor.remaining)
            return None
        byte1 = cursor.peek()
        cursor.advance()
        byte2 = cursor.peek()
        cursor.advance()
        return odd_even_decode(byte1, byte2)

    # =========================================================================
    # Address Field States
    # =========================================================================

    def _scan_addr_prolog(self, cursor: _Cursor) -> Transition:
        byte = cursor.peek()
        cursor.advance()
        if byte == ADDR_PROLOG[0]:
            self._ctx = _FieldContext()
            return Transition(Outcome.CONTINUE, SyncState.MATCH_ADDR_PROLOG_2)
        return Transition(Outcome.CONTINUE, SyncState.SCAN_ADDR_PROLOG)

    def _match_addr_prolog_2(self, cursor: _Cursor) -> Transition:
        return self._match(cursor, SyncState.MATCH_ADDR_PROLOG_2, ADDR_PROLOG[1],
                           SyncState.MATCH_ADDR_PROLOG_3, SyncState.SCAN_ADDR_PROLOG)

    def _match_addr_prolog_3(self, cursor: _Cursor) -> Transition:
        return self._match(cursor, SyncState.MATCH_ADDR_PROLOG_3, ADDR_PROLOG[2],
                           SyncState.READ_VOLUME, SyncState.SCAN_ADDR_PROLOG)

    def _read_volume(self, cursor: _Cursor) -> Transition:
        value = self._read_pair(cursor)
        if value is None:
            return self._truncated(SyncState.READ_VOLUME, cursor)
        self._ctx.volume = value
        return Transition(Outcome.CONTINUE, SyncState.READ_TRACK)

    def _read_track(self, cursor: _Cursor) -> Transition:
        value = self._read_pair(cursor)
        if value is None:
            return self._truncated(SyncState.READ_TRACK, cursor)
        self._ctx.track = value
        return Transition(Outcome.CONTINUE, SyncState.READ_SECTOR)

    def _read_sector(self, cursor: _Cursor) -> Transition:
        value = self._read_pair(cursor)
        if value is None:
            return self._truncated(SyncState.READ_SECTOR, cursor)
        if value >= SECTORS_PER_TRACK:
            self._result.warn(f"address field sector {value:02x} out of range, resync")
            return Transition(Outcome.RESYNC, SyncState.SCAN_ADDR_PROLOG)
        self._ctx.sector = value
        return Transition(Outcome.CONTINUE, SyncState.READ_CHECKSUM)

    def _read_checksum(self, cursor: _Cursor) -> Transition:
        value = self._read_pair(cursor)
        if value is None:
            return self._truncated(SyncState.READ_CHECKSUM, cursor)

        ctx = self._ctx
        ctx.checksum = value
        expected = ctx.volume ^ ctx.track ^ ctx.sector
        logger.debug(
            "V:%02x T:%02x S:%02x C:%02x",
            ctx.volume, ctx.track, ctx.sector, ctx.checksum
        )
        if value != expected:
            ctx.address_checksum_valid = False
            self._result.warn(
                f"S:{ctx.sector:02d} address checksum mismatch "
                f"(expected {expected:02x}, got {value:02x})"
            )
        return Transition(Outcome.CONTINUE, SyncState.MATCH_ADDR_EPILOG_1)

    def _match_addr_epilog_1(self, cursor: _Cursor) -> Transition:
        return self._match_addr_epilog(cursor, SyncState.MATCH_ADDR_EPILOG_1,
                                       ADDR_EPILOG[0], SyncState.MATCH_ADDR_EPILOG_2)

    def _match_addr_epilog_2(self, cursor: _Cursor) -> Transition:
        return self._match_addr_epilog(cursor, SyncState.MATCH_ADDR_EPILOG_2,
                                       ADDR_EPILOG[1], SyncState.SCAN_DATA_PROLOG)

    def _match_addr_epilog(self, cursor: _Cursor, state: SyncState,
                           expected: int, on_match: SyncState) -> Transition:
        transition = self._match(cursor, state, expected, on_match,
                                 SyncState.SCAN_ADDR_PROLOG)
        if transition.outcome is Outcome.RESYNC:
            self._result.warn(
                f"S:{self._ctx.sector:02d} address epilog mismatch "
                f"({cursor.peek():02x}), reset"
            )
        return transition

    # =========================================================================
    # Data Field States
    # =========================================================================

    def _scan_data_prolog(self, cursor: _Cursor) -> Transition:
        byte = cursor.peek()
        if byte is None:
            return self._truncated(SyncState.SCAN_DATA_PROLOG, cursor)
        cursor.advance()
        if byte == DATA_PROLOG[0]:
            return Transition(Outcome.CONTINUE, SyncState.MATCH_DATA_PROLOG_2)
        return Transition(Outcome.CONTINUE, SyncState.SCAN_DATA_PROLOG)

    def _match_data_prolog_2(self, cursor: _Cursor) -> Transition:
        return self._match(cursor, SyncState.MATCH_DATA_PROLOG_2, DATA_PROLOG[1],
                           SyncState.MATCH_DATA_PROLOG_3, SyncState.SCAN_DATA_PROLOG)

    def _match_data_prolog_3(self, cursor: _Cursor) -> Transition:
        return self._match(cursor, SyncState.MATCH_DATA_PROLOG_3, DATA_PROLOG[2],
                           SyncState.PROCESS_DATA, SyncState.SCAN_DATA_PROLOG)

    def _process_data(self, cursor: _Cursor) -> Transition:
        ctx = self._ctx
        if cursor.remaining < ENCODED_SECTOR_LEN:
            cursor.advance(cursor.remaining)
            return self._truncated(SyncState.PROCESS_DATA, cursor)

        try:
            decoded = self.codec.decode(cursor.data, cursor.position)
        except InvalidByteError as e:
            error = InvalidByteError(e.value, e.position, self.track, ctx.sector)
            return Transition(Outcome.FATAL, SyncState.PROCESS_DATA, error)
        cursor.advance(ENCODED_SECTOR_LEN)

        if not decoded.checksum_valid:
            self._result.warn(f"S:{ctx.sector:02d} data checksum mismatch")

        if ctx.track != self.track:
            self._result.warn(
                f"S:{ctx.sector:02d} address field names track {ctx.track}"
            )

        if decoded.checksum_valid and ctx.address_checksum_valid:
            status = SectorStatus.GOOD
        elif decoded.checksum_valid:
            status = SectorStatus.ADDRESS_ERROR
        else:
            status = SectorStatus.CHECKSUM_ERROR

        logical = logical_sector_for(ctx.sector)
        if logical in self._result.sectors:
            self._result.warn(f"S:{ctx.sector:02d} seen twice, keeping the later copy")

        sector = DecodedSector(
            track=self.track,
            sector=ctx.sector,
            logical_sector=logical,
            volume=ctx.volume,
            data=decoded.data,
            status=status,
            address_checksum_valid=ctx.address_checksum_valid,
            data_checksum_valid=decoded.checksum_valid,
            data_checksum=decoded.checksum,
        )
        self._result.sectors[logical] = sector
        if self._result.volume is None:
            self._result.volume = ctx.volume
        ctx.committed = sector
        ctx.skipped = 0
        return Transition(Outcome.CONTINUE, SyncState.SCAN_DATA_EPILOG_1)

    def _scan_data_epilog_1(self, cursor: _Cursor) -> Transition:
        ctx = self._ctx
        byte = cursor.peek()
        if byte is None:
            return self._truncated(SyncState.SCAN_DATA_EPILOG_1, cursor)
        cursor.advance()
        if byte != DATA_EPILOG[0]:
            ctx.skipped += 1
            return Transition(Outcome.CONTINUE, SyncState.SCAN_DATA_EPILOG_1)

        if ctx.skipped:
            self._result.warn(
                f"S:{ctx.sector:02d} skipped {ctx.skipped} extra bytes before data epilog"
            )
            if ctx.committed is not None:
                ctx.committed.skipped_bytes = ctx.skipped
        return Transition(Outcome.CONTINUE, SyncState.MATCH_DATA_EPILOG_2)

    def _match_data_epilog_2(self, cursor: _Cursor) -> Transition:
        return self._match_data_epilog(cursor, SyncState.MATCH_DATA_EPILOG_2,
                                       DATA_EPILOG[1], SyncState.MATCH_DATA_EPILOG_3)

    def _match_data_epilog_3(self, cursor: _Cursor) -> Transition:
        return self._match_data_epilog(cursor, SyncState.MATCH_DATA_EPILOG_3,
                                       DATA_EPILOG[2], SyncState.SCAN_ADDR_PROLOG)

    def _match_data_epilog(self, cursor: _Cursor, state: SyncState,
                           expected: int, on_match: SyncState) -> Transition:
        byte = cursor.peek()
        if byte is None:
            return self._truncated(state, cursor)
        if byte != expected:
            return Transition(
                Outcome.FATAL, state,
                MarkMismatchError("data epilog", expected, byte, cursor.position,
                                  self.track, self._ctx.sector),
            )
        cursor.advance()
        return Transition(Outcome.CONTINUE, on_match)


def decode_track(track: int, data: Sequence[int],
                 codec: Optional[SixAndTwoCodec] = None) -> TrackDecodeResult:
    """
    Decode one nibble track.

    Example:
        result = decode_track(17, raw_track)
        for logical, sector in sorted(result.sectors.items()):
            print(logical, sector.status.name)
    """
    return TrackSynchronizer(track, codec).decode(data)
