from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

from .chunk_event import DEFAULT_TIME_DIVISION, TimeFormat
from .track_chunk import HEADER_SIZE, TRACK_TAG, TrackChunk


@dataclass(frozen=True)
class Chunk:
    """One tagged chunk of a Standard MIDI File, header included."""

    tag: bytes
    offset: int
    raw: bytes

    @property
    def length(self) -> int:
        return int.from_bytes(self.raw[4:8], "big")

    @property
    def is_track(self) -> bool:
        return self.tag == TRACK_TAG


def iter_chunks(data: bytes) -> Iterator[Chunk]:
    """Split a whole file into its chunks without interpreting their bodies."""

    offset = 0
    while offset < len(data):
        if offset + HEADER_SIZE > len(data):
            raise ValueError(
                f"truncated chunk header at 0x{offset:X} "
                f"({len(data) - offset} bytes left)"
            )
        length = int.from_bytes(data[offset + 4 : offset + 8], "big")
        end = offset + HEADER_SIZE + length
        if end > len(data):
            raise ValueError(
                f"chunk at 0x{offset:X} declares {length} bytes, "
                f"only {len(data) - offset - HEADER_SIZE} available"
            )
        yield Chunk(tag=bytes(data[offset : offset + 4]), offset=offset, raw=bytes(data[offset:end]))
        offset = end


def track_chunks(
    data: bytes,
    *,
    time_format: TimeFormat = TimeFormat.TICKS_PER_BEAT,
    time_division: int = DEFAULT_TIME_DIVISION,
) -> List[TrackChunk]:
    """Return every ``MTrk`` chunk in ``data`` (empty tracks are skipped)."""

    tracks: List[TrackChunk] = []
    for chunk in iter_chunks(data):
        if not chunk.is_track or chunk.length == 0:
            continue
        tracks.append(
            TrackChunk.from_bytes(
                chunk.raw, time_format=time_format, time_division=time_division
            )
        )
    return tracks
