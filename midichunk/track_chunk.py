"""Decode and recompose ``MTrk`` chunks.

Layout::

    "MTrk" | u32 BE length | (VLQ delta-time, event body)*

Both ``TrackChunk.events`` and ``TrackChunk.recompose`` walk the raw
buffer with the same state machine.  A truncated delta-time or an event
that cannot be classified ends the walk; whatever was decoded before that
point is kept.

Round-trip guarantee: ``TrackChunk.from_bytes(data).recompose() == data``
for every well-formed track chunk.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterator, List

from .chunk_event import DEFAULT_TIME_DIVISION, ChunkEvent, TimeFormat
from .classifier import Classification, EventKind, classify
from .vlq import VariableLengthQuantity, decode as decode_vlq

logger = logging.getLogger(__name__)

TRACK_TAG = b"MTrk"
HEADER_SIZE = 8


@dataclass(frozen=True)
class _Step:
    vlq: VariableLengthQuantity
    classification: Classification
    offset: int  # start of the event body within the event stream
    body: bytes
    time_offset: int


@dataclass(frozen=True)
class TrackChunk:
    raw_data: bytes
    time_format: TimeFormat = TimeFormat.TICKS_PER_BEAT
    time_division: int = DEFAULT_TIME_DIVISION

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        time_format: TimeFormat = TimeFormat.TICKS_PER_BEAT,
        time_division: int = DEFAULT_TIME_DIVISION,
    ) -> "TrackChunk":
        """Build a chunk from ``data``, which may extend past the chunk.

        Raises ValueError when the header is incomplete, the tag is not
        ``MTrk``, or the declared length runs past the end of ``data``.
        """
        if len(data) <= HEADER_SIZE:
            raise ValueError(
                f"chunk too short ({len(data)} bytes); need more than {HEADER_SIZE}"
            )
        if data[:4] != TRACK_TAG:
            raise ValueError(f"not a track chunk: tag {bytes(data[:4])!r}")
        length = int.from_bytes(data[4:8], "big")
        if length + HEADER_SIZE > len(data):
            raise ValueError(
                f"declared length {length} exceeds available "
                f"{len(data) - HEADER_SIZE} bytes"
            )
        if time_division <= 0:
            raise ValueError(f"time_division must be positive, got {time_division}")
        return cls(
            raw_data=bytes(data[: length + HEADER_SIZE]),
            time_format=time_format,
            time_division=time_division,
        )

    @classmethod
    def from_chunk(
        cls,
        chunk: "TrackChunk",
        time_format: TimeFormat,
        time_division: int,
    ) -> "TrackChunk":
        """Rebind an existing chunk to the timing read from a file header."""

        return cls.from_bytes(
            chunk.raw_data, time_format=time_format, time_division=time_division
        )

    @property
    def tag(self) -> bytes:
        return self.raw_data[:4]

    @property
    def declared_length(self) -> int:
        return int.from_bytes(self.raw_data[4:8], "big")

    @property
    def data(self) -> bytes:
        """The event stream, without the 8-byte header."""
        return self.raw_data[HEADER_SIZE:]

    def _walk(self) -> Iterator[_Step]:
        data = self.data
        processed = 0
        accumulated = 0
        running_status: int | None = None
        while processed < len(data):
            vlq = decode_vlq(data[processed:])
            if vlq is None:
                logger.debug(
                    "truncated delta-time at offset 0x%X; stopping",
                    processed + HEADER_SIZE,
                )
                return
            offset = processed + vlq.length
            classification = classify(data[offset:], running_status)
            if classification is None:
                logger.debug(
                    "unclassifiable event at offset 0x%X; stopping",
                    offset + HEADER_SIZE,
                )
                return
            yield _Step(
                vlq=vlq,
                classification=classification,
                offset=offset,
                body=data[offset : offset + classification.length],
                time_offset=accumulated,
            )
            processed = offset + classification.length
            accumulated += vlq.quantity
            running_status = classification.next_running_status

    def _event(self, step: _Step, body: bytes | None = None) -> ChunkEvent:
        return ChunkEvent(
            data=step.vlq.data + (step.body if body is None else body),
            time_division=self.time_division,
            time_offset=step.time_offset,
            running_status=step.classification.running_status,
            time_format=self.time_format,
        )

    def events(self) -> List[ChunkEvent]:
        """Return the decoded events in file order."""

        return [self._event(step) for step in self._walk()]

    def recompose(self, *, update_length: bool = False) -> bytes:
        """Re-emit the chunk from a fresh walk over ``raw_data``.

        With ``update_length`` the header length is rewritten to match the
        emitted event stream; otherwise the original header is kept.
        """
        out = bytearray(self.raw_data[:HEADER_SIZE])
        pending_trailing: bytes | None = None
        for step in self._walk():
            if pending_trailing is not None:
                # Already part of the previous SysEx; not a delta-time of its own.
                out += pending_trailing
                pending_trailing = None
            else:
                out += step.vlq.data

            if step.classification.kind is EventKind.SYSEX:
                # Some writers count the following delta-time inside the SysEx
                # length.  Those bytes are held back until the event they
                # precede decodes, so a dangling pair is dropped as usual.
                pending_trailing = self._sysex_trailing_vlq(step)

            out += self._event(step).raw_event_data

        if update_length:
            out[4:8] = (len(out) - HEADER_SIZE).to_bytes(4, "big")
        elif len(out) != len(self.raw_data):
            logger.warning(
                "recomposed %d of %d chunk bytes", len(out), len(self.raw_data)
            )
        return bytes(out)

    def _sysex_trailing_vlq(self, step: _Step) -> bytes | None:
        """Return the delta-time bytes a SysEx's declared length swallows.

        Applies only when the 0xF7 terminator comes before the declared end
        and the bytes between them are exactly the next delta-time.
        """
        message = step.classification.message
        declared_end = message.declared_end
        bound = len(message.data)
        if not message.terminated or declared_end is None or declared_end <= bound:
            return None

        scanned = self._event(
            step, self.data[step.offset : step.offset + declared_end]
        )
        bounded = scanned.trim(step.vlq.length + bound)
        trailing = scanned.raw_event_data[len(bounded.raw_event_data) :]
        next_vlq = decode_vlq(self.data[step.offset + bound :])
        if next_vlq is None or next_vlq.data != trailing:
            return None
        logger.debug(
            "SysEx at offset 0x%X declares %d bytes past its terminator",
            step.offset + HEADER_SIZE,
            len(trailing),
        )
        return trailing


def parse(
    data: bytes,
    *,
    time_format: TimeFormat = TimeFormat.TICKS_PER_BEAT,
    time_division: int = DEFAULT_TIME_DIVISION,
) -> TrackChunk | None:
    """Like ``TrackChunk.from_bytes`` but returns None for invalid input."""

    try:
        return TrackChunk.from_bytes(
            data, time_format=time_format, time_division=time_division
        )
    except ValueError as exc:
        logger.debug("rejecting track chunk: %s", exc)
        return None
