"""A single decoded event inside a track chunk.

``data`` is the delta-time VLQ followed by the event bytes as they appear
in the file.  When the event relied on running status its status byte is
absent from ``data`` and recorded in ``running_status`` instead; use
``computed_data`` for a self-contained copy of the message.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .classifier import Classification, EventKind, Message, classify
from .messages import META_PREFIX, StatusMessage, SystemCommand
from .vlq import VariableLengthQuantity, decode as decode_vlq

DEFAULT_TIME_DIVISION = 480


class TimeFormat(Enum):
    TICKS_PER_BEAT = "ticks_per_beat"
    FRAMES_PER_SECOND = "frames_per_second"


def split_time_division(division: int) -> tuple[TimeFormat, int]:
    """Interpret the 16-bit division word of a file header.

    With bit 15 clear the word is ticks per beat.  With it set the high
    byte is a negative SMPTE frame rate and the low byte ticks per frame;
    the returned division is then ticks per second, so ``position`` reads
    in seconds.
    """
    if not division & 0x8000:
        return TimeFormat.TICKS_PER_BEAT, division
    frames = 256 - (division >> 8)
    ticks_per_frame = division & 0xFF
    return TimeFormat.FRAMES_PER_SECOND, frames * ticks_per_frame


@dataclass(frozen=True)
class ChunkEvent:
    data: bytes
    time_division: int = DEFAULT_TIME_DIVISION
    time_offset: int = 0  # ticks accumulated from earlier events in the track
    running_status: int | None = None
    time_format: TimeFormat = TimeFormat.TICKS_PER_BEAT

    @property
    def vlq(self) -> VariableLengthQuantity | None:
        return decode_vlq(self.data)

    @property
    def time_length(self) -> int:
        vlq = self.vlq
        return vlq.length if vlq is not None else 0

    @property
    def delta_time(self) -> int:
        vlq = self.vlq
        return vlq.quantity if vlq is not None else 0

    @property
    def absolute_time(self) -> int:
        return self.delta_time + self.time_offset

    @property
    def position(self) -> float:
        """Absolute time in beats."""
        return self.absolute_time / self.time_division

    @property
    def raw_event_data(self) -> bytes:
        return self.data[self.time_length :]

    @property
    def computed_data(self) -> bytes:
        if self.running_status is not None:
            return bytes([self.running_status]) + self.raw_event_data
        return self.raw_event_data

    @property
    def type_index(self) -> int | None:
        """Index into ``data`` of the byte that names this event."""
        start = self.time_length
        if len(self.data) <= start:
            return None
        byte = self.data[start]
        if byte == META_PREFIX and len(self.data) > start + 1:
            return start + 1
        if StatusMessage.from_byte(byte) is not None:
            return start
        if SystemCommand.from_byte(byte) is not None:
            return start
        return None

    @property
    def type_byte(self) -> int | None:
        if self.running_status is not None:
            return self.running_status
        index = self.type_index
        if index is None:
            return None
        return self.data[index]

    @property
    def classification(self) -> Classification | None:
        return classify(self.raw_event_data, self.running_status)

    @property
    def kind(self) -> EventKind | None:
        classification = self.classification
        return classification.kind if classification is not None else None

    @property
    def event(self) -> Message | None:
        classification = self.classification
        return classification.message if classification is not None else None

    @property
    def is_meta(self) -> bool:
        return self.kind is EventKind.META

    @property
    def is_sysex(self) -> bool:
        return self.kind is EventKind.SYSEX

    @property
    def length(self) -> int:
        """Body length of the event.

        Meta events report their payload length, SysEx messages their
        declared length, status messages and system commands their full
        message length (including a status byte implied by running status).
        """
        classification = self.classification
        if classification is None:
            return 0
        return classification.message.length

    def trim(self, length: int) -> "ChunkEvent":
        """Return a copy whose ``data`` keeps only the first ``length`` bytes."""

        if length < 0 or length > len(self.data):
            raise ValueError(
                f"trim length {length} outside 0..{len(self.data)}"
            )
        return replace(self, data=self.data[:length])

    def describe(self) -> str:
        message = self.event
        label = message.describe() if message is not None else "unknown"
        type_byte = self.type_byte
        type_text = f"0x{type_byte:02X}" if type_byte is not None else "--"
        prefix = "*" if self.running_status is not None else " "
        return (
            f"{self.absolute_time:>8} {self.position:>9.3f} {prefix}{type_text} "
            f"{label:<24} {self.computed_data.hex(' ')}"
        )
