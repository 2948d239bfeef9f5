"""Message shapes that can appear inside a track chunk.

Channel voice status bytes (0x80-0xEF) carry a fixed length keyed by the
high nibble:

  0x8  note off              3 bytes
  0x9  note on               3 bytes
  0xA  polyphonic aftertouch 3 bytes
  0xB  controller change     3 bytes
  0xC  program change        2 bytes
  0xD  channel aftertouch    2 bytes
  0xE  pitch wheel           3 bytes

System bytes (0xF0-0xFF) are matched exactly.  Inside a file 0xFF starts a
meta event (``FF type VLQ-length payload``) and 0xF0 starts a SysEx message
that runs to its 0xF7 terminator.  0xF7 at the start of an event is an
escape packet bounded by its declared VLQ length.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict

from .vlq import decode as decode_vlq

META_PREFIX = 0xFF
SYSEX_START = 0xF0
SYSEX_END = 0xF7


class StatusType(IntEnum):
    NOTE_OFF = 0x8
    NOTE_ON = 0x9
    POLYPHONIC_AFTERTOUCH = 0xA
    CONTROLLER_CHANGE = 0xB
    PROGRAM_CHANGE = 0xC
    CHANNEL_AFTERTOUCH = 0xD
    PITCH_WHEEL = 0xE

    @property
    def length(self) -> int:
        return STATUS_LENGTHS[self]


STATUS_LENGTHS: Dict[StatusType, int] = {
    StatusType.NOTE_OFF: 3,
    StatusType.NOTE_ON: 3,
    StatusType.POLYPHONIC_AFTERTOUCH: 3,
    StatusType.CONTROLLER_CHANGE: 3,
    StatusType.PROGRAM_CHANGE: 2,
    StatusType.CHANNEL_AFTERTOUCH: 2,
    StatusType.PITCH_WHEEL: 3,
}


@dataclass(frozen=True)
class StatusMessage:
    """A channel voice status byte."""

    byte: int

    @classmethod
    def from_byte(cls, byte: int) -> "StatusMessage | None":
        if 0x80 <= byte <= 0xEF:
            return cls(byte=byte)
        return None

    @property
    def type(self) -> StatusType:
        return StatusType(self.byte >> 4)

    @property
    def channel(self) -> int:
        return self.byte & 0x0F

    @property
    def length(self) -> int:
        return self.type.length

    def describe(self) -> str:
        return f"{self.type.name.lower()} ch={self.channel + 1}"


class SystemCommand(IntEnum):
    SYSEX = 0xF0
    TIME_CODE_QUARTER_FRAME = 0xF1
    SONG_POSITION = 0xF2
    SONG_SELECT = 0xF3
    TUNE_REQUEST = 0xF6
    SYSEX_END = 0xF7
    CLOCK = 0xF8
    START = 0xFA
    CONTINUE = 0xFB
    STOP = 0xFC
    ACTIVE_SENSING = 0xFE
    SYSTEM_RESET = 0xFF

    @classmethod
    def from_byte(cls, byte: int) -> "SystemCommand | None":
        try:
            return cls(byte)
        except ValueError:
            return None

    @property
    def length(self) -> int | None:
        """Fixed message length, or None when the data decides (SysEx)."""
        return SYSTEM_COMMAND_LENGTHS[self]

    @property
    def is_realtime(self) -> bool:
        return self >= SystemCommand.CLOCK

    def describe(self) -> str:
        return self.name.lower()


SYSTEM_COMMAND_LENGTHS: Dict[SystemCommand, int | None] = {
    SystemCommand.SYSEX: None,
    SystemCommand.TIME_CODE_QUARTER_FRAME: 2,
    SystemCommand.SONG_POSITION: 3,
    SystemCommand.SONG_SELECT: 2,
    SystemCommand.TUNE_REQUEST: 1,
    SystemCommand.SYSEX_END: 1,
    SystemCommand.CLOCK: 1,
    SystemCommand.START: 1,
    SystemCommand.CONTINUE: 1,
    SystemCommand.STOP: 1,
    SystemCommand.ACTIVE_SENSING: 1,
    SystemCommand.SYSTEM_RESET: 1,
}


META_TYPE_NAMES: Dict[int, str] = {
    0x00: "sequence_number",
    0x01: "text",
    0x02: "copyright",
    0x03: "track_name",
    0x04: "instrument_name",
    0x05: "lyrics",
    0x06: "marker",
    0x07: "cue_point",
    0x08: "program_name",
    0x09: "device_name",
    0x20: "channel_prefix",
    0x21: "midi_port",
    0x2F: "end_of_track",
    0x51: "set_tempo",
    0x54: "smpte_offset",
    0x58: "time_signature",
    0x59: "key_signature",
    0x7F: "sequencer_specific",
}


@dataclass(frozen=True)
class MetaEvent:
    """``FF type VLQ-length payload``; ``data`` holds all of those bytes."""

    meta_type: int
    length: int
    data: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "MetaEvent | None":
        """Return the meta event at the start of ``data``.

        Returns None when ``data`` does not start with a meta prefix and
        type byte, or when the length field or payload runs past the end
        of the buffer.
        """
        if len(data) < 2 or data[0] != META_PREFIX:
            return None
        vlq = decode_vlq(data[2:])
        if vlq is None:
            return None
        end = 2 + vlq.length + vlq.quantity
        if end > len(data):
            return None
        return cls(meta_type=data[1], length=vlq.quantity, data=bytes(data[:end]))

    @property
    def payload(self) -> bytes:
        return self.data[len(self.data) - self.length :]

    @property
    def name(self) -> str:
        return META_TYPE_NAMES.get(self.meta_type, f"meta_0x{self.meta_type:02X}")

    @property
    def tempo(self) -> int | None:
        """Microseconds per beat for a ``set_tempo`` event."""
        if self.meta_type != 0x51 or self.length != 3:
            return None
        return int.from_bytes(self.payload, "big")

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True)
class SysExMessage:
    """A System Exclusive message or escape packet.

    ``data`` is what the message consumes from the track: through the first
    0xF7 for a 0xF0 message (or the rest of the buffer when the terminator
    is missing), or exactly the declared span for a 0xF7 escape packet.
    ``declared_end`` is the span implied by the VLQ length that follows the
    lead byte; it may disagree with ``data`` in files written by tools that
    count the length differently.
    """

    data: bytes
    declared_length: int | None
    declared_end: int | None
    terminated: bool

    @classmethod
    def from_bytes(cls, data: bytes) -> "SysExMessage | None":
        if not data or data[0] not in (SYSEX_START, SYSEX_END):
            return None
        vlq = decode_vlq(data[1:])
        declared_length = vlq.quantity if vlq is not None else None
        declared_end = (
            min(1 + vlq.length + vlq.quantity, len(data)) if vlq is not None else None
        )

        if data[0] == SYSEX_END:
            # Escape packet: no terminator, the declared length is the bound.
            if declared_end is None:
                return None
            return cls(
                data=bytes(data[:declared_end]),
                declared_length=declared_length,
                declared_end=declared_end,
                terminated=True,
            )

        # The length field itself may hold 0xF7 as a continuation byte.
        scan_from = 1 + vlq.length if vlq is not None else 1
        terminator = data.find(SYSEX_END, scan_from)
        if terminator == -1:
            return cls(
                data=bytes(data),
                declared_length=declared_length,
                declared_end=declared_end,
                terminated=False,
            )
        return cls(
            data=bytes(data[: terminator + 1]),
            declared_length=declared_length,
            declared_end=declared_end,
            terminated=True,
        )

    @property
    def is_escape(self) -> bool:
        return self.data[0] == SYSEX_END

    @property
    def length(self) -> int:
        if self.declared_length is not None:
            return self.declared_length
        return len(self.data)

    def describe(self) -> str:
        return "sysex_escape" if self.is_escape else "sysex"
