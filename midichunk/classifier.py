"""Decide what kind of event starts at a position inside a track.

Checks run in priority order: meta event, SysEx, explicit status byte
(channel voice or system), then running status.  Anything else is
unclassifiable and stops the walk over the track.

Running-status scope: channel voice messages set it, meta/SysEx events
and system common messages clear it, real-time messages leave it alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .messages import (
    META_PREFIX,
    SYSEX_END,
    SYSEX_START,
    MetaEvent,
    StatusMessage,
    SysExMessage,
    SystemCommand,
)


class EventKind(Enum):
    META = "meta"
    SYSEX = "sysex"
    STATUS = "status"
    SYSTEM_COMMAND = "system_command"


Message = Union[MetaEvent, SysExMessage, StatusMessage, SystemCommand]


@dataclass(frozen=True)
class Classification:
    kind: EventKind
    length: int  # bytes consumed at this position
    message: Message
    running_status: int | None = None  # implied status byte, when omitted
    next_running_status: int | None = None


def classify(data: bytes, running_status: int | None = None) -> Classification | None:
    """Classify the event body at the start of ``data``.

    ``data`` starts right after the delta-time and may extend past the
    event.  Returns None when no rule applies or the event would run past
    the end of the buffer.
    """
    if not data:
        return None
    byte = data[0]

    if byte == META_PREFIX and len(data) > 1:
        meta = MetaEvent.from_bytes(data)
        if meta is None:
            return None
        return Classification(kind=EventKind.META, length=len(meta.data), message=meta)

    if byte in (SYSEX_START, SYSEX_END):
        sysex = SysExMessage.from_bytes(data)
        if sysex is None:
            return None
        return Classification(kind=EventKind.SYSEX, length=len(sysex.data), message=sysex)

    status = StatusMessage.from_byte(byte)
    if status is not None:
        if status.length > len(data):
            return None
        return Classification(
            kind=EventKind.STATUS,
            length=status.length,
            message=status,
            next_running_status=byte,
        )

    command = SystemCommand.from_byte(byte)
    if command is not None and command.length is not None:
        if command.length > len(data):
            return None
        return Classification(
            kind=EventKind.SYSTEM_COMMAND,
            length=command.length,
            message=command,
            next_running_status=running_status if command.is_realtime else None,
        )

    if byte < 0x80 and running_status is not None:
        status = StatusMessage.from_byte(running_status)
        if status is None:
            return None
        length = status.length - 1  # status byte is implied
        if length > len(data):
            return None
        return Classification(
            kind=EventKind.STATUS,
            length=length,
            message=status,
            running_status=running_status,
            next_running_status=running_status,
        )

    return None
