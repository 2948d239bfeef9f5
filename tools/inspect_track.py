#!/usr/bin/env python3
"""Print the events of every track chunk in a Standard MIDI File.

Each line shows absolute tick, beat position, the governing type byte
(``*`` marks an event that relied on running status), a label and the
self-contained message bytes.

Examples
--------
    python tools/inspect_track.py song.mid
    python tools/inspect_track.py song.mid --track 2
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import mido  # noqa: E402

from midichunk.chunk_event import (  # noqa: E402
    DEFAULT_TIME_DIVISION,
    TimeFormat,
    split_time_division,
)
from midichunk.chunks import iter_chunks  # noqa: E402
from midichunk.track_chunk import TrackChunk  # noqa: E402


def read_division(path: Path) -> int:
    """Return the header division word; mido reads it as a signed short."""
    return mido.MidiFile(path, clip=True).ticks_per_beat & 0xFFFF


def generate_report(path: Path, data: bytes, division: int, only_track: int | None = None) -> str:
    time_format, time_division = split_time_division(division)
    if time_format is TimeFormat.FRAMES_PER_SECOND:
        timing = f"Ticks per second: {time_division} (SMPTE, positions in seconds)"
    else:
        timing = f"Ticks per beat: {time_division}"
    lines: List[str] = [f"File: {path}", timing, ""]
    track_number = 0
    for chunk in iter_chunks(data):
        if not chunk.is_track:
            continue
        track_number += 1
        if only_track is not None and track_number != only_track:
            continue

        lines.append(
            f"Track {track_number} @0x{chunk.offset:06X} ({chunk.length} bytes)"
        )
        try:
            track = TrackChunk.from_bytes(
                chunk.raw, time_format=time_format, time_division=time_division
            )
        except ValueError as exc:
            lines.append(f"  ERR {exc}")
            lines.append("")
            continue

        events = track.events()
        for event in events:
            lines.append("  " + event.describe())
        decoded = sum(len(event.data) for event in events)
        if decoded != len(track.data):
            lines.append(
                f"  !! decoding stopped after {decoded} of {len(track.data)} bytes"
            )
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect the track chunks of a Standard MIDI File."
    )
    parser.add_argument("path", type=Path, help="Path to the .mid file to inspect.")
    parser.add_argument(
        "--track",
        type=int,
        default=None,
        help="1-based track chunk to show (default: all).",
    )
    parser.add_argument(
        "--ticks-per-beat",
        type=int,
        default=None,
        help="Override the header division word (bit 15 set selects SMPTE timing).",
    )
    args = parser.parse_args(argv)

    data = args.path.read_bytes()
    division = args.ticks_per_beat
    if division is None:
        try:
            division = read_division(args.path)
        except (OSError, EOFError, ValueError, LookupError) as exc:
            print(
                f"WARN {args.path}: header not readable by mido ({exc}); "
                f"assuming {DEFAULT_TIME_DIVISION} ticks per beat"
            )
            division = DEFAULT_TIME_DIVISION
    try:
        report = generate_report(args.path, data, division, args.track)
    except ValueError as exc:
        print(f"ERR  {args.path}: {exc}")
        return 1
    print(report, end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
