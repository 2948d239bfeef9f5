#!/usr/bin/env python3
"""Round-trip every track chunk of MIDI files through the chunk codec."""

from __future__ import annotations

import argparse
import glob
from pathlib import Path
import sys
from typing import Iterable, List, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from midichunk.chunks import iter_chunks  # noqa: E402
from midichunk.track_chunk import TrackChunk  # noqa: E402


def collect_paths(patterns: Iterable[str]) -> List[Path]:
    paths: List[Path] = []
    for pattern in patterns:
        matches = sorted(Path(p) for p in glob.glob(pattern, recursive=True))
        if matches:
            paths.extend(matches)
        else:
            candidate = Path(pattern)
            if candidate.exists():
                paths.append(candidate)
    seen: set[Path] = set()
    unique_paths: List[Path] = []
    for path in paths:
        resolved = path.resolve()
        if resolved not in seen:
            seen.add(resolved)
            unique_paths.append(path)
    return unique_paths


def first_diff(a: bytes, b: bytes) -> Tuple[int | None, int | None, int | None]:
    limit = min(len(a), len(b))
    for idx in range(limit):
        if a[idx] != b[idx]:
            return idx, a[idx], b[idx]
    if len(a) != len(b):
        return limit, None, None
    return None, None, None


def check_file(path: Path) -> List[str]:
    """Return one failure message per track chunk that does not round-trip."""

    failures: List[str] = []
    for chunk in iter_chunks(path.read_bytes()):
        if not chunk.is_track or chunk.length == 0:
            continue
        track = TrackChunk.from_bytes(chunk.raw)
        rebuilt = track.recompose()
        offset, left, right = first_diff(chunk.raw, rebuilt)
        if offset is None:
            continue
        where = chunk.offset + offset
        if left is None and right is None:
            failures.append(
                f"track @0x{chunk.offset:06X}: size mismatch "
                f"(orig={len(chunk.raw)} new={len(rebuilt)})"
            )
        else:
            failures.append(
                f"track @0x{chunk.offset:06X}: diff at 0x{where:06X} "
                f"(orig=0x{left:02X} new=0x{right:02X})"
            )
    return failures


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Decode + recompose MIDI track chunks and report mismatches."
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="File paths or glob patterns (quotes recommended for wildcards).",
    )
    args = parser.parse_args(argv)

    targets = collect_paths(args.paths)
    if not targets:
        parser.error("No files matched the provided paths/patterns.")

    failures = 0
    for path in targets:
        try:
            problems = check_file(path)
        except ValueError as exc:
            failures += 1
            print(f"ERR  {path}: {exc}")
            continue

        if not problems:
            print(f"OK   {path}")
            continue

        failures += 1
        for problem in problems:
            print(f"FAIL {path}: {problem}")

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
