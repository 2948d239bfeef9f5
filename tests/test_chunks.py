from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from midichunk.chunks import iter_chunks, track_chunks  # noqa: E402

HEADER = b"MThd\x00\x00\x00\x06\x00\x01\x00\x03\x00\x60"
TRACK_1 = b"MTrk\x00\x00\x00\x04\x00\xFF\x2F\x00"
EMPTY_TRACK = b"MTrk\x00\x00\x00\x00"
VENDOR = b"XFIH\x00\x00\x00\x02\x01\x02"
TRACK_2 = b"MTrk\x00\x00\x00\x08\x00\x90\x3C\x40\x00\xFF\x2F\x00"

FILE = HEADER + TRACK_1 + EMPTY_TRACK + VENDOR + TRACK_2


def test_iter_chunks_splits_file() -> None:
    chunks = list(iter_chunks(FILE))
    assert [c.tag for c in chunks] == [b"MThd", b"MTrk", b"MTrk", b"XFIH", b"MTrk"]
    assert [c.length for c in chunks] == [6, 4, 0, 2, 8]
    assert chunks[1].offset == len(HEADER)
    assert chunks[4].raw == TRACK_2
    assert [c.is_track for c in chunks] == [False, True, True, False, True]


def test_track_chunks_skips_header_vendor_and_empty_tracks() -> None:
    tracks = track_chunks(FILE, time_division=96)
    assert [t.raw_data for t in tracks] == [TRACK_1, TRACK_2]
    assert all(t.time_division == 96 for t in tracks)


@pytest.mark.parametrize(
    "data,message",
    [
        (HEADER + b"MTr", "truncated chunk header"),
        (HEADER + b"MTrk\x00\x00\x00\x09\x00", "declares 9 bytes"),
    ],
)
def test_truncated_files_raise(data: bytes, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        list(iter_chunks(data))
