"""CLI integration tests for tools/inspect_track.py and tools/roundtrip_track.py."""

from __future__ import annotations

import os
from pathlib import Path
import subprocess
import sys

import mido
import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
INSPECT = REPO_ROOT / "tools" / "inspect_track.py"
ROUNDTRIP = REPO_ROOT / "tools" / "roundtrip_track.py"


def _run(script: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = str(REPO_ROOT)
    return subprocess.run(
        [sys.executable, str(script), *args],
        cwd=str(REPO_ROOT),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )


@pytest.fixture()
def song(tmp_path: Path) -> Path:
    mid = mido.MidiFile(ticks_per_beat=120)
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("track_name", name="Bass", time=0))
    track.append(mido.Message("note_on", channel=2, note=40, velocity=100, time=0))
    track.append(mido.Message("note_on", channel=2, note=40, velocity=0, time=60))
    track.append(mido.MetaMessage("end_of_track", time=0))
    mid.tracks.append(track)
    path = tmp_path / "song.mid"
    mid.save(path)
    return path


def test_roundtrip_reports_ok(song: Path) -> None:
    result = _run(ROUNDTRIP, str(song))
    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == f"OK   {song}"


def test_roundtrip_reports_broken_file(tmp_path: Path) -> None:
    broken = tmp_path / "broken.mid"
    broken.write_bytes(b"MThd\x00\x00\x00\x06\x00\x00\x00\x01\x00\x60MTrk\x00\x00\x00\x40\x00")
    result = _run(ROUNDTRIP, str(broken))
    assert result.returncode == 1
    assert result.stdout.startswith(f"ERR  {broken}")


def test_roundtrip_rejects_unmatched_pattern(tmp_path: Path) -> None:
    result = _run(ROUNDTRIP, str(tmp_path / "missing-*.mid"))
    assert result.returncode == 2
    assert "No files matched" in result.stderr


def test_inspect_lists_events(song: Path) -> None:
    result = _run(INSPECT, str(song))
    assert result.returncode == 0, result.stderr
    lines = result.stdout.splitlines()
    assert "Ticks per beat: 120" in lines
    assert any(line.startswith("Track 1 @0x00000E") for line in lines)
    assert any("track_name" in line for line in lines)
    running = [line for line in lines if "*0x92" in line]
    assert len(running) == 1
    assert "0.500" in running[0]
    assert "!!" not in result.stdout


def test_inspect_track_filter(song: Path) -> None:
    result = _run(INSPECT, str(song), "--track", "2", "--ticks-per-beat", "480")
    assert result.returncode == 0, result.stderr
    assert "Track 1" not in result.stdout
    assert "Ticks per beat: 480" in result.stdout


HEADER = b"MThd\x00\x00\x00\x06\x00\x00\x00\x01\x00\x60"


def test_inspect_reports_overlong_track_without_traceback(tmp_path: Path) -> None:
    damaged = tmp_path / "overlong.mid"
    damaged.write_bytes(HEADER + b"MTrk\x00\x00\x00\x40\x00\x90\x3C\x40")
    result = _run(INSPECT, str(damaged))
    assert result.returncode == 1
    assert "Traceback" not in result.stderr
    assert f"ERR  {damaged}" in result.stdout


def test_inspect_reports_where_decoding_stopped(tmp_path: Path) -> None:
    damaged = tmp_path / "corrupt.mid"
    damaged.write_bytes(HEADER + b"MTrk\x00\x00\x00\x07\x00\x90\x3C\x40\x00\xF4\x00")
    result = _run(INSPECT, str(damaged))
    assert result.returncode == 0, result.stderr
    assert "Traceback" not in result.stderr
    assert "!! decoding stopped after 4 of 7 bytes" in result.stdout


def test_inspect_smpte_division(tmp_path: Path) -> None:
    smpte = tmp_path / "smpte.mid"
    smpte.write_bytes(
        b"MThd\x00\x00\x00\x06\x00\x00\x00\x01\xE7\x28"
        + b"MTrk\x00\x00\x00\x09\x00\x90\x3C\x40\x87\x68\x80\x3C\x40"
    )
    result = _run(INSPECT, str(smpte), "--ticks-per-beat", str(0xE728))
    assert result.returncode == 0, result.stderr
    assert "Ticks per second: 1000" in result.stdout
    assert any(" 1.000 " in line for line in result.stdout.splitlines())
