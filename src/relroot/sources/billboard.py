from __future__ import annotations

import bisect
import csv
import logging
import re
from pathlib import Path
from typing import NamedTuple

from relroot.normalizers.base import ChordRecord, Piece
from relroot.rules import MAJOR

logger = logging.getLogger(__name__)

SALAMI_FILE = "salami_chords.txt"
TONIC_MARK = "tonic:"

_ONSET_RE = re.compile(r"^\s*(\d+(?:\.\d*)?)")

INDEX_FILE = "billboard-2.0-index.csv"

# Punctuation ignored when comparing titles and artists for duplicates.
_NAME_NOISE = re.compile(r"[.,') (\"!?]")


def _read_keys(path: Path) -> tuple[list[float], list[str]]:
    """Read ``(onsets, tonics)`` from the ``# tonic:`` lines of a SALAMI file.

    The first tonic holds from time zero; later ones take effect at the
    timestamp of the line that follows them.
    """
    onsets: list[float] = []
    tonics: list[str] = []
    lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    for i, line in enumerate(lines):
        if TONIC_MARK not in line:
            continue
        tonic = line.split(TONIC_MARK, 1)[1].strip()
        onset = 0.0
        if tonics:
            following = lines[i + 1] if i + 1 < len(lines) else ""
            match = _ONSET_RE.match(following)
            if match is None:
                continue
            onset = float(match.group(1))
        onsets.append(onset)
        tonics.append(tonic)
    return onsets, tonics


def _read_labels(path: Path) -> list[tuple[float, str]]:
    """Read ``(onset, label)`` pairs from a ``.lab`` file."""
    labels: list[tuple[float, str]] = []
    for line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
        parts = line.strip().split()
        if len(parts) < 3:
            continue
        labels.append((float(parts[0]), parts[2]))
    return labels


def _build_song(song_dir: Path) -> Piece | None:
    salami_path = song_dir / SALAMI_FILE
    lab_paths = sorted(song_dir.glob("*.lab"))
    if not salami_path.exists() or not lab_paths:
        return None

    onsets, tonics = _read_keys(salami_path)
    if not tonics:
        return None

    piece_id = song_dir.name
    records: list[ChordRecord] = []
    for onset, label in _read_labels(lab_paths[0]):
        key = tonics[max(bisect.bisect_right(onsets, onset) - 1, 0)]
        records.append(ChordRecord(piece_id, MAJOR, label, key=key))
    return Piece(piece_id, records)


class IndexEntry(NamedTuple):
    title: str
    artist: str
    year: int | None


def read_index(path: Path) -> dict[int, IndexEntry]:
    """Read the Billboard index, keyed by song number.

    Rows without chord annotations (an empty title) are skipped.
    """
    entries: dict[int, IndexEntry] = {}
    with path.open(newline="", encoding="utf-8", errors="ignore") as f:
        for row in csv.DictReader(f):
            song_id = (row.get("id") or "").strip()
            title = (row.get("title") or "").strip()
            if not song_id.isdigit() or not title:
                continue
            chart_date = (row.get("chart_date") or "").strip()
            year = int(chart_date[:4]) if chart_date[:4].isdigit() else None
            entries[int(song_id)] = IndexEntry(title, (row.get("artist") or "").strip(), year)
    return entries


def _identity(entry: IndexEntry) -> str:
    return _NAME_NOISE.sub("", entry.title + entry.artist).lower()


def extract_billboard_pieces(root_dir: Path | str) -> list[Piece]:
    """Load Billboard songs, one directory each with SALAMI and ``.lab`` files.

    When ``billboard-2.0-index.csv`` sits in ``root_dir``, only indexed songs
    are kept, repeated chart entries of the same title and artist are
    dropped (the lowest song number wins) and each song gets its chart year.
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"{root} is not a directory")

    index: dict[int, IndexEntry] | None = None
    if (root / INDEX_FILE).exists():
        index = read_index(root / INDEX_FILE)

    songs: list[Piece] = []
    seen: set[str] = set()
    song_dirs = [d for d in root.iterdir() if d.is_dir()]
    for song_dir in sorted(song_dirs, key=lambda d: (not d.name.isdigit(), d.name.zfill(8))):
        entry = None
        if index is not None:
            entry = index.get(int(song_dir.name)) if song_dir.name.isdigit() else None
            if entry is None:
                continue
            identity = _identity(entry)
            if identity in seen:
                logger.debug("Skipping duplicate %s (%s)", song_dir.name, entry.title)
                continue
            seen.add(identity)

        song = _build_song(song_dir)
        if song is not None:
            song.year = entry.year if entry else None
            songs.append(song)
    return songs
