from __future__ import annotations

import csv
import logging
from pathlib import Path

from relroot.normalizers.base import ChordRecord, Piece
from relroot.rules import MAJOR

logger = logging.getLogger(__name__)

# Bar lines, key markers and rests carry no chord.
NON_CHORD_MARKS = ("[", "]", "|", "R")
REPEAT = "."

SONG_LIST = "song_list_DS.csv"

# Spellings in the song list that differ from the analysis file names.
SONG_LIST_FIXES = (("'", ""), ("-", "_"), ("miind", "mind"), ("nite", "night"), ("_perkins", ""))


def _tokenize(content: str) -> list[str]:
    """Split an expanded analysis into chord tokens.

    ``.`` repeats whatever token precedes it, bar lines and key markers
    included, before those are removed.
    """
    tokens: list[str] = []
    for line in content.splitlines():
        if "Warning" in line:
            continue
        for token in line.split():
            if token == REPEAT:
                if tokens:
                    tokens.append(tokens[-1])
                continue
            tokens.append(token)
    return [t for t in tokens if not any(mark in t for mark in NON_CHORD_MARKS)]


def _song_key(name: str) -> str:
    for wrong, right in SONG_LIST_FIXES:
        name = name.replace(wrong, right)
    return name


def read_song_years(path: Path) -> dict[str, int]:
    """Map song names (as in the analysis files) to release years."""
    years: dict[str, int] = {}
    with path.open(newline="", encoding="utf-8", errors="ignore") as f:
        for row in csv.DictReader(f):
            fname, year = (row.get("fname") or "").strip(), (row.get("year") or "").strip()
            if fname and year.isdigit():
                years[_song_key(fname)] = int(year)
    return years


def extract_rolling_stone_pieces(root_dir: Path | str) -> list[Piece]:
    """Load the ``*_dt.txt`` expanded analyses, one piece per song.

    Release years are attached when ``song_list_DS.csv`` sits in ``root_dir``.
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"{root} is not a directory")

    years: dict[str, int] = {}
    if (root / SONG_LIST).exists():
        years = read_song_years(root / SONG_LIST)

    pieces: list[Piece] = []
    for path in sorted(root.glob("*_dt.txt")):
        piece_id = path.stem.replace("-", "_")
        content = path.read_text(encoding="utf-8", errors="ignore")
        records = [ChordRecord(piece_id, MAJOR, token) for token in _tokenize(content)]
        year = years.get(piece_id.removesuffix("_dt"))
        if years and year is None:
            logger.debug("No year for %s", piece_id)
        pieces.append(Piece(piece_id, records, year=year))
    return pieces
