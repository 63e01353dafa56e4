from __future__ import annotations

import csv
from pathlib import Path

from relroot.normalizers.base import ChordRecord, Piece
from relroot.rules import MAJOR, MINOR

ANNOTATIONS_FILE = "all_annotations.csv"


def _mode_of_local_key(local_key: str) -> str:
    """Upper-case local keys (``V``, ``bVI``) are major, lower-case minor."""
    numeral = local_key.strip().lstrip("b#-")
    return MAJOR if numeral.isupper() else MINOR


def _piece_id(row: dict[str, str]) -> str:
    return f"op{row['op']}_no{row['no']}_mv{row['mov']}"


def _chord_text(row: dict[str, str]) -> tuple[str, str | None]:
    """Join the DCML columns into ``<numeral><form><figbass>(<changes>)``."""
    # Chords over a pedal are replaced by the pedal itself.
    pedal = (row.get("pedal") or "").strip()
    if pedal:
        return pedal, None

    text = "".join((row.get(col) or "").strip() for col in ("numeral", "form", "figbass"))
    changes = (row.get("changes") or "").strip()
    if changes:
        text += f"({changes})"
    relative = (row.get("relativeroot") or "").strip()
    return text, relative or None


def extract_abc_pieces(root_dir: Path | str) -> list[Piece]:
    """Load the ABC annotation table and group its rows by movement.

    Args:
        root_dir: Directory containing ``all_annotations.csv`` (or the file
            itself).
    """
    path = Path(root_dir)
    if path.is_dir():
        path = path / ANNOTATIONS_FILE
    if not path.exists():
        raise FileNotFoundError(f"{path} does not exist")

    pieces: dict[str, Piece] = {}
    with path.open(newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            piece_id = _piece_id(row)
            text, applied_to = _chord_text(row)
            piece = pieces.setdefault(piece_id, Piece(piece_id))
            piece.records.append(
                ChordRecord(
                    piece_id=piece_id,
                    mode=_mode_of_local_key(row.get("local_key") or ""),
                    text=text,
                    applied_to=applied_to,
                )
            )
    return list(pieces.values())
