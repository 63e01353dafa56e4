from __future__ import annotations

import re
from pathlib import Path

from relroot.normalizers.base import ChordRecord, Piece
from relroot.rules import MAJOR, MINOR

ENCODER_DIR = Path("Encodings") / "Encoder_B"
HARMONY_SPINES = ("**harm", "**chords")

_KEY_RE = re.compile(r"^\*([A-Ga-g])[#-]*:")


def _harmony_column(header: list[str]) -> int | None:
    for col, name in enumerate(header):
        if any(name.startswith(spine) for spine in HARMONY_SPINES):
            return col
    return None


def _key_mode(fields: list[str], col: int) -> str | None:
    """Return the mode of a key interpretation line, if it is one."""
    for field_ in (fields[col], fields[0]):
        match = _KEY_RE.match(field_)
        if match:
            return MAJOR if match.group(1).isupper() else MINOR
    return None


def _read_segment(path: Path) -> list[tuple[str, str | None]]:
    """Return ``(chord, mode)`` pairs from one ``.krn`` file.

    ``mode`` is None until the first key interpretation is seen.
    """
    chords: list[tuple[str, str | None]] = []
    col: int | None = None
    mode: str | None = None

    for line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
        if not line or line.startswith("!"):
            continue
        fields = line.split("\t")
        if col is None:
            col = _harmony_column(fields)
            continue
        if col >= len(fields):
            continue

        if line.startswith("*"):
            mode = _key_mode(fields, col) or mode
            continue
        if line.startswith("="):
            continue

        token = fields[col]
        # Only attacked harmonies carry a duration prefix.
        if not token[:1].isdigit():
            continue
        token = token.lstrip("0123456789.")
        # Two chords sharing one duration.
        for chord in token.split():
            chords.append((chord, mode))
    return chords


def _infer_mode(chords: list[tuple[str, str | None]]) -> str:
    # Some movements carry no key interpretation at all.
    return MAJOR if any(chord == "I" for chord, _ in chords) else MINOR


def _build_piece(piece_dir: Path) -> Piece | None:
    encoder_dir = piece_dir / ENCODER_DIR
    segments = sorted(encoder_dir.glob("*.krn"))
    if not segments:
        return None

    piece_id = piece_dir.name
    records: list[ChordRecord] = []
    for segment in segments:
        chords = _read_segment(segment)
        known = [m for _, m in chords if m is not None]
        fallback = known[0] if known else _infer_mode(chords)
        records.extend(ChordRecord(piece_id, mode or fallback, chord) for chord, mode in chords)
    return Piece(piece_id, records)


def extract_tavern_pieces(root_dir: Path | str) -> list[Piece]:
    """Load every ``<composer>/<piece>/Encodings/Encoder_B`` movement."""
    root = Path(root_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"{root} is not a directory")

    pieces: list[Piece] = []
    for composer_dir in sorted(d for d in root.iterdir() if d.is_dir()):
        for piece_dir in sorted(d for d in composer_dir.iterdir() if d.is_dir()):
            piece = _build_piece(piece_dir)
            if piece is not None:
                pieces.append(piece)
    return pieces
