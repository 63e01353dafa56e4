"""Corpus-specific readers.

Each module in this package reads one corpus from disk into a list of
:class:`~relroot.normalizers.base.Piece` objects, one per movement or song,
whose records are in temporal order:

    Piece(
        piece_id="op18_no1_mv1",
        records=[
            ChordRecord(piece_id, mode="major"|"minor", text=..., applied_to=..., key=...),
            ...
        ],
    )

These pieces can then be fed to the matching normalizer by
:func:`relroot.scripts.normalize.process_corpus`.
"""

from .abc import extract_abc_pieces  # noqa: F401
from .billboard import extract_billboard_pieces  # noqa: F401
from .rolling_stone import extract_rolling_stone_pieces  # noqa: F401
from .tavern import extract_tavern_pieces  # noqa: F401
