"""relroot: harmonic analyses re-notated as Relative Root tokens.

Four corpora with their own chord-label grammars are normalized into one
notation, ``<RootNumeral><Quality><Inversion>(<Extensions>)``:

- ``abc``: Annotated Beethoven Corpus (DCML tables)
- ``rolling_stone``: Rolling Stone 200 rock analyses
- ``tavern``: TAVERN theme-and-variation Humdrum encodings
- ``billboard``: McGill Billboard chord labels
"""

from relroot.chord import ChordToken, parse_token, render
from relroot.config import NormalizeConfig
from relroot.errors import AmbiguousCadentialMerge, MalformedToken, RelRootError, UnknownSpelling
from relroot.lattice import ROMAN_LATTICE, Lattice
from relroot.normalizers import (
    ABCNormalizer,
    BillboardNormalizer,
    ChordRecord,
    Normalizer,
    Piece,
    RollingStoneNormalizer,
    TavernNormalizer,
)
from relroot.resolver import resolve, resolve_chain, resolve_token

__version__ = "0.1.0"

__all__ = [
    # Config
    "NormalizeConfig",
    # Tokens
    "ChordToken",
    "parse_token",
    "render",
    # Lattice / resolution
    "Lattice",
    "ROMAN_LATTICE",
    "resolve",
    "resolve_chain",
    "resolve_token",
    # Normalizers
    "ChordRecord",
    "Piece",
    "Normalizer",
    "ABCNormalizer",
    "BillboardNormalizer",
    "RollingStoneNormalizer",
    "TavernNormalizer",
    # Errors
    "RelRootError",
    "UnknownSpelling",
    "MalformedToken",
    "AmbiguousCadentialMerge",
]
