"""Per-corpus normalizers.

Each normalizer turns one corpus's raw chord records for a piece into the
canonical Relative Root strings:

    <RootNumeral><Quality><Inversion>(<Extensions>)

They share the lattice, resolver and rules and differ only in how they
decompose their corpus's spelling and which annotation bugs they repair.
"""

from .abc import ABCNormalizer  # noqa: F401
from .base import ChordRecord, Normalizer, Piece  # noqa: F401
from .billboard import BillboardNormalizer  # noqa: F401
from .rolling_stone import RollingStoneNormalizer  # noqa: F401
from .tavern import TavernNormalizer  # noqa: F401
