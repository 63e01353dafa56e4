"""Corpus registry."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from relroot.normalizers.base import Normalizer, Piece


@dataclass
class CorpusRegistry:
    """Registry entry with everything needed to process one corpus."""

    reader: Callable[[Path | str], list[Piece]]
    normalizer_class: type[Normalizer]


def get_corpus_registry(corpus: str) -> CorpusRegistry:
    """Get the registry entry for a corpus.

    Args:
        corpus: One of ``abc``, ``rolling_stone``, ``tavern`` or ``billboard``

    Returns:
        CorpusRegistry with the reader and normalizer for that corpus
    """
    if corpus == "abc":
        from relroot.normalizers import ABCNormalizer
        from relroot.sources import extract_abc_pieces

        return CorpusRegistry(reader=extract_abc_pieces, normalizer_class=ABCNormalizer)
    elif corpus == "rolling_stone":
        from relroot.normalizers import RollingStoneNormalizer
        from relroot.sources import extract_rolling_stone_pieces

        return CorpusRegistry(
            reader=extract_rolling_stone_pieces,
            normalizer_class=RollingStoneNormalizer,
        )
    elif corpus == "tavern":
        from relroot.normalizers import TavernNormalizer
        from relroot.sources import extract_tavern_pieces

        return CorpusRegistry(reader=extract_tavern_pieces, normalizer_class=TavernNormalizer)
    elif corpus == "billboard":
        from relroot.normalizers import BillboardNormalizer
        from relroot.sources import extract_billboard_pieces

        return CorpusRegistry(reader=extract_billboard_pieces, normalizer_class=BillboardNormalizer)
    else:
        raise ValueError(f"Unknown corpus: {corpus}")
