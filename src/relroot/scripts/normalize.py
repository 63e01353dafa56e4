"""Corpus files to Relative Root sequences (normalization entry point).

This module contains the pipeline that reads one corpus, normalizes every
piece independently and writes the token sequences (with each token's
root and mode) plus the corpus vocabulary as JSON, and exposes a CLI entry
point.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from multiprocessing import Pool
from pathlib import Path

from tqdm import tqdm

from relroot.cli import build_normalize_parser
from relroot.config import NormalizeConfig
from relroot.normalizers.base import NormalizedChord, Normalizer, Piece
from relroot.registry import get_corpus_registry
from relroot.utils import load_config, setup_logging

logger = logging.getLogger(__name__)


class Vocabulary:
    """Distinct canonical tokens with their occurrence counts."""

    def __init__(self, name: str):
        self.name = name
        self.counts: Counter = Counter()

    def add(self, token: str) -> None:
        self.counts[token] += 1

    def update(self, tokens: Iterable[str]) -> None:
        for token in tokens:
            self.add(token)

    def __len__(self) -> int:
        return len(self.counts)

    def __contains__(self, token: object) -> bool:
        return token in self.counts

    @property
    def tokens(self) -> list[str]:
        return sorted(self.counts)

    def save(self, path: Path) -> None:
        with open(path, "w") as f:
            json.dump(
                {"name": self.name, "tokens": self.tokens, "counts": dict(self.counts.most_common())},
                f,
                indent=2,
            )
        logger.info(f"Saved {self.name} vocabulary to {path} (Size: {len(self)})")


def _normalize_one(job: tuple[Normalizer, Piece]) -> tuple[str, list[NormalizedChord]]:
    """Normalize a single piece (pool worker)."""
    normalizer, piece = job
    return piece.piece_id, normalizer.normalize_chords(piece.records)


def normalize_pieces(
    normalizer: Normalizer,
    pieces: Sequence[Piece],
    workers: int = 1,
) -> dict[str, list[NormalizedChord]]:
    """Normalize every piece, in parallel when ``workers > 1``.

    Pieces share nothing, so the result is the same in either mode; output
    order follows ``pieces``.
    """
    desc = f"Normalizing {normalizer.name}"
    jobs = [(normalizer, piece) for piece in pieces]

    sequences: dict[str, list[NormalizedChord]] = {}

    def _collect(piece_id: str, chords: list[NormalizedChord]) -> None:
        if piece_id in sequences:
            logger.warning("Duplicate piece id %s; keeping the first", piece_id)
            return
        sequences[piece_id] = chords

    if workers > 1:
        with Pool(workers) as pool:
            for piece_id, chords in tqdm(pool.imap(_normalize_one, jobs), total=len(jobs), desc=desc):
                _collect(piece_id, chords)
    else:
        for job in tqdm(jobs, desc=desc):
            _collect(*_normalize_one(job))
    return sequences


def process_corpus(config: NormalizeConfig) -> dict[str, list[str]]:
    """Run the full normalization pipeline given a :class:`NormalizeConfig`."""

    registry = get_corpus_registry(config.corpus)
    if not config.data_raw.exists():
        raise FileNotFoundError(f"{config.data_raw} does not exist")

    config.data_processed.mkdir(exist_ok=True, parents=True)
    logger.info(f"Reading {config.corpus} from {config.data_raw}...")

    pieces = registry.reader(config.data_raw)
    logger.info("Read %d pieces", len(pieces))

    normalizer = registry.normalizer_class()
    chords = normalize_pieces(normalizer, pieces, workers=config.workers)

    # Pieces left without a single interpretable chord are not worth keeping.
    empty = [piece_id for piece_id, piece_chords in chords.items() if not piece_chords]
    for piece_id in empty:
        del chords[piece_id]
    if empty:
        logger.info("Dropped %d pieces without chords", len(empty))

    sequences = {piece_id: [c.token for c in piece_chords] for piece_id, piece_chords in chords.items()}

    vocab = Vocabulary(config.corpus)
    for tokens in sequences.values():
        vocab.update(tokens)

    output = {
        "corpus": config.corpus,
        "pieces": sequences,
        "roots": {piece_id: [c.root for c in piece_chords] for piece_id, piece_chords in chords.items()},
        "modes": {piece_id: [c.mode for c in piece_chords] for piece_id, piece_chords in chords.items()},
    }
    years = {p.piece_id: p.year for p in pieces if p.piece_id in chords and p.year is not None}
    if years:
        output["years"] = years
    if config.keep_raw:
        output["raw"] = {p.piece_id: p.raw for p in pieces if p.piece_id in sequences}

    with config.output_path.open("w") as f:
        json.dump(output, f, indent=2)
    logger.info(
        "Saved %d %s pieces to %s",
        len(sequences),
        config.corpus,
        config.output_path,
    )
    vocab.save(config.vocab_path)

    logger.info("Normalization complete.")
    return sequences


def main() -> None:
    """Run normalization from the command line."""

    parser = build_normalize_parser()
    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    cfg = load_config(args.config) if args.config else NormalizeConfig()
    if args.corpus:
        cfg.corpus = args.corpus
    if args.input:
        cfg.data_raw = args.input
    if args.output:
        cfg.data_processed = args.output
    if args.workers is not None:
        cfg.workers = args.workers
    if args.no_raw:
        cfg.keep_raw = False

    process_corpus(cfg)


if __name__ == "__main__":
    # Allow running as a module for local development:
    #   python -m relroot.scripts.normalize ...
    main()
