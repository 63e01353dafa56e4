"""Vocabulary export across normalized corpora."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import ijson
from tqdm import tqdm

from relroot.cli import build_vocab_parser
from relroot.scripts.normalize import Vocabulary
from relroot.utils import setup_logging

logger = logging.getLogger(__name__)


def collect_vocabulary(paths: Iterable[Path], name: str = "all") -> Vocabulary:
    """Stream the ``pieces`` of each normalized corpus file into one vocabulary."""
    vocab = Vocabulary(name)
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"{path} does not exist")
        with open(path, "rb") as f:
            for _, tokens in tqdm(ijson.kvitems(f, "pieces"), desc=f"Reading {path.name}"):
                vocab.update(tokens)
    return vocab


def main() -> None:
    """Collect a vocabulary from the command line."""

    parser = build_vocab_parser()
    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    vocab = collect_vocabulary(args.inputs)
    args.output.parent.mkdir(exist_ok=True, parents=True)
    vocab.save(args.output)


if __name__ == "__main__":
    main()
