"""Shared CLI for relroot.

Centralized construction of the CLI parsers used by the normalization and
vocabulary entry points.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from relroot.config import CORPORA


def build_normalize_parser() -> argparse.ArgumentParser:
    """CLI parser for normalizing one corpus."""

    parser = argparse.ArgumentParser(
        description="Normalize a corpus of harmonic analyses to Relative Root tokens.",
    )
    parser.add_argument("--corpus", choices=CORPORA)
    parser.add_argument("--input", type=Path)
    parser.add_argument("--output", type=Path)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with NormalizeConfig fields; CLI options override it.",
    )
    parser.add_argument("--workers", type=int)
    parser.add_argument(
        "--no-raw",
        action="store_true",
        help="Do not store the raw chord texts alongside the tokens.",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def build_vocab_parser() -> argparse.ArgumentParser:
    """CLI parser for collecting the vocabulary across normalized corpora."""

    parser = argparse.ArgumentParser(
        description="Collect the distinct Relative Root tokens of normalized corpora.",
    )
    parser.add_argument("inputs", type=Path, nargs="+")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("relroot_data/vocab_all.json"),
    )
    parser.add_argument("--verbose", action="store_true")
    return parser
