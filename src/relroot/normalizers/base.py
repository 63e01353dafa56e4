"""Shared per-piece normalization pass."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import ClassVar, NamedTuple

from relroot.chord import ChordToken
from relroot.errors import MalformedToken, UnknownSpelling
from relroot.resolver import resolve_token
from relroot.rules import (
    apply_degree_conventions,
    dedupe_extensions,
    iter_cadential_merges,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChordRecord:
    """One raw chord annotation, in the piece's temporal order.

    ``key`` is only set by corpora whose labels are absolute pitches and
    holds the local tonic's pitch name.
    """

    piece_id: str
    mode: str
    text: str
    applied_to: str | None = None
    key: str | None = None


class NormalizedChord(NamedTuple):
    """A canonical token with its root (numeral plus form) and local mode."""

    token: str
    root: str
    mode: str


class Normalizer(ABC):
    """Maps one corpus's raw records onto canonical Relative Root strings.

    Subclasses only implement :meth:`decompose`; the pass over a piece is the
    same for every corpus:

    1. decompose each record (dropping the ones that fail)
    2. apply the degree conventions in the record's mode
    3. merge cadential six-fours with one token of look-ahead
    4. resolve applied chords and render
    """

    name: ClassVar[str] = "base"
    # Corpora spelling chromatic degrees relative to the major scale already
    # must not get the VII/III/VI flats added again.
    degree_conventions: ClassVar[bool] = True

    @abstractmethod
    def decompose(self, record: ChordRecord) -> ChordToken:
        """Parse a raw record into an unresolved token.

        Raises:
            MalformedToken: if the text matches none of the corpus's grammar.
            UnknownSpelling: if a root cannot be placed on the lattice.
        """

    def infers_tonic_six_fours(self, tokens: Sequence[ChordToken]) -> bool:
        """Whether a tonic six-four before a dominant is read as cadential."""
        return True

    def normalize_record(self, record: ChordRecord) -> ChordToken:
        token = self.decompose(record)
        if self.degree_conventions:
            token = apply_degree_conventions(token, record.mode)
        return token

    def finalize(self, token: ChordToken) -> ChordToken:
        return dedupe_extensions(resolve_token(token))

    def normalize_chords(self, records: Iterable[ChordRecord]) -> list[NormalizedChord]:
        """Normalize a piece, keeping each output token's root and mode."""
        tokens: list[ChordToken] = []
        modes: list[str] = []
        total = 0
        dropped = 0
        piece_id = None
        for record in records:
            total += 1
            piece_id = record.piece_id
            try:
                tokens.append(self.normalize_record(record))
            except (MalformedToken, UnknownSpelling) as exc:
                dropped += 1
                logger.debug("[%s] %s: dropping %r: %s", self.name, record.piece_id, record.text, exc)
            else:
                modes.append(record.mode)

        merged = iter_cadential_merges(tokens, tonic_six_fours=self.infers_tonic_six_fours(tokens))

        chords: list[NormalizedChord] = []
        for position, token in merged:
            try:
                resolved = self.finalize(token)
            except UnknownSpelling as exc:
                dropped += 1
                logger.debug("[%s] %s: cannot resolve %s: %s", self.name, piece_id, token, exc)
                continue
            chords.append(
                NormalizedChord(resolved.render(), resolved.root + resolved.form, modes[position])
            )

        if dropped:
            logger.info("[%s] %s: dropped %d of %d records", self.name, piece_id, dropped, total)
        return chords

    def normalize_piece(self, records: Iterable[ChordRecord]) -> list[str]:
        return [chord.token for chord in self.normalize_chords(records)]


@dataclass
class Piece:
    """All records of one piece or song, in temporal order.

    ``year`` is set for corpora that ship release or chart dates.
    """

    piece_id: str
    records: list[ChordRecord] = field(default_factory=list)
    year: int | None = None

    @property
    def raw(self) -> list[str]:
        return [record.text for record in self.records]
