"""Roman-numeral lattice used for transposing applied chords.

The 35 spellings are ordered along the line of fifths (``IV I V II VI III
VII`` for each accidental level from ``--`` to ``##``). Adding coordinates
modulo 35 therefore adds intervals, which is all the resolver needs.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from relroot.errors import UnknownSpelling


ACCIDENTALS = ("--", "-", "", "#", "##")
DEGREES = ("IV", "I", "V", "II", "VI", "III", "VII")

ROMAN_NUMERALS = tuple(acc + degree for acc in ACCIDENTALS for degree in DEGREES)

# Pitch names share the fifths ordering so a pitch and a numeral with the
# same coordinate sit at the same interval from their respective origins.
PITCH_ACCIDENTALS = ("bb", "b", "", "#", "##")
PITCH_LETTERS = ("F", "C", "G", "D", "A", "E", "B")

PITCH_NAMES = tuple(letter + acc for acc in PITCH_ACCIDENTALS for letter in PITCH_LETTERS)


def _identity(spelling: str) -> str:
    return spelling


class Lattice:
    """Cyclic coordinate space over a fixed table of spellings."""

    def __init__(
        self,
        spellings: Sequence[str],
        origin: str,
        normalize: Callable[[str], str] = _identity,
    ):
        self.spellings = tuple(spellings)
        self.normalize = normalize
        self._index = {s: i for i, s in enumerate(self.spellings)}
        if len(self._index) != len(self.spellings):
            raise ValueError("Lattice spellings must be unique")
        self.origin = self.index_of(origin)

    def __len__(self) -> int:
        return len(self.spellings)

    def __contains__(self, spelling: object) -> bool:
        return isinstance(spelling, str) and self.normalize(spelling) in self._index

    def index_of(self, spelling: str) -> int:
        try:
            return self._index[self.normalize(spelling)]
        except KeyError:
            raise UnknownSpelling(spelling) from None

    def spelling_at(self, coordinate: int) -> str:
        return self.spellings[coordinate % len(self.spellings)]

    def transpose(self, spelling: str, steps: int) -> str:
        """Move ``spelling`` by ``steps`` coordinates around the lattice."""
        return self.spelling_at(self.index_of(spelling) + steps)

    def interval(self, spelling: str) -> int:
        """Offset of ``spelling`` from the origin (``I`` or ``C``)."""
        return self.index_of(spelling) - self.origin


ROMAN_LATTICE = Lattice(ROMAN_NUMERALS, origin="I", normalize=str.upper)
PITCH_LATTICE = Lattice(PITCH_NAMES, origin="C")


def degree_of(pitch: str, tonic: str) -> str:
    """Return the upper-case Roman spelling of ``pitch`` in the key of ``tonic``.

    >>> degree_of("Bb", "C")
    '-VII'
    >>> degree_of("F#", "D")
    'III'
    """
    steps = PITCH_LATTICE.index_of(pitch) - PITCH_LATTICE.index_of(tonic)
    return ROMAN_LATTICE.spelling_at(ROMAN_LATTICE.origin + steps)
