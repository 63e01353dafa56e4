"""Relative Root chord tokens: ``<RN><Quality><Inversion><Extensions>``.

A token is built fresh for each raw annotation, resolved, rendered once and
then discarded. ``applied_to`` only exists while a token is mid-resolution;
rendering refuses tokens that still carry it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from relroot.errors import MalformedToken

# ---------------------------------------------------------------------------
# Closed symbol sets
# ---------------------------------------------------------------------------

FORMS = ("M", "", "d", "h", "o", "+", "p", "Ger", "Fr", "It", "Ct")
AUGMENTED_SIXTHS = ("Ger", "Fr", "It")

FIGBASS = ("", "6", "64", "7", "65", "43", "42")
SEVENTH_FIGBASS = frozenset({"7", "65", "43", "42"})

ACCIDENTAL_PATTERN = r"(?:--|-|##|#)"
NUMERAL_PATTERN = r"(?:VII|VI|V|IV|III|II|I|vii|vi|v|iv|iii|ii|i)"
ROOT_PATTERN = ACCIDENTAL_PATTERN + "?" + NUMERAL_PATTERN

_TOKEN_RE = re.compile(
    rf"^(?P<root>{ROOT_PATTERN})"
    r"(?P<form>Ger|Fr|It|Ct|M|d|h|o|\+|p)?"
    r"(?P<figbass>64|65|43|42|6|7)?"
    r"(?:\((?P<extensions>[^()]+)\))?"
    rf"(?P<applied>(?:/{ROOT_PATTERN})*)$"
)

EXTENSION_SEPARATOR = ","


@dataclass(frozen=True)
class ChordToken:
    """One chord in the Relative Root notation.

    ``applied_to`` lists the keys the chord is applied to, outermost first as
    written (``V/V/ii`` -> ``("V", "ii")``).
    """

    root: str
    form: str = ""
    figbass: str = ""
    extensions: tuple[str, ...] = field(default_factory=tuple)
    applied_to: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.form not in FORMS:
            raise MalformedToken(self.root + self.form, f"unknown form {self.form!r}")
        if self.figbass not in FIGBASS:
            raise MalformedToken(self.root + self.figbass, f"unknown figbass {self.figbass!r}")

    @property
    def accidental(self) -> str:
        return self.root[: len(self.root) - len(self.root.lstrip("-#"))]

    @property
    def numeral(self) -> str:
        """Degree letters as written, without accidentals."""
        return self.root.lstrip("-#")

    @property
    def degree(self) -> str:
        return self.numeral.upper()

    @property
    def has_seventh(self) -> bool:
        return self.figbass in SEVENTH_FIGBASS

    @property
    def is_applied(self) -> bool:
        return bool(self.applied_to)

    def with_(self, **changes) -> ChordToken:
        return replace(self, **changes)

    def render(self) -> str:
        return render(self)


def render(token: ChordToken) -> str:
    """Serialize a resolved token to its canonical string."""
    if token.is_applied:
        raise MalformedToken(token.root, "cannot render an unresolved applied chord")
    text = f"{token.root}{token.form}{token.figbass}"
    if token.extensions:
        text += "(" + EXTENSION_SEPARATOR.join(token.extensions) + ")"
    return text


def parse_token(text: str) -> ChordToken:
    """Decompose a canonical string (optionally with ``/key`` suffixes)."""
    match = _TOKEN_RE.match(text)
    if match is None:
        raise MalformedToken(text)

    extensions: tuple[str, ...] = ()
    if match.group("extensions"):
        extensions = tuple(match.group("extensions").split(EXTENSION_SEPARATOR))
        if not all(extensions):
            raise MalformedToken(text, "empty extension")

    applied = match.group("applied")
    applied_to = tuple(applied.split("/")[1:]) if applied else ()

    return ChordToken(
        root=match.group("root"),
        form=match.group("form") or "",
        figbass=match.group("figbass") or "",
        extensions=extensions,
        applied_to=applied_to,
    )
