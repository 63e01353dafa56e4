"""TAVERN theme-and-variation analyses (Humdrum ``**harm`` spines).

Humdrum marks inversions with letters (``b`` first, ``c`` second, ``d``
third) and names the cadential six-four explicitly (``Cc``); both are mapped
onto figured-bass numbers here. Numerals are read relative to the mode of
the local key, so the degree conventions apply.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from relroot.chord import ChordToken
from relroot.errors import MalformedToken
from relroot.normalizers.base import ChordRecord, Normalizer
from relroot.rules import (
    CADENTIAL_TAG,
    canonical_accidentals,
    cap_figbass,
    is_cadential_label,
    named_chord,
)

_ROOT = r"(?:--|-|bb|b|##|#)?(?:VII|VI|V|IV|III|II|I|vii|vi|v|iv|iii|ii|i)"

_TAVERN_RE = re.compile(
    rf"^(?P<root>Ct|Gr|It|Fr|C|N|{_ROOT})"
    r"(?P<quality>om|o|\+|@|h|M)?"
    r"(?P<seventh>7)?"
    r"(?P<figures>b9|56|65|64|43|42|11|9|6|2)?"
    r"(?P<inversion>[bcd])?"
    rf"(?P<applied>(?:/{_ROOT})*)$"
)

# Harmonic functions without a chord root (see the **harm reference).
NON_FUNCTIONAL = frozenset({"D", "P", "r", ".", "T"})

# Spelling variants found in the encodings.
SPELLING_FIXES = {"ct": "Ct", "CT": "Ct", "it": "It"}

QUALITIES = {"om": "h", "@": "h", "o": "o", "+": "+", "h": "h", "M": "M"}
HALF_DIMINISHED = frozenset({"om", "@", "h"})

FIGURE_FIXES = {"56": "65", "2": "42"}

# inversion letter -> (triad figbass, seventh figbass)
INVERSIONS = {"b": ("6", "65"), "c": ("64", "43"), "d": ("42", "42")}

NAMED = {"Gr": "Ger", "It": "It", "Fr": "Fr", "Ct": "Ct"}


def _clean(text: str) -> str:
    text = text.strip().replace("(", "").replace(")", "").replace(".", "")
    for wrong, right in SPELLING_FIXES.items():
        text = text.replace(wrong, right)
    return text


def _figbass(quality: str, seventh: bool, figures: str, inversion: str) -> tuple[str, tuple[str, ...]]:
    extensions: tuple[str, ...] = ()
    if figures == "b9":
        figures, extensions = "7", ("-9",)
    else:
        figures, extensions = cap_figbass(FIGURE_FIXES.get(figures, figures))

    is_seventh = seventh or figures == "7" or quality in HALF_DIMINISHED
    if inversion:
        triad, tetrad = INVERSIONS[inversion]
        return (tetrad if is_seventh else triad), extensions
    if figures:
        return figures, extensions
    return ("7" if seventh else ""), extensions


class TavernNormalizer(Normalizer):
    name = "tavern"

    def decompose(self, record: ChordRecord) -> ChordToken:
        raw = record.text.strip()
        if raw in NON_FUNCTIONAL:
            raise MalformedToken(raw, "non-functional harmony")

        match = _TAVERN_RE.match(_clean(raw))
        if match is None:
            raise MalformedToken(raw)

        root = match.group("root")
        quality = match.group("quality") or ""
        figures = match.group("figures") or ""
        inversion = match.group("inversion") or ""
        applied = match.group("applied")
        applied_to = tuple(canonical_accidentals(k) for k in applied.split("/")[1:]) if applied else ()

        if root == "C":
            if inversion != "c" and figures != "64":
                raise MalformedToken(raw, "cadential label without six-four")
            return ChordToken("V", extensions=(CADENTIAL_TAG,), applied_to=applied_to)
        if root in NAMED:
            return named_chord(NAMED[root], applied_to=applied_to)
        if root == "N":
            root = "-II"

        figbass, extensions = _figbass(quality, bool(match.group("seventh")), figures, inversion)
        return ChordToken(
            root=canonical_accidentals(root),
            form=QUALITIES.get(quality, ""),
            figbass=figbass,
            extensions=extensions,
            applied_to=applied_to,
        )

    def infers_tonic_six_fours(self, tokens: Sequence[ChordToken]) -> bool:
        # Pieces with explicit cadential labels do not mislabel them as I64.
        return not any(is_cadential_label(t) for t in tokens)
