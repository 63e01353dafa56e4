"""Rolling Stone 200 (de Clercq & Temperley) harmonic analyses.

Tokens are already expanded by the reader (``.`` repeats resolved, bar
lines and key markers removed). The notation spells chromatic degrees
relative to the major scale, so no degree conventions are applied.
"""

from __future__ import annotations

import re

from relroot.chord import ChordToken
from relroot.errors import MalformedToken
from relroot.normalizers.base import ChordRecord, Normalizer
from relroot.rules import canonical_accidentals, cap_figbass

_ROOT = r"(?:bb|b|##|#)?(?:VII|VI|V|IV|III|II|I|vii|vi|v|iv|iii|ii|i)"

_RS_RE = re.compile(
    rf"^(?P<root>{_ROOT})"
    r"(?P<quality>[xha])?"
    r"(?P<figures>13|11|9|7|65|64|43|42|6|5)?"
    r"(?P<flat_five>b5)?"
    r"(?:s(?P<sus>\d+))?"
    rf"(?P<applied>(?:/{_ROOT})*)$"
)

QUALITIES = {"x": "o", "h": "h", "a": "+"}
POWER_FIGURE = "5"


def _strip_tonic_keys(keys: list[str]) -> list[str]:
    # The corpus occasionally marks chords as applied to I; that is a no-op.
    while keys and keys[-1] in ("I", "i"):
        keys.pop()
    return keys


class RollingStoneNormalizer(Normalizer):
    name = "rolling_stone"
    degree_conventions = False

    def decompose(self, record: ChordRecord) -> ChordToken:
        text = record.text.strip()
        match = _RS_RE.match(text)
        if match is None:
            raise MalformedToken(text)

        form = QUALITIES.get(match.group("quality") or "", "")
        figures = match.group("figures") or ""
        if figures == POWER_FIGURE:
            form = form or "p"
            figures = ""
        figbass, extensions = cap_figbass(figures)

        if match.group("flat_five"):
            extensions += ("-5",)
        if match.group("sus"):
            extensions += (match.group("sus"),)

        applied = match.group("applied")
        keys = applied.split("/")[1:] if applied else []
        applied_to = tuple(canonical_accidentals(k) for k in _strip_tonic_keys(keys))

        return ChordToken(
            root=canonical_accidentals(match.group("root")),
            form=form,
            figbass=figbass,
            extensions=extensions,
            applied_to=applied_to,
        )
