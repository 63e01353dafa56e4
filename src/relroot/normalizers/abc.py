"""Annotated Beethoven Corpus (DCML harmony tables).

Records come from the ``numeral``, ``form``, ``figbass`` and ``changes``
columns joined as ``<numeral><form><figbass>(<changes>)``, with the
``relativeroot`` column as the applied-to text. The mode is read from the
case of ``local_key`` by the reader.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import NamedTuple

from relroot.chord import ChordToken
from relroot.errors import MalformedToken
from relroot.normalizers.base import ChordRecord, Normalizer
from relroot.rules import ChordVariant, canonical_accidentals, cap_figbass, classify, named_chord

_ABC_RE = re.compile(
    r"^(?P<numeral>Ger|Fr|It|(?:bb|b|##|#)?(?:VII|VI|V|IV|III|II|I|vii|vi|v|iv|iii|ii|i))"
    r"(?P<form>\+|M|o|%)?"
    r"(?P<figbass>65|64|43|42|2|6|7|9)?"
    r"(?:\((?P<changes>[^()]+)\))?$"
)


class _Fields(NamedTuple):
    numeral: str
    form: str
    figbass: str
    changes: str
    applied_to: tuple[str, ...]


def _diminished_without_figbass(f: _Fields) -> _Fields:
    # '%' on a bare triad is a diminished triad mislabelled as half-diminished.
    if f.form == "%" and not f.figbass:
        return f._replace(form="o")
    return f


def _half_diminished_symbol(f: _Fields) -> _Fields:
    return f._replace(form="h") if f.form == "%" else f


def _third_inversion_figure(f: _Fields) -> _Fields:
    return f._replace(figbass="42") if f.figbass == "2" else f


def _unraised_leading_tone(spelling: str) -> str:
    # '#vii' in this corpus means the seventh degree of the minor key, not ^#7.
    return spelling[1:] if spelling in ("#vii", "#VII") else spelling


def _leading_tone_spelling(f: _Fields) -> _Fields:
    return f._replace(
        numeral=_unraised_leading_tone(f.numeral),
        applied_to=tuple(_unraised_leading_tone(key) for key in f.applied_to),
    )


def _flat_spelling(f: _Fields) -> _Fields:
    return f._replace(
        numeral=canonical_accidentals(f.numeral),
        changes=canonical_accidentals(f.changes),
        applied_to=tuple(canonical_accidentals(key) for key in f.applied_to),
    )


# Applied in order; the diminished fix must see '%' before it is renamed.
ABC_RULES: tuple[tuple[str, Callable[[_Fields], _Fields]], ...] = (
    ("diminished_without_figbass", _diminished_without_figbass),
    ("half_diminished_symbol", _half_diminished_symbol),
    ("third_inversion_figure", _third_inversion_figure),
    ("leading_tone_spelling", _leading_tone_spelling),
    ("flat_spelling", _flat_spelling),
)


class ABCNormalizer(Normalizer):
    name = "abc"

    def decompose(self, record: ChordRecord) -> ChordToken:
        match = _ABC_RE.match(record.text.strip())
        if match is None:
            raise MalformedToken(record.text)

        applied_to: tuple[str, ...] = ()
        if record.applied_to:
            applied_to = tuple(record.applied_to.strip().split("/"))

        fields = _Fields(
            numeral=match.group("numeral"),
            form=match.group("form") or "",
            figbass=match.group("figbass") or "",
            changes=match.group("changes") or "",
            applied_to=applied_to,
        )
        for _, rule in ABC_RULES:
            fields = rule(fields)

        for key in fields.applied_to:
            if classify(key) is not ChordVariant.NUMERAL:
                raise MalformedToken(record.applied_to or "", "applied-to key is not a numeral")

        changes = (fields.changes,) if fields.changes else ()
        if classify(fields.numeral) is not ChordVariant.NUMERAL:
            return named_chord(fields.numeral, changes, fields.applied_to)

        figbass, upper = cap_figbass(fields.figbass)
        return ChordToken(
            root=fields.numeral,
            form=fields.form,
            figbass=figbass,
            extensions=upper + changes,
            applied_to=fields.applied_to,
        )
