"""McGill Billboard chord labels (Harte syntax, absolute pitch roots).

Unlike the other corpora the labels name pitches, not degrees; each root is
placed on the Roman-numeral lattice relative to the tonic carried by the
record. Degrees come out spelled against the major scale, so no degree
conventions are applied.

Labels are split and validated by :mod:`mir_eval.chord`; the triad quality,
seventh and form are then read off the pitch content of the shorthand plus
any added degrees.
"""

from __future__ import annotations

import mir_eval

from relroot.chord import ChordToken
from relroot.errors import MalformedToken
from relroot.lattice import degree_of
from relroot.normalizers.base import ChordRecord, Normalizer
from relroot.rules import canonical_accidentals

NO_CHORD = frozenset({"N", "X", "&pause"})
POWER_QUALITIES = frozenset({"1", "5"})

SEVENTH_DEGREES = frozenset({"7", "9", "11", "13"})

# bass degree (accidentals ignored) -> (triad figbass, seventh figbass)
INVERSIONS = {"3": ("6", "65"), "5": ("64", "43"), "7": ("42", "42")}

# Semitones above the root.
MAJOR_SECOND, MINOR_THIRD, MAJOR_THIRD, PERFECT_FOURTH = 2, 3, 4, 5
DIMINISHED_FIFTH, PERFECT_FIFTH, AUGMENTED_FIFTH = 6, 7, 8
MAJOR_SIXTH = DIMINISHED_SEVENTH = 9
MINOR_SEVENTH, MAJOR_SEVENTH = 10, 11


def _semitone(degree: str) -> int:
    return mir_eval.chord.scale_degree_to_semitone(degree)


def _number(degree: str) -> str:
    return degree.lstrip("b#")


def _quality_content(quality: str) -> set[int]:
    return {i for i, on in enumerate(mir_eval.chord.QUALITIES[quality]) if on}


def _quality_extensions(quality: str, content: set[int]) -> list[str]:
    """Added tones implied by the shorthand itself (``9``, ``sus4``, ``maj6``)."""
    _, upper = mir_eval.chord.reduce_extended_quality(quality)
    upper = {d for d in upper if _number(d) != "7"}
    if upper:
        # ``13`` implies 9 and 11; only the highest is written.
        return [max(upper, key=_semitone)]

    extensions = []
    has_third = MINOR_THIRD in content or MAJOR_THIRD in content
    if not has_third and PERFECT_FOURTH in content:
        extensions.append("4")
    if not has_third and MAJOR_SECOND in content:
        extensions.append("2")
    if MAJOR_SIXTH in content and DIMINISHED_FIFTH not in content:
        extensions.append("6")
    return extensions


class BillboardNormalizer(Normalizer):
    name = "billboard"
    degree_conventions = False

    def decompose(self, record: ChordRecord) -> ChordToken:
        text = record.text.strip()
        if text in NO_CHORD or ":1/1" in text:
            raise MalformedToken(text, "no chord")
        if not record.key:
            raise MalformedToken(text, "no tonic for absolute label")

        try:
            # encode() validates the root, shorthand, degrees and bass.
            mir_eval.chord.encode(text)
            pitch, quality, degrees, bass = mir_eval.chord.split(text)
        except mir_eval.chord.InvalidChordException as exc:
            raise MalformedToken(text, exc.message) from None

        # Omitted degrees ('*5') carry no pitch.
        omitted = {_semitone(d.lstrip("*")) for d in degrees if d.startswith("*")}
        added = sorted(d for d in degrees if not d.startswith("*"))

        content = _quality_content(quality)
        content |= {_semitone(d) for d in added + [bass] if _semitone(d) < 12}
        content -= omitted

        minor = MINOR_THIRD in content and MAJOR_THIRD not in content
        diminished = minor and DIMINISHED_FIFTH in content and PERFECT_FIFTH not in content
        seventh = (
            MINOR_SEVENTH in content
            or MAJOR_SEVENTH in content
            or (diminished and DIMINISHED_SEVENTH in content)
            or any(_number(d) in SEVENTH_DEGREES for d in added)
        )
        dominant = MAJOR_THIRD in content and MINOR_SEVENTH in content

        form = ""
        if quality in POWER_QUALITIES:
            form = "p"
        elif diminished:
            form = "h" if MINOR_SEVENTH in content else "o"
        elif MAJOR_THIRD in content and AUGMENTED_FIFTH in content and PERFECT_FIFTH not in content:
            form = "+"
        elif MAJOR_SEVENTH in content:
            form = "M"

        root = degree_of(pitch, record.key)
        if minor:
            root = root.lower()
        if dominant and not form and root.isupper() and root != "V":
            form = "d"

        figbass = "7" if seventh else ""
        extensions = _quality_extensions(quality, _quality_content(quality))
        extensions += [d for d in added if _number(d) != "7"]

        bass_degree = _number(bass)
        if bass_degree in INVERSIONS:
            triad, tetrad = INVERSIONS[bass_degree]
            figbass = tetrad if seventh else triad
        elif bass_degree != "1":
            extensions.append(bass)

        if form == "p":
            figbass = ""
            extensions = [e for e in extensions if _number(e) != "5"]

        extensions.sort(key=_semitone, reverse=True)
        return ChordToken(
            root=root,
            form=form,
            figbass=figbass,
            extensions=tuple(canonical_accidentals(e) for e in extensions),
        )
