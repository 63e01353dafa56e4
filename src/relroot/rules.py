"""Corpus-agnostic normalization rules shared by every normalizer.

Each corpus front end maps its own spelling onto intermediate symbols; the
rules here then turn those into canonical tokens:

- flat spellings (``b``, ``bb``) become ``-``, ``--``
- named chords (augmented sixths, common-tone diminished sevenths) are
  classified once and given their fixed roots
- ``VII`` and, in minor, ``III``/``VI`` gain their leading flat
- figures beyond the seventh move into the extensions
- a cadential six-four (``I64`` or an explicit ``V(64)``) followed by a
  dominant on the same key collapses into a single dominant tagged
  ``(64)``
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Iterator, Sequence

from relroot.chord import ROOT_PATTERN, ChordToken
from relroot.errors import AmbiguousCadentialMerge, MalformedToken

logger = logging.getLogger(__name__)

MAJOR = "major"
MINOR = "minor"

_FLAT_RE = re.compile(r"b(?=[b#-]*[\dIViv])")
_ROOT_RE = re.compile(rf"^{ROOT_PATTERN}$")


def canonical_accidentals(text: str) -> str:
    """Spell flats as ``-`` (``bVII`` -> ``-VII``, ``b9`` -> ``-9``)."""
    return _FLAT_RE.sub("-", text)


# ---------------------------------------------------------------------------
# Named chords
# ---------------------------------------------------------------------------


class ChordVariant(enum.Enum):
    NUMERAL = "numeral"
    AUGMENTED_SIXTH = "augmented_sixth"
    COMMON_TONE = "common_tone"


# Fixed diatonic roots of the named chords: (root, form, figbass).
NAMED_CHORDS: dict[str, tuple[str, str, str]] = {
    "Ger": ("#iv", "Ger", ""),
    "It": ("#iv", "It", ""),
    "Fr": ("II", "Fr", ""),
    "Ct": ("#ii", "Ct", "42"),
}


def classify(name: str) -> ChordVariant:
    """Classify a root field before any transposition logic runs."""
    if name == "Ct":
        return ChordVariant.COMMON_TONE
    if name in NAMED_CHORDS:
        return ChordVariant.AUGMENTED_SIXTH
    if _ROOT_RE.match(name):
        return ChordVariant.NUMERAL
    raise MalformedToken(name, "unrecognized root")


def named_chord(
    name: str,
    extensions: tuple[str, ...] = (),
    applied_to: tuple[str, ...] = (),
) -> ChordToken:
    """Build the token for a named chord (``Ger``, ``It``, ``Fr`` or ``Ct``)."""
    try:
        root, form, figbass = NAMED_CHORDS[name]
    except KeyError:
        raise MalformedToken(name, "not a named chord") from None
    return ChordToken(root, form, figbass, extensions, applied_to)


# ---------------------------------------------------------------------------
# Degree conventions
# ---------------------------------------------------------------------------


def _mode_of_key(spelling: str) -> str:
    return MINOR if spelling.lstrip("-#").islower() else MAJOR


def _flatten_degree(spelling: str, mode: str) -> str:
    # Upper-case only: ``vii`` is the leading-tone chord, ``VII`` the subtonic.
    if spelling == "VII":
        return "-VII"
    if mode == MINOR and spelling in ("III", "VI"):
        return "-" + spelling
    return spelling


def apply_degree_conventions(token: ChordToken, mode: str) -> ChordToken:
    """Add the conventional flats to the root and every applied-to key.

    ``mode`` is the local key's mode. Inside an applied chain each numeral is
    read in the mode of the key it is applied to (the case of that key), and
    the outermost key in ``mode``.
    """
    contexts = [_mode_of_key(key) for key in token.applied_to] + [mode]
    root = _flatten_degree(token.root, contexts[0])
    applied_to = tuple(
        _flatten_degree(key, context) for key, context in zip(token.applied_to, contexts[1:])
    )
    return token.with_(root=root, applied_to=applied_to)


# ---------------------------------------------------------------------------
# Figures and extensions
# ---------------------------------------------------------------------------

UPPER_EXTENSIONS = ("9", "11", "13")


def cap_figbass(figures: str) -> tuple[str, tuple[str, ...]]:
    """Split figures beyond the seventh into ``("7", (figures,))``."""
    if figures in UPPER_EXTENSIONS:
        return "7", (figures,)
    return figures, ()


def dedupe_extensions(token: ChordToken) -> ChordToken:
    """Drop repeated extensions and any already expressed by the figbass."""
    seen: set[str] = set()
    kept: list[str] = []
    for ext in token.extensions:
        if ext in seen or ext == token.figbass:
            continue
        seen.add(ext)
        kept.append(ext)
    if len(kept) == len(token.extensions):
        return token
    return token.with_(extensions=tuple(kept))


# ---------------------------------------------------------------------------
# Cadential six-four
# ---------------------------------------------------------------------------

CADENTIAL_TAG = "64"


def is_cadential_six_four(token: ChordToken) -> bool:
    return (
        token.degree == "I"
        and not token.accidental
        and token.form == ""
        and token.figbass == CADENTIAL_TAG
    )


def is_cadential_label(token: ChordToken) -> bool:
    """An explicitly labelled cadential six-four, ``V(64)``."""
    return (
        token.root == "V"
        and token.form == ""
        and token.figbass == ""
        and token.extensions[:1] == (CADENTIAL_TAG,)
    )


def is_dominant(token: ChordToken) -> bool:
    return (
        token.root == "V"
        and token.form == ""
        and token.figbass in ("", "7")
        and not is_cadential_label(token)
    )


def _merge_pair(six_four: ChordToken, dominant: ChordToken) -> ChordToken:
    if six_four.applied_to != dominant.applied_to:
        raise AmbiguousCadentialMerge(
            f"six-four on /{'/'.join(six_four.applied_to)} "
            f"but dominant on /{'/'.join(dominant.applied_to)}"
        )
    return dominant.with_(extensions=(CADENTIAL_TAG,) + dominant.extensions)


def iter_cadential_merges(
    tokens: Sequence[ChordToken],
    tonic_six_fours: bool = True,
) -> Iterator[tuple[int, ChordToken]]:
    """Yield ``(position, token)`` after collapsing cadential six-fours.

    ``position`` is the index in ``tokens`` of the last input the output token
    covers (the dominant, for a merged pair). The six-four is either an
    explicit ``V(64)`` label or, when ``tonic_six_fours`` is set, a tonic
    six-four chord. Runs on unresolved tokens so the applied-to keys can be
    compared; pairs whose keys disagree are left as two tokens.
    """

    def opens_cadence(token: ChordToken) -> bool:
        return is_cadential_label(token) or (tonic_six_fours and is_cadential_six_four(token))

    i = 0
    while i < len(tokens):
        current = tokens[i]
        if i + 1 < len(tokens) and opens_cadence(current) and is_dominant(tokens[i + 1]):
            try:
                merged = _merge_pair(current, tokens[i + 1])
            except AmbiguousCadentialMerge as exc:
                logger.debug("Skipping cadential merge: %s", exc)
            else:
                yield i + 1, merged
                i += 2
                continue
        yield i, current
        i += 1


def merge_cadential_six_fours(
    tokens: Sequence[ChordToken],
    tonic_six_fours: bool = True,
) -> list[ChordToken]:
    """Collapse each cadential six-four + dominant pair into one tagged dominant."""
    return [token for _, token in iter_cadential_merges(tokens, tonic_six_fours)]
