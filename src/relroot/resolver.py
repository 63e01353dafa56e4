"""Applied-chord resolution.

An applied chord ``num/den`` is rewritten as the single numeral reached by
transposing ``den`` by the interval ``num`` spans above the tonic. Case
(triad quality) is taken from the numerator only; the lattice itself is
case-insensitive.

Chains such as ``V/V/ii`` are folded right to left: ``V/ii`` first, then the
numerator applied to that result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

from relroot.chord import ChordToken
from relroot.lattice import ROMAN_LATTICE

logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    root: str
    form: str = ""


def _is_minor(spelling: str) -> bool:
    return spelling.lstrip("-#").islower()


def resolve(numerator: str, denominator: str, seventh: bool = False) -> Resolution:
    """Resolve ``numerator`` applied to ``denominator``.

    Both arguments must be bare lattice spellings (accidentals plus degree
    letters). ``seventh`` marks a numerator bearing a seventh; a major result
    then carries the ``d`` form (major triad with minor seventh).

    Raises:
        UnknownSpelling: if either spelling is not on the lattice.
    """
    steps = ROMAN_LATTICE.interval(numerator)
    root = ROMAN_LATTICE.transpose(denominator, steps)
    if _is_minor(numerator):
        root = root.lower()

    form = "d" if seventh and not _is_minor(root) else ""
    return Resolution(root, form)


def resolve_chain(
    numerator: str,
    denominators: Sequence[str],
    seventh: bool = False,
) -> Resolution:
    """Resolve a numerator applied through a chain of keys.

    ``denominators`` are given as written, outermost first, so ``V/V/ii`` is
    ``resolve_chain("V", ["V", "ii"])``.
    """
    if not denominators:
        raise ValueError("resolve_chain needs at least one denominator")

    key = denominators[-1]
    for intermediate in reversed(denominators[:-1]):
        key = resolve(intermediate, key).root
    return resolve(numerator, key, seventh)


def resolve_token(token: ChordToken) -> ChordToken:
    """Fold a token's ``applied_to`` chain into its root."""
    if not token.is_applied:
        return token

    resolution = resolve_chain(token.root, token.applied_to, token.has_seventh)
    # An explicit quality always wins over the inferred dominant marker.
    form = token.form or resolution.form
    logger.debug(
        "Resolved %s/%s -> %s%s",
        token.root,
        "/".join(token.applied_to),
        resolution.root,
        form,
    )
    return token.with_(root=resolution.root, form=form, applied_to=())
