"""Human-readable labels from identifier-style keys."""

from __future__ import annotations

import re
from typing import Optional

_DIGIT_BOUNDARY = re.compile(r"(?<=[A-Za-z])(?=\d)|(?<=\d)(?=[A-Za-z])")
_WORD_START = re.compile(r"\b[a-z]")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")


def id_to_word(identifier: Optional[str]) -> Optional[str]:
    """Turn an API key such as ``team2Number`` into ``Team 2 Number``.

    Splits at letter/digit boundaries and at lowercase-to-uppercase
    boundaries, and capitalises the first letter of every word. ``None`` and
    the empty string are returned unchanged.

    >>> id_to_word("scoreRedFinal")
    'Score Red Final'
    """
    if not identifier:
        return identifier
    text = _DIGIT_BOUNDARY.sub(" ", identifier)
    text = _WORD_START.sub(lambda m: m.group(0).upper(), text)
    return _CAMEL_BOUNDARY.sub(" ", text)
