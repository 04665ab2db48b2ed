"""
Contact name canonicalization.

Reduces a display name to a comparable form:
- Strips a trailing parenthesized suffix ("Jane Doe (PhD)")
- Strips professional/generational suffixes, chained or not
  ("John Smith Jr., J.D.")
- Strips middle initials ("Katie M. Tucker" -> "Katie Tucker")
- Collapses whitespace

Case is preserved in the canonical name; tokens are lowercase.
"""

import re
from typing import List

MAX_SUFFIX_PASSES = 3

PAREN_SUFFIX_PATTERN = re.compile(r"\s*\([^)]*\)\s*$")

# Credentials and generational suffixes, optionally preceded by a comma or dash
NAME_SUFFIXES = (
    r"J\.?D\.?", r"M\.?D\.?", r"Ph\.?D\.?", r"D\.?O\.?",
    "MBA", "MPA", "MPH", "CPA", "CFP", "CFA", "LCSW", "RN",
    r"Jr\.?", r"Sr\.?", "III", "II", "IV", "V", r"Esq\.?",
)
SUFFIX_PATTERN = re.compile(
    r"(?:[,\s\-]+(?:" + "|".join(NAME_SUFFIXES) + r"))+\s*$",
    re.IGNORECASE,
)

MIDDLE_INITIAL_PATTERN = re.compile(r"\s+[A-Za-z]\.?(?=\s)")
WHITESPACE_PATTERN = re.compile(r"\s+")


def _canonicalize_once(name: str) -> str:
    n = name.strip()
    n = PAREN_SUFFIX_PATTERN.sub("", n)

    for _ in range(MAX_SUFFIX_PASSES):
        before = n
        n = SUFFIX_PATTERN.sub("", n)
        n = PAREN_SUFFIX_PATTERN.sub("", n)
        if n == before:
            break

    n = MIDDLE_INITIAL_PATTERN.sub("", n)
    return WHITESPACE_PATTERN.sub(" ", n).strip()


def canonicalize_name(name: str) -> str:
    """
    Normalize a display name for comparison.

    Every step only removes characters, so repeating the pass until the
    result stops changing terminates, and makes the function idempotent.

    Args:
        name: Raw display name (any Unicode/punctuation)

    Returns:
        Canonical display name ("" for empty input)
    """
    if not name:
        return ""

    current = name
    while True:
        canonical = _canonicalize_once(current)
        if canonical == current:
            return canonical
        current = canonical


def name_tokens(name: str) -> List[str]:
    """Lowercase tokens of the canonical name, empty tokens discarded."""
    return [t for t in canonicalize_name(name).lower().split() if t]
