"""
Fuzzy string matching primitives for contact deduplication.

Uses Levenshtein distance to find names that likely refer to the same
person despite typos, missing letters or different capitalisation.

Example matches:
- "Jon Smith" vs "John Smith"
- "katie tucker" vs "Katie Tucker"
"""

import logging
from typing import Iterable

logger = logging.getLogger(__name__)


def levenshtein_distance(s1: str, s2: str) -> int:
    """
    Edit distance between two names, case-sensitive.

    Only two rows sized by the shorter string are kept, so scoring every
    contact pair allocates little.
    """
    if len(s1) < len(s2):
        s1, s2 = s2, s1
    if not s2:
        return len(s1)

    above = list(range(len(s2) + 1))
    for row, ch1 in enumerate(s1, start=1):
        here = [row]
        for col, ch2 in enumerate(s2, start=1):
            here.append(min(
                above[col] + 1,                    # drop ch1
                here[col - 1] + 1,                 # insert ch2
                above[col - 1] + (ch1 != ch2),     # keep or swap
            ))
        above = here

    return above[-1]


def string_similarity(s1: str, s2: str) -> float:
    """
    Case-insensitive similarity between two strings.

    1 minus the edit distance divided by the longer string's length.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Similarity ratio (0.0 to 1.0); 1.0 when both are empty
    """
    s1 = (s1 or "").lower()
    s2 = (s2 or "").lower()

    if not s1 and not s2:
        return 1.0

    if not s1 or not s2:
        return 0.0

    distance = levenshtein_distance(s1, s2)
    max_len = max(len(s1), len(s2))

    return 1.0 - (distance / max_len)


def tokens_match(tokens_a: Iterable[str], tokens_b: Iterable[str]) -> bool:
    """
    Check if two name token lists describe the same person.

    True when both are non-empty and one is a subset of the other, which
    catches "Katie Tucker" vs "Katie Marie Tucker".
    """
    set_a = set(tokens_a)
    set_b = set(tokens_b)
    if not set_a or not set_b:
        return False
    return set_a <= set_b or set_b <= set_a
