"""
Duplicate contact matching.

Pure, side-effect-free scoring used by the dedup service:
- name_canonicalizer: strip suffixes/initials, tokenize names
- fuzzy_matcher: edit-distance similarity and token-subset matching
- contact_matcher: rule-based contact pair scoring with reasons
"""

from rolodex.matching.contact_matcher import (
    ContactMatcher,
    ContactMatchResult,
    ContactProfile,
)
from rolodex.matching.fuzzy_matcher import levenshtein_distance, string_similarity, tokens_match
from rolodex.matching.name_canonicalizer import canonicalize_name, name_tokens

__all__ = [
    "ContactMatcher",
    "ContactMatchResult",
    "ContactProfile",
    "levenshtein_distance",
    "string_similarity",
    "tokens_match",
    "canonicalize_name",
    "name_tokens",
]
