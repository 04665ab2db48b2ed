"""
Contact similarity scoring for deduplication.

Scores a pair of contacts with an ordered list of independent rules so
every candidate carries human-readable reasons ("why does the system
think these are the same person?") instead of an opaque weighted sum.

Name rules are exclusive and evaluated in priority order - the first one
that fires contributes its reason and confidence floor:
1. NormalizedNameRule - canonical name tokens match ("Katie M. Tucker"
   vs "Katie Tucker")
2. SimilarNameRule - edit-distance similarity above 0.8
3. SameCompanyRule - looser similarity (above 0.6) backed by a shared company

Identifier rules are always evaluated and add to the reasons:
- SameEmailRule - primary emails equal, case-insensitive
- SameProfileLinkRule - LinkedIn URLs exactly equal

Uses string_similarity / tokens_match from rolodex.matching.fuzzy_matcher.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, Tuple

from rolodex.matching.fuzzy_matcher import string_similarity, tokens_match
from rolodex.matching.name_canonicalizer import canonicalize_name, name_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactProfile:
    """
    Comparable snapshot of a contact.

    Canonical name and tokens are computed once per contact so the
    pairwise scan does not redo them for every pair.
    """

    id: int
    name: str
    canonical_name: str
    tokens: Tuple[str, ...]
    email: Optional[str] = None
    linkedin_url: Optional[str] = None
    company_ids: FrozenSet[int] = frozenset()
    company_names: FrozenSet[str] = frozenset()

    @classmethod
    def from_contact(cls, contact) -> "ContactProfile":
        """Build a profile from a Contact row (primary + additional companies)."""
        company_ids = set()
        company_names = set()

        if contact.company_id:
            company_ids.add(contact.company_id)
        if contact.company is not None and contact.company.name:
            company_names.add(contact.company.name.strip().lower())
        if contact.company_name:
            company_names.add(contact.company_name.strip().lower())

        for link in contact.company_links or []:
            company_ids.add(link.company_id)
            if link.company is not None and link.company.name:
                company_names.add(link.company.name.strip().lower())

        return cls(
            id=contact.id,
            name=contact.name or "",
            canonical_name=canonicalize_name(contact.name or ""),
            tokens=tuple(name_tokens(contact.name or "")),
            email=contact.email,
            linkedin_url=contact.linkedin_url,
            company_ids=frozenset(company_ids),
            company_names=frozenset(company_names),
        )

    def shares_company_with(self, other: "ContactProfile") -> bool:
        """Shared company by id, or by case-insensitive name."""
        return bool(
            (self.company_ids & other.company_ids)
            or (self.company_names & other.company_names)
        )


@dataclass
class MatchContext:
    """A pair under comparison plus the name similarity shared by all rules."""

    a: ContactProfile
    b: ContactProfile
    name_similarity: float


@dataclass
class ContactMatchResult:
    """Result of comparing two contacts."""

    score: float  # 0.0 to 1.0
    reasons: List[str] = field(default_factory=list)
    name_similarity: float = 0.0

    @property
    def is_candidate(self) -> bool:
        return len(self.reasons) > 0


class MatchRule:
    """
    One independent duplicate signal.

    evaluate() returns the reason string when the rule fires, else None.
    A fired rule raises the pair's score to at least `floor`.
    """

    name = "rule"
    floor: Optional[float] = None

    def evaluate(self, ctx: MatchContext) -> Optional[str]:
        raise NotImplementedError


class NormalizedNameRule(MatchRule):
    """
    Canonical token sets match although the raw names differ.

    Requires at least two tokens on each side so a lone first name
    never matches a full name.
    """

    name = "normalized_name"

    def __init__(self, floor: float = 0.95):
        self.floor = floor

    def evaluate(self, ctx: MatchContext) -> Optional[str]:
        if len(ctx.a.tokens) < 2 or len(ctx.b.tokens) < 2:
            return None
        if not tokens_match(ctx.a.tokens, ctx.b.tokens):
            return None
        if _fold(ctx.a.name) == _fold(ctx.b.name):
            return None
        return "Same name (normalized)"


class SimilarNameRule(MatchRule):
    name = "similar_name"

    def __init__(self, threshold: float = 0.8):
        self.threshold = threshold

    def evaluate(self, ctx: MatchContext) -> Optional[str]:
        if ctx.name_similarity > self.threshold:
            return f"Similar names ({ctx.name_similarity:.0%})"
        return None


class SameCompanyRule(MatchRule):
    name = "same_company"

    def __init__(self, threshold: float = 0.6):
        self.threshold = threshold

    def evaluate(self, ctx: MatchContext) -> Optional[str]:
        if ctx.name_similarity > self.threshold and ctx.a.shares_company_with(ctx.b):
            return f"Similar names + same company ({ctx.name_similarity:.0%})"
        return None


class SameEmailRule(MatchRule):
    name = "same_email"

    def evaluate(self, ctx: MatchContext) -> Optional[str]:
        a, b = ctx.a.email, ctx.b.email
        if a and b and a.strip().lower() == b.strip().lower():
            return "Same email"
        return None


class SameProfileLinkRule(MatchRule):
    name = "same_profile_link"

    def evaluate(self, ctx: MatchContext) -> Optional[str]:
        a, b = ctx.a.linkedin_url, ctx.b.linkedin_url
        if a and b and a == b:
            return "Same LinkedIn"
        return None


def _fold(name: str) -> str:
    return " ".join((name or "").lower().split())


class ContactMatcher:
    """
    Scores contact pairs with ordered, explainable rules.

    score = max(name similarity, floors of every rule that fired). Any pair
    whose canonical tokens match (one set contains the other) also gets the
    normalized-name floor, whichever rules supplied its reasons.
    A pair with no reasons is not a duplicate candidate.
    """

    def __init__(
        self,
        similar_name_threshold: float = 0.8,
        same_company_threshold: float = 0.6,
        normalized_name_score: float = 0.95,
    ):
        self.normalized_name_score = normalized_name_score
        self.name_rules: Sequence[MatchRule] = (
            NormalizedNameRule(floor=normalized_name_score),
            SimilarNameRule(threshold=similar_name_threshold),
            SameCompanyRule(threshold=same_company_threshold),
        )
        self.identifier_rules: Sequence[MatchRule] = (
            SameEmailRule(),
            SameProfileLinkRule(),
        )

    @classmethod
    def from_settings(cls, settings) -> "ContactMatcher":
        return cls(
            similar_name_threshold=settings.similar_name_threshold,
            same_company_threshold=settings.same_company_name_threshold,
            normalized_name_score=settings.normalized_name_score,
        )

    def name_similarity(self, a: ContactProfile, b: ContactProfile) -> float:
        """Best of raw-name and canonical-name similarity."""
        return max(
            string_similarity(a.name, b.name),
            string_similarity(a.canonical_name, b.canonical_name),
        )

    def compare(self, a, b) -> ContactMatchResult:
        """
        Compare two contacts (Contact rows or ContactProfiles).

        Returns:
            ContactMatchResult with score, ordered reasons and raw name similarity
        """
        if not isinstance(a, ContactProfile):
            a = ContactProfile.from_contact(a)
        if not isinstance(b, ContactProfile):
            b = ContactProfile.from_contact(b)

        ctx = MatchContext(a=a, b=b, name_similarity=self.name_similarity(a, b))
        reasons: List[str] = []
        score = ctx.name_similarity

        for rule in self.name_rules:
            reason = rule.evaluate(ctx)
            if reason:
                reasons.append(reason)
                if rule.floor is not None:
                    score = max(score, rule.floor)
                break

        for rule in self.identifier_rules:
            reason = rule.evaluate(ctx)
            if reason:
                reasons.append(reason)
                if rule.floor is not None:
                    score = max(score, rule.floor)

        if tokens_match(a.tokens, b.tokens):
            score = max(score, self.normalized_name_score)

        return ContactMatchResult(
            score=min(max(score, 0.0), 1.0),
            reasons=reasons,
            name_similarity=ctx.name_similarity,
        )
