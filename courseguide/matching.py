"""
Catalog matching.

Maps a cleaned course name to the closest official module name.

Cascade (first hit wins):
1. exact (case/whitespace-insensitive)
2. containment in either direction
3. significant words (len >= 3): first module containing min(2, n) of them
4. best token overlap across the catalog, accepted if >= 0.3

Whatever tier matched, the reported confidence is recomputed with
token_overlap() between the cleaned name and the resolved name.
Without an acceptable match the input comes back unchanged with confidence 0.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List

from courseguide.config import DEFAULT_POLICY, MatchingPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    matched_name: str
    confidence: float
    tier: str  # exact | contains | words | tokens | none

    @property
    def matched(self) -> bool:
        return self.tier != "none"


def _squash(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip().lower()


def _tokens(text: str, min_len: int = 1) -> List[str]:
    return [t for t in _squash(text).split(" ") if t and len(t) >= min_len]


def _related(a: str, b: str) -> bool:
    # prefix or substring relation in either direction
    return a.startswith(b) or b.startswith(a) or a in b or b in a


def token_overlap(name: str, candidate: str, min_len: int = 1) -> float:
    """
    Fraction of tokens of `name` that have a prefix/substring relation with
    some token of `candidate`. 0.0 if `name` has no tokens.
    """
    a = _tokens(name, min_len)
    if not a:
        return 0.0
    b = _tokens(candidate, min_len)
    hits = [t for t in a if any(_related(t, c) for c in b)]
    return len(hits) / len(a)


def _find_match(name: str, names: List[str], policy: MatchingPolicy) -> tuple[str, str]:
    target = _squash(name)

    for n in names:
        if _squash(n) == target:
            return n, "exact"

    for n in names:
        n_low = _squash(n)
        if n_low and (n_low in target or target in n_low):
            return n, "contains"

    words = [w for w in target.split(" ") if len(w) >= policy.significant_word_len]
    if words:
        needed = min(policy.max_significant_hits, len(words))
        for n in names:
            n_low = _squash(n)
            hits = [w for w in words if w in n_low]
            if len(hits) >= needed:
                return n, "words"

    best = ""
    best_score = 0.0
    for n in names:
        score = token_overlap(name, n, min_len=policy.min_token_len)
        if score > best_score:
            best, best_score = n, score

    if best and best_score >= policy.min_token_overlap:
        return best, "tokens"
    return name, "none"


def resolve(name: str, names: Iterable[str], policy: MatchingPolicy = DEFAULT_POLICY) -> MatchResult:
    """
    Resolve `name` against the official module names.

    Example:
        resolve("Machine Learning Basic", ["Machine Learning - Basic Methods"])
        -> MatchResult("Machine Learning - Basic Methods", 1.0, "words")
    """
    official = list(names)
    if not _squash(name) or not official:
        return MatchResult(matched_name=name, confidence=0.0, tier="none")

    matched, tier = _find_match(name, official, policy)
    if tier == "none":
        logger.debug("No catalog match for %r", name)
        return MatchResult(matched_name=name, confidence=0.0, tier="none")

    confidence = token_overlap(name, matched)
    logger.debug("Matched %r -> %r (%s, confidence %.2f)", name, matched, tier, confidence)
    return MatchResult(matched_name=matched, confidence=confidence, tier=tier)
