"""
Transcript analysis: booked courses from a finished conversation.

Two stages:
1. local: pattern extraction over the last assistant turns, then the
   booking-verb proximity filter
2. only if stage 1 is empty: the explicit "booking: <Name>" confirmation
   in the final assistant turn, and if that fails too, the remote extractor

Every surviving candidate is then normalized, resolved against the catalog
and gated:
- confidence < 0.2                                  -> dropped
- cleaned name starts with module/course/subject    -> dropped
- cleaned name has fewer than 2 words               -> dropped

ECTS priority: candidate value > value found anywhere in the transcript >
catalog value, each only if within (0, 30]. The final batch is deduplicated
by resolved name (first wins).
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Dict, Iterable, List, Optional

from courseguide.catalog import CatalogStore
from courseguide.config import DEFAULT_POLICY, MatchingPolicy
from courseguide.extract import (
    MessageLike,
    extract_candidates,
    extract_confirmed_course,
    filter_booked,
    last_assistant_message,
    transcript_text,
)
from courseguide.fallback import NullExtractor
from courseguide.matching import resolve
from courseguide.model import AnalysisResult, CourseRecommendation, ExtractedCandidate
from courseguide.normalize import ects_in_range, extract_ects, extract_semester, normalize_course_name
from courseguide.recommendations import RecommendationStore

logger = logging.getLogger(__name__)

_GENERIC_NAME = re.compile(r"^(?:module|course|subject)\b", re.IGNORECASE)


def is_generic_name(name: str, policy: MatchingPolicy = DEFAULT_POLICY) -> bool:
    return bool(_GENERIC_NAME.match(name.strip())) or len(name.split()) < policy.min_name_words


def group_by_semester(courses: Iterable[CourseRecommendation]) -> Dict[str, List[CourseRecommendation]]:
    out: Dict[str, List[CourseRecommendation]] = {}
    for c in courses:
        if c.semester:
            out.setdefault(c.semester, []).append(c)
    return out


class TranscriptAnalyzer:
    def __init__(
        self,
        catalog: CatalogStore,
        fallback: Optional[NullExtractor] = None,
        policy: MatchingPolicy = DEFAULT_POLICY,
    ) -> None:
        self.catalog = catalog
        self.fallback = fallback or NullExtractor()
        self.policy = policy
        # one analysis at a time per analyzer
        self._in_flight = threading.Lock()

    # -- stage 1 + 2 -------------------------------------------------------

    def local_candidates(self, text: str) -> List[ExtractedCandidate]:
        raw = extract_candidates(text, self.policy)
        booked = filter_booked(raw, text, self.policy)
        logger.debug("Extracted %d candidate(s), %d with booking context", len(raw), len(booked))
        return booked

    def collect_candidates(self, messages: List[MessageLike]) -> List[ExtractedCandidate]:
        text = transcript_text(messages, self.policy.assistant_turns)
        candidates = self.local_candidates(text)
        if candidates:
            return candidates

        final = last_assistant_message(messages)
        confirmed = extract_confirmed_course(final)
        if confirmed and len(confirmed) >= self.policy.min_confirmed_name_len:
            logger.debug("Using explicit booking confirmation %r", confirmed)
            return [
                ExtractedCandidate(
                    raw_name=confirmed,
                    ects=extract_ects(final, self.policy),
                    semester=extract_semester(final),
                )
            ]

        logger.info("No local candidates, asking the remote extractor")
        return self.fallback.extract(text)

    # -- merge gate --------------------------------------------------------

    def _valid_ects(self, value: Optional[float]) -> Optional[float]:
        if value is None or not ects_in_range(value, self.policy):
            return None
        return value

    def resolve_candidates(self, candidates: Iterable[ExtractedCandidate], text: str) -> List[CourseRecommendation]:
        """
        Turn candidates into course recommendations (see module docstring).
        `text` is the analysed transcript, used for global ECTS/semester fallbacks.
        """
        names = self.catalog.all_course_names()
        global_ects = extract_ects(text, self.policy)
        global_semester = extract_semester(text)

        by_name: Dict[str, CourseRecommendation] = {}
        for candidate in candidates:
            cleaned = normalize_course_name(candidate.raw_name)
            if not cleaned:
                continue

            match = resolve(cleaned, names, self.policy)
            if match.confidence < self.policy.min_confidence:
                logger.debug("Low confidence match (%.2f) for %r -> %r", match.confidence, cleaned, match.matched_name)
                continue
            if is_generic_name(cleaned, self.policy):
                logger.debug("Rejected generic/incomplete mention %r", cleaned)
                continue

            official = match.matched_name
            if official in by_name:
                continue

            module = self.catalog.get_module_by_name(official)
            ects = self._valid_ects(candidate.ects)
            if ects is None:
                ects = global_ects
            if ects is None and module is not None:
                ects = self._valid_ects(module.ects)
            page = module.page if module is not None else self.catalog.find_course_page(official)

            by_name[official] = CourseRecommendation(
                name=official,
                ects=ects,
                semester=candidate.semester or global_semester,
                page=page,
            )

        return list(by_name.values())

    # -- entry points ------------------------------------------------------

    def analyze(self, messages: Iterable[MessageLike]) -> AnalysisResult:
        msgs = list(messages)
        text = transcript_text(msgs, self.policy.assistant_turns)
        booked = self.resolve_candidates(self.collect_candidates(msgs), text)
        logger.info("Found %d booked course(s)", len(booked))
        return AnalysisResult(booked_courses=booked, assigned_by_semester=group_by_semester(booked))

    def analyze_and_merge(self, messages: Iterable[MessageLike], store: RecommendationStore) -> AnalysisResult:
        """
        Analyze and add the booked courses to `store`. Overlapping calls are
        serialized; a course already in the store is not added twice.
        """
        with self._in_flight:
            result = self.analyze(messages)
            stored = [store.add(course) for course in result.booked_courses]
        return AnalysisResult(booked_courses=stored, assigned_by_semester=group_by_semester(stored))
