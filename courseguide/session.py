"""
Advising session: the API the presentation layer talks to.

Wires together the catalog, the recommendation store, the semester
planner, the bookmarks and the transcript analyzer for one session.
Everything lives in memory and is gone when the session ends.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from courseguide.analyzer import TranscriptAnalyzer
from courseguide.bookmarks import BookmarkStore
from courseguide.catalog import CatalogStore
from courseguide.config import DEFAULT_POLICY, MatchingPolicy, Settings
from courseguide.extract import MessageLike
from courseguide.fallback import GeminiExtractor, NullExtractor
from courseguide.model import AnalysisResult, Bookmark, CourseRecommendation, ModuleRecord
from courseguide.planner import SemesterPlanner
from courseguide.recommendations import RecommendationStore

LIBRARY_COLOR = "#0ea5e9"


class AdvisingSession:
    def __init__(
        self,
        catalog: CatalogStore,
        fallback: Optional[NullExtractor] = None,
        policy: MatchingPolicy = DEFAULT_POLICY,
    ) -> None:
        self.catalog = catalog
        self.recommendations = RecommendationStore()
        self.planner = SemesterPlanner(self.recommendations)
        self.bookmarks = BookmarkStore()
        self.analyzer = TranscriptAnalyzer(catalog, fallback=fallback, policy=policy)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdvisingSession":
        fallback: NullExtractor
        if settings.gemini_api_key:
            fallback = GeminiExtractor(
                settings.gemini_api_key,
                model=settings.gemini_model,
                timeout=settings.fallback_timeout,
            )
        else:
            fallback = NullExtractor()
        return cls(CatalogStore(settings.catalog_source), fallback=fallback)

    # -- recommendations ---------------------------------------------------

    def add_recommendation(self, course: CourseRecommendation) -> CourseRecommendation:
        return self.recommendations.add(course)

    def update_recommendation(self, course: CourseRecommendation) -> bool:
        return self.recommendations.update(course)

    def remove_recommendation(self, course_id: str) -> bool:
        return self.recommendations.remove(course_id)

    def add_module_to_recommendations(
        self, name: str, ects_override: Optional[float] = None
    ) -> Optional[CourseRecommendation]:
        """
        Module library "add" action. Returns None if the module is unknown.
        """
        module = self.catalog.get_module_by_name(name)
        if module is None:
            return None
        ects = ects_override if ects_override is not None else module.ects
        return self.recommendations.add(
            CourseRecommendation(name=module.name, page=module.page, ects=ects, color=LIBRARY_COLOR)
        )

    # -- catalog -----------------------------------------------------------

    def get_all_course_names(self) -> List[str]:
        return self.catalog.all_course_names()

    def find_course_page(self, name: str) -> Optional[int]:
        return self.catalog.find_course_page(name)

    def get_module_by_name(self, name: str) -> Optional[ModuleRecord]:
        return self.catalog.get_module_by_name(name)

    # -- bookmarks ---------------------------------------------------------

    def place_bookmark(self, page: int, x: float, y: float, name: str) -> tuple[Bookmark, CourseRecommendation]:
        """
        Place a bookmark and add a linked recommendation pointing at its page.
        """
        bookmark = self.bookmarks.add(page, x, y, name)
        course = self.recommendations.add(CourseRecommendation(name=bookmark.name, page=bookmark.page))
        return bookmark, course

    def delete_bookmark(self, bookmark_id: str) -> bool:
        return self.bookmarks.delete(bookmark_id)

    # -- transcript --------------------------------------------------------

    def analyze_transcript_for_booked_courses(self, messages: Iterable[MessageLike]) -> AnalysisResult:
        return self.analyzer.analyze_and_merge(messages, self.recommendations)
