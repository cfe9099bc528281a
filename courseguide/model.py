"""
Central data model definitions used across the project.

This module defines the canonical structure of catalog modules, extracted
candidates, course recommendations, semesters and bookmarks so that:
- the extraction pipeline, the stores and the CLI share the same field names
- catalog records stay immutable after load (edits build a new record)
- the code stays readable and beginner-friendly
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class AreaTag:
    """
    One classification pair of a module (e.g. area "Mechatronics",
    subcategory "Compulsory Elective").
    """

    area: Optional[str] = None
    subcategory: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.type is not None:
            out["type"] = self.type
        if self.area is not None:
            out["area"] = self.area
        if self.subcategory is not None:
            out["subcategory"] = self.subcategory
        return out


@dataclass(frozen=True)
class ModuleRecord:
    """
    Represents one official module of the course handbook (catalog entry).

    `page` is the handbook page shown by the viewer, `listed_page` the page
    number printed in the handbook index.
    """

    name: str
    page: int = 1
    listed_page: Optional[int] = None
    ects: Optional[float] = None
    term: Optional[str] = None
    type: Optional[str] = None
    part_of: Tuple[AreaTag, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON payload of the module, as offered by the module library's copy action.
        """
        return {
            "name": self.name,
            "ects": self.ects,
            "page": self.page,
            "term": self.term,
            "type": self.type,
            "partOf": [p.to_dict() for p in self.part_of] if self.part_of else None,
        }


@dataclass(frozen=True)
class ExtractedCandidate:
    """
    A tentative course mention found in a transcript, before catalog resolution.
    """

    raw_name: str
    ects: Optional[float] = None
    semester: Optional[str] = None


def credits_label(ects: Optional[float]) -> Optional[str]:
    """
    Display string for an ECTS value: 5.0 -> "5 ECTS", 7.5 -> "7.5 ECTS".
    """
    if ects is None:
        return None
    return f"{ects:g} ECTS"


@dataclass
class CourseRecommendation:
    """
    The unit shown in the recommendations tab and referenced by semesters.

    `id` is assigned by the RecommendationStore when the course is added.
    """

    name: str
    id: Optional[str] = None
    ects: Optional[float] = None
    credits: Optional[str] = None
    semester: Optional[str] = None
    page: Optional[int] = None
    code: Optional[str] = None
    color: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.credits is None and self.ects is not None:
            self.credits = credits_label(self.ects)


@dataclass
class Semester:
    """
    A planning bucket. Courses are referenced by id and owned by the
    RecommendationStore.
    """

    id: str
    name: str
    color: str
    ects_goal: float = 30
    course_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Bookmark:
    """
    A marker placed on a handbook page; x/y are normalized to [0, 1].
    """

    id: str
    page: int
    x: float
    y: float
    name: str
    timestamp: str


@dataclass(frozen=True)
class Message:
    """
    One conversation turn as delivered by the voice session.
    """

    role: str
    content: str
    timestamp: str = ""


@dataclass
class AnalysisResult:
    """
    Outcome of one transcript analysis.

    booked_courses: resolved, deduplicated courses in transcript order
    assigned_by_semester: semester label -> courses carrying that label
    """

    booked_courses: List[CourseRecommendation] = field(default_factory=list)
    assigned_by_semester: Dict[str, List[CourseRecommendation]] = field(default_factory=dict)
