"""
Semester planner.

Semesters reference courses of the RecommendationStore by id; removing a
course from a semester never deletes it from the store.

Auto-assignment runs whenever the store changes:
- only courses with a semester label that are not yet in any semester
- the label is matched case-insensitively against semester names
- unknown labels create a new semester (default goal 30 ECTS, next palette colour)
- auto-assignment only ever adds; a course whose label is edited later
  stays where it was placed
"""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from typing import Iterable, List, Optional, Sequence

from courseguide.model import CourseRecommendation, Semester
from courseguide.recommendations import RecommendationStore

logger = logging.getLogger(__name__)


PALETTE = (
    "#3b82f6",  # blue
    "#10b981",  # green
    "#8b5cf6",  # purple
    "#f59e0b",  # orange
    "#ef4444",  # red
    "#ec4899",  # pink
    "#eab308",  # yellow
    "#14b8a6",  # teal
)
DEFAULT_ECTS_GOAL = 30.0


def _new_id() -> str:
    return uuid.uuid4().hex


class SemesterPlanner:
    def __init__(
        self,
        store: RecommendationStore,
        semesters: Optional[Iterable[Semester]] = None,
        palette: Sequence[str] = PALETTE,
        default_goal: float = DEFAULT_ECTS_GOAL,
    ) -> None:
        self._store = store
        self._lock = threading.RLock()
        self._semesters: List[Semester] = list(semesters or [])
        self._colors = itertools.cycle(palette)
        self.default_goal = default_goal
        # ids placed automatically once; a manual removal is not undone later
        self._auto_placed: set[str] = set()

        store.subscribe(self.auto_assign)
        self.auto_assign(store.all())

    # -- queries -----------------------------------------------------------

    def semesters(self) -> List[Semester]:
        with self._lock:
            return list(self._semesters)

    def get_semester(self, semester_id: str) -> Optional[Semester]:
        with self._lock:
            for s in self._semesters:
                if s.id == semester_id:
                    return s
        return None

    def find_semester(self, name: str) -> Optional[Semester]:
        target = (name or "").strip().lower()
        with self._lock:
            for s in self._semesters:
                if s.name.strip().lower() == target:
                    return s
        return None

    def assigned_ids(self) -> set[str]:
        with self._lock:
            return {cid for s in self._semesters for cid in s.course_ids}

    def courses_in(self, semester_id: str) -> List[CourseRecommendation]:
        """
        Courses of a semester, resolved through the store (stale ids are skipped).
        """
        semester = self.get_semester(semester_id)
        if semester is None:
            return []
        out: List[CourseRecommendation] = []
        for cid in list(semester.course_ids):
            course = self._store.get(cid)
            if course is not None:
                out.append(course)
        return out

    def semester_ects(self, semester_id: str) -> float:
        return sum(c.ects or 0 for c in self.courses_in(semester_id))

    # -- auto-assignment ---------------------------------------------------

    def auto_assign(self, courses: Iterable[CourseRecommendation]) -> int:
        """
        Place courses that carry a semester label. Returns how many were placed.
        """
        placed = 0
        with self._lock:
            assigned = self.assigned_ids() | self._auto_placed
            for course in courses:
                if not course.id or not course.semester or course.id in assigned:
                    continue

                target = self.find_semester(course.semester)
                if target is None:
                    target = Semester(
                        id=_new_id(),
                        name=course.semester,
                        color=next(self._colors),
                        ects_goal=self.default_goal,
                    )
                    self._semesters.append(target)
                    logger.info("Created semester %r for %r", target.name, course.name)

                target.course_ids.append(course.id)
                assigned.add(course.id)
                self._auto_placed.add(course.id)
                placed += 1
        return placed

    # -- manual edits ------------------------------------------------------

    def add_semester(self, name: str, color: Optional[str] = None, ects_goal: Optional[float] = None) -> Semester:
        name = (name or "").strip()
        if not name:
            raise ValueError("Semester name cannot be empty")
        semester = Semester(
            id=_new_id(),
            name=name,
            color=color or next(self._colors),
            ects_goal=ects_goal if ects_goal else self.default_goal,
        )
        with self._lock:
            self._semesters.append(semester)
        return semester

    def update_semester(
        self,
        semester_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
        ects_goal: Optional[float] = None,
    ) -> bool:
        with self._lock:
            semester = self.get_semester(semester_id)
            if semester is None:
                return False
            if name is not None and name.strip():
                semester.name = name.strip()
            if color:
                semester.color = color
            if ects_goal:
                semester.ects_goal = ects_goal
        return True

    def delete_semester(self, semester_id: str) -> bool:
        with self._lock:
            before = len(self._semesters)
            self._semesters = [s for s in self._semesters if s.id != semester_id]
            return len(self._semesters) != before

    def add_course(self, semester_id: str, course_id: str) -> bool:
        """
        Manual placement. Only prevents a duplicate inside the same semester.
        """
        if self._store.get(course_id) is None:
            return False
        with self._lock:
            semester = self.get_semester(semester_id)
            if semester is None or course_id in semester.course_ids:
                return False
            semester.course_ids.append(course_id)
        return True

    def remove_course(self, semester_id: str, course_id: str) -> bool:
        with self._lock:
            semester = self.get_semester(semester_id)
            if semester is None or course_id not in semester.course_ids:
                return False
            semester.course_ids.remove(course_id)
        return True
