"""
In-memory recommendation store (session scoped, nothing is persisted).

Rules:
- at most one course per name (compared case- and whitespace-insensitively)
- a second add with the same name is a no-op and returns the stored course
- the store assigns the id; ids are never reused, not even after remove
- update/remove with an unknown id are no-ops; an update may not take
  another course's name
- listeners are notified after every effective change

All operations take one lock, so the "already there?" check and the
insert happen atomically even if two analyses overlap.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from typing import Callable, Iterator, List, Optional

from courseguide.model import CourseRecommendation, credits_label

logger = logging.getLogger(__name__)

Listener = Callable[[List[CourseRecommendation]], None]


def name_key(name: str) -> str:
    return " ".join((name or "").split()).casefold()


def _new_id() -> str:
    return uuid.uuid4().hex


class RecommendationStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._courses: List[CourseRecommendation] = []
        self._listeners: List[Listener] = []

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        snapshot = self.all()
        for listener in list(self._listeners):
            listener(snapshot)

    # -- queries -----------------------------------------------------------

    def all(self) -> List[CourseRecommendation]:
        with self._lock:
            return list(self._courses)

    def names(self) -> List[str]:
        with self._lock:
            return [c.name for c in self._courses]

    def get(self, course_id: str) -> Optional[CourseRecommendation]:
        with self._lock:
            for c in self._courses:
                if c.id == course_id:
                    return c
        return None

    def find_by_name(self, name: str) -> Optional[CourseRecommendation]:
        key = name_key(name)
        with self._lock:
            for c in self._courses:
                if name_key(c.name) == key:
                    return c
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._courses)

    def __iter__(self) -> Iterator[CourseRecommendation]:
        return iter(self.all())

    # -- mutations ---------------------------------------------------------

    def add(self, course: CourseRecommendation) -> CourseRecommendation:
        """
        Add `course` unless a course with the same name exists.
        Returns the stored record (the new one or the existing one).
        """
        with self._lock:
            existing = self.find_by_name(course.name)
            if existing is not None:
                logger.debug("Recommendation %r already present", course.name)
                return existing

            stored = replace(course, id=_new_id())
            self._courses.append(stored)
        self._notify()
        return stored

    def update(self, course: CourseRecommendation) -> bool:
        """
        Replace the record with the same id. The credits label follows ects.
        Renaming onto the name of another stored course is refused.
        """
        if not course.id:
            return False
        with self._lock:
            clash = self.find_by_name(course.name)
            if clash is not None and clash.id != course.id:
                logger.debug("Cannot rename to %r, name already taken", course.name)
                return False
            for i, c in enumerate(self._courses):
                if c.id == course.id:
                    self._courses[i] = replace(course, credits=credits_label(course.ects))
                    break
            else:
                return False
        self._notify()
        return True

    def remove(self, course_id: str) -> bool:
        with self._lock:
            before = len(self._courses)
            self._courses = [c for c in self._courses if c.id != course_id]
            if len(self._courses) == before:
                return False
        self._notify()
        return True

    def clear(self) -> None:
        with self._lock:
            if not self._courses:
                return
            self._courses = []
        self._notify()
