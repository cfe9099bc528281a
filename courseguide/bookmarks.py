"""
Handbook bookmarks placed by the user on the PDF viewer (session scoped).
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import List

from courseguide.model import Bookmark


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


class BookmarkStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bookmarks: List[Bookmark] = []

    def add(self, page: int, x: float, y: float, name: str) -> Bookmark:
        """
        Place a bookmark; x/y are the click position relative to the page size.
        """
        if page < 1:
            raise ValueError(f"Invalid page: {page!r}")
        bookmark = Bookmark(
            id=uuid.uuid4().hex,
            page=int(page),
            x=_clamp(x),
            y=_clamp(y),
            name=(name or "").strip() or f"Page {page}",
            timestamp=datetime.now().isoformat(timespec="seconds"),
        )
        with self._lock:
            self._bookmarks.append(bookmark)
        return bookmark

    def delete(self, bookmark_id: str) -> bool:
        with self._lock:
            before = len(self._bookmarks)
            self._bookmarks = [b for b in self._bookmarks if b.id != bookmark_id]
            return len(self._bookmarks) != before

    def clear(self) -> None:
        with self._lock:
            self._bookmarks = []

    def all(self) -> List[Bookmark]:
        with self._lock:
            return list(self._bookmarks)

    def for_page(self, page: int) -> List[Bookmark]:
        return [b for b in self.all() if b.page == page]
