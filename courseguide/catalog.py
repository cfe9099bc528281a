"""
Module catalog (official list of handbook modules).

The catalog is read from modules_metadata.json, which is either a bare
array or {"generatedAt": ..., "modules": [...]}. The source can be:
- a local file path (default: courseguide/data/modules_metadata.json)
- an http(s) URL, fetched with requests
- an already decoded list, handy for tests

Loading happens once per CatalogStore, on first use. Concurrent first
callers wait for the same load instead of fetching twice.

Failure rule: a catalog that cannot be loaded stays empty for the whole
session (no retry). Matching then degrades to identity with confidence 0.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import requests

from courseguide.errors import CatalogError, ModuleValidationError
from courseguide.model import AreaTag, ModuleRecord
from courseguide.normalize import normalize_key, normalize_term_key

logger = logging.getLogger(__name__)


def _default_catalog_path() -> Path:
    """
    Return the default location of modules_metadata.json inside the package.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "modules_metadata.json"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value) if value > 0 else None


def _opt_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def _parse_part_of(raw: Any) -> tuple[AreaTag, ...]:
    if not isinstance(raw, list):
        return ()
    out: List[AreaTag] = []
    for p in raw:
        if not isinstance(p, dict):
            continue
        out.append(AreaTag(area=_opt_str(p.get("area")), subcategory=_opt_str(p.get("subcategory")), type=_opt_str(p.get("type"))))
    return tuple(out)


def parse_module(entry: Dict[str, Any]) -> Optional[ModuleRecord]:
    """
    Convert one raw catalog entry into a ModuleRecord (None if it has no name).

    Page priority: page > 0, else actualPage > 0, else listedPage, else 1.
    """
    name = _opt_str(entry.get("name"))
    if not name:
        return None

    listed = entry.get("listedPage")
    listed_page = int(listed) if isinstance(listed, (int, float)) and not isinstance(listed, bool) else None
    page = _positive_int(entry.get("page")) or _positive_int(entry.get("actualPage")) or listed_page or 1

    ects_raw = entry.get("ects")
    ects: Optional[float] = None
    if isinstance(ects_raw, (int, float)) and not isinstance(ects_raw, bool) and ects_raw >= 0:
        ects = float(ects_raw)

    return ModuleRecord(
        name=name,
        page=page,
        listed_page=listed_page,
        ects=ects,
        term=_opt_str(entry.get("term")),
        type=_opt_str(entry.get("type")),
        part_of=_parse_part_of(entry.get("partOf")),
    )


def parse_catalog(data: Any) -> List[ModuleRecord]:
    if isinstance(data, dict):
        data = data.get("modules")
    if not isinstance(data, list):
        raise CatalogError("catalog must be a list of modules or an object with a 'modules' list")

    modules: List[ModuleRecord] = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        record = parse_module(entry)
        if record is not None:
            modules.append(record)
    return modules


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class CatalogStore:
    """
    Load-once, cached access to the module catalog.
    """

    def __init__(
        self,
        source: str | Path | Sequence[Dict[str, Any]] | None = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
    ) -> None:
        self._source = source
        self._session = session
        self._timeout = timeout
        self._lock = threading.Lock()
        self._modules: Optional[List[ModuleRecord]] = None

    # -- loading -----------------------------------------------------------

    def _read_source(self) -> Any:
        source = self._source
        if source is not None and not isinstance(source, (str, Path)):
            return list(source)

        if isinstance(source, str) and source.startswith(("http://", "https://")):
            return self._fetch(source)

        path = Path(source) if source is not None else _default_catalog_path()
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CatalogError(f"cannot read catalog {path}: {e}") from e

    def _fetch(self, url: str) -> Any:
        getter = self._session.get if self._session is not None else requests.get
        try:
            resp = getter(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise CatalogError(f"cannot fetch catalog {url}: {e}") from e
        if resp.status_code != 200:
            raise CatalogError(f"failed to load catalog {url} ({resp.status_code})")
        try:
            return resp.json()
        except ValueError as e:
            raise CatalogError(f"catalog {url} is not valid JSON: {e}") from e

    def _ensure_loaded(self) -> List[ModuleRecord]:
        modules = self._modules
        if modules is not None:
            return modules

        with self._lock:
            if self._modules is None:
                try:
                    self._modules = parse_catalog(self._read_source())
                    logger.info("Loaded %d catalog modules", len(self._modules))
                except CatalogError as e:
                    logger.warning("Catalog unavailable, continuing with an empty catalog: %s", e)
                    self._modules = []
            return self._modules

    def reload(self) -> List[ModuleRecord]:
        """
        Drop the cached catalog and load it again.
        """
        with self._lock:
            self._modules = None
        return self._ensure_loaded()

    # -- lookups -----------------------------------------------------------

    def all_modules(self) -> List[ModuleRecord]:
        return list(self._ensure_loaded())

    def all_course_names(self) -> List[str]:
        return [m.name for m in self._ensure_loaded()]

    def get_module_by_name(self, name: str) -> Optional[ModuleRecord]:
        """
        Exact (case-insensitive) lookup, then containment in either direction.
        """
        if not name or not name.strip():
            return None
        target = name.strip().lower()
        modules = self._ensure_loaded()

        for m in modules:
            if m.name.lower() == target:
                return m
        for m in modules:
            low = m.name.lower()
            if target in low or low in target:
                return m
        return None

    def find_course_page(self, name: str) -> Optional[int]:
        """
        Handbook page for a course name. Falls back to the first module
        sharing a word prefix with the name.
        """
        module = self.get_module_by_name(name)
        if module is not None:
            return module.page
        if not name or not name.strip():
            return None

        words = name.strip().lower().split()
        for m in self._ensure_loaded():
            module_words = m.name.lower().split()
            if any(mw.startswith(w) or w.startswith(mw) for w in words for mw in module_words):
                return m.page
        return None

    def search(self, query: str, limit: int = 50) -> List[ModuleRecord]:
        modules = self._ensure_loaded()
        if not query or not query.strip():
            return list(modules)
        q = query.strip().lower()
        return [m for m in modules if q in m.name.lower()][:limit]

    def filter_modules(
        self,
        query: str = "",
        term: Optional[str] = None,
        type: Optional[str] = None,
        area: Optional[str] = None,
        subcategory: Optional[str] = None,
    ) -> List[ModuleRecord]:
        """
        Module library filter. Filter values are keys as returned by
        filter_options(); None means "all".
        """
        out = list(self._ensure_loaded())

        q = (query or "").strip().lower()
        if q:
            out = [m for m in out if q in m.name.lower()]
        if term:
            out = [m for m in out if normalize_term_key(m.term) == term]
        if type:
            out = [m for m in out if normalize_key(m.type) == type]
        if area:
            out = [m for m in out if any(normalize_key(p.area) == area for p in m.part_of)]
        if subcategory:
            out = [
                m
                for m in out
                if any(
                    normalize_key(p.subcategory) == subcategory and (not area or normalize_key(p.area) == area)
                    for p in m.part_of
                )
            ]
        return out

    def filter_options(self) -> Dict[str, List[tuple[str, str]]]:
        """
        Available filter values as sorted (key, label) pairs per dimension:
        terms, types, areas, subcategories.
        """
        options: Dict[str, Dict[str, str]] = {"terms": {}, "types": {}, "areas": {}, "subcategories": {}}

        def remember(bucket: str, key: Optional[str], label: Optional[str]) -> None:
            if key and key not in options[bucket]:
                options[bucket][key] = " ".join((label or key).split())

        for m in self._ensure_loaded():
            remember("terms", normalize_term_key(m.term), m.term)
            remember("types", normalize_key(m.type), m.type)
            for p in m.part_of:
                remember("areas", normalize_key(p.area), p.area)
                remember("subcategories", normalize_key(p.subcategory), p.subcategory)

        return {
            bucket: sorted(values.items(), key=lambda kv: kv[1].casefold())
            for bucket, values in options.items()
        }

    # -- edits -------------------------------------------------------------

    def replace_module(self, old_name: str, record: ModuleRecord) -> bool:
        """
        Replace the module named `old_name` with `record`.
        Returns False if no such module exists.
        """
        if not record.name or not record.name.strip():
            raise ModuleValidationError("Module name cannot be empty")
        if record.page < 1:
            raise ModuleValidationError("Page number must be a positive integer")
        if record.ects is not None and record.ects < 0:
            raise ModuleValidationError("ECTS must not be negative")

        modules = self._ensure_loaded()
        with self._lock:
            for i, m in enumerate(modules):
                if m.name == old_name:
                    modules[i] = record
                    return True
        return False
