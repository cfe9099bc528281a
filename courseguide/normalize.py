"""
Text normalization helpers (no I/O, deterministic).

- normalize_course_name(): spoken/informal course name -> canonical form
- extract_ects() / extract_semester(): pull credit values and semester
  labels out of free conversation text
- coerce_ects() / normalize_semester(): validate values coming back from
  the remote fallback extractor
- normalize_key() / normalize_term_key(): filter keys for the module library

Rules:
- one..ten are rewritten as digits ("Machine Learning two" -> "Machine Learning 2")
- a spoken-phrase table hit is returned as-is (no digit rewriting afterwards)
- ECTS values outside (0, 30] are noise (years, course codes) and ignored
"""

from __future__ import annotations

import re
from typing import Any, Optional

from courseguide.config import DEFAULT_POLICY, MatchingPolicy


# ---------------------------------------------------------------------------
# Course names
# ---------------------------------------------------------------------------

NUMBER_WORDS = {
    "one": "1",
    "two": "2",
    "three": "3",
    "four": "4",
    "five": "5",
    "six": "6",
    "seven": "7",
    "eight": "8",
    "nine": "9",
    "ten": "10",
}

# lower-cased spoken form -> official module name
SPOKEN_NAMES = {
    "machine learning basic methods": "Machine Learning - Basic Methods",
    "machine learning one basic methods": "Machine Learning - Basic Methods",
    "machine learning 1 basic methods": "Machine Learning - Basic Methods",
    "machine learning fundamentals": "Machine Learning - Basic Methods",
    "machine learning one": "Machine Learning 1",
    "machine learning two": "Machine Learning 2",
    "machine learning 1": "Machine Learning 1",
    "machine learning 2": "Machine Learning 2",
    "machine learning for robotic systems one": "Machine Learning for Robotic Systems 1",
    "machine learning for robotic systems 1": "Machine Learning for Robotic Systems 1",
    "machine learning for robotic systems two": "Machine Learning for Robotic Systems 2",
    "machine learning for robotic systems 2": "Machine Learning for Robotic Systems 2",
}

_SPACED_ECTS = re.compile(r"\bE\s*C\s*T\s*S\b", re.IGNORECASE)
_TRAILING_CORE = re.compile(r"\s+cores?\s*$", re.IGNORECASE)
_MULTI_SPACE = re.compile(r"\s{2,}")
_NUMBER_WORD = re.compile(r"\b(" + "|".join(NUMBER_WORDS) + r")\b", re.IGNORECASE)
_DASH_WORD = re.compile(r"\bdash\b", re.IGNORECASE)


def replace_number_words(text: str) -> str:
    return _NUMBER_WORD.sub(lambda m: NUMBER_WORDS[m.group(1).lower()], text)


def normalize_course_name(raw: str) -> str:
    """
    Rewrite a course name heard in conversation into its canonical spelling.

    Example:
        "Machine Learning Basic Methods"   -> "Machine Learning - Basic Methods"
        "Control Systems two"              -> "Control Systems 2"
        "Robotics dash Perception"         -> "Robotics - Perception"
    """
    cleaned = _SPACED_ECTS.sub("ECTS", raw or "")
    cleaned = _TRAILING_CORE.sub("", cleaned)
    cleaned = _MULTI_SPACE.sub(" ", cleaned).strip()

    official = SPOKEN_NAMES.get(cleaned.lower())
    if official is not None:
        return official

    cleaned = replace_number_words(cleaned)
    cleaned = _DASH_WORD.sub("-", cleaned).replace("–", "-")
    return _MULTI_SPACE.sub(" ", cleaned).strip()


# ---------------------------------------------------------------------------
# ECTS
# ---------------------------------------------------------------------------

_ECTS_PATTERNS = (
    re.compile(r"(\d+(?:\.\d+)?)\s*E\s*C\s*T\s*S\b", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*credits?\b", re.IGNORECASE),
)


def ects_in_range(value: float, policy: MatchingPolicy = DEFAULT_POLICY) -> bool:
    return policy.min_ects < value <= policy.max_ects


def extract_ects(text: str, policy: MatchingPolicy = DEFAULT_POLICY) -> Optional[float]:
    """
    Find the first plausible credit value in text ("5 ECTS", "five E C T S",
    "6 credits"). Returns None when nothing in range is mentioned.
    """
    if not text:
        return None

    normalized = replace_number_words(text)
    for pattern in _ECTS_PATTERNS:
        for m in pattern.finditer(normalized):
            value = float(m.group(1))
            if ects_in_range(value, policy):
                return value
    return None


def coerce_ects(value: Any, policy: MatchingPolicy = DEFAULT_POLICY) -> Optional[float]:
    """
    Validator rule for externally supplied ECTS: number (or numeric string)
    in [0, 30], else None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        digits = re.sub(r"[^0-9.]", "", str(value))
        if not digits:
            return None
        try:
            num = float(digits)
        except ValueError:
            return None
    if policy.min_ects <= num <= policy.max_ects:
        return num
    return None


# ---------------------------------------------------------------------------
# Semesters
# ---------------------------------------------------------------------------

_YEAR = re.compile(r"20\d{2}")
_FORMATTED_SEMESTER = re.compile(r"^(WS|SS)\s*(20\d{2})$", re.IGNORECASE)
_SEMESTER_PATTERNS = (
    re.compile(r"\b(?:WS|SS)\s*20\d{2}\b", re.IGNORECASE),
    re.compile(r"\b(?:winter|summer)\s*(?:semester|term)?\s*20\d{2}\b", re.IGNORECASE),
)
# capitalised phrase after to/for/in, e.g. "to Semester 3", "for Fall 2025"
_CUSTOM_SEMESTER = re.compile(r"\b(?:to|for|in)\s+([A-Z][A-Za-z]*(?: (?:[A-Z][A-Za-z]*|\d+))*)")
_SEMESTER_WORDS = re.compile(r"20\d{2}|semester|term|fall|spring|winter|summer|\bWS\b|\bSS\b", re.IGNORECASE)


def normalize_semester(value: Any) -> Optional[str]:
    """
    "winter semester 2025" -> "WS 2025", "summer 2026" -> "SS 2026",
    "ws2025" -> "WS 2025"; anything else non-empty is returned trimmed.
    """
    if not value or not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None

    year = _YEAR.search(s)
    if year and re.search(r"winter", s, re.IGNORECASE):
        return f"WS {year.group(0)}"
    if year and re.search(r"summer", s, re.IGNORECASE):
        return f"SS {year.group(0)}"

    m = _FORMATTED_SEMESTER.match(s)
    if m:
        return f"{m.group(1).upper()} {m.group(2)}"
    return s


def extract_semester(text: str) -> Optional[str]:
    """
    Find a semester label in free text. Standard forms are normalized to
    "WS 20YY" / "SS 20YY"; other semester-like phrases are returned verbatim.
    """
    if not text:
        return None

    for pattern in _SEMESTER_PATTERNS:
        m = pattern.search(text)
        if m:
            return normalize_semester(m.group(0))

    for m in _CUSTOM_SEMESTER.finditer(text):
        phrase = m.group(1).strip()
        if _SEMESTER_WORDS.search(phrase):
            return phrase
    return None


# ---------------------------------------------------------------------------
# Library filter keys
# ---------------------------------------------------------------------------


def normalize_key(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        if not value or not isinstance(value[0], str):
            return None
        value = value[0]
    s = str(value).strip()
    if not s:
        return None
    return re.sub(r"\s+", " ", s).lower()


def normalize_term_key(value: Any) -> Optional[str]:
    """
    Term filter key: ws, ss, both, irregular (combined forms fold into both).
    """
    key = normalize_key(value)
    if key in ("ws/ss", "ss/ws", "ws + ss", "ss + ws"):
        return "both"
    return key
