"""
Transcript extraction (conversation text -> course candidates).

Only the last few assistant turns are analysed (the advisor's recap).
Pattern families, applied independently and merged (first raw name wins,
compared case-insensitively):

- "<Name> with five E C T S"            credit value from the match itself
- "<Name>, 6 credits"                   credit value from the match itself
- "I'll add <Name>"                     name must be >= 10 characters, ends at
                                        punctuation, " to" or " for"
- "decided to book <Name>"              name must have >= 3 words or >= 10 characters,
                                        ends at " for", " with" or "."

For the last two, ECTS and semester are read from a window around the match.

A candidate only counts as booked if a booking verb ("add", "book",
"enroll", ...) occurs within +-100 characters of a mention of its raw name.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Union

from courseguide.config import DEFAULT_POLICY, MatchingPolicy
from courseguide.model import ExtractedCandidate, Message
from courseguide.normalize import extract_ects, extract_semester


# Course names start with a capital letter; keywords are case-insensitive.
_NAME = r"[A-Z][A-Za-z0-9 \-–]"
_AMOUNT = r"(?i:[a-z]+|\d+(?:\.\d+)?)"
_ECTS_WORD = r"(?i:E\s*C\s*T\s*S)\b"

WITH_ECTS = re.compile(rf"({_NAME}+?)\s+(?i:with)\s+{_AMOUNT}\s+{_ECTS_WORD}")
COMMA_CREDITS = re.compile(rf"({_NAME}+?),\s*{_AMOUNT}\s*(?i:credits?|{_ECTS_WORD})")
COMMITMENT = re.compile(
    r"\b(?i:I['’]ll|I will|I'm going to|I am going to)\s+"
    r"(?i:add|register(?: for)?|book|enroll(?: in)?|put|place)\s+"
    rf"({_NAME}{{10,}}?)(?=[.,\n]|\s+(?i:to|for)\b|$)"
)
BOOKING_CONTEXT = re.compile(
    r"\b(?i:will|want to|decided to|going to)\s+"
    r"(?i:book|register(?: for)?|enroll(?: in)?|add|take)\s+"
    rf"({_NAME}+?)(?=\s+(?i:for|with)\b|\.|$)"
)
BOOKING_VERB = re.compile(
    r"\b(?:add(?:ed|ing)?|i['’]ll\s+add|i\s+will\s+take|i\s+decided\s+to\s+book"
    r"|including\s+in\s+(?:my\s+|the\s+)?plan|already\s+in\s+my\s+semester\s+plan"
    r"|confirming\s+enrollment|register(?:ed|ing)?|book(?:ed|ing)?|enroll(?:ed|ing|ment)?)\b",
    re.IGNORECASE,
)
CONFIRMED = re.compile(r"booking:\s*(.+?)\s+with\s+", re.IGNORECASE)
CONFIRMED_UNTIL_COMMA = re.compile(r"booking:\s*([^,\n]+)", re.IGNORECASE)


MessageLike = Union[Message, Dict[str, Any]]


def _field(msg: MessageLike, name: str) -> str:
    value = msg.get(name) if isinstance(msg, dict) else getattr(msg, name, None)
    return "" if value is None else str(value)


def transcript_text(messages: Iterable[MessageLike], turns: int = DEFAULT_POLICY.assistant_turns) -> str:
    """
    Join the last `turns` assistant messages into one text block.
    """
    assistant = [_field(m, "content") for m in messages if _field(m, "role") == "assistant"]
    if turns > 0:
        assistant = assistant[-turns:]
    return "\n\n".join(assistant)


def last_assistant_message(messages: Iterable[MessageLike]) -> str:
    assistant = [_field(m, "content") for m in messages if _field(m, "role") == "assistant"]
    return assistant[-1] if assistant else ""


def _context(text: str, start: int, policy: MatchingPolicy) -> str:
    return text[max(0, start - policy.context_before) : start + policy.context_after]


def extract_candidates(text: str, policy: MatchingPolicy = DEFAULT_POLICY) -> List[ExtractedCandidate]:
    """
    Run all pattern families over `text` and return raw candidates in
    discovery order (deduplicated by case-insensitive raw name).
    """
    if not text:
        return []

    found: List[ExtractedCandidate] = []
    seen: set[str] = set()

    def keep(name: str, ects: Optional[float], semester: Optional[str]) -> None:
        key = name.lower()
        if not name or key in seen:
            return
        seen.add(key)
        found.append(ExtractedCandidate(raw_name=name, ects=ects, semester=semester))

    for m in WITH_ECTS.finditer(text):
        keep(m.group(1).strip(), extract_ects(m.group(0), policy), None)

    for m in COMMA_CREDITS.finditer(text):
        keep(m.group(1).strip(), extract_ects(m.group(0), policy), None)

    for m in COMMITMENT.finditer(text):
        name = m.group(1).strip()
        if len(name) < policy.min_commitment_name_len:
            continue
        context = _context(text, m.start(), policy)
        keep(name, extract_ects(context, policy), extract_semester(context))

    for m in BOOKING_CONTEXT.finditer(text):
        name = m.group(1).strip()
        if len(name.split()) < policy.min_booking_words and len(name) < policy.min_commitment_name_len:
            continue
        context = _context(text, m.start(), policy)
        keep(name, extract_ects(context, policy), extract_semester(context))

    return found


def has_booking_context(name: str, text: str, policy: MatchingPolicy = DEFAULT_POLICY) -> bool:
    """
    True if a booking verb occurs within `policy.verb_window` characters of
    some mention of `name` in `text`.
    """
    if not name or not text:
        return False
    for m in re.finditer(re.escape(name), text, re.IGNORECASE):
        window = text[max(0, m.start() - policy.verb_window) : m.end() + policy.verb_window]
        if BOOKING_VERB.search(window):
            return True
    return False


def filter_booked(
    candidates: Iterable[ExtractedCandidate], text: str, policy: MatchingPolicy = DEFAULT_POLICY
) -> List[ExtractedCandidate]:
    return [c for c in candidates if has_booking_context(c.raw_name, text, policy)]


def extract_confirmed_course(text: str) -> Optional[str]:
    """
    Course name from an explicit confirmation: "booking: <Name> with ..."
    or "booking: <Name>, ...".
    """
    if not text:
        return None
    m = CONFIRMED.search(text) or CONFIRMED_UNTIL_COMMA.search(text)
    if not m:
        return None
    name = m.group(1).strip()
    return name or None
