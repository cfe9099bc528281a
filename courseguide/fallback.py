"""
Remote fallback extraction (Gemini generateContent REST API).

Used only when local pattern extraction found nothing. The model gets the
transcript and must answer with a JSON array of {name, ects?, semester?}.

Contract: extract() never raises. Missing API key, network errors,
timeouts, non-200 answers and unparsable JSON all yield [].
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import requests

from courseguide.config import DEFAULT_GEMINI_MODEL, DEFAULT_POLICY, MatchingPolicy
from courseguide.model import ExtractedCandidate
from courseguide.normalize import coerce_ects, normalize_semester

logger = logging.getLogger(__name__)


GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROMPT_TEMPLATE = (
    "You are extracting booked university modules from a conversation summary.\n"
    "Return ONLY JSON (no markdown), an array of objects with fields: "
    "name (string), ects (number, optional), semester (string, optional).\n"
    "Do not invent modules. If unsure, omit the item.\n"
    "\n"
    "Text:\n{text}\n"
)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    return _FENCE.sub("", text.strip())


def _first_present(item: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if item.get(k) is not None:
            return item[k]
    return None


def validate_course(item: Any, policy: MatchingPolicy = DEFAULT_POLICY) -> Optional[ExtractedCandidate]:
    """
    Validate one element of the model's answer.

    - name (or courseName/title): string, at least 2 characters after trim
    - ects (or credits): number in [0, 30], else dropped
    - semester: normalized to WS/SS 20YY where possible
    """
    if not isinstance(item, dict):
        return None

    name = _first_present(item, "name", "courseName", "title")
    if not isinstance(name, str) or len(name.strip()) < 2:
        return None

    return ExtractedCandidate(
        raw_name=name.strip(),
        ects=coerce_ects(_first_present(item, "ects", "credits"), policy),
        semester=normalize_semester(item.get("semester")),
    )


def parse_courses(text: str, policy: MatchingPolicy = DEFAULT_POLICY) -> List[ExtractedCandidate]:
    """
    Decode the model's JSON answer (a markdown fence around it is tolerated).
    Raises ValueError if the text is not JSON.
    """
    data = json.loads(strip_code_fence(text or "[]") or "[]")
    if not isinstance(data, list):
        return []
    out: List[ExtractedCandidate] = []
    for item in data:
        course = validate_course(item, policy)
        if course is not None:
            out.append(course)
    return out


def _response_text(data: Any) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return "[]"
    return text if isinstance(text, str) else "[]"


class NullExtractor:
    """
    Fallback that never finds anything (no API key configured).
    """

    def extract(self, text: str) -> List[ExtractedCandidate]:
        return []


class GeminiExtractor(NullExtractor):
    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
        policy: MatchingPolicy = DEFAULT_POLICY,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session
        self.policy = policy

    def _request_body(self, text: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": PROMPT_TEMPLATE.format(text=text)}]}],
            "generationConfig": {
                "temperature": 0.1,
                "maxOutputTokens": 800,
                "responseMimeType": "application/json",
            },
        }

    def extract(self, text: str) -> List[ExtractedCandidate]:
        if not self.api_key:
            logger.debug("No Gemini API key configured, skipping remote extraction")
            return []
        if not text or not text.strip():
            return []

        url = GEMINI_ENDPOINT.format(model=self.model)
        poster = self.session.post if self.session is not None else requests.post
        try:
            resp = poster(
                url,
                params={"key": self.api_key},
                json=self._request_body(text),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Gemini extraction request failed: %s", e)
            return []

        if resp.status_code != 200:
            logger.warning("Gemini extraction failed with status %s", resp.status_code)
            return []

        try:
            courses = parse_courses(_response_text(resp.json()), self.policy)
        except ValueError as e:
            logger.warning("Gemini extraction returned invalid JSON: %s", e)
            return []

        logger.info("Gemini extracted %d course(s)", len(courses))
        return courses
