"""
Configuration.

Two layers:
- MatchingPolicy: every threshold of the extraction/matching pipeline as a
  named value, so tests can tune them independently
- Settings: runtime configuration read from environment variables
  (a local .env file is honoured through python-dotenv)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


@dataclass(frozen=True)
class MatchingPolicy:
    # catalog matcher
    min_confidence: float = 0.2
    min_token_overlap: float = 0.3
    significant_word_len: int = 3
    max_significant_hits: int = 2
    min_token_len: int = 2

    # ECTS sanity range: min_ects < value <= max_ects
    min_ects: float = 0
    max_ects: float = 30

    # transcript extractor
    assistant_turns: int = 3
    verb_window: int = 100
    context_before: int = 80
    context_after: int = 120
    min_commitment_name_len: int = 10
    min_booking_words: int = 3
    min_confirmed_name_len: int = 10

    # merge gate
    min_name_words: int = 2


DEFAULT_POLICY = MatchingPolicy()


@dataclass
class Settings:
    catalog_source: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    fallback_timeout: float = 20.0
    log_level: str = "WARNING"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings(dotenv: bool = True) -> Settings:
    """
    Build Settings from the environment.

    Variables:
        COURSEGUIDE_CATALOG            path or URL of modules_metadata.json
        GEMINI_API_KEY                 enables the remote fallback extractor
        GEMINI_MODEL                   model name for the fallback
        COURSEGUIDE_FALLBACK_TIMEOUT   seconds before the fallback gives up
        COURSEGUIDE_LOG_LEVEL          CLI log level
    """
    if dotenv:
        load_dotenv()

    return Settings(
        catalog_source=os.getenv("COURSEGUIDE_CATALOG") or None,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        fallback_timeout=_float_env("COURSEGUIDE_FALLBACK_TIMEOUT", 20.0),
        log_level=(os.getenv("COURSEGUIDE_LOG_LEVEL") or "WARNING").upper(),
    )
