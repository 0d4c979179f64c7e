"""
Turn the model's free-text reply into an AnalysisResult.

Strategies are tried in order; each either returns a validated result or
None. The heuristic strategy never returns None, so `parse_reply` always
produces a classification.
"""

import json
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from loguru import logger
from pydantic import ValidationError

from .schemas import AnalysisResult

FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", flags=re.DOTALL)
FIRST_OBJECT_RE = re.compile(r"(\{.*\})", flags=re.DOTALL)

FALLBACK_CONFIDENCE = 75
FALLBACK_KEYWORDS = ["AI analysis"]
FALLBACK_EXPLANATION_CHARS = 200

Strategy = Callable[[str], Optional[AnalysisResult]]


@dataclass(frozen=True)
class ParseOutcome:
    strategy: str
    result: AnalysisResult

    @property
    def is_fallback(self) -> bool:
        return self.strategy == "heuristic"


def _load_result(s: str) -> Optional[AnalysisResult]:
    try:
        data = json.loads(s)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        logger.debug("JSON reply does not match the result shape: {}", e)
        return None


def from_fenced_block(text: str) -> Optional[AnalysisResult]:
    m = FENCED_JSON_RE.search(text)
    return _load_result(m.group(1)) if m else None


def from_first_object(text: str) -> Optional[AnalysisResult]:
    m = FIRST_OBJECT_RE.search(text)
    return _load_result(m.group(1)) if m else None


def from_raw_text(text: str) -> Optional[AnalysisResult]:
    return _load_result(text)


def heuristic(text: str) -> AnalysisResult:
    # crude on purpose: any mention of "fake" in the prose wins
    return AnalysisResult(
        result="fake" if "fake" in text.lower() else "real",
        confidence=FALLBACK_CONFIDENCE,
        keywords=list(FALLBACK_KEYWORDS),
        explanation=text[:FALLBACK_EXPLANATION_CHARS],
    )


DEFAULT_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("fenced_block", from_fenced_block),
    ("first_object", from_first_object),
    ("raw_text", from_raw_text),
    ("heuristic", heuristic),
)


def parse_reply(text: str, strategies: Sequence[Tuple[str, Strategy]] = DEFAULT_STRATEGIES) -> ParseOutcome:
    for name, strategy in strategies:
        result = strategy(text)
        if result is not None:
            return ParseOutcome(strategy=name, result=result)
    # only reachable with a custom list lacking a total strategy
    return ParseOutcome(strategy="heuristic", result=heuristic(text))
