from dataclasses import dataclass
from typing import Optional, Tuple

from .schemas import AnalysisResult

BAR_WIDTH = 30


@dataclass(frozen=True)
class ResultView:
    headline: str
    icon: str
    color: str
    confidence: float
    confidence_label: str
    explanation: Optional[str]
    keywords: Tuple[str, ...]


def render_result(result: Optional[AnalysisResult]) -> Optional[ResultView]:
    """Map a verdict onto what the result panel shows. No verdict, no panel."""
    if result is None:
        return None
    is_real = result.result == "real"
    return ResultView(
        headline="Likely Real" if is_real else "Likely Fake",
        icon="check-circle" if is_real else "x-circle",
        color="green" if is_real else "red",
        confidence=result.confidence,
        confidence_label=f"Confidence Score: {result.confidence}%",
        explanation=result.explanation or None,
        keywords=tuple(result.keywords),
    )


def progress_bar(confidence: float, width: int = BAR_WIDTH) -> str:
    filled = int(round(max(0.0, min(100.0, confidence)) / 100 * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def format_view(view: ResultView) -> str:
    lines = [
        view.headline,
        view.confidence_label,
        progress_bar(view.confidence),
    ]
    if view.explanation:
        lines += ["", "Analysis Details", view.explanation]
    if view.keywords:
        lines += ["", "Key Indicators Detected", ", ".join(view.keywords)]
    return "\n".join(lines)
