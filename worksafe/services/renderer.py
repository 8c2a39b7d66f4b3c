"""
Map an AnalysisResult to a display view model

Pure functions: the normalizer already guarantees every risk is valid.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from worksafe.core.messages import translate
from worksafe.schemas.safety import RISK_LEVELS, AnalysisResult


class RiskView(BaseModel):
    index: int
    title: str
    level: str
    badge: str
    recommendation: str


class ResultView(BaseModel):
    title: str
    is_empty: bool
    headline: str
    total: int
    counts: Dict[str, int]
    items: List[RiskView]


def count_by_level(result: AnalysisResult) -> Dict[str, int]:
    """Number of risks per severity, always with all three keys"""
    counts = {level: 0 for level in RISK_LEVELS}
    for risk in result.risks:
        counts[risk.level] += 1
    return counts


def render_result(result: AnalysisResult, locale: Optional[str] = None) -> ResultView:
    total = len(result.risks)

    if total == 0:
        return ResultView(
            title=translate("results.title", locale),
            is_empty=True,
            headline=translate("results.none", locale),
            total=0,
            counts=count_by_level(result),
            items=[],
        )

    found_key = "results.found.one" if total == 1 else "results.found.other"
    items = [
        RiskView(
            index=index,
            title=risk.title,
            level=risk.level,
            badge=translate(
                "results.badge", locale, level=translate(f"levels.{risk.level}", locale)
            ).upper(),
            recommendation=risk.recommendation,
        )
        for index, risk in enumerate(result.risks, start=1)
    ]

    return ResultView(
        title=translate("results.title", locale),
        is_empty=False,
        headline=translate(found_key, locale, count=total),
        total=total,
        counts=count_by_level(result),
        items=items,
    )
