"""
Score aggregation and the pass/fail verdict.

The rule-based part starts at 100 and is penalized for missing required
categories and for stale documents. Model scores are then folded in:

* ``sequential``: ``score = (score + ai_score) / 2`` per document, in
  submission order. Later documents weigh more, so the result depends on
  order.
* ``mean``: ``score = (rule_score + mean(ai_scores)) / 2``. Order does not
  matter.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from .config import Settings, get_settings
from .types import (
    REQUIRED_CATEGORIES,
    AnalysisOutcome,
    ComplianceDocument,
    ComplianceResult,
    is_passing,
    utcnow,
)

logger = logging.getLogger(__name__)

MISSING_DOCUMENTS_ISSUE = "Missing required documents"

FALLBACK_RECOMMENDATIONS = [
    "Ensure all required documents are provided",
    "Update any outdated documents",
    "Provide more recent compliance certificates",
]


def has_required_documents(documents: Sequence[ComplianceDocument]) -> bool:
    present = {doc.category for doc in documents}
    return all(category in present for category in REQUIRED_CATEGORIES)


def stale_issue(name: str) -> str:
    return f"Document {name} is over 1 year old"


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class ScoreAggregator:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def rule_score(self, documents: Sequence[ComplianceDocument],
                   now: Optional[datetime] = None) -> Tuple[float, List[str]]:
        now = _aware(now or utcnow())
        max_age = timedelta(days=self.settings.max_document_age_days)
        score = 100.0
        issues = []

        if not has_required_documents(documents):
            issues.append(MISSING_DOCUMENTS_ISSUE)
            score -= self.settings.missing_penalty

        for doc in documents:
            if now - _aware(doc.uploaded_at) > max_age:
                issues.append(stale_issue(doc.name))
                score -= self.settings.stale_penalty

        return score, issues

    def combine(self, score: float, outcomes: Sequence[AnalysisOutcome]) -> float:
        if not outcomes:
            return score
        ai_scores = [outcome.finding.score for outcome in outcomes]
        if self.settings.averaging == "mean":
            return (score + sum(ai_scores) / len(ai_scores)) / 2
        for ai_score in ai_scores:
            score = (score + ai_score) / 2
        return score

    def aggregate(self, documents: Sequence[ComplianceDocument],
                  outcomes: Sequence[AnalysisOutcome] = (),
                  now: Optional[datetime] = None) -> ComplianceResult:
        score, issues = self.rule_score(documents, now)
        score = self.combine(score, outcomes)

        for outcome in outcomes:
            if outcome.finding.risk_level in ("high", "critical"):
                issues.extend(outcome.finding.findings)

        passed = is_passing(score, len(issues), self.settings.pass_threshold, self.settings.max_issues)
        if passed:
            recommendations = []
        elif outcomes:
            recommendations = [r for o in outcomes for r in o.finding.recommendations][:5]
        else:
            recommendations = list(FALLBACK_RECOMMENDATIONS)

        degraded = sum(1 for o in outcomes if o.degraded)
        logger.info("Aggregated %d documents: score=%.2f issues=%d passed=%s degraded=%d",
                    len(documents), score, len(issues), passed, degraded)
        return ComplianceResult(
            passed=passed,
            issues=issues,
            score=score,
            recommendations=recommendations,
            findings=list(outcomes),
            threshold=self.settings.pass_threshold,
            max_issues=self.settings.max_issues,
        )
