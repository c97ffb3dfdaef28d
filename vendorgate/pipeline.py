"""
The compliance-scoring pipeline: intake, per-document analysis, score
aggregation and report generation, run one step after another.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from .analyzer import DocumentAnalyzer
from .intake import DocumentIntake
from .report import ReportGenerator
from .scoring import ScoreAggregator
from .types import AuditReport, ComplianceDocument, ComplianceResult, DocumentUpload, utcnow


@dataclass
class PipelineRun:
    documents: List[ComplianceDocument]
    result: ComplianceResult
    report: AuditReport


class CompliancePipeline:
    def __init__(self, intake: DocumentIntake, analyzer: DocumentAnalyzer,
                 aggregator: ScoreAggregator, reports: ReportGenerator):
        self.intake = intake
        self.analyzer = analyzer
        self.aggregator = aggregator
        self.reports = reports

    async def run(self, owner_id: str, uploads: Sequence[DocumentUpload],
                  company_name: Optional[str] = None,
                  now: Optional[datetime] = None,
                  uploaded_at: Optional[datetime] = None) -> PipelineRun:
        """Score one submission.

        ``uploaded_at`` stamps the staged documents (defaults to ``now``); the
        age check compares it against ``now``.
        """
        now = now or utcnow()
        documents = self.intake.store_temporary(owner_id, uploads, now=uploaded_at or now)
        outcomes = await self.analyzer.analyze_all(
            (upload, doc.category) for upload, doc in zip(uploads, documents)
        )
        result = self.aggregator.aggregate(documents, outcomes, now=now)
        report = await self.reports.generate(owner_id, result, company_name, now=now)
        return PipelineRun(documents, result, report)
