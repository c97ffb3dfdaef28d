"""
Audit report generation and persistence.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import List, Optional

from .backends import DocumentStore
from .errors import ConfigurationError
from .gemini import FALLBACK_SUMMARY, ModelClient, build_audit_prompt, parse_summary
from .scoring import MISSING_DOCUMENTS_ISSUE
from .types import AuditReport, AuditSummary, ComplianceResult, utcnow

logger = logging.getLogger(__name__)

AUDIT_COLLECTION = "auditReports"


def required_actions_for(result: ComplianceResult) -> List[str]:
    actions = []
    for issue in result.issues:
        if MISSING_DOCUMENTS_ISSUE in issue:
            actions.append("Submit all required compliance documents")
        elif "over 1 year old" in issue:
            actions.append("Update outdated compliance documents")
        else:
            actions.append("Address compliance issues identified in the report")
    return actions


class ReportGenerator:
    def __init__(self, model: ModelClient, store: DocumentStore):
        self.model = model
        self.store = store

    async def summarize(self, company_name: str, result: ComplianceResult) -> AuditSummary:
        prompt = build_audit_prompt(company_name, [o.finding for o in result.findings])
        try:
            text = await self.model.generate(prompt)
        except ConfigurationError:
            raise
        except Exception:
            logger.exception("Error generating audit summary for %s", company_name)
            return FALLBACK_SUMMARY
        return parse_summary(text)

    async def generate(self, user_id: str, result: ComplianceResult,
                       company_name: Optional[str] = None,
                       now: Optional[datetime] = None) -> AuditReport:
        report = AuditReport(
            user_id=user_id,
            timestamp=now or utcnow(),
            status="passed" if result.passed else "failed",
            result=result,
            company_name=company_name or "Organization",
            recommendations=list(result.recommendations),
        )
        if not result.passed:
            report.required_actions = required_actions_for(result)

        if result.findings:
            report.summary = await self.summarize(report.company_name, result)
            if not result.passed and report.summary.required_actions:
                report.required_actions = list(report.summary.required_actions)

        self.store.put(AUDIT_COLLECTION, report.key, report.to_record())
        logger.info("Stored audit report %s (%s, score=%.2f)", report.key, report.status, result.score)
        return report

    def latest_for(self, user_id: str) -> Optional[AuditReport]:
        reports = [AuditReport.from_record(data)
                   for _, data in self.store.query(AUDIT_COLLECTION, "userId", user_id)]
        if not reports:
            return None
        return max(reports, key=lambda r: r.timestamp)

    def reassign(self, report: AuditReport, user_id: str) -> AuditReport:
        """Move a report produced under a pending session id to the durable user id."""
        moved = dataclasses.replace(report, user_id=user_id)
        self.store.put(AUDIT_COLLECTION, moved.key, moved.to_record())
        self.store.delete(AUDIT_COLLECTION, report.key)
        return moved

    def discard_for(self, user_id: str) -> int:
        keys = [key for key, _ in self.store.query(AUDIT_COLLECTION, "userId", user_id)]
        for key in keys:
            self.store.delete(AUDIT_COLLECTION, key)
        return len(keys)
