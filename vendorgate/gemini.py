"""
Generative model client, prompt builders and response parsing.

The model is asked for a bare JSON object. Replies are fence-stripped and
parsed here; anything unparseable becomes a fixed fallback value instead of
an exception.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Optional, Protocol, Sequence

import google.generativeai as genai

from .config import Settings, get_settings
from .types import (
    FALLBACK_FINDING,
    RISK_LEVELS,
    AnalysisOutcome,
    AuditSummary,
    ComplianceFinding,
    Confident,
    Degraded,
)

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the raw response text."""


class GeminiClient:
    """Thin async wrapper around google.generativeai.

    The API key is resolved on the first call, so a missing key surfaces as
    ConfigurationError at first use rather than at import.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._model = None

    def _get_model(self):
        if self._model is None:
            genai.configure(api_key=self.settings.require_api_key())
            self._model = genai.GenerativeModel(self.settings.gemini_model)
        return self._model

    async def generate(self, prompt: str) -> str:
        model = self._get_model()
        response = await model.generate_content_async(prompt)
        text = response.text
        if not text:
            raise RuntimeError("No response from Gemini API")
        return text


def build_compliance_prompt(document_content: str, document_type: str) -> str:
    return f"""You are a compliance and risk assessment expert. Analyze the following {document_type} document and provide a detailed compliance assessment.

Document Content:
{document_content}

Please analyze this document and return a JSON response with the following structure (and ONLY JSON, no other text):
{{
  "riskLevel": "low" | "medium" | "high" | "critical",
  "score": number between 0-100,
  "findings": ["finding1", "finding2", ...],
  "strengths": ["strength1", "strength2", ...],
  "weaknesses": ["weakness1", "weakness2", ...],
  "recommendations": ["recommendation1", "recommendation2", ...]
}}

Focus on:
- Regulatory compliance
- Security practices
- Risk management
- Industry standards
- Best practices adherence

Respond ONLY with the JSON object, no markdown formatting or code blocks."""


def build_audit_prompt(company_name: str, findings: Sequence[ComplianceFinding]) -> str:
    sections = "\n".join(
        f"""
Section {i}:
- Risk Level: {f.risk_level}
- Score: {f.score}/100
- Key Findings: {', '.join(f.findings)}
- Strengths: {', '.join(f.strengths)}
- Weaknesses: {', '.join(f.weaknesses)}
"""
        for i, f in enumerate(findings, start=1)
    )
    return f"""You are a senior compliance auditor. Generate a comprehensive audit report summary for "{company_name}" based on the following findings:

{sections}

Please generate a JSON response with the following structure (and ONLY JSON, no other text):
{{
  "executiveSummary": "A 2-3 sentence summary of the overall compliance status",
  "keyFindings": ["finding1", "finding2", "finding3", ...],
  "riskAssessment": "A paragraph describing the overall risk assessment",
  "requiredActions": ["action1", "action2", "action3", ...],
  "timeline": "A suggested timeline for addressing issues"
}}

Respond ONLY with the JSON object, no markdown formatting or code blocks."""


def strip_code_fence(text: str) -> str:
    body = (text or "").strip()
    if "```json" in body:
        body = body.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in body:
        body = body.split("```", 2)[1]
    return body.strip()


def _load_object(text: str) -> Dict[str, Any]:
    parsed = json.loads(strip_code_fence(text))
    if not isinstance(parsed, dict):
        raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _as_list(value: Any) -> List[str]:
    return [str(v) for v in value] if isinstance(value, list) else []


def _as_score(value: Any) -> float:
    # bool is an int subclass but never a meaningful score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 50
    # json.loads accepts NaN, Infinity and 1e999
    if isinstance(value, float) and not math.isfinite(value):
        return 50
    return max(0, min(100, value))


def parse_finding(text: str, document: Optional[str] = None) -> AnalysisOutcome:
    try:
        parsed = _load_object(text)
    except ValueError as e:
        logger.warning("Error parsing compliance response: %s. Response: %.200r", e, text)
        return Degraded(finding=FALLBACK_FINDING, reason=f"unparseable model output: {e}",
                        document=document)

    risk_level = parsed.get("riskLevel")
    finding = ComplianceFinding(
        risk_level=risk_level if risk_level in RISK_LEVELS else "medium",
        score=_as_score(parsed.get("score")),
        findings=_as_list(parsed.get("findings")),
        strengths=_as_list(parsed.get("strengths")),
        weaknesses=_as_list(parsed.get("weaknesses")),
        recommendations=_as_list(parsed.get("recommendations")),
    )
    return Confident(finding=finding, document=document)


FALLBACK_SUMMARY = AuditSummary(
    executive_summary="Audit completed with manual review recommended.",
    key_findings=["Unable to parse AI response"],
    risk_assessment="Manual review required",
    required_actions=["Contact support for manual audit review"],
    timeline="Immediate",
    degraded=True,
)


def parse_summary(text: str) -> AuditSummary:
    try:
        parsed = _load_object(text)
    except ValueError as e:
        logger.warning("Error parsing audit response: %s. Response: %.200r", e, text)
        return FALLBACK_SUMMARY

    return AuditSummary(
        executive_summary=str(parsed.get("executiveSummary") or "Audit completed."),
        key_findings=_as_list(parsed.get("keyFindings")),
        risk_assessment=str(parsed.get("riskAssessment") or "Risk assessment pending."),
        required_actions=_as_list(parsed.get("requiredActions")),
        timeline=str(parsed.get("timeline") or "Timeline to be determined."),
    )
