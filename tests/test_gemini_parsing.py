"""
Tests for model response parsing and prompt building
"""

import json

import pytest

from vendorgate.config import Settings
from vendorgate.errors import ConfigurationError
from vendorgate.gemini import (
    FALLBACK_SUMMARY,
    GeminiClient,
    build_audit_prompt,
    build_compliance_prompt,
    parse_finding,
    parse_summary,
    strip_code_fence,
)
from vendorgate.types import FALLBACK_FINDING, ComplianceFinding, Confident, Degraded


class TestStripCodeFence:

    def test_json_fence(self):
        assert strip_code_fence('```json\n{"score": 80}\n```') == '{"score": 80}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n{"score": 80}\n```') == '{"score": 80}'

    def test_no_fence(self):
        assert strip_code_fence('  {"score": 80}  ') == '{"score": 80}'


class TestParseFinding:

    def test_valid_response_is_confident(self):
        text = json.dumps({
            "riskLevel": "high",
            "score": 42,
            "findings": ["No MFA"],
            "strengths": [],
            "weaknesses": ["Shared accounts"],
            "recommendations": ["Enable MFA"],
        })
        outcome = parse_finding(text, document="soc2.pdf")
        assert isinstance(outcome, Confident)
        assert not outcome.degraded
        assert outcome.document == "soc2.pdf"
        assert outcome.finding == ComplianceFinding("high", 42, ["No MFA"], [], ["Shared accounts"], ["Enable MFA"])

    def test_fenced_response(self):
        outcome = parse_finding('```json\n{"riskLevel": "low", "score": 91}\n```')
        assert isinstance(outcome, Confident)
        assert outcome.finding.score == 91
        assert outcome.finding.findings == []

    def test_malformed_response_is_degraded(self):
        """Non-JSON output yields the fixed medium/50 fallback."""
        outcome = parse_finding("I'm sorry, I can't help with that.")
        assert isinstance(outcome, Degraded)
        assert outcome.degraded
        assert outcome.finding == FALLBACK_FINDING
        assert outcome.finding.risk_level == "medium"
        assert outcome.finding.score == 50
        assert outcome.finding.findings == ["Unable to parse AI response - manual review recommended"]
        assert outcome.finding.recommendations == ["Please contact support for manual review"]

    def test_json_array_is_degraded(self):
        assert isinstance(parse_finding("[1, 2, 3]"), Degraded)

    def test_missing_fields_are_coerced(self):
        outcome = parse_finding('{"riskLevel": "catastrophic", "score": "ninety", "findings": "none"}')
        assert isinstance(outcome, Confident)
        assert outcome.finding.risk_level == "medium"
        assert outcome.finding.score == 50
        assert outcome.finding.findings == []

    @pytest.mark.parametrize("raw,expected", [
        (140, 100), (-5, 0), (73.5, 73.5), (True, 50),
        (float("nan"), 50), (float("inf"), 50), (float("-inf"), 50),
    ])
    def test_score_is_clamped(self, raw, expected):
        outcome = parse_finding(json.dumps({"riskLevel": "low", "score": raw}))
        assert outcome.finding.score == expected


class TestParseSummary:

    def test_valid_summary(self):
        summary = parse_summary(json.dumps({
            "executiveSummary": "Compliant.",
            "keyFindings": ["a"],
            "riskAssessment": "Low",
            "requiredActions": ["b"],
            "timeline": "30 days",
        }))
        assert summary.executive_summary == "Compliant."
        assert summary.required_actions == ["b"]
        assert not summary.degraded

    def test_malformed_summary_falls_back(self):
        summary = parse_summary("not json")
        assert summary == FALLBACK_SUMMARY
        assert summary.degraded
        assert summary.required_actions == ["Contact support for manual audit review"]
        assert summary.timeline == "Immediate"


def test_compliance_prompt_mentions_category_and_content():
    prompt = build_compliance_prompt("Firewall rules reviewed", "cybersecurity")
    assert "Analyze the following cybersecurity document" in prompt
    assert "Firewall rules reviewed" in prompt
    assert '"riskLevel"' in prompt


def test_audit_prompt_lists_sections():
    findings = [ComplianceFinding("low", 90, ["ok"]), ComplianceFinding("high", 30, ["bad"])]
    prompt = build_audit_prompt("Acme Ltd", findings)
    assert '"Acme Ltd"' in prompt
    assert "Section 1:" in prompt and "Section 2:" in prompt
    assert "- Score: 30/100" in prompt


@pytest.mark.asyncio
async def test_missing_api_key_raises_configuration_error(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    client = GeminiClient(Settings(gemini_api_key=None))
    with pytest.raises(ConfigurationError):
        await client.generate("prompt")


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "1e999"])
def test_non_finite_score_literals_fall_back_to_50(literal):
    """json.loads accepts these; they must not clamp to a perfect score."""
    outcome = parse_finding('{"riskLevel": "low", "score": %s}' % literal)
    assert isinstance(outcome, Confident)
    assert outcome.finding.score == 50
