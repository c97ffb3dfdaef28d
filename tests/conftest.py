"""
Shared fixtures: a scripted model client and in-memory collaborators.
"""

import json
import os
import sys
from collections import deque

import pytest

# Add the repository root so the app/ modules import as `app.*`
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from vendorgate.analyzer import DocumentAnalyzer
from vendorgate.backends import MemoryBlobStore, MemoryDocumentStore, MemoryIdentityProvider
from vendorgate.config import Settings
from vendorgate.gate import AccountGate
from vendorgate.intake import DocumentIntake
from vendorgate.pipeline import CompliancePipeline
from vendorgate.report import ReportGenerator
from vendorgate.scoring import ScoreAggregator


def finding_json(score, risk="low", findings=None, recommendations=None):
    return json.dumps({
        "riskLevel": risk,
        "score": score,
        "findings": findings or [f"Scored {score}"],
        "strengths": ["Documented controls"],
        "weaknesses": [],
        "recommendations": recommendations or [],
    })


SUMMARY_JSON = json.dumps({
    "executiveSummary": "The organization is broadly compliant.",
    "keyFindings": ["Controls documented"],
    "riskAssessment": "Low overall risk.",
    "requiredActions": ["Renew insurance certificate"],
    "timeline": "90 days",
})


class FakeModel:
    """Returns scripted responses in order; an Exception instance is raised instead."""

    def __init__(self, responses=None, default=SUMMARY_JSON):
        self.responses = deque(responses or [])
        self.default = default
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        response = self.responses.popleft() if self.responses else self.default
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def settings(tmp_path):
    return Settings(gemini_api_key="test-key", data_dir=str(tmp_path))


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def identities():
    return MemoryIdentityProvider()


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def pipeline(model, store, blobs, settings):
    return CompliancePipeline(
        intake=DocumentIntake(blobs, store),
        analyzer=DocumentAnalyzer(model),
        aggregator=ScoreAggregator(settings),
        reports=ReportGenerator(model, store),
    )


@pytest.fixture
def gate(pipeline, identities, store, settings):
    return AccountGate(pipeline, identities, store, settings)
