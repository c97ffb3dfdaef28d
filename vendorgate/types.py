from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Literal, Optional, Union

from dateutil.parser import isoparse

RiskLevel = Literal["low", "medium", "high", "critical"]
RISK_LEVELS = ("low", "medium", "high", "critical")

PASS_THRESHOLD = 70.0
MAX_ISSUES = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def from_iso(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class DocumentCategory(str, Enum):
    """Compliance document categories; OTHER never counts toward the required set."""
    CYBERSECURITY = "cybersecurity"
    CRIMINAL = "criminal"
    FINANCIAL = "financial"
    RISK = "risk"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DocumentCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER


REQUIRED_CATEGORIES = (
    DocumentCategory.CYBERSECURITY,
    DocumentCategory.CRIMINAL,
    DocumentCategory.FINANCIAL,
    DocumentCategory.RISK,
)


class AccountType(str, Enum):
    VENDORS = "vendors"
    CLIENTS = "clients"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


@dataclass
class DocumentUpload:
    """A file handed to intake: raw bytes plus an optional caller-supplied category."""
    filename: str
    content: bytes
    content_type: Optional[str] = None
    category: Optional[DocumentCategory] = None


@dataclass
class ComplianceDocument:
    category: DocumentCategory
    url: str
    name: str
    uploaded_at: datetime = dataclass_field(default_factory=utcnow)

    def to_record(self) -> Dict[str, Any]:
        return {
            "type": self.category.value,
            "url": self.url,
            "name": self.name,
            "uploadDate": to_iso(self.uploaded_at),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ComplianceDocument":
        return cls(
            category=DocumentCategory.parse(record.get("type")),
            url=record.get("url", ""),
            name=record.get("name", ""),
            uploaded_at=from_iso(record["uploadDate"]),
        )


@dataclass(frozen=True)
class ComplianceFinding:
    risk_level: RiskLevel
    score: float
    findings: List[str] = dataclass_field(default_factory=list)
    strengths: List[str] = dataclass_field(default_factory=list)
    weaknesses: List[str] = dataclass_field(default_factory=list)
    recommendations: List[str] = dataclass_field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskLevel": self.risk_level,
            "score": self.score,
            "findings": list(self.findings),
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComplianceFinding":
        return cls(
            risk_level=data.get("riskLevel", "medium"),
            score=data.get("score", 50),
            findings=list(data.get("findings", [])),
            strengths=list(data.get("strengths", [])),
            weaknesses=list(data.get("weaknesses", [])),
            recommendations=list(data.get("recommendations", [])),
        )


FALLBACK_FINDING = ComplianceFinding(
    risk_level="medium",
    score=50,
    findings=["Unable to parse AI response - manual review recommended"],
    strengths=[],
    weaknesses=[],
    recommendations=["Please contact support for manual review"],
)


@dataclass(frozen=True)
class Confident:
    """A finding the model actually produced."""
    finding: ComplianceFinding
    document: Optional[str] = None
    degraded: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "confident", "document": self.document, **self.finding.to_dict()}


@dataclass(frozen=True)
class Degraded:
    """A stand-in finding substituted after a failed call or unparseable output."""
    finding: ComplianceFinding
    reason: str
    document: Optional[str] = None
    degraded: ClassVar[bool] = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "degraded",
            "reason": self.reason,
            "document": self.document,
            **self.finding.to_dict(),
        }


AnalysisOutcome = Union[Confident, Degraded]


def outcome_from_dict(data: Dict[str, Any]) -> AnalysisOutcome:
    finding = ComplianceFinding.from_dict(data)
    if data.get("status") == "degraded":
        return Degraded(finding=finding, reason=data.get("reason", ""), document=data.get("document"))
    return Confident(finding=finding, document=data.get("document"))


def is_passing(score: float, issue_count: int, threshold: float = PASS_THRESHOLD,
               max_issues: int = MAX_ISSUES) -> bool:
    return score >= threshold and issue_count < max_issues


@dataclass(frozen=True)
class ComplianceResult:
    passed: bool
    issues: List[str]
    score: float
    recommendations: List[str] = dataclass_field(default_factory=list)
    findings: List[AnalysisOutcome] = dataclass_field(default_factory=list)
    threshold: float = PASS_THRESHOLD
    max_issues: int = MAX_ISSUES

    def __post_init__(self):
        if self.passed != is_passing(self.score, len(self.issues), self.threshold, self.max_issues):
            raise ValueError(
                f"passed={self.passed} contradicts score={self.score} with {len(self.issues)} issues"
            )

    @property
    def degraded_count(self) -> int:
        return sum(1 for outcome in self.findings if outcome.degraded)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "issues": list(self.issues),
            "score": self.score,
            "recommendations": list(self.recommendations),
            "findings": [o.to_dict() for o in self.findings],
            "degradedCount": self.degraded_count,
            "threshold": self.threshold,
            "maxIssues": self.max_issues,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComplianceResult":
        return cls(
            passed=data["passed"],
            issues=list(data.get("issues", [])),
            score=data["score"],
            recommendations=list(data.get("recommendations", [])),
            findings=[outcome_from_dict(o) for o in data.get("findings", [])],
            threshold=data.get("threshold", PASS_THRESHOLD),
            max_issues=data.get("maxIssues", MAX_ISSUES),
        )


@dataclass(frozen=True)
class AuditSummary:
    executive_summary: str
    key_findings: List[str] = dataclass_field(default_factory=list)
    risk_assessment: str = ""
    required_actions: List[str] = dataclass_field(default_factory=list)
    timeline: str = ""
    degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executiveSummary": self.executive_summary,
            "keyFindings": list(self.key_findings),
            "riskAssessment": self.risk_assessment,
            "requiredActions": list(self.required_actions),
            "timeline": self.timeline,
            "degraded": self.degraded,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditSummary":
        return cls(
            executive_summary=data.get("executiveSummary", ""),
            key_findings=list(data.get("keyFindings", [])),
            risk_assessment=data.get("riskAssessment", ""),
            required_actions=list(data.get("requiredActions", [])),
            timeline=data.get("timeline", ""),
            degraded=bool(data.get("degraded", False)),
        )


@dataclass
class AuditReport:
    user_id: str
    timestamp: datetime
    status: Literal["passed", "failed"]
    result: ComplianceResult
    company_name: str = "Organization"
    summary: Optional[AuditSummary] = None
    required_actions: List[str] = dataclass_field(default_factory=list)
    recommendations: List[str] = dataclass_field(default_factory=list)

    @property
    def score(self) -> float:
        return self.result.score

    @property
    def key(self) -> str:
        return f"{self.user_id}_{int(self.timestamp.timestamp() * 1000)}"

    def to_record(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "timestamp": to_iso(self.timestamp),
            "status": self.status,
            "companyName": self.company_name,
            "complianceScore": self.result.score,
            "complianceResult": self.result.to_dict(),
            "summary": self.summary.to_dict() if self.summary else None,
            "requiredActions": list(self.required_actions),
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "AuditReport":
        summary = record.get("summary")
        return cls(
            user_id=record["userId"],
            timestamp=from_iso(record["timestamp"]),
            status=record["status"],
            result=ComplianceResult.from_dict(record["complianceResult"]),
            company_name=record.get("companyName", "Organization"),
            summary=AuditSummary.from_dict(summary) if summary else None,
            required_actions=list(record.get("requiredActions", [])),
            recommendations=list(record.get("recommendations", [])),
        )


@dataclass
class UserProfile:
    user_id: str
    first_name: str
    last_name: str
    email: str
    company_name: str
    account_type: AccountType
    status: AccountStatus = AccountStatus.PENDING
    onboarding_complete: bool = False
    created_at: datetime = dataclass_field(default_factory=utcnow)
    last_updated: datetime = dataclass_field(default_factory=utcnow)
    extra: Dict[str, Any] = dataclass_field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        record = dict(self.extra)
        record.update({
            "userId": self.user_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "companyName": self.company_name,
            "accountType": self.account_type.value,
            "status": self.status.value,
            "onboardingComplete": self.onboarding_complete,
            "createdAt": to_iso(self.created_at),
            "lastUpdated": to_iso(self.last_updated),
        })
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "UserProfile":
        known = {"userId", "firstName", "lastName", "email", "companyName", "accountType",
                 "status", "onboardingComplete", "createdAt", "lastUpdated"}
        return cls(
            user_id=record["userId"],
            first_name=record.get("firstName", ""),
            last_name=record.get("lastName", ""),
            email=record.get("email", ""),
            company_name=record.get("companyName", ""),
            account_type=AccountType(record["accountType"]),
            status=AccountStatus(record.get("status", "pending")),
            onboarding_complete=bool(record.get("onboardingComplete", False)),
            created_at=from_iso(record["createdAt"]),
            last_updated=from_iso(record["lastUpdated"]),
            extra={k: v for k, v in record.items() if k not in known},
        )
