"""
Account gate: a signup stays an in-memory pending session until its
documents pass compliance.

    NoAccount -> PendingCompliance -> Processing -> Active
                        ^                 \\
                        |                  -> Rejected
                        +------- retry -------+

Processing falls back to PendingCompliance when the pipeline or the
activation fails. Only the transition to Active writes durable data: the
identity, the user record, the promoted documents and the report under the
new user id. A failed activation undoes those writes.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .backends import DocumentStore, IdentityProvider
from .config import Settings, get_settings
from .directory import UserDirectory
from .errors import (
    AuthError,
    ConfigurationError,
    DocumentProcessingError,
    InvalidTransition,
    NoDocumentsSubmitted,
    SessionNotFound,
)
from .intake import TEMP_COLLECTION
from .pipeline import CompliancePipeline
from .security import normalize_email, validate_credentials
from .types import (
    AccountStatus,
    AccountType,
    AuditReport,
    ComplianceDocument,
    ComplianceResult,
    DocumentUpload,
    UserProfile,
    from_iso,
    utcnow,
)

logger = logging.getLogger(__name__)


class SignupState(str, Enum):
    NO_ACCOUNT = "no_account"
    PENDING_COMPLIANCE = "pending_compliance"
    PROCESSING = "processing"
    ACTIVE = "active"
    REJECTED = "rejected"


@dataclass
class SignupData:
    first_name: str
    last_name: str
    email: str
    company_name: str
    account_type: AccountType


@dataclass
class PendingSignup:
    session_id: str
    data: SignupData
    password: str = field(repr=False)
    state: SignupState = SignupState.PENDING_COMPLIANCE
    created_at: datetime = field(default_factory=utcnow)
    attempts: int = 0
    last_report: Optional[AuditReport] = None


@dataclass
class GateOutcome:
    session_id: str
    state: SignupState
    result: ComplianceResult
    report: AuditReport
    documents: List[ComplianceDocument]
    user: Optional[UserProfile] = None

    @property
    def passed(self) -> bool:
        return self.result.passed


def new_session_id(now: datetime) -> str:
    return f"temp_{int(now.timestamp() * 1000)}_{secrets.token_hex(5)}"


class AccountGate:
    def __init__(self, pipeline: CompliancePipeline, identities: IdentityProvider,
                 store: DocumentStore, settings: Optional[Settings] = None):
        self.pipeline = pipeline
        self.intake = pipeline.intake
        self.reports = pipeline.reports
        self.identities = identities
        self.directory = UserDirectory(store)
        self.store = store
        self.settings = settings or get_settings()
        self.sessions: Dict[str, PendingSignup] = {}

    def begin_signup(self, data: SignupData, password: str,
                     now: Optional[datetime] = None) -> PendingSignup:
        """NoAccount -> PendingCompliance. Nothing is written durably."""
        validate_credentials(data.email, password)
        now = now or utcnow()
        data.email = normalize_email(data.email)
        data.account_type = AccountType(data.account_type)
        pending = PendingSignup(session_id=new_session_id(now), data=data,
                                password=password, created_at=now)
        self.sessions[pending.session_id] = pending
        logger.info("Created pending signup %s for %s", pending.session_id, data.company_name)
        return pending

    def get_session(self, session_id: str) -> PendingSignup:
        try:
            return self.sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None

    async def submit_documents(self, session_id: str, uploads: Sequence[DocumentUpload],
                               now: Optional[datetime] = None) -> GateOutcome:
        """Run the scoring pipeline and move the session to Active or Rejected."""
        pending = self.get_session(session_id)
        if pending.state != SignupState.PENDING_COMPLIANCE:
            raise InvalidTransition(f"session {session_id} is {pending.state.value}")
        if not uploads:
            raise NoDocumentsSubmitted(f"session {session_id} submitted no documents")
        now = now or utcnow()
        pending.attempts += 1
        # no await happens between the state check and this assignment
        pending.state = SignupState.PROCESSING

        try:
            run = await self.pipeline.run(session_id, uploads, pending.data.company_name, now=now)
            documents, result, report = run.documents, run.result, run.report
            pending.last_report = report
            if not result.passed:
                pending.state = SignupState.REJECTED
                logger.info("Signup %s rejected (score=%.2f, issues=%d)",
                            session_id, result.score, len(result.issues))
                return GateOutcome(session_id, pending.state, result, report, documents)

            user, report = self._activate(pending, report, now)
            return GateOutcome(session_id, SignupState.ACTIVE, result, report, documents, user=user)
        except (ConfigurationError, AuthError):
            raise
        except Exception as e:
            logger.exception("Failed to process documents for %s", session_id)
            raise DocumentProcessingError(str(e)) from e
        finally:
            if pending.state == SignupState.PROCESSING:
                pending.state = SignupState.PENDING_COMPLIANCE

    def _activate(self, pending: PendingSignup, report: AuditReport, now: datetime):
        # AuthError from create propagates before anything is written
        user_id = self.identities.create(pending.data.email, pending.password)
        try:
            return self._write_account(pending, user_id, report, now)
        except Exception:
            logger.exception("Activation of %s failed, removing identity %s", pending.session_id, user_id)
            self.intake.demote(user_id, pending.session_id)
            self.reports.discard_for(user_id)
            self.directory.delete(user_id)
            self.identities.delete(user_id)
            raise

    def _write_account(self, pending: PendingSignup, user_id: str, report: AuditReport, now: datetime):
        profile = UserProfile(
            user_id=user_id,
            first_name=pending.data.first_name,
            last_name=pending.data.last_name,
            email=pending.data.email,
            company_name=pending.data.company_name,
            account_type=pending.data.account_type,
            status=AccountStatus.ACTIVE,
            onboarding_complete=True,
            created_at=now,
            last_updated=now,
        )
        self.directory.save(profile)
        promoted = self.intake.promote(pending.session_id, user_id)
        self.directory.record_upload(user_id, [doc.name for doc in promoted], uploaded_at=now,
                                     uploaded_files={doc.category.value: doc.url for doc in promoted})
        report = self.reports.reassign(report, user_id)
        # reports from earlier rejected attempts
        self.reports.discard_for(pending.session_id)

        pending.state = SignupState.ACTIVE
        del self.sessions[pending.session_id]
        logger.info("Signup %s activated as user %s", pending.session_id, user_id)
        return self.directory.get(user_id), report

    def retry(self, session_id: str) -> PendingSignup:
        """Rejected -> PendingCompliance with a fresh document set."""
        pending = self.get_session(session_id)
        if pending.state != SignupState.REJECTED:
            raise InvalidTransition(f"cannot retry session {session_id} in state {pending.state.value}")
        self.intake.discard(session_id)
        pending.state = SignupState.PENDING_COMPLIANCE
        return pending

    def sign_in(self, email: str, password: str) -> UserProfile:
        user_id = self.identities.sign_in(email, password)
        profile = self.directory.get(user_id)
        if profile is None:
            raise LookupError("User profile not found")
        return profile

    def sweep_expired(self, now: Optional[datetime] = None,
                      ttl: Optional[timedelta] = None) -> List[str]:
        """Drop abandoned signups and temporary documents older than the TTL.

        Also removes staged documents whose session is no longer held in
        memory (e.g. after a restart).
        """
        now = now or utcnow()
        ttl = ttl if ttl is not None else timedelta(hours=self.settings.pending_ttl_hours)
        expired = [sid for sid, pending in self.sessions.items()
                   if pending.state != SignupState.PROCESSING and now - pending.created_at > ttl]
        for session_id in expired:
            self.intake.discard(session_id)
            self.reports.discard_for(session_id)
            del self.sessions[session_id]

        newest: Dict[str, datetime] = {}
        for _, data in self.store.query(TEMP_COLLECTION):
            owner = data.get("owner")
            uploaded = from_iso(data["uploadDate"])
            if owner and (owner not in newest or uploaded > newest[owner]):
                newest[owner] = uploaded
        for owner, uploaded in newest.items():
            if owner not in self.sessions and now - uploaded > ttl:
                self.intake.discard(owner)
                self.reports.discard_for(owner)
                expired.append(owner)

        if expired:
            logger.info("Swept %d expired signups", len(expired))
        return expired
