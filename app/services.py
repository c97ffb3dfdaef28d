"""
Wiring of pipeline components to their collaborators for the HTTP service
and the background worker.
"""

from dataclasses import dataclass
from typing import Optional

from vendorgate.analyzer import DocumentAnalyzer
from vendorgate.config import Settings, get_settings
from vendorgate.directory import UserDirectory
from vendorgate.gate import AccountGate
from vendorgate.gemini import GeminiClient
from vendorgate.intake import DocumentIntake
from vendorgate.pipeline import CompliancePipeline
from vendorgate.report import ReportGenerator
from vendorgate.scoring import ScoreAggregator


@dataclass
class Services:
    gate: AccountGate
    directory: UserDirectory
    reports: ReportGenerator
    intake: DocumentIntake


def build_services(store, blobs, identities, model, settings: Settings) -> Services:
    intake = DocumentIntake(blobs, store)
    reports = ReportGenerator(model, store)
    pipeline = CompliancePipeline(
        intake=intake,
        analyzer=DocumentAnalyzer(model),
        aggregator=ScoreAggregator(settings),
        reports=reports,
    )
    gate = AccountGate(pipeline, identities, store, settings)
    return Services(gate=gate, directory=gate.directory, reports=reports, intake=intake)


_services: Optional[Services] = None


def get_services() -> Services:
    """Return the process-wide services, built on first use."""
    global _services
    if _services is None:
        from app.db import engine
        from app.storage import get_blob_store
        from app.stores import SQLDocumentStore, SQLIdentityProvider

        settings = get_settings()
        _services = build_services(
            store=SQLDocumentStore(engine),
            blobs=get_blob_store(settings.data_dir),
            identities=SQLIdentityProvider(engine),
            model=GeminiClient(settings),
            settings=settings,
        )
    return _services
