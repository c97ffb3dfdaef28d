"""
Per-document compliance analysis.

One model call per document, strictly one after another. Model, network and
parse failures are converted into Degraded outcomes; only configuration
errors escape.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from .detectors import extract_text, resolve_category
from .errors import ConfigurationError
from .gemini import ModelClient, build_compliance_prompt, parse_finding
from .types import FALLBACK_FINDING, AnalysisOutcome, Degraded, DocumentCategory, DocumentUpload

logger = logging.getLogger(__name__)


class DocumentAnalyzer:
    def __init__(self, model: ModelClient):
        self.model = model

    async def analyze(self, upload: DocumentUpload, category: Optional[DocumentCategory] = None) -> AnalysisOutcome:
        category = DocumentCategory.parse(category) if category is not None else resolve_category(upload)
        text = extract_text(upload)
        prompt = build_compliance_prompt(text, category.value)

        logger.info("Analyzing %s document %s", category.value, upload.filename)
        try:
            response = await self.model.generate(prompt)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception("Error analyzing document %s", upload.filename)
            return Degraded(finding=FALLBACK_FINDING, reason=f"model call failed: {e}",
                            document=upload.filename)

        outcome = parse_finding(response, document=upload.filename)
        logger.debug("Compliance analysis result for %s: %r", upload.filename, outcome)
        return outcome

    async def analyze_all(self, items: Iterable[Tuple[DocumentUpload, DocumentCategory]]) -> List[AnalysisOutcome]:
        """Analyze documents in order, awaiting each before starting the next."""
        outcomes = []
        for upload, category in items:
            outcomes.append(await self.analyze(upload, category))
        return outcomes
