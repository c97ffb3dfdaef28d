"""
Document intake: stage uploaded files for a pending signup and promote them
once the signup passes compliance.

Intake is best-effort. A failure on file N leaves files 1..N-1 staged.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import List, Optional, Sequence

from .backends import BlobStore, DocumentStore
from .detectors import resolve_category, sniff_content_type
from .types import ComplianceDocument, DocumentUpload, utcnow

logger = logging.getLogger(__name__)

TEMP_COLLECTION = "temporaryDocuments"
PERMANENT_COLLECTION = "verifiedDocuments"


def temp_blob_path(session_id: str, filename: str) -> str:
    return f"temp/{session_id}/{os.path.basename(filename)}"


class DocumentIntake:
    def __init__(self, blobs: BlobStore, store: DocumentStore):
        self.blobs = blobs
        self.store = store

    def store_temporary(self, session_id: str, uploads: Sequence[DocumentUpload],
                        now: Optional[datetime] = None) -> List[ComplianceDocument]:
        """Write each upload's bytes and a metadata record under the session id.

        Same-named files overwrite each other.
        """
        stored = []
        for upload in uploads:
            name = os.path.basename(upload.filename)
            category = resolve_category(upload)
            url = self.blobs.put(
                temp_blob_path(session_id, name),
                upload.content,
                sniff_content_type(name, upload.content_type),
            )
            doc = ComplianceDocument(category=category, url=url, name=name,
                                     uploaded_at=now or utcnow())
            record = doc.to_record()
            record["owner"] = session_id
            self.store.put(TEMP_COLLECTION, f"{session_id}_{name}", record)
            stored.append(doc)
        logger.info("Stored %d temporary documents for %s", len(stored), session_id)
        return stored

    def list_temporary(self, session_id: str) -> List[ComplianceDocument]:
        return [ComplianceDocument.from_record(data)
                for _, data in self.store.query(TEMP_COLLECTION, "owner", session_id)]

    def list_verified(self, user_id: str) -> List[ComplianceDocument]:
        return [ComplianceDocument.from_record(data)
                for _, data in self.store.query(PERMANENT_COLLECTION, "owner", user_id)]

    def promote(self, session_id: str, user_id: str) -> List[ComplianceDocument]:
        """Copy the session's temporary records into the permanent keyspace."""
        promoted = []
        for key, data in self.store.query(TEMP_COLLECTION, "owner", session_id):
            data["owner"] = user_id
            self.store.put(PERMANENT_COLLECTION, f"{user_id}_{data['name']}", data)
            self.store.delete(TEMP_COLLECTION, key)
            promoted.append(ComplianceDocument.from_record(data))
        logger.info("Promoted %d documents from %s to %s", len(promoted), session_id, user_id)
        return promoted

    def demote(self, user_id: str, session_id: str) -> int:
        """Move records promoted to user_id back under the pending session."""
        moved = 0
        for key, data in self.store.query(PERMANENT_COLLECTION, "owner", user_id):
            data["owner"] = session_id
            self.store.put(TEMP_COLLECTION, f"{session_id}_{data['name']}", data)
            self.store.delete(PERMANENT_COLLECTION, key)
            moved += 1
        return moved

    def discard(self, session_id: str) -> int:
        """Delete a session's temporary records and blobs; returns how many were removed."""
        removed = 0
        for key, data in self.store.query(TEMP_COLLECTION, "owner", session_id):
            self.blobs.delete(temp_blob_path(session_id, data["name"]))
            self.store.delete(TEMP_COLLECTION, key)
            removed += 1
        if removed:
            logger.info("Discarded %d temporary documents for %s", removed, session_id)
        return removed
