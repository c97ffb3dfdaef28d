"""
User records and who-can-see-whom rules.

Admins see every account, vendors see clients, clients see vendors.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .backends import DocumentStore
from .types import AccountStatus, AccountType, UserProfile, to_iso, utcnow

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

VISIBLE_TYPES = {
    AccountType.VENDORS: AccountType.CLIENTS,
    AccountType.CLIENTS: AccountType.VENDORS,
}


class UserDirectory:
    def __init__(self, store: DocumentStore):
        self.store = store

    def save(self, profile: UserProfile) -> None:
        self.store.put(USERS_COLLECTION, profile.user_id, profile.to_record())

    def delete(self, user_id: str) -> None:
        self.store.delete(USERS_COLLECTION, user_id)

    def get(self, user_id: str) -> Optional[UserProfile]:
        record = self.store.get(USERS_COLLECTION, user_id)
        return UserProfile.from_record(record) if record else None

    def list_by_type(self, account_type: AccountType, admin_view: bool = False) -> List[UserProfile]:
        account_type = AccountType(account_type)
        records = [data for _, data in self.store.query(USERS_COLLECTION, "accountType", account_type.value)]
        if admin_view:
            # only an explicit False hides a record
            records = [r for r in records if r.get("adminApproved") is not False]
        return [UserProfile.from_record(r) for r in records]

    def visible_users(self, user_id: str) -> List[UserProfile]:
        profile = self.get(user_id)
        if profile is None:
            raise LookupError(f"User {user_id} not found")
        if profile.account_type == AccountType.ADMIN:
            return [UserProfile.from_record(data) for _, data in self.store.query(USERS_COLLECTION)]
        return self.list_by_type(VISIBLE_TYPES[profile.account_type])

    def record_upload(self, user_id: str, document_names: Sequence[str],
                      uploaded_at: Optional[datetime] = None,
                      uploaded_files: Optional[Dict[str, str]] = None) -> None:
        """Merge last-upload details into an existing user record."""
        if self.store.get(USERS_COLLECTION, user_id) is None:
            raise LookupError(f"User {user_id} not found")
        self.store.put(USERS_COLLECTION, user_id, {
            "lastUploadedDocuments": list(document_names),
            "documentCount": len(document_names),
            "lastUploadDate": to_iso(uploaded_at or utcnow()),
            "uploadedFiles": dict(uploaded_files or {}),
            "lastUpdated": to_iso(utcnow()),
        }, merge=True)
        logger.info("Recorded upload of %d documents for %s", len(document_names), user_id)

    def suspend(self, user_id: str) -> UserProfile:
        if self.store.get(USERS_COLLECTION, user_id) is None:
            raise LookupError(f"User {user_id} not found")
        self.store.put(USERS_COLLECTION, user_id, {
            "status": AccountStatus.SUSPENDED.value,
            "lastUpdated": to_iso(utcnow()),
        }, merge=True)
        logger.info("Suspended user %s", user_id)
        return self.get(user_id)
