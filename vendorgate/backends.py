"""
Collaborator interfaces for blob storage, the document database and the
identity provider, plus in-memory implementations.

Pipeline components receive these explicitly in their constructors. The
HTTP service plugs in the SQL and S3 backed versions from app/; the CLI and
the tests use the in-memory ones.
"""

from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from .errors import AuthError
from .security import hash_password, normalize_email, validate_credentials, verify_password


class BlobStore(Protocol):
    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store bytes at path and return a URL the bytes can be read from."""

    def delete(self, path: str) -> None:
        ...


class DocumentStore(Protocol):
    def put(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        ...

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        ...

    def delete(self, collection: str, key: str) -> None:
        ...

    def query(self, collection: str, field: Optional[str] = None,
              value: Any = None) -> List[Tuple[str, Dict[str, Any]]]:
        """Return (key, data) pairs whose field equals value; all documents when field is None."""


class IdentityProvider(Protocol):
    def create(self, email: str, password: str) -> str:
        """Create an identity and return its opaque id. Raises AuthError."""

    def sign_in(self, email: str, password: str) -> str:
        """Return the id for matching credentials. Raises AuthError."""

    def delete(self, user_id: str) -> None:
        """Remove an identity; unknown ids are ignored."""

    def disable(self, user_id: str) -> None:
        """Block sign-in for an identity. Raises LookupError for unknown ids."""


class MemoryBlobStore:
    def __init__(self) -> None:
        self.blobs: Dict[str, bytes] = {}

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        self.blobs[path] = bytes(data)
        return f"memory://{path}"

    def delete(self, path: str) -> None:
        self.blobs.pop(path, None)


class MemoryDocumentStore:
    def __init__(self) -> None:
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def put(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        docs = self.collections.setdefault(collection, {})
        if merge and key in docs:
            docs[key].update(copy.deepcopy(data))
        else:
            docs[key] = copy.deepcopy(data)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        data = self.collections.get(collection, {}).get(key)
        return copy.deepcopy(data) if data is not None else None

    def delete(self, collection: str, key: str) -> None:
        self.collections.get(collection, {}).pop(key, None)

    def query(self, collection: str, field: Optional[str] = None,
              value: Any = None) -> List[Tuple[str, Dict[str, Any]]]:
        return [
            (key, copy.deepcopy(data))
            for key, data in self.collections.get(collection, {}).items()
            if field is None or data.get(field) == value
        ]


class MemoryIdentityProvider:
    def __init__(self) -> None:
        self.accounts: Dict[str, Tuple[str, str]] = {}
        self.disabled: Set[str] = set()

    def create(self, email: str, password: str) -> str:
        validate_credentials(email, password)
        email = normalize_email(email)
        if email in self.accounts:
            raise AuthError("email-already-in-use", email)
        uid = uuid.uuid4().hex
        self.accounts[email] = (uid, hash_password(password))
        return uid

    def sign_in(self, email: str, password: str) -> str:
        email = normalize_email(email)
        account = self.accounts.get(email)
        if account is None or not verify_password(password, account[1]):
            raise AuthError("invalid-credential")
        if account[0] in self.disabled:
            raise AuthError("user-disabled", email)
        return account[0]

    def _email_for(self, user_id: str) -> Optional[str]:
        for email, (uid, _) in self.accounts.items():
            if uid == user_id:
                return email
        return None

    def delete(self, user_id: str) -> None:
        email = self._email_for(user_id)
        if email is not None:
            del self.accounts[email]
        self.disabled.discard(user_id)

    def disable(self, user_id: str) -> None:
        if self._email_for(user_id) is None:
            raise LookupError(f"Identity {user_id} not found")
        self.disabled.add(user_id)
