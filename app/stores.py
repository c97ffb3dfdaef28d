"""
SQL-backed document store and identity provider.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, select

from app.models import Identity, Record
from vendorgate.errors import AuthError
from vendorgate.security import hash_password, normalize_email, validate_credentials, verify_password

logger = logging.getLogger(__name__)


class SQLDocumentStore:
    """Collections of JSON documents in the records table.

    Equality queries filter in Python after loading the collection.
    """

    def __init__(self, engine):
        self.engine = engine

    def put(self, collection: str, key: str, data: Dict[str, Any], merge: bool = False) -> None:
        with Session(self.engine) as session:
            record = session.get(Record, (collection, key))
            if record is None:
                record = Record(collection=collection, key=key, data=dict(data))
            else:
                body = dict(record.data) if merge else {}
                body.update(data)
                record.data = body
                record.updated_at = datetime.utcnow()
            session.add(record)
            session.commit()

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        with Session(self.engine) as session:
            record = session.get(Record, (collection, key))
            return dict(record.data) if record else None

    def delete(self, collection: str, key: str) -> None:
        with Session(self.engine) as session:
            record = session.get(Record, (collection, key))
            if record is not None:
                session.delete(record)
                session.commit()

    def query(self, collection: str, field: Optional[str] = None,
              value: Any = None) -> List[Tuple[str, Dict[str, Any]]]:
        with Session(self.engine) as session:
            records = session.exec(select(Record).where(Record.collection == collection)).all()
            return [
                (r.key, dict(r.data))
                for r in records
                if field is None or r.data.get(field) == value
            ]


class SQLIdentityProvider:
    def __init__(self, engine):
        self.engine = engine

    def create(self, email: str, password: str) -> str:
        validate_credentials(email, password)
        email = normalize_email(email)
        try:
            with Session(self.engine) as session:
                existing = session.exec(select(Identity).where(Identity.email == email)).first()
                if existing is not None:
                    raise AuthError("email-already-in-use", email)
                identity = Identity(email=email, password_hash=hash_password(password))
                session.add(identity)
                session.commit()
                session.refresh(identity)
                logger.info("Created identity %s", identity.id)
                return identity.id
        except IntegrityError as e:
            raise AuthError("email-already-in-use", email) from e
        except OperationalError as e:
            raise AuthError("network-request-failed", str(e)) from e

    def sign_in(self, email: str, password: str) -> str:
        email = normalize_email(email)
        try:
            with Session(self.engine) as session:
                identity = session.exec(select(Identity).where(Identity.email == email)).first()
        except OperationalError as e:
            raise AuthError("network-request-failed", str(e)) from e
        if identity is None or not verify_password(password, identity.password_hash):
            raise AuthError("invalid-credential")
        if identity.disabled:
            raise AuthError("user-disabled", email)
        return identity.id

    def disable(self, user_id: str) -> None:
        with Session(self.engine) as session:
            identity = session.get(Identity, user_id)
            if identity is None:
                raise LookupError(f"Identity {user_id} not found")
            identity.disabled = True
            session.add(identity)
            session.commit()

    def delete(self, user_id: str) -> None:
        with Session(self.engine) as session:
            identity = session.get(Identity, user_id)
            if identity is not None:
                session.delete(identity)
                session.commit()
                logger.info("Deleted identity %s", user_id)
