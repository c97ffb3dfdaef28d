"""
SQLModel database models for VendorGate
"""

import uuid
from datetime import datetime
from typing import Any, Dict
from sqlmodel import SQLModel, Field, Column, DateTime
from sqlalchemy import JSON, text


class Record(SQLModel, table=True):
    """
    A JSON document addressed by (collection, key).
    Backs users, temporary/verified documents and audit reports.
    """

    __tablename__ = "records"

    collection: str = Field(primary_key=True, description="Collection the document belongs to")
    key: str = Field(primary_key=True, description="Document key within the collection")
    data: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Document body"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, server_default=text("CURRENT_TIMESTAMP")),
        description="When the document was first written"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, server_default=text("CURRENT_TIMESTAMP"), onupdate=datetime.utcnow),
        description="When the document was last written"
    )


class Identity(SQLModel, table=True):
    """
    Authenticated identity created once a signup passes compliance.
    """

    __tablename__ = "identities"

    id: str = Field(
        default_factory=lambda: uuid.uuid4().hex,
        primary_key=True,
        description="Opaque identity id, also used as the user id"
    )
    email: str = Field(index=True, unique=True, description="Normalized login email")
    password_hash: str = Field(description="passlib hash of the password")
    disabled: bool = Field(default=False, description="Disabled identities cannot sign in")

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, server_default=text("CURRENT_TIMESTAMP")),
        description="When the identity was created"
    )
