"""StoredFile model for the database backend.

Provides ``StoredFileBase`` as a non-table base class. Subclass with
``table=True`` and a custom ``__tablename__`` to give each database mount
its own table.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, LargeBinary
from sqlmodel import Field, SQLModel


class StoredFileBase(SQLModel):
    """Base fields for a stored file or folder. Subclass with ``table=True``."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    path: str = Field(index=True, unique=True)
    """Backend-local path, no trailing delimiter."""
    parent_path: str = Field(default="/", index=True)
    name: str = Field(default="")
    is_folder: bool = Field(default=False)
    mime_type: str = Field(default="application/octet-stream")
    contents: bytes | None = Field(default=None, sa_type=LargeBinary)
    size: int = Field(default=0)
    properties: dict[str, str] = Field(default_factory=dict, sa_type=JSON)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )


class StoredFile(StoredFileBase, table=True):
    """Default file table — ``filemount_files``."""

    __tablename__ = "filemount_files"
