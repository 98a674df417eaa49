"""
Document entity models.

Documents are files and folders in a per-organization tree addressed by
``path``/``parent_path``. Deletion is soft: ``deleted_at`` is set and the row
stays for the activity log.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class Document(Base, table=True):
    """A stored file or a folder.

    Table: documents
    """

    __tablename__ = "documents"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    type: str = Field(description="'file' or 'folder'")
    mime_type: Optional[str] = Field(default=None)
    size: Optional[int] = Field(default=None, description="Size in bytes")
    path: str = Field(default="/", index=True, description="Full path; folders end with '/'")
    parent_path: Optional[str] = Field(default=None, index=True, description="Containing folder, None at root")
    storage_path: Optional[str] = Field(default=None, description="Object key inside the documents bucket")
    uploaded_by: str = Field(foreign_key="profiles.id", index=True)
    description: Optional[str] = Field(default=None)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_favorite: bool = Field(default=False)
    is_shared: bool = Field(default=False)
    is_public: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
    deleted_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime, index=True)

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"

    def __repr__(self) -> str:
        return f"Document(id={self.id}, name={self.name}, type={self.type})"


class DocumentShare(Base, table=True):
    """Table: document_shares"""

    __tablename__ = "document_shares"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    document_id: str = Field(foreign_key="documents.id", index=True)
    shared_with_user_id: Optional[str] = Field(default=None, foreign_key="profiles.id", index=True)
    shared_with_role: Optional[str] = Field(default=None, index=True)
    permission_level: str = Field(description="view, edit or admin")
    shared_by: str = Field(foreign_key="profiles.id")
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})


class DocumentActivity(Base, table=True):
    """Audit trail entry for a document.

    Table: document_activity
    """

    __tablename__ = "document_activity"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    document_id: str = Field(foreign_key="documents.id", index=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)
    action: str = Field(description="created, uploaded, viewed, renamed, updated, deleted, shared, ...")
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
