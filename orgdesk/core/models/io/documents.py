"""
Document I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentRead(BaseModel):
    """Schema for reading a document, enriched with the uploader's name."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    mime_type: Optional[str] = None
    size: Optional[int] = None
    path: str
    parent_path: Optional[str] = None
    storage_path: Optional[str] = None
    uploaded_by: str
    uploader_name: str = "Unknown"
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_favorite: bool = False
    is_shared: bool = False
    is_public: bool = False
    created_at: datetime
    updated_at: datetime


class DocumentList(BaseModel):
    documents: List[DocumentRead]
    parent_path: Optional[str] = None
    limit: int
    offset: int


class DocumentCreate(BaseModel):
    """Request body for creating a file entry or a folder."""

    name: Optional[str] = None
    type: Optional[str] = Field(default=None, description="'file' or 'folder'")
    parent_path: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    storage_path: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class DocumentUpdate(BaseModel):
    """Partial update; only the fields present are changed."""

    name: Optional[str] = None
    tags: Optional[List[str]] = None
    is_favorite: Optional[bool] = None
    description: Optional[str] = None


class DocumentMove(BaseModel):
    parent_path: Optional[str] = Field(default=None, description="Destination folder, None for the root")


class DocumentVisibility(BaseModel):
    is_public: bool


class DocumentDeleted(BaseModel):
    success: bool = True
    affected_count: int


class ActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    document_id: str
    user_id: str
    action: str
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class ShareCreate(BaseModel):
    """Request body for sharing a document with a user or a role."""

    documentId: Optional[str] = None
    permissionLevel: Optional[str] = None
    sharedWithUserId: Optional[str] = None
    sharedWithRole: Optional[str] = None


class ShareRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    document_id: str
    shared_with_user_id: Optional[str] = None
    shared_with_role: Optional[str] = None
    permission_level: str
    shared_by: str
    created_at: datetime


class UploadResult(BaseModel):
    success: bool = True
    document: DocumentRead


class BulkUploadError(BaseModel):
    fileName: str
    error: str


class BulkUploadSummary(BaseModel):
    total: int
    successful: int
    failed: int


class BulkUploadResponse(BaseModel):
    results: List[DocumentRead]
    errors: List[BulkUploadError]
    summary: BulkUploadSummary
