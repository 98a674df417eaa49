"""
Document repositories.

This module provides data access for the document tree, document shares and
the document activity log. ``soft_delete`` replaces the hosted backend's
``delete_document`` stored procedure.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.documents import Document, DocumentActivity, DocumentShare
from .base import QueryBuilder, SQLModelRepository


def build_path(parent_path: Optional[str], name: str, is_folder: bool) -> str:
    """Full path of an entry: ``{parent}{name}``, with a trailing slash for folders."""
    path = f"{parent_path or '/'}{name}"
    return f"{path}/" if is_folder else path


class DocumentRepository(SQLModelRepository[Document]):
    """Repository for files and folders."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Document)

    async def get_live(self, document_id: str) -> Optional[Document]:
        """Get a document unless it has been soft-deleted."""
        document = await self.get_by_id(document_id)
        if document is None or document.deleted_at is not None:
            return None
        return document

    async def list_folder(
        self,
        parent_path: Optional[str],
        limit: int = 50,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> List[Document]:
        """List live documents in a folder, or search by name across folders.

        Folders sort before files, then by name.

        Args:
            parent_path: Folder path; ``None`` is the root
            limit: Maximum records to return
            offset: Records to skip
            search: Case-insensitive name fragment; when set the folder filter is ignored

        Returns:
            List of Document instances
        """
        stmt = select(Document).where(Document.deleted_at == None)  # noqa: E711
        if search:
            stmt = stmt.where(Document.name.ilike(f"%{search}%"))
        elif parent_path is None:
            stmt = stmt.where(Document.parent_path == None)  # noqa: E711
        else:
            stmt = stmt.where(Document.parent_path == parent_path)

        folder_first = case((Document.type == "folder", 0), else_=1)
        stmt = stmt.order_by(folder_first, Document.name)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def soft_delete(self, document_id: str) -> int:
        """Mark a document, and for folders everything beneath it, as deleted.

        Returns:
            Number of rows affected
        """
        document = await self.get_live(document_id)
        if document is None:
            return 0
        now = utc_now()
        condition = Document.id == document.id
        if document.is_folder:
            condition = or_(condition, Document.path.startswith(document.path))
        result = await self.session.execute(
            select(Document).where(condition, Document.deleted_at == None)  # noqa: E711
        )
        affected = list(result.scalars().all())
        for row in affected:
            row.deleted_at = now
            row.updated_at = now
            self.session.add(row)
        await self.session.commit()
        return len(affected)

    async def relocate(self, document: Document, parent_path: Optional[str], name: str) -> Document:
        """Rename or move a document, rewriting the paths of a folder's contents.

        Args:
            document: Live document to relocate
            parent_path: Destination folder path, ``None`` for the root
            name: New name; pass the current name to move only

        Returns:
            The updated document
        """
        old_path = document.path
        new_path = build_path(parent_path, name, document.is_folder)
        if document.is_folder and new_path != old_path:
            result = await self.session.execute(
                select(Document).where(Document.path.startswith(old_path), Document.id != document.id)
            )
            for child in result.scalars().all():
                child.path = new_path + child.path[len(old_path) :]
                if child.parent_path:
                    child.parent_path = new_path + child.parent_path[len(old_path) :]
                self.session.add(child)
        document.name = name
        document.parent_path = parent_path
        document.path = new_path
        document.updated_at = utc_now()
        return await self.update(document)

    async def record_activity(
        self,
        document_id: str,
        user_id: str,
        action: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> DocumentActivity:
        activity = DocumentActivity(document_id=document_id, user_id=user_id, action=action, details=details or {})
        self.session.add(activity)
        await self.session.commit()
        await self.session.refresh(activity)
        return activity

    async def list_activity(self, document_id: str, limit: int = 50) -> List[DocumentActivity]:
        stmt = (
            select(DocumentActivity)
            .where(DocumentActivity.document_id == document_id)
            .order_by(DocumentActivity.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class DocumentShareRepository(SQLModelRepository[DocumentShare]):
    """Repository for document shares."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DocumentShare)

    async def find_target(
        self, document_id: str, user_id: Optional[str], role: Optional[str]
    ) -> Optional[DocumentShare]:
        """Find the share for exactly this user/role target on a document."""
        stmt = select(DocumentShare).where(
            DocumentShare.document_id == document_id,
            DocumentShare.shared_with_user_id == user_id if user_id else DocumentShare.shared_with_user_id == None,  # noqa: E711
            DocumentShare.shared_with_role == role if role else DocumentShare.shared_with_role == None,  # noqa: E711
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_document(self, document_id: str) -> List[DocumentShare]:
        result = await self.session.execute(
            select(DocumentShare)
            .where(DocumentShare.document_id == document_id)
            .order_by(DocumentShare.created_at.desc())
        )
        return list(result.scalars().all())

    async def count_for_document(self, document_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(DocumentShare).where(DocumentShare.document_id == document_id)
        )
        return int(result.scalar_one())

    async def has_admin_share(self, document_id: str, user_id: str, role: Optional[str] = None) -> bool:
        """Whether a user holds an ``admin`` share on a document, directly or via role."""
        targets = [DocumentShare.shared_with_user_id == user_id]
        if role:
            targets.append(DocumentShare.shared_with_role == role)
        stmt = select(DocumentShare.id).where(
            DocumentShare.document_id == document_id,
            DocumentShare.permission_level == "admin",
            or_(*targets),
        )
        result = await self.session.execute(stmt)
        return result.first() is not None
