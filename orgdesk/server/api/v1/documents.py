"""
Documents API Endpoints.

A folder tree of files and folders with soft deletion, sharing with users
or roles, uploads into the documents bucket, and a per-document activity log.
"""

import re
import time
from typing import Dict, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Form, Request, UploadFile, status
from fastapi.responses import Response

from orgdesk.core.database.entities import Document, DocumentShare, Profile
from orgdesk.core.database.repositories import DocumentRepository, DocumentShareRepository, ProfileRepository
from orgdesk.core.database.repositories.documents import build_path
from orgdesk.core.errors import BadRequestError, ForbiddenError, NotFoundError, OrgDeskError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import DocumentAction, DocumentType, SharePermission
from orgdesk.core.models.io.documents import (
    ActivityRead,
    BulkUploadError,
    BulkUploadResponse,
    BulkUploadSummary,
    DocumentCreate,
    DocumentDeleted,
    DocumentList,
    DocumentMove,
    DocumentRead,
    DocumentUpdate,
    DocumentVisibility,
    ShareCreate,
    ShareRead,
    UploadResult,
)
from orgdesk.server.core.config import settings
from orgdesk.server.services.deps import CurrentUserDep, SessionDep, StorageDep
from orgdesk.storage import StorageBackend

logger = get_logger(__name__)

router = APIRouter()

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")

PREVIEWABLE_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/svg+xml",
        "application/pdf",
        "text/plain",
        "text/html",
        "text/css",
        "text/javascript",
        "application/json",
        "text/markdown",
        "text/csv",
    }
)


def safe_file_name(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name)


def is_previewable(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.lower() in PREVIEWABLE_MIME_TYPES


def _preview_media_type(mime_type: str) -> str:
    if mime_type.startswith("text/") or mime_type in ("application/json", "application/javascript"):
        return f"{mime_type}; charset=utf-8"
    return mime_type


def uploader_name(profile: Optional[Profile]) -> str:
    if profile is None:
        return "Unknown"
    if profile.display_name:
        return profile.display_name
    if profile.email:
        return profile.email.split("@")[0]
    return "Unknown"


def _read(document: Document, profiles: Dict[str, Profile]) -> DocumentRead:
    return DocumentRead.model_validate(
        {**document.model_dump(), "uploader_name": uploader_name(profiles.get(document.uploaded_by))}
    )


async def _read_one(session: SessionDep, document: Document) -> DocumentRead:
    profiles = await ProfileRepository(session).get_many([document.uploaded_by])
    return _read(document, profiles)


async def _get_live(documents: DocumentRepository, document_id: str) -> Document:
    document = await documents.get_live(document_id)
    if document is None:
        raise NotFoundError("Document", document_id)
    return document


def _require_owner(document: Document, user: Profile) -> None:
    if document.uploaded_by != user.id:
        raise ForbiddenError("Only the owner can change this document")


def _client_details(request: Request) -> Dict[str, Optional[str]]:
    forwarded = request.headers.get("x-forwarded-for")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    return {"ip": ip, "user_agent": request.headers.get("user-agent")}


async def _store_upload(
    file: UploadFile,
    folder: str,
    parent_path: Optional[str],
    description: Optional[str],
    user: Profile,
    session: SessionDep,
    storage: StorageBackend,
    request: Request,
) -> Document:
    """
    Write one uploaded file to the documents bucket and record it.

    Oversized files are rejected before anything is written. When the
    database insert fails the stored object is removed again.
    """
    limit = settings.storage.max_upload_bytes
    too_large = BadRequestError(f"File too large. Maximum size is {settings.storage.max_upload_size_mb}MB.")
    if file.size is not None and file.size > limit:
        raise too_large
    data = await file.read()
    if len(data) > limit:
        raise too_large

    file_name = file.filename or "upload"
    bucket = settings.storage.documents_bucket
    storage_path = f"{folder}{int(time.time() * 1000)}-{safe_file_name(file_name)}"
    await storage.upload(bucket, storage_path, data, file.content_type)

    documents = DocumentRepository(session)
    try:
        document = await documents.create(
            Document(
                name=file_name,
                type=DocumentType.FILE.value,
                mime_type=file.content_type,
                size=len(data),
                path=build_path(parent_path, file_name, is_folder=False),
                parent_path=parent_path,
                storage_path=storage_path,
                uploaded_by=user.id,
                description=description,
            )
        )
    except Exception as e:
        logger.error(f"Failed to record upload '{storage_path}', removing stored object: {e}")
        await session.rollback()
        await storage.remove(bucket, [storage_path])
        raise OrgDeskError("Failed to save document record") from e

    await documents.record_activity(
        document.id,
        user.id,
        DocumentAction.UPLOADED.value,
        {"size": len(data), "mime_type": file.content_type, **_client_details(request)},
    )
    logger.info(f"User '{user.id}' uploaded '{file_name}' ({len(data)} bytes) to {bucket}/{storage_path}")
    return document


@router.get(
    "",
    response_model=DocumentList,
    summary="List Documents",
    description="List a folder, or search documents by name across folders.",
    response_description="Documents with folders first, then by name.",
)
async def list_documents(
    user: CurrentUserDep,
    session: SessionDep,
    parent_path: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> DocumentList:
    """
    List documents.

    - **parent_path**: Folder to list; omit or pass `/` for the root.
    - **search**: Case-insensitive name fragment; searches every folder.
    - **limit** / **offset**: Pagination, 50 per page by default.
    """
    folder = None if parent_path in (None, "", "/") else parent_path
    documents = await DocumentRepository(session).list_folder(folder, limit=limit, offset=offset, search=search)
    profiles = await ProfileRepository(session).get_many(d.uploaded_by for d in documents)
    return DocumentList(
        documents=[_read(d, profiles) for d in documents],
        parent_path=folder,
        limit=limit,
        offset=offset,
    )


@router.post(
    "",
    response_model=DocumentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Document Entry",
    description="Create a folder, or a file entry for an object already in storage.",
    responses={
        400: {"description": "name or type missing"},
    },
)
async def create_document(body: DocumentCreate, user: CurrentUserDep, session: SessionDep) -> DocumentRead:
    """
    Create a document entry.

    - **name**: Entry name.
    - **type**: `file` or `folder`.
    - **parent_path**: Containing folder; omit for the root.
    """
    if not body.name or not body.type:
        raise BadRequestError("name and type are required")
    if body.type not in (DocumentType.FILE.value, DocumentType.FOLDER.value):
        raise BadRequestError("type must be 'file' or 'folder'")

    parent_path = body.parent_path or None
    is_folder = body.type == DocumentType.FOLDER.value
    documents = DocumentRepository(session)
    document = await documents.create(
        Document(
            name=body.name,
            type=body.type,
            mime_type=body.mime_type,
            size=body.size,
            path=build_path(parent_path, body.name, is_folder),
            parent_path=parent_path,
            storage_path=body.storage_path,
            uploaded_by=user.id,
            description=body.description,
            tags=body.tags,
        )
    )
    await documents.record_activity(document.id, user.id, DocumentAction.CREATED.value, {"type": body.type})
    return await _read_one(session, document)


@router.post(
    "/upload",
    response_model=UploadResult,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
    description="Upload one file into the documents bucket.",
    responses={
        400: {"description": "No file, or the file is too large"},
        401: {"description": "Caller is not authenticated"},
        500: {"description": "The document record could not be saved"},
    },
)
async def upload_document(
    request: Request,
    user: CurrentUserDep,
    session: SessionDep,
    storage: StorageDep,
    file: Optional[UploadFile] = File(default=None),
    folder: str = Form(default=""),
    parent_path: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
) -> UploadResult:
    """
    Upload a single file.

    - **file**: Multipart file, at most 50MB.
    - **folder**: Prefix for the object key inside the bucket.
    - **parent_path**: Folder the document appears in; omit for the root.
    """
    if file is None:
        raise BadRequestError("No file provided")
    document = await _store_upload(file, folder, parent_path or None, description, user, session, storage, request)
    return UploadResult(document=await _read_one(session, document))


@router.put(
    "/upload",
    response_model=BulkUploadResponse,
    summary="Bulk Upload Documents",
    description="Upload several files; each file succeeds or fails on its own.",
    responses={
        400: {"description": "No files provided"},
    },
)
async def bulk_upload_documents(
    request: Request,
    user: CurrentUserDep,
    session: SessionDep,
    storage: StorageDep,
    files: List[UploadFile] = File(default=[]),
    folder: str = Form(default=""),
    parent_path: Optional[str] = Form(default=None),
) -> BulkUploadResponse:
    """
    Upload several files.

    The response lists the stored documents, one error per rejected file,
    and a summary of the counts.
    """
    if not files:
        raise BadRequestError("No files provided")

    results: List[DocumentRead] = []
    errors: List[BulkUploadError] = []
    for file in files:
        try:
            document = await _store_upload(file, folder, parent_path or None, None, user, session, storage, request)
        except OrgDeskError as e:
            errors.append(BulkUploadError(fileName=file.filename or "upload", error=e.message))
            continue
        results.append(await _read_one(session, document))

    return BulkUploadResponse(
        results=results,
        errors=errors,
        summary=BulkUploadSummary(total=len(files), successful=len(results), failed=len(errors)),
    )


@router.post(
    "/share",
    response_model=ShareRead,
    summary="Share Document",
    description="Share a document with a user or a role, or change the level of an existing share.",
    responses={
        400: {"description": "Missing fields"},
        403: {"description": "Caller is neither owner nor an admin sharer"},
        404: {"description": "Document not found"},
    },
)
async def share_document(body: ShareCreate, user: CurrentUserDep, session: SessionDep) -> ShareRead:
    """
    Share a document.

    - **documentId**: Document to share.
    - **permissionLevel**: `view`, `edit` or `admin`.
    - **sharedWithUserId** or **sharedWithRole**: The share target.

    The owner may always share; anyone else needs an `admin` share on the document.
    """
    if not body.documentId or not body.permissionLevel or not (body.sharedWithUserId or body.sharedWithRole):
        raise BadRequestError("documentId, permissionLevel and a user or role target are required")
    if body.permissionLevel not in {p.value for p in SharePermission}:
        raise BadRequestError(f"Unknown permission level: {body.permissionLevel}")

    documents = DocumentRepository(session)
    document = await _get_live(documents, body.documentId)
    shares = DocumentShareRepository(session)
    if document.uploaded_by != user.id and not await shares.has_admin_share(document.id, user.id, user.role):
        raise ForbiddenError("You do not have permission to share this document")

    share = await shares.find_target(document.id, body.sharedWithUserId, body.sharedWithRole)
    if share is None:
        share = DocumentShare(
            document_id=document.id,
            shared_with_user_id=body.sharedWithUserId,
            shared_with_role=body.sharedWithRole,
            permission_level=body.permissionLevel,
            shared_by=user.id,
        )
    else:
        share.permission_level = body.permissionLevel
        share.shared_by = user.id
    session.add(share)
    document.is_shared = True
    session.add(document)
    await session.commit()
    await session.refresh(share)

    await documents.record_activity(
        document.id,
        user.id,
        DocumentAction.SHARED.value,
        {
            "shared_with_user_id": body.sharedWithUserId,
            "shared_with_role": body.sharedWithRole,
            "permission_level": body.permissionLevel,
        },
    )
    return ShareRead.model_validate(share)


@router.get(
    "/share",
    response_model=List[ShareRead],
    summary="List Document Shares",
    responses={
        400: {"description": "documentId missing"},
        404: {"description": "Document not found"},
    },
)
async def list_shares(user: CurrentUserDep, session: SessionDep, documentId: Optional[str] = None) -> List[ShareRead]:
    if not documentId:
        raise BadRequestError("documentId is required")
    await _get_live(DocumentRepository(session), documentId)
    shares = await DocumentShareRepository(session).list_for_document(documentId)
    return [ShareRead.model_validate(s) for s in shares]


@router.delete(
    "/share",
    summary="Remove Document Share",
    description="Remove a share. Only the sharer or the document owner may do so.",
    responses={
        400: {"description": "shareId missing"},
        403: {"description": "Caller is neither sharer nor owner"},
        404: {"description": "Share not found"},
    },
)
async def delete_share(user: CurrentUserDep, session: SessionDep, shareId: Optional[str] = None):
    """
    Remove a share.

    When the last share of a document is removed the document is no longer
    marked as shared.
    """
    if not shareId:
        raise BadRequestError("shareId is required")
    shares = DocumentShareRepository(session)
    share = await shares.get_by_id(shareId)
    if share is None:
        raise NotFoundError("Share", shareId)

    documents = DocumentRepository(session)
    document = await documents.get_by_id(share.document_id)
    owner_id = document.uploaded_by if document else None
    if user.id not in (share.shared_by, owner_id):
        raise ForbiddenError("Only the sharer or the owner can remove this share")

    await shares.delete(share.id)
    if document is not None:
        if await shares.count_for_document(document.id) == 0:
            document.is_shared = False
            await documents.update(document)
        await documents.record_activity(
            document.id,
            user.id,
            DocumentAction.UNSHARED.value,
            {"share_id": shareId, "shared_with_user_id": share.shared_with_user_id, "shared_with_role": share.shared_with_role},
        )
    return {"success": True}


@router.get(
    "/{document_id}",
    response_model=DocumentRead,
    summary="Get Document",
    responses={
        404: {"description": "Document not found or deleted"},
    },
)
async def get_document(document_id: str, user: CurrentUserDep, session: SessionDep) -> DocumentRead:
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    await documents.record_activity(document.id, user.id, DocumentAction.VIEWED.value)
    return await _read_one(session, document)


@router.put(
    "/{document_id}",
    response_model=DocumentRead,
    summary="Update Document",
    description="Rename a document or change its tags, favourite flag or description.",
    responses={
        404: {"description": "Document not found or deleted"},
    },
)
async def update_document(
    document_id: str, body: DocumentUpdate, user: CurrentUserDep, session: SessionDep
) -> DocumentRead:
    """
    Update a document.

    Only the fields present in the body change. A new name is logged as
    `renamed` with the old and new names, anything else as `updated`.
    """
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    changes = body.model_dump(exclude_unset=True)

    new_name = changes.pop("name", None)
    old_name = document.name
    for field, value in changes.items():
        setattr(document, field, value)

    if new_name and new_name != old_name:
        document = await documents.relocate(document, document.parent_path, new_name)
        await documents.record_activity(
            document.id, user.id, DocumentAction.RENAMED.value, {"old_name": old_name, "new_name": new_name}
        )
    else:
        document = await documents.update(document)
        await documents.record_activity(
            document.id, user.id, DocumentAction.UPDATED.value, {"fields": sorted(changes)}
        )
    return await _read_one(session, document)


@router.delete(
    "/{document_id}",
    response_model=DocumentDeleted,
    summary="Delete Document",
    description="Soft-delete a document; deleting a folder also deletes its contents.",
    responses={
        404: {"description": "Document not found or already deleted"},
    },
)
async def delete_document(document_id: str, user: CurrentUserDep, session: SessionDep) -> DocumentDeleted:
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    affected = await documents.soft_delete(document.id)
    await documents.record_activity(
        document_id, user.id, DocumentAction.DELETED.value, {"name": document.name, "affected_count": affected}
    )
    logger.info(f"User '{user.id}' deleted document '{document_id}' ({affected} rows)")
    return DocumentDeleted(affected_count=affected)


@router.post(
    "/{document_id}/favorite",
    response_model=DocumentRead,
    summary="Toggle Favourite",
    responses={
        404: {"description": "Document not found or deleted"},
    },
)
async def toggle_favorite(document_id: str, user: CurrentUserDep, session: SessionDep) -> DocumentRead:
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    document.is_favorite = not document.is_favorite
    document = await documents.update(document)
    return await _read_one(session, document)


@router.post(
    "/{document_id}/visibility",
    response_model=DocumentRead,
    summary="Set Document Visibility",
    responses={
        403: {"description": "Caller is not the owner"},
        404: {"description": "Document not found or deleted"},
    },
)
async def set_visibility(
    document_id: str, body: DocumentVisibility, user: CurrentUserDep, session: SessionDep
) -> DocumentRead:
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    _require_owner(document, user)
    document.is_public = body.is_public
    document = await documents.update(document)
    action = DocumentAction.MADE_PUBLIC if body.is_public else DocumentAction.MADE_PRIVATE
    await documents.record_activity(document.id, user.id, action.value)
    return await _read_one(session, document)


@router.post(
    "/{document_id}/move",
    response_model=DocumentRead,
    summary="Move Document",
    description="Move a document into another folder; folders move with their contents.",
    responses={
        400: {"description": "A folder cannot be moved into itself"},
        403: {"description": "Caller is not the owner"},
        404: {"description": "Document not found or deleted"},
    },
)
async def move_document(
    document_id: str, body: DocumentMove, user: CurrentUserDep, session: SessionDep
) -> DocumentRead:
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    _require_owner(document, user)

    destination = body.parent_path if body.parent_path not in ("", "/") else None
    if document.is_folder and destination and destination.startswith(document.path):
        raise BadRequestError("A folder cannot be moved into itself")

    source = document.parent_path
    document = await documents.relocate(document, destination, document.name)
    await documents.record_activity(document.id, user.id, DocumentAction.MOVED.value, {"from": source, "to": destination})
    return await _read_one(session, document)


@router.get(
    "/{document_id}/download",
    summary="Download Document",
    response_description="The stored file.",
    responses={
        400: {"description": "The document has no stored file"},
        404: {"description": "Document or stored object not found"},
    },
)
async def download_document(
    document_id: str, user: CurrentUserDep, session: SessionDep, storage: StorageDep
) -> Response:
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    if document.is_folder or not document.storage_path:
        raise BadRequestError("This document has no stored file")

    data = await storage.download(settings.storage.documents_bucket, document.storage_path)
    await documents.record_activity(document.id, user.id, DocumentAction.DOWNLOADED.value)
    return Response(
        content=data,
        media_type=document.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{safe_file_name(document.name)}"'},
    )


@router.get(
    "/{document_id}/preview",
    summary="Preview Document",
    response_description="The stored file, served inline.",
    responses={
        400: {"description": "The document is a folder or its type cannot be previewed"},
        404: {"description": "Document or stored file not found"},
    },
)
async def preview_document(
    document_id: str, user: CurrentUserDep, session: SessionDep, storage: StorageDep
) -> Response:
    """
    Serve a file for display in the browser.

    Only images, PDFs and common text formats can be previewed. Every preview
    is recorded as a `viewed` activity.
    """
    documents = DocumentRepository(session)
    document = await _get_live(documents, document_id)
    if document.is_folder:
        raise BadRequestError("Cannot preview folders")
    if not document.storage_path:
        raise NotFoundError("Stored file")
    if not is_previewable(document.mime_type):
        raise BadRequestError("File type not supported for preview")

    data = await storage.download(settings.storage.documents_bucket, document.storage_path)
    await documents.record_activity(document.id, user.id, DocumentAction.VIEWED.value, {"action": "preview"})
    return Response(
        content=data,
        media_type=_preview_media_type(document.mime_type),
        headers={
            "Content-Disposition": f'inline; filename="{safe_file_name(document.name)}"',
            "Cache-Control": "private, max-age=300",
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "SAMEORIGIN",
        },
    )


@router.head(
    "/{document_id}/preview",
    summary="Check Document Preview",
    responses={
        400: {"description": "The document is a folder or has no stored file"},
        404: {"description": "Document not found"},
    },
)
async def check_preview(document_id: str, user: CurrentUserDep, session: SessionDep) -> Response:
    """Report whether a document can be previewed, without sending the file."""
    document = await _get_live(DocumentRepository(session), document_id)
    if document.is_folder or not document.storage_path:
        raise BadRequestError("This document has no stored file")
    return Response(
        media_type=document.mime_type or "application/octet-stream",
        headers={
            "Content-Length": str(document.size or 0),
            "X-Preview-Supported": "true" if is_previewable(document.mime_type) else "false",
            "X-File-Name": quote(document.name),
            "X-File-Type": document.type,
        },
    )


@router.get(
    "/{document_id}/activity",
    response_model=List[ActivityRead],
    summary="List Document Activity",
    responses={
        404: {"description": "Document not found"},
    },
)
async def list_activity(document_id: str, user: CurrentUserDep, session: SessionDep) -> List[ActivityRead]:
    documents = DocumentRepository(session)
    if await documents.get_by_id(document_id) is None:
        raise NotFoundError("Document", document_id)
    return [ActivityRead.model_validate(a) for a in await documents.list_activity(document_id)]
