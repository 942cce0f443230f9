"""
Document endpoints - upload, list and download
"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.config import settings
from app.core.logger import logger
from app.db.database import get_db
from app.db.models import Document, TaxCase, User, UserRole
from app.db.schemas import DocumentOut
from app.services import background_jobs
from app.services.activity_service import activity_service
from app.services.storage_service import storage_service
from app.utils.exceptions import AccessDeniedError, NotFoundError, UploadFailedError
from app.utils.validators import is_allowed_upload_type, resolve_document_category

router = APIRouter()


def _parse_id(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except ValueError:
        return None


@router.get("", response_model=List[DocumentOut])
def get_documents(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Documents belonging to the signed-in client, newest first"""
    return (
        db.query(Document)
        .filter(Document.client_id == current_user.id)
        .order_by(Document.created_at.desc(), Document.id.desc())
        .all()
    )


@router.post("/upload", response_model=DocumentOut)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: Optional[UploadFile] = File(None),
    caseId: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    clientId: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Multipart upload (max 10MB; PDF, JPEG, PNG, DOC, DOCX).

    - caseId must belong to the document owner
    - unknown categories are stored as ``other``
    - staff may upload on behalf of a client by passing clientId
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    if not is_allowed_upload_type(file.content_type):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file type")

    payload = await file.read()
    if len(payload) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large. Maximum size is 10MB.",
        )

    owner = current_user
    target_client_id = _parse_id(clientId)
    if current_user.is_staff and target_client_id and target_client_id != current_user.id:
        owner = db.query(User).filter(User.id == target_client_id, User.role == UserRole.client).first()
        if not owner:
            raise NotFoundError("Client")

    case_id = _parse_id(caseId)
    if case_id is not None:
        tax_case = db.query(TaxCase).filter(TaxCase.id == case_id).first()
        if not tax_case or tax_case.client_id != owner.id:
            raise AccessDeniedError()

    doc_category = resolve_document_category(category)

    try:
        file_path = storage_service.save(payload, file.filename, file.content_type)
    except Exception as exc:
        logger.exception("Document storage failed for user %s", current_user.id)
        raise UploadFailedError(str(exc))

    document = Document(
        case_id=case_id,
        client_id=owner.id,
        file_name=file.filename,
        file_path=file_path,
        file_type=file.content_type,
        file_size=len(payload),
        category=doc_category,
        description=(description or "").strip() or None,
        uploaded_by_id=current_user.id,
        is_from_preparer=current_user.is_staff,
    )
    db.add(document)
    activity_service.log(
        db,
        current_user.id,
        "document_uploaded",
        f"Document uploaded: {file.filename} ({doc_category.value})",
        commit=False,
    )
    db.commit()
    db.refresh(document)

    if not current_user.is_staff:
        background_tasks.add_task(
            background_jobs.notify_document_upload,
            owner.name or owner.email,
            owner.email,
            file.filename,
            doc_category.value,
        )
    return document


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Owner or staff only. R2 documents redirect to a short-lived signed URL."""
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise NotFoundError("Document")

    if document.client_id != current_user.id and not current_user.is_staff:
        raise AccessDeniedError()

    if not storage_service.exists(document.file_path):
        raise NotFoundError("File")

    if storage_service.is_r2_path(document.file_path):
        return RedirectResponse(storage_service.generate_download_url(document.file_path))

    return FileResponse(
        document.file_path,
        filename=document.file_name,
        media_type=document.file_type or "application/octet-stream",
    )
