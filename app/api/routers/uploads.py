import logging
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, UploadFile, File, HTTPException, status
from app.api.schemas import UploadRecord, DeleteRequest, DeleteResponse, DeleteAllResponse
from app.api.dependencies import get_storage_backend
from app.core.exceptions import BackendError, ValidationError
from app.services.storage import StorageBackend
from app.utils.file_utils import build_stored_name, now_ms

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])

@router.post("/upload", response_model=UploadRecord)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    storage: StorageBackend = Depends(get_storage_backend)
):
    """
    Store a single uploaded file and return its public URL.
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    timestamp = now_ms()
    filename = build_stored_name(file.filename, timestamp)

    try:
        data = await file.read()
        url = await storage.store(data, filename, content_type=file.content_type)
    except BackendError:
        logger.exception(f"Upload error for {file.filename}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Upload failed"
        )

    return UploadRecord(url=url, filename=filename, timestamp=timestamp)

@router.get("/list", response_model=List[UploadRecord])
async def list_uploads(
    storage: StorageBackend = Depends(get_storage_backend)
):
    """
    List every stored upload.
    """
    try:
        return await storage.list()
    except BackendError:
        logger.exception("List error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list uploads"
        )

@router.delete("/delete", response_model=DeleteResponse)
async def delete_upload(
    payload: Optional[DeleteRequest] = Body(None),
    storage: StorageBackend = Depends(get_storage_backend)
):
    """
    Delete one upload by URL. Unknown URLs are reported as deleted.
    """
    if payload is None or not payload.url:
        raise ValidationError("URL is required")

    try:
        await storage.delete(payload.url)
    except BackendError:
        logger.exception(f"Delete error for {payload.url}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Delete failed"
        )

    return DeleteResponse(success=True)

@router.delete("/delete-all", response_model=DeleteAllResponse)
async def delete_all_uploads(
    storage: StorageBackend = Depends(get_storage_backend)
):
    """
    Delete every upload. Partial failures are listed in `failed`.
    """
    try:
        result = await storage.delete_all()
    except BackendError:
        logger.exception("Delete-all error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Delete failed"
        )

    logger.info(f"Delete-all removed {result.deleted} uploads, {len(result.failed)} failed")
    return DeleteAllResponse(**result.model_dump())
