import mimetypes
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from app.api.dependencies import get_storage_backend
from app.services.storage import LocalStorageBackend, StorageBackend

router = APIRouter(tags=["files"])

@router.get("/{filename}")
async def serve_file(
    filename: str,
    storage: StorageBackend = Depends(get_storage_backend)
):
    """
    Serve a stored screenshot. Only the local backend keeps files here;
    managed backends hand out their own public URLs.
    """
    if not isinstance(storage, LocalStorageBackend):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Files are served by the storage provider"
        )

    file_path = storage.path_for(filename)
    if file_path is None or not file_path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"File {filename} not found"
        )

    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    headers = {
        "Content-Length": str(file_path.stat().st_size),
        "Cache-Control": "public, max-age=31536000, immutable",
    }

    return StreamingResponse(
        storage.read_file(filename),
        headers=headers,
        media_type=media_type
    )
