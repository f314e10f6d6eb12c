from fastapi import Request
from app.core.config import settings
from app.core.supabase_client import get_supabase
from app.services.storage import LocalStorageBackend, StorageBackend, SupabaseStorageBackend

# Dependency to get the configured storage backend
def get_storage_backend(request: Request) -> StorageBackend:
    """
    Dependency to get the StorageBackend selected by STORAGE_BACKEND.
    """
    if settings.STORAGE_BACKEND == "supabase":
        return SupabaseStorageBackend(
            get_supabase(),
            settings.SUPABASE_BUCKET,
            page_size=settings.SUPABASE_LIST_PAGE_SIZE,
        )

    return LocalStorageBackend(
        settings.UPLOAD_DIR,
        base_url=settings.PUBLIC_BASE_URL or str(request.base_url),
        url_path=settings.UPLOADS_URL_PATH,
    )
