from pathlib import Path
from typing import Literal, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "Screenshot Uploader"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Storage settings
    STORAGE_BACKEND: Literal["local", "supabase"] = "local"
    UPLOAD_DIR: Path = Path("uploads")
    UPLOADS_URL_PATH: str = "/uploads"
    PUBLIC_BASE_URL: Optional[str] = None  # falls back to the request's base URL

    # Supabase Storage settings
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    SUPABASE_BUCKET: str = "screenshots"
    SUPABASE_LIST_PAGE_SIZE: int = 100

    # Client settings
    API_BASE_URL: str = "http://localhost:8005"
    HISTORY_CACHE_PATH: Path = Path("uploads_history.json")
    UPLOAD_COPIED_SECONDS: float = 3.0
    COPY_COPIED_SECONDS: float = 2.0

    # Create the upload directory if the local backend is in use
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.STORAGE_BACKEND == "local":
            self.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

# Global settings instance
settings = Settings()
