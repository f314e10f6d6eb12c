from pydantic import BaseModel
from typing import Optional
from app.models import DeleteAllResult, UploadRecord

class DeleteRequest(BaseModel):
    url: Optional[str] = None

class DeleteResponse(BaseModel):
    success: bool = True

class DeleteAllResponse(DeleteAllResult):
    pass

__all__ = ["UploadRecord", "DeleteRequest", "DeleteResponse", "DeleteAllResponse"]
