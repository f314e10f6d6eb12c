from typing import List
from pydantic import BaseModel, ConfigDict, Field

class UploadRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    filename: str
    timestamp: int  # milliseconds since epoch

class DeleteAllResult(BaseModel):
    success: bool
    deleted: int
    failed: List[str] = Field(default_factory=list)
