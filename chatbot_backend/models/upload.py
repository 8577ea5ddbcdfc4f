"""Upload-related Pydantic models"""
from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Stored file and where to fetch it"""
    success: bool
    url: str
    filename: str
