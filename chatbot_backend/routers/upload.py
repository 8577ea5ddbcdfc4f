"""Upload endpoints - chatbot icon images"""
from fastapi import APIRouter, Depends, File, Request, UploadFile
from pathlib import Path
from typing import Optional
import logging

from chatbot_backend.config import Settings, get_settings
from chatbot_backend.models.upload import UploadResponse
from chatbot_backend.services.storage_service import FileStorage
from chatbot_backend.utils.errors import InternalError, ValidationFailed

logger = logging.getLogger(__name__)
router = APIRouter()

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "svg", "webp"}


def get_file_storage(request: Request) -> FileStorage:
    return request.app.state.file_storage


def validate_file_type(filename: str, content_type: Optional[str], allowed_types) -> str:
    """
    Check both the extension and the declared MIME type.

    Returns:
        The lower-cased extension, including the dot

    Raises:
        ValidationFailed: If either check fails
    """
    extension = Path(filename).suffix.lower()
    if extension.lstrip(".") not in ALLOWED_EXTENSIONS or content_type not in allowed_types:
        raise ValidationFailed(f"Only these file types are allowed: {', '.join(allowed_types)}")
    return extension


@router.post("/icon", response_model=UploadResponse)
async def upload_icon(
    icon: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
    storage: FileStorage = Depends(get_file_storage)
):
    """Store a chatbot icon and return its public URL"""
    if icon is None or not icon.filename:
        raise ValidationFailed("No file uploaded")

    extension = validate_file_type(icon.filename, icon.content_type, settings.allowed_file_type_list)

    # One byte past the limit is enough to detect an oversize file
    content = await icon.read(settings.max_file_size + 1)
    if len(content) > settings.max_file_size:
        raise ValidationFailed(f"File too large, maximum size is {settings.max_file_size} bytes")

    filename = storage.generate_filename("icon", extension)
    try:
        url = await storage.save(filename, content)
    except OSError as e:
        logger.error(f"Icon upload error: {e}")
        raise InternalError("Failed to store uploaded file")

    return {"success": True, "url": url, "filename": filename}
