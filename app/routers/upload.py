# =============================================================================
# app/routers/upload.py - Listing Photo Uploads
# =============================================================================
# Accepts one image per request (multipart field `file`) and stores it
# under the caller's prefix in the listing photos bucket.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, File, Query, UploadFile, status

from app.config import settings
from app.dependencies import CurrentUser
from app.exceptions import BadRequestError, FileTooLargeError
from core.models import success_response
from core.services import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()

READ_CHUNK_BYTES = 64 * 1024


async def read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read an upload in chunks, stopping as soon as it passes max_bytes.

    Raises:
        FileTooLargeError: The body is larger than max_bytes
    """
    chunks = []
    total = 0
    while True:
        chunk = await file.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            logger.info(f"Rejected upload '{file.filename}' after {total} bytes")
            raise FileTooLargeError(total / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_photo(
    user: CurrentUser,
    file: Annotated[UploadFile | None, File(description="JPEG, PNG, WebP or GIF image")] = None,
):
    """
    Upload a listing photo.

    Returns the public URL to put in a listing's photos and the storage
    path needed to delete it again.
    """
    if file is None or not file.filename:
        raise BadRequestError("No file provided")

    # Reject on the declared type before reading the body
    StorageService.validate_image(file.content_type, 0)
    content = await read_limited(file, settings.max_upload_size_bytes)

    result = StorageService.upload_photo(user.id, content, file.content_type)
    return success_response(result, message="File uploaded successfully")


@router.delete("")
async def delete_photo(
    user: CurrentUser,
    path: Annotated[str | None, Query(description="Storage path returned by the upload")] = None,
):
    """Delete one of the caller's uploaded photos."""
    StorageService.delete_photo(user.id, path or "")
    return success_response({"path": path}, message="File deleted successfully")
