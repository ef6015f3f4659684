# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles listing photo upload/delete with Supabase Storage.
#
# Photos live in the listing photos bucket under:
#   listings/{user_id}/{timestamp_ms}-{random}.{ext}
# A user may only delete files under their own prefix.
# =============================================================================

import logging
import secrets
import string
import time
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from app.config import settings
from app.exceptions import (
    AuthorizationError,
    BadRequestError,
    FileTooLargeError,
    InvalidFileTypeError,
    StorageDeleteError,
    StorageUploadError,
)

logger = logging.getLogger(__name__)

EXTENSION_BY_TYPE = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

_ALPHABET = string.ascii_lowercase + string.digits


def user_prefix(user_id: str | UUID) -> str:
    return f"listings/{normalize_uuid(user_id)}/"


def build_photo_path(user_id: str | UUID, content_type: str) -> str:
    """
    Storage path for a new photo.

    The extension comes from the content type, never the client filename.
    """
    ext = EXTENSION_BY_TYPE.get(content_type.lower(), "bin")
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(7))
    return f"{user_prefix(user_id)}{int(time.time() * 1000)}-{suffix}.{ext}"


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles uploading and deleting listing photos.
    """

    @staticmethod
    def validate_image(content_type: str | None, size_bytes: int) -> None:
        """
        Check type and size before anything is uploaded.

        Raises:
            InvalidFileTypeError: Not an allowed image type
            FileTooLargeError: Over MAX_UPLOAD_SIZE_MB
        """
        allowed = settings.allowed_image_types_list
        if not content_type or content_type.lower() not in allowed:
            raise InvalidFileTypeError(content_type, allowed)

        if size_bytes > settings.max_upload_size_bytes:
            raise FileTooLargeError(size_bytes / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

    @staticmethod
    def upload_photo(
        user_id: str | UUID,
        content: bytes,
        content_type: str,
    ) -> dict[str, str]:
        """
        Upload a listing photo and return its public URL.

        Returns:
            {"url": public URL, "path": storage path}

        Raises:
            StorageUploadError: If upload fails
        """
        StorageService.validate_image(content_type, len(content))

        client = SupabaseClient.get_client()
        bucket = client.storage.from_(settings.LISTING_PHOTOS_BUCKET)
        path = build_photo_path(user_id, content_type)

        try:
            bucket.upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"},
            )
        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

        url = bucket.get_public_url(path)
        logger.info(f"Uploaded photo to storage: {path} ({len(content)} bytes)")
        return {"url": url, "path": path}

    @staticmethod
    def delete_photo(user_id: str | UUID, path: str) -> None:
        """
        Delete one of the caller's photos.

        Raises:
            BadRequestError: Empty path
            AuthorizationError: Path outside the caller's prefix
            StorageDeleteError: If removal fails
        """
        if not path:
            raise BadRequestError("No path provided")
        if not path.startswith(user_prefix(user_id)) or ".." in path:
            raise AuthorizationError("Unauthorized to delete this file")

        client = SupabaseClient.get_client()
        try:
            client.storage.from_(settings.LISTING_PHOTOS_BUCKET).remove([path])
        except Exception as e:
            logger.error(f"Storage delete failed for {path}: {e}")
            raise StorageDeleteError(path, str(e))

        logger.info(f"Deleted photo from storage: {path}")
