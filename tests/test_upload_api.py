# =============================================================================
# tests/test_upload_api.py - Photo Upload Tests
# =============================================================================

import asyncio
from io import BytesIO

import pytest
from fastapi import UploadFile

from app.config import settings
from app.exceptions import FileTooLargeError, InvalidFileTypeError
from app.routers.upload import READ_CHUNK_BYTES, read_limited
from core.services.storage_service import StorageService, build_photo_path, user_prefix
from tests.conftest import OWNER_ID, RENTER_ID

UPLOAD = "/api/v1/upload"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestValidateImage:
    def test_rejects_non_image(self):
        with pytest.raises(InvalidFileTypeError):
            StorageService.validate_image("application/pdf", 100)

    def test_rejects_oversized(self):
        with pytest.raises(FileTooLargeError) as exc_info:
            StorageService.validate_image("image/png", 6 * 1024 * 1024)

        assert exc_info.value.details["max_mb"] == 5

    def test_accepts_case_insensitively(self):
        StorageService.validate_image("IMAGE/JPEG", 1024)


class TestPhotoPath:
    def test_path_under_user_prefix(self):
        path = build_photo_path(OWNER_ID, "IMAGE/JPEG")

        assert path.startswith(user_prefix(OWNER_ID))
        assert path.endswith(".jpg")


class TestReadLimited:
    def test_stops_past_limit(self):
        file = UploadFile(BytesIO(b"x" * (READ_CHUNK_BYTES * 4)), filename="big.png")

        with pytest.raises(FileTooLargeError):
            asyncio.run(read_limited(file, READ_CHUNK_BYTES))

        assert file.file.tell() == READ_CHUNK_BYTES * 2

    def test_returns_body_under_limit(self):
        file = UploadFile(BytesIO(PNG_BYTES), filename="small.png")

        assert asyncio.run(read_limited(file, 4096)) == PNG_BYTES


class TestUploadEndpoint:
    """Tests for POST and DELETE /upload."""

    def test_upload_returns_url_and_path(self, client, fake_db, login):
        login(OWNER_ID)

        response = client.post(UPLOAD, files={"file": ("camera.png", PNG_BYTES, "image/png")})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["path"].startswith(f"listings/{OWNER_ID}/")
        assert data["url"].endswith(data["path"])
        stored = fake_db.storage.files[("listing-photos", data["path"])]
        assert stored["options"]["upsert"] == "false"

    def test_extension_follows_content_type(self, client, fake_db, login):
        login(OWNER_ID)

        response = client.post(UPLOAD, files={"file": ("page.html", PNG_BYTES, "image/png")})

        assert response.status_code == 201
        path = response.json()["data"]["path"]
        assert path.endswith(".png")
        assert ".html" not in path

    def test_oversized_body_rejected(self, client, fake_db, login, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)
        login(OWNER_ID)

        response = client.post(UPLOAD, files={"file": ("camera.png", PNG_BYTES, "image/png")})

        assert response.status_code == 400
        assert response.json()["details"]["max_mb"] == 0
        assert fake_db.storage.files == {}

    def test_missing_file(self, client, fake_db, login):
        login(OWNER_ID)

        response = client.post(UPLOAD)

        assert response.status_code == 400
        assert response.json()["error"] == "No file provided"

    def test_wrong_type(self, client, fake_db, login):
        login(OWNER_ID)

        response = client.post(UPLOAD, files={"file": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert fake_db.storage.files == {}

    def test_storage_failure_is_500(self, client, fake_db, login):
        fake_db.storage.fail = True
        login(OWNER_ID)

        response = client.post(UPLOAD, files={"file": ("camera.png", PNG_BYTES, "image/png")})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to upload file"

    def test_delete_own_photo(self, client, fake_db, login):
        login(OWNER_ID)
        path = client.post(UPLOAD, files={"file": ("camera.png", PNG_BYTES, "image/png")}).json()["data"]["path"]

        response = client.delete(UPLOAD, params={"path": path})

        assert response.status_code == 200
        assert fake_db.storage.files == {}

    def test_cannot_delete_other_users_photo(self, client, fake_db, login):
        login(RENTER_ID)

        response = client.delete(UPLOAD, params={"path": f"listings/{OWNER_ID}/1700000000000-abcdefg.png"})

        assert response.status_code == 403

    def test_traversal_rejected(self, client, fake_db, login):
        login(RENTER_ID)

        response = client.delete(UPLOAD, params={"path": f"listings/{RENTER_ID}/../{OWNER_ID}/photo.png"})

        assert response.status_code == 403

    def test_delete_requires_path(self, client, fake_db, login):
        login(RENTER_ID)

        response = client.delete(UPLOAD)

        assert response.status_code == 400
        assert response.json()["error"] == "No path provided"
