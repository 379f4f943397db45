# postboard/services/test_storage_service.py
"""
StorageService 테스트 (Firebase 버킷은 MagicMock 으로 대체)
"""
from unittest.mock import MagicMock

import pytest
import requests
from google.api_core import exceptions as google_exceptions

from postboard.core.exceptions import DeletionError, UploadError
from postboard.services.storage_service import StorageService


@pytest.fixture
def bucket():
    bucket = MagicMock()
    bucket.blob.return_value.public_url = "https://storage.example/posts/u1/file.jpg"
    return bucket


def test_build_storage_id():
    storage_id = StorageService.build_storage_id("posts/u1", "Photo.JPG")
    assert storage_id.startswith("posts/u1/")
    assert storage_id.endswith(".jpg")
    assert StorageService.build_storage_id("posts/u1", "photo.jpg") != storage_id

    without_ext = StorageService.build_storage_id("posts/u1", None)
    assert "." not in without_ext.rsplit("/", 1)[-1]


def test_upload_passes_timeout_and_returns_image(bucket):
    service = StorageService(bucket=bucket, timeout=3)

    image = service.upload(b"bytes", {"filename": "a.png", "content_type": "image/png", "folder": "posts/u1"})

    blob = bucket.blob.return_value
    blob.upload_from_string.assert_called_once_with(b"bytes", content_type="image/png", timeout=3)
    blob.make_public.assert_called_once_with(timeout=3)
    assert image.url == "https://storage.example/posts/u1/file.jpg"
    assert image.storage_id == bucket.blob.call_args[0][0]
    assert image.storage_id.startswith("posts/u1/")


@pytest.mark.parametrize("error", [
    google_exceptions.ServiceUnavailable("down"),
    requests.exceptions.Timeout("slow"),
])
def test_upload_failure_raises_upload_error(bucket, error):
    bucket.blob.return_value.upload_from_string.side_effect = error
    with pytest.raises(UploadError):
        StorageService(bucket=bucket).upload(b"bytes", {"filename": "a.jpg"})


def test_delete_passes_timeout(bucket):
    StorageService(bucket=bucket, timeout=5).delete("posts/u1/a.jpg")
    bucket.blob.assert_called_once_with("posts/u1/a.jpg")
    bucket.blob.return_value.delete.assert_called_once_with(timeout=5)


def test_delete_missing_object_is_success(bucket):
    bucket.blob.return_value.delete.side_effect = google_exceptions.NotFound("gone")
    StorageService(bucket=bucket).delete("posts/u1/a.jpg")


def test_delete_failure_raises_deletion_error(bucket):
    bucket.blob.return_value.delete.side_effect = google_exceptions.InternalServerError("boom")
    with pytest.raises(DeletionError):
        StorageService(bucket=bucket).delete("posts/u1/a.jpg")


def test_uninitialized_service():
    with pytest.raises(RuntimeError):
        StorageService().delete("posts/u1/a.jpg")
