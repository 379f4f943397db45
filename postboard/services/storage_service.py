# postboard/services/storage_service.py
import uuid
import logging
from typing import Any, Dict, Optional

import requests
from flask import Flask
from firebase_admin import storage
from google.api_core import exceptions as google_exceptions

from postboard.core.exceptions import DeletionError, UploadError
from postboard.models.post import Image

logger = logging.getLogger(__name__)

# 업로드/삭제 중 전송 계층에서 발생할 수 있는 예외들
_TRANSPORT_ERRORS = (google_exceptions.GoogleAPIError, requests.exceptions.RequestException)


class StorageService:
    """
    Firebase Storage 에 게시글 이미지를 올리고 지우는 어댑터입니다.
    - upload(file_bytes, metadata) -> Image(url, storage_id)
    - delete(storage_id) -> None  (이미 없는 파일은 성공으로 간주)
    모든 호출은 STORAGE_TIMEOUT_SECONDS 안에 끝나지 않으면 실패로 처리됩니다.
    """

    def __init__(self, bucket=None, timeout: int = 10):
        """
        실제 버킷 객체는 init_app 메서드를 통해 주입됩니다.
        테스트에서는 bucket 을 직접 전달할 수 있습니다.
        """
        self.bucket = bucket
        self.timeout = timeout

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷과 타임아웃을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET must be configured in .env or the config class.")

        self.bucket = storage.bucket(bucket_name)
        self.timeout = app.config.get('STORAGE_TIMEOUT_SECONDS', self.timeout)
        logger.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService is not initialized. Call init_app first.")
        return self.bucket

    @staticmethod
    def build_storage_id(folder: str, filename: Optional[str]) -> str:
        """'<folder>/<uuid>.<확장자>' 형태의 고유한 저장 경로를 만듭니다."""
        extension = filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''
        unique_filename = f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())
        return f"{folder}/{unique_filename}"

    def upload(self, file_bytes: bytes, metadata: Dict[str, Any]) -> Image:
        """
        이미지를 업로드하고 공개 URL 을 반환합니다.

        :param file_bytes: 업로드할 파일의 바이트
        :param metadata: {'filename', 'content_type', 'folder'}
        :return: Image(url, storage_id)
        """
        bucket = self._require_bucket()
        storage_id = self.build_storage_id(metadata.get('folder', 'posts'), metadata.get('filename'))
        blob = bucket.blob(storage_id)

        try:
            blob.upload_from_string(
                file_bytes,
                content_type=metadata.get('content_type'),
                timeout=self.timeout
            )
            blob.make_public(timeout=self.timeout)
        except _TRANSPORT_ERRORS as e:
            logger.error(f"이미지 업로드 실패 (storage_id: {storage_id}): {e}", exc_info=True)
            raise UploadError() from e

        return Image(url=blob.public_url, storage_id=storage_id)

    def delete(self, storage_id: str) -> None:
        """
        저장된 이미지를 삭제합니다. 이미 없는 파일은 정리 작업의 멱등성을 위해 성공으로 처리합니다.
        """
        bucket = self._require_bucket()
        try:
            bucket.blob(storage_id).delete(timeout=self.timeout)
        except google_exceptions.NotFound:
            logger.info(f"이미 삭제된 이미지입니다 (storage_id: {storage_id})")
        except _TRANSPORT_ERRORS as e:
            logger.error(f"이미지 삭제 실패 (storage_id: {storage_id}): {e}", exc_info=True)
            raise DeletionError() from e
