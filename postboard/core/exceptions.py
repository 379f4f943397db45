# postboard/core/exceptions.py
"""
애플리케이션 전역에서 사용하는 예외 계층.

서비스 계층은 이 예외들을 발생시키고, postboard/__init__ 의 전역 에러 핸들러가
status_code / error_code 를 사용해 HTTP 응답으로 변환합니다.
"""
from typing import Any, Optional


class PostboardError(Exception):
    """모든 도메인 예외의 기반 클래스."""
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(PostboardError):
    """잘못된 입력 또는 게시글 불변식 위반."""
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class UnauthorizedError(PostboardError):
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Not authorized"


class ForbiddenError(PostboardError):
    """인증은 되었지만 리소스의 소유자가 아닌 경우."""
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Not authorized to modify this resource"


class NotFoundError(PostboardError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class UploadError(PostboardError):
    """외부 스토리지 업로드 실패 (전송 오류, 용량 초과, 타임아웃)."""
    status_code = 502
    error_code = "UPLOAD_FAILED"
    default_message = "Image upload failed"


class DeletionError(PostboardError):
    """외부 스토리지 삭제 실패."""
    status_code = 502
    error_code = "DELETION_FAILED"
    default_message = "Image deletion failed"


class RepositoryError(PostboardError):
    """저장소(Firestore)를 사용할 수 없는 경우."""
    status_code = 500
    error_code = "REPOSITORY_ERROR"
    default_message = "Storage is temporarily unavailable"
