# postboard/repositories/base.py
"""
저장소 계약(contract) 정의.

서비스 계층은 이 인터페이스에만 의존하며, 실제 구현은 설정의 DATABASE_BACKEND 값에 따라
Firestore(posts.py, users.py) 또는 메모리(memory.py) 구현이 주입됩니다.
"""
import logging
from abc import ABC, abstractmethod
from functools import wraps
from typing import List, Optional, Tuple

from google.api_core import exceptions as google_exceptions

from postboard.core.exceptions import PostboardError, RepositoryError
from postboard.models.post import Comment, Likes, Post
from postboard.models.user import User

logger = logging.getLogger(__name__)


def translate_storage_errors(func):
    """Firestore 호출 중 발생한 Google API 예외를 RepositoryError 로 변환합니다."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PostboardError:
            raise
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Firestore 호출 실패 ({func.__qualname__}): {e}", exc_info=True)
            raise RepositoryError() from e
    return wrapper


class PostRepository(ABC):
    """게시글 문서의 영속성을 담당합니다. 한 게시글에 대한 쓰기는 원자적이어야 합니다."""

    @abstractmethod
    def create(self, post: Post) -> Post:
        """post_id, created_at, updated_at 을 부여하여 저장합니다."""

    @abstractmethod
    def find_by_id(self, post_id: str) -> Optional[Post]:
        ...

    @abstractmethod
    def save(self, post: Post) -> Post:
        """
        편집 가능한 필드(content, images, is_edited, edited_at)만 저장하고 updated_at 을 갱신합니다.
        likes / comments 는 덮어쓰지 않으므로 동시에 진행 중인 좋아요/댓글이 유실되지 않습니다.
        """

    @abstractmethod
    def delete_by_id(self, post_id: str) -> None:
        ...

    @abstractmethod
    def find_page(self, skip: int, limit: int) -> Tuple[List[Post], int]:
        """created_at 내림차순, 동률이면 post_id 내림차순으로 정렬된 한 페이지와 전체 개수."""

    @abstractmethod
    def toggle_like(self, post_id: str, username: str) -> Tuple[Likes, bool]:
        """좋아요 집합에 username 을 원자적으로 추가/제거하고 (likes, liked) 를 반환합니다."""

    @abstractmethod
    def append_comment(self, post_id: str, comment: Comment) -> Comment:
        """댓글을 원자적으로 목록 끝에 추가합니다."""


class UserRepository(ABC):

    @abstractmethod
    def create(self, user: User) -> User:
        ...

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[User]:
        ...
