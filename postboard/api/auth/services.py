# postboard/api/auth/services.py
import logging
from typing import Optional

from postboard.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from postboard.core.passwords import hash_password, verify_password
from postboard.models.post import Author
from postboard.models.user import User
from postboard.repositories.base import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """
    회원가입, 로그인, 사용자 조회를 담당하는 서비스 클래스.
    게시글 서비스에는 작성자 스냅샷(Author)만 전달합니다.
    """
    def __init__(self, user_repository: UserRepository):
        self.users = user_repository

    def signup(self, username: str, email: str, password: str) -> User:
        email = email.strip().lower()
        username = username.strip()

        if self.users.find_by_email(email):
            raise ValidationError("Email already registered")
        if self.users.find_by_username(username):
            raise ValidationError("Username already taken")

        user = self.users.create(User(
            user_id=None,
            username=username,
            email=email,
            password_hash=hash_password(password),
        ))
        logger.info(f"신규 회원가입 (user_id: {user.user_id})")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """이메일/비밀번호를 확인합니다. 어느 쪽이 틀렸는지는 알려주지 않습니다."""
        user = self.users.find_by_email(email.strip().lower())
        if user is None or not verify_password(user.password_hash, password):
            raise UnauthorizedError("Invalid email or password")
        return user

    def find_user(self, user_id: str) -> Optional[User]:
        return self.users.find_by_id(user_id)

    def get_user(self, user_id: str) -> User:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def snapshot(self, user_id: str) -> Author:
        """게시글/댓글 작성 시점의 작성자 정보를 조회합니다."""
        return self.get_user(user_id).snapshot()
