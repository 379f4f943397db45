# postboard/core/security.py
from dataclasses import dataclass
from functools import wraps

from flask import current_app, g
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request

from postboard.core.exceptions import UnauthorizedError
from postboard.models.user import User


@dataclass(frozen=True)
class Identity:
    """요청마다 검증된 사용자 신원. 서비스 계층은 이 값만 사용합니다."""
    user_id: str
    username: str
    email: str = ''


def issue_token(user: User) -> str:
    """user_id 를 identity 로, username/email 을 추가 클레임으로 담은 access token 을 발급합니다."""
    return create_access_token(
        identity=user.user_id,
        additional_claims={"username": user.username, "email": user.email}
    )


def identity_required(f):
    """
    Bearer 토큰을 검증하고 g.identity 에 현재 사용자 신원을 설정하는 데코레이터.
    - 토큰이 없거나 유효하지 않으면 flask-jwt-extended 가 401 을 반환합니다.
    - 토큰은 유효하지만 사용자가 더 이상 존재하지 않으면 401 을 반환합니다.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        user_id = get_jwt_identity()
        claims = get_jwt()

        user = current_app.services['users'].find_user(user_id)
        if user is None:
            raise UnauthorizedError("User no longer exists")

        g.identity = Identity(
            user_id=user_id,
            username=claims.get("username") or user.username,
            email=claims.get("email", ""),
        )
        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function
