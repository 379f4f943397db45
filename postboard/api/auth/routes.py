# postboard/api/auth/routes.py

from flask import Blueprint, request, current_app, g

from postboard.api.auth.schemas import LoginSchema, SignupSchema, UserResponseSchema
from postboard.api.responses import success_response
from postboard.core.security import identity_required, issue_token

auth_bp = Blueprint('auth_bp', __name__)


def _user_with_token(user) -> dict:
    data = UserResponseSchema().dump(user)
    data["token"] = issue_token(user)
    return data


@auth_bp.route('/signup', methods=['POST'])
def signup():
    """회원가입 후 바로 사용할 수 있는 access token 을 함께 반환합니다."""
    user_service = current_app.services['users']
    data = SignupSchema().load(request.get_json(silent=True) or {})
    user = user_service.signup(data['username'], data['email'], data['password'])
    return success_response(_user_with_token(user), 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    user_service = current_app.services['users']
    data = LoginSchema().load(request.get_json(silent=True) or {})
    user = user_service.authenticate(data['email'], data['password'])
    return success_response(_user_with_token(user))


@auth_bp.route('/me', methods=['GET'])
@identity_required
def get_me():
    """현재 로그인된 사용자 정보를 반환합니다."""
    user_service = current_app.services['users']
    user = user_service.get_user(g.identity.user_id)
    return success_response(UserResponseSchema().dump(user))
