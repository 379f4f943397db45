# postboard/api/auth/schemas.py
from marshmallow import Schema, fields, validate


class SignupSchema(Schema):
    """회원가입 요청의 유효성을 검사하는 스키마"""
    username = fields.Str(
        required=True,
        validate=validate.Length(min=3, max=30, error="Username must be between 3 and 30 characters")
    )
    email = fields.Email(required=True, error_messages={"invalid": "Please enter a valid email"})
    password = fields.Str(
        required=True, load_only=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters")
    )


class LoginSchema(Schema):
    email = fields.Email(required=True, error_messages={"invalid": "Please enter a valid email"})
    password = fields.Str(required=True, load_only=True,
                          validate=validate.Length(min=1, error="Password is required"))


class UserResponseSchema(Schema):
    """사용자 정보 응답. 비밀번호 해시는 절대 포함하지 않습니다."""
    id = fields.Str(attribute="user_id")
    username = fields.Str()
    email = fields.Str()
    profile_picture = fields.Str(allow_none=True, data_key="profilePicture")
    created_at = fields.DateTime(data_key="createdAt")
