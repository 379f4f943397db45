# postboard/api/posts/schemas.py
from marshmallow import EXCLUDE, Schema, fields, validate, pre_load

from postboard.models.post import COMMENT_MAX_LENGTH, CONTENT_MAX_LENGTH


class _RequestSchema(Schema):
    """요청 값 중 문자열의 앞뒤 공백을 제거한 뒤 검증합니다. 알 수 없는 필드는 무시합니다."""
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def strip_strings(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}


# --- 재사용을 위한 중첩 스키마 ---
class ImageSchema(Schema):
    url = fields.Str(required=True)
    storage_id = fields.Str(required=True, data_key="storageId")


class LikesSchema(Schema):
    count = fields.Int(required=True)
    users = fields.List(fields.Str(), required=True)


class CommentResponseSchema(Schema):
    """댓글 응답 형식."""
    id = fields.Str(attribute="comment_id")
    user_id = fields.Str(data_key="userId")
    username = fields.Str()
    text = fields.Str()
    created_at = fields.DateTime(data_key="createdAt")


# --- API 요청 스키마 ---

class PostCreateSchema(_RequestSchema):
    """POST /api/posts 요청 본문(multipart form 또는 JSON)의 유효성을 검사합니다."""
    content = fields.Str(load_default=None, allow_none=True,
                         validate=validate.Length(max=CONTENT_MAX_LENGTH,
                                                  error=f"Content cannot exceed {CONTENT_MAX_LENGTH} characters"))


class PostUpdateSchema(_RequestSchema):
    """
    PUT /api/posts/{post_id} 요청 본문.
    content 가 빈 문자열이면 본문을 지웁니다. 키 자체가 없으면 본문은 그대로 둡니다.
    """
    content = fields.Str(allow_none=True,
                         validate=validate.Length(max=CONTENT_MAX_LENGTH,
                                                  error=f"Content cannot exceed {CONTENT_MAX_LENGTH} characters"))
    images_to_delete = fields.List(fields.Str(), load_default=list, data_key="imagesToDelete")


class CommentCreateSchema(_RequestSchema):
    """POST /api/posts/{post_id}/comment"""
    text = fields.Str(required=True, validate=validate.Length(
        min=1, max=COMMENT_MAX_LENGTH,
        error=f"Comment must be between 1 and {COMMENT_MAX_LENGTH} characters"
    ))


# --- API 응답 스키마 ---

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    id = fields.Str(attribute="post_id")
    author = fields.Str(attribute="author.user_id")
    author_username = fields.Str(attribute="author.username", data_key="authorUsername")
    author_profile_picture = fields.Str(attribute="author.profile_picture", allow_none=True,
                                        data_key="authorProfilePicture")
    content = fields.Str(allow_none=True)
    images = fields.List(fields.Nested(ImageSchema))
    likes = fields.Nested(LikesSchema)
    comments = fields.List(fields.Nested(CommentResponseSchema))
    is_edited = fields.Bool(data_key="isEdited")
    edited_at = fields.DateTime(allow_none=True, data_key="editedAt")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class LikeToggleResponseSchema(Schema):
    likes = fields.Nested(LikesSchema)
    liked = fields.Bool()


class PaginationSchema(Schema):
    current_page = fields.Int(data_key="currentPage")
    total_pages = fields.Int(data_key="totalPages")
    total_items = fields.Int(data_key="totalItems")
    has_more = fields.Bool(data_key="hasMore")
