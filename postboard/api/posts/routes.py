# postboard/api/posts/routes.py
import json
import logging
from typing import Any, List

from flask import Blueprint, request, current_app, g
from werkzeug.datastructures import FileStorage

from postboard.api.responses import success_response
from postboard.api.posts.schemas import (
    CommentCreateSchema, CommentResponseSchema, ImageSchema, LikeToggleResponseSchema,
    PaginationSchema, PostCreateSchema, PostResponseSchema, PostUpdateSchema
)
from postboard.api.posts.services import EMPTY_POST_MESSAGE
from postboard.core.exceptions import DeletionError, PostboardError, ValidationError
from postboard.core.security import identity_required
from postboard.models.post import Image

posts_bp = Blueprint('posts_bp', __name__)


# --- 요청 파싱 / 업로드 헬퍼 ---

def _request_payload() -> dict:
    """JSON 본문 또는 multipart form 을 dict 로 반환합니다."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return dict(payload)
    return request.form.to_dict()


def _parse_images_to_delete() -> Any:
    """
    imagesToDelete 는 JSON 배열 문자열, 반복된 form 필드, 단일 값 중 어느 형태로든 올 수 있습니다.
    """
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        raw = payload.get('imagesToDelete')
        if raw is None:
            return []
        if isinstance(raw, str):
            return [raw]
        # 리스트가 아닌 값은 그대로 넘겨 스키마 검증에서 400 으로 거절되게 합니다.
        return raw

    values = request.form.getlist('imagesToDelete')
    if len(values) != 1:
        return values
    try:
        parsed = json.loads(values[0])
    except ValueError:
        return values
    if isinstance(parsed, list):
        return [str(v) for v in parsed]
    return [str(parsed)]


def _incoming_files() -> List[FileStorage]:
    files = [f for f in request.files.getlist('images') if f and f.filename]
    max_images = current_app.config.get('MAX_IMAGES_PER_POST', 5)
    if len(files) > max_images:
        raise ValidationError(f"You can upload at most {max_images} images at once")
    allowed = current_app.config.get('ALLOWED_IMAGE_TYPES', ())
    for file in files:
        if file.mimetype not in allowed:
            raise ValidationError(f"Unsupported image type: {file.mimetype}")
    return files


def _upload_files(files: List[FileStorage], user_id: str) -> List[Image]:
    """파일들을 스토리지에 올립니다. 중간에 실패하면 이미 올라간 파일을 정리한 뒤 예외를 다시 던집니다."""
    storage = current_app.services['storage']
    uploaded: List[Image] = []
    try:
        for file in files:
            uploaded.append(storage.upload(file.read(), {
                'filename': file.filename,
                'content_type': file.mimetype,
                'folder': f"posts/{user_id}",
            }))
    except PostboardError:
        _discard_uploads(uploaded)
        raise
    return uploaded


def _discard_uploads(images: List[Image]) -> None:
    """요청이 실패했을 때 이번 요청에서 올린 이미지를 best-effort 로 삭제합니다."""
    storage = current_app.services['storage']
    for image in images:
        try:
            storage.delete(image.storage_id)
        except DeletionError as e:
            logging.warning(f"업로드 정리 실패 (storage_id: {image.storage_id}): {e}")


# --- 엔드포인트 ---

@posts_bp.route('', methods=['GET'])
def get_posts():
    """
    게시글 피드 목록을 페이지네이션으로 조회합니다. (비로그인 허용)
    page, limit 이 없거나 숫자가 아니면 1 / 10 을 사용합니다.
    """
    post_service = current_app.services['posts']
    posts, pagination = post_service.list_feed(request.args.get('page'), request.args.get('limit'))
    return success_response(
        PostResponseSchema(many=True).dump(posts),
        pagination=PaginationSchema().dump(pagination)
    )


@posts_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id: str):
    post_service = current_app.services['posts']
    post = post_service.get_post(post_id)
    return success_response(PostResponseSchema().dump(post))


@posts_bp.route('', methods=['POST'])
@identity_required
def create_post():
    """
    새로운 게시글을 생성합니다. (multipart: content, images[])
    - 본문이나 이미지 중 하나는 반드시 있어야 합니다.
    - 성공 시, 생성된 게시글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    data = PostCreateSchema().load(_request_payload())
    files = _incoming_files()

    # 업로드 전에 빈 게시글을 걸러내어 불필요한 업로드를 막습니다.
    if not data.get('content') and not files:
        raise ValidationError(EMPTY_POST_MESSAGE)

    author = g.current_user.snapshot()
    images = _upload_files(files, author.user_id)
    try:
        new_post = post_service.create_post(author, data.get('content'), images)
    except PostboardError:
        _discard_uploads(images)
        raise
    return success_response(PostResponseSchema().dump(new_post), 201)


@posts_bp.route('/upload', methods=['POST'])
@identity_required
def upload_images():
    """게시글과 별개로 이미지만 업로드하고 {url, storageId} 목록을 반환합니다."""
    files = _incoming_files()
    if not files:
        raise ValidationError("No images uploaded")
    images = _upload_files(files, g.identity.user_id)
    return success_response(ImageSchema(many=True).dump(images))


@posts_bp.route('/<string:post_id>', methods=['PUT'])
@identity_required
def update_post(post_id: str):
    """
    특정 게시글을 수정합니다. (작성자 본인만 가능)
    - imagesToDelete 의 이미지를 지우고, 새 이미지를 뒤에 붙이고, content 를 교체합니다.
    """
    post_service = current_app.services['posts']
    user_id = g.identity.user_id

    # 소유권 확인을 업로드보다 먼저 수행합니다.
    post_service.ensure_owner(post_id, user_id)

    payload = _request_payload()
    payload['imagesToDelete'] = _parse_images_to_delete()
    data = PostUpdateSchema().load(payload)
    files = _incoming_files()

    new_images = _upload_files(files, user_id)
    try:
        updated_post = post_service.update_post(
            post_id, user_id,
            content=data.get('content'),
            images_to_delete=data['images_to_delete'],
            new_images=new_images,
        )
    except PostboardError:
        _discard_uploads(new_images)
        raise
    return success_response(PostResponseSchema().dump(updated_post))


@posts_bp.route('/<string:post_id>/images/<path:storage_id>', methods=['DELETE'])
@identity_required
def delete_post_image(post_id: str, storage_id: str):
    """게시글의 이미지 한 장을 삭제합니다. (작성자 본인만 가능)"""
    post_service = current_app.services['posts']
    post = post_service.delete_post_image(post_id, g.identity.user_id, storage_id)
    return success_response(PostResponseSchema().dump(post))


@posts_bp.route('/<string:post_id>/like', methods=['POST'])
@identity_required
def toggle_post_like(post_id: str):
    """게시글의 좋아요를 누르거나 취소합니다."""
    post_service = current_app.services['posts']
    likes, liked = post_service.toggle_like(post_id, g.identity.username)
    return success_response(LikeToggleResponseSchema().dump({"likes": likes, "liked": liked}))


@posts_bp.route('/<string:post_id>/comment', methods=['POST'])
@identity_required
def add_comment(post_id: str):
    """
    특정 게시글에 새로운 댓글을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    post_service = current_app.services['posts']
    data = CommentCreateSchema().load(_request_payload())
    author = current_app.services['users'].snapshot(g.identity.user_id)
    comment = post_service.add_comment(post_id, author, data['text'])
    return success_response(CommentResponseSchema().dump(comment), 201)


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@identity_required
def delete_post(post_id: str):
    """특정 게시글과 게시글의 모든 이미지를 삭제합니다. (작성자 본인만 가능)"""
    post_service = current_app.services['posts']
    post_service.delete_post(post_id, g.identity.user_id)
    return success_response(message="Post deleted successfully")
