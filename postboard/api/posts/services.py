# postboard/api/posts/services.py
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from postboard.api.feed.services import FeedService, Pagination
from postboard.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from postboard.models.post import (
    COMMENT_MAX_LENGTH, CONTENT_MAX_LENGTH,
    Author, Comment, Image, Likes, Post, normalize_content
)
from postboard.repositories.base import PostRepository
from postboard.services.storage_service import StorageService
from postboard.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

EMPTY_POST_MESSAGE = "Post must have either content or at least one image"


class PostService:
    """
    게시글 생명주기와 좋아요/댓글을 담당하는 서비스 클래스.
    - 게시글 불변식(본문 또는 이미지 1장 이상)은 저장소 호출 전에 이 클래스에서 검사합니다.
    - 수정/삭제는 작성자 본인만 가능하며, 소유권 확인은 모든 부수효과보다 먼저 수행됩니다.
    - 자체적인 공유 상태는 없고, 모든 상태는 저장소에 있습니다.
    """
    def __init__(self, post_repository: PostRepository, storage_service: StorageService,
                 feed_service: Optional[FeedService] = None, delete_workers: int = 4):
        self.posts = post_repository
        self.storage = storage_service
        self.feed = feed_service or FeedService(post_repository)
        self.delete_workers = max(1, delete_workers)

    # --- 검증 헬퍼 ---

    @staticmethod
    def _validate_content_length(content: Optional[str]) -> None:
        if content and len(content.strip()) > CONTENT_MAX_LENGTH:
            raise ValidationError(f"Post content cannot exceed {CONTENT_MAX_LENGTH} characters")

    @staticmethod
    def _ensure_publishable(post: Post) -> None:
        if not post.is_publishable:
            raise ValidationError(EMPTY_POST_MESSAGE)

    def _get_existing(self, post_id: str) -> Post:
        post = self.posts.find_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def ensure_owner(self, post_id: str, requester_id: str) -> Post:
        """게시글을 조회하고 요청자가 작성자인지 확인합니다."""
        post = self._get_existing(post_id)
        if not post.is_owned_by(requester_id):
            raise ForbiddenError("Not authorized to modify this post")
        return post

    def _delete_assets(self, storage_ids: Sequence[str]) -> List[Tuple[str, Optional[BaseException]]]:
        """
        이미지들을 병렬로 삭제합니다. 각 삭제는 독립적으로 시도되며,
        (storage_id, 발생한 예외 또는 None) 목록을 입력 순서대로 반환합니다.
        """
        if not storage_ids:
            return []
        workers = min(self.delete_workers, len(storage_ids))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(sid, executor.submit(self.storage.delete, sid)) for sid in storage_ids]
            return [(sid, future.exception()) for sid, future in futures]

    # --- 게시글 생성/조회 ---

    def create_post(self, author: Author, content: Optional[str], images: Iterable[Image]) -> Post:
        """새로운 게시글을 생성합니다. 본문(공백 제외)이나 이미지 중 하나는 반드시 있어야 합니다."""
        self._validate_content_length(content)
        new_post = Post(
            post_id=None,
            author=author,
            content=normalize_content(content),
            images=list(images),
            likes=Likes(),
            comments=[],
            is_edited=False,
        )
        self._ensure_publishable(new_post)

        created = self.posts.create(new_post)
        logger.info(f"게시글 생성 (post_id: {created.post_id}, author: {author.user_id}, images: {len(created.images)})")
        return created

    def list_feed(self, page=None, limit=None) -> Tuple[List[Post], Pagination]:
        return self.feed.list_feed(page, limit)

    def get_post(self, post_id: str) -> Post:
        return self._get_existing(post_id)

    # --- 좋아요 / 댓글 ---

    def toggle_like(self, post_id: str, username: str) -> Tuple[Likes, bool]:
        """
        좋아요를 누르거나 취소합니다.
        저장소가 원자적으로 적용하므로 서로 다른 사용자의 동시 요청이 유실되지 않습니다.
        """
        if not username:
            raise ValidationError("A username is required to like a post")
        return self.posts.toggle_like(post_id, username)

    def add_comment(self, post_id: str, author: Author, text: Optional[str]) -> Comment:
        text = (text or '').strip()
        if not text:
            raise ValidationError("Comment text is required")
        if len(text) > COMMENT_MAX_LENGTH:
            raise ValidationError(f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters")

        comment = Comment(
            comment_id=str(uuid.uuid4()),
            user_id=author.user_id,
            username=author.username,
            text=text,
            created_at=DateTimeUtils.now(),
        )
        return self.posts.append_comment(post_id, comment)

    # --- 수정 / 삭제 ---

    def update_post(self, post_id: str, requester_id: str, content: Optional[str] = None,
                    images_to_delete: Iterable[str] = (), new_images: Iterable[Image] = ()) -> Post:
        """
        게시글을 수정합니다. 처리 순서는 항상 다음과 같습니다.
        1. images_to_delete 의 이미지를 스토리지에서 삭제하고 목록에서 제거
        2. new_images 를 목록 끝에 추가
        3. content 가 주어지면 교체 (빈 문자열이면 본문 삭제)
        이후 불변식을 다시 검사하며, 위반 시 아무것도 저장하지 않습니다.
        이미 삭제된 외부 이미지는 복구하지 않습니다.
        """
        post = self.ensure_owner(post_id, requester_id)
        self._validate_content_length(content)

        # 이 게시글에 속한 이미지만 삭제 대상입니다. 없는 id 는 무시합니다.
        requested = list(dict.fromkeys(images_to_delete))
        owned_ids = [sid for sid in requested if post.find_image(sid) is not None]
        skipped = set(requested) - set(owned_ids)
        if skipped:
            logger.warning(f"게시글에 없는 이미지 삭제 요청 무시 (post_id: {post_id}, ids: {sorted(skipped)})")

        results = self._delete_assets(owned_ids)
        failures = [(sid, err) for sid, err in results if err is not None]
        if failures:
            storage_id, error = failures[0]
            logger.error(f"게시글 수정 중 이미지 삭제 실패 (post_id: {post_id}, storage_id: {storage_id}): {error}")
            # 이미 지워진 파일은 복구하지 않으므로, 게시글에 남는 깨진 참조를 정리할 수 있게 기록합니다.
            deleted = [sid for sid, err in results if err is None]
            if deleted:
                logger.warning(f"수정이 중단되어 게시글이 삭제된 이미지를 계속 참조합니다 "
                               f"(post_id: {post_id}, storage_ids: {deleted})")
            raise error

        removed = set(owned_ids)
        images = [img for img in post.images if img.storage_id not in removed]
        images.extend(new_images)

        candidate = replace(post, images=images)
        if content is not None:
            candidate.content = normalize_content(content)

        self._ensure_publishable(candidate)

        candidate.mark_edited(DateTimeUtils.now())
        saved = self.posts.save(candidate)
        logger.info(f"게시글 수정 (post_id: {post_id}, removed: {len(removed)}, images: {len(saved.images)})")
        return saved

    def delete_post_image(self, post_id: str, requester_id: str, storage_id: str) -> Post:
        """게시글의 이미지 한 장을 삭제합니다. 본문이 없는 게시글의 마지막 이미지는 지울 수 없습니다."""
        post = self.ensure_owner(post_id, requester_id)

        image = post.find_image(storage_id)
        if image is None:
            raise NotFoundError("Image not found in post")

        remaining = [img for img in post.images if img.storage_id != storage_id]
        if not post.has_content and not remaining:
            raise ValidationError("Cannot delete last image. Post must have content or images.")

        self.storage.delete(storage_id)
        return self.posts.save(replace(post, images=remaining))

    def delete_post(self, post_id: str, requester_id: str) -> None:
        """
        게시글을 삭제합니다. (작성자 본인만 가능)
        이미지 삭제는 best-effort 로 모두 시도하며, 일부가 실패해도 게시글 문서는 삭제됩니다.
        """
        post = self.ensure_owner(post_id, requester_id)

        results = self._delete_assets([img.storage_id for img in post.images])
        for storage_id, error in results:
            if error is not None:
                logger.warning(f"게시글 삭제 중 이미지 정리 실패, 고아 파일로 남습니다 "
                               f"(post_id: {post_id}, storage_id: {storage_id}): {error}")

        self.posts.delete_by_id(post_id)
        logger.info(f"게시글 삭제 완료 (post_id: {post_id})")
