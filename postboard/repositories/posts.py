# postboard/repositories/posts.py
import logging
import uuid
from dataclasses import asdict, replace
from typing import List, Optional, Tuple

from firebase_admin import firestore

from postboard.core.exceptions import NotFoundError
from postboard.models.post import Comment, Likes, Post
from postboard.repositories.base import PostRepository, translate_storage_errors
from postboard.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class FirestorePostRepository(PostRepository):
    """
    Firestore 'posts' 컬렉션을 사용하는 게시글 저장소.
    이미지/댓글/좋아요는 게시글 문서 안에 내장 배열로 저장됩니다.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')

    def _to_post(self, snapshot) -> Post:
        return Post.from_dict(DateTimeUtils.from_firestore(snapshot.to_dict()))

    @translate_storage_errors
    def create(self, post: Post) -> Post:
        now = DateTimeUtils.now()
        new_post = replace(post, post_id=str(uuid.uuid4()), created_at=now, updated_at=now)
        self.posts_ref.document(new_post.post_id).set(DateTimeUtils.for_firestore(new_post.to_dict()))
        logger.info(f"게시글 생성 완료 (post_id: {new_post.post_id})")
        return new_post

    @translate_storage_errors
    def find_by_id(self, post_id: str) -> Optional[Post]:
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            return None
        return self._to_post(doc)

    @translate_storage_errors
    def save(self, post: Post) -> Post:
        post_ref = self.posts_ref.document(post.post_id)
        now = DateTimeUtils.now()
        update_data = {
            'content': post.content,
            'images': [asdict(img) for img in post.images],
            'is_edited': post.is_edited,
            'edited_at': post.edited_at,
            'updated_at': now,
        }
        transaction = self.db.transaction()

        # 존재 확인과 갱신을 하나의 트랜잭션으로 묶어, 삭제된 게시글이 되살아나지 않게 합니다.
        @firestore.transactional
        def _save_in_transaction(transaction):
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError("Post not found")
            transaction.update(post_ref, DateTimeUtils.for_firestore(update_data))

        _save_in_transaction(transaction)
        return replace(post, updated_at=now)

    @translate_storage_errors
    def delete_by_id(self, post_id: str) -> None:
        self.posts_ref.document(post_id).delete()

    @translate_storage_errors
    def find_page(self, skip: int, limit: int) -> Tuple[List[Post], int]:
        query = (
            self.posts_ref
            .order_by('created_at', direction=firestore.Query.DESCENDING)
            .order_by('post_id', direction=firestore.Query.DESCENDING)
            .offset(skip)
            .limit(limit)
        )
        posts = [self._to_post(doc) for doc in query.stream()]
        # count()는 문서를 모두 가져오지 않고 개수만 집계합니다.
        count_result = self.posts_ref.count().get()
        total = count_result[0][0].value
        return posts, total

    @translate_storage_errors
    def toggle_like(self, post_id: str, username: str) -> Tuple[Likes, bool]:
        post_ref = self.posts_ref.document(post_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def _toggle_like_in_transaction(transaction):
            """
            트랜잭션 내에서 좋아요 상태를 토글합니다.
            경합이 발생하면 Firestore 가 트랜잭션 전체를 다시 실행하므로 갱신이 유실되지 않습니다.
            """
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError("Post not found")

            likes_data = snapshot.to_dict().get('likes') or {}
            users = list(likes_data.get('users', []))
            count = likes_data.get('count', 0)

            if username in users:
                # 이미 좋아요를 누른 상태 -> 좋아요 취소
                users = [u for u in users if u != username]
                likes = Likes(count=max(0, count - 1), users=users)
                liked = False
            else:
                users.append(username)
                likes = Likes(count=count + 1, users=users)
                liked = True

            transaction.update(post_ref, {
                'likes': asdict(likes),
                'updated_at': DateTimeUtils.now(),
            })
            return likes, liked

        return _toggle_like_in_transaction(transaction)

    @translate_storage_errors
    def append_comment(self, post_id: str, comment: Comment) -> Comment:
        post_ref = self.posts_ref.document(post_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def _append_in_transaction(transaction):
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError("Post not found")
            # ArrayUnion 은 배열 끝에 원자적으로 추가합니다. comment_id 가 고유하므로 중복 제거에 걸리지 않습니다.
            transaction.update(post_ref, {
                'comments': firestore.ArrayUnion([DateTimeUtils.for_firestore(asdict(comment))]),
                'updated_at': DateTimeUtils.now(),
            })

        _append_in_transaction(transaction)
        return comment
