# postboard/repositories/memory.py
"""
프로세스 메모리에 데이터를 보관하는 저장소 구현.

DATABASE_BACKEND=memory 로 로컬에서 Firebase 없이 서버를 띄우거나 테스트할 때 사용합니다.
문서 저장소처럼 동작하도록 저장/조회 시 항상 깊은 복사본을 주고받습니다.
"""
import copy
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from postboard.core.exceptions import NotFoundError
from postboard.models.post import Comment, Likes, Post
from postboard.models.user import User
from postboard.repositories.base import PostRepository, UserRepository
from postboard.utils.datetime_utils import DateTimeUtils


class InMemoryPostRepository(PostRepository):

    def __init__(self, clock: Callable[[], datetime] = DateTimeUtils.now):
        self._clock = clock
        self._posts: Dict[str, Post] = {}
        # 게시글 단위 원자성을 단일 락으로 보장합니다.
        self._lock = threading.Lock()

    def create(self, post: Post) -> Post:
        now = self._clock()
        new_post = replace(copy.deepcopy(post), post_id=str(uuid.uuid4()), created_at=now, updated_at=now)
        with self._lock:
            self._posts[new_post.post_id] = new_post
        return copy.deepcopy(new_post)

    def find_by_id(self, post_id: str) -> Optional[Post]:
        with self._lock:
            post = self._posts.get(post_id)
            return copy.deepcopy(post) if post else None

    def save(self, post: Post) -> Post:
        with self._lock:
            stored = self._posts.get(post.post_id)
            if stored is None:
                raise NotFoundError("Post not found")
            stored.content = post.content
            stored.images = copy.deepcopy(post.images)
            stored.is_edited = post.is_edited
            stored.edited_at = post.edited_at
            stored.updated_at = self._clock()
            return copy.deepcopy(stored)

    def delete_by_id(self, post_id: str) -> None:
        with self._lock:
            self._posts.pop(post_id, None)

    def find_page(self, skip: int, limit: int) -> Tuple[List[Post], int]:
        with self._lock:
            ordered = sorted(
                self._posts.values(),
                key=lambda p: (p.created_at, p.post_id),
                reverse=True,
            )
            page = [copy.deepcopy(p) for p in ordered[skip:skip + limit]]
            return page, len(ordered)

    def toggle_like(self, post_id: str, username: str) -> Tuple[Likes, bool]:
        with self._lock:
            stored = self._posts.get(post_id)
            if stored is None:
                raise NotFoundError("Post not found")
            likes = stored.likes
            if likes.contains(username):
                likes.users.remove(username)
                likes.count = max(0, likes.count - 1)
                liked = False
            else:
                likes.users.append(username)
                likes.count += 1
                liked = True
            stored.updated_at = self._clock()
            return copy.deepcopy(likes), liked

    def append_comment(self, post_id: str, comment: Comment) -> Comment:
        with self._lock:
            stored = self._posts.get(post_id)
            if stored is None:
                raise NotFoundError("Post not found")
            stored.comments.append(copy.deepcopy(comment))
            stored.updated_at = self._clock()
            return copy.deepcopy(comment)


class InMemoryUserRepository(UserRepository):

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = threading.Lock()

    def create(self, user: User) -> User:
        now = DateTimeUtils.now()
        new_user = replace(user, user_id=str(uuid.uuid4()), created_at=now, updated_at=now)
        with self._lock:
            self._users[new_user.user_id] = new_user
        return copy.deepcopy(new_user)

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    def _find(self, predicate) -> Optional[User]:
        with self._lock:
            user = next((u for u in self._users.values() if predicate(u)), None)
            return copy.deepcopy(user) if user else None

    def find_by_email(self, email: str) -> Optional[User]:
        return self._find(lambda u: u.email == email)

    def find_by_username(self, username: str) -> Optional[User]:
        return self._find(lambda u: u.username == username)
