# postboard/api/feed/services.py
import math
from dataclasses import dataclass
from typing import Any, List, Tuple

from postboard.models.post import Post
from postboard.repositories.base import PostRepository

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass
class Pagination:
    """피드 응답에 함께 내려가는 페이지 정보."""
    current_page: int
    total_pages: int
    total_items: int
    has_more: bool

    @classmethod
    def build(cls, page: int, limit: int, total_items: int) -> "Pagination":
        total_pages = math.ceil(total_items / limit) if total_items else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total_items,
            has_more=page < total_pages,
        )


def parse_positive_int(value: Any, default: int) -> int:
    """쿼리 파라미터를 양의 정수로 해석합니다. 비어 있거나, 숫자가 아니거나, 1 미만이면 기본값."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


class FeedService:
    """
    최신순 게시글 피드를 페이지 단위로 조회합니다.
    정렬(created_at 내림차순, 동률이면 post_id 내림차순)은 저장소가 보장합니다.
    """
    def __init__(self, post_repository: PostRepository, default_limit: int = DEFAULT_LIMIT):
        self.posts = post_repository
        self.default_limit = default_limit

    def list_feed(self, page: Any = None, limit: Any = None) -> Tuple[List[Post], Pagination]:
        page = parse_positive_int(page, DEFAULT_PAGE)
        limit = parse_positive_int(limit, self.default_limit)

        skip = (page - 1) * limit
        posts, total_items = self.posts.find_page(skip, limit)
        return posts, Pagination.build(page, limit, total_items)
