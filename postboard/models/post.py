# postboard/models/post.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List, Dict, Any

CONTENT_MAX_LENGTH = 2000
COMMENT_MAX_LENGTH = 500


@dataclass
class Author:
    """Post 문서 내부에 저장될 작성자 정보. 작성 시점의 스냅샷입니다."""
    user_id: str
    username: str
    profile_picture: Optional[str] = None


@dataclass
class Image:
    """게시글 이미지. storage_id 는 외부 스토리지에서 삭제할 때 사용하는 키입니다."""
    url: str
    storage_id: str


@dataclass
class Likes:
    """좋아요 집합. users 는 중복 없는 username 목록이며 count 와 항상 같아야 합니다."""
    count: int = 0
    users: List[str] = field(default_factory=list)

    def contains(self, username: str) -> bool:
        return username in self.users


@dataclass
class Comment:
    """Post 문서에 내장되는 댓글. 독립적인 생명주기가 없습니다."""
    comment_id: str
    user_id: str
    username: str
    text: str
    created_at: Optional[datetime] = None


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    images, comments, likes 는 게시글만 수정할 수 있는 내장 컬렉션입니다.
    """
    post_id: Optional[str]
    author: Author
    content: Optional[str] = None
    images: List[Image] = field(default_factory=list)
    likes: Likes = field(default_factory=Likes)
    comments: List[Comment] = field(default_factory=list)
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_content(self) -> bool:
        return bool(self.content and self.content.strip())

    @property
    def is_publishable(self) -> bool:
        """본문(공백 제외)이 있거나 이미지가 한 장 이상 있어야 게시글로 유효합니다."""
        return self.has_content or len(self.images) > 0

    def find_image(self, storage_id: str) -> Optional[Image]:
        return next((img for img in self.images if img.storage_id == storage_id), None)

    def is_owned_by(self, user_id: str) -> bool:
        return self.author.user_id == user_id

    def mark_edited(self, edited_at: datetime) -> None:
        # is_edited 와 edited_at 은 항상 함께 설정됩니다.
        self.is_edited = True
        self.edited_at = edited_at

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        """Firestore 문서(dict)로부터 Post 객체를 복원합니다."""
        likes_data = data.get('likes') or {}
        return cls(
            post_id=data.get('post_id'),
            author=Author(**data['author']),
            content=data.get('content'),
            images=[Image(**img) for img in data.get('images', [])],
            likes=Likes(count=likes_data.get('count', 0), users=list(likes_data.get('users', []))),
            comments=[Comment(**c) for c in data.get('comments', [])],
            is_edited=data.get('is_edited', False),
            edited_at=data.get('edited_at'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
        )


def normalize_content(content: Optional[str]) -> Optional[str]:
    """본문 앞뒤 공백을 제거합니다. 빈 문자열은 None 으로 저장합니다."""
    if content is None:
        return None
    stripped = content.strip()
    return stripped or None
