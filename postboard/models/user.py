# postboard/models/user.py
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Dict, Any

from postboard.models.post import Author


@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    user_id: Optional[str]
    username: str
    email: str
    password_hash: str
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def snapshot(self) -> Author:
        """게시글/댓글에 저장할 작성자 스냅샷을 만듭니다."""
        return Author(user_id=self.user_id, username=self.username, profile_picture=self.profile_picture)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        fields = cls.__dataclass_fields__
        return cls(**{k: v for k, v in data.items() if k in fields})
