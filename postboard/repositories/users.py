# postboard/repositories/users.py
import uuid
from dataclasses import replace
from typing import Optional

from firebase_admin import firestore

from postboard.models.user import User
from postboard.repositories.base import UserRepository, translate_storage_errors
from postboard.utils.datetime_utils import DateTimeUtils


class FirestoreUserRepository(UserRepository):
    """Firestore 'users' 컬렉션을 사용하는 사용자 저장소."""

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')

    def _find_one(self, field_name: str, value: str) -> Optional[User]:
        query = self.users_ref.where(field_name, '==', value).limit(1).stream()
        user_doc = next(query, None)
        if not user_doc:
            return None
        return User.from_dict(DateTimeUtils.from_firestore(user_doc.to_dict()))

    @translate_storage_errors
    def create(self, user: User) -> User:
        now = DateTimeUtils.now()
        new_user = replace(user, user_id=str(uuid.uuid4()), created_at=now, updated_at=now)
        self.users_ref.document(new_user.user_id).set(DateTimeUtils.for_firestore(new_user.to_dict()))
        return new_user

    @translate_storage_errors
    def find_by_id(self, user_id: str) -> Optional[User]:
        doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        return User.from_dict(DateTimeUtils.from_firestore(doc.to_dict()))

    @translate_storage_errors
    def find_by_email(self, email: str) -> Optional[User]:
        return self._find_one('email', email)

    @translate_storage_errors
    def find_by_username(self, username: str) -> Optional[User]:
        return self._find_one('username', username)
