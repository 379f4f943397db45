# conftest.py
"""
공용 테스트 픽스처

Firebase 없이 메모리 저장소와 가짜 스토리지로 앱과 서비스를 구성합니다.
사용법: python -m pytest -v
"""
import io
import threading
from datetime import datetime, timedelta, timezone

import pytest

from postboard import create_app
from postboard.api.posts.services import PostService
from postboard.core.exceptions import DeletionError, UploadError
from postboard.models.post import Author, Image
from postboard.repositories.memory import InMemoryPostRepository, InMemoryUserRepository


class FakeStorage:
    """StorageService 와 같은 upload/delete 계약을 따르는 테스트용 스토리지."""

    def __init__(self):
        self.objects = {}
        self.delete_calls = []
        self.fail_deletes = set()
        self.fail_uploads = False
        self._counter = 0
        self._lock = threading.Lock()

    def upload(self, file_bytes, metadata):
        if self.fail_uploads:
            raise UploadError()
        with self._lock:
            self._counter += 1
            storage_id = f"{metadata.get('folder', 'posts')}/img-{self._counter}"
            self.objects[storage_id] = file_bytes
        return Image(url=f"https://storage.test/{storage_id}", storage_id=storage_id)

    def delete(self, storage_id):
        with self._lock:
            self.delete_calls.append(storage_id)
        if storage_id in self.fail_deletes:
            raise DeletionError()
        # 이미 없는 파일도 성공으로 처리합니다.
        with self._lock:
            self.objects.pop(storage_id, None)

    def add(self, storage_id):
        """미리 업로드된 이미지를 흉내냅니다."""
        self.objects[storage_id] = b"image"
        return Image(url=f"https://storage.test/{storage_id}", storage_id=storage_id)


class StepClock:
    """호출할 때마다 1초씩 증가하는 시계. 피드 정렬 테스트에 사용합니다."""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def post_repository():
    return InMemoryPostRepository(clock=StepClock())


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def post_service(post_repository, storage):
    return PostService(post_repository=post_repository, storage_service=storage)


@pytest.fixture
def author():
    return Author(user_id="user-1", username="alice", profile_picture=None)


@pytest.fixture
def other_author():
    return Author(user_id="user-2", username="bob")


@pytest.fixture
def app(post_repository, user_repository, storage):
    app = create_app('testing', services={
        'post_repository': post_repository,
        'user_repository': user_repository,
        'storage': storage,
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    """회원가입 후 (user 데이터, Authorization 헤더) 를 반환하는 헬퍼."""
    def _signup(username="alice", email=None, password="secret123"):
        response = client.post('/api/auth/signup', json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
        })
        assert response.status_code == 201, response.get_json()
        data = response.get_json()["data"]
        return data, {"Authorization": f"Bearer {data['token']}"}
    return _signup


def image_file(name="photo.jpg", content_type="image/jpeg"):
    """multipart 업로드용 (파일객체, 파일명, MIME) 튜플."""
    return (io.BytesIO(b"fake-image-bytes"), name, content_type)
