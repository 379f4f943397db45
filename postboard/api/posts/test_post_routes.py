# postboard/api/posts/test_post_routes.py
"""
/api/posts 엔드포인트 통합 테스트 (Flask test client + 메모리 저장소)
"""
import json

import pytest

from conftest import image_file


def _create(client, headers, content=None, images=0):
    data = {}
    if content is not None:
        data["content"] = content
    if images:
        data["images"] = [image_file(f"p{i}.jpg") for i in range(images)]
    return client.post('/api/posts', data=data, headers=headers, content_type='multipart/form-data')


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json()["success"] is True


def test_create_post_with_images(client, signup, storage):
    user, headers = signup()
    response = _create(client, headers, content="hello", images=2)

    assert response.status_code == 201
    post = response.get_json()["data"]
    assert post["content"] == "hello"
    assert post["author"] == user["id"]
    assert post["authorUsername"] == "alice"
    assert len(post["images"]) == 2
    assert all(img["storageId"] in storage.objects for img in post["images"])
    assert post["likes"] == {"count": 0, "users": []}
    assert post["isEdited"] is False


def test_create_post_with_json_content(client, signup):
    _, headers = signup()
    response = client.post('/api/posts', json={"content": "just text"}, headers=headers)
    assert response.status_code == 201
    assert response.get_json()["data"]["images"] == []


def test_create_empty_post_is_rejected(client, signup, storage):
    _, headers = signup()
    response = _create(client, headers, content="")
    body = response.get_json()

    assert response.status_code == 400
    assert body["success"] is False
    assert body["error"] == "Post must have either content or at least one image"
    assert storage.objects == {}


def test_create_post_requires_token(client):
    response = client.post('/api/posts', json={"content": "hello"})
    assert response.status_code == 401
    assert response.get_json()["success"] is False


def test_create_post_rejects_bad_token(client):
    response = client.post('/api/posts', json={"content": "hello"},
                           headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_create_post_rejects_non_image_upload(client, signup, storage):
    _, headers = signup()
    response = client.post('/api/posts', data={"images": [image_file("notes.txt", "text/plain")]},
                           headers=headers, content_type='multipart/form-data')
    assert response.status_code == 400
    assert storage.objects == {}


def test_create_post_rejects_too_many_images(client, signup, storage):
    _, headers = signup()
    response = _create(client, headers, images=6)
    assert response.status_code == 400
    assert storage.objects == {}


def test_upload_failure_is_reported(client, signup, storage):
    _, headers = signup()
    storage.fail_uploads = True
    response = _create(client, headers, content="hello", images=1)
    assert response.status_code == 502
    assert response.get_json()["error_code"] == "UPLOAD_FAILED"


def test_feed_pagination_payload(client, signup):
    _, headers = signup()
    for i in range(3):
        _create(client, headers, content=f"post {i}")

    response = client.get('/api/posts?page=1&limit=2')
    body = response.get_json()

    assert response.status_code == 200
    assert [p["content"] for p in body["data"]] == ["post 2", "post 1"]
    assert body["pagination"] == {"currentPage": 1, "totalPages": 2, "totalItems": 3, "hasMore": True}


def test_feed_defaults_for_invalid_query(client):
    response = client.get('/api/posts?page=abc&limit=-1')
    body = response.get_json()
    assert body["pagination"] == {"currentPage": 1, "totalPages": 0, "totalItems": 0, "hasMore": False}


def test_get_post_and_not_found(client, signup):
    _, headers = signup()
    post_id = _create(client, headers, content="hello").get_json()["data"]["id"]

    assert client.get(f'/api/posts/{post_id}').get_json()["data"]["id"] == post_id
    missing = client.get('/api/posts/does-not-exist')
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "Post not found"


def test_like_and_unlike(client, signup):
    _, headers = signup()
    _, bob_headers = signup("bobby")
    post_id = _create(client, headers, content="hello").get_json()["data"]["id"]

    liked = client.post(f'/api/posts/{post_id}/like', headers=bob_headers).get_json()["data"]
    assert liked == {"likes": {"count": 1, "users": ["bobby"]}, "liked": True}

    unliked = client.post(f'/api/posts/{post_id}/like', headers=bob_headers).get_json()["data"]
    assert unliked == {"likes": {"count": 0, "users": []}, "liked": False}

    assert client.post('/api/posts/missing/like', headers=bob_headers).status_code == 404


def test_comment(client, signup):
    _, headers = signup()
    post_id = _create(client, headers, content="hello").get_json()["data"]["id"]

    response = client.post(f'/api/posts/{post_id}/comment', json={"text": "  nice  "}, headers=headers)
    assert response.status_code == 201
    comment = response.get_json()["data"]
    assert comment["text"] == "nice"
    assert comment["username"] == "alice"
    assert comment["id"] and comment["createdAt"]

    too_long = client.post(f'/api/posts/{post_id}/comment', json={"text": "x" * 501}, headers=headers)
    assert too_long.status_code == 400

    comments = client.get(f'/api/posts/{post_id}').get_json()["data"]["comments"]
    assert [c["text"] for c in comments] == ["nice"]


def test_update_post_replaces_image(client, signup, storage):
    _, headers = signup()
    post = _create(client, headers, content="hello", images=2).get_json()["data"]
    first, second = post["images"]

    response = client.put(
        f'/api/posts/{post["id"]}',
        data={"imagesToDelete": json.dumps([first["storageId"]]), "images": [image_file("new.jpg")]},
        headers=headers, content_type='multipart/form-data',
    )

    assert response.status_code == 200
    updated = response.get_json()["data"]
    assert updated["content"] == "hello"
    assert updated["isEdited"] is True and updated["editedAt"]
    assert updated["images"][0] == second
    assert len(updated["images"]) == 2
    assert first["storageId"] not in storage.objects


def test_update_by_non_owner_is_forbidden_and_uploads_nothing(client, signup, storage):
    _, headers = signup()
    _, bob_headers = signup("bobby")
    post = _create(client, headers, content="hello").get_json()["data"]

    response = client.put(f'/api/posts/{post["id"]}', data={"content": "mine now", "images": [image_file()]},
                          headers=bob_headers, content_type='multipart/form-data')

    assert response.status_code == 403
    assert storage.objects == {}
    assert client.get(f'/api/posts/{post["id"]}').get_json()["data"]["content"] == "hello"


def test_update_that_empties_post_discards_new_uploads(client, signup, storage):
    _, headers = signup()
    post = _create(client, headers, content="hello").get_json()["data"]

    response = client.put(f'/api/posts/{post["id"]}', json={"content": ""}, headers=headers)
    assert response.status_code == 400
    assert client.get(f'/api/posts/{post["id"]}').get_json()["data"]["content"] == "hello"


def test_delete_last_image_of_image_only_post(client, signup):
    _, headers = signup()
    post = _create(client, headers, images=1).get_json()["data"]
    storage_id = post["images"][0]["storageId"]

    response = client.delete(f'/api/posts/{post["id"]}/images/{storage_id}', headers=headers)
    assert response.status_code == 400
    assert client.get(f'/api/posts/{post["id"]}').get_json()["data"]["images"] == post["images"]

    missing = client.delete(f'/api/posts/{post["id"]}/images/posts/nope.jpg', headers=headers)
    assert missing.status_code == 404


def test_delete_image(client, signup):
    _, headers = signup()
    post = _create(client, headers, images=2).get_json()["data"]
    storage_id = post["images"][0]["storageId"]

    response = client.delete(f'/api/posts/{post["id"]}/images/{storage_id}', headers=headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["images"] == post["images"][1:]


def test_delete_post(client, signup, storage):
    _, headers = signup()
    _, bob_headers = signup("bobby")
    post = _create(client, headers, content="hello", images=3).get_json()["data"]

    assert client.delete(f'/api/posts/{post["id"]}', headers=bob_headers).status_code == 403

    response = client.delete(f'/api/posts/{post["id"]}', headers=headers)
    assert response.status_code == 200
    assert response.get_json()["success"] is True
    assert storage.objects == {}
    assert client.get(f'/api/posts/{post["id"]}').status_code == 404


def test_standalone_upload(client, signup):
    _, headers = signup()
    response = client.post('/api/posts/upload', data={"images": [image_file(), image_file("b.png", "image/png")]},
                           headers=headers, content_type='multipart/form-data')
    assert response.status_code == 200
    images = response.get_json()["data"]
    assert len(images) == 2 and all("url" in img and "storageId" in img for img in images)

    empty = client.post('/api/posts/upload', data={}, headers=headers, content_type='multipart/form-data')
    assert empty.status_code == 400


def test_unknown_route(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": "Route not found", "error_code": "NOT_FOUND"}


@pytest.mark.parametrize("bad_value", [5, True, {"posts/x.jpg": 1}])
def test_update_rejects_malformed_images_to_delete(client, signup, storage, bad_value):
    _, headers = signup()
    post = _create(client, headers, content="hello", images=1).get_json()["data"]

    response = client.put(f'/api/posts/{post["id"]}', json={"imagesToDelete": bad_value}, headers=headers)

    assert response.status_code == 400
    assert "imagesToDelete" in response.get_json()["details"]
    assert storage.delete_calls == []
    stored = client.get(f'/api/posts/{post["id"]}').get_json()["data"]
    assert stored["images"] == post["images"] and stored["isEdited"] is False
