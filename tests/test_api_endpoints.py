import asyncio
from unittest.mock import AsyncMock, patch

from bson import ObjectId
from pymongo.errors import PyMongoError

from fastapi.testclient import TestClient

from env import Settings, get_settings
from main import app


def _seed(client):
    response = client.get("/generate-posts")
    assert response.status_code == 201
    return client.get("/posts").json()


def test_generate_posts(client):
    response = client.get("/generate-posts")

    assert response.status_code == 201
    assert response.json()["count"] == 3
    assert "message" in response.json()

    posts = client.get("/posts").json()
    assert len(posts) == 3
    for post in posts:
        assert set(post) == {"id", "author", "date", "text", "commentCount"}
        assert post["commentCount"] == 0


def test_generate_posts_with_titles(client):
    app.dependency_overrides[get_settings] = lambda: Settings(post_title_enabled=True)

    posts = _seed(client)

    assert all(post["title"] for post in posts)


def test_generate_posts_disabled(client):
    app.dependency_overrides[get_settings] = lambda: Settings(generate_posts_enabled=False)

    response = client.get("/generate-posts")

    assert response.status_code == 404
    assert client.get("/posts").json() == []


def test_get_post(client):
    post = _seed(client)[0]

    response = client.get(f"/posts/{post['id']}")

    assert response.status_code == 200
    assert response.json() == post


def test_get_post_not_found(client):
    for post_id in (str(ObjectId()), "not-an-id"):
        response = client.get(f"/posts/{post_id}")
        assert response.status_code == 404
        assert response.json() == {"message": "Post not found"}


def test_comment_lifecycle(client):
    post = _seed(client)[0]

    created = client.post("/comments", json={"author": "alice", "text": "hi", "postId": post["id"]})
    assert created.status_code == 201
    comment = created.json()
    assert comment["postId"] == post["id"]
    assert comment["likeCount"] == 0
    assert comment["likedBy"] == []
    assert client.get(f"/posts/{post['id']}").json()["commentCount"] == 1

    listed = client.get(f"/posts/{post['id']}/comments").json()
    assert [c["id"] for c in listed] == [comment["id"]]

    patched = client.patch(f"/comments/{comment['id']}", json={"text": "X"})
    assert patched.status_code == 200
    assert patched.json() == {**comment, "text": "X"}
    assert client.get(f"/comments/{comment['id']}").json()["text"] == "X"

    deleted = client.delete(f"/comments/{comment['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Comment deleted"}
    assert client.get(f"/comments/{comment['id']}").status_code == 404
    assert client.get(f"/posts/{post['id']}").json()["commentCount"] == 0


def test_create_comment_unknown_post(client):
    posts = _seed(client)

    response = client.post("/comments", json={"author": "a", "text": "t", "postId": str(ObjectId())})

    assert response.status_code == 404
    assert response.json() == {"message": "Post not found"}
    assert client.get("/posts").json() == posts


def test_create_comment_missing_fields(client):
    response = client.post("/comments", json={"author": "a"})

    assert response.status_code == 422
    assert response.json()["message"] == "Invalid request: body.text, body.postId"


def test_like_and_unlike(client):
    post = _seed(client)[0]
    comment = client.post("/comments", json={"author": "a", "text": "t", "postId": post["id"]}).json()

    for _ in range(2):
        liked = client.post(f"/comments/{comment['id']}/like", json={"userId": "u1"})
    assert liked.status_code == 200
    assert liked.json()["likeCount"] == 1
    assert liked.json()["likedBy"] == ["u1"]

    noop = client.post(f"/comments/{comment['id']}/unlike", json={"userId": "u2"})
    assert noop.json()["likeCount"] == 1

    unliked = client.post(f"/comments/{comment['id']}/unlike", json={"userId": "u1"})
    assert unliked.json()["likeCount"] == 0
    assert unliked.json()["likedBy"] == []


def test_like_missing_comment(client):
    response = client.post(f"/comments/{ObjectId()}/like", json={"userId": "u1"})

    assert response.status_code == 404
    assert response.json() == {"message": "Comment not found"}


def test_list_comments_for_post_without_comments(client):
    post = _seed(client)[0]

    assert client.get(f"/posts/{post['id']}/comments").json() == []
    assert client.get(f"/posts/{ObjectId()}/comments").json() == []


def test_list_all_comments(client):
    posts = _seed(client)
    for post in posts:
        client.post("/comments", json={"author": "a", "text": "t", "postId": post["id"]})

    response = client.get("/comments")

    assert response.status_code == 200
    assert len(response.json()) == 3


def test_list_all_comments_disabled(client):
    app.dependency_overrides[get_settings] = lambda: Settings(unscoped_comments_enabled=False)

    assert client.get("/comments").status_code == 404


def test_recount_comments(client):
    post = _seed(client)[0]
    client.post("/comments", json={"author": "a", "text": "t", "postId": post["id"]})

    response = client.post("/posts/recount-comments")

    assert response.status_code == 200
    assert response.json()["counts"][post["id"]] == 1


def test_store_failure_returns_500(client):
    with patch("services.posts_services.list_posts",
               AsyncMock(side_effect=PyMongoError("connection refused"))):
        response = client.get("/posts")

    assert response.status_code == 500
    assert response.json() == {"message": "connection refused"}


def test_cors_allows_any_origin(client):
    response = client.options(
        "/posts",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "PATCH"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_unexpected_error_returns_json_500(client):
    client = TestClient(app, raise_server_exceptions=False)

    with patch("services.posts_services.list_posts", AsyncMock(side_effect=ValueError("boom"))):
        response = client.get("/posts")

    assert response.status_code == 500
    assert response.json() == {"message": "boom"}


def test_validation_error_uses_message_body(client):
    response = client.post("/comments/%s/like" % ObjectId(), json={})

    assert response.status_code == 422
    assert "userId" in response.json()["message"]


def test_startup_keeps_index_task(db):
    with patch("main.get_async_database", return_value=db):
        with TestClient(app):
            assert isinstance(app.state.index_task, asyncio.Task)
