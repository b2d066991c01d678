"""
Posts, likes and comments through the HTTP API
"""

import pytest
from bson import ObjectId


@pytest.fixture
def author(make_user):
    return make_user("Ada")


@pytest.fixture
def reader(make_user):
    return make_user("Bob")


@pytest.fixture
def post(client, author):
    response = client.post("/api/posts", json={"text": "hello"}, headers=author.headers)
    assert response.status_code == 200
    return response.json()


def test_create_post(post, author):
    assert post["text"] == "hello"
    assert post["user"] == author.id
    assert post["name"] == "Ada"
    assert post["avatar"] == author.avatar
    assert post["like"] == []
    assert post["comments"] == []
    assert ObjectId.is_valid(post["id"])


def test_create_post_requires_text(client, author):
    response = client.post("/api/posts", json={"text": "   "}, headers=author.headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["msg"] == "Text is required"


def test_posts_require_token(client):
    assert client.get("/api/posts").status_code == 401
    assert client.post("/api/posts", json={"text": "hi"}).status_code == 401


def test_get_post_by_id(client, post, reader):
    response = client.get(f"/api/posts/{post['id']}", headers=reader.headers)

    assert response.status_code == 200
    assert response.json()["text"] == "hello"


@pytest.mark.parametrize("post_id", [str(ObjectId()), "not-an-object-id"])
def test_get_missing_post(client, reader, post_id):
    response = client.get(f"/api/posts/{post_id}", headers=reader.headers)

    assert response.status_code == 404
    assert response.json() == {"msg": "Post not found"}


def test_list_posts(client, post, reader):
    response = client.get("/api/posts", headers=reader.headers)

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [post["id"]]


def test_like_then_like_again(client, post, reader):
    response = client.put(f"/api/posts/like/{post['id']}", headers=reader.headers)

    assert response.status_code == 200
    assert response.json() == [{"user": reader.id}]

    again = client.put(f"/api/posts/like/{post['id']}", headers=reader.headers)

    assert again.status_code == 400
    assert again.json() == {"msg": "Post already liked"}
    likes = client.get(f"/api/posts/{post['id']}", headers=reader.headers).json()["like"]
    assert likes == [{"user": reader.id}]


def test_likes_are_most_recent_first(client, post, author, reader):
    client.put(f"/api/posts/like/{post['id']}", headers=author.headers)
    response = client.put(f"/api/posts/like/{post['id']}", headers=reader.headers)

    assert response.json() == [{"user": reader.id}, {"user": author.id}]


def test_unlike_without_like(client, post, author, reader):
    client.put(f"/api/posts/like/{post['id']}", headers=author.headers)

    response = client.put(f"/api/posts/unlike/{post['id']}", headers=reader.headers)

    assert response.status_code == 400
    assert response.json() == {"msg": "Post has not yet been liked"}
    likes = client.get(f"/api/posts/{post['id']}", headers=reader.headers).json()["like"]
    assert likes == [{"user": author.id}]


def test_unlike_removes_only_the_callers_like(client, post, author, reader):
    client.put(f"/api/posts/like/{post['id']}", headers=author.headers)
    client.put(f"/api/posts/like/{post['id']}", headers=reader.headers)

    response = client.put(f"/api/posts/unlike/{post['id']}", headers=author.headers)

    assert response.status_code == 200
    assert response.json() == [{"user": reader.id}]


def test_like_missing_post(client, reader):
    response = client.put(f"/api/posts/like/{ObjectId()}", headers=reader.headers)

    assert response.status_code == 404
    assert response.json() == {"msg": "Post not found"}


def test_add_comment(client, post, reader):
    response = client.post(f"/api/posts/comment/{post['id']}", json={"text": "nice"}, headers=reader.headers)

    assert response.status_code == 200
    comments = response.json()
    assert len(comments) == 1
    assert comments[0]["text"] == "nice"
    assert comments[0]["user"] == reader.id
    assert comments[0]["name"] == "Bob"
    assert ObjectId.is_valid(comments[0]["id"])


def test_add_comment_to_missing_post(client, reader):
    response = client.post(f"/api/posts/comment/{ObjectId()}", json={"text": "nice"}, headers=reader.headers)

    assert response.status_code == 404


def test_delete_one_of_several_comments_by_the_same_user(client, post, reader):
    for text in ("first", "second", "third"):
        client.post(f"/api/posts/comment/{post['id']}", json={"text": text}, headers=reader.headers)
    comments = client.get(f"/api/posts/{post['id']}", headers=reader.headers).json()["comments"]
    assert [c["text"] for c in comments] == ["third", "second", "first"]
    target = next(c for c in comments if c["text"] == "second")

    response = client.delete(f"/api/posts/comment/{post['id']}/{target['id']}", headers=reader.headers)

    assert response.status_code == 200
    assert [c["text"] for c in response.json()] == ["third", "first"]


def test_delete_comment_by_someone_else(client, post, author, reader):
    comments = client.post(f"/api/posts/comment/{post['id']}", json={"text": "mine"}, headers=reader.headers).json()

    response = client.delete(f"/api/posts/comment/{post['id']}/{comments[0]['id']}", headers=author.headers)

    assert response.status_code == 401
    assert response.json() == {"msg": "User is not authorized"}
    remaining = client.get(f"/api/posts/{post['id']}", headers=author.headers).json()["comments"]
    assert len(remaining) == 1


def test_delete_missing_comment(client, post, reader):
    response = client.delete(f"/api/posts/comment/{post['id']}/{ObjectId()}", headers=reader.headers)

    assert response.status_code == 404
    assert response.json() == {"msg": "Comment does not exist"}


def test_delete_post_as_non_author(client, post, reader):
    response = client.delete(f"/api/posts/{post['id']}", headers=reader.headers)

    assert response.status_code == 401
    assert response.json() == {"msg": "User not authorized"}
    assert client.get(f"/api/posts/{post['id']}", headers=reader.headers).status_code == 200


def test_delete_post_as_author(client, post, author):
    response = client.delete(f"/api/posts/{post['id']}", headers=author.headers)

    assert response.status_code == 200
    assert response.json() == {"msg": "Post removed"}
    assert client.get(f"/api/posts/{post['id']}", headers=author.headers).status_code == 404
