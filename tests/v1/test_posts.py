"""Tests for post-related endpoints."""

from fastapi import status


def _create(client, headers, content="Hello there", **extra):
    data = {"content": content}
    data.update(extra.pop("data", {}))
    return client.post("/api/v1/posts", data=data, headers=headers, **extra)


def test_create_post_success(client, test_user, auth_token) -> None:
    """Test successful post creation."""
    response = _create(client, auth_token, content="  Test post content  ")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["content"] == "Test post content"
    assert data["author_id"] == test_user.id
    assert data["parent_id"] is None
    assert data["likes"] == []
    assert data["likes_count"] == 0
    assert data["media_count"] == 0
    assert "created_at" in data


def test_create_post_requires_auth(client) -> None:
    response = client.post("/api/v1/posts", data={"content": "Hello there"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_post_content_too_short(client, auth_token) -> None:
    response = _create(client, auth_token, content=" a ")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_post_content_too_long(client, auth_token) -> None:
    response = _create(client, auth_token, content="x" * 1001)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_reply(client, test_post, auth_token) -> None:
    response = _create(client, auth_token, data={"parent": str(test_post.id)})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["parent_id"] == test_post.id


def test_create_reply_to_missing_post(client, auth_token) -> None:
    response = _create(client, auth_token, data={"parent": "999"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "You can not answer to post which does not exist."


def test_create_reply_with_malformed_parent(client, auth_token) -> None:
    for parent in ("abc", "\u00b2", "9" * 20):
        response = _create(client, auth_token, data={"parent": parent})
        assert response.status_code == status.HTTP_400_BAD_REQUEST, parent


def test_create_post_with_media(client, auth_token, image_bytes) -> None:
    response = _create(
        client,
        auth_token,
        files=[
            ("media", ("wide.png", image_bytes((2160, 720)), "image/png")),
            ("media", ("small.jpg", image_bytes((40, 30), "JPEG"), "image/jpeg")),
        ],
    )
    assert response.status_code == status.HTTP_200_OK
    post = response.json()
    assert post["media_count"] == 2

    media = client.get(f"/api/v1/posts/{post['id']}/media/0")
    assert media.status_code == status.HTTP_200_OK
    assert media.headers["content-type"] == "image/webp"

    missing = client.get(f"/api/v1/posts/{post['id']}/media/2")
    assert missing.status_code == status.HTTP_404_NOT_FOUND

    for index in ("\u00b2", "9" * 20):
        response = client.get(f"/api/v1/posts/{post['id']}/media/{index}")
        assert response.status_code == status.HTTP_404_NOT_FOUND, index
        assert response.json()["detail"] == "Media with the given index does not exist."


def test_create_post_with_broken_media(client, auth_token) -> None:
    response = _create(
        client,
        auth_token,
        files=[("media", ("x.png", b"nope", "image/png"))],
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_get_post(client, test_post) -> None:
    response = client.get(f"/api/v1/posts/{test_post.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["content"] == "Test post content"


def test_get_missing_post(client) -> None:
    assert client.get("/api/v1/posts/999").status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/api/v1/posts/abc").status_code == status.HTTP_404_NOT_FOUND


class TestLike:
    def test_like_and_unlike(self, client, test_post, other_user, other_auth_token) -> None:
        url = f"/api/v1/posts/{test_post.id}/like"

        response = client.patch(url, json={"like": True}, headers=other_auth_token)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        post = client.get(f"/api/v1/posts/{test_post.id}").json()
        assert post["likes"] == [other_user.id]
        assert post["likes_count"] == 1

        response = client.patch(url, json={"like": False}, headers=other_auth_token)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        post = client.get(f"/api/v1/posts/{test_post.id}").json()
        assert post["likes"] == []
        assert post["likes_count"] == 0

    def test_like_twice(self, client, test_post, auth_token) -> None:
        url = f"/api/v1/posts/{test_post.id}/like"
        client.patch(url, json={"like": True}, headers=auth_token)
        response = client.patch(url, json={"like": True}, headers=auth_token)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unlike_without_like(self, client, test_post, auth_token) -> None:
        response = client.patch(
            f"/api/v1/posts/{test_post.id}/like",
            json={"like": False},
            headers=auth_token,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_like_missing_post(self, client, auth_token) -> None:
        response = client.patch("/api/v1/posts/999/like", json={"like": True}, headers=auth_token)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_like_requires_boolean(self, client, test_post, auth_token) -> None:
        url = f"/api/v1/posts/{test_post.id}/like"
        for payload in ({"like": "true"}, {"like": 1}, {}):
            response = client.patch(url, json=payload, headers=auth_token)
            assert response.status_code == status.HTTP_400_BAD_REQUEST, payload


class TestDeletePost:
    def test_author_deletes(self, client, test_post, auth_token) -> None:
        post_id = test_post.id
        response = client.delete(f"/api/v1/posts/{post_id}", headers=auth_token)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert client.get(f"/api/v1/posts/{post_id}").status_code == status.HTTP_404_NOT_FOUND

    def test_stranger_cannot_delete(self, client, test_post, other_auth_token) -> None:
        response = client.delete(f"/api/v1/posts/{test_post.id}", headers=other_auth_token)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_moderator_deletes(self, client, test_post, admin_auth_token) -> None:
        response = client.delete(f"/api/v1/posts/{test_post.id}", headers=admin_auth_token)
        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_delete_missing(self, client, auth_token) -> None:
        response = client.delete("/api/v1/posts/999", headers=auth_token)
        assert response.status_code == status.HTTP_404_NOT_FOUND
