"""Profile and listing endpoints."""

from __future__ import annotations

import io
import uuid

from tests.helpers.auth import bearer, problem

YOUTUBE = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_list_users_with_meta(client, signed_up):
    for i in range(3):
        signed_up(email=f"list{i}@example.com")

    resp = client.get("/api/v1/users?page=1&limit=2")

    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["data"]) == 2
    assert body["meta"] == {
        "total": 3,
        "page": 1,
        "limit": 2,
        "totalPages": 2,
        "hasNext": True,
        "hasPrev": False,
    }


def test_invalid_pagination_is_400(client):
    assert client.get("/api/v1/users?page=0").status_code == 400
    assert client.get("/api/v1/users?limit=abc").status_code == 400


def test_get_user_by_id(client, signed_up):
    data = signed_up()
    user_id = data["user"]["id"]

    assert client.get(f"/api/v1/users/{user_id}").get_json()["data"]["id"] == user_id
    assert client.get(f"/api/v1/users/{uuid.uuid4()}").status_code == 404
    assert client.get("/api/v1/users/not-a-uuid").status_code == 404


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert problem(resp)["code"] == "not_found"


def test_update_profile_json(client, signed_up):
    data = signed_up()
    headers = bearer(data["accessToken"])

    resp = client.put(
        "/api/v1/users/profile/me",
        json={"name": "New Name", "bio": "About me", "location": "Madrid"},
        headers=headers,
    )

    assert resp.status_code == 200
    user = resp.get_json()["data"]
    assert (user["name"], user["bio"], user["location"]) == ("New Name", "About me", "Madrid")
    assert client.get("/api/v1/users/profile/me", headers=headers).get_json()["data"]["bio"] == "About me"


def test_update_profile_requires_auth(client):
    assert client.put("/api/v1/users/profile/me", json={"bio": "x"}).status_code == 401


def test_update_profile_email_taken(client, signed_up):
    signed_up(email="taken@example.com")
    data = signed_up()

    resp = client.put(
        "/api/v1/users/profile/me",
        json={"email": "taken@example.com"},
        headers=bearer(data["accessToken"]),
    )

    assert resp.status_code == 409
    assert problem(resp)["detail"] == "Email already in use"


def test_upload_and_serve_profile_picture(client, signed_up):
    data = signed_up()
    user_id = data["user"]["id"]

    resp = client.put(
        "/api/v1/users/profile/me",
        data={"bio": "with picture", "profilePicture": (io.BytesIO(PNG), "me.png", "image/png")},
        headers=bearer(data["accessToken"]),
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["bio"] == "with picture"

    picture = client.get(f"/api/v1/users/{user_id}/profile-picture")
    assert picture.status_code == 200
    assert picture.data == PNG


def test_upload_rejects_non_image(client, signed_up):
    data = signed_up()

    resp = client.put(
        "/api/v1/users/profile/me",
        data={"profilePicture": (io.BytesIO(b"text"), "notes.txt", "text/plain")},
        headers=bearer(data["accessToken"]),
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert problem(resp)["detail"] == "Only image files are allowed!"


def test_missing_picture_without_default_is_404(client, signed_up):
    data = signed_up()
    assert client.get(f"/api/v1/users/{data['user']['id']}/profile-picture").status_code == 404


def test_video_links_and_content_feed(client, signed_up):
    data = signed_up(name="Streamer")
    headers = bearer(data["accessToken"])

    added = client.post(
        "/api/v1/users/profile/videos", json={"url": YOUTUBE, "title": "Keynote"}, headers=headers
    )
    assert added.status_code == 201
    link = added.get_json()["data"]["link"]
    assert link["title"] == "Keynote"
    assert link["addedAt"]

    feed = client.get("/api/v1/users/content").get_json()
    assert feed["meta"]["total"] == 1
    assert feed["data"][0]["userName"] == "Streamer"
    assert feed["data"][0]["userId"] == data["user"]["id"]

    removed = client.delete(f"/api/v1/users/profile/videos/{link['id']}", headers=headers)
    assert removed.status_code == 200
    assert removed.get_json()["data"]["videoLinks"] == []

    missing = client.delete(f"/api/v1/users/profile/videos/{link['id']}", headers=headers)
    assert missing.status_code == 404


def test_video_link_validation(client, signed_up):
    headers = bearer(signed_up()["accessToken"])

    bad_url = client.post(
        "/api/v1/users/profile/videos", json={"url": "https://vimeo.com/1", "title": "x"}, headers=headers
    )
    assert bad_url.status_code == 400
    assert problem(bad_url)["detail"] == "Invalid YouTube URL format"

    long_title = client.post(
        "/api/v1/users/profile/videos", json={"url": YOUTUBE, "title": "x" * 101}, headers=headers
    )
    assert long_title.status_code == 400


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["db"] == "ok"
