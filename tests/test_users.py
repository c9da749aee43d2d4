from conftest import png
from database import USERS
from schemas import UserDocument
from security import hash_password


def other_user(store):
    user = UserDocument(
        name="Someone Else", email="someone.else@gmail.com", password_hash=hash_password("x" * 8)
    )
    return store.create(USERS, user.model_dump())


def test_public_profile(client, admin):
    resp = client.get("/api/users")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Site Owner"
    assert data["id"] == str(admin["_id"])
    assert "password_hash" not in data


def test_public_profile_missing(client):
    resp = client.get("/api/users")
    assert resp.status_code == 404
    assert resp.json()["message"] == "User profile not found"


def test_update_own_profile(client, admin, auth_headers):
    resp = client.put(
        f"/api/users/{admin['_id']}",
        json={"bio": "Flutter developer", "location": "Mansoura, Egypt", "name": None},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["bio"] == "Flutter developer"
    assert data["location"] == "Mansoura, Egypt"
    assert data["name"] == "Site Owner"


def test_cannot_update_someone_else(client, store, auth_headers):
    other = other_user(store)
    resp = client.put(f"/api/users/{other['_id']}", json={"bio": "x"}, headers=auth_headers)
    assert resp.status_code == 403


def test_email_must_be_unique(client, admin, store, auth_headers):
    other_user(store)
    resp = client.put(
        f"/api/users/{admin['_id']}",
        json={"email": "Someone.Else@gmail.com"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already exists"


def test_avatar_upload_replaces_previous(client, auth_headers, admin, media, store):
    first = client.post(
        "/api/users/upload-avatar", files={"avatar": png("me.png")}, headers=auth_headers
    ).json()["data"]["profile_picture"]

    # Older admin panels send the file as "cover".
    resp = client.post(
        "/api/users/upload-avatar", files={"cover": png("me2.png")}, headers=auth_headers
    )
    assert resp.status_code == 200
    second = resp.json()["data"]["profile_picture"]
    assert media.destroyed == [first["public_id"]]
    assert store.get(USERS, admin["_id"])["profile_picture"] == second


def test_avatar_upload_requires_file(client, auth_headers):
    resp = client.post("/api/users/upload-avatar", data={"x": "y"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "No image uploaded"


def test_delete_avatar(client, auth_headers, admin, media, store):
    uploaded = client.post(
        "/api/users/upload-avatar", files={"avatar": png()}, headers=auth_headers
    ).json()["data"]["profile_picture"]

    resp = client.delete("/api/users/delete-avatar", headers=auth_headers)
    assert resp.status_code == 200
    assert media.destroyed == [uploaded["public_id"]]
    assert store.get(USERS, admin["_id"])["profile_picture"] == {"url": "", "public_id": ""}
