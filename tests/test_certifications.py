from unittest import mock

from pymongo.errors import OperationFailure

from conftest import png


def create(client, auth_headers, **fields):
    data = {
        "title": "Flutter Development Bootcamp",
        "issuer": "ITI Training",
        "date": "2023-09-30",
        "credentialUrl": "https://iti.gov.eg/certificates/flutter-bootcamp",
    }
    data.update(fields)
    resp = client.post("/api/certifications", json=data, headers=auth_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def test_create_and_get(client, auth_headers):
    cert = create(client, auth_headers)
    assert cert["credential_url"] == "https://iti.gov.eg/certificates/flutter-bootcamp"
    assert "logo" not in cert

    resp = client.get(f"/api/certifications/{cert['id']}")
    assert resp.json()["data"]["issuer"] == "ITI Training"


def test_invalid_credential_url(client, auth_headers):
    resp = client.post(
        "/api/certifications",
        json={"title": "X", "issuer": "Y", "date": "2023-01-01", "credentialUrl": "not a url"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["errors"] == [
        {"field": "credential_url", "message": "must be a valid URL"}
    ]


def test_list_newest_first(client, auth_headers):
    create(client, auth_headers, title="Older", date="2022-01-01")
    create(client, auth_headers, title="Newer", date="2024-01-01")
    create(client, auth_headers, title="Hidden", isPublished=False)
    data = client.get("/api/certifications").json()["data"]
    assert [c["title"] for c in data] == ["Newer", "Older"]


def test_logo_upload_and_replace(client, auth_headers, media):
    resp = client.post(
        "/api/certifications",
        data={"title": "Firebase", "issuer": "Google", "date": "2023-08-15"},
        files={"logo": png("logo.png")},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    cert = resp.json()["data"]
    old = cert["logo"]["public_id"]

    resp = client.put(
        f"/api/certifications/{cert['id']}",
        data={"order": "3"},
        files={"logo": png("logo2.png")},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["order"] == 3
    assert media.destroyed == [old]

    resp = client.delete(f"/api/certifications/{cert['id']}", headers=auth_headers)
    assert resp.json()["message"] == "Certification deleted successfully"
    assert len(media.destroyed) == 2


def test_logo_is_discarded_when_save_fails(client, auth_headers, media, store):
    cert = create(client, auth_headers)
    with mock.patch.object(store, "update", side_effect=OperationFailure("write failed")):
        resp = client.put(
            f"/api/certifications/{cert['id']}",
            data={"order": "2"},
            files={"logo": png("logo.png")},
            headers=auth_headers,
        )
    assert resp.status_code == 500
    assert media.assets == {}
    assert len(media.destroyed) == 1


def test_missing_certification(client):
    resp = client.get("/api/certifications/64b7f0c2a1b2c3d4e5f60718")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Certification not found"}
