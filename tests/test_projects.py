import json
from unittest import mock

import pytest
from pymongo.errors import OperationFailure

from conftest import png
from database import PROJECTS
from media import MediaError


def project_form(**overrides):
    data = {
        "title": "Wanna Meal",
        "description": "A food delivery application built with Flutter.",
        "techStack": "Flutter, Dart, Firebase",
        "role": "Full Stack Developer",
        "year": "2024",
        "type": "mobile",
        "features": "User authentication\nReal-time order tracking",
        "links": json.dumps({"github": "https://github.com/someone/wanna-meal"}),
        "isFeatured": "true",
    }
    data.update(overrides)
    return data


@pytest.fixture
def create_project(client, auth_headers):
    def _create(**overrides):
        resp = client.post(
            "/api/projects",
            data=project_form(**overrides),
            files={"cover": png("cover.png")},
            headers=auth_headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create


def test_create_project_from_form(create_project, media):
    project = create_project()

    assert project["slug"] == "wanna-meal"
    assert [t["name"] for t in project["tech_stack"]] == ["Flutter", "Dart", "Firebase"]
    assert [f["title"] for f in project["features"]] == [
        "User authentication",
        "Real-time order tracking",
    ]
    assert project["links"] == [
        {"type": "github", "url": "https://github.com/someone/wanna-meal", "label": None}
    ]
    assert project["is_featured"] is True
    assert project["gallery"] == []
    assert project["cover"]["public_id"] in media.assets


def test_create_requires_auth(client):
    resp = client.post("/api/projects", data=project_form(), files={"cover": png()})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Not authenticated"}


def test_create_rejects_bad_token(client):
    resp = client.post(
        "/api/projects",
        data=project_form(),
        files={"cover": png()},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


def test_create_requires_cover(client, auth_headers):
    resp = client.post("/api/projects", data=project_form(), headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Project cover image is required"


def test_create_rejects_non_image_cover(client, auth_headers, media):
    resp = client.post(
        "/api/projects",
        data=project_form(),
        files={"cover": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Only image files are allowed!"
    assert media.assets == {}


def test_create_validation_errors(client, auth_headers, media):
    resp = client.post(
        "/api/projects",
        data=project_form(title="", year="1999"),
        files={"cover": png()},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    fields = {e["field"] for e in body["errors"]}
    assert {"title", "year"} <= fields
    # Nothing is uploaded for an invalid payload.
    assert media.assets == {}


def test_duplicate_titles_get_numbered_slugs(create_project):
    assert create_project()["slug"] == "wanna-meal"
    assert create_project()["slug"] == "wanna-meal-2"
    assert create_project()["slug"] == "wanna-meal-3"


def test_list_filters_and_pagination(client, create_project):
    create_project(title="Bookly", type="mobile", techStack="Flutter, Cubit", isFeatured="false")
    create_project(title="Dashboard", type="web", techStack="React", year="2023", isFeatured="false")
    create_project(title="Hidden", isPublished="false")

    resp = client.get("/api/projects")
    body = resp.json()
    assert resp.status_code == 200
    assert {p["title"] for p in body["data"]} == {"Bookly", "Dashboard"}
    assert body["pagination"] == {
        "current_page": 1,
        "total_pages": 1,
        "total_items": 2,
        "items_per_page": 10,
    }

    assert [p["title"] for p in client.get("/api/projects?type=web").json()["data"]] == ["Dashboard"]
    assert [p["title"] for p in client.get("/api/projects?year=2023").json()["data"]] == ["Dashboard"]
    assert [p["title"] for p in client.get("/api/projects?tech=cubit").json()["data"]] == ["Bookly"]
    assert [p["title"] for p in client.get("/api/projects?search=dash").json()["data"]] == ["Dashboard"]

    page = client.get("/api/projects?limit=1&page=2").json()
    assert len(page["data"]) == 1
    assert page["pagination"]["total_pages"] == 2


def test_search_is_literal(client, create_project):
    create_project(title="C++ Engine")
    create_project(title="Plain")
    resp = client.get("/api/projects", params={"search": "c++"})
    assert [p["title"] for p in resp.json()["data"]] == ["C++ Engine"]


def test_featured_projects(client, create_project):
    create_project(title="Star")
    create_project(title="Regular", isFeatured="false")
    data = client.get("/api/projects/featured").json()["data"]
    assert [p["title"] for p in data] == ["Star"]


def test_get_by_slug(client, create_project):
    create_project()
    resp = client.get("/api/projects/wanna-meal")
    assert resp.status_code == 200
    assert resp.json()["data"]["title"] == "Wanna Meal"

    missing = client.get("/api/projects/nothing-here")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "message": "Project not found"}


def test_update_title_regenerates_slug(client, auth_headers, create_project):
    project = create_project()
    resp = client.put(
        f"/api/projects/{project['id']}",
        json={"title": "Wanna Meal Pro", "techStack": ["Flutter"]},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["slug"] == "wanna-meal-pro"
    assert data["tech_stack"] == [{"name": "Flutter", "category": None}]
    assert data["role"] == "Full Stack Developer"


def test_partial_nested_update_replaces_whole_object(
    client, auth_headers, create_project, store
):
    project = create_project(
        stats=json.dumps({"downloads": 10, "rating": 4.5, "users": 7}),
        caseStudy=json.dumps({"problem": "Slow checkout", "results": "2x orders"}),
    )
    assert project["stats"] == {"downloads": 10, "rating": 4.5, "users": 7}

    resp = client.put(
        f"/api/projects/{project['id']}",
        json={"stats": {"downloads": 20}, "caseStudy": {"problem": "Cold starts"}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["stats"] == {"downloads": 20, "rating": 0, "users": 0}
    assert data["case_study"]["problem"] == "Cold starts"
    assert data["case_study"]["results"] == ""
    assert set(data["case_study"]) == {
        "problem", "solution", "architecture", "state_management", "challenges", "results",
    }
    assert store.get(PROJECTS, project["id"])["stats"]["users"] == 0


def test_update_ignores_null_for_required_fields(client, auth_headers, create_project):
    project = create_project()
    resp = client.put(
        f"/api/projects/{project['id']}", json={"role": None}, headers=auth_headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "Full Stack Developer"


def test_update_cover_discards_old_one(client, auth_headers, create_project, media):
    project = create_project()
    old_id = project["cover"]["public_id"]
    resp = client.put(
        f"/api/projects/{project['id']}",
        data={"role": "Lead"},
        files={"cover": png("new.png")},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["cover"]["public_id"] != old_id
    assert media.destroyed == [old_id]


def test_update_cover_is_discarded_when_save_fails(
    client, auth_headers, create_project, media, store
):
    project = create_project()
    old_id = project["cover"]["public_id"]
    with mock.patch.object(store, "update", side_effect=OperationFailure("write failed")):
        resp = client.put(
            f"/api/projects/{project['id']}",
            files={"cover": png("new.png")},
            headers=auth_headers,
        )
    assert resp.status_code == 500
    assert list(media.assets) == [old_id]
    assert len(media.destroyed) == 1
    assert media.destroyed != [old_id]


def test_update_unknown_or_malformed_id(client, auth_headers):
    for project_id in ("000000000000000000000000", "not-an-id"):
        resp = client.put(f"/api/projects/{project_id}", json={"role": "x"}, headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["message"] == "Project not found"


def test_delete_removes_media(client, auth_headers, create_project, media, store):
    project = create_project()
    client.post(
        f"/api/projects/{project['id']}/gallery",
        files=[("images", png("a.png")), ("images", png("b.png"))],
        headers=auth_headers,
    )
    resp = client.delete(f"/api/projects/{project['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Project deleted successfully"
    assert len(media.destroyed) == 3
    assert store.count(PROJECTS) == 0


class TestGallery:
    @pytest.fixture
    def project(self, create_project):
        return create_project()

    def upload(self, client, auth_headers, project, *names):
        return client.post(
            f"/api/projects/{project['id']}/gallery",
            files=[("images", png(n)) for n in names],
            headers=auth_headers,
        )

    def test_upload_appends_images(self, client, auth_headers, project):
        resp = self.upload(client, auth_headers, project, "a.png", "b.png")
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "2 images uploaded successfully"
        gallery = body["data"]["gallery"]
        assert len(gallery) == 2
        assert all(img["caption"] == "" and img["id"] for img in gallery)

    def test_upload_requires_images(self, client, auth_headers, project):
        resp = client.post(
            f"/api/projects/{project['id']}/gallery", data={}, headers=auth_headers
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "No images uploaded"

    def test_upload_limit(self, client, auth_headers, project):
        names = [f"{n}.png" for n in range(11)]
        resp = self.upload(client, auth_headers, project, *names)
        assert resp.status_code == 400

    def test_reorder_keeps_unlisted_images(self, client, auth_headers, project):
        gallery = self.upload(client, auth_headers, project, "a.png", "b.png", "c.png").json()[
            "data"
        ]["gallery"]
        first, second, third = (img["id"] for img in gallery)

        resp = client.put(
            f"/api/projects/{project['id']}/gallery/reorder",
            json={"imageIds": [third, "unknown", first]},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert [img["id"] for img in resp.json()["data"]["gallery"]] == [third, first, second]

    def test_caption_update(self, client, auth_headers, project):
        image = self.upload(client, auth_headers, project, "a.png").json()["data"]["gallery"][0]
        resp = client.put(
            f"/api/projects/{project['id']}/gallery/{image['id']}",
            json={"caption": "Home screen"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["image"]["caption"] == "Home screen"

        missing = client.put(
            f"/api/projects/{project['id']}/gallery/nope",
            json={"caption": "x"},
            headers=auth_headers,
        )
        assert missing.status_code == 404
        assert missing.json()["message"] == "Gallery image not found"

    def test_delete_image(self, client, auth_headers, project, media):
        image = self.upload(client, auth_headers, project, "a.png").json()["data"]["gallery"][0]
        resp = client.delete(
            f"/api/projects/{project['id']}/gallery/{image['id']}", headers=auth_headers
        )
        assert resp.status_code == 200
        assert image["public_id"] in media.destroyed

        detail = client.get(f"/api/projects/{project['slug']}").json()["data"]
        assert detail["gallery"] == []

    def test_invalid_file_rejects_whole_batch(self, client, auth_headers, project, media):
        resp = client.post(
            f"/api/projects/{project['id']}/gallery",
            files=[
                ("images", png("a.png")),
                ("images", png("b.png")),
                ("images", ("c.txt", b"plain text", "text/plain")),
            ],
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Only image files are allowed!"
        assert list(media.assets) == [project["cover"]["public_id"]]

        detail = client.get(f"/api/projects/{project['slug']}").json()["data"]
        assert detail["gallery"] == []

    def test_host_failure_discards_uploaded_part(self, client, auth_headers, project, media):
        upload = media.upload
        uploaded = []

        def fail_second(image, folder):
            if uploaded:
                raise MediaError("host unavailable")
            asset = upload(image, folder)
            uploaded.append(asset["public_id"])
            return asset

        with mock.patch.object(media, "upload", side_effect=fail_second):
            resp = self.upload(client, auth_headers, project, "a.png", "b.png")
        assert resp.status_code == 502
        assert media.destroyed == uploaded
        assert list(media.assets) == [project["cover"]["public_id"]]
