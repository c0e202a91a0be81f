from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from content_api.auth import AuthService
from content_api.main import create_app
from tests.fixtures.content_fixtures import MISSING_ID, PNG_BYTES, SAMPLE_CAREER, png_file


def test_unknown_route(client: TestClient):
    response = client.get("/api/does-not-exist")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Route not found"}


def test_login_wrong_password(client: TestClient):
    response = client.post("/api/auth/login", json={"password": "guess"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Invalid password"}


def test_login_missing_password(client: TestClient):
    response = client.post("/api/auth/login", json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Password is required"}


def test_login_malformed_body(client: TestClient):
    response = client.post(
        "/api/auth/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "error" in response.json()


def test_verify_without_or_with_bad_token(client: TestClient, settings):
    assert client.get("/api/auth/verify").status_code == status.HTTP_401_UNAUTHORIZED
    assert client.get("/api/auth/verify").json() == {"valid": False}

    expired = AuthService(settings).issue_token(now=datetime.now(timezone.utc) - timedelta(days=2))
    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"valid": False}


@pytest.mark.parametrize("method, path", [
    ("post", "/api/gallery"),
    ("put", f"/api/gallery/{MISSING_ID}"),
    ("delete", f"/api/gallery/{MISSING_ID}"),
    ("delete", "/api/gallery/cleanup/all"),
    ("post", "/api/news"),
    ("put", f"/api/news/{MISSING_ID}"),
    ("delete", f"/api/news/{MISSING_ID}"),
    ("post", "/api/careers"),
    ("put", f"/api/careers/{MISSING_ID}"),
    ("delete", f"/api/careers/{MISSING_ID}"),
])
def test_write_routes_require_auth(client: TestClient, method, path):
    response = client.request(method, path)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Authentication required"}


def test_write_route_rejects_invalid_token(client: TestClient):
    response = client.delete(
        "/api/gallery/cleanup/all",
        headers={"Authorization": "Bearer not.a.token"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Invalid or expired token"}


def test_gallery_create_without_category(client: TestClient, auth_headers):
    response = client.post("/api/gallery", data={"title": "Summit"}, files=png_file(), headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Title, category, and image are required"}
    assert client.get("/api/gallery").json() == []
    assert client.app.state.stores.blobs.list_ids() == []


def test_gallery_rejects_non_image_upload(client: TestClient, auth_headers):
    response = client.post(
        "/api/gallery",
        data={"title": "Summit", "category": "Events"},
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Only image files are allowed" in response.json()["error"]


def test_gallery_rejects_oversized_upload(make_settings, auth_headers):
    app = create_app(make_settings(max_file_size=64))
    with TestClient(app) as client:
        response = client.post(
            "/api/gallery",
            data={"title": "Summit", "category": "Events"},
            files=png_file(),
            headers=auth_headers,
        )
        assert len(PNG_BYTES) > 64
        assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
        assert client.app.state.stores.blobs.list_ids() == []


@pytest.mark.parametrize("path", [f"/api/gallery/{MISSING_ID}", f"/api/news/{MISSING_ID}"])
def test_update_rejects_oversized_upload(make_settings, auth_headers, path):
    app = create_app(make_settings(max_file_size=64))
    with TestClient(app) as client:
        response = client.put(path, data={"title": "Summit"}, files=png_file(), headers=auth_headers)

        assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
        assert response.json() == {"error": "File too large. Maximum size is 64 bytes"}
        assert client.app.state.stores.blobs.list_ids() == []


@pytest.mark.parametrize("path", [
    f"/api/gallery/{MISSING_ID}",
    "/api/gallery/not-an-id",
    f"/api/gallery/image/{MISSING_ID}",
    "/api/gallery/image/not-an-id",
    f"/api/news/{MISSING_ID}",
    f"/api/news/image/{MISSING_ID}",
    f"/api/careers/{MISSING_ID}",
])
def test_missing_resources(client: TestClient, path):
    assert client.get(path).status_code == status.HTTP_404_NOT_FOUND


def test_gallery_image_not_found_message(client: TestClient):
    response = client.get(f"/api/gallery/image/{MISSING_ID}")
    assert response.json() == {"error": "Image not found in storage"}


def test_update_missing_gallery_item(client: TestClient, auth_headers):
    response = client.put(f"/api/gallery/{MISSING_ID}", data={"title": "x"}, headers=auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Gallery item not found"}


def test_unpublished_news_is_forbidden_anonymously(client: TestClient, auth_headers):
    created = client.post("/api/news", data={"title": "Draft", "content": "Body"}, headers=auth_headers).json()

    response = client.get(f"/api/news/{created['id']}")
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"error": "This news item is not published"}

    assert client.get(f"/api/news/{created['id']}", headers=auth_headers).status_code == status.HTTP_200_OK


def test_invalid_token_on_read_route_is_anonymous(client: TestClient, auth_headers):
    created = client.post("/api/news", data={"title": "Draft", "content": "Body"}, headers=auth_headers).json()

    response = client.get(f"/api/news/{created['id']}", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_career_validation(client: TestClient, auth_headers):
    missing = client.post("/api/careers", json={"title": "Analyst"}, headers=auth_headers)
    assert missing.status_code == status.HTTP_400_BAD_REQUEST
    assert missing.json() == {"error": "Title, location, type, and department are required"}

    bad_type = client.post("/api/careers", json={**SAMPLE_CAREER, "type": "Gig"}, headers=auth_headers)
    assert bad_type.status_code == status.HTTP_400_BAD_REQUEST

    bad_shape = client.post("/api/careers", json={**SAMPLE_CAREER, "requirements": "Excel"}, headers=auth_headers)
    assert bad_shape.status_code == status.HTTP_400_BAD_REQUEST


def test_unpublished_career_is_forbidden_anonymously(client: TestClient, auth_headers):
    created = client.post(
        "/api/careers", json={**SAMPLE_CAREER, "published": False}, headers=auth_headers
    ).json()

    response = client.get(f"/api/careers/{created['id']}")
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"error": "This career is not published"}
    assert client.get("/api/careers").json() == []


def test_unhandled_error_becomes_500(client: TestClient, monkeypatch):
    def broken_query(*args, **kwargs):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(client.app.state.stores.records, "query_documents", broken_query)

    response = client.get("/api/gallery")
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error"}


def test_unhandled_error_keeps_cors_headers(client: TestClient, monkeypatch):
    def broken_query(*args, **kwargs):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(client.app.state.stores.records, "query_documents", broken_query)

    response = client.get("/api/gallery", headers={"Origin": "http://localhost:3000"})
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
