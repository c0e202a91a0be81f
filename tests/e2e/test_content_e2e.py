"""
End-to-end scenarios through the HTTP API on the local backends:
admin login, content lifecycle, image download and cleanup.
"""

from fastapi import status
from fastapi.testclient import TestClient

from tests.fixtures.app_client import TEST_ADMIN_PASSWORD
from tests.fixtures.content_fixtures import JPEG_BYTES, PNG_BYTES, png_file


def login(client: TestClient) -> dict:
    response = client.post("/api/auth/login", json={"password": TEST_ADMIN_PASSWORD})
    assert response.status_code == status.HTTP_200_OK
    return {"Authorization": f"Bearer {response.json()['token']}"}


def test_gallery_lifecycle(client: TestClient):
    headers = login(client)

    created = client.post(
        "/api/gallery",
        data={"title": "Annual summit", "category": "Events", "description": "Opening keynote"},
        files={"image": ("summit.jpg", JPEG_BYTES, "image/jpeg")},
        headers=headers,
    )
    assert created.status_code == status.HTTP_201_CREATED
    item_id = created.json()["id"]
    image_url = created.json()["image_url"]

    # Public listing links to the uploaded bytes
    listing = client.get("/api/gallery").json()
    assert [i["id"] for i in listing] == [item_id]
    download = client.get(listing[0]["image_url"])
    assert download.status_code == status.HTTP_200_OK
    assert download.content == JPEG_BYTES
    assert download.headers["content-type"] == "image/jpeg"

    deleted = client.delete(f"/api/gallery/{item_id}", headers=headers)
    assert deleted.status_code == status.HTTP_200_OK

    assert client.get(f"/api/gallery/{item_id}").status_code == status.HTTP_404_NOT_FOUND
    assert client.get(image_url).status_code == status.HTTP_404_NOT_FOUND


def test_news_visibility(client: TestClient):
    headers = login(client)

    published = client.post(
        "/api/news",
        data={"title": "Partnership", "content": "Renewables", "published": "true"},
        headers=headers,
    ).json()
    draft = client.post(
        "/api/news",
        data={"title": "Outlook", "content": "Metals", "published": "false"},
        files=png_file("outlook.png"),
        headers=headers,
    ).json()

    anonymous = client.get("/api/news").json()
    assert [i["id"] for i in anonymous] == [published["id"]]
    assert all(i["published"] for i in anonymous)

    admin = client.get("/api/news", headers=headers).json()
    assert {i["id"] for i in admin} == {published["id"], draft["id"]}

    assert client.get(f"/api/news/{draft['id']}").status_code == status.HTTP_403_FORBIDDEN

    # Images stay reachable by id even while the article is a draft
    assert client.get(draft["image_url"]).content == PNG_BYTES

    client.put(f"/api/news/{draft['id']}", data={"published": "true"}, headers=headers)
    assert len(client.get("/api/news").json()) == 2


def test_cleanup_survives_blob_failures(client: TestClient):
    headers = login(client)
    for i in range(3):
        client.post(
            "/api/gallery",
            data={"title": f"item {i}", "category": "Office"},
            files=png_file(f"{i}.png"),
            headers=headers,
        )

    def broken_delete(blob_id):
        raise OSError("storage unavailable")

    client.app.state.stores.blobs.delete = broken_delete

    response = client.delete("/api/gallery/cleanup/all", headers=headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["deletedCount"] == 3
    assert client.get("/api/gallery").json() == []


def test_careers_lifecycle(client: TestClient):
    headers = login(client)

    created = client.post(
        "/api/careers",
        json={
            "title": "Risk Associate",
            "location": "Singapore",
            "type": "Contract",
            "department": "Risk",
            "requirements": ["FRM", "Python", "FRM"],
        },
        headers=headers,
    )
    career_id = created.json()["id"]

    assert client.get("/api/careers").json() == []
    assert client.get(f"/api/careers/{career_id}").status_code == status.HTTP_403_FORBIDDEN

    client.put(f"/api/careers/{career_id}", json={"published": True}, headers=headers)

    careers = client.get("/api/careers").json()
    assert [c["id"] for c in careers] == [career_id]
    assert careers[0]["requirements"] == ["FRM", "Python", "FRM"]
    assert careers[0]["type"] == "Contract"
