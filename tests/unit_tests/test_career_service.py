import pytest

from content_api.errors import Forbidden, NotFound, ValidationError
from content_api.services import CareerService
from tests.fixtures.content_fixtures import MISSING_ID, SAMPLE_CAREER


@pytest.fixture
def service(records):
    return CareerService(records)


def test_create_and_get(service):
    item = service.create_item(dict(SAMPLE_CAREER))

    stored = service.get_item(item["id"])
    assert stored["type"] == "Full-time"
    assert stored["requirements"] == ["3+ years experience", "Excel"]
    assert stored["responsibilities"] == ["Write weekly notes", "Support the desk"]
    assert stored["salary_range"] == "GBP 60k-80k"
    assert stored["published"] is True


def test_create_defaults(service):
    item = service.create_item({"title": "Intern", "location": "Remote", "type": "Internship", "department": "Ops"})

    stored = service.get_item(item["id"])
    assert stored["description"] == ""
    assert stored["requirements"] == []
    assert stored["salary_range"] == ""
    assert stored["published"] is False


@pytest.mark.parametrize("missing", ["title", "location", "type", "department"])
def test_create_requires_fields(service, missing):
    fields = dict(SAMPLE_CAREER)
    fields[missing] = None
    with pytest.raises(ValidationError, match="Title, location, type, and department are required"):
        service.create_item(fields)


def test_create_rejects_unknown_type(service):
    with pytest.raises(ValidationError, match="Type must be one of"):
        service.create_item({**SAMPLE_CAREER, "type": "Freelance"})


def test_visibility(service):
    live = service.create_item({**SAMPLE_CAREER, "title": "live"})
    draft = service.create_item({**SAMPLE_CAREER, "title": "draft", "published": False})

    assert [i["title"] for i in service.list_items()] == ["live"]
    assert len(service.list_items(include_unpublished=True)) == 2
    assert service.get_item(live["id"], include_unpublished=False)["title"] == "live"
    with pytest.raises(Forbidden, match="This career is not published"):
        service.get_item(draft["id"], include_unpublished=False)


def test_partial_update_keeps_other_fields(service):
    item = service.create_item(dict(SAMPLE_CAREER))

    updated = service.update_item(item["id"], {"location": "Singapore", "requirements": ["CFA"]})

    assert updated["location"] == "Singapore"
    assert updated["requirements"] == ["CFA"]
    assert updated["responsibilities"] == SAMPLE_CAREER["responsibilities"]
    assert updated["title"] == SAMPLE_CAREER["title"]


def test_update_validates(service):
    item = service.create_item(dict(SAMPLE_CAREER))

    with pytest.raises(ValidationError):
        service.update_item(item["id"], {"type": "Gig"})
    with pytest.raises(ValidationError):
        service.update_item(item["id"], {"title": ""})


def test_update_and_delete_missing(service):
    with pytest.raises(NotFound, match="Career not found"):
        service.update_item(MISSING_ID, {"title": "x"})
    with pytest.raises(NotFound, match="Career not found"):
        service.delete_item("malformed")
