"""Unit tests for the HttpSubjectApiClient."""

import json

import httpx
import pytest

from subject_sync.application.schemas import SubjectCreate, SubjectUpdate
from subject_sync.domain.exceptions import RemoteApiError
from subject_sync.infrastructure.api import HttpSubjectApiClient
from subject_sync.infrastructure.dependencies import build_subjects_controller


# ── Helpers ──


def _subject_json(subject_id: str = "s1", name: str = "Ada") -> dict:
    return {
        "id": subject_id,
        "name": name,
        "birth_datetime": "1815-12-10T08:00:00.000Z",
        "city": "London",
        "nation": "GB",
        "latitude": 51.5,
        "longitude": -0.12,
        "timezone": "Europe/London",
        "rodens_rating": "AA",
        "tags": ["math"],
        "notes": None,
        "created_at": "2024-01-01T10:00:00+00:00",
        "updated_at": "2024-01-01T10:00:00+00:00",
        "owner_id": "ignored",
    }


def _make_client(handler, **kwargs) -> HttpSubjectApiClient:
    transport = httpx.MockTransport(handler)
    return HttpSubjectApiClient(
        base_url="http://subjects.test/",
        api_token=kwargs.pop("api_token", "secret"),
        owner_id=kwargs.pop("owner_id", "owner-1"),
        http_client=httpx.AsyncClient(transport=transport),
        **kwargs,
    )


def _create_payload() -> SubjectCreate:
    return SubjectCreate(name="Ada", city="London", nation="GB", birthDate="1815-12-10", birthTime="08:00:00")


# ── Tests ──


@pytest.mark.asyncio
async def test_list_subjects_sends_count_and_headers():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json=[_subject_json("s1"), _subject_json("s2", "Bob")])

    subjects = await _make_client(handler).list_subjects(50)

    request = captured["request"]
    assert request.method == "GET"
    assert request.url.path == "/api/v1/subjects"
    assert request.url.params["count"] == "50"
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.headers["X-Owner-Id"] == "owner-1"
    assert [s.id for s in subjects] == ["s1", "s2"]
    assert subjects[0].tags == ("math",)
    assert subjects[0].created_at.year == 2024


@pytest.mark.asyncio
async def test_create_posts_payload():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(201, json=_subject_json("srv-1"))

    created = await _make_client(handler).create(_create_payload())

    assert created.id == "srv-1"
    assert captured["body"]["name"] == "Ada"
    assert captured["body"]["birth_date"] == "1815-12-10T00:00:00.000Z"
    assert captured["body"]["birth_time"] == "08:00:00"


@pytest.mark.asyncio
async def test_update_puts_only_provided_fields():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_subject_json("s1", "Renamed"))

    patch = SubjectUpdate(id="s1", name="Renamed", city="London", nation="GB")
    updated = await _make_client(handler).update("s1", patch)

    assert updated.name == "Renamed"
    assert captured["method"] == "PUT"
    assert captured["path"] == "/api/v1/subjects/s1"
    assert captured["body"] == {"id": "s1", "name": "Renamed", "city": "London", "nation": "GB"}


@pytest.mark.asyncio
async def test_delete_and_bulk_delete():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1]})
        body = json.loads(request.content)
        return httpx.Response(200, json={"count": len(body["ids"])})

    client = _make_client(handler)
    assert (await client.delete("s1")).id == "s1"
    assert (await client.delete_many(["a", "b"])).count == 2


@pytest.mark.asyncio
async def test_delete_with_empty_response_uses_requested_id():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    assert (await _make_client(handler).delete("s1")).id == "s1"


@pytest.mark.asyncio
async def test_import_subjects():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/subjects/import"
        rows = json.loads(request.content)
        return httpx.Response(200, json={"created": len(rows), "skipped": 0, "failed": 0, "errors": []})

    result = await _make_client(handler).import_subjects([_create_payload(), _create_payload()])
    assert result.created == 2


@pytest.mark.asyncio
async def test_error_detail_string_becomes_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Subject with id 's1' not found"})

    with pytest.raises(RemoteApiError) as exc_info:
        await _make_client(handler).delete("s1")

    assert exc_info.value.status_code == 404
    assert str(exc_info.value) == "Subject with id 's1' not found"


@pytest.mark.asyncio
async def test_validation_detail_list_is_joined():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422,
            json={
                "detail": [
                    {"loc": ["body", "name"], "msg": "String should have at least 1 character"},
                    {"loc": ["body", "city"], "msg": "Field required"},
                ]
            },
        )

    with pytest.raises(RemoteApiError) as exc_info:
        await _make_client(handler).create(_create_payload())

    assert str(exc_info.value) == (
        "name: String should have at least 1 character; city: Field required"
    )


@pytest.mark.asyncio
async def test_non_json_error_falls_back_to_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, content=b"")

    with pytest.raises(RemoteApiError, match="Request failed with status 500"):
        await _make_client(handler).list_subjects()


@pytest.mark.asyncio
async def test_transport_errors_become_network_errors():
    def timeout_handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    def refused_handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(RemoteApiError, match="request timed out") as exc_info:
        await _make_client(timeout_handler).list_subjects()
    assert exc_info.value.status_code == 0

    with pytest.raises(RemoteApiError, match="Network error: Connection refused"):
        await _make_client(refused_handler).delete("s1")


@pytest.mark.asyncio
async def test_headers_without_token_or_owner():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["headers"] = request.headers
        return httpx.Response(200, json=[])

    await _make_client(handler, api_token="", owner_id=None).list_subjects()

    assert "Authorization" not in captured["headers"]
    assert "X-Owner-Id" not in captured["headers"]


@pytest.mark.asyncio
async def test_controller_built_from_settings_uses_http_client():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_subject_json("s1")])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        controller = build_subjects_controller(http_client, owner_id="owner-9")
        await controller.load()

    assert [s.id for s in controller.subjects] == ["s1"]
    assert seen[0].url.path == "/api/v1/subjects"
    assert seen[0].url.params["count"] == "50"
    assert seen[0].headers["X-Owner-Id"] == "owner-9"
