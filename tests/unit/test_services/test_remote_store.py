"""Tests for the remote activity store client."""

import json
import httpx
import pytest
from promoterflow.models.remote import ActivityCreatePayload
from promoterflow.services.remote_store import RemoteActivityStore
from promoterflow.utils.errors import RemoteFailure
from tests.utils.factories import create_activity_row
from tests.utils.helpers import recording_transport

BASE_URL = "https://promoterflow.test/api"


def _store(responses, calls):
    client = httpx.AsyncClient(base_url=BASE_URL, transport=recording_transport(responses, calls))
    return RemoteActivityStore(base_url=BASE_URL, client=client)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_activities_gestor_sends_user():
    calls = []
    rows = [create_activity_row(row_id=1), create_activity_row(row_id=2)]
    store = _store({("GET", "/api/activities"): httpx.Response(200, json={"ok": True, "items": rows})}, calls)

    result = await store.list_activities("gestor", "p2")

    assert [r.id for r in result] == [1, 2]
    assert calls[0].url.params["role"] == "gestor"
    assert calls[0].url.params["user"] == "p2"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_activities_admin_omits_user():
    calls = []
    store = _store({("GET", "/api/activities"): httpx.Response(200, json={"ok": True, "items": []})}, calls)

    assert await store.list_activities("admin", "p1") == []
    assert "user" not in calls[0].url.params


@pytest.mark.unit
@pytest.mark.asyncio
async def test_non_2xx_raises_remote_failure_with_status():
    calls = []
    store = _store({("GET", "/api/activities"): httpx.Response(400, json={"error": "Missing user"})}, calls)

    with pytest.raises(RemoteFailure) as exc_info:
        await store.list_activities("gestor", "")

    assert exc_info.value.status_code == 400
    assert "Missing user" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_body_without_ok_raises():
    calls = []
    store = _store({("GET", "/api/activities"): httpx.Response(200, json={"items": []})}, calls)

    with pytest.raises(RemoteFailure):
        await store.list_activities("admin")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_non_json_body_raises():
    calls = []
    store = _store({("GET", "/api/activities"): httpx.Response(502, text="Bad Gateway")}, calls)

    with pytest.raises(RemoteFailure) as exc_info:
        await store.list_activities("admin")

    assert exc_info.value.status_code == 502


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transport_error_raises_remote_failure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
    store = RemoteActivityStore(base_url=BASE_URL, client=client)

    with pytest.raises(RemoteFailure) as exc_info:
        await store.list_activities("admin")

    assert exc_info.value.status_code is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_malformed_listing_raises_remote_failure():
    calls = []
    store = _store({("GET", "/api/activities"): httpx.Response(200, json={"ok": True, "items": [{"id": 1}]})}, calls)

    with pytest.raises(RemoteFailure):
        await store.list_activities("admin")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_activity_posts_payload():
    calls = []
    item = create_activity_row(row_id=55, created_by="p1", role="admin", assigned_to="p3")
    store = _store({("POST", "/api/activities"): httpx.Response(201, json={"ok": True, "item": item})}, calls)
    payload = ActivityCreatePayload(
        created_by="p1", role="admin", assigned_to="p3", objective="Visita", date="2026-02-01", status="Pendiente"
    )

    row = await store.create_activity(payload)

    assert row.id == 55
    body = json.loads(calls[0].content)
    assert body["created_by"] == "p1"
    assert body["assigned_to"] == "p3"
    assert body["objective"] == "Visita"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_add_observation():
    calls = []
    item = {"id": 1, "activity_id": 55, "created_by": "p1", "note": "ok"}
    store = _store({("POST", "/api/activity_observations"): httpx.Response(201, json={"ok": True, "item": item})}, calls)

    assert await store.add_observation(55, "p1", "ok") == item
    assert json.loads(calls[0].content) == {"activity_id": 55, "created_by": "p1", "note": "ok"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_promoter_endpoints():
    calls = []
    store = _store({
        ("GET", "/api/promoters"): httpx.Response(200, json={"ok": True, "items": [{"id": "p1"}]}),
        ("PUT", "/api/promoters"): httpx.Response(200, json={"ok": True, "item": {"id": "p2", "is_online": True}}),
    }, calls)

    assert await store.list_promoters() == [{"id": "p1"}]
    assert (await store.upsert_promoter({"id": "p2", "is_online": True}))["is_online"] is True
    assert [c.method for c in calls] == ["GET", "PUT"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_owned_client_is_closed():
    async with RemoteActivityStore(base_url=BASE_URL) as store:
        client = store._get_client()

    assert client.is_closed
    assert store._client is None
