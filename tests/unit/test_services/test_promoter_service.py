"""Tests for promoter management."""

import logging
import pytest
from freezegun import freeze_time
from unittest.mock import Mock
from promoterflow.models.promoter import Location, Promoter, UserRole
from promoterflow.services.local_store import PROMOTERS, LocalStore
from promoterflow.services.promoters import PromoterService, profile_payload, promoter_from_row
from promoterflow.utils.errors import PromoterConflict, RemoteFailure, StorageError


@pytest.fixture(autouse=True)
def info_logging(caplog):
    caplog.set_level(logging.INFO)


def _ids(store):
    return [p.id for p in store.get(PROMOTERS)]


@pytest.mark.unit
@freeze_time("2026-02-01 12:00:00")
def test_add_prepends_and_persists(local_store, memory_storage):
    service = PromoterService(local_store)

    added = service.add({"id": "p4", "name": "Lucía Torres", "zone": "Norte"})

    assert _ids(local_store) == ["p4", "p1", "p2", "p3"]
    assert added.role == UserRole.FIELD_PROMOTER
    assert added.last_updated == "2026-02-01T12:00:00+00:00"
    assert _ids(LocalStore(memory_storage))[0] == "p4"


@pytest.mark.unit
def test_add_duplicate_id_is_rejected(local_store):
    service = PromoterService(local_store)

    with pytest.raises(PromoterConflict):
        service.add(Promoter(id="p2", name="Otra Elena"))

    assert _ids(local_store) == ["p1", "p2", "p3"]
    assert service.get("p2").name == "Elena Rodríguez"


@pytest.mark.unit
def test_update_profile_merges_only_target(local_store):
    service = PromoterService(local_store)
    before = {p.id: p for p in local_store.get(PROMOTERS)}

    updated = service.update_profile("p3", {"id": "hijack", "phone": "+56 9 1234 5678", "zone": "Sur"})

    assert updated.id == "p3"
    assert updated.phone == "+56 9 1234 5678"
    assert updated.last_updated is not None
    after = {p.id: p for p in local_store.get(PROMOTERS)}
    assert after["p3"].zone == "Sur"
    assert after["p2"] == before["p2"]
    assert _ids(local_store) == ["p1", "p2", "p3"]


@pytest.mark.unit
def test_update_profile_unknown_id(local_store):
    before = local_store.get(PROMOTERS)

    assert PromoterService(local_store).update_profile("p99", {"name": "Nadie"}) is None
    assert local_store.get(PROMOTERS) == before


@pytest.mark.unit
def test_delete(local_store):
    service = PromoterService(local_store)

    assert service.delete("p3") is True
    assert service.delete("p3") is False
    assert _ids(local_store) == ["p1", "p2"]


@pytest.mark.unit
def test_visible_for(local_store):
    service = PromoterService(local_store)

    assert [p.id for p in service.visible_for(UserRole.ADMIN, "p1")] == ["p1", "p2", "p3"]
    assert [p.id for p in service.visible_for("FIELD_PROMOTER", "p2")] == ["p2"]


@pytest.mark.unit
def test_profile_payload_uses_remote_vocabulary():
    payload = profile_payload(Promoter(id="p1", name="Carlos", role=UserRole.ADMIN, is_online=True))

    assert payload["role"] == "admin"
    assert payload["isOnline"] is True
    assert profile_payload(Promoter(id="p2", name="Elena"))["role"] == "gestor"


@pytest.mark.unit
def test_promoter_from_row_keeps_local_only_fields():
    existing = Promoter(id="p2", name="Elena", zone="Norte", last_location=Location(lat=-33.4, lng=-70.6))

    promoter = promoter_from_row(
        {"id": "p2", "name": "Elena Rodríguez", "role": "gestor", "is_online": None, "updated_at": "2026-02-01"},
        existing,
    )

    assert promoter.name == "Elena Rodríguez"
    assert promoter.zone == "Norte"
    assert promoter.last_location.lat == -33.4
    assert promoter.is_online is False
    assert promoter.last_updated == "2026-02-01"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_push_profile_sends_upsert(local_store, mock_remote):
    service = PromoterService(local_store, mock_remote)

    assert await service.push_profile("p2") is True

    body = mock_remote.upsert_promoter.await_args.args[0]
    assert body["id"] == "p2"
    assert body["role"] == "gestor"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_push_profile_failure_and_unknown_id(local_store, mock_remote):
    mock_remote.upsert_promoter.side_effect = RemoteFailure("server error", status_code=500)
    service = PromoterService(local_store, mock_remote)

    assert await service.push_profile("p2") is False
    assert await service.push_profile("p99") is False
    assert await PromoterService(local_store).push_profile("p2") is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_refresh_merges_remote_rows_first(local_store, mock_remote):
    mock_remote.list_promoters.return_value = [
        {"id": "p5", "name": "Nueva Gestora", "role": "gestor", "is_online": True},
        {"id": "p2", "name": "Elena R.", "role": "gestor", "phone": "555"},
        {"id": "p1", "name": "Carlos Mendoza", "role": "admin"},
    ]
    service = PromoterService(local_store, mock_remote)

    assert await service.refresh() is True

    assert _ids(local_store) == ["p5", "p2", "p1", "p3"]
    assert service.get("p5").is_online is True
    assert service.get("p2").name == "Elena R."
    assert service.get("p2").phone == "555"
    assert service.get("p1").role == UserRole.ADMIN


@pytest.mark.unit
@pytest.mark.asyncio
async def test_refresh_failure_keeps_local(local_store, mock_remote):
    before = local_store.get(PROMOTERS)
    mock_remote.list_promoters.side_effect = RemoteFailure("connection refused")

    assert await PromoterService(local_store, mock_remote).refresh() is False
    assert local_store.get(PROMOTERS) == before


@pytest.mark.unit
@pytest.mark.asyncio
async def test_refresh_row_without_id_keeps_local(local_store, mock_remote):
    before = local_store.get(PROMOTERS)
    mock_remote.list_promoters.return_value = [{"name": "Sin id"}]

    assert await PromoterService(local_store, mock_remote).refresh() is False
    assert local_store.get(PROMOTERS) == before


@pytest.mark.unit
@pytest.mark.asyncio
async def test_refresh_local_write_failure(local_store, mock_remote, memory_storage, monkeypatch):
    before = local_store.get(PROMOTERS)
    mock_remote.list_promoters.return_value = [{"id": "p5", "name": "Nueva"}]
    monkeypatch.setattr(memory_storage, "write", Mock(side_effect=StorageError("disk full")))

    assert await PromoterService(local_store, mock_remote).refresh() is False
    assert local_store.get(PROMOTERS) == before
