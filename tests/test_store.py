"""Tests de l'adaptateur de stockage / Record store tests."""

import pytest

from fleetops.constants import DIESEL_NORMS, SYSTEM_COST_RATES, TRIPS
from fleetops.schemas.common import Currency
from fleetops.schemas.diesel import DieselNorm
from fleetops.schemas.trip import Trip
from fleetops.services.configuration import ConfigurationStore
from fleetops.services.ingestion import IngestionService


@pytest.mark.asyncio
async def test_upsert_merges_by_default(store):
    await store.upsert(TRIPS, "t1", {"clientName": "Acme", "baseRevenue": 100})
    merged = await store.upsert(TRIPS, "t1", {"baseRevenue": 250})
    assert merged == {"id": "t1", "clientName": "Acme", "baseRevenue": 250}


@pytest.mark.asyncio
async def test_upsert_replace(store):
    await store.upsert(TRIPS, "t1", {"clientName": "Acme", "baseRevenue": 100})
    replaced = await store.upsert(TRIPS, "t1", {"id": "t1", "route": "JHB-CPT"}, merge=False)
    assert "clientName" not in replaced
    assert replaced["route"] == "JHB-CPT"


@pytest.mark.asyncio
async def test_list_keeps_insertion_order(store):
    for doc_id in ("b", "a", "c"):
        await store.upsert(TRIPS, doc_id, {"clientName": doc_id})
    assert [d["id"] for d in await store.list_collection(TRIPS)] == ["b", "a", "c"]
    assert await store.list_collection("unknown") == []


@pytest.mark.asyncio
async def test_snapshots_are_copies(store):
    await store.upsert(TRIPS, "t1", {"costs": []})
    snapshot = await store.get(TRIPS, "t1")
    snapshot["costs"].append({"id": "x"})
    assert (await store.get(TRIPS, "t1"))["costs"] == []


@pytest.mark.asyncio
async def test_load_skips_malformed_documents(store):
    await store.upsert(TRIPS, "good", {"clientName": "Acme"})
    await store.upsert(TRIPS, "bad", {"baseRevenue": "not a number"})
    trips = await store.load(TRIPS, Trip)
    assert [t.id for t in trips] == ["good"]


@pytest.mark.asyncio
async def test_modify_and_delete(store):
    await store.upsert(TRIPS, "t1", {"baseRevenue": 100})
    updated = await store.modify(TRIPS, "t1", lambda d: {**d, "baseRevenue": d["baseRevenue"] * 2})
    assert updated["baseRevenue"] == 200
    assert await store.modify(TRIPS, "missing", lambda d: d) is None
    assert await store.delete(TRIPS, "t1") is True
    assert await store.delete(TRIPS, "t1") is False
    assert await store.get(TRIPS, "t1") is None


@pytest.mark.asyncio
async def test_modify_aborts_on_error(store):
    await store.upsert(TRIPS, "t1", {"baseRevenue": 100})

    def _fail(doc):
        raise ValueError("nope")

    with pytest.raises(ValueError):
        await store.modify(TRIPS, "t1", _fail)
    assert (await store.get(TRIPS, "t1"))["baseRevenue"] == 100


@pytest.mark.asyncio
async def test_change_listener_receives_snapshot(store):
    received = []
    unsubscribe = store.on_change(TRIPS, received.append)
    await store.upsert(TRIPS, "t1", {"clientName": "Acme"})
    unsubscribe()
    await store.upsert(TRIPS, "t2", {"clientName": "Other"})
    assert len(received) == 1
    assert received[0][0]["clientName"] == "Acme"


@pytest.mark.asyncio
async def test_subscribe_yields_current_state_then_changes(store):
    await store.upsert(TRIPS, "t1", {"clientName": "Acme"})
    stream = store.subscribe(TRIPS)
    first = await stream.__anext__()
    assert [d["id"] for d in first] == ["t1"]
    await store.upsert(TRIPS, "t2", {"clientName": "Other"})
    second = await stream.__anext__()
    assert [d["id"] for d in second] == ["t1", "t2"]
    await stream.aclose()


@pytest.mark.asyncio
async def test_batch_import_merges(store):
    await store.upsert(TRIPS, "a", {"clientName": "Acme", "route": "JHB-DBN"})
    result = await IngestionService.import_batch(
        store, TRIPS, [{"id": "a", "clientName": "Acme Ltd"}, {"id": "b"}, {"clientName": "no id"}],
    )
    assert result.inserted == 2
    assert result.errors == 1
    merged = await store.get(TRIPS, "a")
    assert merged["clientName"] == "Acme Ltd"
    assert merged["route"] == "JHB-DBN"


@pytest.mark.asyncio
async def test_seed_defaults_is_idempotent(store):
    config = ConfigurationStore(store)
    await config.seed_defaults()
    await config.seed_defaults()
    assert len(await store.list_collection(DIESEL_NORMS)) == 3
    assert len(await store.list_collection(SYSTEM_COST_RATES)) == 2
    zar = await config.get_cost_rates(Currency.ZAR)
    assert zar.per_km_costs.repair_maintenance == 2.5


@pytest.mark.asyncio
async def test_replace_norms_last_per_fleet_wins(store):
    config = ConfigurationStore(store)
    await config.save_norm(DieselNorm(fleet_number="31H", expected_km_per_litre=2.8))
    norms = await config.replace_norms([
        DieselNorm(fleet_number="6H", expected_km_per_litre=3.0),
        DieselNorm(fleet_number="6H", expected_km_per_litre=3.3),
    ])
    assert [(n.fleet_number, n.expected_km_per_litre) for n in norms] == [("6H", 3.3)]
