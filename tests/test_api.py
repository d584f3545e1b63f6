"""Tests API / API tests."""

import io

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook
from starlette.websockets import WebSocketDisconnect

from fleetops.constants import DRIVER_BEHAVIOR, MISSED_LOADS, TRIPS
from fleetops.main import app
from fleetops.services.configuration import ConfigurationStore
from fleetops.services.record_store import StoreError

TRIP = {
    "fleetNumber": "6H",
    "clientName": "Acme",
    "driverName": "Sam",
    "route": "JHB-CPT",
    "startDate": "2024-01-01",
    "endDate": "2024-01-04",
    "distanceKm": 1000,
    "baseRevenue": 10000,
    "revenueCurrency": "ZAR",
}

REEFER_FILL = {
    "fleetNumber": "6F",
    "date": "2024-03-01",
    "litresFilled": 100,
    "totalCost": 2000,
    "currency": "ZAR",
    "hoursOperated": 25,
    "isReeferUnit": True,
}


async def _create_trip(client, **overrides) -> dict:
    resp = await client.post("/api/trips/", json={**TRIP, **overrides})
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    assert "X-Request-ID" in resp.headers


@pytest.mark.asyncio
async def test_api_health(client):
    resp = await client.get("/api/")
    assert resp.status_code == 200


# ─── Webhooks ───

@pytest.mark.asyncio
async def test_driver_behavior_webhook(client, store):
    events = [
        {"id": "e1", "driverName": "Sam", "eventDate": "2024-02-01", "eventType": "speeding", "severity": "high"},
        {"driverName": "No Id"},
        {"id": "   "},
    ]
    resp = await client.post("/importDriverBehaviorWebhook", json=events)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "inserted": 1, "errors": 2}
    assert (await store.get(DRIVER_BEHAVIOR, "e1"))["driverName"] == "Sam"


@pytest.mark.asyncio
async def test_trips_webhook_merges_existing(client, store):
    await store.upsert(TRIPS, "t1", {"clientName": "Acme", "route": "JHB-DBN"})
    resp = await client.post("/importTripsFromWebBook", json=[{"id": "t1", "baseRevenue": 5000}])
    assert resp.status_code == 200
    assert resp.json()["inserted"] == 1
    merged = await store.get(TRIPS, "t1")
    assert merged["route"] == "JHB-DBN"
    assert merged["baseRevenue"] == 5000


@pytest.mark.asyncio
async def test_trips_webhook_normalizes_ids(client):
    resp = await client.post("/importTripsFromWebBook", json=[{"id": 5}, {"id": " t9 "}])
    assert resp.json()["inserted"] == 2

    listed = (await client.get("/api/trips/")).json()
    assert sorted(t["id"] for t in listed) == ["5", "t9"]

    resp = await client.get("/api/trips/5")
    assert resp.status_code == 200
    assert resp.json()["id"] == "5"
    resp = await client.get("/api/trips/t9")
    assert resp.status_code == 200
    assert resp.json()["id"] == "t9"


@pytest.mark.asyncio
async def test_webhook_rejects_non_array(client):
    resp = await client.post("/importTripsFromWebBook", json={"id": "t1"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Payload must be an array of trips."}

    resp = await client.post(
        "/importDriverBehaviorWebhook", content=b"not json", headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Payload must be an array of events."}


@pytest.mark.asyncio
async def test_webhook_method_not_allowed(client):
    resp = await client.get("/importDriverBehaviorWebhook")
    assert resp.status_code == 405


@pytest.mark.asyncio
async def test_webhook_store_failure(client, store, monkeypatch):
    async def _fail(*args, **kwargs):
        raise StoreError("database is locked")

    monkeypatch.setattr(store, "upsert_many", _fail)
    resp = await client.post("/importTripsFromWebBook", json=[{"id": "t1"}])
    assert resp.status_code == 500
    assert resp.json() == {"error": "database is locked"}


# ─── Voyages / Trips ───

@pytest.mark.asyncio
async def test_trip_lifecycle_flow(client):
    trip = await _create_trip(client)
    assert trip["status"] == "active"
    assert trip["clientName"] == "Acme"

    resp = await client.post(f"/api/trips/{trip['id']}/invoice", json={
        "invoiceNumber": "INV-1", "invoiceDate": "2024-01-05", "invoiceDueDate": "2024-02-05",
    })
    assert resp.status_code == 400

    resp = await client.post(f"/api/trips/{trip['id']}/complete")
    assert resp.json()["status"] == "completed"

    resp = await client.post(f"/api/trips/{trip['id']}/invoice", json={
        "invoiceNumber": "INV-1", "invoiceDate": "2024-01-05", "invoiceDueDate": "2024-02-05",
    })
    assert resp.status_code == 200
    assert resp.json()["status"] == "invoiced"

    resp = await client.get("/api/trips/aging", params={"as_of": "2024-02-10"})
    assert resp.status_code == 200
    aging = resp.json()
    assert aging["buckets"]["ZAR"]["overdue"]["count"] == 1
    assert aging["followUpsRequired"] == 1

    resp = await client.post(f"/api/trips/{trip['id']}/follow-ups", json={"followUpDate": "2024-02-01"})
    assert resp.status_code == 201
    aging = (await client.get("/api/trips/aging", params={"as_of": "2024-02-10"})).json()
    assert aging["followUpsRequired"] == 0

    resp = await client.put(f"/api/trips/{trip['id']}/payment", json={"paymentStatus": "paid", "paymentAmount": 10000})
    assert resp.json()["status"] == "paid"
    aging = (await client.get("/api/trips/aging", params={"as_of": "2024-02-10"})).json()
    assert aging["invoices"] == []

    resp = await client.post(f"/api/trips/{trip['id']}/reopen")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_trip_not_found(client):
    resp = await client.get("/api/trips/missing")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_trip_list_filters(client):
    await _create_trip(client)
    await _create_trip(client, fleetNumber="26H", startDate="2024-02-01", endDate="2024-02-03")
    resp = await client.get("/api/trips/", params={"fleet_number": "26H"})
    assert [t["fleetNumber"] for t in resp.json()] == ["26H"]
    resp = await client.get("/api/trips/", params={"fleet_number": "99Z"})
    assert resp.json() == []


@pytest.mark.asyncio
async def test_cost_entries_and_system_costs(client, store):
    await ConfigurationStore(store).seed_defaults()
    trip = await _create_trip(client)

    resp = await client.post(f"/api/trips/{trip['id']}/costs", json={"category": "Tolls", "amount": 350})
    assert resp.status_code == 201
    cost = resp.json()
    resp = await client.put(f"/api/trips/{trip['id']}/costs/{cost['id']}", json={"amount": 400, "isFlagged": True})
    assert resp.json()["amount"] == 400

    for _ in range(2):
        resp = await client.post(f"/api/trips/{trip['id']}/system-costs")
        assert resp.status_code == 200
    costs = resp.json()["costs"]
    assert len([c for c in costs if c.get("isSystemGenerated")]) == 10
    assert len(costs) == 11

    resp = await client.get(f"/api/trips/{trip['id']}/profitability")
    assert resp.status_code == 200
    assert resp.json()["totalCosts"] == pytest.approx(sum(c["amount"] for c in costs))

    resp = await client.get(f"/api/trips/{trip['id']}/costs/summary")
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["totalEntries"] == 11
    assert summary["flaggedEntries"] == 1
    assert summary["systemGeneratedEntries"] == 10
    assert summary["totalZar"] == pytest.approx(sum(c["amount"] for c in costs))
    assert summary["totalUsd"] == 0

    resp = await client.delete(f"/api/trips/{trip['id']}/costs/{cost['id']}")
    assert resp.status_code == 204

    resp = await client.get("/api/trips/missing/costs/summary")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_system_costs_without_rates(client):
    trip = await _create_trip(client, revenueCurrency="USD")
    resp = await client.post(f"/api/trips/{trip['id']}/system-costs")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_trip_export_csv(client):
    await _create_trip(client)
    resp = await client.get("/api/trips/export", params={"format": "csv"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "client_name" in resp.text
    assert "Acme" in resp.text


# ─── Diesel ───

@pytest.mark.asyncio
async def test_reefer_fill_requires_debrief(client):
    resp = await client.put("/api/diesel-norms/6F", json={
        "litresPerHour": 3.5, "isReeferUnit": True, "tolerancePercentage": 10,
    })
    assert resp.status_code == 200

    resp = await client.post("/api/diesel/", json=REEFER_FILL)
    assert resp.status_code == 201
    fill = resp.json()
    assert fill["litresPerHour"] == 4.0
    assert fill["performanceStatus"] == "poor"
    assert fill["requiresDebrief"] is True

    pending = (await client.get("/api/diesel/debriefs")).json()
    assert [f["id"] for f in pending] == [fill["id"]]

    resp = await client.post(f"/api/diesel/{fill['id']}/debrief", json={
        "debriefDate": "2024-03-02", "debriefNotes": "Door left open", "debriefSignedBy": "Ops",
    })
    assert resp.status_code == 200
    assert (await client.get("/api/diesel/debriefs")).json() == []


@pytest.mark.asyncio
async def test_diesel_export_xlsx(client):
    await client.post("/api/diesel/", json=REEFER_FILL)
    resp = await client.get("/api/diesel/export")
    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == "attachment; filename=diesel.xlsx"

    sheet = load_workbook(io.BytesIO(resp.content)).active
    assert sheet.title == "Diesel"
    header = [c.value for c in sheet[1]]
    row = dict(zip(header, (c.value for c in sheet[2])))
    assert header[:3] == ["id", "fleet_number", "date"]
    assert row["fleet_number"] == "6F"
    assert row["requires_debrief"] == "false"


@pytest.mark.asyncio
async def test_diesel_summary(client):
    await client.post("/api/diesel/", json=REEFER_FILL)
    await client.post("/api/diesel/", json={**REEFER_FILL, "currency": "USD", "totalCost": 150})
    await client.post("/api/diesel/", json={**REEFER_FILL, "currency": None, "totalCost": 500})
    summary = (await client.get("/api/diesel/summary")).json()
    assert summary["totalRecords"] == 3
    assert summary["totalCostZar"] == 2500
    assert summary["totalCostUsd"] == 150


@pytest.mark.asyncio
async def test_diesel_allocation(client):
    trip = await _create_trip(client)
    other = await _create_trip(client)
    fill = (await client.post("/api/diesel/", json=REEFER_FILL)).json()

    resp = await client.post(f"/api/diesel/{fill['id']}/allocate/{trip['id']}")
    assert resp.status_code == 200
    assert resp.json()["tripId"] == trip["id"]
    costs = (await client.get(f"/api/trips/{trip['id']}")).json()["costs"]
    assert [c["referenceNumber"] for c in costs] == [f"DIESEL-{fill['id']}"]

    resp = await client.post(f"/api/diesel/{fill['id']}/allocate/{other['id']}")
    assert resp.status_code == 409

    resp = await client.post(f"/api/diesel/{fill['id']}/unallocate")
    assert resp.status_code == 200
    assert resp.json().get("tripId") is None
    assert (await client.get(f"/api/trips/{trip['id']}")).json()["costs"] == []


@pytest.mark.asyncio
async def test_diesel_import_csv(client):
    content = "fleet_number;date;litres_filled;total_cost;currency\n6H;2024-03-01;200;4000;ZAR\n".encode()
    resp = await client.post("/api/imports/diesel", files={"file": ("diesel.csv", content, "text/csv")})
    assert resp.status_code == 200
    assert resp.json() == {"created": 1, "errors": [], "total_rows": 1}
    fills = (await client.get("/api/diesel/")).json()
    assert fills[0]["fleetNumber"] == "6H"


@pytest.mark.asyncio
async def test_import_unknown_entity(client):
    resp = await client.post("/api/imports/users", files={"file": ("u.csv", b"a;b\n1;2\n", "text/csv")})
    assert resp.status_code == 400


# ─── Chauffeurs / Drivers ───

@pytest.mark.asyncio
async def test_driver_events_and_performance(client):
    resp = await client.post("/api/driver-behavior/events", json={
        "driverName": "Sam", "eventDate": "2024-02-01", "eventType": "speeding", "severity": "high",
    })
    assert resp.status_code == 201
    event = resp.json()
    assert event["points"] == 10

    perf = (await client.get("/api/driver-behavior/performance/Sam")).json()
    assert perf["behaviorScore"] == 90

    await client.put(f"/api/driver-behavior/events/{event['id']}", json={"severity": "low"})
    perf = (await client.get("/api/driver-behavior/performance")).json()
    assert perf[0]["behaviorScore"] == 98
    assert perf[0]["totalPoints"] == 10


@pytest.mark.asyncio
async def test_car_report_links_event(client):
    event = (await client.post("/api/driver-behavior/events", json={
        "driverName": "Sam", "eventDate": "2024-02-01", "eventType": "accident", "severity": "critical",
    })).json()
    resp = await client.post("/api/car-reports/", json={
        "reportNumber": "CAR-1", "responsiblePerson": "Ops", "referenceEventId": event["id"],
    })
    assert resp.status_code == 201
    report = resp.json()
    linked = (await client.get(f"/api/driver-behavior/events/{event['id']}")).json()
    assert linked["carReportId"] == report["id"]

    assert (await client.delete(f"/api/car-reports/{report['id']}")).status_code == 204
    unlinked = (await client.get(f"/api/driver-behavior/events/{event['id']}")).json()
    assert unlinked.get("carReportId") is None


# ─── Actions / Action items ───

@pytest.mark.asyncio
async def test_action_item_comments(client):
    resp = await client.post("/api/action-items/", json={
        "title": "Replace tyres", "responsiblePerson": "Ops", "startDate": "2024-01-01", "dueDate": "2024-01-10",
    })
    assert resp.status_code == 201
    item = resp.json()

    resp = await client.post(f"/api/action-items/{item['id']}/comments", json={"comment": "Quote received"})
    assert resp.status_code == 201

    resp = await client.put(f"/api/action-items/{item['id']}", json={"status": "completed"})
    updated = resp.json()
    assert updated["status"] == "completed"
    assert updated["completedAt"] is not None
    assert len(updated["comments"]) == 1


# ─── Chargements manques / Missed loads ───

@pytest.mark.asyncio
async def test_missed_load_crud(client, store):
    created = []
    for customer, requested in (("Acme", "2024-03-01"), ("Globex", "2024-03-08")):
        resp = await client.post("/api/missed-loads/", json={
            "customerName": customer, "loadRequestDate": requested, "reason": "no_vehicle",
            "estimatedRevenue": 12000, "source": "phone",
        })
        assert resp.status_code == 201
        created.append(resp.json())
    acme = created[0]
    assert acme["resolutionStatus"] == "pending"
    assert acme["recordedBy"] == "Current User"
    assert (await store.get(MISSED_LOADS, acme["id"]))["source"] == "phone"

    listed = (await client.get("/api/missed-loads/")).json()
    assert [m["customerName"] for m in listed] == ["Globex", "Acme"]

    resp = await client.put(f"/api/missed-loads/{acme['id']}", json={
        "resolutionStatus": "rescheduled", "resolutionNotes": "Moved to next week",
    })
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["resolutionStatus"] == "rescheduled"
    assert updated["estimatedRevenue"] == 12000

    pending = (await client.get("/api/missed-loads/", params={"resolution_status": "pending"})).json()
    assert [m["customerName"] for m in pending] == ["Globex"]

    resp = await client.delete(f"/api/missed-loads/{acme['id']}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/missed-loads/{acme['id']}")).status_code == 404
    assert (await client.delete(f"/api/missed-loads/{acme['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_missed_load_update_unknown(client):
    resp = await client.put("/api/missed-loads/missing", json={"resolutionStatus": "resolved"})
    assert resp.status_code == 404


# ─── WebSocket ───

def test_websocket_unknown_collection():
    test_client = TestClient(app)
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with test_client.websocket_connect("/ws/collections/unknown"):
            pass
    assert exc_info.value.code == 4004
