"""Tests des modèles / Model tests."""

from fleetops.models.document import StoredDocument
from fleetops.schemas.common import Currency
from fleetops.schemas.diesel import DieselRecord, PerformanceStatus
from fleetops.schemas.driver import DriverBehaviorEvent, Severity
from fleetops.schemas.invoice import AgingBand, AgingBucket
from fleetops.schemas.trip import PaymentStatus, Trip, TripStatus


def test_stored_document_table():
    assert StoredDocument.__tablename__ == "documents"


def test_enums():
    assert Currency.ZAR.value == "ZAR"
    assert TripStatus.INVOICED.value == "invoiced"
    assert PaymentStatus.PARTIAL.value == "partial"
    assert PerformanceStatus.POOR.value == "poor"
    assert Severity.CRITICAL.value == "critical"
    assert AgingBucket.OVERDUE.value == "overdue"


def test_document_camel_case_round_trip():
    record = DieselRecord.model_validate({
        "id": "d1",
        "fleetNumber": "6H",
        "date": "2024-03-01",
        "litresFilled": 200,
        "totalCost": 4000,
        "currency": "ZAR",
    })
    assert record.fleet_number == "6H"
    doc = record.to_document()
    assert doc["fleetNumber"] == "6H"
    assert doc["litresFilled"] == 200
    # Les champs absents ne sont pas ecrits / Missing fields are not written
    assert "kmReading" not in doc


def test_unknown_keys_are_preserved():
    trip = Trip.model_validate({"id": "t1", "clientName": "Acme", "loadRef": "LR-9"})
    assert trip.to_document()["loadRef"] == "LR-9"
    assert trip.status == TripStatus.ACTIVE


def test_snake_case_population():
    event = DriverBehaviorEvent(
        id="e1", driver_name="Sam", event_date="2024-01-01", event_type="speeding", severity="high",
    )
    assert event.to_document()["driverName"] == "Sam"
    assert event.severity == "high"


def test_aging_band_contains():
    band = AgingBand(min=11, max=13)
    assert band.contains(11)
    assert band.contains(13)
    assert not band.contains(14)
    assert AgingBand(min=15).contains(400)
