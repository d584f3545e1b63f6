"""Routes voyages / Trip routes."""

import io
import logging
import uuid
from collections.abc import Callable

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from fleetops.api.deps import get_config, get_filters, get_store, load_document, parse_document
from fleetops.constants import TRIPS
from fleetops.schemas.invoice import AgingSummary
from fleetops.schemas.trip import (
    AdditionalCost,
    AdditionalCostCreate,
    CostEntry,
    CostEntryCreate,
    CostEntryUpdate,
    CostSummary,
    DelayReason,
    DelayReasonCreate,
    FollowUpCreate,
    FollowUpRecord,
    InvoiceCreate,
    InvoicePaymentUpdate,
    Trip,
    TripCreate,
    TripProfitability,
    TripStatus,
    TripUpdate,
)
from fleetops.services.configuration import ConfigurationStore
from fleetops.services.cost_aggregation import CostAggregationService
from fleetops.services import export_service
from fleetops.services.invoice_aging import InvoiceAgingService
from fleetops.services.record_filter import FilterCriteria, filter_and_sort
from fleetops.services.record_store import RecordStore
from fleetops.services.trip_lifecycle import TripLifecycleService, TripTransitionError
from fleetops.utils.dates import now_iso, parse_date, today

logger = logging.getLogger(__name__)

router = APIRouter()


async def _mutate_trip(store: RecordStore, trip_id: str, change: Callable[[Trip], Trip]) -> Trip:
    """Appliquer une modification atomique au voyage / Apply an atomic change to the trip."""

    def _apply(data: dict) -> dict:
        return change(parse_document(Trip, data)).to_document()

    try:
        updated = await store.modify(TRIPS, trip_id, _apply)
    except TripTransitionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if updated is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    return Trip.model_validate(updated)


# ─── Voyages / Trips ───

@router.get("/", response_model=list[Trip])
async def list_trips(
    criteria: FilterCriteria = Depends(get_filters),
    store: RecordStore = Depends(get_store),
):
    trips = await store.load(TRIPS, Trip)
    return filter_and_sort(trips, criteria, date_field="start_date")


@router.post("/", response_model=Trip, status_code=201)
async def create_trip(data: TripCreate, store: RecordStore = Depends(get_store)):
    trip = Trip.model_validate({**data.to_patch(), "id": str(uuid.uuid4()), "status": TripStatus.ACTIVE.value})
    saved = await store.upsert(TRIPS, trip.id, trip.to_document(), merge=False)
    return Trip.model_validate(saved)


@router.get("/aging", response_model=AgingSummary)
async def aging_report(
    as_of: str | None = Query(None, description="Date de reference / Reference date (YYYY-MM-DD)"),
    currency: str | None = None,
    store: RecordStore = Depends(get_store),
):
    """Anciennete des factures impayees / Aging of unpaid invoices."""
    reference = parse_date(as_of) or today()
    trips = await store.load(TRIPS, Trip)
    if currency:
        trips = [t for t in trips if t.revenue_currency == currency.upper()]
    return InvoiceAgingService.summarize(trips, reference)


@router.get("/export")
async def export_trips(
    format: str = Query("xlsx", pattern="^(csv|xlsx)$"),
    criteria: FilterCriteria = Depends(get_filters),
    store: RecordStore = Depends(get_store),
):
    """Exporter les voyages / Export trips to CSV or XLSX."""
    trips = filter_and_sort(await store.load(TRIPS, Trip), criteria, date_field="start_date")
    content, media = export_service.export("trips", trips, format)
    return StreamingResponse(
        io.BytesIO(content),
        media_type=media,
        headers={"Content-Disposition": f"attachment; filename=trips.{format}"},
    )


@router.get("/{trip_id}", response_model=Trip)
async def get_trip(trip_id: str, store: RecordStore = Depends(get_store)):
    return await load_document(store, TRIPS, Trip, trip_id, "Trip")


@router.put("/{trip_id}", response_model=Trip)
async def update_trip(trip_id: str, data: TripUpdate, store: RecordStore = Depends(get_store)):
    patch = data.model_dump(exclude_unset=True)
    return await _mutate_trip(store, trip_id, lambda trip: trip.model_copy(update=patch))


@router.delete("/{trip_id}", status_code=204)
async def delete_trip(trip_id: str, store: RecordStore = Depends(get_store)):
    # Couts, retards et relances sont embarques et partent avec le voyage /
    # Costs, delays and follow-ups are embedded and go with the trip
    if not await store.delete(TRIPS, trip_id):
        raise HTTPException(status_code=404, detail="Trip not found")


# ─── Cycle de vie / Lifecycle ───

@router.post("/{trip_id}/complete", response_model=Trip)
async def complete_trip(trip_id: str, completed_by: str = "Current User", store: RecordStore = Depends(get_store)):
    return await _mutate_trip(store, trip_id, lambda trip: TripLifecycleService.complete(trip, completed_by))


@router.post("/{trip_id}/reopen", response_model=Trip)
async def reopen_trip(trip_id: str, store: RecordStore = Depends(get_store)):
    return await _mutate_trip(store, trip_id, TripLifecycleService.reopen)


@router.post("/{trip_id}/invoice", response_model=Trip)
async def invoice_trip(trip_id: str, data: InvoiceCreate, store: RecordStore = Depends(get_store)):
    return await _mutate_trip(
        store,
        trip_id,
        lambda trip: TripLifecycleService.invoice(trip, data.invoice_number, data.invoice_date, data.invoice_due_date),
    )


@router.put("/{trip_id}/payment", response_model=Trip)
async def update_payment(trip_id: str, data: InvoicePaymentUpdate, store: RecordStore = Depends(get_store)):
    payment = data.model_dump(exclude_unset=True)
    return await _mutate_trip(store, trip_id, lambda trip: TripLifecycleService.record_payment(trip, payment))


# ─── Couts / Costs ───

@router.post("/{trip_id}/costs", response_model=CostEntry, status_code=201)
async def add_cost_entry(trip_id: str, data: CostEntryCreate, store: RecordStore = Depends(get_store)):
    now = now_iso()
    cost = CostEntry.model_validate({
        **data.to_patch(),
        "id": str(uuid.uuid4()),
        "tripId": trip_id,
        "investigationStatus": "pending" if data.is_flagged else None,
        "createdAt": now,
        "updatedAt": now,
    })
    await _mutate_trip(store, trip_id, lambda trip: trip.model_copy(update={"costs": [*trip.costs, cost]}))
    return cost


@router.put("/{trip_id}/costs/{cost_id}", response_model=CostEntry)
async def update_cost_entry(trip_id: str, cost_id: str, data: CostEntryUpdate, store: RecordStore = Depends(get_store)):
    patch = {**data.model_dump(exclude_unset=True), "updated_at": now_iso()}

    def _change(trip: Trip) -> Trip:
        if not any(c.id == cost_id for c in trip.costs):
            raise HTTPException(status_code=404, detail="Cost entry not found")
        return trip.model_copy(update={
            "costs": [c.model_copy(update=patch) if c.id == cost_id else c for c in trip.costs]
        })

    trip = await _mutate_trip(store, trip_id, _change)
    return next(c for c in trip.costs if c.id == cost_id)


@router.delete("/{trip_id}/costs/{cost_id}", status_code=204)
async def delete_cost_entry(trip_id: str, cost_id: str, store: RecordStore = Depends(get_store)):
    def _change(trip: Trip) -> Trip:
        if not any(c.id == cost_id for c in trip.costs):
            raise HTTPException(status_code=404, detail="Cost entry not found")
        return trip.model_copy(update={"costs": [c for c in trip.costs if c.id != cost_id]})

    await _mutate_trip(store, trip_id, _change)


@router.post("/{trip_id}/system-costs", response_model=Trip)
async def regenerate_system_costs(
    trip_id: str,
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    """Regenerer les couts systeme depuis les taux actifs / Regenerate system costs from the active rates."""
    trip = await load_document(store, TRIPS, Trip, trip_id, "Trip")
    rates = await config.get_cost_rates(trip.revenue_currency)
    if rates is None:
        raise HTTPException(status_code=400, detail=f"No system cost rates configured for {trip.revenue_currency}")
    return await _mutate_trip(
        store, trip_id, lambda current: CostAggregationService.regenerate_system_costs(current, rates)
    )


@router.get("/{trip_id}/costs/summary", response_model=CostSummary)
async def trip_cost_summary(trip_id: str, store: RecordStore = Depends(get_store)):
    """Totaux par devise des couts du voyage / Per-currency totals of the trip costs."""
    trip = await load_document(store, TRIPS, Trip, trip_id, "Trip")
    return CostAggregationService.summarize_costs(trip.costs)


@router.get("/{trip_id}/profitability", response_model=TripProfitability)
async def trip_profitability(trip_id: str, store: RecordStore = Depends(get_store)):
    trip = await load_document(store, TRIPS, Trip, trip_id, "Trip")
    return CostAggregationService.trip_profitability(trip)


# ─── Couts additionnels, retards, relances / Additional costs, delays, follow-ups ───

@router.post("/{trip_id}/additional-costs", response_model=AdditionalCost, status_code=201)
async def add_additional_cost(trip_id: str, data: AdditionalCostCreate, store: RecordStore = Depends(get_store)):
    cost = AdditionalCost.model_validate({**data.to_patch(), "id": str(uuid.uuid4()), "addedAt": now_iso()})
    await _mutate_trip(
        store, trip_id, lambda trip: trip.model_copy(update={"additional_costs": [*trip.additional_costs, cost]})
    )
    return cost


@router.delete("/{trip_id}/additional-costs/{cost_id}", status_code=204)
async def remove_additional_cost(trip_id: str, cost_id: str, store: RecordStore = Depends(get_store)):
    def _change(trip: Trip) -> Trip:
        if not any(c.id == cost_id for c in trip.additional_costs):
            raise HTTPException(status_code=404, detail="Additional cost not found")
        return trip.model_copy(update={"additional_costs": [c for c in trip.additional_costs if c.id != cost_id]})

    await _mutate_trip(store, trip_id, _change)


@router.post("/{trip_id}/delays", response_model=DelayReason, status_code=201)
async def add_delay_reason(trip_id: str, data: DelayReasonCreate, store: RecordStore = Depends(get_store)):
    delay = DelayReason.model_validate({**data.to_patch(), "id": str(uuid.uuid4()), "reportedAt": now_iso()})
    await _mutate_trip(
        store, trip_id, lambda trip: trip.model_copy(update={"delay_reasons": [*trip.delay_reasons, delay]})
    )
    return delay


@router.post("/{trip_id}/follow-ups", response_model=FollowUpRecord, status_code=201)
async def add_follow_up(trip_id: str, data: FollowUpCreate, store: RecordStore = Depends(get_store)):
    record = FollowUpRecord.model_validate({**data.to_patch(), "id": str(uuid.uuid4())})
    await _mutate_trip(
        store, trip_id, lambda trip: trip.model_copy(update={"follow_up_history": [*trip.follow_up_history, record]})
    )
    logger.info("Follow-up recorded for trip %s", trip_id)
    return record
