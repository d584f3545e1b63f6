"""Routes comportement chauffeur / Driver behavior routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from fleetops.api.deps import get_filters, get_store, load_document
from fleetops.constants import DRIVER_BEHAVIOR
from fleetops.schemas.driver import (
    DriverBehaviorEvent,
    DriverEventCreate,
    DriverEventUpdate,
    DriverPerformance,
)
from fleetops.services.driver_scoring import DriverScoringService
from fleetops.services.record_filter import FilterCriteria, filter_and_sort
from fleetops.services.record_store import RecordStore
from fleetops.utils.dates import now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/events", response_model=list[DriverBehaviorEvent])
async def list_events(
    criteria: FilterCriteria = Depends(get_filters),
    store: RecordStore = Depends(get_store),
):
    events = await store.load(DRIVER_BEHAVIOR, DriverBehaviorEvent)
    return filter_and_sort(events, criteria, date_field="event_date")


@router.post("/events", response_model=DriverBehaviorEvent, status_code=201)
async def create_event(data: DriverEventCreate, store: RecordStore = Depends(get_store)):
    """Enregistrer un evenement ; points par defaut selon le type /
    Record an event; points default from the event type."""
    points = data.points if data.points is not None else DriverScoringService.default_points(data.event_type)
    event = DriverBehaviorEvent.model_validate({
        **data.to_patch(),
        "id": str(uuid.uuid4()),
        "points": points,
        "reportedAt": now_iso(),
    })
    saved = await store.upsert(DRIVER_BEHAVIOR, event.id, event.to_document(), merge=False)
    return DriverBehaviorEvent.model_validate(saved)


@router.get("/events/{event_id}", response_model=DriverBehaviorEvent)
async def get_event(event_id: str, store: RecordStore = Depends(get_store)):
    return await load_document(store, DRIVER_BEHAVIOR, DriverBehaviorEvent, event_id, "Event")


@router.put("/events/{event_id}", response_model=DriverBehaviorEvent)
async def update_event(event_id: str, data: DriverEventUpdate, store: RecordStore = Depends(get_store)):
    await load_document(store, DRIVER_BEHAVIOR, DriverBehaviorEvent, event_id, "Event")
    saved = await store.upsert(DRIVER_BEHAVIOR, event_id, data.to_patch())
    return DriverBehaviorEvent.model_validate(saved)


@router.delete("/events/{event_id}", status_code=204)
async def delete_event(event_id: str, store: RecordStore = Depends(get_store)):
    if not await store.delete(DRIVER_BEHAVIOR, event_id):
        raise HTTPException(status_code=404, detail="Event not found")


@router.get("/performance", response_model=list[DriverPerformance])
async def drivers_performance(store: RecordStore = Depends(get_store)):
    """Score de tous les chauffeurs, recalcule a chaque appel /
    Score of every driver, recomputed on each call."""
    events = await store.load(DRIVER_BEHAVIOR, DriverBehaviorEvent)
    return DriverScoringService.all_drivers_performance(events)


@router.get("/performance/{driver_name}", response_model=DriverPerformance)
async def driver_performance(driver_name: str, store: RecordStore = Depends(get_store)):
    events = [e for e in await store.load(DRIVER_BEHAVIOR, DriverBehaviorEvent) if e.driver_name == driver_name]
    return DriverScoringService.score(events, driver_name)
