"""Routes diesel / Diesel consumption routes."""

import io
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from fleetops.api.deps import get_config, get_filters, get_store, load_document
from fleetops.constants import DIESEL_RECORDS, TRIPS
from fleetops.schemas.diesel import (
    DebriefSubmit,
    DieselRecord,
    DieselRecordCreate,
    DieselRecordUpdate,
    DieselRecordView,
    DieselSummary,
)
from fleetops.schemas.trip import Trip
from fleetops.services.configuration import ConfigurationStore
from fleetops.services.cost_aggregation import CostAggregationService
from fleetops.services.efficiency import EfficiencyService
from fleetops.services import export_service
from fleetops.services.record_filter import FilterCriteria, filter_and_sort
from fleetops.services.record_store import RecordStore
from fleetops.services.trip_lifecycle import TripLifecycleService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _views(store: RecordStore, config: ConfigurationStore, criteria: FilterCriteria | None) -> list[DieselRecordView]:
    """Pleins evalues puis filtres / Evaluated fills, then filtered."""
    records = await store.load(DIESEL_RECORDS, DieselRecord)
    views = EfficiencyService.evaluate_all(records, await config.list_norms())
    return filter_and_sort(views, criteria)


async def _view(store: RecordStore, config: ConfigurationStore, record: DieselRecord) -> DieselRecordView:
    norm = EfficiencyService.find_norm(await config.list_norms(), record.fleet_number)
    return EfficiencyService.evaluate(record, norm)


@router.get("/", response_model=list[DieselRecordView])
async def list_diesel_records(
    criteria: FilterCriteria = Depends(get_filters),
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    return await _views(store, config, criteria)


@router.get("/summary", response_model=DieselSummary)
async def diesel_summary(
    criteria: FilterCriteria = Depends(get_filters),
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    """Synthese sur les pleins filtres / Summary over the filtered fills."""
    return CostAggregationService.summarize_diesel(await _views(store, config, criteria))


@router.get("/debriefs", response_model=list[DieselRecordView])
async def pending_debriefs(
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    """Pleins a debriefer, non encore signes / Fills requiring a debrief, not yet signed."""
    views = await _views(store, config, None)
    return [v for v in views if v.requires_debrief and not v.debrief_date]


@router.get("/export")
async def export_diesel(
    format: str = Query("xlsx", pattern="^(csv|xlsx)$"),
    criteria: FilterCriteria = Depends(get_filters),
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    """Exporter les pleins evalues / Export evaluated fills to CSV or XLSX."""
    content, media = export_service.export("diesel", await _views(store, config, criteria), format)
    return StreamingResponse(
        io.BytesIO(content),
        media_type=media,
        headers={"Content-Disposition": f"attachment; filename=diesel.{format}"},
    )


@router.post("/", response_model=DieselRecordView, status_code=201)
async def create_diesel_record(
    data: DieselRecordCreate,
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    record = DieselRecord.model_validate({**data.to_patch(), "id": str(uuid.uuid4())})
    saved = await store.upsert(DIESEL_RECORDS, record.id, record.to_document(), merge=False)
    return await _view(store, config, DieselRecord.model_validate(saved))


@router.get("/{record_id}", response_model=DieselRecordView)
async def get_diesel_record(
    record_id: str,
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    record = await load_document(store, DIESEL_RECORDS, DieselRecord, record_id, "Diesel record")
    return await _view(store, config, record)


@router.put("/{record_id}", response_model=DieselRecordView)
async def update_diesel_record(
    record_id: str,
    data: DieselRecordUpdate,
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    await load_document(store, DIESEL_RECORDS, DieselRecord, record_id, "Diesel record")
    saved = await store.upsert(DIESEL_RECORDS, record_id, data.to_patch())
    return await _view(store, config, DieselRecord.model_validate(saved))


@router.delete("/{record_id}", status_code=204)
async def delete_diesel_record(record_id: str, store: RecordStore = Depends(get_store)):
    record = await load_document(store, DIESEL_RECORDS, DieselRecord, record_id, "Diesel record")
    if record.trip_id:
        await _detach_fuel_cost(store, record)
    await store.delete(DIESEL_RECORDS, record_id)


# ─── Liaison voyage / Trip linkage ───

async def _detach_fuel_cost(store: RecordStore, record: DieselRecord) -> None:
    """Retirer le cout carburant du voyage lie / Remove the fuel cost from the linked trip."""

    def _remove(data: dict) -> dict:
        _, trip = TripLifecycleService.unallocate_diesel(record, Trip.model_validate(data))
        return trip.to_document()

    if await store.modify(TRIPS, record.trip_id, _remove) is None:
        logger.warning("Diesel record %s linked to missing trip %s", record.id, record.trip_id)


@router.post("/{record_id}/allocate/{trip_id}", response_model=DieselRecordView)
async def allocate_to_trip(
    record_id: str,
    trip_id: str,
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    """Lier un plein a un voyage / Link a fill to a trip."""
    record = await load_document(store, DIESEL_RECORDS, DieselRecord, record_id, "Diesel record")
    if record.trip_id and record.trip_id != trip_id:
        raise HTTPException(status_code=409, detail=f"Diesel record already allocated to trip {record.trip_id}")
    linked: list[DieselRecord] = []

    def _attach(data: dict) -> dict:
        updated_record, trip = TripLifecycleService.allocate_diesel(record, Trip.model_validate(data))
        linked.append(updated_record)
        return trip.to_document()

    if await store.modify(TRIPS, trip_id, _attach) is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    saved = await store.upsert(DIESEL_RECORDS, record_id, {"tripId": trip_id})
    logger.info("Diesel record %s allocated to trip %s", record_id, trip_id)
    return await _view(store, config, DieselRecord.model_validate(saved))


@router.post("/{record_id}/unallocate", response_model=DieselRecordView)
async def unallocate_from_trip(
    record_id: str,
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    """Delier un plein de son voyage / Unlink a fill from its trip."""
    record = await load_document(store, DIESEL_RECORDS, DieselRecord, record_id, "Diesel record")
    if not record.trip_id:
        raise HTTPException(status_code=400, detail="Diesel record is not allocated to a trip")
    await _detach_fuel_cost(store, record)
    saved = await store.upsert(DIESEL_RECORDS, record_id, {"tripId": None})
    return await _view(store, config, DieselRecord.model_validate(saved))


@router.post("/{record_id}/debrief", response_model=DieselRecordView)
async def submit_debrief(
    record_id: str,
    data: DebriefSubmit,
    store: RecordStore = Depends(get_store),
    config: ConfigurationStore = Depends(get_config),
):
    await load_document(store, DIESEL_RECORDS, DieselRecord, record_id, "Diesel record")
    saved = await store.upsert(DIESEL_RECORDS, record_id, data.to_patch())
    return await _view(store, config, DieselRecord.model_validate(saved))
