"""Routes rapports d'action corrective / Corrective action report routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from fleetops.api.deps import get_store, load_document
from fleetops.constants import CAR_REPORTS, DRIVER_BEHAVIOR
from fleetops.schemas.driver import CARReport, CARReportCreate, CARReportUpdate, DriverBehaviorEvent
from fleetops.services.record_store import RecordStore
from fleetops.utils.dates import now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


async def _link_event(store: RecordStore, event_id: str, report_id: str | None) -> None:
    """Renseigner le rapport sur l'evenement source / Set the report on the source event."""

    def _set(data: dict) -> dict:
        return {**data, "carReportId": report_id}

    if await store.modify(DRIVER_BEHAVIOR, event_id, _set) is None:
        logger.warning("CAR report references missing event %s", event_id)


@router.get("/", response_model=list[CARReport])
async def list_car_reports(store: RecordStore = Depends(get_store)):
    reports = await store.load(CAR_REPORTS, CARReport)
    return sorted(reports, key=lambda r: r.created_at or "", reverse=True)


@router.post("/", response_model=CARReport, status_code=201)
async def create_car_report(data: CARReportCreate, store: RecordStore = Depends(get_store)):
    if data.reference_event_id:
        await load_document(store, DRIVER_BEHAVIOR, DriverBehaviorEvent, data.reference_event_id, "Event")
    now = now_iso()
    report = CARReport.model_validate({
        **data.to_patch(),
        "id": str(uuid.uuid4()),
        "createdAt": now,
        "updatedAt": now,
    })
    saved = await store.upsert(CAR_REPORTS, report.id, report.to_document(), merge=False)
    if report.reference_event_id:
        await _link_event(store, report.reference_event_id, report.id)
    return CARReport.model_validate(saved)


@router.get("/{report_id}", response_model=CARReport)
async def get_car_report(report_id: str, store: RecordStore = Depends(get_store)):
    return await load_document(store, CAR_REPORTS, CARReport, report_id, "CAR report")


@router.put("/{report_id}", response_model=CARReport)
async def update_car_report(report_id: str, data: CARReportUpdate, store: RecordStore = Depends(get_store)):
    await load_document(store, CAR_REPORTS, CARReport, report_id, "CAR report")
    saved = await store.upsert(CAR_REPORTS, report_id, {**data.to_patch(), "updatedAt": now_iso()})
    return CARReport.model_validate(saved)


@router.delete("/{report_id}", status_code=204)
async def delete_car_report(report_id: str, store: RecordStore = Depends(get_store)):
    report = await load_document(store, CAR_REPORTS, CARReport, report_id, "CAR report")
    if report.reference_event_id:
        await _link_event(store, report.reference_event_id, None)
    if not await store.delete(CAR_REPORTS, report_id):
        raise HTTPException(status_code=404, detail="CAR report not found")
