"""Routes chargements manques / Missed load routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from fleetops.api.deps import get_store, load_document
from fleetops.constants import MISSED_LOADS
from fleetops.schemas.missed_load import MissedLoad, MissedLoadCreate, MissedLoadStatus, MissedLoadUpdate
from fleetops.services.record_filter import sort_records
from fleetops.services.record_store import RecordStore
from fleetops.utils.dates import now_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[MissedLoad])
async def list_missed_loads(
    resolution_status: MissedLoadStatus | None = None,
    customer_name: str | None = None,
    store: RecordStore = Depends(get_store),
):
    loads = await store.load(MISSED_LOADS, MissedLoad)
    if resolution_status is not None:
        loads = [m for m in loads if m.resolution_status == resolution_status]
    if customer_name:
        loads = [m for m in loads if m.customer_name == customer_name]
    return sort_records(loads, key="load_request_date")


@router.post("/", response_model=MissedLoad, status_code=201)
async def create_missed_load(data: MissedLoadCreate, recorded_by: str = "Current User", store: RecordStore = Depends(get_store)):
    now = now_iso()
    load = MissedLoad.model_validate({
        **data.to_patch(),
        "id": str(uuid.uuid4()),
        "recordedBy": recorded_by,
        "recordedAt": now,
        "updatedAt": now,
    })
    saved = await store.upsert(MISSED_LOADS, load.id, load.to_document(), merge=False)
    logger.info("Missed load %s recorded for %s", load.id, load.customer_name)
    return MissedLoad.model_validate(saved)


@router.get("/{load_id}", response_model=MissedLoad)
async def get_missed_load(load_id: str, store: RecordStore = Depends(get_store)):
    return await load_document(store, MISSED_LOADS, MissedLoad, load_id, "Missed load")


@router.put("/{load_id}", response_model=MissedLoad)
async def update_missed_load(load_id: str, data: MissedLoadUpdate, store: RecordStore = Depends(get_store)):
    await load_document(store, MISSED_LOADS, MissedLoad, load_id, "Missed load")
    saved = await store.upsert(MISSED_LOADS, load_id, {**data.to_patch(), "updatedAt": now_iso()})
    return MissedLoad.model_validate(saved)


@router.delete("/{load_id}", status_code=204)
async def delete_missed_load(load_id: str, store: RecordStore = Depends(get_store)):
    if not await store.delete(MISSED_LOADS, load_id):
        raise HTTPException(status_code=404, detail="Missed load not found")
