"""
Webhooks d'ingestion / Ingestion webhooks.
Montes a la racine, hors /api / Mounted at root, outside /api.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from fleetops.api.deps import get_store
from fleetops.config import settings
from fleetops.constants import DRIVER_BEHAVIOR, TRIPS
from fleetops.rate_limit import limiter
from fleetops.services.ingestion import IngestionService, PayloadError
from fleetops.services.record_store import RecordStore, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


async def _ingest(request: Request, store: RecordStore, collection: str, noun: str) -> JSONResponse:
    """Lire le corps JSON et fusionner le lot / Read the JSON body and merge the batch."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    try:
        result = await IngestionService.import_batch(store, collection, payload)
    except PayloadError:
        return JSONResponse(status_code=400, content={"error": f"Payload must be an array of {noun}."})
    except StoreError as exc:
        logger.error("Webhook import into %s failed: %s", collection, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
    return JSONResponse(status_code=200, content=result.model_dump())


@router.post("/importDriverBehaviorWebhook")
@limiter.limit(settings.RATE_LIMIT_WEBHOOK)
async def import_driver_behavior(request: Request, store: RecordStore = Depends(get_store)):
    """Lot d'evenements de conduite / Batch of driver behavior events."""
    return await _ingest(request, store, DRIVER_BEHAVIOR, "events")


@router.post("/importTripsFromWebBook")
@limiter.limit(settings.RATE_LIMIT_WEBHOOK)
async def import_trips(request: Request, store: RecordStore = Depends(get_store)):
    """Lot de voyages / Batch of trips."""
    return await _ingest(request, store, TRIPS, "trips")
