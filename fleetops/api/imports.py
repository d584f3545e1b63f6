"""Routes Import CSV/Excel / Import API routes."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from fleetops.api.deps import get_store
from fleetops.config import settings
from fleetops.constants import DIESEL_RECORDS, TRIPS
from fleetops.rate_limit import limiter
from fleetops.schemas.trip import TripStatus
from fleetops.services.import_service import ImportService
from fleetops.services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Mapping entite -> collection / Entity to collection mapping
ENTITY_COLLECTION_MAP = {
    "trips": TRIPS,
    "diesel": DIESEL_RECORDS,
}


@router.post("/{entity}")
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def import_file(
    request: Request,
    entity: str,
    file: UploadFile = File(...),
    store: RecordStore = Depends(get_store),
):
    """Importer un fichier CSV ou Excel / Import a CSV or Excel file."""
    collection = ENTITY_COLLECTION_MAP.get(entity)
    if collection is None:
        raise HTTPException(status_code=400, detail=f"Unknown entity: {entity}")

    content = await file.read()
    try:
        rows = ImportService.parse_file(content, file.filename or "")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    documents, errors = ImportService.to_documents(entity, rows)
    if entity == "trips":
        # Les voyages importes demarrent actifs / Imported trips start active
        documents = [(doc_id, {"status": TripStatus.ACTIVE.value, **doc}) for doc_id, doc in documents]

    created = await store.upsert_many(collection, documents, merge=True)
    logger.info("Imported %d %s row(s) from %s, %d error(s)", created, entity, file.filename, len(errors))
    return {"created": created, "errors": errors, "total_rows": len(rows)}
