"""
Dépendances partagées des routes / Shared route dependencies.
Injectées dans les routes via Depends().
"""

from typing import TypeVar

from fastapi import Depends, HTTPException, status
from pydantic import BaseModel, ValidationError

from fleetops.database import async_session
from fleetops.services.configuration import ConfigurationStore
from fleetops.services.record_filter import FilterCriteria
from fleetops.services.record_store import RecordStore

M = TypeVar("M", bound=BaseModel)

# Singleton global / Global singleton
record_store = RecordStore(async_session)


def get_store() -> RecordStore:
    """Adaptateur de stockage / Record store adapter."""
    return record_store


def get_config(store: RecordStore = Depends(get_store)) -> ConfigurationStore:
    """Configuration metier, relue a chaque appel / Business configuration, re-read on each call."""
    return ConfigurationStore(store)


def get_filters(
    fleet_number: str | None = None,
    driver_name: str | None = None,
    client_name: str | None = None,
    status: str | None = None,
    performance_status: str | None = None,
    fuel_station: str | None = None,
    currency: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
) -> FilterCriteria:
    """Criteres de filtre depuis la query string / Filter criteria from the query string."""
    return FilterCriteria(
        fleet_number=fleet_number,
        driver_name=driver_name,
        client_name=client_name,
        status=status,
        performance_status=performance_status,
        fuel_station=fuel_station,
        currency=currency,
        date_from=date_from,
        date_to=date_to,
    )


def parse_document(model: type[M], raw: dict) -> M:
    """Valider un document stocke / Validate a stored document."""
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Stored {model.__name__} {raw.get('id')} is malformed: {exc.error_count()} error(s)",
        )


async def load_document(store: RecordStore, collection: str, model: type[M], doc_id: str, label: str) -> M:
    """Charger un document ou 404 / Load a document or 404."""
    raw = await store.get(collection, doc_id)
    if raw is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return parse_document(model, raw)
