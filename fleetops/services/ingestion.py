"""
Service d'ingestion par lot / Batch ingestion service.
Fusionne des lignes externes dans une collection, identifiees par `id`.
Merges externally-sourced rows into a collection, keyed by `id`.
"""

import logging
from typing import Any

from pydantic import BaseModel

from fleetops.services.record_store import RecordStore

log = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Charge utile invalide / Invalid payload."""


class IngestionResult(BaseModel):
    success: bool = True
    inserted: int = 0
    errors: int = 0


def _row_id(row: Any) -> str | None:
    """Identifiant non vide d'une ligne / Non-empty row identifier."""
    if not isinstance(row, dict):
        return None
    value = row.get("id")
    if value is None or isinstance(value, bool):
        return None
    value = str(value).strip()
    return value or None


class IngestionService:
    """Import par lot avec fusion / Batch import with merge semantics."""

    @staticmethod
    def partition(rows: Any) -> tuple[list[tuple[str, dict]], int]:
        """Separer lignes valides et erreurs / Split valid rows from errors.

        Leve PayloadError si la charge n'est pas une liste / Raises PayloadError if not a list.
        """
        if not isinstance(rows, list):
            raise PayloadError("Payload must be an array.")
        valid: list[tuple[str, dict]] = []
        errors = 0
        for index, row in enumerate(rows):
            row_id = _row_id(row)
            if row_id is None:
                errors += 1
                log.warning("Skipping row %d without id", index)
                continue
            # Le document porte la cle normalisee / The document carries the normalized key
            valid.append((row_id, {**row, "id": row_id}))
        return valid, errors

    @staticmethod
    async def import_batch(store: RecordStore, collection: str, rows: Any) -> IngestionResult:
        """
        Fusionner un lot dans une collection / Merge a batch into a collection.
        L'ecriture est tout-ou-rien ; StoreError remonte a l'appelant.
        The write is all-or-nothing; StoreError propagates to the caller.
        """
        valid, errors = IngestionService.partition(rows)
        inserted = await store.upsert_many(collection, valid, merge=True)
        log.info("Imported %d row(s) into %s, %d skipped", inserted, collection, errors)
        return IngestionResult(success=True, inserted=inserted, errors=errors)
