"""
Adaptateur de stockage des documents / Record store adapter.

Seul ecrivain des collections. Les moteurs de calcul recoivent des instantanes
(copies) et ne reecrivent jamais directement.
Sole writer of the collections. Engines receive snapshots (copies) and never
write back directly.
"""

import asyncio
import copy
import inspect
import logging
from collections import defaultdict
from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetops.models.document import StoredDocument
from fleetops.utils.dates import now_iso

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
ChangeCallback = Callable[[list[dict]], Any]


class StoreError(Exception):
    """Echec du stockage, rien n'est ecrit / Store failure, nothing committed."""


class RecordStore:
    """Collections de documents JSON avec notifications / JSON document collections with notifications."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._listeners: dict[str, list[ChangeCallback]] = defaultdict(list)
        self._write_lock = asyncio.Lock()

    # ─── Lecture / Read ───

    async def list_collection(self, name: str) -> list[dict]:
        """Instantane d'une collection, ordre d'insertion / Collection snapshot, insertion order."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(StoredDocument)
                    .where(StoredDocument.collection == name)
                    .order_by(StoredDocument.id)
                )
                return [self._to_record(doc) for doc in result.scalars().all()]
        except SQLAlchemyError as exc:
            log.exception("Failed to list collection %s", name)
            raise StoreError(str(exc)) from exc

    async def load(self, name: str, model: type[M]) -> list[M]:
        """Instantane type, documents invalides ignores / Typed snapshot, invalid documents skipped."""
        records = []
        for raw in await self.list_collection(name):
            try:
                records.append(model.model_validate(raw))
            except ValidationError as exc:
                log.warning(
                    "Skipping malformed %s document %s: %d error(s)",
                    name, raw.get("id"), exc.error_count(),
                )
        return records

    async def get(self, name: str, doc_id: str) -> dict | None:
        try:
            async with self._session_factory() as session:
                doc = await self._find(session, name, doc_id)
                return self._to_record(doc) if doc else None
        except SQLAlchemyError as exc:
            log.exception("Failed to read %s/%s", name, doc_id)
            raise StoreError(str(exc)) from exc

    # ─── Ecriture / Write ───

    async def upsert(self, name: str, doc_id: str, partial: dict, merge: bool = True) -> dict:
        """Creer ou fusionner un document / Create or merge a document.

        merge=False remplace le document entier / merge=False replaces the whole document.
        """
        async with self._write_lock:
            try:
                async with self._session_factory() as session, session.begin():
                    doc = await self._write(session, name, doc_id, partial, merge)
                    record = self._to_record(doc)
            except SQLAlchemyError as exc:
                log.exception("Failed to upsert %s/%s", name, doc_id)
                raise StoreError(str(exc)) from exc
        await self._notify(name)
        return record

    async def upsert_many(self, name: str, items: Iterable[tuple[str, dict]], merge: bool = True) -> int:
        """Ecriture groupee tout-ou-rien / All-or-nothing batch write."""
        count = 0
        async with self._write_lock:
            try:
                async with self._session_factory() as session, session.begin():
                    for doc_id, partial in items:
                        await self._write(session, name, doc_id, partial, merge)
                        count += 1
            except SQLAlchemyError as exc:
                log.exception("Batch write to %s failed, nothing committed", name)
                raise StoreError(str(exc)) from exc
        if count:
            await self._notify(name)
        return count

    async def modify(self, name: str, doc_id: str, mutate: Callable[[dict], dict]) -> dict | None:
        """Lire-modifier-ecrire atomique / Atomic read-modify-write.

        `mutate` recoit une copie du document et retourne le nouveau document.
        Une exception levee par `mutate` annule l'ecriture.
        `mutate` receives a copy of the document and returns the new one.
        An exception raised by `mutate` aborts the write.
        """
        async with self._write_lock:
            try:
                async with self._session_factory() as session, session.begin():
                    doc = await self._find(session, name, doc_id)
                    if doc is None:
                        return None
                    new_data = mutate(self._to_record(doc))
                    doc = await self._write(session, name, doc_id, new_data, merge=False)
                    record = self._to_record(doc)
            except SQLAlchemyError as exc:
                log.exception("Failed to modify %s/%s", name, doc_id)
                raise StoreError(str(exc)) from exc
        await self._notify(name)
        return record

    async def delete(self, name: str, doc_id: str) -> bool:
        async with self._write_lock:
            try:
                async with self._session_factory() as session, session.begin():
                    doc = await self._find(session, name, doc_id)
                    if doc is None:
                        return False
                    await session.delete(doc)
            except SQLAlchemyError as exc:
                log.exception("Failed to delete %s/%s", name, doc_id)
                raise StoreError(str(exc)) from exc
        await self._notify(name)
        return True

    # ─── Notifications ───

    def on_change(self, name: str, callback: ChangeCallback) -> Callable[[], None]:
        """Abonner un callback aux instantanes / Subscribe a callback to snapshots.

        Retourne une fonction de desabonnement / Returns an unsubscribe function.
        """
        self._listeners[name].append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners[name]:
                self._listeners[name].remove(callback)

        return unsubscribe

    async def subscribe(self, name: str) -> AsyncIterator[list[dict]]:
        """Flux d'instantanes : l'etat courant puis un par changement /
        Snapshot stream: current state, then one per change."""
        queue: asyncio.Queue[list[dict]] = asyncio.Queue()
        unsubscribe = self.on_change(name, queue.put_nowait)
        try:
            yield await self.list_collection(name)
            while True:
                yield await queue.get()
        finally:
            unsubscribe()

    async def _notify(self, name: str) -> None:
        listeners = list(self._listeners.get(name, ()))
        if not listeners:
            return
        snapshot = await self.list_collection(name)
        for callback in listeners:
            try:
                result = callback(copy.deepcopy(snapshot))
                if inspect.isawaitable(result):
                    await result
            except Exception:
                log.exception("Change listener failed for collection %s", name)

    # ─── Interne / Internal ───

    @staticmethod
    async def _find(session: AsyncSession, name: str, doc_id: str) -> StoredDocument | None:
        result = await session.execute(
            select(StoredDocument).where(
                StoredDocument.collection == name,
                StoredDocument.doc_id == str(doc_id),
            )
        )
        return result.scalar_one_or_none()

    async def _write(
        self, session: AsyncSession, name: str, doc_id: str, partial: dict, merge: bool,
    ) -> StoredDocument:
        now = now_iso()
        doc = await self._find(session, name, doc_id)
        if doc is None:
            doc = StoredDocument(
                collection=name,
                doc_id=str(doc_id),
                data=copy.deepcopy(partial),
                created_at=now,
                updated_at=now,
            )
            session.add(doc)
        else:
            data = {**doc.data, **partial} if merge else partial
            # Nouvel objet pour que SQLAlchemy detecte le changement /
            # New object so SQLAlchemy detects the change
            doc.data = copy.deepcopy(data)
            doc.updated_at = now
        await session.flush()
        return doc

    @staticmethod
    def _to_record(doc: StoredDocument) -> dict:
        record = copy.deepcopy(doc.data)
        record.setdefault("id", doc.doc_id)
        return record
