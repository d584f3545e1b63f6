"""Routes actions de suivi / Action item routes."""

import uuid

from fastapi import APIRouter, Depends, HTTPException

from fleetops.api.deps import get_store, load_document
from fleetops.constants import ACTION_ITEMS
from fleetops.schemas.action_item import (
    ActionItem,
    ActionItemComment,
    ActionItemCreate,
    ActionItemStatus,
    ActionItemUpdate,
    CommentCreate,
)
from fleetops.services.record_filter import sort_records
from fleetops.services.record_store import RecordStore
from fleetops.utils.dates import now_iso

router = APIRouter()


@router.get("/", response_model=list[ActionItem])
async def list_action_items(status: ActionItemStatus | None = None, store: RecordStore = Depends(get_store)):
    items = await store.load(ACTION_ITEMS, ActionItem)
    if status is not None:
        items = [i for i in items if i.status == status]
    return sort_records(items, key="due_date", descending=False)


@router.post("/", response_model=ActionItem, status_code=201)
async def create_action_item(data: ActionItemCreate, created_by: str = "Current User", store: RecordStore = Depends(get_store)):
    now = now_iso()
    item = ActionItem.model_validate({
        **data.to_patch(),
        "id": str(uuid.uuid4()),
        "createdAt": now,
        "updatedAt": now,
        "createdBy": created_by,
    })
    saved = await store.upsert(ACTION_ITEMS, item.id, item.to_document(), merge=False)
    return ActionItem.model_validate(saved)


@router.get("/{item_id}", response_model=ActionItem)
async def get_action_item(item_id: str, store: RecordStore = Depends(get_store)):
    return await load_document(store, ACTION_ITEMS, ActionItem, item_id, "Action item")


@router.put("/{item_id}", response_model=ActionItem)
async def update_action_item(
    item_id: str,
    data: ActionItemUpdate,
    updated_by: str = "Current User",
    store: RecordStore = Depends(get_store),
):
    item = await load_document(store, ACTION_ITEMS, ActionItem, item_id, "Action item")
    now = now_iso()
    patch = {**data.to_patch(), "updatedAt": now, "updatedBy": updated_by}
    # Horodatage de cloture au passage a completed / Completion stamp when moving to completed
    if data.status == ActionItemStatus.COMPLETED and item.status != ActionItemStatus.COMPLETED:
        patch.update({"completedAt": now, "completedBy": updated_by})
    saved = await store.upsert(ACTION_ITEMS, item_id, patch)
    return ActionItem.model_validate(saved)


@router.delete("/{item_id}", status_code=204)
async def delete_action_item(item_id: str, store: RecordStore = Depends(get_store)):
    if not await store.delete(ACTION_ITEMS, item_id):
        raise HTTPException(status_code=404, detail="Action item not found")


@router.post("/{item_id}/comments", response_model=ActionItemComment, status_code=201)
async def add_comment(item_id: str, data: CommentCreate, store: RecordStore = Depends(get_store)):
    comment = ActionItemComment(
        id=str(uuid.uuid4()),
        comment=data.comment,
        created_by=data.created_by,
        created_at=now_iso(),
    )

    def _append(doc: dict) -> dict:
        return {**doc, "comments": [*doc.get("comments", []), comment.to_document()]}

    if await store.modify(ACTION_ITEMS, item_id, _append) is None:
        raise HTTPException(status_code=404, detail="Action item not found")
    return comment
