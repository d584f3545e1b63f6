"""Schemas actions / Action item schemas."""

import enum

from pydantic import Field

from fleetops.schemas.common import DocumentModel, PatchModel


class ActionItemStatus(str, enum.Enum):
    INITIATED = "initiated"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ActionItemComment(DocumentModel):
    id: str
    comment: str
    created_by: str
    created_at: str


class ActionItem(DocumentModel):
    id: str
    title: str
    description: str | None = None
    responsible_person: str
    start_date: str
    due_date: str
    status: ActionItemStatus = ActionItemStatus.INITIATED
    comments: list[ActionItemComment] = Field(default_factory=list)
    overdue_reason: str | None = None
    completed_at: str | None = None
    completed_by: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


class ActionItemCreate(PatchModel):
    title: str
    description: str | None = None
    responsible_person: str
    start_date: str
    due_date: str
    status: ActionItemStatus = ActionItemStatus.INITIATED


class ActionItemUpdate(PatchModel):
    title: str | None = None
    description: str | None = None
    responsible_person: str | None = None
    start_date: str | None = None
    due_date: str | None = None
    status: ActionItemStatus | None = None
    overdue_reason: str | None = None


class CommentCreate(PatchModel):
    comment: str
    created_by: str = "Current User"
