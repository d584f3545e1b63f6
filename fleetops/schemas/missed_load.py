"""Schemas chargements manques / Missed load schemas."""

import enum

from fleetops.schemas.common import Currency, DocumentModel, PatchModel


class MissedLoadStatus(str, enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    LOST = "lost_opportunity"
    RESCHEDULED = "rescheduled"


class MissedLoad(DocumentModel):
    """Demande client non honoree / Customer load request the fleet could not take.

    Document libre : les cles supplementaires sont conservees.
    Free-form document: extra keys are kept.
    """
    id: str
    customer_name: str | None = None
    load_request_date: str | None = None
    requested_pickup_date: str | None = None
    requested_delivery_date: str | None = None
    route: str | None = None
    estimated_revenue: float = 0.0
    currency: Currency = Currency.ZAR
    reason: str | None = None
    reason_description: str | None = None
    resolution_status: MissedLoadStatus = MissedLoadStatus.PENDING
    resolution_notes: str | None = None
    follow_up_required: bool = False
    competitor_won: bool = False
    recorded_by: str | None = None
    recorded_at: str | None = None
    updated_at: str | None = None


class MissedLoadCreate(PatchModel):
    customer_name: str
    load_request_date: str
    requested_pickup_date: str | None = None
    requested_delivery_date: str | None = None
    route: str | None = None
    estimated_revenue: float = 0.0
    currency: Currency = Currency.ZAR
    reason: str
    reason_description: str | None = None
    follow_up_required: bool = False
    competitor_won: bool = False


class MissedLoadUpdate(PatchModel):
    customer_name: str | None = None
    load_request_date: str | None = None
    requested_pickup_date: str | None = None
    requested_delivery_date: str | None = None
    route: str | None = None
    estimated_revenue: float | None = None
    currency: Currency | None = None
    reason: str | None = None
    reason_description: str | None = None
    resolution_status: MissedLoadStatus | None = None
    resolution_notes: str | None = None
    follow_up_required: bool | None = None
    competitor_won: bool | None = None
