"""Schemas anciennete des factures / Invoice aging schemas."""

import enum

from pydantic import BaseModel

from fleetops.schemas.common import Currency, PatchModel


class AgingBucket(str, enum.Enum):
    CURRENT = "current"
    WARNING = "warning"
    CRITICAL = "critical"
    OVERDUE = "overdue"


class AgingBand(BaseModel):
    """Bornes en jours, incluses / Inclusive day bounds (max None = unbounded)."""
    min: int
    max: int | None = None

    def contains(self, days: int) -> bool:
        return days >= self.min and (self.max is None or days <= self.max)


class InvoiceAging(PatchModel):
    """Anciennete d'une facture / Aging of one invoice."""
    trip_id: str
    invoice_number: str | None = None
    client_name: str | None = None
    currency: Currency
    invoice_date: str
    invoice_due_date: str
    aging_days: int
    bucket: AgingBucket
    outstanding_amount: float
    follow_up_required: bool


class AgingBucketTotal(PatchModel):
    count: int = 0
    outstanding_amount: float = 0.0


class AgingSummary(PatchModel):
    """Synthese par devise et tranche / Summary per currency and bucket."""
    as_of: str
    buckets: dict[str, dict[str, AgingBucketTotal]] = {}
    follow_ups_required: int = 0
    invoices: list[InvoiceAging] = []
