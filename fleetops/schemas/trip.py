"""Schemas voyages et couts / Trip and cost schemas."""

import enum

from pydantic import Field

from fleetops.schemas.common import Currency, DocumentModel, PatchModel


class TripStatus(str, enum.Enum):
    """Cycle de vie d'un voyage / Trip lifecycle status."""
    ACTIVE = "active"
    COMPLETED = "completed"
    INVOICED = "invoiced"
    PAID = "paid"


class PaymentStatus(str, enum.Enum):
    """Statut de paiement facture / Invoice payment status."""
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class SystemCostType(str, enum.Enum):
    """Base de calcul des couts systeme / System cost calculation basis."""
    PER_KM = "per_km"
    PER_DAY = "per_day"


class ClientType(str, enum.Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


# --- Entrees embarquees / Embedded entries ---

class CostEntry(DocumentModel):
    """Entree de cout d'un voyage / Trip cost entry."""
    id: str
    trip_id: str | None = None
    category: str
    sub_category: str | None = None
    amount: float
    currency: Currency = Currency.ZAR
    reference_number: str | None = None
    date: str | None = None
    notes: str | None = None
    is_flagged: bool = False
    flag_reason: str | None = None
    investigation_status: str | None = None  # pending, in-progress, resolved
    is_system_generated: bool = False
    system_cost_type: SystemCostType | None = None
    system_cost_key: str | None = None
    calculation_details: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class AdditionalCost(DocumentModel):
    id: str
    cost_type: str
    amount: float
    currency: Currency = Currency.ZAR
    notes: str | None = None
    added_at: str | None = None
    added_by: str | None = None


class DelayReason(DocumentModel):
    id: str
    delay_type: str
    description: str | None = None
    delay_duration: float | None = None  # heures / hours
    reported_at: str | None = None
    reported_by: str | None = None


class FollowUpRecord(DocumentModel):
    id: str
    follow_up_date: str
    contact_method: str | None = None  # call, email, whatsapp, in_person
    responsible_staff: str | None = None
    notes: str | None = None
    outcome: str | None = None


class Trip(DocumentModel):
    """Voyage / Trip."""
    id: str
    fleet_number: str | None = None
    client_name: str | None = None
    client_type: ClientType | None = None
    driver_name: str | None = None
    route: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    distance_km: float | None = None
    base_revenue: float = 0.0
    revenue_currency: Currency = Currency.ZAR
    status: TripStatus = TripStatus.ACTIVE
    description: str | None = None

    costs: list[CostEntry] = Field(default_factory=list)
    additional_costs: list[AdditionalCost] = Field(default_factory=list)
    delay_reasons: list[DelayReason] = Field(default_factory=list)
    follow_up_history: list[FollowUpRecord] = Field(default_factory=list)

    completed_at: str | None = None
    completed_by: str | None = None

    # Facturation / Invoicing
    invoice_number: str | None = None
    invoice_date: str | None = None
    invoice_due_date: str | None = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_amount: float | None = None
    payment_received_date: str | None = None
    payment_method: str | None = None


# --- Schemas d'API / API schemas ---

class TripCreate(PatchModel):
    fleet_number: str
    client_name: str
    client_type: ClientType = ClientType.EXTERNAL
    driver_name: str
    route: str
    start_date: str
    end_date: str
    distance_km: float
    base_revenue: float
    revenue_currency: Currency = Currency.ZAR
    description: str | None = None


class TripUpdate(PatchModel):
    fleet_number: str | None = None
    client_name: str | None = None
    client_type: ClientType | None = None
    driver_name: str | None = None
    route: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    distance_km: float | None = None
    base_revenue: float | None = None
    revenue_currency: Currency | None = None
    description: str | None = None


class CostEntryCreate(PatchModel):
    category: str
    sub_category: str | None = None
    amount: float
    currency: Currency = Currency.ZAR
    reference_number: str | None = None
    date: str | None = None
    notes: str | None = None
    is_flagged: bool = False
    flag_reason: str | None = None


class CostEntryUpdate(PatchModel):
    category: str | None = None
    sub_category: str | None = None
    amount: float | None = None
    currency: Currency | None = None
    reference_number: str | None = None
    date: str | None = None
    notes: str | None = None
    is_flagged: bool | None = None
    flag_reason: str | None = None
    investigation_status: str | None = None


class AdditionalCostCreate(PatchModel):
    cost_type: str
    amount: float
    currency: Currency = Currency.ZAR
    notes: str | None = None


class DelayReasonCreate(PatchModel):
    delay_type: str
    description: str | None = None
    delay_duration: float | None = None


class FollowUpCreate(PatchModel):
    follow_up_date: str
    contact_method: str | None = None
    responsible_staff: str | None = None
    notes: str | None = None
    outcome: str | None = None


class InvoiceCreate(PatchModel):
    invoice_number: str
    invoice_date: str
    invoice_due_date: str


class InvoicePaymentUpdate(PatchModel):
    payment_status: PaymentStatus
    payment_amount: float | None = None
    payment_received_date: str | None = None
    payment_method: str | None = None


class TripProfitability(PatchModel):
    """Rentabilite d'un voyage / Trip profitability."""
    trip_id: str
    currency: Currency
    revenue: float
    total_costs: float
    profit: float
    margin_percent: float
    foreign_costs: dict[str, float] = {}


class CostSummary(PatchModel):
    """Synthese des entrees de cout / Cost entry summary."""
    total_entries: int = 0
    total_zar: float = 0.0
    total_usd: float = 0.0
    flagged_entries: int = 0
    system_generated_entries: int = 0
    system_total_zar: float = 0.0
    system_total_usd: float = 0.0
