"""Schemas diesel / Diesel consumption schemas."""

import enum

from fleetops.schemas.common import Currency, DocumentModel, PatchModel


class PerformanceStatus(str, enum.Enum):
    """Statut de performance carburant / Fuel performance status."""
    POOR = "poor"
    NORMAL = "normal"
    EXCELLENT = "excellent"


class DieselRecord(DocumentModel):
    """Plein de diesel / Diesel fill record."""
    id: str
    fleet_number: str
    date: str
    driver_name: str | None = None
    fuel_station: str | None = None
    km_reading: float | None = None
    previous_km_reading: float | None = None
    litres_filled: float = 0.0
    total_cost: float = 0.0
    cost_per_litre: float | None = None
    currency: Currency | None = None
    km_per_litre: float | None = None  # saisi / supplied
    trip_id: str | None = None
    is_reefer_unit: bool = False
    hours_operated: float | None = None
    notes: str | None = None

    # Debrief
    debrief_date: str | None = None
    debrief_notes: str | None = None
    debrief_signed_by: str | None = None


class DieselRecordView(DieselRecord):
    """Plein avec champs derives, jamais persiste / Fill with derived fields, never persisted."""
    distance_travelled: float | None = None
    litres_per_hour: float | None = None
    expected_km_per_litre: float | None = None
    expected_litres_per_hour: float | None = None
    efficiency_variance: float | None = None
    performance_status: PerformanceStatus | None = None
    requires_debrief: bool = False
    tolerance_range: float | None = None


class DieselNorm(DocumentModel):
    """Norme de consommation par flotte / Per-fleet consumption norm."""
    fleet_number: str
    expected_km_per_litre: float = 0.0
    litres_per_hour: float | None = None
    is_reefer_unit: bool = False
    tolerance_percentage: float = 10.0
    last_updated: str | None = None
    updated_by: str | None = None


class DieselSummary(PatchModel):
    """Statistiques de synthese / Summary statistics."""
    total_records: int = 0
    total_litres: float = 0.0
    total_cost_zar: float = 0.0
    total_cost_usd: float = 0.0
    avg_km_per_litre: float = 0.0
    avg_litres_per_hour: float = 0.0
    poor_performance: int = 0
    normal_performance: int = 0
    excellent_performance: int = 0
    requires_debrief: int = 0


# --- Schemas d'API / API schemas ---

class DieselRecordCreate(PatchModel):
    fleet_number: str
    date: str
    driver_name: str | None = None
    fuel_station: str | None = None
    km_reading: float | None = None
    previous_km_reading: float | None = None
    litres_filled: float
    total_cost: float
    cost_per_litre: float | None = None
    currency: Currency | None = None
    km_per_litre: float | None = None
    is_reefer_unit: bool = False
    hours_operated: float | None = None
    notes: str | None = None


class DieselRecordUpdate(PatchModel):
    fleet_number: str | None = None
    date: str | None = None
    driver_name: str | None = None
    fuel_station: str | None = None
    km_reading: float | None = None
    previous_km_reading: float | None = None
    litres_filled: float | None = None
    total_cost: float | None = None
    cost_per_litre: float | None = None
    currency: Currency | None = None
    km_per_litre: float | None = None
    is_reefer_unit: bool | None = None
    hours_operated: float | None = None
    notes: str | None = None


class DebriefSubmit(PatchModel):
    debrief_date: str
    debrief_notes: str
    debrief_signed_by: str


class DieselNormUpdate(PatchModel):
    expected_km_per_litre: float = 0.0
    litres_per_hour: float | None = None
    is_reefer_unit: bool = False
    tolerance_percentage: float = 10.0
    updated_by: str | None = None
