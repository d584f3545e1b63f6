"""Schemas taux de couts systeme / System cost rate schemas."""

from pydantic import Field

from fleetops.schemas.common import Currency, DocumentModel, PatchModel


class PerKmCosts(DocumentModel):
    """Couts au kilometre / Per-km costs."""
    repair_maintenance: float = 0.0
    tyre_cost: float = 0.0


class PerDayCosts(DocumentModel):
    """Couts journaliers / Per-day costs."""
    git_insurance: float = 0.0
    short_term_insurance: float = 0.0
    tracking_cost: float = 0.0
    fleet_management_system: float = 0.0
    licensing: float = 0.0
    vid_roadworthy: float = 0.0
    wages: float = 0.0
    depreciation: float = 0.0


class SystemCostRates(DocumentModel):
    """Jeu de taux actif pour une devise / Active rate set for one currency."""
    currency: Currency
    per_km_costs: PerKmCosts = Field(default_factory=PerKmCosts)
    per_day_costs: PerDayCosts = Field(default_factory=PerDayCosts)
    effective_date: str | None = None
    last_updated: str | None = None
    updated_by: str | None = None


class SystemCostRatesUpdate(PatchModel):
    per_km_costs: PerKmCosts
    per_day_costs: PerDayCosts
    effective_date: str | None = None
    updated_by: str | None = None
