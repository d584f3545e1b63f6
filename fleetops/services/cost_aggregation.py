"""
Service d'agregation des couts / Cost aggregation service.
Statistiques de synthese et generation des couts systeme au km / au jour.
Summary statistics and per-km / per-day system cost generation.
"""

import logging
import uuid
from collections.abc import Iterable, Sequence

from fleetops.constants import (
    PER_DAY_COST_LABELS,
    PER_KM_COST_LABELS,
    SYSTEM_COST_CATEGORY,
)
from fleetops.schemas.common import Currency
from fleetops.schemas.cost_rates import SystemCostRates
from fleetops.schemas.diesel import DieselRecordView, DieselSummary, PerformanceStatus
from fleetops.schemas.trip import CostEntry, CostSummary, SystemCostType, Trip, TripProfitability
from fleetops.utils.dates import now_iso, parse_date

log = logging.getLogger(__name__)


def incremental_mean(values: Sequence[float]) -> float:
    """Moyenne en une passe, somme des v/n / Single-pass mean, sum of v/n.

    Ensemble vide -> 0.0 / Empty input -> 0.0.
    """
    n = len(values)
    if n == 0:
        return 0.0
    total = 0.0
    for value in values:
        total += value / n
    return total


class CostAggregationService:
    """Agregats de couts et de carburant / Cost and fuel aggregates."""

    @staticmethod
    def sum_by_currency(
        rows: Iterable,
        amount_field: str = "amount",
        default_currency: Currency | None = None,
    ) -> dict[str, float]:
        """Totaux par devise / Totals per currency.

        Les lignes sans devise vont dans `default_currency` si fournie, sinon sont ignorees.
        Rows without currency go to `default_currency` when given, otherwise they are skipped.
        """
        totals: dict[str, float] = {c.value: 0.0 for c in Currency}
        for row in rows:
            currency = getattr(row, "currency", None) or default_currency
            if currency is None:
                continue
            key = Currency(currency).value
            totals[key] = totals.get(key, 0.0) + (getattr(row, amount_field, 0.0) or 0.0)
        return totals

    @staticmethod
    def summarize_diesel(views: Sequence[DieselRecordView]) -> DieselSummary:
        """Synthese des pleins filtres / Summary of filtered fills."""
        # Pleins sans devise comptes en ZAR / Fills without currency count as ZAR
        costs = CostAggregationService.sum_by_currency(views, "total_cost", default_currency=Currency.ZAR)
        km_per_litre = [v.km_per_litre for v in views if v.km_per_litre and not v.is_reefer_unit]
        litres_per_hour = [v.litres_per_hour for v in views if v.litres_per_hour and v.is_reefer_unit]

        def _count(status: PerformanceStatus) -> int:
            return sum(1 for v in views if v.performance_status == status)

        return DieselSummary(
            total_records=len(views),
            total_litres=sum(v.litres_filled or 0.0 for v in views),
            total_cost_zar=costs[Currency.ZAR.value],
            total_cost_usd=costs[Currency.USD.value],
            avg_km_per_litre=incremental_mean(km_per_litre),
            avg_litres_per_hour=incremental_mean(litres_per_hour),
            poor_performance=_count(PerformanceStatus.POOR),
            normal_performance=_count(PerformanceStatus.NORMAL),
            excellent_performance=_count(PerformanceStatus.EXCELLENT),
            requires_debrief=sum(1 for v in views if v.requires_debrief),
        )

    @staticmethod
    def summarize_costs(entries: Sequence[CostEntry]) -> CostSummary:
        """Synthese des entrees de cout / Cost entry summary."""
        system_entries = [e for e in entries if e.is_system_generated]
        totals = CostAggregationService.sum_by_currency(entries)
        system_totals = CostAggregationService.sum_by_currency(system_entries)
        return CostSummary(
            total_entries=len(entries),
            total_zar=round(totals[Currency.ZAR.value], 2),
            total_usd=round(totals[Currency.USD.value], 2),
            flagged_entries=sum(1 for e in entries if e.is_flagged),
            system_generated_entries=len(system_entries),
            system_total_zar=round(system_totals[Currency.ZAR.value], 2),
            system_total_usd=round(system_totals[Currency.USD.value], 2),
        )

    @staticmethod
    def trip_duration_days(trip: Trip) -> int | None:
        """Duree en jours (minimum 1) / Duration in days (at least 1)."""
        start = parse_date(trip.start_date)
        end = parse_date(trip.end_date)
        if start is None or end is None:
            return None
        return max(1, (end - start).days)

    @staticmethod
    def synthesize_system_costs(trip: Trip, rates: SystemCostRates | None) -> list[CostEntry]:
        """
        Generer les couts systeme d'un voyage / Generate a trip's system cost entries.
        Une entree par composante au km (taux x distance) et par composante
        journaliere (taux x duree). Taux absents ou d'une autre devise : aucune entree.
        One entry per per-km component (rate x distance) and per per-day
        component (rate x duration). Missing rates or other currency: no entries.
        """
        if rates is None or Currency(rates.currency) != Currency(trip.revenue_currency):
            return []

        currency = Currency(rates.currency).value
        now = now_iso()
        entries: list[CostEntry] = []

        def _entry(key: str, label: str, cost_type: SystemCostType, amount: float, details: str) -> CostEntry:
            return CostEntry(
                id=str(uuid.uuid4()),
                trip_id=trip.id,
                category=SYSTEM_COST_CATEGORY,
                sub_category=label,
                amount=round(amount, 2),
                currency=currency,
                reference_number=f"SYS-{trip.id}-{key}",
                date=trip.end_date or trip.start_date,
                notes=f"Auto-generated from {currency} system rates",
                is_system_generated=True,
                system_cost_type=cost_type,
                system_cost_key=key,
                calculation_details=details,
                created_at=now,
                updated_at=now,
            )

        if trip.distance_km is not None:
            per_km = rates.per_km_costs.model_dump()
            for key, label in PER_KM_COST_LABELS.items():
                rate = per_km.get(key) or 0.0
                entries.append(_entry(
                    key, label, SystemCostType.PER_KM, rate * trip.distance_km,
                    f"{currency} {rate:.2f}/km × {trip.distance_km:g} km",
                ))

        days = CostAggregationService.trip_duration_days(trip)
        if days is not None:
            per_day = rates.per_day_costs.model_dump()
            for key, label in PER_DAY_COST_LABELS.items():
                rate = per_day.get(key) or 0.0
                entries.append(_entry(
                    key, label, SystemCostType.PER_DAY, rate * days,
                    f"{currency} {rate:.2f}/day × {days} day{'s' if days != 1 else ''}",
                ))

        return entries

    @staticmethod
    def is_prior_system_entry(entry: CostEntry, trip_id: str) -> bool:
        """Entree systeme deja generee pour ce voyage / System entry previously generated for this trip."""
        return (
            entry.is_system_generated
            and (entry.trip_id in (None, trip_id))
            and entry.system_cost_type is not None
            and entry.category == SYSTEM_COST_CATEGORY
        )

    @staticmethod
    def regenerate_system_costs(trip: Trip, rates: SystemCostRates | None) -> Trip:
        """Remplacer les couts systeme, idempotent / Replace system costs, idempotent.

        Les entrees systeme precedentes sont retirees puis regenerees ;
        sans taux applicables, le voyage est retourne inchange.
        Prior system entries are removed then regenerated; without applicable
        rates the trip is returned unchanged.
        """
        generated = CostAggregationService.synthesize_system_costs(trip, rates)
        if not generated:
            log.info("No applicable system rates for trip %s (%s)", trip.id, trip.revenue_currency)
            return trip
        kept = [c for c in trip.costs if not CostAggregationService.is_prior_system_entry(c, trip.id)]
        return trip.model_copy(update={"costs": kept + generated})

    @staticmethod
    def trip_profitability(trip: Trip) -> TripProfitability:
        """Rentabilite dans la devise du voyage / Profitability in the trip currency.

        Les couts d'une autre devise sont reportes a part, sans conversion.
        Costs in another currency are reported separately, not converted.
        """
        currency = Currency(trip.revenue_currency)
        rows = [*trip.costs, *trip.additional_costs]
        totals = CostAggregationService.sum_by_currency(rows)
        total_costs = totals.pop(currency.value, 0.0)
        profit = trip.base_revenue - total_costs
        margin = (profit / trip.base_revenue * 100) if trip.base_revenue else 0.0
        return TripProfitability(
            trip_id=trip.id,
            currency=currency,
            revenue=trip.base_revenue,
            total_costs=round(total_costs, 2),
            profit=round(profit, 2),
            margin_percent=round(margin, 2),
            foreign_costs={k: round(v, 2) for k, v in totals.items() if v},
        )
