"""
Service d'efficacite carburant / Fuel efficiency service.
Calcule l'ecart de consommation par rapport aux normes de la flotte.
Computes consumption variance against the fleet norms.
"""

from collections.abc import Iterable

from fleetops.schemas.diesel import DieselNorm, DieselRecord, DieselRecordView, PerformanceStatus


class EfficiencyService:
    """Calcul d'efficacite des pleins / Fill efficiency calculation."""

    @staticmethod
    def find_norm(norms: Iterable[DieselNorm], fleet_number: str) -> DieselNorm | None:
        """Norme d'une flotte, la derniere ecrite l'emporte / Fleet norm, latest write wins."""
        match = None
        for norm in norms:
            if norm.fleet_number == fleet_number:
                match = norm
        return match

    @staticmethod
    def distance_travelled(record: DieselRecord) -> float | None:
        """Distance entre deux releves / Distance between two odometer readings."""
        if record.km_reading is None or record.previous_km_reading is None:
            return None
        distance = record.km_reading - record.previous_km_reading
        return distance if distance > 0 else None

    @staticmethod
    def km_per_litre(record: DieselRecord) -> float | None:
        """Km/L saisi, sinon calcule depuis les releves / Supplied km/L, else computed from readings."""
        if record.km_per_litre:
            return record.km_per_litre
        distance = EfficiencyService.distance_travelled(record)
        if distance is None or not record.litres_filled:
            return None
        return distance / record.litres_filled

    @staticmethod
    def litres_per_hour(record: DieselRecord) -> float | None:
        """L/h pour un groupe frigorifique / L/h for a reefer unit."""
        if not record.hours_operated:
            return None
        return record.litres_filled / record.hours_operated

    @staticmethod
    def variance_percent(actual: float, expected: float) -> float:
        """Ecart relatif en % / Relative variance in %."""
        return (actual - expected) / expected * 100

    @staticmethod
    def classify(variance: float, tolerance: float, higher_is_worse: bool) -> tuple[PerformanceStatus, bool]:
        """
        Statut et besoin de debrief / Status and debrief flag.
        Reefer : plus de litres/h que prevu = mauvais (higher_is_worse=True).
        Camion : moins de km/L que prevu = mauvais (higher_is_worse=False).
        """
        if abs(variance) <= tolerance:
            return PerformanceStatus.NORMAL, False
        worse = variance > 0 if higher_is_worse else variance < 0
        if worse:
            return PerformanceStatus.POOR, True
        return PerformanceStatus.EXCELLENT, False

    @staticmethod
    def evaluate(record: DieselRecord, norm: DieselNorm | None) -> DieselRecordView:
        """Vue derivee d'un plein / Derived view of a fill.

        Sans norme, le plein passe tel quel / Without a norm the fill passes through unchanged.
        """
        base = record.model_dump()
        if norm is None:
            return DieselRecordView.model_validate(base)

        derived: dict = {"tolerance_range": norm.tolerance_percentage}

        if norm.is_reefer_unit:
            lph = EfficiencyService.litres_per_hour(record)
            derived["litres_per_hour"] = lph
            derived["expected_litres_per_hour"] = norm.litres_per_hour
            if lph is not None and norm.litres_per_hour:
                variance = EfficiencyService.variance_percent(lph, norm.litres_per_hour)
                status, debrief = EfficiencyService.classify(
                    variance, norm.tolerance_percentage, higher_is_worse=True
                )
                derived.update(efficiency_variance=variance, performance_status=status, requires_debrief=debrief)
        else:
            kpl = EfficiencyService.km_per_litre(record)
            derived["distance_travelled"] = EfficiencyService.distance_travelled(record)
            derived["km_per_litre"] = kpl
            derived["expected_km_per_litre"] = norm.expected_km_per_litre
            if kpl is not None and norm.expected_km_per_litre:
                variance = EfficiencyService.variance_percent(kpl, norm.expected_km_per_litre)
                status, debrief = EfficiencyService.classify(
                    variance, norm.tolerance_percentage, higher_is_worse=False
                )
                derived.update(efficiency_variance=variance, performance_status=status, requires_debrief=debrief)

        return DieselRecordView.model_validate({**base, **derived})

    @staticmethod
    def evaluate_all(records: Iterable[DieselRecord], norms: Iterable[DieselNorm]) -> list[DieselRecordView]:
        """Projeter un instantane de pleins / Project a snapshot of fills."""
        norms = list(norms)
        return [
            EfficiencyService.evaluate(record, EfficiencyService.find_norm(norms, record.fleet_number))
            for record in records
        ]
