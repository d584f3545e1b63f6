"""
Service de notation des chauffeurs / Driver scoring service.

Le score est toujours recalcule en une passe complete sur les evenements :
un evenement peut etre reclasse apres coup.
The score is always recomputed with a full pass over the events: an event
may be reclassified after the fact.
"""

from collections.abc import Iterable

from fleetops.constants import EVENT_TYPE_POINTS, SEVERITY_DEDUCTIONS
from fleetops.schemas.driver import (
    DriverBehaviorEvent,
    DriverEventType,
    DriverPerformance,
    EventStatus,
    Severity,
)

MAX_SCORE = 100


class DriverScoringService:
    """Score de comportement / Behavior score."""

    @staticmethod
    def default_points(event_type: DriverEventType | str) -> int:
        """Points par defaut d'un type d'evenement / Default points for an event type."""
        return EVENT_TYPE_POINTS.get(DriverEventType(event_type), 0)

    @staticmethod
    def behavior_score(severity_counts: dict[Severity, int]) -> int:
        """100 moins les deductions, plancher a 0 / 100 minus deductions, floored at 0."""
        deduction = sum(SEVERITY_DEDUCTIONS[s] * count for s, count in severity_counts.items())
        return max(0, MAX_SCORE - deduction)

    @staticmethod
    def score(events: Iterable[DriverBehaviorEvent], driver_name: str | None = None) -> DriverPerformance:
        """Synthese pour un chauffeur / Summary for one driver."""
        events = list(events)
        if driver_name is None:
            driver_name = events[0].driver_name if events else ""

        counts = {s: 0 for s in Severity}
        total_points = 0
        resolved = 0
        for event in events:
            counts[Severity(event.severity)] += 1
            total_points += event.points or 0
            if event.status == EventStatus.RESOLVED:
                resolved += 1

        return DriverPerformance(
            driver_name=driver_name,
            total_events=len(events),
            total_points=total_points,
            critical_events=counts[Severity.CRITICAL],
            high_events=counts[Severity.HIGH],
            medium_events=counts[Severity.MEDIUM],
            low_events=counts[Severity.LOW],
            resolved_events=resolved,
            behavior_score=DriverScoringService.behavior_score(counts),
        )

    @staticmethod
    def all_drivers_performance(events: Iterable[DriverBehaviorEvent]) -> list[DriverPerformance]:
        """Synthese de tous les chauffeurs, ordre de premiere apparition /
        All drivers, in first-seen order."""
        by_driver: dict[str, list[DriverBehaviorEvent]] = {}
        for event in events:
            by_driver.setdefault(event.driver_name, []).append(event)
        return [DriverScoringService.score(evts, name) for name, evts in by_driver.items()]
