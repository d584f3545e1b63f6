"""Schemas comportement chauffeur / Driver behavior schemas."""

import enum

from fleetops.schemas.common import DocumentModel, PatchModel


class DriverEventType(str, enum.Enum):
    """Type d'evenement de conduite / Driving event type."""
    HARSH_BRAKING = "harsh_braking"
    HARSH_ACCELERATION = "harsh_acceleration"
    SPEEDING = "speeding"
    IDLING = "idling"
    ROUTE_DEVIATION = "route_deviation"
    UNAUTHORIZED_STOP = "unauthorized_stop"
    FATIGUE_ALERT = "fatigue_alert"
    PHONE_USAGE = "phone_usage"
    SEATBELT_VIOLATION = "seatbelt_violation"
    ACCIDENT = "accident"
    VIOLATION = "violation"
    OTHER = "other"


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventStatus(str, enum.Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISPUTED = "disputed"


class CARStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


class DriverBehaviorEvent(DocumentModel):
    """Evenement de conduite / Driver behavior event."""
    id: str
    driver_name: str
    fleet_number: str | None = None
    event_date: str
    event_time: str | None = None
    event_type: DriverEventType
    severity: Severity
    points: int = 0
    status: EventStatus = EventStatus.PENDING
    description: str | None = None
    location: str | None = None
    reported_by: str | None = None
    reported_at: str | None = None
    action_taken: str | None = None
    car_report_id: str | None = None


class CARReport(DocumentModel):
    """Rapport d'action corrective / Corrective action report."""
    id: str
    report_number: str
    responsible_person: str
    date_of_incident: str | None = None
    date_due: str | None = None
    driver_name: str | None = None
    fleet_number: str | None = None
    problem_identification: str | None = None
    root_cause_analysis: str | None = None
    corrective_actions: str | None = None
    preventative_measures: str | None = None
    status: CARStatus = CARStatus.DRAFT
    reference_event_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class DriverPerformance(PatchModel):
    """Synthese par chauffeur / Per-driver summary."""
    driver_name: str
    total_events: int = 0
    total_points: int = 0
    critical_events: int = 0
    high_events: int = 0
    medium_events: int = 0
    low_events: int = 0
    resolved_events: int = 0
    behavior_score: int = 100


# --- Schemas d'API / API schemas ---

class DriverEventCreate(PatchModel):
    driver_name: str
    fleet_number: str | None = None
    event_date: str
    event_time: str | None = None
    event_type: DriverEventType
    severity: Severity
    points: int | None = None
    status: EventStatus = EventStatus.PENDING
    description: str | None = None
    location: str | None = None
    reported_by: str | None = None
    action_taken: str | None = None


class DriverEventUpdate(PatchModel):
    """Mise a jour ; les points sont figes a la creation / Update; points are fixed at creation."""
    driver_name: str | None = None
    fleet_number: str | None = None
    event_date: str | None = None
    event_time: str | None = None
    event_type: DriverEventType | None = None
    severity: Severity | None = None
    status: EventStatus | None = None
    description: str | None = None
    location: str | None = None
    action_taken: str | None = None


class CARReportCreate(PatchModel):
    report_number: str
    responsible_person: str
    date_of_incident: str | None = None
    date_due: str | None = None
    driver_name: str | None = None
    fleet_number: str | None = None
    problem_identification: str | None = None
    root_cause_analysis: str | None = None
    corrective_actions: str | None = None
    preventative_measures: str | None = None
    status: CARStatus = CARStatus.DRAFT
    reference_event_id: str | None = None


class CARReportUpdate(PatchModel):
    responsible_person: str | None = None
    date_due: str | None = None
    problem_identification: str | None = None
    root_cause_analysis: str | None = None
    corrective_actions: str | None = None
    preventative_measures: str | None = None
    status: CARStatus | None = None
