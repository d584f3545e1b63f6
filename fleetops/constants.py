"""
Constantes metier / Business constants.
Seuils d'anciennete, ponderations de comportement et configuration par defaut.
Aging thresholds, behavior weights and default configuration.
"""

from fleetops.schemas.common import Currency
from fleetops.schemas.driver import DriverEventType, Severity
from fleetops.schemas.invoice import AgingBand, AgingBucket

# Noms des collections / Collection names
TRIPS = "trips"
DIESEL_RECORDS = "dieselRecords"
DIESEL_NORMS = "dieselNorms"
DRIVER_BEHAVIOR = "driverBehavior"
CAR_REPORTS = "carReports"
ACTION_ITEMS = "actionItems"
SYSTEM_COST_RATES = "systemCostRates"
MISSED_LOADS = "missedLoads"

COLLECTIONS = (
    TRIPS,
    DIESEL_RECORDS,
    DIESEL_NORMS,
    DRIVER_BEHAVIOR,
    CAR_REPORTS,
    ACTION_ITEMS,
    SYSTEM_COST_RATES,
    MISSED_LOADS,
)

# Tranches d'anciennete en jours depuis la facture (bornes incluses) /
# Aging bands in days since invoice (inclusive bounds)
AGING_THRESHOLDS: dict[Currency, dict[AgingBucket, AgingBand]] = {
    Currency.ZAR: {
        AgingBucket.CURRENT: AgingBand(min=0, max=20),
        AgingBucket.WARNING: AgingBand(min=21, max=29),
        AgingBucket.CRITICAL: AgingBand(min=30, max=30),
        AgingBucket.OVERDUE: AgingBand(min=31),
    },
    Currency.USD: {
        AgingBucket.CURRENT: AgingBand(min=0, max=10),
        AgingBucket.WARNING: AgingBand(min=11, max=13),
        AgingBucket.CRITICAL: AgingBand(min=14, max=14),
        AgingBucket.OVERDUE: AgingBand(min=15),
    },
}

# Jours avant relance obligatoire / Days before a follow-up is required
FOLLOW_UP_THRESHOLDS: dict[Currency, int] = {
    Currency.ZAR: 21,
    Currency.USD: 12,
}

# Deduction de score par evenement / Score deduction per event
SEVERITY_DEDUCTIONS: dict[Severity, int] = {
    Severity.CRITICAL: 15,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}

# Points par defaut par type d'evenement / Default points per event type
EVENT_TYPE_POINTS: dict[DriverEventType, int] = {
    DriverEventType.HARSH_BRAKING: 5,
    DriverEventType.HARSH_ACCELERATION: 5,
    DriverEventType.SPEEDING: 10,
    DriverEventType.IDLING: 2,
    DriverEventType.ROUTE_DEVIATION: 8,
    DriverEventType.UNAUTHORIZED_STOP: 7,
    DriverEventType.FATIGUE_ALERT: 15,
    DriverEventType.PHONE_USAGE: 12,
    DriverEventType.SEATBELT_VIOLATION: 10,
    DriverEventType.ACCIDENT: 50,
    DriverEventType.VIOLATION: 20,
    DriverEventType.OTHER: 3,
}

# Libelles des couts systeme / System cost labels
PER_KM_COST_LABELS: dict[str, str] = {
    "repair_maintenance": "Repair & Maintenance",
    "tyre_cost": "Tyre Cost",
}

PER_DAY_COST_LABELS: dict[str, str] = {
    "git_insurance": "GIT Insurance",
    "short_term_insurance": "Short-Term Insurance",
    "tracking_cost": "Tracking Cost",
    "fleet_management_system": "Fleet Management System",
    "licensing": "Licensing",
    "vid_roadworthy": "VID / Roadworthy",
    "wages": "Wages",
    "depreciation": "Depreciation",
}

SYSTEM_COST_CATEGORY = "System Costs"
FUEL_COST_CATEGORY = "Fuel Costs"
DIESEL_REFERENCE_PREFIX = "DIESEL-"

# Normes diesel par defaut / Default diesel norms
DEFAULT_DIESEL_NORMS: list[dict] = [
    {"fleetNumber": "6H", "expectedKmPerLitre": 3.2, "tolerancePercentage": 10},
    {"fleetNumber": "26H", "expectedKmPerLitre": 3.0, "tolerancePercentage": 10},
    {
        "fleetNumber": "6F",
        "expectedKmPerLitre": 0,
        "tolerancePercentage": 15,
        "isReeferUnit": True,
        "litresPerHour": 3.5,
    },
]

# Taux systeme par defaut / Default system cost rates
DEFAULT_SYSTEM_COST_RATES: dict[Currency, dict] = {
    Currency.USD: {
        "currency": "USD",
        "perKmCosts": {"repairMaintenance": 0.15, "tyreCost": 0.08},
        "perDayCosts": {
            "gitInsurance": 25,
            "shortTermInsurance": 15,
            "trackingCost": 5,
            "fleetManagementSystem": 10,
            "licensing": 8,
            "vidRoadworthy": 7,
            "wages": 50,
            "depreciation": 30,
        },
    },
    Currency.ZAR: {
        "currency": "ZAR",
        "perKmCosts": {"repairMaintenance": 2.5, "tyreCost": 1.2},
        "perDayCosts": {
            "gitInsurance": 400,
            "shortTermInsurance": 250,
            "trackingCost": 80,
            "fleetManagementSystem": 150,
            "licensing": 120,
            "vidRoadworthy": 100,
            "wages": 800,
            "depreciation": 500,
        },
    },
}
