"""Utilitaires de dates / Date helpers."""

from datetime import date, datetime, timezone


def parse_date(value) -> date | None:
    """Convertir une date ISO (ou horodatage ISO) en date / Parse ISO date or timestamp to a date.

    Retourne None si absente ou invalide / Returns None when missing or invalid.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if len(s) < 10:
        return None
    try:
        return datetime.strptime(s[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def now_iso() -> str:
    """Horodatage UTC ISO 8601 / UTC ISO 8601 timestamp."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def today() -> date:
    return datetime.now(timezone.utc).date()
