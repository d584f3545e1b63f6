"""
Filtrage et tri des enregistrements / Record filtering and sorting.
Chaque critere est optionnel ; absent = pas de filtre.
Each criterion is optional; absent = pass-through.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel

from fleetops.utils.dates import parse_date

T = TypeVar("T")


class FilterCriteria(BaseModel):
    """Criteres d'egalite et de plage de dates / Equality and date-range criteria."""
    fleet_number: str | None = None
    driver_name: str | None = None
    client_name: str | None = None
    status: str | None = None
    performance_status: str | None = None
    fuel_station: str | None = None
    currency: str | None = None
    date_from: str | None = None
    date_to: str | None = None


# Criteres d'egalite : critere -> attribut / Equality criteria: criterion -> attribute
_EQUALITY_FIELDS = (
    "fleet_number",
    "driver_name",
    "client_name",
    "status",
    "performance_status",
    "fuel_station",
    "currency",
)


def _value(record: Any, field: str) -> Any:
    if isinstance(record, dict):
        return record.get(field)
    return getattr(record, field, None)


def build_predicates(criteria: FilterCriteria, date_field: str = "date") -> list[Callable[[Any], bool]]:
    """Construire la liste ordonnee des predicats / Build the ordered predicate list."""
    predicates: list[Callable[[Any], bool]] = []

    for field in _EQUALITY_FIELDS:
        expected = getattr(criteria, field)
        if expected in (None, ""):
            continue
        predicates.append(lambda r, f=field, v=expected: _value(r, f) == v)

    start = parse_date(criteria.date_from)
    end = parse_date(criteria.date_to)
    if start is not None or end is not None:
        def _in_range(record: Any) -> bool:
            d = parse_date(_value(record, date_field))
            if d is None:
                return False
            return (start is None or d >= start) and (end is None or d <= end)

        predicates.append(_in_range)
    return predicates


def apply_filters(records: Iterable[T], criteria: FilterCriteria | None, date_field: str = "date") -> list[T]:
    """Filtrer sans modifier l'entree / Filter without mutating the input."""
    if criteria is None:
        return list(records)
    predicates = build_predicates(criteria, date_field)
    return [r for r in records if all(p(r) for p in predicates)]


def sort_records(records: Sequence[T], key: str = "date", descending: bool = True) -> list[T]:
    """
    Tri stable sur une cle / Stable sort on one key.
    Egalites : ordre d'origine conserve. Valeurs absentes en dernier.
    Ties keep the original order. Missing values go last.
    Si toutes les valeurs sont des dates, le tri se fait sur le jour calendaire.
    When every value parses as a date, ordering uses the calendar day.
    """
    present = [r for r in records if _value(r, key) not in (None, "")]
    missing = [r for r in records if _value(r, key) in (None, "")]
    values = [_value(r, key) for r in present]
    days = [parse_date(v) for v in values]
    if present and all(d is not None for d in days):
        values = days
    order = sorted(range(len(present)), key=values.__getitem__, reverse=descending)
    return [present[i] for i in order] + missing


def filter_and_sort(
    records: Iterable[T],
    criteria: FilterCriteria | None = None,
    date_field: str = "date",
    sort_key: str | None = None,
    descending: bool = True,
) -> list[T]:
    """Filtrer puis trier (date decroissante par defaut) / Filter then sort (date descending by default)."""
    filtered = apply_filters(records, criteria, date_field)
    return sort_records(filtered, sort_key or date_field, descending)
