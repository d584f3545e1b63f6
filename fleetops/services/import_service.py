"""
Service d'import CSV/Excel / CSV/Excel import service.
Parse les fichiers et retourne des listes de dictionnaires.
"""

import csv
import io
import uuid
from datetime import date as dt_date, datetime as dt_datetime
from typing import Any

from openpyxl import load_workbook
from pydantic.alias_generators import to_camel

_NA_VALUES = {"#n/a", "#na", "n/a", "na", "#ref!", "#value!", "#div/0!", "-", "null", "none", "nan"}

# Alias de colonnes connus / Known column aliases
_COL_ALIASES = {
    "fleet": "fleet_number",
    "fleet_no": "fleet_number",
    "driver": "driver_name",
    "client": "client_name",
    "station": "fuel_station",
    "litres": "litres_filled",
    "liters": "litres_filled",
    "km": "km_reading",
    "odometer": "km_reading",
    "cost": "total_cost",
    "revenue": "base_revenue",
    "distance": "distance_km",
    "currency_code": "currency",
}


def _clean_header(header: Any, index: int) -> str:
    if not header:
        return f"col_{index}"
    key = str(header).strip().lower().replace(" ", "_").replace("-", "_")
    return _COL_ALIASES.get(key, key)


class ImportService:
    """Import de données depuis fichiers / Data import from files."""

    # Champs attendus par entité / Expected fields per entity
    ENTITY_FIELDS: dict[str, list[str]] = {
        "trips": ["fleet_number", "client_name", "client_type", "driver_name", "route",
                  "start_date", "end_date", "distance_km", "base_revenue", "revenue_currency", "description"],
        "diesel": ["fleet_number", "date", "driver_name", "fuel_station", "km_reading", "previous_km_reading",
                   "litres_filled", "total_cost", "cost_per_litre", "currency", "km_per_litre",
                   "is_reefer_unit", "hours_operated", "notes"],
    }

    REQUIRED_FIELDS: dict[str, set[str]] = {
        "trips": {"fleet_number", "client_name", "start_date", "end_date"},
        "diesel": {"fleet_number", "date", "litres_filled"},
    }

    FLOAT_FIELDS = {"distance_km", "base_revenue", "km_reading", "previous_km_reading", "litres_filled",
                    "total_cost", "cost_per_litre", "km_per_litre", "hours_operated"}

    BOOL_FIELDS = {"is_reefer_unit"}

    @staticmethod
    def parse_csv(content: bytes) -> list[dict[str, Any]]:
        """Parser un fichier CSV / Parse a CSV file."""
        text = content.decode("utf-8-sig")  # BOM-safe
        reader = csv.reader(io.StringIO(text), delimiter=";")
        rows = list(reader)
        # Essayer aussi avec la virgule / Try comma delimiter too
        if not rows or len(rows[0]) <= 1:
            rows = list(csv.reader(io.StringIO(text), delimiter=","))
        if not rows:
            return []
        headers = [_clean_header(h, i) for i, h in enumerate(rows[0])]
        return [
            dict(zip(headers, row))
            for row in rows[1:]
            if any(cell.strip() for cell in row)
        ]

    @staticmethod
    def parse_excel(content: bytes) -> list[dict[str, Any]]:
        """Parser un fichier Excel / Parse an Excel file."""
        wb = load_workbook(filename=io.BytesIO(content), read_only=True)
        ws = wb.active
        if ws is None:
            return []

        rows_iter = ws.iter_rows(values_only=True)
        headers = next(rows_iter, None)
        if not headers:
            wb.close()
            return []

        clean_headers = [_clean_header(h, i) for i, h in enumerate(headers)]
        result = []
        for row in rows_iter:
            record = dict(zip(clean_headers, row))
            if any(v is not None for v in record.values()):
                result.append(record)

        wb.close()
        return result

    @staticmethod
    def parse_file(content: bytes, filename: str) -> list[dict[str, Any]]:
        """Parser un fichier selon son extension / Parse file based on extension."""
        ext = filename.rsplit(".", 1)[-1].lower()
        if ext == "csv":
            return ImportService.parse_csv(content)
        elif ext in ("xlsx", "xlsm"):
            return ImportService.parse_excel(content)
        raise ValueError(f"Unsupported file type: {ext}")

    @staticmethod
    def coerce_value(val: Any, field_name: str) -> Any:
        """Convertir les valeurs selon le nom du champ / Coerce values based on field name."""
        if val is None:
            return None
        # Types natifs openpyxl avant str() / Native openpyxl types before str()
        if isinstance(val, dt_datetime):
            return val.strftime("%Y-%m-%d")
        if isinstance(val, dt_date):
            return val.isoformat()

        s = str(val).strip()
        if s == "" or s.lower() in _NA_VALUES:
            return None

        if field_name in ImportService.BOOL_FIELDS:
            return s.lower() in ("true", "1", "yes", "y", "reefer")
        if field_name in ImportService.FLOAT_FIELDS:
            try:
                return float(s.replace(" ", "").replace(",", "."))
            except ValueError:
                return None
        if field_name in ("currency", "revenue_currency"):
            return s.upper()
        return s

    @staticmethod
    def to_documents(entity: str, rows: list[dict[str, Any]]) -> tuple[list[tuple[str, dict]], list[str]]:
        """
        Convertir des lignes en documents / Convert rows into documents.
        Retourne (documents avec id, erreurs par ligne) / Returns (documents with id, per-row errors).
        """
        fields = ImportService.ENTITY_FIELDS[entity]
        required = ImportService.REQUIRED_FIELDS[entity]
        documents: list[tuple[str, dict]] = []
        errors: list[str] = []

        # Ligne 2 = premiere ligne de donnees / Row 2 = first data row
        for line, row in enumerate(rows, 2):
            values = {f: ImportService.coerce_value(row.get(f), f) for f in fields}
            missing = sorted(f for f in required if values.get(f) in (None, ""))
            if missing:
                errors.append(f"Row {line}: missing {', '.join(missing)}")
                continue
            doc_id = str(row.get("id") or uuid.uuid4())
            document = {to_camel(k): v for k, v in values.items() if v is not None}
            document["id"] = doc_id
            documents.append((doc_id, document))
        return documents, errors
