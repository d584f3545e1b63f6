"""
Export CSV/Excel des listes de voyages et de pleins /
CSV/Excel export of trip and fill listings.
"""

import csv
import io
from collections.abc import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from pydantic import BaseModel

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Colonnes exportees par entite / Exported columns per entity
EXPORT_COLUMNS: dict[str, list[str]] = {
    "diesel": ["id", "fleet_number", "date", "driver_name", "fuel_station", "km_reading",
               "previous_km_reading", "distance_travelled", "litres_filled", "total_cost", "currency",
               "km_per_litre", "litres_per_hour", "expected_km_per_litre", "expected_litres_per_hour",
               "efficiency_variance", "performance_status", "requires_debrief", "trip_id"],
    "trips": ["id", "fleet_number", "client_name", "driver_name", "route", "start_date", "end_date",
              "distance_km", "base_revenue", "revenue_currency", "status", "invoice_number",
              "invoice_date", "invoice_due_date", "payment_status"],
}


def _cell(value):
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return round(value, 2)
    return value


def to_rows(records: Sequence[BaseModel], columns: list[str]) -> list[list]:
    """Une ligne par enregistrement, dans l'ordre des colonnes / One row per record, in column order."""
    rows = []
    for record in records:
        data = record.model_dump(mode="json", include=set(columns))
        rows.append([_cell(data.get(c)) for c in columns])
    return rows


def to_csv(columns: list[str], rows: list[list]) -> bytes:
    """CSV UTF-8 avec BOM, separateur ';' / UTF-8 CSV with BOM, ';' separator."""
    output = io.StringIO()
    writer = csv.writer(output, delimiter=";")
    writer.writerow(columns)
    writer.writerows(["" if v is None else v for v in row] for row in rows)
    return ("\ufeff" + output.getvalue()).encode("utf-8")


def to_xlsx(columns: list[str], rows: list[list], sheet_name: str) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name
    ws.append(columns)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export(entity: str, records: Sequence[BaseModel], fmt: str) -> tuple[bytes, str]:
    """Contenu et type MIME de l'export / Export content and media type."""
    columns = EXPORT_COLUMNS[entity]
    rows = to_rows(records, columns)
    if fmt == "csv":
        return to_csv(columns, rows), "text/csv"
    return to_xlsx(columns, rows, sheet_name=entity.capitalize()), XLSX_MEDIA_TYPE
