"""
Servicio de exportación de categorías a CSV y Excel.
"""
import csv
import io
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List

import xlsxwriter

from catalog_admin.core.exceptions import ValidationException

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Columnas exportadas: (clave del registro, encabezado)
EXPORT_COLUMNS = [
    ("id", "ID"),
    ("name", "Name"),
    ("slug", "Slug"),
    ("description", "Description"),
    ("parent_category", "Parent Category"),
    ("product_count", "Product Count"),
    ("subcategory_count", "Subcategory Count"),
    ("is_active", "Active"),
    ("sort_order", "Sort Order"),
    ("created_at", "Created At"),
]


@dataclass
class ExportFile:
    """Archivo generado listo para descargar."""

    content: bytes
    filename: str
    content_type: str
    count: int


def _columns(include_hierarchy: bool):
    if include_hierarchy:
        return EXPORT_COLUMNS
    return [column for column in EXPORT_COLUMNS if column[0] != "parent_category"]


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def render_csv(records: List[Dict[str, Any]], include_hierarchy: bool = True) -> bytes:
    """Generar CSV (UTF-8 con BOM para que Excel respete los acentos)."""
    columns = _columns(include_hierarchy)
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([header for _, header in columns])

    for record in records:
        writer.writerow([_cell(record.get(key)) for key, _ in columns])

    return output.getvalue().encode("utf-8-sig")


def render_xlsx(records: List[Dict[str, Any]], include_hierarchy: bool = True) -> bytes:
    """Generar un libro Excel con una hoja "Categories"."""
    columns = _columns(include_hierarchy)
    output = io.BytesIO()
    workbook = xlsxwriter.Workbook(output, {"in_memory": True})
    worksheet = workbook.add_worksheet("Categories")
    header_format = workbook.add_format({"bold": True})

    for col, (_, header) in enumerate(columns):
        worksheet.write(0, col, header, header_format)

    for row, record in enumerate(records, start=1):
        for col, (key, _) in enumerate(columns):
            worksheet.write(row, col, _cell(record.get(key)))

    workbook.close()
    return output.getvalue()


def build_export(records: List[Dict[str, Any]], format: str, include_hierarchy: bool = True) -> ExportFile:
    """
    Renderizar los registros en el formato pedido.

    Args:
        records: Registros planos de categorías
        format: "csv" o "xlsx" ("excel" se acepta como alias)
        include_hierarchy: Incluir la columna de categoría padre

    Raises:
        ValidationException: Si el formato no está soportado
    """
    format = (format or "csv").lower()
    if format == "excel":
        format = "xlsx"

    if format == "csv":
        content = render_csv(records, include_hierarchy)
        content_type = CSV_CONTENT_TYPE
    elif format == "xlsx":
        content = render_xlsx(records, include_hierarchy)
        content_type = XLSX_CONTENT_TYPE
    else:
        raise ValidationException(f"Unsupported export format: {format}")

    logger.info(f"Exportadas {len(records)} categorías en formato {format}")
    return ExportFile(
        content=content,
        filename=f"categories-export-{int(time.time() * 1000)}.{format}",
        content_type=content_type,
        count=len(records),
    )
