"""Lead export to CSV and Excel."""

import csv
import io
import logging
from datetime import date
from typing import Dict, List, Optional, Any

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from ..storage.models import Lead

logger = logging.getLogger(__name__)

BASE_COLUMNS = ["ID", "Data de Criação", "Landing Page", "Slug"]
MIN_COLUMN_WIDTH = 20
SHEET_NAME = "Leads"


class LeadExporter:
    """Turns a list of leads into downloadable files."""

    def __init__(self, leads: List[Lead]):
        self.leads = leads

    def columns(self) -> List[str]:
        """Base columns followed by every data key in first-seen order."""
        columns = list(BASE_COLUMNS)
        for lead in self.leads:
            for key in (lead.data or {}):
                if key not in columns:
                    columns.append(key)
        return columns

    def rows(self) -> List[Dict[str, Any]]:
        rows = []
        for lead in self.leads:
            row = {
                "ID": lead.id,
                "Data de Criação": lead.created_at.strftime("%d/%m/%Y %H:%M"),
                "Landing Page": lead.landing_page_title or "N/A",
                "Slug": lead.landing_page_slug or "N/A",
            }
            for key, value in (lead.data or {}).items():
                if key not in BASE_COLUMNS:
                    row[key] = value
            rows.append(row)
        return rows

    @staticmethod
    def filename(extension: str, today: Optional[date] = None) -> str:
        today = today or date.today()
        return f"leads-{today.strftime('%Y-%m-%d')}.{extension}"

    def to_csv(self) -> str:
        columns = self.columns()
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=columns, restval="")
        writer.writeheader()
        for row in self.rows():
            writer.writerow(row)
        logger.info(f"Exported {len(self.leads)} leads to CSV")
        return output.getvalue()

    def to_xlsx(self) -> bytes:
        columns = self.columns()

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = SHEET_NAME

        ws.append(columns)
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for row in self.rows():
            ws.append([_cell_value(row.get(column, "")) for column in columns])

        width = max(MIN_COLUMN_WIDTH, max(len(c) for c in columns))
        for index in range(1, len(columns) + 1):
            ws.column_dimensions[get_column_letter(index)].width = width

        output = io.BytesIO()
        wb.save(output)
        logger.info(f"Exported {len(self.leads)} leads to XLSX")
        return output.getvalue()


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (int, float, str)):
        return value
    return str(value)
