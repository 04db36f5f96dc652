"""Lead capture and export."""

from .service import LeadService, parse_date, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .exporter import LeadExporter

__all__ = [
    "LeadService",
    "LeadExporter",
    "parse_date",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
]
