"""Export-Modul: Excel (openpyxl) für die Kursverwaltung."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
