"""Gemeinsame Hilfsfunktionen für den Export."""

from datetime import date
from typing import Any

from config.schema import DisplayConfig
from models.entities import FieldKind, FieldSpec
from models.record import Record
from sync.resolver import ReferenceResolver
from sync.views import format_date

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":   "4472C4",
    "bezahlt":  "B3FFB3",
    "offen":    "FFF2B3",
    "sentinel": "FF9999",
    "zebra":    "F5F5F5",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def cell_value(spec: FieldSpec, record: Record, resolver: ReferenceResolver,
               display: DisplayConfig) -> Any:
    """Wert eines Feldes, wie er in der Tabelle erscheinen soll.

    Referenzen werden aufgelöst, Daten formatiert, Wahrheitswerte als Ja/Nein.
    Zahlen bleiben Zahlen, damit Excel damit rechnen kann.
    """
    value = record.fields.get(spec.name)
    if spec.kind == FieldKind.REFERENCE:
        return resolver.display(record, spec.name)
    if spec.kind == FieldKind.BOOL:
        return "Ja" if value else "Nein"
    if value is None:
        return ""
    if spec.kind == FieldKind.DATE:
        return format_date(value, display.date_format)
    return value
