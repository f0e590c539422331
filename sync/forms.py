"""Formulardaten ↔ Feldwerte im Speicher.

Formularwerte sind Strings (Text, Datum, Zahl, Datensatz-ID einer Referenz)
bzw. bool. Beim Absenden werden Zahlen geparst, Referenz-IDs zu Referenz-URLs
kodiert und leere optionale Felder weggelassen. Ein unverändert erneut
abgeschicktes Bearbeiten-Formular ergibt dieselben Feldwerte wie vorher.
"""

from datetime import date, time
from typing import Any, Optional, Union

from config.schema import KursverwaltungConfig
from models.entities import EntitySchema, EntityType, FieldKind, FieldSpec
from models.record import Record
from models.reference import build_reference, extract_record_id


class FormValidationError(ValueError):
    """Formular unvollständig oder ungültig (vor jedem Aufruf des Speichers)."""

    def __init__(self, schema: EntitySchema, problems: list[str]):
        self.problems = problems
        super().__init__(f"{schema.singular}: " + "; ".join(problems))


def _blank(spec: FieldSpec) -> Union[str, bool]:
    return False if spec.kind == FieldKind.BOOL else ""


def empty_form(schema: EntitySchema, today: Optional[date] = None) -> dict[str, Any]:
    """Leeres Formular für eine Neuanlage."""
    form = {f.name: _blank(f) for f in schema.fields}
    if schema.entity_type == EntityType.ANMELDUNGEN:
        form["anmeldedatum"] = (today or date.today()).isoformat()
    return form


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def form_from_record(schema: EntitySchema, record: Record) -> dict[str, Any]:
    """Formular zum Bearbeiten: Referenzen als Datensatz-IDs, nicht als Namen."""
    form: dict[str, Any] = {}
    for f in schema.fields:
        value = record.fields.get(f.name)
        if f.is_reference:
            form[f.name] = extract_record_id(value) or ""
        elif f.kind == FieldKind.BOOL:
            form[f.name] = bool(value)
        elif f.kind == FieldKind.NUMBER:
            form[f.name] = "" if value is None else _format_number(value)
        else:
            form[f.name] = "" if value is None else str(value)
    return form


def parse_number(text: str) -> Union[int, float]:
    """ "20" → 20, "49.5" / "49,5" → 49.5. ValueError bei ungültiger Eingabe."""
    cleaned = text.strip().replace(",", ".")
    number = float(cleaned)
    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(text)
    if number.is_integer() and "." not in cleaned and "e" not in cleaned.lower():
        return int(cleaned)
    return number


def _check_date(text: str) -> None:
    # Datum oder Zeitstempel (JJJJ-MM-TT[THH:MM[:SS]])
    day, sep, time_part = text.partition("T")
    date.fromisoformat(day)
    if sep:
        time.fromisoformat(time_part)


def build_payload(schema: EntitySchema, form: dict[str, Any],
                  config: KursverwaltungConfig,
                  original: Optional[Record] = None) -> dict[str, Any]:
    """Formular → Feldwerte für create/update.

    ``original`` ist der bearbeitete Datensatz: ein Ja/Nein-Feld, das dort
    fehlt und im Formular nicht gesetzt wurde, bleibt weg.

    Raises:
        FormValidationError: Pflichtfelder fehlen oder Werte sind ungültig.
    """
    payload: dict[str, Any] = {}
    problems: list[str] = []

    for f in schema.fields:
        raw = form.get(f.name)

        if f.kind == FieldKind.BOOL:
            if raw or original is None or f.name in original.fields:
                payload[f.name] = bool(raw)
            continue

        text = "" if raw is None else str(raw).strip()
        if not text:
            if f.required:
                problems.append(f"{f.label} fehlt")
            continue

        if f.is_reference:
            try:
                payload[f.name] = build_reference(f.target, text, config)
            except ValueError:
                problems.append(f"{f.label}: ungültige Datensatz-ID {text!r}")
        elif f.kind == FieldKind.NUMBER:
            try:
                payload[f.name] = parse_number(text)
            except ValueError:
                problems.append(f"{f.label}: keine Zahl ({text!r})")
        elif f.kind == FieldKind.DATE:
            try:
                _check_date(text)
            except ValueError:
                problems.append(f"{f.label}: kein Datum im Format JJJJ-MM-TT ({text!r})")
            else:
                payload[f.name] = text
        elif f.kind == FieldKind.EMAIL and "@" not in text:
            problems.append(f"{f.label}: keine E-Mail-Adresse ({text!r})")
        else:
            payload[f.name] = str(raw)

    if problems:
        raise FormValidationError(schema, problems)
    return payload
