"""Entitätstypen und ihre Feld-Schemata (Pydantic v2)."""

import unicodedata
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class EntityType(str, Enum):
    KURSE = "kurse"
    DOZENTEN = "dozenten"
    TEILNEHMER = "teilnehmer"
    RAEUME = "raeume"
    ANMELDUNGEN = "anmeldungen"

    @classmethod
    def parse(cls, text: str) -> "EntityType":
        """Akzeptiert Bezeichner oder deutschen Namen ("Räume", "raeume", "KURSE")."""
        key = _fold(text)
        for et in cls:
            if key in (et.value, _fold(SCHEMAS[et].label)):
                return et
        raise ValueError(
            f"Unbekannter Entitätstyp: {text!r}. "
            f"Erlaubt: {', '.join(s.label for s in SCHEMAS.values())}"
        )


def _fold(text: str) -> str:
    """Kleinschreibung, Umlaute als ae/oe/ue (Räume → raeume)."""
    text = unicodedata.normalize("NFC", text.strip().lower())
    for umlaut, repl in (("ä", "ae"), ("ö", "oe"), ("ü", "ue"), ("ß", "ss")):
        text = text.replace(umlaut, repl)
    return text


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    BOOL = "bool"
    REFERENCE = "reference"


class FieldSpec(BaseModel):
    """Ein Feld eines Entitätstyps."""

    name: str                             # Feldname im Speicher ("max_teilnehmer")
    label: str                            # Beschriftung im Formular
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    target: Optional[EntityType] = None   # nur für REFERENCE

    @property
    def is_reference(self) -> bool:
        return self.kind == FieldKind.REFERENCE


class EntitySchema(BaseModel):
    """Schema eines Entitätstyps: Felder, Anzeigefeld, Beschriftungen."""

    entity_type: EntityType
    label: str                            # "Kurse"
    singular: str                         # "Kurs"
    description: str                      # Untertitel des Tabs
    fields: list[FieldSpec]
    # Feld, das bei Referenzen auf diesen Typ angezeigt wird
    display_field: Optional[str] = None

    def field(self, name: str) -> FieldSpec:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"{self.label}: unbekanntes Feld {name!r}")

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def reference_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if f.is_reference]

    @property
    def auxiliary_types(self) -> list[EntityType]:
        """Referenzierte Entitätstypen in Feldreihenfolge, ohne Duplikate."""
        seen: list[EntityType] = []
        for f in self.reference_fields:
            if f.target not in seen:
                seen.append(f.target)
        return seen

    def display_value(self, fields: dict[str, Any]) -> Optional[Any]:
        if self.display_field is None:
            return None
        return fields.get(self.display_field)

    def choice_label(self, record) -> str:
        """Beschriftung eines Datensatzes in einer Referenz-Auswahl."""
        if self.entity_type == EntityType.RAEUME:
            name = record.fields.get("raumname") or ""
            gebaeude = record.fields.get("gebaeude")
            return f"{name} ({gebaeude})" if gebaeude else name
        value = self.display_value(record.fields)
        return str(value) if value not in (None, "") else record.record_id


# ─── SCHEMA-TABELLE ───

SCHEMAS: dict[EntityType, EntitySchema] = {
    EntityType.KURSE: EntitySchema(
        entity_type=EntityType.KURSE,
        label="Kurse",
        singular="Kurs",
        description="Verwalte alle Kurse und ihre Details",
        display_field="titel",
        fields=[
            FieldSpec(name="titel", label="Titel", required=True),
            FieldSpec(name="beschreibung", label="Beschreibung"),
            FieldSpec(name="startdatum", label="Startdatum",
                      kind=FieldKind.DATE, required=True),
            FieldSpec(name="enddatum", label="Enddatum",
                      kind=FieldKind.DATE, required=True),
            FieldSpec(name="max_teilnehmer", label="Max. Teilnehmer",
                      kind=FieldKind.NUMBER, required=True),
            FieldSpec(name="preis", label="Preis (€)",
                      kind=FieldKind.NUMBER, required=True),
            FieldSpec(name="dozent", label="Dozent", kind=FieldKind.REFERENCE,
                      required=True, target=EntityType.DOZENTEN),
            FieldSpec(name="raum", label="Raum", kind=FieldKind.REFERENCE,
                      required=True, target=EntityType.RAEUME),
        ],
    ),
    EntityType.DOZENTEN: EntitySchema(
        entity_type=EntityType.DOZENTEN,
        label="Dozenten",
        singular="Dozent",
        description="Verwalte alle Dozenten und ihre Fachgebiete",
        display_field="name",
        fields=[
            FieldSpec(name="name", label="Name", required=True),
            FieldSpec(name="email", label="E-Mail", kind=FieldKind.EMAIL,
                      required=True),
            FieldSpec(name="telefon", label="Telefon"),
            FieldSpec(name="fachgebiet", label="Fachgebiet"),
        ],
    ),
    EntityType.TEILNEHMER: EntitySchema(
        entity_type=EntityType.TEILNEHMER,
        label="Teilnehmer",
        singular="Teilnehmer",
        description="Verwalte alle Kursteilnehmer",
        display_field="name",
        fields=[
            FieldSpec(name="name", label="Name", required=True),
            FieldSpec(name="email", label="E-Mail", kind=FieldKind.EMAIL,
                      required=True),
            FieldSpec(name="telefon", label="Telefon"),
            FieldSpec(name="geburtsdatum", label="Geburtsdatum",
                      kind=FieldKind.DATE),
        ],
    ),
    EntityType.RAEUME: EntitySchema(
        entity_type=EntityType.RAEUME,
        label="Räume",
        singular="Raum",
        description="Verwalte alle Räume und ihre Kapazitäten",
        display_field="raumname",
        fields=[
            FieldSpec(name="raumname", label="Raumname", required=True),
            FieldSpec(name="gebaeude", label="Gebäude", required=True),
            FieldSpec(name="kapazitaet", label="Kapazität",
                      kind=FieldKind.NUMBER, required=True),
        ],
    ),
    EntityType.ANMELDUNGEN: EntitySchema(
        entity_type=EntityType.ANMELDUNGEN,
        label="Anmeldungen",
        singular="Anmeldung",
        description="Verwalte Kursanmeldungen und Zahlungsstatus",
        fields=[
            FieldSpec(name="teilnehmer", label="Teilnehmer",
                      kind=FieldKind.REFERENCE, required=True,
                      target=EntityType.TEILNEHMER),
            FieldSpec(name="kurs", label="Kurs", kind=FieldKind.REFERENCE,
                      required=True, target=EntityType.KURSE),
            FieldSpec(name="anmeldedatum", label="Anmeldedatum",
                      kind=FieldKind.DATE, required=True),
            FieldSpec(name="bezahlt", label="Bezahlt", kind=FieldKind.BOOL),
        ],
    ),
}

# Reihenfolge der Tabs in der Konsole
TAB_ORDER: list[EntityType] = [
    EntityType.KURSE,
    EntityType.ANMELDUNGEN,
    EntityType.DOZENTEN,
    EntityType.TEILNEHMER,
    EntityType.RAEUME,
]


def get_schema(entity_type: EntityType) -> EntitySchema:
    """Schema zu einem Entitätstyp."""
    return SCHEMAS[EntityType(entity_type)]
