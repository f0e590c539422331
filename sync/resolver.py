"""Auflösung von Referenzfeldern in Anzeigewerte.

Eine Referenz, die nicht aufgelöst werden kann (leer, Ziel nicht geladen,
Ziel gelöscht), ergibt den Platzhalter ``SENTINEL``; es wird nie ein Fehler
ausgelöst.
"""

from typing import Optional, Union

from models.entities import EntitySchema, get_schema
from models.record import Collection, Record
from models.reference import RecordRef, extract_record_id
from sync.loader import Snapshot

SENTINEL = "N/A"


def resolve(reference_value: Union[str, RecordRef, None],
            target: Collection,
            display_field: Optional[str],
            sentinel: str = SENTINEL) -> str:
    """Referenz → Anzeigewert des Ziel-Datensatzes oder Platzhalter."""
    if not reference_value:
        return sentinel
    record_id = extract_record_id(reference_value)
    if record_id is None or display_field is None:
        return sentinel
    record = target.find(record_id)
    if record is None:
        return sentinel
    value = record.fields.get(display_field)
    if value is None or value == "":
        return sentinel
    return str(value)


class ReferenceResolver:
    """Löst die Referenzfelder der Datensätze eines Tabs auf."""

    def __init__(self, schema: EntitySchema, snapshot: Optional[Snapshot],
                 sentinel: str = SENTINEL):
        self.schema = schema
        self.snapshot = snapshot
        self.sentinel = sentinel

    def display(self, record: Record, field_name: str) -> str:
        spec = self.schema.field(field_name)
        if not spec.is_reference:
            raise ValueError(f"{self.schema.label}.{field_name} ist kein Referenzfeld")
        if self.snapshot is None:
            return self.sentinel
        target_schema = get_schema(spec.target)
        return resolve(
            record.fields.get(field_name),
            self.snapshot.collection(spec.target),
            target_schema.display_field,
            self.sentinel,
        )

    def display_all(self, record: Record) -> dict[str, str]:
        """Alle Referenzfelder eines Datensatzes aufgelöst."""
        return {f.name: self.display(record, f.name)
                for f in self.schema.reference_fields}
