"""Typisierte Referenzen zwischen Datensätzen.

Im Speicher ist ein Referenzfeld eine URL der Form

    <base_url>/apps/<app_id>/records/<record_id>

Innerhalb der Anwendung wird stattdessen ``RecordRef`` verwendet; die URL
entsteht erst an der Grenze zum Speicher (``to_url`` / ``build_reference``).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from config.schema import KursverwaltungConfig
from models.entities import EntityType


class RecordRef(BaseModel):
    """Verweis auf einen Datensatz eines Entitätstyps."""

    model_config = ConfigDict(frozen=True)

    entity_type: EntityType
    record_id: str

    def to_url(self, config: KursverwaltungConfig) -> str:
        return build_reference(self.entity_type, self.record_id, config)

    @classmethod
    def from_url(cls, value: Optional[str],
                 config: KursverwaltungConfig) -> Optional["RecordRef"]:
        """Zerlegt eine Referenz-URL. None bei leerem Wert oder fremder App-ID."""
        record_id = extract_record_id(value)
        if record_id is None:
            return None
        segments = [s for s in value.strip().split("/") if s]
        if len(segments) < 3 or segments[-2] != "records":
            return None
        app_id = segments[-3].lower()
        for et in EntityType:
            if config.app_ids.for_entity(et) == app_id:
                return cls(entity_type=et, record_id=record_id)
        return None


def extract_record_id(value) -> Optional[str]:
    """Datensatz-ID = letztes nicht-leeres Pfadsegment der Referenz-URL.

    Akzeptiert auch ein ``RecordRef``. Leere Werte ergeben None.
    """
    if isinstance(value, RecordRef):
        return value.record_id
    if not value or not isinstance(value, str):
        return None
    segments = [s for s in value.strip().split("/") if s]
    if not segments:
        return None
    return segments[-1]


def build_reference(entity_type: EntityType, record_id: str,
                    config: KursverwaltungConfig) -> str:
    """Baut die Referenz-URL, die der Speicher in Referenzfeldern erwartet."""
    record_id = (record_id or "").strip()
    if not record_id or "/" in record_id:
        raise ValueError(f"Ungültige Datensatz-ID für Referenz: {record_id!r}")
    app_id = config.app_ids.for_entity(EntityType(entity_type))
    return f"{config.api.base_url}/apps/{app_id}/records/{record_id}"
