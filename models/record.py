"""Datenmodell für Datensätze und geladene Sammlungen (Pydantic v2)."""

from datetime import datetime
from typing import Any, Iterable, Iterator, Optional

from pydantic import BaseModel


class Record(BaseModel):
    """Ein Datensatz des Speichers: ID plus Feldwerte."""

    record_id: str
    fields: dict[str, Any] = {}
    createdat: Optional[datetime] = None
    updatedat: Optional[datetime] = None

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


class Collection:
    """Geladene Datensätze eines Entitätstyps, eindeutig nach record_id.

    Reihenfolge = Abrufreihenfolge. Bei doppelten IDs bleibt die erste
    Position erhalten, der Wert stammt aus dem letzten Vorkommen.
    """

    def __init__(self, records: Iterable[Record] = ()):
        self._records: dict[str, Record] = {}
        for r in records:
            self._records[r.record_id] = r

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records.values())

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return list(self._records.items()) == list(other._records.items())

    def __repr__(self) -> str:
        return f"Collection({len(self)} Datensätze)"

    @property
    def ids(self) -> list[str]:
        return list(self._records)

    def get(self, record_id: Optional[str]) -> Optional[Record]:
        if record_id is None:
            return None
        return self._records.get(record_id)

    def find(self, record_id: Optional[str]) -> Optional[Record]:
        """Lineare Suche nach record_id (Auflösung von Referenzen)."""
        for r in self._records.values():
            if r.record_id == record_id:
                return r
        return None
