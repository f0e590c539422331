"""CollectionLoader – lädt eine Haupt-Sammlung samt referenzierter Sammlungen.

Alle Abrufe eines Ladezyklus laufen gleichzeitig (blockierender Client in
Worker-Threads, zusammengeführt über ``asyncio.gather``). Ergebnis wird nur
veröffentlicht, wenn ALLE Abrufe erfolgreich waren; sonst gibt es keinen
Snapshot und der bisherige Zustand bleibt stehen. Auch unerwartete Fehler
eines Abrufs beenden den Zyklus als ``LoadResult(ok=False)``.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Optional

from models.entities import EntityType
from models.record import Collection
from sync.client import EntityClient, ServiceError

logger = logging.getLogger(__name__)

_cycle_counter = itertools.count(1)


@dataclass(frozen=True)
class Snapshot:
    """Ergebnis eines vollständigen Ladezyklus."""

    primary_type: EntityType
    primary: Collection
    auxiliaries: dict[EntityType, Collection] = field(default_factory=dict)
    cycle: int = 0

    def collection(self, entity_type: EntityType) -> Collection:
        """Sammlung eines Typs; leere Sammlung, wenn nicht geladen."""
        if entity_type == self.primary_type:
            return self.primary
        return self.auxiliaries.get(entity_type, Collection())


@dataclass(frozen=True)
class LoadResult:
    ok: bool
    snapshot: Optional[Snapshot] = None
    error: Optional[str] = None
    cycle: int = 0


class CollectionLoader:
    """Lädt Sammlungen über die EntityClients der Entitätstypen."""

    def __init__(self, clients: dict[EntityType, EntityClient]):
        self.clients = clients

    async def _fetch(self, entity_type: EntityType) -> Collection:
        records = await asyncio.to_thread(self.clients[entity_type].list)
        return Collection(records)

    async def load(self, primary: EntityType,
                   auxiliaries: Optional[list[EntityType]] = None) -> LoadResult:
        """Ein Ladezyklus: alle Abrufe gleichzeitig, alles-oder-nichts."""
        cycle = next(_cycle_counter)
        types = [primary] + [t for t in (auxiliaries or []) if t != primary]
        logger.info(
            f"Ladezyklus {cycle}: {', '.join(t.value for t in types)}"
        )

        results = await asyncio.gather(
            *(self._fetch(t) for t in types), return_exceptions=True
        )

        for t, res in zip(types, results):
            if isinstance(res, ServiceError):
                logger.warning(f"Ladezyklus {cycle}: {t.value} fehlgeschlagen: {res}")
                return LoadResult(ok=False, error=str(res), cycle=cycle)
            if isinstance(res, Exception):
                logger.error(f"Ladezyklus {cycle}: {t.value} unerwarteter Fehler: {res!r}",
                             exc_info=res)
                return LoadResult(ok=False, error=f"{type(res).__name__}: {res}",
                                  cycle=cycle)
            if isinstance(res, BaseException):
                raise res

        collections = dict(zip(types, results))
        snapshot = Snapshot(
            primary_type=primary,
            primary=collections.pop(primary),
            auxiliaries=collections,
            cycle=cycle,
        )
        logger.info(
            f"Ladezyklus {cycle} abgeschlossen: {len(snapshot.primary)} {primary.value}"
        )
        return LoadResult(ok=True, snapshot=snapshot, cycle=cycle)
