"""MutationCoordinator – Anlegen, Ändern, Löschen mit anschließendem Neuladen.

Kein optimistisches Update: der lokale Zustand ändert sich ausschließlich
durch das vollständige Neuladen nach einem erfolgreichen Aufruf. Jeder Fehler
des Aufrufs (Speicher oder Client) wird hier abgefangen, protokolliert und
als ``MutationResult`` mit ``ok=False`` zurückgegeben.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from models.record import Record
from sync.client import EntityClient, ServiceError
from sync.loader import LoadResult

logger = logging.getLogger(__name__)


class MutationAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class MutationResult:
    action: MutationAction
    ok: bool
    record_id: Optional[str] = None
    record: Optional[Record] = None
    error: Optional[str] = None
    # Ergebnis des Neuladens nach Erfolg
    reload: Optional[LoadResult] = None


class MutationCoordinator:
    """Schreibt über einen EntityClient und löst danach ``reload`` aus."""

    def __init__(self, client: EntityClient,
                 reload: Callable[[], Awaitable[LoadResult]]):
        self.client = client
        self.reload = reload

    async def _run(self, action: MutationAction, record_id: Optional[str],
                   call: Callable[[], Any]) -> MutationResult:
        label = f"{self.client.entity_type.value}.{action.value}"
        try:
            record = await asyncio.to_thread(call)
        except ServiceError as e:
            logger.warning(f"{label}({record_id or '-'}) fehlgeschlagen: {e}")
            return MutationResult(action=action, ok=False,
                                  record_id=record_id, error=str(e))
        except Exception as e:
            logger.exception(f"{label}({record_id or '-'}) unerwarteter Fehler")
            return MutationResult(action=action, ok=False, record_id=record_id,
                                  error=f"{type(e).__name__}: {e}")

        if isinstance(record, Record):
            record_id = record.record_id
        logger.info(f"{label}({record_id}) erfolgreich – lade neu")
        reload = await self.reload()
        return MutationResult(action=action, ok=True, record_id=record_id,
                              record=record if isinstance(record, Record) else None,
                              reload=reload)

    async def create(self, fields: dict[str, Any]) -> MutationResult:
        return await self._run(MutationAction.CREATE, None,
                               lambda: self.client.create(fields))

    async def update(self, record_id: str, fields: dict[str, Any]) -> MutationResult:
        return await self._run(MutationAction.UPDATE, record_id,
                               lambda: self.client.update(record_id, fields))

    async def delete(self, record_id: str) -> MutationResult:
        return await self._run(MutationAction.DELETE, record_id,
                               lambda: self.client.delete(record_id))
