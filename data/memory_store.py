"""In-Memory-Datensatz-Speicher mit demselben Vertrag wie der REST-Client.

Wird von ``--offline`` und von der Testsuite verwendet. Unbekannte
Datensatz-IDs führen wie beim echten Speicher zu ``ServiceError`` (404).
"""

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from models.record import Record
from sync.client import RecordService, ServiceError


def new_record_id() -> str:
    """24 Hex-Zeichen, wie die IDs des gehosteten Speichers."""
    return uuid.uuid4().hex[:24]


class InMemoryRecordService(RecordService):
    """Datensätze je App-ID in Einfügereihenfolge."""

    def __init__(self) -> None:
        self._apps: dict[str, dict[str, Record]] = {}
        # Aufrufe kommen aus Worker-Threads (asyncio.to_thread)
        self._lock = threading.Lock()

    def _app(self, app_id: str) -> dict[str, Record]:
        return self._apps.setdefault(app_id, {})

    def _missing(self, app_id: str, record_id: str) -> ServiceError:
        return ServiceError(
            f"Datensatz {record_id} in App {app_id} nicht gefunden", status_code=404
        )

    def list_records(self, app_id: str) -> list[Record]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._app(app_id).values()]

    def create_record(self, app_id: str, fields: dict[str, Any]) -> Record:
        now = datetime.now(timezone.utc)
        record = Record(record_id=new_record_id(), fields=copy.deepcopy(fields),
                        createdat=now, updatedat=now)
        with self._lock:
            self._app(app_id)[record.record_id] = record
        return record.model_copy(deep=True)

    def update_record(self, app_id: str, record_id: str,
                      fields: dict[str, Any]) -> Record:
        with self._lock:
            records = self._app(app_id)
            if record_id not in records:
                raise self._missing(app_id, record_id)
            old = records[record_id]
            record = old.model_copy(update={
                "fields": {**old.fields, **copy.deepcopy(fields)},
                "updatedat": datetime.now(timezone.utc),
            })
            records[record_id] = record
        return record.model_copy(deep=True)

    def delete_record(self, app_id: str, record_id: str) -> None:
        with self._lock:
            records = self._app(app_id)
            if record_id not in records:
                raise self._missing(app_id, record_id)
            del records[record_id]

    def add_record(self, app_id: str, record: Record) -> None:
        """Übernimmt einen Datensatz mit vorgegebener ID (überschreibt)."""
        with self._lock:
            self._app(app_id)[record.record_id] = record.model_copy(deep=True)

    def count(self, app_id: str) -> int:
        with self._lock:
            return len(self._app(app_id))
