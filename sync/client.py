"""Client für den gehosteten Datensatz-Speicher (LivingApps REST-API).

Vier Operationen je App: auflisten, anlegen, ändern, löschen. Jeder Fehler
(Transport, HTTP-Status, ungültiges JSON) wird als ``ServiceError`` gemeldet.
Es gibt keine Wiederholungsversuche.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests
from pydantic import ValidationError

from config.schema import KursverwaltungConfig
from models.entities import EntityType
from models.record import Record

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Fehler bei einem Aufruf des Datensatz-Speichers."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RecordService(ABC):
    """Vertrag des Datensatz-Speichers, adressiert über App-IDs."""

    @abstractmethod
    def list_records(self, app_id: str) -> list[Record]: ...

    @abstractmethod
    def create_record(self, app_id: str, fields: dict[str, Any]) -> Record: ...

    @abstractmethod
    def update_record(self, app_id: str, record_id: str,
                      fields: dict[str, Any]) -> Record: ...

    @abstractmethod
    def delete_record(self, app_id: str, record_id: str) -> None: ...


def _parse_record(raw: Any, record_id: Optional[str] = None) -> Record:
    if not isinstance(raw, dict):
        raise ServiceError(f"Unerwartetes Datensatz-Format: {type(raw).__name__}")
    rid = record_id or raw.get("record_id") or raw.get("id")
    if not rid:
        raise ServiceError("Datensatz ohne ID in der Antwort")
    try:
        return Record(
            record_id=str(rid),
            fields=raw.get("fields") or {},
            createdat=raw.get("createdat"),
            updatedat=raw.get("updatedat"),
        )
    except ValidationError as e:
        raise ServiceError(f"Datensatz {rid} ungültig: {e}") from e


def parse_record_list(data: Any) -> list[Record]:
    """Antwort von GET .../records → Datensätze in Antwortreihenfolge.

    Der Speicher liefert ``{record_id: {...}}``; eine Liste von Objekten
    mit ``id``/``record_id`` wird ebenfalls akzeptiert.
    """
    if isinstance(data, dict):
        return [_parse_record(raw, rid) for rid, raw in data.items()]
    if isinstance(data, list):
        return [_parse_record(raw) for raw in data]
    raise ServiceError(f"Unerwartete Antwort beim Auflisten: {type(data).__name__}")


def parse_single_record(data: Any, fallback_id: Optional[str] = None) -> Record:
    """Antwort von POST/PATCH → ein Datensatz."""
    if isinstance(data, dict) and len(data) == 1:
        (key, value), = data.items()
        if isinstance(value, dict) and "fields" in value:
            return _parse_record(value, key)
    if isinstance(data, dict) and ("id" in data or "record_id" in data):
        return _parse_record(data)
    if isinstance(data, dict) and fallback_id:
        return _parse_record(data, fallback_id)
    raise ServiceError("Antwort enthält keinen Datensatz")


class LivingAppsClient(RecordService):
    """HTTP-Implementierung auf ``requests.Session``."""

    def __init__(self, config: KursverwaltungConfig,
                 session: Optional[requests.Session] = None):
        self.base_url = config.api.base_url
        self.timeout = config.api.timeout_seconds
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        if config.api.api_key:
            self.session.headers["X-API-Key"] = config.api.api_key
        self.session.verify = config.api.verify_tls

    def _url(self, app_id: str, record_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/apps/{app_id}/records"
        return f"{url}/{record_id}" if record_id else url

    def _request(self, method: str, url: str,
                 body: Optional[dict] = None) -> Any:
        logger.debug(f"{method} {url}")
        try:
            resp = self.session.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise ServiceError(f"{method} {url} fehlgeschlagen: {e}") from e

        if not resp.ok:
            raise ServiceError(
                f"{method} {url} → HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ServiceError(
                f"{method} {url}: Antwort ist kein JSON", status_code=resp.status_code
            ) from e

    def list_records(self, app_id: str) -> list[Record]:
        return parse_record_list(self._request("GET", self._url(app_id)) or {})

    def create_record(self, app_id: str, fields: dict[str, Any]) -> Record:
        data = self._request("POST", self._url(app_id), {"fields": fields})
        if data is None:
            raise ServiceError("Anlegen lieferte keinen Datensatz zurück")
        return parse_single_record(data)

    def update_record(self, app_id: str, record_id: str,
                      fields: dict[str, Any]) -> Record:
        data = self._request("PATCH", self._url(app_id, record_id), {"fields": fields})
        if data is None:
            return Record(record_id=record_id, fields=fields)
        return parse_single_record(data, fallback_id=record_id)

    def delete_record(self, app_id: str, record_id: str) -> None:
        self._request("DELETE", self._url(app_id, record_id))


class EntityClient:
    """Dünner Client für genau einen Entitätstyp."""

    def __init__(self, service: RecordService, entity_type: EntityType,
                 config: KursverwaltungConfig):
        self.service = service
        self.entity_type = EntityType(entity_type)
        self.app_id = config.app_ids.for_entity(self.entity_type)

    def __repr__(self) -> str:
        return f"EntityClient({self.entity_type.value}, app={self.app_id})"

    def list(self) -> list[Record]:
        return self.service.list_records(self.app_id)

    def create(self, fields: dict[str, Any]) -> Record:
        return self.service.create_record(self.app_id, fields)

    def update(self, record_id: str, fields: dict[str, Any]) -> Record:
        return self.service.update_record(self.app_id, record_id, fields)

    def delete(self, record_id: str) -> None:
        self.service.delete_record(self.app_id, record_id)


def build_clients(service: RecordService,
                  config: KursverwaltungConfig) -> dict[EntityType, EntityClient]:
    """Ein EntityClient je Entitätstyp."""
    return {et: EntityClient(service, et, config) for et in EntityType}
