from pydantic import BaseModel, Field, field_validator
from typing import Optional
from enum import Enum
import re


_APP_ID_RE = re.compile(r"^[0-9a-f]{24}$")


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ─── REMOTE-SPEICHER ───

class ApiConfig(BaseModel):
    """Zugang zum gehosteten Datensatz-Speicher (LivingApps REST-API)."""
    # Basis-URL der REST-API, ohne abschließenden Schrägstrich
    base_url: str = Field("https://my.living-apps.de/rest",
        description="Basis-URL der REST-API")
    # API-Schlüssel; wird durch KURSVERWALTUNG_API_KEY überschrieben
    api_key: Optional[str] = Field(None,
        description="API-Schlüssel (Header X-API-Key)")
    # Zeitlimit pro Anfrage in Sekunden (einzige Begrenzung einer Wartezeit)
    timeout_seconds: float = Field(30, ge=1, le=300,
        description="Zeitlimit pro Anfrage (Sekunden)")
    # TLS-Zertifikate prüfen
    verify_tls: bool = Field(True,
        description="TLS-Zertifikate prüfen")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url muss mit http:// oder https:// beginnen: {v!r}")
        return v


class AppIds(BaseModel):
    """App-IDs der fünf Entitätstypen im Datensatz-Speicher.

    Jede Entität (Kurse, Dozenten, ...) ist im Speicher eine eigene App.
    Referenzfelder enthalten die URL eines Datensatzes dieser App.
    """
    kurse: str
    dozenten: str
    teilnehmer: str
    raeume: str
    anmeldungen: str

    @field_validator("kurse", "dozenten", "teilnehmer", "raeume", "anmeldungen")
    @classmethod
    def check_app_id(cls, v: str) -> str:
        v = v.strip().lower()
        if not _APP_ID_RE.match(v):
            raise ValueError(f"Ungültige App-ID (24 Hex-Zeichen erwartet): {v!r}")
        return v

    def for_entity(self, entity_type) -> str:
        """App-ID zu einem Entitätstyp (EntityType oder dessen Wert)."""
        key = getattr(entity_type, "value", entity_type)
        return getattr(self, key)


# ─── ANZEIGE ───

class DisplayConfig(BaseModel):
    """Darstellung in der Konsole und im Export."""
    # Anzeigewert für nicht auflösbare Referenzen
    sentinel: str = Field("N/A",
        description="Anzeige für nicht auflösbare Referenzen")
    # Datumsformat für Karten (strftime)
    date_format: str = Field("%d.%m.%Y",
        description="Datumsformat (strftime)")
    # Kurzes Datumsformat für Zeiträume, z.B. Kursdauer
    short_date_format: str = Field("%d.%m.%y",
        description="Kurzes Datumsformat für Zeiträume")


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Diagnose-Ausgaben."""
    level: LogLevel = Field(LogLevel.WARNING,
        description="Log-Level")
    # Optionale Log-Datei zusätzlich zur Konsole
    file: Optional[str] = Field(None,
        description="Log-Datei (optional)")


# ─── GESAMT-CONFIG ───

class KursverwaltungConfig(BaseModel):
    """Gesamtkonfiguration der Kursverwaltung."""
    # Name der Einrichtung (Anzeige im Kopf der Konsole)
    organisation_name: str = Field("Kursverwaltung",
        description="Name der Einrichtung")
    # Zugang zur REST-API
    api: ApiConfig = Field(default_factory=ApiConfig)
    # App-IDs der Entitätstypen
    app_ids: AppIds
    # Anzeige-Einstellungen
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    # Logging-Einstellungen
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
