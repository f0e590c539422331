from config.schema import (
    ApiConfig,
    AppIds,
    DisplayConfig,
    KursverwaltungConfig,
    LoggingConfig,
)


# App-IDs der Kursverwaltungs-Apps im Standard-Arbeitsbereich.
# Beim Einrichten über den Wizard werden sie durch die eigenen IDs ersetzt.
DEFAULT_APP_IDS: dict[str, str] = {
    "kurse":       "6937d1b1b46e9c0a6f1c2a01",
    "dozenten":    "6937d1b0c3a7e95f2d8b4a02",
    "teilnehmer":  "6937d1b0f1e24c8a93d7b603",
    "raeume":      "6937d1af8e0b4d67a1c2f504",
    "anmeldungen": "6937d1b2a5c9e8f7d6b3c405",
}


def default_app_ids() -> AppIds:
    """App-IDs des Standard-Arbeitsbereichs."""
    return AppIds(**DEFAULT_APP_IDS)


def default_config() -> KursverwaltungConfig:
    """Vollständige Default-Konfiguration.

    API:      https://my.living-apps.de/rest, 30 s Zeitlimit, kein API-Schlüssel
    Anzeige:  "N/A" für offene Referenzen, Datum als TT.MM.JJJJ
    Logging:  WARNING, nur Konsole
    """
    return KursverwaltungConfig(
        organisation_name="Kursverwaltung",
        api=ApiConfig(),
        app_ids=default_app_ids(),
        display=DisplayConfig(),
        logging=LoggingConfig(),
    )
