"""Interaktiver Setup-Wizard für die Ersteinrichtung der Kursverwaltung.

Fragt Organisation, API-Zugang und die App-IDs der fünf Entitätstypen ab.
Nutzt rich für die Konsolenausgabe.
"""

from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    ApiConfig,
    AppIds,
    DisplayConfig,
    KursverwaltungConfig,
    LoggingConfig,
    LogLevel,
)
from config.defaults import DEFAULT_APP_IDS

console = Console()

_APP_LABELS = {
    "kurse": "Kurse",
    "dozenten": "Dozenten",
    "teilnehmer": "Teilnehmer",
    "raeume": "Räume",
    "anmeldungen": "Anmeldungen",
}


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def _show_app_ids_table(app_ids: AppIds) -> None:
    """Zeigt die App-IDs als rich-Tabelle an."""
    table = Table(title="App-IDs", box=box.ROUNDED)
    table.add_column("Entität", style="bold")
    table.add_column("App-ID")
    for key, label in _APP_LABELS.items():
        table.add_row(label, getattr(app_ids, key))
    console.print(table)


# ─── SCHRITT 1: Organisation ───

def _wizard_organisation() -> str:
    _header("Schritt 1 — Organisation")
    return Prompt.ask("Name der Einrichtung", default="Kursverwaltung")


# ─── SCHRITT 2: API-Zugang ───

def _wizard_api() -> ApiConfig:
    _header("Schritt 2 — API-Zugang")
    _info("Der API-Schlüssel kann auch über KURSVERWALTUNG_API_KEY gesetzt werden.")
    base_url = Prompt.ask("Basis-URL der REST-API",
                          default="https://my.living-apps.de/rest")
    api_key = Prompt.ask("API-Schlüssel (leer = keiner)", default="",
                         password=True)
    timeout = FloatPrompt.ask("Zeitlimit pro Anfrage (Sekunden)", default=30.0)
    return ApiConfig(base_url=base_url, api_key=api_key or None,
                     timeout_seconds=timeout)


# ─── SCHRITT 3: App-IDs ───

def _wizard_app_ids() -> AppIds:
    _header("Schritt 3 — App-IDs")
    defaults = AppIds(**DEFAULT_APP_IDS)
    _show_app_ids_table(defaults)

    if Confirm.ask("Standard-App-IDs übernehmen?", default=True):
        _success("Standard-App-IDs übernommen.")
        return defaults

    while True:
        values = {
            key: Prompt.ask(f"App-ID {label}", default=DEFAULT_APP_IDS[key])
            for key, label in _APP_LABELS.items()
        }
        try:
            app_ids = AppIds(**values)
        except ValidationError as e:
            _warn(f"Validierungsfehler: {e.error_count()} ungültige App-ID(s). "
                  "Bitte erneut eingeben.")
            continue
        _success("App-IDs konfiguriert und validiert.")
        return app_ids


# ─── SCHRITT 4: Logging ───

def _wizard_logging() -> LoggingConfig:
    _header("Schritt 4 — Logging")
    level = Prompt.ask(
        "Log-Level",
        choices=[lvl.value for lvl in LogLevel],
        default=LogLevel.WARNING.value,
    )
    log_file = Prompt.ask("Log-Datei (leer = nur Konsole)", default="")
    return LoggingConfig(level=LogLevel(level), file=log_file or None)


def _show_summary(config: KursverwaltungConfig) -> None:
    _header("Zusammenfassung")
    table = Table(box=box.SIMPLE)
    table.add_column("Bereich", style="bold")
    table.add_column("Wert")
    table.add_row("Einrichtung", config.organisation_name)
    table.add_row("API", config.api.base_url)
    table.add_row("API-Schlüssel", "gesetzt" if config.api.api_key else "—")
    table.add_row("Zeitlimit", f"{config.api.timeout_seconds:g}s")
    table.add_row("Log-Level", config.logging.level.value)
    console.print(table)
    _show_app_ids_table(config.app_ids)


# ─── HAUPT-WIZARD ───

def run_wizard() -> Optional[KursverwaltungConfig]:
    """Führt den vollständigen interaktiven Setup-Wizard aus.

    Returns:
        Fertige KursverwaltungConfig oder None, wenn der Nutzer abbricht.
    """
    console.print()
    console.print(Panel(
        "[bold]Willkommen bei der Kursverwaltung![/bold]\n\n"
        "Verwalte Kurse, Dozenten, Teilnehmer, Räume und Anmeldungen\n"
        "direkt im gehosteten Datensatz-Speicher.\n\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        title="[bold cyan]Kursverwaltung[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nMöchten Sie jetzt die Verbindung einrichten?", default=True):
        console.print("[yellow]Einrichtung abgebrochen.[/yellow]")
        return None

    try:
        name = _wizard_organisation()
        api = _wizard_api()
        app_ids = _wizard_app_ids()
        log_cfg = _wizard_logging()

        config = KursverwaltungConfig(
            organisation_name=name,
            api=api,
            app_ids=app_ids,
            display=DisplayConfig(),
            logging=log_cfg,
        )

        _show_summary(config)

        if not Confirm.ask("\nKonfiguration speichern?", default=True):
            console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
            return None

        _success("Konfiguration wird gespeichert...")
        return config

    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
    except ValidationError as e:
        console.print(f"\n[red]Fehler während der Konfiguration: {e}[/red]")
        return None

