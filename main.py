"""Kursverwaltung — Haupt-CLI.

Verwendung:
  python main.py setup                         Ersteinrichtung (Wizard)
  python main.py config show                   Konfiguration anzeigen
  python main.py list <tab>                    Datensätze eines Tabs anzeigen
  python main.py create <tab> --set feld=wert  Datensatz anlegen
  python main.py update <tab> <id> --set ...   Datensatz ändern
  python main.py delete <tab> <id> [--yes]     Datensatz löschen
  python main.py check                         Referenzen prüfen
  python main.py export [-o datei.xlsx]        Excel-Export aller Tabs
  python main.py seed                          Demo-Daten anlegen
  python main.py profile save|load|list        Profile verwalten

  --offline vor dem Befehl arbeitet mit einem Demo-Speicher im Speicher.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

_TRUE_WORDS = {"1", "ja", "j", "true", "yes", "y", "x"}


def _setup_logging(config, verbose: bool = False) -> None:
    """Konsolen-Logging über Rich, optional zusätzlich in eine Datei."""
    from rich.logging import RichHandler

    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.value)
    handlers: list[logging.Handler] = [
        RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    ]
    if config.logging.file:
        log_path = Path(config.logging.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
        handlers.append(file_handler)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                        handlers=handlers, force=True)
    # HTTP-Details von urllib3 nur im Debug-Modus
    logging.getLogger("urllib3").setLevel(level if verbose else logging.WARNING)


def _load_config_or_abort(offline: bool = False):
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab.

    Im Offline-Modus genügt die Default-Konfiguration.
    """
    from config.manager import ConfigManager
    from config.defaults import default_config

    mgr = ConfigManager()
    if mgr.first_run_check():
        if offline:
            return mgr, mgr.apply_env(default_config())
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus "
            "oder verwenden Sie [bold]--offline[/bold]."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red bold]Konfiguration ungültig:[/red bold]\n{e}")
        sys.exit(1)


def _open_store(ctx: click.Context):
    """Konfiguration + EntityClients (REST oder Offline-Demo-Speicher)."""
    from sync.client import LivingAppsClient, build_clients

    offline = ctx.obj["offline"]
    mgr, config = _load_config_or_abort(offline)
    _setup_logging(config, ctx.obj["verbose"])

    if offline:
        from data.demo_data import DemoDataGenerator
        from data.memory_store import InMemoryRecordService

        service = InMemoryRecordService()
        clients = build_clients(service, config)
        DemoDataGenerator(config, seed=ctx.obj["seed"]).generate(clients)
        console.print("[dim]Offline-Modus: Demo-Speicher, Änderungen werden nicht "
                      "gespeichert.[/dim]")
    else:
        if not config.api.api_key:
            console.print("[yellow]Kein API-Schlüssel konfiguriert "
                          "(KURSVERWALTUNG_API_KEY).[/yellow]")
        clients = build_clients(LivingAppsClient(config), config)
    return config, clients


def _parse_tab(name: str):
    from models.entities import EntityType
    try:
        return EntityType.parse(name)
    except ValueError:
        valid = ", ".join(et.value for et in EntityType)
        raise click.BadParameter(f"Unbekannter Tab {name!r} (erlaubt: {valid})")


def _parse_assignments(schema, items: tuple[str, ...]) -> dict:
    """``feld=wert``-Paare → Formularwerte (Bool-Felder als ja/nein)."""
    from models.entities import FieldKind

    values: dict = {}
    for item in items:
        if "=" not in item:
            raise click.BadParameter(f"Erwartet feld=wert, erhalten: {item!r}")
        name, value = item.split("=", 1)
        name = name.strip()
        try:
            spec = schema.field(name)
        except KeyError:
            raise click.BadParameter(
                f"{schema.label} hat kein Feld {name!r} "
                f"(Felder: {', '.join(schema.field_names)})"
            )
        if spec.kind == FieldKind.BOOL:
            values[name] = value.strip().lower() in _TRUE_WORDS
        else:
            values[name] = value
    return values


def _abort_on_failed_load(tab, result) -> None:
    if not result.ok:
        console.print(f"[red bold]{tab.schema.label} konnten nicht geladen werden:[/red bold]\n"
                      f"{result.error}")
        sys.exit(1)


def _print_cards(tab) -> None:
    cards = tab.cards()
    console.print(Panel(
        f"[bold]{tab.schema.label}[/bold]  |  {tab.schema.description}  |  "
        f"{len(cards)} Datensätze",
        border_style="cyan",
    ))
    if not cards:
        console.print(f"[dim]Noch keine {tab.schema.label} vorhanden.[/dim]")
        return

    panels = []
    for card in cards:
        body = []
        if card.subtitle:
            body.append(f"[italic]{card.subtitle}[/italic]")
        body.extend(card.lines)
        if card.badge:
            color = "green" if card.badge == "Bezahlt" else "yellow"
            body.append(f"[{color}]{card.badge}[/{color}]")
        body.append(f"[dim]{card.record_id}[/dim]")
        panels.append(Panel("\n".join(body), title=f"[bold]{card.title}[/bold]",
                            width=38, border_style="blue"))
    console.print(Columns(panels))


def _report_mutation(tab, result, done: str) -> None:
    if result.ok:
        console.print(f"[green]✓[/green] {tab.schema.singular} {done}: {result.record_id}")
        if result.reload is not None and not result.reload.ok:
            console.print(f"[yellow]Neuladen fehlgeschlagen:[/yellow] {result.reload.error}")
        return
    console.print(f"[red bold]Fehler:[/red bold] {result.error}")
    sys.exit(1)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
        console.print("Führen Sie jetzt [bold]python main.py list kurse[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    from models.entities import TAB_ORDER, get_schema

    mgr, config = _load_config_or_abort(ctx.obj["offline"])

    api = config.api
    key = "gesetzt" if api.api_key else "[yellow]fehlt[/yellow]"
    console.print(Panel(
        f"[bold]{config.organisation_name}[/bold]\n"
        f"API: {api.base_url}  |  Schlüssel: {key}  |  "
        f"Zeitlimit: {api.timeout_seconds:g}s  |  TLS prüfen: "
        f"{'ja' if api.verify_tls else 'nein'}",
        title="Kursverwaltung",
        border_style="cyan",
    ))

    table = Table(title="Apps", box=box.ROUNDED)
    table.add_column("Tab", style="bold")
    table.add_column("App-ID")
    for et in TAB_ORDER:
        table.add_row(get_schema(et).label, config.app_ids.for_entity(et))
    console.print(table)

    d = config.display
    console.print(
        f"\n[bold]Anzeige:[/bold] Platzhalter {d.sentinel!r} | "
        f"Datum {d.date_format} | kurz {d.short_date_format}"
    )
    console.print(
        f"[bold]Logging:[/bold] {config.logging.level.value}"
        + (f" | Datei: {config.logging.file}" if config.logging.file else "")
    )


# ─── LIST ─────────────────────────────────────────────────────────────────────

@click.command("list")
@click.argument("tab_name")
@click.pass_context
def cmd_list(ctx: click.Context, tab_name: str):
    """Lädt einen Tab und zeigt seine Datensätze als Karten."""
    from sync.tab import TabController

    entity_type = _parse_tab(tab_name)
    config, clients = _open_store(ctx)
    tab = TabController(entity_type, clients, config)
    _abort_on_failed_load(tab, asyncio.run(tab.load()))
    _print_cards(tab)


# ─── CREATE / UPDATE / DELETE ─────────────────────────────────────────────────

@click.command("create")
@click.argument("tab_name")
@click.option("--set", "assignments", multiple=True, metavar="FELD=WERT",
              help="Feldwert; Referenzen als Datensatz-ID. Mehrfach angebbar.")
@click.pass_context
def cmd_create(ctx: click.Context, tab_name: str, assignments: tuple[str, ...]):
    """Legt einen neuen Datensatz an."""
    from sync.tab import TabController

    entity_type = _parse_tab(tab_name)
    config, clients = _open_store(ctx)
    tab = TabController(entity_type, clients, config)
    values = _parse_assignments(tab.schema, assignments)

    # Auswahllisten der Referenzfelder kommen aus dem Ladezyklus
    _abort_on_failed_load(tab, asyncio.run(tab.load()))
    tab.open_create()
    tab.update_form(values)
    _report_mutation(tab, asyncio.run(tab.submit()), "angelegt")


@click.command("update")
@click.argument("tab_name")
@click.argument("record_id")
@click.option("--set", "assignments", multiple=True, metavar="FELD=WERT",
              help="Geänderter Feldwert. Mehrfach angebbar.")
@click.pass_context
def cmd_update(ctx: click.Context, tab_name: str, record_id: str,
               assignments: tuple[str, ...]):
    """Ändert einen bestehenden Datensatz (nicht angegebene Felder bleiben)."""
    from sync.tab import TabController

    entity_type = _parse_tab(tab_name)
    config, clients = _open_store(ctx)
    tab = TabController(entity_type, clients, config)
    values = _parse_assignments(tab.schema, assignments)

    _abort_on_failed_load(tab, asyncio.run(tab.load()))
    try:
        tab.open_edit(record_id)
    except KeyError:
        console.print(f"[red]{tab.schema.singular} {record_id} nicht gefunden.[/red]")
        sys.exit(1)
    tab.update_form(values)
    _report_mutation(tab, asyncio.run(tab.submit()), "gespeichert")


@click.command("delete")
@click.argument("tab_name")
@click.argument("record_id")
@click.option("--yes", "-y", is_flag=True, default=False,
              help="Ohne Rückfrage löschen.")
@click.pass_context
def cmd_delete(ctx: click.Context, tab_name: str, record_id: str, yes: bool):
    """Löscht einen Datensatz (mit Bestätigung)."""
    from sync.tab import TabController

    entity_type = _parse_tab(tab_name)
    config, clients = _open_store(ctx)
    tab = TabController(entity_type, clients, config)
    _abort_on_failed_load(tab, asyncio.run(tab.load()))

    tab.request_delete(record_id)
    record = tab.records.get(record_id)
    name = tab.schema.choice_label(record) if record is not None else record_id
    if not yes and not click.confirm(
        f"{tab.schema.singular} '{name}' wirklich löschen?", default=False
    ):
        tab.cancel_delete()
        console.print("[dim]Abgebrochen.[/dim]")
        return

    _report_mutation(tab, asyncio.run(tab.confirm_delete()), "gelöscht")


# ─── CHECK / EXPORT ───────────────────────────────────────────────────────────

def _load_all_or_abort(ctx: click.Context):
    from sync.tab import Dashboard

    config, clients = _open_store(ctx)
    dashboard = Dashboard(clients, config)
    results = asyncio.run(dashboard.load_all())
    failed = {et: r for et, r in results.items() if not r.ok}
    if failed:
        for et, r in failed.items():
            console.print(f"[red]{dashboard.tab(et).schema.label}:[/red] {r.error}")
        sys.exit(1)
    snapshots = {et: r.snapshot for et, r in results.items()}
    return config, snapshots


@click.command("check")
@click.pass_context
def cmd_check(ctx: click.Context):
    """Prüft alle Referenzen auf gelöschte oder fehlende Ziele."""
    from analysis.integrity import check_references

    _, snapshots = _load_all_or_abort(ctx)
    report = check_references(snapshots)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


@click.command("export")
@click.option("--output", "-o", default="output/kursverwaltung.xlsx",
              help="Ausgabepfad für die Excel-Datei.")
@click.pass_context
def cmd_export(ctx: click.Context, output: str):
    """Exportiert alle Tabs als Excel-Datei."""
    from export.excel_export import ExcelExporter

    config, snapshots = _load_all_or_abort(ctx)
    out_path = Path(output)
    console.print("[bold]Excel-Export wird erstellt...[/bold]")
    ExcelExporter(snapshots, config).export(out_path)
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


# ─── SEED ─────────────────────────────────────────────────────────────────────

@click.command("seed")
@click.option("--teilnehmer", default=8, show_default=True,
              help="Anzahl Teilnehmer.")
@click.option("--yes", "-y", is_flag=True, default=False,
              help="Ohne Rückfrage anlegen.")
@click.pass_context
def cmd_seed(ctx: click.Context, teilnehmer: int, yes: bool):
    """Legt Demo-Daten im konfigurierten Speicher an."""
    from data.demo_data import DemoDataGenerator
    from sync.client import LivingAppsClient, ServiceError, build_clients

    if ctx.obj["offline"]:
        console.print("[yellow]Im Offline-Modus sind die Demo-Daten bereits geladen.[/yellow]")
        return

    mgr, config = _load_config_or_abort()
    _setup_logging(config, ctx.obj["verbose"])
    if not yes and not click.confirm(
        f"Demo-Daten in {config.api.base_url} anlegen?", default=False
    ):
        return

    clients = build_clients(LivingAppsClient(config), config)
    gen = DemoDataGenerator(config, seed=ctx.obj["seed"])
    console.print("[bold]Demo-Daten werden angelegt...[/bold]")
    try:
        created = gen.generate(clients, teilnehmer=teilnehmer)
    except ServiceError as e:
        console.print(f"[red bold]Anlegen fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)
    gen.print_summary(created)


# ─── PROFILE ──────────────────────────────────────────────────────────────────

@click.group("profile")
def cmd_profile():
    """Profile verwalten (z.B. Test- und Produktiv-Arbeitsbereich)."""


@cmd_profile.command("save")
@click.argument("name")
@click.option("--description", "-d", default="", help="Beschreibung des Profils.")
def profile_save(name: str, description: str):
    """Speichert die aktuelle Konfiguration als Profil."""
    mgr, config = _load_config_or_abort()
    mgr.save_profile(config, name, description)


@cmd_profile.command("load")
@click.argument("name")
def profile_load(name: str):
    """Lädt ein gespeichertes Profil als aktive Konfiguration."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load_profile(name)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    mgr.save(config)
    console.print(f"[green]✓[/green] Profil '{name}' als aktive Config gesetzt.")


@cmd_profile.command("list")
def profile_list():
    """Listet alle gespeicherten Profile auf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    profiles = mgr.list_profiles()

    if not profiles:
        console.print("[dim]Keine Profile vorhanden.[/dim]")
        return

    table = Table(title="Gespeicherte Profile", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Erstellt")
    table.add_column("Beschreibung")
    for p in profiles:
        table.add_row(p["name"], p.get("created", ""), p.get("description", ""))
    console.print(table)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--offline", is_flag=True, default=False,
              help="Demo-Speicher im Arbeitsspeicher statt REST-API.")
@click.option("--seed", default=42, show_default=True,
              help="Zufalls-Seed für die Demo-Daten.")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Debug-Ausgaben (inkl. HTTP-Anfragen).")
@click.pass_context
def cli(ctx: click.Context, offline: bool, seed: int, verbose: bool):
    """Kursverwaltung: Kurse, Dozenten, Teilnehmer, Räume und Anmeldungen.

    Starten Sie mit: python main.py setup
    """
    ctx.ensure_object(dict)
    ctx.obj.update(offline=offline, seed=seed, verbose=verbose)


def main(argv: Optional[list[str]] = None):
    """Einstiegspunkt. Startet automatisch den Wizard beim ersten Aufruf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    args = list(sys.argv[1:] if argv is None else argv)
    if not args and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen bei der Kursverwaltung![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        args.append("setup")

    cli(args=args, obj={})


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_list)
cli.add_command(cmd_create)
cli.add_command(cmd_update)
cli.add_command(cmd_delete)
cli.add_command(cmd_check)
cli.add_command(cmd_export)
cli.add_command(cmd_seed)
cli.add_command(cmd_profile)


if __name__ == "__main__":
    main()
