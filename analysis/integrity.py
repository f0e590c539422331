"""Referenz-Integrität der geladenen Sammlungen.

Die Anzeige ersetzt nicht auflösbare Referenzen stillschweigend durch den
Platzhalter; dieser Report macht sie sichtbar.
"""

from typing import Literal, Optional

from pydantic import BaseModel

from models.entities import EntityType, get_schema
from models.record import Collection
from models.reference import extract_record_id
from sync.loader import Snapshot


class DanglingReference(BaseModel):
    """Ein Referenzfeld, dessen Ziel nicht (mehr) existiert."""

    severity: Literal["error", "warning"]
    entity_type: EntityType
    record_id: str
    field: str
    target_type: EntityType
    target_id: Optional[str]     # None = Pflichtreferenz leer


class IntegrityReport(BaseModel):
    """Ergebnis der Referenzprüfung über alle geladenen Tabs."""

    dangling: list[DanglingReference]
    checked: int                 # Anzahl geprüfter Referenzwerte

    @property
    def is_valid(self) -> bool:
        return not any(d.severity == "error" for d in self.dangling)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [d for d in self.dangling if d.severity == "error"]
        warnings = [d for d in self.dangling if d.severity == "warning"]

        status = (
            "[bold green]✓ ALLE REFERENZEN GÜLTIG[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERWAISTE REFERENZEN[/bold red]"
        )
        lines = [
            status,
            f"Geprüft: {self.checked} | Fehler: {len(errors)} | Warnungen: {len(warnings)}",
        ]
        console.print(Panel("\n".join(lines), title="Referenz-Prüfung", border_style="cyan"))

        if not self.dangling:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Entität", width=12)
        table.add_column("Datensatz", width=26)
        table.add_column("Feld", width=12)
        table.add_column("Ziel")

        for d in self.dangling:
            color = "red" if d.severity == "error" else "yellow"
            target = (
                f"{get_schema(d.target_type).label}: {d.target_id}"
                if d.target_id else "[dim](leer)[/dim]"
            )
            table.add_row(
                f"[{color}]{d.severity.upper()}[/{color}]",
                get_schema(d.entity_type).label,
                d.record_id,
                d.field,
                target,
            )
        console.print(table)


def _known_collections(snapshots: dict[EntityType, Snapshot]) -> dict[EntityType, Collection]:
    """Je Entitätstyp die aktuellste bekannte Sammlung.

    Die Haupt-Sammlung eines Tabs hat Vorrang vor Hilfssammlungen anderer Tabs.
    """
    known: dict[EntityType, Collection] = {}
    for snap in snapshots.values():
        for et, coll in snap.auxiliaries.items():
            known.setdefault(et, coll)
    for snap in snapshots.values():
        known[snap.primary_type] = snap.primary
    return known


def check_references(snapshots: dict[EntityType, Snapshot]) -> IntegrityReport:
    """Prüft alle Referenzfelder der Haupt-Sammlungen gegen ihre Ziel-Sammlungen.

    Ziel-Typen, die in keinem Snapshot geladen sind, werden übersprungen.
    """
    known = _known_collections(snapshots)
    dangling: list[DanglingReference] = []
    checked = 0

    for et, snap in snapshots.items():
        schema = get_schema(et)
        for record in snap.primary:
            for spec in schema.reference_fields:
                value = record.fields.get(spec.name)
                target_id = extract_record_id(value) if value else None
                if target_id is None:
                    if spec.required:
                        dangling.append(DanglingReference(
                            severity="warning", entity_type=et,
                            record_id=record.record_id, field=spec.name,
                            target_type=spec.target, target_id=None,
                        ))
                    continue
                target = known.get(spec.target)
                if target is None:
                    continue
                checked += 1
                if target.find(target_id) is None:
                    dangling.append(DanglingReference(
                        severity="error", entity_type=et,
                        record_id=record.record_id, field=spec.name,
                        target_type=spec.target, target_id=target_id,
                    ))

    return IntegrityReport(dangling=dangling, checked=checked)
