"""Karten-Ansicht der Tabs: aufgelöste Anzeigetexte je Datensatz."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from config.schema import DisplayConfig
from models.entities import EntitySchema, EntityType
from models.record import Record
from sync.resolver import ReferenceResolver


@dataclass(frozen=True)
class Card:
    record_id: str
    title: str
    subtitle: Optional[str] = None
    lines: list[str] = field(default_factory=list)
    badge: Optional[str] = None       # z.B. "Bezahlt" / "Offen"


def format_date(value: Any, fmt: str) -> str:
    """ISO-Datum → Anzeigeformat. Unlesbare Werte werden unverändert gezeigt."""
    if value in (None, ""):
        return ""
    if isinstance(value, datetime):
        return value.strftime(fmt)
    if isinstance(value, date):
        return value.strftime(fmt)
    text = str(value)
    try:
        return date.fromisoformat(text[:10]).strftime(fmt)
    except ValueError:
        return text


def format_price(value: Any) -> str:
    """49.5 → "49.50 €"."""
    try:
        return f"{float(value):.2f} €"
    except (TypeError, ValueError):
        return f"{value} €"


def _text(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    return str(value)


def _kurs_card(r: Record, res: ReferenceResolver, d: DisplayConfig) -> Card:
    f = r.fields
    lines = []
    if f.get("startdatum") or f.get("enddatum"):
        lines.append(
            f"{format_date(f.get('startdatum'), d.short_date_format)} - "
            f"{format_date(f.get('enddatum'), d.short_date_format)}"
        )
    lines.append(f"Dozent: {res.display(r, 'dozent')}")
    lines.append(f"Raum: {res.display(r, 'raum')}")
    if f.get("max_teilnehmer") is not None:
        lines.append(f"Max. {f['max_teilnehmer']} Teilnehmer")
    if f.get("preis") is not None:
        lines.append(format_price(f["preis"]))
    return Card(record_id=r.record_id, title=_text(f.get("titel")) or d.sentinel,
                subtitle=_text(f.get("beschreibung")), lines=lines)


def _dozent_card(r: Record, res: ReferenceResolver, d: DisplayConfig) -> Card:
    f = r.fields
    lines = [v for v in (_text(f.get("email")), _text(f.get("telefon"))) if v]
    return Card(record_id=r.record_id, title=_text(f.get("name")) or d.sentinel,
                subtitle=_text(f.get("fachgebiet")), lines=lines)


def _teilnehmer_card(r: Record, res: ReferenceResolver, d: DisplayConfig) -> Card:
    f = r.fields
    lines = [v for v in (_text(f.get("email")), _text(f.get("telefon"))) if v]
    if f.get("geburtsdatum"):
        lines.append(format_date(f["geburtsdatum"], d.date_format))
    return Card(record_id=r.record_id, title=_text(f.get("name")) or d.sentinel,
                lines=lines)


def _raum_card(r: Record, res: ReferenceResolver, d: DisplayConfig) -> Card:
    f = r.fields
    lines = []
    if f.get("kapazitaet") is not None:
        lines.append(f"{f['kapazitaet']} Personen")
    return Card(record_id=r.record_id, title=_text(f.get("raumname")) or d.sentinel,
                subtitle=_text(f.get("gebaeude")), lines=lines)


def _anmeldung_card(r: Record, res: ReferenceResolver, d: DisplayConfig) -> Card:
    f = r.fields
    lines = [res.display(r, "kurs")]
    if f.get("anmeldedatum"):
        lines.append(f"Angemeldet: {format_date(f['anmeldedatum'], d.date_format)}")
    return Card(record_id=r.record_id, title=res.display(r, "teilnehmer"),
                lines=lines, badge="Bezahlt" if f.get("bezahlt") else "Offen")


_BUILDERS = {
    EntityType.KURSE: _kurs_card,
    EntityType.DOZENTEN: _dozent_card,
    EntityType.TEILNEHMER: _teilnehmer_card,
    EntityType.RAEUME: _raum_card,
    EntityType.ANMELDUNGEN: _anmeldung_card,
}


def build_card(schema: EntitySchema, record: Record, resolver: ReferenceResolver,
               display: DisplayConfig) -> Card:
    return _BUILDERS[schema.entity_type](record, resolver, display)
