"""Demo-Daten für die Kursverwaltung.

Legt über die EntityClients realistische Datensätze an – in einem
InMemoryRecordService (``--offline``) oder im echten Speicher (``seed``).
Reihenfolge: Dozenten, Räume, Teilnehmer → Kurse → Anmeldungen, damit jede
Referenz auf einen bereits existierenden Datensatz zeigt.
"""

import random
from datetime import date, timedelta
from typing import Optional

from config.schema import KursverwaltungConfig
from models.entities import EntityType
from models.record import Record
from models.reference import build_reference
from sync.client import EntityClient

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Anna", "Birgit", "Christian", "Dieter", "Eva", "Franz", "Hans", "Iris",
    "Jürgen", "Karin", "Lena", "Markus", "Monika", "Peter", "Sabine",
    "Stefan", "Tanja", "Thomas", "Ulrike", "Yusuf",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer", "Wagner",
    "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch", "Bauer", "Richter",
    "Klein", "Wolf", "Schröder", "Neumann", "Braun", "Krüger",
]

# (Fachgebiet, Kurstitel, Beschreibung)
_COURSES: list[tuple[str, str, Optional[str]]] = [
    ("Mathematik", "Mathe Grundlagen", "Bruchrechnung, Gleichungen, Prozentrechnung"),
    ("Informatik", "Python für Einsteiger", "Variablen, Schleifen, Funktionen"),
    ("Sprachen", "Englisch B1", "Konversation und Grammatik"),
    ("Wirtschaft", "Buchhaltung kompakt", None),
    ("Gestaltung", "Fotografie", "Belichtung, Komposition, Bildbearbeitung"),
]

_ROOMS: list[tuple[str, str, int]] = [
    ("Raum 101", "Hauptgebäude", 24),
    ("Raum 102", "Hauptgebäude", 18),
    ("EDV-Labor", "Nebengebäude", 16),
    ("Atelier", "Nebengebäude", 12),
]


def _slug(text: str) -> str:
    return (
        text.lower()
        .replace("ä", "ae").replace("ö", "oe").replace("ü", "ue")
        .replace("ß", "ss").replace(" ", ".")
    )


class DemoDataGenerator:
    """Erzeugt Demo-Datensätze für alle fünf Entitätstypen."""

    def __init__(self, config: KursverwaltungConfig, seed: Optional[int] = None,
                 start: Optional[date] = None) -> None:
        self.config = config
        self.rng = random.Random(seed)
        self.start = start or date(2025, 3, 3)
        self._used_names: set[str] = set()

    def _person_name(self) -> str:
        while True:
            name = f"{self.rng.choice(_FIRST_NAMES)} {self.rng.choice(_LAST_NAMES)}"
            if name not in self._used_names:
                self._used_names.add(name)
                return name

    def _ref(self, entity_type: EntityType, record: Record) -> str:
        return build_reference(entity_type, record.record_id, self.config)

    # ─── Stammdaten ───────────────────────────────────────────────────────────

    def _dozenten(self, client: EntityClient) -> list[Record]:
        records = []
        for fach, _, _ in _COURSES:
            name = self._person_name()
            records.append(client.create({
                "name": name,
                "email": f"{_slug(name)}@kursverwaltung.de",
                "telefon": f"0{self.rng.randint(30, 89)} {self.rng.randint(100000, 999999)}",
                "fachgebiet": fach,
            }))
        return records

    def _raeume(self, client: EntityClient) -> list[Record]:
        return [
            client.create({"raumname": name, "gebaeude": gebaeude,
                           "kapazitaet": kapazitaet})
            for name, gebaeude, kapazitaet in _ROOMS
        ]

    def _teilnehmer(self, client: EntityClient, count: int) -> list[Record]:
        records = []
        for _ in range(count):
            name = self._person_name()
            fields = {
                "name": name,
                "email": f"{_slug(name)}@example.org",
            }
            if self.rng.random() < 0.6:
                fields["telefon"] = f"0171 {self.rng.randint(1000000, 9999999)}"
            if self.rng.random() < 0.7:
                born = date(self.rng.randint(1965, 2005), self.rng.randint(1, 12),
                            self.rng.randint(1, 28))
                fields["geburtsdatum"] = born.isoformat()
            records.append(client.create(fields))
        return records

    # ─── Bewegungsdaten ───────────────────────────────────────────────────────

    def _kurse(self, client: EntityClient, dozenten: list[Record],
               raeume: list[Record]) -> list[Record]:
        records = []
        for i, (_, titel, beschreibung) in enumerate(_COURSES):
            begin = self.start + timedelta(weeks=2 * i)
            raum = raeume[i % len(raeume)]
            fields = {
                "titel": titel,
                "startdatum": begin.isoformat(),
                "enddatum": (begin + timedelta(weeks=8)).isoformat(),
                "max_teilnehmer": min(raum.fields["kapazitaet"], 12 + 2 * i),
                "preis": self.rng.choice([89, 129.5, 149, 199, 249.9]),
                "dozent": self._ref(EntityType.DOZENTEN, dozenten[i]),
                "raum": self._ref(EntityType.RAEUME, raum),
            }
            if beschreibung:
                fields["beschreibung"] = beschreibung
            records.append(client.create(fields))
        return records

    def _anmeldungen(self, client: EntityClient, teilnehmer: list[Record],
                     kurse: list[Record], per_person: int) -> list[Record]:
        records = []
        for tn in teilnehmer:
            for kurs in self.rng.sample(kurse, k=min(per_person, len(kurse))):
                start = date.fromisoformat(kurs.fields["startdatum"])
                records.append(client.create({
                    "teilnehmer": self._ref(EntityType.TEILNEHMER, tn),
                    "kurs": self._ref(EntityType.KURSE, kurs),
                    "anmeldedatum": (start - timedelta(days=self.rng.randint(3, 30))).isoformat(),
                    "bezahlt": self.rng.random() < 0.6,
                }))
        return records

    def generate(self, clients: dict[EntityType, EntityClient],
                 teilnehmer: int = 8, per_person: int = 2) -> dict[EntityType, list[Record]]:
        """Legt alle Demo-Datensätze an und gibt sie je Entitätstyp zurück."""
        dozenten = self._dozenten(clients[EntityType.DOZENTEN])
        raeume = self._raeume(clients[EntityType.RAEUME])
        tn = self._teilnehmer(clients[EntityType.TEILNEHMER], teilnehmer)
        kurse = self._kurse(clients[EntityType.KURSE], dozenten, raeume)
        anmeldungen = self._anmeldungen(clients[EntityType.ANMELDUNGEN], tn, kurse,
                                        per_person)
        return {
            EntityType.DOZENTEN: dozenten,
            EntityType.RAEUME: raeume,
            EntityType.TEILNEHMER: tn,
            EntityType.KURSE: kurse,
            EntityType.ANMELDUNGEN: anmeldungen,
        }

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, created: dict[EntityType, list[Record]]) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der angelegten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box
        from models.entities import get_schema

        console = Console()
        table = Table(title="Angelegte Demo-Daten", box=box.ROUNDED)
        table.add_column("Entität", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        for et, records in created.items():
            table.add_row(get_schema(et).label, str(len(records)))
        console.print(table)
