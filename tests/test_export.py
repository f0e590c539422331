"""Tests für Demo-Daten, Referenzprüfung und Excel-Export."""

import asyncio
from pathlib import Path

import pytest

from analysis.integrity import IntegrityReport, check_references
from config.defaults import default_config
from data.demo_data import DemoDataGenerator
from data.memory_store import InMemoryRecordService
from export.excel_export import ExcelExporter
from models.entities import TAB_ORDER, EntityType
from models.record import Collection, Record
from models.reference import build_reference, extract_record_id
from sync.client import build_clients
from sync.loader import Snapshot
from sync.tab import Dashboard

CONFIG = default_config()


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _demo_store(seed: int = 42):
    service = InMemoryRecordService()
    clients = build_clients(service, CONFIG)
    created = DemoDataGenerator(CONFIG, seed=seed).generate(clients)
    return service, clients, created


def _snapshots(clients) -> dict:
    dashboard = Dashboard(clients, CONFIG)
    results = asyncio.run(dashboard.load_all())
    assert all(r.ok for r in results.values())
    return {et: r.snapshot for et, r in results.items()}


@pytest.fixture(scope="module")
def demo():
    """(service, clients, created) mit Seed 42."""
    return _demo_store()


# ─── DEMO-DATEN ───────────────────────────────────────────────────────────────

class TestDemoData:
    def test_counts(self, demo):
        service, _, created = demo
        assert len(created[EntityType.DOZENTEN]) == 5
        assert len(created[EntityType.RAEUME]) == 4
        assert len(created[EntityType.TEILNEHMER]) == 8
        assert len(created[EntityType.KURSE]) == 5
        assert len(created[EntityType.ANMELDUNGEN]) == 16
        assert service.count(CONFIG.app_ids.kurse) == 5

    def test_reproducible_with_seed(self):
        """Gleicher Seed → gleiche Namen (IDs vergibt der Speicher)."""
        _, _, a = _demo_store(seed=7)
        _, _, b = _demo_store(seed=7)
        names_a = [r.fields["name"] for r in a[EntityType.TEILNEHMER]]
        names_b = [r.fields["name"] for r in b[EntityType.TEILNEHMER]]
        assert names_a == names_b

    def test_person_names_unique(self, demo):
        _, _, created = demo
        names = [r.fields["name"]
                 for et in (EntityType.DOZENTEN, EntityType.TEILNEHMER)
                 for r in created[et]]
        assert len(names) == len(set(names))

    def test_no_duplicate_enrolment(self, demo):
        """Ein Teilnehmer ist höchstens einmal in einem Kurs angemeldet."""
        _, _, created = demo
        pairs = [(extract_record_id(r.fields["teilnehmer"]),
                  extract_record_id(r.fields["kurs"]))
                 for r in created[EntityType.ANMELDUNGEN]]
        assert len(pairs) == len(set(pairs))

    def test_course_capacity_within_room(self, demo):
        _, _, created = demo
        rooms = {r.record_id: r for r in created[EntityType.RAEUME]}
        for kurs in created[EntityType.KURSE]:
            raum = rooms[extract_record_id(kurs.fields["raum"])]
            assert kurs.fields["max_teilnehmer"] <= raum.fields["kapazitaet"]


# ─── REFERENZ-PRÜFUNG ─────────────────────────────────────────────────────────

class TestIntegrity:
    def test_demo_data_is_consistent(self, demo):
        _, clients, _ = demo
        report = check_references(_snapshots(clients))
        assert report.is_valid
        assert report.dangling == []
        # 16 Anmeldungen × 2 + 5 Kurse × 2 Referenzen
        assert report.checked == 42

    def test_deleted_target_reported(self):
        """Gelöschter Kurs → verwaiste Referenz in der Anmeldung."""
        service, clients, created = _demo_store()
        # ein Kurs mit mindestens einer Anmeldung
        kurs_id = extract_record_id(created[EntityType.ANMELDUNGEN][0].fields["kurs"])
        clients[EntityType.KURSE].delete(kurs_id)

        report = check_references(_snapshots(clients))
        assert not report.is_valid
        errors = [d for d in report.dangling if d.severity == "error"]
        assert errors
        assert all(d.entity_type == EntityType.ANMELDUNGEN for d in errors)
        assert all(d.field == "kurs" for d in errors)
        assert all(d.target_id == kurs_id for d in errors)

    def test_empty_required_reference_is_warning(self):
        service = InMemoryRecordService()
        service.add_record(CONFIG.app_ids.anmeldungen, Record(
            record_id="a1", fields={"anmeldedatum": "2025-01-01"}))
        report = check_references(_snapshots(build_clients(service, CONFIG)))
        assert report.is_valid
        assert {(d.field, d.severity, d.target_id) for d in report.dangling} == {
            ("teilnehmer", "warning", None), ("kurs", "warning", None),
        }

    def test_auxiliary_collection_used(self):
        """Hilfssammlung des Kurse-Tabs genügt als Ziel-Sammlung."""
        service = InMemoryRecordService()
        service.add_record(CONFIG.app_ids.kurse, Record(record_id="k1", fields={
            "dozent": build_reference(EntityType.DOZENTEN, "d1", CONFIG),
        }))
        snaps = _snapshots(build_clients(service, CONFIG))
        report = check_references({EntityType.KURSE: snaps[EntityType.KURSE]})
        assert [d.target_id for d in report.dangling if d.severity == "error"] == ["d1"]

    def test_unloaded_target_type_skipped(self):
        """Ohne geladene Ziel-Sammlung wird nichts als verwaist gemeldet."""
        kurs = Record(record_id="k1", fields={
            "dozent": build_reference(EntityType.DOZENTEN, "d1", CONFIG),
        })
        snap = Snapshot(primary_type=EntityType.KURSE, primary=Collection([kurs]))
        report = check_references({EntityType.KURSE: snap})
        assert report.checked == 0
        # nur die leere Pflichtreferenz "raum"
        assert [(d.field, d.severity) for d in report.dangling] == [("raum", "warning")]

    def test_print_rich(self, capsys):
        IntegrityReport(dangling=[], checked=0).print_rich()
        assert "Referenz-Prüfung" in capsys.readouterr().out


# ─── EXCEL-EXPORT ─────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_creates_file(self, tmp_path: Path, demo):
        _, clients, _ = demo
        out = tmp_path / "sub" / "kurse.xlsx"
        ExcelExporter(_snapshots(clients), CONFIG).export(out)
        assert out.exists()
        assert out.stat().st_size > 0

    def test_has_correct_sheets(self, tmp_path: Path, demo):
        from openpyxl import load_workbook
        _, clients, _ = demo
        out = tmp_path / "kurse.xlsx"
        ExcelExporter(_snapshots(clients), CONFIG).export(out)
        wb = load_workbook(out)
        assert wb.sheetnames == ["Übersicht", "Kurse", "Anmeldungen", "Dozenten",
                                 "Teilnehmer", "Räume"]

    def test_uebersicht_counts(self, tmp_path: Path, demo):
        from openpyxl import load_workbook
        _, clients, _ = demo
        out = tmp_path / "kurse.xlsx"
        ExcelExporter(_snapshots(clients), CONFIG).export(out)
        ws = load_workbook(out)["Übersicht"]
        counts = {ws.cell(row=r, column=1).value: ws.cell(row=r, column=2).value
                  for r in range(5, 5 + len(TAB_ORDER))}
        assert counts["Anmeldungen"] == 16
        assert counts["Räume"] == 4

    def test_references_resolved(self, tmp_path: Path, demo):
        """Referenzspalten zeigen Namen statt URLs."""
        from openpyxl import load_workbook
        _, clients, created = demo
        out = tmp_path / "kurse.xlsx"
        ExcelExporter(_snapshots(clients), CONFIG).export(out)
        ws = load_workbook(out)["Kurse"]

        headers = [c.value for c in ws[1]]
        assert headers[0] == "ID"
        dozent_col = headers.index("Dozent") + 1
        dozent_names = {r.fields["name"] for r in created[EntityType.DOZENTEN]}
        assert ws.cell(row=2, column=dozent_col).value in dozent_names

    def test_bool_and_date_formatting(self, tmp_path: Path):
        from openpyxl import load_workbook
        service = InMemoryRecordService()
        service.add_record(CONFIG.app_ids.anmeldungen, Record(record_id="a1", fields={
            "anmeldedatum": "2025-02-20", "bezahlt": True,
        }))
        out = tmp_path / "kurse.xlsx"
        ExcelExporter(_snapshots(build_clients(service, CONFIG)), CONFIG).export(out)
        ws = load_workbook(out)["Anmeldungen"]
        assert [c.value for c in ws[2]] == ["a1", "N/A", "N/A", "20.02.2025", "Ja"]
