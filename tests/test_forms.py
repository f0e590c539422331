"""Tests für Formular ↔ Feldwerte."""

from datetime import date

import pytest

from config.defaults import default_config
from models.entities import EntityType, get_schema
from models.record import Record
from models.reference import build_reference
from sync.forms import (
    FormValidationError,
    build_payload,
    empty_form,
    form_from_record,
    parse_number,
)


@pytest.fixture(scope="module")
def config():
    return default_config()


KURSE = get_schema(EntityType.KURSE)
ANMELDUNGEN = get_schema(EntityType.ANMELDUNGEN)
TEILNEHMER = get_schema(EntityType.TEILNEHMER)


def _kurs_fields(config) -> dict:
    return {
        "titel": "Mathe Grundlagen",
        "beschreibung": "Bruchrechnung",
        "startdatum": "2025-03-03",
        "enddatum": "2025-04-28",
        "max_teilnehmer": 20,
        "preis": 49.5,
        "dozent": build_reference(EntityType.DOZENTEN, "d1", config),
        "raum": build_reference(EntityType.RAEUME, "r1", config),
    }


class TestEmptyForm:
    def test_all_fields_blank(self):
        form = empty_form(KURSE)
        assert set(form) == set(KURSE.field_names)
        assert all(v == "" for v in form.values())

    def test_anmeldung_defaults_to_today(self):
        """Neue Anmeldung: Anmeldedatum = heute, nicht bezahlt."""
        form = empty_form(ANMELDUNGEN, today=date(2025, 5, 17))
        assert form["anmeldedatum"] == "2025-05-17"
        assert form["bezahlt"] is False


class TestFormFromRecord:
    def test_references_become_ids(self, config):
        """Referenzfelder werden mit Datensatz-IDs vorbelegt, nicht mit Namen."""
        record = Record(record_id="k1", fields=_kurs_fields(config))
        form = form_from_record(KURSE, record)
        assert form["dozent"] == "d1"
        assert form["raum"] == "r1"

    def test_numbers_as_text(self, config):
        record = Record(record_id="k1", fields=dict(_kurs_fields(config), max_teilnehmer=20.0))
        form = form_from_record(KURSE, record)
        assert form["max_teilnehmer"] == "20"
        assert form["preis"] == "49.5"

    def test_missing_fields_blank(self):
        form = form_from_record(ANMELDUNGEN, Record(record_id="a1"))
        assert form == {"teilnehmer": "", "kurs": "", "anmeldedatum": "", "bezahlt": False}

    def test_unchanged_resubmit_is_identical(self, config):
        """Unverändert abgeschickt → dieselben Feldwerte wie vorher."""
        fields = _kurs_fields(config)
        form = form_from_record(KURSE, Record(record_id="k1", fields=fields))
        assert build_payload(KURSE, form, config) == fields


class TestParseNumber:
    @pytest.mark.parametrize("text,expected", [
        ("20", 20), (" 7 ", 7), ("49.5", 49.5), ("49,5", 49.5), ("3.0", 3.0),
    ])
    def test_valid(self, text, expected):
        value = parse_number(text)
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize("text", ["", "abc", "nan", "inf", "1.2.3"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_number(text)


class TestBuildPayload:
    def test_encodes_references(self, config):
        form = {"teilnehmer": "t1", "kurs": "k1", "anmeldedatum": "2025-05-17",
                "bezahlt": True}
        payload = build_payload(ANMELDUNGEN, form, config)
        assert payload == {
            "teilnehmer": build_reference(EntityType.TEILNEHMER, "t1", config),
            "kurs": build_reference(EntityType.KURSE, "k1", config),
            "anmeldedatum": "2025-05-17",
            "bezahlt": True,
        }

    def test_optional_blank_fields_omitted(self, config):
        form = {"name": "Anna", "email": "anna@example.org", "telefon": "  ",
                "geburtsdatum": ""}
        assert build_payload(TEILNEHMER, form, config) == {
            "name": "Anna", "email": "anna@example.org",
        }

    def test_missing_required_fields_reported(self, config):
        """Alle fehlenden Pflichtfelder werden gemeinsam gemeldet."""
        with pytest.raises(FormValidationError) as exc:
            build_payload(ANMELDUNGEN, empty_form(ANMELDUNGEN), config)
        assert exc.value.problems == ["Teilnehmer fehlt", "Kurs fehlt"]

    def test_invalid_values_reported(self, config):
        form = dict(empty_form(KURSE), titel="X", startdatum="03.03.2025",
                    enddatum="2025-04-01", max_teilnehmer="viele", preis="10",
                    dozent="d1", raum="a/b")
        with pytest.raises(FormValidationError) as exc:
            build_payload(KURSE, form, config)
        problems = " | ".join(exc.value.problems)
        assert "Startdatum" in problems
        assert "Max. Teilnehmer" in problems
        assert "Raum" in problems
        assert "Dozent" not in problems

    @pytest.mark.parametrize("text", ["2025-03-03", "2025-03-03T09:30",
                                      "2025-03-03T09:30:15"])
    def test_date_and_timestamp_accepted(self, config, text):
        form = {"name": "Anna", "email": "anna@example.org", "geburtsdatum": text}
        assert build_payload(TEILNEHMER, form, config)["geburtsdatum"] == text

    @pytest.mark.parametrize("text", ["2025-03-03garbage", "2025-03-03T",
                                      "2025-03-03T25:00", "2025-02-30"])
    def test_trailing_garbage_in_date_rejected(self, config, text):
        form = {"name": "Anna", "email": "anna@example.org", "geburtsdatum": text}
        with pytest.raises(FormValidationError, match="Geburtsdatum"):
            build_payload(TEILNEHMER, form, config)

    def test_unset_bool_missing_in_original_omitted(self, config):
        """Ohne 'bezahlt' gespeichert, unverändert abgeschickt → kein 'bezahlt'."""
        fields = {
            "teilnehmer": build_reference(EntityType.TEILNEHMER, "t1", config),
            "kurs": build_reference(EntityType.KURSE, "k1", config),
            "anmeldedatum": "2025-05-17",
        }
        record = Record(record_id="a1", fields=fields)
        form = form_from_record(ANMELDUNGEN, record)
        assert build_payload(ANMELDUNGEN, form, config, original=record) == fields

    def test_bool_set_in_edit_is_written(self, config):
        record = Record(record_id="a1", fields={
            "teilnehmer": build_reference(EntityType.TEILNEHMER, "t1", config),
            "kurs": build_reference(EntityType.KURSE, "k1", config),
            "anmeldedatum": "2025-05-17",
        })
        form = dict(form_from_record(ANMELDUNGEN, record), bezahlt=True)
        assert build_payload(ANMELDUNGEN, form, config, original=record)["bezahlt"] is True

    def test_bool_always_written_on_create(self, config):
        form = {"teilnehmer": "t1", "kurs": "k1", "anmeldedatum": "2025-05-17",
                "bezahlt": False}
        assert build_payload(ANMELDUNGEN, form, config)["bezahlt"] is False

    def test_invalid_email(self, config):
        form = {"name": "Anna", "email": "anna.example.org"}
        with pytest.raises(FormValidationError, match="E-Mail"):
            build_payload(TEILNEHMER, form, config)

    def test_form_error_is_value_error(self):
        assert issubclass(FormValidationError, ValueError)
