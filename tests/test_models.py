"""Tests für Entitäts-Schemata, Referenzen und Sammlungen."""

import pytest

from config.defaults import default_config
from models.entities import (
    SCHEMAS,
    TAB_ORDER,
    EntityType,
    FieldKind,
    get_schema,
)
from models.record import Collection, Record
from models.reference import RecordRef, build_reference, extract_record_id


@pytest.fixture(scope="module")
def config():
    return default_config()


# ─── ENTITÄTSTYPEN ────────────────────────────────────────────────────────────

class TestEntityType:
    @pytest.mark.parametrize("text,expected", [
        ("kurse", EntityType.KURSE),
        ("KURSE", EntityType.KURSE),
        ("Räume", EntityType.RAEUME),
        ("raeume", EntityType.RAEUME),
        (" Anmeldungen ", EntityType.ANMELDUNGEN),
    ])
    def test_parse(self, text, expected):
        """Bezeichner und deutsche Namen werden erkannt."""
        assert EntityType.parse(text) == expected

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError, match="Unbekannter Entitätstyp"):
            EntityType.parse("Lehrer")


class TestSchemas:
    def test_every_entity_has_schema(self):
        assert set(SCHEMAS) == set(EntityType)
        assert set(TAB_ORDER) == set(EntityType)

    def test_reference_targets(self):
        """Anmeldungen → Teilnehmer, Kurse; Kurse → Dozenten, Räume."""
        assert get_schema(EntityType.ANMELDUNGEN).auxiliary_types == [
            EntityType.TEILNEHMER, EntityType.KURSE,
        ]
        assert get_schema(EntityType.KURSE).auxiliary_types == [
            EntityType.DOZENTEN, EntityType.RAEUME,
        ]
        for et in (EntityType.DOZENTEN, EntityType.TEILNEHMER, EntityType.RAEUME):
            assert get_schema(et).auxiliary_types == []

    def test_reference_fields_have_target(self):
        for schema in SCHEMAS.values():
            for f in schema.fields:
                assert (f.target is not None) == (f.kind == FieldKind.REFERENCE)

    def test_referenced_types_have_display_field(self):
        """Jeder Referenzziel-Typ hat ein Anzeigefeld unter seinen Feldern."""
        for schema in SCHEMAS.values():
            for f in schema.reference_fields:
                target = get_schema(f.target)
                assert target.display_field in target.field_names

    def test_field_unknown_raises(self):
        with pytest.raises(KeyError):
            get_schema(EntityType.KURSE).field("farbe")

    def test_choice_label_room_includes_building(self):
        """Räume erscheinen in Auswahllisten als 'Raumname (Gebäude)'."""
        room = Record(record_id="r1", fields={"raumname": "Raum 101",
                                              "gebaeude": "Hauptgebäude"})
        assert get_schema(EntityType.RAEUME).choice_label(room) == "Raum 101 (Hauptgebäude)"

    def test_choice_label_falls_back_to_id(self):
        dozent = Record(record_id="d1", fields={})
        assert get_schema(EntityType.DOZENTEN).choice_label(dozent) == "d1"


# ─── REFERENZEN ───────────────────────────────────────────────────────────────

class TestReferences:
    def test_build_reference_format(self, config):
        url = build_reference(EntityType.DOZENTEN, "abc123", config)
        assert url == (
            f"https://my.living-apps.de/rest/apps/"
            f"{config.app_ids.dozenten}/records/abc123"
        )

    @pytest.mark.parametrize("entity_type", list(EntityType))
    def test_extract_inverts_build(self, config, entity_type):
        """Datensatz-ID überlebt Kodieren und Zerlegen für jeden Typ."""
        record_id = "65f0c1d2e3a4b5c6d7e8f901"
        assert extract_record_id(build_reference(entity_type, record_id, config)) == record_id

    @pytest.mark.parametrize("value", [None, "", "   ", "///"])
    def test_extract_empty(self, value):
        assert extract_record_id(value) is None

    def test_extract_trailing_slash(self):
        assert extract_record_id("https://x/apps/a/records/r9/") == "r9"

    def test_extract_from_record_ref(self):
        ref = RecordRef(entity_type=EntityType.KURSE, record_id="k1")
        assert extract_record_id(ref) == "k1"

    @pytest.mark.parametrize("record_id", ["", "  ", "a/b"])
    def test_build_rejects_invalid_ids(self, config, record_id):
        with pytest.raises(ValueError):
            build_reference(EntityType.KURSE, record_id, config)

    def test_record_ref_url_roundtrip(self, config):
        """RecordRef → URL → RecordRef ergibt denselben Verweis."""
        ref = RecordRef(entity_type=EntityType.TEILNEHMER, record_id="t42")
        assert RecordRef.from_url(ref.to_url(config), config) == ref

    def test_record_ref_unknown_app(self, config):
        url = "https://my.living-apps.de/rest/apps/ffffffffffffffffffffffff/records/x1"
        assert RecordRef.from_url(url, config) is None

    def test_record_ref_is_hashable(self):
        ref = RecordRef(entity_type=EntityType.KURSE, record_id="k1")
        assert ref in {ref}


# ─── SAMMLUNGEN ───────────────────────────────────────────────────────────────

class TestCollection:
    def test_ids_unique_after_load(self):
        """Doppelte IDs: erste Position bleibt, letzter Wert gewinnt."""
        coll = Collection([
            Record(record_id="a", fields={"name": "alt"}),
            Record(record_id="b", fields={"name": "B"}),
            Record(record_id="a", fields={"name": "neu"}),
        ])
        assert coll.ids == ["a", "b"]
        assert coll.get("a").fields["name"] == "neu"
        assert len(coll) == 2

    def test_fetch_order_preserved(self):
        coll = Collection(Record(record_id=i) for i in ["z", "m", "a"])
        assert [r.record_id for r in coll] == ["z", "m", "a"]

    def test_find_and_contains(self):
        coll = Collection([Record(record_id="x")])
        assert "x" in coll
        assert coll.find("x").record_id == "x"
        assert coll.find("y") is None
        assert coll.get(None) is None

    def test_equality(self):
        a = Collection([Record(record_id="1", fields={"n": 1})])
        b = Collection([Record(record_id="1", fields={"n": 1})])
        assert a == b
        assert a != Collection()
