"""Tests für die CLI im Offline-Modus (Demo-Speicher)."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from config.defaults import default_config
from config.manager import API_KEY_ENV, ConfigManager
from main import cli


@pytest.fixture
def runner(tmp_path: Path, monkeypatch):
    """CliRunner in leerem Arbeitsverzeichnis (keine vorhandene Config)."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    return CliRunner()


def _invoke(runner, *args):
    return runner.invoke(cli, ["--offline", *args], obj={})


class TestOfflineCommands:
    def test_list_shows_cards(self, runner):
        result = _invoke(runner, "list", "räume")
        assert result.exit_code == 0, result.output
        assert "Raum 101" in result.output
        assert "4 Datensätze" in result.output

    def test_list_unknown_tab(self, runner):
        result = _invoke(runner, "list", "lehrer")
        assert result.exit_code == 2
        assert "Unbekannter Tab" in result.output

    def test_create(self, runner):
        result = _invoke(runner, "create", "raeume", "--set", "raumname=Aula",
                         "--set", "gebaeude=Altbau", "--set", "kapazitaet=80")
        assert result.exit_code == 0, result.output
        assert "Raum angelegt" in result.output

    def test_create_missing_required_fails(self, runner):
        """Unvollständiges Formular → Fehlermeldung und Exit-Code 1."""
        result = _invoke(runner, "create", "raeume", "--set", "raumname=Aula")
        assert result.exit_code == 1
        assert "Gebäude fehlt" in result.output

    def test_create_unknown_field(self, runner):
        result = _invoke(runner, "create", "raeume", "--set", "farbe=rot")
        assert result.exit_code == 2

    def test_update_unknown_record(self, runner):
        result = _invoke(runner, "update", "kurse", "gibtsnicht", "--set", "titel=X")
        assert result.exit_code == 1
        assert "nicht gefunden" in result.output

    def test_delete_unknown_record(self, runner):
        """Bereits gelöschter Datensatz → Fehler des Speichers wird angezeigt."""
        result = _invoke(runner, "delete", "kurse", "gibtsnicht", "--yes")
        assert result.exit_code == 1
        assert "Fehler" in result.output

    def test_delete_cancelled(self, runner):
        result = runner.invoke(cli, ["--offline", "delete", "kurse", "gibtsnicht"],
                               input="n\n", obj={})
        assert result.exit_code == 0
        assert "Abgebrochen" in result.output

    def test_check(self, runner):
        result = _invoke(runner, "check")
        assert result.exit_code == 0, result.output
        assert "ALLE REFERENZEN GÜLTIG" in result.output

    def test_export(self, runner, tmp_path: Path):
        out = tmp_path / "export.xlsx"
        result = _invoke(runner, "export", "-o", str(out))
        assert result.exit_code == 0, result.output
        assert out.exists()

    def test_seed_offline_is_noop(self, runner):
        result = _invoke(runner, "seed")
        assert result.exit_code == 0
        assert "bereits geladen" in result.output


class TestConfigCommands:
    def test_online_without_config_aborts(self, runner):
        result = runner.invoke(cli, ["list", "kurse"], obj={})
        assert result.exit_code == 1
        assert "Keine Konfiguration gefunden" in result.output

    def test_config_show(self, runner):
        ConfigManager().save(default_config())
        result = runner.invoke(cli, ["config", "show"], obj={})
        assert result.exit_code == 0, result.output
        assert "Kursverwaltung" in result.output
        assert default_config().app_ids.kurse in result.output

    def test_profile_save_and_list(self, runner):
        ConfigManager().save(default_config())
        result = runner.invoke(cli, ["profile", "save", "test", "-d", "Testbereich"],
                               obj={})
        assert result.exit_code == 0, result.output
        result = runner.invoke(cli, ["profile", "list"], obj={})
        assert "test" in result.output
        assert "Testbereich" in result.output
