"""Konfigurationsmanager: Laden, Speichern und Profile.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import os
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import KursverwaltungConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

# Umgebungsvariable, die den API-Schlüssel aus der Datei überschreibt
API_KEY_ENV = "KURSVERWALTUNG_API_KEY"


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Kursverwaltung — Konfiguration
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "api": (
        "REST-API",
        "Zugang zum Datensatz-Speicher. Der API-Schlüssel kann auch über\n"
        f"{API_KEY_ENV} gesetzt werden.",
    ),
    "app_ids": (
        "App-IDs",
        "Eine App je Entitätstyp (24 Hex-Zeichen).",
    ),
    "display": (
        "Anzeige",
        None,
    ),
    "logging": (
        "Logging",
        "Level: DEBUG, INFO, WARNING, ERROR.",
    ),
}


def _with_api_key(config: KursverwaltungConfig,
                  api_key: Optional[str]) -> KursverwaltungConfig:
    api = config.api.model_copy(update={"api_key": api_key})
    return config.model_copy(update={"api": api})


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "kursverwaltung.yaml"
    PROFILES_DIR = Path("profiles")

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> KursverwaltungConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic.

        Ein gesetztes KURSVERWALTUNG_API_KEY hat Vorrang vor der Datei.
        """
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py setup' aus, um die Verbindung einzurichten."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            config = KursverwaltungConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e
        return self.apply_env(config)

    def apply_env(self, config: KursverwaltungConfig) -> KursverwaltungConfig:
        """Übernimmt den API-Schlüssel aus der Umgebung, falls gesetzt."""
        api_key = os.environ.get(API_KEY_ENV)
        if not api_key:
            return config
        return _with_api_key(config, api_key)

    # ─── Speichern ───

    def save(self, config: KursverwaltungConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: KursverwaltungConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        api_map = CommentedMap(cm["api"])
        api_map.yaml_add_eol_comment("Sekunden", "timeout_seconds")
        cm["api"] = api_map

        return cm

    # ─── Profile ───

    def save_profile(self, config: KursverwaltungConfig, name: str,
                     description: str = "") -> None:
        """Speichert eine Config als benanntes Profil (z.B. 'test', 'produktiv').

        Der API-Schlüssel wird nicht ins Profil geschrieben; er bleibt in der
        aktiven Konfiguration bzw. in KURSVERWALTUNG_API_KEY.
        """
        self.PROFILES_DIR.mkdir(parents=True, exist_ok=True)
        path = self.PROFILES_DIR / f"{name}.yaml"
        if path.exists():
            if not Confirm.ask(
                f"Profil '{name}' existiert bereits. Überschreiben?", default=False
            ):
                console.print("[yellow]Abgebrochen.[/yellow]")
                return
        self.save(_with_api_key(config, None), path)
        # Beschreibung in separater Metadaten-Datei
        if description:
            meta_path = self.PROFILES_DIR / f"{name}.meta.yaml"
            with open(meta_path, "w", encoding="utf-8") as f:
                yaml.dump({"name": name, "description": description,
                           "created": date.today().isoformat()}, f)
        console.print(f"[green]✓[/green] Profil '{name}' gespeichert.")

    def list_profiles(self) -> list[dict]:
        """Listet alle gespeicherten Profile auf."""
        if not self.PROFILES_DIR.exists():
            return []
        profiles = []
        for p in sorted(self.PROFILES_DIR.glob("*.yaml")):
            if p.stem.endswith(".meta"):
                continue
            meta_path = self.PROFILES_DIR / f"{p.stem}.meta.yaml"
            description = ""
            created = ""
            if meta_path.exists():
                with open(meta_path, "r", encoding="utf-8") as f:
                    meta = yaml.load(f)
                    description = meta.get("description", "")
                    created = meta.get("created", "")
            profiles.append({
                "name": p.stem,
                "path": str(p),
                "description": description,
                "created": created,
            })
        return profiles

    def load_profile(self, name: str) -> KursverwaltungConfig:
        """Lädt ein gespeichertes Profil.

        Profile enthalten keinen API-Schlüssel: er wird aus der aktiven
        Konfiguration übernommen, sofern vorhanden.
        """
        path = self.PROFILES_DIR / f"{name}.yaml"
        if not path.exists():
            raise FileNotFoundError(
                f"Profil '{name}' nicht gefunden. "
                f"Verfügbar: {[p['name'] for p in self.list_profiles()]}"
            )
        config = self.load(path)
        if config.api.api_key is None and self.DEFAULT_CONFIG.exists():
            config = _with_api_key(config, self.load().api.api_key)
        return config
