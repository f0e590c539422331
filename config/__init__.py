"""Konfiguration: Schema, Defaults, YAML-Manager und Setup-Wizard."""
