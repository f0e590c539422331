"""Datensatz-Speicher im Arbeitsspeicher und Demo-Daten."""
