"""Auswertungen über geladene Sammlungen."""
