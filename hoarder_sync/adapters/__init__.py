"""Adapters for the external services: Hoarder (source) and Tana (target)."""
