"""Scaforge core - plugin catalog, dependency resolver and integration rules."""

__version__ = "0.1.0"
