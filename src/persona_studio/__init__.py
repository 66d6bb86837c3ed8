"""Persona Studio - persona-driven content generation and scheduled publishing."""

__version__ = "0.1.0"
