"""Helpers for RPKI/RTR client tools: CLI parsing, update formatting, ROA export and ROV queries."""

__version__ = "0.8.0"

__all__ = ["cli", "exporter", "formatting", "rov", "templates"]