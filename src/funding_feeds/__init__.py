"""Ingest EU funding calls and events into JSON snapshots."""

__version__ = "0.1.0"
