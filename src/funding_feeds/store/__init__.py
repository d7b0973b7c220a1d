"""Snapshot store implementations."""

from .base import SnapshotStore
from .json_store import JsonSnapshotStore

__all__ = ["SnapshotStore", "JsonSnapshotStore"]
