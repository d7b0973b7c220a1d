from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence


class SnapshotStore(ABC):
    @abstractmethod
    def write(self, records: Sequence[dict[str, Any]], metadata: dict[str, Any]) -> None:
        """Replace the persisted snapshot with ``records`` and ``metadata``."""
