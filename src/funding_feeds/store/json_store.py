from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Sequence

from .base import SnapshotStore

logger = logging.getLogger(__name__)


class JsonSnapshotStore(SnapshotStore):
    """Two JSON files: the record array and its metadata record.

    Both files are staged before either is replaced, so a failed write
    leaves the previous pair untouched.
    """

    def __init__(self, records_path: str | Path, metadata_path: str | Path) -> None:
        self.records_path = Path(records_path)
        self.metadata_path = Path(metadata_path)

    def write(self, records: Sequence[dict[str, Any]], metadata: dict[str, Any]) -> None:
        staged: list[tuple[Path, Path]] = []
        try:
            staged.append((_stage_json(self.records_path, list(records)), self.records_path))
            staged.append((_stage_json(self.metadata_path, metadata), self.metadata_path))
            for temp_path, target in staged:
                os.replace(temp_path, target)
        except BaseException:
            for temp_path, _ in staged:
                temp_path.unlink(missing_ok=True)
            raise
        logger.info("Wrote %d records to %s", len(records), self.records_path)


def _stage_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
            handle.write("\n")
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    return temp_path
