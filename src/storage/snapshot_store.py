# src/storage/snapshot_store.py

"""Persists the last known snapshot as a JSON file."""

import json
import logging
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.snapshot import Snapshot, SnapshotFormatError

logger = logging.getLogger("gold_watch.storage")


class SnapshotStore:
    """Reads and writes ``data/last-price.json``."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.LAST_SNAPSHOT_PATH
        logger.debug("SnapshotStore initialised, path=%s", self.path)

    def load_raw(self) -> dict[str, Any] | None:
        """Return the stored snapshot as a dict, or None if absent.

        Validation is left to the comparison step so that a corrupt
        file is reported as such rather than as a first run.

        Raises:
            SnapshotFormatError: the file exists but is not a JSON object.
        """
        if not self.path.exists():
            logger.info("No previous snapshot at %s", self.path)
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise SnapshotFormatError(
                f"Cannot read {self.path}: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise SnapshotFormatError(
                f"{self.path} does not hold a JSON object"
            )
        return data

    def load(self) -> Snapshot | None:
        """Return the stored snapshot parsed, or None if absent."""
        raw = self.load_raw()
        if raw is None:
            return None
        return Snapshot.from_dict(raw)

    def save(self, snapshot: Snapshot) -> Path:
        """Write *snapshot* as indented UTF-8 JSON."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2)
        logger.info(
            "Saved snapshot with %d records to %s",
            len(snapshot.records),
            self.path,
        )
        return self.path
