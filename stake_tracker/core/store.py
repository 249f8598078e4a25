"""Persistent stake list for Stake Tracker."""
import os
import json
import tempfile
from pathlib import Path
from typing import List
from loguru import logger
from pydantic import ValidationError

from .stake import StakeRecord

class RecordStore:
    """Stake list kept in a single JSON file.

    The store performs no validation beyond what the record model enforces;
    admission rules live in the form layer.
    """

    def __init__(self, path: Path):
        """Initialize the store.

        Args:
            path: JSON file holding the serialized stake list
        """
        self.path = Path(path)
        self.records: List[StakeRecord] = []

    def load(self) -> List[StakeRecord]:
        """Load records from disk.

        A missing file gives an empty list. Corrupted content is logged and
        also gives an empty list so the tracker stays usable.
        """
        self.records = []
        if not self.path.exists():
            return list(self.records)
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError(f"expected a list of stakes, got {type(data).__name__}")
            self.records = [StakeRecord(**entry) for entry in data]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.error(f"Stored stakes in {self.path} are unreadable, starting empty: {e}")
            self.records = []
        return list(self.records)

    def save(self, records: List[StakeRecord]) -> None:
        """Replace the stored list with `records`.

        Writes to a temporary file next to the target and renames it over
        the old one, so readers never see a partial file.
        """
        self.records = list(records)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [record.model_dump(mode="json") for record in self.records]
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".stakes-", suffix=".json")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug(f"Saved {len(self.records)} stakes to {self.path}")

    def clear(self) -> None:
        """Erase the stored list and the in-memory copy."""
        if self.path.exists():
            self.path.unlink()
        self.records = []
        logger.info("Cleared all stakes")

    def append(self, record: StakeRecord) -> None:
        """Add a record at the end of the list and persist."""
        self.save(self.records + [record])

    def remove(self, index: int) -> StakeRecord:
        """Remove the record at `index` (0-based) and persist.

        Raises:
            IndexError: If no record exists at that position
        """
        if not 0 <= index < len(self.records):
            raise IndexError(f"No stake at position {index + 1}")
        records = list(self.records)
        removed = records.pop(index)
        self.save(records)
        return removed
