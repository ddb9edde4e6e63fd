"""
Flat-file JSON collection store.

Each collection is one JSON document holding a list of records. Reads load the
whole document; writes replace it. A missing or corrupt document reads as an
empty collection.
"""
import json
import logging
import os
import tempfile
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class JsonCollectionStore:
    """A list of dict records persisted as a single JSON document."""

    def __init__(self, path: str, name: str, record_model: Optional[type[BaseModel]] = None):
        self.path = path
        self.name = name
        # Records that don't match this model are skipped on load
        self.record_model = record_model
        # Highest id handed out so far, so deleted ids are never reassigned
        self._last_id = 0

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> list[dict[str, Any]]:
        """Return the stored records, or [] if the file is missing or unreadable."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.name} from {self.path}, treating as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"{self.name} file {self.path} does not hold a list, treating as empty")
            return []

        items = [item for item in data if self._is_valid(item)]
        self._track_ids(items)
        return items

    def _is_valid(self, item: Any) -> bool:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object entry in {self.name} file {self.path}")
            return False
        if self.record_model is None:
            return True
        try:
            self.record_model.model_validate(item, strict=True)
        except ValidationError as e:
            logger.warning(f"Skipping invalid {self.name} record {item.get('id')!r}: {e.error_count()} error(s)")
            return False
        return True

    def save(self, items: list[dict[str, Any]]) -> None:
        """Write the whole collection, replacing the previous document."""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.name}-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug(f"Saved {len(items)} {self.name} to {self.path}")

    def next_id(self, items: list[dict[str, Any]]) -> int:
        """Reserve and return the id for a new record."""
        self._track_ids(items)
        self._last_id += 1
        return self._last_id

    def _track_ids(self, items: list[dict[str, Any]]) -> None:
        for item in items:
            item_id = item.get("id")
            if isinstance(item_id, int) and not isinstance(item_id, bool) and item_id > self._last_id:
                self._last_id = item_id
