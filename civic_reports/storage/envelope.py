#!/usr/bin/env python3
"""
Envelope persistence shared by the record stores.

A collection is persisted under one medium key as
``{<collection>: [...], "lastUpdated": <ISO-8601>, "version": "1.0"}``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from jsonschema import validate, ValidationError

from .medium import KeyValueStorage, StorageError
from .results import ErrorKind, StoreResult

logger = logging.getLogger(__name__)

ENVELOPE_VERSION = "1.0"

def envelope_schema(collection_name: str) -> Dict[str, Any]:
    """JSON schema of a persisted envelope."""
    return {
        "type": "object",
        "properties": {
            collection_name: {
                "type": "array",
                "items": {"type": "object"}
            },
            "lastUpdated": {"type": "string"},
            "version": {"type": "string"}
        },
        "required": [collection_name]
    }

def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')

class EnvelopeStore:
    """Reads and writes one enveloped collection in a storage medium."""

    def __init__(self, medium: KeyValueStorage, storage_key: str, collection_name: str):
        self.medium = medium
        self.storage_key = storage_key
        self.collection_name = collection_name
        self._schema = envelope_schema(collection_name)

    def read_collection(self) -> List[Dict[str, Any]]:
        """Read the collection, raising on medium or decode failure."""
        stored_data = self.medium.get_item(self.storage_key)
        if stored_data is None:
            logger.debug(f"No stored {self.collection_name} found under '{self.storage_key}'")
            return []

        try:
            envelope = json.loads(stored_data)
            validate(instance=envelope, schema=self._schema)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON under '{self.storage_key}': {e}") from e
        except ValidationError as e:
            raise ValueError(f"Malformed envelope under '{self.storage_key}': {e.message}") from e

        logger.debug(
            f"Loaded {len(envelope[self.collection_name])} {self.collection_name} "
            f"(last updated {envelope.get('lastUpdated')})"
        )
        return envelope[self.collection_name]

    def load_collection(self) -> List[Dict[str, Any]]:
        """Read the collection; missing or unreadable data yields an empty list."""
        try:
            return self.read_collection()
        except (StorageError, ValueError) as e:
            logger.error(f"Error loading {self.collection_name} from local storage: {e}")
            return []

    def save_collection(self, items: List[Dict[str, Any]]) -> StoreResult:
        """Persist the whole collection with envelope metadata."""
        envelope = {
            self.collection_name: items,
            "lastUpdated": utc_now_iso(),
            "version": ENVELOPE_VERSION
        }
        try:
            self.medium.set_item(self.storage_key, json.dumps(envelope, ensure_ascii=False))
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"Error saving {self.collection_name} to local storage: {e}")
            return StoreResult.failure(ErrorKind.STORAGE_FAILURE, str(e))

        logger.info(f"Saved {len(items)} {self.collection_name} to local storage")
        return StoreResult.success()

    def clear(self) -> StoreResult:
        """Remove the persisted key entirely."""
        try:
            self.medium.remove_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Error clearing {self.collection_name}: {e}")
            return StoreResult.failure(ErrorKind.STORAGE_FAILURE, str(e))

        logger.info(f"Cleared all {self.collection_name} from local storage")
        return StoreResult.success()

    def update_item(self, item_id: Any, updated_data: Dict[str, Any]) -> StoreResult:
        """Shallow-merge ``updated_data`` over the item with ``item_id``.

        Nested values in ``updated_data`` replace the stored ones wholesale.
        """
        items = self.load_collection()
        index = next((i for i, item in enumerate(items) if item.get('id') == item_id), None)
        if index is None:
            logger.error(f"{self.collection_name} item not found: {item_id}")
            return StoreResult.failure(ErrorKind.NOT_FOUND, f"No item with id {item_id!r}")

        items[index] = {**items[index], **updated_data}
        result = self.save_collection(items)
        if result:
            logger.info(f"Updated {self.collection_name} item {item_id}")
            return StoreResult.success(items[index])
        return result

    def delete_item(self, item_id: Any) -> StoreResult:
        """Remove the item with ``item_id``; nothing is written when it is absent."""
        items = self.load_collection()
        filtered = [item for item in items if item.get('id') != item_id]
        if len(filtered) == len(items):
            logger.error(f"{self.collection_name} item not found for deletion: {item_id}")
            return StoreResult.failure(ErrorKind.NOT_FOUND, f"No item with id {item_id!r}")

        result = self.save_collection(filtered)
        if result:
            logger.info(f"Deleted {self.collection_name} item {item_id}")
        return result

    def find_item(self, item_id: Any) -> Optional[Dict[str, Any]]:
        """Linear scan for the item with ``item_id``."""
        return next((item for item in self.load_collection() if item.get('id') == item_id), None)
