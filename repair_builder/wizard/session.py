"""
Wizard session: the manual's field values with write-through persistence.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from repair_builder.configs.config import Config
from repair_builder.monitoring.logging import with_context
from repair_builder.schemas.manual import (
    DEFAULT_FACTOR_WEIGHT,
    HEALTH_SAFETY_FACTOR,
    ManualData,
)
from repair_builder.storage.kv_store import InMemoryKeyValueStore, KeyValueStore
from repair_builder.storage.persistence import load_manual, save_manual

logger = logging.getLogger(__name__)


class ManualSession:
    """
    Holds the current ManualData and persists it after every change.

    A field update is validated against the model, stamped with
    ``last_updated`` and written to the backend before it replaces the
    in-memory copy.
    """

    def __init__(
        self,
        backend: Optional[KeyValueStore] = None,
        key: Optional[str] = None,
        data: Optional[ManualData] = None,
    ):
        self.backend = backend if backend is not None else InMemoryKeyValueStore()
        self.key = key or Config.get_storage_keys()["manual_key"]
        self._data = data or ManualData()
        self._log = with_context(logger, store_key=self.key)

    @classmethod
    def load(cls, backend: KeyValueStore, key: Optional[str] = None) -> "ManualSession":
        key = key or Config.get_storage_keys()["manual_key"]
        return cls(backend=backend, key=key, data=load_manual(backend, key))

    @property
    def data(self) -> ManualData:
        """A copy of the current field values."""
        return self._data.model_copy(deep=True)

    def update(self, field: str, value: Any) -> ManualData:
        """
        Replace one top-level field.

        Raises:
            KeyError: if ``field`` is not a manual field.
            pydantic.ValidationError: if ``value`` does not fit the field.
        """
        if field not in ManualData.model_fields or field == "last_updated":
            raise KeyError(f"Unknown manual field: {field}")

        payload = self._data.model_dump()
        payload[field] = value
        payload["last_updated"] = datetime.now(timezone.utc).isoformat()
        updated = ManualData.model_validate(payload)

        save_manual(self.backend, self.key, updated)
        self._data = updated
        self._log.debug("Updated manual field %s", field)
        return self.data

    def toggle_priority_factor(self, key: str) -> ManualData:
        """Add a target population with the default weight, or remove it."""
        factors = dict(self._data.priority_factors)
        if key in factors:
            del factors[key]
        else:
            factors[key] = DEFAULT_FACTOR_WEIGHT
        return self.update("priority_factors", factors)

    def set_priority_weight(self, key: str, weight: int) -> ManualData:
        """Set a factor weight on the 1-5 scale."""
        if not 1 <= int(weight) <= 5:
            raise ValueError(f"Weight must be between 1 and 5, got {weight}")
        factors = dict(self._data.priority_factors)
        factors[key] = int(weight)
        return self.update("priority_factors", factors)

    @property
    def health_safety_weight(self) -> int:
        return self._data.priority_factors.get(HEALTH_SAFETY_FACTOR, 5)
