"""
Selection Store: the only mutable domain state of the catalog builder.

Maps activity id -> Selection. Records are created lazily on first
interaction and never removed; clearing a status leaves the record in place.
Every mutation is written through to the key-value store before it becomes
visible in memory, so a failed write leaves the store exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Mapping, Optional, Union

from repair_builder.configs.config import Config
from repair_builder.monitoring.logging import with_context
from repair_builder.schemas.selection import Selection, SelectionStatus
from repair_builder.schemas.taxonomy import Condition, Urgency
from repair_builder.storage.kv_store import InMemoryKeyValueStore, KeyValueStore
from repair_builder.storage.persistence import load_selections, save_selections

logger = logging.getLogger(__name__)


class SelectionStore(Mapping[str, Selection]):
    """
    Write-through selection map.

    Activity ids are not checked against any taxonomy: a stale id is stored
    and simply never matches a current activity.
    """

    def __init__(
        self,
        backend: Optional[KeyValueStore] = None,
        key: Optional[str] = None,
        selections: Optional[Mapping[str, Selection]] = None,
    ):
        self.backend = backend if backend is not None else InMemoryKeyValueStore()
        self.key = key or Config.get_storage_keys()["selections_key"]
        self._selections: Dict[str, Selection] = dict(selections or {})
        self._log = with_context(logger, store_key=self.key)

    @classmethod
    def load(cls, backend: KeyValueStore, key: Optional[str] = None) -> "SelectionStore":
        """Load the persisted map (empty if absent or corrupt)."""
        key = key or Config.get_storage_keys()["selections_key"]
        selections = load_selections(backend, key)
        with_context(logger, store_key=key).debug("Loaded %d selections", len(selections))
        return cls(backend=backend, key=key, selections=selections)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, activity_id: str) -> Selection:
        return self._selections[activity_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._selections)

    def __len__(self) -> int:
        return len(self._selections)

    def get(self, activity_id: str, default: Optional[Selection] = None) -> Optional[Selection]:
        return self._selections.get(activity_id, default)

    def as_dict(self) -> Dict[str, Selection]:
        """Return a deep copy of the current map."""
        return {k: v.model_copy() for k, v in self._selections.items()}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _commit(self, activity_id: str, **changes) -> Selection:
        current = self._selections.get(activity_id) or Selection()
        updated = current.model_copy(update=changes)
        # re-validate so enum coercion applies to plain strings
        updated = Selection.model_validate(updated.model_dump())

        pending = dict(self._selections)
        pending[activity_id] = updated
        save_selections(self.backend, self.key, pending)

        self._selections = pending
        self._log.debug("Updated selection: %s", changes, extra={"activity_id": activity_id})
        return updated

    def toggle_status(
        self, activity_id: str, status: Union[SelectionStatus, str]
    ) -> Selection:
        """
        Set ``status`` on the activity, or clear it if it is already set.

        Clicking an already active status returns the activity to unselected.
        """
        status = SelectionStatus(status)
        current = self._selections.get(activity_id)
        if current is not None and current.status == status:
            return self._commit(activity_id, status=None)
        return self._commit(activity_id, status=status)

    def set_status(
        self, activity_id: str, status: Optional[Union[SelectionStatus, str]]
    ) -> Selection:
        """Set (or with None, clear) the status without toggle semantics."""
        value = SelectionStatus(status) if status is not None else None
        return self._commit(activity_id, status=value)

    def set_urgency_override(
        self, activity_id: str, urgency: Optional[Union[Urgency, str]]
    ) -> Selection:
        """Override the default urgency; None restores the default."""
        value = Urgency(urgency) if urgency is not None else None
        return self._commit(activity_id, urgency=value)

    def set_condition_override(
        self, activity_id: str, condition: Optional[Union[Condition, str]]
    ) -> Selection:
        """Override the default condition; None restores the default."""
        value = Condition(condition) if condition is not None else None
        return self._commit(activity_id, condition=value)

    def set_notes(self, activity_id: str, notes: Optional[str]) -> Selection:
        """Attach free-text notes; empty text clears them."""
        return self._commit(activity_id, notes=notes or None)

    def clear_overrides(self, activity_id: str) -> Selection:
        return self._commit(activity_id, urgency=None, condition=None)
