"""
Versioned JSON serialization for the two persisted documents.

Envelopes:
    {"version": 1, "selections": {"<activity_id>": {...}, ...}}
    {"version": 1, "manual": {...}}

Loading never fails: absent keys and corrupt JSON fall back to empty/default
state, invalid selection records are dropped and invalid manual fields revert
to their defaults, each with a warning in the log.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from repair_builder.monitoring.logging import with_context
from repair_builder.schemas.manual import ManualData
from repair_builder.schemas.selection import Selection
from repair_builder.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _dumps(obj: Any) -> str:
    # sorted keys keep repeated writes of the same content byte-identical
    return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def _loads(raw: Optional[str], key: str) -> Optional[Any]:
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        with_context(logger, store_key=key).warning("Discarding corrupt persisted value: %s", e)
        return None


# ---------------------------------------------------------------------------
# SELECTIONS
# ---------------------------------------------------------------------------


def serialize_selections(
    selections: Mapping[str, Selection], version: int = SCHEMA_VERSION
) -> str:
    """Serialize a selection map into its versioned JSON envelope."""
    return _dumps(
        {
            "version": version,
            "selections": {
                activity_id: selection.model_dump(mode="json", exclude_none=True)
                for activity_id, selection in selections.items()
            },
        }
    )


def deserialize_selections(raw: Optional[str], key: str = "selections") -> Dict[str, Selection]:
    """
    Parse a persisted selection map.

    Accepts the versioned envelope as well as a bare ``{id: record}`` map
    written by older drafts. Records that fail validation are dropped.
    """
    log = with_context(logger, store_key=key)
    data = _loads(raw, key)
    if data is None:
        return {}
    if not isinstance(data, dict):
        log.warning("Persisted selections are not an object; ignoring")
        return {}

    if "selections" in data and isinstance(data.get("selections"), dict):
        version = data.get("version")
        if version is not None and version != SCHEMA_VERSION:
            log.info("Loading selections written with schema version %s", version)
        records = data["selections"]
    else:
        records = data

    out: Dict[str, Selection] = {}
    for activity_id, record in records.items():
        if not isinstance(record, dict):
            log.warning("Skipping malformed selection", extra={"activity_id": activity_id})
            continue
        try:
            out[str(activity_id)] = Selection.model_validate(record)
        except ValidationError as e:
            log.warning(
                "Skipping invalid selection: %s",
                e.errors()[0].get("msg") if e.errors() else e,
                extra={"activity_id": activity_id},
            )
    return out


def load_selections(store: KeyValueStore, key: str) -> Dict[str, Selection]:
    """Read the selection map from ``store`` (empty if absent or corrupt)."""
    return deserialize_selections(store.get(key), key=key)


def save_selections(store: KeyValueStore, key: str, selections: Mapping[str, Selection]) -> None:
    """Write the whole selection map to ``store``."""
    store.set(key, serialize_selections(selections))


# ---------------------------------------------------------------------------
# WIZARD MANUAL
# ---------------------------------------------------------------------------


def serialize_manual(manual: ManualData, version: int = SCHEMA_VERSION) -> str:
    """Serialize wizard field values into their versioned JSON envelope."""
    return _dumps({"version": version, "manual": manual.model_dump(mode="json")})


def deserialize_manual(raw: Optional[str], key: str = "manual") -> ManualData:
    """
    Parse persisted wizard field values.

    Missing fields take their defaults. A top-level field that fails
    validation is dropped and defaulted on its own; the rest of the draft
    is kept.
    """
    log = with_context(logger, store_key=key)
    data = _loads(raw, key)
    if data is None:
        return ManualData()
    if isinstance(data, dict) and isinstance(data.get("manual"), dict):
        data = data["manual"]
    if not isinstance(data, dict):
        log.warning("Persisted manual is not an object; using defaults")
        return ManualData()

    try:
        return ManualData.model_validate(data)
    except ValidationError as e:
        invalid = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})

    log.warning("Resetting invalid manual fields to defaults: %s", ", ".join(invalid))
    kept = {k: v for k, v in data.items() if k not in invalid}
    try:
        return ManualData.model_validate(kept)
    except ValidationError as e:
        log.warning("Persisted manual still invalid (%d errors); using defaults", e.error_count())
        return ManualData()


def load_manual(store: KeyValueStore, key: str) -> ManualData:
    return deserialize_manual(store.get(key), key=key)


def save_manual(store: KeyValueStore, key: str, manual: ManualData) -> None:
    store.set(key, serialize_manual(manual))
