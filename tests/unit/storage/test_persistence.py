"""
Unit tests for versioned JSON persistence.

Tests for envelopes, idempotence and recovery from corrupt state.
"""

import json
import logging

from repair_builder.schemas.manual import ManualData
from repair_builder.schemas.selection import Selection, SelectionStatus
from repair_builder.schemas.taxonomy import Urgency
from repair_builder.storage.kv_store import InMemoryKeyValueStore
from repair_builder.storage.persistence import (
    deserialize_manual,
    deserialize_selections,
    load_manual,
    load_selections,
    save_manual,
    save_selections,
    serialize_manual,
    serialize_selections,
)

KEY = "catalog_selections_v1"


def _sample_selections():
    return {
        "1.1.1.1": Selection(status="eligible", notes="done in phase 1"),
        "1.1.2.1": Selection(urgency="Emergent", condition="Inactive"),
        "2.1.1.1": Selection(),
    }


class TestSelectionsPersistence:
    """Tests for the selection map envelope."""

    def test_round_trip(self):
        store = InMemoryKeyValueStore()
        selections = _sample_selections()
        save_selections(store, KEY, selections)
        assert load_selections(store, KEY) == selections

    def test_envelope_shape(self):
        payload = json.loads(serialize_selections(_sample_selections()))
        assert payload["version"] == 1
        assert payload["selections"]["1.1.1.1"] == {
            "status": "eligible",
            "notes": "done in phase 1",
        }
        # absent attributes are omitted, not written as null
        assert payload["selections"]["2.1.1.1"] == {}

    def test_idempotent_writes(self):
        """Writing the same content twice yields identical stored text."""
        store = InMemoryKeyValueStore()
        save_selections(store, KEY, _sample_selections())
        first = store.get(KEY)
        save_selections(store, KEY, load_selections(store, KEY))
        assert store.get(KEY) == first

    def test_serialization_is_order_independent(self):
        selections = _sample_selections()
        reversed_selections = dict(reversed(list(selections.items())))
        assert serialize_selections(selections) == serialize_selections(reversed_selections)

    def test_absent_key_is_empty(self):
        assert load_selections(InMemoryKeyValueStore(), KEY) == {}

    def test_corrupt_json_recovers(self, caplog):
        """Corrupt content is discarded with a warning and never raises."""
        with caplog.at_level(logging.WARNING):
            result = deserialize_selections("{not json", key=KEY)
        assert result == {}
        assert "corrupt" in caplog.text.lower()

    def test_non_object_recovers(self):
        assert deserialize_selections("[1, 2, 3]") == {}

    def test_legacy_bare_map(self):
        """Un-enveloped maps from older drafts still load."""
        raw = json.dumps({"1.1.1.1": {"status": "not_eligible", "urgency": "Critical"}})
        result = deserialize_selections(raw)
        assert result["1.1.1.1"].status == SelectionStatus.NOT_ELIGIBLE
        assert result["1.1.1.1"].urgency == Urgency.CRITICAL

    def test_invalid_records_skipped(self, caplog):
        raw = json.dumps(
            {
                "version": 1,
                "selections": {
                    "1.1.1.1": {"status": "eligible"},
                    "1.1.1.2": {"status": "bogus"},
                    "1.1.1.3": "not a record",
                },
            }
        )
        with caplog.at_level(logging.WARNING):
            result = deserialize_selections(raw)
        assert list(result) == ["1.1.1.1"]

    def test_extra_fields_ignored(self):
        raw = json.dumps({"version": 1, "selections": {"1.1.1.1": {"status": "na", "color": "red"}}})
        assert deserialize_selections(raw)["1.1.1.1"] == Selection(status="na")


class TestManualPersistence:
    """Tests for the wizard manual envelope."""

    def test_round_trip(self):
        store = InMemoryKeyValueStore()
        manual = ManualData(org_name="Habitat Example", financial_cap=20000)
        save_manual(store, "repair_manual_data_v1", manual)
        assert load_manual(store, "repair_manual_data_v1") == manual

    def test_envelope_shape(self):
        payload = json.loads(serialize_manual(ManualData(org_name="Org")))
        assert payload["version"] == 1
        assert payload["manual"]["org_name"] == "Org"

    def test_absent_key_defaults(self):
        manual = load_manual(InMemoryKeyValueStore(), "repair_manual_data_v1")
        assert manual.org_name == ""
        assert manual.priority_factors["healthSafety"] == 5

    def test_partial_manual_fills_defaults(self):
        manual = deserialize_manual(json.dumps({"org_name": "Partial", "unknown_field": 1}))
        assert manual.org_name == "Partial"
        assert manual.model == "blended"
        assert len(manual.client_services.stages) == 6

    def test_corrupt_manual_defaults(self, caplog):
        with caplog.at_level(logging.WARNING):
            manual = deserialize_manual("}}}")
        assert manual == ManualData(last_updated=manual.last_updated)
        assert caplog.records

    def test_invalid_manual_defaults(self):
        manual = deserialize_manual(json.dumps({"manual": {"staff": "not a list"}}))
        assert manual.org_name == ""
        assert len(manual.staff) == 3

    def test_invalid_field_keeps_rest_of_draft(self, caplog):
        """Only the invalid field reverts; other entered values survive."""
        raw = json.dumps({"version": 1, "manual": {"org_name": "Habitat X", "financial_cap": None}})
        with caplog.at_level(logging.WARNING):
            manual = deserialize_manual(raw, key="repair_manual_data_v1")
        assert manual.org_name == "Habitat X"
        assert manual.financial_cap == 15000
        record = caplog.records[-1]
        assert "financial_cap" in record.getMessage()
        assert record.store_key == "repair_manual_data_v1"

    def test_several_invalid_fields(self):
        raw = json.dumps(
            {"manual": {"org_name": "Habitat X", "staff": "not a list", "financial_cap": None}}
        )
        manual = deserialize_manual(raw)
        assert manual.org_name == "Habitat X"
        assert len(manual.staff) == 3
        assert manual.financial_cap == 15000
