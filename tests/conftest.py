"""
Shared pytest fixtures for the repair policy builder test suite.

Provides a small in-memory taxonomy and selection stores backed by
in-memory key-value stores.
"""

import copy
import logging
from typing import Optional

import pytest

from repair_builder.catalog.loader import taxonomy_from_dict
from repair_builder.catalog.selection_store import SelectionStore
from repair_builder.monitoring.logging import ROOT_LOGGER_NAME
from repair_builder.schemas.taxonomy import Taxonomy
from repair_builder.storage.kv_store import InMemoryKeyValueStore

SMALL_TAXONOMY = {
    "name": "Test Taxonomy",
    "version": "0.1",
    "pillars": [
        {
            "id": "1",
            "name": "Dwelling Safety",
            "description": "Repairs that remove threats to occupant safety.",
            "sub_categories": [
                {
                    "id": "1.1",
                    "name": "Structural Components",
                    "description": "Load-bearing elements of the home.",
                    "types": [
                        {
                            "id": "1.1.1",
                            "name": "Foundation",
                            "description": "Footings, slabs and basement walls.",
                            "activities": [
                                {
                                    "id": "1.1.1.1",
                                    "name": "Repair cracked foundations",
                                    "default_urgency": "Critical",
                                    "default_condition": "Active",
                                },
                                {
                                    "id": "1.1.1.2",
                                    "name": "Waterproof basement walls",
                                    "default_urgency": "Emergent",
                                    "default_condition": "Passive",
                                },
                            ],
                        },
                        {
                            "id": "1.1.2",
                            "name": "Roof",
                            "description": "Roof covering and drainage.",
                            "activities": [
                                {
                                    "id": "1.1.2.1",
                                    "name": "Replace leaking roof",
                                    "default_urgency": "Critical",
                                    "default_condition": "Passive",
                                },
                            ],
                        },
                    ],
                },
                {
                    "id": "1.2",
                    "name": "Electrical Systems",
                    "description": "Wiring, panels and service entrance.",
                    "types": [
                        {
                            "id": "1.2.1",
                            "name": "Electrical Service",
                            "description": "Panels and branch circuits.",
                            "activities": [
                                {
                                    "id": "1.2.1.1",
                                    "name": "Replace knob-and-tube wiring",
                                    "default_urgency": "Emergent",
                                    "default_condition": "Active",
                                },
                            ],
                        },
                    ],
                },
            ],
        },
        {
            "id": "2",
            "name": "Community Building",
            "description": "Activities that strengthen neighborhood ties.",
            "sub_categories": [
                {
                    "id": "2.1",
                    "name": "Neighborhood Engagement",
                    "description": "Volunteer and resident events.",
                    "types": [
                        {
                            "id": "2.1.1",
                            "name": "Events",
                            "activities": [
                                {"id": "2.1.1.1", "name": "Host block cleanup day"},
                            ],
                        },
                        {
                            "id": "2.1.2",
                            "name": "Planned Programs",
                            "description": "Not yet populated.",
                            "activities": [],
                        },
                    ],
                },
            ],
        },
    ],
}


class FailingKeyValueStore(InMemoryKeyValueStore):
    """Backend whose writes always fail (full disk, revoked quota, ...)."""

    def set(self, key: str, value: str) -> None:
        raise OSError("storage unavailable")


@pytest.fixture
def taxonomy_data() -> dict:
    """Raw mapping for the small test taxonomy (deep copy, safe to mutate)."""
    return copy.deepcopy(SMALL_TAXONOMY)


@pytest.fixture
def small_taxonomy(taxonomy_data) -> Taxonomy:
    return taxonomy_from_dict(taxonomy_data)


@pytest.fixture
def create_taxonomy():
    """
    Return a function that builds a one-activity taxonomy.

    Example:
        taxonomy = create_taxonomy(activity_name="Patch roof", urgency="Emergent")
    """

    def _create_taxonomy(
        activity_id: str = "1.1.1.1",
        activity_name: str = "Repair cracked foundations",
        urgency: str = "Critical",
        condition: str = "Active",
        type_description: Optional[str] = "Footings, slabs and basement walls.",
    ) -> Taxonomy:
        return taxonomy_from_dict(
            {
                "name": "Single Activity",
                "pillars": [
                    {
                        "id": "1",
                        "name": "Dwelling Safety",
                        "description": "Repairs that remove threats to occupant safety.",
                        "sub_categories": [
                            {
                                "id": "1.1",
                                "name": "Structural Components",
                                "description": "Load-bearing elements of the home.",
                                "types": [
                                    {
                                        "id": "1.1.1",
                                        "name": "Foundation",
                                        "description": type_description,
                                        "activities": [
                                            {
                                                "id": activity_id,
                                                "name": activity_name,
                                                "default_urgency": urgency,
                                                "default_condition": condition,
                                            }
                                        ],
                                    }
                                ],
                            }
                        ],
                    }
                ],
            }
        )

    return _create_taxonomy


@pytest.fixture
def memory_backend() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_backend() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest.fixture
def selection_store(memory_backend) -> SelectionStore:
    """Empty selection store writing through to ``memory_backend``."""
    return SelectionStore(backend=memory_backend)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo any setup_logger() call so caplog sees package records."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    if hasattr(logger, "_repair_builder_options"):
        del logger._repair_builder_options
