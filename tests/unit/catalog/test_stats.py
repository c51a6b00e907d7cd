"""
Unit tests for the aggregation/stats engine.
"""

from repair_builder.catalog.filters import CatalogQuery, filter_taxonomy
from repair_builder.catalog.stats import (
    LevelCount,
    compute_catalog_stats,
    compute_level_counts,
    compute_status_counts,
)
from repair_builder.schemas.selection import Selection


class TestStatusCounts:
    """Tests for compute_status_counts."""

    def test_all_unselected_initially(self, small_taxonomy, selection_store):
        counts = compute_status_counts(small_taxonomy, selection_store)
        assert counts.total == 5
        assert counts.unselected == 5
        assert counts.decided == 0

    def test_counts_each_status(self, small_taxonomy, selection_store):
        selection_store.toggle_status("1.1.1.1", "eligible")
        selection_store.toggle_status("1.1.1.2", "eligible")
        selection_store.toggle_status("1.1.2.1", "conditional")
        selection_store.toggle_status("1.2.1.1", "not_eligible")
        selection_store.toggle_status("2.1.1.1", "na")
        counts = compute_status_counts(small_taxonomy, selection_store)
        assert counts.eligible == 2
        assert counts.conditional == 1
        assert counts.not_eligible == 1
        assert counts.na == 1
        assert counts.unselected == 0

    def test_conservation(self, small_taxonomy, selection_store):
        """The five buckets always sum to the activity total."""
        selection_store.toggle_status("1.1.1.1", "eligible")
        selection_store.toggle_status("1.1.2.1", "conditional")
        selection_store.toggle_status("1.1.2.1", "conditional")
        selection_store.set_notes("1.2.1.1", "needs electrician")
        counts = compute_status_counts(small_taxonomy, selection_store)
        assert (
            counts.eligible + counts.not_eligible + counts.conditional + counts.na + counts.unselected
            == counts.total
        )
        assert counts.unselected == 4

    def test_stale_selections_ignored(self, small_taxonomy):
        """Records for ids not in the taxonomy never count."""
        selections = {
            "9.9.9.9": Selection(status="eligible"),
            "1.1.1.1": Selection(status="eligible"),
        }
        counts = compute_status_counts(small_taxonomy, selections)
        assert counts.eligible == 1
        assert counts.total == 5
        assert counts.unselected == 4


class TestLevelCounts:
    """Tests for per-level visible/total counts."""

    def test_unfiltered(self, small_taxonomy):
        levels = compute_level_counts(small_taxonomy)
        assert levels.pillar == LevelCount(visible=2, total=2)
        assert levels.sub_category == LevelCount(visible=3, total=3)
        assert levels.type == LevelCount(visible=5, total=5)
        assert levels.activity == LevelCount(visible=5, total=5)

    def test_filtered(self, small_taxonomy):
        filtered = filter_taxonomy(small_taxonomy, CatalogQuery(type_id="1.1.2"))
        levels = compute_level_counts(small_taxonomy, filtered)
        assert str(levels.pillar) == "1 of 2"
        assert str(levels.sub_category) == "1 of 3"
        assert str(levels.type) == "1 of 5"
        assert str(levels.activity) == "1 of 5"

    def test_nothing_visible(self, small_taxonomy):
        filtered = filter_taxonomy(small_taxonomy, CatalogQuery(text="no such thing"))
        levels = compute_level_counts(small_taxonomy, filtered)
        assert levels.activity == LevelCount(visible=0, total=5)
        assert levels.pillar.visible == 0


class TestCatalogStats:
    """Tests for urgency and priority distributions."""

    def test_defaults(self, small_taxonomy, selection_store):
        stats = compute_catalog_stats(small_taxonomy, selection_store)
        assert stats.by_urgency == {"Critical": 2, "Emergent": 2, "Non-Critical": 0, "N/A": 1}
        assert stats.by_priority == {
            "Priority 1": 1,
            "Priority 2": 2,
            "Priority 3": 1,
            "none": 1,
        }
        assert stats.status.unselected == 5

    def test_overrides_are_counted(self, small_taxonomy, selection_store):
        """Distributions use the effective, override-resolved values."""
        selection_store.set_urgency_override("1.1.1.1", "Non-Critical")
        stats = compute_catalog_stats(small_taxonomy, selection_store)
        assert stats.by_urgency["Critical"] == 1
        assert stats.by_urgency["Non-Critical"] == 1
        assert stats.by_priority["Priority 4"] == 1
        assert "Priority 1" not in stats.by_priority

    def test_recomputed_each_call(self, small_taxonomy, selection_store):
        before = compute_catalog_stats(small_taxonomy, selection_store)
        selection_store.toggle_status("1.1.1.1", "eligible")
        after = compute_catalog_stats(small_taxonomy, selection_store)
        assert before.status.eligible == 0
        assert after.status.eligible == 1
