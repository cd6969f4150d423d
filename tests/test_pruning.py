"""Tests for unusable-row pruning."""

from src.nulls import normalize_nulls
from src.pruning import find_unusable_rows, prune_unusable_rows
from src.record_store import RecordStore


class TestPruneUnusableRows:
    def test_rows_without_metrics_are_removed(self, make_row) -> None:
        store = RecordStore.from_rows(
            [
                make_row(company="Gone", total_laid_off=None, percentage_laid_off=None),
                make_row(company="Pct", total_laid_off=None, percentage_laid_off="10%"),
                make_row(company="Total", total_laid_off="12", percentage_laid_off=None),
            ]
        )
        assert prune_unusable_rows(store) == 1
        assert [r.company for r in store.records()] == ["Pct", "Total"]

    def test_placeholder_text_needs_normalization_first(self, make_row) -> None:
        store = RecordStore.from_rows(
            [make_row(total_laid_off=None, percentage_laid_off="NULL")]
        )
        assert prune_unusable_rows(store) == 0
        normalize_nulls(store)
        assert prune_unusable_rows(store) == 1
        assert len(store) == 0

    def test_unparseable_total_counts_as_absent(self, make_row) -> None:
        store = RecordStore.from_rows(
            [make_row(total_laid_off="unknown", percentage_laid_off=None)]
        )
        assert len(find_unusable_rows(store)) == 1
        assert prune_unusable_rows(store) == 1
