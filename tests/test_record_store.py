"""Tests for the in-memory record store."""

import datetime

import pandas as pd
import pytest

from src.record_store import LayoffRecord, RecordStore
from src.utils.schema_utils import BUSINESS_FIELDS, COMPANY, INDUSTRY, ROW_NUM


@pytest.fixture
def store(make_row) -> RecordStore:
    return RecordStore.from_rows(
        [
            make_row(company="Acme", total_laid_off="100"),
            make_row(company="Globex", industry="NULL", total_laid_off=None),
            make_row(company="Initech", industry=None, total_laid_off="abc"),
        ]
    )


class TestLoad:
    def test_preserves_order_and_count(self, store: RecordStore) -> None:
        assert len(store) == 3
        assert [r.company for r in store.records()] == ["Acme", "Globex", "Initech"]

    def test_schema_typing(self, store: RecordStore) -> None:
        df = store.frame
        assert list(df.columns) == list(BUSINESS_FIELDS)
        assert df[COMPANY].dtype == "string"
        assert df["total_laid_off"].dtype == "Int64"
        assert df["funds_raised_millions"].dtype == "Int64"

    def test_numeric_try_conversion(self, store: RecordStore) -> None:
        totals = [r.total_laid_off for r in store.records()]
        assert totals == [100, None, None]

    def test_literal_null_text_is_kept_for_normalizer(self, store: RecordStore) -> None:
        assert store.records()[1].industry == "NULL"

    def test_missing_and_extra_columns(self) -> None:
        store = RecordStore.from_rows([{"company": "Acme", "unexpected": 1}])
        record = store.records()[0]
        assert record.company == "Acme"
        assert record.country is None
        assert "unexpected" not in store.fields

    def test_load_from_dataframe_appends(self, store: RecordStore, make_row) -> None:
        added = store.load(pd.DataFrame([make_row(company="Hooli")]))
        assert added == 1
        assert [r.company for r in store.records()][-1] == "Hooli"
        assert store.frame["total_laid_off"].dtype == "Int64"

    def test_empty_load(self) -> None:
        store = RecordStore.from_rows([])
        assert len(store) == 0
        assert store.to_rows() == []


class TestSelectWhere:
    def test_selection_is_lazy_and_restartable(self, store: RecordStore, make_row) -> None:
        selection = store.select_where(lambda df: df[INDUSTRY] == "Retail")
        assert len(list(selection)) == 1
        store.load([make_row(company="Hooli")])
        # predicate is re-evaluated on each iteration
        assert [r.company for r in selection] == ["Acme", "Hooli"]
        assert len(selection) == 2

    def test_na_never_matches(self, store: RecordStore) -> None:
        selected = list(store.select_where(lambda df: df[INDUSTRY] != "Retail"))
        assert [r.company for r in selected] == ["Globex"]

    def test_records_are_plain_python(self, store: RecordStore) -> None:
        record = store.records()[0]
        assert isinstance(record, LayoffRecord)
        assert isinstance(record.total_laid_off, int)
        assert store.records()[2].industry is None

    def test_select_does_not_mutate(self, store: RecordStore) -> None:
        before = store.snapshot()
        list(store.select_where())
        pd.testing.assert_frame_equal(before, store.snapshot())


class TestUpdateAndDelete:
    def test_update_returns_matched_count(self, store: RecordStore) -> None:
        count = store.update_where(
            lambda df: df[COMPANY].isin(["Acme", "Globex"]),
            lambda sub: {INDUSTRY: "Media"},
        )
        assert count == 2
        assert [r.industry for r in store.records()][:2] == ["Media", "Media"]

    def test_update_with_series(self, store: RecordStore) -> None:
        store.update_where(
            lambda df: df[COMPANY] == "Initech",
            lambda sub: {COMPANY: sub[COMPANY].str.upper()},
        )
        assert store.records()[2].company == "INITECH"

    def test_update_date_column(self, store: RecordStore) -> None:
        store.update_where(
            lambda df: df[COMPANY] == "Acme",
            lambda sub: {"date": datetime.date(2023, 3, 15)},
        )
        assert store.records()[0].date == datetime.date(2023, 3, 15)

    def test_zero_matches_is_not_an_error(self, store: RecordStore) -> None:
        assert store.update_where(lambda df: df[COMPANY] == "Nobody", lambda sub: {INDUSTRY: "X"}) == 0
        assert store.delete_where(lambda df: df[COMPANY] == "Nobody") == 0
        assert len(store) == 3

    def test_unknown_column_raises(self, store: RecordStore) -> None:
        with pytest.raises(KeyError):
            store.update_where(lambda df: df[COMPANY] == "Acme", lambda sub: {"bogus": 1})

    def test_delete_returns_removed_count(self, store: RecordStore) -> None:
        removed = store.delete_where(lambda df: df["total_laid_off"].isna())
        assert removed == 2
        assert [r.company for r in store.records()] == ["Acme"]
        assert store.delete_where(lambda df: df["total_laid_off"].isna()) == 0


class TestFieldsAndSnapshots:
    def test_helper_field_lifecycle(self, store: RecordStore) -> None:
        store.add_field(ROW_NUM, 1)
        assert ROW_NUM in store.fields
        assert ROW_NUM not in store.snapshot().columns
        assert "row_num" not in store.to_rows()[0]
        store.drop_field(ROW_NUM)
        assert ROW_NUM not in store.fields
        store.drop_field(ROW_NUM)

    def test_business_fields_are_protected(self, store: RecordStore) -> None:
        with pytest.raises(ValueError):
            store.drop_field(COMPANY)
        with pytest.raises(ValueError):
            store.add_field(COMPANY, "x")

    def test_clone_and_snapshot_are_independent(self, store: RecordStore) -> None:
        clone = store.clone()
        snapshot = store.snapshot()
        clone.delete_where(lambda df: df[COMPANY] == "Acme")
        store.update_where(lambda df: df[COMPANY] == "Globex", lambda sub: {COMPANY: "Changed"})
        assert len(store) == 3
        assert len(clone) == 2
        assert snapshot[COMPANY].tolist() == ["Acme", "Globex", "Initech"]
