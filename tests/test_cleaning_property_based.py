"""Property-based tests for cleaning invariants using Hypothesis."""

import pytest
from hypothesis import given, strategies as st

from src.cleaning import clean
from src.utils.schema_utils import BUSINESS_FIELDS

text_values = st.one_of(
    st.none(),
    st.sampled_from(["", " ", "NULL", "null", " Null "]),
    st.text(alphabet="ab .", max_size=6),
)

raw_rows = st.lists(
    st.fixed_dictionaries(
        {
            "company": st.sampled_from(["Acme", " Acme", "Acme ", "Globex", "", None]),
            "location": st.sampled_from(["NYC", "Berlin", None]),
            "industry": st.one_of(
                text_values,
                st.sampled_from(["Retail", "Crypto Currency", "crypto", "CryptoFinance"]),
            ),
            "total_laid_off": st.one_of(
                st.none(),
                st.integers(min_value=-5, max_value=500),
                st.sampled_from(["", "NULL", "12", "12.0", "abc"]),
            ),
            "percentage_laid_off": st.one_of(
                text_values, st.sampled_from(["0.1", "10%", " 0.25 "])
            ),
            "date": st.one_of(
                st.none(),
                st.sampled_from(["03/15/2023", "2023-03-15", "15/03/2023", "NULL", ""]),
            ),
            "stage": st.one_of(text_values, st.sampled_from(["Seed", "Series B"])),
            "country": st.sampled_from(
                ["United States", "United States.", "united states. ", "Germany.", None, ""]
            ),
            "funds_raised_millions": st.one_of(
                st.none(), st.integers(min_value=0, max_value=1000), st.just("1.5")
            ),
        }
    ),
    max_size=12,
)


class TestCleaningPropertyBased:
    """Property-based tests for pipeline invariants."""

    @pytest.mark.hypothesis
    @given(rows=raw_rows)
    def test_idempotence(self, rows) -> None:
        once = clean(rows)
        assert clean(once) == once

    @pytest.mark.hypothesis
    @given(rows=raw_rows)
    def test_no_full_row_duplicates(self, rows) -> None:
        cleaned = clean(rows)
        keys = [tuple(row[f] for f in BUSINESS_FIELDS) for row in cleaned]
        assert len(keys) == len(set(keys))

    @pytest.mark.hypothesis
    @given(rows=raw_rows)
    def test_no_placeholder_text(self, rows) -> None:
        for row in clean(rows):
            for field in ("company", "location", "industry", "percentage_laid_off", "stage", "country"):
                value = row[field]
                assert value is None or (value.strip() != "" and value.strip().upper() != "NULL")

    @pytest.mark.hypothesis
    @given(rows=raw_rows)
    def test_every_row_has_a_metric(self, rows) -> None:
        for row in clean(rows):
            assert row["total_laid_off"] is not None or row["percentage_laid_off"] is not None
            if row["total_laid_off"] is not None:
                assert row["total_laid_off"] >= 0

    @pytest.mark.hypothesis
    @given(rows=raw_rows)
    def test_canonical_categories(self, rows) -> None:
        for row in clean(rows):
            if row["industry"] is not None and row["industry"].lower().startswith("crypto"):
                assert row["industry"] == "Crypto"
            if row["country"] is not None and row["country"].lower().startswith("united states"):
                assert row["country"] == "United States"

    @pytest.mark.hypothesis
    @given(rows=raw_rows)
    def test_output_never_grows(self, rows) -> None:
        assert len(clean(rows)) <= len(rows)
