"""Field standardization for the layoffs table.

This module handles:
- Whitespace trimming of company names and other text fields
- Industry prefix families collapsed to one canonical label
- Country prefix families merged to one spelling with stray periods removed
- Date parsing with try-conversion (unparseable text becomes absent)
"""

import datetime
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import pandas as pd

from src.record_store import RecordStore
from src.utils.conversions import is_absent, try_parse_date
from src.utils.io_utils import merge_settings
from src.utils.schema_utils import COUNTRY, DATE, INDUSTRY, TEXT_FIELDS

logger = logging.getLogger(__name__)


def _starts_with(series: pd.Series, prefix: str, case_insensitive: bool) -> pd.Series:
    if case_insensitive:
        return series.str.lower().str.startswith(prefix.lower())
    return series.str.startswith(prefix)


def _cleaning_settings(settings: Optional[dict[str, Any]]) -> dict[str, Any]:
    return merge_settings(settings)["cleaning"]


def clean_country(value: str, prefix: Optional[str] = None) -> str:
    """Remove every period and trailing whitespace from a country value.

    When ``prefix`` is given and the value starts with it in any case, the
    leading part is rewritten to the prefix spelling first.
    """
    if prefix is not None and value[: len(prefix)].lower() == prefix.lower():
        value = prefix + value[len(prefix) :]
    return value.replace(".", "").rstrip()


def trim_text_fields(store: RecordStore, columns: Sequence[str] = TEXT_FIELDS) -> int:
    """Strip leading/trailing whitespace from text fields.

    Returns:
        Number of field values changed

    """
    changed = 0
    for col in columns:
        changed += store.update_where(
            lambda df, col=col: df[col] != df[col].str.strip(),
            lambda sub, col=col: {col: sub[col].str.strip()},
        )
    logger.info(f"Trimmed whitespace in {changed} field values")
    return changed


def canonicalize_industry(
    store: RecordStore,
    prefixes: Mapping[str, str],
    case_insensitive: bool = True,
) -> int:
    """Rewrite industries starting with a known prefix to its label.

    Args:
        store: Record store to update
        prefixes: Mapping of prefix -> canonical label, e.g. {"Crypto": "Crypto"}
        case_insensitive: Match prefixes ignoring case

    Returns:
        Number of records changed

    """
    changed = 0
    for prefix, label in prefixes.items():
        changed += store.update_where(
            lambda df, prefix=prefix, label=label: (
                _starts_with(df[INDUSTRY], prefix, case_insensitive)
                & (df[INDUSTRY] != label)
            ),
            lambda sub, label=label: {INDUSTRY: label},
        )
    logger.info(f"Canonicalized {changed} industry values")
    return changed


def canonicalize_country(
    store: RecordStore,
    prefixes: Sequence[str],
    case_insensitive: bool = True,
) -> int:
    """Merge countries in a prefix family to one spelling.

    The matched prefix takes its configured spelling, then periods and
    trailing whitespace are stripped, so "United States.", "united states"
    and "United States" all become "United States".

    Returns:
        Number of records changed

    """
    changed = 0
    for prefix in prefixes:
        changed += store.update_where(
            lambda df, prefix=prefix: (
                _starts_with(df[COUNTRY], prefix, case_insensitive)
                & (
                    df[COUNTRY]
                    != df[COUNTRY].map(
                        lambda v: clean_country(v, prefix), na_action="ignore"
                    )
                )
            ),
            lambda sub, prefix=prefix: {
                COUNTRY: sub[COUNTRY].map(lambda v: clean_country(v, prefix))
            },
        )
    logger.info(f"Canonicalized {changed} country values")
    return changed


def _needs_date_parse(df: pd.DataFrame) -> pd.Series:
    # datetime is a date subclass but still needs truncating
    return df[DATE].map(
        lambda v: not is_absent(v)
        and not (isinstance(v, datetime.date) and not isinstance(v, datetime.datetime))
    )


def parse_dates(store: RecordStore, formats: Sequence[str]) -> int:
    """Convert raw date values to ``datetime.date``.

    Values that do not parse become absent; the row is kept.

    Returns:
        Number of records converted (including failed conversions)

    """
    failed = 0

    def convert(sub: pd.DataFrame) -> dict[str, pd.Series]:
        nonlocal failed
        parsed = sub[DATE].map(lambda v: try_parse_date(v, formats))
        failed = int(parsed.isna().sum())
        return {DATE: parsed}

    converted = store.update_where(_needs_date_parse, convert)
    if failed:
        logger.warning(f"{failed} date values could not be parsed and were set to null")
    logger.info(f"Converted {converted} date values")
    return converted


def preview_date_conversion(
    store: RecordStore, settings: Optional[dict[str, Any]] = None
) -> pd.DataFrame:
    """Show each raw date next to its converted value without mutating."""
    formats = _cleaning_settings(settings)["date_formats"]
    original = store.frame[DATE]
    return pd.DataFrame(
        {
            "original_date": original,
            "converted_date": original.map(lambda v: try_parse_date(v, formats)),
        }
    )


def preview_country_cleanup(
    store: RecordStore, settings: Optional[dict[str, Any]] = None
) -> pd.DataFrame:
    """Distinct countries next to their cleaned spelling, sorted by country."""
    cfg = _cleaning_settings(settings)
    countries = store.frame[COUNTRY].dropna().drop_duplicates()
    cleaned = countries.copy()
    for prefix in cfg["country_prefixes"]:
        matches = _starts_with(cleaned, prefix, cfg["case_insensitive"])
        matches = matches.fillna(False).astype(bool)
        cleaned = cleaned.where(
            ~matches, cleaned.map(lambda v, prefix=prefix: clean_country(v, prefix))
        )
    return (
        pd.DataFrame({"country": countries, "cleaned_country": cleaned})
        .sort_values("country")
        .reset_index(drop=True)
    )


def standardize_fields(
    store: RecordStore, settings: Optional[dict[str, Any]] = None
) -> dict[str, int]:
    """Run every standardization step over the store.

    Args:
        store: Record store to update in place
        settings: Optional settings overrides (see ``DEFAULT_SETTINGS``)

    Returns:
        Changed-value counts per step

    """
    cfg = _cleaning_settings(settings)
    case_insensitive = bool(cfg["case_insensitive"])
    return {
        "trimmed": trim_text_fields(store),
        "industry": canonicalize_industry(
            store, cfg["industry_prefixes"], case_insensitive
        ),
        "country": canonicalize_country(
            store, cfg["country_prefixes"], case_insensitive
        ),
        "date": parse_dates(store, cfg["date_formats"]),
    }
