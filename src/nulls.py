"""Null normalization for the layoffs table.

Raw exports mix three encodings of "no value": true null, empty or
whitespace-only text, and the literal token "NULL". This module collapses
them into true absence so later absence checks see a single encoding.
"""

import logging
from collections.abc import Sequence
from typing import Any, Optional

import pandas as pd

from src.record_store import LayoffRecord, RecordStore
from src.utils.io_utils import merge_settings
from src.utils.schema_utils import INDUSTRY, PERCENTAGE_LAID_OFF, TEXT_FIELDS

logger = logging.getLogger(__name__)

# percentage_laid_off and industry first; they drive pruning and backfill
NULLABLE_TEXT_FIELDS: tuple[str, ...] = (PERCENTAGE_LAID_OFF, INDUSTRY) + tuple(
    col for col in TEXT_FIELDS if col not in (PERCENTAGE_LAID_OFF, INDUSTRY)
)


def null_placeholder_mask(series: pd.Series, tokens: Sequence[str] = ("NULL",)) -> pd.Series:
    """Mask values that are blank or a placeholder token (case-insensitive)."""
    stripped = series.str.strip()
    upper_tokens = [token.upper() for token in tokens]
    return (stripped == "") | stripped.str.upper().isin(upper_tokens)


def normalize_nulls(
    store: RecordStore,
    settings: Optional[dict[str, Any]] = None,
    columns: Sequence[str] = NULLABLE_TEXT_FIELDS,
) -> dict[str, int]:
    """Set blank and placeholder values to true absence.

    Args:
        store: Record store to update in place
        settings: Optional settings overrides (``cleaning.null_tokens``)
        columns: Text columns to normalize

    Returns:
        Number of values nulled per column

    """
    tokens = merge_settings(settings)["cleaning"]["null_tokens"]
    counts = {}
    for col in columns:
        counts[col] = store.update_where(
            lambda df, col=col: null_placeholder_mask(df[col], tokens),
            lambda sub, col=col: {col: pd.NA},
        )
    logger.info(f"Normalized {sum(counts.values())} null placeholders: {counts}")
    return counts


def find_missing_industry(
    store: RecordStore, settings: Optional[dict[str, Any]] = None
) -> list[LayoffRecord]:
    """Records whose industry is absent, blank or a placeholder token."""
    tokens = merge_settings(settings)["cleaning"]["null_tokens"]
    return list(
        store.select_where(
            lambda df: df[INDUSTRY].isna() | null_placeholder_mask(df[INDUSTRY], tokens)
        )
    )
