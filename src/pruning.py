"""Removal of records that carry no layoff measurement."""

import logging

import pandas as pd

from src.record_store import LayoffRecord, RecordStore
from src.utils.schema_utils import PERCENTAGE_LAID_OFF, TOTAL_LAID_OFF

logger = logging.getLogger(__name__)


def is_unusable(df: pd.DataFrame) -> pd.Series:
    """Records with neither total_laid_off nor percentage_laid_off.

    Only true absence counts; run null normalization first so placeholder
    text is already absent.
    """
    return df[TOTAL_LAID_OFF].isna() & df[PERCENTAGE_LAID_OFF].isna()


def find_unusable_rows(store: RecordStore) -> list[LayoffRecord]:
    return list(store.select_where(is_unusable))


def prune_unusable_rows(store: RecordStore) -> int:
    """Delete records without any layoff measurement.

    Returns:
        Number of records removed

    """
    removed = store.delete_where(is_unusable)
    logger.info(f"Pruned {removed} rows without layoff metrics ({len(store)} remain)")
    return removed
