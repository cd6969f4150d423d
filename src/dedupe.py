"""Exact duplicate resolution for the layoffs table.

This module handles:
- Ordinal assignment within each full-row partition
- Duplicate preview (records that would be removed)
- Removal of every duplicate except the first-seen representative

The partition key spans every business field, so this is exact full-row
deduplication. Nulls compare equal within a partition.
"""

import logging
from collections.abc import Sequence

import pandas as pd

from src.record_store import LayoffRecord, RecordStore
from src.utils.schema_utils import BUSINESS_FIELDS, ROW_NUM

logger = logging.getLogger(__name__)


def assign_row_numbers(
    store: RecordStore, key: Sequence[str] = BUSINESS_FIELDS
) -> pd.Series:
    """Write the 1-based ordinal of each record within its partition.

    Records keep their store order, so ordinal 1 is the first-seen record.

    Args:
        store: Record store to annotate
        key: Partition columns

    Returns:
        The ordinal Series written to the ``row_num`` helper column

    """
    df = store.frame
    if df.empty:
        row_num = pd.Series(dtype="Int64")
    else:
        row_num = df.groupby(list(key), dropna=False, sort=False).cumcount() + 1
    store.add_field(ROW_NUM, row_num)
    return row_num


def _is_duplicate(df: pd.DataFrame) -> pd.Series:
    return df[ROW_NUM] > 1


def find_duplicates(store: RecordStore) -> list[LayoffRecord]:
    """Return the records that ``remove_duplicates`` would delete."""
    assign_row_numbers(store)
    return list(store.select_where(_is_duplicate))


def remove_duplicates(store: RecordStore) -> int:
    """Delete all but the first occurrence of each full-row partition.

    The ``row_num`` helper column stays on the store until final cleanup.

    Returns:
        Number of records removed

    """
    assign_row_numbers(store)
    removed = store.delete_where(_is_duplicate)
    logger.info(f"Removed {removed} duplicate rows ({len(store)} remain)")
    return removed
