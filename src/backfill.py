"""Industry backfill from sibling records.

A record with no industry borrows the industry of another record sharing
its identifying key. Donors are indexed once (first non-null industry per
key, in store order) and gaps are filled in a single pass. Records whose key
has a null component neither donate nor receive, matching join equality.
"""

import logging
from collections.abc import Sequence
from typing import Any, Optional

import pandas as pd

from src.record_store import LayoffRecord, Predicate, RecordStore
from src.utils.io_utils import merge_settings
from src.utils.schema_utils import INDUSTRY, KEY_CANDIDATES

logger = logging.getLogger(__name__)


def resolve_backfill_key(settings: Optional[dict[str, Any]] = None) -> list[str]:
    """Read and validate ``backfill.key`` from settings.

    Raises:
        ValueError: If the key is empty or names a non-identifying column

    """
    key = list(merge_settings(settings)["backfill"]["key"])
    invalid = [col for col in key if col not in KEY_CANDIDATES]
    if not key or invalid:
        raise ValueError(
            f"Invalid backfill key {key}: expected a non-empty subset of {list(KEY_CANDIDATES)}"
        )
    return key


def _donor_industry(df: pd.DataFrame, key: Sequence[str]) -> pd.Series:
    """Industry of the first donor sharing each record's key (NA if none)."""
    has_key = df[list(key)].notna().all(axis=1)
    if not has_key.any():
        return pd.Series(pd.NA, index=df.index, dtype="string")
    keyed = df.loc[has_key]
    # "first" skips nulls, so only records with an industry can donate
    donors = keyed.groupby(list(key), sort=False)[INDUSTRY].transform("first")
    return donors.reindex(df.index).astype("string")


def _needs_backfill(key: Sequence[str]) -> Predicate:
    def predicate(df: pd.DataFrame) -> pd.Series:
        return df[INDUSTRY].isna() & _donor_industry(df, key).notna()

    return predicate


def preview_backfill(
    store: RecordStore, settings: Optional[dict[str, Any]] = None
) -> list[tuple[LayoffRecord, str]]:
    """Pair each record missing industry with the industry it would receive."""
    key = resolve_backfill_key(settings)
    df = store.frame
    donors = _donor_industry(df, key)
    mask = store.mask(_needs_backfill(key))
    return [
        (LayoffRecord.from_row(row), str(industry))
        for row, industry in zip(
            df.loc[mask].to_dict(orient="records"), donors.loc[mask]
        )
    ]


def backfill_industry(
    store: RecordStore, settings: Optional[dict[str, Any]] = None
) -> int:
    """Fill missing industries from records sharing the backfill key.

    Args:
        store: Record store to update in place
        settings: Optional settings overrides (``backfill.key``)

    Returns:
        Number of records backfilled

    """
    key = resolve_backfill_key(settings)
    filled = store.update_where(
        _needs_backfill(key),
        lambda sub: {INDUSTRY: _donor_industry(store.frame, key).loc[sub.index]},
    )
    logger.info(f"Backfilled industry for {filled} records using key {key}")
    return filled
