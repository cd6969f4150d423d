"""
Data type utilities for the layoffs table.

Provides functions to apply consistent dtypes and validate data types
so every stage sees the same nullable representations.
"""

import pandas as pd
from typing import Dict, Set, Optional
import logging

from src.dtypes_map import (
    ALLOWED_OBJECT_COLUMNS,
    DTYPES,
    INTERMEDIATE_COLUMNS_TO_DROP,
)

logger = logging.getLogger(__name__)


def apply_dtypes(
    df: pd.DataFrame, schema: Optional[Dict[str, str]] = None
) -> pd.DataFrame:
    """
    Apply dtype mapping to dataframe, handling missing columns gracefully.

    Args:
        df: Input dataframe
        schema: Dict mapping column names to dtypes (defaults to DTYPES)

    Returns:
        DataFrame with applied dtypes
    """
    schema = schema or DTYPES

    applicable_columns = [col for col in df.columns if col in schema]
    if not applicable_columns:
        logger.warning(
            f"No schema columns found in dataframe. Available: {list(df.columns)}"
        )
        return df

    dtype_dict = {col: schema[col] for col in applicable_columns}

    try:
        result = df.astype(dtype_dict)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to apply dtypes {dtype_dict}: {e}")
        raise

    # object columns keep None rather than NaN for absent values
    for col in applicable_columns:
        if dtype_dict[col] == "object":
            result[col] = result[col].astype(object).where(result[col].notna(), None)

    logger.debug(
        f"Applied dtypes to {len(applicable_columns)} columns: {applicable_columns}"
    )
    return result


def assert_no_unexpected_object_columns(
    df: pd.DataFrame, allowed: Optional[Set[str]] = None, context: str = "dataframe"
) -> None:
    """
    Assert that no unexpected object columns exist in the dataframe.

    Args:
        df: Dataframe to check
        allowed: Set of column names allowed to be object dtype
        context: Context string for error messages

    Raises:
        AssertionError: If unexpected object columns are found
    """
    if df.empty:
        return

    allowed_set = allowed or ALLOWED_OBJECT_COLUMNS
    object_columns = [col for col in df.columns if df[col].dtype == object]
    unexpected_columns = [col for col in object_columns if col not in allowed_set]

    if unexpected_columns:
        error_msg = (
            f"Unexpected object columns found in {context}: {unexpected_columns}\n"
            f"Allowed object columns: {sorted(allowed_set)}"
        )
        logger.error(error_msg)
        raise AssertionError(error_msg)


def drop_intermediate_columns(
    df: pd.DataFrame, context: str = "dataframe"
) -> pd.DataFrame:
    """
    Drop helper columns that must not leave the pipeline.

    Args:
        df: Input dataframe
        context: Context string for logging

    Returns:
        DataFrame with intermediate columns removed
    """
    columns_to_drop = [col for col in df.columns if col in INTERMEDIATE_COLUMNS_TO_DROP]

    if columns_to_drop:
        logger.debug(
            f"Dropped {len(columns_to_drop)} intermediate columns from {context}: {columns_to_drop}"
        )
        return df.drop(columns=columns_to_drop)

    return df
