"""Schema utilities for the layoffs cleaning pipeline.

This module provides canonical column names and header normalization
for raw layoff exports.
"""

import logging
import re

import pandas as pd

logger = logging.getLogger(__name__)

# Business columns
COMPANY = "company"
LOCATION = "location"
INDUSTRY = "industry"
TOTAL_LAID_OFF = "total_laid_off"
PERCENTAGE_LAID_OFF = "percentage_laid_off"
DATE = "date"
STAGE = "stage"
COUNTRY = "country"
FUNDS_RAISED_MILLIONS = "funds_raised_millions"

# Helper column holding the per-partition duplicate ordinal
ROW_NUM = "row_num"

# Column order of the layoffs table (also the duplicate partition key)
BUSINESS_FIELDS: tuple[str, ...] = (
    COMPANY,
    LOCATION,
    INDUSTRY,
    TOTAL_LAID_OFF,
    PERCENTAGE_LAID_OFF,
    DATE,
    STAGE,
    COUNTRY,
    FUNDS_RAISED_MILLIONS,
)

TEXT_FIELDS: tuple[str, ...] = (
    COMPANY,
    LOCATION,
    INDUSTRY,
    PERCENTAGE_LAID_OFF,
    STAGE,
    COUNTRY,
)

INTEGER_FIELDS: tuple[str, ...] = (TOTAL_LAID_OFF, FUNDS_RAISED_MILLIONS)

# Columns the identifying key may be built from
KEY_CANDIDATES: tuple[str, ...] = (COMPANY, LOCATION)


def normalize_header(column: str) -> str:
    """Normalize a raw header to its canonical snake_case form.

    Args:
        column: Raw column header

    Returns:
        Lower-case header with runs of spaces/dashes collapsed to underscores

    """
    header = str(column).strip().lower()
    header = re.sub(r"[\s\-]+", "_", header)
    return header.strip("[]")


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """Rename DataFrame columns to their canonical names."""
    renamed = {col: normalize_header(col) for col in df.columns}
    changed = {old: new for old, new in renamed.items() if old != new}
    if changed:
        logger.debug(f"Normalized headers: {changed}")
    return df.rename(columns=renamed)


def ensure_required_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Validate that every business column is present.

    Args:
        df: DataFrame with canonical headers

    Returns:
        The same DataFrame

    Raises:
        ValueError: If any business column is missing

    """
    missing = [col for col in BUSINESS_FIELDS if col not in df.columns]
    if missing:
        raise ValueError(
            f"Missing required columns: {missing}. "
            f"Available columns: {list(df.columns)}",
        )
    return df
