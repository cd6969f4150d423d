"""IO utilities for settings loading and layoffs file reading/writing."""

import copy
import functools
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import yaml

from src.utils.conversions import is_absent
from src.utils.logging_utils import get_logger
from src.utils.schema_utils import DATE, ensure_required_columns, normalize_headers

logger = get_logger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "cleaning": {
        # prefix -> canonical industry label
        "industry_prefixes": {"Crypto": "Crypto"},
        # country prefix families whose periods are stripped
        "country_prefixes": ["United States"],
        "case_insensitive": True,
        "date_formats": ["%m/%d/%Y", "%Y-%m-%d"],
        "null_tokens": ["NULL"],
    },
    "backfill": {"key": ["company"]},
    "io": {"output_name": "layoffs_clean.csv"},
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


def _deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def merge_settings(overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Return the default settings with ``overrides`` deep-merged over them."""
    return _deep_merge(copy.deepcopy(DEFAULT_SETTINGS), overrides or {})


@functools.lru_cache(maxsize=1)
def load_settings(path: str) -> dict[str, Any]:
    """Load settings from YAML file with defaults.

    This function is cached to prevent repeated file I/O and parsing.
    Use reload_settings() to force a fresh load.

    Args:
        path: Path to settings YAML file

    Returns:
        Dictionary with settings (user config merged over defaults)

    """
    logger.debug(f"Loading settings from {path}")

    try:
        with open(path) as f:
            user_config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Settings file not found: {path}. Using defaults.")
        return merge_settings()

    return merge_settings(user_config)


def reload_settings(path: str) -> dict[str, Any]:
    """Force reload settings from file (clears cache)."""
    load_settings.cache_clear()
    return load_settings(path)


def detect_file_format(path: str) -> str:
    """Detect file format based on extension.

    Returns:
        'csv', 'xlsx' or 'unsupported'

    """
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return "csv"
    if suffix == ".xlsx":
        return "xlsx"
    return "unsupported"


def read_input_file(path: str, *, sheet: Optional[str] = None) -> pd.DataFrame:
    """Read a raw layoffs export as text columns.

    Values are kept as raw text (placeholder tokens such as "NULL" are not
    interpreted here); only empty cells become NaN.

    Args:
        path: Path to a .csv or .xlsx file
        sheet: Optional Excel sheet name

    Returns:
        DataFrame with canonical headers

    Raises:
        ValueError: If the format is unsupported or required columns are missing

    """
    fmt = detect_file_format(path)
    if fmt == "csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    elif fmt == "xlsx":
        df = pd.read_excel(
            path,
            dtype=str,
            engine="openpyxl",
            sheet_name=sheet or 0,
            keep_default_na=False,
            na_values=[""],
        )
    else:
        raise ValueError(f"Unsupported file format for: {path}")

    df = ensure_required_columns(normalize_headers(df))
    logger.info(f"Read {len(df)} rows from {path}")
    return df


def write_output(df: pd.DataFrame, path: str) -> str:
    """Write the cleaned table to CSV with ISO dates.

    Returns:
        The path written

    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    out = df.copy()
    if DATE in out.columns:
        out[DATE] = out[DATE].map(lambda d: None if is_absent(d) else d.isoformat())
    out.to_csv(path, index=False)
    logger.info(f"Wrote {len(out)} rows to {path}")
    return path
