"""Try-conversions for loosely typed layoff values.

Every function here is total: it returns the converted value or ``None``
and never raises on malformed input.
"""

import datetime
import logging
import math
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Int64 column storage bounds
INT64_BOUNDS = np.iinfo(np.int64)

# SQL Server style 101 (mm/dd/yyyy), then ISO for re-loaded snapshots
DEFAULT_DATE_FORMATS: tuple[str, ...] = ("%m/%d/%Y", "%Y-%m-%d")


def is_absent(value: Any) -> bool:
    """Return True for None, NaN, NaT and pd.NA."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-likes are never absent scalars
        return False


def to_text(value: Any) -> Optional[str]:
    """Coerce a raw value to text, keeping true absence as None.

    Integral floats render without the trailing ``.0`` that spreadsheet
    readers add.
    """
    if is_absent(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def try_parse_int(value: Any, *, minimum: Optional[int] = None) -> Optional[int]:
    """Parse an integer or return None.

    Args:
        value: Raw value (int, float, text, ...)
        minimum: Smallest accepted value; anything lower becomes None

    Returns:
        The integer, or None when the value is absent, non-integral,
        not numeric, below ``minimum`` or outside the int64 range

    """
    if is_absent(value) or isinstance(value, bool):
        return None

    if isinstance(value, int):
        result = value
    else:
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            number = Decimal(str(value).strip().replace(",", ""))
        except InvalidOperation:
            logger.debug(f"Integer conversion failed for {value!r}")
            return None
        if not number.is_finite() or number != number.to_integral_value():
            logger.debug(f"Integer conversion failed for {value!r}")
            return None
        result = int(number)

    if minimum is not None and result < minimum:
        return None
    if not INT64_BOUNDS.min <= result <= INT64_BOUNDS.max:
        logger.debug(f"Integer out of int64 range: {value!r}")
        return None
    return result


def try_parse_date(
    value: Any, formats: Sequence[str] = DEFAULT_DATE_FORMATS
) -> Optional[datetime.date]:
    """Parse a calendar date or return None.

    Args:
        value: Raw value; dates and timestamps pass through as dates
        formats: strptime formats tried in order

    Returns:
        ``datetime.date`` or None if no format matches

    """
    if is_absent(value):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value

    text = str(value).strip()
    for fmt in formats:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    logger.debug(f"Date conversion failed for {value!r}")
    return None
