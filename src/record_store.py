"""In-memory record store for the layoffs table.

This module handles:
- Loading loosely typed raw rows into the typed layoffs schema
- Predicate-based select/update/delete over the whole table
- Helper column management (duplicate ordinal marker)
- Snapshots of the cleaned table as a DataFrame or plain rows

Predicates are vectorized: they receive the current DataFrame and return a
boolean mask aligned on its index.
"""

import datetime
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Optional, Union

import pandas as pd

from src.dtypes_map import DTYPES
from src.utils.conversions import is_absent, to_text, try_parse_int
from src.utils.dtypes import apply_dtypes, drop_intermediate_columns
from src.utils.schema_utils import (
    BUSINESS_FIELDS,
    INTEGER_FIELDS,
    TEXT_FIELDS,
    TOTAL_LAID_OFF,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[pd.DataFrame], pd.Series]
Mutator = Callable[[pd.DataFrame], Mapping[str, Any]]
RawRows = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


@dataclass(frozen=True)
class LayoffRecord:
    """One layoff event as exposed outside the store."""

    company: Optional[str]
    location: Optional[str]
    industry: Optional[str]
    total_laid_off: Optional[int]
    percentage_laid_off: Optional[str]
    date: Optional[datetime.date]
    stage: Optional[str]
    country: Optional[str]
    funds_raised_millions: Optional[int]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LayoffRecord":
        """Build a record from a store row, mapping pd.NA to None."""
        values = {}
        for f in fields(cls):
            value = row.get(f.name)
            if is_absent(value):
                value = None
            elif f.name in INTEGER_FIELDS:
                value = int(value)
            values[f.name] = value
        return cls(**values)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def all_rows(df: pd.DataFrame) -> pd.Series:
    """Predicate matching every record."""
    return pd.Series(True, index=df.index)


def _as_mask(mask: pd.Series, df: pd.DataFrame) -> pd.Series:
    # nullable comparisons yield NA; NA never matches
    return mask.reindex(df.index).fillna(False).astype(bool)


class RecordSelection:
    """Lazy, restartable view over the records matching a predicate.

    The predicate is evaluated each time iteration starts, so a selection
    reflects the store as it is when it is consumed.
    """

    def __init__(self, store: "RecordStore", predicate: Predicate) -> None:
        self._store = store
        self._predicate = predicate

    def __iter__(self) -> Iterator[LayoffRecord]:
        frame = self.to_frame()
        for row in frame.to_dict(orient="records"):
            yield LayoffRecord.from_row(row)

    def __len__(self) -> int:
        return int(self._store.mask(self._predicate).sum())

    def to_frame(self) -> pd.DataFrame:
        """Return a copy of the matching rows (helper columns included)."""
        df = self._store.frame
        return df.loc[self._store.mask(self._predicate)].copy()


class RecordStore:
    """Owned, mutable collection of layoff records backed by a DataFrame."""

    def __init__(self, frame: Optional[pd.DataFrame] = None) -> None:
        if frame is None:
            frame = pd.DataFrame({col: pd.Series(dtype=DTYPES[col]) for col in BUSINESS_FIELDS})
        self._df = frame.reset_index(drop=True)

    @classmethod
    def from_rows(cls, rows: RawRows) -> "RecordStore":
        store = cls()
        store.load(rows)
        return store

    def __len__(self) -> int:
        return len(self._df)

    @property
    def frame(self) -> pd.DataFrame:
        """Current table. Callers must not mutate it; use the bulk operations."""
        return self._df

    @property
    def fields(self) -> list[str]:
        return list(self._df.columns)

    def load(self, rows: RawRows) -> int:
        """Append raw rows, preserving their order.

        Text columns are coerced with ``to_text`` and integer columns with
        ``try_parse_int``; the date column is kept raw for the standardizer.
        Columns outside the schema are ignored and missing ones are absent.

        Args:
            rows: DataFrame or iterable of mappings

        Returns:
            Number of rows loaded

        """
        if isinstance(rows, pd.DataFrame):
            raw = rows.reset_index(drop=True)
        else:
            raw = pd.DataFrame.from_records(list(rows))

        columns: dict[str, pd.Series] = {}
        for col in BUSINESS_FIELDS:
            source = raw[col] if col in raw.columns else pd.Series([None] * len(raw), dtype=object)
            source = source.astype(object)
            if col in TEXT_FIELDS:
                columns[col] = source.map(to_text)
            elif col in INTEGER_FIELDS:
                minimum = 0 if col == TOTAL_LAID_OFF else None
                parsed = [try_parse_int(v, minimum=minimum) for v in source]
                # built directly as Int64 so large values never round-trip through float
                columns[col] = pd.Series(pd.array(parsed, dtype="Int64"), index=source.index)
            else:
                columns[col] = source.map(lambda v: None if is_absent(v) else v)

        loaded = apply_dtypes(pd.DataFrame(columns, index=raw.index))
        ignored = [col for col in raw.columns if col not in BUSINESS_FIELDS]
        if ignored:
            logger.debug(f"Ignoring columns outside the layoffs schema: {ignored}")

        if self._df.empty:
            self._df = loaded
        else:
            self._df = pd.concat([self._df, loaded], ignore_index=True)
            self._df = apply_dtypes(self._df)
        logger.info(f"Loaded {len(loaded)} rows into record store")
        return len(loaded)

    def mask(self, predicate: Predicate) -> pd.Series:
        """Evaluate a predicate into a plain boolean mask."""
        return _as_mask(predicate(self._df), self._df)

    def select_where(self, predicate: Optional[Predicate] = None) -> RecordSelection:
        return RecordSelection(self, predicate or all_rows)

    def records(self) -> list[LayoffRecord]:
        return list(self.select_where())

    def update_where(self, predicate: Predicate, mutator: Mutator) -> int:
        """Apply ``mutator`` to every matching record.

        Args:
            predicate: Mask builder selecting the records to change
            mutator: Receives the matching sub-frame and returns a mapping of
                column -> new values (Series aligned on the sub-frame, or scalar)

        Returns:
            Number of records matched

        Raises:
            KeyError: If the mutator names a column outside the store

        """
        mask = self.mask(predicate)
        count = int(mask.sum())
        if count == 0:
            return 0

        changes = mutator(self._df.loc[mask])
        unknown = [col for col in changes if col not in self._df.columns]
        if unknown:
            raise KeyError(f"Unknown columns in update: {unknown}")

        for col, values in changes.items():
            if isinstance(values, pd.Series):
                values = values.reindex(self._df.index[mask])
            if DTYPES.get(col) == "object":
                column = self._df[col].astype(object)
                column.loc[mask] = values
                self._df[col] = column
            else:
                self._df.loc[mask, col] = values
        return count

    def delete_where(self, predicate: Predicate) -> int:
        mask = self.mask(predicate)
        count = int(mask.sum())
        if count:
            self._df = self._df.loc[~mask].reset_index(drop=True)
        return count

    def add_field(self, name: str, values: Union[pd.Series, Any]) -> None:
        """Add (or replace) a helper column."""
        if name in BUSINESS_FIELDS:
            raise ValueError(f"Cannot overwrite business field '{name}' as a helper column")
        self._df[name] = values
        if name in DTYPES:
            self._df[name] = self._df[name].astype(DTYPES[name])

    def drop_field(self, name: str) -> None:
        """Remove a helper column from the schema and every record.

        Raises:
            ValueError: If ``name`` is a business field

        """
        if name in BUSINESS_FIELDS:
            raise ValueError(f"Cannot drop business field '{name}'")
        if name in self._df.columns:
            self._df = self._df.drop(columns=[name])

    def clone(self) -> "RecordStore":
        return RecordStore(self._df.copy())

    def snapshot(self) -> pd.DataFrame:
        """Return an independent copy of the business columns."""
        return drop_intermediate_columns(self._df, context="snapshot").loc[:, list(BUSINESS_FIELDS)].copy()

    def to_rows(self) -> list[dict[str, Any]]:
        """Return the table as plain dicts with Python scalars and None."""
        return [record.as_dict() for record in self.select_where()]
