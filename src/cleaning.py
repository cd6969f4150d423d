"""Layoffs data cleaning pipeline.

This module handles:
- Staging a working copy of the raw records
- Running the cleaning stages in order (dedupe, standardize, nulls,
  backfill, prune, final cleanup)
- Per-stage reporting and timing
- CLI orchestration for file-to-file cleaning
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import pandas as pd

from src.backfill import backfill_industry
from src.dedupe import remove_duplicates
from src.normalize import standardize_fields
from src.nulls import normalize_nulls
from src.pruning import prune_unusable_rows
from src.record_store import RawRows, RecordStore
from src.utils.dtypes import assert_no_unexpected_object_columns
from src.utils.io_utils import load_settings, merge_settings, read_input_file, write_output
from src.utils.logging_utils import setup_logging
from src.utils.path_utils import ensure_directory_exists, get_config_path
from src.utils.perf_utils import time_stage
from src.utils.schema_utils import ROW_NUM

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    """Outcome of one cleaning stage."""

    name: str
    rows_before: int
    rows_after: int
    affected: int
    details: dict[str, int] = field(default_factory=dict)

    @property
    def rows_removed(self) -> int:
        return self.rows_before - self.rows_after


@dataclass
class CleaningReport:
    """Per-stage results of one pipeline run."""

    rows_in: int = 0
    stages: list[StageResult] = field(default_factory=list)

    @property
    def rows_out(self) -> int:
        return self.stages[-1].rows_after if self.stages else self.rows_in

    def stage(self, name: str) -> StageResult:
        for result in self.stages:
            if result.name == name:
                return result
        raise KeyError(f"No stage named '{name}'")

    def summary(self) -> dict[str, Any]:
        return {
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "stages": {s.name: s.affected for s in self.stages},
        }


def _final_cleanup(store: RecordStore) -> int:
    # standardization can make formerly distinct rows identical
    removed = remove_duplicates(store)
    store.drop_field(ROW_NUM)
    return removed


def _run_stage(
    report: CleaningReport,
    name: str,
    store: RecordStore,
    stage: Callable[[RecordStore], Any],
) -> None:
    rows_before = len(store)
    with time_stage(name, logger):
        outcome = stage(store)
    if isinstance(outcome, dict):
        details = {str(k): int(v) for k, v in outcome.items()}
        affected = sum(details.values())
    else:
        details = {}
        affected = int(outcome)
    report.stages.append(StageResult(name, rows_before, len(store), affected, details))


def clean_store(
    store: RecordStore, settings: Optional[dict[str, Any]] = None
) -> tuple[RecordStore, CleaningReport]:
    """Clean a staging copy of ``store``; the input store is left untouched.

    Args:
        store: Loaded raw records
        settings: Optional settings overrides

    Returns:
        The cleaned staging store and the per-stage report

    """
    settings = merge_settings(settings)
    staging = store.clone()
    report = CleaningReport(rows_in=len(staging))

    _run_stage(report, "dedupe", staging, remove_duplicates)
    _run_stage(report, "standardize", staging, lambda s: standardize_fields(s, settings))
    _run_stage(report, "normalize_nulls", staging, lambda s: normalize_nulls(s, settings))
    _run_stage(report, "backfill", staging, lambda s: backfill_industry(s, settings))
    _run_stage(report, "prune", staging, prune_unusable_rows)
    _run_stage(report, "final_cleanup", staging, _final_cleanup)
    assert_no_unexpected_object_columns(staging.frame, context="cleaned layoffs")

    logger.info(f"Cleaning complete: {report.summary()}")
    return staging, report


def clean_frame(
    df: pd.DataFrame, settings: Optional[dict[str, Any]] = None
) -> pd.DataFrame:
    """Clean a raw DataFrame and return the cleaned snapshot."""
    cleaned, _ = clean_store(RecordStore.from_rows(df), settings)
    return cleaned.snapshot()


def clean(
    raw_rows: RawRows, settings: Optional[dict[str, Any]] = None
) -> list[dict[str, Any]]:
    """Clean raw layoff rows.

    Args:
        raw_rows: Iterable of mappings (or a DataFrame) with the layoffs columns
        settings: Optional settings overrides

    Returns:
        Cleaned rows as dicts with Python scalars and None for absence

    """
    cleaned, _ = clean_store(RecordStore.from_rows(raw_rows), settings)
    return cleaned.to_rows()


def run_pipeline(
    input_path: str,
    output_dir: str,
    config_path: Optional[str] = None,
    sheet: Optional[str] = None,
) -> CleaningReport:
    """Clean a raw layoffs export file into ``output_dir``.

    Args:
        input_path: Path to the raw .csv/.xlsx export
        output_dir: Directory receiving the cleaned CSV
        config_path: Path to settings YAML (defaults to config/settings.yaml)
        sheet: Optional Excel sheet name

    Returns:
        Per-stage cleaning report

    """
    settings = load_settings(config_path or str(get_config_path()))
    raw = read_input_file(input_path, sheet=sheet)

    cleaned, report = clean_store(RecordStore.from_rows(raw), settings)

    ensure_directory_exists(output_dir)
    output_path = Path(output_dir) / settings["io"]["output_name"]
    write_output(cleaned.snapshot(), str(output_path))
    return report


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Layoffs Data Cleaning Pipeline")
    parser.add_argument("--input", required=True, help="Raw layoffs file path (CSV/XLSX)")
    parser.add_argument("--outdir", required=True, help="Output directory path")
    parser.add_argument(
        "--config",
        default=str(get_config_path()),
        help="Configuration file path",
    )
    parser.add_argument("--sheet", help="Excel sheet name (optional)")
    parser.add_argument("--log-level", help="Override the configured logging level")

    args = parser.parse_args()

    settings = load_settings(args.config)
    log_cfg = settings.get("logging", {})
    setup_logging(args.log_level or log_cfg.get("level", "INFO"), log_cfg.get("file"))

    if not Path(args.input).exists():
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    try:
        report = run_pipeline(
            input_path=args.input,
            output_dir=args.outdir,
            config_path=args.config,
            sheet=args.sheet,
        )
    except ValueError as e:
        logger.error(f"Cleaning failed: {e}")
        sys.exit(2)

    logger.info(f"Rows in: {report.rows_in}, rows out: {report.rows_out}")


if __name__ == "__main__":
    main()
