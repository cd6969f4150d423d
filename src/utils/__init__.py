"""Utility modules for the layoffs cleaning pipeline.
"""

from .conversions import is_absent, to_text, try_parse_date, try_parse_int
from .dtypes import (
    apply_dtypes,
    assert_no_unexpected_object_columns,
    drop_intermediate_columns,
)
from .io_utils import load_settings, merge_settings, read_input_file, write_output
from .logging_utils import setup_logging
from .path_utils import ensure_directory_exists, get_config_path, get_project_root
from .perf_utils import time_stage

__all__ = [
    # Conversion utilities
    "is_absent",
    "to_text",
    "try_parse_date",
    "try_parse_int",
    # Dtype utilities
    "apply_dtypes",
    "assert_no_unexpected_object_columns",
    "drop_intermediate_columns",
    # I/O utilities
    "load_settings",
    "merge_settings",
    "read_input_file",
    "write_output",
    # Logging utilities
    "setup_logging",
    # Path utilities
    "get_project_root",
    "ensure_directory_exists",
    "get_config_path",
    # Performance utilities
    "time_stage",
]
