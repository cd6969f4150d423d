"""Stage timing helpers for the cleaning pipeline."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager


@contextmanager
def time_stage(stage: str, logger: logging.Logger) -> Iterator[None]:
    """Context manager for timing pipeline stages.

    Args:
        stage: Stage name for logging
        logger: Logger instance

    Yields:
        None

    """
    start_time = time.time()
    logger.info(f"[stage:start] {stage}")
    try:
        yield
    finally:
        duration = time.time() - start_time
        logger.info(f"[stage:end] {stage} ({duration:.2f}s)")
