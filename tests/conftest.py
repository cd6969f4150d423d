from __future__ import annotations

import random

import pytest
from hypothesis import settings

from src.utils.io_utils import load_settings

# ---- Deterministic Testing Configuration ---------------------

DETERMINISTIC_SEED = 42


@pytest.fixture(autouse=True)
def set_deterministic_seed():
    """Set deterministic seed for all tests"""
    random.seed(DETERMINISTIC_SEED)
    yield
    random.seed()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Keep cached settings from leaking between tests."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def raw_row(**overrides):
    """Build a raw layoffs row with every column present."""
    row = {
        "company": "Acme",
        "location": "SF Bay Area",
        "industry": "Retail",
        "total_laid_off": "100",
        "percentage_laid_off": "0.1",
        "date": "03/15/2023",
        "stage": "Series B",
        "country": "United States",
        "funds_raised_millions": "50",
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_row():
    return raw_row


# Hypothesis settings for all property-based tests
settings.register_profile(
    "deterministic",
    deadline=None,
    max_examples=100,
    derandomize=True,
    database=None,
)
settings.load_profile("deterministic")
