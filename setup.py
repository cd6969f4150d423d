#!/usr/bin/env python3
"""Setup script for layoffs_cleaning package.
"""

from setuptools import find_packages, setup

setup(
    name="layoffs_cleaning",
    version="1.0.0",
    description="Layoffs dataset cleaning pipeline",
    author="Layoffs Cleaning Team",
    packages=find_packages(include=["src*"]),
    python_requires=">=3.10",
    install_requires=[
        "pandas>=1.5.0",
        "numpy>=1.23.0",
        "pyyaml>=6.0",
        "openpyxl>=3.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "hypothesis>=6.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "hypothesis>=6.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
            "pandas-stubs>=2.0.0",
            "types-PyYAML>=6.0.0",
        ],
    },
)
