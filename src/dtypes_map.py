"""Centralized dtype mapping for the layoffs table.

Text columns use the nullable string dtype so that true absence is always
``pd.NA``; integer columns use the nullable ``Int64`` dtype; the date column
stays ``object`` and holds ``datetime.date`` values or ``None``.
"""

DTYPES = {
    "company": "string",
    "location": "string",
    "industry": "string",
    "total_laid_off": "Int64",
    "percentage_laid_off": "string",
    "date": "object",
    "stage": "string",
    "country": "string",
    "funds_raised_millions": "Int64",
    # Helper columns
    "row_num": "Int64",
}

# Columns that are allowed to remain as object dtype
ALLOWED_OBJECT_COLUMNS = {"date"}

# Helper columns that must never leave the pipeline
INTERMEDIATE_COLUMNS_TO_DROP = {"row_num"}
