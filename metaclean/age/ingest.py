"""Ingest & filter stage of the age pipeline.

Selects the age-related columns of a metadata table, parses the numeric age
fields, validates age_category and drops samples with no age information.
"""

import re
import logging
from typing import Optional

import numpy as np
import pandas as pd

from metaclean.errors import InvalidCategoryValueError, MissingRequiredColumnError
from metaclean.types import (
    AgeCategory,
    AGE_COLUMN,
    INFANT_AGE_COLUMN,
    CATEGORY_COLUMN,
    CATEGORY_ALIASES,
    REQUIRED_COLUMNS,
)

logger = logging.getLogger(__name__)

# "age" as a whole underscore-delimited token: age, age_category, infant_age,
# average_age. Not disease_stage, dosage or image_path.
AGE_TOKEN_PATTERN = re.compile(r"(?:^|_)age(?:_|$)")


def is_age_column(name: str) -> bool:
    """Return True if a column name carries an ``age`` token."""
    return bool(AGE_TOKEN_PATTERN.search(str(name)))


def select_age_columns(columns: list[str]) -> list[str]:
    """Select age-related column names, preserving their order.

    Args:
        columns: Column names of the metadata table

    Returns:
        Names matching ``age`` exactly or bounded by underscores
    """
    return [c for c in columns if is_age_column(c)]


def _parse_numeric(series: pd.Series) -> pd.Series:
    """Parse a nullable numeric column to float with NaN for missing."""
    cleaned = series.replace(r"^\s*$", np.nan, regex=True)
    try:
        return pd.to_numeric(cleaned).astype(float)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Column '{series.name}' has non-numeric values: {e}") from e


def normalize_categories(series: pd.Series) -> pd.Series:
    """Validate age_category values and map aliases onto category values.

    Missing and whitespace-only values stay missing. Anything else outside
    the recognized categories, including padded values such as " adult ",
    is an error rather than being coerced.

    Raises:
        InvalidCategoryValueError: If unrecognized values are present
    """
    values = series.where(series.isna(), series.astype(str))
    values = values.replace(r"^\s*$", np.nan, regex=True).replace(CATEGORY_ALIASES)

    allowed = set(AgeCategory.labels())
    present = values.dropna()
    invalid = set(present[~present.isin(allowed)].unique())
    if invalid:
        raise InvalidCategoryValueError(invalid, allowed=AgeCategory.labels())

    return values.astype(object)


def ingest_age_records(
    df: pd.DataFrame,
    id_columns: Optional[list[str]] = None,
) -> tuple[pd.DataFrame, int]:
    """Build the working set of age records from a metadata table.

    Args:
        df: Full metadata table
        id_columns: Identifier columns to carry through (e.g. sample_id)

    Returns:
        Tuple (records, num_dropped) where records holds the id columns and
        the age-related columns, indexed like the input

    Raises:
        MissingRequiredColumnError: If age, infant_age or age_category is absent
        InvalidCategoryValueError: If age_category has unrecognized values
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise MissingRequiredColumnError(missing)

    id_columns = list(id_columns or [])
    missing_ids = [c for c in id_columns if c not in df.columns]
    if missing_ids:
        raise MissingRequiredColumnError(missing_ids)

    age_columns = select_age_columns(df.columns.tolist())
    logger.info(f"Age-related columns: {age_columns}")

    keep = id_columns + [c for c in age_columns if c not in id_columns]
    records = df[keep].copy()

    records[AGE_COLUMN] = _parse_numeric(records[AGE_COLUMN])
    records[INFANT_AGE_COLUMN] = _parse_numeric(records[INFANT_AGE_COLUMN])
    records[CATEGORY_COLUMN] = normalize_categories(records[CATEGORY_COLUMN])

    all_missing = records[REQUIRED_COLUMNS].isna().all(axis=1)
    num_dropped = int(all_missing.sum())
    records = records.loc[~all_missing]

    if num_dropped:
        logger.info(f"Dropped {num_dropped} samples with no age information")
    logger.info(f"Working set: {len(records)} samples")

    return records, num_dropped
