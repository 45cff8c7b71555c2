"""Reconciliation stage of the age pipeline.

Resolves disagreements between age (years), infant_age (days) and
age_category before any imputation. Rules, applied in order to every
record:

1. infant_age >= 365 days -> age_category = child
2. age present -> age_category recomputed from age (overrides rule 1)
3. age missing -> age_category kept as set by rule 1 or as recorded
4. infant_age >= 365 days -> infant_age nulled
5. age_all = infant_age if present, else age
"""

import logging

import numpy as np
import pandas as pd

from metaclean.types import (
    AgeCategory,
    AgeSource,
    AGE_COLUMN,
    INFANT_AGE_COLUMN,
    CATEGORY_COLUMN,
    CATEGORY_BINS,
    AGE_ALL_COLUMN,
    SOURCE_COLUMN,
    DAYS_PER_YEAR,
)

logger = logging.getLogger(__name__)


def categorize_ages(ages: pd.Series) -> pd.Series:
    """Map ages in years to age_category values.

    Boundary table: 0 newborn, 1-11 child, 12-18 schoolage, 19-65 adult,
    >65 senior. Missing ages stay missing.
    """
    categories = pd.cut(
        ages,
        bins=CATEGORY_BINS,
        labels=AgeCategory.labels(),
        right=False,
    )
    return categories.astype(object).where(ages.notna(), np.nan)


def reconcile(records: pd.DataFrame) -> pd.DataFrame:
    """Apply the reconciliation rules to a working set of age records.

    Args:
        records: Output of ingest_age_records

    Returns:
        Copy of records with a corrected age_category, infant_age values of
        one year or more nulled, and the age_all and source columns added
    """
    df = records.copy()
    age = df[AGE_COLUMN]
    infant_age = df[INFANT_AGE_COLUMN]

    over_one_year = infant_age.notna() & (infant_age >= DAYS_PER_YEAR)
    df.loc[over_one_year, CATEGORY_COLUMN] = AgeCategory.CHILD.value

    has_age = age.notna()
    derived = categorize_ages(age)
    overridden = has_age & (df[CATEGORY_COLUMN] != derived)
    df.loc[has_age, CATEGORY_COLUMN] = derived[has_age]

    df.loc[over_one_year, INFANT_AGE_COLUMN] = np.nan
    infant_age = df[INFANT_AGE_COLUMN]

    use_infant = infant_age.notna()
    df[AGE_ALL_COLUMN] = infant_age.where(use_infant, age)
    df[SOURCE_COLUMN] = np.where(
        use_infant, AgeSource.INFANT_AGE.value, AgeSource.AGE.value
    )

    logger.info(
        f"Reconciliation: {int(over_one_year.sum())} infant ages >= {DAYS_PER_YEAR} days nulled, "
        f"{int(overridden.sum())} categories rederived from age, "
        f"{int(df[AGE_ALL_COLUMN].isna().sum())} records without a measured age"
    )

    return df
