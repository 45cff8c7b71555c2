"""Unit harmonization and output shaping for reconciled age records."""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from metaclean.age.imputation import rename_for_output
from metaclean.types import (
    AgeSource,
    AgeUnit,
    CATEGORY_COLUMN,
    AGE_ALL_COLUMN,
    SOURCE_COLUMN,
    OUTPUT_COLUMNS,
    DAYS_PER_YEAR,
)

logger = logging.getLogger(__name__)


def _whole_numbers(values: pd.Series) -> pd.Series:
    """Use the nullable integer dtype when every present value is whole."""
    present = values.dropna()
    if len(present) and (present % 1 == 0).all():
        return values.astype("Int64")
    return values


def harmonize_units(df: pd.DataFrame, id_columns: Optional[list[str]] = None) -> pd.DataFrame:
    """Convert reconciled ages to years and shape the output table.

    Args:
        df: Reconciled (and imputed) age records
        id_columns: Identifier columns to place before the age fields

    Returns:
        Table with the id columns followed by Source, Original_Value,
        Original_Unit, Harmonized_Value, Harmonized_Unit and
        Harmonized_Age_Group, in the row order of df
    """
    id_columns = list(id_columns or [])
    from_days = df[SOURCE_COLUMN] == AgeSource.INFANT_AGE.value
    original = df[AGE_ALL_COLUMN]

    out = df[id_columns].copy()
    out["Source"] = df[SOURCE_COLUMN]
    out["Original_Value"] = original
    out["Original_Unit"] = np.where(from_days, AgeUnit.DAY.value, AgeUnit.YEAR.value)
    out["Harmonized_Value"] = original.where(~from_days, original / DAYS_PER_YEAR)
    out["Harmonized_Unit"] = AgeUnit.YEAR.value
    out["Harmonized_Age_Group"] = rename_for_output(df[CATEGORY_COLUMN])

    # Whole ages are written as 34, not 34.0
    out["Original_Value"] = _whole_numbers(out["Original_Value"])
    out["Harmonized_Value"] = _whole_numbers(out["Harmonized_Value"])

    logger.info(
        f"Harmonized {len(out)} ages: {int(from_days.sum())} converted from days, "
        f"{int((~from_days).sum())} kept in years"
    )

    return out[id_columns + OUTPUT_COLUMNS].reset_index(drop=True)
