"""Category-aware imputation of missing ages.

Each age category has a fixed imputation strategy, chosen from the shape of
the category's age histogram:

- newborn, child, senior: right-skewed -> median
- schoolage: roughly bell-shaped -> mean
- adult: roughly uniform -> sampling with replacement from observed ages

Reference distributions are built from the observed ages of a category
expressed in years, so newborn ages recorded in days and in years are
pooled on one scale. Only ages inside the category's boundary range count
as observations. Imputed values are written in years.
"""

import logging
from typing import Callable, Optional

import numpy as np
import pandas as pd

from metaclean.errors import EmptyReferenceDistributionError
from metaclean.types import (
    AgeCategory,
    AgeSource,
    CategoryImputation,
    ImputationStrategy,
    CATEGORY_COLUMN,
    AGE_ALL_COLUMN,
    SOURCE_COLUMN,
    IMPUTED_COLUMN,
    CATEGORY_BINS,
    DAYS_PER_YEAR,
)

logger = logging.getLogger(__name__)

StrategyFn = Callable[[np.ndarray, int, np.random.Generator], np.ndarray]

ON_EMPTY_RAISE = "raise"
ON_EMPTY_PROPAGATE = "propagate"


def impute_median(observed: np.ndarray, num_missing: int, rng: np.random.Generator) -> np.ndarray:
    """Fill with the median of the observed values."""
    return np.full(num_missing, float(np.median(observed)))


def impute_mean(observed: np.ndarray, num_missing: int, rng: np.random.Generator) -> np.ndarray:
    """Fill with the mean of the observed values."""
    return np.full(num_missing, float(np.mean(observed)))


def impute_random_sample(
    observed: np.ndarray, num_missing: int, rng: np.random.Generator
) -> np.ndarray:
    """Fill with draws, with replacement, from the observed values.

    Every observation is equally likely, so repeated ages are drawn in
    proportion to their frequency.
    """
    return rng.choice(observed, size=num_missing, replace=True).astype(float)


STRATEGY_FUNCTIONS: dict[ImputationStrategy, StrategyFn] = {
    ImputationStrategy.MEDIAN: impute_median,
    ImputationStrategy.MEAN: impute_mean,
    ImputationStrategy.SAMPLE: impute_random_sample,
}

CATEGORY_STRATEGIES: dict[AgeCategory, ImputationStrategy] = {
    AgeCategory.NEWBORN: ImputationStrategy.MEDIAN,
    AgeCategory.CHILD: ImputationStrategy.MEDIAN,
    AgeCategory.SCHOOLAGE: ImputationStrategy.MEAN,
    AgeCategory.ADULT: ImputationStrategy.SAMPLE,
    AgeCategory.SENIOR: ImputationStrategy.MEDIAN,
}


def ages_in_years(df: pd.DataFrame) -> pd.Series:
    """Return age_all expressed in years (infant_age-sourced values / 365)."""
    from_days = df[SOURCE_COLUMN] == AgeSource.INFANT_AGE.value
    return df[AGE_ALL_COLUMN].where(~from_days, df[AGE_ALL_COLUMN] / DAYS_PER_YEAR)


def category_range(category: AgeCategory) -> tuple[float, float]:
    """Return the [lower, upper) age range of a category, in years."""
    i = AgeCategory.all().index(category)
    return CATEGORY_BINS[i], CATEGORY_BINS[i + 1]


def reference_distribution(df: pd.DataFrame, category: AgeCategory) -> np.ndarray:
    """Observed ages (years) of one category, within its boundary range.

    Records kept in a category without an age to rederive it from (e.g. a
    150-day infant_age recorded as child) are left out, so an imputed value
    always falls in the range of its category.
    """
    years = ages_in_years(df)
    lower, upper = category_range(category)
    in_category = (df[CATEGORY_COLUMN] == category.value) & years.notna()
    in_range = in_category & (years >= lower) & (years < upper)

    excluded = int((in_category & ~in_range).sum())
    if excluded:
        logger.warning(
            f"{excluded} '{category.value}' ages outside [{lower}, {upper}) years "
            f"left out of the reference distribution"
        )

    return years[in_range].to_numpy(dtype=float)


def impute_ages(
    df: pd.DataFrame,
    rng: Optional[np.random.Generator] = None,
    on_empty_reference: str = ON_EMPTY_RAISE,
    strategies: Optional[dict[AgeCategory, ImputationStrategy]] = None,
) -> tuple[pd.DataFrame, dict[AgeCategory, CategoryImputation]]:
    """Fill missing age_all values category by category.

    Args:
        df: Reconciled age records (output of reconcile)
        rng: Random generator for the sampling strategy
        on_empty_reference: "raise" to abort when a category needing
            imputation has no observed ages, "propagate" to leave its rows
            missing
        strategies: Category -> strategy table (default CATEGORY_STRATEGIES)

    Returns:
        Tuple (imputed copy of df, per-category imputation records)

    Raises:
        EmptyReferenceDistributionError: If a category has rows to impute but
            no observed ages and on_empty_reference is "raise"
    """
    if on_empty_reference not in (ON_EMPTY_RAISE, ON_EMPTY_PROPAGATE):
        raise ValueError(f"Unknown on_empty_reference mode: {on_empty_reference}")

    if rng is None:
        rng = np.random.default_rng()
    if strategies is None:
        strategies = CATEGORY_STRATEGIES

    df = df.copy()
    df[IMPUTED_COLUMN] = False

    # Statistics come from the observed values only, before any fill
    references = {c: reference_distribution(df, c) for c in AgeCategory.all()}
    missing_age = df[AGE_ALL_COLUMN].isna()

    imputations = {}
    for category in AgeCategory.all():
        to_fill = missing_age & (df[CATEGORY_COLUMN] == category.value)
        num_missing = int(to_fill.sum())
        if num_missing == 0:
            continue

        strategy = strategies[category]
        observed = references[category]

        if len(observed) == 0:
            if on_empty_reference == ON_EMPTY_RAISE:
                raise EmptyReferenceDistributionError(category.value, num_missing)
            logger.warning(
                f"No observed ages for '{category.value}': leaving {num_missing} rows unresolved"
            )
            imputations[category] = CategoryImputation(
                category=category,
                strategy=strategy,
                num_observed=0,
                num_imputed=0,
                unresolved=num_missing,
            )
            continue

        values = STRATEGY_FUNCTIONS[strategy](observed, num_missing, rng)
        df.loc[to_fill, AGE_ALL_COLUMN] = values
        df.loc[to_fill, SOURCE_COLUMN] = AgeSource.AGE.value
        df.loc[to_fill, IMPUTED_COLUMN] = True

        statistic = None if strategy is ImputationStrategy.SAMPLE else float(values[0])
        imputations[category] = CategoryImputation(
            category=category,
            strategy=strategy,
            num_observed=len(observed),
            num_imputed=num_missing,
            statistic=statistic,
        )
        logger.info(
            f"Imputed {num_missing} '{category.value}' ages by {strategy.value} "
            f"from {len(observed)} observations"
        )

    uncategorized = int((missing_age & df[CATEGORY_COLUMN].isna()).sum())
    if uncategorized:
        logger.warning(f"{uncategorized} records have neither an age nor a category")

    return df, imputations


def rename_for_output(categories: pd.Series) -> pd.Series:
    """Map category values to their output labels (newborn -> infant)."""
    labels = {c.value: c.output_label for c in AgeCategory.all()}
    return categories.map(labels)
