"""Core type definitions for metaclean.

This module defines the enums and dataclasses shared by the age
harmonization pipeline and the disease lookup collaborators.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd


DAYS_PER_YEAR = 365

# Column names of the source table
AGE_COLUMN = "age"
INFANT_AGE_COLUMN = "infant_age"
CATEGORY_COLUMN = "age_category"
REQUIRED_COLUMNS = [AGE_COLUMN, INFANT_AGE_COLUMN, CATEGORY_COLUMN]

# Working columns added by the pipeline
AGE_ALL_COLUMN = "age_all"
SOURCE_COLUMN = "source"
IMPUTED_COLUMN = "imputed"

OUTPUT_COLUMNS = [
    "Source",
    "Original_Value",
    "Original_Unit",
    "Harmonized_Value",
    "Harmonized_Unit",
    "Harmonized_Age_Group",
]


class AgeCategory(Enum):
    """Coarse life-stage buckets used in the sample metadata.

    Lower bounds are in whole years; a category spans up to the next
    category's lower bound.
    """
    NEWBORN = "newborn"       # 0
    CHILD = "child"           # 1-11
    SCHOOLAGE = "schoolage"   # 12-18
    ADULT = "adult"           # 19-65
    SENIOR = "senior"         # >65

    @classmethod
    def all(cls) -> list["AgeCategory"]:
        """Return all categories from youngest to oldest."""
        return [cls.NEWBORN, cls.CHILD, cls.SCHOOLAGE, cls.ADULT, cls.SENIOR]

    @classmethod
    def labels(cls) -> list[str]:
        return [c.value for c in cls.all()]

    @classmethod
    def from_age(cls, age: float) -> Optional["AgeCategory"]:
        """Get the category for an age in years.

        Fractional ages fall into the bucket of their integer part, so
        18.5 is schoolage and 65.9 is adult.
        """
        if age is None or pd.isna(age):
            return None
        if age < 1:
            return cls.NEWBORN
        elif age < 12:
            return cls.CHILD
        elif age < 19:
            return cls.SCHOOLAGE
        elif age < 66:
            return cls.ADULT
        return cls.SENIOR

    @property
    def output_label(self) -> str:
        """Label written to the harmonized table."""
        if self is AgeCategory.NEWBORN:
            return "infant"
        return self.value


# Lower bounds of each bucket, in years
CATEGORY_BINS = [-np.inf, 1, 12, 19, 66, np.inf]

# Labels accepted in the age_category column besides the category values.
# "infant" is the harmonized label for newborn.
CATEGORY_ALIASES = {"infant": AgeCategory.NEWBORN.value}


class AgeSource(Enum):
    """Which source field supplied a record's authoritative value."""
    AGE = "age"
    INFANT_AGE = "infant_age"


class AgeUnit(Enum):
    YEAR = "year"
    DAY = "day"

    @classmethod
    def for_source(cls, source: AgeSource) -> "AgeUnit":
        if source is AgeSource.INFANT_AGE:
            return cls.DAY
        return cls.YEAR


class ImputationStrategy(Enum):
    """Statistics used to fill a missing age within a category."""
    MEDIAN = "median"   # right-skewed distributions
    MEAN = "mean"       # roughly bell-shaped distributions
    SAMPLE = "sample"   # roughly uniform distributions


@dataclass
class CategoryImputation:
    """Imputation applied to one age category.

    Attributes:
        category: The category the rows belong to
        strategy: Strategy used for the category
        num_observed: Number of observed values in the reference distribution
        num_imputed: Number of rows filled
        statistic: Value used for median/mean strategies (None for sampling)
        unresolved: Rows left missing because the category had no observations
    """
    category: AgeCategory
    strategy: ImputationStrategy
    num_observed: int
    num_imputed: int
    statistic: Optional[float] = None
    unresolved: int = 0


@dataclass
class HarmonizationResult:
    """Output of one AgeHarmonizer run.

    Attributes:
        harmonized: Output table with the harmonized columns
        reconciled: Working table after reconciliation and imputation
        num_input: Rows in the input table
        num_dropped: Rows dropped because all age fields were missing
        imputations: Per-category imputation record
        age_columns: Age-related columns found in the input table
    """
    harmonized: pd.DataFrame
    reconciled: pd.DataFrame
    num_input: int
    num_dropped: int
    imputations: dict[AgeCategory, CategoryImputation] = field(default_factory=dict)
    age_columns: list[str] = field(default_factory=list)

    @property
    def num_retained(self) -> int:
        return len(self.harmonized)

    @property
    def num_imputed(self) -> int:
        return sum(imp.num_imputed for imp in self.imputations.values())

    @property
    def num_unresolved(self) -> int:
        return int(self.harmonized["Harmonized_Value"].isna().sum())


@dataclass
class OntologyMatch:
    """Top ontology search hit for a disease term."""
    term: str
    ontology_id: str
    label: str
    ontology: str
    iri: str = ""

    def to_dict(self) -> dict:
        return {
            "term": self.term,
            "ontology_id": self.ontology_id,
            "label": self.label,
            "ontology": self.ontology,
            "iri": self.iri,
        }
