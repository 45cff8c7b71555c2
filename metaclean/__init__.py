"""metaclean: harmonization of biomedical sample metadata.

Cleans and harmonizes the age fields of a sample metadata table
(age in years, infant_age in days, age_category) into one age in years and
one age group per sample, and maps disease terms to ontology identifiers.
"""

__version__ = "0.1.0"
__author__ = "metaclean Team"

from metaclean.types import (
    AgeCategory,
    AgeSource,
    AgeUnit,
    ImputationStrategy,
    CategoryImputation,
    HarmonizationResult,
    OntologyMatch,
)
from metaclean.errors import (
    HarmonizationError,
    MissingRequiredColumnError,
    EmptyReferenceDistributionError,
    InvalidCategoryValueError,
)
from metaclean.pipeline import AgeHarmonizer, HarmonizerConfig

__all__ = [
    "AgeCategory",
    "AgeSource",
    "AgeUnit",
    "ImputationStrategy",
    "CategoryImputation",
    "HarmonizationResult",
    "OntologyMatch",
    "HarmonizationError",
    "MissingRequiredColumnError",
    "EmptyReferenceDistributionError",
    "InvalidCategoryValueError",
    "AgeHarmonizer",
    "HarmonizerConfig",
]
