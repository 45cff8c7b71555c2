"""Age harmonization stages.

This package contains the four ordered stages of the age pipeline:
- ingest: column selection, parsing and filtering
- reconcile: agreement between age, infant_age and age_category
- imputation: category-aware filling of missing ages
- harmonize: conversion to years and output shaping
"""

from metaclean.age.ingest import select_age_columns, ingest_age_records
from metaclean.age.reconcile import categorize_ages, reconcile
from metaclean.age.imputation import (
    CATEGORY_STRATEGIES,
    STRATEGY_FUNCTIONS,
    impute_ages,
    rename_for_output,
)
from metaclean.age.harmonize import harmonize_units

__all__ = [
    # Ingest
    "select_age_columns",
    "ingest_age_records",
    # Reconciliation
    "categorize_ages",
    "reconcile",
    # Imputation
    "CATEGORY_STRATEGIES",
    "STRATEGY_FUNCTIONS",
    "impute_ages",
    "rename_for_output",
    # Harmonization
    "harmonize_units",
]
