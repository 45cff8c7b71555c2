"""Age harmonization pipeline.

This module chains the four age stages into one pass over a metadata table:
1. Ingest & filter: age columns, parsing, dropping samples without age data
2. Reconciliation: age_category consistent with the authoritative age
3. Category-aware imputation of missing ages
4. Unit harmonization to years and output shaping

A fatal error in any stage aborts the run; nothing is returned partially.
"""

import yaml
import logging
from typing import Optional, Union
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd

from metaclean.age.ingest import ingest_age_records, select_age_columns
from metaclean.age.reconcile import reconcile
from metaclean.age.imputation import impute_ages, ON_EMPTY_RAISE
from metaclean.age.harmonize import harmonize_units
from metaclean.data.loaders import MetadataLoader
from metaclean.disease.ontology import OLS_SEARCH_URL
from metaclean.types import HarmonizationResult

logger = logging.getLogger(__name__)


@dataclass
class HarmonizerConfig:
    """Configuration for the age harmonizer and the disease lookup.

    Attributes:
        seed: Seed for the adult sampling strategy (None = unseeded)
        on_empty_reference: "raise" or "propagate" when a category has rows
            to impute but no observed ages
        id_columns: Identifier columns copied to the output (e.g. sample_id)
        disease_column: Column holding disease terms
        disease_separator: Separator between terms in a multi-valued cell
        control_terms: Terms not sent to the ontology lookup
        ontology: Ontology searched for disease terms
        ols_url: Search endpoint of the ontology lookup service
        lookup_timeout: Per-request timeout in seconds
        lookup_pause: Pause between lookups in seconds
    """
    seed: Optional[int] = None
    on_empty_reference: str = ON_EMPTY_RAISE
    id_columns: list[str] = field(default_factory=list)
    disease_column: str = "disease"
    disease_separator: str = ";"
    control_terms: list[str] = field(default_factory=lambda: ["healthy"])
    ontology: str = "efo"
    ols_url: str = OLS_SEARCH_URL
    lookup_timeout: float = 10.0
    lookup_pause: float = 0.3

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "HarmonizerConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML config file

        Returns:
            HarmonizerConfig instance
        """
        with open(path, "r") as f:
            config_dict = yaml.safe_load(f) or {}

        kwargs = {}

        if "seed" in config_dict:
            kwargs["seed"] = config_dict["seed"]

        # Imputation config
        if "imputation" in config_dict:
            ic = config_dict["imputation"]
            if "seed" in ic:
                kwargs["seed"] = ic["seed"]
            if "on_empty_reference" in ic:
                kwargs["on_empty_reference"] = ic["on_empty_reference"]

        # Output config
        if "output" in config_dict:
            oc = config_dict["output"]
            if "id_columns" in oc:
                kwargs["id_columns"] = list(oc["id_columns"] or [])

        # Disease config
        if "disease" in config_dict:
            dc = config_dict["disease"]
            if "column" in dc:
                kwargs["disease_column"] = dc["column"]
            if "separator" in dc:
                kwargs["disease_separator"] = dc["separator"]
            if "control_terms" in dc:
                kwargs["control_terms"] = list(dc["control_terms"] or [])
            if "ontology" in dc:
                kwargs["ontology"] = dc["ontology"]
            if "ols_url" in dc:
                kwargs["ols_url"] = dc["ols_url"]
            if "timeout" in dc:
                kwargs["lookup_timeout"] = float(dc["timeout"])
            if "pause" in dc:
                kwargs["lookup_pause"] = float(dc["pause"])

        return cls(**kwargs)


class AgeHarmonizer:
    """Runs the age pipeline on sample metadata tables.

    Example:
        >>> harmonizer = AgeHarmonizer(HarmonizerConfig(seed=42))
        >>> result = harmonizer.run(metadata_df)
        >>> result.harmonized.head()
    """

    def __init__(
        self,
        config: Optional[HarmonizerConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize the harmonizer.

        Args:
            config: HarmonizerConfig (default settings if None)
            rng: Random generator for the sampling strategy; overrides
                config.seed when given
        """
        self.config = config or HarmonizerConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        logger.info(f"AgeHarmonizer initialized with config: {self.config}")

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "AgeHarmonizer":
        """Create harmonizer from YAML config file."""
        return cls(HarmonizerConfig.from_yaml(path))

    def run(self, metadata: pd.DataFrame) -> HarmonizationResult:
        """Execute the full age pipeline on a metadata table.

        Args:
            metadata: Sample metadata with age, infant_age and age_category

        Returns:
            HarmonizationResult with the output table and the reconciled
            working table
        """
        config = self.config

        # Step 1: Ingest & filter
        records, num_dropped = ingest_age_records(metadata, id_columns=config.id_columns)

        # Step 2: Reconciliation
        reconciled = reconcile(records)

        # Step 3: Category-aware imputation
        imputed, imputations = impute_ages(
            reconciled,
            rng=self.rng,
            on_empty_reference=config.on_empty_reference,
        )

        # Step 4: Unit harmonization
        harmonized = harmonize_units(imputed, id_columns=config.id_columns)

        result = HarmonizationResult(
            harmonized=harmonized,
            reconciled=imputed,
            num_input=len(metadata),
            num_dropped=num_dropped,
            imputations=imputations,
            age_columns=select_age_columns(metadata.columns.tolist()),
        )

        logger.info(
            f"Harmonized {result.num_retained}/{result.num_input} samples "
            f"({result.num_imputed} imputed, {result.num_unresolved} unresolved)"
        )

        return result

    def run_file(self, path: Union[str, Path]) -> HarmonizationResult:
        """Load a metadata table from disk and run the pipeline on it."""
        loader = MetadataLoader(path)
        return self.run(loader.df)


def create_harmonizer_from_dict(config_dict: dict) -> AgeHarmonizer:
    """Create harmonizer from configuration dictionary.

    Args:
        config_dict: Dictionary with configuration parameters

    Returns:
        Configured AgeHarmonizer
    """
    config = HarmonizerConfig(
        seed=config_dict.get("seed"),
        on_empty_reference=config_dict.get("on_empty_reference", ON_EMPTY_RAISE),
        id_columns=list(config_dict.get("id_columns", [])),
    )
    return AgeHarmonizer(config)
