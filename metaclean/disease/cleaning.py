"""Disease column heuristics.

Disease cells may hold several terms joined by a separator
(e.g. "T2D;hypertension"), with underscores for spaces and mixed case.
These helpers normalize them into lookup-ready terms.
"""

import re
import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

DISEASE_TOKEN_PATTERN = re.compile(r"(?:^|_)disease(?:_|$)")


def select_disease_columns(columns: list[str]) -> list[str]:
    """Select column names carrying a ``disease`` token (disease, disease_subtype)."""
    return [c for c in columns if DISEASE_TOKEN_PATTERN.search(str(c))]


def normalize_term(term: str) -> str:
    """Lowercase a term, turn underscores into spaces and collapse whitespace."""
    term = str(term).replace("_", " ").strip().lower()
    return re.sub(r"\s+", " ", term)


def split_disease_terms(value, sep: str = ";") -> list[str]:
    """Split a multi-valued disease cell into normalized terms.

    Args:
        value: Cell value (missing values give an empty list)
        sep: Separator between terms

    Returns:
        Normalized, non-empty terms in their original order
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return []
    terms = [normalize_term(t) for t in str(value).split(sep)]
    return [t for t in terms if t]


def unique_disease_terms(
    df: pd.DataFrame,
    column: str = "disease",
    sep: str = ";",
    exclude: Optional[Iterable[str]] = ("healthy",),
) -> list[str]:
    """Collect the sorted unique disease terms of a column.

    Args:
        df: Metadata table
        column: Disease column
        sep: Separator between terms in a cell
        exclude: Terms left out (e.g. controls); compared after normalization

    Returns:
        Sorted list of unique normalized terms
    """
    if column not in df.columns:
        raise ValueError(f"Metadata table has no disease column '{column}'")

    excluded = {normalize_term(t) for t in (exclude or [])}
    terms = set()
    for value in df[column].dropna():
        terms.update(split_disease_terms(value, sep=sep))

    unique = sorted(terms - excluded)
    logger.info(f"Found {len(unique)} unique disease terms in '{column}'")
    return unique


def annotate_diseases(
    df: pd.DataFrame,
    mapping: pd.DataFrame,
    column: str = "disease",
    sep: str = ";",
    output_column: str = "disease_ontology_id",
) -> pd.DataFrame:
    """Add the ontology IDs of each sample's disease terms.

    Args:
        df: Metadata table
        mapping: Table with term and ontology_id columns (see OntologyLookupClient.map_terms)
        column: Disease column
        sep: Separator used both to split terms and to join IDs
        output_column: Name of the added column

    Returns:
        Copy of df with output_column holding the joined IDs in term order;
        missing when none of a sample's terms is mapped
    """
    lookup = {
        term: oid
        for term, oid in zip(mapping["term"], mapping["ontology_id"])
        if isinstance(oid, str) and oid
    }

    def ids_for(value):
        ids = [lookup[t] for t in split_disease_terms(value, sep=sep) if t in lookup]
        return sep.join(ids) if ids else np.nan

    out = df.copy()
    out[output_column] = out[column].apply(ids_for)

    mapped = int(out[output_column].notna().sum())
    logger.info(f"Annotated {mapped}/{len(out)} samples with ontology IDs")
    return out
