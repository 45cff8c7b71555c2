"""Disease term cleaning and ontology lookup."""

from metaclean.disease.cleaning import (
    select_disease_columns,
    normalize_term,
    split_disease_terms,
    unique_disease_terms,
    annotate_diseases,
)
from metaclean.disease.ontology import OntologyLookupClient

__all__ = [
    "select_disease_columns",
    "normalize_term",
    "split_disease_terms",
    "unique_disease_terms",
    "annotate_diseases",
    "OntologyLookupClient",
]
