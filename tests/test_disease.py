"""Unit tests for disease cleaning and ontology lookup."""

import pytest
import numpy as np
import pandas as pd
import requests
from unittest.mock import MagicMock, patch

from metaclean.disease.cleaning import (
    select_disease_columns,
    normalize_term,
    split_disease_terms,
    unique_disease_terms,
    annotate_diseases,
)
from metaclean.disease.ontology import OntologyLookupClient, MAPPING_COLUMNS
from metaclean.types import OntologyMatch


def make_response(docs):
    """Build a mock OLS search response."""
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"response": {"numFound": len(docs), "docs": docs}}
    return response


T2D_DOC = {
    "iri": "http://www.ebi.ac.uk/efo/EFO_0001360",
    "obo_id": "EFO:0001360",
    "short_form": "EFO_0001360",
    "label": "type 2 diabetes mellitus",
    "ontology_name": "efo",
}


class TestDiseaseCleaning:
    """Tests for disease term heuristics."""

    def test_select_disease_columns(self):
        """Should match the disease token only."""
        columns = ["disease", "disease_subtype", "diseased_tissue", "age", "study_disease"]
        assert select_disease_columns(columns) == ["disease", "disease_subtype", "study_disease"]

    def test_normalize_term(self):
        """Should lowercase, replace underscores and trim."""
        assert normalize_term("  Crohns_disease ") == "crohns disease"
        assert normalize_term("T2D") == "t2d"
        assert normalize_term("colorectal   cancer") == "colorectal cancer"

    def test_split_terms(self):
        """Should split multi-valued cells and drop empties."""
        assert split_disease_terms("T2D;Hypertension") == ["t2d", "hypertension"]
        assert split_disease_terms("IBD;;") == ["ibd"]
        assert split_disease_terms(np.nan) == []
        assert split_disease_terms(None) == []
        assert split_disease_terms("a|b", sep="|") == ["a", "b"]

    def test_unique_terms(self):
        """Should collect sorted unique terms without controls."""
        df = pd.DataFrame({"disease": ["healthy", "T2D;IBD", "IBD", np.nan, "Healthy"]})

        assert unique_disease_terms(df) == ["ibd", "t2d"]
        assert unique_disease_terms(df, exclude=None) == ["healthy", "ibd", "t2d"]

    def test_unique_terms_missing_column(self):
        """Should raise for an absent disease column."""
        with pytest.raises(ValueError, match="no disease column"):
            unique_disease_terms(pd.DataFrame({"age": [1]}))

    def test_annotate(self):
        """Should join the IDs of mapped terms in term order."""
        df = pd.DataFrame({"disease": ["T2D;IBD", "healthy", "IBD", "unknown"]})
        mapping = pd.DataFrame({
            "term": ["ibd", "t2d", "unknown"],
            "ontology_id": ["EFO:0003767", "EFO:0001360", np.nan],
        })

        out = annotate_diseases(df, mapping)

        assert out["disease_ontology_id"].iloc[0] == "EFO:0001360;EFO:0003767"
        assert pd.isna(out["disease_ontology_id"].iloc[1])
        assert out["disease_ontology_id"].iloc[2] == "EFO:0003767"
        assert pd.isna(out["disease_ontology_id"].iloc[3])
        assert "disease_ontology_id" not in df.columns


class TestOntologyLookupClient:
    """Tests for OntologyLookupClient."""

    def setup_method(self):
        """Set up test fixtures."""
        self.client = OntologyLookupClient(ontology="efo", pause=0)

    @patch("metaclean.disease.ontology.requests.get")
    def test_lookup_top_hit(self, mock_get):
        """Should return the first search hit."""
        mock_get.return_value = make_response([T2D_DOC])

        match = self.client.lookup("t2d")

        assert isinstance(match, OntologyMatch)
        assert match.term == "t2d"
        assert match.ontology_id == "EFO:0001360"
        assert match.label == "type 2 diabetes mellitus"
        assert match.ontology == "efo"

        _, kwargs = mock_get.call_args
        assert kwargs["params"]["q"] == "t2d"
        assert kwargs["params"]["ontology"] == "efo"
        assert kwargs["timeout"] == 10.0

    @patch("metaclean.disease.ontology.requests.get")
    def test_short_form_fallback(self, mock_get):
        """Should derive the ID from short_form when obo_id is absent."""
        doc = {k: v for k, v in T2D_DOC.items() if k != "obo_id"}
        mock_get.return_value = make_response([doc])

        assert self.client.lookup("t2d").ontology_id == "EFO:0001360"

    @patch("metaclean.disease.ontology.requests.get")
    def test_no_hits(self, mock_get):
        """Should return None when nothing matches."""
        mock_get.return_value = make_response([])

        assert self.client.lookup("not a disease") is None

    @patch("metaclean.disease.ontology.requests.get")
    def test_request_error(self, mock_get):
        """Network errors should leave the term unmapped."""
        mock_get.side_effect = requests.ConnectionError("connection refused")

        assert self.client.lookup("t2d") is None

    @patch("metaclean.disease.ontology.requests.get")
    def test_http_error(self, mock_get):
        """HTTP errors should leave the term unmapped."""
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("503")
        mock_get.return_value = response

        assert self.client.lookup("t2d") is None

    def test_session_used(self):
        """Should send requests through an injected session."""
        session = MagicMock()
        session.get.return_value = make_response([T2D_DOC])
        client = OntologyLookupClient(pause=0, session=session)

        assert client.lookup("t2d").ontology_id == "EFO:0001360"
        session.get.assert_called_once()

    @patch("metaclean.disease.ontology.requests.get")
    def test_map_terms(self, mock_get):
        """Should look up every term in order."""
        mock_get.side_effect = [make_response([T2D_DOC]), make_response([])]

        mapping = self.client.map_terms(["t2d", "mystery"], show_progress=False)

        assert list(mapping.columns) == MAPPING_COLUMNS
        assert mapping["term"].tolist() == ["t2d", "mystery"]
        assert mapping["ontology_id"].iloc[0] == "EFO:0001360"
        assert pd.isna(mapping["ontology_id"].iloc[1])
        assert mock_get.call_count == 2

    @patch("metaclean.disease.ontology.time.sleep")
    @patch("metaclean.disease.ontology.requests.get")
    def test_pause_between_requests(self, mock_get, mock_sleep):
        """Should pause between consecutive lookups only."""
        mock_get.return_value = make_response([])
        client = OntologyLookupClient(pause=0.5)

        client.map_terms(["a", "b", "c"], show_progress=False)

        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(0.5)
