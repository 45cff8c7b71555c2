"""Disease term lookup against the EBI Ontology Lookup Service (OLS4).

Terms are looked up one by one with a fixed pause between requests. A
failed request leaves the term unmapped; there are no retries.
"""

import time
import logging
from typing import Iterable, Optional

import pandas as pd
import requests
from tqdm import tqdm

from metaclean.types import OntologyMatch

logger = logging.getLogger(__name__)

OLS_SEARCH_URL = "https://www.ebi.ac.uk/ols4/api/search"

MAPPING_COLUMNS = ["term", "ontology_id", "label", "ontology", "iri"]


class OntologyLookupClient:
    """Sequential client for the OLS4 search endpoint."""

    def __init__(
        self,
        base_url: str = OLS_SEARCH_URL,
        ontology: str = "efo",
        rows: int = 1,
        timeout: float = 10.0,
        pause: float = 0.3,
        session: Optional[requests.Session] = None,
    ):
        """Initialize lookup client.

        Args:
            base_url: OLS search endpoint
            ontology: Ontology to restrict the search to (e.g. efo, mondo, doid)
            rows: Number of hits requested per term
            timeout: Request timeout in seconds
            pause: Seconds to wait between consecutive requests
            session: Optional requests session (default: module-level requests)
        """
        self.base_url = base_url
        self.ontology = ontology
        self.rows = rows
        self.timeout = timeout
        self.pause = pause
        self.session = session

    def _get(self, params: dict) -> requests.Response:
        if self.session is not None:
            return self.session.get(self.base_url, params=params, timeout=self.timeout)
        return requests.get(self.base_url, params=params, timeout=self.timeout)

    def lookup(self, term: str) -> Optional[OntologyMatch]:
        """Look up one term and return its top hit.

        Args:
            term: Normalized disease term

        Returns:
            OntologyMatch for the best hit, or None if nothing matched or
            the request failed
        """
        params = {
            "q": term,
            "ontology": self.ontology,
            "rows": self.rows,
            "start": 0,
            "format": "json",
        }

        try:
            response = self._get(params)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Lookup failed for '{term}': {e}")
            return None

        docs = data.get("response", {}).get("docs", [])
        if not docs:
            logger.debug(f"No ontology match for '{term}'")
            return None

        doc = docs[0]
        ontology_id = doc.get("obo_id") or doc.get("short_form", "").replace("_", ":")
        if not ontology_id:
            return None

        return OntologyMatch(
            term=term,
            ontology_id=ontology_id,
            label=doc.get("label", ""),
            ontology=doc.get("ontology_name", self.ontology),
            iri=doc.get("iri", ""),
        )

    def map_terms(self, terms: Iterable[str], show_progress: bool = True) -> pd.DataFrame:
        """Look up every term in order.

        Args:
            terms: Terms to look up
            show_progress: Whether to display a progress bar

        Returns:
            DataFrame with columns term, ontology_id, label, ontology, iri;
            unmapped terms have missing ontology fields
        """
        terms = list(terms)
        rows = []

        for i, term in enumerate(tqdm(terms, desc="Ontology lookup", disable=not show_progress)):
            match = self.lookup(term)
            if match is not None:
                rows.append(match.to_dict())
            else:
                rows.append({"term": term})

            if self.pause and i < len(terms) - 1:
                time.sleep(self.pause)

        mapping = pd.DataFrame(rows, columns=MAPPING_COLUMNS)
        mapped = int(mapping["ontology_id"].notna().sum())
        logger.info(f"Mapped {mapped}/{len(terms)} terms to {self.ontology}")

        return mapping
