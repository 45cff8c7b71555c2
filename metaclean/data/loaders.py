"""Readers and writers for sample metadata tables.

This module provides:
- MetadataLoader: CSV/TSV sample metadata table (one row per sample)
- write_table: CSV writer used for harmonized outputs
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Union
import logging

from metaclean.errors import MissingRequiredColumnError
from metaclean.types import REQUIRED_COLUMNS

logger = logging.getLogger(__name__)

TAB_SUFFIXES = {".tsv", ".tab", ".txt"}


class MetadataLoader:
    """Load and validate a sample metadata table.

    The table needs the age fields (age, infant_age, age_category); any
    other columns are kept as-is and ignored by the age pipeline.
    """

    def __init__(
        self,
        metadata_path: Union[str, Path],
        required_columns: Optional[list[str]] = None,
        sep: Optional[str] = None,
    ):
        """Initialize metadata loader.

        Args:
            metadata_path: Path to the metadata CSV/TSV file
            required_columns: Columns that must be present (default: age fields)
            sep: Field delimiter (default: tab for .tsv/.tab/.txt, comma otherwise)
        """
        self.metadata_path = Path(metadata_path)
        self.required_columns = (
            list(required_columns) if required_columns is not None else list(REQUIRED_COLUMNS)
        )

        if not self.metadata_path.exists():
            raise FileNotFoundError(f"Metadata table not found: {self.metadata_path}")

        if sep is None:
            sep = "\t" if self.metadata_path.suffix.lower() in TAB_SUFFIXES else ","
        self.sep = sep

        self.df = pd.read_csv(self.metadata_path, sep=self.sep, low_memory=False)
        self._validate_columns()

        logger.info(
            f"Loaded metadata with {len(self.df)} samples × {len(self.df.columns)} columns "
            f"from {self.metadata_path}"
        )

    def _validate_columns(self):
        """Validate the table has the required columns."""
        missing = [c for c in self.required_columns if c not in self.df.columns]
        if missing:
            raise MissingRequiredColumnError(missing)

    def __len__(self) -> int:
        return len(self.df)

    def __getitem__(self, idx: int) -> dict:
        """Get sample metadata by index."""
        return self.df.iloc[idx].to_dict()

    @property
    def columns(self) -> list[str]:
        return self.df.columns.tolist()


def write_table(df: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write a table as comma-separated text with a header and no index.

    Args:
        df: Table to write
        path: Destination file; parent directories are created

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info(f"Saved {len(df)} rows × {len(df.columns)} columns to {path}")
    return path
