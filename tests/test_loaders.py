"""Unit tests for metadata loaders and writers."""

import pytest
import pandas as pd

from metaclean.data.loaders import MetadataLoader, write_table
from metaclean.errors import MissingRequiredColumnError


class TestMetadataLoader:
    """Tests for MetadataLoader."""

    def test_load_csv(self, tmp_path):
        """Should load a valid metadata CSV."""
        path = tmp_path / "metadata.csv"
        path.write_text(
            "sample_id,age,infant_age,age_category,disease\n"
            "S1,34,,adult,healthy\n"
            "S2,,90,newborn,IBD\n"
        )

        loader = MetadataLoader(path)

        assert len(loader) == 2
        assert loader.sep == ","
        assert loader.columns == ["sample_id", "age", "infant_age", "age_category", "disease"]
        assert loader[1]["infant_age"] == 90

    def test_load_tsv(self, tmp_path):
        """Should detect tab-separated files by suffix."""
        path = tmp_path / "metadata.tsv"
        path.write_text(
            "sample_id\tage\tinfant_age\tage_category\n"
            "S1\t34\t\tadult\n"
        )

        loader = MetadataLoader(path)

        assert loader.sep == "\t"
        assert loader[0]["age"] == 34

    def test_missing_file(self, tmp_path):
        """Should raise for a missing file."""
        with pytest.raises(FileNotFoundError, match="not found"):
            MetadataLoader(tmp_path / "nonexistent.csv")

    def test_missing_required_columns(self, tmp_path):
        """Should raise error for missing required columns."""
        path = tmp_path / "metadata.csv"
        path.write_text("sample_id,age\nS1,34\n")

        with pytest.raises(MissingRequiredColumnError, match="missing required columns") as excinfo:
            MetadataLoader(path)

        assert excinfo.value.missing == ["infant_age", "age_category"]

    def test_custom_required_columns(self, tmp_path):
        """Should validate caller-provided required columns."""
        path = tmp_path / "metadata.csv"
        path.write_text("sample_id,disease\nS1,IBD\n")

        loader = MetadataLoader(path, required_columns=["disease"])

        assert len(loader) == 1


class TestWriteTable:
    """Tests for write_table."""

    def test_writes_header_without_index(self, tmp_path):
        """Should write a header line and no index column."""
        df = pd.DataFrame({"Source": ["age"], "Harmonized_Value": [34.0]})
        path = write_table(df, tmp_path / "out" / "ages.csv")

        lines = path.read_text().splitlines()
        assert lines[0] == "Source,Harmonized_Value"
        assert lines[1] == "age,34.0"

    def test_roundtrip(self, tmp_path):
        """Written tables should read back unchanged."""
        df = pd.DataFrame({"a": [1, 2], "b": ["x", "y"]})
        path = write_table(df, tmp_path / "t.csv")

        pd.testing.assert_frame_equal(pd.read_csv(path), df)
