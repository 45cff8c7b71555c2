"""Unit tests for the ingest & filter stage."""

import pytest
import numpy as np
import pandas as pd

from metaclean.age.ingest import (
    select_age_columns,
    is_age_column,
    ingest_age_records,
    normalize_categories,
)
from metaclean.errors import InvalidCategoryValueError, MissingRequiredColumnError


class TestSelectAgeColumns:
    """Tests for age column selection."""

    def test_token_matches(self):
        """Should keep age, age_* and *_age columns in order."""
        columns = [
            "sample_id", "age", "disease", "infant_age", "age_category",
            "disease_stage", "average_age", "dosage", "image_path", "stage",
        ]

        assert select_age_columns(columns) == [
            "age", "infant_age", "age_category", "average_age"
        ]

    def test_rejects_substrings(self):
        """Should not match 'age' inside other words."""
        assert not is_age_column("disease_stage")
        assert not is_age_column("dosage")
        assert not is_age_column("agent")
        assert not is_age_column("image_path")

    def test_middle_token(self):
        """Should match age between underscores."""
        assert is_age_column("gestational_age_weeks")


class TestNormalizeCategories:
    """Tests for age_category validation."""

    def test_valid_values_pass(self):
        """Should keep recognized categories and missing values."""
        series = pd.Series(["adult", np.nan, "senior", "child", "  "], name="age_category")
        result = normalize_categories(series)

        assert result.tolist()[0] == "adult"
        assert pd.isna(result.tolist()[1])
        assert result.tolist()[2] == "senior"
        assert result.tolist()[3] == "child"
        assert pd.isna(result.tolist()[4])

    def test_infant_alias(self):
        """The output label 'infant' should read back as newborn."""
        result = normalize_categories(pd.Series(["infant", "newborn"], name="age_category"))
        assert result.tolist() == ["newborn", "newborn"]

    def test_invalid_value_raises(self):
        """Unknown categories should be surfaced, not coerced."""
        series = pd.Series(["adult", "toddler", "Adult"], name="age_category")

        with pytest.raises(InvalidCategoryValueError, match="toddler") as excinfo:
            normalize_categories(series)

        assert excinfo.value.values == ["Adult", "toddler"]

    def test_padded_value_raises(self):
        """Values with surrounding whitespace should not be stripped into a category."""
        series = pd.Series(["adult", " adult ", "child"], name="age_category")

        with pytest.raises(InvalidCategoryValueError) as excinfo:
            normalize_categories(series)

        assert excinfo.value.values == [" adult "]


class TestIngestAgeRecords:
    """Tests for ingest_age_records."""

    def setup_method(self):
        """Set up test fixtures."""
        self.df = pd.DataFrame({
            "sample_id": ["S1", "S2", "S3", "S4"],
            "age": [34, np.nan, np.nan, 70],
            "infant_age": [np.nan, 90, np.nan, np.nan],
            "age_category": ["adult", "newborn", np.nan, "senior"],
            "disease": ["healthy", "IBD", "T2D", "healthy"],
            "disease_stage": ["I", "II", "III", "I"],
        })

    def test_drops_rows_without_age_information(self):
        """Should drop samples where all three age fields are missing."""
        records, num_dropped = ingest_age_records(self.df)

        assert num_dropped == 1
        assert len(records) == 3
        assert "S3" not in self.df.loc[records.index, "sample_id"].tolist()

    def test_keeps_only_age_and_id_columns(self):
        """Should select the age columns plus requested id columns."""
        records, _ = ingest_age_records(self.df, id_columns=["sample_id"])

        assert list(records.columns) == ["sample_id", "age", "infant_age", "age_category"]

    def test_missing_required_column(self):
        """Should raise when a required column is absent."""
        df = self.df.drop(columns=["infant_age"])

        with pytest.raises(MissingRequiredColumnError, match="missing required columns"):
            ingest_age_records(df)

    def test_missing_id_column(self):
        """Should raise when a requested id column is absent."""
        with pytest.raises(MissingRequiredColumnError):
            ingest_age_records(self.df, id_columns=["run_id"])

    def test_numeric_parsing(self):
        """Should parse numeric text and blanks."""
        df = pd.DataFrame({
            "age": ["12", " ", "40"],
            "infant_age": [np.nan, "200", np.nan],
            "age_category": ["schoolage", "newborn", "adult"],
        })
        records, _ = ingest_age_records(df)

        assert records["age"].iloc[0] == 12.0
        assert np.isnan(records["age"].iloc[1])
        assert records["infant_age"].iloc[1] == 200.0

    def test_non_numeric_age_raises(self):
        """Should raise on non-numeric ages."""
        df = pd.DataFrame({
            "age": ["twelve"],
            "infant_age": [np.nan],
            "age_category": ["schoolage"],
        })

        with pytest.raises(ValueError, match="non-numeric"):
            ingest_age_records(df)

    def test_does_not_mutate_input(self):
        """Should work on a copy of the input table."""
        before = self.df.copy()
        ingest_age_records(self.df)

        pd.testing.assert_frame_equal(self.df, before)
