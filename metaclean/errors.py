"""Error kinds raised by the age harmonization pipeline."""

from typing import Iterable, Optional


class HarmonizationError(ValueError):
    """Base class for errors that abort a harmonization run."""


class MissingRequiredColumnError(HarmonizationError):
    """A required source column is absent from the input table."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Metadata table missing required columns: {self.missing}")


class EmptyReferenceDistributionError(HarmonizationError):
    """A category needing imputation has no observed values to impute from."""

    def __init__(self, category: str, num_missing: int):
        self.category = category
        self.num_missing = num_missing
        super().__init__(
            f"Cannot impute {num_missing} rows in category '{category}': "
            f"no observed ages in that category"
        )


class InvalidCategoryValueError(HarmonizationError):
    """age_category holds values outside the recognized categories."""

    def __init__(self, values: Iterable[str], allowed: Optional[Iterable[str]] = None):
        self.values = sorted(str(v) for v in values)
        self.allowed = list(allowed) if allowed is not None else []
        message = f"Invalid age_category values: {self.values}"
        if self.allowed:
            message += f" (expected one of {self.allowed})"
        super().__init__(message)
