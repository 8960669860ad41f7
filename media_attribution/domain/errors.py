"""Input error taxonomy for uploaded CSV documents."""

from __future__ import annotations

from typing import Sequence


class CsvInputError(ValueError):
    """Base class for errors that make an upload unusable."""


class EmptyInputError(CsvInputError):
    def __init__(self, message: str = "CSV file is empty. Please upload a file with data.") -> None:
        super().__init__(message)


class ValidationError(CsvInputError):
    def __init__(self, missing_columns: Sequence[str]) -> None:
        self.missing_columns: list[str] = list(missing_columns)
        super().__init__(f"CSV is missing required columns: {', '.join(self.missing_columns)}")


class ParseError(CsvInputError):
    def __init__(self, cause: str) -> None:
        self.cause = cause
        super().__init__(f"Failed to parse CSV: {cause}")
