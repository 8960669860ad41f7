"""CSV ingestion: polars-backed parsing of uploaded publisher performance exports."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Sequence

import polars as pl

from media_attribution.config import NUMERIC_COLUMNS, REQUIRED_COLUMNS
from media_attribution.domain.errors import CsvInputError, EmptyInputError, ParseError, ValidationError
from media_attribution.domain.models import RawRecord

logger = logging.getLogger(__name__)

THOUSANDS_SEPARATOR = ","


@dataclass(frozen=True)
class ParseResult:
    records: tuple[RawRecord, ...]
    error: CsvInputError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_number_string(value: Any) -> float:
    """Lenient numeric cell conversion: thousands separators stripped, anything unparseable is 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else 0.0
    cleaned = str(value).strip().replace(THOUSANDS_SEPARATOR, "")
    if not cleaned or "_" in cleaned:
        return 0.0
    try:
        parsed = float(cleaned)
    except ValueError:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def parse_integer_string(value: Any) -> int:
    return int(parse_number_string(value))


def _normalize_headers(raw_headers: Sequence[Any]) -> list[str]:
    headers: list[str] = []
    seen: dict[str, int] = {}
    for idx, value in enumerate(raw_headers):
        base = str(value).strip() if value not in (None, "") else f"column_{idx + 1}"
        if not base:
            base = f"column_{idx + 1}"
        count = seen.get(base, 0)
        name = base if count == 0 else f"{base}_{count + 1}"
        seen[base] = count + 1
        headers.append(name)
    return headers


def _read_csv_polars(payload: bytes, truncate_ragged_lines: bool = False) -> pl.DataFrame:
    return pl.read_csv(
        payload,
        has_header=True,
        infer_schema=False,
        truncate_ragged_lines=truncate_ragged_lines,
    )


def _error_summary(exc: Exception) -> str:
    lines = [line.strip() for line in str(exc).splitlines() if line.strip()]
    return lines[0] if lines else type(exc).__name__


def _blank_row_expr(columns: Sequence[str]) -> pl.Expr:
    return pl.all_horizontal(
        [pl.col(column).is_null() | (pl.col(column).str.strip_chars() == "") for column in columns]
    )


def _metric_text_expr(column_name: str) -> pl.Expr:
    return pl.col(column_name).cast(pl.Utf8, strict=False).str.strip_chars()


def _metric_parsed_expr(column_name: str) -> pl.Expr:
    return (
        _metric_text_expr(column_name)
        .str.replace_all(THOUSANDS_SEPARATOR, "", literal=True)
        .cast(pl.Float64, strict=False)
    )


def _metric_parse_error_expr(column_name: str) -> pl.Expr:
    text_expr = _metric_text_expr(column_name)
    parsed_expr = _metric_parsed_expr(column_name)
    return (
        (text_expr.is_not_null() & (text_expr != "") & (parsed_expr.is_null() | ~parsed_expr.is_finite()))
        .cast(pl.UInt32)
        .sum()
        .alias(column_name)
    )


def _metric_expr(column_name: str) -> pl.Expr:
    parsed_expr = _metric_parsed_expr(column_name)
    return pl.when(parsed_expr.is_finite()).then(parsed_expr).otherwise(0.0).alias(column_name)


def _log_metric_parse_errors(df: pl.DataFrame, metric_columns: Sequence[str]) -> None:
    targets = [column for column in metric_columns if column in df.columns]
    if df.is_empty() or not targets:
        return
    counts = df.select([_metric_parse_error_expr(column) for column in targets]).row(0, named=True)
    for column, count in counts.items():
        if count:
            logger.warning(
                "%d of %d '%s' cells could not be parsed and were counted as 0",
                int(count),
                df.height,
                column,
            )


def _read_ragged_csv(payload: bytes, first_error: Exception) -> pl.DataFrame:
    """Second read that drops fields beyond the header, e.g. a trailing delimiter on data rows."""
    try:
        frame = _read_csv_polars(payload, truncate_ragged_lines=True)
    except pl.exceptions.PolarsError as exc:
        raise ParseError(_error_summary(first_error)) from exc
    logger.warning("Some rows had more fields than the header; the extra fields were ignored")
    return frame


def read_csv_frame(text: str) -> pl.DataFrame:
    """Read CSV text into a text-typed frame with trimmed headers and no blank rows.

    Raises:
        EmptyInputError: the document has no data rows.
        ParseError: the CSV reader rejected the document.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        raise EmptyInputError()

    payload = text.encode("utf-8")
    try:
        raw_df = _read_csv_polars(payload)
    except pl.exceptions.NoDataError as exc:
        raise EmptyInputError() from exc
    except pl.exceptions.ComputeError as exc:
        raw_df = _read_ragged_csv(payload, exc)
    except pl.exceptions.PolarsError as exc:
        raise ParseError(_error_summary(exc)) from exc

    frame = raw_df.clone()
    frame.columns = _normalize_headers(raw_df.columns)
    if frame.width == 0:
        raise EmptyInputError()
    return frame.filter(~_blank_row_expr(frame.columns))


def missing_required_columns(columns: Sequence[str]) -> list[str]:
    present = set(columns)
    return [column for column in REQUIRED_COLUMNS if column not in present]


def normalize_metrics(frame: pl.DataFrame) -> pl.DataFrame:
    _log_metric_parse_errors(frame, NUMERIC_COLUMNS)
    return frame.with_columns([_metric_expr(column) for column in NUMERIC_COLUMNS if column in frame.columns])


def parse_csv_text(text: str) -> ParseResult:
    """Parse an uploaded CSV document; errors come back on the result instead of being raised."""
    try:
        frame = read_csv_frame(text)
        if frame.is_empty():
            raise EmptyInputError()

        missing = missing_required_columns(frame.columns)
        if missing:
            raise ValidationError(missing)
    except CsvInputError as exc:
        logger.info("CSV rejected: %s", exc)
        return ParseResult(records=(), error=exc)

    normalized = normalize_metrics(frame)
    records = tuple(RawRecord.from_row(row) for row in normalized.iter_rows(named=True))
    logger.info("Parsed %d rows from CSV", len(records))
    return ParseResult(records=records)
