"""Infrastructure adapter for reading uploaded CSV files."""

from __future__ import annotations

from pathlib import Path

from media_attribution.config import ACCEPTED_EXTENSIONS, ACCEPTED_MIME_TYPES
from media_attribution.domain.errors import ParseError

FILE_SIZE_UNITS: tuple[str, ...] = ("Bytes", "KB", "MB", "GB")


def validate_file_type(file_name: str, mime_type: str | None = None) -> bool:
    has_valid_extension = file_name.lower().endswith(ACCEPTED_EXTENSIONS)
    has_valid_mime_type = mime_type in ACCEPTED_MIME_TYPES
    return has_valid_extension or has_valid_mime_type


def read_upload_text(path: Path) -> str:
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise ParseError(str(exc)) from exc
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(str(exc)) from exc


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    exponent = 0
    while value >= 1024 and exponent < len(FILE_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {FILE_SIZE_UNITS[exponent]}"
