"""Excel output with polars/xlsxwriter first and an openpyxl fallback."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict

import polars as pl

logger = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31


def _import_openpyxl() -> Any:
    try:
        from openpyxl import Workbook
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("openpyxl is required for Excel fallback output.") from exc
    return Workbook


def _excel_cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, bool, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def _write_with_polars(path: Path, sheets: Dict[str, pl.DataFrame]) -> bool:
    try:
        from xlsxwriter import Workbook
    except ImportError:
        return False

    try:
        with Workbook(str(path)) as workbook:
            for sheet_name, frame in sheets.items():
                frame.write_excel(workbook=workbook, worksheet=str(sheet_name)[:MAX_SHEET_NAME_LENGTH])
        return True
    except Exception as exc:
        logger.debug("polars Excel writer failed, falling back to openpyxl: %s", exc)
        return False


def _write_with_openpyxl(path: Path, sheets: Dict[str, pl.DataFrame]) -> None:
    Workbook = _import_openpyxl()
    workbook = Workbook()
    default_sheet = workbook.active
    workbook.remove(default_sheet)

    for sheet_name, frame in sheets.items():
        worksheet = workbook.create_sheet(title=str(sheet_name)[:MAX_SHEET_NAME_LENGTH])
        worksheet.append(frame.columns)
        for row in frame.iter_rows(named=False):
            worksheet.append([_excel_cell_value(value) for value in row])

    workbook.save(path)


def write_output_excel(path: str | Path, sheets: Dict[str, pl.DataFrame]) -> None:
    excel_path = Path(path)
    excel_path.parent.mkdir(parents=True, exist_ok=True)
    if not sheets:
        raise ValueError("At least one sheet is required for an Excel export")

    if _write_with_polars(excel_path, sheets):
        return
    _write_with_openpyxl(excel_path, sheets)


def save_output_workbook(path: Path, sheets: Dict[str, pl.DataFrame]) -> tuple[bool, str]:
    try:
        write_output_excel(path, sheets)
    except PermissionError as exc:
        return False, str(exc)
    return True, ""
