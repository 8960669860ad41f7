"""Shared numeric/formatting utilities for reporting."""

from __future__ import annotations

from media_attribution.comparison import CHANGE_EPSILON


def fmt_money(value: float | None) -> str:
    if value is None:
        return "$0.00"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def fmt_money_compact(value: float | None) -> str:
    if value is None:
        return "$0"
    abs_value = abs(value)
    if abs_value >= 1_000_000:
        return f"${abs_value / 1_000_000:.1f}M"
    if abs_value >= 1_000:
        return f"${abs_value / 1_000:.0f}K"
    return f"${abs_value:.0f}"


def fmt_count(value: int | float | None) -> str:
    if value is None:
        return "0"
    return f"{int(value):,}"


def fmt_share(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.1f}%"


def fmt_change(value: float | None) -> str:
    """Signed percent change with one decimal; ``None`` means no indicator."""
    if value is None:
        return "-"
    if abs(value) < CHANGE_EPSILON:
        return "-"
    return f"{value:+.1f}%"
