#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Value formatting for rendered reports.

Presentation rules:
    None / ""           -> "-"
    bool                -> check / cross glyph
    int                 -> as-is
    float               -> fixed decimals
    "YYYY-MM-DD"        -> DD/MM/YYYY
    ISO date-time       -> DD/MM/YYYY HH:MM
    "YYYY-MM"           -> Mon YYYY
"""

from datetime import date, datetime
from typing import Any, Mapping, Optional
import json
import re

from config.constants import (
    EMPTY_PLACEHOLDER, CHECK_GLYPH, CROSS_GLYPH, DEFAULT_NUMBER_DECIMALS,
)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")
ISO_MONTH = re.compile(r"^\d{4}-\d{2}$")

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

CHECKED_WORDS = {"true", "yes", "y", "1", "checked", "done", "completed", "ok", "pass", CHECK_GLYPH}


def _parse_datetime(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: Any) -> str:
    """DD/MM/YYYY, or the placeholder when the value is not a date"""
    if value is None or value == "":
        return EMPTY_PLACEHOLDER
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    parsed = _parse_datetime(str(value))
    if parsed is None:
        return str(value)
    return parsed.strftime("%d/%m/%Y")


def format_datetime(value: Any) -> str:
    """DD/MM/YYYY HH:MM"""
    if value is None or value == "":
        return EMPTY_PLACEHOLDER
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    parsed = _parse_datetime(str(value))
    if parsed is None:
        return str(value)
    return parsed.strftime("%d/%m/%Y %H:%M")


def format_month(value: str) -> str:
    year, month = value.split("-")[:2]
    index = int(month) - 1
    if not 0 <= index < 12:
        return value
    return f"{MONTH_NAMES[index]} {year}"


def format_number(value: Any, decimals: int = DEFAULT_NUMBER_DECIMALS) -> str:
    if isinstance(value, bool):
        return format_value(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.{decimals}f}"
    return str(value)


def format_value(value: Any, decimals: int = DEFAULT_NUMBER_DECIMALS) -> str:
    """Display string for any field value"""
    if value is None or value == "":
        return EMPTY_PLACEHOLDER
    if isinstance(value, bool):
        return CHECK_GLYPH if value else CROSS_GLYPH
    if isinstance(value, (int, float)):
        return format_number(value, decimals)
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, date):
        return format_date(value)
    if isinstance(value, str):
        if ISO_DATE.match(value):
            return format_date(value)
        if ISO_DATETIME.match(value):
            return format_datetime(value)
        if ISO_MONTH.match(value):
            return format_month(value)
        return value
    if isinstance(value, (list, tuple)):
        if not value:
            return EMPTY_PLACEHOLDER
        return ", ".join(format_value(v, decimals) for v in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def field_label(key: str, labels: Optional[Mapping[str, str]] = None) -> str:
    """Template label when known, otherwise snake_case as Title Case"""
    if labels and labels.get(key):
        return labels[key]
    short = key.split(".")[-1]
    return " ".join(part.capitalize() for part in short.split("_") if part)


def is_checked(status: Any) -> bool:
    """Truthy-like checklist status"""
    if isinstance(status, bool):
        return status
    if isinstance(status, (int, float)):
        return status != 0
    if isinstance(status, str):
        return status.strip().lower() in CHECKED_WORDS
    return False
