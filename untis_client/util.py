"""Utility helpers."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def format_date(day: date) -> int:
    """Encode a date the way the server expects it, e.g. ``20240115``."""
    return day.year * 10000 + day.month * 100 + day.day


def check_range(start: date, end: date) -> None:
    if start > end:
        raise ValueError(f"Start date {start} is after end date {end}")


def date_params(start: date, end: date) -> Dict[str, int]:
    return {"startDate": format_date(start), "endDate": format_date(end)}


def today() -> date:
    return date.today()
