"""Eurostat period label decoding.

Bulk files label time columns with a year followed by an optional sub-annual
marker. Two encodings are in circulation: the legacy bulk facility
(``2015``, ``2015S1``, ``2015Q1``, ``2015M01``, ``2015M01D15``) and the
dissemination API (``2015``, ``2015-S1``, ``2015-Q1``, ``2015-01``,
``2015-01-15``). Both decode to the same frequency codes ``Y``, ``S``, ``Q``,
``M`` and ``D``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, timedelta
from typing import NamedTuple

import pandas as pd
from dateutil.relativedelta import relativedelta

from eustat.errors import ValidationError

FREQUENCIES = ("Y", "S", "Q", "M", "D")
TIME_FORMATS = ("date", "date_last", "num", "raw")

# Checked in order; the daily pattern must precede the monthly one.
_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("D", re.compile(r"^(\d{4})(?:M|-)(\d{2})(?:D|-)(\d{2})$")),
    ("M", re.compile(r"^(\d{4})(?:M|-)(\d{2})$")),
    ("Q", re.compile(r"^(\d{4})-?Q([1-4])$")),
    ("S", re.compile(r"^(\d{4})-?S([12])$")),
    ("Y", re.compile(r"^(\d{4})$")),
)

_MONTHS_PER_PERIOD = {"Y": 12, "S": 6, "Q": 3, "M": 1}
_PERIODS_PER_YEAR = {"Y": 1, "S": 2, "Q": 4, "M": 12}


class Period(NamedTuple):
    """A decoded period label."""

    frequency: str
    first_day: date
    last_day: date
    decimal_year: float


def period_frequency(label: str) -> str:
    """Return the frequency code of `label`."""
    return parse_period(label).frequency


def parse_period(label: str) -> Period:
    """Decode a single period label, raising ValidationError if unparsable."""

    text = str(label).strip()
    for frequency, pattern in _PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        year = int(match.group(1))
        if frequency == "D":
            try:
                day = date(year, int(match.group(2)), int(match.group(3)))
            except ValueError as exc:
                raise ValidationError(f"Invalid calendar day in period label {label!r}.") from exc
            year_start = date(year, 1, 1)
            days_in_year = (date(year + 1, 1, 1) - year_start).days
            offset = (day - year_start).days / days_in_year
            return Period("D", day, day, year + offset)

        index = int(match.group(2)) if frequency != "Y" else 1
        if frequency == "M" and not 1 <= index <= 12:
            raise ValidationError(f"Invalid month in period label {label!r}.")
        span = _MONTHS_PER_PERIOD[frequency]
        first_day = date(year, (index - 1) * span + 1, 1)
        last_day = first_day + relativedelta(months=span) - timedelta(days=1)
        decimal_year = year + (index - 1) / _PERIODS_PER_YEAR[frequency]
        return Period(frequency, first_day, last_day, decimal_year)

    raise ValidationError(f"Unrecognised Eurostat period label {label!r}.")


def frequencies_of(labels: Iterable[str]) -> list[str]:
    """Return the distinct frequencies present in `labels`, in first-seen order."""

    seen: dict[str, None] = {}
    for label in labels:
        seen.setdefault(period_frequency(label), None)
    return list(seen)


def periods_to_date(labels: pd.Series, *, last: bool = False) -> pd.Series:
    """Map period labels to the first (or last) calendar day of each period."""

    lookup = {}
    for label in pd.unique(labels):
        period = parse_period(label)
        lookup[label] = pd.Timestamp(period.last_day if last else period.first_day)
    return pd.to_datetime(labels.map(lookup)).astype("datetime64[ns]")


def periods_to_num(labels: pd.Series) -> pd.Series:
    """Map period labels to decimal years, e.g. ``2015Q3`` to ``2015.5``."""

    lookup = {label: parse_period(label).decimal_year for label in pd.unique(labels)}
    return labels.map(lookup).astype("float64")


def convert_periods(labels: pd.Series, time_format: str) -> pd.Series:
    """Convert a series of period labels according to `time_format`."""

    if time_format == "date":
        return periods_to_date(labels)
    if time_format == "date_last":
        return periods_to_date(labels, last=True)
    if time_format == "num":
        return periods_to_num(labels)
    if time_format == "raw":
        return labels.astype(str)
    raise ValidationError(f"time_format must be one of {TIME_FORMATS}, got {time_format!r}.")


__all__ = [
    "FREQUENCIES",
    "Period",
    "TIME_FORMATS",
    "convert_periods",
    "frequencies_of",
    "parse_period",
    "period_frequency",
    "periods_to_date",
    "periods_to_num",
]
