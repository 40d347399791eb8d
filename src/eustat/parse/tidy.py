"""Reshape raw bulk datasets into tidy row-column-value tables."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from eustat.errors import ValidationError
from eustat.parse.bulk import RawDataset
from eustat.parse.periods import FREQUENCIES, TIME_FORMATS, convert_periods, frequencies_of, parse_period

TIME_COLUMN = "time"
VALUES_COLUMN = "values"
RESERVED_COLUMNS = (TIME_COLUMN, VALUES_COLUMN)


def tidy_dataset(
    raw: RawDataset,
    *,
    time_format: str = "date",
    select_time: str | None = None,
    typed_columns: bool = True,
) -> pd.DataFrame:
    """Convert a raw bulk dataset into the tidy (RCV) layout.

    One column per dimension in composite-key order, then ``time`` and
    ``values``. Unparsable cells become NaN; rows are never dropped.
    """

    check_time_format(time_format)
    check_select_time(select_time)

    keys = _split_keys(raw)
    dimension_names = list(keys.columns)

    period_columns = raw.period_columns
    if select_time is not None:
        period_columns = _select_frequency(period_columns, select_time)
    if time_format != "raw":
        frequencies = frequencies_of(period_columns)
        if len(frequencies) > 1:
            raise ValidationError(
                f"Data includes several time frequencies {frequencies}; select one with "
                "select_time or use time_format='raw'."
            )

    if raw.frame.empty or not period_columns:
        long = _empty_table(dimension_names)
    else:
        wide = pd.concat([keys, raw.frame[period_columns]], axis=1)
        long = wide.melt(
            id_vars=dimension_names,
            value_vars=period_columns,
            var_name=TIME_COLUMN,
            value_name=VALUES_COLUMN,
        )
        long[VALUES_COLUMN] = parse_values(long[VALUES_COLUMN])

    long[TIME_COLUMN] = convert_periods(long[TIME_COLUMN], time_format)
    long = long[[*dimension_names, TIME_COLUMN, VALUES_COLUMN]].reset_index(drop=True)
    return apply_column_types(long, typed=typed_columns)


def parse_values(cells: pd.Series) -> pd.Series:
    """Strip flag markers (``12.1 e``) and coerce to float; ``:`` becomes NaN."""

    first_token = cells.astype(str).str.split().str[0]
    return pd.to_numeric(first_token, errors="coerce").astype("float64")


def apply_column_types(frame: pd.DataFrame, *, typed: bool) -> pd.DataFrame:
    """Encode string columns as categoricals in order of first appearance.

    With ``typed=False`` the frame is returned unchanged.
    """

    if not typed:
        return frame

    typed_frame = frame.copy()
    for col in typed_frame.columns:
        if col == VALUES_COLUMN:
            continue
        series = typed_frame[col]
        if pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series):
            typed_frame[col] = pd.Categorical(series, categories=pd.unique(series.dropna()))
    return typed_frame


def dimension_names_for(labels: Sequence[str], width: int) -> list[str]:
    """Name `width` key parts from header `labels`, falling back to ``dim_<n>``."""

    header = [label.strip() for label in labels[:width]]
    names: list[str] = []
    for position in range(width):
        label = header[position] if position < len(header) else ""
        if not label or label in RESERVED_COLUMNS or label in names:
            suffix = position + 1
            label = f"dim_{suffix}"
            while label in names or label in header:
                suffix += 1
                label = f"dim_{suffix}"
        names.append(label)
    return names


def check_time_format(time_format: str) -> None:
    if time_format not in TIME_FORMATS:
        raise ValidationError(f"time_format must be one of {TIME_FORMATS}, got {time_format!r}.")


def check_select_time(select_time: str | None) -> None:
    if select_time is not None and select_time not in FREQUENCIES:
        raise ValidationError(f"select_time must be one of {FREQUENCIES} or None, got {select_time!r}.")


def _split_keys(raw: RawDataset) -> pd.DataFrame:
    """Split the composite key column into one column per dimension."""

    parts = raw.frame[raw.key_column].astype(str).str.split(raw.delimiter, expand=True)
    width = max(len(raw.dimensions), parts.shape[1])
    parts = parts.reindex(columns=range(width))
    parts.columns = dimension_names_for(raw.dimensions, width)
    return parts


def _select_frequency(period_columns: Sequence[str], select_time: str) -> list[str]:
    """Keep period columns of frequency `select_time`; labels that do not decode never match."""

    selected: list[str] = []
    available: dict[str, None] = {}
    for label in period_columns:
        try:
            frequency = parse_period(label).frequency
        except ValidationError:
            continue
        available.setdefault(frequency, None)
        if frequency == select_time:
            selected.append(label)

    if period_columns and not selected:
        raise ValidationError(
            f"Frequency {select_time!r} not present in dataset; available: {list(available)}."
        )
    return selected


def _empty_table(dimension_names: Sequence[str]) -> pd.DataFrame:
    columns = {name: pd.Series([], dtype=object) for name in dimension_names}
    columns[TIME_COLUMN] = pd.Series([], dtype=object)
    columns[VALUES_COLUMN] = pd.Series([], dtype="float64")
    return pd.DataFrame(columns)


__all__ = [
    "RESERVED_COLUMNS",
    "TIME_COLUMN",
    "VALUES_COLUMN",
    "apply_column_types",
    "check_select_time",
    "check_time_format",
    "dimension_names_for",
    "parse_values",
    "tidy_dataset",
]
