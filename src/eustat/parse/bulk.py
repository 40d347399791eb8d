"""Eurostat bulk TSV reader.

A bulk file has one header row whose first cell packs the dimension labels
and the time marker (``unit,vehicle,geo\\time``), followed by one column per
period. Each data row starts with the matching composite key
(``PC,BUS_TOT,AT``) and carries cells such as ``9.9``, ``12.1 e`` or ``:``.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from eustat.errors import ValidationError

GZIP_MAGIC = b"\x1f\x8b"
KEY_DELIMITER = ","
TIME_MARKER = "\\"


@dataclass(frozen=True)
class RawDataset:
    """A bulk dataset as delivered: composite key column plus period columns, all strings."""

    frame: pd.DataFrame
    key_column: str
    dimensions: list[str] = field(default_factory=list)
    delimiter: str = KEY_DELIMITER

    @property
    def period_columns(self) -> list[str]:
        return [col for col in self.frame.columns if col != self.key_column]

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, *, delimiter: str = KEY_DELIMITER) -> "RawDataset":
        """Build a RawDataset from a frame whose first column is the composite key."""

        if frame.columns.empty:
            raise ValidationError("Bulk dataset has no header row.")
        key_column = str(frame.columns[0])
        labels = key_column.split(TIME_MARKER, 1)[0]
        dimensions = [label.strip() for label in labels.split(delimiter)]
        return cls(frame=frame, key_column=key_column, dimensions=dimensions, delimiter=delimiter)


def read_bulk_tsv(source: bytes | Path) -> RawDataset:
    """Parse a (possibly gzip-compressed) bulk TSV payload or file."""

    payload = source.read_bytes() if isinstance(source, Path) else source
    compression = "gzip" if payload[:2] == GZIP_MAGIC else None

    try:
        frame = pd.read_csv(
            io.BytesIO(payload),
            sep="\t",
            dtype=str,
            keep_default_na=False,
            compression=compression,
        )
    except pd.errors.EmptyDataError as exc:
        raise ValidationError("Bulk dataset payload is empty.") from exc
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as exc:
        raise ValidationError(f"Bulk dataset payload is not valid TSV: {exc}") from exc

    frame.columns = [str(col).strip() for col in frame.columns]
    for col in frame.columns:
        frame[col] = frame[col].str.strip()

    return RawDataset.from_frame(frame)


__all__ = ["GZIP_MAGIC", "KEY_DELIMITER", "RawDataset", "read_bulk_tsv"]
