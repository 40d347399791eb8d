"""Local cache helpers for tidy Eurostat tables.

One parquet file per (dataset id, time format, frequency selector, typing
mode). Entries never expire; they are replaced by a forced update or removed
with :func:`clean_cache`.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from eustat.config.models import EustatConfig
from eustat.errors import CacheCorruptionError, CacheMissError, ConfigurationError, ValidationError
from eustat.parse.tidy import check_select_time, check_time_format
from eustat.util.paths import expand_dir, temp_cache_root

LOGGER = logging.getLogger(__name__)

CACHE_SUFFIX = ".parquet"
PARTIAL_SUFFIX = ".partial"


def resolve_cache_dir(cache_dir: str | Path | None = None, *, config: EustatConfig) -> Path:
    """Return the cache directory: explicit argument, configured default, then temp fallback.

    An explicit directory must already exist; the other two are created on demand.
    """

    if cache_dir is not None:
        explicit = expand_dir(cache_dir)
        if not explicit.is_dir():
            raise ConfigurationError(f"The folder {explicit} does not exist")
        return explicit

    if config.cache.dir is not None:
        root = expand_dir(config.cache.dir)
    else:
        root = temp_cache_root(config.cache.temp_subdir)
    root.mkdir(parents=True, exist_ok=True)
    return root


def cache_path_for(
    dataset_id: str,
    *,
    time_format: str,
    select_time: str | None,
    typed_columns: bool,
    root: Path,
) -> Path:
    """Return the cache entry path for a request.

    Mirrors ``<id>_<time_format>_<select_time>_<typed>.parquet``; the trailing
    fields come from closed vocabularies so distinct requests never share a file.
    """

    check_dataset_id(dataset_id)
    check_time_format(time_format)
    check_select_time(select_time)
    name = f"{dataset_id}_{time_format}_{select_time or ''}_{bool(typed_columns)}{CACHE_SUFFIX}"
    return root / name


def check_dataset_id(dataset_id: str) -> None:
    if not isinstance(dataset_id, str) or not dataset_id.strip():
        raise ValidationError("Dataset id must be a non-empty string.")
    if any(sep in dataset_id for sep in ("/", "\\", os.sep)) or dataset_id in {".", ".."}:
        raise ValidationError(f"Dataset id {dataset_id!r} must not contain path separators.")


def load_table(path: Path) -> pd.DataFrame:
    """Read a cached tidy table."""

    if not path.is_file():
        raise CacheMissError(f"No cache entry at {path}")
    try:
        return pd.read_parquet(path, engine="pyarrow")
    except (OSError, ValueError, pa.ArrowException) as exc:
        raise CacheCorruptionError(
            f"Cache entry {path} is unreadable; rerun with force_update=True or clean the cache."
        ) from exc


def save_table(path: Path, frame: pd.DataFrame) -> Path:
    """Persist `frame` at `path`, replacing any existing entry atomically."""

    if not isinstance(frame, pd.DataFrame):
        raise TypeError("frame must be a pandas DataFrame")

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=PARTIAL_SUFFIX)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        pq.write_table(_to_arrow(frame), tmp_path)
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return path


def _to_arrow(frame: pd.DataFrame) -> pa.Table:
    """Convert `frame` for parquet, giving all-null string columns a concrete string type.

    Empty or all-missing object and categorical columns otherwise infer the arrow
    `null` type and come back from parquet as plain objects.
    """

    table = pa.Table.from_pandas(frame, preserve_index=False)
    for position, field in enumerate(table.schema):
        if pa.types.is_null(field.type):
            retyped = pa.nulls(table.num_rows, type=pa.string())
        elif pa.types.is_dictionary(field.type) and pa.types.is_null(field.type.value_type):
            retyped = pa.nulls(table.num_rows, type=pa.dictionary(field.type.index_type, pa.string()))
        else:
            continue
        table = table.set_column(position, field.with_type(retyped.type), retyped)
    return table


def clean_cache(cache_dir: str | Path | None = None, *, config: EustatConfig) -> int:
    """Delete every cache entry (and stray partial writes) in the resolved directory."""

    root = resolve_cache_dir(cache_dir, config=config)
    removed = 0
    for entry in sorted(root.iterdir()):
        if entry.is_file() and entry.name.endswith((CACHE_SUFFIX, PARTIAL_SUFFIX)):
            entry.unlink()
            removed += 1
    LOGGER.info("Removed %s cache file(s) from %s", removed, root)
    return removed


__all__ = [
    "CACHE_SUFFIX",
    "cache_path_for",
    "check_dataset_id",
    "clean_cache",
    "load_table",
    "resolve_cache_dir",
    "save_table",
]
