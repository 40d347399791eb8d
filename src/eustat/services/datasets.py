"""Dataset retrieval: fetch, tidy and cache Eurostat tables."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from pathlib import Path

import pandas as pd

from eustat.config import EustatConfig, load_config
from eustat.config.models import SourceConfig
from eustat.errors import CacheMissError
from eustat.io.cache import cache_path_for, check_dataset_id, load_table, resolve_cache_dir, save_table
from eustat.io.fetcher import fetch_raw
from eustat.parse.bulk import RawDataset
from eustat.parse.tidy import check_select_time, check_time_format, tidy_dataset

LOGGER = logging.getLogger(__name__)

Fetcher = Callable[..., RawDataset]


class CacheAction(enum.Enum):
    """What a dataset request does with the network and the cache."""

    FETCH = "fetch"
    FETCH_AND_STORE = "fetch_and_store"
    LOAD = "load"


def decide_action(*, cache_enabled: bool, force_update: bool, entry_exists: bool) -> CacheAction:
    """Resolve the cache decision table.

    | cache | force | exists | action          |
    |-------|-------|--------|-----------------|
    | no    | -     | -      | FETCH           |
    | yes   | yes   | -      | FETCH_AND_STORE |
    | yes   | no    | no     | FETCH_AND_STORE |
    | yes   | no    | yes    | LOAD            |
    """

    if not cache_enabled:
        return CacheAction.FETCH
    if force_update or not entry_exists:
        return CacheAction.FETCH_AND_STORE
    return CacheAction.LOAD


def get_dataset(
    id: str,
    time_format: str = "date",
    select_time: str | None = None,
    cache: bool = True,
    force_update: bool = False,
    cache_dir: str | Path | None = None,
    typed_columns: bool = True,
    *,
    config: EustatConfig | None = None,
    fetcher: Fetcher | None = None,
) -> pd.DataFrame:
    """Return a Eurostat dataset as a tidy frame, using the local cache when possible.

    Columns are the dataset dimensions, ``time`` and ``values``. ``force_update``
    is combined with ``config.cache.update``; either one forces a fresh download.
    Argument and cache directory problems are raised before any request is made.
    """

    cfg = config if config is not None else load_config()
    fetch = fetcher if fetcher is not None else fetch_raw
    check_dataset_id(id)
    check_time_format(time_format)
    check_select_time(select_time)

    cache_file: Path | None = None
    if cache:
        force_update = force_update or cfg.cache.update
        root = resolve_cache_dir(cache_dir, config=cfg)
        cache_file = cache_path_for(
            id,
            time_format=time_format,
            select_time=select_time,
            typed_columns=typed_columns,
            root=root,
        )

    action = decide_action(
        cache_enabled=cache,
        force_update=force_update,
        entry_exists=cache_file is not None and cache_file.exists(),
    )

    if action is CacheAction.LOAD:
        assert cache_file is not None
        try:
            table = load_table(cache_file)
        except CacheMissError:
            LOGGER.info("Cache entry %s disappeared; downloading table %s", cache_file, id)
            action = CacheAction.FETCH_AND_STORE
        else:
            LOGGER.info("Table %s read from cache file: %s", id, cache_file)
            return table

    table = _fetch_tidy(
        id,
        fetcher=fetch,
        source=cfg.source,
        time_format=time_format,
        select_time=select_time,
        typed_columns=typed_columns,
    )

    if action is CacheAction.FETCH_AND_STORE:
        assert cache_file is not None
        save_table(cache_file, table)
        LOGGER.info("Table %s cached at %s", id, cache_file)

    return table


def _fetch_tidy(
    dataset_id: str,
    *,
    fetcher: Fetcher,
    source: SourceConfig,
    time_format: str,
    select_time: str | None,
    typed_columns: bool,
) -> pd.DataFrame:
    raw = fetcher(dataset_id, source=source)
    return tidy_dataset(
        raw,
        time_format=time_format,
        select_time=select_time,
        typed_columns=typed_columns,
    )


__all__ = ["CacheAction", "decide_action", "get_dataset"]
