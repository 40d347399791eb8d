from __future__ import annotations

import gzip
from collections.abc import Iterable, Sequence
from pathlib import Path

import requests

from eustat.config import EustatConfig, load_config
from eustat.parse.bulk import RawDataset, read_bulk_tsv

BUS_HEADER = "unit,vehicle,geo\\time"


def make_bulk_tsv(
    header: str,
    periods: Sequence[str],
    rows: Iterable[tuple[str, Sequence[str]]],
    *,
    compress: bool = False,
) -> bytes:
    """Build a bulk TSV payload; period labels get the trailing space the legacy files carry."""

    lines = ["\t".join([header, *(f"{label} " for label in periods)])]
    for key, cells in rows:
        lines.append("\t".join([key, *cells]))
    payload = ("\n".join(lines) + "\n").encode("utf-8")
    return gzip.compress(payload) if compress else payload


def bus_share_payload(*, compress: bool = False) -> bytes:
    return make_bulk_tsv(
        BUS_HEADER,
        ["1990", "1991", "1992"],
        [("PC,BUS_TOT,AT", [":", ":", "9.9"])],
        compress=compress,
    )


def empty_payload() -> bytes:
    return make_bulk_tsv(BUS_HEADER, ["1990", "1991"], [])


def mixed_frequency_payload() -> bytes:
    return make_bulk_tsv(
        "unit,geo\\time",
        ["2015", "2015Q2", "2015Q1", "2014"],
        [
            ("PC,AT", ["1.0", "2.0 p", "3.0", "4.0"]),
            ("PC,BE", [":", "6.5", ": c", "8.0 e"]),
        ],
    )


class CountingFetcher:
    """Stand-in for the remote service returning canned bulk payloads by id."""

    def __init__(self, payloads: dict[str, bytes]) -> None:
        self.payloads = payloads
        self.calls: list[str] = []

    def __call__(self, dataset_id: str, *, source) -> RawDataset:
        self.calls.append(dataset_id)
        return read_bulk_tsv(self.payloads[dataset_id])


class DummyResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def iter_content(self, chunk_size: int = 8192):
        for idx in range(0, len(self.content), chunk_size):
            yield self.content[idx : idx + chunk_size]

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


def config_for(cache_dir: Path | None = None, *, update: bool = False) -> EustatConfig:
    overrides: dict[str, object] = {
        "cache.update": update,
        "cache.dir": str(cache_dir) if cache_dir is not None else None,
    }
    return load_config(overrides=overrides)
