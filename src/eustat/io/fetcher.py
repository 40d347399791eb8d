"""Raw bulk-download fetch utilities."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping

import requests

from eustat.config.models import SourceConfig
from eustat.errors import NetworkError, NotFoundError
from eustat.parse.bulk import RawDataset, read_bulk_tsv
from eustat.util.retry import retry

LOGGER = logging.getLogger(__name__)


def fetch_payload(
    url: str,
    *,
    timeout_seconds: float | None = None,
    attempts: int = 1,
    rate_limit_seconds: float | None = None,
    headers: Mapping[str, str] | None = None,
) -> bytes:
    """Download `url` and return the response body.

    404 raises NotFoundError; other transport failures raise NetworkError and
    are repeated only while `attempts` allows.
    """

    def _download() -> bytes:
        if rate_limit_seconds:
            time.sleep(rate_limit_seconds)

        try:
            response = requests.get(
                url,
                stream=True,
                timeout=timeout_seconds,
                headers=dict(headers or {}),
            )
        except requests.RequestException as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(f"Source not found at {url}")
        try:
            response.raise_for_status()
            chunks = [chunk for chunk in response.iter_content(chunk_size=65536) if chunk]
        except requests.RequestException as exc:
            raise NetworkError(f"Download from {url} failed: {exc}") from exc
        return b"".join(chunks)

    backoff = rate_limit_seconds if rate_limit_seconds else 1.0
    return retry(_download, attempts=attempts, backoff_seconds=backoff, retry_on=(NetworkError,))


def fetch_raw(dataset_id: str, *, source: SourceConfig) -> RawDataset:
    """Fetch and parse the bulk TSV for `dataset_id`."""

    url = source.url_for(dataset_id)
    LOGGER.info("Downloading %s from %s", dataset_id, url)
    payload = fetch_payload(
        url,
        timeout_seconds=source.timeout_seconds,
        attempts=source.attempts,
        rate_limit_seconds=source.rate_limit_seconds,
        headers=source.headers,
    )
    LOGGER.debug("Received %s bytes for %s", len(payload), dataset_id)
    return read_bulk_tsv(payload)


__all__ = ["fetch_payload", "fetch_raw"]
