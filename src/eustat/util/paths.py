"""Path utilities centralising cache layout decisions."""

from __future__ import annotations

import tempfile
from pathlib import Path


def expand_dir(path: str | Path) -> Path:
    """Return `path` with ``~`` expanded and made absolute."""
    return Path(path).expanduser().resolve()


def temp_cache_root(subdir: str) -> Path:
    """Return the cache directory under the system temporary area."""
    return Path(tempfile.gettempdir()) / subdir


__all__ = ["expand_dir", "temp_cache_root"]
