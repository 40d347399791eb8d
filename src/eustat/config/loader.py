"""Config loading entry points for eustat."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError as PydanticValidationError

from eustat.errors import ConfigurationError

from .models import EustatConfig

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for earlier interpreters
    import tomli as tomllib  # type: ignore[assignment]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().with_name("eustat.default.yaml")

ENV_CACHE_DIR = "EUSTAT_CACHE_DIR"
ENV_UPDATE = "EUSTAT_UPDATE"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> EustatConfig:
    """Load the eustat configuration applying environment and explicit overrides.

    Precedence, lowest first: packaged defaults, the file at ``path``,
    ``EUSTAT_CACHE_DIR`` / ``EUSTAT_UPDATE``, then ``overrides``.
    """

    default_data = _expect_mapping(_read_structured_file(DEFAULT_CONFIG_PATH), DEFAULT_CONFIG_PATH)

    if path:
        config_data = _expect_mapping(_read_structured_file(path), path)
    else:
        config_data = {}

    merged: dict[str, Any] = _deep_merge(default_data, config_data)
    merged = _deep_merge(merged, _environment_overrides())

    if overrides:
        merged = _deep_merge(merged, _expand_override_keys(overrides))

    try:
        return EustatConfig.model_validate(merged)
    except PydanticValidationError as exc:
        source = path or DEFAULT_CONFIG_PATH
        raise ConfigurationError(f"Invalid eustat configuration from {source}: {exc}") from exc


def dump_example_config(dest: Path) -> None:
    """Write the packaged default configuration to ``dest``."""

    if dest.suffix.lower() == ".toml":
        raise ConfigurationError("TOML export is not supported; use a YAML or JSON destination.")

    dest.parent.mkdir(parents=True, exist_ok=True)
    merged = _read_structured_file(DEFAULT_CONFIG_PATH)
    if dest.suffix.lower() == ".json":
        dest.write_text(json.dumps(merged, indent=2), encoding="utf-8")
        return
    dest.write_text(
        yaml.safe_dump(merged, sort_keys=False),
        encoding="utf-8",
    )


def _environment_overrides() -> dict[str, Any]:
    """Translate ``EUSTAT_*`` variables into a config fragment."""

    cache: dict[str, Any] = {}

    cache_dir = os.getenv(ENV_CACHE_DIR)
    if cache_dir:
        cache["dir"] = cache_dir

    update = os.getenv(ENV_UPDATE)
    if update is not None:
        flag = update.strip().lower()
        if flag in _TRUTHY:
            cache["update"] = True
        elif flag in _FALSY:
            cache["update"] = False
        else:
            raise ConfigurationError(f"{ENV_UPDATE} must be a boolean flag, got {update!r}.")

    return {"cache": cache} if cache else {}


def _expect_mapping(payload: Any, source: Path) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Expected mapping data in {source}, got {type(payload)!r}.")
    return dict(payload)


def _read_structured_file(path: Path) -> Any:
    """Return the parsed contents of a YAML/TOML/JSON file."""

    if not path.exists():
        raise ConfigurationError(f"Config file {path} does not exist.")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(text) or {}
    if suffix == ".toml":
        return tomllib.loads(text)
    if suffix == ".json":
        return json.loads(text)

    raise ConfigurationError(f"Unsupported config format for {path}")


def _deep_merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings returning a new dictionary."""

    result: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in extra.items():
        if (
            key in result
            and isinstance(result[key], Mapping)
            and isinstance(value, Mapping)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_override_keys(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Support dotted-notation overrides like ``cache.update``."""

    result: dict[str, Any] = {}
    for key, value in overrides.items():
        converted = _expand_single_override(key, value)
        result = _deep_merge(result, converted)
    return result


def _expand_single_override(key: Any, value: Any) -> dict[str, Any]:
    if isinstance(key, str) and "." in key:
        parts = key.split(".")
        cursor: dict[str, Any] = {}
        root = cursor
        for segment in parts[:-1]:
            next_cursor: dict[str, Any] = {}
            cursor[segment] = next_cursor
            cursor = next_cursor
        cursor[parts[-1]] = value
        return root
    return {key: value}


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ENV_CACHE_DIR",
    "ENV_UPDATE",
    "dump_example_config",
    "load_config",
]
