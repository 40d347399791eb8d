"""Command-line entry points for eustat."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from eustat.config import dump_example_config, load_config
from eustat.errors import EustatError
from eustat.io.cache import clean_cache
from eustat.services.datasets import get_dataset
from eustat.util.logging import configure_logging

app = typer.Typer(add_completion=False, help="Eurostat bulk-download client")


def _write_output(frame, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() == ".parquet":
        frame.to_parquet(output, index=False)
    else:
        frame.to_csv(output, index=False)


@app.command()
def get(
    dataset_id: str = typer.Argument(..., help="Eurostat dataset code, e.g. nama_10_lp_ulc"),
    time_format: str = typer.Option("date", help="date, date_last, num or raw"),
    select_time: Optional[str] = typer.Option(None, help="Keep one frequency: Y, S, Q, M or D"),
    cache: bool = typer.Option(True, "--cache/--no-cache", help="Read and write the local cache"),
    update: bool = typer.Option(False, "--update", help="Download even if a cache entry exists"),
    cache_dir: Optional[Path] = typer.Option(None, help="Existing directory for cache files"),
    typed: bool = typer.Option(True, "--typed/--no-typed", help="Encode dimension columns as categoricals"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write .csv or .parquet here"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/TOML/JSON config file"),
) -> None:
    """Download (or read from cache) a dataset in tidy form."""

    logger = configure_logging()
    try:
        cfg = load_config(config)
        frame = get_dataset(
            dataset_id,
            time_format=time_format,
            select_time=select_time,
            cache=cache,
            force_update=update,
            cache_dir=cache_dir,
            typed_columns=typed,
            config=cfg,
        )
    except EustatError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if output is not None:
        _write_output(frame, output)
        logger.info("Wrote %s rows=%s", output, len(frame))
        return
    typer.echo(frame.head(20).to_string(index=False))
    typer.echo(f"rows={len(frame)}")


@app.command("clean-cache")
def clean_cache_command(
    cache_dir: Optional[Path] = typer.Option(None, help="Cache directory to empty"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/TOML/JSON config file"),
) -> None:
    """Delete cached tables."""

    configure_logging()
    try:
        removed = clean_cache(cache_dir, config=load_config(config))
    except EustatError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Removed {removed} file(s)")


@app.command("dump-config")
def dump_config(dest: Path = typer.Argument(..., help="Destination .yaml/.yml/.json")) -> None:
    """Write the default configuration as a starting point."""

    try:
        dump_example_config(dest)
    except EustatError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Wrote {dest}")


def main() -> None:
    app()


__all__ = ["main", "app"]
