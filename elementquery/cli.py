# elementquery/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Convenience commands to list/validate declarative query files and view the
effective config. The CLI never opens a browser; queries run from Python.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import click

from elementquery.core.query_loader import QuerySpec, find_query_files, load_queries_file
from elementquery.utils.config import get_settings
from elementquery.utils.logger import bind, get_logger, set_log_level, unbind

log = get_logger(__name__)


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _summary(spec: QuerySpec) -> str:
    n = len(spec.alternatives)
    poller = spec.poller.describe() if spec.poller else "session poller"
    return f"{spec.name} [{spec.mode}] ({n} alternative{'s' if n != 1 else ''}, {poller})"


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.version_option(package_name="elementquery")
def cli(log_level: Optional[str]):
    _ = get_settings()
    if log_level:
        set_log_level(log_level.upper())


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    _echo_json(get_settings().model_dump(mode="json"))


@cli.command("list")
@click.option(
    "--dir", "queries_dir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=lambda: str(get_settings().QUERIES_DIR),
    show_default=True,
    help="Directory containing query YAML files",
)
@click.option("--recursive/--no-recursive", default=True, show_default=True)
def cmd_list(queries_dir: str, recursive: bool):
    """List query definitions available in a directory."""
    rows = []
    for fp in find_query_files(Path(queries_dir), recursive=recursive):
        try:
            rows.extend((fp, spec) for spec in load_queries_file(fp))
        except (ValueError, OSError) as e:
            # `validate` prints the details
            log.debug(f"Skipping invalid query file {fp}: {e}")

    if not rows:
        click.echo("No queries found.")
        return

    click.echo(f"Found {len(rows)} query(s):\n")
    for fp, spec in rows:
        click.echo(f" - {_summary(spec)}  <- {fp}")


@cli.command("validate")
@click.argument("targets", nargs=-1, required=False)
@click.option("--dir", "queries_dir", type=click.Path(file_okay=False, dir_okay=True, exists=True),
              help="Validate all query files under this directory")
@click.option("--recursive/--no-recursive", default=True, show_default=True)
def cmd_validate(targets: List[str], queries_dir: Optional[str], recursive: bool):
    """Validate query files or directories (supports multi-doc YAML)."""
    paths: list[Path] = []
    if targets:
        for p in (Path(t).resolve() for t in targets):
            if p.is_dir():
                paths.extend(find_query_files(p, recursive=True))
            else:
                paths.append(p)
    elif queries_dir:
        paths.extend(find_query_files(Path(queries_dir), recursive=recursive))
    else:
        click.echo("Provide file(s) or --dir to validate.")
        sys.exit(2)

    ok = True
    for fp in paths:
        bind(query_file=str(fp))
        try:
            for spec in load_queries_file(fp):
                click.echo(f"OK  {fp}  ->  {_summary(spec)}")
        except (ValueError, OSError) as e:
            ok = False
            click.echo(f"ERR {fp}  ->  {e}")
        finally:
            unbind("query_file")

    sys.exit(0 if ok else 1)


def main() -> None:
    cli(prog_name="elementquery")


if __name__ == "__main__":
    main()
