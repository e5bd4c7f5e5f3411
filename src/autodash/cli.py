"""CLI entrypoint for autodash."""

import json
import logging
from pathlib import Path

import click

from autodash import __version__
from autodash.config import Settings
from autodash.dashboard.assembler import build_dashboard, generate_cards
from autodash.dashboard.sink import JsonDashboardSink
from autodash.errors import AutodashError
from autodash.metadata.duckdb_store import DuckDBMetadataStore
from autodash.metadata.store import find_table
from autodash.rules.loader import load_rules
from autodash.safety.permissions import PermissionSet


def _load_rules_or_abort(rules_dir: str | None, settings: Settings) -> list:
    path = Path(rules_dir) if rules_dir else settings.rules_dir
    try:
        rules = load_rules(path)
    except AutodashError as e:
        raise click.ClickException(str(e)) from e
    if not rules:
        raise click.ClickException(f"No rules found in {path or 'the built-in library'}")
    return rules


def _open_store(db_path: str, settings: Settings) -> DuckDBMetadataStore:
    try:
        return DuckDBMetadataStore(db_path, database_id=settings.database_id)
    except AutodashError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", count=True, help="Log INFO (-v) or DEBUG (-vv) messages")
@click.pass_context
def main(ctx: click.Context, verbose: int):
    """autodash - Automatic dashboards from table metadata and domain rules."""
    try:
        settings = Settings.from_env()
    except AutodashError as e:
        raise click.ClickException(str(e)) from e
    level = {0: settings.log_level, 1: "INFO"}.get(verbose, "DEBUG")
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = settings


@main.command()
@click.option(
    "--db",
    "db_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to DuckDB database",
)
@click.pass_obj
def tables(settings: Settings, db_path: str):
    """List tables with their inferred entity types."""
    store = _open_store(db_path, settings)
    for table in store.list_tables():
        fields = store.get_fields(table.id)
        click.echo(f"{table.id:>4}  {table.name:<30} {str(table.entity_type):<28} {len(fields)} fields")


@main.group()
def rules():
    """Inspect rule libraries."""
    pass


@rules.command("list")
@click.option(
    "--rules-dir",
    default=None,
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    help="Directory of YAML rules (default: built-in library)",
)
@click.pass_obj
def rules_list(settings: Settings, rules_dir: str | None):
    """List available rules and what they apply to."""
    for rule in _load_rules_or_abort(rules_dir, settings):
        click.echo(
            f"{rule.table_type:<30} {rule.title}  "
            f"({len(rule.dimensions)} dimensions, {len(rule.metrics)} metrics, "
            f"{len(rule.filters)} filters, {len(rule.cards)} cards)"
        )


@rules.command("validate")
@click.argument("path", type=click.Path(exists=True))
def rules_validate(path: str):
    """Validate a rule file or a directory of rule files."""
    try:
        loaded = load_rules(Path(path))
    except AutodashError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    if not loaded:
        click.echo("❌ No rule files found.", err=True)
        raise click.Abort()

    click.echo(f"✅ {len(loaded)} rule(s) valid.")


@main.command()
@click.argument("table_name")
@click.option(
    "--db",
    "db_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to DuckDB database",
)
@click.option(
    "--rules-dir",
    default=None,
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    help="Directory of YAML rules (default: AD_RULES_DIR or built-in library)",
)
@click.option(
    "--out",
    "out_dir",
    default="./dashboards",
    type=click.Path(file_okay=False, dir_okay=True),
    help="Output directory for dashboards (default: ./dashboards)",
)
@click.option(
    "--grant",
    multiple=True,
    help="Permission path granted to the caller, e.g. /db/1/ (repeatable; default: AD_PERMISSIONS or /)",
)
@click.option(
    "--max-candidates",
    type=click.IntRange(min=1),
    default=None,
    help="Cap on candidates generated per card (default: AD_MAX_CANDIDATES or unbounded)",
)
@click.option("--dry-run", is_flag=True, default=False, help="Print ranked cards instead of saving a dashboard")
@click.pass_obj
def generate(
    settings: Settings,
    table_name: str,
    db_path: str,
    rules_dir: str | None,
    out_dir: str,
    grant: tuple[str, ...],
    max_candidates: int | None,
    dry_run: bool,
):
    """Generate a dashboard for TABLE_NAME."""
    rule_library = _load_rules_or_abort(rules_dir, settings)
    store = _open_store(db_path, settings)
    permissions = PermissionSet.of(grant or settings.permissions)
    cap = max_candidates or settings.max_candidates

    try:
        table = find_table(store, table_name)
        if dry_run:
            rule, cards = generate_cards(
                table, rule_library, store=store, permissions=permissions, max_candidates=cap
            )
            if rule is None:
                raise click.ClickException(f"No rule applies to table {table.name} ({table.entity_type})")
            click.echo(f"Rule: {rule.title} ({rule.table_type})")
            for card in cards:
                click.echo(f"{card.score:6.1f}  {card.identifier:<28} {json.dumps(card.query.to_dict())}")
            return

        dashboard_id = build_dashboard(
            table,
            rule_library,
            store=store,
            sink=JsonDashboardSink(out_dir),
            permissions=permissions,
            max_candidates=cap,
        )
    except AutodashError as e:
        raise click.ClickException(str(e)) from e

    if dashboard_id is None:
        click.echo(f"No dashboard could be generated for table {table.name}.", err=True)
        raise click.Abort()

    click.echo(f"✅ Dashboard {dashboard_id} written to {out_dir}")


if __name__ == "__main__":
    main()
