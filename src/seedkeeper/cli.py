"""CLI commands for seedkeeper."""

import logging
import sys
from pathlib import Path

import click
import psycopg

from seedkeeper.backends import PostgresStorage
from seedkeeper.config import CONFIG_FILENAME, Config
from seedkeeper.exceptions import SeedKeeperError
from seedkeeper.seeder import Seeder


def _load_config(config_path: str | None) -> Config:
    if config_path:
        return Config.from_toml(config_path)
    try:
        return Config.find_and_load()
    except FileNotFoundError:
        return Config()


def _build_seeder(
    config: Config, conn: psycopg.Connection, directory: Path
) -> Seeder:
    seeder_class = Seeder.seeder_class(directory)
    return seeder_class(PostgresStorage(conn), directory, config.to_seeder_options())


@click.group()
@click.version_option(package_name="seedkeeper")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help=f"Path to {CONFIG_FILENAME} (default: search upwards from cwd)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """seedkeeper - apply one-time database seed files exactly once."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False), default=CONFIG_FILENAME)
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def init(path: str, force: bool) -> None:
    """Write a default configuration file."""
    target = Path(path)
    if target.exists() and not force:
        click.echo(f"Error: {target} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    Config().to_toml(target)
    click.echo(f"Wrote {target}")


@cli.command()
@click.option("--directory", "-d", type=click.Path(), help="Seed directory")
@click.option("--database-url", help="PostgreSQL connection URL")
@click.option("--env", "environment", help="Active environment label")
@click.option(
    "--allow-missing-seed-files",
    is_flag=True,
    default=None,
    help="Tolerate applied seeds whose files were deleted",
)
@click.option(
    "--transactions/--no-transactions",
    "use_transactions",
    default=None,
    help="Wrap each seed in a transaction (default: ask the database)",
)
@click.pass_context
def apply(
    ctx: click.Context,
    directory: str | None,
    database_url: str | None,
    environment: str | None,
    allow_missing_seed_files: bool | None,
    use_transactions: bool | None,
) -> None:
    """Apply pending seed files."""
    config = _load_config(ctx.obj["config_path"])
    if directory:
        config.seeds.directory = directory
    if database_url:
        config.database.url = database_url
    if environment:
        config.seeds.environment = environment
    if allow_missing_seed_files:
        config.apply.allow_missing_seed_files = True
    if use_transactions is not None:
        config.apply.use_transactions = use_transactions

    try:
        with psycopg.connect(config.database.url, autocommit=False) as conn:
            seeder = _build_seeder(config, conn, config.get_seed_dir())
            count = len(seeder.pending_tuples)
            seeder.run()
    except (SeedKeeperError, psycopg.OperationalError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Applied {count} seed(s) for environment '{config.seeds.environment}'")


@cli.command()
@click.option("--directory", "-d", type=click.Path(), help="Seed directory")
@click.option("--database-url", help="PostgreSQL connection URL")
@click.option("--env", "environment", help="Active environment label")
@click.pass_context
def status(
    ctx: click.Context,
    directory: str | None,
    database_url: str | None,
    environment: str | None,
) -> None:
    """Show applied and pending seed files."""
    config = _load_config(ctx.obj["config_path"])
    if directory:
        config.seeds.directory = directory
    if database_url:
        config.database.url = database_url
    if environment:
        config.seeds.environment = environment
    # Reporting only: never fail on deleted files
    config.apply.allow_missing_seed_files = True

    try:
        with psycopg.connect(config.database.url, autocommit=False) as conn:
            seeder = _build_seeder(config, conn, config.get_seed_dir())
            applied = seeder.applied_seeds
            missing = seeder.missing_seed_files
            pending = [filename for _, filename in seeder.pending_tuples]
    except (SeedKeeperError, psycopg.OperationalError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Applied ({len(applied)}):")
    for name in applied:
        marker = " (missing)" if name in missing else ""
        click.echo(f"  ✓ {name}{marker}")

    click.echo(f"Pending ({len(pending)}):")
    for name in pending:
        click.echo(f"  • {name}")


if __name__ == "__main__":
    cli()
