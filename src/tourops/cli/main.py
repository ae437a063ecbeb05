"""Main CLI entry point."""

import click

from tourops.database.factories import create_sqlite_database
from tourops.logging_config import setup_logging

# Import and register all commands at module level
from tourops.cli.commands import (
    agency,
    company,
    destination,
    hotel,
    init_lookups,
    lookup,
    proposal,
    source,
    user,
    voucher,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides TOUROPS_DB_PATH environment variable)",
    envvar="TOUROPS_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="TOUROPS_LOG_LEVEL",
    help="Logging level (overrides TOUROPS_LOG_LEVEL environment variable)",
)
@click.option("--log-json", is_flag=True, envvar="TOUROPS_LOG_JSON", help="Emit logs as JSON")
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_json: bool):
    """Tourops - Tour operator proposal management.

    Build priced proposals from hotels, transfers, flights, car rentals and
    extra services, confirm them and track the vouchers they issue.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level, json_output=log_json)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
destination.register_commands(cli)
hotel.register_commands(cli)
agency.register_commands(cli)
source.register_commands(cli)
user.register_commands(cli)
lookup.register_commands(cli)
init_lookups.register_commands(cli)
proposal.register_commands(cli)
voucher.register_commands(cli)
company.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
