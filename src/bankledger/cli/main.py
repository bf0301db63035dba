"""Main CLI entry point."""

from dataclasses import replace

import click
from bankledger.config import LOG_LEVELS, Settings
from bankledger.database.factories import create_database
from bankledger.domain.entities import RequestContext
from bankledger.logging import setup_logging

# Import and register all commands at module level
from bankledger.cli.commands import account, audit, customer, transaction


@click.group()
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    help="Path to SQLite database file (overrides BANKLEDGER_DB_PATH environment variable)",
)
@click.option(
    "--db-url",
    help="SQLAlchemy database URL (overrides BANKLEDGER_DB_URL and --db-path)",
)
@click.option("--actor", help="Actor ID recorded in the audit log (overrides BANKLEDGER_ACTOR)")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level (overrides BANKLEDGER_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx, db_path: str | None, db_url: str | None, actor: str | None, log_level: str | None):
    """Bankledger - Customer, account and transaction ledger.

    Every deposit, withdrawal and transfer moves account balances in the
    same storage transaction that records it.
    """
    ctx.ensure_object(dict)

    try:
        settings = Settings.from_env()
        overrides = {
            "database_path": db_path,
            "database_url": db_url,
            "actor_id": actor,
            "log_level": log_level,
        }
        settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    setup_logging(level=settings.log_level, format_type=settings.log_format)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        # An explicit --db-path beats a URL coming from the environment
        database_url = db_url if db_url is not None or db_path is not None else settings.database_url
        db = create_database(database_url=database_url, database_path=settings.database_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["ctx"] = RequestContext(actor_id=settings.actor_id)


# Register all commands
customer.register_commands(cli)
account.register_commands(cli)
transaction.register_commands(cli)
audit.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
