"""Main CLI entry point."""

import getpass

import click
from finport.database.factories import create_sqlite_database
from finport.logging_setup import configure_logging

# Import and register all commands at module level
from finport.cli.commands import (
    account,
    category,
    import_cmd,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINPORT_DB_PATH environment variable)",
    envvar="FINPORT_DB_PATH",
)
@click.option(
    "--owner",
    help="Owner id the data belongs to (defaults to the current user name)",
    envvar="FINPORT_OWNER",
)
@click.option(
    "--log-level",
    help="Logging level, e.g. INFO or DEBUG (defaults to WARNING)",
    envvar="FINPORT_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, owner: str | None, log_level: str | None):
    """Finport - bank statement importer.

    Import spreadsheet and CSV exports from any bank into your accounts,
    skipping transactions that were already imported.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["owner"] = owner or getpass.getuser()
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
import_cmd.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
