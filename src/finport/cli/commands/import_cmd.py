"""Statement import commands."""

from pathlib import Path

import click
from finport.cli.error_handling import handle_domain_error
from finport.domain.entities import Cell, ColumnMapping
from finport.domain.errors import DomainError
from finport.domain.statement_import import HISTORY_LIMIT, StatementImportService


def _format_cell(value: Cell) -> str:
    if value is None:
        return ""
    return str(value)


@click.group()
def import_group():
    """Import bank statements from spreadsheet or CSV files."""
    pass


@import_group.command("preview")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--rows", default=10, show_default=True, help="Number of rows to show")
@click.pass_context
def preview_import(ctx, statement_file: str, rows: int):
    """Show headers, suggested columns and the first rows of a file."""
    path = Path(statement_file)
    service = StatementImportService(ctx.obj["db"])

    try:
        preview = service.preview(path.name, path.read_bytes(), limit=rows)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    mapping = preview.suggested_mapping
    click.echo(f"\nFile: {preview.file_name}")
    click.echo(f"Rows: {preview.total_rows}")
    click.echo(f"Columns: {', '.join(preview.headers)}")
    click.echo("\nSuggested mapping:")
    click.echo(f"  Date:        {mapping.date or '-'}")
    click.echo(f"  Description: {mapping.description or '-'}")
    click.echo(f"  Amount:      {mapping.amount or '-'}")
    if mapping.category:
        click.echo(f"  Category:    {mapping.category}")
    if mapping.kind:
        click.echo(f"  Kind:        {mapping.kind}")

    click.echo("")
    click.echo(" | ".join(preview.headers))
    click.echo("-" * 60)
    for row in preview.rows:
        click.echo(" | ".join(_format_cell(row[h]) for h in preview.headers))


@import_group.command("run")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", "account_id", type=int, required=True, help="Target account ID")
@click.option(
    "--category", "category_id", type=int, required=True, help="Default category ID"
)
@click.option("--date-column", help="Column holding the date")
@click.option("--description-column", help="Column holding the description")
@click.option("--amount-column", help="Column holding the amount")
@click.option("--category-column", help="Column holding a category name")
@click.option("--kind-column", help="Column holding a credit/debit marker")
@click.option("--bank-source", help="Label of the issuing bank, kept on the import log")
@click.pass_context
def run_import(
    ctx,
    statement_file: str,
    account_id: int,
    category_id: int,
    date_column: str | None,
    description_column: str | None,
    amount_column: str | None,
    category_column: str | None,
    kind_column: str | None,
    bank_source: str | None,
):
    """Import transactions from a statement file.

    Columns that are not given on the command line are taken from the
    suggested mapping shown by 'finport import preview'.
    """
    path = Path(statement_file)
    service = StatementImportService(ctx.obj["db"])
    mapping = ColumnMapping(
        date=date_column,
        description=description_column,
        amount=amount_column,
        category=category_column,
        kind=kind_column,
    )

    try:
        result = service.import_file(
            owner_id=ctx.obj["owner"],
            file_name=path.name,
            payload=path.read_bytes(),
            account_id=account_id,
            default_category_id=category_id,
            mapping=mapping,
            bank_source=bank_source,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} transactions")
    click.echo(f"  Skipped: {result.skipped} duplicates")
    if result.dropped:
        click.echo(f"  Dropped: {result.dropped} unreadable rows")
    click.echo(f"  Log ID: {result.log_id}")


@import_group.command("history")
@click.option("--limit", default=HISTORY_LIMIT, show_default=True, help="Number of imports to show")
@click.pass_context
def import_history(ctx, limit: int):
    """List previous imports, newest first."""
    service = StatementImportService(ctx.obj["db"])

    logs = service.history(ctx.obj["owner"], limit=limit)
    if not logs:
        click.echo("No imports found.")
        return

    click.echo("\nImports:")
    click.echo("-" * 80)
    for log in logs:
        line = (
            f"ID: {log.id:3d} | {log.created_at:%Y-%m-%d %H:%M} | {log.status.value:10s} | "
            f"{log.file_name} | {log.imported_rows}/{log.total_rows} imported, "
            f"{log.skipped_rows} skipped"
        )
        click.echo(line)
        if log.error_message:
            click.echo(f"      Error: {log.error_message}")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
