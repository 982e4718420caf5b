"""CLI error rendering for import and management commands."""

from typing import Optional

import click

from finport.domain import errors


def error_hint(error: errors.DomainError) -> Optional[str]:
    """Return a follow-up suggestion for errors the user can act on."""
    if isinstance(error, errors.NotFoundError):
        return "Use 'finport account list' or 'finport category list' to find valid IDs"
    if isinstance(error, errors.UnsupportedFormatError):
        return "Export the statement from your bank as .xlsx, .xls or .csv"
    if isinstance(error, errors.ParseError):
        return "Check that the file opens in a spreadsheet program and has a header row"
    if isinstance(error, errors.MappingError):
        return (
            "Run 'finport import preview FILE' to see the columns, then pass them with "
            "--date-column, --description-column or --amount-column"
        )
    return None


def handle_domain_error(ctx: click.Context, error: errors.DomainError) -> None:
    """Print a domain error, plus a hint when one applies, and exit with status 1."""
    click.echo(f"Error: {error}", err=True)
    hint = error_hint(error)
    if hint:
        click.echo(f"Hint: {hint}", err=True)
    ctx.exit(1)
