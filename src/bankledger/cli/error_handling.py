"""CLI error handling helpers."""

import click

from bankledger.domain.errors import DomainError, ValidationError
from bankledger.domain.ledger import LedgerErrorKind, LedgerResult


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, ValidationError) and error.errors:
        click.echo("Error: Validation failed", err=True)
        for field_name, message in error.errors.items():
            click.echo(f"  {field_name}: {message}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_ledger_failure(ctx: click.Context, result: LedgerResult) -> None:
    """Render a rejected ledger operation and exit with failure."""
    if result.error is LedgerErrorKind.VALIDATION_FAILED:
        handle_domain_error(ctx, ValidationError(result.message, result.errors))
    click.echo(f"Error: {result.message}", err=True)
    ctx.exit(1)
