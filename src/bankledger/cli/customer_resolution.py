"""CLI helpers for customer resolution."""

from __future__ import annotations

import click
from bankledger.domain import errors
from bankledger.domain.customer import CustomerService
from bankledger.utils.customer_resolver import resolve_customer


def resolve_customer_or_exit(
    ctx: click.Context, customer_service: CustomerService, customer: str | int
) -> int:
    """Resolve customer email or ID, or exit with a CLI error."""
    try:
        return resolve_customer(customer_service, customer)
    except errors.NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
