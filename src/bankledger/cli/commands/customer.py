"""Customer management commands."""

import click
from bankledger.cli.customer_resolution import resolve_customer_or_exit
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.customer import CustomerService
from bankledger.domain.errors import DomainError
from bankledger.utils.amount_parser import format_currency


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("create")
@click.argument("name", metavar="NAME")
@click.argument("email", metavar="EMAIL")
@click.option("--phone", help="Phone number")
@click.option("--address", help="Postal address")
@click.pass_context
def create_customer(ctx, name: str, email: str, phone: str | None, address: str | None):
    """Create a new customer.

    Examples:
        bankledger customer create "Ada Lovelace" ada@example.com
        bankledger customer create "Alan Turing" alan@example.com --phone 555-0100
    """
    service = CustomerService(ctx.obj["db"])

    try:
        customer_id = service.create_customer(
            ctx.obj["ctx"], name=name, email=email, phone=phone, address=address
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created customer '{name}' (ID: {customer_id})")


@customer_group.command("list")
@click.option("--search", help="Filter by name or email (case-insensitive)")
@click.pass_context
def list_customers(ctx, search: str | None):
    """List customers."""
    service = CustomerService(ctx.obj["db"])

    customers = service.list_customers(search=search)
    if not customers:
        click.echo("No customers found.")
        return

    click.echo("\nCustomers:")
    click.echo("-" * 70)
    for cust in customers:
        click.echo(f"ID: {cust.id:3d} | {cust.name:25s} | {cust.email}")


@customer_group.command("show")
@click.argument("customer", metavar="CUSTOMER")
@click.pass_context
def show_customer(ctx, customer: str):
    """Show a customer and their accounts.

    CUSTOMER can be a customer email or ID.
    """
    service = CustomerService(ctx.obj["db"])
    customer_id = resolve_customer_or_exit(ctx, service, customer)
    summary = service.get_summary(customer_id)
    cust = summary.customer

    click.echo(f"\nCustomer {cust.id}: {cust.name}")
    click.echo(f"  Email: {cust.email}")
    if cust.phone:
        click.echo(f"  Phone: {cust.phone}")
    if cust.address:
        click.echo(f"  Address: {cust.address}")
    click.echo(f"  Created: {cust.created_at}")

    if not summary.accounts:
        click.echo("\nNo accounts.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 50)
    for acc in summary.accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.account_type.value:22s} | {format_currency(acc.balance_cents):>14s}"
        )
    click.echo("-" * 50)
    click.echo(f"Total balance: {format_currency(summary.total_balance_cents)}")


@customer_group.command("update")
@click.argument("customer", metavar="CUSTOMER")
@click.option("--name", help="New name")
@click.option("--email", help="New email address")
@click.option("--phone", help="New phone number")
@click.option("--address", help="New postal address")
@click.pass_context
def update_customer(
    ctx,
    customer: str,
    name: str | None,
    email: str | None,
    phone: str | None,
    address: str | None,
) -> None:
    """Update a customer.

    CUSTOMER can be a customer email or ID. Only the provided fields change.

    Examples:
        bankledger customer update 1 --phone 555-0199
        bankledger customer update ada@example.com --email ada@lovelace.org
    """
    service = CustomerService(ctx.obj["db"])
    customer_id = resolve_customer_or_exit(ctx, service, customer)

    if all(value is None for value in (name, email, phone, address)):
        click.echo("Error: Nothing to update. Provide at least one option.", err=True)
        ctx.exit(1)

    try:
        service.update_customer(
            ctx.obj["ctx"], customer_id, name=name, email=email, phone=phone, address=address
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated customer {customer_id}")


@customer_group.command("delete")
@click.argument("customer", metavar="CUSTOMER")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_customer(ctx, customer: str, yes: bool) -> None:
    """Delete a customer.

    CUSTOMER can be a customer email or ID. The customer can only be
    deleted once all of their accounts are closed.
    """
    service = CustomerService(ctx.obj["db"])
    customer_id = resolve_customer_or_exit(ctx, service, customer)
    cust = service.require_customer(customer_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete customer '{cust.name}' (ID: {customer_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_customer(ctx.obj["ctx"], customer_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted customer '{cust.name}'")


def register_commands(cli):
    """Register customer commands with main CLI."""
    cli.add_command(customer_group, name="customer")
