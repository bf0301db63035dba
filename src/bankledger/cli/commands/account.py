"""Account management commands."""

import click
from bankledger.cli.customer_resolution import resolve_customer_or_exit
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.account import AccountService
from bankledger.domain.customer import CustomerService
from bankledger.domain.entities import AccountType
from bankledger.domain.errors import DomainError
from bankledger.utils.amount_parser import format_currency, parse_amount

ACCOUNT_TYPE_CHOICES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("open")
@click.argument("customer", metavar="CUSTOMER")
@click.argument("account_type", metavar="TYPE", type=click.Choice(ACCOUNT_TYPE_CHOICES, case_sensitive=False))
@click.option("--deposit", help="Opening deposit (e.g., 100.00)")
@click.pass_context
def open_account(ctx, customer: str, account_type: str, deposit: str | None):
    """Open an account for a customer.

    CUSTOMER can be a customer email or ID. An opening deposit is recorded
    as a regular DEPOSIT transaction.

    Examples:
        bankledger account open 1 CHECKING
        bankledger account open ada@example.com SAVINGS --deposit 250.00
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    customer_id = resolve_customer_or_exit(ctx, CustomerService(db), customer)

    initial_deposit = None
    if deposit is not None:
        try:
            initial_deposit = parse_amount(deposit)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        account_id = service.open_account(
            ctx.obj["ctx"], customer_id, account_type, initial_deposit=initial_deposit
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    account = service.require_account(account_id)
    click.echo(f"Opened {account.account_type.value} account (ID: {account_id})")
    click.echo(f"Balance: {format_currency(account.balance_cents)}")


@account_group.command("list")
@click.option("--customer", help="Customer email or ID")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPE_CHOICES, case_sensitive=False), help="Account type")
@click.pass_context
def list_accounts(ctx, customer: str | None, account_type: str | None):
    """List accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    customer_id = None
    if customer:
        customer_id = resolve_customer_or_exit(ctx, CustomerService(db), customer)

    accounts = service.list_accounts(customer_id=customer_id, account_type=account_type)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | Customer: {acc.customer_id:3d} | "
            f"{acc.account_type.value:22s} | {format_currency(acc.balance_cents):>14s}"
        )


@account_group.command("show")
@click.argument("account_id", type=int)
@click.pass_context
def show_account(ctx, account_id: int):
    """Show an account."""
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account = service.require_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nAccount {account.id}")
    click.echo(f"  Customer: {account.customer_id}")
    click.echo(f"  Type: {account.account_type.value}")
    click.echo(f"  Balance: {format_currency(account.balance_cents)}")
    click.echo(f"  Transactions: {db.get_account_transaction_count(account_id)}")
    click.echo(f"  Opened: {account.created_at}")


@account_group.command("set-type")
@click.argument("account_id", type=int)
@click.argument("account_type", metavar="TYPE", type=click.Choice(ACCOUNT_TYPE_CHOICES, case_sensitive=False))
@click.pass_context
def set_account_type(ctx, account_id: int, account_type: str) -> None:
    """Change an account's type.

    Examples:
        bankledger account set-type 3 MONEY_MARKET
    """
    service = AccountService(ctx.obj["db"])

    try:
        service.change_account_type(ctx.obj["ctx"], account_id, account_type)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Account {account_id} is now {account_type.upper()}")


@account_group.command("delete")
@click.argument("account_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_account(ctx, account_id: int, yes: bool) -> None:
    """Delete an account.

    The account can only be deleted if no transaction references it. Use
    'transaction delete' to reverse its transactions first.
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account = service.require_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(
        f"Are you sure you want to delete {account.account_type.value} account {account_id}?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(ctx.obj["ctx"], account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted account {account_id}")


@account_group.command("reconcile")
@click.argument("account_id", type=int)
@click.pass_context
def reconcile_account(ctx, account_id: int) -> None:
    """Check the stored balance against the account's transactions.

    Exits with status 1 when they disagree.
    """
    service = AccountService(ctx.obj["db"])

    try:
        check = service.reconcile(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Stored balance:   {format_currency(check.stored_cents)}")
    click.echo(f"Computed balance: {format_currency(check.computed_cents)}")
    click.echo(f"Transactions:     {check.transaction_count}")

    if check.is_consistent:
        click.echo("Balance is consistent.")
        return

    click.echo(f"Error: Balance differs by {format_currency(check.difference_cents)}", err=True)
    ctx.exit(1)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
