"""Transaction management commands."""

import click
from bankledger.cli.date_filters import resolve_cli_date_range
from bankledger.cli.error_handling import handle_domain_error, handle_ledger_failure
from bankledger.domain.entities import TransactionType
from bankledger.domain.errors import DomainError
from bankledger.domain.ledger import LedgerResult, LedgerService
from bankledger.domain.transaction import DEFAULT_PAGE_SIZE, SORT_FIELDS, TransactionService
from bankledger.utils.amount_parser import format_currency, parse_amount

TRANSACTION_TYPE_CHOICES = [t.value for t in TransactionType]


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


def _parse_amount_or_exit(ctx, amount: str):
    try:
        return parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _echo_result(verb: str, result: LedgerResult) -> None:
    txn = result.transaction
    click.echo(
        f"{verb} transaction {txn.id}: {txn.transaction_type.value} "
        f"{format_currency(txn.amount_cents)}"
    )
    click.echo(f"Account {result.account.id} balance: {format_currency(result.account.balance_cents)}")
    if result.destination_account is not None:
        dest = result.destination_account
        click.echo(f"Account {dest.id} balance: {format_currency(dest.balance_cents)}")


@transaction_group.command("create")
@click.argument("account_id", type=int)
@click.argument("transaction_type", metavar="TYPE", type=click.Choice(TRANSACTION_TYPE_CHOICES, case_sensitive=False))
@click.argument("amount")
@click.option("--description", help="Transaction description")
@click.option("--to", "destination_account_id", type=int, help="Destination account ID (transfers only)")
@click.pass_context
def create_transaction(
    ctx,
    account_id: int,
    transaction_type: str,
    amount: str,
    description: str | None,
    destination_account_id: int | None,
) -> None:
    """Record a deposit, withdrawal or transfer.

    Examples:
        bankledger transaction create 1 DEPOSIT 100.00
        bankledger transaction create 1 WITHDRAWAL 25 --description "ATM"
        bankledger transaction create 1 TRANSFER 50 --to 2
    """
    ledger = LedgerService(ctx.obj["db"])
    txn_amount = _parse_amount_or_exit(ctx, amount)

    result = ledger.apply(
        ctx.obj["ctx"], account_id, transaction_type, txn_amount, description, destination_account_id
    )
    if not result.ok:
        handle_ledger_failure(ctx, result)

    _echo_result("Created", result)


@transaction_group.command("amend")
@click.argument("transaction_id", type=int)
@click.argument("transaction_type", metavar="TYPE", type=click.Choice(TRANSACTION_TYPE_CHOICES, case_sensitive=False))
@click.argument("amount")
@click.option("--description", help="Transaction description")
@click.option("--to", "destination_account_id", type=int, help="Destination account ID (transfers only)")
@click.pass_context
def amend_transaction(
    ctx,
    transaction_id: int,
    transaction_type: str,
    amount: str,
    description: str | None,
    destination_account_id: int | None,
) -> None:
    """Rewrite a transaction's type, amount and description.

    The balance moves by the difference between the old and new effect.

    Examples:
        bankledger transaction amend 7 WITHDRAWAL 40.00
    """
    ledger = LedgerService(ctx.obj["db"])
    txn_amount = _parse_amount_or_exit(ctx, amount)

    result = ledger.amend(
        ctx.obj["ctx"], transaction_id, transaction_type, txn_amount, description, destination_account_id
    )
    if not result.ok:
        handle_ledger_failure(ctx, result)

    _echo_result("Amended", result)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction and reverse its effect on the balance.

    Examples:
        bankledger transaction delete 7
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    # Get transaction info for display
    txn = transaction_service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Are you sure you want to delete {txn.transaction_type.value} transaction "
        f"{transaction_id} of {format_currency(txn.amount_cents)}?"
    ):
        click.echo("Deletion cancelled.")
        return

    result = LedgerService(db).reverse(ctx.obj["ctx"], transaction_id)
    if not result.ok:
        handle_ledger_failure(ctx, result)

    click.echo(f"Deleted transaction {transaction_id}")
    click.echo(f"Account {result.account.id} balance: {format_currency(result.account.balance_cents)}")
    if result.destination_account is not None:
        dest = result.destination_account
        click.echo(f"Account {dest.id} balance: {format_currency(dest.balance_cents)}")


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int) -> None:
    """Show a transaction."""
    service = TransactionService(ctx.obj["db"])

    try:
        txn = service.require_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nTransaction ID: {txn.id}")
    click.echo(f"  Type: {txn.transaction_type.value}")
    click.echo(f"  Amount: {format_currency(txn.amount_cents)}")
    click.echo(f"  Account: {txn.account_id}")
    if txn.destination_account_id is not None:
        click.echo(f"  Destination: {txn.destination_account_id}")
    if txn.description:
        click.echo(f"  Description: {txn.description}")
    click.echo(f"  Created: {txn.created_at}")
    click.echo(f"  Updated: {txn.updated_at}")


@transaction_group.command("list")
@click.option("--account", "account_id", type=int, help="Account ID (matches either side of a transfer)")
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPE_CHOICES, case_sensitive=False), help="Transaction type")
@click.option("--search", help="Search type, description and customer name or email")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', '3 days ago')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--this-week", is_flag=True, help="Only transactions from this week")
@click.option("--this-month", is_flag=True, help="Only transactions from this month")
@click.option("--this-year", is_flag=True, help="Only transactions from this year")
@click.option("--last-week", is_flag=True, help="Only transactions from last week")
@click.option("--last-month", is_flag=True, help="Only transactions from last month")
@click.option("--last-year", is_flag=True, help="Only transactions from last year")
@click.option("--sort", type=click.Choice(SORT_FIELDS), help="Sort field (default: created_at)")
@click.option("--order", type=click.Choice(["asc", "desc"]), default="desc", show_default=True)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--page-size", type=int, default=DEFAULT_PAGE_SIZE, show_default=True)
@click.pass_context
def list_transactions(
    ctx,
    account_id: int | None,
    transaction_type: str | None,
    search: str | None,
    start_date: str | None,
    end_date: str | None,
    this_week: bool,
    this_month: bool,
    this_year: bool,
    last_week: bool,
    last_month: bool,
    last_year: bool,
    sort: str | None,
    order: str,
    page: int,
    page_size: int,
):
    """List transactions with optional filters, newest first."""
    service = TransactionService(ctx.obj["db"])

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-week": this_week,
            "this-month": this_month,
            "this-year": this_year,
            "last-week": last_week,
            "last-month": last_month,
            "last-year": last_year,
        },
    )

    try:
        result = service.list_transactions(
            account_id=account_id,
            transaction_type=transaction_type,
            search=search,
            start_date=start,
            end_date=end,
            sort=sort,
            order=order,
            page=page,
            page_size=page_size,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not result.transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {result.total_items} transaction(s), page {result.page} of {result.total_pages}:")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Type':<12} {'Amount':>14} {'Account':<8} {'To':<8} {'Description':<30}"
    )
    click.echo("-" * 100)

    for txn in result.transactions:
        destination = str(txn.destination_account_id) if txn.destination_account_id else ""
        description = (txn.description or "")[:30]
        click.echo(
            f"{txn.id:<6} {txn.created_at.date()!s:<12} {txn.transaction_type.value:<12} "
            f"{format_currency(txn.amount_cents):>14} {txn.account_id:<8} {destination:<8} {description:<30}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
