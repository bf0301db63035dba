"""Audit log commands."""

import click
from bankledger.domain.audit import DatabaseAuditTrail


@click.group()
def audit_group():
    """Inspect the audit log."""
    pass


@audit_group.command("list")
@click.option("--entity-type", help="Entity type (Customer, Account or Transaction)")
@click.option("--entity-id", help="Entity ID")
@click.option("--actor", "actor_id", help="Actor ID")
@click.option("--limit", type=int, default=50, show_default=True, help="Maximum number of entries")
@click.pass_context
def list_audit_entries(
    ctx, entity_type: str | None, entity_id: str | None, actor_id: str | None, limit: int
):
    """List recent audit entries, newest first."""
    trail = DatabaseAuditTrail(ctx.obj["db"])

    entries = trail.list_entries(
        entity_type=entity_type, entity_id=entity_id, actor_id=actor_id, limit=limit
    )
    if not entries:
        click.echo("No audit entries found.")
        return

    click.echo(f"\n{'Time':<20} {'Actor':<12} {'Action':<7} {'Entity':<16} Details")
    click.echo("-" * 100)
    for entry in entries:
        entity = f"{entry.entity_type} {entry.entity_id or ''}".strip()
        click.echo(
            f"{entry.created_at:%Y-%m-%d %H:%M:%S} {entry.actor_id:<12} {entry.action.value:<7} "
            f"{entity:<16} {entry.details or ''}"
        )


def register_commands(cli):
    """Register audit commands with main CLI."""
    cli.add_command(audit_group, name="audit")
