"""Global lookup table commands."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.domain.entities import LookupKind
from tourops.domain.master_data import LookupService

KIND_CHOICE = click.Choice([kind.value for kind in LookupKind])


@click.group()
def lookup_group():
    """Manage service, vehicle, flight and car types."""
    pass


@lookup_group.command("add")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("name")
@click.option("--description", help="Optional description")
@click.pass_context
def add_lookup(ctx, kind: str, name: str, description: str | None):
    """Add an entry to a lookup table.

    Examples:
        tourops lookup add vehicle_type "Van (7 PAX)"
        tourops lookup add service_type "Tour Guide" --description "Licensed guide"
    """
    service = LookupService(ctx.obj["db"])
    try:
        lookup_id = service.create_item(LookupKind(kind), name, description)
        click.echo(f"Added {kind} '{name}' (ID: {lookup_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@lookup_group.command("list")
@click.argument("kind", type=KIND_CHOICE, required=False)
@click.option("--search", help="Filter by name or description")
@click.pass_context
def list_lookups(ctx, kind: str | None, search: str | None):
    """List lookup entries, optionally of one KIND."""
    service = LookupService(ctx.obj["db"])
    items = service.list_items(LookupKind(kind) if kind else None, search=search)
    if not items:
        click.echo("No lookup entries found.")
        return

    click.echo("\nLookup entries:")
    click.echo("-" * 60)
    for item in items:
        description = f" - {item.description}" if item.description else ""
        click.echo(f"ID: {item.id:3d} | {item.kind.value:12s} | {item.name}{description}")


@lookup_group.command("update")
@click.argument("lookup_id", type=int)
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.pass_context
def update_lookup(ctx, lookup_id: int, name: str | None, description: str | None):
    """Rename or describe a lookup entry."""
    fields = {k: v for k, v in {"name": name, "description": description}.items() if v is not None}
    try:
        LookupService(ctx.obj["db"]).update_item(lookup_id, **fields)
        click.echo(f"Updated lookup entry {lookup_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@lookup_group.command("delete")
@click.argument("lookup_id", type=int)
@click.pass_context
def delete_lookup(ctx, lookup_id: int):
    """Delete a lookup entry. Line items keep the text they were saved with."""
    try:
        LookupService(ctx.obj["db"]).delete_item(lookup_id)
        click.echo(f"Deleted lookup entry {lookup_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register lookup commands with main CLI."""
    cli.add_command(lookup_group, name="lookup")
