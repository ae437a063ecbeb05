"""Destination management commands."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.cli.resolution import confirm_or_abort, resolve_or_exit
from tourops.domain.master_data import DestinationService


def _resolve(ctx, service: DestinationService, value: str) -> int:
    return resolve_or_exit(
        ctx, value, service.get_destination, service.list_destinations, "Destination"
    )


@click.group()
def destination_group():
    """Manage destinations."""
    pass


@destination_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--country", required=True, help="Country of the destination")
@click.option("--description", help="Optional description")
@click.option("--inactive", is_flag=True, help="Create the destination as inactive")
@click.pass_context
def create_destination(
    ctx, code: str, name: str, country: str, description: str | None, inactive: bool
):
    """Create a new destination.

    Examples:
        tourops destination create IST "Istanbul" --country Turkey
        tourops destination create DXB "Dubai" --country UAE --description "City breaks"
    """
    service = DestinationService(ctx.obj["db"])
    try:
        destination_id = service.create_destination(
            code=code, name=name, country=country, description=description, is_active=not inactive
        )
        click.echo(f"Created destination '{name}' (ID: {destination_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@destination_group.command("list")
@click.option("--search", help="Filter by name, code or country")
@click.option("--active-only", is_flag=True, help="Hide inactive destinations")
@click.pass_context
def list_destinations(ctx, search: str | None, active_only: bool):
    """List destinations."""
    service = DestinationService(ctx.obj["db"])
    destinations = service.list_destinations(search=search, active_only=active_only)
    if not destinations:
        click.echo("No destinations found.")
        return

    click.echo("\nDestinations:")
    click.echo("-" * 60)
    for dest in destinations:
        status = "" if dest.is_active else " (inactive)"
        click.echo(f"ID: {dest.id:3d} | {dest.code:5s} | {dest.name:20s} | {dest.country}{status}")


@destination_group.command("update")
@click.argument("destination", metavar="DESTINATION")
@click.option("--code", help="New code")
@click.option("--name", help="New name")
@click.option("--country", help="New country")
@click.option("--description", help="New description")
@click.option("--active/--inactive", default=None, help="Activate or deactivate")
@click.pass_context
def update_destination(ctx, destination: str, code, name, country, description, active):
    """Update a destination.

    DESTINATION can be a destination name or ID.
    """
    service = DestinationService(ctx.obj["db"])
    destination_id = _resolve(ctx, service, destination)
    fields = {
        key: value
        for key, value in {
            "code": code,
            "name": name,
            "country": country,
            "description": description,
            "is_active": active,
        }.items()
        if value is not None
    }
    if not fields:
        click.echo("Nothing to update.")
        return
    try:
        service.update_destination(destination_id, **fields)
        click.echo(f"Updated destination {destination_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@destination_group.command("delete")
@click.argument("destination", metavar="DESTINATION")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_destination(ctx, destination: str, yes: bool):
    """Delete a destination.

    A destination can only be deleted when no hotels are linked to it.
    Proposals that reference it show "Unknown" afterwards.
    """
    service = DestinationService(ctx.obj["db"])
    destination_id = _resolve(ctx, service, destination)
    dest = service.get_destination(destination_id)
    if not confirm_or_abort(f"Are you sure you want to delete destination '{dest.name}'?", yes):
        return
    try:
        service.delete_destination(destination_id)
        click.echo(f"Deleted destination '{dest.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@destination_group.command("deactivate")
@click.argument("destination_ids", nargs=-1, type=int, required=True)
@click.pass_context
def deactivate_destinations(ctx, destination_ids: tuple[int, ...]):
    """Mark one or more destinations inactive."""
    service = DestinationService(ctx.obj["db"])
    count = service.bulk_deactivate(destination_ids)
    click.echo(f"Deactivated {count} destination(s)")


def register_commands(cli):
    """Register destination commands with main CLI."""
    cli.add_command(destination_group, name="destination")
