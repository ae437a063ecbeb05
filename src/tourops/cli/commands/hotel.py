"""Hotel management commands."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.cli.resolution import confirm_or_abort, resolve_optional, resolve_or_exit
from tourops.domain.master_data import DestinationService, HotelService
from tourops.utils.resolvers import display_name


@click.group()
def hotel_group():
    """Manage hotels."""
    pass


@hotel_group.command("create")
@click.argument("name")
@click.option("--destination", required=True, help="Destination name or ID")
@click.option("--stars", type=int, help="Star rating (1-5)")
@click.option("--address", help="Street address")
@click.pass_context
def create_hotel(ctx, name: str, destination: str, stars: int | None, address: str | None):
    """Create a new hotel.

    Examples:
        tourops hotel create "Grand Bosphorus" --destination Istanbul --stars 5
    """
    db = ctx.obj["db"]
    destinations = DestinationService(db)
    destination_id = resolve_or_exit(
        ctx, destination, destinations.get_destination, destinations.list_destinations, "Destination"
    )
    try:
        hotel_id = HotelService(db).create_hotel(
            name=name, destination_id=destination_id, stars=stars, address=address
        )
        click.echo(f"Created hotel '{name}' (ID: {hotel_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hotel_group.command("list")
@click.option("--destination", help="Destination name or ID")
@click.option("--search", help="Filter by name or address")
@click.pass_context
def list_hotels(ctx, destination: str | None, search: str | None):
    """List hotels."""
    db = ctx.obj["db"]
    destinations = DestinationService(db)
    destination_id = resolve_optional(
        ctx, destination, destinations.get_destination, destinations.list_destinations, "Destination"
    )
    hotels = HotelService(db).list_hotels(destination_id=destination_id, search=search)
    if not hotels:
        click.echo("No hotels found.")
        return

    names = {d.id: d for d in destinations.list_destinations()}
    click.echo("\nHotels:")
    click.echo("-" * 60)
    for hotel in hotels:
        stars = "*" * (hotel.stars or 0)
        click.echo(
            f"ID: {hotel.id:3d} | {hotel.name:25s} | {stars:5s} | "
            f"{display_name(names.get(hotel.destination_id))}"
        )


@hotel_group.command("update")
@click.argument("hotel", metavar="HOTEL")
@click.option("--name", help="New name")
@click.option("--destination", help="Destination name or ID")
@click.option("--stars", type=int, help="Star rating (1-5)")
@click.option("--address", help="Street address")
@click.option("--active/--inactive", default=None, help="Activate or deactivate")
@click.pass_context
def update_hotel(ctx, hotel: str, name, destination, stars, address, active):
    """Update a hotel. HOTEL can be a hotel name or ID."""
    db = ctx.obj["db"]
    service = HotelService(db)
    hotel_id = resolve_or_exit(ctx, hotel, service.get_hotel, service.list_hotels, "Hotel")
    fields = {"name": name, "stars": stars, "address": address, "is_active": active}
    if destination is not None:
        destinations = DestinationService(db)
        fields["destination_id"] = resolve_or_exit(
            ctx, destination, destinations.get_destination, destinations.list_destinations, "Destination"
        )
    fields = {k: v for k, v in fields.items() if v is not None}
    try:
        service.update_hotel(hotel_id, **fields)
        click.echo(f"Updated hotel {hotel_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hotel_group.command("delete")
@click.argument("hotel", metavar="HOTEL")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_hotel(ctx, hotel: str, yes: bool):
    """Delete a hotel. HOTEL can be a hotel name or ID."""
    service = HotelService(ctx.obj["db"])
    hotel_id = resolve_or_exit(ctx, hotel, service.get_hotel, service.list_hotels, "Hotel")
    record = service.get_hotel(hotel_id)
    if not confirm_or_abort(f"Are you sure you want to delete hotel '{record.name}'?", yes):
        return
    try:
        service.delete_hotel(hotel_id)
        click.echo(f"Deleted hotel '{record.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@hotel_group.command("deactivate")
@click.argument("hotel_ids", nargs=-1, type=int, required=True)
@click.pass_context
def deactivate_hotels(ctx, hotel_ids: tuple[int, ...]):
    """Mark one or more hotels inactive."""
    count = HotelService(ctx.obj["db"]).bulk_deactivate(hotel_ids)
    click.echo(f"Deactivated {count} hotel(s)")


def register_commands(cli):
    """Register hotel commands with main CLI."""
    cli.add_command(hotel_group, name="hotel")
