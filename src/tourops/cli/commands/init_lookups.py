"""Initialize default lookup tables and sources."""

import click

from tourops.domain.entities import LookupKind
from tourops.domain.master_data import LookupService, SourceService


INITIAL_LOOKUPS = [
    (LookupKind.SERVICE_TYPE, "Tour Guide", "Professional tour guide services"),
    (LookupKind.SERVICE_TYPE, "Museum Entry", "Museum and attraction tickets"),
    (LookupKind.SERVICE_TYPE, "Activities", "Various tourist activities"),
    (LookupKind.SERVICE_TYPE, "Meals", "Lunch/dinner arrangements"),
    (LookupKind.SERVICE_TYPE, "Insurance", "Travel insurance"),
    (LookupKind.VEHICLE_TYPE, "Sedan (4 PAX)", "Compact sedan for 4 passengers"),
    (LookupKind.VEHICLE_TYPE, "Van (7 PAX)", "Mini van for 7 passengers"),
    (LookupKind.VEHICLE_TYPE, "Mini Bus (15 PAX)", "Mini bus for 15 passengers"),
    (LookupKind.VEHICLE_TYPE, "Bus (30 PAX)", "Standard bus for 30 passengers"),
    (LookupKind.VEHICLE_TYPE, "Bus (50 PAX)", "Large bus for 50 passengers"),
    (LookupKind.FLIGHT_TYPE, "Domestic", "Within country flights"),
    (LookupKind.FLIGHT_TYPE, "International", "Between countries"),
    (LookupKind.FLIGHT_TYPE, "Regional", "Regional flights"),
    (LookupKind.CAR_TYPE, "Economy", "Compact cars"),
    (LookupKind.CAR_TYPE, "Standard", "Mid-size cars"),
    (LookupKind.CAR_TYPE, "Luxury", "Premium vehicles"),
    (LookupKind.CAR_TYPE, "SUV", "Sport utility vehicles"),
    (LookupKind.CAR_TYPE, "Van", "Multi-passenger vans"),
]

# (name, description, requires_agency)
INITIAL_SOURCES = [
    ("Direct (B2C)", "Walk-in, phone and website customers", False),
    ("Travel Agency (B2B)", "Bookings made through partner agencies", True),
    ("Corporate", "Company and group travel", False),
]


@click.command("init-lookups")
@click.option("--force", is_flag=True, help="Add missing defaults even if lookups exist")
@click.pass_context
def init_lookups(ctx, force: bool):
    """Initialize database with default lookup tables and sources."""
    db = ctx.obj["db"]
    lookup_service = LookupService(db)
    source_service = SourceService(db)

    if lookup_service.list_items() and not force:
        click.echo("Lookups already exist. Use --force to add missing defaults.")
        return

    click.echo("Creating default lookups and sources...")

    created = 0
    errors = 0

    for kind, name, description in INITIAL_LOOKUPS:
        try:
            lookup_service.create_item(kind, name, description)
            created += 1
        except ValueError as e:
            click.echo(f"Warning: Could not create {kind.value} '{name}': {e}", err=True)
            errors += 1

    for name, description, requires_agency in INITIAL_SOURCES:
        try:
            source_service.create_source(
                name=name, description=description, requires_agency=requires_agency
            )
            created += 1
        except ValueError as e:
            click.echo(f"Warning: Could not create source '{name}': {e}", err=True)
            errors += 1

    if errors == 0:
        click.echo(f"Successfully created {created} entries.")
    else:
        click.echo(f"Created {created} entries with {errors} errors.")


def register_commands(cli):
    """Register init-lookups command with main CLI."""
    cli.add_command(init_lookups)
