"""Agency management commands."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.cli.resolution import confirm_or_abort, resolve_or_exit
from tourops.domain.master_data import AgencyService


@click.group()
def agency_group():
    """Manage travel agencies."""
    pass


@agency_group.command("create")
@click.argument("name")
@click.option("--country", required=True, help="Country of the agency")
@click.option("--commission-rate", required=True, help="Commission rate in percent (e.g. 10)")
@click.option("--contact-person", help="Contact person")
@click.option("--contact-email", help="Contact email")
@click.option("--contact-phone", help="Contact phone")
@click.pass_context
def create_agency(ctx, name, country, commission_rate, contact_person, contact_email, contact_phone):
    """Create a new agency.

    Examples:
        tourops agency create "Sunrise Travel" --country Jordan --commission-rate 10
    """
    service = AgencyService(ctx.obj["db"])
    try:
        agency_id = service.create_agency(
            name=name,
            country=country,
            commission_rate=commission_rate,
            contact_person=contact_person,
            contact_email=contact_email,
            contact_phone=contact_phone,
        )
        click.echo(f"Created agency '{name}' (ID: {agency_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@agency_group.command("list")
@click.option("--search", help="Filter by name, country or contact person")
@click.pass_context
def list_agencies(ctx, search: str | None):
    """List agencies."""
    agencies = AgencyService(ctx.obj["db"]).list_agencies(search=search)
    if not agencies:
        click.echo("No agencies found.")
        return

    click.echo("\nAgencies:")
    click.echo("-" * 60)
    for agency in agencies:
        status = "" if agency.is_active else " (inactive)"
        click.echo(
            f"ID: {agency.id:3d} | {agency.name:25s} | {agency.country:12s} | "
            f"{agency.commission_rate}%{status}"
        )


@agency_group.command("update")
@click.argument("agency", metavar="AGENCY")
@click.option("--name", help="New name")
@click.option("--country", help="New country")
@click.option("--commission-rate", help="Commission rate in percent")
@click.option("--contact-person", help="Contact person")
@click.option("--contact-email", help="Contact email")
@click.option("--contact-phone", help="Contact phone")
@click.option("--active/--inactive", default=None, help="Activate or deactivate")
@click.pass_context
def update_agency(
    ctx, agency, name, country, commission_rate, contact_person, contact_email, contact_phone, active
):
    """Update an agency. AGENCY can be an agency name or ID."""
    service = AgencyService(ctx.obj["db"])
    agency_id = resolve_or_exit(ctx, agency, service.get_agency, service.list_agencies, "Agency")
    fields = {
        "name": name,
        "country": country,
        "commission_rate": commission_rate,
        "contact_person": contact_person,
        "contact_email": contact_email,
        "contact_phone": contact_phone,
        "is_active": active,
    }
    try:
        service.update_agency(agency_id, **{k: v for k, v in fields.items() if v is not None})
        click.echo(f"Updated agency {agency_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@agency_group.command("delete")
@click.argument("agency", metavar="AGENCY")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_agency(ctx, agency: str, yes: bool):
    """Delete an agency. AGENCY can be an agency name or ID."""
    service = AgencyService(ctx.obj["db"])
    agency_id = resolve_or_exit(ctx, agency, service.get_agency, service.list_agencies, "Agency")
    record = service.get_agency(agency_id)
    if not confirm_or_abort(f"Are you sure you want to delete agency '{record.name}'?", yes):
        return
    try:
        service.delete_agency(agency_id)
        click.echo(f"Deleted agency '{record.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@agency_group.command("deactivate")
@click.argument("agency_ids", nargs=-1, type=int, required=True)
@click.pass_context
def deactivate_agencies(ctx, agency_ids: tuple[int, ...]):
    """Mark one or more agencies inactive."""
    count = AgencyService(ctx.obj["db"]).bulk_deactivate(agency_ids)
    click.echo(f"Deactivated {count} agenc{'y' if count == 1 else 'ies'}")


def register_commands(cli):
    """Register agency commands with main CLI."""
    cli.add_command(agency_group, name="agency")
