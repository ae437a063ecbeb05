"""Source (acquisition channel) commands."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.cli.resolution import confirm_or_abort, resolve_or_exit
from tourops.domain.master_data import SourceService


@click.group()
def source_group():
    """Manage proposal sources / channels."""
    pass


@source_group.command("create")
@click.argument("name")
@click.option("--description", help="Optional description")
@click.option(
    "--requires-agency", is_flag=True, help="Proposals from this channel must name an agency"
)
@click.pass_context
def create_source(ctx, name: str, description: str | None, requires_agency: bool):
    """Create a new source.

    Examples:
        tourops source create "Walk-in"
        tourops source create "Travel Agency (B2B)" --requires-agency
    """
    service = SourceService(ctx.obj["db"])
    try:
        source_id = service.create_source(
            name=name, description=description, requires_agency=requires_agency
        )
        click.echo(f"Created source '{name}' (ID: {source_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@source_group.command("list")
@click.option("--search", help="Filter by name or description")
@click.pass_context
def list_sources(ctx, search: str | None):
    """List sources."""
    sources = SourceService(ctx.obj["db"]).list_sources(search=search)
    if not sources:
        click.echo("No sources found.")
        return

    click.echo("\nSources:")
    click.echo("-" * 60)
    for source in sources:
        flags = []
        if source.requires_agency:
            flags.append("requires agency")
        if not source.is_active:
            flags.append("inactive")
        suffix = f" ({', '.join(flags)})" if flags else ""
        click.echo(f"ID: {source.id:3d} | {source.name}{suffix}")


@source_group.command("update")
@click.argument("source", metavar="SOURCE")
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.option("--requires-agency/--no-requires-agency", default=None)
@click.option("--active/--inactive", default=None, help="Activate or deactivate")
@click.pass_context
def update_source(ctx, source: str, name, description, requires_agency, active):
    """Update a source. SOURCE can be a source name or ID."""
    service = SourceService(ctx.obj["db"])
    source_id = resolve_or_exit(ctx, source, service.get_source, service.list_sources, "Source")
    fields = {
        "name": name,
        "description": description,
        "requires_agency": requires_agency,
        "is_active": active,
    }
    try:
        service.update_source(source_id, **{k: v for k, v in fields.items() if v is not None})
        click.echo(f"Updated source {source_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@source_group.command("delete")
@click.argument("source", metavar="SOURCE")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_source(ctx, source: str, yes: bool):
    """Delete a source.

    Proposals that reference it keep working and show "Unknown" as channel.
    """
    service = SourceService(ctx.obj["db"])
    source_id = resolve_or_exit(ctx, source, service.get_source, service.list_sources, "Source")
    record = service.get_source(source_id)
    if not confirm_or_abort(f"Are you sure you want to delete source '{record.name}'?", yes):
        return
    try:
        service.delete_source(source_id)
        click.echo(f"Deleted source '{record.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@source_group.command("deactivate")
@click.argument("source_ids", nargs=-1, type=int, required=True)
@click.pass_context
def deactivate_sources(ctx, source_ids: tuple[int, ...]):
    """Mark one or more sources inactive."""
    count = SourceService(ctx.obj["db"]).bulk_deactivate(source_ids)
    click.echo(f"Deactivated {count} source(s)")


def register_commands(cli):
    """Register source commands with main CLI."""
    cli.add_command(source_group, name="source")
