"""Voucher commands: listing, status changes and guest lists."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.domain.entities import Voucher, VoucherStatus
from tourops.domain.errors import NotFoundError
from tourops.domain.master_data import AgencyService, UserService
from tourops.domain.proposal import ProposalService
from tourops.domain.voucher import VoucherService
from tourops.utils.resolvers import display_name

STATUS_CHOICE = click.Choice([status.value for status in VoucherStatus])

# service_data keys not repeated in the details section
_HIDDEN_SNAPSHOT_KEYS = frozenset({"id", "category"})


def _find(ctx, service: VoucherService, value: str) -> Voucher:
    try:
        return service.find_voucher(value)
    except NotFoundError as e:
        handle_domain_error(ctx, e)


@click.group()
def voucher_group():
    """Manage vouchers issued for confirmed proposals."""
    pass


@voucher_group.command("list")
@click.option("--proposal", help="Proposal ID or reference")
@click.option("--status", type=STATUS_CHOICE, help="Only vouchers in this status")
@click.pass_context
def list_vouchers(ctx, proposal: str | None, status: str | None):
    """List vouchers."""
    db = ctx.obj["db"]
    proposal_id = None
    if proposal is not None:
        try:
            proposal_id = ProposalService(db).find_proposal(proposal).id
        except NotFoundError as e:
            handle_domain_error(ctx, e)

    vouchers = VoucherService(db).list_vouchers(
        proposal_id=proposal_id, status=VoucherStatus(status) if status else None
    )
    if not vouchers:
        click.echo("No vouchers found.")
        return

    click.echo(f"\nFound {len(vouchers)} voucher(s):")
    click.echo("-" * 80)
    for voucher in vouchers:
        click.echo(
            f"{voucher.voucher_number:20s} | {voucher.service_type.label:18s} | "
            f"{voucher.status.value:15s} | guests: {len(voucher.guests)}"
        )


@voucher_group.command("show")
@click.argument("voucher", metavar="VOUCHER")
@click.pass_context
def show_voucher(ctx, voucher: str):
    """Show a voucher with its service snapshot and guests.

    VOUCHER can be a voucher ID or voucher number.
    """
    db = ctx.obj["db"]
    found = _find(ctx, VoucherService(db), voucher)

    click.echo(f"\nVoucher {found.voucher_number} ({found.status.value})")
    click.echo("=" * 80)
    click.echo(f"  ID: {found.id}")
    click.echo(f"  Proposal: {found.proposal_reference}")
    click.echo(f"  Service: {found.service_type.label}")
    if found.agency_id is not None:
        click.echo(f"  Agency: {display_name(AgencyService(db).get_agency(found.agency_id))}")
    if found.sales_person_id is not None:
        click.echo(f"  Sales person: {display_name(UserService(db).get_user(found.sales_person_id))}")
    if found.notes:
        click.echo(f"  Notes: {found.notes}")

    click.echo("\nService details:")
    for key, value in found.service_data.items():
        if key in _HIDDEN_SNAPSHOT_KEYS or value in ("", None):
            continue
        click.echo(f"  {key}: {value}")

    click.echo(f"\nGuests ({len(found.guests)}):")
    for guest in found.guests:
        extra = ", ".join(
            part for part in (guest.passport_number, guest.nationality, guest.birth_date) if part
        )
        click.echo(f"  {guest.id[:8]} | {guest.first_name} {guest.last_name}" + (f" | {extra}" if extra else ""))


@voucher_group.command("status")
@click.argument("voucher", metavar="VOUCHER")
@click.argument("target", type=STATUS_CHOICE)
@click.pass_context
def change_status(ctx, voucher: str, target: str):
    """Move a voucher to a new status.

    PENDING_PAYMENT -> PAID -> COMPLETED; any state can be CANCELLED.
    """
    service = VoucherService(ctx.obj["db"])
    found = _find(ctx, service, voucher)
    try:
        service.change_status(found.id, VoucherStatus(target))
        click.echo(f"Voucher {found.voucher_number} is now {target}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@voucher_group.command("notes")
@click.argument("voucher", metavar="VOUCHER")
@click.argument("notes")
@click.pass_context
def update_notes(ctx, voucher: str, notes: str):
    """Replace the notes of a voucher."""
    service = VoucherService(ctx.obj["db"])
    found = _find(ctx, service, voucher)
    service.update_notes(found.id, notes)
    click.echo(f"Updated notes of {found.voucher_number}")


@voucher_group.group("guest")
def guest_group():
    """Edit the guest list of a voucher."""
    pass


@guest_group.command("add")
@click.argument("voucher", metavar="VOUCHER")
@click.option("--first-name", default="")
@click.option("--last-name", default="")
@click.option("--passport", "passport_number", default="")
@click.option("--nationality", default="")
@click.option("--birth-date", default="")
@click.pass_context
def add_guest(ctx, voucher, first_name, last_name, passport_number, nationality, birth_date):
    """Add a guest to a voucher."""
    service = VoucherService(ctx.obj["db"])
    found = _find(ctx, service, voucher)
    try:
        updated = service.add_guest(
            found.id,
            first_name=first_name,
            last_name=last_name,
            passport_number=passport_number,
            nationality=nationality,
            birth_date=birth_date,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added guest {updated.guests[-1].id} to {found.voucher_number}")


@guest_group.command("update")
@click.argument("voucher", metavar="VOUCHER")
@click.argument("guest_id")
@click.option("--first-name")
@click.option("--last-name")
@click.option("--passport", "passport_number")
@click.option("--nationality")
@click.option("--birth-date")
@click.pass_context
def update_guest(ctx, voucher, guest_id, first_name, last_name, passport_number, nationality, birth_date):
    """Change fields of a guest."""
    service = VoucherService(ctx.obj["db"])
    found = _find(ctx, service, voucher)
    changes = {
        "first_name": first_name,
        "last_name": last_name,
        "passport_number": passport_number,
        "nationality": nationality,
        "birth_date": birth_date,
    }
    try:
        service.update_guest(found.id, guest_id, **{k: v for k, v in changes.items() if v is not None})
        click.echo(f"Updated guest {guest_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@guest_group.command("remove")
@click.argument("voucher", metavar="VOUCHER")
@click.argument("guest_id")
@click.pass_context
def remove_guest(ctx, voucher: str, guest_id: str):
    """Remove a guest from a voucher."""
    service = VoucherService(ctx.obj["db"])
    found = _find(ctx, service, voucher)
    try:
        service.remove_guest(found.id, guest_id)
        click.echo(f"Removed guest {guest_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@guest_group.command("duplicate")
@click.argument("voucher", metavar="VOUCHER")
@click.argument("guest_id")
@click.pass_context
def duplicate_guest(ctx, voucher: str, guest_id: str):
    """Copy a guest under a fresh id."""
    service = VoucherService(ctx.obj["db"])
    found = _find(ctx, service, voucher)
    try:
        updated = service.duplicate_guest(found.id, guest_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Duplicated guest {guest_id} as {updated.guests[-1].id}")


def register_commands(cli):
    """Register voucher commands with main CLI."""
    cli.add_command(voucher_group, name="voucher")
