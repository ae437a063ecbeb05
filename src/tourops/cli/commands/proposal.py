"""Proposal commands: drafting, line items, lifecycle and bulk actions."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.cli.resolution import confirm_or_abort, resolve_optional, resolve_or_exit
from tourops.domain.entities import (
    BulkOutcomeKind,
    BulkResult,
    HotelEntry,
    Proposal,
    ProposalStatus,
    ServiceCategory,
)
from tourops.domain.errors import NotFoundError
from tourops.domain.master_data import (
    AgencyService,
    DestinationService,
    HotelService,
    SourceService,
    UserService,
)
from tourops.domain.pricing import compute_line_total, compute_sell_price, hotel_nights
from tourops.domain.proposal import (
    DEFAULT_COMMISSION,
    DEFAULT_DISPLAY_CURRENCY,
    DEFAULT_MARGIN,
    DEFAULT_PDF_LANGUAGE,
    DEFAULT_PER_PAGE,
    ProposalService,
    price_breakdown,
)
from tourops.utils.money import format_money
from tourops.utils.resolvers import display_name

CATEGORY_CHOICE = click.Choice([category.value for category in ServiceCategory])
STATUS_CHOICE = click.Choice([status.value for status in ProposalStatus])

# Line-item fields stored as integers when the value is numeric
INTEGER_FIELDS = frozenset(
    {"hotel_id", "destination_id", "num_rooms", "num_days", "num_vehicles", "pax", "num_people"}
)


def _find(ctx, service: ProposalService, value: str) -> Proposal:
    try:
        return service.find_proposal(value)
    except NotFoundError as e:
        handle_domain_error(ctx, e)


def _parse_assignments(ctx, assignments: tuple[str, ...]) -> dict:
    """Turn ``field=value`` pairs into keyword arguments."""
    values = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep or not name.strip():
            click.echo(f"Error: Expected FIELD=VALUE, got '{assignment}'", err=True)
            ctx.exit(1)
        name = name.strip().replace("-", "_")
        if name in INTEGER_FIELDS:
            try:
                value = int(value)
            except ValueError:
                # Kept as text; pricing treats it as the default quantity
                pass
        values[name] = value
    return values


def _resolve_header(ctx, db, source, destinations, agency, sales_person) -> dict:
    fields = {}
    if source is not None:
        sources = SourceService(db)
        fields["source_id"] = resolve_or_exit(
            ctx, source, sources.get_source, sources.list_sources, "Source"
        )
    if destinations:
        dest_service = DestinationService(db)
        fields["destination_ids"] = tuple(
            resolve_or_exit(
                ctx, d, dest_service.get_destination, dest_service.list_destinations, "Destination"
            )
            for d in destinations
        )
    if agency is not None:
        agencies = AgencyService(db)
        fields["agency_id"] = resolve_optional(
            ctx, agency, agencies.get_agency, agencies.list_agencies, "Agency"
        )
    if sales_person is not None:
        users = UserService(db)
        fields["sales_person_id"] = resolve_optional(
            ctx, sales_person, users.get_user, users.list_users, "User"
        )
    return fields


def _echo_bulk(result: BulkResult) -> None:
    for outcome in result.outcomes:
        if outcome.kind == BulkOutcomeKind.APPLIED:
            click.echo(f"{outcome.proposal_id}: {result.action}")
        else:
            click.echo(f"{outcome.proposal_id}: {outcome.kind.value} ({outcome.message})")
    click.echo(
        f"{len(result.applied)} {result.action}, {len(result.skipped)} skipped, "
        f"{len(result.failed)} failed"
    )


def _proposal_ids(service: ProposalService, values: tuple[str, ...]) -> list[str]:
    """Map references to IDs, passing unknown values through for reporting."""
    ids = []
    for value in values:
        try:
            ids.append(service.find_proposal(value).id)
        except NotFoundError:
            ids.append(value)
    return ids


@click.group()
def proposal_group():
    """Manage proposals."""
    pass


@proposal_group.command("create")
@click.option("--source", required=True, help="Source / channel name or ID")
@click.option(
    "--destination", "destinations", multiple=True, required=True,
    help="Destination name or ID (repeat for several)",
)
@click.option("--agency", help="Agency name or ID (required for agency channels)")
@click.option("--sales-person", help="Sales person name or ID")
@click.option("--margin", default=DEFAULT_MARGIN, show_default=True, help="Overall margin %")
@click.option("--commission", default=DEFAULT_COMMISSION, show_default=True, help="Commission %")
@click.option("--nights", default="", help="Estimated number of nights")
@click.option("--pdf-language", default=DEFAULT_PDF_LANGUAGE, show_default=True)
@click.option("--display-currency", default=DEFAULT_DISPLAY_CURRENCY, show_default=True)
@click.pass_context
def create_proposal(
    ctx, source, destinations, agency, sales_person, margin, commission, nights,
    pdf_language, display_currency,
):
    """Create a new draft proposal.

    Examples:
        tourops proposal create --source "Direct (B2C)" --destination Istanbul
        tourops proposal create --source "Travel Agency (B2B)" --agency "Sunrise Travel" \\
            --destination IST --destination Cappadocia --margin 12
    """
    db = ctx.obj["db"]
    fields = _resolve_header(ctx, db, source, destinations, agency, sales_person)
    try:
        proposal = ProposalService(db).create_proposal(
            overall_margin=margin,
            commission=commission,
            estimated_nights=nights,
            pdf_language=pdf_language,
            display_currency=display_currency,
            **fields,
        )
        click.echo(f"Created proposal {proposal.reference} (ID: {proposal.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@proposal_group.command("list")
@click.option("--search", help="Match reference or destination name")
@click.option("--status", type=STATUS_CHOICE, help="Only proposals in this status")
@click.option("--source", help="Source name or ID")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True, help="Page to show")
@click.option(
    "--per-page",
    type=click.IntRange(min=1),
    default=DEFAULT_PER_PAGE,
    show_default=True,
    help="Proposals per page",
)
@click.pass_context
def list_proposals(
    ctx, search: str | None, status: str | None, source: str | None, page: int, per_page: int
):
    """List proposals, newest first."""
    db = ctx.obj["db"]
    sources = SourceService(db)
    source_id = resolve_optional(ctx, source, sources.get_source, sources.list_sources, "Source")
    service = ProposalService(db)
    proposals = service.list_proposals(
        search=search,
        status=ProposalStatus(status) if status else None,
        source_id=source_id,
    )
    if not proposals:
        click.echo("No proposals found.")
        return

    listing = service.paginate(proposals, page, per_page)
    if not listing.items:
        click.echo(
            f"No proposals on page {listing.number}; "
            f"{listing.total_items} proposal(s) fit on {listing.total_pages} page(s)."
        )
        return

    destinations = {d.id: d for d in DestinationService(db).list_destinations()}
    click.echo(f"\nFound {listing.total_items} proposal(s):")
    click.echo("-" * 80)
    for proposal in listing.items:
        names = ", ".join(display_name(destinations.get(d)) for d in proposal.destination_ids)
        total = format_money(price_breakdown(proposal).final_price)
        click.echo(
            f"{proposal.reference:15s} | {proposal.status.value:9s} | {names:30s} | {total:>12s}"
            f" | {proposal.id}"
        )
    if listing.total_pages > 1:
        click.echo(f"Page {listing.number} of {listing.total_pages}")


@proposal_group.command("show")
@click.argument("proposal", metavar="PROPOSAL")
@click.pass_context
def show_proposal(ctx, proposal: str):
    """Show a proposal with its line items and price breakdown.

    PROPOSAL can be a proposal ID or reference.
    """
    db = ctx.obj["db"]
    found = _find(ctx, ProposalService(db), proposal)
    destinations = DestinationService(db)
    hotels = HotelService(db)
    breakdown = price_breakdown(found)

    click.echo(f"\nProposal {found.reference} ({found.status.value})")
    click.echo("=" * 80)
    click.echo(f"  ID: {found.id}")
    click.echo(f"  Created: {found.created_at:%Y-%m-%d %H:%M}")
    click.echo(f"  Source: {display_name(SourceService(db).get_source(found.source_id))}")
    if found.agency_id is not None:
        click.echo(f"  Agency: {display_name(AgencyService(db).get_agency(found.agency_id))}")
    if found.sales_person_id is not None:
        click.echo(f"  Sales person: {display_name(UserService(db).get_user(found.sales_person_id))}")
    names = ", ".join(display_name(destinations.get_destination(d)) for d in found.destination_ids)
    click.echo(f"  Destinations: {names}")
    if found.estimated_nights:
        click.echo(f"  Estimated nights: {found.estimated_nights}")

    for category in ServiceCategory:
        items = found.items(category)
        if not items:
            continue
        click.echo(f"\n{category.label} ({len(items)}):")
        click.echo("-" * 80)
        for item in items:
            if isinstance(item, HotelEntry):
                label = display_name(hotels.get_hotel(item.hotel_id) if item.hotel_id else None)
                detail = f"{label}, {hotel_nights(item.checkin, item.checkout)} night(s)"
            else:
                detail = getattr(item, "description", "") or getattr(item, "date", "")
            line_total = compute_line_total(item)
            total = format_money(line_total, item.currency)
            sell_price = compute_sell_price(line_total, found.overall_margin, found.commission)
            sell = format_money(sell_price, item.currency)
            click.echo(f"  {item.id[:8]} | {detail:36s} | {total:>14s} | sell {sell:>14s}")
        click.echo(f"  Subtotal: {format_money(breakdown.category_subtotals[category])}")

    click.echo("\n" + "-" * 80)
    click.echo(f"Subtotal:   {format_money(breakdown.subtotal):>14s}")
    click.echo(f"Margin:     {format_money(breakdown.margin_amount):>14s} ({found.overall_margin}%)")
    click.echo(f"Commission: {format_money(breakdown.commission_amount):>14s} ({found.commission}%)")
    click.echo(f"Total:      {format_money(breakdown.final_price):>14s}")
    if breakdown.mixed_currencies:
        click.echo(
            f"Warning: line items use several currencies ({', '.join(breakdown.currencies)}); "
            "totals are not converted.",
            err=True,
        )


@proposal_group.command("update")
@click.argument("proposal", metavar="PROPOSAL")
@click.option("--source", help="Source name or ID")
@click.option("--destination", "destinations", multiple=True, help="Replace destinations")
@click.option("--agency", help="Agency name or ID (empty string to clear)")
@click.option("--sales-person", help="Sales person name or ID (empty string to clear)")
@click.option("--margin", help="Overall margin %")
@click.option("--commission", help="Commission %")
@click.option("--nights", help="Estimated number of nights")
@click.option("--pdf-language")
@click.option("--display-currency")
@click.pass_context
def update_proposal(
    ctx, proposal, source, destinations, agency, sales_person, margin, commission, nights,
    pdf_language, display_currency,
):
    """Update proposal header fields.

    Allowed while the proposal is NEW or CONFIRMED.
    """
    db = ctx.obj["db"]
    service = ProposalService(db)
    found = _find(ctx, service, proposal)
    fields = _resolve_header(ctx, db, source, destinations, agency, sales_person)
    for name, value in {
        "overall_margin": margin,
        "commission": commission,
        "estimated_nights": nights,
        "pdf_language": pdf_language,
        "display_currency": display_currency,
    }.items():
        if value is not None:
            fields[name] = value
    if not fields:
        click.echo("Nothing to update.")
        return
    try:
        service.update_proposal(found.id, **fields)
        click.echo(f"Updated proposal {found.reference}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@proposal_group.command("confirm")
@click.argument("proposals", nargs=-1, required=True, metavar="PROPOSAL...")
@click.pass_context
def confirm_proposals(ctx, proposals: tuple[str, ...]):
    """Confirm proposals and issue their vouchers.

    With several PROPOSAL arguments each one is confirmed independently and
    ineligible ones are reported as skipped.
    """
    service = ProposalService(ctx.obj["db"])
    if len(proposals) > 1:
        _echo_bulk(service.bulk_confirm(_proposal_ids(service, proposals)))
        return
    found = _find(ctx, service, proposals[0])
    try:
        confirmed, vouchers = service.confirm_proposal(found.id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Confirmed proposal {confirmed.reference}")
    for voucher in vouchers:
        click.echo(f"  Issued voucher {voucher.voucher_number} ({voucher.service_type.label})")


@proposal_group.command("cancel")
@click.argument("proposals", nargs=-1, required=True, metavar="PROPOSAL...")
@click.pass_context
def cancel_proposals(ctx, proposals: tuple[str, ...]):
    """Cancel one or more proposals."""
    service = ProposalService(ctx.obj["db"])
    if len(proposals) > 1:
        _echo_bulk(service.bulk_cancel(_proposal_ids(service, proposals)))
        return
    found = _find(ctx, service, proposals[0])
    try:
        service.cancel_proposal(found.id)
        click.echo(f"Cancelled proposal {found.reference}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@proposal_group.command("delete")
@click.argument("proposals", nargs=-1, required=True, metavar="PROPOSAL...")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_proposals(ctx, proposals: tuple[str, ...], yes: bool):
    """Delete one or more proposals. Issued vouchers are kept."""
    service = ProposalService(ctx.obj["db"])
    if not confirm_or_abort(f"Are you sure you want to delete {len(proposals)} proposal(s)?", yes):
        return
    if len(proposals) > 1:
        _echo_bulk(service.bulk_delete(_proposal_ids(service, proposals)))
        return
    found = _find(ctx, service, proposals[0])
    service.delete_proposal(found.id)
    click.echo(f"Deleted proposal {found.reference}")


@proposal_group.command("duplicate")
@click.argument("proposal", metavar="PROPOSAL")
@click.pass_context
def duplicate_proposal(ctx, proposal: str):
    """Copy a proposal as a new draft with a new reference."""
    service = ProposalService(ctx.obj["db"])
    found = _find(ctx, service, proposal)
    copy = service.duplicate(found.id)
    click.echo(f"Duplicated {found.reference} as {copy.reference} (ID: {copy.id})")


# Line items


@proposal_group.group("item")
def item_group():
    """Edit the line items of a draft proposal."""
    pass


@item_group.command("add")
@click.argument("proposal", metavar="PROPOSAL")
@click.argument("category", type=CATEGORY_CHOICE)
@click.option("--set", "assignments", multiple=True, metavar="FIELD=VALUE", help="Field value")
@click.pass_context
def add_item(ctx, proposal: str, category: str, assignments: tuple[str, ...]):
    """Add a line item.

    Examples:
        tourops proposal item add TOMS-2024-1234 hotel --set hotel_id=1 \\
            --set checkin=2024-06-01 --set checkout=2024-06-04 --set price_per_night=120
        tourops proposal item add TOMS-2024-1234 flight --set pax=2 --set price_per_pax=310
    """
    service = ProposalService(ctx.obj["db"])
    found = _find(ctx, service, proposal)
    values = _parse_assignments(ctx, assignments)
    try:
        updated = service.add_item(found.id, ServiceCategory(category), **values)
    except ValueError as e:
        handle_domain_error(ctx, e)
    item = updated.items(ServiceCategory(category))[-1]
    click.echo(f"Added {item.category.label} item {item.id}")


@item_group.command("update")
@click.argument("proposal", metavar="PROPOSAL")
@click.argument("category", type=CATEGORY_CHOICE)
@click.argument("item_id")
@click.option("--set", "assignments", multiple=True, metavar="FIELD=VALUE", help="Field value")
@click.pass_context
def update_item(ctx, proposal: str, category: str, item_id: str, assignments: tuple[str, ...]):
    """Change fields of a line item."""
    service = ProposalService(ctx.obj["db"])
    found = _find(ctx, service, proposal)
    values = _parse_assignments(ctx, assignments)
    try:
        service.update_item(found.id, ServiceCategory(category), item_id, **values)
        click.echo(f"Updated item {item_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@item_group.command("remove")
@click.argument("proposal", metavar="PROPOSAL")
@click.argument("category", type=CATEGORY_CHOICE)
@click.argument("item_id")
@click.pass_context
def remove_item(ctx, proposal: str, category: str, item_id: str):
    """Remove a line item."""
    service = ProposalService(ctx.obj["db"])
    found = _find(ctx, service, proposal)
    try:
        service.remove_item(found.id, ServiceCategory(category), item_id)
        click.echo(f"Removed item {item_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@item_group.command("duplicate")
@click.argument("proposal", metavar="PROPOSAL")
@click.argument("category", type=CATEGORY_CHOICE)
@click.argument("item_id")
@click.pass_context
def duplicate_item(ctx, proposal: str, category: str, item_id: str):
    """Copy a line item under a fresh id."""
    service = ProposalService(ctx.obj["db"])
    found = _find(ctx, service, proposal)
    try:
        updated = service.duplicate_item(found.id, ServiceCategory(category), item_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    copy = updated.items(ServiceCategory(category))[-1]
    click.echo(f"Duplicated item {item_id} as {copy.id}")


def register_commands(cli):
    """Register proposal commands with main CLI."""
    cli.add_command(proposal_group, name="proposal")
