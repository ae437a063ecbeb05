"""Company profile commands."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.domain.company import CompanyService

# (label, field) in display order
PROFILE_LINES = (
    ("Name", "name"),
    ("Address", "address"),
    ("City", "city"),
    ("Country", "country"),
    ("Postal code", "postal_code"),
    ("Phone", "phone"),
    ("Email", "email"),
    ("Website", "website"),
    ("Tax ID", "tax_id"),
    ("License number", "license_number"),
    ("Currency", "currency"),
)


@click.group()
def company_group():
    """Show or edit the company profile."""
    pass


@company_group.command("show")
@click.pass_context
def show_company(ctx):
    """Show the company profile."""
    profile = CompanyService(ctx.obj["db"]).get_profile()
    if profile.updated_at is None:
        click.echo("No company profile yet. Set one with 'tourops company set'.")
        return

    click.echo("\nCompany profile")
    click.echo("=" * 60)
    for label, name in PROFILE_LINES:
        click.echo(f"  {label + ':':16s} {getattr(profile, name) or '-'}")
    click.echo(f"  {'Updated:':16s} {profile.updated_at:%Y-%m-%d %H:%M}")


@company_group.command("set")
@click.option("--name", help="Company name")
@click.option("--address", help="Street address")
@click.option("--city", help="City")
@click.option("--country", help="Country")
@click.option("--postal-code", help="Postal code")
@click.option("--phone", help="Phone number")
@click.option("--email", help="Email address")
@click.option("--website", help="Website")
@click.option("--tax-id", help="Tax ID")
@click.option("--license-number", help="Tourism license number")
@click.option("--currency", help="Default currency code, e.g. USD")
@click.pass_context
def set_company(ctx, **options):
    """Change company profile fields. Fields not given keep their value.

    Name, email and phone are required before the first save.

    Examples:
        tourops company set --name "Mediterranean Explorer Tours" \\
            --email info@example.com --phone "+90 212 368 4200"
        tourops company set --currency EUR
    """
    changes = {name: value for name, value in options.items() if value is not None}
    if not changes:
        click.echo("Nothing to change.")
        return
    try:
        CompanyService(ctx.obj["db"]).update_profile(**changes)
        click.echo(f"Updated company profile ({', '.join(sorted(changes))})")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group, name="company")
