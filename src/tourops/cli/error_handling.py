"""CLI error handling helpers."""

import click

from tourops.domain.errors import DomainError, ValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ValidationError) and len(error.field_errors) > 1:
        for field, message in error.field_errors.items():
            click.echo(f"  {field}: {message}", err=True)
    ctx.exit(1)
