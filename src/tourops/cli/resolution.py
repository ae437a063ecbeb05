"""CLI helpers for resolving master-data references."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.utils.resolvers import resolve_record


def resolve_or_exit(
    ctx: click.Context,
    value: str | int,
    get_by_id: Callable[[int], Optional[Any]],
    list_all: Callable[[], Iterable[Any]],
    kind: str,
) -> int:
    """Resolve a record name or ID to its ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_record(value, get_by_id, list_all, kind).id
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_optional(
    ctx: click.Context,
    value: str | None,
    get_by_id: Callable[[int], Optional[Any]],
    list_all: Callable[[], Iterable[Any]],
    kind: str,
) -> int | None:
    """Like ``resolve_or_exit`` but passes ``None`` through."""
    if value is None or value == "":
        return None
    return resolve_or_exit(ctx, value, get_by_id, list_all, kind)


def confirm_or_abort(message: str, yes: bool) -> bool:
    """Ask for confirmation unless ``--yes`` was given."""
    if yes:
        return True
    if not click.confirm(message):
        click.echo("Deletion cancelled.")
        return False
    return True
