"""User management commands."""

import click

from tourops.cli.error_handling import handle_domain_error
from tourops.cli.resolution import confirm_or_abort, resolve_or_exit
from tourops.domain.master_data import USER_ROLES, UserService


@click.group()
def user_group():
    """Manage back-office users."""
    pass


@user_group.command("create")
@click.argument("name")
@click.option("--email", required=True, help="Email address (unique)")
@click.option("--role", type=click.Choice(USER_ROLES), default="Sales", show_default=True)
@click.pass_context
def create_user(ctx, name: str, email: str, role: str):
    """Create a new user.

    Examples:
        tourops user create "Lina Haddad" --email lina@example.com --role Sales
    """
    service = UserService(ctx.obj["db"])
    try:
        user_id = service.create_user(name=name, email=email, role=role)
        click.echo(f"Created user '{name}' (ID: {user_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@user_group.command("list")
@click.option("--search", help="Filter by name or email")
@click.option("--role", type=click.Choice(USER_ROLES), help="Only users with this role")
@click.pass_context
def list_users(ctx, search: str | None, role: str | None):
    """List users."""
    users = UserService(ctx.obj["db"]).list_users(search=search, role=role)
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 60)
    for user in users:
        status = "" if user.is_active else " (inactive)"
        click.echo(f"ID: {user.id:3d} | {user.name:20s} | {user.role:10s} | {user.email}{status}")


@user_group.command("update")
@click.argument("user", metavar="USER")
@click.option("--name", help="New name")
@click.option("--email", help="New email")
@click.option("--role", type=click.Choice(USER_ROLES))
@click.option("--active/--inactive", default=None, help="Activate or deactivate")
@click.pass_context
def update_user(ctx, user: str, name, email, role, active):
    """Update a user. USER can be a user name or ID."""
    service = UserService(ctx.obj["db"])
    user_id = resolve_or_exit(ctx, user, service.get_user, service.list_users, "User")
    fields = {"name": name, "email": email, "role": role, "is_active": active}
    try:
        service.update_user(user_id, **{k: v for k, v in fields.items() if v is not None})
        click.echo(f"Updated user {user_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@user_group.command("delete")
@click.argument("user", metavar="USER")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_user(ctx, user: str, yes: bool):
    """Delete a user. USER can be a user name or ID."""
    service = UserService(ctx.obj["db"])
    user_id = resolve_or_exit(ctx, user, service.get_user, service.list_users, "User")
    record = service.get_user(user_id)
    if not confirm_or_abort(f"Are you sure you want to delete user '{record.name}'?", yes):
        return
    try:
        service.delete_user(user_id)
        click.echo(f"Deleted user '{record.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@user_group.command("deactivate")
@click.argument("user_ids", nargs=-1, type=int, required=True)
@click.pass_context
def deactivate_users(ctx, user_ids: tuple[int, ...]):
    """Mark one or more users inactive."""
    count = UserService(ctx.obj["db"]).bulk_deactivate(user_ids)
    click.echo(f"Deactivated {count} user(s)")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
