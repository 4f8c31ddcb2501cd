"""NodeCMS CLI tool (nodecms)."""

import asyncio
from typing import List

import typer

from nodecms.core.config import settings
from nodecms.core.exceptions import NodeCMSError
from nodecms.db.session import build_store
from nodecms.schemas.schemas import Identity
from nodecms.services.container import bootstrap, build_services

app = typer.Typer(name="nodecms", help="NodeCMS CLI")
db_app = typer.Typer(help="Database management commands")
roles_app = typer.Typer(help="Role management commands")
users_app = typer.Typer(help="User management commands")
app.add_typer(db_app, name="db")
app.add_typer(roles_app, name="roles")
app.add_typer(users_app, name="users")


def _run(action):
    """Run ``action(services)`` against the configured store and report errors."""

    async def runner():
        store = await build_store(settings)
        try:
            services = build_services(store, settings)
            await bootstrap(services, settings)
            return await action(services)
        finally:
            await store.close()

    try:
        return asyncio.run(runner())
    except NodeCMSError as e:
        typer.echo(f"Error [{e.status.type}:{e.status.code}] {e.message}", err=True)
        raise typer.Exit(code=1)


@db_app.command("init")
def db_init():
    """Create the document tables and seed the system roles."""

    async def action(services):
        return len(await services.roles.get_all_roles())

    count = _run(action)
    typer.echo(f"Store ready ({settings.STORE_BACKEND}), {count} roles")


@roles_app.command("list")
def roles_list():
    """List all roles and their granted permissions."""

    async def action(services):
        return await services.roles.get_all_roles()

    for role in _run(action):
        flag = " (system)" if role.system else ""
        typer.echo(f"{role.name}{flag}")
        for group, perms in sorted(role.perm_groups.items()):
            granted = [name for name, value in perms.items() if value]
            typer.echo(f"  {group}: {', '.join(granted) or '-'}")


@roles_app.command("create")
def roles_create(
    name: str = typer.Argument(..., help="Role name"),
    system: bool = typer.Option(False, help="Protect the role from deletion"),
):
    """Create a role."""
    _run(lambda services: services.roles.create_role(name, system=system))
    typer.echo(f"Role '{name}' created")


@roles_app.command("delete")
def roles_delete(name: str = typer.Argument(..., help="Role name")):
    """Delete a non-system role."""
    _run(lambda services: services.roles.delete_role(name))
    typer.echo(f"Role '{name}' deleted")


@roles_app.command("grant")
def roles_grant(
    name: str = typer.Argument(..., help="Role name"),
    group: str = typer.Argument(..., help="Permission group"),
    permissions: List[str] = typer.Argument(..., help="Permission names"),
    deny: bool = typer.Option(False, "--deny", help="Set the permissions to false instead"),
):
    """Set permissions on a role, creating the role if needed."""
    perms = {permission: not deny for permission in permissions}
    _run(lambda services: services.roles.set_permissions(name, group, perms))
    typer.echo(f"Role '{name}' {group}: {perms}")


@users_app.command("create")
def users_create(
    username: str = typer.Argument(..., help="Username"),
    email: str = typer.Option(None, help="Email address"),
):
    """Create a user."""
    user = _run(lambda services: services.users.create_user(username, email))
    typer.echo(f"User '{user.username}' created with id {user.id}")


@users_app.command("assign")
def users_assign(
    username: str = typer.Argument(..., help="Username"),
    role: str = typer.Argument(..., help="Role name"),
):
    """Assign a role to a user."""
    _run(lambda services: services.users.assign_role(Identity(username=username), role))
    typer.echo(f"Role '{role}' assigned to '{username}'")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the API server."""
    import uvicorn
    uvicorn.run("nodecms.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
