"""ds CLI - session, transfer and lifecycle commands."""
import asyncio
import json
from pathlib import Path
from typing import Optional

import aiofiles
import typer
from rich.console import Console
from rich.table import Table

from dsbase import DsClient, DsException, APIErrorCodes, SQLiteTokenStore

app = typer.Typer(
    name="ds",
    help="ds administration API CLI",
    add_completion=False
)
console = Console()

state = {
    'origin': None,
    'user': None,
    'repo': None,
    'storage': None,
}


# Token storage: ~/.config/dsbase/session.storage
def get_storage_path() -> Path:
    if state['storage']:
        return Path(state['storage'])
    config_dir = Path.home() / ".config" / "dsbase"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / f"session{SQLiteTokenStore.EXTENSION}"


def make_client() -> DsClient:
    """Client for the configured endpoint and token storage."""
    return DsClient(
        SQLiteTokenStore(get_storage_path()),
        origin=state['origin'],
        user=state['user'],
        repo=state['repo'],
    )


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def fail(action: str, error: int):
    console.print(f"[red]{action} failed: error {error} ({APIErrorCodes.get_message(error)})[/red]")
    raise typer.Exit(1)


def run_operation(action: str, operation):
    """
    Run `operation(client)` and return its payload, exiting on failure.

    Argument and configuration errors are reported the same way as
    remote failures.
    """
    async def runner():
        client = make_client()
        try:
            outcome = await operation(client)
        finally:
            await client.close()
        return outcome

    try:
        outcome = run_async(runner())
    except DsException as e:
        console.print(f"[red]{action} failed: {e}[/red]")
        raise typer.Exit(1)

    if not outcome.ok:
        fail(action, outcome.error)
    return outcome.payload


@app.callback()
def main_options(
    origin: Optional[str] = typer.Option(None, "--origin", envvar="DS_ORIGIN", help="API origin, e.g. https://apps.example.com"),
    user: Optional[str] = typer.Option(None, "--user", envvar="DS_USER", help="Repository owner"),
    repo: Optional[str] = typer.Option(None, "--repo", envvar="DS_REPO", help="Repository name"),
    storage: Optional[str] = typer.Option(None, "--storage", envvar="DS_STORAGE", help="Token storage file"),
):
    """Global endpoint options."""
    state['origin'] = origin
    state['user'] = user
    state['repo'] = repo
    state['storage'] = storage


@app.command()
def login(
    username: str = typer.Option(None, "--username", "-u", help="User name"),
    password: str = typer.Option(None, "--password", "-p", help="Password"),
):
    """Login and store the session token."""
    if not username:
        username = typer.prompt("Username")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    run_operation("Login", lambda ds: ds.login(username, password))
    console.print(f"[green]Logged in as {username}[/green]")
    console.print(f"Token saved to: {get_storage_path()}")


@app.command("login-token")
def login_token(
    token: str = typer.Argument(..., help="Token issued by the server"),
):
    """Validate a token with the server and store it."""
    run_operation("Token login", lambda ds: ds.login_token(token))
    console.print("[green]Token accepted[/green]")


@app.command()
def logout():
    """Forget the stored session token."""
    async def runner():
        client = make_client()
        try:
            had_token = client.authenticated()
            client.logout()
        finally:
            await client.close()
        return had_token

    if run_async(runner()):
        console.print("[green]Logged out successfully[/green]")
    else:
        console.print("[yellow]No active session[/yellow]")


@app.command()
def whoami():
    """Show whether a session token is stored."""
    with SQLiteTokenStore(get_storage_path()) as store:
        if not store.has_token():
            console.print("[red]Not logged in. Run 'ds login' first.[/red]")
            raise typer.Exit(1)
        updated = store.updated_at()
    console.print(f"Token stored: {updated.isoformat(timespec='seconds') if updated else 'yes'}")
    console.print(f"Storage: {get_storage_path()}")


@app.command()
def ls(
    raw: bool = typer.Option(False, "--json", help="Print the raw JSON listing"),
):
    """List uploaded resources."""
    items = run_operation("List", lambda ds: ds.list())

    if raw or not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        console.print_json(json.dumps(items))
        return

    columns = []
    for item in items:
        for key in item:
            if key not in columns:
                columns.append(key)

    table = Table()
    for column in columns:
        table.add_column(str(column))
    for item in items:
        table.add_row(*(str(item.get(column, '')) for column in columns))
    console.print(table)


@app.command()
def download(
    filename: str = typer.Argument(..., help="Resource name"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the object to this file"),
):
    """Download a JSON object."""
    obj = run_operation("Download", lambda ds: ds.download_object(filename))

    if output is None:
        console.print_json(json.dumps(obj))
        return

    async def write():
        async with aiofiles.open(output, 'w') as f:
            await f.write(json.dumps(obj, indent=2))

    run_async(write())
    console.print(f"[green]Downloaded:[/green] {output}")


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    name: str = typer.Option(None, "--name", "-n", help="File name sent to the server"),
):
    """Upload a file."""
    run_operation("Upload", lambda ds: ds.upload_file(file_path, name))
    console.print(f"[green]Uploaded:[/green] {name or file_path.name}")


@app.command("upload-object")
def upload_object(
    filename: str = typer.Argument(..., help="Resource name"),
    data: str = typer.Argument(..., help="JSON object or array"),
):
    """Upload a JSON object given on the command line."""
    try:
        obj = json.loads(data)
    except ValueError:
        console.print("[red]DATA is not valid JSON[/red]")
        raise typer.Exit(1)

    run_operation("Upload", lambda ds: ds.upload_object(obj, filename))
    console.print(f"[green]Uploaded:[/green] {filename}")


@app.command()
def rm(
    filename: str = typer.Argument(..., help="Resource to delete"),
    force: bool = typer.Option(False, "-f", "--force", help="Force delete without confirmation"),
):
    """Delete an uploaded resource."""
    if not force:
        confirm = typer.confirm(f"Delete '{filename}'?")
        if not confirm:
            raise typer.Abort()

    run_operation("Delete", lambda ds: ds.remove(filename))
    console.print(f"[green]Deleted:[/green] {filename}")


@app.command()
def versions():
    """Show server component versions."""
    result = run_operation("Versions", lambda ds: ds.get_server_versions())

    if not isinstance(result, dict):
        console.print_json(json.dumps(result))
        return

    table = Table()
    table.add_column("Component", style="cyan")
    table.add_column("Version")
    for component, version in result.items():
        table.add_row(str(component), str(version))
    console.print(table)


@app.command()
def startup(
    url: str = typer.Option(None, "--set", help="New startup URL"),
):
    """Show or set the startup URL."""
    if url is not None:
        run_operation("Set startup", lambda ds: ds.set_startup(url))
        console.print(f"[green]Startup set:[/green] {url}")
        return

    current = run_operation("Get startup", lambda ds: ds.get_startup())
    console.print(current if current is not None else "[yellow]No startup URL[/yellow]")


@app.command()
def install(
    user: str = typer.Argument(None, help="Repository owner (defaults to --user)"),
    repo: str = typer.Argument(None, help="Repository name (defaults to --repo)"),
):
    """Install an application."""
    run_operation("Install", lambda ds: ds.install(user, repo))
    console.print("[green]Installed[/green]")


@app.command()
def update(
    user: str = typer.Argument(None, help="Repository owner (defaults to --user)"),
    repo: str = typer.Argument(None, help="Repository name (defaults to --repo)"),
):
    """Update an installed application."""
    run_operation("Update", lambda ds: ds.update(user, repo))
    console.print("[green]Updated[/green]")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
