import asyncio
import json
import os
from functools import wraps

import click

from wastefleet_client.client import WasteFleetClient
from wastefleet_client.config import ClientSettings
from wastefleet_client.endpoints import EndpointRegistry
from wastefleet_client.exceptions import NetworkError, RequestFailed, UnknownEntity
from wastefleet_client.route_tokens import RouteTokenCache
from wastefleet_client.session import FileSessionStorage

HOME_DIR = os.path.expanduser("~") or os.environ.get("HOME") or os.environ.get("USERPROFILE")
WASTEFLEET_DIR = os.path.join(HOME_DIR, ".wastefleet")
SESSION_FILE = "session.yaml"
SETTINGS_FILE = "settings.yaml"


def run_async(coro):
    """Helper to run async functions synchronously in Click commands."""
    return asyncio.run(coro)


def load_settings(settings_path) -> ClientSettings:
    if settings_path:
        return ClientSettings.from_yaml(settings_path)

    default_path = os.path.join(WASTEFLEET_DIR, SETTINGS_FILE)
    if os.path.exists(default_path):
        return ClientSettings.from_yaml(default_path)
    return ClientSettings.from_env()


def make_client(ctx) -> WasteFleetClient:
    return WasteFleetClient(
        ctx.obj["SETTINGS"],
        session=FileSessionStorage(ctx.obj["SESSION_PATH"]),
    )


def handle_api_exceptions(func):
    """Print API failures and exit with status 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NetworkError as e:
            click.echo(f"[{click.style('network', fg='red')}] {e.message}")
        except RequestFailed as e:
            click.echo(f"[{click.style(str(e.status_code), fg='red')}] {e.message}")
        except UnknownEntity as e:
            click.echo(f"[{click.style('unknown', fg='red')}] {e.message}")
        raise click.exceptions.Exit(1)

    return wrapper


def echo_json(data) -> None:
    click.echo(json.dumps(data, indent=4, default=str))


async def _call(ctx, operation):
    async with make_client(ctx) as client:
        return await operation(client)


@click.group()
@click.option(
    "--settings",
    "settings_path",
    envvar="WASTEFLEET_SETTINGS",
    type=click.Path(exists=True),
    help="Path to a settings YAML file (overrides ~/.wastefleet/settings.yaml)",
)
@click.option(
    "--session-file",
    envvar="WASTEFLEET_SESSION",
    default=os.path.join(WASTEFLEET_DIR, SESSION_FILE),
    show_default=True,
    help="File holding the stored session",
)
@click.pass_context
def cli(ctx, settings_path, session_file):
    """WasteFleet CLI - Call the admin API and inspect route tokens."""
    ctx.ensure_object(dict)
    ctx.obj["SETTINGS"] = load_settings(settings_path)
    ctx.obj["SESSION_PATH"] = session_file


@click.command()
@click.option("--username", "-u", prompt="Username")
@click.option("--password", "-p", prompt="Password", hide_input=True)
@click.pass_context
@handle_api_exceptions
def login(ctx, username, password):
    run_async(_call(ctx, lambda client: client.login(username, password)))
    session = FileSessionStorage(ctx.obj["SESSION_PATH"])
    click.echo(f"Authentication successful! Role: {session.role}")


@click.command()
@click.pass_context
def logout(ctx):
    FileSessionStorage(ctx.obj["SESSION_PATH"]).clear()
    click.echo("Logged out.")


@click.command()
@click.option("--api-root", default=None, help="API root, e.g. https://fleet.example.org/api")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.option("--route-secret", default=None, help="Passphrase for route tokens")
@click.option(
    "--output",
    "-o",
    default=os.path.join(WASTEFLEET_DIR, SETTINGS_FILE),
    show_default=True,
    help="Settings file to write",
)
@click.pass_context
def configure(ctx, api_root, timeout, route_secret, output):
    """Write a settings profile used by later commands."""
    updates = {
        key: value
        for key, value in (
            ("api_root", api_root),
            ("timeout", timeout),
            ("route_secret", route_secret),
        )
        if value is not None
    }
    current = ctx.obj["SETTINGS"].model_dump(exclude_unset=True)
    settings = ClientSettings(**{**current, **updates})

    directory = os.path.dirname(output)
    if directory:
        os.makedirs(directory, exist_ok=True)

    settings.write_yaml(output)
    click.echo(f"Settings written to {output}")


@click.command()
@click.option("--group", "-g", default=None, help="Only list endpoints of this domain area")
def endpoints(group):
    registry = EndpointRegistry.default()
    names = registry.in_group(group) if group else registry.names

    for name in names:
        click.echo(f"{click.style(name, fg='green')} {registry.resolve_path(name)}")


# =============================================================================
# REST
# =============================================================================


@click.group()
def rest():
    """Call CRUD operations on a registered resource."""


@rest.command("list")
@click.argument("entity")
@click.option("--query", "-q", "query", type=(str, str), multiple=True)
@click.pass_context
@handle_api_exceptions
def list_entities(ctx, entity, query):
    params = dict(query) or None
    rows = run_async(_call(ctx, lambda client: client.resource(entity).list(params=params)))
    echo_json(rows)


@rest.command("get")
@click.argument("entity")
@click.argument("id")
@click.pass_context
@handle_api_exceptions
def get_entity(ctx, entity, id):
    echo_json(run_async(_call(ctx, lambda client: client.resource(entity).get(id))))


@rest.command("delete")
@click.argument("entity")
@click.argument("id")
@click.pass_context
@handle_api_exceptions
def delete_entity(ctx, entity, id):
    run_async(_call(ctx, lambda client: client.resource(entity).remove(id)))
    click.echo(f"Deleted {entity} {id}")


@rest.command("action")
@click.argument("entity")
@click.argument("action_name")
@click.option("--data", "-d", default=None, help="JSON payload; the action is POSTed when given")
@click.pass_context
@handle_api_exceptions
def run_action(ctx, entity, action_name, data):
    try:
        payload = json.loads(data) if data else None
    except ValueError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint="--data") from e
    result = run_async(
        _call(ctx, lambda client: client.resource(entity).action(action_name, payload))
    )
    echo_json(result)


# =============================================================================
# Route tokens
# =============================================================================


@click.group()
def routes():
    """Encrypt and decrypt navigation route segments."""


@routes.command("table")
@click.pass_context
def route_table(ctx):
    cache = RouteTokenCache(ctx.obj["SETTINGS"].route_secret)
    for key, token in cache.get_encrypted_table().items():
        click.echo(f"{click.style(key, fg='green')} {token}")


@routes.command("encrypt")
@click.argument("segment")
@click.pass_context
def encrypt_route(ctx, segment):
    click.echo(RouteTokenCache(ctx.obj["SETTINGS"].route_secret).encrypt_segment(segment))


@routes.command("decrypt")
@click.argument("token")
@click.pass_context
def decrypt_route(ctx, token):
    segment = RouteTokenCache(ctx.obj["SETTINGS"].route_secret).decrypt_segment(token)
    if segment is None:
        click.echo("Unknown route token.")
        raise click.exceptions.Exit(1)
    click.echo(segment)


cli.add_command(login, "login")
cli.add_command(logout, "logout")
cli.add_command(configure, "configure")
cli.add_command(endpoints, "endpoints")
cli.add_command(rest, "rest")
cli.add_command(routes, "routes")

if __name__ == "__main__":
    cli()
