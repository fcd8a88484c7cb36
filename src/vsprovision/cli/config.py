"""Configuration management commands for vsprovision."""

import typer
from rich.panel import Panel
from rich.table import Table

from ..api.client import VSphereClient
from ..api.exceptions import VSProvisionError
from ..config import AuthConfig, ConfigManager, ProfileConfig
from ..utils import (
    confirm,
    console,
    print_cancelled,
    print_error,
    print_info,
    print_success,
    prompt,
)
from ..utils.helpers import async_to_sync, ordered_group

app = typer.Typer(
    help="Manage vsprovision configuration",
    no_args_is_help=True,
    cls=ordered_group(["add", "remove", "default", "list", "show", "test"]),
)


# ── Shared helpers ───────────────────────────────────────────────────────


def _check_profile_exists(config_manager: ConfigManager, name: str) -> None:
    """Raise typer.Exit if profile already exists."""
    if config_manager.exists() and name in config_manager.get().profiles:
        print_error(f"Profile '{name}' already exists. Remove it first to replace it.")
        raise typer.Exit(1)


def _build_profile(
    host: str | None,
    port: int,
    user: str | None,
    password: str | None,
    session_id: str | None,
    verify_ssl: bool,
    api_release: str,
) -> ProfileConfig:
    """Prompt for anything missing and build the profile."""
    if host is None:
        while not (host := prompt("vCenter or ESXi host")):
            print_error("Host is required")
    if user is None:
        user = prompt("Username", default="administrator@vsphere.local")
    if password is None and session_id is None:
        while not (password := prompt("Password", password=True)):
            print_error("Password is required")

    if session_id is not None:
        auth = AuthConfig(type="session", user=user, session_id=session_id)
    else:
        auth = AuthConfig(type="password", user=user, password=password)

    return ProfileConfig(
        host=host,
        port=port,
        verify_ssl=verify_ssl,
        auth=auth,
        api_release=api_release,
    )


def _render_profile_panel(name: str, profile: ProfileConfig, is_default: bool = False) -> Panel:
    """Build a Rich Panel for a profile."""
    lines = [
        "[bold]── Connection ──[/bold]",
        f"[bold]Host:[/bold]          {profile.host}:{profile.port}",
        f"[bold]User:[/bold]          {profile.auth.user}",
        f"[bold]Auth:[/bold]          {profile.auth.type}",
        f"[bold]SSL:[/bold]           {'Yes' if profile.verify_ssl else 'No'}",
        f"[bold]API release:[/bold]   {profile.api_release}",
        "",
        "[bold]── Timeouts ──[/bold]",
        f"[bold]Request:[/bold]       {profile.timeout}s",
        f"[bold]Task:[/bold]          {profile.task_timeout}s (poll every {profile.poll_interval}s)",
    ]

    if is_default:
        lines.append("")
        lines.append("[green]Default profile[/green]")

    return Panel("\n".join(lines), title=f"Profile: {name}", border_style="blue")


# ── config add ───────────────────────────────────────────────────────────


@app.command("add")
def add_profile(
    name: str = typer.Argument("default", help="Profile name"),
    host: str = typer.Option(None, "--host", "-H", help="vCenter or ESXi host"),
    user: str = typer.Option(None, "--user", "-u", help="Username (e.g., administrator@vsphere.local)"),
    password: str = typer.Option(None, "--password", "-P", help="Password (prompted if omitted)"),
    session_id: str = typer.Option(None, "--session-id", help="Use an existing session id instead of a password"),
    port: int = typer.Option(443, "--port", "-p", help="HTTPS port"),
    verify_ssl: bool = typer.Option(True, "--verify-ssl/--no-verify-ssl", help="Verify SSL certificate"),
    api_release: str = typer.Option("8.0.2.0", "--api-release", help="VI/JSON API release"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without confirmation"),
) -> None:
    """Add a new profile."""
    config_manager = ConfigManager()

    try:
        _check_profile_exists(config_manager, name)
        profile = _build_profile(host, port, user, password, session_id, verify_ssl, api_release)

        console.print()
        console.print(_render_profile_panel(name, profile))

        if not yes and not confirm("\nSave this profile?", default=True):
            print_cancelled()
            raise typer.Exit()

        is_first = not config_manager.exists() or not config_manager.get().profiles
        config_manager.add_profile(name, profile)

        if is_first:
            print_success(f"Profile '{name}' added (set as default)")
        else:
            print_success(f"Profile '{name}' added")

    except KeyboardInterrupt:
        console.print()
        print_cancelled()
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except VSProvisionError as e:
        print_error(str(e))
        raise typer.Exit(1)


# ── config remove ────────────────────────────────────────────────────────


@app.command("remove")
def remove_profile(
    name: str = typer.Argument(..., help="Profile name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Remove without confirmation"),
) -> None:
    """Remove a profile."""
    config_manager = ConfigManager()

    try:
        if not yes and not confirm(f"Remove profile '{name}'?", default=False):
            print_cancelled()
            return

        config_manager.remove_profile(name)
        print_success(f"Profile '{name}' removed")

    except VSProvisionError as e:
        print_error(str(e))
        raise typer.Exit(1)


# ── config default ───────────────────────────────────────────────────────


@app.command("default")
def set_default(
    name: str = typer.Argument(..., help="Profile name"),
) -> None:
    """Set the default profile."""
    config_manager = ConfigManager()

    try:
        config_manager.set_default_profile(name)
        print_success(f"Default profile set to '{name}'")

    except VSProvisionError as e:
        print_error(str(e))
        raise typer.Exit(1)


# ── config list ──────────────────────────────────────────────────────────


@app.command("list")
def list_profiles() -> None:
    """List all profiles."""
    config_manager = ConfigManager()

    try:
        config = config_manager.get()
        if not config.profiles:
            print_info("No profiles configured. Run 'vsprovision config add' to create one.")
            return

        table = Table(title="Configured Profiles", show_header=True, header_style="bold cyan")
        table.add_column("Profile", style="cyan")
        table.add_column("Host", no_wrap=True)
        table.add_column("User")
        table.add_column("Auth Type")
        table.add_column("Default", style="green")

        for profile_name, profile in config.profiles.items():
            table.add_row(
                profile_name,
                f"{profile.host}:{profile.port}",
                profile.auth.user,
                profile.auth.type,
                "✓" if profile_name == config.default_profile else "",
            )

        console.print(table)

    except VSProvisionError as e:
        print_error(str(e))
        raise typer.Exit(1)


# ── config show ──────────────────────────────────────────────────────────


@app.command("show")
def show_profile(
    name: str = typer.Argument(None, help="Profile name (default profile if omitted)"),
) -> None:
    """Show profile details."""
    config_manager = ConfigManager()

    try:
        config = config_manager.get()
        profile = config_manager.get_profile(name)
        name = name or config.default_profile
        console.print(_render_profile_panel(name, profile, name == config.default_profile))

    except VSProvisionError as e:
        print_error(str(e))
        raise typer.Exit(1)


# ── config test ──────────────────────────────────────────────────────────


@app.command("test")
@async_to_sync
async def test_profile(
    profile: str = typer.Option(None, "--profile", "-p", help="Profile to test"),
) -> None:
    """Test connection to vCenter or ESXi."""
    config_manager = ConfigManager()

    try:
        profile_config = config_manager.get_profile(profile)
        profile_name = profile or config_manager.get().default_profile

        print_info(f"Testing connection to {profile_config.host}:{profile_config.port}...")

        async with VSphereClient(profile_config) as client:
            about = client.about
            print_success(f"Connection successful to '{profile_name}'")
            print_info(f"Product: {about.get('fullName', 'unknown')}")
            print_info(f"API version: {about.get('apiVersion', 'unknown')}")

    except VSProvisionError as e:
        print_error(f"Connection failed: {e}")
        raise typer.Exit(1)
