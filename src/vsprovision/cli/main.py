"""Main CLI application."""

import typer
from rich.console import Console

from .. import __version__
from ..utils.helpers import ordered_group, setup_logging
from . import config, vm

console = Console()

app = typer.Typer(
    name="vsprovision",
    help="Provision vSphere virtual machines from YAML machine specs",
    no_args_is_help=True,
    cls=ordered_group(["vm", "config"]),
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(vm.app, name="vm")
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: Whether version flag was set
    """
    if value:
        console.print(f"vsprovision version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log API requests and task polling"),
) -> None:
    """vsprovision - create vSphere VMs from declarative machine specs.

    Get started:
        vsprovision config add            # Set up your first profile
        vsprovision vm plan web01.yaml    # Show what would be created
        vsprovision vm create web01.yaml  # Create the VM
    """
    setup_logging(verbose)


if __name__ == "__main__":
    app()
