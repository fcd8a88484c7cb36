"""VM provisioning commands."""

import json
from pathlib import Path

import typer
import yaml
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api.client import VSphereClient
from ..api.exceptions import VSProvisionError
from ..config import ConfigManager, load_machine_spec
from ..models.machine import MachineSpec
from ..models.vim import VirtualDeviceConfigSpec, VirtualDisk, VirtualEthernetCard
from ..provision import CreationPlan, StoragePod, VMCreator
from ..utils import (
    confirm,
    console,
    create_table,
    format_kb,
    print_cancelled,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from ..utils.helpers import async_to_sync, ordered_group

app = typer.Typer(
    help="Plan and create virtual machines",
    no_args_is_help=True,
    cls=ordered_group(["plan", "create"]),
)


def _describe_device(change: VirtualDeviceConfigSpec) -> list[str]:
    """Table row for one device change."""
    device = change.device
    if isinstance(device, VirtualDisk):
        detail = f"{format_kb(device.capacity_in_kb)} {escape(device.backing.file_name) or '(storage pod)'}"
    elif isinstance(device, VirtualEthernetCard):
        detail = device.device_info.summary if device.device_info else ""
    else:
        detail = f"bus {getattr(device, 'bus_number', '')}, {getattr(device, 'shared_bus', '')}"
    return [
        change.operation.value,
        type(device).__name__,
        str(device.key),
        "" if device.unit_number is None else str(device.unit_number),
        detail,
    ]


def _render_plan(spec: MachineSpec, plan: CreationPlan) -> None:
    """Print the placement and device summary of a plan."""
    if isinstance(plan.decision, StoragePod):
        placement = f"storage pod [bold]{plan.decision.name}[/bold] (Storage DRS)"
    else:
        placement = f"datastore [bold]{plan.decision.name}[/bold]"
        pods = [v.storage_pod for v in spec.volumes if v.storage_pod]
        if pods:
            print_warning(f"storage pod '{pods[0]}' needs vSphere 5 or later, using explicit datastores")

    config = plan.config
    lines = [
        f"[bold]Placement:[/bold]   {placement}",
        f"[bold]Path:[/bold]        {escape(config.files.vm_path_name) or '(chosen by Storage DRS)'}",
        f"[bold]Pool:[/bold]        {plan.pool}",
        f"[bold]Folder:[/bold]      {plan.folder}",
        f"[bold]Hardware:[/bold]    {config.num_cpus} vCPU ({config.num_cores_per_socket}/socket), "
        f"{config.memory_mb} MB, {config.version}, {config.guest_id}",
    ]
    console.print(Panel("\n".join(lines), title=f"VM: {spec.name}", border_style="blue"))

    console.print(
        create_table(
            title="Devices",
            columns=[
                ("Op", "cyan"),
                ("Type", ""),
                ("Key", ""),
                ("Unit", ""),
                ("Details", ""),
            ],
            rows=[_describe_device(change) for change in config.device_change],
        )
    )


@app.command("plan")
@async_to_sync
async def plan_vm(
    spec_file: Path = typer.Argument(..., help="Machine spec (YAML)"),
    profile: str = typer.Option(None, "--profile", "-p", help="Profile to use"),
    output: str = typer.Option(None, "--output", "-o", help="Output format: table, json or yaml"),
) -> None:
    """Resolve placement and show the VM configuration without creating anything."""
    config_manager = ConfigManager()

    try:
        spec = load_machine_spec(spec_file)
        profile_config = config_manager.get_profile(profile)
        output = output or config_manager.get().output.format

        async with VSphereClient(profile_config) as client:
            plan = await VMCreator(client).plan(spec)

        if output == "json":
            console.print_json(json.dumps(plan.config.to_wire()))
        elif output == "yaml":
            console.print(yaml.safe_dump(plan.config.to_wire(), sort_keys=False), end="", markup=False)
        else:
            _render_plan(spec, plan)

    except VSProvisionError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command("create")
@async_to_sync
async def create_vm(
    spec_file: Path = typer.Argument(..., help="Machine spec (YAML)"),
    profile: str = typer.Option(None, "--profile", "-p", help="Profile to use"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Create without confirmation"),
) -> None:
    """Create a VM from a machine spec and print its instance UUID."""
    config_manager = ConfigManager()

    try:
        spec = load_machine_spec(spec_file)
        profile_config = config_manager.get_profile(profile)

        ask = config_manager.get().output.confirm_create and not yes
        if ask and not confirm(
            f"Create VM '{spec.name}' in {spec.datacenter}/{spec.cluster}?", default=False
        ):
            print_cancelled()
            return

        async with VSphereClient(profile_config) as client:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                progress.add_task(description=f"Creating VM '{spec.name}'...", total=None)
                uuid = await VMCreator(client).create(spec)

        print_success(f"VM '{spec.name}' created")
        print_info(f"Instance UUID: {uuid}")

    except VSProvisionError as e:
        print_error(str(e))
        raise typer.Exit(1)
