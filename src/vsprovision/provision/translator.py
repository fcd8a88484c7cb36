"""Machine spec to ``VirtualMachineConfigSpec``."""

from collections.abc import Sequence
from typing import Any

from ..models.machine import MachineSpec
from ..models.vim import (
    OptionValue,
    VirtualDeviceConfigSpec,
    VirtualMachineConfigSpec,
    VirtualMachineFileInfo,
)
from .placement import PlacementDecision, path_prefix


def extra_config() -> list[OptionValue]:
    """Advanced settings: boot from the first network card."""
    return [OptionValue(key="bios.bootOrder", value="ethernet0")]


def build_config_spec(
    spec: MachineSpec,
    decision: PlacementDecision,
    device_changes: Sequence[VirtualDeviceConfigSpec],
) -> VirtualMachineConfigSpec:
    """Build the configuration passed to ``CreateVM_Task``.

    Firmware and the hot-add flags are only passed when the machine spec sets
    them; vSphere treats an absent flag differently from ``false``.
    """
    fields: dict[str, Any] = {
        "name": spec.name,
        "guest_id": spec.guest_id,
        "version": spec.hardware_version,
        "files": VirtualMachineFileInfo(vm_path_name=path_prefix(decision, spec)),
        "num_cpus": spec.cpus,
        "num_cores_per_socket": spec.cores_per_socket,
        "memory_mb": spec.memory_mb,
        "device_change": list(device_changes),
        "extra_config": extra_config(),
    }
    if spec.cpu_hot_add is not None:
        fields["cpu_hot_add_enabled"] = spec.cpu_hot_add
    if spec.memory_hot_add is not None:
        fields["memory_hot_add_enabled"] = spec.memory_hot_add
    if spec.firmware is not None:
        fields["firmware"] = spec.firmware

    return VirtualMachineConfigSpec(**fields)
