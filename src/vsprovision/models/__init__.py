"""Data models."""

from .config import AuthConfig, OutputConfig, ProfileConfig
from .inventory import DistributedPortgroup, NetworkRef, StandardNetwork
from .machine import (
    ControllerOptions,
    ControllerType,
    DeviceOperation,
    DiskMode,
    Firmware,
    Interface,
    MachineSpec,
    NicType,
    Volume,
)
from .vim import (
    ManagedObjectReference,
    StoragePlacementResult,
    TaskInfo,
    VirtualDeviceConfigSpec,
    VirtualMachineConfigSpec,
)

__all__ = [
    "AuthConfig",
    "ControllerOptions",
    "ControllerType",
    "DeviceOperation",
    "DiskMode",
    "DistributedPortgroup",
    "Firmware",
    "Interface",
    "MachineSpec",
    "ManagedObjectReference",
    "NetworkRef",
    "NicType",
    "OutputConfig",
    "ProfileConfig",
    "StandardNetwork",
    "StoragePlacementResult",
    "TaskInfo",
    "VirtualDeviceConfigSpec",
    "VirtualMachineConfigSpec",
    "Volume",
]
