"""Machine spec models: the declarative input describing a VM to create."""

from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


class DeviceOperation(str, Enum):
    """Device change operation."""

    ADD = "add"
    REMOVE = "remove"
    EDIT = "edit"


class NicType(str, Enum):
    """Supported virtual ethernet card kinds.

    Values are the vSphere data object type names; the short tags used in spec
    files are accepted as well.
    """

    E1000 = "VirtualE1000"
    E1000E = "VirtualE1000e"
    PCNET32 = "VirtualPCNet32"
    VMXNET = "VirtualVmxnet"
    VMXNET2 = "VirtualVmxnet2"
    VMXNET3 = "VirtualVmxnet3"
    SRIOV = "VirtualSriovEthernetCard"

    @classmethod
    def _missing_(cls, value: object) -> "NicType | None":
        if isinstance(value, str):
            return _NIC_TAGS.get(value.lower())
        return None


_NIC_TAGS = {
    "e1000": NicType.E1000,
    "e1000e": NicType.E1000E,
    "pcnet32": NicType.PCNET32,
    "vmxnet": NicType.VMXNET,
    "vmxnet2": NicType.VMXNET2,
    "vmxnet3": NicType.VMXNET3,
    "sriov": NicType.SRIOV,
}


class ControllerType(str, Enum):
    """Supported SCSI controller kinds."""

    LSI_LOGIC = "VirtualLsiLogicController"
    LSI_LOGIC_SAS = "VirtualLsiLogicSASController"
    PARAVIRTUAL = "ParaVirtualSCSIController"
    BUS_LOGIC = "VirtualBusLogicController"

    @classmethod
    def _missing_(cls, value: object) -> "ControllerType | None":
        if isinstance(value, str):
            return _CONTROLLER_TAGS.get(value.lower())
        return None


_CONTROLLER_TAGS = {
    "lsilogic": ControllerType.LSI_LOGIC,
    "lsilogic-sas": ControllerType.LSI_LOGIC_SAS,
    "lsilogicsas": ControllerType.LSI_LOGIC_SAS,
    "pvscsi": ControllerType.PARAVIRTUAL,
    "paravirtual": ControllerType.PARAVIRTUAL,
    "buslogic": ControllerType.BUS_LOGIC,
}


class DiskMode(str, Enum):
    """Virtual disk modes."""

    PERSISTENT = "persistent"
    NONPERSISTENT = "nonpersistent"
    UNDOABLE = "undoable"
    INDEPENDENT_PERSISTENT = "independent_persistent"
    INDEPENDENT_NONPERSISTENT = "independent_nonpersistent"
    APPEND = "append"


class Firmware(str, Enum):
    """Guest firmware."""

    BIOS = "bios"
    EFI = "efi"


class Interface(BaseModel):
    """A network interface to attach to the VM."""

    model_config = ConfigDict(frozen=True)

    network: str = Field(..., description="Network or portgroup name")
    virtual_switch: str | None = Field(None, description="Distributed switch owning the portgroup")
    type: NicType = Field(NicType.E1000, description="Ethernet card kind")
    name: str = Field("Network adapter", description="Device label")
    summary: str | None = Field(None, description="Device summary (defaults to the network name)")

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> Any:
        return NicType(v) if isinstance(v, str) else v


class Volume(BaseModel):
    """A virtual disk to create with the VM."""

    model_config = ConfigDict(frozen=True)

    datastore: str | None = Field(None, description="Datastore holding the disk")
    storage_pod: str | None = Field(None, description="Storage pod (datastore cluster) for SDRS placement")
    mode: DiskMode = Field(DiskMode.PERSISTENT, description="Disk mode")
    thin: bool | None = Field(None, description="Thin provisioned")
    eager_zero: bool | None = Field(None, description="Eagerly zero a thick disk")
    size: int = Field(..., gt=0, description="Capacity in KB")
    key: int | None = Field(None, description="Explicit device key")

    @model_validator(mode="after")
    def _check_placement(self) -> "Volume":
        if self.datastore is not None and self.storage_pod is not None:
            raise ValueError("a volume may declare either datastore or storage_pod, not both")
        return self


class ControllerOptions(BaseModel):
    """SCSI controller options.

    Defaults: operation ``add``, type ``VirtualLsiLogicController``, key 1000,
    bus number 0, no bus sharing.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    operation: DeviceOperation = DeviceOperation.ADD
    type: ControllerType = ControllerType.LSI_LOGIC
    key: int = 1000
    bus_number: int = Field(0, validation_alias=AliasChoices("bus_number", "bus_id"))
    shared: Any = None

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> Any:
        return ControllerType(v) if isinstance(v, str) else v

    @classmethod
    def with_overrides(cls, **overrides: Any) -> "ControllerOptions":
        """Return the default options with the given fields replaced."""
        return cls(**overrides)


class MachineSpec(BaseModel):
    """Complete description of a VM to create."""

    model_config = ConfigDict(frozen=True)

    name: str
    guest_id: str = "otherGuest"
    hardware_version: str = "vmx-13"
    cpus: int = Field(1, ge=1)
    cores_per_socket: int = Field(1, ge=1)
    memory_mb: int = Field(512, gt=0)
    firmware: Firmware | None = None
    cpu_hot_add: bool | None = None
    memory_hot_add: bool | None = None
    datacenter: str
    cluster: str
    resource_pool: str | None = None
    folder: str = ""
    interfaces: list[Interface] = Field(default_factory=list)
    volumes: list[Volume] = Field(default_factory=list)
    scsi_controller: ControllerOptions | None = None

    @model_validator(mode="after")
    def _single_storage_pod(self) -> "MachineSpec":
        pods = [v.storage_pod for v in self.volumes if v.storage_pod is not None]
        if len(pods) > 1:
            raise ValueError(
                f"at most one volume may declare a storage pod, got {len(pods)}"
            )
        return self

    @property
    def controller(self) -> ControllerOptions:
        """Controller options with defaults applied."""
        return self.scsi_controller or ControllerOptions()
