"""vSphere data objects exchanged over the VI/JSON protocol.

Fields are snake_case in Python and camelCase on the wire. Only fields that
were explicitly passed to the constructor are serialized, so an optional
property is either sent with its value or not sent at all.
"""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializeAsAny,
    SerializerFunctionWrapHandler,
    field_serializer,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from .machine import DeviceOperation, DiskMode, Firmware


class VimObject(BaseModel):
    """Base for vSphere data objects; the class name is the wire type name."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    @model_serializer(mode="wrap")
    def _with_type_name(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return {"_typeName": type(self).__name__, **handler(self)}

    def to_wire(self) -> dict[str, Any]:
        """Serialize for a VI/JSON request body."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ManagedObjectReference(VimObject):
    """Reference to a server-side managed object (``type`` + ``value`` id)."""

    type: str
    value: str

    def __str__(self) -> str:
        return f"{self.type}:{self.value}"


# Devices


class Description(VimObject):
    label: str
    summary: str


class VirtualDeviceBackingInfo(VimObject):
    pass


class VirtualEthernetCardNetworkBackingInfo(VirtualDeviceBackingInfo):
    device_name: str


class DistributedVirtualSwitchPortConnection(VimObject):
    portgroup_key: str
    switch_uuid: str


class VirtualEthernetCardDistributedVirtualPortBackingInfo(VirtualDeviceBackingInfo):
    port: DistributedVirtualSwitchPortConnection


class VirtualDiskFlatVer2BackingInfo(VirtualDeviceBackingInfo):
    file_name: str
    disk_mode: DiskMode
    thin_provisioned: bool | None = None
    eagerly_scrub: bool | None = None


class VirtualDevice(VimObject):
    key: int
    device_info: Description | None = None
    backing: SerializeAsAny[VirtualDeviceBackingInfo | None] = None
    controller_key: int | None = None
    unit_number: int | None = None


class VirtualEthernetCard(VirtualDevice):
    address_type: str | None = None


class VirtualE1000(VirtualEthernetCard):
    pass


class VirtualE1000e(VirtualEthernetCard):
    pass


class VirtualPCNet32(VirtualEthernetCard):
    pass


class VirtualVmxnet(VirtualEthernetCard):
    pass


class VirtualVmxnet2(VirtualVmxnet):
    pass


class VirtualVmxnet3(VirtualVmxnet):
    pass


class VirtualSriovEthernetCard(VirtualEthernetCard):
    pass


class VirtualSCSIController(VirtualDevice):
    bus_number: int
    shared_bus: str


class VirtualLsiLogicController(VirtualSCSIController):
    pass


class VirtualLsiLogicSASController(VirtualSCSIController):
    pass


class ParaVirtualSCSIController(VirtualSCSIController):
    pass


class VirtualBusLogicController(VirtualSCSIController):
    pass


class VirtualDisk(VirtualDevice):
    capacity_in_kb: int = Field(alias="capacityInKB")


class VirtualDeviceConfigSpec(VimObject):
    """One entry of ``VirtualMachineConfigSpec.deviceChange``."""

    operation: DeviceOperation
    file_operation: str | None = None
    device: SerializeAsAny[VirtualDevice]


# Machine configuration


class VirtualMachineFileInfo(VimObject):
    vm_path_name: str


class OptionValue(VimObject):
    """Extra configuration key/value pair; the value is sent as ``xsd:string``."""

    key: str
    value: str

    @field_serializer("value")
    def _any_value(self, value: str) -> dict[str, str]:
        return {"_typeName": "string", "_value": value}


class VirtualMachineConfigSpec(VimObject):
    name: str
    guest_id: str
    version: str
    files: VirtualMachineFileInfo
    num_cpus: int = Field(alias="numCPUs")
    num_cores_per_socket: int
    memory_mb: int = Field(alias="memoryMB")
    device_change: list[VirtualDeviceConfigSpec]
    extra_config: list[OptionValue]
    firmware: Firmware | None = None
    cpu_hot_add_enabled: bool | None = None
    memory_hot_add_enabled: bool | None = None


# Storage DRS placement


class StorageDrsPodSelectionSpec(VimObject):
    storage_pod: ManagedObjectReference


class StoragePlacementSpec(VimObject):
    type: str
    folder: ManagedObjectReference | None = None
    resource_pool: ManagedObjectReference | None = None
    pod_selection_spec: StorageDrsPodSelectionSpec
    config_spec: VirtualMachineConfigSpec | None = None


class ClusterRecommendation(VimObject):
    key: str
    reason: str | None = None
    rating: int | None = None


class StoragePlacementResult(VimObject):
    recommendations: list[ClusterRecommendation] = Field(default_factory=list)
    drs_fault: dict[str, Any] | None = None


class ApplyStorageRecommendationResult(VimObject):
    vm: ManagedObjectReference | None = None


# Tasks


class TaskInfo(VimObject):
    """Subset of ``TaskInfo`` used to follow a task to completion."""

    key: str
    task: ManagedObjectReference | None = None
    state: str
    result: Any = None
    error: dict[str, Any] | None = None
    description_id: str | None = None

    @property
    def error_message(self) -> str:
        """Localized fault message, or the fault type when there is none."""
        if not self.error:
            return "unknown error"
        return (
            self.error.get("localizedMessage")
            or (self.error.get("fault") or {}).get("_typeName")
            or "unknown error"
        )
