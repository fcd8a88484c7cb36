"""Device change list: network cards, SCSI controller and disks."""

from collections.abc import Sequence
from typing import Any

from ..models.inventory import NetworkRef
from ..models.machine import (
    ControllerOptions,
    ControllerType,
    DeviceOperation,
    Interface,
    MachineSpec,
    NicType,
    Volume,
)
from ..models.vim import (
    Description,
    DistributedVirtualSwitchPortConnection,
    ParaVirtualSCSIController,
    VirtualBusLogicController,
    VirtualDeviceBackingInfo,
    VirtualDeviceConfigSpec,
    VirtualDisk,
    VirtualDiskFlatVer2BackingInfo,
    VirtualE1000,
    VirtualE1000e,
    VirtualEthernetCard,
    VirtualEthernetCardDistributedVirtualPortBackingInfo,
    VirtualEthernetCardNetworkBackingInfo,
    VirtualLsiLogicController,
    VirtualLsiLogicSASController,
    VirtualPCNet32,
    VirtualSCSIController,
    VirtualSriovEthernetCard,
    VirtualVmxnet,
    VirtualVmxnet2,
    VirtualVmxnet3,
)
from .placement import PlacementDecision, StoragePod

NIC_CLASSES: dict[NicType, type[VirtualEthernetCard]] = {
    NicType.E1000: VirtualE1000,
    NicType.E1000E: VirtualE1000e,
    NicType.PCNET32: VirtualPCNet32,
    NicType.VMXNET: VirtualVmxnet,
    NicType.VMXNET2: VirtualVmxnet2,
    NicType.VMXNET3: VirtualVmxnet3,
    NicType.SRIOV: VirtualSriovEthernetCard,
}

CONTROLLER_CLASSES: dict[ControllerType, type[VirtualSCSIController]] = {
    ControllerType.LSI_LOGIC: VirtualLsiLogicController,
    ControllerType.LSI_LOGIC_SAS: VirtualLsiLogicSASController,
    ControllerType.PARAVIRTUAL: ParaVirtualSCSIController,
    ControllerType.BUS_LOGIC: VirtualBusLogicController,
}

# The SCSI controller occupies unit 7 on its own bus
RESERVED_UNIT_NUMBER = 7


def effective_index(position: int) -> int:
    """Unit number for the disk at ``position``, skipping the reserved unit."""
    if position >= RESERVED_UNIT_NUMBER:
        return position + 1
    return position


def nic_backing(interface: Interface, network: NetworkRef) -> VirtualDeviceBackingInfo:
    """Backing for an ethernet card, chosen by what the network supports."""
    if network.is_distributed():
        return VirtualEthernetCardDistributedVirtualPortBackingInfo(
            port=DistributedVirtualSwitchPortConnection(
                portgroup_key=network.portgroup_key(),
                switch_uuid=network.switch_uuid(),
            )
        )
    return VirtualEthernetCardNetworkBackingInfo(device_name=interface.network)


def build_interface(
    interface: Interface,
    index: int,
    network: NetworkRef,
    operation: DeviceOperation = DeviceOperation.ADD,
) -> VirtualDeviceConfigSpec:
    """Device change adding the ethernet card at ``index`` (its device key)."""
    card_class = NIC_CLASSES[interface.type]
    return VirtualDeviceConfigSpec(
        operation=operation,
        device=card_class(
            key=index,
            device_info=Description(
                label=interface.name,
                summary=interface.summary or interface.network,
            ),
            backing=nic_backing(interface, network),
            address_type="generated",
        ),
    )


def resolve_sharing(shared: Any) -> str:
    """SCSI bus sharing mode for the ``shared`` controller option."""
    if shared is None or shared is False:
        return "noSharing"
    if shared is True:
        return "virtualSharing"
    if isinstance(shared, str):
        return shared
    return "noSharing"


def build_controller(options: ControllerOptions | None = None) -> VirtualDeviceConfigSpec:
    """Device change for the SCSI controller the disks are attached to."""
    options = options or ControllerOptions()
    controller_class = CONTROLLER_CLASSES[options.type]
    return VirtualDeviceConfigSpec(
        operation=options.operation,
        device=controller_class(
            key=options.key,
            bus_number=options.bus_number,
            shared_bus=resolve_sharing(options.shared),
        ),
    )


def build_disk(
    volume: Volume,
    position: int,
    decision: PlacementDecision,
    operation: DeviceOperation = DeviceOperation.ADD,
    controller_key: int = 1000,
) -> VirtualDeviceConfigSpec:
    """Device change for the disk at ``position`` in the volume list."""
    index = effective_index(position)

    # Storage DRS picks the datastore, so the file name stays empty
    if isinstance(decision, StoragePod):
        file_name = ""
    else:
        file_name = f"[{volume.datastore or ''}]"

    backing: dict[str, Any] = {"file_name": file_name, "disk_mode": volume.mode}
    if volume.thin is not None:
        backing["thin_provisioned"] = volume.thin
    if operation == DeviceOperation.ADD and volume.thin is False and volume.eager_zero is True:
        backing["eagerly_scrub"] = True

    return VirtualDeviceConfigSpec(
        operation=operation,
        file_operation="create" if operation == DeviceOperation.ADD else "destroy",
        device=VirtualDisk(
            key=volume.key if volume.key is not None else index,
            backing=VirtualDiskFlatVer2BackingInfo(**backing),
            controller_key=controller_key,
            unit_number=index,
            capacity_in_kb=volume.size,
        ),
    )


def build_device_changes(
    spec: MachineSpec,
    decision: PlacementDecision,
    networks: Sequence[NetworkRef],
) -> list[VirtualDeviceConfigSpec]:
    """Ordered device changes: ethernet cards, then controller, then disks.

    ``networks`` are the resolved networks of ``spec.interfaces``, in order.
    The controller comes before the disks so their ``controllerKey`` resolves.
    """
    if len(networks) != len(spec.interfaces):
        raise ValueError(
            f"expected {len(spec.interfaces)} resolved networks, got {len(networks)}"
        )

    devices = [
        build_interface(interface, index, network)
        for index, (interface, network) in enumerate(zip(spec.interfaces, networks))
    ]

    if spec.volumes:
        controller = spec.controller
        devices.append(build_controller(controller))
        devices.extend(
            build_disk(volume, position, decision, controller_key=controller.key)
            for position, volume in enumerate(spec.volumes)
        )

    return devices
