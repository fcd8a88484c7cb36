"""Tests for the device change list."""

import pytest

from conftest import make_spec
from vsprovision.models import ControllerOptions, DeviceOperation, Interface, Volume
from vsprovision.models.vim import (
    ParaVirtualSCSIController,
    VirtualDisk,
    VirtualE1000,
    VirtualEthernetCardDistributedVirtualPortBackingInfo,
    VirtualEthernetCardNetworkBackingInfo,
    VirtualLsiLogicController,
    VirtualVmxnet3,
)
from vsprovision.provision.devices import (
    build_controller,
    build_device_changes,
    build_disk,
    build_interface,
    effective_index,
    resolve_sharing,
)
from vsprovision.provision.placement import ExplicitDatastore, StoragePod

DS1 = ExplicitDatastore(name="ds1")


class TestEffectiveIndex:
    """Tests for effective_index."""

    @pytest.mark.parametrize("position,expected", [(0, 0), (5, 5), (6, 6), (7, 8), (8, 9), (14, 15)])
    def test_unit_seven_is_skipped(self, position, expected) -> None:
        """Test positions from 7 on shift by one to skip the controller's unit."""
        assert effective_index(position) == expected


class TestBuildInterface:
    """Tests for build_interface."""

    def test_plain_network_backing(self, plain_network) -> None:
        """Test a standard network is attached by device name."""
        change = build_interface(Interface(network="VM Network"), 0, plain_network)

        assert change.operation == DeviceOperation.ADD
        assert isinstance(change.device, VirtualE1000)
        assert change.device.key == 0
        assert change.device.address_type == "generated"
        assert isinstance(change.device.backing, VirtualEthernetCardNetworkBackingInfo)
        assert change.device.backing.device_name == "VM Network"
        assert change.device.device_info.label == "Network adapter"
        assert change.device.device_info.summary == "VM Network"

    def test_distributed_portgroup_backing(self, distributed_network) -> None:
        """Test a distributed portgroup is attached by portgroup key and switch uuid."""
        interface = Interface(network="dvpg-prod", virtual_switch="dvs1", type="vmxnet3")

        change = build_interface(interface, 1, distributed_network)

        assert isinstance(change.device, VirtualVmxnet3)
        backing = change.device.backing
        assert isinstance(backing, VirtualEthernetCardDistributedVirtualPortBackingInfo)
        assert backing.port.portgroup_key == "dvportgroup-21"
        assert backing.port.switch_uuid == distributed_network.uuid

    def test_label_and_summary(self, plain_network) -> None:
        """Test explicit label and summary are kept."""
        interface = Interface(network="VM Network", name="nic-a", summary="frontend")

        change = build_interface(interface, 0, plain_network)

        assert change.device.device_info.label == "nic-a"
        assert change.device.device_info.summary == "frontend"


class TestBuildController:
    """Tests for build_controller."""

    def test_defaults(self) -> None:
        """Test default controller options."""
        change = build_controller()

        assert change.operation == DeviceOperation.ADD
        assert isinstance(change.device, VirtualLsiLogicController)
        assert change.device.key == 1000
        assert change.device.bus_number == 0
        assert change.device.shared_bus == "noSharing"

    def test_overrides(self) -> None:
        """Test overridden controller options."""
        options = ControllerOptions.with_overrides(type="pvscsi", key=1001, bus_id=1, shared=True)

        change = build_controller(options)

        assert isinstance(change.device, ParaVirtualSCSIController)
        assert change.device.key == 1001
        assert change.device.bus_number == 1
        assert change.device.shared_bus == "virtualSharing"

    @pytest.mark.parametrize(
        "shared,expected",
        [
            (None, "noSharing"),
            (False, "noSharing"),
            (True, "virtualSharing"),
            ("physicalSharing", "physicalSharing"),
            (1, "noSharing"),
            (0, "noSharing"),
            ({"a": 1}, "noSharing"),
            (["virtualSharing"], "noSharing"),
        ],
    )
    def test_resolve_sharing(self, shared, expected) -> None:
        """Test sharing option to bus sharing mode."""
        assert resolve_sharing(shared) == expected


class TestBuildDisk:
    """Tests for build_disk."""

    def test_explicit_datastore_disk(self) -> None:
        """Test a disk on an explicit datastore."""
        change = build_disk(Volume(datastore="ds1", size=10240), 0, DS1)

        disk = change.device
        assert isinstance(disk, VirtualDisk)
        assert change.file_operation == "create"
        assert disk.key == 0
        assert disk.unit_number == 0
        assert disk.controller_key == 1000
        assert disk.capacity_in_kb == 10240
        assert disk.backing.file_name == "[ds1]"
        assert disk.backing.disk_mode == "persistent"

    def test_storage_pod_disk_has_empty_file_name(self) -> None:
        """Test Storage DRS disks get no file name."""
        change = build_disk(Volume(storage_pod="pod1", size=1024), 0, StoragePod(name="pod1"))

        assert change.device.backing.file_name == ""

    def test_volume_without_datastore(self) -> None:
        """Test a volume naming no datastore gets an empty bracket file name."""
        change = build_disk(Volume(size=1024), 1, DS1)

        assert change.device.backing.file_name == "[]"

    def test_position_seven_shifts(self) -> None:
        """Test the disk at position 7 uses unit and key 8."""
        change = build_disk(Volume(datastore="ds1", size=1024), 7, DS1)

        assert change.device.unit_number == 8
        assert change.device.key == 8

    def test_explicit_key(self) -> None:
        """Test an explicit volume key replaces the index as device key."""
        change = build_disk(Volume(datastore="ds1", size=1024, key=2042), 3, DS1)

        assert change.device.key == 2042
        assert change.device.unit_number == 3

    def test_non_add_destroys_file(self) -> None:
        """Test non-add operations use the destroy file operation."""
        change = build_disk(Volume(datastore="ds1", size=1024), 0, DS1, operation=DeviceOperation.REMOVE)

        assert change.operation == DeviceOperation.REMOVE
        assert change.file_operation == "destroy"

    def test_thin_unset_is_not_sent(self) -> None:
        """Test thin provisioning is omitted when the volume doesn't set it."""
        wire = build_disk(Volume(datastore="ds1", size=1024), 0, DS1).to_wire()

        backing = wire["device"]["backing"]
        assert "thinProvisioned" not in backing
        assert "eagerlyScrub" not in backing

    @pytest.mark.parametrize("operation", [DeviceOperation.ADD, DeviceOperation.EDIT])
    @pytest.mark.parametrize("thin", [True, False])
    @pytest.mark.parametrize("eager_zero", [True, False])
    def test_eager_zero_combinations(self, operation, thin, eager_zero) -> None:
        """Test eager scrubbing is only requested for new thick eager-zeroed disks."""
        volume = Volume(datastore="ds1", size=1024, thin=thin, eager_zero=eager_zero)

        backing = build_disk(volume, 0, DS1, operation=operation).device.backing

        expected = operation == DeviceOperation.ADD and thin is False and eager_zero is True
        assert (backing.eagerly_scrub is True) == expected
        assert backing.thin_provisioned is thin


class TestBuildDeviceChanges:
    """Tests for build_device_changes."""

    def test_interfaces_controller_disk_order(self, plain_network, distributed_network) -> None:
        """Test two cards, the controller and one disk in that order."""
        spec = make_spec(
            interfaces=[
                {"network": "VM Network"},
                {"network": "dvpg-prod", "virtual_switch": "dvs1"},
            ],
            volumes=[{"datastore": "ds1", "size": 10240}],
        )

        changes = build_device_changes(spec, DS1, [plain_network, distributed_network])

        assert [type(c.device).__name__ for c in changes] == [
            "VirtualE1000",
            "VirtualE1000",
            "VirtualLsiLogicController",
            "VirtualDisk",
        ]
        assert [c.device.key for c in changes] == [0, 1, 1000, 0]
        assert changes[3].device.unit_number == 0
        assert changes[3].device.backing.file_name == "[ds1]"

    def test_eight_disks_skip_unit_seven(self) -> None:
        """Test eight disks without interfaces use units 0-6 and 8."""
        spec = make_spec(volumes=[{"datastore": "ds1", "size": 1024}] * 8)

        changes = build_device_changes(spec, DS1, [])

        disks = [c.device for c in changes if isinstance(c.device, VirtualDisk)]
        assert [d.unit_number for d in disks] == [0, 1, 2, 3, 4, 5, 6, 8]
        assert disks[6].unit_number == 6
        assert disks[7].unit_number == 8

    def test_no_controller_without_volumes(self, plain_network) -> None:
        """Test no controller is added when there are no disks."""
        spec = make_spec(interfaces=[{"network": "VM Network"}])

        changes = build_device_changes(spec, DS1, [plain_network])

        assert len(changes) == 1

    def test_disks_use_controller_key(self) -> None:
        """Test disks attach to a controller with a non-default key."""
        spec = make_spec(
            volumes=[{"datastore": "ds1", "size": 1024}],
            scsi_controller={"key": 1002},
        )

        changes = build_device_changes(spec, DS1, [])

        assert changes[0].device.key == 1002
        assert changes[1].device.controller_key == 1002

    def test_network_count_mismatch(self, plain_network) -> None:
        """Test every interface needs a resolved network."""
        spec = make_spec(interfaces=[{"network": "a"}, {"network": "b"}])

        with pytest.raises(ValueError, match="expected 2 resolved networks"):
            build_device_changes(spec, DS1, [plain_network])


class TestControllerSharingOnTheWire:
    """Tests for the sharing mode sent for a controller."""

    def test_integer_one_is_not_virtual_sharing(self) -> None:
        """Test only a real ``True`` enables virtual sharing."""
        wire = build_controller(ControllerOptions.with_overrides(shared=1)).to_wire()

        assert wire["device"]["sharedBus"] == "noSharing"
