"""Tests for the VM configuration builder."""

from conftest import make_spec
from vsprovision.provision.devices import build_device_changes
from vsprovision.provision.placement import ExplicitDatastore, StoragePod
from vsprovision.provision.translator import build_config_spec, extra_config


def _config(spec, decision):
    return build_config_spec(spec, decision, build_device_changes(spec, decision, []))


class TestExtraConfig:
    """Tests for extra_config."""

    def test_boot_from_network(self) -> None:
        """Test the only advanced setting is the boot order."""
        assert [(o.key, o.value) for o in extra_config()] == [("bios.bootOrder", "ethernet0")]


class TestBuildConfigSpec:
    """Tests for build_config_spec."""

    def test_defaults(self) -> None:
        """Test machine defaults are carried into the configuration."""
        spec = make_spec(volumes=[{"datastore": "ds1", "size": 1024}])

        config = _config(spec, ExplicitDatastore(name="ds1"))

        assert config.name == "web01"
        assert config.guest_id == "otherGuest"
        assert config.version == "vmx-13"
        assert config.num_cpus == 1
        assert config.num_cores_per_socket == 1
        assert config.memory_mb == 512
        assert config.files.vm_path_name == "[ds1]"

    def test_boot_order(self) -> None:
        """Test the VM boots from the first network card."""
        config = _config(make_spec(), ExplicitDatastore(name="datastore1"))

        assert [(o.key, o.value) for o in config.extra_config] == [("bios.bootOrder", "ethernet0")]

    def test_storage_pod_path_is_empty(self) -> None:
        """Test Storage DRS placement leaves the VM path empty."""
        spec = make_spec(volumes=[{"storage_pod": "pod1", "size": 1024}])

        config = _config(spec, StoragePod(name="pod1"))

        assert config.files.vm_path_name == ""
        assert config.to_wire()["files"]["vmPathName"] == ""

    def test_unset_optional_fields_are_absent(self) -> None:
        """Test firmware and hot-add flags are not sent unless set."""
        wire = _config(make_spec(), ExplicitDatastore(name="datastore1")).to_wire()

        assert "firmware" not in wire
        assert "cpuHotAddEnabled" not in wire
        assert "memoryHotAddEnabled" not in wire

    def test_false_flags_are_sent(self) -> None:
        """Test an explicit false hot-add flag is sent while firmware stays absent."""
        spec = make_spec(cpu_hot_add=False)

        wire = _config(spec, ExplicitDatastore(name="datastore1")).to_wire()

        assert wire["cpuHotAddEnabled"] is False
        assert "firmware" not in wire
        assert "memoryHotAddEnabled" not in wire

    def test_all_optional_fields(self) -> None:
        """Test firmware and both hot-add flags when set."""
        spec = make_spec(firmware="efi", cpu_hot_add=True, memory_hot_add=True, cpus=4, memory_mb=8192)

        wire = _config(spec, ExplicitDatastore(name="datastore1")).to_wire()

        assert wire["firmware"] == "efi"
        assert wire["cpuHotAddEnabled"] is True
        assert wire["memoryHotAddEnabled"] is True
        assert wire["numCPUs"] == 4
        assert wire["memoryMB"] == 8192
