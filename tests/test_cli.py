"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from vsprovision import __version__
from vsprovision.api.exceptions import ResourceNotFoundError
from vsprovision.cli import vm as vm_cli
from vsprovision.cli.main import app
from vsprovision.utils.output import console

runner = CliRunner()

SPEC_YAML = """
name: web01
datacenter: dc1
cluster: cluster1
interfaces:
  - network: VM Network
volumes:
  - datastore: ds1
    size: 10240
"""


class FakeClient:
    """Stands in for VSphereClient, handing out the platform double."""

    def __init__(self, platform):
        self.platform = platform
        self.profiles = []

    def __call__(self, profile):
        self.profiles.append(profile)
        return self

    async def __aenter__(self):
        return self.platform

    async def __aexit__(self, *exc):
        return None


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(console, "width", 200)


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    directory = tmp_path / "config"
    monkeypatch.setenv("VSPROVISION_CONFIG_DIR", str(directory))
    return directory


@pytest.fixture
def with_profile():
    result = runner.invoke(
        app,
        [
            "config", "add", "lab",
            "--host", "vcenter.example.com",
            "--user", "administrator@vsphere.local",
            "--password", "s3cret",
            "--no-verify-ssl",
            "--yes",
        ],
    )
    assert result.exit_code == 0, result.output
    return "lab"


@pytest.fixture
def spec_file(tmp_path):
    path = tmp_path / "web01.yaml"
    path.write_text(SPEC_YAML)
    return path


@pytest.fixture
def fake_client(platform, monkeypatch):
    fake = FakeClient(platform)
    monkeypatch.setattr(vm_cli, "VSphereClient", fake)
    return fake


class TestMain:
    """Tests for the top level command."""

    def test_version(self) -> None:
        """Test --version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestConfigCommands:
    """Tests for config commands."""

    def test_add_and_list(self, with_profile) -> None:
        """Test an added profile is listed as default."""
        result = runner.invoke(app, ["config", "list"])

        assert result.exit_code == 0
        assert "lab" in result.output
        assert "vcenter.example.com:443" in result.output

    def test_add_duplicate(self, with_profile) -> None:
        """Test adding an existing profile fails."""
        result = runner.invoke(
            app, ["config", "add", "lab", "--host", "h", "--user", "u", "--password", "p", "--yes"]
        )

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_show(self, with_profile) -> None:
        """Test showing the default profile."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "vcenter.example.com" in result.output
        assert "Default profile" in result.output

    def test_default_unknown(self, with_profile) -> None:
        """Test setting an unknown default profile fails."""
        result = runner.invoke(app, ["config", "default", "nope"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_remove(self, with_profile) -> None:
        """Test removing a profile."""
        result = runner.invoke(app, ["config", "remove", "lab", "--yes"])

        assert result.exit_code == 0
        assert "removed" in result.output

    def test_list_without_config(self) -> None:
        """Test commands fail cleanly without a config file."""
        result = runner.invoke(app, ["config", "list"])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output


class TestVmCommands:
    """Tests for vm commands."""

    def test_plan_table(self, with_profile, spec_file, fake_client) -> None:
        """Test plan shows the placement and devices."""
        result = runner.invoke(app, ["vm", "plan", str(spec_file)])

        assert result.exit_code == 0, result.output
        assert "datastore ds1" in result.output
        assert "[ds1]" in result.output
        assert "VirtualLsiLogicController" in result.output
        fake_client.platform.create_vm.assert_not_awaited()
        assert fake_client.profiles[0].host == "vcenter.example.com"

    def test_plan_json(self, with_profile, spec_file, fake_client) -> None:
        """Test plan prints the wire configuration as JSON."""
        result = runner.invoke(app, ["vm", "plan", str(spec_file), "--output", "json"])

        assert result.exit_code == 0, result.output
        wire = json.loads(result.output)
        assert wire["_typeName"] == "VirtualMachineConfigSpec"
        assert wire["files"]["vmPathName"] == "[ds1]"
        assert wire["extraConfig"][0]["key"] == "bios.bootOrder"

    def test_create(self, with_profile, spec_file, fake_client) -> None:
        """Test create prints the instance UUID."""
        result = runner.invoke(app, ["vm", "create", str(spec_file), "--yes"])

        assert result.exit_code == 0, result.output
        assert "5029c2f0-1d3e-4c4b-9a5e-0e4c61d0c0de" in result.output
        fake_client.platform.create_vm.assert_awaited_once()

    def test_create_declined(self, with_profile, spec_file, fake_client) -> None:
        """Test declining the confirmation creates nothing."""
        result = runner.invoke(app, ["vm", "create", str(spec_file)], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        fake_client.platform.create_vm.assert_not_awaited()

    def test_create_failure(self, with_profile, spec_file, fake_client) -> None:
        """Test creation failures exit non-zero with the wrapped message."""
        fake_client.platform.find_folder.side_effect = ResourceNotFoundError("folder", "dc1/vm")

        result = runner.invoke(app, ["vm", "create", str(spec_file), "--yes"])

        assert result.exit_code == 1
        assert "failed to create vm" in result.output

    def test_invalid_spec_file(self, with_profile, tmp_path, fake_client) -> None:
        """Test an invalid spec file is reported before connecting."""
        path = tmp_path / "bad.yaml"
        path.write_text("name: web01\n")

        result = runner.invoke(app, ["vm", "plan", str(path)])

        assert result.exit_code == 1
        assert "Invalid machine spec" in result.output
        assert fake_client.profiles == []
