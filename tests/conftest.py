"""Pytest fixtures for vsprovision tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from vsprovision.models import (
    DistributedPortgroup,
    MachineSpec,
    ManagedObjectReference,
    ProfileConfig,
    StandardNetwork,
    TaskInfo,
)


def make_spec(**overrides: Any) -> MachineSpec:
    """Machine spec with the minimum required fields, plus overrides."""
    data: dict[str, Any] = {
        "name": "web01",
        "datacenter": "dc1",
        "cluster": "cluster1",
    }
    data.update(overrides)
    return MachineSpec.model_validate(data)


def moref(type_: str, value: str) -> ManagedObjectReference:
    return ManagedObjectReference(type=type_, value=value)


@pytest.fixture
def plain_network() -> StandardNetwork:
    """Standard switch portgroup."""
    return StandardNetwork(name="VM Network", ref=moref("Network", "network-11"))


@pytest.fixture
def distributed_network() -> DistributedPortgroup:
    """Distributed portgroup on dvs1."""
    return DistributedPortgroup(
        name="dvpg-prod",
        ref=moref("DistributedVirtualPortgroup", "dvportgroup-21"),
        key="dvportgroup-21",
        switch="dvs1",
        uuid="50 2a 6c 1e 9f 3b 44 0d-8a 7e 5c 31 b2 90 aa 01",
    )


@pytest.fixture
def platform(plain_network: StandardNetwork) -> AsyncMock:
    """Platform double answering lookups for a vSphere 6.7 endpoint."""
    mock = AsyncMock()
    mock.api_version.return_value = "6.7.3"
    mock.cluster_resource_pool.return_value = moref("ResourcePool", "resgroup-8")
    mock.find_resource_pool.return_value = moref("ResourcePool", "resgroup-42")
    mock.find_folder.return_value = moref("Folder", "group-v3")
    mock.find_network.return_value = plain_network
    mock.find_storage_pod.return_value = moref("StoragePod", "group-p5")
    mock.find_datastore.return_value = moref("Datastore", "datastore-12")
    mock.create_vm.return_value = moref("Task", "task-100")
    mock.apply_storage_recommendation.return_value = moref("Task", "task-200")
    mock.wait_for_task.return_value = TaskInfo(
        key="task-100",
        state="success",
        result={"_typeName": "ManagedObjectReference", "type": "VirtualMachine", "value": "vm-77"},
    )
    mock.instance_uuid.return_value = "5029c2f0-1d3e-4c4b-9a5e-0e4c61d0c0de"
    return mock


@pytest.fixture
def profile() -> ProfileConfig:
    """Password profile for vcenter.example.com."""
    return ProfileConfig.model_validate(
        {
            "host": "vcenter.example.com",
            "verify_ssl": False,
            "auth": {"type": "password", "user": "administrator@vsphere.local", "password": "s3cret"},
            "task_timeout": 5,
            "poll_interval": 0,
        }
    )
