"""Operations the provisioning core needs from a virtualization platform."""

from collections.abc import Sequence
from typing import Protocol

from ..models.inventory import NetworkRef
from ..models.vim import (
    ManagedObjectReference,
    StoragePlacementResult,
    StoragePlacementSpec,
    TaskInfo,
    VirtualMachineConfigSpec,
)


class Platform(Protocol):
    """Lookups and tasks used while creating a VM.

    Lookups raise ``ResourceNotFoundError`` for unknown names. ``wait_for_task``
    raises ``TaskError`` when the task fails.
    """

    async def api_version(self) -> str:
        ...

    async def find_resource_pool(
        self, datacenter: str, cluster: str, name: str
    ) -> ManagedObjectReference:
        ...

    async def cluster_resource_pool(
        self, datacenter: str, cluster: str
    ) -> ManagedObjectReference:
        ...

    async def find_folder(self, datacenter: str, path: str) -> ManagedObjectReference:
        ...

    async def find_network(
        self, datacenter: str, name: str, virtual_switch: str | None = None
    ) -> NetworkRef:
        ...

    async def find_storage_pod(self, datacenter: str, name: str) -> ManagedObjectReference:
        ...

    async def find_datastore(self, datacenter: str, name: str) -> ManagedObjectReference:
        ...

    async def create_vm(
        self,
        folder: ManagedObjectReference,
        config: VirtualMachineConfigSpec,
        pool: ManagedObjectReference,
    ) -> ManagedObjectReference:
        ...

    async def recommend_datastores(
        self, placement: StoragePlacementSpec
    ) -> StoragePlacementResult:
        ...

    async def apply_storage_recommendation(
        self, keys: Sequence[str]
    ) -> ManagedObjectReference:
        ...

    async def wait_for_task(self, task: ManagedObjectReference) -> TaskInfo:
        ...

    async def instance_uuid(self, vm: ManagedObjectReference) -> str:
        ...
