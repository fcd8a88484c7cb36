"""VM creation: placement targets, creation path, completion."""

import logging

from pydantic import BaseModel, ConfigDict

from ..api.exceptions import NoStorageRecommendationError, TaskError, VMCreationError
from ..models.inventory import NetworkRef
from ..models.machine import MachineSpec
from ..models.vim import (
    ApplyStorageRecommendationResult,
    ManagedObjectReference,
    StorageDrsPodSelectionSpec,
    StoragePlacementSpec,
    VirtualMachineConfigSpec,
)
from .devices import build_device_changes
from .placement import (
    ExplicitDatastore,
    PlacementDecision,
    StoragePod,
    parse_revision,
    resolve_placement,
)
from .platform import Platform
from .translator import build_config_spec

logger = logging.getLogger(__name__)


class CreationPlan(BaseModel):
    """Everything resolved and built for a creation request, before submitting."""

    model_config = ConfigDict(frozen=True)

    pool: ManagedObjectReference
    folder: ManagedObjectReference
    decision: PlacementDecision
    config: VirtualMachineConfigSpec


class VMCreator:
    """Create VMs from machine specs on a platform."""

    def __init__(self, platform: Platform) -> None:
        """Initialize the creator.

        Args:
            platform: Platform used for lookups and tasks
        """
        self.platform = platform

    async def plan(self, spec: MachineSpec) -> CreationPlan:
        """Resolve placement targets and build the VM configuration.

        Args:
            spec: Machine spec

        Returns:
            Creation plan ready to be submitted
        """
        if spec.resource_pool:
            pool = await self.platform.find_resource_pool(
                spec.datacenter, spec.cluster, spec.resource_pool
            )
        else:
            pool = await self.platform.cluster_resource_pool(spec.datacenter, spec.cluster)
        folder = await self.platform.find_folder(spec.datacenter, spec.folder)

        revision = parse_revision(await self.platform.api_version())
        decision = resolve_placement(spec, revision)
        logger.info("vm %s: placement %r (api revision %s)", spec.name, decision, revision)

        if isinstance(decision, ExplicitDatastore):
            for datastore in dict.fromkeys(v.datastore for v in spec.volumes if v.datastore):
                await self.platform.find_datastore(spec.datacenter, datastore)

        networks: list[NetworkRef] = []
        for interface in spec.interfaces:
            networks.append(
                await self.platform.find_network(
                    spec.datacenter, interface.network, interface.virtual_switch
                )
            )

        devices = build_device_changes(spec, decision, networks)
        config = build_config_spec(spec, decision, devices)
        return CreationPlan(pool=pool, folder=folder, decision=decision, config=config)

    async def create(self, spec: MachineSpec) -> str:
        """Create the VM and return its instance UUID.

        Args:
            spec: Machine spec

        Returns:
            Instance UUID of the new VM

        Raises:
            VMCreationError: On any failure; the original error is ``cause``
        """
        try:
            plan = await self.plan(spec)
            if isinstance(plan.decision, StoragePod):
                vm = await self._create_on_storage_pod(spec, plan, plan.decision)
            else:
                vm = await self._create_on_datastore(plan)
            uuid = await self.platform.instance_uuid(vm)
        except Exception as e:
            raise VMCreationError(f"failed to create vm: {e}", cause=e) from e

        logger.info("vm %s created (%s, instance uuid %s)", spec.name, vm, uuid)
        return uuid

    async def _create_on_datastore(self, plan: CreationPlan) -> ManagedObjectReference:
        task = await self.platform.create_vm(plan.folder, plan.config, plan.pool)
        logger.info("waiting for %s", task)
        info = await self.platform.wait_for_task(task)
        return ManagedObjectReference.model_validate(info.result)

    async def _create_on_storage_pod(
        self, spec: MachineSpec, plan: CreationPlan, pod: StoragePod
    ) -> ManagedObjectReference:
        pod_ref = await self.platform.find_storage_pod(spec.datacenter, pod.name)
        placement = StoragePlacementSpec(
            type="create",
            folder=plan.folder,
            resource_pool=plan.pool,
            pod_selection_spec=StorageDrsPodSelectionSpec(storage_pod=pod_ref),
            config_spec=plan.config,
        )
        result = await self.platform.recommend_datastores(placement)
        if not result.recommendations:
            raise NoStorageRecommendationError(pod.name)

        key = result.recommendations[0].key
        logger.info("applying storage recommendation %s on pod %s", key, pod.name)
        task = await self.platform.apply_storage_recommendation([key])
        info = await self.platform.wait_for_task(task)
        applied = ApplyStorageRecommendationResult.model_validate(info.result)
        if applied.vm is None:
            raise TaskError(task.value, f"storage recommendation {key} did not report a vm")
        return applied.vm
