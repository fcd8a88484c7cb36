"""vSphere client over the VI/JSON protocol (``/sdk/vim25/<release>``)."""

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

import httpx

from .auth import AuthHandler
from .exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    PermissionError,
    ResourceNotFoundError,
    TaskError,
    TimeoutError,
    VSProvisionError,
)
from ..models.config import ProfileConfig
from ..models.inventory import DistributedPortgroup, NetworkRef, StandardNetwork
from ..models.vim import (
    ManagedObjectReference,
    StoragePlacementResult,
    StoragePlacementSpec,
    TaskInfo,
    VirtualMachineConfigSpec,
)

logger = logging.getLogger(__name__)


def _escape(name: str) -> str:
    """Escape an inventory name for use as one inventory path segment."""
    return name.replace("%", "%25").replace("/", "%2f")


class VSphereClient:
    """Async client for vCenter / ESXi, usable as the provisioning platform."""

    def __init__(
        self,
        profile: ProfileConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize vSphere client.

        Args:
            profile: Profile configuration
            transport: Optional HTTP transport (used by tests)
        """
        self.profile = profile
        self.base_url = f"https://{profile.host}:{profile.port}/sdk/vim25/{profile.api_release}"
        self.auth_handler = AuthHandler(
            base_url=self.base_url,
            user=profile.auth.user,
        )
        self._transport = transport
        self._headers: dict[str, str] | None = None
        self._client: httpx.AsyncClient | None = None
        self._content: dict[str, Any] = {}
        self._logged_in = False

    async def __aenter__(self) -> "VSphereClient":
        """Async context manager entry.

        Returns:
            Self
        """
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit.

        Args:
            exc_type: Exception type
            exc_val: Exception value
            exc_tb: Exception traceback
        """
        await self.close()

    async def connect(self) -> None:
        """Fetch the service content and authenticate."""
        self._client = httpx.AsyncClient(
            verify=self.profile.verify_ssl,
            timeout=self.profile.timeout,
            transport=self._transport,
        )

        try:
            response = await self._client.get(
                f"{self.base_url}/ServiceInstance/ServiceInstance/content"
            )
            response.raise_for_status()
            self._content = response.json()
        except httpx.HTTPStatusError as e:
            await self.close()
            raise APIError(
                f"Failed to read service content: {e}", status_code=e.response.status_code
            )
        except httpx.RequestError as e:
            await self.close()
            raise NetworkError(f"Network error: {e}")

        if self.profile.auth.type == "session":
            if not self.profile.auth.session_id:
                raise AuthenticationError("Session id required for session auth")
            self._headers = self.auth_handler.get_session_headers(self.profile.auth.session_id)
        else:
            if not self.profile.auth.password:
                raise AuthenticationError("Password required for password auth")
            try:
                self._headers = await self.auth_handler.login(
                    self._client, self._service("sessionManager").value, self.profile.auth.password
                )
            except VSProvisionError:
                await self.close()
                raise
            self._logged_in = True

        logger.debug("connected to %s (api %s)", self.profile.host, self.about.get("apiVersion"))

    async def close(self) -> None:
        """Log out if we logged in, and close the client connection."""
        if self._client:
            if self._logged_in and self._headers:
                await self.auth_handler.logout(
                    self._client, self._service("sessionManager").value, self._headers
                )
                self._logged_in = False
            await self._client.aclose()
            self._client = None

    @property
    def about(self) -> dict[str, Any]:
        """``AboutInfo`` of the connected endpoint."""
        return self._content.get("about", {})

    def _service(self, name: str) -> ManagedObjectReference:
        """Reference to a singleton from the service content (e.g. ``searchIndex``)."""
        ref = self._content.get(name)
        if not ref:
            raise APIError(f"Service '{name}' is not available on this endpoint")
        return ManagedObjectReference.model_validate(ref)

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Ensure client is connected.

        Returns:
            HTTP client

        Raises:
            RuntimeError: If not connected
        """
        if not self._client or not self._headers:
            raise RuntimeError("Client not connected. Use async with or call connect().")
        return self._client

    async def _request(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
        retry_count: int = 3,
    ) -> Any:
        """Make an API request.

        Only reads are retried; a retried method call could run a task twice.

        Args:
            method: HTTP method
            endpoint: Path below the VI/JSON base URL
            body: JSON request body
            retry_count: Number of attempts for transient failures of reads

        Returns:
            Decoded JSON response, or None for an empty response

        Raises:
            APIError: On API errors and faults
            NetworkError: On network errors
            TimeoutError: On timeout
        """
        client = self._ensure_connected()
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        attempts = retry_count if method == "GET" else 1

        for attempt in range(attempts):
            try:
                logger.debug("%s %s", method, endpoint)
                response = await client.request(method, url, headers=self._headers, json=body)

                if response.status_code >= 400:
                    raise self._error_from_response(response, endpoint)

                if not response.content:
                    return None
                return response.json()

            except httpx.TimeoutException:
                if attempt < attempts - 1:
                    await asyncio.sleep(2**attempt)
                    continue
                raise TimeoutError(f"Request to {endpoint} timed out")

            except httpx.NetworkError as e:
                if attempt < attempts - 1:
                    await asyncio.sleep(2**attempt)
                    continue
                raise NetworkError(f"Network error: {e}")

            except VSProvisionError:
                raise

            except Exception as e:
                raise APIError(f"Unexpected error: {e}")

        raise APIError("Max retries exceeded")

    def _error_from_response(self, response: httpx.Response, endpoint: str) -> VSProvisionError:
        """Map an error response (HTTP status or VI/JSON fault) to an exception."""
        fault, message = self._extract_fault(response)

        if response.status_code == 401 or fault == "NotAuthenticated":
            return AuthenticationError("Authentication failed or expired")
        if response.status_code == 403 or fault == "NoPermission":
            return PermissionError(f"Permission denied for this operation: {message}")
        if response.status_code == 404 or fault == "ManagedObjectNotFound":
            return ResourceNotFoundError("managed object", endpoint)
        return APIError(message, status_code=response.status_code, fault=fault)

    def _extract_fault(self, response: httpx.Response) -> tuple[str | None, str]:
        """Extract the fault type and message from an error response.

        Args:
            response: HTTP response

        Returns:
            Fault type name (if any) and error message
        """
        try:
            data = response.json()
        except ValueError:
            return None, response.text or f"HTTP {response.status_code}"

        if not isinstance(data, dict):
            return None, str(data)

        fault = data.get("_typeName")
        messages = [m.get("message", "") for m in data.get("faultMessage") or [] if m.get("message")]
        if messages:
            return fault, "; ".join(messages)
        return fault, data.get("localizedMessage") or data.get("message") or fault or response.text

    async def get_property(self, obj: ManagedObjectReference, name: str) -> Any:
        """Read a property of a managed object.

        Args:
            obj: Managed object
            name: Property name (e.g. ``resourcePool``)

        Returns:
            Property value
        """
        return await self._request("GET", f"/{obj.type}/{obj.value}/{name}")

    async def invoke(self, obj: ManagedObjectReference, method: str, **params: Any) -> Any:
        """Invoke a managed object method.

        Args:
            obj: Managed object
            method: Method name (e.g. ``CreateVM_Task``)
            **params: Method parameters, already in wire form

        Returns:
            Method result
        """
        return await self._request("POST", f"/{obj.type}/{obj.value}/{method}", body=params)

    async def find_by_inventory_path(
        self, path: str, resource: str, types: Sequence[str]
    ) -> ManagedObjectReference:
        """Resolve an inventory path such as ``dc1/host/cluster1``.

        Args:
            path: Inventory path
            resource: Resource label for error messages
            types: Accepted managed object types

        Returns:
            Reference to the object

        Raises:
            ResourceNotFoundError: If nothing of an accepted type is at ``path``
        """
        result = await self.invoke(
            self._service("searchIndex"), "FindByInventoryPath", inventoryPath=path
        )
        if not result:
            raise ResourceNotFoundError(resource, path)
        ref = ManagedObjectReference.model_validate(result)
        if ref.type not in types:
            raise ResourceNotFoundError(resource, path)
        return ref

    # Platform lookups

    async def api_version(self) -> str:
        """API version of the endpoint (``about.apiVersion``)."""
        return self.about.get("apiVersion", "")

    async def find_cluster(self, datacenter: str, cluster: str) -> ManagedObjectReference:
        """Find a cluster (or standalone host compute resource) by name."""
        return await self.find_by_inventory_path(
            f"{_escape(datacenter)}/host/{_escape(cluster)}",
            "cluster",
            ("ClusterComputeResource", "ComputeResource"),
        )

    async def cluster_resource_pool(self, datacenter: str, cluster: str) -> ManagedObjectReference:
        """Root resource pool of a cluster."""
        ref = await self.find_cluster(datacenter, cluster)
        pool = await self.get_property(ref, "resourcePool")
        if not pool:
            raise ResourceNotFoundError("resource pool", f"{datacenter}/{cluster}")
        return ManagedObjectReference.model_validate(pool)

    async def find_resource_pool(
        self, datacenter: str, cluster: str, name: str
    ) -> ManagedObjectReference:
        """Find a resource pool below a cluster; nested pools use ``a/b``."""
        return await self.find_by_inventory_path(
            f"{_escape(datacenter)}/host/{_escape(cluster)}/Resources/{name.strip('/')}",
            "resource pool",
            ("ResourcePool", "VirtualApp"),
        )

    async def find_folder(self, datacenter: str, path: str) -> ManagedObjectReference:
        """Find a VM folder by path below the datacenter's VM folder."""
        inventory_path = f"{_escape(datacenter)}/vm"
        if path.strip("/"):
            inventory_path = f"{inventory_path}/{path.strip('/')}"
        return await self.find_by_inventory_path(inventory_path, "folder", ("Folder",))

    async def find_network(
        self, datacenter: str, name: str, virtual_switch: str | None = None
    ) -> NetworkRef:
        """Find a network, reading the switch details of distributed portgroups.

        Args:
            datacenter: Datacenter name
            name: Network or portgroup name
            virtual_switch: Expected distributed switch name, if any

        Returns:
            Resolved network
        """
        ref = await self.find_by_inventory_path(
            f"{_escape(datacenter)}/network/{_escape(name)}",
            "network",
            ("Network", "OpaqueNetwork", "DistributedVirtualPortgroup"),
        )
        if ref.type != "DistributedVirtualPortgroup":
            return StandardNetwork(name=name, ref=ref)

        key = await self.get_property(ref, "key")
        config = await self.get_property(ref, "config")
        switch = ManagedObjectReference.model_validate(config["distributedVirtualSwitch"])
        switch_name = await self.get_property(switch, "name")
        if virtual_switch and switch_name != virtual_switch:
            raise ResourceNotFoundError("network", f"{name} on switch {virtual_switch}")
        uuid = await self.get_property(switch, "uuid")
        return DistributedPortgroup(name=name, ref=ref, key=key, switch=switch_name, uuid=uuid)

    async def find_storage_pod(self, datacenter: str, name: str) -> ManagedObjectReference:
        """Find a storage pod (datastore cluster) by name."""
        return await self.find_by_inventory_path(
            f"{_escape(datacenter)}/datastore/{_escape(name)}", "storage pod", ("StoragePod",)
        )

    async def find_datastore(self, datacenter: str, name: str) -> ManagedObjectReference:
        """Find a datastore by name."""
        return await self.find_by_inventory_path(
            f"{_escape(datacenter)}/datastore/{_escape(name)}", "datastore", ("Datastore",)
        )

    async def instance_uuid(self, vm: ManagedObjectReference) -> str:
        """Instance UUID of a VM."""
        config = await self.get_property(vm, "config")
        if not config or not config.get("instanceUuid"):
            raise APIError(f"VM {vm.value} has no instance UUID")
        return config["instanceUuid"]

    # Tasks

    async def create_vm(
        self,
        folder: ManagedObjectReference,
        config: VirtualMachineConfigSpec,
        pool: ManagedObjectReference,
    ) -> ManagedObjectReference:
        """Start ``CreateVM_Task`` in a folder.

        Returns:
            Task reference
        """
        task = await self.invoke(
            folder, "CreateVM_Task", config=config.to_wire(), pool=pool.to_wire()
        )
        return ManagedObjectReference.model_validate(task)

    async def recommend_datastores(self, placement: StoragePlacementSpec) -> StoragePlacementResult:
        """Ask Storage DRS for placement recommendations."""
        result = await self.invoke(
            self._service("storageResourceManager"),
            "RecommendDatastores",
            storageSpec=placement.to_wire(),
        )
        return StoragePlacementResult.model_validate(result or {})

    async def apply_storage_recommendation(self, keys: Sequence[str]) -> ManagedObjectReference:
        """Start ``ApplyStorageDrsRecommendation_Task`` for recommendation keys.

        Returns:
            Task reference
        """
        task = await self.invoke(
            self._service("storageResourceManager"),
            "ApplyStorageDrsRecommendation_Task",
            key=list(keys),
        )
        return ManagedObjectReference.model_validate(task)

    async def get_task_info(self, task: ManagedObjectReference) -> TaskInfo:
        """Get the current ``TaskInfo`` of a task."""
        return TaskInfo.model_validate(await self.get_property(task, "info"))

    async def wait_for_task(
        self,
        task: ManagedObjectReference,
        timeout: int | None = None,
        poll_interval: float | None = None,
    ) -> TaskInfo:
        """Wait for a task to complete.

        Args:
            task: Task reference
            timeout: Maximum wait time in seconds (profile ``task_timeout``)
            poll_interval: Polling interval in seconds (profile ``poll_interval``)

        Returns:
            Final task info

        Raises:
            TimeoutError: If task doesn't complete within timeout
            TaskError: If task fails
        """
        timeout = timeout if timeout is not None else self.profile.task_timeout
        poll_interval = poll_interval if poll_interval is not None else self.profile.poll_interval
        start_time = time.monotonic()

        while True:
            info = await self.get_task_info(task)
            logger.debug("task %s: %s", task.value, info.state)

            if info.state == "success":
                return info
            if info.state == "error":
                fault = (info.error or {}).get("fault") or {}
                raise TaskError(task.value, info.error_message, fault=fault.get("_typeName"))

            if time.monotonic() - start_time > timeout:
                raise TimeoutError(f"Task {task.value} did not complete within {timeout} seconds")

            await asyncio.sleep(poll_interval)
