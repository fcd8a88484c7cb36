"""Custom exceptions for vsprovision."""


class VSProvisionError(Exception):
    """Base exception for vsprovision."""

    pass


class ConfigError(VSProvisionError):
    """Configuration related errors (profiles, machine spec files)."""

    pass


class AuthenticationError(VSProvisionError):
    """Authentication failures."""

    pass


class APIError(VSProvisionError):
    """General API errors."""

    def __init__(
        self, message: str, status_code: int | None = None, fault: str | None = None
    ) -> None:
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code if applicable
            fault: VI/JSON fault type name (e.g. ``InvalidArgument``)
        """
        super().__init__(message)
        self.status_code = status_code
        self.fault = fault


class ResourceNotFoundError(APIError):
    """A name could not be resolved to a managed object."""

    def __init__(self, resource: str, identifier: str) -> None:
        """Initialize resource not found error.

        Args:
            resource: Type of resource (folder, network, storage pod, etc.)
            identifier: Name or inventory path that was looked up
        """
        super().__init__(f"{resource} '{identifier}' not found", status_code=404)
        self.resource = resource
        self.identifier = identifier


class PermissionError(APIError):
    """Permission denied (403)."""

    def __init__(self, message: str = "Permission denied") -> None:
        """Initialize permission error.

        Args:
            message: Error message
        """
        super().__init__(message, status_code=403)


class NetworkError(VSProvisionError):
    """Network related errors."""

    pass


class TimeoutError(VSProvisionError):
    """Request or task timeout errors."""

    pass


class TaskError(VSProvisionError):
    """A remote task finished in the error state."""

    def __init__(self, task: str, message: str, fault: str | None = None) -> None:
        """Initialize task error.

        Args:
            task: Task managed object id
            message: Localized error message reported by the platform
            fault: Fault type name if reported
        """
        super().__init__(f"task {task} failed: {message}")
        self.task = task
        self.fault = fault


class NoStorageRecommendationError(VSProvisionError):
    """Storage DRS returned no placement recommendation for a storage pod."""

    def __init__(self, storage_pod: str) -> None:
        super().__init__(
            f"could not create vm on storage pod '{storage_pod}', "
            "did not get a storage recommendation"
        )
        self.storage_pod = storage_pod


class VMCreationError(VSProvisionError):
    """Any failure while creating a VM, with the original error kept as cause."""

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(message)
        self.cause = cause
