"""API client and authentication."""

from .auth import AuthHandler
from .client import VSphereClient
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigError,
    NetworkError,
    NoStorageRecommendationError,
    PermissionError,
    ResourceNotFoundError,
    TaskError,
    TimeoutError,
    VMCreationError,
    VSProvisionError,
)

__all__ = [
    "APIError",
    "AuthHandler",
    "AuthenticationError",
    "ConfigError",
    "NetworkError",
    "NoStorageRecommendationError",
    "PermissionError",
    "ResourceNotFoundError",
    "TaskError",
    "TimeoutError",
    "VMCreationError",
    "VSProvisionError",
    "VSphereClient",
]
