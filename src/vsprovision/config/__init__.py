"""Configuration management."""

from .manager import Config, ConfigManager
from .specfile import load_machine_spec
from ..models.config import AuthConfig, OutputConfig, ProfileConfig

__all__ = [
    "AuthConfig",
    "Config",
    "ConfigManager",
    "OutputConfig",
    "ProfileConfig",
    "load_machine_spec",
]
