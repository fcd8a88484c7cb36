"""VM creation request building and orchestration."""

from .devices import (
    build_controller,
    build_device_changes,
    build_disk,
    build_interface,
    effective_index,
    resolve_sharing,
)
from .orchestrator import CreationPlan, VMCreator
from .placement import (
    ExplicitDatastore,
    PlacementDecision,
    StoragePod,
    parse_revision,
    path_prefix,
    resolve_placement,
)
from .platform import Platform
from .translator import build_config_spec

__all__ = [
    "CreationPlan",
    "ExplicitDatastore",
    "PlacementDecision",
    "Platform",
    "StoragePod",
    "VMCreator",
    "build_config_spec",
    "build_controller",
    "build_device_changes",
    "build_disk",
    "build_interface",
    "effective_index",
    "parse_revision",
    "path_prefix",
    "resolve_placement",
    "resolve_sharing",
]
