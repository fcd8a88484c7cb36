"""Storage placement: explicit datastore vs. storage pod (Storage DRS)."""

import re

from pydantic import BaseModel, ConfigDict

from ..models.machine import MachineSpec

FALLBACK_DATASTORE = "datastore1"

# Storage pods are not supported before vSphere 5
STORAGE_POD_MIN_REVISION = 5.0

_REVISION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)")


class ExplicitDatastore(BaseModel):
    """Place VM files and disks on the datastores named by the volumes."""

    model_config = ConfigDict(frozen=True)

    name: str


class StoragePod(BaseModel):
    """Let Storage DRS place the VM inside the named storage pod."""

    model_config = ConfigDict(frozen=True)

    name: str


PlacementDecision = ExplicitDatastore | StoragePod


def parse_revision(api_version: str | float | None) -> float:
    """Turn an ``about.apiVersion`` string such as ``"6.7.3"`` into ``6.7``.

    Unparsable versions count as revision 0.
    """
    if isinstance(api_version, (int, float)):
        return float(api_version)
    match = _REVISION_RE.match(api_version or "")
    return float(match.group(1)) if match else 0.0


def _primary_datastore(spec: MachineSpec) -> str:
    datastore = spec.volumes[0].datastore if spec.volumes else None
    return datastore or FALLBACK_DATASTORE


def resolve_placement(spec: MachineSpec, revision: float) -> PlacementDecision:
    """Decide where the VM is placed.

    The first volume declaring a storage pod wins, but only on platforms at
    revision 5 or later; everything else is explicit datastore placement.
    """
    if revision >= STORAGE_POD_MIN_REVISION:
        for volume in spec.volumes:
            if volume.storage_pod:
                return StoragePod(name=volume.storage_pod)
    return ExplicitDatastore(name=_primary_datastore(spec))


def path_prefix(decision: PlacementDecision, spec: MachineSpec) -> str:
    """Location of the VM configuration files (``files.vmPathName``).

    Storage pod placement must leave it empty so Storage DRS can choose;
    otherwise the files live next to the first disk.
    """
    if isinstance(decision, StoragePod):
        return ""
    return f"[{_primary_datastore(spec)}]"
