"""Resolved inventory objects returned by platform lookups."""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from .vim import ManagedObjectReference


@runtime_checkable
class NetworkRef(Protocol):
    """A network an ethernet card can be backed by.

    Distributed portgroups expose the portgroup key and the owning switch
    UUID; other networks are attached by name.
    """

    name: str

    def is_distributed(self) -> bool:
        ...

    def portgroup_key(self) -> str:
        ...

    def switch_uuid(self) -> str:
        ...


class StandardNetwork(BaseModel):
    """Standard switch portgroup or opaque network, attached by name."""

    model_config = ConfigDict(frozen=True)

    name: str
    ref: ManagedObjectReference

    def is_distributed(self) -> bool:
        return False

    def portgroup_key(self) -> str:
        raise TypeError(f"network '{self.name}' is not a distributed portgroup")

    def switch_uuid(self) -> str:
        raise TypeError(f"network '{self.name}' is not a distributed portgroup")


class DistributedPortgroup(BaseModel):
    """Portgroup on a distributed virtual switch."""

    model_config = ConfigDict(frozen=True)

    name: str
    ref: ManagedObjectReference
    key: str
    switch: str
    uuid: str

    def is_distributed(self) -> bool:
        return True

    def portgroup_key(self) -> str:
        return self.key

    def switch_uuid(self) -> str:
        return self.uuid
