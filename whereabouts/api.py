"""Resource types of the whereabouts.cni.cncf.io API group, version v1alpha1."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import Any, Optional, Union

GROUP_NAME = "whereabouts.cni.cncf.io"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP_NAME}/{VERSION}"

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


@dataclass(frozen=True)
class GroupKind:
    """A kind qualified by its API group."""

    group: str
    kind: str

    def __str__(self) -> str:
        return f"{self.kind}.{self.group}" if self.group else self.kind


@dataclass(frozen=True)
class GroupResource:
    """A resource qualified by its API group."""

    group: str
    resource: str

    def __str__(self) -> str:
        return f"{self.resource}.{self.group}" if self.group else self.resource


def kind(kind: str) -> GroupKind:
    """Qualify an unqualified kind with this API group."""
    return GroupKind(group=GROUP_NAME, kind=kind)


def resource(resource: str) -> GroupResource:
    """Qualify an unqualified resource with this API group."""
    return GroupResource(group=GROUP_NAME, resource=resource)


@dataclass
class ObjectMeta:
    """The metadata carried by every stored object."""

    name: str = ""
    namespace: str = ""
    resource_version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.name:
            data["name"] = self.name
        if self.namespace:
            data["namespace"] = self.namespace
        if self.resource_version:
            data["resourceVersion"] = self.resource_version
        if self.labels:
            data["labels"] = dict(self.labels)
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "ObjectMeta":
        data = data or {}
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            resource_version=data.get("resourceVersion", ""),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )


@dataclass
class IPAllocation:
    """The pod and container owning one IP of a pool."""

    container_id: str
    pod_ref: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {"id": self.container_id}
        if self.pod_ref:
            data["podref"] = self.pod_ref
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IPAllocation":
        return cls(container_id=data.get("id", ""), pod_ref=data.get("podref", ""))


@dataclass
class IPPoolSpec:
    """Desired state of an IP pool.

    Allocation keys are offsets of the allocated IP from the start of the range.
    """

    range: str = ""
    allocations: dict[str, IPAllocation] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "range": self.range,
            "allocations": {key: alloc.to_dict() for key, alloc in self.allocations.items()},
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "IPPoolSpec":
        data = data or {}
        allocations = data.get("allocations") or {}
        return cls(
            range=data.get("range", ""),
            allocations={key: IPAllocation.from_dict(value) for key, value in allocations.items()},
        )


@dataclass
class IPPool:
    """An IP pool resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: IPPoolSpec = field(default_factory=IPPoolSpec)
    api_version: str = API_VERSION
    kind: str = "IPPool"

    def parse_cidr(self) -> tuple[IPAddress, IPNetwork]:
        """The address and the network of the pool's CIDR range."""
        text = self.spec.range
        if "/" not in text:
            raise ValueError(f"invalid CIDR address: {text}")
        try:
            address = ipaddress.ip_address(text.split("/", 1)[0])
            network = ipaddress.ip_network(text, strict=False)
        except ValueError as err:
            raise ValueError(f"invalid CIDR address: {text}") from err
        return address, network

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.api_version:
            data["apiVersion"] = self.api_version
        if self.kind:
            data["kind"] = self.kind
        data["metadata"] = self.metadata.to_dict()
        data["spec"] = self.spec.to_dict()
        return data


def ippool_from_dict(data: dict[str, Any]) -> IPPool:
    """Build an IPPool from its serialised form."""
    return IPPool(
        metadata=ObjectMeta.from_dict(data.get("metadata")),
        spec=IPPoolSpec.from_dict(data.get("spec")),
        api_version=data.get("apiVersion", API_VERSION),
        kind=data.get("kind", "IPPool"),
    )


@dataclass
class IPPoolList:
    """A list of IP pools."""

    items: list[IPPool] = field(default_factory=list)
    resource_version: str = ""
    api_version: str = API_VERSION
    kind: str = "IPPoolList"


@dataclass
class OverlappingRangeIPReservationSpec:
    """Desired state of a cluster-wide IP reservation."""

    container_id: str
    pod_ref: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {"containerid": self.container_id}
        if self.pod_ref:
            data["podref"] = self.pod_ref
        return data


@dataclass
class OverlappingRangeIPReservation:
    """An IP reserved across overlapping ranges."""

    spec: OverlappingRangeIPReservationSpec
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    api_version: str = API_VERSION
    kind: str = "OverlappingRangeIPReservation"

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": self.spec.to_dict(),
        }


@dataclass
class OverlappingRangeIPReservationList:
    """A list of overlapping-range IP reservations."""

    items: list[OverlappingRangeIPReservation] = field(default_factory=list)
    resource_version: str = ""
    api_version: str = API_VERSION
    kind: str = "OverlappingRangeIPReservationList"


KNOWN_TYPES = (
    IPPool,
    IPPoolList,
    OverlappingRangeIPReservation,
    OverlappingRangeIPReservationList,
)