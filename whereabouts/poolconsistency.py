"""Compare an IP pool's allocations with the addresses live pods report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence

from whereabouts.allocate import IPReservation
from whereabouts.retrievers import NetworkStatusError, secondary_iface_ip_value


class IPPoolView(Protocol):
    """Anything that can list the reservations of an IP pool."""

    def allocations(self) -> Sequence[IPReservation]: ...


def _pod_ip(pod: Mapping[str, Any]) -> Optional[str]:
    try:
        ips = secondary_iface_ip_value(pod)
    except NetworkStatusError:
        return None
    return ips[-1]


@dataclass
class Checker:
    """Finds IPs missing from a pool and IPs the pool holds for no live pod."""

    ip_pool: IPPoolView
    pod_list: list = field(default_factory=list)

    def missing_ips(self) -> list[str]:
        """Pod IPs with no allocation in the pool; empty if a pod has no usable status."""
        reserved = {str(allocation.ip) for allocation in self.ip_pool.allocations()}
        missing: list[str] = []
        for pod in self.pod_list:
            pod_ip = _pod_ip(pod)
            if pod_ip is None:
                return []
            if pod_ip not in reserved:
                missing.append(pod_ip)
        return missing

    def stale_ips(self) -> list[str]:
        """Allocated IPs that no live pod reports."""
        pod_ips = {ip for ip in map(_pod_ip, self.pod_list) if ip is not None}
        return [
            str(allocation.ip)
            for allocation in self.ip_pool.allocations()
            if str(allocation.ip) not in pod_ips
        ]


def new_pool_consistency_check(ip_pool: IPPoolView, pod_list: Sequence[Any]) -> Checker:
    """A checker for the given pool and pods."""
    return Checker(ip_pool=ip_pool, pod_list=list(pod_list))