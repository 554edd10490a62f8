"""Read the addresses a pod received from its network-status annotation."""

from __future__ import annotations

import json
from typing import Any, Mapping

NETWORK_STATUS_ANNOTATION = "k8s.v1.cni.cncf.io/network-status"
SECONDARY_INTERFACE = "net1"


class NetworkStatusError(ValueError):
    """The pod's network status does not describe a usable secondary interface."""


def _annotations(pod: Mapping[str, Any]) -> Mapping[str, str]:
    metadata = pod.get("metadata") or {}
    return metadata.get("annotations") or {}


def secondary_iface_ip_value(pod: Mapping[str, Any]) -> list[str]:
    """The IPs of the pod's secondary interface, in the order they are listed."""
    annotations = _annotations(pod)
    try:
        raw_status = annotations[NETWORK_STATUS_ANNOTATION]
    except KeyError:
        raise NetworkStatusError(
            "the pod must feature the `networks-status` annotation"
        ) from None

    try:
        statuses = json.loads(raw_status)
    except json.JSONDecodeError as err:
        raise NetworkStatusError(f"invalid network status annotation: {err}") from err
    if statuses is None:
        statuses = []
    if not isinstance(statuses, list):
        raise NetworkStatusError("the network status annotation must hold a list")

    status = next(
        (
            entry
            for entry in statuses
            if isinstance(entry, dict) and entry.get("interface") == SECONDARY_INTERFACE
        ),
        None,
    )
    if status is None:
        raise NetworkStatusError("the pod does not have the requested secondary interface")

    ips = status.get("ips") or []
    if not ips:
        raise NetworkStatusError("the pod does not have IPs for its secondary interfaces")
    return list(ips)