"""Builders of Kubernetes object manifests used to exercise the plugin."""

from __future__ import annotations

from typing import Any, Optional

TEST_IMAGE = "quay.io/dougbtv/alpine:latest"
NETWORK_ATTACHMENT_ANNOTATION = "k8s.v1.cni.cncf.io/networks"
PARALLEL_POD_MANAGEMENT = "Parallel"
_DEFAULT_CONTAINER = "samplepod"


def _container_cmd() -> list[str]:
    return ["/bin/ash", "-c", "trap : TERM INT; sleep infinity & wait"]


def _pod_spec(container_name: str) -> dict[str, Any]:
    return {
        "containers": [
            {"name": container_name, "command": _container_cmd(), "image": TEST_IMAGE},
        ]
    }


def _meta(**fields: Any) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value}


def _pod_meta(
    pod_name: str,
    namespace: str,
    label: Optional[dict[str, str]],
    annotations: Optional[dict[str, str]],
) -> dict[str, Any]:
    return _meta(name=pod_name, namespace=namespace, labels=label, annotations=annotations)


def pod_object(
    pod_name: str,
    namespace: str,
    label: Optional[dict[str, str]],
    annotations: Optional[dict[str, str]],
) -> dict[str, Any]:
    """A pod manifest running the test image."""
    return {
        "metadata": _pod_meta(pod_name, namespace, label, annotations),
        "spec": _pod_spec(_DEFAULT_CONTAINER),
    }


def stateful_set_spec(
    stateful_set_name: str,
    namespace: str,
    service_name: str,
    replica_number: int,
    annotations: Optional[dict[str, str]],
) -> dict[str, Any]:
    """A stateful set manifest whose pods are labelled app=<service_name>."""
    web_app_labels = {"app": service_name}
    return {
        "metadata": {"name": service_name},
        "spec": {
            "replicas": int(replica_number),
            "selector": {"matchLabels": dict(web_app_labels)},
            "template": {
                "metadata": _pod_meta(stateful_set_name, namespace, web_app_labels, annotations),
                "spec": _pod_spec(stateful_set_name),
            },
            "serviceName": service_name,
            "podManagementPolicy": PARALLEL_POD_MANAGEMENT,
        },
    }


def replica_set_object(
    replica_count: int,
    rs_name: str,
    namespace: str,
    label: Optional[dict[str, str]],
    annotations: Optional[dict[str, str]],
) -> dict[str, Any]:
    """A replica set manifest running replica_count copies of the test pod."""
    return {
        "apiVersion": "v1",
        "kind": "ReplicaSet",
        "metadata": _meta(name=rs_name, namespace=namespace, labels=label),
        "spec": {
            "replicas": int(replica_count),
            "selector": _meta(matchLabels=label),
            "template": {
                "metadata": _meta(labels=label, annotations=annotations, namespace=namespace),
                "spec": _pod_spec(_DEFAULT_CONTAINER),
            },
        },
    }


def replica_set_query(rs_name: str) -> str:
    """The label selector matching the pods of a replica set."""
    return "tier=" + rs_name


def pod_network_selection_elements(*args: str) -> dict[str, str]:
    """The pod annotation attaching the given networks."""
    return {NETWORK_ATTACHMENT_ANNOTATION: ",".join(args)}