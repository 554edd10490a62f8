"""Settings for a cluster test run, read from the environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Sequence

MAX_PODS_PER_NODE = 110
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _env_int(name: str, default: str) -> int:
    return _atoi(os.environ.get(name, default))


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


@dataclass
class Configuration:
    """Where the cluster is and how hard to load it."""

    kubeconfig_path: str
    num_compute_nodes: int
    fill_percent_capacity: int
    number_of_iterations: int

    def max_replicas(self, all_pods: Sequence[object]) -> int:
        """Replicas that fill the free pod capacity to the configured percentage."""
        free = self.num_compute_nodes * MAX_PODS_PER_NODE - len(all_pods)
        product = free * self.fill_percent_capacity
        quotient = abs(product) // 100
        return _to_int32(quotient if product >= 0 else -quotient)


def new_config() -> Configuration:
    """Read the configuration from the environment, with defaults."""
    return Configuration(
        kubeconfig_path=os.environ.get("KUBECONFIG", "${HOME}/.kube/config"),
        num_compute_nodes=_env_int("NUMBER_OF_COMPUTE_NODES", "2"),
        fill_percent_capacity=_env_int("FILL_PERCENT_CAPACITY", "50"),
        number_of_iterations=_env_int("NUMBER_OF_THRASH_ITER", "1"),
    )