import json

import pytest

from whereabouts.allocate import IPReservation
from whereabouts.poolconsistency import new_pool_consistency_check
from whereabouts.retrievers import NETWORK_STATUS_ANNOTATION


class MockedPool:
    def __init__(self, *reservations):
        self.reservations = list(reservations)

    def allocations(self):
        return self.reservations

    def update(self, reservations):
        self.reservations = list(reservations)


def new_pod(name, namespace, *ips):
    statuses = [
        {"name": f"net{i}", "interface": f"net{i}", "ips": [ip]}
        for i, ip in enumerate(ips, start=1)
    ]
    return {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "annotations": {NETWORK_STATUS_ANNOTATION: json.dumps(statuses)},
        }
    }


def ip_reservation(ip):
    return IPReservation(ip=ip, container_id="")


@pytest.mark.parametrize(
    "pod_list",
    [[], [new_pod("1", "2", "111.111.111.111")]],
    ids=["without any live pod", "independently of live pods"],
)
def test_empty_pool_has_no_stale_ips(pod_list):
    assert new_pool_consistency_check(MockedPool(), pod_list).stale_ips() == []


def test_allocations_pointing_to_pods_with_other_addresses_are_stale():
    ip = "192.168.200.2"
    pool = MockedPool(
        IPReservation(ip=ip, container_id="abc", pod_ref="cba", is_allocated=True)
    )
    live_pods = [new_pod("pod", "default", "192.168.123.200")]
    assert new_pool_consistency_check(pool, live_pods).stale_ips() == [ip]


@pytest.mark.parametrize(
    "pool",
    [MockedPool(), MockedPool(ip_reservation("192.168.200.2"))],
    ids=["with an empty IPPool", "even when the IPPool features allocations"],
)
def test_no_running_pods_have_no_missing_ips(pool):
    assert new_pool_consistency_check(pool, []).missing_ips() == []


def test_consistent_pool_has_no_missing_ips():
    ip = "192.168.200.2"
    live_pods = [new_pod("1", "2", ip)]
    assert new_pool_consistency_check(MockedPool(ip_reservation(ip)), live_pods).missing_ips() == []


def test_inconsistent_pool_has_missing_ips():
    ip = "192.168.200.2"
    live_pods = [new_pod("1", "2", ip)]
    pool = MockedPool(ip_reservation("192.168.123.200"))
    assert new_pool_consistency_check(pool, live_pods).missing_ips() == [ip]


def test_pod_without_status_is_ignored_for_stale_ips():
    ip = "192.168.200.2"
    pods = [{"metadata": {"name": "bare"}}, new_pod("1", "2", ip)]
    assert new_pool_consistency_check(MockedPool(ip_reservation(ip)), pods).stale_ips() == []


def test_pod_without_status_yields_no_missing_ips():
    pods = [new_pod("1", "2", "192.168.200.2"), {"metadata": {"name": "bare"}}]
    assert new_pool_consistency_check(MockedPool(), pods).missing_ips() == []