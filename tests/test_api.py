import ipaddress

import pytest

from whereabouts.api import (
    GROUP_NAME,
    IPAllocation,
    IPPool,
    IPPoolSpec,
    ObjectMeta,
    OverlappingRangeIPReservation,
    OverlappingRangeIPReservationSpec,
    ippool_from_dict,
    kind,
    resource,
)


def _pool(ip_range: str) -> IPPool:
    return IPPool(
        metadata=ObjectMeta(name="pool", namespace="dummyNS", resource_version="1"),
        spec=IPPoolSpec(
            range=ip_range,
            allocations={"0": IPAllocation(container_id="dummy-0", pod_ref="dummyNS/dummyPOD")},
        ),
    )


def test_kind_uses_whereabouts_group():
    assert kind("OverlappingRangeIPReservation").group == "whereabouts.cni.cncf.io"


def test_kind_is_group_qualified():
    group_kind = kind("IPPool")
    assert group_kind.group == GROUP_NAME
    assert group_kind.kind == "IPPool"


def test_resource_is_group_qualified():
    group_resource = resource("ippools")
    assert group_resource.group == GROUP_NAME
    assert group_resource.resource == "ippools"
    assert str(group_resource) == "ippools." + GROUP_NAME


@pytest.mark.parametrize("ip_range", ["192.168.1.11/24", "2001::1/116", "fd::1/116"])
def test_parse_cidr_returns_address_and_network(ip_range):
    address, network = _pool(ip_range).parse_cidr()
    text_ip, prefix = ip_range.split("/")
    assert address == ipaddress.ip_address(text_ip)
    assert network.prefixlen == int(prefix)
    assert address in network
    assert int(network.network_address) & int(network.hostmask) == 0


@pytest.mark.parametrize("ip_range", ["192.168.1.1", "not-an-ip/24", "192.168.1.1/33", ""])
def test_parse_cidr_rejects_invalid_ranges(ip_range):
    with pytest.raises(ValueError):
        _pool(ip_range).parse_cidr()


def test_to_dict_uses_wire_field_names():
    data = _pool("192.168.1.0/24").to_dict()
    assert data["kind"] == "IPPool"
    assert data["metadata"]["resourceVersion"] == "1"
    assert data["spec"]["range"] == "192.168.1.0/24"
    assert data["spec"]["allocations"]["0"] == {"id": "dummy-0", "podref": "dummyNS/dummyPOD"}


def test_allocation_omits_empty_podref():
    assert IPAllocation(container_id="abc").to_dict() == {"id": "abc"}


def test_ippool_round_trip():
    pool = _pool("2001::1/116")
    assert ippool_from_dict(pool.to_dict()) == pool


def test_ippool_from_dict_without_spec_has_no_allocations():
    pool = ippool_from_dict({"metadata": {"name": "x"}})
    assert pool.metadata.name == "x"
    assert pool.spec.allocations == {}
    assert pool.spec.range == ""


def test_overlapping_reservation_to_dict():
    reservation = OverlappingRangeIPReservation(
        spec=OverlappingRangeIPReservationSpec(container_id="abc", pod_ref="ns/pod"),
        metadata=ObjectMeta(name="192.168.1.1"),
    )
    data = reservation.to_dict()
    assert data["spec"] == {"containerid": "abc", "podref": "ns/pod"}
    assert data["metadata"] == {"name": "192.168.1.1"}
    assert data["apiVersion"].startswith(GROUP_NAME)