"""IP address assignment and release over a range and a reservation list."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Union

logger = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
IPInterface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]
AddressLike = Union[IPAddress, str, bytes, bytearray, int]
NetworkLike = Union[IPNetwork, str]

_MASK64 = (1 << 64) - 1
_MASK128 = (1 << 128) - 1
_V4_MAPPED_PREFIX = 0xFFFF << 32
_MAX_UINT32 = 0xFFFFFFFF


def _to_address(value: AddressLike) -> IPAddress:
    """Normalise a value to an address; IPv4-mapped IPv6 becomes IPv4."""
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        addr = value
    elif isinstance(value, (bytes, bytearray)):
        if len(value) not in (4, 16):
            raise ValueError(f"invalid IP address length: {len(value)}")
        addr = ipaddress.ip_address(bytes(value))
    else:
        addr = ipaddress.ip_address(value)
    if addr.version == 6 and addr.ipv4_mapped is not None:
        return addr.ipv4_mapped
    return addr


def _to_network(value: NetworkLike) -> IPNetwork:
    if isinstance(value, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return value
    return ipaddress.ip_network(str(value), strict=False)


def _to_int16(addr: IPAddress) -> int:
    """Integer value of the 16-byte form of an address."""
    if addr.version == 4:
        return _V4_MAPPED_PREFIX | int(addr)
    return int(addr)


def _from_int16(value: int) -> IPAddress:
    return _to_address(ipaddress.IPv6Address(value & _MASK128))


@dataclass
class IPReservation:
    """An IP held by a container."""

    ip: IPAddress
    container_id: str
    pod_ref: str = ""
    is_allocated: bool = False

    def __post_init__(self) -> None:
        self.ip = _to_address(self.ip)


@dataclass
class RangeConfiguration:
    """A range to allocate from, with optional bounds and omitted subnets."""

    range: str
    range_start: Optional[AddressLike] = None
    range_end: Optional[AddressLike] = None
    omit_ranges: list[str] = field(default_factory=list)


class AssignmentError(Exception):
    """No free IP could be found in the requested range."""

    def __init__(self, first_ip: IPAddress, last_ip: IPAddress, ipnet: IPNetwork) -> None:
        self.first_ip = first_ip
        self.last_ip = last_ip
        self.ipnet = ipnet
        super().__init__(
            f"Could not allocate IP in range: ip: {first_ip} / - {last_ip} / range: {ipnet}"
        )


def assign_ip(
    ipam_conf: RangeConfiguration,
    reserve_list: Sequence[IPReservation],
    container_id: str,
    pod_ref: str,
) -> tuple[IPInterface, list[IPReservation]]:
    """Assign the first free IP of the configured range to a container."""
    ipnet = _to_network(ipam_conf.range)
    range_start = ipam_conf.range_start
    if range_start is None:
        range_start = ipnet.network_address
    new_ip, updated = iterate_for_assignment(
        ipnet,
        range_start,
        ipam_conf.range_end,
        reserve_list,
        ipam_conf.omit_ranges,
        container_id,
        pod_ref,
    )
    return ipaddress.ip_interface(f"{new_ip}/{ipnet.prefixlen}"), updated


def _matching_reservation_index(reserve_list: Sequence[IPReservation], container_id: str) -> int:
    return next(
        (idx for idx, res in enumerate(reserve_list) if res.container_id == container_id),
        -1,
    )


def deallocate_ip(
    reserve_list: Sequence[IPReservation], container_id: str
) -> tuple[list[IPReservation], IPAddress]:
    """Release the IP held by a container; returns the new list and the IP."""
    updated, had_ip = iterate_for_deallocation(
        reserve_list, container_id, _matching_reservation_index
    )
    logger.debug("Deallocating given previously used IP: %s", had_ip)
    return updated, had_ip


def iterate_for_deallocation(
    reserve_list: Sequence[IPReservation],
    container_id: str,
    matching_function: Callable[[Sequence[IPReservation], str], int],
) -> tuple[list[IPReservation], IPAddress]:
    """Remove the reservation picked by matching_function.

    The last reservation takes the place of the removed one.
    """
    found = matching_function(reserve_list, container_id)
    if found < 0:
        raise LookupError(f"did not find reserved IP for container {container_id}")
    updated = list(reserve_list)
    returned_ip = updated[found].ip
    updated[found] = updated[-1]
    updated.pop()
    return updated, returned_ip


def byte_slice_add(ar1: Sequence[int], ar2: Sequence[int]) -> bytes:
    """Add two equal-length big-endian byte strings, dropping the final carry."""
    if len(ar1) != len(ar2):
        raise ValueError(f"byte_slice_add: bytes array mismatch: {len(ar1)} != {len(ar2)}")
    size = len(ar1)
    total = int.from_bytes(bytes(ar1), "big") + int.from_bytes(bytes(ar2), "big")
    return (total % (1 << (8 * size))).to_bytes(size, "big")


def byte_slice_sub(ar1: Sequence[int], ar2: Sequence[int]) -> bytes:
    """Subtract ar2 from ar1 as big-endian byte strings, wrapping on underflow."""
    if len(ar1) != len(ar2):
        raise ValueError("byte_slice_sub: bytes array mismatch")
    size = len(ar1)
    diff = int.from_bytes(bytes(ar1), "big") - int.from_bytes(bytes(ar2), "big")
    return (diff % (1 << (8 * size))).to_bytes(size, "big")


def ip_addr_to_int(ip: AddressLike) -> int:
    """Big-endian value of an address's bytes, keeping the lowest 64 bits."""
    if isinstance(ip, (bytes, bytearray)):
        value = int.from_bytes(bytes(ip), "big")
    else:
        value = int(_to_address(ip))
    return value & _MASK64


def ip_addr_from_int(num: int) -> ipaddress.IPv6Address:
    """The 16-byte address whose value is num (an unsigned 64-bit integer)."""
    if not 0 <= num <= _MASK64:
        raise ValueError(f"value out of unsigned 64-bit range: {num}")
    return ipaddress.IPv6Address(num)


def ip_get_offset(ip1: AddressLike, ip2: AddressLike) -> int:
    """Offset from ip2 to ip1; 0 when the addresses are not comparable."""
    if (
        isinstance(ip1, (bytes, bytearray))
        and isinstance(ip2, (bytes, bytearray))
        and len(ip1) != len(ip2)
    ):
        return 0
    addr1 = _to_address(ip1)
    addr2 = _to_address(ip2)
    if addr1.version != addr2.version:
        return 0
    return ((_to_int16(addr1) - _to_int16(addr2)) % (1 << 128)) & _MASK64


def ip_add_offset(ip: AddressLike, offset: int) -> Optional[IPAddress]:
    """The address offset steps after ip; None if the offset is too large for IPv4."""
    if not 0 <= offset <= _MASK64:
        raise ValueError(f"offset out of unsigned 64-bit range: {offset}")
    addr = _to_address(ip)
    if addr.version == 4 and offset >= _MAX_UINT32:
        return None
    return _from_int16(_to_int16(addr) + offset)


def iterate_for_assignment(
    ipnet: NetworkLike,
    range_start: AddressLike,
    range_end: Optional[AddressLike],
    reserve_list: Sequence[IPReservation],
    exclude_ranges: Optional[Sequence[str]],
    container_id: str,
    pod_ref: str,
) -> tuple[IPAddress, list[IPReservation]]:
    """Reserve the first address in range that is neither reserved nor excluded."""
    network = _to_network(ipnet)
    start = _to_address(range_start)
    if range_end is not None:
        first_ip, last_ip = start, _to_address(range_end)
    else:
        try:
            first_ip, last_ip = get_ip_range(start, network)
        except ValueError as err:
            logger.error("get_ip_range request failed with: %s", err)
            raise
    logger.debug(
        "iterate_for_assignment input >> ip: %s | ipnet: %s | first IP: %s | last IP: %s",
        range_start, network, first_ip, last_ip,
    )

    reserved = {res.ip for res in reserve_list}
    excluded = [ipaddress.ip_network(cidr, strict=False) for cidr in exclude_ranges or ()]

    current = _to_int16(first_ip)
    last = _to_int16(last_ip)
    while current <= last:
        candidate = _from_int16(current)
        if candidate in reserved:
            current += 1
            continue
        containing = [
            subnet for subnet in excluded
            if subnet.version == candidate.version and candidate in subnet
        ]
        if containing:
            # Every address up to the end of the excluding subnets is excluded too.
            current = max(_to_int16(subnet.broadcast_address) for subnet in containing) + 1
            continue
        logger.debug("Reserving IP: |%s %s|", candidate, container_id)
        reservation = IPReservation(ip=candidate, container_id=container_id, pod_ref=pod_ref)
        return candidate, [*reserve_list, reservation]

    raise AssignmentError(first_ip, last_ip, network)


def get_ip_range(ip: AddressLike, ipnet: NetworkLike) -> tuple[IPAddress, IPAddress]:
    """First and last usable address of ipnet, starting at ip."""
    network = _to_network(ipnet)
    host_bits = network.max_prefixlen - network.prefixlen
    if host_bits < 2:
        raise ValueError(f"net mask is too short, must be 2 or more: {host_bits}")
    addr = _to_address(ip)
    if addr.version != network.version:
        raise ValueError(f"address {addr} and network {network} differ in IP version")

    value = int(addr)
    network_part = value & int(network.netmask)
    host_mask = int(network.hostmask)
    host = value & host_mask
    if addr == network.network_address:
        host = 1
    last_host = host_mask - 1 if addr.version == 4 else host_mask
    return (
        ipaddress.ip_address(network_part | host) if addr.version == 6
        else ipaddress.IPv4Address(network_part | host),
        ipaddress.ip_address(network_part | last_host) if addr.version == 6
        else ipaddress.IPv4Address(network_part | last_host),
    )


def is_ipv4(ip: AddressLike) -> bool:
    """True for IPv4 addresses, including IPv4-mapped IPv6 ones."""
    return _to_address(ip).version == 4