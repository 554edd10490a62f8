# whereabouts

A library of IP address management helpers. It assigns addresses out of IPv4
and IPv6 ranges. It describes IP pool resources as plain Python objects. It
checks that a pool's allocations agree with the addresses that running pods
report.

It needs only the standard library.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install .[test]
pytest
```

## Modules

### `whereabouts.allocate`

Address arithmetic and assignment, built on `ipaddress`. Addresses may be passed as
`ipaddress` objects, strings, integers, or 4- or 16-byte `bytes`. An IPv4-mapped
IPv6 address is treated as IPv4.

- `get_ip_range(ip, ipnet)` returns the first and last usable address of a network.
  - The range starts at `ip`, or at the first host when `ip` is the network address.
  - For IPv4 the broadcast address is left out.
  - It raises `ValueError` when fewer than 2 host bits remain, or when the address
    and the network differ in IP version.
- `iterate_for_assignment(ipnet, range_start, range_end, reserve_list, exclude_ranges, container_id, pod_ref)`
  returns the first address that is neither reserved nor inside an excluded
  subnet, together with the reservation list extended by a new `IPReservation`.
  - Without `range_end`, the range comes from `get_ip_range`.
  - When no address is free, it raises `AssignmentError`.
- `assign_ip(ipam_conf, reserve_list, container_id, pod_ref)` does the same from a
  `RangeConfiguration` (`range`, `range_start`, `range_end`, `omit_ranges`). It
  returns an `ipaddress` interface that carries the range's prefix length.
- `deallocate_ip(reserve_list, container_id)` removes the container's reservation
  and returns the new list and the released IP. The last reservation takes the
  removed one's place. It raises `LookupError` when the container holds no IP.
  `iterate_for_deallocation` does the same with a caller-supplied matching
  function.
- Helpers:
  - `ip_add_offset(ip, offset)` returns the address `offset` steps further on. It
    returns `None` for an IPv4 address with an offset of 2**32 - 1 or more.
  - `ip_get_offset(ip1, ip2)` returns the offset from `ip2` to `ip1`. It returns 0
    when the two addresses differ in IP version.
  - `byte_slice_add` and `byte_slice_sub` do wrapping big-endian byte-string
    arithmetic.
  - `ip_addr_to_int` keeps the low 64 bits of an address's value.
  - `ip_addr_from_int` builds an IPv6 address from an unsigned 64-bit value.
  - `is_ipv4(ip)` tells whether an address is IPv4.

### `whereabouts.api`

Dataclasses for the `whereabouts.cni.cncf.io/v1alpha1` resources.

- Pools: `IPPool`, `IPPoolSpec`, `IPAllocation` and `IPPoolList`.
- Reservations: `OverlappingRangeIPReservation`, `OverlappingRangeIPReservationSpec`
  and `OverlappingRangeIPReservationList`.
- `ObjectMeta` holds the metadata of a resource.
- Converting pools:
  - `IPPool.to_dict()` turns a pool into plain data.
  - `ippool_from_dict(data)` builds a pool from plain data.
  - `IPPool.parse_cidr()` returns the address and the network of the pool's range.
- Qualified names: `kind(name)` and `resource(name)` return a `GroupKind` or a
  `GroupResource` qualified with the API group.

### `whereabouts.entities`

Builders of pod, stateful set and replica set manifests as plain dictionaries:

- `pod_object`, `stateful_set_spec` and `replica_set_object` build the manifests.
- `replica_set_query(rs_name)` returns the label selector `tier=<rs_name>`.
- `pod_network_selection_elements(*names)` returns the network attachment
  annotation for the given network names.

### `whereabouts.retrievers`

`secondary_iface_ip_value(pod)` reads a pod manifest's `k8s.v1.cni.cncf.io/network-status`
annotation and returns the IPs of the `net1` interface. It raises
`NetworkStatusError` when the annotation is missing or malformed, when the
interface is absent, or when the interface has no IPs.

### `whereabouts.poolconsistency`

`new_pool_consistency_check(ip_pool, pod_list)` returns a `Checker`. The pool may
be any object with an `allocations()` method that returns reservations.

- `Checker.missing_ips()` lists pod addresses that have no allocation in the pool.
  It returns an empty list as soon as a pod has no usable network status.
- `Checker.stale_ips()` lists allocated addresses that no pod reports.

Each pod counts with the last IP of its secondary interface.

### `whereabouts.testenvironment`

`new_config()` reads a `Configuration` from these environment variables. The
defaults are shown in brackets:

- `KUBECONFIG` [`${HOME}/.kube/config`]
- `NUMBER_OF_COMPUTE_NODES` [2]
- `FILL_PERCENT_CAPACITY` [50]
- `NUMBER_OF_THRASH_ITER` [1]

It raises `ValueError` when a value is not an integer.
`Configuration.max_replicas(all_pods)` gives the number of replicas that fills
the free pod capacity (110 pods per node) to the configured percentage.

## Example

```python
import ipaddress
from whereabouts.allocate import get_ip_range, iterate_for_assignment

net = ipaddress.ip_network("192.168.1.0/24")
first, last = get_ip_range(net.network_address, net)
ip, reservations = iterate_for_assignment(
    net, net.network_address, None, [], ["192.168.1.0/28"], "container-1", "ns/pod"
)
print(first, last, ip)  # 192.168.1.1 192.168.1.254 192.168.1.16
```

## What this package does not do

This is a library with no command.

- It does not run as a CNI IPAM plugin.
- It does not store pools or reservations in a cluster. The reservation lists it
  works on live only in memory, and the caller must keep them.
- It has no background reconciler or pod controller.
- The manifest builders and the checkers work on plain data and never contact a
  Kubernetes API server.