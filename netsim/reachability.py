"""Packet reachability between two devices.

Physical connectivity is an unweighted BFS over every link in the topology.
Layer 3 admission uses a fixed /24-style grouping: two devices share a
subnet when the first three groups of their management addresses match.
Crossing subnets needs at least one routing-capable device on the path.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
import re

from .core import Device, Link, ROUTING_KINDS, STATUS_DOWN, iter_devices


OK = "ok"
NOT_FOUND = "not_found"
CONFIG_ERROR = "config_error"
NO_PATH = "no_path"
DEVICE_DOWN = "device_down"
ROUTING_ERROR = "routing_error"

# Digit count only; octets are not range checked (999.1.1.1 passes).
_IP_RE = re.compile(r"(?:[0-9]{1,3}\.){3}[0-9]{1,3}")


@dataclass
class PathResult:
    success: bool
    path: List[str] = field(default_factory=list)
    hops: int = 0
    message: str = ""
    reason: str = OK


def is_valid_ip(ip: Optional[str]) -> bool:
    return bool(ip) and _IP_RE.fullmatch(ip) is not None


def subnet_of(ip: str) -> str:
    return ".".join(ip.split(".")[:3])


def _adjacency(links: Iterable[Link]) -> Dict[str, List[str]]:
    adj: Dict[str, List[str]] = {}
    for l in links:
        adj.setdefault(l.source, []).append(l.target)
        adj.setdefault(l.target, []).append(l.source)
    return adj


def shortest_path(links: Iterable[Link], source_id: str, target_id: str) -> Optional[List[str]]:
    """First BFS path from source to target, or None.

    Neighbors are visited in link order, so the result is stable for a fixed
    link list but may differ if the same links are supplied in another order.
    """
    adj = _adjacency(links)
    prev: Dict[str, Optional[str]] = {source_id: None}
    q = deque([source_id])
    while q:
        cur = q.popleft()
        if cur == target_id:
            out: List[str] = []
            n: Optional[str] = cur
            while n is not None:
                out.append(n)
                n = prev[n]
            out.reverse()
            return out
        for nb in adj.get(cur, []):
            if nb not in prev:
                prev[nb] = cur
                q.append(nb)
    return None


def find_path(devices: Iterable[Device], links: Iterable[Link], source_id: str, target_id: str) -> PathResult:
    by_id = iter_devices(devices)
    src = by_id.get(source_id)
    dst = by_id.get(target_id)
    if src is None or dst is None:
        return PathResult(False, [], 0, "Device not found.", NOT_FOUND)

    if not is_valid_ip(src.mgmt_ip):
        return PathResult(
            False, [], 0,
            f"Configuration Error: Source device ({src.label}) is missing a valid IP address.",
            CONFIG_ERROR,
        )
    if not is_valid_ip(dst.mgmt_ip):
        return PathResult(
            False, [], 0,
            f"Configuration Error: Destination device ({dst.label}) is missing a valid IP address.",
            CONFIG_ERROR,
        )

    src_subnet = subnet_of(src.mgmt_ip)
    dst_subnet = subnet_of(dst.mgmt_ip)

    path = shortest_path(list(links), source_id, target_id)
    if path is None:
        return PathResult(
            False, [], 0,
            "Physical Link Error: No cable connection exists between these devices.",
            NO_PATH,
        )

    for uid in path:
        dev = by_id.get(uid)
        if dev is not None and dev.status == STATUS_DOWN:
            return PathResult(
                False, path, 0,
                f"Link Failure: Packet dropped at {dev.label} (Device is DOWN).",
                DEVICE_DOWN,
            )

    if src_subnet != dst_subnet:
        has_router = any(uid in by_id and by_id[uid].kind in ROUTING_KINDS for uid in path)
        if not has_router:
            return PathResult(
                False, path, 0,
                f"Routing Error: Devices are in different subnets ({src_subnet}.x vs {dst_subnet}.x) "
                "but no Router/Gateway was found in the path.",
                ROUTING_ERROR,
            )

    hops = len(path) - 1
    return PathResult(
        True, path, hops,
        f"Success! Packet delivered from {src.mgmt_ip} to {dst.mgmt_ip} via {hops} hops.",
        OK,
    )
