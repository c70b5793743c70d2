"""Derive interface names from a device's links.

Ports are positional: a device's incident links are sorted by link id and
numbered GigabitEthernet0/1, 0/2, ... in that order. Nothing is stored, so
adding a link whose id sorts earlier renames every later port on that
device.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple
import re

from .core import Link


def sorted_links(uid: str, links: Iterable[Link]) -> List[Link]:
    return sorted((l for l in links if l.touches(uid)), key=lambda l: l.link_id)


def interface_name(index: int) -> str:
    return f"GigabitEthernet0/{index + 1}"


def short_interface_name(index: int) -> str:
    return f"Gi0/{index + 1}"


def port_map(uid: str, links: Iterable[Link]) -> List[Tuple[str, Link]]:
    return [(interface_name(i), l) for i, l in enumerate(sorted_links(uid, links))]


def short_name(ifname: str) -> str:
    return ifname.replace("GigabitEthernet", "Gi").replace("FastEthernet", "Fa")


def normalize_interface_name(text: str) -> str:
    """IOS-like interface shortnames.

    g0/1, gi0/1, gig0/1 -> GigabitEthernet0/1
    f0/1, fa0/1 -> FastEthernet0/1
    """
    s = (text or "").strip()
    if s[:1].lower() == "g":
        return re.sub(r"^g[a-z]*", "GigabitEthernet", s, flags=re.IGNORECASE)
    if s[:1].lower() == "f":
        return re.sub(r"^f[a-z]*", "FastEthernet", s, flags=re.IGNORECASE)
    return s


def port_index(ifname: str) -> Optional[int]:
    """0-based index from the trailing number of a name (Gi0/3 -> 2)."""
    m = re.search(r"(\d+)$", ifname or "")
    if not m:
        return None
    return int(m.group(1)) - 1


def link_for_interface(uid: str, ifname: str, links: Iterable[Link]) -> Optional[Link]:
    idx = port_index(ifname)
    if idx is None or idx < 0:
        return None
    ordered = sorted_links(uid, links)
    if idx >= len(ordered):
        return None
    return ordered[idx]


def neighbor(uid: str, link: Link) -> str:
    return link.other(uid)
