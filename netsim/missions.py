"""Guided lab missions graded against the live configuration store.

Each mission is a fixed list of steps. A step's check is a pure predicate
over a ``NetworkStore``; it reads device kinds, management IPs, VLAN tables,
end-host VLAN tags and links, and never mutates anything. Grading one step
does not look at earlier steps, so a client may verify them in any order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .core import PC, ROUTER, SWITCH_L2, SWITCH_L3, Device, NetworkStore

FAILED_MESSAGE = "Verification Failed. Check the requirements!"

StepCheck = Callable[[NetworkStore], bool]


@dataclass(frozen=True)
class MissionStep:
    title: str
    task: str
    hint: str
    check: StepCheck


@dataclass(frozen=True)
class Mission:
    id: int
    title: str
    difficulty: str
    description: str
    steps: Tuple[MissionStep, ...]


@dataclass(frozen=True)
class StepVerdict:
    mission_id: int
    step: int
    passed: bool
    message: str
    # Index of the step to attempt next; None once the mission is finished.
    next_step: Optional[int]
    complete: bool


def _of_kind(store: NetworkStore, kind: str) -> List[Device]:
    return [d for d in store.devices.values() if d.kind == kind]


def _any_vlan(store: NetworkStore, *vlan_ids: int) -> bool:
    return any(all(v in d.vlans for v in vlan_ids) for d in store.devices.values())


def _any_tagged(store: NetworkStore, vlan_id: int) -> bool:
    return any(d.display_vlan == vlan_id for d in store.devices.values())


def _cross_links(store: NetworkStore, a_kind: str, b_kind: str) -> int:
    count = 0
    for link in store.links.values():
        src = store.devices.get(link.source)
        dst = store.devices.get(link.target)
        if src is None or dst is None:
            continue
        if {src.kind, dst.kind} == {a_kind, b_kind}:
            count += 1
    return count


# Mission 1: The Startup Office

def _startup_cabled(store: NetworkStore) -> bool:
    if not _of_kind(store, ROUTER) or not _of_kind(store, SWITCH_L2) or len(_of_kind(store, PC)) < 2:
        return False
    return len(store.links) >= 3


def _startup_pcs_addressed(store: NetworkStore) -> bool:
    ips = [pc.mgmt_ip for pc in _of_kind(store, PC) if pc.mgmt_ip and pc.mgmt_ip.startswith("192.168.1.")]
    return len(ips) >= 2


def _startup_gateway(store: NetworkStore) -> bool:
    return any(r.mgmt_ip for r in _of_kind(store, ROUTER))


# Mission 2: Department Separation

def _separation_devices(store: NetworkStore) -> bool:
    return len(_of_kind(store, PC)) >= 2 and len(_of_kind(store, SWITCH_L2)) >= 1


def _separation_ports(store: NetworkStore) -> bool:
    return _any_tagged(store, 10) and _any_tagged(store, 20)


# Mission 3: Data Center Ops

def _spine_leaf_devices(store: NetworkStore) -> bool:
    return len(_of_kind(store, SWITCH_L3)) >= 2 and len(_of_kind(store, SWITCH_L2)) >= 2


def _spine_leaf_mesh(store: NetworkStore) -> bool:
    return _cross_links(store, SWITCH_L3, SWITCH_L2) >= 4


MISSIONS: Tuple[Mission, ...] = (
    Mission(
        id=1,
        title="Mission 1: The Startup Office",
        difficulty="Novice",
        description="A new startup 'TechNova' needs their office network set up. "
        "They have 1 Router, 1 Switch, and 2 PCs.",
        steps=(
            MissionStep(
                "Physical Connectivity",
                "Connect: Router -> Switch -> Both PCs. Ensure all links are connected.",
                "Add a Router, a Switch (L2), and 2 PCs, then link them.",
                _startup_cabled,
            ),
            MissionStep(
                "IP Addressing",
                "Assign IP addresses to both PCs in the same subnet (e.g., 192.168.1.10 and 192.168.1.11).",
                "Set each PC's management IP to an address like 192.168.1.10.",
                _startup_pcs_addressed,
            ),
            MissionStep(
                "Gateway Configuration",
                "Configure the Router's IP to be the Gateway (e.g., 192.168.1.1).",
                "Set the Router's IP to 192.168.1.1. This acts as the exit door for the network.",
                _startup_gateway,
            ),
            MissionStep(
                "VLAN Setup (Bonus)",
                "Use the CLI on the Switch to create VLAN 10.",
                "Switch CLI: 'enable' -> 'conf t' -> 'vlan 10'.",
                lambda store: _any_vlan(store, 10),
            ),
        ),
    ),
    Mission(
        id=2,
        title="Mission 2: Department Separation",
        difficulty="Hard",
        description="Separate the Sales and Engineering departments using VLANs. "
        "They shouldn't be in the same broadcast domain.",
        steps=(
            MissionStep(
                "Setup Devices",
                "Place a Switch and 2 PCs. One for Sales, one for Eng.",
                "Add a Switch (L2) and two PCs.",
                _separation_devices,
            ),
            MissionStep(
                "VLAN Configuration",
                "Configure VLAN 10 (Sales) and VLAN 20 (Eng) on the switch using CLI.",
                "CLI: 'vlan 10', then 'name Sales', then 'exit'. Do the same for 'vlan 20'.",
                lambda store: _any_vlan(store, 10, 20),
            ),
            MissionStep(
                "Assign Ports",
                "Assign PC1 to VLAN 10 and PC2 to VLAN 20 using interface commands.",
                "CLI: 'int g0/1' -> 'switchport access vlan 10'. "
                "Check which port corresponds to which PC by looking at the cables.",
                _separation_ports,
            ),
        ),
    ),
    Mission(
        id=3,
        title="Mission 3: Data Center Ops",
        difficulty="Pro",
        description="Build a Spine-Leaf topology. Redundancy is key.",
        steps=(
            MissionStep(
                "Spine & Leaf",
                "Deploy 2 L3 Switches (Spines) and 2 L2 Switches (Leaves).",
                "Add two L3 switches and two L2 switches.",
                _spine_leaf_devices,
            ),
            MissionStep(
                "Full Mesh Cabling",
                "Connect every Leaf to every Spine. (2 Leaves x 2 Spines = 4 Links).",
                "Link Leaf 1 to Spine 1 & 2, and Leaf 2 to Spine 1 & 2.",
                _spine_leaf_mesh,
            ),
        ),
    ),
)

_BY_ID: Dict[int, Mission] = {m.id: m for m in MISSIONS}


def get_mission(mission_id: int) -> Mission:
    try:
        return _BY_ID[int(mission_id)]
    except (KeyError, ValueError):
        raise KeyError(f"Unknown mission: {mission_id}") from None


def verify(store: NetworkStore, mission_id: int, step: int) -> StepVerdict:
    """Grade one step (0-based) of a mission against the current store."""
    mission = get_mission(mission_id)
    if not 0 <= step < len(mission.steps):
        raise IndexError(f"Mission {mission.id} has no step {step}")

    passed = bool(mission.steps[step].check(store))
    if not passed:
        return StepVerdict(mission.id, step, False, FAILED_MESSAGE, step, False)

    last = step == len(mission.steps) - 1
    if last:
        return StepVerdict(mission.id, step, True, f"{mission.title} complete.", None, True)
    nxt = mission.steps[step + 1]
    return StepVerdict(mission.id, step, True, f"Step passed. Next: {nxt.title}", step + 1, False)


def progress(store: NetworkStore, mission_id: int) -> int:
    """Index of the first step whose check fails, or len(steps) when all pass."""
    mission = get_mission(mission_id)
    for i, s in enumerate(mission.steps):
        if not s.check(store):
            return i
    return len(mission.steps)
