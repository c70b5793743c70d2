from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional
import copy


ROUTER = "ROUTER"
SWITCH_L2 = "SWITCH_L2"
SWITCH_L3 = "SWITCH_L3"
FIREWALL = "FIREWALL"
PC = "PC"
LAPTOP = "LAPTOP"
SERVER = "SERVER"
ACCESS_POINT = "ACCESS_POINT"
PRINTER = "PRINTER"
PHONE = "PHONE"
HUB = "HUB"
INTERNET = "INTERNET"
SDWAN_EDGE = "SDWAN_EDGE"

DEVICE_KINDS = (
    ROUTER,
    SWITCH_L2,
    SWITCH_L3,
    FIREWALL,
    PC,
    LAPTOP,
    SERVER,
    ACCESS_POINT,
    PRINTER,
    PHONE,
    HUB,
    INTERNET,
    SDWAN_EDGE,
)

VLAN_KINDS = frozenset({SWITCH_L2, SWITCH_L3})
ROUTING_KINDS = frozenset({ROUTER, SWITCH_L3, FIREWALL})
END_HOST_KINDS = frozenset({PC, PRINTER, SERVER})

STATUS_UP = "up"
STATUS_DOWN = "down"
STATUS_BOOTING = "booting"
STATUSES = (STATUS_UP, STATUS_DOWN, STATUS_BOOTING)

SWITCHPORT_MODES = ("access", "trunk", "dynamic")
LINE_NAMES = ("console", "vty")

MAX_VLAN_ID = 4094
ALL_VLANS = "1-4094"

VLAN_UNSUPPORTED = "% Command rejected: Device does not support VLANs."


def _norm_uid(uid: str) -> str:
    return (uid or "").strip()


def default_vlan_name(vlan_id: int) -> str:
    return f"VLAN{vlan_id:04d}"


class StoreInvariantError(RuntimeError):
    """Raised when a caller skips a required store step (e.g. ensure_interface)."""


@dataclass(frozen=True)
class Rejection:
    reason: str  # vlan_unsupported|invalid_vlan
    message: str


@dataclass
class InterfaceConfig:
    name: str
    description: Optional[str] = None
    ip: Optional[str] = None
    mask: Optional[str] = None
    shutdown: bool = False

    switchport_mode: str = "access"  # access|trunk|dynamic
    access_vlan: int = 1
    trunk_allowed: str = ALL_VLANS
    native_vlan: int = 1


@dataclass
class LineConfig:
    password: Optional[str] = None
    login: bool = False


@dataclass
class Device:
    uid: str
    kind: str
    label: str = ""
    status: str = STATUS_UP
    mgmt_ip: Optional[str] = None
    hostname: str = ""
    domain_name: Optional[str] = None

    vlans: Dict[int, str] = field(default_factory=lambda: {1: "default"})
    interfaces: Dict[str, InterfaceConfig] = field(default_factory=dict)
    lines: Dict[str, LineConfig] = field(default_factory=lambda: {n: LineConfig() for n in LINE_NAMES})

    ip_routing: bool = False
    # Display-only tag; reachability never reads it.
    display_vlan: Optional[int] = None

    def __post_init__(self):
        if not self.label:
            self.label = self.uid
        if not self.hostname:
            self.hostname = self.label

    def supports_vlans(self) -> bool:
        return self.kind in VLAN_KINDS

    def vlan_name(self, vlan_id: int) -> Optional[str]:
        if vlan_id == 1 and 1 not in self.vlans:
            return "default"
        return self.vlans.get(vlan_id)


@dataclass
class Link:
    link_id: str
    source: str
    target: str

    def touches(self, uid: str) -> bool:
        return self.source == uid or self.target == uid

    def other(self, uid: str) -> str:
        return self.target if self.source == uid else self.source


@dataclass(frozen=True)
class DeviceSnapshot:
    """Point-in-time copy of the fields a rendering layer needs."""

    uid: str
    kind: str
    label: str
    hostname: str
    status: str
    mgmt_ip: Optional[str]
    vlans: Dict[int, str]
    interfaces: Dict[str, InterfaceConfig]
    display_vlan: Optional[int]


class NetworkStore:
    """Topology-wide configuration store.

    One instance is shared by every CLI session and by the reachability
    engine. All mutations go through the methods below and are applied
    immediately; there is no commit step. The store assumes a single
    session per device and does no locking of its own.
    """

    def __init__(self):
        self.devices: Dict[str, Device] = {}
        self.links: Dict[str, Link] = {}
        self._next_link = 1

    # ───────────────────────────── Devices / Links ─────────────────────────────

    def reset(self):
        self.__init__()

    def add_device(
        self,
        uid: str,
        kind: str,
        label: Optional[str] = None,
        mgmt_ip: Optional[str] = None,
        status: str = STATUS_UP,
    ) -> Device:
        uid = _norm_uid(uid)
        if not uid:
            raise ValueError("Device id must not be empty")
        kind = (kind or "").strip().upper()
        if kind not in DEVICE_KINDS:
            raise ValueError(f"Unknown device kind: {kind!r}")
        if status not in STATUSES:
            raise ValueError(f"Unknown device status: {status!r}")
        if uid in self.devices:
            return self.devices[uid]
        dev = Device(uid=uid, kind=kind, label=label or uid, mgmt_ip=mgmt_ip, status=status)
        self.devices[uid] = dev
        return dev

    def remove_device(self, uid: str):
        uid = _norm_uid(uid)
        if uid not in self.devices:
            return
        doomed = [lid for lid, l in self.links.items() if l.touches(uid)]
        for lid in doomed:
            self.remove_link(lid)
        self.devices.pop(uid, None)

    def device(self, uid: str) -> Device:
        uid = _norm_uid(uid)
        try:
            return self.devices[uid]
        except KeyError:
            raise KeyError(f"Unknown device: {uid}") from None

    def _auto_link_id(self, reserved: Iterable[str] = ()) -> str:
        taken = set(reserved)
        link_id = f"L{self._next_link}"
        while link_id in self.links or link_id in taken:
            self._next_link += 1
            link_id = f"L{self._next_link}"
        self._next_link += 1
        return link_id

    def add_link(self, a_uid: str, b_uid: str, link_id: Optional[str] = None) -> str:
        a_uid = _norm_uid(a_uid)
        b_uid = _norm_uid(b_uid)
        if a_uid not in self.devices or b_uid not in self.devices:
            raise KeyError("Unknown device")

        if link_id is None:
            link_id = self._auto_link_id()
        elif link_id in self.links:
            raise ValueError(f"Duplicate link id: {link_id}")

        self.links[link_id] = Link(link_id=link_id, source=a_uid, target=b_uid)
        return link_id

    def remove_link(self, link_id: str):
        self.links.pop(link_id, None)

    def links_for(self, uid: str) -> List[Link]:
        uid = _norm_uid(uid)
        return [l for l in self.links.values() if l.touches(uid)]

    def link_is_down(self, link_id: str) -> bool:
        """Coarse link state: any shut interface on either end marks the link down.

        The shut interface does not have to be the one mapped to this link.
        """
        link = self.links[link_id]
        for uid in (link.source, link.target):
            dev = self.devices.get(uid)
            if dev is None:
                continue
            if any(itf.shutdown for itf in dev.interfaces.values()):
                return True
        return False

    def device_by_ip(self, ip: str) -> Optional[Device]:
        for dev in self.devices.values():
            if dev.mgmt_ip and dev.mgmt_ip == ip:
                return dev
        return None

    # ───────────────────────────── Configuration ─────────────────────────────

    def ensure_interface(self, uid: str, name: str) -> InterfaceConfig:
        dev = self.device(uid)
        itf = dev.interfaces.get(name)
        if itf is None:
            itf = InterfaceConfig(name=name)
            dev.interfaces[name] = itf
        return itf

    def set_interface_field(self, uid: str, name: str, mutator: Callable[[InterfaceConfig], None]) -> InterfaceConfig:
        dev = self.device(uid)
        itf = dev.interfaces.get(name)
        if itf is None:
            raise StoreInvariantError(f"Interface {name} on {dev.uid} was never ensured")
        mutator(itf)
        return itf

    def set_vlan(self, uid: str, vlan_id: int, name: Optional[str] = None) -> Optional[Rejection]:
        dev = self.device(uid)
        if not dev.supports_vlans():
            return Rejection("vlan_unsupported", VLAN_UNSUPPORTED)
        if vlan_id < 1 or vlan_id > MAX_VLAN_ID:
            return Rejection("invalid_vlan", "% Invalid input detected at marker.")
        dev.vlans.setdefault(1, "default")
        if vlan_id not in dev.vlans:
            dev.vlans[vlan_id] = default_vlan_name(vlan_id)
        if name:
            dev.vlans[vlan_id] = name
        return None

    def remove_vlan(self, uid: str, vlan_id: int) -> Optional[Rejection]:
        dev = self.device(uid)
        if not dev.supports_vlans():
            return Rejection("vlan_unsupported", VLAN_UNSUPPORTED)
        if vlan_id == 1:
            return Rejection("invalid_vlan", "% Default VLAN 1 may not be deleted.")
        dev.vlans.pop(vlan_id, None)
        return None

    def set_hostname(self, uid: str, name: str):
        dev = self.device(uid)
        dev.hostname = name
        dev.label = name

    def set_routing(self, uid: str, enabled: bool):
        self.device(uid).ip_routing = bool(enabled)

    def set_management_ip(self, uid: str, ip: Optional[str]):
        # Not validated here; the reachability engine reports bad addresses.
        self.device(uid).mgmt_ip = ip or None

    def set_end_host_vlan_tag(self, uid: str, vlan_id: Optional[int]):
        self.device(uid).display_vlan = vlan_id

    def set_status(self, uid: str, status: str):
        if status not in STATUSES:
            raise ValueError(f"Unknown device status: {status!r}")
        self.device(uid).status = status

    def set_domain_name(self, uid: str, name: Optional[str]):
        self.device(uid).domain_name = name or None

    def set_line_field(self, uid: str, line: str, mutator: Callable[[LineConfig], None]) -> LineConfig:
        dev = self.device(uid)
        if line not in LINE_NAMES:
            raise ValueError(f"Unknown line: {line!r}")
        cfg = dev.lines.setdefault(line, LineConfig())
        mutator(cfg)
        return cfg

    # ───────────────────────────── Read accessor ─────────────────────────────

    def snapshot(self, uid: str) -> DeviceSnapshot:
        dev = self.device(uid)
        vlans = dict(dev.vlans)
        vlans.setdefault(1, "default")
        return DeviceSnapshot(
            uid=dev.uid,
            kind=dev.kind,
            label=dev.label,
            hostname=dev.hostname,
            status=dev.status,
            mgmt_ip=dev.mgmt_ip,
            vlans=vlans,
            interfaces=copy.deepcopy(dev.interfaces),
            display_vlan=dev.display_vlan,
        )

    def snapshots(self) -> List[DeviceSnapshot]:
        return [self.snapshot(uid) for uid in self.devices]

    # ───────────────────────────── Reachability ─────────────────────────────

    def find_path(self, source_id: str, target_id: str):
        from .reachability import find_path

        return find_path(self.devices.values(), self.links.values(), source_id, target_id)

    # ───────────────────────────── Serialization ─────────────────────────────

    def export_device(self, uid: str) -> dict:
        dev = self.device(uid)
        return {
            "id": dev.uid,
            "kind": dev.kind,
            "label": dev.label,
            "status": dev.status,
            "managementIp": dev.mgmt_ip,
            "hostname": dev.hostname,
            "domainName": dev.domain_name,
            "ipRouting": dev.ip_routing,
            "displayVlanTag": dev.display_vlan,
            "vlanTable": {str(vid): name for vid, name in sorted(dev.vlans.items())},
            "interfaceTable": {
                ifn: {
                    "description": i.description,
                    "ip": i.ip,
                    "mask": i.mask,
                    "shutdown": i.shutdown,
                    "switchportMode": i.switchport_mode,
                    "accessVlan": i.access_vlan,
                    "trunkAllowedVlans": i.trunk_allowed,
                    "nativeVlan": i.native_vlan,
                }
                for ifn, i in dev.interfaces.items()
            },
            "lines": {
                name: {"password": cfg.password, "login": cfg.login}
                for name, cfg in dev.lines.items()
            },
        }

    def export_topology(self) -> dict:
        return {
            "devices": [self.export_device(uid) for uid in self.devices],
            "links": [
                {"id": l.link_id, "sourceId": l.source, "targetId": l.target}
                for l in self.links.values()
            ],
        }

    def import_device(self, cfg: dict) -> Device:
        dev = self.add_device(
            str(cfg["id"]),
            str(cfg.get("kind") or ""),
            label=cfg.get("label") or None,
            status=cfg.get("status") or STATUS_UP,
        )
        dev.mgmt_ip = cfg.get("managementIp") or None
        if cfg.get("hostname"):
            dev.hostname = str(cfg["hostname"])
        dev.domain_name = cfg.get("domainName") or None
        dev.ip_routing = bool(cfg.get("ipRouting", False))
        tag = cfg.get("displayVlanTag")
        dev.display_vlan = int(tag) if tag is not None else None

        vlans = cfg.get("vlanTable")
        if isinstance(vlans, dict):
            dev.vlans = {int(k): str(v) for k, v in vlans.items()}
        dev.vlans.setdefault(1, "default")

        interfaces = cfg.get("interfaceTable")
        if isinstance(interfaces, dict):
            for ifn, icfg in interfaces.items():
                if not isinstance(icfg, dict):
                    continue
                itf = self.ensure_interface(dev.uid, ifn)
                itf.description = icfg.get("description")
                itf.ip = icfg.get("ip")
                itf.mask = icfg.get("mask")
                itf.shutdown = bool(icfg.get("shutdown", itf.shutdown))
                mode = icfg.get("switchportMode", itf.switchport_mode)
                itf.switchport_mode = mode if mode in SWITCHPORT_MODES else itf.switchport_mode
                itf.access_vlan = int(icfg.get("accessVlan", itf.access_vlan))
                itf.trunk_allowed = str(icfg.get("trunkAllowedVlans") or itf.trunk_allowed)
                itf.native_vlan = int(icfg.get("nativeVlan", itf.native_vlan))

        lines = cfg.get("lines")
        if isinstance(lines, dict):
            for name, lcfg in lines.items():
                if name not in LINE_NAMES or not isinstance(lcfg, dict):
                    continue
                dev.lines[name] = LineConfig(password=lcfg.get("password"), login=bool(lcfg.get("login", False)))
        return dev

    def import_topology(self, data: dict):
        """Replace the store contents with a document from export_topology()."""
        self.reset()
        for cfg in data.get("devices") or []:
            if isinstance(cfg, dict) and cfg.get("id"):
                self.import_device(cfg)
        links = [l for l in data.get("links") or [] if isinstance(l, dict)]
        # explicit ids win; generated ids skip past them
        reserved = {str(l["id"]) for l in links if l.get("id")}
        for l in links:
            link_id = str(l["id"]) if l.get("id") else self._auto_link_id(reserved)
            self.add_link(str(l["sourceId"]), str(l["targetId"]), link_id=link_id)

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkStore":
        store = cls()
        store.import_topology(data)
        return store


def iter_devices(devices: Iterable[Device]) -> Dict[str, Device]:
    return {d.uid: d for d in devices}
