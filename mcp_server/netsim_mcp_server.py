"""
Optional: MCP server exposing the simulator as tools.

Clients send a topology document (the same shape NetworkStore.export_topology
produces) and get packet-path results, link advice, or the transcript of a
scripted CLI session back. Every call works on a fresh store; nothing is kept
between requests apart from the in-memory session log.

Run (example):
  pip install -e .
  python -m mcp_server.netsim_mcp_server

Then connect an MCP client to:
  http://localhost:8000/mcp
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from netsim.cli import CLIEngine
from netsim.core import ALL_VLANS, DEVICE_KINDS, MAX_VLAN_ID, NetworkStore
from netsim.log import SessionLogger
from netsim.missions import MISSIONS, verify
from netsim.validator import validate_connection

mcp = FastMCP(
    "NetSim MCP Server",
    instructions="Tools for tracing packets, checking links and running IOS-style CLI sessions on a simulated topology.",
    stateless_http=True,
    json_response=True,
)

log = SessionLogger()


class InterfaceDoc(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: Optional[str] = None
    ip: Optional[str] = None
    mask: Optional[str] = None
    shutdown: bool = False
    switchportMode: Literal["access", "trunk", "dynamic"] = "access"
    accessVlan: int = Field(1, ge=1, le=MAX_VLAN_ID)
    trunkAllowedVlans: str = ALL_VLANS
    nativeVlan: int = Field(1, ge=1, le=MAX_VLAN_ID)


class LineDoc(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: Optional[str] = None
    login: bool = False


class DeviceDoc(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Unique device id")
    kind: str = Field(..., description="Device kind, e.g. ROUTER, SWITCH_L2, PC")
    label: Optional[str] = None
    status: Literal["up", "down", "booting"] = "up"
    managementIp: Optional[str] = None
    hostname: Optional[str] = None
    domainName: Optional[str] = None
    ipRouting: bool = False
    displayVlanTag: Optional[int] = None
    vlanTable: Dict[str, str] = Field(default_factory=lambda: {"1": "default"})
    interfaceTable: Dict[str, InterfaceDoc] = Field(default_factory=dict)
    lines: Dict[Literal["console", "vty"], LineDoc] = Field(default_factory=dict)

    @field_validator("kind")
    @classmethod
    def _known_kind(cls, v: str) -> str:
        kind = (v or "").strip().upper()
        if kind not in DEVICE_KINDS:
            raise ValueError(f"unknown device kind {v!r}")
        return kind

    @field_validator("vlanTable")
    @classmethod
    def _vlan_keys(cls, v: Dict[str, str]) -> Dict[str, str]:
        for k in v:
            if not k.isdigit() or not 1 <= int(k) <= MAX_VLAN_ID:
                raise ValueError(f"VLAN id out of range: {k!r}")
        return v


class LinkDoc(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = None
    sourceId: str
    targetId: str


class TopologyDoc(BaseModel):
    model_config = ConfigDict(extra="forbid")

    devices: List[DeviceDoc] = Field(default_factory=list)
    links: List[LinkDoc] = Field(default_factory=list)


def _check_references(doc: TopologyDoc) -> List[str]:
    problems: List[str] = []
    ids = set()
    for d in doc.devices:
        if d.id in ids:
            problems.append(f"Duplicate device id: {d.id}")
        ids.add(d.id)

    link_ids = set()
    for i, l in enumerate(doc.links):
        if l.id is not None:
            if l.id in link_ids:
                problems.append(f"Duplicate link id: {l.id}")
            link_ids.add(l.id)
        if l.sourceId not in ids:
            problems.append(f"links[{i}].sourceId references missing device '{l.sourceId}'.")
        if l.targetId not in ids:
            problems.append(f"links[{i}].targetId references missing device '{l.targetId}'.")
        if l.sourceId == l.targetId:
            problems.append(f"links[{i}] connects {l.sourceId} to itself.")
    return problems


def _load_store(topology: Dict[str, Any]) -> NetworkStore:
    doc = TopologyDoc.model_validate(topology)
    problems = _check_references(doc)
    if problems:
        raise ValueError("; ".join(problems))
    return NetworkStore.from_dict(doc.model_dump())


@mcp.tool()
def validate_topology_json(topology: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a topology document; returns problems plus per-link advice."""
    try:
        doc = TopologyDoc.model_validate(topology)
    except ValidationError as e:
        problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        return {"ok": False, "problems": problems, "advice": []}

    problems = _check_references(doc)
    if not problems:
        # "ok" must mean the other tools can load it
        try:
            NetworkStore.from_dict(doc.model_dump())
        except (KeyError, ValueError) as e:
            problems.append(str(e).strip("'\""))
    kinds = {d.id: d.kind for d in doc.devices}
    advice = []
    for l in doc.links:
        if l.sourceId in kinds and l.targetId in kinds:
            a = validate_connection(kinds[l.sourceId], kinds[l.targetId])
            if a.level != "info":
                advice.append({"link": l.id, "level": a.level, "message": a.message})
    return {"ok": len(problems) == 0, "problems": problems, "advice": advice}


@mcp.tool()
def simulate_packet(topology: Dict[str, Any], source_id: str, target_id: str) -> Dict[str, Any]:
    """Trace a packet between two devices and explain the outcome."""
    store = _load_store(topology)
    res = store.find_path(source_id, target_id)
    log.add("find_path", src=source_id, dst=target_id, success=res.success, reason=res.reason)
    return {
        "success": res.success,
        "path": res.path,
        "hops": res.hops,
        "message": res.message,
        "reason": res.reason,
    }


@mcp.tool()
def validate_link(source_kind: str, target_kind: str) -> Dict[str, Any]:
    """Advise on connecting two device kinds. Links are never refused."""
    advice = validate_connection(source_kind.strip().upper(), target_kind.strip().upper())
    log.add("validate_link", src=source_kind, dst=target_kind, level=advice.level)
    return {"isValid": advice.is_valid, "message": advice.message, "level": advice.level}


@mcp.tool()
def run_device_commands(topology: Dict[str, Any], device_id: str, commands: List[str]) -> Dict[str, Any]:
    """Run CLI commands on one device; returns the transcript and updated topology.

    Reloads complete immediately. A command that closes the session stops
    the run.
    """
    store = _load_store(topology)
    engine = CLIEngine(store, log_cb=log.add, boot_delay=0.0)
    ctx = engine.new_context(device_id)

    results = []
    for cmd in commands:
        res = engine.execute(ctx, cmd)
        results.append({"command": cmd, "output": res.output, "refused": res.refused})
        if res.closed:
            break
    engine.poll(ctx)

    log.add("run_commands", uid=device_id, count=len(results), closed=ctx.closed)
    return {
        "results": results,
        "transcript": list(ctx.transcript),
        "mode": ctx.mode,
        "closed": ctx.closed,
        "topology": store.export_topology(),
    }


@mcp.tool()
def list_missions() -> List[Dict[str, Any]]:
    """List the guided lab missions and their steps."""
    return [
        {
            "id": m.id,
            "title": m.title,
            "difficulty": m.difficulty,
            "description": m.description,
            "steps": [{"title": s.title, "task": s.task, "hint": s.hint} for s in m.steps],
        }
        for m in MISSIONS
    ]


@mcp.tool()
def verify_mission_step(topology: Dict[str, Any], mission_id: int, step: int) -> Dict[str, Any]:
    """Grade one mission step (0-based) against a topology document."""
    store = _load_store(topology)
    verdict = verify(store, mission_id, step)
    log.add("verify_mission", mission=verdict.mission_id, step=step, passed=verdict.passed)
    return {
        "passed": verdict.passed,
        "message": verdict.message,
        "nextStep": verdict.next_step,
        "complete": verdict.complete,
    }


@mcp.tool()
def get_session_log() -> Dict[str, Any]:
    """Return the server's in-memory event log."""
    return log.to_dict()


if __name__ == "__main__":
    # Streamable HTTP transport is recommended in the MCP SDK docs.
    mcp.run(transport="streamable-http")
