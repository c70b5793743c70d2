from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
import os
import queue
import threading
import time

from . import matcher
from . import ports
from .core import (
    END_HOST_KINDS,
    LINE_NAMES,
    MAX_VLAN_ID,
    SWITCHPORT_MODES,
    VLAN_UNSUPPORTED,
    InterfaceConfig,
    LineConfig,
    NetworkStore,
    StoreInvariantError,
)


class CLIError(Exception):
    pass


UNKNOWN_COMMAND = "% Unknown command"
INCOMPLETE_COMMAND = "% Incomplete command."
INVALID_INPUT = "% Invalid input detected at marker."
VLAN_NEEDS_CONFIG = '% Incomplete command. Use "configure terminal" first.'
VLAN_MODE_NESTED = '% Invalid input. Type "exit" to return to global config mode first.'

CLOSE_SIGNAL = "__CLOSE__"  # UI handles closing
BOOT_BANNER = "Press RETURN to get started."
HINT_PREFIX = "[AI Tip]: "

SYSTEM_VERSION = "15.2(4)E"
SYSTEM_IMAGE = "C2960-LANBASEK9-M"

MODE_USER = "user"
MODE_PRIV = "privileged"
MODE_CONFIG = "config"
MODE_IF = "config-if"
MODE_VLAN = "config-vlan"
MODE_LINE = "config-line"

EXEC_MODES = (MODE_USER, MODE_PRIV)
CONFIG_MODES = (MODE_CONFIG, MODE_IF, MODE_VLAN, MODE_LINE)

PROMPTS = {
    MODE_USER: ">",
    MODE_PRIV: "#",
    MODE_CONFIG: "(config)#",
    MODE_IF: "(config-if)#",
    MODE_VLAN: "(config-vlan)#",
    MODE_LINE: "(config-line)#",
}

DEFAULT_RELOAD_SECONDS = 3.0

Advisor = Callable[[str, str], Optional[str]]


def is_error(output: str) -> bool:
    # "% ..." is an error; "%LINK-..." style notices are not.
    return (output or "").startswith("% ")


@dataclass
class CLIResult:
    output: str = ""
    prompt: str = ""
    closed: bool = False
    refused: bool = False


@dataclass
class CLIContext:
    store: NetworkStore
    uid: str
    hostname: str = ""

    mode: str = MODE_USER
    current_if: Optional[str] = None
    current_vlan: Optional[int] = None
    current_line: Optional[str] = None

    history: List[str] = field(default_factory=list)
    hist_idx: int = -1
    transcript: List[str] = field(default_factory=list)

    closed: bool = False
    boot_deadline: Optional[float] = None
    hints: "queue.Queue[str]" = field(default_factory=queue.Queue)

    @property
    def booting(self) -> bool:
        return self.boot_deadline is not None

    def prompt(self) -> str:
        return f"{self.hostname}{PROMPTS.get(self.mode, '>')}"

    def clear_context(self):
        self.current_if = None
        self.current_vlan = None
        self.current_line = None

    def history_prev(self) -> str:
        if not self.history:
            return ""
        self.hist_idx = 0 if self.hist_idx == -1 else min(self.hist_idx + 1, len(self.history) - 1)
        return self.history[len(self.history) - 1 - self.hist_idx]

    def history_next(self) -> str:
        if self.hist_idx > 0:
            self.hist_idx -= 1
            return self.history[len(self.history) - 1 - self.hist_idx]
        self.hist_idx = -1
        return ""


CommandHandler = Callable[["CLIEngine", CLIContext, List[str]], str]


@dataclass(frozen=True)
class CommandSpec:
    canonical: str
    handler: CommandHandler
    help: str = ""
    min_args: int = 0
    max_args: Optional[int] = None
    listed: bool = True


class CLIEngine:
    """Cisco-like CLI engine.

    Resolves a line against the current mode's command table, applies the
    handler to the shared NetworkStore, and returns text output. Errors are
    reported as output; the session stays usable.
    """

    def __init__(
        self,
        store: NetworkStore,
        advisor: Optional[Advisor] = None,
        log_cb: Optional[Callable[..., None]] = None,
        boot_delay: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.store = store
        self.advisor = advisor
        self._log_cb = log_cb
        if boot_delay is None:
            boot_delay = float(os.getenv("NETSIM_RELOAD_SECONDS", str(DEFAULT_RELOAD_SECONDS)))
        self.boot_delay = boot_delay
        self._clock = clock or time.monotonic
        self._sessions: Dict[str, CLIContext] = {}

    def _log(self, kind: str, **data):
        if not self._log_cb:
            return
        try:
            self._log_cb(kind, **data)
        except Exception:
            pass

    # ───────────────────────────── Sessions ─────────────────────────────

    def new_context(self, uid: str) -> CLIContext:
        dev = self.store.device(uid)
        prior = self._sessions.get(dev.uid)
        if prior is not None and not prior.closed:
            self.close(prior)

        ctx = CLIContext(store=self.store, uid=dev.uid, hostname=dev.hostname)
        ctx.transcript.extend([
            "NetOS (C) 2024 Systems, Inc.",
            f"Hardware: {dev.kind}",
            BOOT_BANNER,
        ])
        self._sessions[dev.uid] = ctx
        self._log("cli_open", uid=dev.uid)
        return ctx

    def close(self, ctx: CLIContext):
        if ctx.closed:
            return
        ctx.closed = True
        ctx.boot_deadline = None
        if self._sessions.get(ctx.uid) is ctx:
            self._sessions.pop(ctx.uid, None)
        self._log("cli_close", uid=ctx.uid)

    def session_for(self, uid: str) -> Optional[CLIContext]:
        return self._sessions.get(uid)

    # ───────────────────────────── Execution ─────────────────────────────

    def execute(self, ctx: CLIContext, line: str) -> CLIResult:
        if ctx.closed:
            return CLIResult(output="", prompt="", closed=True)

        self.poll(ctx)
        if ctx.booting:
            return CLIResult(output="", prompt="", refused=True)

        stripped = (line or "").strip()
        ctx.hist_idx = -1
        if stripped == "":
            ctx.transcript.append(ctx.prompt())
            return CLIResult(output="", prompt=ctx.prompt())

        ctx.history.append(stripped)
        ctx.transcript.append(f"{ctx.prompt()} {stripped}")
        self._log("cli_command", uid=ctx.uid, command=stripped, mode=ctx.mode)

        try:
            out = self._dispatch(ctx, stripped)
        except CLIError as e:
            out = str(e)

        if out == CLOSE_SIGNAL:
            self._log("cli_output", uid=ctx.uid, command=stripped, output=out)
            return CLIResult(output=out, prompt="", closed=True)

        if out:
            ctx.transcript.extend(out.split("\n"))
            self._log("cli_output", uid=ctx.uid, command=stripped, output=out)

        if is_error(out):
            self._request_hint(ctx, stripped, out)

        return CLIResult(output=out, prompt="" if ctx.booting else ctx.prompt())

    def resolve(self, mode: str, line: str) -> Optional[Tuple[CommandSpec, List[str]]]:
        for spec in commands_for_mode(mode):
            args = matcher.match(line, spec.canonical)
            if args is not None:
                return spec, args
        return None

    def _dispatch(self, ctx: CLIContext, line: str) -> str:
        resolved = self.resolve(ctx.mode, line)
        if resolved is None:
            raise CLIError(self._unmatched(ctx, line))
        spec, args = resolved
        if len(args) < spec.min_args:
            raise CLIError(INCOMPLETE_COMMAND)
        if spec.max_args is not None and len(args) > spec.max_args:
            raise CLIError(INVALID_INPUT)
        return spec.handler(self, ctx, args)

    def _unmatched(self, ctx: CLIContext, line: str) -> str:
        tokens = matcher.tokenize(line)
        for spec in commands_for_mode(ctx.mode):
            keywords = spec.canonical.split()
            if len(tokens) < len(keywords) and all(
                kw.startswith(tok.lower()) for kw, tok in zip(keywords, tokens)
            ):
                return INCOMPLETE_COMMAND
        if ctx.mode in EXEC_MODES:
            return UNKNOWN_COMMAND
        if ctx.mode == MODE_VLAN and (tokens[0].lower() == "vlan" or tokens[0].isdigit()):
            return VLAN_MODE_NESTED
        return INVALID_INPUT

    def run_as_privileged(self, ctx: CLIContext, line: str) -> str:
        """IOS 'do': run an exec command without leaving the current mode."""
        saved = (ctx.mode, ctx.current_if, ctx.current_vlan, ctx.current_line)
        ctx.mode = MODE_PRIV
        try:
            return self._dispatch(ctx, line)
        finally:
            ctx.mode, ctx.current_if, ctx.current_vlan, ctx.current_line = saved

    def help_text(self, mode: str) -> str:
        heading = "Exec commands:" if mode in EXEC_MODES else "Configure commands:"
        lines = [heading]
        for spec in commands_for_mode(mode):
            if spec.listed:
                lines.append(f"  {spec.canonical:<20} {spec.help}")
        return "\n".join(lines)

    # ───────────────────────────── Reload ─────────────────────────────

    def start_reload(self, ctx: CLIContext):
        # Boot state lives in the session only; the stored status is untouched.
        ctx.transcript.clear()
        ctx.boot_deadline = self._clock() + self.boot_delay
        self._log("cli_reload", uid=ctx.uid, seconds=self.boot_delay)

    def poll(self, ctx: CLIContext):
        """Finish a due reload and pull in any advisory hints that arrived."""
        if ctx.boot_deadline is not None and self._clock() >= ctx.boot_deadline:
            ctx.boot_deadline = None
            ctx.mode = MODE_USER
            ctx.clear_context()
            ctx.transcript[:] = [BOOT_BANNER]
        self.drain_hints(ctx)

    # ───────────────────────────── Advisory hints ─────────────────────────────

    def _request_hint(self, ctx: CLIContext, command: str, error: str):
        advisor = self.advisor
        if advisor is None:
            return

        def worker():
            try:
                tip = advisor(command, error)
            except Exception as e:
                self._log("cli_hint_failed", uid=ctx.uid, command=command, error=str(e))
                tip = None
            tip = (tip or "").strip()
            if tip and not ctx.closed:
                ctx.hints.put(tip)

        threading.Thread(target=worker, daemon=True).start()

    def drain_hints(self, ctx: CLIContext, timeout: Optional[float] = None) -> List[str]:
        """Append arrived hints to the transcript; optionally wait for the first one."""
        tips: List[str] = []
        if timeout is not None and not ctx.closed:
            try:
                tips.append(ctx.hints.get(timeout=timeout))
            except queue.Empty:
                return []
        while True:
            try:
                tips.append(ctx.hints.get_nowait())
            except queue.Empty:
                break
        if ctx.closed:
            return []

        lines = [HINT_PREFIX + t for t in tips]
        ctx.transcript.extend(lines)
        for t in tips:
            self._log("cli_hint", uid=ctx.uid, hint=t)
        return lines

    # ───────────────────────────── Store helpers ─────────────────────────────

    def update_interface(self, ctx: CLIContext, mutator: Callable[[InterfaceConfig], None]) -> InterfaceConfig:
        if ctx.current_if is None:
            raise StoreInvariantError("Interface mode without a selected interface")
        return self.store.set_interface_field(ctx.uid, ctx.current_if, mutator)

    def sync_display_vlan(self, ctx: CLIContext, vlan_id: int) -> Optional[str]:
        """Tag the end host across the current port with vlan_id (display only)."""
        link = ports.link_for_interface(ctx.uid, ctx.current_if or "", self.store.links.values())
        if link is None:
            return None
        nb = self.store.devices.get(ports.neighbor(ctx.uid, link))
        if nb is None or nb.kind not in END_HOST_KINDS:
            return None
        self.store.set_end_host_vlan_tag(nb.uid, vlan_id)
        return f"[Sim]: Assigned neighbor device on {ctx.current_if} to VLAN {vlan_id}"

    def ping(self, ctx: CLIContext, ip: str) -> str:
        lines = [f"Sending 5, 100-byte ICMP Echos to {ip}, timeout is 2 seconds:"]
        target = self.store.device_by_ip(ip)
        if target is None:
            lines += [".....", "Success rate is 0 percent (0/5)."]
            return "\n".join(lines)

        res = self.store.find_path(ctx.uid, target.uid)
        self._log("cli_ping", uid=ctx.uid, dst=target.uid, success=res.success, reason=res.reason)
        if res.success:
            lines += ["!!!!!", "Success rate is 100 percent (5/5)."]
        else:
            lines += [".....", "Success rate is 0 percent (0/5).", res.message]
        return "\n".join(lines)

    # ───────────────────────────── Show helpers ─────────────────────────────

    def show_running_config(self, uid: str) -> str:
        dev = self.store.device(uid)
        lines: List[str] = ["Building configuration...", "", "version 15.2", f"hostname {dev.hostname}"]
        if dev.domain_name:
            lines.append(f"ip domain-name {dev.domain_name}")
        if dev.ip_routing:
            lines.append("ip routing")
        lines.append("!")

        for vid in sorted(dev.vlans.keys()):
            if vid == 1 and dev.vlans.get(1) == "default":
                continue
            lines.append(f"vlan {vid}")
            lines.append(f" name {dev.vlans[vid]}")
            lines.append("!")

        for ifn in sorted(dev.interfaces.keys()):
            itf = dev.interfaces[ifn]
            lines.append(f"interface {ifn}")
            if itf.description:
                lines.append(f" description {itf.description}")
            if itf.switchport_mode == "access":
                lines.append(" switchport mode access")
                if itf.access_vlan != 1:
                    lines.append(f" switchport access vlan {itf.access_vlan}")
            elif itf.switchport_mode == "trunk":
                lines.append(" switchport mode trunk")
                if itf.native_vlan != 1:
                    lines.append(f" switchport trunk native vlan {itf.native_vlan}")
                lines.append(f" switchport trunk allowed vlan {itf.trunk_allowed}")
            else:
                lines.append(" switchport mode dynamic auto")
            if itf.ip:
                lines.append(f" ip address {itf.ip} {itf.mask}")
            if itf.shutdown:
                lines.append(" shutdown")
            lines.append("!")

        for name, header in (("console", "line con 0"), ("vty", "line vty 0 4")):
            cfg = dev.lines.get(name)
            if cfg is None or (cfg.password is None and not cfg.login):
                continue
            lines.append(header)
            if cfg.password:
                lines.append(f" password {cfg.password}")
            if cfg.login:
                lines.append(" login")
            lines.append("!")

        lines.append("end")
        return "\n".join(lines)

    def show_vlan_brief(self, uid: str) -> str:
        dev = self.store.device(uid)
        vlans = dict(dev.vlans)
        vlans.setdefault(1, "default")
        lines = [
            "VLAN Name                             Status    Ports",
            "---- -------------------------------- --------- -------------------------------",
        ]
        for vid in sorted(vlans.keys()):
            members = sorted(
                ports.short_name(itf.name)
                for itf in dev.interfaces.values()
                if itf.switchport_mode == "access" and itf.access_vlan == vid
            )
            lines.append(f"{vid:<4} {vlans[vid]:<32} active    {', '.join(members)}".rstrip())
        return "\n".join(lines)

    def show_ip_interface_brief(self, uid: str) -> str:
        dev = self.store.device(uid)
        lines = ["Interface              IP-Address      OK? Method Status                Protocol"]

        names = [ifn for ifn, _link in ports.port_map(dev.uid, self.store.links.values())]
        names += sorted(ifn for ifn in dev.interfaces if ifn not in names)
        if not names:
            lines.append(f"{ports.interface_name(0):<22} {'unassigned':<15} YES {'unset':<6} {'up':<20} down")
            return "\n".join(lines)

        for ifn in names:
            itf = dev.interfaces.get(ifn)
            ip = itf.ip if itf and itf.ip else "unassigned"
            method = "manual" if itf and itf.ip else "unset"
            shut = bool(itf and itf.shutdown)
            status = "admin down" if shut else "up"
            proto = "down" if shut else "up"
            lines.append(f"{ifn:<22} {ip:<15} YES {method:<6} {status:<20} {proto}")
        return "\n".join(lines)


# ───────────────────────────── Argument parsing ─────────────────────────────


def _parse_vlan_id(token: str) -> int:
    try:
        vid = int(token)
    except ValueError:
        raise CLIError(INVALID_INPUT) from None
    if vid < 1 or vid > MAX_VLAN_ID:
        raise CLIError(INVALID_INPUT)
    return vid


# ───────────────────────────── EXEC handlers ─────────────────────────────


def _cmd_enable(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    ctx.mode = MODE_PRIV
    return ""


def _cmd_disable(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    ctx.mode = MODE_USER
    ctx.clear_context()
    return ""


def _cmd_configure_terminal(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    ctx.mode = MODE_CONFIG
    ctx.clear_context()
    return "Enter configuration commands, one per line.  End with CNTL/Z."


def _cmd_ping(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    # Extra tokens (repeat counts, sizes) are ignored.
    return engine.ping(ctx, args[0])


def _cmd_show_version(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    return f'Cisco IOS Software, {SYSTEM_VERSION}\nSystem image file is "flash:{SYSTEM_IMAGE}.bin"'


def _cmd_show_run(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    return engine.show_running_config(ctx.uid)


def _cmd_show_vlan(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    return engine.show_vlan_brief(ctx.uid)


def _cmd_show_ip_int_brief(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    return engine.show_ip_interface_brief(ctx.uid)


def _cmd_show_history(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    return "\n".join(f"  {h}" for h in ctx.history)


def _cmd_reload(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    engine.start_reload(ctx)
    return ""


def _cmd_vlan_outside_config(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    raise CLIError(VLAN_NEEDS_CONFIG)


# ───────────────────────────── Global config handlers ─────────────────────────────


def _cmd_hostname(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    engine.store.set_hostname(ctx.uid, args[0])
    ctx.hostname = args[0]
    return ""


def _cmd_interface(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    # "interface gi 0/1" is accepted like "interface gi0/1".
    ifname = ports.normalize_interface_name("".join(args))
    engine.store.ensure_interface(ctx.uid, ifname)
    ctx.clear_context()
    ctx.mode = MODE_IF
    ctx.current_if = ifname
    return ""


def _cmd_vlan(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    if not engine.store.device(ctx.uid).supports_vlans():
        raise CLIError(VLAN_UNSUPPORTED)
    vid = _parse_vlan_id(args[0])
    rejected = engine.store.set_vlan(ctx.uid, vid)
    if rejected is not None:
        raise CLIError(rejected.message)
    ctx.clear_context()
    ctx.mode = MODE_VLAN
    ctx.current_vlan = vid
    return ""


def _cmd_no_vlan(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    vid = _parse_vlan_id(args[0])
    rejected = engine.store.remove_vlan(ctx.uid, vid)
    if rejected is not None:
        raise CLIError(rejected.message)
    return ""


def _cmd_ip_routing(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    engine.store.set_routing(ctx.uid, True)
    return ""


def _cmd_no_ip_routing(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    engine.store.set_routing(ctx.uid, False)
    return ""


def _cmd_ip_domain_name(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    engine.store.set_domain_name(ctx.uid, args[0])
    return ""


def _cmd_line(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    name = matcher.expand_keyword(args[0], LINE_NAMES)
    if name is None:
        raise CLIError(INVALID_INPUT)
    ctx.clear_context()
    ctx.mode = MODE_LINE
    ctx.current_line = name
    return ""


# ───────────────────────────── Interface handlers ─────────────────────────────


def _cmd_shutdown(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    itf = engine.update_interface(ctx, lambda c: setattr(c, "shutdown", True))
    return f"%LINK-5-CHANGED: Interface {itf.name}, changed state to administratively down"


def _cmd_no_shutdown(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    itf = engine.update_interface(ctx, lambda c: setattr(c, "shutdown", False))
    return f"%LINK-3-UPDOWN: Interface {itf.name}, changed state to up"


def _cmd_switchport_mode(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    mode = matcher.expand_keyword(args[0], SWITCHPORT_MODES)
    if mode is None:
        raise CLIError(INVALID_INPUT)
    engine.update_interface(ctx, lambda c: setattr(c, "switchport_mode", mode))
    return ""


def _cmd_switchport_access_vlan(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    vid = _parse_vlan_id(args[0])
    engine.update_interface(ctx, lambda c: setattr(c, "access_vlan", vid))
    return engine.sync_display_vlan(ctx, vid) or ""


def _cmd_switchport_trunk_allowed(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    spec = " ".join(args)
    engine.update_interface(ctx, lambda c: setattr(c, "trunk_allowed", spec))
    return ""


def _cmd_switchport_trunk_native(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    vid = _parse_vlan_id(args[0])
    engine.update_interface(ctx, lambda c: setattr(c, "native_vlan", vid))
    return ""


def _cmd_ip_address(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    if len(args) != 2:
        raise CLIError(INCOMPLETE_COMMAND)
    ip, mask = args

    def apply(c: InterfaceConfig):
        c.ip = ip
        c.mask = mask

    engine.update_interface(ctx, apply)
    return ""


def _cmd_no_ip_address(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    def apply(c: InterfaceConfig):
        c.ip = None
        c.mask = None

    engine.update_interface(ctx, apply)
    return ""


def _cmd_description(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    text = " ".join(args)
    engine.update_interface(ctx, lambda c: setattr(c, "description", text))
    return ""


def _cmd_no_description(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    engine.update_interface(ctx, lambda c: setattr(c, "description", None))
    return ""


# ───────────────────────────── VLAN / line handlers ─────────────────────────────


def _cmd_vlan_name(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    if ctx.current_vlan is None:
        raise StoreInvariantError("VLAN mode without a selected VLAN")
    rejected = engine.store.set_vlan(ctx.uid, ctx.current_vlan, " ".join(args))
    if rejected is not None:
        raise CLIError(rejected.message)
    return ""


def _line_update(engine: CLIEngine, ctx: CLIContext, mutator: Callable[[LineConfig], None]):
    if ctx.current_line is None:
        raise StoreInvariantError("Line mode without a selected line")
    engine.store.set_line_field(ctx.uid, ctx.current_line, mutator)


def _cmd_password(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    _line_update(engine, ctx, lambda c: setattr(c, "password", args[0]))
    return ""


def _cmd_no_password(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    _line_update(engine, ctx, lambda c: setattr(c, "password", None))
    return ""


def _cmd_login(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    _line_update(engine, ctx, lambda c: setattr(c, "login", True))
    return ""


def _cmd_no_login(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    _line_update(engine, ctx, lambda c: setattr(c, "login", False))
    return ""


# ───────────────────────────── Any-mode handlers ─────────────────────────────


def _cmd_exit(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    if ctx.mode == MODE_USER:
        engine.close(ctx)
        return CLOSE_SIGNAL
    if ctx.mode == MODE_PRIV:
        ctx.mode = MODE_USER
    elif ctx.mode == MODE_CONFIG:
        ctx.mode = MODE_PRIV
    else:
        ctx.mode = MODE_CONFIG
    ctx.clear_context()
    return ""


def _cmd_end(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    if ctx.mode in EXEC_MODES:
        raise CLIError(INVALID_INPUT)
    ctx.mode = MODE_PRIV
    ctx.clear_context()
    return ""


def _cmd_help(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    return engine.help_text(ctx.mode)


def _cmd_do(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    return engine.run_as_privileged(ctx, " ".join(args))


def _cmd_clear(engine: CLIEngine, ctx: CLIContext, args: List[str]) -> str:
    ctx.transcript.clear()
    return ""


# ───────────────────────────── Command table ─────────────────────────────

COMMANDS: Dict[str, List[CommandSpec]] = {
    MODE_USER: [
        CommandSpec("enable", _cmd_enable, "Turn on privileged commands"),
        CommandSpec("ping", _cmd_ping, "Send echo messages", min_args=1),
        CommandSpec("show version", _cmd_show_version, "System hardware and software status"),
    ],
    MODE_PRIV: [
        CommandSpec("configure terminal", _cmd_configure_terminal, "Enter configuration mode"),
        CommandSpec("disable", _cmd_disable, "Turn off privileged commands"),
        CommandSpec("show running-config", _cmd_show_run, "Show current config"),
        CommandSpec("show vlan brief", _cmd_show_vlan, "Show VLAN information"),
        CommandSpec("show vlan", _cmd_show_vlan, "Show VLAN information", listed=False),
        CommandSpec("show ip interface brief", _cmd_show_ip_int_brief, "IP interface status"),
        CommandSpec("show version", _cmd_show_version, "System hardware and software status"),
        CommandSpec("show history", _cmd_show_history, "Display the session command history"),
        CommandSpec("ping", _cmd_ping, "Send echo messages", min_args=1),
        CommandSpec("reload", _cmd_reload, "Halt and perform a cold restart"),
        CommandSpec("vlan", _cmd_vlan_outside_config, listed=False),
    ],
    MODE_CONFIG: [
        CommandSpec("hostname", _cmd_hostname, "Set system network name", min_args=1),
        CommandSpec("interface", _cmd_interface, "Select interface to configure", min_args=1),
        CommandSpec("vlan", _cmd_vlan, "VLAN configuration mode", min_args=1),
        CommandSpec("no vlan", _cmd_no_vlan, "Delete a VLAN", min_args=1),
        CommandSpec("ip routing", _cmd_ip_routing, "Enable IP routing"),
        CommandSpec("no ip routing", _cmd_no_ip_routing, "Disable IP routing"),
        CommandSpec("ip domain-name", _cmd_ip_domain_name, "Define the default domain name", min_args=1),
        CommandSpec("line", _cmd_line, "Configure a terminal line", min_args=1),
    ],
    MODE_IF: [
        CommandSpec("shutdown", _cmd_shutdown, "Shutdown the selected interface", max_args=0),
        CommandSpec("no shutdown", _cmd_no_shutdown, "Restart the selected interface", max_args=0),
        CommandSpec("switchport mode", _cmd_switchport_mode, "Set trunking mode of the interface", min_args=1),
        CommandSpec("switchport access vlan", _cmd_switchport_access_vlan, "Set VLAN when interface is in access mode", min_args=1),
        CommandSpec("switchport trunk allowed vlan", _cmd_switchport_trunk_allowed, "Set allowed VLANs when trunking", min_args=1),
        CommandSpec("switchport trunk native vlan", _cmd_switchport_trunk_native, "Set native VLAN when trunking", min_args=1),
        CommandSpec("ip address", _cmd_ip_address, "Set the IP address of an interface"),
        CommandSpec("no ip address", _cmd_no_ip_address, "Remove the IP address", max_args=0),
        CommandSpec("description", _cmd_description, "Interface specific description", min_args=1),
        CommandSpec("no description", _cmd_no_description, "Remove the description", max_args=0),
        CommandSpec("interface", _cmd_interface, "Select another interface", min_args=1),
    ],
    MODE_VLAN: [
        CommandSpec("name", _cmd_vlan_name, "Ascii name of the VLAN", min_args=1),
    ],
    MODE_LINE: [
        CommandSpec("password", _cmd_password, "Set a password", min_args=1),
        CommandSpec("no password", _cmd_no_password, "Remove the password", max_args=0),
        CommandSpec("login", _cmd_login, "Enable password checking", max_args=0),
        CommandSpec("no login", _cmd_no_login, "Disable password checking", max_args=0),
    ],
}

GLOBAL_COMMANDS: List[CommandSpec] = [
    CommandSpec("exit", _cmd_exit, "Exit from the current mode"),
    CommandSpec("end", _cmd_end, "Exit to privileged EXEC mode"),
    CommandSpec("?", _cmd_help, listed=False),
    CommandSpec("help", _cmd_help, "Description of the interactive help system"),
    CommandSpec("do", _cmd_do, "Run an exec-mode command", min_args=1),
    CommandSpec("clear", _cmd_clear, "Clear the terminal screen", listed=False),
    CommandSpec("cls", _cmd_clear, listed=False),
]


def commands_for_mode(mode: str) -> List[CommandSpec]:
    return COMMANDS.get(mode, []) + GLOBAL_COMMANDS
