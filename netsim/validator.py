from __future__ import annotations

from dataclasses import dataclass

from .core import INTERNET, PC, SWITCH_L2


@dataclass(frozen=True)
class ConnectionAdvice:
    is_valid: bool
    message: str
    level: str = "info"  # info|warning|error


def validate_connection(source_kind: str, target_kind: str) -> ConnectionAdvice:
    """Classify a proposed link for display. Never refuses the link."""
    if source_kind == PC and target_kind == PC:
        return ConnectionAdvice(True, "PC connected directly to PC. Ensure IPs are in the same subnet.", "warning")

    if source_kind == INTERNET and target_kind == PC:
        return ConnectionAdvice(True, "DANGER: Direct Internet connection to PC! Please use a Firewall or Router.", "error")

    if source_kind == SWITCH_L2 and target_kind == INTERNET:
        return ConnectionAdvice(
            True, "L2 Switches cannot terminate ISP links directly without a Router/Gateway.", "warning"
        )

    return ConnectionAdvice(True, "Connection established.", "info")
