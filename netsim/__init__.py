"""Deterministic network simulator: IOS-style CLI sessions over a shared store.

The package itself is stdlib-only and designed for unit testing; the AI
advisor and MCP server live in sibling packages.
"""

from .core import NetworkStore
from .log import SessionEvent, SessionLogger
from .cli import CLIEngine, CLIContext, CLIResult
from .reachability import PathResult, find_path
from .validator import ConnectionAdvice, validate_connection

__all__ = [
    "NetworkStore",
    "SessionEvent",
    "SessionLogger",
    "CLIEngine",
    "CLIContext",
    "CLIResult",
    "PathResult",
    "find_path",
    "ConnectionAdvice",
    "validate_connection",
]
