"""IOS-style abbreviation matching.

A typed line matches a canonical command when every canonical keyword has a
typed token that is a case-insensitive prefix of it ("sh run" matches
"show running-config"). Typed tokens beyond the canonical keywords are
returned as arguments.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


def tokenize(line: str) -> List[str]:
    return (line or "").split()


def match(typed: str, canonical: str) -> Optional[List[str]]:
    tokens = tokenize(typed)
    keywords = canonical.lower().split()
    if not keywords or len(tokens) < len(keywords):
        return None
    for kw, tok in zip(keywords, tokens):
        if not kw.startswith(tok.lower()):
            return None
    return tokens[len(keywords):]


def matches(typed: str, canonical: str) -> bool:
    return match(typed, canonical) is not None


def expand_keyword(token: str, choices: Iterable[str]) -> Optional[str]:
    """Resolve an argument keyword by prefix; the first choice that fits wins."""
    t = (token or "").lower()
    if not t:
        return None
    for c in choices:
        if c.startswith(t):
            return c
    return None
