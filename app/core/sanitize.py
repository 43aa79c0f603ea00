"""
Format-specifier detection for inbound request data.

Strings containing ``%s``, ``%n``, ``%x`` and friends are refused before
they reach a handler.  Parameterised queries remain the real protection
against injection; this only narrows what can get that far.
"""

from __future__ import annotations

import re
from typing import Any

FORMAT_SPECIFIER_RE = re.compile(r"%[snxdpif%]")

UNSAFE_INPUT_MESSAGE = "Invalid input: disallowed formatting characters detected."


def contains_format_specifier(value: Any) -> bool:
    """Return True if any string inside a JSON-like *value* is suspicious.

    Walks lists and dicts (keys included) without modifying them.
    Numbers, booleans and ``None`` never match.
    """
    if isinstance(value, str):
        return FORMAT_SPECIFIER_RE.search(value) is not None
    if isinstance(value, dict):
        return any(
            contains_format_specifier(k) or contains_format_specifier(v)
            for k, v in value.items()
        )
    if isinstance(value, (list, tuple)):
        return any(contains_format_specifier(item) for item in value)
    return False
