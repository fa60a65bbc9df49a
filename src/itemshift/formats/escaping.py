"""
Literal and escaping helpers shared by the output formats.
"""

import math
import re
from typing import Any

_LUA_ESCAPES = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)

_IDENTIFIER = re.compile(r"[A-Za-z_]\w*")


def escape_lua_string(text: str) -> str:
    """Escape text for a single-quoted Lua string. Backslash goes first so nothing is escaped twice."""
    for char, escaped in _LUA_ESCAPES:
        text = text.replace(char, escaped)
    return text


def format_number(value) -> str:
    """Print a number the way Lua source writes it (integral floats lose their `.0`)."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def lua_literal(value: Any) -> str:
    """A bare Lua literal: true/false, nil, numbers, and strings as-is."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def lua_text(value: Any) -> str:
    """Escaped text of a value for use inside a quoted Lua string."""
    if value is None:
        return ""
    return escape_lua_string(lua_literal(value))


def lua_value(value: Any) -> str:
    """Strings quoted, everything else bare."""
    if isinstance(value, str):
        return f"'{escape_lua_string(value)}'"
    return lua_literal(value)


def lua_key(key: str) -> str:
    """A table key: bare when it is an identifier, bracketed otherwise."""
    if _IDENTIFIER.fullmatch(key):
        return key
    return f"['{escape_lua_string(key)}']"


def text_cell(value: Any) -> str:
    """Plain text for a CSV cell: booleans lowercase, None empty."""
    if value is None:
        return ""
    return lua_literal(value)
