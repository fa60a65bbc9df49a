"""
Value Coercion

Turns the raw right-hand side of a property line into a typed scalar.
Only string, number, boolean and nil literals are recognized; anything else
(identifiers, expressions, table literals) is passed through untouched.
"""

import re
from typing import Union

from ..model import Scalar

# Decimal literals only: 12, -3, 0.25, .5, 5., 1e3
NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
INTEGER_RE = re.compile(r"[+-]?[0-9]+")

QUOTES = ("'", '"')

_UNESCAPES = {
    "\\": "\\",
    "'": "'",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def is_quoted(text: str) -> bool:
    """
    True when text is exactly one string literal.

    `'a' .. 'b'` starts and ends with a quote but is not one literal.
    """
    if len(text) < 2 or text[0] not in QUOTES or text[-1] != text[0]:
        return False
    quote = text[0]
    pos = 1
    while pos < len(text):
        ch = text[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == quote:
            return pos == len(text) - 1
        pos += 1
    return False


def unescape_lua_string(text: str) -> str:
    """Undo the backslash escapes written by escape_lua_string."""
    if "\\" not in text:
        return text
    result = []
    pos = 0
    length = len(text)
    while pos < length:
        ch = text[pos]
        if ch == "\\" and pos + 1 < length and text[pos + 1] in _UNESCAPES:
            result.append(_UNESCAPES[text[pos + 1]])
            pos += 2
            continue
        # Unknown escape, keep as-is
        result.append(ch)
        pos += 1
    return "".join(result)


def strip_quotes(text: str) -> str:
    """Trim text and remove one pair of surrounding quotes, if any."""
    text = text.strip()
    if is_quoted(text):
        return unescape_lua_string(text[1:-1])
    return text


def parse_number(text: str) -> Union[int, float, None]:
    """Parse a decimal literal, or return None if text is not one."""
    if not NUMBER_RE.fullmatch(text):
        return None
    if INTEGER_RE.fullmatch(text):
        return int(text)
    return float(text)


def coerce_value(raw: str) -> Scalar:
    """
    Coerce a raw value fragment.

    Rules, in order:
        'text' / "text"  -> str (quotes removed, escapes undone)
        true / false     -> bool
        decimal literal  -> int or float
        nil              -> None
        anything else    -> the raw text
    """
    text = raw.strip()
    if is_quoted(text):
        return unescape_lua_string(text[1:-1])
    if text == "true":
        return True
    if text == "false":
        return False
    number = parse_number(text)
    if number is not None:
        return number
    if text == "nil":
        return None
    return text
