"""
Line Scanner

Line-level building blocks shared by the dialect parsers:
- comment stripping and line cleanup
- reassembly of statements that span several physical lines
- quote- and bracket-aware scanning (matching braces, call arguments)
- the key patterns that recognize item-open and property lines
"""

import re
from typing import List, Optional, Tuple

COMMENT_MARKER = "--"
QUOTE_CHARS = ("'", '"')

# ['key'] = {   /   ["key"] = {
BRACKET_KEY_OPEN = re.compile(r"""\[['"]([^'"]+)['"]\]\s*=\s*\{""")
# key = {   (only at the start of the line)
BARE_KEY_OPEN = re.compile(r"^(\w+)\s*=\s*\{")

# ['prop'] = value   /   prop = value
BRACKET_PROPERTY = re.compile(r"""\[['"]([^'"]+)['"]\]\s*=\s*(.+)$""")
BARE_PROPERTY = re.compile(r"(\w+)\s*=\s*(.+)$")


def strip_comment(line: str) -> str:
    """Remove a trailing `--` comment that is not inside a string."""
    if COMMENT_MARKER not in line:
        return line
    quote = None
    escaped = False
    for pos, ch in enumerate(line):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
        elif ch in QUOTE_CHARS:
            quote = ch
        elif line.startswith(COMMENT_MARKER, pos):
            return line[:pos]
    return line


def clean_lines(text: str) -> List[str]:
    """Split text into trimmed lines with comments removed (comment-only lines become empty)."""
    return [strip_comment(line).strip() for line in text.splitlines()]


def mask_strings(line: str) -> str:
    """Blank out the contents of string literals so brace tests only see code."""
    if "'" not in line and '"' not in line:
        return line
    masked = []
    quote = None
    escaped = False
    for ch in line:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
                masked.append(ch)
                continue
            masked.append(" ")
        else:
            if ch in QUOTE_CHARS:
                quote = ch
            masked.append(ch)
    return "".join(masked)


def reassemble(line: str, lines: List[str], index: int) -> Tuple[str, int]:
    """
    Join a statement that continues on following lines.

    While the text ends with neither `,` nor `}`, the next non-empty,
    non-comment line is appended with a single space. Stops at end of input.

    Returns:
        (joined text, index of the last line consumed)
    """
    text = line.strip()
    while index + 1 < len(lines) and not text.endswith((",", "}")):
        index += 1
        next_line = lines[index].strip()
        if not next_line or next_line.startswith(COMMENT_MARKER):
            continue
        text = f"{text} {next_line}"
    return text, index


def split_arguments(text: str, brackets: str = "()") -> List[str]:
    """
    Split a comma separated list at top level only.

    Commas inside quotes or inside any of the bracket pairs in `brackets`
    (given as consecutive open/close characters, e.g. "(){}") do not split.
    Parts are trimmed; a trailing empty part is dropped.
    """
    opens = brackets[0::2]
    closes = brackets[1::2]
    parts = []
    current = []
    depth = 0
    quote = None
    escaped = False

    for ch in text:
        if quote:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch in QUOTE_CHARS:
            quote = ch
        elif ch in opens:
            depth += 1
        elif ch in closes:
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)

    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def find_closing(text: str, start: int, open_char: str = "{", close_char: str = "}") -> int:
    """
    Find the bracket that closes the one at text[start].

    Returns the index of the closing character, or -1 if it is not on this line.
    """
    depth = 0
    quote = None
    escaped = False
    for pos in range(start, len(text)):
        ch = text[pos]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
        elif ch in QUOTE_CHARS:
            quote = ch
        elif ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return pos
    return -1


def collect_call_arguments(lines: List[str], index: int, start: int) -> Tuple[str, int]:
    """
    Collect the argument text of a call whose `(` ends just before lines[index][start].

    Scans forward across lines until the matching `)`; quotes are honoured
    and line breaks inside the call are kept as newlines.

    Returns:
        (argument text, index of the line holding the closing parenthesis)
    """
    collected = []
    depth = 1
    quote = None
    escaped = False
    segment = lines[index][start:]

    while True:
        for ch in segment:
            if quote:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == quote:
                    quote = None
            elif ch in QUOTE_CHARS:
                quote = ch
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return "".join(collected), index
            collected.append(ch)

        if index + 1 >= len(lines):
            # Unterminated call, use what we have
            return "".join(collected), index
        index += 1
        collected.append("\n")
        segment = lines[index]


def match_item_open(line: str) -> Optional[re.Match]:
    """Match an item-open line; bracketed keys take priority over bare identifiers."""
    return BRACKET_KEY_OPEN.search(line) or BARE_KEY_OPEN.match(line)


def split_property(text: str) -> Optional[Tuple[str, str]]:
    """
    Split a property statement into (name, raw value).

    One trailing comma is removed from the value. Returns None when the text
    is not a property assignment.
    """
    match = BRACKET_PROPERTY.search(text) or BARE_PROPERTY.search(text)
    if match is None:
        return None
    prop, value = match.group(1), match.group(2).strip()
    if value.endswith(","):
        value = value[:-1].strip()
    return prop, value
