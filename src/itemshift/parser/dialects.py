"""
Item Dialect Parsers

Three tolerant, line-oriented parsers that extract item records:

- TableDialectParser: `Name.Items = { ['key'] = { ... }, ... }` blocks
- FlexibleDialectParser: pasted `key = { ... }` fragments with no table wrapper
- CraftDialectParser: `['key'] = createCraftable(name, label, image, type, color[, description])`

All share one contract, parse(text) -> List[Item], possibly empty. parse_items()
tries them in priority order and stops at the first one that finds anything.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..model import Item, format_label
from .scanner import (
    COMMENT_MARKER,
    clean_lines,
    collect_call_arguments,
    find_closing,
    mask_strings,
    match_item_open,
    reassemble,
    split_arguments,
    split_property,
)
from .source import ENCODING_FALLBACKS, NoItemsFoundError, read_source
from .values import coerce_value, strip_quotes

logger = logging.getLogger(__name__)

DEFAULT_CRAFT_CONSTRUCTOR = "createCraftable"

# Bracket pairs that keep commas together inside an inline record body
INLINE_BRACKETS = "(){}[]"

# Values a craftable gets regardless of the table defaults
CRAFT_DEFAULTS = {
    "weight": 100,
    "type": "weapon",
    "image": "default.png",
    "unique": True,
    "useable": True,
    "should_close": True,
}

# Table header: an assignment mentioning the items table (QBShared.Items = {)
_HEADER_TOKEN = re.compile(r"\bitems\b", re.IGNORECASE)


def assign_property(item: Item, text: str) -> bool:
    """
    Apply one `prop = value` statement to an item.

    Returns False (and leaves the item alone) when text is not a property.
    """
    parts = split_property(text)
    if parts is None:
        logger.debug(f"Skipping unrecognized property text: {text!r}")
        return False
    prop, raw = parts
    value = coerce_value(raw)
    if prop == "combinable" and value is not None:
        # Carried through as its literal
        value = raw
    item.set_field(prop, value)
    return True


def assign_fields(item: Item, body: str) -> int:
    """Apply every comma separated property in an inline record body."""
    count = 0
    for part in split_arguments(body, INLINE_BRACKETS):
        if part and assign_property(item, part):
            count += 1
    return count


class ItemDialect:
    """A parser strategy: parse(text) -> List[Item]."""

    name = "base"

    def parse(self, text: str) -> List[Item]:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


class RecordCollector:
    """Open/seal bookkeeping for records found line by line."""

    def __init__(self):
        self.items: List[Item] = []
        self.current: Optional[Item] = None

    def open(self, key: str) -> Item:
        self.seal()
        self.current = Item(key=key)
        return self.current

    def seal(self) -> None:
        if self.current is not None:
            logger.debug(f"Sealed item {self.current.key!r}")
            self.items.append(self.current)
            self.current = None


class LineDialectParser(ItemDialect):
    """
    Shared item-open and property handling of the table and flexible dialects.

    Subclasses drive the scan; this class knows how to open a record from a
    line (including fields written on the same line) and how to read a
    property line.
    """

    def parse(self, text: str) -> List[Item]:
        lines = clean_lines(text)
        records = RecordCollector()
        self._scan(lines, records)
        records.seal()
        _log_found(self.name, records.items)
        return records.items

    def _scan(self, lines: List[str], records: RecordCollector) -> None:
        raise NotImplementedError

    def _open_item(self, line: str, records: RecordCollector) -> Optional[str]:
        """
        Open a record from an item-open line.

        Fields after the opening `{` are applied to the new record. When its
        closing `}` is on the same line the record is sealed right away.

        Returns:
            The unconsumed rest of the line ("" if none), or None if the
            line does not open a record.
        """
        match = match_item_open(line)
        if match is None:
            return None

        item = records.open(match.group(1))
        brace = match.end() - 1
        close = find_closing(line, brace)
        if close < 0:
            assign_fields(item, line[brace + 1:])
            return ""

        assign_fields(item, line[brace + 1:close])
        records.seal()
        return line[close + 1:].lstrip(" \t,;")

    @staticmethod
    def _opens_table(line: str) -> bool:
        code = mask_strings(line)
        return "=" in code and "{" in code

    @staticmethod
    def _is_property_line(line: str, records: RecordCollector) -> bool:
        code = mask_strings(line)
        return (
            records.current is not None
            and "=" in code
            and "{" not in code
            and "}" not in code
        )


class ScanState(Enum):
    """States of the table dialect scan."""
    SEEKING_HEADER = auto()
    INSIDE_TABLE = auto()
    DONE = auto()


class TableDialectParser(LineDialectParser):
    """
    Parser for the strict `Items = { ... }` block.

    Nothing is read before the header line. A standalone `}` closes the
    table and ends the scan; everything after it is ignored.
    """

    name = "table"

    def _scan(self, lines: List[str], records: RecordCollector) -> None:
        state = ScanState.SEEKING_HEADER
        index = 0

        while index < len(lines) and state is not ScanState.DONE:
            line = lines[index]

            if state is ScanState.SEEKING_HEADER:
                rest = self._match_header(line)
                if rest is None:
                    index += 1
                    continue
                logger.debug(f"Found items table at line {index + 1}: {line!r}")
                state = ScanState.INSIDE_TABLE
                line = rest

            index, finished = self._consume(line, lines, index, records)
            if finished:
                logger.debug(f"Found table terminator at line {index + 1}")
                state = ScanState.DONE
            index += 1

    @staticmethod
    def _match_header(line: str) -> Optional[str]:
        """Return the table content after the header's `{`, or None for a non-header line."""
        if "=" not in line or not _HEADER_TOKEN.search(line):
            return None
        brace = line.find("{", line.find("="))
        if brace < 0:
            return ""
        return line[brace + 1:].strip()

    def _consume(self, line: str, lines: List[str], index: int,
                 records: RecordCollector) -> Tuple[int, bool]:
        """Process one line (or what is left of it). Returns (index, table finished)."""
        while line:
            if line.startswith(COMMENT_MARKER):
                break

            if line == "}":
                records.seal()
                return index, True

            if self._opens_table(line):
                rest = self._open_item(line, records)
                line = rest or ""
                continue

            if self._is_property_line(line, records):
                text, index = reassemble(line, lines, index)
                assign_property(records.current, text)
            # Anything else (separators, stray braces) is skipped
            break

        return index, False


class FlexibleDialectParser(LineDialectParser):
    """
    Parser for pasted fragments without a table wrapper.

    Parsing starts on the first line and any `}` seals the open record. This
    can close a record early on an inner brace; it is the price of accepting
    unwrapped input.
    """

    name = "flexible"

    def _scan(self, lines: List[str], records: RecordCollector) -> None:
        index = 0
        while index < len(lines):
            index = self._consume(lines[index], lines, index, records)
            index += 1

    def _consume(self, line: str, lines: List[str], index: int,
                 records: RecordCollector) -> int:
        while line:
            if line.startswith(COMMENT_MARKER):
                break

            if self._opens_table(line):
                rest = self._open_item(line, records)
                line = rest or ""
                continue

            text = line
            if self._is_property_line(line, records):
                text, index = reassemble(line, lines, index)
                assign_property(records.current, text)

            if records.current is not None and "}" in mask_strings(text):
                records.seal()
            break

        return index


class CraftDialectParser(ItemDialect):
    """
    Parser for constructor-call tables:

        ['pistol'] = createCraftable("pistol", "Pistol", "pistol.png", "weapon", "black", "A pistol")

    Arguments are positional (name, label, image, type, color[, description])
    and may span several lines. Calls with fewer than five arguments are
    dropped.
    """

    name = "craft"
    MIN_ARGUMENTS = 5

    def __init__(self, constructor: str = DEFAULT_CRAFT_CONSTRUCTOR):
        self.constructor = constructor
        self._pattern = re.compile(
            r"""\[['"]([^'"]+)['"]\]\s*=\s*""" + re.escape(constructor) + r"\s*\("
        )

    def __repr__(self):
        return f"CraftDialectParser({self.constructor!r})"

    def parse(self, text: str) -> List[Item]:
        lines = clean_lines(text)
        items = []
        index = 0

        while index < len(lines):
            match = self._pattern.search(lines[index])
            if match:
                key = match.group(1)
                arguments, index = collect_call_arguments(lines, index, match.end())
                item = self.build_item(key, split_arguments(arguments))
                if item is not None:
                    items.append(item)
            index += 1

        _log_found(self.name, items)
        return items

    def build_item(self, key: str, arguments: List[str]) -> Optional[Item]:
        """Build a craftable item from positional arguments, or None if there are too few."""
        if len(arguments) < self.MIN_ARGUMENTS:
            logger.warning(
                f"Skipping craftable {key!r}: expected at least {self.MIN_ARGUMENTS} "
                f"arguments, got {len(arguments)}"
            )
            return None

        name, label, image, item_type, _color = (strip_quotes(a) for a in arguments[:5])
        description = strip_quotes(arguments[5]) if len(arguments) > 5 else ""

        return Item(
            key=key,
            name=name or key,
            label=label or format_label(key),
            weight=CRAFT_DEFAULTS["weight"],
            type=item_type or CRAFT_DEFAULTS["type"],
            image=image or CRAFT_DEFAULTS["image"],
            unique=CRAFT_DEFAULTS["unique"],
            useable=CRAFT_DEFAULTS["useable"],
            should_close=CRAFT_DEFAULTS["should_close"],
            description=description or f"A {label or key}",
        )


DIALECT_NAMES = ("table", "flexible", "craft")


def default_dialects(craft_constructor: str = DEFAULT_CRAFT_CONSTRUCTOR) -> List[ItemDialect]:
    """The fallback chain, in priority order."""
    return [
        TableDialectParser(),
        FlexibleDialectParser(),
        CraftDialectParser(craft_constructor),
    ]


def get_dialect(name: str, craft_constructor: str = DEFAULT_CRAFT_CONSTRUCTOR) -> ItemDialect:
    """Get a single dialect parser by name."""
    for dialect in default_dialects(craft_constructor):
        if dialect.name == name:
            return dialect
    raise ValueError(f"Unknown dialect {name!r} (expected one of: {', '.join(DIALECT_NAMES)})")


@dataclass
class ParseResult:
    """Items found in a source, and the dialect that found them."""
    dialect: str
    items: List[Item] = field(default_factory=list)

    def __len__(self):
        return len(self.items)

    @property
    def keys(self) -> List[str]:
        return [item.key for item in self.items]


def parse_items(text: str, dialects: Optional[Sequence[ItemDialect]] = None) -> ParseResult:
    """
    Parse items with automatic dialect fallback.

    Each dialect is tried in order; the first non-empty result wins.

    Raises:
        NoItemsFoundError: if no dialect finds any item
    """
    if dialects is None:
        dialects = default_dialects()

    tried = []
    for dialect in dialects:
        items = dialect.parse(text)
        if items:
            logger.info(f"Parsed {len(items)} items with the {dialect.name} dialect")
            return ParseResult(dialect=dialect.name, items=items)
        logger.info(f"No items found with the {dialect.name} dialect")
        tried.append(dialect.name)

    raise NoItemsFoundError(tried)


def parse_file(path: Union[str, Path],
               dialects: Optional[Sequence[ItemDialect]] = None,
               encodings: Sequence[str] = ENCODING_FALLBACKS) -> ParseResult:
    """Read a file and parse its items. Raises SourceReadError or NoItemsFoundError."""
    return parse_items(read_source(path, encodings), dialects)


def _log_found(dialect: str, items: List[Item]) -> None:
    logger.debug(f"{dialect} dialect found {len(items)} items")
    if items:
        logger.debug(f"First items: {[i.key for i in items[:5]]}")
        logger.debug(f"Last items: {[i.key for i in items[-5:]]}")
