"""
itemshift.parser - Item Table Parsers

Tolerant parsers for Lua-style item definitions.
Turns pasted or loaded source text into a list of Item records.
"""

from itemshift.parser.values import coerce_value, strip_quotes, unescape_lua_string
from itemshift.parser.scanner import reassemble, split_arguments
from itemshift.parser.source import (
    ConversionError,
    NoItemsFoundError,
    SourceReadError,
    ENCODING_FALLBACKS,
    read_source,
)
from itemshift.parser.dialects import (
    ItemDialect,
    TableDialectParser,
    FlexibleDialectParser,
    CraftDialectParser,
    ParseResult,
    CRAFT_DEFAULTS,
    DIALECT_NAMES,
    default_dialects,
    get_dialect,
    parse_items,
    parse_file,
)

__all__ = [
    # Values
    "coerce_value",
    "strip_quotes",
    "unescape_lua_string",
    # Scanner
    "reassemble",
    "split_arguments",
    # Source and errors
    "ConversionError",
    "NoItemsFoundError",
    "SourceReadError",
    "ENCODING_FALLBACKS",
    "read_source",
    # Dialects
    "ItemDialect",
    "TableDialectParser",
    "FlexibleDialectParser",
    "CraftDialectParser",
    "ParseResult",
    "CRAFT_DEFAULTS",
    "DIALECT_NAMES",
    "default_dialects",
    "get_dialect",
    "parse_items",
    "parse_file",
]
