"""
itemshift - Lua Item Table Converter

Parses game item tables written in Lua-like notation (table, pasted
fragment and craftable-constructor dialects) and converts them to
Lua table, compact, JSON, CSV and minimal formats.
"""

__version__ = "0.1.0"
__author__ = "itemshift contributors"

from itemshift.model import Item, format_label
from itemshift.parser import (
    ConversionError,
    NoItemsFoundError,
    SourceReadError,
    parse_file,
    parse_items,
)
from itemshift.formats import FORMATS, UnknownFormatError, get_format, output_filename
from itemshift.convert import (
    ConversionResult,
    ValidationReport,
    convert_file,
    convert_items,
    convert_text,
    format_size,
    iter_convert,
)

__all__ = [
    "Item",
    "format_label",
    "ConversionError",
    "NoItemsFoundError",
    "SourceReadError",
    "UnknownFormatError",
    "parse_file",
    "parse_items",
    "FORMATS",
    "get_format",
    "output_filename",
    "ConversionResult",
    "ValidationReport",
    "convert_file",
    "convert_items",
    "convert_text",
    "format_size",
    "iter_convert",
]
