"""
itemshift.formats - Output Formats

Serializers for the five output formats and the registry that selects them.
"""

from itemshift.formats.escaping import escape_lua_string, lua_literal
from itemshift.formats.registry import (
    OutputFormat,
    UnknownFormatError,
    FORMATS,
    DEFAULT_NAMESPACE,
    get_format,
    list_formats,
    output_filename,
)

__all__ = [
    "escape_lua_string",
    "lua_literal",
    "OutputFormat",
    "UnknownFormatError",
    "FORMATS",
    "DEFAULT_NAMESPACE",
    "get_format",
    "list_formats",
    "output_filename",
]
