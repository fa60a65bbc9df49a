"""
Output Formats Registry

Maps each format id to the bundle the conversion driver needs: header,
footer, per-batch encoder, batch separator and file extension. The direct
and the chunked paths both go through the same OutputFormat, so a format
is defined exactly once.
"""

from dataclasses import dataclass
from string import Template
from typing import Callable, Dict, List, Sequence

from ..model import Item
from ..parser.source import ConversionError
from . import data, lua

DEFAULT_NAMESPACE = "QBShared"
OUTPUT_PREFIX = "converted-items"


class UnknownFormatError(ConversionError, KeyError):
    """Raised for a format id that is not in FORMATS."""
    def __init__(self, format_id: str):
        self.format_id = format_id
        super().__init__(f"Unknown format {format_id!r} (expected one of: {', '.join(FORMATS)})")

    def __str__(self):
        return self.args[0]


@dataclass(frozen=True)
class OutputFormat:
    """Describes one output format and how to produce it."""

    id: str                                     # "compact", "json", ...
    title: str                                  # Display name
    description: str                            # One line for `itemshift formats`
    extension: str                              # File extension without the dot
    encode: Callable[[Sequence[Item]], str]     # Batch of items -> batch text
    header: str = ""                            # Template with $namespace
    footer: str = ""
    separator: str = ""                         # Between non-empty batch texts
    unique_keys: bool = False                   # One entry per key, last record wins

    def render_header(self, namespace: str = DEFAULT_NAMESPACE) -> str:
        # safe_substitute: the Lua preambles contain `$` in patterns
        return Template(self.header).safe_substitute(namespace=namespace)

    def render(self, batches: Sequence[str], namespace: str = DEFAULT_NAMESPACE) -> str:
        """Join already encoded batches into the complete document."""
        body = self.separator.join(text for text in batches if text)
        return f"{self.render_header(namespace)}{body}{self.footer}"

    @property
    def filename(self) -> str:
        return f"{OUTPUT_PREFIX}-{self.id}.{self.extension}"


FORMATS: Dict[str, OutputFormat] = {
    "original": OutputFormat(
        id="original",
        title="Original Block Format",
        description="Lua table with one block per item (largest, most readable)",
        extension="lua",
        encode=lua.encode_table,
        header=lua.TABLE_HEADER,
        footer=lua.TABLE_FOOTER,
    ),
    "compact": OutputFormat(
        id="compact",
        title="Compact Pipe Format",
        description="One pipe-delimited line per item plus a Lua loader",
        extension="lua",
        encode=lua.encode_compact,
        header=lua.COMPACT_HEADER,
    ),
    "json": OutputFormat(
        id="json",
        title="JSON Format",
        description="Single JSON object keyed Items",
        extension="json",
        encode=data.encode_json,
        header=data.JSON_HEADER,
        footer=data.JSON_FOOTER,
        separator=data.JSON_SEPARATOR,
        unique_keys=True,
    ),
    "csv": OutputFormat(
        id="csv",
        title="CSV Format",
        description="Spreadsheet rows with a fixed header (extra fields dropped)",
        extension="csv",
        encode=data.encode_csv,
        header=data.CSV_HEADER,
    ),
    "minimal": OutputFormat(
        id="minimal",
        title="Optimized Format",
        description="One add_item(...) call per item (smallest Lua output)",
        extension="lua",
        encode=lua.encode_minimal,
        header=lua.MINIMAL_HEADER,
    ),
}


def get_format(format_id: str) -> OutputFormat:
    """Get an output format by its id. Raises UnknownFormatError."""
    try:
        return FORMATS[format_id]
    except KeyError:
        raise UnknownFormatError(format_id) from None


def list_formats() -> List[OutputFormat]:
    return list(FORMATS.values())


def output_filename(format_id: str) -> str:
    """Default file name for a conversion: converted-items-<format>.<ext>."""
    return get_format(format_id).filename
