"""
Conversion Driver

Runs the whole pipeline: source text -> dialect chain -> items -> output
format. Small inputs are encoded in one pass; larger ones are encoded in
fixed-size batches, strictly in order, with an optional progress callback
and a cooperative pause hook every few batches. The callbacks never change
the output.

Usage:
    result = convert_file("items.lua", "json")
    Path(result.filename).write_text(result.text, encoding="utf-8")
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Union

from .formats import DEFAULT_NAMESPACE, OutputFormat, get_format
from .model import Item
from .parser import ENCODING_FALLBACKS, ItemDialect, parse_items, read_source

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "compact"
DEFAULT_CHUNK_SIZE = 1000
PAUSE_EVERY = 5

# Item-open occurrences in raw source, for the validation report
SOURCE_ITEM_PATTERN = re.compile(r"""\[['"][^'"]+['"]\]\s*=\s*\{""")

FIRST_KEYS_SHOWN = 5
LAST_KEYS_SHOWN = 3

ProgressCallback = Callable[[float], None]
PauseHook = Callable[[], None]


@dataclass
class ValidationReport:
    """
    Source vs. converted record counts.

    Advisory only: a mismatch points at records a dialect could not
    recognize, not at corrupted output.
    """
    source_count: int
    converted_count: int
    first_keys: List[str] = field(default_factory=list)
    last_keys: List[str] = field(default_factory=list)

    @property
    def matches(self) -> bool:
        return self.source_count == self.converted_count

    def summary(self) -> str:
        lines = [
            f"Source items: {self.source_count}",
            f"Converted items: {self.converted_count}",
        ]
        if self.first_keys:
            lines.append(f"First items: {', '.join(self.first_keys)}")
        if self.last_keys:
            lines.append(f"Last items: {', '.join(self.last_keys)}")
        if not self.matches:
            lines.append(
                f"WARNING: {self.source_count} items in source, "
                f"{self.converted_count} converted"
            )
        return "\n".join(lines)


@dataclass
class ConversionResult:
    """Output of one conversion."""
    format: OutputFormat
    text: str
    item_count: int
    dialect: Optional[str] = None
    validation: Optional[ValidationReport] = None

    @property
    def format_id(self) -> str:
        return self.format.id

    @property
    def extension(self) -> str:
        return self.format.extension

    @property
    def filename(self) -> str:
        return self.format.filename

    @property
    def byte_size(self) -> int:
        return len(self.text.encode("utf-8"))

    @property
    def size_label(self) -> str:
        return format_size(self.byte_size)


def format_size(size: int) -> str:
    """Human readable byte count: 0 Bytes, 512 Bytes, 1.5 KB, 2 MB."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    index = 0
    value = float(size)
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {units[index]}"


def iter_batches(items: Sequence[Item], chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Sequence[Item]]:
    """One batch for small inputs, otherwise consecutive slices of chunk_size."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if len(items) <= chunk_size:
        if items:
            yield items
        return
    for start in range(0, len(items), chunk_size):
        yield items[start:start + chunk_size]


def merge_duplicate_keys(items: Sequence[Item]) -> List[Item]:
    """
    One item per key: the last record, at the position of the first.

    Keyless items are dropped. Batching the merged list keeps a keyed
    format's batched output equal to a single pass over all items.
    """
    merged: Dict[str, Item] = {}
    for item in items:
        if item.key:
            merged[item.key] = item
    if len(merged) < len(items):
        logger.debug(f"Merged {len(items)} records into {len(merged)} unique keys")
    return list(merged.values())


def iter_convert(items: Sequence[Item],
                 output: Union[str, OutputFormat],
                 progress: Optional[ProgressCallback] = None,
                 pause: Optional[PauseHook] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 pause_every: int = PAUSE_EVERY,
                 namespace: str = DEFAULT_NAMESPACE) -> Iterator[str]:
    """
    Encode items as a stream of text fragments.

    Yields the header, then each non-empty batch text (with the format's
    separator in between), then the footer. "".join() of the stream is
    the complete document.

    Args:
        items: Items in output order
        output: Format id or OutputFormat
        progress: Called with the percentage of items processed after each batch
        pause: Called after every `pause_every` batches
    """
    fmt = output if isinstance(output, OutputFormat) else get_format(output)
    if fmt.unique_keys:
        items = merge_duplicate_keys(items)
    total = len(items)
    if total > chunk_size:
        logger.info(f"Processing {total} items in chunks of {chunk_size}")

    yield fmt.render_header(namespace)

    processed = 0
    wrote_batch = False
    for number, batch in enumerate(iter_batches(items, chunk_size), start=1):
        text = fmt.encode(batch)
        if text:
            if wrote_batch and fmt.separator:
                yield fmt.separator
            yield text
            wrote_batch = True

        processed += len(batch)
        logger.debug(f"Batch {number}: {len(batch)} items, {len(text)} chars")
        if progress is not None:
            progress(processed * 100 / total)
        if pause is not None and pause_every > 0 and number % pause_every == 0:
            pause()

    yield fmt.footer


def convert_items(items: Sequence[Item],
                  output: Union[str, OutputFormat],
                  progress: Optional[ProgressCallback] = None,
                  pause: Optional[PauseHook] = None,
                  chunk_size: int = DEFAULT_CHUNK_SIZE,
                  pause_every: int = PAUSE_EVERY,
                  namespace: str = DEFAULT_NAMESPACE) -> str:
    """Encode items into one output document. Raises UnknownFormatError."""
    return "".join(iter_convert(items, output, progress, pause,
                                chunk_size, pause_every, namespace))


def validate_conversion(source_text: str, items: Sequence[Item]) -> ValidationReport:
    """Compare bracketed item keys in the source with the items produced."""
    keys = [item.key for item in items if item.key]
    report = ValidationReport(
        source_count=len(SOURCE_ITEM_PATTERN.findall(source_text)),
        converted_count=len(keys),
        first_keys=keys[:FIRST_KEYS_SHOWN],
        last_keys=keys[-LAST_KEYS_SHOWN:],
    )
    if not report.matches:
        logger.warning(
            f"Item count mismatch: {report.source_count} in source, "
            f"{report.converted_count} converted"
        )
    return report


def convert_text(text: str,
                 format_id: str = DEFAULT_FORMAT,
                 dialects: Optional[Sequence[ItemDialect]] = None,
                 progress: Optional[ProgressCallback] = None,
                 pause: Optional[PauseHook] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 pause_every: int = PAUSE_EVERY,
                 namespace: str = DEFAULT_NAMESPACE) -> ConversionResult:
    """
    Parse source text and convert it.

    Raises:
        UnknownFormatError: if format_id is not a known format
        NoItemsFoundError: if no dialect finds any item
    """
    fmt = get_format(format_id)
    parsed = parse_items(text, dialects)
    output = convert_items(parsed.items, fmt, progress, pause,
                           chunk_size, pause_every, namespace)

    result = ConversionResult(
        format=fmt,
        text=output,
        item_count=sum(1 for item in parsed.items if item.key),
        dialect=parsed.dialect,
        validation=validate_conversion(text, parsed.items),
    )
    logger.info(
        f"Converted {result.item_count} items to {fmt.id} "
        f"({result.size_label})"
    )
    return result


def convert_file(path: Union[str, Path],
                 format_id: str = DEFAULT_FORMAT,
                 encodings: Sequence[str] = ENCODING_FALLBACKS,
                 **options) -> ConversionResult:
    """Read a source file and convert it. Also raises SourceReadError."""
    get_format(format_id)
    text = read_source(path, encodings)
    logger.info(f"Converting {path} to {format_id}")
    return convert_text(text, format_id, **options)
