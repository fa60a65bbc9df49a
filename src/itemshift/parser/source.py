"""
Source reading and conversion errors.
"""

import logging
from pathlib import Path
from typing import Sequence, Union

logger = logging.getLogger(__name__)

# Try UTF-8 with BOM first, then UTF-8, then latin-1 (which always succeeds)
ENCODING_FALLBACKS = ("utf-8-sig", "utf-8", "latin-1")


class ConversionError(Exception):
    """Base class for errors surfaced to the caller of a conversion."""


class SourceReadError(ConversionError):
    """The input could not be read at all (distinct from a parse failure)."""
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read {self.path}: {reason}")


class NoItemsFoundError(ConversionError):
    """No dialect produced a single item."""
    def __init__(self, tried: Sequence[str] = ()):
        self.tried = tuple(tried)
        message = "no valid items found"
        if self.tried:
            message += f" (tried dialects: {', '.join(self.tried)})"
        super().__init__(message)


def read_source(path: Union[str, Path], encodings: Sequence[str] = ENCODING_FALLBACKS) -> str:
    """Read a source file, falling back through `encodings`."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise SourceReadError(path, e.strerror or str(e)) from e

    for encoding in encodings:
        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue
        logger.debug(f"Read {path} ({len(raw)} bytes, {encoding})")
        return text

    raise SourceReadError(path, f"undecodable with {', '.join(encodings)}")
