"""Trace file loading.

A trace is a text file with one address per line, written as
`address_width / 4` hex digits rounded up (4 for the default 16-bit width)
with no `0x` prefix. Records keep the original text so reports can echo it back.
"""
import logging
import string
from typing import IO, List, NamedTuple

from cachesim.core.address_codec import ADDRESS_WIDTH
from cachesim.core.errors import TraceFormatError

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)


class TraceRecord(NamedTuple):
    raw: str
    address: int


def record_width(address_width: int = ADDRESS_WIDTH) -> int:
    """Number of hex digits per record."""
    return (address_width + 3) // 4


def parse_trace_line(line: str, line_number: int, address_width: int = ADDRESS_WIDTH) -> TraceRecord:
    text = line.rstrip('\r\n')
    width = record_width(address_width)
    if len(text) != width:
        raise TraceFormatError(f"expected {width} hex digits, got {text!r}", line_number)
    if not all(c in _HEX_DIGITS for c in text):
        raise TraceFormatError(f"not a hexadecimal address: {text!r}", line_number)
    address = int(text, 16)
    if address >= (1 << address_width):
        raise TraceFormatError(f"address {text!r} exceeds {address_width} bits", line_number)
    return TraceRecord(text, address)


def read_trace(stream: IO[str], address_width: int = ADDRESS_WIDTH) -> List[TraceRecord]:
    """Parse every record in `stream`; trailing blank lines are ignored."""
    lines = stream.read().splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        raise TraceFormatError("trace contains no addresses")
    return [parse_trace_line(line, n, address_width) for n, line in enumerate(lines, start=1)]


def load_trace(path: str, address_width: int = ADDRESS_WIDTH) -> List[TraceRecord]:
    try:
        with open(path, 'r', encoding='ascii', newline='') as fh:
            records = read_trace(fh, address_width)
    except OSError as exc:
        logger.error("cannot read trace %s: %s", path, exc)
        raise TraceFormatError(f"cannot read trace file {path}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise TraceFormatError(f"trace file {path} is not ASCII text") from exc
    logger.info("loaded %d addresses from %s", len(records), path)
    return records


__all__ = ["TraceRecord", "record_width", "parse_trace_line", "read_trace", "load_trace"]
