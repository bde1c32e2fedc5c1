"""Address decoding for a set-associative cache.

An address of `address_width` bits is split into three fields:

    | tag (high bits) | set index | offset (low bits) |

- offset_bits = bit_width(line_bytes - 1)
- set_index_bits = bit_width(num_sets - 1)
- tag_bits = address_width - offset_bits - set_index_bits

The tag is kept in place (masked, not shifted), so two tags are only
comparable when both come from `tag_of` with the same geometry.
"""
import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from cachesim.core.errors import ConfigError

logger = logging.getLogger(__name__)

# a trace record is 4 hex digits
ADDRESS_WIDTH = 16


def bit_width(n: int) -> int:
    """Return the 1-based position of the highest set bit of `n` (0 for 0)."""
    if n < 0:
        raise ValueError(f"bit_width is undefined for negative numbers, got {n}")
    return n.bit_length()


def _low_mask(bits: int) -> int:
    return (1 << bits) - 1


@dataclass(frozen=True)
class CacheGeometry:
    """Immutable cache shape plus the field widths and masks derived from it.

    Use `CacheGeometry.create` to get validation; the derived fields are
    filled in `__post_init__`.
    """

    total_bytes: int
    line_bytes: int
    associativity: int
    address_width: int = ADDRESS_WIDTH

    num_lines: int = field(init=False)
    num_sets: int = field(init=False)
    offset_bits: int = field(init=False)
    set_index_bits: int = field(init=False)
    tag_bits: int = field(init=False)
    offset_mask: int = field(init=False)
    set_index_mask: int = field(init=False)
    tag_mask: int = field(init=False)

    def __post_init__(self):
        for name in ("total_bytes", "line_bytes", "associativity", "address_width"):
            value = getattr(self, name)
            # bool is an int subclass but never a meaningful size
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")
        if self.total_bytes % self.line_bytes != 0:
            raise ConfigError(
                f"line size {self.line_bytes} does not divide cache size {self.total_bytes}"
            )
        num_lines = self.total_bytes // self.line_bytes
        if num_lines % self.associativity != 0:
            raise ConfigError(
                f"associativity {self.associativity} does not divide the number of lines {num_lines}"
            )
        num_sets = num_lines // self.associativity
        if num_sets & (num_sets - 1):
            # the set-index mask could otherwise select a set that does not exist
            raise ConfigError(
                f"number of sets must be a power of two for the set-index mask to address "
                f"every set exactly, got {num_sets}"
            )
        offset_bits = bit_width(self.line_bytes - 1)
        set_index_bits = bit_width(num_sets - 1)
        tag_bits = self.address_width - offset_bits - set_index_bits
        if tag_bits < 0:
            raise ConfigError(
                f"{offset_bits} offset bits + {set_index_bits} set-index bits do not fit "
                f"in a {self.address_width}-bit address"
            )

        # frozen dataclass: derived fields go through object.__setattr__
        set_ = object.__setattr__
        set_(self, "num_lines", num_lines)
        set_(self, "num_sets", num_sets)
        set_(self, "offset_bits", offset_bits)
        set_(self, "set_index_bits", set_index_bits)
        set_(self, "tag_bits", tag_bits)
        set_(self, "offset_mask", _low_mask(offset_bits))
        set_(self, "set_index_mask", _low_mask(set_index_bits))
        set_(self, "tag_mask", _low_mask(tag_bits) << (offset_bits + set_index_bits))

    @classmethod
    def create(cls, total_bytes: int, line_bytes: int, associativity: int,
               address_width: int = ADDRESS_WIDTH) -> "CacheGeometry":
        try:
            geometry = cls(total_bytes, line_bytes, associativity, address_width)
        except ConfigError as exc:
            logger.error("invalid cache geometry: %s", exc)
            raise
        logger.info(
            "geometry: %d bytes, %d-byte lines, %d-way -> %d sets; bits tag/set/offset = %d/%d/%d",
            total_bytes, line_bytes, associativity, geometry.num_sets,
            geometry.tag_bits, geometry.set_index_bits, geometry.offset_bits,
        )
        return geometry

    @property
    def address_limit(self) -> int:
        """One past the largest representable address."""
        return 1 << self.address_width

    def contains(self, address) -> bool:
        if not isinstance(address, int) or isinstance(address, bool):
            return False
        return 0 <= address < self.address_limit


class DecodedAddress(NamedTuple):
    tag: int
    set_index: int
    offset: int


def set_index_of(address: int, geometry: CacheGeometry) -> int:
    return (address >> geometry.offset_bits) & geometry.set_index_mask


def offset_of(address: int, geometry: CacheGeometry) -> int:
    return address & geometry.offset_mask


def tag_of(address: int, geometry: CacheGeometry) -> int:
    return address & geometry.tag_mask


def decode(address: int, geometry: CacheGeometry) -> DecodedAddress:
    """Split `address` into its (tag, set_index, offset) fields."""
    return DecodedAddress(
        tag_of(address, geometry),
        set_index_of(address, geometry),
        offset_of(address, geometry),
    )


def format_address(address: int, geometry: CacheGeometry) -> str:
    """Zero-padded lowercase hex, one digit per started nibble of the address width."""
    digits = (geometry.address_width + 3) // 4
    return format(address, f"0{digits}x")


__all__ = [
    "ADDRESS_WIDTH",
    "CacheGeometry",
    "DecodedAddress",
    "bit_width",
    "set_index_of",
    "offset_of",
    "tag_of",
    "decode",
    "format_address",
]
