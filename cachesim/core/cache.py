"""Cache line storage

This file provides the storage side of the set-associative cache used by
the simulator.
Behavior:
- The store is composed of `num_sets` sets; each set has `associativity` lines.
- A line holds a stored tag (None while empty) and the logical timestamp of
  its last access.
- Recency is never tracked with an ordered list: the LRU victim of a set is
  found by scanning timestamps, lowest index winning ties.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from cachesim.core.address_codec import CacheGeometry


@dataclass
class CacheLine:
    """container for a cache line (way).

    Fields:
    - stored_tag: the tag held by the line, None while the line is empty
    - last_accessed_at: logical clock value of the last hit or fill
    """

    stored_tag: Optional[int] = None
    last_accessed_at: int = 0

    @property
    def empty(self) -> bool:
        return self.stored_tag is None

    def fill(self, tag: int, timestamp: int) -> None:
        self.stored_tag = tag
        self.last_accessed_at = timestamp

    def touch(self, timestamp: int) -> None:
        self.last_accessed_at = timestamp

    def clear(self) -> None:
        self.stored_tag = None
        self.last_accessed_at = 0


class CacheSet:
    """Fixed number of lines that addresses with the same set index share."""

    def __init__(self, associativity: int):
        if associativity <= 0:
            raise ValueError("associativity must be >= 1")
        self.lines: List[CacheLine] = [CacheLine() for _ in range(associativity)]

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, way: int) -> CacheLine:
        return self.lines[way]

    def __iter__(self) -> Iterator[CacheLine]:
        return iter(self.lines)

    def find_matching_tag(self, tag: int) -> Optional[int]:
        """Return the way holding `tag`, or None."""
        for way, line in enumerate(self.lines):
            if not line.empty and line.stored_tag == tag:
                return way
        return None

    def find_eviction_candidate(self) -> int:
        """Return the way with the oldest timestamp.

        Strict `<` while scanning left to right, so the lowest way wins a tie.
        Empty lines carry timestamp 0 and are therefore picked only while they
        are (one of) the oldest.
        """
        victim = 0
        oldest = self.lines[0].last_accessed_at
        for way in range(1, len(self.lines)):
            if self.lines[way].last_accessed_at < oldest:
                oldest = self.lines[way].last_accessed_at
                victim = way
        return victim

    def occupancy(self) -> int:
        return sum(1 for line in self.lines if not line.empty)

    def tags(self) -> List[Optional[int]]:
        return [line.stored_tag for line in self.lines]

    def reset(self) -> None:
        for line in self.lines:
            line.clear()


class CacheStore:
    """All sets of the cache, indexed by set index."""

    def __init__(self, geometry: CacheGeometry):
        self.geometry = geometry
        # allocate the sets matrix: num_sets x associativity
        self.sets: List[CacheSet] = [CacheSet(geometry.associativity) for _ in range(geometry.num_sets)]

    def __len__(self) -> int:
        return len(self.sets)

    def __getitem__(self, set_index: int) -> CacheSet:
        return self.sets[set_index]

    def __iter__(self) -> Iterator[CacheSet]:
        return iter(self.sets)

    def occupancy(self) -> int:
        """Number of non-empty lines across the whole cache."""
        return sum(s.occupancy() for s in self.sets)

    def reset(self) -> None:
        """Clear every line back to empty with timestamp 0."""
        for s in self.sets:
            s.reset()


__all__ = ["CacheLine", "CacheSet", "CacheStore"]
