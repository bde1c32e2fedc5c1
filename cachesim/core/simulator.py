"""CacheSimulator decides hit or miss for each address and updates stats.

Addresses are fed in trace order; every access advances a logical clock by
one tick, and that clock is the only notion of recency the LRU policy uses.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from cachesim.core import address_codec
from cachesim.core.address_codec import ADDRESS_WIDTH, CacheGeometry
from cachesim.core.cache import CacheStore
from cachesim.core.errors import AddressOutOfRange
from cachesim.data.stats_export import Statistics

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    HIT = "HIT"
    MISS = "MISS"


@dataclass(frozen=True)
class AccessResult:
    """What a single access did.

    - way_index: line that was hit or filled
    - evicted_tag: tag displaced by a miss, None if the line was empty
    - timestamp: clock value stamped on the line
    """

    address: int
    set_index: int
    tag: int
    way_index: int
    outcome: Outcome
    evicted_tag: Optional[int]
    timestamp: int

    @property
    def hit(self) -> bool:
        return self.outcome is Outcome.HIT


class CacheSimulator:
    def __init__(self, total_bytes: int, line_bytes: int, associativity: int,
                 address_width: int = ADDRESS_WIDTH, stats: Optional[Statistics] = None):
        self.geometry: CacheGeometry = CacheGeometry.create(total_bytes, line_bytes, associativity, address_width)
        self.store = CacheStore(self.geometry)
        self.stats = stats or Statistics()
        self.clock = 0

    def reset(self):
        # clear stats and contents, rewind the clock
        self.store.reset()
        self.stats.reset()
        self.clock = 0

    def _check_address(self, address) -> None:
        if not self.geometry.contains(address):
            logger.warning("rejecting address %r", address)
            raise AddressOutOfRange(address, self.geometry.address_width)

    def access(self, address: int) -> AccessResult:
        """Look `address` up, filling the LRU line of its set on a miss."""
        self._check_address(address)
        geometry = self.geometry
        set_index = address_codec.set_index_of(address, geometry)
        tag = address_codec.tag_of(address, geometry)
        cache_set = self.store[set_index]
        now = self.clock

        way = cache_set.find_matching_tag(tag)
        if way is not None:
            cache_set[way].touch(now)
            outcome = Outcome.HIT
            evicted_tag = None
            logger.debug("t=%d hit  %#x set %d way %d", now, address, set_index, way)
        else:
            way = cache_set.find_eviction_candidate()
            victim = cache_set[way]
            evicted_tag = victim.stored_tag
            victim.fill(tag, now)
            outcome = Outcome.MISS
            if evicted_tag is None:
                logger.debug("t=%d miss %#x set %d way %d (empty)", now, address, set_index, way)
            else:
                logger.debug("t=%d miss %#x set %d way %d evicts tag %#x",
                             now, address, set_index, way, evicted_tag)

        self.clock += 1
        self.stats.record_access(outcome is Outcome.HIT)
        return AccessResult(address, set_index, tag, way, outcome, evicted_tag, now)

    def run(self, addresses: Iterable[int],
            callback: Optional[Callable[[AccessResult], None]] = None) -> List[AccessResult]:
        """Replay `addresses` in order and return one result per address."""
        results = []
        for address in addresses:
            result = self.access(address)
            if callback:
                callback(result)
            results.append(result)
        return results
