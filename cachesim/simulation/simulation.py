"""Simulation wrapper used by the command line

Turns a configuration plus a trace (file, records or built-in scenario)
into per-address results, reusing one simulator across runs.
"""
import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from cachesim.core.address_codec import ADDRESS_WIDTH, format_address
from cachesim.core.errors import ConfigError
from cachesim.core.simulator import AccessResult, CacheSimulator
from cachesim.data.trace_loader import TraceRecord, load_trace

logger = logging.getLogger(__name__)

SCENARIOS = ('Matrix Traversal', 'Random Access', 'Sequential Sweep')


@dataclass
class SimulationConfig:
    total_bytes: int
    line_bytes: int
    associativity: int
    address_width: int = ADDRESS_WIDTH


class Simulation:
    def __init__(self, config: SimulationConfig, seed: Optional[int] = None):
        self.config = config
        self.simulator: Optional[CacheSimulator] = None
        self._rng = random.Random(seed)

    @staticmethod
    def _check_passes(num_passes: int) -> None:
        if not isinstance(num_passes, int) or isinstance(num_passes, bool) or num_passes < 1:
            raise ConfigError(f"number of passes must be a positive integer, got {num_passes!r}")

    def _create_simulator(self) -> CacheSimulator:
        # Only build a simulator if one does not already exist, so cache
        # contents, clock and stats carry over between runs.
        if self.simulator is None:
            cfg = self.config
            self.simulator = CacheSimulator(cfg.total_bytes, cfg.line_bytes, cfg.associativity,
                                            address_width=cfg.address_width)
        return self.simulator

    def run_trace(self, records: Sequence[TraceRecord],
                  num_passes: int = 1) -> List[Tuple[TraceRecord, AccessResult]]:
        self._check_passes(num_passes)
        sim = self._create_simulator()
        results = []
        for p in range(num_passes):
            logger.debug("pass %d over %d addresses", p, len(records))
            for record in records:
                results.append((record, sim.access(record.address)))
        return results

    def run_file(self, path: str, num_passes: int = 1) -> List[Tuple[TraceRecord, AccessResult]]:
        # build first so a bad geometry is reported before the trace is read
        self._create_simulator()
        self._check_passes(num_passes)
        records = load_trace(path, self.config.address_width)
        return self.run_trace(records, num_passes)

    def run_scenario(self, name: str, num_passes: int = 1) -> List[Tuple[TraceRecord, AccessResult]]:
        sim = self._create_simulator()
        records = [TraceRecord(format_address(a, sim.geometry), a)
                   for a in self._generate_sequence_for_scenario(name)]
        return self.run_trace(records, num_passes)

    def _generate_sequence_for_scenario(self, name: str) -> List[int]:
        # Produce a list of addresses for the predefined scenarios
        limit = 1 << self.config.address_width
        line = self.config.line_bytes
        if name == 'Matrix Traversal':
            # row-major walk of a 10x10 matrix of 4-byte elements, then column-major
            N = 10
            row_major = [(i * N + j) * 4 for i in range(N) for j in range(N)]
            col_major = [(i * N + j) * 4 for j in range(N) for i in range(N)]
            return [a % limit for a in row_major + col_major]
        elif name == 'Random Access':
            return [self._rng.randrange(limit) for _ in range(64)]
        elif name == 'Sequential Sweep':
            # touch every line of a region twice the cache size, twice
            span = 2 * self.config.total_bytes
            sweep = [a % limit for a in range(0, span, line)]
            return sweep + sweep
        raise ConfigError(f"unknown scenario {name!r}; expected one of {', '.join(SCENARIOS)}")
