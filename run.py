"""Entry point for the cache simulator.

Usage:
    python run.py -s 16 -a 2 -l 4 -f trace.txt
    python run.py -s 1024 -a 4 -l 16 --scenario "Matrix Traversal"

Prints `<address>,<set>,HIT|MISS` for each address followed by the hit
and miss counts and the hit rate.
"""
import argparse
import logging
import sys

from cachesim.core.errors import CacheSimError
from cachesim.data.stats_export import (Exporter, export_chart_json, export_chart_pdf,
                                        format_access_line, format_summary)
from cachesim.simulation import SCENARIOS, Simulation, SimulationConfig

logger = logging.getLogger('cachesim')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Simulate a set-associative LRU cache over an address trace')
    parser.add_argument('-s', '--size', type=int, required=True, help='cache size in bytes')
    parser.add_argument('-a', '--associativity', type=int, required=True, help='cache lines per set')
    parser.add_argument('-l', '--line-size', type=int, required=True, help='cache line size in bytes')
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('-f', '--file', help='trace file, one hex address per line')
    source.add_argument('--scenario', choices=SCENARIOS, help='run a built-in address pattern')
    parser.add_argument('--address-width', type=int, default=16, help='address width in bits (default: 16)')
    parser.add_argument('--passes', type=int, default=1, help='replay the trace this many times')
    parser.add_argument('--csv', help='write per-access results to this CSV file')
    parser.add_argument('--stats-csv', help='write summary statistics to this CSV file')
    parser.add_argument('--json', help='write hit-rate history and statistics as JSON')
    parser.add_argument('--chart', help='render the running hit rate to this PDF')
    parser.add_argument('-v', '--verbose', action='store_true', help='log every access')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s: %(message)s')

    config = SimulationConfig(total_bytes=args.size, line_bytes=args.line_size,
                              associativity=args.associativity, address_width=args.address_width)
    sim = Simulation(config)
    try:
        if args.file:
            results = sim.run_file(args.file, num_passes=args.passes)
        else:
            results = sim.run_scenario(args.scenario, num_passes=args.passes)
    except CacheSimError as exc:
        logger.debug("run aborted", exc_info=True)
        print(f'error: {exc}', file=sys.stderr)
        return 1

    stats = sim.simulator.stats
    # exports go first so a bad output path aborts before any result is printed
    try:
        if args.csv:
            Exporter.export_trace_csv(args.csv, ((r.raw, res) for r, res in results))
        if args.stats_csv:
            Exporter.export_stats_csv(args.stats_csv, stats)
        if args.json:
            export_chart_json(stats.hit_rate_history, stats.as_dict(), args.json)
        if args.chart:
            export_chart_pdf(stats.hit_rate_history, args.chart, title='Cache hit rate')
    except OSError as exc:
        logger.debug("export failed", exc_info=True)
        print(f'error: cannot write {exc.filename or "output"}: {exc.strerror or exc}', file=sys.stderr)
        return 1

    for record, result in results:
        print(format_access_line(record.raw, result))
    for line in format_summary(stats):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
