"""Statistics, report formatting and exporters.
"""
import csv
import json
import logging
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class Statistics:
    def __init__(self):
        self.reset()

    def reset(self):
        # counters start from zero
        self.accesses = 0
        self.hits = 0
        self.misses = 0
        self.hit_rate_history: List[float] = []

    def record_access(self, hit: bool):
        # simple counter update: call this for every cache access
        self.accesses += 1
        if hit:
            self.hits += 1
        else:
            self.misses += 1
        self.hit_rate_history.append(self.hit_rate)

    @property
    def hit_rate(self):
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self):
        return (self.misses / self.accesses) if self.accesses else 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            'accesses': self.accesses,
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hit_rate,
            'miss_rate': self.miss_rate,
        }


def format_access_line(raw: str, result) -> str:
    """One report line per address: `<hex>,<set index>,HIT|MISS`."""
    return f"{raw},{result.set_index},{result.outcome.value}"


def format_summary(stats: Statistics) -> List[str]:
    return [
        f"NUM HITS {stats.hits}",
        f"NUM MISSES {stats.misses}",
        f"HIT RATE {stats.hit_rate:f}",
    ]


def export_chart_json(hit_rate_history: List[float], stats: Dict[str, float], fpath: str) -> str:
    """Export hit-rate history and stats to a JSON file. Returns the saved path.
    """
    data = {
        'hit_rate_history': list(hit_rate_history),
        'stats': stats
    }
    with open(fpath, 'w', encoding='utf-8') as fh:
        json.dump(data, fh, indent=2)
    logger.info("wrote chart data to %s", fpath)
    return fpath


def export_chart_pdf(hit_rate_history: List[float], fpath: str, title: Optional[str] = None) -> str:
    """Render the running hit rate to a PDF using matplotlib and save it.
    Returns the saved file path.
    """
    # Use matplotlib without a display
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    data = list(hit_rate_history) or [0]
    fig, ax = plt.subplots(figsize=(6, 2))
    ax.plot(range(len(data)), data, color='#FFA500', linewidth=2)
    ax.fill_between(range(len(data)), data, color='#FFA500', alpha=0.1)
    ax.set_ylim(0, 1)
    ax.set_xlabel('Access')
    ax.set_ylabel('Hit rate')
    if title:
        ax.set_title(title)
    ax.grid(False)
    fig.tight_layout()
    fig.savefig(fpath, format='pdf', dpi=150)
    plt.close(fig)
    logger.info("wrote hit-rate chart to %s", fpath)
    return fpath


class Exporter:
    @staticmethod
    def export_stats_csv(path: str, stats: Statistics):
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['accesses', 'hits', 'misses', 'hit_rate', 'miss_rate'])
            writer.writerow([stats.accesses, stats.hits, stats.misses, stats.hit_rate, stats.miss_rate])

    @staticmethod
    def export_trace_csv(path: str, rows: Iterable):
        """Write one row per access. `rows` yields (raw_hex, AccessResult) pairs."""
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['address', 'set_index', 'tag', 'way_index', 'outcome', 'evicted_tag'])
            for raw, result in rows:
                evicted = '' if result.evicted_tag is None else result.evicted_tag
                writer.writerow([raw, result.set_index, result.tag, result.way_index,
                                 result.outcome.value, evicted])
