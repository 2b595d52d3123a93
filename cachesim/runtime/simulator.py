from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from ..trace.reader import AccessRecord, Direction
from .engine import CacheEngine, CacheStats
from .geometry import CacheGeometry

logger = logging.getLogger(__name__)


@dataclass
class SimResult:
    """Everything a report needs from a finished run."""
    geometry: CacheGeometry
    stats: CacheStats
    reads: int = 0
    writes: int = 0
    set_hits: List[int] = field(default_factory=list)
    set_misses: List[int] = field(default_factory=list)
    # (accesses so far, cumulative hit rate)
    hit_rate_history: List[Tuple[int, float]] = field(default_factory=list)


def run(records: Iterable[AccessRecord], geometry: CacheGeometry, history_interval: int = 100) -> SimResult:
    """
    Feeds every record, in order, through a fresh cache engine.

    The cumulative hit rate is sampled every `history_interval` accesses and
    once more after the last one.
    """
    if history_interval <= 0:
        raise ValueError(f"history_interval must be positive, got {history_interval}")

    engine = CacheEngine(geometry)
    result = SimResult(geometry=geometry, stats=engine.stats)
    logger.info("Simulating %d sets x %d ways", geometry.num_sets, geometry.associativity)

    for record in records:
        if record.direction is Direction.WRITE:
            result.writes += 1
        else:
            result.reads += 1
        engine.access(record.address)
        if engine.clock % history_interval == 0:
            result.hit_rate_history.append((engine.clock, engine.stats.hit_rate))

    stats = engine.stats
    if stats.accesses and (not result.hit_rate_history or result.hit_rate_history[-1][0] != stats.accesses):
        result.hit_rate_history.append((stats.accesses, stats.hit_rate))

    result.set_hits = list(engine.set_hits)
    result.set_misses = list(engine.set_misses)
    logger.debug("Simulation done: %d accesses, %d hits, %d misses",
                 stats.accesses, stats.hits, stats.misses)
    return result
