from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, List

import numpy as np

from .reader import AccessRecord, Direction

logger = logging.getLogger(__name__)

# Access mix, in percent
SPATIAL_SHARE = 50
TEMPORAL_SHARE = 30

SPATIAL_BASE = 0x10000
HOT_BASE = 0x1A000
HOT_SLOTS = 20
RANDOM_WORDS = 0xFFFF
WORD_SIZE = 4


def generate_trace(num_accesses: int = 5000, seed: int | None = None) -> List[AccessRecord]:
    """
    Builds a synthetic trace with a fixed locality mix.

    - 50%: reads walking an array from 0x10000 in 4-byte steps (spatial locality)
    - 30%: writes to a single hot address near 0x1A000 (temporal locality)
    - 20%: reads from a random word in [0, 0xFFFF * 4)
    """
    if num_accesses < 0:
        raise ValueError(f"num_accesses must be non-negative, got {num_accesses}")

    rng = np.random.default_rng(seed)
    hot_address = HOT_BASE + int(rng.integers(0, HOT_SLOTS)) * WORD_SIZE
    kinds = rng.integers(0, 100, size=num_accesses)
    random_words = rng.integers(0, RANDOM_WORDS, size=num_accesses)

    records = []
    for i, kind in enumerate(kinds):
        if kind < SPATIAL_SHARE:
            records.append(AccessRecord(Direction.READ, SPATIAL_BASE + i * WORD_SIZE))
        elif kind < SPATIAL_SHARE + TEMPORAL_SHARE:
            records.append(AccessRecord(Direction.WRITE, hot_address))
        else:
            records.append(AccessRecord(Direction.READ, int(random_words[i]) * WORD_SIZE))
    return records


def write_trace(records: Iterable[AccessRecord], path: str | Path) -> int:
    """Writes one 'R 0x...' line per record, overwriting `path`. Returns the line count."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w") as f:
        for record in records:
            f.write(record.to_line() + "\n")
            count += 1
    logger.info("--- New '%s' generated with %d accesses ---", path, count)
    return count
