from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .geometry import CacheGeometry


class Outcome(Enum):
    HIT = "hit"
    COLD_MISS = "cold_miss"
    CAPACITY_MISS = "capacity_miss"

    @property
    def is_hit(self) -> bool:
        return self is Outcome.HIT

    @property
    def is_miss(self) -> bool:
        return self is not Outcome.HIT


@dataclass
class Way:
    """One block slot in a set. tag and recency are meaningful only when valid."""
    valid: bool = False
    tag: int = 0
    recency: int = 0


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    cold_misses: int = 0
    capacity_misses: int = 0

    @property
    def accesses(self) -> int:
        return self.hits + self.misses

    @property
    def evictions(self) -> int:
        return self.capacity_misses

    @property
    def hit_rate(self) -> float:
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self) -> float:
        return (self.misses / self.accesses) if self.accesses else 0.0

    @property
    def hit_rate_percent(self) -> str:
        return f"{self.hit_rate * 100.0:.4f}%"

    def record(self, outcome: Outcome):
        if outcome is Outcome.HIT:
            self.hits += 1
            return
        self.misses += 1
        if outcome is Outcome.COLD_MISS:
            self.cold_misses += 1
        else:
            self.capacity_misses += 1


class CacheEngine:
    """
    Set-associative cache with strict LRU replacement.

    Ways live in one flat list of num_sets * associativity slots; set i owns
    slots [i * associativity, (i + 1) * associativity). Recency is stamped
    from a per-engine logical clock that advances once per access.
    """
    def __init__(self, geometry: CacheGeometry):
        self.geometry = geometry
        self.associativity = geometry.associativity
        self.offset_bits = geometry.offset_bits
        self.index_bits = geometry.index_bits
        self.index_mask = (1 << geometry.index_bits) - 1
        self._ways: List[Way] = [Way() for _ in range(geometry.num_sets * geometry.associativity)]
        self.clock = 0
        self.stats = CacheStats()
        self.set_hits: List[int] = [0] * geometry.num_sets
        self.set_misses: List[int] = [0] * geometry.num_sets

    def _decompose_address(self, address: int) -> tuple[int, int]:
        """Returns (tag, index); the offset plays no part in lookup."""
        no_offset = address >> self.offset_bits
        index = no_offset & self.index_mask
        tag = no_offset >> self.index_bits
        return tag, index

    def _set_range(self, index: int) -> range:
        base = index * self.associativity
        return range(base, base + self.associativity)

    def access(self, address: int) -> Outcome:
        """Looks up one address, filling or evicting on a miss."""
        self.clock += 1
        tag, index = self._decompose_address(address)
        slots = self._set_range(index)
        ways = self._ways

        for i in slots:
            way = ways[i]
            if way.valid and way.tag == tag:
                way.recency = self.clock
                return self._record(index, Outcome.HIT)

        for i in slots:
            way = ways[i]
            if not way.valid:
                way.valid = True
                way.tag = tag
                way.recency = self.clock
                return self._record(index, Outcome.COLD_MISS)

        # min() keeps the first of equal keys, so ties go to the lowest way.
        victim = ways[min(slots, key=lambda i: ways[i].recency)]
        victim.tag = tag
        victim.recency = self.clock
        return self._record(index, Outcome.CAPACITY_MISS)

    def _record(self, index: int, outcome: Outcome) -> Outcome:
        self.stats.record(outcome)
        if outcome is Outcome.HIT:
            self.set_hits[index] += 1
        else:
            self.set_misses[index] += 1
        return outcome

    def ways(self, index: int) -> List[Way]:
        """The ways of set `index`, in way order."""
        if not 0 <= index < self.geometry.num_sets:
            raise IndexError(f"set index {index} out of range [0, {self.geometry.num_sets - 1}]")
        return [self._ways[i] for i in self._set_range(index)]

    def resident_tags(self, index: int) -> List[int]:
        """Tags of the valid ways of set `index`, in way order."""
        return [way.tag for way in self.ways(index) if way.valid]

    def reset(self):
        """Invalidate every way and zero the clock and counters."""
        for way in self._ways:
            way.valid = False
            way.tag = 0
            way.recency = 0
        self.clock = 0
        self.stats = CacheStats()
        self.set_hits = [0] * self.geometry.num_sets
        self.set_misses = [0] * self.geometry.num_sets
