import random

import pytest
from cachesim.runtime.engine import CacheEngine, CacheStats, Outcome
from cachesim.runtime.geometry import compute_geometry


def test_lru_sequence_two_way_set(engine, set0_address):
    """2 sets x 2 ways: tags 1, 2, 3, 1, 3 all mapping to set 0."""
    # given
    tags = [1, 2, 3, 1, 3]

    # when
    outcomes = [engine.access(set0_address(t)) for t in tags]

    # then
    assert outcomes == [
        Outcome.COLD_MISS,
        Outcome.COLD_MISS,
        Outcome.CAPACITY_MISS,  # evicts tag 1
        Outcome.CAPACITY_MISS,  # evicts tag 2
        Outcome.HIT,
    ]
    assert sorted(engine.resident_tags(0)) == [1, 3]
    assert engine.resident_tags(1) == []


def test_first_eviction_replaces_oldest(engine, set0_address):
    engine.access(set0_address(1))
    engine.access(set0_address(2))
    engine.access(set0_address(3))
    # tag 3 takes way 0, where tag 1 lived
    assert engine.resident_tags(0) == [3, 2]


def test_repeat_access_is_hit(engine, set0_address):
    address = set0_address(7)
    assert engine.access(address).is_miss
    assert engine.access(address) is Outcome.HIT
    assert engine.access(address).is_hit


def test_same_block_different_offset_hits(engine, set0_address):
    engine.access(set0_address(4, offset=0))
    assert engine.access(set0_address(4, offset=63)) is Outcome.HIT


def test_clock_and_recency_strictly_increase(engine, set0_address):
    address = set0_address(5)
    engine.access(address)
    first = engine.ways(0)[0].recency
    engine.access(address)
    second = engine.ways(0)[0].recency

    assert engine.clock == 2
    assert first == 1
    assert second == 2
    assert second > first


def test_clock_advances_on_every_outcome(engine, set0_address):
    for t in [1, 1, 2, 3]:
        engine.access(set0_address(t))
    assert engine.clock == 4


def test_fill_set_gives_only_cold_misses():
    """An 8-way set filled with 8 distinct tags: 8 cold misses, no hits."""
    g = compute_geometry(32 * 1024, 64, 8)
    engine = CacheEngine(g)
    shift = g.index_bits + g.offset_bits
    index = 13

    outcomes = [engine.access((tag << shift) | (index << g.offset_bits)) for tag in range(8)]

    assert outcomes == [Outcome.COLD_MISS] * 8
    assert engine.stats.hits == 0
    assert engine.stats.cold_misses == 8
    assert engine.resident_tags(index) == list(range(8))
    assert all(way.valid for way in engine.ways(index))
    assert engine.set_misses[index] == 8


def test_eviction_uses_global_recency_not_insertion_order():
    """4-way set: touching tag 1 again makes tag 2 the LRU victim."""
    g = compute_geometry(256, 64, 4)  # single fully-associative set
    engine = CacheEngine(g)
    addr = lambda tag: tag << g.offset_bits

    for tag in [1, 2, 3, 4]:
        engine.access(addr(tag))
    assert engine.access(addr(1)) is Outcome.HIT
    assert engine.access(addr(5)) is Outcome.CAPACITY_MISS

    assert sorted(engine.resident_tags(0)) == [1, 3, 4, 5]
    # tag 5 replaced tag 2 in way 1
    assert engine.ways(0)[1].tag == 5


def test_other_sets_are_untouched(engine, two_set_geometry):
    set1 = 1 << two_set_geometry.offset_bits
    engine.access(set1)
    for tag in range(1, 6):
        engine.access(tag << (two_set_geometry.index_bits + two_set_geometry.offset_bits))

    assert engine.access(set1) is Outcome.HIT
    assert engine.set_hits == [0, 1]


def test_direct_mapped_conflicts():
    g = compute_geometry(1024, 64, 1)
    engine = CacheEngine(g)
    a = 0x0
    b = a + g.cache_size_bytes  # same index, different tag

    assert engine.access(a) is Outcome.COLD_MISS
    assert engine.access(b) is Outcome.CAPACITY_MISS
    assert engine.access(a) is Outcome.CAPACITY_MISS
    assert engine.stats.evictions == 2


def test_full_width_address(engine):
    top = (1 << 64) - 1
    assert engine.access(top) is Outcome.COLD_MISS
    assert engine.access(top) is Outcome.HIT
    tag, index = engine._decompose_address(top)
    assert index == 1
    assert tag == (1 << 57) - 1


def test_hits_plus_misses_equals_accesses():
    g = compute_geometry(4 * 1024, 32, 4)
    engine = CacheEngine(g)
    rng = random.Random(1234)
    addresses = [rng.randrange(0, 1 << 16) for _ in range(2000)]

    outcomes = [engine.access(a) for a in addresses]

    stats = engine.stats
    assert stats.hits + stats.misses == len(addresses) == stats.accesses
    assert stats.hits == sum(o.is_hit for o in outcomes)
    assert stats.cold_misses + stats.capacity_misses == stats.misses
    assert sum(engine.set_hits) + sum(engine.set_misses) == len(addresses)
    assert stats.hit_rate == stats.hits / (stats.hits + stats.misses)


def test_engines_are_independent(two_set_geometry, set0_address):
    first = CacheEngine(two_set_geometry)
    second = CacheEngine(two_set_geometry)
    first.access(set0_address(1))

    assert second.access(set0_address(1)) is Outcome.COLD_MISS
    assert first.clock == 1
    assert second.clock == 1


def test_reset_clears_state(engine, set0_address):
    engine.access(set0_address(1))
    engine.access(set0_address(1))
    engine.reset()

    assert engine.clock == 0
    assert engine.stats.accesses == 0
    assert engine.resident_tags(0) == []
    assert engine.set_hits == [0, 0]
    assert engine.access(set0_address(1)) is Outcome.COLD_MISS


def test_ways_index_out_of_range(engine):
    with pytest.raises(IndexError):
        engine.ways(2)


class TestCacheStats:
    def test_empty_stats(self):
        stats = CacheStats()
        assert stats.accesses == 0
        assert stats.hit_rate == 0.0
        assert stats.miss_rate == 0.0
        assert stats.hit_rate_percent == "0.0000%"

    def test_record(self):
        stats = CacheStats()
        for outcome in [Outcome.HIT, Outcome.COLD_MISS, Outcome.CAPACITY_MISS, Outcome.HIT]:
            stats.record(outcome)
        assert (stats.hits, stats.misses) == (2, 2)
        assert stats.cold_misses == 1
        assert stats.capacity_misses == 1
        assert stats.hit_rate == 0.5
        assert stats.hit_rate_percent == "50.0000%"

    def test_hit_rate_percent_precision(self):
        stats = CacheStats(hits=2, misses=1)
        assert stats.hit_rate_percent == "66.6667%"
