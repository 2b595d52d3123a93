import pytest
from cachesim.runtime.engine import CacheEngine
from cachesim.runtime.geometry import compute_geometry


@pytest.fixture
def two_set_geometry():
    """256B cache, 64B blocks, 2-way -> 2 sets, 6 offset bits, 1 index bit."""
    return compute_geometry(256, 64, 2)


@pytest.fixture
def engine(two_set_geometry):
    return CacheEngine(two_set_geometry)


@pytest.fixture
def set0_address(two_set_geometry):
    """Returns a function mapping a tag to an address in set 0."""
    shift = two_set_geometry.index_bits + two_set_geometry.offset_bits

    def _address(tag: int, offset: int = 0) -> int:
        return (tag << shift) | offset

    return _address
