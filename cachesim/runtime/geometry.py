from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import ConfigError, DegenerateGeometry, InvalidAssociativity, NonPowerOfTwoError

if TYPE_CHECKING:
    from ..config import SimConfig

ADDRESS_WIDTH = 64


def is_power_of_two(n: int) -> bool:
    return (n > 0) and (n & (n - 1) == 0)


@dataclass(frozen=True)
class CacheGeometry:
    """Shape of a set-associative cache, derived once from its configuration."""
    cache_size_bytes: int
    block_size_bytes: int
    associativity: int
    num_blocks: int
    num_sets: int
    offset_bits: int
    index_bits: int
    tag_bits: int

    @property
    def index_mask(self) -> int:
        return (1 << self.index_bits) - 1

    def decompose(self, address: int) -> tuple[int, int, int]:
        """Splits an address into (tag, index, offset)."""
        offset = address & ((1 << self.offset_bits) - 1)
        no_offset = address >> self.offset_bits
        index = no_offset & self.index_mask
        tag = no_offset >> self.index_bits
        return tag, index, offset

    def block_address(self, tag: int, index: int) -> int:
        """Reconstructs the block start address from tag and index."""
        return (tag << (self.index_bits + self.offset_bits)) | (index << self.offset_bits)

    @classmethod
    def from_config(cls, config: SimConfig) -> CacheGeometry:
        return compute_geometry(
            config.cache_size_kb * 1024,
            config.block_size_bytes,
            config.associativity,
        )


def compute_geometry(cache_size_bytes: int, block_size_bytes: int, associativity: int) -> CacheGeometry:
    """
    Derives the set count and tag/index/offset widths of a cache.

    Raises a ConfigError subclass for any configuration that has no
    well-defined geometry: zero associativity, zero sets, inexact divisions,
    or a block size / set count that is not a power of two.
    """
    if associativity == 0:
        raise InvalidAssociativity("Associativity cannot be zero.")
    if associativity < 0:
        raise InvalidAssociativity(f"Associativity must be positive, got {associativity}.")
    if cache_size_bytes <= 0:
        raise ConfigError(f"Cache size must be positive, got {cache_size_bytes} bytes.")
    if not is_power_of_two(block_size_bytes):
        raise NonPowerOfTwoError(
            f"Block size must be a positive power of two, got {block_size_bytes}.")
    if cache_size_bytes % block_size_bytes != 0:
        raise ConfigError(
            f"Cache size ({cache_size_bytes} B) must be a multiple of block size ({block_size_bytes} B).")

    num_blocks = cache_size_bytes // block_size_bytes
    num_sets = num_blocks // associativity
    if num_sets == 0:
        raise DegenerateGeometry(
            f"Number of sets is zero ({num_blocks} blocks, associativity {associativity}). "
            "Check cache/block size.")
    if num_blocks % associativity != 0:
        raise ConfigError(
            f"Number of blocks ({num_blocks}) must be a multiple of associativity ({associativity}).")
    if not is_power_of_two(num_sets):
        raise NonPowerOfTwoError(f"Number of sets must be a power of two, got {num_sets}.")

    offset_bits = block_size_bytes.bit_length() - 1
    index_bits = num_sets.bit_length() - 1
    tag_bits = ADDRESS_WIDTH - index_bits - offset_bits
    if tag_bits < 0:
        raise ConfigError(
            f"Index and offset need {index_bits + offset_bits} bits, "
            f"more than the {ADDRESS_WIDTH}-bit address.")

    return CacheGeometry(
        cache_size_bytes=cache_size_bytes,
        block_size_bytes=block_size_bytes,
        associativity=associativity,
        num_blocks=num_blocks,
        num_sets=num_sets,
        offset_bits=offset_bits,
        index_bits=index_bits,
        tag_bits=tag_bits,
    )
