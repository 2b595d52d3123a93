from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from ..errors import MalformedRecord
from ..runtime.geometry import ADDRESS_WIDTH

logger = logging.getLogger(__name__)

MAX_ADDRESS = (1 << ADDRESS_WIDTH) - 1


class Direction(Enum):
    READ = "R"
    WRITE = "W"


@dataclass(frozen=True)
class AccessRecord:
    """One memory access from a trace. Direction does not affect the simulation."""
    direction: Direction
    address: int

    def to_line(self) -> str:
        return f"{self.direction.value} 0x{self.address:x}"


def parse_record(line: str) -> AccessRecord:
    """Parses a trace line such as 'R 0x1a004'. Extra tokens are ignored."""
    tokens = line.split()
    if len(tokens) < 2:
        raise MalformedRecord(line, "missing direction or address")

    try:
        direction = Direction(tokens[0].upper())
    except ValueError:
        raise MalformedRecord(line, f"unknown direction {tokens[0]!r}") from None

    try:
        address = int(tokens[1], 0)
    except ValueError:
        raise MalformedRecord(line, f"bad address {tokens[1]!r}") from None
    if address < 0 or address > MAX_ADDRESS:
        raise MalformedRecord(line, f"address out of {ADDRESS_WIDTH}-bit range")

    return AccessRecord(direction, address)


class TraceReader:
    """Yields access records from text lines, skipping blank and malformed ones."""

    def __init__(self, lines: Iterable[str]):
        self.lines = lines
        self.skipped = 0

    def __iter__(self) -> Iterator[AccessRecord]:
        for lineno, line in enumerate(self.lines, start=1):
            if not line.strip():
                continue
            try:
                yield parse_record(line)
            except MalformedRecord as e:
                self.skipped += 1
                logger.debug("Skipping trace line %d (%s)", lineno, e.reason)


def read_trace(path: str | Path) -> Iterator[AccessRecord]:
    """Reads records from a trace file. Raises OSError if it cannot be opened."""
    with open(path, "r", errors="replace") as f:
        reader = TraceReader(f)
        yield from reader
    if reader.skipped:
        logger.warning("Skipped %d malformed record(s) in %s", reader.skipped, path)
