from __future__ import annotations


class ConfigError(ValueError):
    """A cache configuration that cannot be simulated. Fatal for a run."""


class InvalidAssociativity(ConfigError):
    pass


class DegenerateGeometry(ConfigError):
    """The configuration yields zero sets."""


class NonPowerOfTwoError(ConfigError):
    """Block size or set count is not a power of two."""


class MalformedRecord(ValueError):
    """A trace line that cannot be turned into an access record."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason
