from __future__ import annotations
from dataclasses import dataclass, fields
import logging

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Key names used by plain "KEY: value" config.ini files
LEGACY_KEYS = {
    "CACHE_SIZE_KB": "cache_size_kb",
    "BLOCK_SIZE_BYTES": "block_size_bytes",
    "ASSOCIATIVITY": "associativity",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

INT_FIELDS = ("cache_size_kb", "block_size_bytes", "associativity", "num_accesses", "history_interval")


@dataclass
class SimConfig:
    """Cache simulator configuration."""
    # Cache geometry
    cache_size_kb: int = 32
    block_size_bytes: int = 64
    associativity: int = 8

    # Config file
    config_file: str = ""

    # Trace input
    trace_file: str = "trace.txt"
    generate_trace: bool = False
    num_accesses: int = 5000
    seed: int | None = None

    # Reporting
    report_dir: str = "out/default_run"
    history_interval: int = 100
    html_report: bool = True

    log_level: str = "INFO"

    def __post_init__(self):
        for name in INT_FIELDS:
            value = getattr(self, name)
            # bool is an int subclass, but never a meaningful size
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")
        if self.num_accesses < 0:
            raise ConfigError(f"num_accesses must be non-negative, got {self.num_accesses}")
        if self.history_interval <= 0:
            raise ConfigError(f"history_interval must be positive, got {self.history_interval}")
        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

    @property
    def cache_size_bytes(self) -> int:
        return self.cache_size_kb * 1024

    def update_from_yaml(self, yaml_path: str):
        """Updates config fields from a YAML (or 'KEY: value' config.ini) file."""
        try:
            with open(yaml_path, 'r') as f:
                yaml_config = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Could not open config file {yaml_path} ({e.strerror})") from None
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse config file {yaml_path}: {e}") from None

        if yaml_config is None:
            return
        if not isinstance(yaml_config, dict):
            raise ConfigError(f"Config file {yaml_path} must contain a mapping of keys to values")

        known = {f.name for f in fields(self)}
        for key, value in yaml_config.items():
            name = LEGACY_KEYS.get(str(key), str(key).lower())
            if name in known:
                setattr(self, name, value)
            else:
                logger.warning("Ignoring unknown config key '%s' in %s", key, yaml_path)
        self.__post_init__()

    @classmethod
    def from_args(cls, args) -> SimConfig:
        """Factory method to create a SimConfig from parsed argparse arguments."""
        config = cls()

        # 1. Load from config file if provided
        if getattr(args, 'config', None):
            config.config_file = args.config
            config.update_from_yaml(config.config_file)

        # 2. Override with command-line arguments
        arg_dict = vars(args)
        for key, value in arg_dict.items():
            if value is not None and key != 'config' and hasattr(config, key):
                setattr(config, key, value)

        config.__post_init__()
        return config
