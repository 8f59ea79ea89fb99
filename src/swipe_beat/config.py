"""Game configuration.

All tunables live in :class:`GameConfig`. Values come from (lowest to highest
priority) the dataclass defaults, a YAML file, and ``SWIPE_BEAT_<FIELD>``
environment variables:

    # swipe_beat.yml
    max_cards: 20
    swipe_threshold: 100
    velocity_threshold: 500
    beat_match_tolerance: 0.2
    max_visible: 6

    SWIPE_BEAT_MAX_CARDS=30 swipe-beat simulate-simple
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

import yaml

logger = logging.getLogger("swipe_beat.config")

ENV_PREFIX = "SWIPE_BEAT_"
CONFIG_PATH_ENV = "SWIPE_BEAT_CONFIG"


class ConfigError(ValueError):
    """Raised for unknown keys or out-of-range values."""


@dataclass(frozen=True)
class GameConfig:
    max_cards: int = 20
    swipe_threshold: float = 100.0
    velocity_threshold: float = 500.0
    beat_match_tolerance: float = 0.2
    max_visible: int = 6
    refill_lookahead: int = 3
    initial_cards: int = 10
    advance_delay: float = 0.3
    tick_interval: float = 0.1

    def __post_init__(self):
        self.validate()

    def validate(self):
        positive = ("swipe_threshold", "velocity_threshold", "beat_match_tolerance", "tick_interval")
        for name in positive:
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be positive and finite, got {value}")
        if self.max_cards < 1:
            raise ConfigError(f"max_cards must be at least 1, got {self.max_cards}")
        if self.max_visible < 1:
            raise ConfigError(f"max_visible must be at least 1, got {self.max_visible}")
        if self.initial_cards < 1:
            raise ConfigError(f"initial_cards must be at least 1, got {self.initial_cards}")
        # 0 would stop refilling once the initial cards run out
        if self.refill_lookahead < 1:
            raise ConfigError(f"refill_lookahead must be at least 1, got {self.refill_lookahead}")
        if not math.isfinite(self.advance_delay) or self.advance_delay < 0:
            raise ConfigError(f"advance_delay must be non-negative, got {self.advance_delay}")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping) -> GameConfig:
        known = {f.name: f.type for f in fields(cls)}
        unknown = set(data) - set(known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**{k: _coerce(cls, k, v) for k, v in data.items()})

    @classmethod
    def from_yaml(cls, path: str | Path) -> GameConfig:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at top level")
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def with_env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> GameConfig:
        """Apply ``SWIPE_BEAT_<FIELD>`` variables on top of this config."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(self):
            key = ENV_PREFIX + f.name.upper()
            if key in environ:
                overrides[f.name] = _coerce(type(self), f.name, environ[key])
        if overrides:
            logger.debug("Config overrides from environment: %s", overrides)
            return replace(self, **overrides)
        return self


def _coerce(cls: type, name: str, value):
    default = getattr(cls, name)
    try:
        if isinstance(default, int):
            return int(value)
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e


def load_config(path: Optional[str | Path] = None, environ: Optional[Mapping[str, str]] = None) -> GameConfig:
    """Load config from ``path`` (or ``$SWIPE_BEAT_CONFIG``), then apply env overrides."""
    environ = os.environ if environ is None else environ
    path = path or environ.get(CONFIG_PATH_ENV)
    if path:
        config = GameConfig.from_yaml(path)
        logger.info("Loaded config from %s", path)
    else:
        config = GameConfig()
    return config.with_env_overrides(environ)
