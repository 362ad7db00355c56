"""caribbean_almanac.config_loader

Lightweight YAML config loader for caribbean_almanac.

Exposes a typed dataclass `AlmanacConfig` and a `load_config()` helper that
accepts an optional path override.
"""

from __future__ import annotations

import datetime
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "almanac.yaml"
CONFIG_ENV_VAR = "ALMANAC_CONFIG"


@dataclass
class AlmanacConfig:
    """Typed configuration for caribbean_almanac.

    Fields:
        data_path: template data file; None uses the bundled data
        default_country: country shown when none is requested
        default_year: year shown when none is requested; None means current year
        cache_size: number of (country, year) results kept in memory
        log_level: logging level name
    """

    data_path: str | None = None
    default_country: str = "BS"
    default_year: int | None = None
    cache_size: int = 64
    log_level: str = "INFO"

    @property
    def effective_year(self) -> int:
        return self.default_year if self.default_year is not None else datetime.date.today().year

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AlmanacConfig:
        """Create AlmanacConfig from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int; values that cannot be coerced
        fall back to their defaults with a warning.
        """
        if data is None:
            data = {}

        def _coerce_int(key: str, default: int | None) -> int | None:
            raw = data.get(key, default)
            if raw is None:
                return default
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %r", key, raw, default)
                return default

        cache_size = _coerce_int("cache_size", 64) or 64
        if cache_size < 1:
            logger.warning("cache_size %d below minimum; coercing to 1", cache_size)
            cache_size = 1

        default_year = _coerce_int("default_year", None)
        if default_year is not None and not datetime.MINYEAR <= default_year <= datetime.MAXYEAR:
            logger.warning("default_year %d out of range; using current year", default_year)
            default_year = None

        data_path = data.get("data_path")
        data_path = str(data_path) if data_path else None

        default_country = data.get("default_country") or "BS"
        default_country = str(default_country).strip().upper()

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(
            data_path=data_path,
            default_country=default_country,
            default_year=default_year,
            cache_size=cache_size,
            log_level=log_level,
        )


def load_config(path: str | None = None) -> AlmanacConfig:
    """Load configuration from a YAML file and return an AlmanacConfig.

    Args:
        path: Optional path to the config file. Defaults to $ALMANAC_CONFIG,
              then ./almanac.yaml in the current working directory.

    Returns:
        AlmanacConfig with values from file (or defaults).

    Behavior:
    - If file is missing: returns AlmanacConfig() with defaults.
    - If file exists but top-level is not a mapping: raises ValueError.
    """
    if path:
        p = Path(path)
    elif os.environ.get(CONFIG_ENV_VAR):
        p = Path(os.environ[CONFIG_ENV_VAR])
    else:
        p = Path.cwd() / DEFAULT_CONFIG_FILENAME

    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return AlmanacConfig()

    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004

    cfg = AlmanacConfig.from_dict(raw)
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
