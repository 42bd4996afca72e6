"""
Engine configuration.

Settings come from the ``engine:`` section of ``.ipgraph/config.yaml``
when present, overridden by ``IPGRAPH_<FIELD>`` environment variables
(e.g. ``IPGRAPH_STALE_TIME_SECONDS=60``). Missing values fall back to the
defaults below.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

from .data.source import FetchOptions

DEFAULT_CONFIG_PATH = Path(".ipgraph/config.yaml")
ENV_PREFIX = "IPGRAPH_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

logger = logging.getLogger(__name__)


class EngineConfig(BaseModel):
    """Tunables for caching, retries, debouncing and display defaults."""
    # Fetching & caching
    stale_time_seconds: float = Field(default=300.0, ge=0)
    gc_time_seconds: float = Field(default=300.0, ge=0)
    fetch_retries: int = Field(default=2, ge=0)
    retry_delay_seconds: float = Field(default=0.2, ge=0)

    # Upstream request defaults
    default_max_depth: int = Field(default=2, ge=1)
    include_disputes: bool = False
    include_siblings: bool = False

    # Interaction & display
    debounce_seconds: float = Field(default=0.15, ge=0)
    label_max_length: int = Field(default=20, ge=1)
    dim_opacity: float = Field(default=0.3, ge=0.0, le=1.0)

    log_level: str = "WARNING"

    def fetch_options(self) -> FetchOptions:
        return FetchOptions(
            max_depth=self.default_max_depth,
            include_disputes=self.include_disputes,
            include_siblings=self.include_siblings,
        )


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    section = data.get("engine") or {}
    if not isinstance(section, dict):
        raise ValueError(f"'engine' section in {path} must be a mapping")
    return dict(section)


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """Load configuration from YAML and the environment."""
    config_path = path or DEFAULT_CONFIG_PATH
    values = _read_yaml(config_path)

    for name in EngineConfig.model_fields:
        env_value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if env_value is not None:
            values[name] = env_value

    config = EngineConfig.model_validate(values)
    logger.debug(f"Loaded engine config from {config_path}: {config.model_dump()}")
    return config


def configure_logging(level: str = "WARNING") -> None:
    """Basic process-wide logging setup for CLI and scripts."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)
