"""Configuration utilities.

Provides:
- `load_service_config()`: loads `service_config.yaml` (YAML, or JSON for `.json` paths)
- `get_default_grouping_options()`: consolidation defaults from config + environment

Precedence (highest -> lowest):
  1) per-call overrides (applied later by the engine)
  2) environment variables (`LOAD_MAX_WEIGHT_KG`, ...; `.env` is honoured)
  3) `consolidation` section of the config file
  4) `GroupingOptions` dataclass defaults
"""

from pathlib import Path
from typing import Mapping, Optional
import json
import logging
import os

import yaml
from dotenv import load_dotenv

from ..core.consolidation.options import GroupingOptions, options_from_mapping

logger = logging.getLogger(__name__)

load_dotenv()

ENV_OPTION_VARIABLES = {
    "max_distance_km": "LOAD_MAX_DISTANCE_KM",
    "max_weight_kg": "LOAD_MAX_WEIGHT_KG",
    "max_volume_m3": "LOAD_MAX_VOLUME_M3",
    "max_time_window_overlap_minutes": "LOAD_MAX_TIME_WINDOW_OVERLAP_MINUTES",
}


def _default_config_path() -> Path:
    override = os.getenv("LOAD_SERVICE_CONFIG")
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[1] / "config" / "service_config.yaml"


def load_service_config(path: Optional[str] = None) -> dict:
    """Load service configuration from YAML or JSON.

    Returns empty dict if no config found.
    """
    cfg_path = Path(path) if path else _default_config_path()
    if not cfg_path.exists():
        logger.debug(f"Service config not found at {cfg_path}")
        return {}

    text = cfg_path.read_text(encoding="utf-8")
    if cfg_path.suffix == ".json":
        config = json.loads(text)
    else:
        config = yaml.safe_load(text)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Service config at {cfg_path} must be a mapping")
    return config


def _options_from_environment(environ: Mapping[str, str]) -> dict:
    values = {}
    for option, variable in ENV_OPTION_VARIABLES.items():
        raw = environ.get(variable)
        if raw is None or raw.strip() == "":
            continue
        try:
            values[option] = float(raw)
        except ValueError:
            raise ValueError(f"{variable} must be numeric, got {raw!r}") from None
    return values


def get_default_grouping_options(
    config: Optional[dict] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> GroupingOptions:
    """Resolve default grouping options from config file and environment."""
    cfg = load_service_config() if config is None else config
    section = cfg.get("consolidation") or {}

    values = dict(section)
    values.update(_options_from_environment(os.environ if environ is None else environ))

    options = options_from_mapping(values)
    logger.debug(f"Default grouping options: {options}")
    return options
