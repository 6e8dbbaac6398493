"""TOML-backed settings for curve defaults and log level.

The parsed file is cached at module level per path; call
clear_settings_cache() to force a reload (tests point it at a tmp file).
"""

import logging
import tomllib
from dataclasses import fields
from pathlib import Path
from typing import Optional, Union

from keycurve.common.model import CurveConfig
from keycurve.curves.factory import DEFAULT_CURVE_CONFIG

logger = logging.getLogger(__name__)

SETTINGS_PATH = Path(__file__).resolve().parents[3] / "settings.toml"

_cached_settings: Optional[dict] = None
_cached_path: Optional[Path] = None


def _load_settings(settings_path: Optional[Union[str, Path]] = None) -> dict:
    """Load and cache settings from the TOML file. A different path replaces the cached file."""
    global _cached_settings, _cached_path
    path = Path(settings_path).resolve() if settings_path else SETTINGS_PATH
    if _cached_settings is not None and _cached_path == path:
        return _cached_settings
    try:
        with open(path, "rb") as f:
            settings = tomllib.load(f)
    except Exception as e:
        logger.error("Failed to load settings from %s: %s", path, e)
        raise
    _cached_settings = settings
    _cached_path = path
    return _cached_settings


def clear_settings_cache() -> None:
    global _cached_settings, _cached_path
    _cached_settings = None
    _cached_path = None


def load_curve_config(settings_path: Optional[Union[str, Path]] = None) -> CurveConfig:
    """
    Build a CurveConfig from the [curve] table. Keys that are absent fall back to
    DEFAULT_CURVE_CONFIG; unknown keys are ignored with a warning.
    """
    curve_raw = _load_settings(settings_path).get("curve", {})
    known = {f.name for f in fields(CurveConfig)}
    values = {name: getattr(DEFAULT_CURVE_CONFIG, name) for name in known}
    for key, value in curve_raw.items():
        if key not in known:
            logger.warning("Ignoring unknown [curve] setting '%s'", key)
            continue
        # TOML floats are binary; keep them as written by going through str().
        values[key] = str(value)
    return CurveConfig(**values)


def get_log_level(settings_path: Optional[Union[str, Path]] = None) -> str:
    return _load_settings(settings_path).get("logging", {}).get("level", "INFO")
