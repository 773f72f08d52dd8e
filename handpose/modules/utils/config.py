"""
Configuration manager for the hand pose pipeline.

``config/config.yaml`` is read with PyYAML into plain nested dicts.
Components receive whole sections and read numbers through
``numeric_option``, which falls back to the documented default for
non-numeric values and clamps out-of-range ones. A missing or partly
broken file therefore degrades to defaults instead of stopping the
application. The schema check reports suspicious values as warnings.
"""

import os
import logging
from typing import List, Optional

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
_DEFAULT_PATH = os.path.join(_BASE_DIR, "config", "config.yaml")

_NUMBER = (int, float)

# "section.key" -> (accepted types, min, max); None bounds are open
_SCHEMA = {
    "tracking.pinch_threshold": (_NUMBER, 0.0, None),
    "tracking.deadzone": (_NUMBER, 0.0, None),
    "tracking.zoom_gain": (_NUMBER, 0.0, None),
    "tracking.min_extra_scale": (_NUMBER, 0.0, None),
    "tracking.max_extra_scale": (_NUMBER, 0.0, None),
    "smoothing.scale_rate": (_NUMBER, 0.0, None),
    "smoothing.rotation_slerp_factor": (_NUMBER, 0.0, 1.0),
    "smoothing.position_gains": (dict, None, None),
    "smoothing.position_thresholds": (dict, None, None),
    "interaction.auto_rotate": (bool, None, None),
    "interaction.auto_rotate_speed": (int, 0, 100),
    "interaction.base_object_scale": (_NUMBER, 0.0, None),
    "interaction.label_radius": (_NUMBER, 0.0, None),
    "camera.device_id": (int, 0, None),
    "camera.width": (int, 1, None),
    "camera.height": (int, 1, None),
    "camera.fps": (int, 1, None),
    "mediapipe.max_num_hands": (int, 1, 2),
    "mediapipe.min_detection_confidence": (_NUMBER, 0.0, 1.0),
    "mediapipe.min_tracking_confidence": (_NUMBER, 0.0, 1.0),
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Nested dict merge; ``override`` wins on conflicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: str) -> dict:
    """Parse a YAML mapping; problems are logged and yield ``{}``."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Config file %s is not valid YAML (%s), using defaults", path, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Config root in %s should be a mapping, got %s", path, type(data).__name__)
        return {}
    logger.info("Loaded config from %s", path)
    return data


def coerce_number(name: str, value, default, minimum=None, maximum=None, integer=False):
    """Validate one numeric setting.

    Non-numeric values (strings, None, bools, NaN) fall back to ``default``;
    out-of-range values are clamped to ``[minimum, maximum]``. Both cases
    are logged as warnings.
    """
    if isinstance(value, bool) or not isinstance(value, _NUMBER) or value != value:
        logger.warning("Invalid %s %r, using %r", name, value, default)
        value = default
    clamped = value
    if minimum is not None and clamped < minimum:
        clamped = minimum
    if maximum is not None and clamped > maximum:
        clamped = maximum
    if clamped != value:
        logger.warning("%s %r clamped to %r", name, value, clamped)
    return int(clamped) if integer else float(clamped)


def numeric_option(section, key: str, default, minimum=None, maximum=None, integer=False):
    """``coerce_number`` on ``section[key]``; a non-dict section yields ``default``."""
    value = section.get(key, default) if isinstance(section, dict) else default
    return coerce_number(key, value, default, minimum, maximum, integer)


def _check_value(key: str, value, spec) -> Optional[str]:
    types, low, high = spec
    # bool is an int subclass; only accept it where bool is asked for
    if isinstance(value, bool) and types is not bool:
        return f"{key}: expected a number, got bool ({value!r})"
    if not isinstance(value, types):
        expected = types.__name__ if isinstance(types, type) else "number"
        return f"{key}: expected {expected}, got {type(value).__name__} ({value!r})"
    if low is not None and value < low:
        return f"{key}: {value!r} is below {low}"
    if high is not None and value > high:
        return f"{key}: {value!r} is above {high}"
    return None


def _section_property(name: str):
    return property(lambda self: self.get_section(name),
                    doc=f"The '{name}' section ({{}} when absent).")


class Config:
    """Application-wide configuration (singleton)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
        return cls._instance

    def load(self, config_path: Optional[str] = None, overrides: Optional[dict] = None) -> "Config":
        """Read the YAML file, apply ``overrides`` (e.g. CLI flags), validate."""
        self._data = _read_yaml(config_path or _DEFAULT_PATH)
        if overrides:
            self._data = _deep_merge(self._data, overrides)
        self._validate()
        return self

    def _validate(self) -> List[str]:
        """Check known keys against the schema; returns the warnings logged."""
        warnings = []
        for section in sorted({key.split(".")[0] for key in _SCHEMA}):
            node = self._data.get(section)
            if node is None:
                warnings.append(f"Missing config section: '{section}'")
            elif not isinstance(node, dict):
                warnings.append(f"Section '{section}' should be a dict, got {type(node).__name__}")

        for key, spec in _SCHEMA.items():
            section, field = key.split(".")
            node = self._data.get(section)
            if isinstance(node, dict) and field in node:
                problem = _check_value(key, node[field], spec)
                if problem:
                    warnings.append(problem)

        for warning in warnings:
            logger.warning("Config validation: %s", warning)
        if not warnings:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Nested lookup by dot path, e.g. ``get("tracking.deadzone", 0.2)``."""
        node = self._data
        for key in key_path.split("."):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def set(self, key_path: str, value):
        """Assign by dot path, creating intermediate sections."""
        *parents, leaf = key_path.split(".")
        node = self._data
        for key in parents:
            node = node.setdefault(key, {})
        node[leaf] = value

    def get_section(self, section: str) -> dict:
        return self._data.get(section, {})

    tracking = _section_property("tracking")
    smoothing = _section_property("smoothing")
    interaction = _section_property("interaction")
    viewport = _section_property("viewport")
    camera = _section_property("camera")
    mediapipe = _section_property("mediapipe")
    performance = _section_property("performance")
    visualization = _section_property("visualization")

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Forget the loaded configuration (for testing)."""
        cls._instance = None
