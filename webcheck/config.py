# Copyright 2025 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.

"""
Config file support for WebCheck.

This module handles loading persistent settings from ~/.webcheck.conf and
the immutable CheckSettings value the rest of the program is built from.
Supports both YAML and INI formats.

Priority order: CLI args > environment > ~/.webcheck.conf > hardcoded defaults
"""

import configparser
import logging
import math
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.webcheck.conf")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_BOOL_TRUE_VALUES = frozenset(("true", "t", "yes", "1", "on"))
_BOOL_FALSE_VALUES = frozenset(("false", "f", "no", "0", "off"))


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Accepts plain numbers (seconds) and Go-style duration strings such as
    "500ms", "1s", "24h" or "1h30m".

    Args:
        value: Duration to parse

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value is not a valid duration
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    try:
        number = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(number):
            raise ValueError(f"Invalid duration: {value!r}")
        return number

    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if not text:
        raise ValueError(f"Invalid duration: {value!r}")

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART_RE.match(text, position)
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    return sign * total


def _parse_bool(value: str) -> bool:
    """Parse a boolean value from a string representation."""
    lower = value.lower()
    if lower in _BOOL_TRUE_VALUES:
        return True
    if lower in _BOOL_FALSE_VALUES:
        return False
    raise ValueError(f"Cannot parse '{value}' as a boolean. Use true/false, t/f, yes/no, 1/0, or on/off.")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _parse_bool(str(value))


# Mapping of config field names to the callables producing their values
_CONFIG_FIELD_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "interval": parse_duration,
    "timeout": parse_duration,
    "url": str,
    "match": str,
    "log_dir": str,
    "log_retention": parse_duration,
    "no_log": _to_bool,
    "log_level": str,
}


def _coerce_field(key: str, raw_value: Any) -> Any:
    """Coerce a raw config value to the expected type for the given field name."""
    if key not in _CONFIG_FIELD_PARSERS:
        return raw_value
    try:
        return _CONFIG_FIELD_PARSERS[key](raw_value)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Invalid value for config field '{key}': {raw_value!r}") from exc


def _normalize_key(key: str) -> str:
    return key.strip().lower().replace("-", "_")


def load_ini_config(path: str) -> Dict[str, Any]:
    """
    Load and parse an INI-format config file.

    Supports ``=`` and ``:`` as key-value delimiters. Settings are read from
    the ``[default]`` section.

    Args:
        path: Path to the INI config file.

    Returns:
        Dictionary of config values.

    Raises:
        ValueError: On parse errors or invalid field values.
    """
    # Interpolation off so regular expressions may contain "%"
    parser = configparser.ConfigParser(allow_no_value=True, delimiters=("=", ":"), interpolation=None)
    try:
        read_files = parser.read(path, encoding="utf-8")
    except configparser.Error as exc:
        raise ValueError(f"Invalid config file '{path}': {exc}") from exc

    if not read_files:
        raise ValueError(f"Config file '{path}' could not be read.")

    result: Dict[str, Any] = {}
    if parser.has_section("default"):
        for raw_key, raw_value in parser.items("default"):
            key = _normalize_key(raw_key)
            if key not in _CONFIG_FIELD_PARSERS:
                logger.warning("Unknown config key '%s' in [default] section of '%s'; ignoring.", raw_key, path)
                continue
            if raw_value is None:
                logger.warning("Config key '%s' has no value in '%s'; ignoring.", raw_key, path)
                continue
            result[key] = _coerce_field(key, raw_value)

    return result


def load_yaml_config(path: str) -> Dict[str, Any]:
    """
    Load and parse a YAML-format config file.

    Uses ``yaml.safe_load`` to prevent arbitrary code execution.

    Args:
        path: Path to the YAML config file.

    Returns:
        Dictionary of config values.

    Raises:
        ValueError: On parse errors or invalid file content.
    """
    import yaml  # type: ignore[import-untyped]  # pylint: disable=import-outside-toplevel

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in config file '{path}': {exc}") from exc
    except OSError as exc:
        raise ValueError(f"Cannot read config file '{path}': {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file '{path}' must contain a YAML mapping at the top level, got {type(data).__name__}.")

    default_section = data.get("default") or {}
    if not isinstance(default_section, dict):
        raise ValueError(f"The 'default' section in '{path}' must be a YAML mapping.")

    result: Dict[str, Any] = {}
    for raw_key, value in default_section.items():
        key = _normalize_key(str(raw_key))
        if key not in _CONFIG_FIELD_PARSERS:
            logger.warning("Unknown config key '%s' in 'default' section of '%s'; ignoring.", raw_key, path)
            continue
        if value is None:
            continue
        result[key] = _coerce_field(key, value)

    return result


def _is_yaml_file(path: str) -> bool:
    """
    Heuristically determine whether a config file uses YAML or INI format.

    INI files begin with a ``[section]`` header on the first non-blank,
    non-comment line.  Anything else is treated as YAML.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                stripped = line.strip()
                if stripped and not stripped.startswith("#"):
                    return not stripped.startswith("[")
    except OSError:
        pass
    return False


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load persistent settings from a config file.

    Auto-detects whether the file uses YAML or INI format.
    Returns an empty dict if the config file does not exist.

    Args:
        path: Path to the config file.  Defaults to ``~/.webcheck.conf``.

    Returns:
        Dictionary of config values.

    Raises:
        ValueError: If the file exists but cannot be parsed.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if not os.path.exists(path):
        return {}

    if _is_yaml_file(path):
        logger.debug("Loading YAML config from '%s'.", path)
        return load_yaml_config(path)

    logger.debug("Loading INI config from '%s'.", path)
    return load_ini_config(path)


@dataclass(frozen=True)
class CheckSettings:
    """Immutable runtime settings, resolved once at startup."""

    url: str
    interval: float
    timeout: float
    matcher: "re.Pattern[str]"
    log_dir: str
    log_retention: float
    disable_log: bool = False
    log_level: str = "INFO"

    @property
    def capture_body(self) -> bool:
        """Whether responses are captured for dumping."""
        return not self.disable_log
