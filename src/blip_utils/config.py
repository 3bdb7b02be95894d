# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Host configuration for blip-utils.

Config file lookup order:
1. Explicit path (--config)
2. $BLIP_UTILS_CONFIG (if set)
3. ~/.blip-utils/config.yaml (defaults if missing)
"""

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from blip_utils.dates import get_zone
from blip_utils.errors import ConfigError, InvalidTimeZoneError

CONFIG_ENV_VAR = "BLIP_UTILS_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.blip-utils/config.yaml")
DEFAULT_EXCEPTION_VARIABLE = "scriptException"


@dataclass
class HostConfig:
    """Settings the host normally supplies to a bot's scripts.

    - bot_timezone: the bot's configured tz database zone
    - use_bot_timezone: feature flag; when off the fallback zone is used
    - capture_exceptions: store script errors in a variable instead of raising
    - exception_variable: variable that receives captured errors
    - http_timeout: seconds before a request is abandoned
    - event_log: JSONL file for script execution events (None = off)
    """

    bot_timezone: Optional[str] = None
    use_bot_timezone: bool = False
    capture_exceptions: bool = False
    exception_variable: str = DEFAULT_EXCEPTION_VARIABLE
    http_timeout: float = 30.0
    event_log: Optional[Path] = None

    def validate(self) -> None:
        """Validate field values.

        Raises:
            ConfigError: If validation fails.
        """
        if self.bot_timezone is not None:
            if not isinstance(self.bot_timezone, str):
                raise ConfigError(f"bot_timezone must be a string, got: {self.bot_timezone!r}")
            try:
                get_zone(self.bot_timezone)
            except InvalidTimeZoneError as e:
                raise ConfigError(str(e))

        for name in ("use_bot_timezone", "capture_exceptions"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false, got: {getattr(self, name)!r}")

        if not self.exception_variable or not isinstance(self.exception_variable, str):
            raise ConfigError("exception_variable must be a non-empty string")

        if isinstance(self.http_timeout, bool) or not isinstance(self.http_timeout, (int, float)):
            raise ConfigError(f"http_timeout must be a number, got: {self.http_timeout!r}")
        if self.http_timeout <= 0:
            raise ConfigError(f"http_timeout must be positive, got: {self.http_timeout}")

        if self.event_log is not None and not isinstance(self.event_log, (str, Path)):
            raise ConfigError(f"event_log must be a file path, got: {self.event_log!r}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event_log"] = str(self.event_log) if self.event_log else None
        return data


def get_config_path(config_path: Optional[Union[str, Path]] = None) -> Path:
    """Resolve which config file to read."""
    if config_path:
        return Path(config_path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_config(config_path: Optional[Union[str, Path]] = None) -> HostConfig:
    """Load host configuration.

    Args:
        config_path: Explicit config file. A missing explicit (or $BLIP_UTILS_CONFIG)
            file is an error; a missing default file yields defaults.

    Returns:
        Validated HostConfig.

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist.
        ConfigError: If the file is not valid configuration.
    """
    explicit = bool(config_path) or bool(os.environ.get(CONFIG_ENV_VAR))
    path = get_config_path(config_path)

    if not path.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {path}")
        return HostConfig()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}")

    if data is None:
        return HostConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a YAML mapping")

    known = {f.name for f in fields(HostConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys in {path}: {', '.join(unknown)}")

    if isinstance(data.get("event_log"), str):
        data["event_log"] = Path(data["event_log"]).expanduser() if data["event_log"] else None

    config = HostConfig(**data)
    config.validate()
    return config
