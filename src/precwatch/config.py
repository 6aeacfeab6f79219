"""Configuration loading utilities for the console log monitor."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml # type: ignore


logger = logging.getLogger(__name__)

PASSWORD_ENV_VAR = "RCON_PASSWORD"
DEFAULT_PASSWORD = "prec"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


@dataclass
class WatchConfig:
    """Options describing how the console log should be tailed."""

    log_path: Optional[Path] = None  # located through Steam when unset
    poll_interval: float = 0.25
    max_poll_interval: float = 2.0
    start_at_end: bool = True


@dataclass
class RconConfig:
    """Connection details for the game server's remote console."""

    host: str = "127.0.0.1"
    port: int = 27015
    password: str = DEFAULT_PASSWORD
    timeout: Optional[float] = None


@dataclass
class DemoHookConfig:
    """Callback invoked for every finished demo recording."""

    module: str = "precwatch.demo_actions"
    function: str = "log_demo"
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AppConfig:
    """Top-level configuration structure."""

    watch: WatchConfig = field(default_factory=WatchConfig)
    rcon: RconConfig = field(default_factory=RconConfig)
    demo_hook: DemoHookConfig = field(default_factory=DemoHookConfig)
    debounce_window: float = 7.5


def load_config(path: Optional[Path], *, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Load and validate the YAML configuration file.

    Without a path the built-in defaults are used. The RCON password from the
    environment takes precedence over the file.
    """

    env = os.environ if environ is None else environ

    if path is None:
        app_config = AppConfig()
    else:
        app_config = _load_file(path)

    env_password = env.get(PASSWORD_ENV_VAR)
    if env_password:
        app_config.rcon.password = env_password

    return app_config


def _load_file(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML configuration: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    watch_cfg = _parse_watch_config(data.get("watch"), config_path=path)
    rcon_cfg = _parse_rcon_config(data.get("rcon"))
    demo_hook_cfg = _parse_demo_hook_config(data.get("demo_hook"))
    window = _parse_positive_float(data.get("debounce_window", 7.5), "debounce_window", allow_zero=True)

    return AppConfig(watch=watch_cfg, rcon=rcon_cfg, demo_hook=demo_hook_cfg, debounce_window=window)


def _parse_watch_config(raw: Any, *, config_path: Path) -> WatchConfig:
    if raw is None:
        return WatchConfig()
    if not isinstance(raw, dict):
        raise ConfigError("'watch' section must be a mapping")

    log_path: Optional[Path] = None
    log_path_raw = raw.get("log_path")
    if log_path_raw is not None:
        if not isinstance(log_path_raw, str):
            raise ConfigError("watch.log_path must be a string")
        log_path = Path(log_path_raw).expanduser()
        if not log_path.is_absolute():
            log_path = (config_path.parent / log_path).resolve()

    poll_interval = _parse_positive_float(raw.get("poll_interval", 0.25), "watch.poll_interval")
    max_poll_interval = _parse_positive_float(raw.get("max_poll_interval", 2.0), "watch.max_poll_interval")
    if max_poll_interval < poll_interval:
        raise ConfigError("watch.max_poll_interval must not be smaller than watch.poll_interval")

    start_at_end = raw.get("start_at_end", True)
    if not isinstance(start_at_end, bool):
        raise ConfigError("watch.start_at_end must be a boolean")

    return WatchConfig(
        log_path=log_path,
        poll_interval=poll_interval,
        max_poll_interval=max_poll_interval,
        start_at_end=start_at_end,
    )


def _parse_rcon_config(raw: Any) -> RconConfig:
    if raw is None:
        return RconConfig()
    if not isinstance(raw, dict):
        raise ConfigError("'rcon' section must be a mapping")

    host = raw.get("host", "127.0.0.1")
    if not isinstance(host, str) or not host:
        raise ConfigError("rcon.host must be a non-empty string")

    port = raw.get("port", 27015)
    if isinstance(port, bool) or not isinstance(port, int) or not (1 <= port <= 65535):
        raise ConfigError("rcon.port must be an integer between 1 and 65535")

    password = raw.get("password", DEFAULT_PASSWORD)
    if not isinstance(password, str):
        raise ConfigError("rcon.password must be a string")

    timeout_raw = raw.get("timeout")
    timeout = None if timeout_raw is None else _parse_positive_float(timeout_raw, "rcon.timeout")

    return RconConfig(host=host, port=port, password=password, timeout=timeout)


def _parse_demo_hook_config(raw: Any) -> DemoHookConfig:
    if raw is None:
        return DemoHookConfig()
    if not isinstance(raw, dict):
        raise ConfigError("'demo_hook' section must be a mapping")

    module = raw.get("module")
    function = raw.get("function")
    options = raw.get("options", {})

    if not isinstance(module, str) or not isinstance(function, str):
        raise ConfigError("demo_hook must include 'module' and 'function' strings")
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ConfigError("demo_hook.options must be a mapping if provided")

    logger.info("Configured demo hook %s.%s", module, function)
    return DemoHookConfig(module=module, function=function, options=options)


def _parse_positive_float(value: Any, field_name: str, *, allow_zero: bool = False) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be numeric")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be numeric") from exc
    if number < 0 or (number == 0 and not allow_zero):
        qualifier = "non-negative" if allow_zero else "positive"
        raise ConfigError(f"{field_name} must be {qualifier}")
    return number
