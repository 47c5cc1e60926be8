"""Configuration loader with type-safe dataclasses."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .models import MAX_DAYS, TargetConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


DEFAULT_TARGETS_FILE = "urls.cfg"
DEFAULT_LOGS_DIR = "logs"
DEFAULT_OUTPUT = "index.html"


@dataclass(frozen=True)
class ReportConfig:
    """Configuration for report aggregation."""

    max_days: int = MAX_DAYS  # days shown on each status strip

    def __post_init__(self) -> None:
        if self.max_days < 1:
            raise ConfigError(f"Report max_days must be at least 1 (got {self.max_days})")


@dataclass(frozen=True)
class FetchConfig:
    """Configuration for fetching logs over HTTP."""

    timeout: int = 10  # seconds per request
    user_agent: str = "StatusLog/0.1"

    def __post_init__(self) -> None:
        if self.timeout < 1:
            raise ConfigError(f"Fetch timeout must be at least 1 second (got {self.timeout})")
        if not self.user_agent:
            raise ConfigError("Fetch User-Agent cannot be empty")


@dataclass(frozen=True)
class ApiConfig:
    """Configuration for the status page HTTP server."""

    enabled: bool = True
    port: int = 8080

    def __post_init__(self) -> None:
        if self.port < 1 or self.port > 65535:
            raise ConfigError(f"API port must be between 1 and 65535, got {self.port}")


@dataclass(frozen=True)
class Config:
    """Main configuration container.

    ``source`` is either a local site directory or an http(s) base URL.
    ``targets_file`` and ``logs_dir`` are resolved relative to it.
    """

    source: str
    targets_file: str = DEFAULT_TARGETS_FILE
    logs_dir: str = DEFAULT_LOGS_DIR
    output: str = DEFAULT_OUTPUT
    report: ReportConfig = field(default_factory=ReportConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    def __post_init__(self) -> None:
        if not self.source:
            raise ConfigError("Source cannot be empty")
        if not self.targets_file:
            raise ConfigError("Targets file cannot be empty")

    @property
    def is_remote(self) -> bool:
        """Return True when the source is an http(s) base URL."""
        return self.source.startswith(("http://", "https://"))


def parse_targets(text: str) -> list[TargetConfig]:
    """Parse the targets file into targets, keeping declaration order.

    Each line has the form "<key>=<url>". Blank lines and lines starting
    with "#" are ignored. Lines without a key or url are skipped.
    """
    targets: list[TargetConfig] = []
    for lineno, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        key, _, url = line.partition("=")
        key, url = key.strip(), url.strip()
        if not key or not url:
            logger.warning("Skipping invalid target on line %d: %r", lineno, line)
            continue

        targets.append(TargetConfig(key=key, url=url))
    return targets


def _parse_report_config(data: dict | None) -> ReportConfig:
    """Parse report configuration section."""
    if data is None:
        return ReportConfig()
    if not isinstance(data, dict):
        raise ConfigError("'report' section must be a dictionary")

    return ReportConfig(max_days=int(data.get("max_days", MAX_DAYS)))


def _parse_fetch_config(data: dict | None) -> FetchConfig:
    """Parse fetch configuration section."""
    if data is None:
        return FetchConfig()
    if not isinstance(data, dict):
        raise ConfigError("'fetch' section must be a dictionary")

    return FetchConfig(
        timeout=int(data.get("timeout", 10)),
        user_agent=str(data.get("user_agent", FetchConfig.user_agent)),
    )


def _parse_api_config(data: dict | None) -> ApiConfig:
    """Parse API configuration section."""
    if data is None:
        return ApiConfig()
    if not isinstance(data, dict):
        raise ConfigError("'api' section must be a dictionary")

    return ApiConfig(
        enabled=bool(data.get("enabled", True)),
        port=int(data.get("port", 8080)),
    )


def _env_int(name: str) -> int | None:
    """Read an integer environment variable, or None if it is unset."""
    value = os.environ.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer (got {value!r})")


def _apply_env_overrides(config_data: dict) -> dict:
    """Apply environment variable overrides to configuration.

    Supported overrides:
    - STATUSLOG_SOURCE: Override source
    - STATUSLOG_OUTPUT: Override output
    - STATUSLOG_FETCH_TIMEOUT: Override fetch.timeout
    - STATUSLOG_API_PORT: Override api.port
    - STATUSLOG_API_ENABLED: Override api.enabled (true/false)
    """
    if config_data.get("fetch") is None:
        config_data["fetch"] = {}
    if config_data.get("api") is None:
        config_data["api"] = {}

    source = os.environ.get("STATUSLOG_SOURCE")
    if source is not None:
        config_data["source"] = source

    output = os.environ.get("STATUSLOG_OUTPUT")
    if output is not None:
        config_data["output"] = output

    fetch_timeout = _env_int("STATUSLOG_FETCH_TIMEOUT")
    if fetch_timeout is not None and isinstance(config_data["fetch"], dict):
        config_data["fetch"]["timeout"] = fetch_timeout

    api_port = _env_int("STATUSLOG_API_PORT")
    if api_port is not None and isinstance(config_data["api"], dict):
        config_data["api"]["port"] = api_port

    api_enabled = os.environ.get("STATUSLOG_API_ENABLED")
    if api_enabled is not None and isinstance(config_data["api"], dict):
        config_data["api"]["enabled"] = api_enabled.lower() in ("true", "1", "yes")

    return config_data


def build_config(data: dict) -> Config:
    """Validate a configuration dictionary into a Config."""
    source = data.get("source")
    if source is None:
        raise ConfigError("Configuration must contain 'source'")

    try:
        return Config(
            source=str(source),
            targets_file=str(data.get("targets_file", DEFAULT_TARGETS_FILE)),
            logs_dir=str(data.get("logs_dir", DEFAULT_LOGS_DIR)),
            output=str(data.get("output", DEFAULT_OUTPUT)),
            report=_parse_report_config(data.get("report")),
            fetch=_parse_fetch_config(data.get("fetch")),
            api=_parse_api_config(data.get("api")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}")


def load_config(config_path: str, source: str | None = None) -> Config:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.
        source: Source override (e.g. from the command line). When given,
            a missing configuration file is not an error.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If the file cannot be read or configuration is invalid.
    """
    path = Path(config_path)

    if not path.exists():
        if source is None:
            raise ConfigError(f"Configuration file not found: {config_path}")
        data = _apply_env_overrides({})
        data["source"] = source
        return build_config(data)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file: {e}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML dictionary")

    data = _apply_env_overrides(data)

    if source is not None:
        data["source"] = source

    return build_config(data)
