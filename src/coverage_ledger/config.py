"""Configuration loading and management for Coverage Ledger.

Configuration sources are merged in priority order:
    1. Defaults (defined in ServiceConfig)
    2. Global config (~/.coverage-ledger.toml)
    3. Project config (./coverage-ledger.toml)
    4. Explicit config file
    5. Environment variables (COVERAGE_LEDGER_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(port=8080)
    >>> config.port
    8080
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "COVERAGE_LEDGER_"


@dataclass(frozen=True)
class ServiceConfig:
    """Configuration for the ledger service and CLI.

    Attributes:
        Storage:
            db_path: SQLite database file (":memory:" for a throwaway ledger)

        HTTP service:
            host: Interface uvicorn binds to
            port: Port uvicorn listens on
            access_log: Log one line per request

        Trend chart:
            trend_backfill_limit: Max base-branch snapshots prepended to a trend
            chart_width: Chart width in pixels
            chart_height: Chart height in pixels

        Badge:
            badge_label: Left-hand text of the coverage badge

        Output control:
            verbosity: Logging verbosity level
    """

    # Storage
    db_path: str = "coverage.db"

    # HTTP service
    host: str = "127.0.0.1"
    port: int = 3000
    access_log: bool = True

    # Trend chart
    trend_backfill_limit: int = 10
    chart_width: int = 500
    chart_height: int = 200

    # Badge
    badge_label: str = "coverage"

    # Output control
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.db_path:
            raise InvalidConfigError("db_path", self.db_path, "must not be empty")
        if not 0 < self.port < 65536:
            raise InvalidConfigError("port", self.port, "must be between 1 and 65535")
        if self.trend_backfill_limit < 0:
            raise InvalidConfigError(
                "trend_backfill_limit", self.trend_backfill_limit, "must be non-negative"
            )
        if self.chart_width < 50 or self.chart_height < 50:
            raise InvalidConfigError(
                "chart_size", f"{self.chart_width}x{self.chart_height}", "must be at least 50x50"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet/normal/verbose")


def load_config(config_file: Optional[Path] = None, **overrides) -> ServiceConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options fall through.

    Returns:
        Validated ServiceConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".coverage-ledger.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "coverage-ledger.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ServiceConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from COVERAGE_LEDGER_* environment variables.

    Every ServiceConfig field is accepted, e.g. ``COVERAGE_LEDGER_DB_PATH``
    or ``COVERAGE_LEDGER_PORT``.
    """
    type_hints = get_type_hints(ServiceConfig)

    result: dict[str, Any] = {}

    for field_name in ServiceConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type."""
    origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
